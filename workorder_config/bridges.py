"""
Settings -> kernel bridges.

Build kernel services and selectors from ``KernelSettings``.  They live in
workorder_config (the producer) because the kernel never imports
workorder_config.

Usage:
    from workorder_config import get_active_config
    from workorder_config.bridges import build_status_ledger_service, build_work_order_selector

    settings = get_active_config()
    build_status_ledger_service(session, settings).seed_defaults(actor_id)
    summary = build_work_order_selector(session, settings).lifecycle_summary()
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from workorder_config.schema import KernelSettings
from workorder_kernel.domain.clock import Clock
from workorder_kernel.selectors.work_order_selector import WorkOrderSelector
from workorder_kernel.services.status_ledger_service import StatusLedgerService


def build_status_ledger_service(
    session: Session,
    settings: KernelSettings,
    clock: Clock | None = None,
) -> StatusLedgerService:
    """StatusLedgerService whose ``seed_defaults`` writes the configured ledger."""
    return StatusLedgerService(
        session,
        clock,
        default_statuses=settings.ledger.default_statuses,
    )


def build_work_order_selector(
    session: Session,
    settings: KernelSettings,
) -> WorkOrderSelector:
    """WorkOrderSelector using the configured recent-activity limit."""
    return WorkOrderSelector(
        session,
        recent_activity_limit=settings.reporting.recent_activity_limit,
    )
