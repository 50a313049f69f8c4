#!/usr/bin/env python3
"""
Invoice numbering audit.

Reports, per customer class, the assigned numbers, the gaps in the
contiguous sequence and any number held by more than one work order.
With --resync the per-class counter cache is overwritten with the
highest assigned number (nothing else is repaired).
--seed-statuses writes the configured status ledger into an empty catalog
and --summary prints the lifecycle counts.

Usage:
    python scripts/audit_invoice_numbers.py
    python scripts/audit_invoice_numbers.py --resync
    python scripts/audit_invoice_numbers.py --seed-statuses --summary
    python scripts/audit_invoice_numbers.py --config path/to/settings.yaml --json

Exit code is 0 when every class is consistent, 1 otherwise.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from uuid import UUID

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from workorder_config import get_active_config
from workorder_config.bridges import build_status_ledger_service, build_work_order_selector
from workorder_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from workorder_kernel.domain.numbering import CustomerClass
from workorder_kernel.logging_config import configure_logging
from workorder_kernel.services.numbering_audit_service import NumberingAuditService

# Actor recorded for counter writes made by this script
SCRIPT_ACTOR_ID = UUID("00000000-0000-0000-0000-000000000001")


def _report_dict(report) -> dict:
    return {
        customer_class.value: {
            "expected_count": audit.expected_count,
            "actual_count": audit.actual_count,
            "missing_numbers": list(audit.missing_numbers),
            "duplicates": {
                str(number): [str(i) for i in ids]
                for number, ids in audit.duplicates.items()
            },
            "out_of_range": {
                str(number): [str(i) for i in ids]
                for number, ids in audit.out_of_range.items()
            },
        }
        for customer_class, audit in report.per_class.items()
    }


def print_report(report) -> None:
    for customer_class in CustomerClass:
        audit = report.per_class[customer_class]
        print(f"{customer_class.value} ({customer_class.prefix})")
        print(f"  expected: {audit.expected_count}")
        print(f"  actual:   {audit.actual_count}")
        if audit.missing_numbers:
            print(f"  missing:  {', '.join(str(n) for n in audit.missing_numbers)}")
        for number, ids in sorted(audit.duplicates.items()):
            print(f"  duplicate {number}: {', '.join(str(i) for i in ids)}")
        for number, ids in sorted(audit.out_of_range.items()):
            print(f"  out of range {number}: {', '.join(str(i) for i in ids)}")
        if audit.is_consistent:
            print("  OK")


def print_summary(summary) -> None:
    print(f"Work orders: {summary.total}")
    for status, count in sorted(summary.by_status.items()):
        print(f"  {status}: {count}")
    for month, count in summary.by_month.items():
        print(f"  {month}: {count}")
    print("Recent activity:")
    for work_order in summary.recent_activity:
        print(f"  {work_order.invoice_number}  {work_order.status}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Audit invoice numbering")
    parser.add_argument("--config", type=Path, default=None, help="Settings YAML file")
    parser.add_argument(
        "--resync",
        action="store_true",
        help="Overwrite counter caches with the highest assigned number",
    )
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument(
        "--seed-statuses",
        action="store_true",
        help="Write the configured status ledger if none exists",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Also print lifecycle counts and recent activity",
    )
    args = parser.parse_args()

    settings = get_active_config(args.config)
    configure_logging(level=settings.logging.level, stream=sys.stderr)
    init_engine_from_url(
        settings.database.url,
        echo=settings.database.echo,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
    )
    create_tables()

    with session_scope() as session:
        if args.seed_statuses:
            ledger = build_status_ledger_service(session, settings).seed_defaults(
                SCRIPT_ACTOR_ID
            )
            print(f"Status ledger: {', '.join(s.name for s in ledger.statuses)}")

        service = NumberingAuditService(session)
        report = service.audit()

        if args.json:
            print(json.dumps(_report_dict(report), indent=2))
        else:
            print_report(report)

        if args.resync:
            for customer_class in CustomerClass:
                value = service.resync_counter(customer_class, SCRIPT_ACTOR_ID)
                print(f"Counter {customer_class.prefix} set to {value}")

        if args.summary:
            print_summary(build_work_order_selector(session, settings).lifecycle_summary())

    return 0 if report.is_consistent else 1


if __name__ == "__main__":
    sys.exit(main())
