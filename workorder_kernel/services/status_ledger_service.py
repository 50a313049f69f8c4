"""
StatusLedgerService -- administration of the lifecycle ledger.

Responsibility:
    Create, edit, reorder and delete status definitions, seed the default
    five-entry ledger, and load the ledger as a pure ``LifecycleLedger``.

Invariants enforced:
    - At most one END status.  A write that would create a second one is
      rejected with MultipleEndStatusError; nothing is written.
    - A status is never both end and canceled.  Callers speaking the
      legacy flag pair go through ``StatusKind.from_flags`` which raises
      ConflictingStatusFlagsError.
    - Duplicate names are allowed (the ledger is name-joined by convention)
      but logged.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from workorder_kernel.domain.clock import Clock
from workorder_kernel.domain.lifecycle import (
    DEFAULT_STATUSES,
    LifecycleLedger,
    StatusDefinitionData,
    StatusKind,
)
from workorder_kernel.exceptions import MultipleEndStatusError, StatusNotFoundError
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.status_definition import StatusDefinition
from workorder_kernel.services.base import BaseService

logger = get_logger("services.status_ledger")


class StatusLedgerService(BaseService[StatusDefinition]):
    """Service for maintaining the status catalog.

    ``default_statuses`` is the ledger written by ``seed_defaults``; the
    configured one is passed in by ``workorder_config.bridges``.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        default_statuses: tuple[StatusDefinitionData, ...] = DEFAULT_STATUSES,
    ):
        super().__init__(session, clock)
        self.default_statuses = tuple(default_statuses)

    def _all(self) -> list[StatusDefinition]:
        return list(
            self.session.execute(
                select(StatusDefinition).order_by(StatusDefinition.order)
            ).scalars().all()
        )

    def _get_by_id(self, status_id: UUID) -> StatusDefinition:
        status = self.session.get(StatusDefinition, status_id)
        if status is None:
            raise StatusNotFoundError(str(status_id))
        return status

    def load_ledger(self) -> LifecycleLedger:
        """Current ledger, sorted by order."""
        return LifecycleLedger.of(s.to_data() for s in self._all())

    def get(self, status_id: UUID) -> StatusDefinitionData:
        return self._get_by_id(status_id).to_data()

    def seed_defaults(
        self,
        actor_id: UUID,
        statuses: tuple[StatusDefinitionData, ...] | None = None,
    ) -> LifecycleLedger:
        """
        Write ``statuses`` (the service's default ledger when None) if no
        status exists yet.

        Idempotent: an existing ledger, even a partial one, is left alone.
        """
        existing = self._all()
        if existing:
            return LifecycleLedger.of(s.to_data() for s in existing)

        if statuses is None:
            statuses = self.default_statuses

        for status in statuses:
            self.session.add(
                StatusDefinition(
                    name=status.name,
                    order=status.order,
                    kind=status.kind,
                    color=status.color,
                    created_by_id=actor_id,
                )
            )
        self.session.flush()

        logger.info("status_ledger_seeded", extra={"count": len(statuses)})
        return self.load_ledger()

    def create_status(
        self,
        name: str,
        actor_id: UUID,
        order: int | None = None,
        kind: StatusKind | str = StatusKind.NORMAL,
        color: str | None = None,
    ) -> StatusDefinitionData:
        """
        Add a status to the ledger.

        Args:
            name: Display name; work orders reference it verbatim.
            actor_id: Who is making the change.
            order: Traversal position.  Defaults to after the current last entry.
            kind: NORMAL, END or CANCELED.
            color: Display color.

        Raises:
            MultipleEndStatusError: ``kind`` is END and another END exists.
        """
        kind = StatusKind(kind)
        existing = self._all()
        self._check_single_end(name, kind, existing, exclude_id=None)
        self._warn_on_duplicate_name(name, existing, exclude_id=None)

        if order is None:
            order = max((s.order for s in existing), default=0) + 1

        status = StatusDefinition(
            name=name,
            order=order,
            kind=kind,
            color=color,
            created_by_id=actor_id,
        )
        self.session.add(status)
        self.session.flush()

        logger.info(
            "status_created",
            extra={"status_name": name, "order": order, "kind": kind.value},
        )
        return status.to_data()

    def update_status(
        self,
        status_id: UUID,
        actor_id: UUID,
        name: str | None = None,
        order: int | None = None,
        kind: StatusKind | str | None = None,
        color: str | None = None,
    ) -> StatusDefinitionData:
        """
        Edit a status.  Only the given fields change.

        Renaming does not rewrite work orders that hold the old name; they
        fall back to the "start over" rule on their next progression.

        Raises:
            StatusNotFoundError: Unknown ``status_id``.
            MultipleEndStatusError: Would create a second END status.
        """
        status = self._get_by_id(status_id)
        new_name = name if name is not None else status.name
        new_kind = StatusKind(kind) if kind is not None else StatusKind(status.kind)

        existing = self._all()
        self._check_single_end(new_name, new_kind, existing, exclude_id=status.id)
        if name is not None and name != status.name:
            self._warn_on_duplicate_name(name, existing, exclude_id=status.id)

        status.name = new_name
        status.kind = new_kind
        if order is not None:
            status.order = order
        if color is not None:
            status.color = color
        status.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "status_updated",
            extra={"status_id": str(status.id), "status_name": status.name},
        )
        return status.to_data()

    def delete_status(self, status_id: UUID) -> None:
        """Remove a status.  Work orders holding its name are not touched."""
        status = self._get_by_id(status_id)
        self.session.delete(status)
        self.session.flush()
        logger.info("status_deleted", extra={"status_name": status.name})

    def move_status(
        self,
        status_id: UUID,
        direction: str,
        actor_id: UUID,
    ) -> LifecycleLedger:
        """
        Swap a status's order with its neighbor ("up" or "down").

        Moving past either end of the ledger is a no-op.
        """
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")

        statuses = self._all()
        index = next(
            (i for i, s in enumerate(statuses) if s.id == status_id), None
        )
        if index is None:
            raise StatusNotFoundError(str(status_id))

        neighbor_index = index - 1 if direction == "up" else index + 1
        if 0 <= neighbor_index < len(statuses):
            current, neighbor = statuses[index], statuses[neighbor_index]
            current.order, neighbor.order = neighbor.order, current.order
            current.updated_by_id = actor_id
            neighbor.updated_by_id = actor_id
            self.session.flush()

        return self.load_ledger()

    def _check_single_end(
        self,
        name: str,
        kind: StatusKind,
        existing: list[StatusDefinition],
        exclude_id: UUID | None,
    ) -> None:
        if kind is not StatusKind.END:
            return
        for other in existing:
            if other.id != exclude_id and other.is_end_status:
                logger.warning(
                    "status_rejected_multiple_end",
                    extra={"status_name": name, "existing_end_status": other.name},
                )
                raise MultipleEndStatusError(name, other.name)

    def _warn_on_duplicate_name(
        self,
        name: str,
        existing: list[StatusDefinition],
        exclude_id: UUID | None,
    ) -> None:
        if any(s.name == name and s.id != exclude_id for s in existing):
            logger.warning("status_name_duplicated", extra={"status_name": name})
