"""
PaymentMethodService -- maintenance of payment methods.

Payment methods are never deleted: issued invoices reference them, so a
retired method is deactivated instead.  ``validate_usable`` is the single
check the invoice flow runs before writing anything.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from workorder_kernel.domain.dtos import PaymentMethodInfo
from workorder_kernel.exceptions import (
    PaymentMethodInactiveError,
    PaymentMethodNotFoundError,
    PaymentMethodRequiredError,
)
from workorder_kernel.logging_config import get_logger
from workorder_kernel.models.payment_method import PaymentMethod, PaymentType
from workorder_kernel.services.base import BaseService

logger = get_logger("services.payment_method")


def to_payment_method_info(method: PaymentMethod) -> PaymentMethodInfo:
    return PaymentMethodInfo(
        id=method.id,
        name=method.name,
        payment_type=PaymentType(method.payment_type).value,
        days_allowed=method.days_allowed,
        description=method.description,
        is_active=method.is_active,
    )


class PaymentMethodService(BaseService[PaymentMethod]):
    """Service for payment method records."""

    def _get(self, payment_method_id: UUID) -> PaymentMethod:
        method = self.session.get(PaymentMethod, payment_method_id)
        if method is None:
            raise PaymentMethodNotFoundError(str(payment_method_id))
        return method

    def create(
        self,
        name: str,
        payment_type: PaymentType | str,
        actor_id: UUID,
        days_allowed: int | None = None,
        description: str | None = None,
    ) -> PaymentMethodInfo:
        payment_type = PaymentType(payment_type)
        if not payment_type.has_terms:
            days_allowed = None

        method = PaymentMethod(
            name=name,
            payment_type=payment_type.value,
            days_allowed=days_allowed,
            description=description,
            is_active=True,
            created_by_id=actor_id,
        )
        self.session.add(method)
        self.session.flush()

        logger.info(
            "payment_method_created",
            extra={"payment_method": name, "payment_type": payment_type.value},
        )
        return to_payment_method_info(method)

    def get(self, payment_method_id: UUID) -> PaymentMethodInfo:
        return to_payment_method_info(self._get(payment_method_id))

    def list_active(self) -> list[PaymentMethodInfo]:
        rows = self.session.execute(
            select(PaymentMethod)
            .where(PaymentMethod.is_active == True)  # noqa: E712
            .order_by(PaymentMethod.name)
        ).scalars().all()
        return [to_payment_method_info(m) for m in rows]

    def deactivate(self, payment_method_id: UUID, actor_id: UUID) -> PaymentMethodInfo:
        return self._set_active(payment_method_id, actor_id, False)

    def reactivate(self, payment_method_id: UUID, actor_id: UUID) -> PaymentMethodInfo:
        return self._set_active(payment_method_id, actor_id, True)

    def validate_usable(
        self,
        payment_method_id: UUID | None,
        work_order_id: UUID | None = None,
    ) -> PaymentMethodInfo:
        """
        Check a payment method can back a new invoice.

        Raises:
            PaymentMethodRequiredError: ``payment_method_id`` is None.
            PaymentMethodNotFoundError: No such method.
            PaymentMethodInactiveError: The method was deactivated.
        """
        if payment_method_id is None:
            raise PaymentMethodRequiredError(str(work_order_id))
        method = self._get(payment_method_id)
        if not method.is_active:
            raise PaymentMethodInactiveError(str(method.id), method.name)
        return to_payment_method_info(method)

    def _set_active(
        self,
        payment_method_id: UUID,
        actor_id: UUID,
        is_active: bool,
    ) -> PaymentMethodInfo:
        method = self._get(payment_method_id)
        method.is_active = is_active
        method.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "payment_method_activation_changed",
            extra={"payment_method": method.name, "is_active": is_active},
        )
        return to_payment_method_info(method)
