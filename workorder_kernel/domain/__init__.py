"""
Pure domain layer.

Value objects and rules with NO dependencies on the ORM, the database,
the clock or any other I/O.
"""

from workorder_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from workorder_kernel.domain.lifecycle import (
    COMPLETED_STATUS,
    DEFAULT_STATUSES,
    LifecycleLedger,
    ProgressionDecision,
    ProgressionOutcome,
    StatusDefinitionData,
    StatusKind,
)
from workorder_kernel.domain.numbering import (
    CustomerClass,
    format_invoice_number,
    parse_invoice_number,
)
from workorder_kernel.domain.numbering_audit import (
    MAX_AUDITED_NUMBER,
    ClassNumberingAudit,
    ConsistencyIssue,
    ConsistencyWarning,
    NumberedWorkOrder,
    NumberingAuditReport,
    audit_class,
    find_missing_numbers,
)

__all__ = [
    "COMPLETED_STATUS",
    "ClassNumberingAudit",
    "Clock",
    "ConsistencyIssue",
    "ConsistencyWarning",
    "CustomerClass",
    "DEFAULT_STATUSES",
    "DeterministicClock",
    "MAX_AUDITED_NUMBER",
    "LifecycleLedger",
    "NumberedWorkOrder",
    "NumberingAuditReport",
    "ProgressionDecision",
    "ProgressionOutcome",
    "StatusDefinitionData",
    "StatusKind",
    "SystemClock",
    "audit_class",
    "find_missing_numbers",
    "format_invoice_number",
    "parse_invoice_number",
]
