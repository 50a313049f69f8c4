"""Tests for the structured JSON log formatter and LogContext."""

import json
import logging
import sys
from decimal import Decimal
from uuid import uuid4

from workorder_kernel.exceptions import AllocationError
from workorder_kernel.logging_config import LogContext, StructuredFormatter, get_logger


def _record(msg: str, exc_info=None, **extra: object) -> logging.LogRecord:
    rec = logging.makeLogRecord({
        "name": "workorder_kernel.test",
        "msg": msg,
        "args": (),
        "levelno": logging.INFO,
        "levelname": "INFO",
        "exc_info": exc_info,
    })
    for k, v in extra.items():
        setattr(rec, k, v)
    return rec


def _format(record) -> dict:
    return json.loads(StructuredFormatter().format(record))


def test_one_json_object_per_record():
    payload = _format(_record("invoice_issued", total=Decimal("12.50"), work_order_ids=(uuid4(),)))

    assert payload["message"] == "invoice_issued"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "workorder_kernel.test"
    assert payload["total"] == "12.50"
    assert len(payload["work_order_ids"]) == 1


def test_context_fields_included():
    with LogContext.bind(work_order_id="wo-1", invoice_number="C00007"):
        payload = _format(_record("work_order_status_advanced"))

    assert payload["work_order_id"] == "wo-1"
    assert payload["invoice_number"] == "C00007"


def test_context_restored_after_bind():
    with LogContext.bind(invoice_number="C00007"):
        pass

    assert "invoice_number" not in LogContext.get_all()


def test_kernel_error_attributes_serialized():
    try:
        raise AllocationError("corporate", "database is locked")
    except AllocationError:
        payload = _format(_record("invoice_number_allocation_failed", exc_info=sys.exc_info()))

    assert payload["exc_code"] == "ALLOCATION_FAILED"
    assert payload["exc_customer_class"] == "corporate"
    assert "traceback" in payload


def test_logger_namespace():
    assert get_logger("services.sequence").name == "workorder_kernel.services.sequence"
