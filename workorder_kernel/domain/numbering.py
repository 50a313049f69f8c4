"""
Invoice number format (``workorder_kernel.domain.numbering``).

Responsibility
--------------
Customer-class namespaces and the ``<Prefix><zero-padded integer>`` invoice
number format.  Pure functions, no I/O.

Format
------
* Corporate work orders use prefix ``C``, individual ones ``D``.
* The numeric part is zero-padded to five digits (``C00007``).  Numbers past
  99999 keep growing without truncation (``C100000``).
* Parsing is tolerant: a suffix that is not all digits yields ``None`` and
  callers treat it as "no number".
"""

from __future__ import annotations

from enum import Enum

NUMBER_WIDTH = 5


class CustomerClass(str, Enum):
    """The two invoice-numbering namespaces."""

    CORPORATE = "corporate"
    INDIVIDUAL = "individual"

    @property
    def prefix(self) -> str:
        return _PREFIXES[self]

    @classmethod
    def from_prefix(cls, prefix: str) -> CustomerClass:
        for customer_class, candidate in _PREFIXES.items():
            if candidate == prefix:
                return customer_class
        raise ValueError(f"Unknown invoice number prefix: {prefix!r}")


_PREFIXES = {
    CustomerClass.CORPORATE: "C",
    CustomerClass.INDIVIDUAL: "D",
}


def format_invoice_number(customer_class: CustomerClass, number: int) -> str:
    """Format ``number`` in the namespace of ``customer_class``."""
    if number < 1:
        raise ValueError(f"Invoice numbers start at 1, got {number}")
    return f"{customer_class.prefix}{number:0{NUMBER_WIDTH}d}"


def parse_invoice_number(
    invoice_number: str | None,
    customer_class: CustomerClass,
) -> int | None:
    """
    Return the integer part of ``invoice_number`` if it belongs to the class.

    Returns None for empty values, a foreign prefix, or a non-numeric suffix.
    """
    if not invoice_number or not invoice_number.startswith(customer_class.prefix):
        return None
    digits = invoice_number[len(customer_class.prefix):]
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(digits)
