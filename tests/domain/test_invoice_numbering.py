"""
Tests for invoice number formatting and parsing.

Covers:
- Prefix per customer class
- Five-digit zero padding, and numbers that outgrow it
- Parsing: foreign prefix, non-numeric suffix, missing value
"""

import pytest

from workorder_kernel.domain.numbering import (
    NUMBER_WIDTH,
    CustomerClass,
    format_invoice_number,
    parse_invoice_number,
)


class TestCustomerClass:
    def test_prefixes(self):
        assert CustomerClass.CORPORATE.prefix == "C"
        assert CustomerClass.INDIVIDUAL.prefix == "D"

    def test_from_prefix(self):
        assert CustomerClass.from_prefix("C") is CustomerClass.CORPORATE
        assert CustomerClass.from_prefix("D") is CustomerClass.INDIVIDUAL

    def test_from_value(self):
        assert CustomerClass("corporate") is CustomerClass.CORPORATE


class TestFormatInvoiceNumber:
    def test_seventh_corporate_number(self):
        assert format_invoice_number(CustomerClass.CORPORATE, 7) == "C00007"

    def test_individual_padding(self):
        assert format_invoice_number(CustomerClass.INDIVIDUAL, 12) == "D00012"

    def test_width(self):
        number = format_invoice_number(CustomerClass.CORPORATE, 1)
        assert len(number) == NUMBER_WIDTH + 1

    def test_wider_numbers_are_not_truncated(self):
        assert format_invoice_number(CustomerClass.CORPORATE, 123456) == "C123456"

    def test_zero_rejected(self):
        with pytest.raises(ValueError):
            format_invoice_number(CustomerClass.CORPORATE, 0)


class TestParseInvoiceNumber:
    def test_round_trip_value(self):
        assert parse_invoice_number("C00007", CustomerClass.CORPORATE) == 7

    def test_foreign_prefix_is_none(self):
        assert parse_invoice_number("D00007", CustomerClass.CORPORATE) is None

    def test_non_numeric_suffix_is_none(self):
        assert parse_invoice_number("C00A07", CustomerClass.CORPORATE) is None

    def test_prefix_only_is_none(self):
        assert parse_invoice_number("C", CustomerClass.CORPORATE) is None

    def test_missing_value_is_none(self):
        assert parse_invoice_number(None, CustomerClass.CORPORATE) is None
        assert parse_invoice_number("", CustomerClass.CORPORATE) is None

    def test_non_ascii_digits_rejected(self):
        # Arabic-Indic digits satisfy str.isdigit()
        assert parse_invoice_number("C١٢", CustomerClass.CORPORATE) is None
