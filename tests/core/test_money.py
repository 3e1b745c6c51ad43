"""Tests for invoice money arithmetic."""

import math
import random

import pytest

from lumix.core.entities.invoice import LineItem
from lumix.core.exceptions import InvalidLineItemsError, ValidationError
from lumix.core.services.money import (
    compute_line,
    compute_net,
    TOTALS_TOLERANCE,
    compute_totals,
    format_amount,
    validate_line_items,
)


def _item(**overrides) -> LineItem:
    values = {"description": "Consulting", "quantity": 1, "unit_price": 100.0}
    values.update(overrides)
    return LineItem(**values)


class TestComputeLine:
    def test_discount_applies_before_tax(self):
        line = compute_line(_item(quantity=2, unit_price=100, discount_rate=5, tax_rate=10))
        assert line.line_subtotal == pytest.approx(200)
        assert line.discount == pytest.approx(10)
        assert line.taxable == pytest.approx(190)
        assert line.tax == pytest.approx(19)
        assert line.line_total == pytest.approx(209)

    def test_no_rates(self):
        line = compute_line(_item(quantity=3, unit_price=12.5))
        assert line.discount == 0
        assert line.tax == 0
        assert line.line_total == pytest.approx(37.5)

    def test_full_discount_zeroes_line(self):
        line = compute_line(_item(discount_rate=100, tax_rate=20))
        assert line.line_total == pytest.approx(0)


class TestComputeTotals:
    def test_aggregates_lines(self):
        totals = compute_totals(
            [
                _item(quantity=2, unit_price=100, discount_rate=5, tax_rate=10),
                _item(description="Hosting", quantity=1, unit_price=50),
            ]
        )
        assert totals.subtotal == pytest.approx(250)
        assert totals.discount_total == pytest.approx(10)
        assert totals.tax_total == pytest.approx(19)
        assert totals.total == pytest.approx(259)
        assert len(totals.lines) == 2

    def test_total_equals_sum_of_line_totals(self):
        items = [
            _item(quantity=0.333, unit_price=19.99, tax_rate=21, discount_rate=3.5),
            _item(quantity=7, unit_price=0.1, tax_rate=7),
            _item(quantity=1.5, unit_price=1234.567, discount_rate=12.5),
        ]
        totals = compute_totals(items)
        assert math.isclose(
            totals.total,
            sum(line.line_total for line in totals.lines),
            abs_tol=TOTALS_TOLERANCE,
        )
        assert math.isclose(
            totals.total,
            totals.subtotal - totals.discount_total + totals.tax_total,
            abs_tol=TOTALS_TOLERANCE,
        )

    def test_totals_identity_at_large_amounts(self):
        rng = random.Random(2024)
        for _ in range(2000):
            items = [
                _item(
                    quantity=rng.uniform(0.1, 50),
                    unit_price=rng.uniform(1, 200_000),
                    tax_rate=rng.uniform(0, 25),
                    discount_rate=rng.uniform(0, 30),
                )
                for _ in range(rng.randint(1, 8))
            ]
            totals = compute_totals(items)
            expected = totals.subtotal - totals.discount_total + totals.tax_total
            assert abs(totals.total - expected) <= TOTALS_TOLERANCE
            assert math.isclose(
                totals.total, sum(line.line_total for line in totals.lines), rel_tol=1e-12
            )

    def test_zero_total_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            compute_totals([_item(unit_price=0)])
        assert exc_info.value.details["field"] == "total"

    def test_full_discount_total_rejected(self):
        with pytest.raises(ValidationError):
            compute_totals([_item(discount_rate=100)])

    def test_overflowing_total_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            compute_totals([_item(quantity=1e308, unit_price=10)])
        assert exc_info.value.details["field"] == "total"
        assert exc_info.value.message == "invoice total is out of range"

    def test_overflow_without_rates_rejected(self):
        with pytest.raises(ValidationError):
            compute_totals([_item(quantity=1e200), _item(quantity=1e200, unit_price=1e200)])


class TestValidateLineItems:
    def test_empty_batch_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_line_items([])
        assert exc_info.value.details["field"] == "items"
        assert not isinstance(exc_info.value, InvalidLineItemsError)

    def test_lists_every_invalid_item(self):
        items = [
            _item(),
            _item(description="  "),
            _item(quantity=0),
            _item(unit_price=-1),
            _item(quantity=float("nan")),
        ]
        with pytest.raises(InvalidLineItemsError) as exc_info:
            validate_line_items(items)
        assert exc_info.value.details["invalid_items"] == [1, 2, 3, 4]
        assert exc_info.value.code == "INVALID_LINE_ITEMS"

    def test_infinite_rate_rejected(self):
        with pytest.raises(InvalidLineItemsError) as exc_info:
            validate_line_items([_item(tax_rate=float("inf"))])
        assert exc_info.value.problems == {0: "tax and discount rates must be finite numbers"}

    def test_zero_unit_price_accepted(self):
        validate_line_items([_item(unit_price=0)])


class TestComputeNet:
    def test_subtracts_tax_and_deductions(self):
        assert compute_net(1000, 200, 50) == 750

    def test_negative_net_not_floored(self):
        assert compute_net(100, 80, 50) == -30


class TestFormatAmount:
    def test_euro(self):
        assert format_amount(209, "EUR") == "€209.00"

    def test_dollar_lowercase_code(self):
        assert format_amount(1234.5, "usd") == "$1234.50"

    def test_unknown_currency_has_no_symbol(self):
        assert format_amount(12.346, "GBP") == "12.35"

    def test_non_finite_formats_as_zero(self):
        assert format_amount(float("nan"), "EUR") == "€0.00"
        assert format_amount(float("inf")) == "0.00"
        assert format_amount(None, "USD") == "$0.00"
