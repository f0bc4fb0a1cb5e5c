"""
Unit Tests for the Pricing Engine

price(service, quantity) = quantity / 1000 * price_per_1000, rounded half-up to cents.
"""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from storefront.modules.common import InvalidInputError
from storefront.modules.common.money import from_cents, quantize, to_cents
from storefront.modules.pricing import price, price_cents, validate_quantity

pytestmark = pytest.mark.unit


@dataclass
class FakeService:
    price_per_1000: Decimal


class TestPrice:
    """Totals for valid inputs"""

    @pytest.mark.parametrize(
        "unit_price, quantity, expected",
        [
            ("10", 5000, "50.00"),
            ("10", 2000, "20.00"),
            ("10", 1000, "10.00"),
            ("2.50", 1, "0.00"),
            ("5", 1, "0.01"),  # 0.005 rounds half up
            ("0.9999", 1500, "1.50"),
            ("0", 100000, "0.00"),
            ("1.2345", 333, "0.41"),
        ],
    )
    def test_price_rounds_half_up_to_cents(self, unit_price, quantity, expected):
        assert price(FakeService(Decimal(unit_price)), quantity) == Decimal(expected)

    def test_price_is_deterministic(self):
        service = FakeService(Decimal("3.3333"))
        assert price(service, 777) == price(service, 777)

    def test_price_cents_matches_decimal_total(self):
        service = FakeService(Decimal("10"))
        assert price_cents(service, 5000) == 5000

    def test_result_has_two_decimal_places(self):
        assert price(FakeService(Decimal("7")), 1000).as_tuple().exponent == -2


class TestQuantityValidation:
    """Quantity must be a positive integer"""

    @pytest.mark.parametrize("quantity", [0, -1, -5000])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(InvalidInputError):
            price(FakeService(Decimal("10")), quantity)

    @pytest.mark.parametrize("quantity", [1.5, "100", None, True])
    def test_non_integer_quantity_rejected(self, quantity):
        with pytest.raises(InvalidInputError):
            validate_quantity(quantity)

    def test_upper_bound_applies_when_configured(self):
        assert validate_quantity(1000, max_quantity=1000) == 1000
        with pytest.raises(InvalidInputError):
            validate_quantity(1001, max_quantity=1000)

    def test_negative_service_price_rejected(self):
        with pytest.raises(InvalidInputError):
            price(FakeService(Decimal("-1")), 1000)


class TestMoneyHelpers:
    def test_cents_conversions(self):
        assert to_cents(Decimal("12.345")) == 1235
        assert from_cents(1235) == Decimal("12.35")
        assert quantize(Decimal("0.005")) == Decimal("0.01")
