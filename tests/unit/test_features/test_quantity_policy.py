"""
Unit tests for the cart quantity policy.
"""

import pytest

from storefront.features.cart import ViolationKind, effective_max, validate_quantity


class TestValidateQuantity:

    def test_within_bounds(self):
        assert validate_quantity(3, max_stock=5) is None
        assert validate_quantity(1, max_stock=1) is None
        assert validate_quantity(10, max_stock=20) is None

    def test_below_minimum(self):
        violation = validate_quantity(0, max_stock=5)

        assert violation.kind == ViolationKind.BELOW_MINIMUM
        assert violation.limit == 1

    def test_exceeds_global_cap(self):
        violation = validate_quantity(11, max_stock=50)

        assert violation.kind == ViolationKind.EXCEEDS_GLOBAL_CAP
        assert violation.limit == 10
        assert "maximum 10" in violation.message

    def test_exceeds_stock(self):
        """Stock 3, request 5: exceeds stock, and the UI ceiling is 3."""
        violation = validate_quantity(5, max_stock=3, global_cap=10)

        assert violation.kind == ViolationKind.EXCEEDS_STOCK
        assert violation.limit == 3
        assert violation.message == "Maximum available quantity is 3"
        assert effective_max(3, 10) == 3

    def test_cap_checked_before_stock(self):
        violation = validate_quantity(12, max_stock=3)

        assert violation.kind == ViolationKind.EXCEEDS_GLOBAL_CAP

    def test_minimum_checked_first(self):
        violation = validate_quantity(-4, max_stock=0, global_cap=0)

        assert violation.kind == ViolationKind.BELOW_MINIMUM

    @pytest.mark.parametrize("requested", range(-2, 14))
    @pytest.mark.parametrize("stock", [0, 1, 3, 10, 25])
    def test_rule_order(self, requested, stock):
        violation = validate_quantity(requested, stock, 10)

        if requested < 1:
            assert violation.kind == ViolationKind.BELOW_MINIMUM
        elif requested > 10:
            assert violation.kind == ViolationKind.EXCEEDS_GLOBAL_CAP
        elif requested > stock:
            assert violation.kind == ViolationKind.EXCEEDS_STOCK
        else:
            assert violation is None


class TestEffectiveMax:

    def test_stock_below_cap(self):
        assert effective_max(4) == 4

    def test_cap_below_stock(self):
        assert effective_max(40) == 10

    def test_out_of_stock(self):
        assert effective_max(0) == 0
