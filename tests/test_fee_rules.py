"""
Tests for FeeDefinition and activation conditions.
"""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from cart_fees.services.fee_rules import (
    FeeCondition,
    FeeDefinition,
    FeeType,
    coerce_condition,
    coerce_fee_type,
    evaluate_condition,
)


def make_fee(**overrides):
    data = {"id": "fee_test0001", "internal_name": "Test", "public_name": "Test fee", "price": "5"}
    data.update(overrides)
    return FeeDefinition(**data)


class TestCoercion:
    def test_known_values(self):
        assert coerce_fee_type("optional") is FeeType.OPTIONAL
        assert coerce_condition("minimum") is FeeCondition.MINIMUM

    @pytest.mark.parametrize("value", ["mandatory", "", None, 3])
    def test_unknown_type_falls_back_to_required(self, value):
        assert coerce_fee_type(value) is FeeType.REQUIRED

    @pytest.mark.parametrize("value", ["maximum", "", None])
    def test_unknown_condition_falls_back_to_always(self, value):
        assert coerce_condition(value) is FeeCondition.ALWAYS


class TestFeeDefinition:
    def test_raw_values_are_normalized(self):
        fee = make_fee(price="11.0", type="optional", condition="bogus", tax_class=None)
        assert fee.price == Decimal("11.0")
        assert fee.type is FeeType.OPTIONAL
        assert fee.condition is FeeCondition.ALWAYS
        assert fee.tax_class == ""

    def test_is_frozen(self):
        fee = make_fee()
        with pytest.raises(AttributeError):
            fee.price = Decimal("1")

    def test_label_falls_back_to_public_name(self):
        assert make_fee(checkbox_text="").label == "Test fee"
        assert make_fee(checkbox_text="Add it").label == "Add it"

    def test_from_record_uses_public_fee_id(self):
        record = SimpleNamespace(
            fee_id="fee_abc", internal_name="Int", public_name="Pub", price=Decimal("2.4200"),
            tax_class="", type="optional", checkbox_text=None, help_text=None,
            condition="always", condition_minimum=Decimal("0"), order=3, active=True,
        )
        fee = FeeDefinition.from_record(record)
        assert fee.id == "fee_abc"
        assert fee.is_optional
        assert fee.checkbox_text == ""
        assert fee.order == 3


class TestEvaluateCondition:
    """Test the always/minimum activation conditions."""

    def test_always_holds_for_any_subtotal(self):
        fee = make_fee(condition="always")
        assert evaluate_condition(fee, 0)
        assert evaluate_condition(fee, "not a number")

    def test_minimum_is_inclusive(self):
        fee = make_fee(condition="minimum", condition_minimum="50")
        assert not evaluate_condition(fee, Decimal("49.99"))
        assert evaluate_condition(fee, Decimal("50"))
        assert evaluate_condition(fee, 50.01)

    def test_malformed_minimum_counts_as_zero(self):
        fee = make_fee(condition="minimum", condition_minimum="abc")
        assert fee.condition_minimum == Decimal("0")
        assert evaluate_condition(fee, 0)
