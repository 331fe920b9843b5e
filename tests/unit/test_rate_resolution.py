"""Unit tests for value-per-credit resolution order."""

import pytest
from services.store_credit_service.models import Customer, CustomerGroup
from services.store_credit_service.services.store_credit_manager import (
    VALUE_PER_UNIT_FIELD,
    resolve_value_per_credit,
)


def _customer(fields=None, group_fields=None, with_group=False):
    group = None
    if with_group or group_fields is not None:
        group = CustomerGroup(name="Group", custom_fields=group_fields)
    return Customer(
        email="c@test.com",
        first_name="C",
        last_name="Test",
        custom_fields=fields,
        group=group,
    )


class TestResolveValuePerCredit:
    def test_customer_override_beats_global_default(self):
        customer = _customer({VALUE_PER_UNIT_FIELD: 3})
        assert resolve_value_per_credit(customer, 2.0) == 3.0

    def test_customer_override_beats_group_override(self):
        customer = _customer({VALUE_PER_UNIT_FIELD: 3}, {VALUE_PER_UNIT_FIELD: 5})
        assert resolve_value_per_credit(customer, 2.0) == 3.0

    def test_group_override_used_when_customer_has_none(self):
        customer = _customer(None, {VALUE_PER_UNIT_FIELD: "5"})
        assert resolve_value_per_credit(customer, 2.0) == 5.0

    @pytest.mark.parametrize("bad", [0, -1, "abc", None, "", True])
    def test_invalid_customer_override_falls_back_to_default(self, bad):
        customer = _customer({VALUE_PER_UNIT_FIELD: bad}, with_group=True)
        assert resolve_value_per_credit(customer, 2.5) == 2.5

    def test_non_dict_custom_fields_ignored(self):
        customer = _customer(None)
        customer.custom_fields = ["not", "a", "dict"]
        assert resolve_value_per_credit(customer, 4) == 4.0

    @pytest.mark.parametrize("bad_default", [None, 0, -2, "abc", float("nan")])
    def test_invalid_default_falls_back_to_one(self, bad_default):
        assert resolve_value_per_credit(_customer(None), bad_default) == 1.0

    def test_missing_customer_uses_default(self):
        assert resolve_value_per_credit(None, "1.5") == 1.5
        assert resolve_value_per_credit(None, None) == 1.0
