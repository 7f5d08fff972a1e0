"""
Tests for core.validators module.
"""
import pytest

from core.config import FilterField
from core.exceptions import ValidationError
from core.validators import (
    FilterRequest,
    validate_filters,
    validate_order_query,
    validate_required_string,
)


class TestValidateRequiredString:
    """Tests for validate_required_string function."""

    def test_valid(self):
        assert validate_required_string(" 2025-06-01T00:00:00Z ", "startDate") == "2025-06-01T00:00:00Z"

    def test_empty_string(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_required_string("", "startDate")
        assert "required" in str(exc_info.value).lower()

    def test_none_value(self):
        with pytest.raises(ValidationError):
            validate_required_string(None, "endDate")

    def test_non_string(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_required_string(12345, "endDate")
        assert "string" in str(exc_info.value).lower()


class TestValidateOrderQuery:
    """Tests for validate_order_query function."""

    def test_valid_request(self, order_type_field):
        request = validate_order_query(
            {
                "startDate": "2025-06-01T00:00:00Z",
                "endDate": "2025-06-30T23:59:59Z",
                "environment": "prd",
                "orderType": "COD",
            },
            [order_type_field],
        )
        assert request == FilterRequest(
            start_date="2025-06-01T00:00:00Z",
            end_date="2025-06-30T23:59:59Z",
            environment="PRD",
            filters={"orderType": "COD"},
        )

    @pytest.mark.parametrize("payload", [
        {"endDate": "2025-06-30"},
        {"startDate": "2025-06-01"},
        {"startDate": "", "endDate": "2025-06-30"},
        {},
    ])
    def test_missing_dates(self, payload, order_type_field):
        with pytest.raises(ValidationError) as exc_info:
            validate_order_query(payload, [order_type_field])
        assert exc_info.value.message == "Start date and end date are required."

    def test_environment_defaults_to_dev(self, order_type_field):
        request = validate_order_query({"startDate": "a", "endDate": "b"}, [order_type_field])
        assert request.environment == "DEV"


class TestValidateFilters:
    """Tests for validate_filters function."""

    def test_unknown_keys_dropped(self, order_type_field):
        filters = validate_filters(
            {"orderType": "Prepaid", "c_internal": "x", "startDate": "2025-06-01"},
            [order_type_field],
        )
        assert filters == {"orderType": "Prepaid"}

    def test_blank_values_dropped(self, order_type_field):
        assert validate_filters({"orderType": "  "}, [order_type_field]) == {}

    def test_default_applied(self):
        field = FilterField(name="orderType", remote_field="c_smartOrderType", values=["Prepaid"], default="Prepaid")
        assert validate_filters({}, [field]) == {"orderType": "Prepaid"}
        assert validate_filters({"orderType": "COD"}, [field]) == {"orderType": "COD"}
