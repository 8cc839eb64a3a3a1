"""Unit tests for customer field type inference."""

from datetime import date, datetime

import pytest

from customer_sync.models.enums import FieldType
from customer_sync.schema.inference import infer, is_date_string, is_email, representative


class TestRepresentative:
    def test_skips_blank_values(self):
        assert representative([None, "", "x"]) == "x"

    def test_zero_and_false_are_usable(self):
        assert representative([None, 0]) == 0
        assert representative(["", False]) is False

    def test_all_blank_returns_none(self):
        assert representative([None, "", None]) is None


class TestInfer:
    def test_number_from_first_usable_sample(self):
        assert infer([30, "25"]) == (FieldType.NUMBER, False)

    def test_compact_date_digits_stay_string(self):
        assert infer(["19991231"]) == (FieldType.STRING, False)

    def test_email_ignores_null_samples(self):
        assert infer(["a@x.com", None]) == (FieldType.EMAIL, False)

    def test_array_of_strings(self):
        assert infer([["a", "b"], ["c"]]) == (FieldType.STRING, True)

    def test_array_of_numbers(self):
        assert infer([[1.5, 2]]) == (FieldType.NUMBER, True)

    def test_boolean_is_not_number(self):
        assert infer([True, 1]) == (FieldType.BOOLEAN, False)

    def test_datetime_values(self):
        assert infer([datetime(2024, 1, 1, 9, 30)]) == (FieldType.DATE, False)
        assert infer([date(2024, 1, 1)]) == (FieldType.DATE, False)

    def test_iso_date_strings(self):
        assert infer(["2024-05-01T10:00:00Z"]) == (FieldType.DATE, False)
        assert infer(["2024-05-01"]) == (FieldType.DATE, False)

    def test_plain_string(self):
        assert infer(["hello world"]) == (FieldType.STRING, False)

    def test_numeric_string_stays_string(self):
        assert infer(["25"]) == (FieldType.STRING, False)

    def test_only_blank_samples_are_skipped(self):
        assert infer([None, ""]) is None
        assert infer([]) is None

    def test_empty_array_is_skipped(self):
        assert infer([[]]) is None

    def test_mapping_values_are_skipped(self):
        assert infer([{"street": "Main"}]) is None

    def test_email_array(self):
        assert infer([["a@x.com", "b@y.org"]]) == (FieldType.EMAIL, True)


@pytest.mark.parametrize("value,expected", [
    ("a@x.com", True),
    ("first.last@example.co.uk", True),
    ("not-an-email", False),
    ("a@", False),
])
def test_is_email(value, expected):
    assert is_email(value) is expected


@pytest.mark.parametrize("value,expected", [
    ("2024-05-01", True),
    ("2024-05-01T10:00:00", True),
    ("2024-05-01T10:00:00+02:00", True),
    ("2024-05-01T10:00:00Z", True),
    ("2024-13-01", False),
    ("20240115", False),
    ("19991231", False),
    ("2024-W03-1", False),
    ("2024-01-15T1030", False),
    ("2024-01-15 10:30", True),
    ("yesterday", False),
    ("30", False),
])
def test_is_date_string(value, expected):
    assert is_date_string(value) is expected
