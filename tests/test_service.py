"""Tests for service: the form submission flow end to end."""
import pytest

from config import APP
from panel import LabInputError
from service import blood_test_history, clear_blood_tests, previous_records, submit_blood_test


def test_first_submission_has_no_trend(db):
    result = submit_blood_test("u1", {"glucose": "130", "iron": ""}, "2025-03-01")
    assert result["date"] == "2025-03-01"
    assert result["values"] == {"glucose": 130.0}
    assert result["analysis"] == ["Glucose high (130). Diabetes risk possible."]
    assert result["risk_tier"] == "Medium"
    assert result["risk_score"] == 3
    assert result["disclaimer"] == APP["disclaimer"]


def test_second_submission_compares_with_latest(db):
    """Trend lines use the latest stored test only."""
    submit_blood_test("u1", {"hemoglobin": "14"}, "2025-01-01")
    submit_blood_test("u1", {"hemoglobin": "13"}, "2025-02-01")
    result = submit_blood_test("u1", {"hemoglobin": "10"}, "2025-03-01")
    assert result["analysis"] == [
        "Hemoglobin low (10). Possible sign of anemia.",
        "Hemoglobin decreased relative to previous measurement (13 → 10).",
    ]
    assert result["risk_tier"] == "Low"


def test_decimal_comma_and_unreadable_values(db):
    result = submit_blood_test("u1", {"creatinine": "1,5", "iron": "n/a"}, "2025-03-01")
    assert result["values"] == {"creatinine": 1.5}
    assert result["risk_score"] == 3


def test_only_unreadable_values_gives_placeholder(db):
    result = submit_blood_test("u1", {"glucose": "abc"}, "2025-03-01")
    assert result["analysis"] == [APP["no_assessment"]]
    assert result["risk_tier"] == "Low"


def test_blank_form_is_rejected(db):
    with pytest.raises(LabInputError, match=APP["empty_form"]):
        submit_blood_test("u1", {"glucose": " ", "iron": None}, "2025-03-01")
    assert blood_test_history("u1") == []


def test_bad_date_is_rejected(db):
    with pytest.raises(LabInputError):
        submit_blood_test("u1", {"glucose": "90"}, "March 1st")


def test_history_and_clear(db):
    submit_blood_test("u1", {"glucose": "90"}, "2025-01-01")
    submit_blood_test("u1", {"glucose": "95"}, "2025-02-01")
    assert [r["test_date"] for r in blood_test_history("u1")] == ["2025-02-01", "2025-01-01"]
    assert [r.date for r in previous_records("u1")] == ["2025-02-01", "2025-01-01"]
    assert clear_blood_tests("u1") == 2
    assert blood_test_history("u1") == []
