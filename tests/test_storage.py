"""Tests for storage: persisting analysed tests and reading them back newest first."""
from blood_rules import evaluate
from panel import Analyte, make_record
import storage


def _store(user_key, test_date, values):
    record = make_record(test_date, values)
    return storage.add_blood_test(user_key, record, evaluate(record))


def test_add_and_fetch_round_trip(db):
    test_id = _store("u1", "2025-03-01", {"glucose": 130, "hemoglobin": 13.5})
    (row,) = storage.fetch_blood_tests("u1")
    assert row["id"] == test_id
    assert row["test_date"] == "2025-03-01"
    assert row["values"] == {Analyte.GLUCOSE: 130.0, Analyte.HEMOGLOBIN: 13.5}
    assert row["analysis"][0] == "Glucose high (130). Diabetes risk possible."
    assert row["risk_tier"] == "Medium"
    assert row["risk_score"] == 3


def test_fetch_is_newest_first(db):
    """Ordered by test date, then by insertion for the same date."""
    _store("u1", "2025-01-10", {"iron": 80})
    _store("u1", "2025-03-01", {"iron": 90})
    _store("u1", "2025-02-01", {"iron": 70})
    _store("u1", "2025-03-01", {"iron": 95})
    rows = storage.fetch_blood_tests("u1")
    assert [r["test_date"] for r in rows] == ["2025-03-01", "2025-03-01", "2025-02-01", "2025-01-10"]
    assert rows[0]["values"][Analyte.IRON] == 95.0


def test_fetch_is_per_user(db):
    _store("u1", "2025-01-10", {"iron": 80})
    assert storage.fetch_blood_tests("u2") == []


def test_delete_blood_tests(db):
    _store("u1", "2025-01-10", {"iron": 80})
    _store("u1", "2025-01-11", {"iron": 81})
    _store("u2", "2025-01-11", {"iron": 82})
    assert storage.delete_blood_tests("u1") == 2
    assert storage.fetch_blood_tests("u1") == []
    assert len(storage.fetch_blood_tests("u2")) == 1
