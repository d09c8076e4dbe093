# service.py
# Form submission flow: parse -> previous tests -> evaluate -> persist
import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from config import APP
from panel import (
    BloodTestRecord,
    LabInputError,
    make_record,
    panel_to_json,
    parse_form_values,
)
from blood_rules import evaluate
from storage import add_blood_test, delete_blood_tests, fetch_blood_tests

logger = logging.getLogger(__name__)

def previous_records(user_key: str) -> List[BloodTestRecord]:
    """The user's stored tests as records, newest first."""
    return [make_record(t["test_date"], t["values"]) for t in fetch_blood_tests(user_key)]

def submit_blood_test(
    user_key: str,
    raw_values: Mapping[str, Optional[str]],
    test_date: Optional[Union[str, date]] = None,
) -> Dict:
    """
    Evaluate a submitted blood-test form and store it.

    raw_values maps analyte ids to the strings typed into the form. At least
    one field must be filled in; fields that do not parse are dropped, which
    can still leave an empty panel (the analysis then says so).

    Fetching previous tests and storing the new one is not atomic: a test
    stored in between by another session is simply not compared against.
    """
    filled = [v for v in raw_values.values() if v is not None and str(v).strip()]
    if not filled:
        raise LabInputError(APP["empty_form"])

    panel = parse_form_values(raw_values)
    current = make_record(test_date or date.today(), panel)
    previous = previous_records(user_key)

    result = evaluate(current, previous)
    test_id = add_blood_test(user_key, current, result)

    if len(panel) < len(filled):
        logger.warning("Some values for test %d could not be read and were skipped", test_id)

    return {
        "id": test_id,
        "date": current.date,
        "values": panel_to_json(current.panel),
        **result.to_dict(),
        "disclaimer": APP["disclaimer"],
    }

def blood_test_history(user_key: str) -> List[Dict]:
    return fetch_blood_tests(user_key)

def clear_blood_tests(user_key: str) -> int:
    return delete_blood_tests(user_key)
