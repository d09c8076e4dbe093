# panel.py
import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from config import LABELS, UNITS

logger = logging.getLogger(__name__)

class LabInputError(ValueError):
    """Lab values or dates that break the input contract of the evaluator."""

class Analyte(str, Enum):
    # Declaration order is the evaluation/display order
    GLUCOSE = "glucose"
    IRON = "iron"
    HEMOGLOBIN = "hemoglobin"
    PLATELETS = "platelets"
    WHITE_BLOOD_CELLS = "white_blood_cells"
    CREATININE = "creatinine"
    CHOLESTEROL = "cholesterol"

LabPanel = Dict[Analyte, float]

def display_name(analyte: Analyte) -> str:
    return LABELS.get(analyte.value, analyte.value)

def unit(analyte: Analyte) -> str:
    return UNITS.get(analyte.value, "")

def to_analyte(key: Union[Analyte, str]) -> Analyte:
    if isinstance(key, Analyte):
        return key
    if isinstance(key, str):
        try:
            return Analyte(key.strip().lower())
        except ValueError:
            pass
    raise LabInputError(f"Unknown analyte: {key!r}")

def _check_value(analyte: Analyte, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LabInputError(f"{display_name(analyte)} value must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise LabInputError(f"{display_name(analyte)} value must be finite, got {value!r}")
    if value < 0:
        raise LabInputError(f"{display_name(analyte)} value must not be negative, got {value!r}")
    return value

def make_panel(values: Mapping) -> LabPanel:
    """
    Build a LabPanel from analyte -> number.

    Keys may be Analyte members or their string values. Anything outside the
    seven known analytes raises LabInputError, so a misspelt key never slips
    through as "not measured".
    """
    checked = {}
    for key, value in values.items():
        analyte = to_analyte(key)
        checked[analyte] = _check_value(analyte, value)
    return {a: checked[a] for a in Analyte if a in checked}

def _parse_number(text: str) -> Optional[float]:
    # only the first comma is a decimal separator; float() would also take "1_0"
    if "_" in text:
        return None
    try:
        value = float(text.replace(",", ".", 1))
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value

def parse_form_values(raw: Mapping[str, Optional[str]]) -> LabPanel:
    """
    Form strings -> LabPanel.

    Empty fields are omitted, "5,4" is read as 5.4, and values that do not
    parse to a finite non-negative number are dropped.
    """
    values = {}
    for key, text in raw.items():
        analyte = to_analyte(key)
        text = "" if text is None else str(text).strip()
        if not text:
            continue
        value = _parse_number(text)
        if value is None:
            logger.debug("Dropping unparseable %s value %r", analyte.value, text)
            continue
        values[analyte] = value
    return make_panel(values)

def _iso_date(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError as exc:
        raise LabInputError("Test date must be in ISO format 'YYYY-MM-DD'") from exc

@dataclass(frozen=True)
class BloodTestRecord:
    """One test occasion. Date and panel are checked however the record is built."""
    date: str
    panel: LabPanel = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "date", _iso_date(self.date))
        object.__setattr__(self, "panel", make_panel(self.panel))

def make_record(test_date: Union[str, date], panel: Mapping) -> BloodTestRecord:
    return BloodTestRecord(date=test_date, panel=panel)

def panel_to_json(panel: LabPanel) -> Dict[str, float]:
    return {analyte.value: value for analyte, value in panel.items()}
