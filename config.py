# config.py
# Blood-test thresholds + settings (a clinician can tweak these without touching the rule code)

# Bands are checked in order, first match wins.
#   "below":  value <  bound
#   "up_to":  value <= bound
#   no bound: catch-all, must be the last band
# "weight" is added to the risk score when the band is selected.
BLOOD_RULES = {
    # mg/dL
    "glucose": [
        {"band": "low", "below": 70, "weight": 2, "text": "low",
         "note": "Hypoglycemia risk possible (dizziness, sweating)."},
        {"band": "normal", "up_to": 110, "weight": 0, "text": "in normal range"},
        {"band": "borderline", "up_to": 126, "weight": 1, "text": "borderline high",
         "note": "Follow-up for diabetes is advised."},
        {"band": "high", "weight": 3, "text": "high",
         "note": "Diabetes risk possible."},
    ],
    # µg/dL
    "iron": [
        {"band": "low", "below": 60, "weight": 2, "text": "low",
         "note": "May cause fatigue and poor concentration."},
        {"band": "normal", "up_to": 170, "weight": 0, "text": "in normal range"},
        {"band": "high", "weight": 1, "text": "high",
         "note": "A doctor's check-up is advised."},
    ],
    # g/dL (no high band)
    "hemoglobin": [
        {"band": "low", "below": 12, "weight": 2, "text": "low",
         "note": "Possible sign of anemia."},
        {"band": "normal", "weight": 0, "text": "normal"},
    ],
    # 10³/µL
    "platelets": [
        {"band": "low", "below": 150, "weight": 2, "text": "low",
         "note": "Bleeding risk may be increased."},
        {"band": "normal", "up_to": 450, "weight": 0, "text": "normal"},
        {"band": "high", "weight": 2, "text": "high",
         "note": "Clotting risk possible."},
    ],
    # 10³/µL
    "white_blood_cells": [
        {"band": "low", "below": 4, "weight": 2, "text": "low",
         "note": "Immunity may be weakened."},
        {"band": "normal", "up_to": 11, "weight": 0, "text": "normal"},
        {"band": "high", "weight": 2, "text": "high",
         "note": "Possible sign of infection or inflammation."},
    ],
    # mg/dL (no low band)
    "creatinine": [
        {"band": "normal", "up_to": 1.3, "weight": 0, "text": "normal"},
        {"band": "high", "weight": 3, "text": "high",
         "note": "Kidney function should be evaluated."},
    ],
    # mg/dL (normal is strictly below 200)
    "cholesterol": [
        {"band": "normal", "below": 200, "weight": 0, "text": "normal"},
        {"band": "borderline", "below": 240, "weight": 1, "text": "borderline high",
         "note": "A balanced diet is advised."},
        {"band": "high", "weight": 3, "text": "high",
         "note": "Cardiovascular risk may be increased."},
    ],
}

# Risk score -> tier. "max_score" is inclusive; None means no upper limit.
RISK_TIERS = [
    {"tier": "Low", "max_score": 2,
     "recommendation": "Your values are broadly in the normal range. Regular check-ups are advised."},
    {"tier": "Medium", "max_score": 5,
     "recommendation": "Some values are outside the reference range. Follow-up and lifestyle adjustments are advised."},
    {"tier": "High", "max_score": None,
     "recommendation": "Several values are abnormal. Please consult a physician for a clinical evaluation."},
]

# Display labels, kept apart from the analyte identifiers
LABELS = {
    "glucose": "Glucose",
    "iron": "Iron",
    "hemoglobin": "Hemoglobin",
    "platelets": "Platelets",
    "white_blood_cells": "White blood cells",
    "creatinine": "Creatinine",
    "cholesterol": "Cholesterol",
}

UNITS = {
    "glucose": "mg/dL",
    "iron": "µg/dL",
    "hemoglobin": "g/dL",
    "platelets": "10³/µL",
    "white_blood_cells": "10³/µL",
    "creatinine": "mg/dL",
    "cholesterol": "mg/dL",
}

APP = {
    "no_assessment": "No automatic assessment could be made from the values entered.",
    "empty_form": "Enter at least one blood test value.",
    "disclaimer": (
        "Educational support tool only. Not medical advice. "
        "Does not diagnose or replace clinician care. "
        "If results are concerning or you feel unwell, seek medical care."
    ),
}

STORAGE = {
    # used when DATABASE_URL is not set
    "sqlite_path": "data.db",
}
