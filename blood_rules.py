# blood_rules.py
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from config import APP, BLOOD_RULES, RISK_TIERS
from panel import Analyte, BloodTestRecord, display_name

TIER_ORDER = tuple(t["tier"] for t in RISK_TIERS)

@dataclass(frozen=True)
class Band:
    name: str
    weight: int
    text: str
    note: str = ""
    below: Optional[float] = None
    up_to: Optional[float] = None

    def matches(self, value: float) -> bool:
        if self.below is not None:
            return value < self.below
        if self.up_to is not None:
            return value <= self.up_to
        return True

    @property
    def bound(self) -> Optional[float]:
        return self.below if self.below is not None else self.up_to

    @property
    def upper_key(self) -> Tuple[float, int]:
        # "below x" ends before "up_to x"
        return (self.bound, 0 if self.below is not None else 1)

@dataclass(frozen=True)
class Finding:
    analyte: Analyte
    value: float
    band: str
    weight: int
    previous: Optional[float] = None

@dataclass(frozen=True)
class AnalysisResult:
    lines: Tuple[str, ...]
    risk_tier: str
    recommendation: str
    risk_score: int = 0
    findings: Tuple[Finding, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "analysis": list(self.lines),
            "recommendation": self.recommendation,
            "risk_tier": self.risk_tier,
            "risk_score": self.risk_score,
        }

def _is_number(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)

def _build_band(analyte: Analyte, position: int, b) -> Band:
    where = f"{analyte.value}/band {position}"
    if not isinstance(b, dict):
        raise ValueError(f"{where}: band must be a dict, got {type(b).__name__}")
    name = b.get("band")
    if not isinstance(name, str) or not name:
        raise ValueError(f"{where}: missing band name ('band')")
    where = f"{analyte.value}/{name}"

    weight = b.get("weight", 0)
    if not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
        raise ValueError(f"{where}: weight must be a non-negative integer")
    below, up_to = b.get("below"), b.get("up_to")
    if below is not None and up_to is not None:
        raise ValueError(f"{where}: use either 'below' or 'up_to', not both")
    for key, bound in (("below", below), ("up_to", up_to)):
        if bound is not None and not _is_number(bound):
            raise ValueError(f"{where}: '{key}' must be a number")

    return Band(
        name=name,
        weight=weight,
        text=b.get("text", name),
        note=b.get("note", ""),
        below=below,
        up_to=up_to,
    )

def validate_rules(rules: Dict) -> Dict[Analyte, List[Band]]:
    """
    Check a rule table and return it as Band objects.

    Every analyte needs at least one band, band ends must strictly ascend
    ("below x" counts as ending before "up_to x") and only the last band may
    be unbounded, so exactly one band matches any value.
    """
    unknown = set(rules) - {a.value for a in Analyte}
    if unknown:
        raise ValueError(f"Rules given for unknown analytes: {sorted(unknown)}")

    table = {}
    for analyte in Analyte:
        raw = rules.get(analyte.value) or []
        bands = [_build_band(analyte, i, b) for i, b in enumerate(raw)]
        if not bands:
            raise ValueError(f"No bands defined for {analyte.value}")
        if bands[-1].bound is not None:
            raise ValueError(f"{analyte.value}: last band must be unbounded")
        if any(b.bound is None for b in bands[:-1]):
            raise ValueError(f"{analyte.value}: only the last band may be unbounded")
        for prev, cur in zip(bands[:-2], bands[1:-1]):
            if cur.upper_key <= prev.upper_key:
                raise ValueError(f"{analyte.value}: band bounds must ascend ({prev.name} -> {cur.name})")
        table[analyte] = bands
    return table

def validate_tiers(tiers: List[Dict]) -> List[Dict]:
    """
    Check a risk tier list: non-empty, "max_score" strictly ascending and
    None only (and always) on the last tier.
    """
    if not tiers:
        raise ValueError("At least one risk tier is required")
    names = set()
    for i, t in enumerate(tiers):
        if not isinstance(t, dict):
            raise ValueError(f"Risk tier {i}: must be a dict")
        name = t.get("tier")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Risk tier {i}: missing tier name ('tier')")
        if name in names:
            raise ValueError(f"Risk tier {name}: duplicate name")
        names.add(name)
        if not isinstance(t.get("recommendation"), str):
            raise ValueError(f"Risk tier {name}: missing recommendation")
        if "max_score" not in t:
            raise ValueError(f"Risk tier {name}: missing max_score")
        max_score = t["max_score"]
        last = i == len(tiers) - 1
        if last and max_score is not None:
            raise ValueError(f"Risk tier {name}: last tier must have max_score None")
        if not last and not _is_number(max_score):
            raise ValueError(f"Risk tier {name}: only the last tier may have max_score None")
        if i > 0 and not last and max_score <= tiers[i - 1]["max_score"]:
            raise ValueError(f"Risk tier {name}: max_score must ascend")
    return list(tiers)

_DEFAULT_BANDS = validate_rules(BLOOD_RULES)
_DEFAULT_TIERS = validate_tiers(RISK_TIERS)

def _bands_for(rules: Optional[Dict]) -> Dict[Analyte, List[Band]]:
    if rules is None:
        return _DEFAULT_BANDS
    return validate_rules(rules)

def _tiers_for(tiers: Optional[List[Dict]]) -> List[Dict]:
    if tiers is None:
        return _DEFAULT_TIERS
    return validate_tiers(tiers)

def _select(bands: List[Band], value: float) -> Band:
    for band in bands:
        if band.matches(value):
            return band
    # unreachable for validated tables: the last band is a catch-all
    raise ValueError(f"No band matches value {value}")

def classify(analyte: Analyte, value: float, rules: Optional[Dict] = None) -> Band:
    return _select(_bands_for(rules)[analyte], value)

def _fmt(value: float) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)

def classification_line(analyte: Analyte, value: float, band: Band) -> str:
    line = f"{display_name(analyte)} {band.text} ({_fmt(value)})."
    if band.note:
        line += f" {band.note}"
    return line

def compare_with_previous(analyte: Analyte, current: float, previous: Optional[float]) -> Optional[str]:
    if previous is None:
        return None
    name = display_name(analyte)
    if current > previous:
        return f"{name} increased relative to previous measurement ({_fmt(previous)} → {_fmt(current)})."
    if current < previous:
        return f"{name} decreased relative to previous measurement ({_fmt(previous)} → {_fmt(current)})."
    return f"{name} unchanged relative to previous measurement ({_fmt(current)})."

def _pick_tier(score: int, tiers: List[Dict]) -> Tuple[str, str]:
    for t in tiers:
        if t["max_score"] is None or score <= t["max_score"]:
            return t["tier"], t["recommendation"]
    # unreachable for validated tiers: the last one is unbounded
    raise ValueError(f"No risk tier matches score {score}")

def risk_tier(score: int, tiers: Optional[List[Dict]] = None) -> Tuple[str, str]:
    """Returns (tier, recommendation) for a risk score."""
    return _pick_tier(score, _tiers_for(tiers))

def tier_rank(tier: str, tiers: Optional[List[Dict]] = None) -> int:
    """Position of a tier name in the tier list (built-in tiers by default)."""
    names = [t["tier"] for t in _tiers_for(tiers)]
    if tier not in names:
        raise ValueError(f"Unknown risk tier: {tier!r}")
    return names.index(tier)

def evaluate(
    current: BloodTestRecord,
    previous: Sequence[BloodTestRecord] = (),
    rules: Optional[Dict] = None,
    tiers: Optional[List[Dict]] = None,
) -> AnalysisResult:
    """
    Rule-based blood-test evaluation.

    Each analyte in the current panel gets one classification line, then a
    trend line when the most recent previous test measured it too. Band
    weights add up to the risk score, which alone decides tier and
    recommendation. Older history (previous[1:]) is ignored.
    """
    bands = _bands_for(rules)
    tier_list = _tiers_for(tiers)
    prev_panel = previous[0].panel if previous else {}

    lines: List[str] = []
    findings: List[Finding] = []
    score = 0

    for analyte in Analyte:
        if analyte not in current.panel:
            continue
        value = current.panel[analyte]
        band = _select(bands[analyte], value)
        score += band.weight
        lines.append(classification_line(analyte, value, band))

        prev_value = prev_panel.get(analyte)
        trend = compare_with_previous(analyte, value, prev_value)
        if trend:
            lines.append(trend)

        findings.append(Finding(analyte, value, band.name, band.weight, prev_value))

    if not lines:
        lines.append(APP["no_assessment"])

    tier, recommendation = _pick_tier(score, tier_list)
    return AnalysisResult(
        lines=tuple(lines),
        risk_tier=tier,
        recommendation=recommendation,
        risk_score=score,
        findings=tuple(findings),
    )
