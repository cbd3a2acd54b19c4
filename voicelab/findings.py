"""Clinical findings: each acoustic feature checked against its normal range.

Every feature is evaluated on its own (combinations are the risk assessor's
job). A feature yields exactly one finding; absent features yield none.

Status tiers map to severity as follows:
  normal      -> normal
  borderline  -> mild
  abnormal    -> moderate, or severe once past the secondary bound
"""

from dataclasses import asdict, dataclass
from typing import Optional

from . import config
from .session import SessionAggregate

STATUS_NORMAL = "normal"
STATUS_BORDERLINE = "borderline"
STATUS_ABNORMAL = "abnormal"

SEVERITY_NORMAL = "normal"
SEVERITY_MILD = "mild"
SEVERITY_MODERATE = "moderate"
SEVERITY_SEVERE = "severe"


@dataclass(frozen=True)
class ClinicalFinding:
    category: str
    parameter: str
    value: str
    normal_range: str
    status: str
    severity: str
    statement: str
    clinical_significance: str

    def to_dict(self) -> dict:
        return asdict(self)


def _outside(value: float, bounds: tuple[Optional[float], Optional[float]]) -> bool:
    low, high = bounds
    return (low is not None and value < low) or (high is not None and value > high)


def classify(feature: str, value: float) -> tuple[str, str]:
    """Return (status, severity) for one feature value."""
    rule = config.FINDING_RULES[feature]
    if _outside(value, rule["abnormal"]):
        severity = SEVERITY_SEVERE if _outside(value, rule["severe"]) else SEVERITY_MODERATE
        return STATUS_ABNORMAL, severity
    if _outside(value, rule["borderline"]):
        return STATUS_BORDERLINE, SEVERITY_MILD
    return STATUS_NORMAL, SEVERITY_NORMAL


def _format_value(feature: str, value: float) -> str:
    if feature == "pitch":
        return f"{value:.1f} Hz"
    if feature == "jitter":
        return f"{value * 100:.2f}%"
    return f"{value:.4f}"


def _finding(feature: str, value: float) -> ClinicalFinding:
    rule = config.FINDING_RULES[feature]
    status, severity = classify(feature, value)
    shown = _format_value(feature, value)
    return ClinicalFinding(
        category=rule["category"],
        parameter=rule["parameter"],
        value=shown,
        normal_range=rule["normal_range"],
        status=status,
        severity=severity,
        statement=f"{rule['parameter']} of {shown} is {status} "
                  f"(normal range {rule['normal_range']})",
        clinical_significance=rule["significance"][status],
    )


def generate(aggregate: SessionAggregate) -> list[ClinicalFinding]:
    """Findings for pitch, amplitude and jitter, in that order."""
    findings = []
    if aggregate.peak_pitch_hz is not None:
        findings.append(_finding("pitch", aggregate.peak_pitch_hz))
    # Zero peak RMS means nothing was captured, not a silent voice.
    if aggregate.has_signal:
        findings.append(_finding("rms", aggregate.peak_rms))
    if aggregate.peak_jitter is not None:
        findings.append(_finding("jitter", aggregate.peak_jitter))
    return findings
