"""Rule-based disease risk screening from session features.

Each condition has an independent additive rule set (``config.RISK_RULES``).
A rule adds its weight when its threshold is crossed; indicators and symptoms
are appended in rule order so identical input always gives identical output.
Rules whose feature is missing do not fire.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Optional

from . import config
from .session import SessionAggregate

logger = logging.getLogger(__name__)

RISK_LOW = "low"
RISK_MODERATE = "moderate"
RISK_HIGH = "high"


@dataclass(frozen=True)
class DiseaseRiskAssessment:
    condition: str
    label: str
    risk_level: str
    confidence: float
    indicators: list[str] = field(default_factory=list)
    symptoms: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def _features(aggregate: SessionAggregate) -> dict[str, Optional[float]]:
    return {
        "pitch": aggregate.peak_pitch_hz,
        "rms": aggregate.peak_rms if aggregate.has_signal else None,
        "jitter": aggregate.peak_jitter,
        "stability": aggregate.pitch_stability,
    }


def _fires(value: Optional[float], op: str, threshold) -> bool:
    if value is None:
        return False
    if op == "lt":
        return value < threshold
    if op == "gt":
        return value > threshold
    if op == "outside":
        low, high = threshold
        return value < low or value > high
    raise ValueError(f"Unknown rule operator: {op}")


def risk_band(confidence: float, high_above: float, moderate_above: float) -> str:
    if confidence > high_above:
        return RISK_HIGH
    if confidence > moderate_above:
        return RISK_MODERATE
    return RISK_LOW


def assess_condition(condition: str, aggregate: SessionAggregate) -> DiseaseRiskAssessment:
    """Evaluate one condition's rule set, regardless of the reporting threshold."""
    rule_set = config.RISK_RULES[condition]
    features = _features(aggregate)

    confidence = 0.0
    indicators, symptoms = [], []
    for feature, op, threshold, weight, indicator, symptom in rule_set["rules"]:
        if _fires(features[feature], op, threshold):
            confidence += weight
            indicators.append(indicator)
            symptoms.append(symptom)

    confidence = min(max(confidence, 0.0), 1.0)
    return DiseaseRiskAssessment(
        condition=condition,
        label=rule_set["label"],
        risk_level=risk_band(confidence, rule_set["high_above"], rule_set["moderate_above"]),
        confidence=round(confidence, 4),
        indicators=indicators,
        symptoms=symptoms,
    )


def assess(aggregate: SessionAggregate) -> list[DiseaseRiskAssessment]:
    """Assessments for every condition whose confidence clears the reporting floor."""
    results = []
    for condition in config.RISK_RULES:
        assessment = assess_condition(condition, aggregate)
        if assessment.confidence > config.MIN_REPORTED_CONFIDENCE:
            results.append(assessment)
        else:
            logger.debug("Condition %s below reporting floor (%.2f)",
                         condition, assessment.confidence)
    return results
