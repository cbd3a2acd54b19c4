"""End-of-session analysis: assembles findings, risks, profile and score.

Everything here is a pure function of a frozen :class:`SessionAggregate`, so it
can run on any thread once the session has been handed over.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from . import config, findings, profile, risk
from .findings import ClinicalFinding
from .pitch import hz_to_note
from .profile import VoiceCharacteristics
from .risk import DiseaseRiskAssessment
from .session import SessionAggregate

logger = logging.getLogger(__name__)

LEVEL_LOW = "Low"
LEVEL_MEDIUM = "Medium"
LEVEL_HIGH = "High"

SOURCE_MEASURED = "measured"
SOURCE_PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class AnalysisResult:
    timestamp: str
    pitch_hz: Optional[float]
    note: Optional[str]
    loudness: float
    jitter: Optional[float]
    quality_score: float
    quality_label: str
    risk_level: str
    findings: list[ClinicalFinding]
    risks: list[DiseaseRiskAssessment]
    characteristics: VoiceCharacteristics
    recommendations: list[str]
    signal_source: str = SOURCE_MEASURED
    aggregate: SessionAggregate = field(default_factory=SessionAggregate)

    def to_dict(self) -> dict:
        """Plain JSON-serializable structure for report renderers and APIs."""
        agg = self.aggregate
        return {
            "timestamp": self.timestamp,
            "pitch_hz": self.pitch_hz,
            "note": self.note,
            "loudness": self.loudness,
            "jitter": self.jitter,
            "quality_score": self.quality_score,
            "quality_label": self.quality_label,
            "risk_level": self.risk_level,
            "signal_source": self.signal_source,
            "clinical_findings": [f.to_dict() for f in self.findings],
            "disease_risk_assessment": [r.to_dict() for r in self.risks],
            "voice_characteristics": self.characteristics.to_dict(),
            "recommendations": list(self.recommendations),
            "session": {
                "frames_observed": agg.frames_observed,
                "voiced_frames": agg.voiced_frames,
                "duration_sec": round(agg.duration_sec, 3),
                "pitch_stability": agg.pitch_stability,
                "history_length": len(agg.pitch_history),
            },
        }


def risk_score(rms: float, jitter: Optional[float], pitch_hz: Optional[float]) -> float:
    """Signal-quality risk score in [0, 1]; higher is worse."""
    score = 0.0
    if rms < config.RMS_FLOOR:
        score += 0.4
    elif rms < 0.01:
        score += 0.2

    if jitter is not None and jitter > 0.1:
        score += 0.4
    elif jitter is not None and jitter > 0.06:
        score += 0.3

    if pitch_hz is None:
        score += 0.3
    return min(1.0, score)


def quality_label(quality_score: float) -> str:
    if quality_score >= config.QUALITY_GOOD:
        return "Good"
    if quality_score >= config.QUALITY_FAIR:
        return "Fair"
    return "Poor"


def overall_risk_level(score: float, risks: list[DiseaseRiskAssessment]) -> str:
    """High only when some condition is high; the score alone can reach Medium."""
    levels = {r.risk_level for r in risks}
    if risk.RISK_HIGH in levels:
        return LEVEL_HIGH
    if score >= config.RISK_SCORE_MEDIUM or risk.RISK_MODERATE in levels:
        return LEVEL_MEDIUM
    return LEVEL_LOW


def analyze(aggregate: SessionAggregate, timestamp: Optional[str] = None) -> AnalysisResult:
    """Run the full rule stack over a frozen session aggregate."""
    stability = aggregate.pitch_stability
    if stability is None:
        stability = config.NEUTRAL_STABILITY

    clinical = findings.generate(aggregate)
    risks = risk.assess(aggregate)
    characteristics = profile.profile(aggregate, stability)
    recommendations = profile.recommend(clinical, risks, characteristics)

    score = risk_score(aggregate.peak_rms, aggregate.peak_jitter, aggregate.peak_pitch_hz)
    quality = round((1.0 - score) * 100.0, 1)
    level = overall_risk_level(score, risks)
    pitch = aggregate.peak_pitch_hz

    result = AnalysisResult(
        timestamp=timestamp or datetime.now(timezone.utc).isoformat(),
        pitch_hz=pitch,
        note=hz_to_note(pitch) if pitch else None,
        loudness=aggregate.peak_rms,
        jitter=aggregate.peak_jitter,
        quality_score=quality,
        quality_label=quality_label(quality),
        risk_level=level,
        findings=clinical,
        risks=risks,
        characteristics=characteristics,
        recommendations=recommendations,
        signal_source=SOURCE_PLACEHOLDER if aggregate.placeholder else SOURCE_MEASURED,
        aggregate=aggregate,
    )
    logger.info(
        "Analysis: quality=%.0f%% risk=%s findings=%d conditions=%d source=%s",
        quality, level, len(clinical), len(risks), result.signal_source,
    )
    return result
