"""Voice characteristic profile and recommendation list."""

from dataclasses import asdict, dataclass
from typing import Iterable

from . import config
from .findings import STATUS_ABNORMAL, STATUS_BORDERLINE, ClinicalFinding
from .risk import RISK_HIGH, RISK_MODERATE, DiseaseRiskAssessment
from .session import SessionAggregate

QUALITY_NORMAL = "normal"
QUALITY_BREATHY = "breathy"
QUALITY_ROUGH = "rough"
QUALITY_STRAINED = "strained"

ARTICULATION_CLEAR = "clear"

PROSODY_NORMAL = "normal"
PROSODY_MONOTONE = "monotone"
PROSODY_IRREGULAR = "irregular"

ASSESSMENT_NORMAL = "Voice characteristics within normal limits"
ASSESSMENT_REVIEW = (
    "Voice characteristics suggest possible vocal or neurological involvement "
    "requiring clinical evaluation"
)

FINDING_RECOMMENDATIONS = {
    STATUS_ABNORMAL: [
        "Recommend comprehensive voice evaluation by speech-language pathologist",
        "Consider laryngoscopic examination to assess vocal fold structure and function",
    ],
    STATUS_BORDERLINE: [
        "Monitor voice changes over time with regular assessments",
        "Consider voice therapy consultation for optimization of vocal function",
    ],
}

RISK_RECOMMENDATIONS = {
    "parkinsons": {
        RISK_HIGH: [
            "Recommend neurological evaluation for movement disorders assessment",
            "Consider Lee Silverman Voice Treatment (LSVT LOUD) if Parkinson's is confirmed",
            "Monitor for other Parkinson's symptoms: tremor, rigidity, bradykinesia",
        ],
        RISK_MODERATE: [
            "Consider baseline neurological screening",
            "Implement voice exercises to maintain vocal strength and clarity",
        ],
    },
    "alzheimers": {
        RISK_HIGH: [
            "Recommend cognitive assessment and neuropsychological evaluation",
            "Consider speech therapy focused on communication strategies",
            "Monitor for other cognitive symptoms: memory loss, confusion, language difficulties",
        ],
        RISK_MODERATE: [
            "Consider cognitive screening assessment",
            "Implement communication exercises to maintain language skills",
        ],
    },
    "laryngeal_disorders": {
        RISK_HIGH: [
            "Urgent otolaryngology referral for laryngeal examination",
            "Avoid vocal trauma and implement voice rest protocols",
            "Consider voice therapy for vocal rehabilitation",
        ],
        RISK_MODERATE: [
            "Schedule routine laryngeal examination",
            "Implement vocal hygiene practices",
        ],
    },
}

QUALITY_RECOMMENDATIONS = {
    QUALITY_BREATHY: "Practice breath support exercises and vocal strengthening",
    QUALITY_ROUGH: "Implement vocal rest and hydration protocols",
    QUALITY_STRAINED: "Focus on vocal relaxation techniques and stress reduction",
}

DEFAULT_RECOMMENDATIONS = [
    "Maintain good vocal hygiene: stay hydrated, avoid excessive throat clearing",
    "Continue regular voice monitoring for early detection of changes",
]

DISCLAIMERS = [
    "Results should be interpreted by qualified healthcare professionals",
    "This screening tool is not a substitute for professional medical diagnosis",
]


@dataclass(frozen=True)
class VoiceCharacteristics:
    pitch_stability: float
    voice_quality: str
    articulation: str
    prosody: str
    overall_assessment: str

    def to_dict(self) -> dict:
        return asdict(self)


def _voice_quality(rms, pitch, jitter) -> str:
    if rms is not None and jitter is not None \
            and rms < config.BREATHY_MAX_RMS and jitter > config.BREATHY_MIN_JITTER:
        return QUALITY_BREATHY
    if jitter is not None and jitter > config.ROUGH_MIN_JITTER:
        return QUALITY_ROUGH
    if rms is not None and pitch is not None \
            and rms > config.STRAINED_MIN_RMS and pitch > config.STRAINED_MIN_PITCH:
        return QUALITY_STRAINED
    return QUALITY_NORMAL


def _articulation(jitter) -> str:
    if jitter is not None:
        for threshold, label in config.ARTICULATION_JITTER:
            if jitter > threshold:
                return label
    return ARTICULATION_CLEAR


def _prosody(stability: float, pitch) -> str:
    if stability < config.IRREGULAR_MAX_STABILITY:
        return PROSODY_IRREGULAR
    if stability < config.MONOTONE_MAX_STABILITY and pitch is not None \
            and pitch < config.MONOTONE_MAX_PITCH:
        return PROSODY_MONOTONE
    return PROSODY_NORMAL


def profile(aggregate: SessionAggregate, stability: float) -> VoiceCharacteristics:
    """Categorical voice profile from the session aggregate and pitch stability."""
    stability = min(max(float(stability), 0.0), 1.0)
    rms = aggregate.peak_rms if aggregate.has_signal else None
    pitch, jitter = aggregate.peak_pitch_hz, aggregate.peak_jitter

    quality = _voice_quality(rms, pitch, jitter)
    articulation = _articulation(jitter)
    prosody = _prosody(stability, pitch)

    if quality == QUALITY_NORMAL and articulation == ARTICULATION_CLEAR \
            and prosody == PROSODY_NORMAL:
        overall = ASSESSMENT_NORMAL
    else:
        overall = ASSESSMENT_REVIEW

    return VoiceCharacteristics(
        pitch_stability=round(stability, 4),
        voice_quality=quality,
        articulation=articulation,
        prosody=prosody,
        overall_assessment=overall,
    )


def _dedupe(items: Iterable[str]) -> list[str]:
    seen, out = set(), []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def recommend(
    findings: list[ClinicalFinding],
    risks: list[DiseaseRiskAssessment],
    characteristics: VoiceCharacteristics,
) -> list[str]:
    """Ordered, de-duplicated recommendations; always ends with the disclaimers.

    Order: finding-driven, per-condition, voice-quality, then (only when
    nothing else fired) the general vocal-health pair.
    """
    recs = []
    statuses = {f.status for f in findings}
    for status in (STATUS_ABNORMAL, STATUS_BORDERLINE):
        if status in statuses:
            recs.extend(FINDING_RECOMMENDATIONS[status])

    for assessment in risks:
        by_level = RISK_RECOMMENDATIONS.get(assessment.condition, {})
        recs.extend(by_level.get(assessment.risk_level, []))

    quality_rec = QUALITY_RECOMMENDATIONS.get(characteristics.voice_quality)
    if quality_rec:
        recs.append(quality_rec)

    if not recs:
        recs.extend(DEFAULT_RECOMMENDATIONS)

    return _dedupe(recs + DISCLAIMERS)
