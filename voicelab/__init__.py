"""VoiceLab voice biomarker engine.

Real-time pitch and energy estimation on short audio frames, session-level
aggregation, and rule-based screening (clinical findings, disease risk,
voice profile, recommendations). Screening aid only, not a diagnosis.
"""

__version__ = "1.0.0"
