"""Configuration for the voice biomarker analysis engine."""

import os

# --- Frames ---
FRAME_SIZE = int(os.environ.get("VOICELAB_FRAME_SIZE", "2048"))  # samples per analysis window
MIN_SAMPLE_RATE = 8000
MAX_SAMPLE_RATE = 192000
DEFAULT_SAMPLE_RATE = 16000
AUDIO_DETECT_LEVEL = 0.001       # max |sample| above this counts as input

# --- Pitch estimation ---
RMS_FLOOR = 0.001                # below this a frame is treated as silence
PITCH_MIN_HZ = 50.0              # longest searched period
PITCH_MAX_HZ = 800.0             # shortest searched period
MIN_CORRELATION = 0.01           # permissive on purpose: noisy consumer microphones
OCTAVE_TOLERANCE = 0.9           # shorter period wins if its peak is at least this fraction of the best
MIN_FRAME_PERIODS = 3            # frame must span this many periods of the lowest pitch
SPECTRAL_BAND_HZ = (80.0, 800.0)
SPECTRAL_PEAK_FLOOR_DB = -70.0   # dBFS amplitude of the fallback spectral peak

# --- Stability tracking ---
HISTORY_CAPACITY = int(os.environ.get("VOICELAB_HISTORY_CAPACITY", "100"))
JITTER_MIN_HISTORY = 10
STABILITY_MIN_HISTORY = 6
NEUTRAL_STABILITY = 0.5

# --- Session ---
SESSION_SECONDS = float(os.environ.get("VOICELAB_SESSION_SECONDS", "5.0"))

OUTCOME_MEASURED = "measured"
OUTCOME_INSUFFICIENT = "insufficient"

# Used only when the caller explicitly accepts a placeholder for a silent
# session. Typical adult values, flagged on the result.
PLACEHOLDER_FEATURES = {
    "peak_rms": 0.06,
    "peak_pitch_hz": 160.0,
    "peak_jitter": 0.03,
    "pitch_stability": 0.8,
}

# --- Clinical findings ---
# Bounds are (low, high); None means that side is unbounded.
FINDING_RULES = {
    "pitch": {
        "category": "Fundamental Frequency",
        "parameter": "Fundamental Frequency (F0)",
        "normal_range": "100-250 Hz (adults)",
        "abnormal": (85.0, 300.0),
        "borderline": (100.0, 250.0),
        "severe": (70.0, 350.0),
        "significance": {
            "abnormal": "Significant deviation from normal range may indicate vocal "
                        "fold pathology or neurological involvement",
            "borderline": "Mild deviation that may warrant monitoring",
            "normal": "Within normal limits for healthy adult voice",
        },
    },
    "rms": {
        "category": "Voice Amplitude",
        "parameter": "Voice Amplitude (RMS)",
        "normal_range": "0.03-0.12 (normalized)",
        "abnormal": (0.01, 0.15),
        "borderline": (0.03, 0.12),
        "severe": (0.005, 0.2),
        "significance": {
            "abnormal": "Significant amplitude deviation may indicate respiratory "
                        "or vocal fold dysfunction",
            "borderline": "Mild amplitude variation that may indicate early voice changes",
            "normal": "Normal voice amplitude suggesting adequate vocal fold closure "
                      "and respiratory support",
        },
    },
    "jitter": {
        "category": "Pitch Perturbation",
        "parameter": "Pitch Perturbation (Jitter)",
        "normal_range": "<6% (healthy adults)",
        "abnormal": (None, 0.10),
        "borderline": (None, 0.06),
        "severe": (None, 0.11),
        "significance": {
            "abnormal": "High jitter indicates significant vocal instability, often "
                        "associated with neurological or laryngeal pathology",
            "borderline": "Elevated jitter may indicate early voice changes or mild "
                          "vocal instability",
            "normal": "Normal pitch stability indicating healthy vocal fold vibration",
        },
    },
}

# --- Disease risk ---
MIN_REPORTED_CONFIDENCE = 0.1

# Each rule: (feature, op, threshold, weight, indicator, symptom).
# "outside" takes a (low, high) pair.
RISK_RULES = {
    "parkinsons": {
        "label": "Parkinson's disease (movement disorder)",
        "high_above": 0.5,
        "moderate_above": 0.25,
        "rules": [
            ("pitch", "lt", 120.0, 0.20,
             "Reduced fundamental frequency", "Monotone speech pattern"),
            ("rms", "lt", 0.04, 0.25,
             "Reduced voice amplitude", "Soft, weak voice (hypophonia)"),
            ("jitter", "gt", 0.08, 0.20,
             "Increased pitch perturbation", "Voice tremor or shakiness"),
            ("stability", "lt", 0.6, 0.15,
             "Poor pitch control", "Difficulty maintaining steady pitch"),
        ],
    },
    "alzheimers": {
        "label": "Alzheimer's disease (cognitive decline)",
        "high_above": 0.4,
        "moderate_above": 0.2,
        "rules": [
            ("pitch", "outside", (100.0, 280.0), 0.15,
             "Abnormal pitch range", "Difficulty controlling voice pitch"),
            ("stability", "lt", 0.5, 0.20,
             "Reduced prosodic control", "Monotonous or irregular speech rhythm"),
            ("rms", "outside", (0.03, 0.13), 0.15,
             "Poor volume control", "Inconsistent voice loudness"),
        ],
    },
    "laryngeal_disorders": {
        "label": "Laryngeal disorders",
        "high_above": 0.5,
        "moderate_above": 0.25,
        "rules": [
            ("jitter", "gt", 0.10, 0.30,
             "Severe pitch instability", "Rough, irregular voice quality"),
            ("rms", "lt", 0.02, 0.25,
             "Severely reduced amplitude", "Breathy, weak voice"),
            ("pitch", "lt", 90.0, 0.20,
             "Abnormally low pitch", "Hoarse, deep voice quality"),
        ],
    },
}

# --- Voice characteristics ---
BREATHY_MAX_RMS = 0.03
BREATHY_MIN_JITTER = 0.05
ROUGH_MIN_JITTER = 0.08
STRAINED_MIN_RMS = 0.12
STRAINED_MIN_PITCH = 250.0
ARTICULATION_JITTER = [           # checked in order
    (0.10, "severe_impairment"),
    (0.08, "moderate_impairment"),
    (0.06, "mild_impairment"),
]
IRREGULAR_MAX_STABILITY = 0.3
MONOTONE_MAX_STABILITY = 0.6
MONOTONE_MAX_PITCH = 120.0

# --- Overall score ---
QUALITY_GOOD = 70.0
QUALITY_FAIR = 40.0
RISK_SCORE_MEDIUM = 0.3
RISK_SCORE_HIGH = 0.6
