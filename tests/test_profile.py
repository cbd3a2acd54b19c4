"""Tests for the voice profile and recommendations."""

import pytest

from voicelab.findings import generate
from voicelab.profile import (
    ARTICULATION_CLEAR,
    ASSESSMENT_NORMAL,
    ASSESSMENT_REVIEW,
    DEFAULT_RECOMMENDATIONS,
    DISCLAIMERS,
    FINDING_RECOMMENDATIONS,
    PROSODY_IRREGULAR,
    PROSODY_MONOTONE,
    PROSODY_NORMAL,
    QUALITY_BREATHY,
    QUALITY_NORMAL,
    QUALITY_RECOMMENDATIONS,
    QUALITY_ROUGH,
    QUALITY_STRAINED,
    RISK_RECOMMENDATIONS,
    profile,
    recommend,
)
from voicelab.risk import assess
from voicelab.session import SessionAggregate


def _healthy():
    return SessionAggregate(peak_rms=0.06, peak_pitch_hz=160.0, peak_jitter=0.02)


class TestVoiceQuality:
    def test_normal(self):
        assert profile(_healthy(), 0.9).voice_quality == QUALITY_NORMAL

    def test_breathy(self):
        agg = SessionAggregate(peak_rms=0.02, peak_pitch_hz=160.0, peak_jitter=0.06)
        assert profile(agg, 0.9).voice_quality == QUALITY_BREATHY

    def test_breathy_takes_precedence_over_rough(self):
        agg = SessionAggregate(peak_rms=0.02, peak_pitch_hz=160.0, peak_jitter=0.09)
        assert profile(agg, 0.9).voice_quality == QUALITY_BREATHY

    def test_rough(self):
        agg = SessionAggregate(peak_rms=0.06, peak_pitch_hz=160.0, peak_jitter=0.09)
        assert profile(agg, 0.9).voice_quality == QUALITY_ROUGH

    def test_strained(self):
        agg = SessionAggregate(peak_rms=0.13, peak_pitch_hz=260.0, peak_jitter=0.02)
        assert profile(agg, 0.9).voice_quality == QUALITY_STRAINED

    def test_zero_rms_is_not_breathy(self):
        agg = SessionAggregate(peak_rms=0.0, peak_jitter=0.06)
        assert profile(agg, 0.9).voice_quality == QUALITY_NORMAL


class TestArticulation:
    @pytest.mark.parametrize("jitter,label", [
        (None, ARTICULATION_CLEAR),
        (0.02, ARTICULATION_CLEAR),
        (0.06, ARTICULATION_CLEAR),
        (0.07, "mild_impairment"),
        (0.09, "moderate_impairment"),
        (0.12, "severe_impairment"),
    ])
    def test_levels(self, jitter, label):
        agg = SessionAggregate(peak_rms=0.06, peak_jitter=jitter)
        assert profile(agg, 0.9).articulation == label


class TestProsody:
    def test_irregular(self):
        assert profile(_healthy(), 0.2).prosody == PROSODY_IRREGULAR

    def test_monotone_needs_low_pitch(self):
        low = SessionAggregate(peak_rms=0.06, peak_pitch_hz=110.0)
        assert profile(low, 0.5).prosody == PROSODY_MONOTONE
        assert profile(_healthy(), 0.5).prosody == PROSODY_NORMAL

    def test_stable(self):
        assert profile(_healthy(), 0.95).prosody == PROSODY_NORMAL


class TestProfile:
    def test_stability_clamped_and_rounded(self):
        assert profile(_healthy(), 1.7).pitch_stability == 1.0
        assert profile(_healthy(), -0.3).pitch_stability == 0.0
        assert profile(_healthy(), 0.123456).pitch_stability == 0.1235

    def test_overall_assessment(self):
        assert profile(_healthy(), 0.9).overall_assessment == ASSESSMENT_NORMAL
        assert profile(_healthy(), 0.1).overall_assessment == ASSESSMENT_REVIEW

    def test_to_dict(self):
        d = profile(_healthy(), 0.9).to_dict()
        assert set(d) == {
            "pitch_stability", "voice_quality", "articulation", "prosody", "overall_assessment",
        }


class TestRecommendations:
    def test_nothing_fired_gives_default_and_disclaimers(self):
        agg = SessionAggregate()
        recs = recommend(generate(agg), assess(agg), profile(agg, 0.5))
        assert recs == DEFAULT_RECOMMENDATIONS + DISCLAIMERS

    def test_healthy_voice_gets_default_pair(self):
        agg = _healthy()
        recs = recommend(generate(agg), assess(agg), profile(agg, 0.9))
        assert recs[:2] == DEFAULT_RECOMMENDATIONS
        assert recs[-2:] == DISCLAIMERS

    def test_order_findings_then_risks_then_quality(self):
        agg = SessionAggregate(
            peak_rms=0.03, peak_pitch_hz=110.0, peak_jitter=0.09, pitch_stability=0.55,
        )
        characteristics = profile(agg, 0.55)
        recs = recommend(generate(agg), assess(agg), characteristics)

        abnormal = FINDING_RECOMMENDATIONS["abnormal"]
        borderline = FINDING_RECOMMENDATIONS["borderline"]
        pd_high = RISK_RECOMMENDATIONS["parkinsons"]["high"]
        rough = QUALITY_RECOMMENDATIONS[QUALITY_ROUGH]

        # jitter 0.09 is borderline, pitch 110 normal, rms 0.03 normal
        assert abnormal[0] not in recs
        expected = borderline + pd_high + [rough] + DISCLAIMERS
        assert recs == expected
        assert DEFAULT_RECOMMENDATIONS[0] not in recs

    def test_abnormal_before_borderline(self):
        agg = SessionAggregate(peak_rms=0.15, peak_pitch_hz=100.0, peak_jitter=0.12)
        recs = recommend(generate(agg), [], profile(agg, 0.9))
        abnormal = FINDING_RECOMMENDATIONS["abnormal"]
        borderline = FINDING_RECOMMENDATIONS["borderline"]
        assert recs.index(abnormal[0]) < recs.index(borderline[0])

    def test_no_duplicates(self):
        agg = SessionAggregate(peak_rms=0.004, peak_pitch_hz=60.0, peak_jitter=0.2)
        findings = generate(agg)
        recs = recommend(findings + findings, assess(agg), profile(agg, 0.1))
        assert len(recs) == len(set(recs))
        assert recs[-2:] == DISCLAIMERS
