"""Pydantic models for API responses."""

from typing import Optional

from pydantic import BaseModel, Field


class ClinicalFindingSchema(BaseModel):
    category: str
    parameter: str
    value: str
    normal_range: str
    status: str      # "normal", "borderline", "abnormal"
    severity: str    # "normal", "mild", "moderate", "severe"
    statement: str
    clinical_significance: str


class RiskAssessmentSchema(BaseModel):
    condition: str
    label: str
    risk_level: str  # "low", "moderate", "high"
    confidence: float = Field(..., ge=0.0, le=1.0)
    indicators: list[str]
    symptoms: list[str]


class VoiceCharacteristicsSchema(BaseModel):
    pitch_stability: float = Field(..., ge=0.0, le=1.0)
    voice_quality: str
    articulation: str
    prosody: str
    overall_assessment: str


class SessionSummary(BaseModel):
    frames_observed: int
    voiced_frames: int
    duration_sec: float
    pitch_stability: Optional[float] = None
    history_length: int


class AnalysisResponse(BaseModel):
    """Full response to POST /analyze."""
    status: str = "success"
    timestamp: str
    pitch_hz: Optional[float] = None
    note: Optional[str] = None
    loudness: float
    jitter: Optional[float] = None
    quality_score: float = Field(..., ge=0.0, le=100.0)
    quality_label: str
    risk_level: str  # "Low", "Medium", "High"
    signal_source: str
    clinical_findings: list[ClinicalFindingSchema]
    disease_risk_assessment: list[RiskAssessmentSchema]
    voice_characteristics: VoiceCharacteristicsSchema
    recommendations: list[str]
    session: SessionSummary
    processing_time_ms: int


class HealthResponse(BaseModel):
    """Response to GET /health."""
    status: str = "ok"
    version: str
    session_seconds: float
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Standard error response."""
    status: str = "error"
    message: str
    detail: Optional[str] = None
