"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# ─── ACCOUNTS ────────────────────────────────────────────────────────────────

class AccountCreate(BaseModel):
    name: str = Field(min_length=1)

class AccountOut(BaseModel):
    id: int
    name: str
    signal_good_threshold: Optional[float] = None
    signal_bad_threshold: Optional[float] = None
    created_at: datetime

    class Config:
        from_attributes = True

class SignalThresholds(BaseModel):
    good_threshold: float
    bad_threshold: float
    is_custom: bool = False

class SignalThresholdsUpdate(BaseModel):
    good_threshold: float
    bad_threshold: float


# ─── METRIC SETS ─────────────────────────────────────────────────────────────

class MetricSettingIn(BaseModel):
    metric_identifier: str = Field(min_length=1)
    label: str = ""
    category: str = ""
    target_value: Optional[float] = None
    higher_is_better: bool = True
    measurement_type: Optional[str] = Field(default=None, pattern="^(Index|Amount)$")

class MetricSettingOut(MetricSettingIn):
    id: int

    class Config:
        from_attributes = True

class MetricSetCreate(BaseModel):
    account_id: int
    name: Optional[str] = Field(default=None, min_length=1)
    enabled_optional_sections: Optional[list[str]] = None
    use_predefined: bool = True
    standard_set_id: Optional[int] = None
    metrics: list[MetricSettingIn] = []

class MetricSetOut(BaseModel):
    id: int
    account_id: int
    name: str
    enabled_optional_sections: list = []
    created_at: datetime
    updated_at: datetime
    settings: list[MetricSettingOut] = []

    class Config:
        from_attributes = True

class RecalculationOut(BaseModel):
    updated: int
    errors: list[str] = []
    message: str = ""

class MetricSetUpdateResponse(BaseModel):
    metric_set: MetricSetOut
    recalculation: RecalculationOut


# ─── STANDARD METRIC SETS ────────────────────────────────────────────────────

class StandardMetricSetCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    enabled_optional_sections: Optional[list[str]] = None
    use_predefined: bool = False
    metrics: list[MetricSettingIn] = []

class StandardMetricSetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    enabled_optional_sections: Optional[list[str]] = None

class StandardMetricSetOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    enabled_optional_sections: Optional[list] = None
    created_at: datetime
    updated_at: datetime
    settings: list[MetricSettingOut] = []

    class Config:
        from_attributes = True


# ─── ASSESSMENTS ─────────────────────────────────────────────────────────────

class AssessmentCreate(BaseModel):
    account_id: int
    target_metric_set_id: Optional[int] = None
    assessment_name: str = Field(min_length=1)
    address: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    site_status: Optional[str] = None

class AssessmentUpdate(BaseModel):
    target_metric_set_id: Optional[int] = None
    assessment_name: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    site_status: Optional[str] = None
    executive_summary: Optional[str] = None

class MetricValueIn(BaseModel):
    metric_identifier: str = Field(min_length=1)
    entered_value: Optional[float] = None
    label: str = ""
    category: str = ""
    notes: str = ""

class MetricValueOut(MetricValueIn):
    id: int
    signal_score: Optional[float] = None
    display_label: Optional[str] = None

    class Config:
        from_attributes = True

class SiteVisitRatingIn(BaseModel):
    criterion_key: str
    grade: Optional[str] = None
    notes: str = ""

class SiteVisitRatingOut(SiteVisitRatingIn):
    id: int

    class Config:
        from_attributes = True

class AssessmentSummaryOut(BaseModel):
    id: int
    account_id: int
    target_metric_set_id: Optional[int]
    assessment_name: str
    address: str
    latitude: Optional[float]
    longitude: Optional[float]
    site_status: str
    site_signal_score: Optional[int]
    completion_percentage: int
    signal_status: str = "N/A"
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class AssessmentOut(AssessmentSummaryOut):
    executive_summary: Optional[str] = None
    metric_values: list[MetricValueOut] = []
    site_visit_ratings: list[SiteVisitRatingOut] = []

class AssessmentListResponse(BaseModel):
    total: int
    assessments: list[AssessmentSummaryOut]


# ─── SCORES ──────────────────────────────────────────────────────────────────

class MetricScoreRequest(BaseModel):
    entered_value: Optional[float] = None
    target_value: Optional[float] = None
    higher_is_better: bool = True
    metric_identifier: Optional[str] = None

class OverallScoreRequest(BaseModel):
    scores: list[Optional[float]]

class CompletionRequest(BaseModel):
    total_items: int
    completed_items: int

class ScoreResponse(BaseModel):
    score: Optional[float]
    signal_status: Optional[str] = None
