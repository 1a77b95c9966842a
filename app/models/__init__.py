from app.models.database import (
    Base, Account, TargetMetricSet, MetricSetting, SiteAssessment,
    AssessmentMetricValue, SiteVisitRating, StandardMetricSet, StandardMetricSetting,
    get_engine, get_session_factory, get_db, init_db,
)
from app.models.schemas import (
    AccountCreate, AccountOut, SignalThresholds, SignalThresholdsUpdate,
    MetricSettingIn, MetricSettingOut, MetricSetCreate, MetricSetOut,
    RecalculationOut, MetricSetUpdateResponse,
    StandardMetricSetCreate, StandardMetricSetUpdate, StandardMetricSetOut,
    AssessmentCreate, AssessmentUpdate, AssessmentSummaryOut, AssessmentOut,
    AssessmentListResponse, MetricValueIn, MetricValueOut,
    SiteVisitRatingIn, SiteVisitRatingOut,
    MetricScoreRequest, OverallScoreRequest, CompletionRequest, ScoreResponse,
)
