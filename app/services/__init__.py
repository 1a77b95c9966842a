from app.services.scoring import (
    DropdownMetric, MetricScoreInput, SignalStatus,
    metric_signal_score, overall_signal_score, completion_percentage,
    signal_status, validate_thresholds,
)
from app.services.recalculation import (
    score_assessment, recalculate_assessment,
    recalculate_assessments_for_metric_set, recalculate_all, scheduled_recalculation_job,
)
