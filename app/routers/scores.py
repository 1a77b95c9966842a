"""Score endpoints — stateless access to the scoring engine."""

from fastapi import APIRouter

from app.config import get_settings
from app.models.schemas import CompletionRequest, MetricScoreRequest, OverallScoreRequest, ScoreResponse
from app.services.scoring import (
    MetricScoreInput, completion_percentage, metric_signal_score,
    overall_signal_score, signal_status,
)

router = APIRouter(prefix="/scores", tags=["scores"])


def _with_status(score) -> ScoreResponse:
    settings = get_settings()
    status = signal_status(score, settings.default_good_threshold, settings.default_bad_threshold)
    return ScoreResponse(score=score, signal_status=status.value)


@router.post("/metric", response_model=ScoreResponse)
async def score_metric(data: MetricScoreRequest):
    """Score a single entered value against a target."""
    score = metric_signal_score(
        MetricScoreInput(data.entered_value, data.target_value, data.higher_is_better),
        data.metric_identifier,
    )
    return _with_status(score)


@router.post("/overall", response_model=ScoreResponse)
async def score_overall(data: OverallScoreRequest):
    return _with_status(overall_signal_score(data.scores))


@router.post("/completion", response_model=ScoreResponse)
async def score_completion(data: CompletionRequest):
    return ScoreResponse(score=completion_percentage(data.total_items, data.completed_items))
