"""Assessment recalculation — scores assessments against their metric sets and persists results."""

import logging
from datetime import datetime
from typing import NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import SiteAssessment, TargetMetricSet, get_session_factory
from app.services.catalog import SITE_VISIT_CRITERIA
from app.services.scoring import (
    MetricScoreInput, metric_signal_score, overall_signal_score, completion_percentage,
)

logger = logging.getLogger("sitesignal.recalculation")


class AssessmentScores(NamedTuple):
    site_signal_score: Optional[int]
    completion_percentage: int
    metric_scores: dict[str, Optional[float]]


class RecalculationResult(NamedTuple):
    updated: int
    errors: list[str]

    @property
    def message(self) -> str:
        if self.errors:
            return f"Updated {self.updated} assessments with {len(self.errors)} errors"
        return f"Successfully updated {self.updated} assessments"


# ─── SCORING ────────────────────────────────────────────────────────────────

def score_assessment(assessment, metric_set) -> AssessmentScores:
    """Score one assessment against a metric set without touching the database.

    Completion counts every metric in the set plus the fixed site-visit
    criteria; an item is complete once it has an entered value or a grade.
    """
    settings = list(metric_set.settings) if metric_set is not None else []
    entered = {
        mv.metric_identifier: mv.entered_value
        for mv in assessment.metric_values
        if mv.entered_value is not None
    }

    metric_scores: dict[str, Optional[float]] = {}
    for setting in settings:
        value = entered.get(setting.metric_identifier)
        score = metric_signal_score(
            MetricScoreInput(value, setting.target_value, setting.higher_is_better),
            setting.metric_identifier,
        )
        if value is not None and score is None:
            logger.debug(
                f"Assessment {assessment.id}: {setting.metric_identifier} "
                f"has a value but no score (target={setting.target_value})"
            )
        metric_scores[setting.metric_identifier] = score

    completed_metrics = sum(1 for s in settings if s.metric_identifier in entered)
    completed_visits = sum(
        1 for r in assessment.site_visit_ratings
        if r.grade and r.criterion_key in SITE_VISIT_CRITERIA
    )

    return AssessmentScores(
        site_signal_score=overall_signal_score(metric_scores.values()),
        completion_percentage=completion_percentage(
            len(settings) + len(SITE_VISIT_CRITERIA),
            completed_metrics + completed_visits,
        ),
        metric_scores=metric_scores,
    )


def apply_scores(assessment: SiteAssessment, scores: AssessmentScores) -> None:
    """Write computed scores onto the assessment and its metric values."""
    for mv in assessment.metric_values:
        mv.signal_score = scores.metric_scores.get(mv.metric_identifier)
    assessment.site_signal_score = scores.site_signal_score
    assessment.completion_percentage = scores.completion_percentage
    assessment.updated_at = datetime.utcnow()


# ─── PERSISTENCE ────────────────────────────────────────────────────────────

async def load_assessment(session: AsyncSession, assessment_id: int) -> Optional[SiteAssessment]:
    result = await session.execute(
        select(SiteAssessment)
        .where(SiteAssessment.id == assessment_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def recalculate_assessment(session: AsyncSession, assessment_id: int) -> SiteAssessment:
    """Recompute and persist one assessment's scores."""
    assessment = await load_assessment(session, assessment_id)
    if assessment is None:
        raise LookupError(f"Assessment {assessment_id} not found")

    scores = score_assessment(assessment, assessment.metric_set)
    apply_scores(assessment, scores)
    await session.flush()

    logger.info(
        f"Updated assessment {assessment.id}: score={scores.site_signal_score}, "
        f"completion={scores.completion_percentage}"
    )
    return assessment


async def recalculate_assessments_for_metric_set(
    session: AsyncSession,
    metric_set_id: int,
) -> RecalculationResult:
    """Recompute every assessment scored against a metric set.

    Each assessment runs in its own savepoint so one failure doesn't
    roll back the others.
    """
    result = await session.execute(
        select(TargetMetricSet)
        .where(TargetMetricSet.id == metric_set_id)
        .execution_options(populate_existing=True)
    )
    metric_set = result.scalar_one_or_none()
    if metric_set is None:
        return RecalculationResult(0, [f"Metric set {metric_set_id} not found"])

    result = await session.execute(
        select(SiteAssessment)
        .where(SiteAssessment.target_metric_set_id == metric_set_id)
        .execution_options(populate_existing=True)
    )
    assessments = result.scalars().all()
    if not assessments:
        logger.info(f"No assessments found for metric set {metric_set_id}")
        return RecalculationResult(0, [])

    errors = []
    updated = 0
    for assessment in assessments:
        assessment_id = assessment.id
        name = assessment.assessment_name or assessment_id
        try:
            async with session.begin_nested():
                apply_scores(assessment, score_assessment(assessment, metric_set))
                await session.flush()
            updated += 1
        except Exception as e:
            logger.error(f"Error updating assessment {assessment_id}: {e}")
            errors.append(f"Failed to update assessment {name}: {e}")

    logger.info(
        f"Recalculation for metric set {metric_set_id} complete: "
        f"{updated} updated, {len(errors)} errors"
    )
    return RecalculationResult(updated, errors)


async def recalculate_all() -> RecalculationResult:
    """Refresh scores for every assessment. Entry point for the scheduler."""
    session_factory = get_session_factory()
    errors = []
    updated = 0

    async with session_factory() as session:
        try:
            result = await session.execute(select(SiteAssessment))
            for assessment in result.scalars().all():
                assessment_id = assessment.id
                try:
                    async with session.begin_nested():
                        apply_scores(assessment, score_assessment(assessment, assessment.metric_set))
                        await session.flush()
                    updated += 1
                except Exception as e:
                    logger.error(f"Error updating assessment {assessment_id}: {e}")
                    errors.append(f"Failed to update assessment {assessment_id}: {e}")

            await session.commit()

        except Exception as e:
            await session.rollback()
            logger.error(f"Full recalculation failed: {e}")
            raise

    return RecalculationResult(updated, errors)


async def scheduled_recalculation_job():
    """Called by APScheduler on an interval."""
    logger.info("=== Scheduled score refresh starting ===")

    try:
        result = await recalculate_all()
        logger.info(f"=== Scheduled score refresh complete: {result.message} ===")
    except Exception as e:
        logger.error(f"=== Scheduled score refresh failed: {e} ===")
