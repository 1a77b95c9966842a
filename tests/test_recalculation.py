"""Tests for assessment scoring and recalculation."""
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from app.models.database import (
    Account, AssessmentMetricValue, MetricSetting, SiteAssessment,
    SiteVisitRating, TargetMetricSet,
)
from app.services import recalculation
from app.services.recalculation import (
    RecalculationResult,
    recalculate_assessment,
    recalculate_assessments_for_metric_set,
    score_assessment,
)


def _setting(metric_identifier, target_value, higher_is_better=True):
    return SimpleNamespace(
        metric_identifier=metric_identifier,
        target_value=target_value,
        higher_is_better=higher_is_better,
    )


def _value(metric_identifier, entered_value):
    return SimpleNamespace(metric_identifier=metric_identifier, entered_value=entered_value)


def _rating(criterion_key, grade):
    return SimpleNamespace(criterion_key=criterion_key, grade=grade)


METRIC_SET = SimpleNamespace(settings=[
    _setting("traffic_annual_visits", 1000),
    _setting("expenses_effective_wage", 20, higher_is_better=False),
    _setting("demand_supply_balance", 0),
])


class TestScoreAssessment:

    def test_empty_assessment(self):
        assessment = SimpleNamespace(id=1, metric_values=[], site_visit_ratings=[])
        scores = score_assessment(assessment, METRIC_SET)
        assert scores.site_signal_score is None
        assert scores.completion_percentage == 0
        assert scores.metric_scores == {
            "traffic_annual_visits": None,
            "expenses_effective_wage": None,
            "demand_supply_balance": None,
        }

    def test_scores_and_completion(self):
        assessment = SimpleNamespace(
            id=1,
            metric_values=[
                _value("traffic_annual_visits", 500),
                _value("expenses_effective_wage", 25),
                _value("demand_supply_balance", 100),
            ],
            site_visit_ratings=[_rating("visibility", "A"), _rating("parking", "C")],
        )
        scores = score_assessment(assessment, METRIC_SET)
        assert scores.metric_scores == {
            "traffic_annual_visits": 50,
            "expenses_effective_wage": 80,
            "demand_supply_balance": 100,
        }
        assert scores.site_signal_score == 77
        # 3 metrics + 2 graded criteria out of 3 metrics + 10 criteria
        assert scores.completion_percentage == 38

    def test_values_outside_the_set_are_ignored(self):
        assessment = SimpleNamespace(
            id=1,
            metric_values=[_value("financial_profitability", 10), _value("traffic_annual_visits", None)],
            site_visit_ratings=[],
        )
        scores = score_assessment(assessment, METRIC_SET)
        assert scores.site_signal_score is None
        assert scores.completion_percentage == 0

    def test_ungraded_and_unknown_criteria_do_not_count(self):
        assessment = SimpleNamespace(
            id=1,
            metric_values=[],
            site_visit_ratings=[_rating("visibility", None), _rating("made_up", "A"), _rating("safety", "B")],
        )
        assert score_assessment(assessment, METRIC_SET).completion_percentage == 8

    def test_without_metric_set(self):
        assessment = SimpleNamespace(
            id=1,
            metric_values=[_value("traffic_annual_visits", 500)],
            site_visit_ratings=[_rating(key, "A") for key in (
                "visibility", "signage", "accessibility", "parking", "loading",
            )],
        )
        scores = score_assessment(assessment, None)
        assert scores.site_signal_score is None
        assert scores.completion_percentage == 50


def test_recalculation_result_message():
    assert RecalculationResult(2, []).message == "Successfully updated 2 assessments"
    assert RecalculationResult(1, ["boom"]).message == "Updated 1 assessments with 1 errors"


# ─── PERSISTENCE ────────────────────────────────────────────────────────────

@pytest.fixture
async def seeded(session_factory):
    async with session_factory() as session:
        account = Account(name="Taco Co")
        metric_set = TargetMetricSet(
            account=account,
            name="Urban",
            settings=[
                MetricSetting(metric_identifier="traffic_annual_visits", target_value=1000, higher_is_better=True),
                MetricSetting(metric_identifier="expenses_effective_wage", target_value=20, higher_is_better=False),
            ],
        )
        first = SiteAssessment(
            account=account,
            metric_set=metric_set,
            assessment_name="Main St",
            metric_values=[
                AssessmentMetricValue(metric_identifier="traffic_annual_visits", entered_value=500),
                AssessmentMetricValue(metric_identifier="expenses_effective_wage", entered_value=25),
            ],
            site_visit_ratings=[SiteVisitRating(criterion_key="safety", grade="A")],
        )
        second = SiteAssessment(
            account=account,
            metric_set=metric_set,
            assessment_name="Elm St",
            metric_values=[
                AssessmentMetricValue(metric_identifier="traffic_annual_visits", entered_value=2000),
            ],
        )
        session.add_all([account, metric_set, first, second])
        await session.commit()
        return SimpleNamespace(metric_set_id=metric_set.id, first_id=first.id, second_id=second.id)


@pytest.mark.anyio
async def test_recalculate_assessment(session_factory, seeded):
    async with session_factory() as session:
        assessment = await recalculate_assessment(session, seeded.first_id)
        await session.commit()

    assert assessment.site_signal_score == 65
    # 2 metrics + 1 criterion out of 12
    assert assessment.completion_percentage == 25
    scores = {mv.metric_identifier: mv.signal_score for mv in assessment.metric_values}
    assert scores == {"traffic_annual_visits": 50, "expenses_effective_wage": 80}


@pytest.mark.anyio
async def test_recalculate_missing_assessment(session_factory):
    async with session_factory() as session:
        with pytest.raises(LookupError):
            await recalculate_assessment(session, 999)


@pytest.mark.anyio
async def test_recalculate_metric_set(session_factory, seeded):
    async with session_factory() as session:
        setting = (await session.execute(
            select(MetricSetting).where(MetricSetting.metric_identifier == "traffic_annual_visits")
        )).scalar_one()
        setting.target_value = 4000
        await session.flush()

        result = await recalculate_assessments_for_metric_set(session, seeded.metric_set_id)
        await session.commit()

    assert result == RecalculationResult(2, [])

    async with session_factory() as session:
        first = await session.get(SiteAssessment, seeded.first_id)
        second = await session.get(SiteAssessment, seeded.second_id)
        # (13 + 80) / 2
        assert first.site_signal_score == 47
        assert second.site_signal_score == 50


@pytest.mark.anyio
async def test_recalculate_unknown_metric_set(session_factory):
    async with session_factory() as session:
        result = await recalculate_assessments_for_metric_set(session, 42)
    assert result.updated == 0
    assert result.errors == ["Metric set 42 not found"]


@pytest.mark.anyio
async def test_recalculate_all(session_factory, seeded, monkeypatch):
    monkeypatch.setattr(recalculation, "get_session_factory", lambda: session_factory)
    result = await recalculation.recalculate_all()
    assert result == RecalculationResult(2, [])

    async with session_factory() as session:
        first = await session.get(SiteAssessment, seeded.first_id)
        assert first.site_signal_score == 65


@pytest.mark.anyio
async def test_scheduled_job_never_raises(monkeypatch, caplog):
    async def _boom():
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(recalculation, "recalculate_all", _boom)
    await recalculation.scheduled_recalculation_job()
    assert "Scheduled score refresh failed: database unavailable" in caplog.text
