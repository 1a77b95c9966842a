"""Site assessment endpoints — record values and ratings, view scores and signal status."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import (
    Account, AssessmentMetricValue, SiteAssessment, SiteVisitRating,
    TargetMetricSet, get_db,
)
from app.models.schemas import (
    AssessmentCreate, AssessmentListResponse, AssessmentOut, AssessmentSummaryOut,
    AssessmentUpdate, MetricValueIn, SiteVisitRatingIn,
)
from app.routers.accounts import get_account_or_404, resolve_thresholds
from app.routers.metric_sets import setting_fields
from app.services.catalog import (
    DEFAULT_SITE_STATUS, SITE_STATUSES, SITE_VISIT_CRITERIA, SITE_VISIT_GRADES,
    dropdown_label,
)
from app.services.recalculation import load_assessment, recalculate_assessment
from app.services.scoring import signal_status

router = APIRouter(prefix="/assessments", tags=["assessments"])

# Columns a PATCH may change but never clear
REQUIRED_FIELDS = ("assessment_name", "site_status")


async def get_assessment_or_404(db: AsyncSession, assessment_id: int) -> SiteAssessment:
    assessment = await load_assessment(db, assessment_id)
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return assessment


async def _check_metric_set(db: AsyncSession, metric_set_id: Optional[int], account_id: int) -> None:
    if metric_set_id is None:
        return
    metric_set = await db.get(TargetMetricSet, metric_set_id)
    if not metric_set or metric_set.account_id != account_id:
        raise HTTPException(status_code=400, detail="Metric set not found for this account")


def _check_status(site_status: Optional[str]) -> None:
    if site_status is not None and site_status not in SITE_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown site status '{site_status}'. Expected one of: {', '.join(SITE_STATUSES)}",
        )


async def _render(db: AsyncSession, assessment: SiteAssessment) -> AssessmentOut:
    """Serialize an assessment with its signal status and dropdown labels."""
    thresholds = resolve_thresholds(await db.get(Account, assessment.account_id))
    out = AssessmentOut.model_validate(assessment)
    out.signal_status = signal_status(
        assessment.site_signal_score, thresholds.good_threshold, thresholds.bad_threshold,
    ).value
    for mv in out.metric_values:
        mv.display_label = dropdown_label(mv.metric_identifier, mv.entered_value)
    return out


@router.post("", response_model=AssessmentOut, status_code=201)
async def create_assessment(data: AssessmentCreate, db: AsyncSession = Depends(get_db)):
    """Create an assessment and compute its initial (empty) scores."""
    await get_account_or_404(db, data.account_id)
    await _check_metric_set(db, data.target_metric_set_id, data.account_id)
    _check_status(data.site_status)

    assessment = SiteAssessment(
        account_id=data.account_id,
        target_metric_set_id=data.target_metric_set_id,
        assessment_name=data.assessment_name,
        address=data.address,
        latitude=data.latitude,
        longitude=data.longitude,
        site_status=data.site_status or DEFAULT_SITE_STATUS,
    )
    db.add(assessment)
    await db.flush()

    assessment = await recalculate_assessment(db, assessment.id)
    return await _render(db, assessment)


@router.get("", response_model=AssessmentListResponse)
async def list_assessments(
    account_id: Optional[int] = Query(None),
    site_status: Optional[str] = Query(None),
    min_score: Optional[int] = Query(None, ge=0, le=100),
    sort_by: str = Query("updated_at", enum=["updated_at", "site_signal_score", "completion_percentage"]),
    sort_dir: str = Query("desc", enum=["asc", "desc"]),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List assessments with filtering, sorting, and pagination."""
    conditions = []
    if account_id is not None:
        conditions.append(SiteAssessment.account_id == account_id)
    if site_status:
        conditions.append(SiteAssessment.site_status == site_status)
    if min_score is not None:
        conditions.append(SiteAssessment.site_signal_score >= min_score)

    query = select(SiteAssessment)
    if conditions:
        query = query.where(and_(*conditions))
    result = await db.execute(query)
    rows = result.scalars().all()

    # Unscored assessments sort last either way
    scored = [a for a in rows if getattr(a, sort_by) is not None]
    unscored = [a for a in rows if getattr(a, sort_by) is None]
    scored.sort(key=lambda a: getattr(a, sort_by), reverse=sort_dir == "desc")
    assessments = scored + unscored

    total = len(assessments)
    page = assessments[offset: offset + limit]

    accounts = {}
    out = []
    for a in page:
        if a.account_id not in accounts:
            accounts[a.account_id] = resolve_thresholds(await db.get(Account, a.account_id))
        thresholds = accounts[a.account_id]
        summary = AssessmentSummaryOut.model_validate(a)
        summary.signal_status = signal_status(
            a.site_signal_score, thresholds.good_threshold, thresholds.bad_threshold,
        ).value
        out.append(summary)

    return AssessmentListResponse(total=total, assessments=out)


@router.get("/{assessment_id}", response_model=AssessmentOut)
async def get_assessment(assessment_id: int, db: AsyncSession = Depends(get_db)):
    assessment = await get_assessment_or_404(db, assessment_id)
    return await _render(db, assessment)


@router.patch("/{assessment_id}", response_model=AssessmentOut)
async def update_assessment(
    assessment_id: int,
    data: AssessmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update assessment details. Switching metric sets rescores the assessment."""
    assessment = await get_assessment_or_404(db, assessment_id)
    update_data = data.model_dump(exclude_unset=True)

    for field in REQUIRED_FIELDS:
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be null")
    if "site_status" in update_data:
        _check_status(update_data["site_status"])
    if "target_metric_set_id" in update_data:
        await _check_metric_set(db, update_data["target_metric_set_id"], assessment.account_id)

    for field, value in update_data.items():
        setattr(assessment, field, value)
    await db.flush()

    assessment = await recalculate_assessment(db, assessment_id)
    return await _render(db, assessment)


@router.put("/{assessment_id}/metric-values", response_model=AssessmentOut)
async def save_metric_values(
    assessment_id: int,
    values: list[MetricValueIn],
    db: AsyncSession = Depends(get_db),
):
    """Insert or update entered metric values, then rescore."""
    assessment = await get_assessment_or_404(db, assessment_id)
    existing = {mv.metric_identifier: mv for mv in assessment.metric_values}

    for value in values:
        mv = existing.get(value.metric_identifier)
        if mv:
            for field, v in setting_fields(value, exclude_unset=True).items():
                setattr(mv, field, v)
        else:
            mv = AssessmentMetricValue(**setting_fields(value))
            assessment.metric_values.append(mv)
            existing[value.metric_identifier] = mv

    await db.flush()
    assessment = await recalculate_assessment(db, assessment_id)
    return await _render(db, assessment)


@router.put("/{assessment_id}/site-visit-ratings", response_model=AssessmentOut)
async def save_site_visit_ratings(
    assessment_id: int,
    ratings: list[SiteVisitRatingIn],
    db: AsyncSession = Depends(get_db),
):
    """Insert or update site-visit grades, then rescore."""
    assessment = await get_assessment_or_404(db, assessment_id)

    for rating in ratings:
        if rating.criterion_key not in SITE_VISIT_CRITERIA:
            raise HTTPException(status_code=400, detail=f"Unknown criterion '{rating.criterion_key}'")
        if rating.grade is not None and rating.grade not in SITE_VISIT_GRADES:
            raise HTTPException(status_code=400, detail=f"Invalid grade '{rating.grade}'")

    existing = {r.criterion_key: r for r in assessment.site_visit_ratings}
    for rating in ratings:
        row = existing.get(rating.criterion_key)
        if row:
            row.grade = rating.grade
            row.notes = rating.notes
        else:
            row = SiteVisitRating(**rating.model_dump())
            assessment.site_visit_ratings.append(row)
            existing[rating.criterion_key] = row

    await db.flush()
    assessment = await recalculate_assessment(db, assessment_id)
    return await _render(db, assessment)


@router.post("/{assessment_id}/recalculate", response_model=AssessmentOut)
async def recalculate(assessment_id: int, db: AsyncSession = Depends(get_db)):
    """Force a rescore against the current metric set."""
    try:
        assessment = await recalculate_assessment(db, assessment_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return await _render(db, assessment)


@router.delete("/{assessment_id}")
async def delete_assessment(assessment_id: int, db: AsyncSession = Depends(get_db)):
    assessment = await get_assessment_or_404(db, assessment_id)
    await db.delete(assessment)
    return {"message": "Assessment deleted"}
