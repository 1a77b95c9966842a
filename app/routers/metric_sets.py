"""Target metric set endpoints — define targets and rescore affected assessments."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import (
    MetricSetting, SiteAssessment, StandardMetricSet, TargetMetricSet, get_db,
)
from app.models.schemas import (
    MetricSetCreate, MetricSetOut, MetricSettingIn,
    MetricSetUpdateResponse, RecalculationOut,
)
from app.routers.accounts import get_account_or_404
from app.services.catalog import (
    OPTIONAL_SECTIONS, default_metric_settings, infer_optional_sections, predefined_metric,
)
from app.services.recalculation import (
    recalculate_assessment, recalculate_assessments_for_metric_set,
)

router = APIRouter(prefix="/metric-sets", tags=["metric-sets"])

SETTING_COLUMNS = (
    "metric_identifier", "label", "category", "target_value",
    "higher_is_better", "measurement_type",
)


async def load_metric_set(db: AsyncSession, metric_set_id: int) -> TargetMetricSet:
    result = await db.execute(
        select(TargetMetricSet)
        .where(TargetMetricSet.id == metric_set_id)
        .execution_options(populate_existing=True)
    )
    metric_set = result.scalar_one_or_none()
    if not metric_set:
        raise HTTPException(status_code=404, detail="Metric set not found")
    return metric_set


def setting_fields(data: BaseModel, exclude_unset: bool = False) -> dict:
    """Request fields for a metric row, with blank label/category taken from the catalog.

    With ``exclude_unset`` only the fields the client sent are returned, so
    an update leaves the rest of the stored row alone.
    """
    fields = data.model_dump(exclude_unset=exclude_unset)
    fields["metric_identifier"] = data.metric_identifier
    known = predefined_metric(data.metric_identifier)
    if known:
        for key in ("label", "category"):
            if key in fields and not fields[key]:
                fields[key] = known[key]
    return fields


async def _standard_seed(db: AsyncSession, standard_set_id: int) -> StandardMetricSet:
    standard = await db.get(StandardMetricSet, standard_set_id)
    if not standard:
        raise HTTPException(status_code=400, detail="Standard metric set not found")
    if not standard.settings:
        raise HTTPException(status_code=400, detail="Standard metric set has no metrics to copy")
    return standard


@router.post("", response_model=MetricSetOut, status_code=201)
async def create_metric_set(data: MetricSetCreate, db: AsyncSession = Depends(get_db)):
    """Create a metric set, seeded from a standard set or the predefined catalog.

    A standard set takes precedence over ``use_predefined``. Metrics in the
    request are applied on top of the seed.
    """
    await get_account_or_404(db, data.account_id)

    by_id = {}
    name = data.name
    enabled = data.enabled_optional_sections

    if data.standard_set_id is not None:
        standard = await _standard_seed(db, data.standard_set_id)
        for s in standard.settings:
            by_id[s.metric_identifier] = {col: getattr(s, col) for col in SETTING_COLUMNS}
        name = name or f"{standard.name} (Copy)"
        if enabled is None:
            enabled = (
                standard.enabled_optional_sections
                if standard.enabled_optional_sections is not None
                else infer_optional_sections(s.category for s in standard.settings)
            )
    elif data.use_predefined:
        for fields in default_metric_settings(enabled):
            by_id[fields["metric_identifier"]] = fields

    if not name:
        raise HTTPException(status_code=400, detail="name is required unless copying a standard set")

    for metric in data.metrics:
        by_id[metric.metric_identifier] = setting_fields(metric)

    metric_set = TargetMetricSet(
        account_id=data.account_id,
        name=name,
        enabled_optional_sections=OPTIONAL_SECTIONS if enabled is None else enabled,
        settings=[MetricSetting(**fields) for fields in by_id.values()],
    )
    db.add(metric_set)
    await db.flush()
    return await load_metric_set(db, metric_set.id)


@router.get("", response_model=list[MetricSetOut])
async def list_metric_sets(
    account_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    query = select(TargetMetricSet).order_by(TargetMetricSet.created_at.desc())
    if account_id is not None:
        query = query.where(TargetMetricSet.account_id == account_id)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{metric_set_id}", response_model=MetricSetOut)
async def get_metric_set(metric_set_id: int, db: AsyncSession = Depends(get_db)):
    return await load_metric_set(db, metric_set_id)


@router.put("/{metric_set_id}/metrics", response_model=MetricSetUpdateResponse)
async def upsert_metric_settings(
    metric_set_id: int,
    metrics: list[MetricSettingIn],
    db: AsyncSession = Depends(get_db),
):
    """Insert or update metric targets, then rescore every assessment using the set."""
    metric_set = await load_metric_set(db, metric_set_id)
    existing = {s.metric_identifier: s for s in metric_set.settings}

    for metric in metrics:
        setting = existing.get(metric.metric_identifier)
        if setting:
            for field, value in setting_fields(metric, exclude_unset=True).items():
                setattr(setting, field, value)
        else:
            setting = MetricSetting(**setting_fields(metric))
            metric_set.settings.append(setting)
            existing[metric.metric_identifier] = setting

    metric_set.updated_at = datetime.utcnow()
    await db.flush()

    result = await recalculate_assessments_for_metric_set(db, metric_set_id)
    return MetricSetUpdateResponse(
        metric_set=MetricSetOut.model_validate(await load_metric_set(db, metric_set_id)),
        recalculation=RecalculationOut(
            updated=result.updated, errors=result.errors, message=result.message,
        ),
    )


@router.delete("/{metric_set_id}/metrics/{metric_identifier}", response_model=MetricSetUpdateResponse)
async def delete_metric_setting(
    metric_set_id: int,
    metric_identifier: str,
    db: AsyncSession = Depends(get_db),
):
    """Remove one metric from the set and rescore its assessments."""
    metric_set = await load_metric_set(db, metric_set_id)
    setting = next((s for s in metric_set.settings if s.metric_identifier == metric_identifier), None)
    if not setting:
        raise HTTPException(status_code=404, detail="Metric not in set")

    metric_set.settings.remove(setting)
    metric_set.updated_at = datetime.utcnow()
    await db.flush()

    result = await recalculate_assessments_for_metric_set(db, metric_set_id)
    return MetricSetUpdateResponse(
        metric_set=MetricSetOut.model_validate(await load_metric_set(db, metric_set_id)),
        recalculation=RecalculationOut(
            updated=result.updated, errors=result.errors, message=result.message,
        ),
    )


@router.delete("/{metric_set_id}")
async def delete_metric_set(metric_set_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a metric set. Assessments using it are detached and rescored without targets."""
    metric_set = await load_metric_set(db, metric_set_id)
    result = await db.execute(
        select(SiteAssessment.id).where(SiteAssessment.target_metric_set_id == metric_set_id)
    )
    assessment_ids = result.scalars().all()

    await db.execute(
        update(SiteAssessment)
        .where(SiteAssessment.target_metric_set_id == metric_set_id)
        .values(target_metric_set_id=None)
    )
    await db.delete(metric_set)
    await db.flush()

    for assessment_id in assessment_ids:
        await recalculate_assessment(db, assessment_id)

    return {"message": "Metric set deleted", "detached": len(assessment_ids)}
