"""Standard metric set endpoints — shared templates for new target metric sets."""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.database import StandardMetricSet, StandardMetricSetting, get_db
from app.models.schemas import (
    MetricSettingIn, StandardMetricSetCreate, StandardMetricSetOut, StandardMetricSetUpdate,
)
from app.routers.metric_sets import setting_fields
from app.services.catalog import default_metric_settings

router = APIRouter(prefix="/standard-metric-sets", tags=["standard-metric-sets"])


async def load_standard_set(db: AsyncSession, standard_set_id: int) -> StandardMetricSet:
    result = await db.execute(
        select(StandardMetricSet)
        .where(StandardMetricSet.id == standard_set_id)
        .execution_options(populate_existing=True)
    )
    standard = result.scalar_one_or_none()
    if not standard:
        raise HTTPException(status_code=404, detail="Standard metric set not found")
    return standard


@router.post("", response_model=StandardMetricSetOut, status_code=201)
async def create_standard_set(data: StandardMetricSetCreate, db: AsyncSession = Depends(get_db)):
    by_id = {}
    if data.use_predefined:
        for fields in default_metric_settings(data.enabled_optional_sections):
            by_id[fields["metric_identifier"]] = fields
    for metric in data.metrics:
        by_id[metric.metric_identifier] = setting_fields(metric)

    standard = StandardMetricSet(
        name=data.name,
        description=data.description,
        enabled_optional_sections=data.enabled_optional_sections,
        settings=[StandardMetricSetting(**fields) for fields in by_id.values()],
    )
    db.add(standard)
    await db.flush()
    return await load_standard_set(db, standard.id)


@router.get("", response_model=list[StandardMetricSetOut])
async def list_standard_sets(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(StandardMetricSet).order_by(StandardMetricSet.created_at.desc()))
    return result.scalars().all()


@router.get("/{standard_set_id}", response_model=StandardMetricSetOut)
async def get_standard_set(standard_set_id: int, db: AsyncSession = Depends(get_db)):
    return await load_standard_set(db, standard_set_id)


@router.patch("/{standard_set_id}", response_model=StandardMetricSetOut)
async def update_standard_set(
    standard_set_id: int,
    data: StandardMetricSetUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Rename, describe, or change the enabled sections of a template."""
    standard = await load_standard_set(db, standard_set_id)
    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise HTTPException(status_code=400, detail="name cannot be null")

    for field, value in update_data.items():
        setattr(standard, field, value)
    standard.updated_at = datetime.utcnow()
    await db.flush()
    return await load_standard_set(db, standard_set_id)


@router.put("/{standard_set_id}/metrics", response_model=StandardMetricSetOut)
async def replace_standard_settings(
    standard_set_id: int,
    metrics: list[MetricSettingIn],
    db: AsyncSession = Depends(get_db),
):
    """Replace every metric in the template. Sets already copied from it are unaffected."""
    standard = await load_standard_set(db, standard_set_id)

    by_id = {m.metric_identifier: setting_fields(m) for m in metrics}
    standard.settings.clear()
    await db.flush()
    standard.settings.extend(StandardMetricSetting(**fields) for fields in by_id.values())
    standard.updated_at = datetime.utcnow()
    await db.flush()
    return await load_standard_set(db, standard_set_id)


@router.delete("/{standard_set_id}")
async def delete_standard_set(standard_set_id: int, db: AsyncSession = Depends(get_db)):
    standard = await load_standard_set(db, standard_set_id)
    await db.delete(standard)
    return {"message": "Standard metric set deleted"}
