"""Catalog endpoints — predefined metrics and site-visit criteria."""

from fastapi import APIRouter

from app.services.catalog import (
    DROPDOWN_OPTIONS, PREDEFINED_BY_ID, SECTION_ORDER, SITE_STATUSES,
    SITE_VISIT_CRITERIA, SITE_VISIT_GRADES,
)
from app.services.scoring import DropdownMetric

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("/metrics")
async def list_predefined_metrics():
    """Predefined metrics, with dropdown options where the metric is pre-scored."""
    metrics = []
    for metric_id, info in PREDEFINED_BY_ID.items():
        options = DROPDOWN_OPTIONS.get(DropdownMetric.lookup(metric_id))
        metrics.append({
            **info,
            "dropdown_options": (
                [{"label": label, "value": value} for label, value in options]
                if options else None
            ),
        })
    return {"sections": SECTION_ORDER, "metrics": metrics}


@router.get("/site-visit-criteria")
async def list_site_visit_criteria():
    return {
        "grades": list(SITE_VISIT_GRADES),
        "criteria": [
            {"key": key, "label": label, "description": description}
            for key, (label, description) in SITE_VISIT_CRITERIA.items()
        ],
    }


@router.get("/site-statuses")
async def list_site_statuses():
    return {"statuses": SITE_STATUSES}
