import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import RemoteFailure
from app.db.session import get_db
from app.schemas.catalog import Dir, KitListParams, KitSortField, split_csv
from app.services.kit_catalog import get_kit_detail, get_related_kits, list_kits

router = APIRouter()
_LOG = logging.getLogger("app.catalog")


@router.get("")
def list_kits_endpoint(
    grade: str | None = Query(None, description="Comma separated grade codes"),
    series: str | None = Query(None, description="Comma separated series ids"),
    scale: str | None = Query(None),
    timeline: str | None = Query(None, description="Comma separated timeline codes"),
    limitedTypes: str | None = Query(None),
    priceMin: int | None = Query(None, ge=0),
    priceMax: int | None = Query(None, ge=0),
    isPbandai: str | None = Query(None, description="Only \"true\" narrows the listing"),
    search: str = Query(""),
    sortBy: KitSortField = Query("release_date"),
    sortOrder: Dir = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.KITS_DEFAULT_PAGE_SIZE, ge=1, le=settings.KITS_MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    params = KitListParams(
        grades=split_csv(grade),
        scales=split_csv(scale),
        timelines=split_csv(timeline),
        series=split_csv(series),
        limited_types=split_csv(limitedTypes),
        price_min=priceMin,
        price_max=priceMax,
        pbandai_only=isPbandai == "true",
        search=search,
        sort_by=sortBy,
        sort_order=sortOrder,
        page=page,
        limit=limit,
    )
    try:
        return list_kits(db, params).to_envelope()
    except SQLAlchemyError:
        _LOG.exception("kit listing failed")
        raise RemoteFailure("Failed to fetch kits")


@router.get("/{kit_id}")
def get_kit_endpoint(kit_id: str, db: Session = Depends(get_db)):
    try:
        return get_kit_detail(db, kit_id)
    except SQLAlchemyError:
        _LOG.exception("kit detail failed id=%s", kit_id)
        raise RemoteFailure("Failed to fetch kit")


@router.get("/{kit_id}/related")
def get_related_kits_endpoint(kit_id: str, db: Session = Depends(get_db)):
    try:
        return {"data": get_related_kits(db, kit_id), "error": None}
    except SQLAlchemyError:
        _LOG.exception("related kits failed id=%s", kit_id)
        raise RemoteFailure("Failed to fetch related kits")
