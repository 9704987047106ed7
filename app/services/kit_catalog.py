from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFound, ValidationError
from app.models.faction import Faction
from app.models.grade import Grade
from app.models.kit import GundamKit
from app.models.kit_relation import KitRelation
from app.models.limited_type import LimitedType
from app.models.mobile_suit import MobileSuit
from app.models.mobile_suit_pilot import MobileSuitPilot
from app.models.ms_organization import MsOrganization
from app.models.org_faction_membership import OrgFactionMembership
from app.models.organization import Organization
from app.models.pilot import Pilot
from app.models.series import Series
from app.models.timeline import Timeline
from app.schemas.catalog import KitListParams
from app.schemas.list_query import ListQuery, RangeValue
from app.services.list_query import run_list_query
from app.services.pager import PageResult
from app.services.result_shaper import pick_primary, row_to_dict, series_summary, shape_kit_rows

_LOG = logging.getLogger("app.catalog")

KIT_TABLE = "gundam_kits"
KIT_SEARCH_FIELDS = ("name_ko", "name_en")
KIT_SORT_FIELDS = ("release_date", "name_ko", "price_krw", "view_count")
KIT_FILTERABLE_FIELDS = ("grade_id", "series_id", "limited_type_id", "price_krw", "is_pbandai")
RELATION_TYPES = ("variant", "series", "similar")
SAME_MOBILE_SUIT = "same_mobile_suit"


def _active_kit_criteria() -> tuple:
    return (GundamKit.status == "active", GundamKit.deleted_at.is_(None))


def _parse_uuid_list(values: list[str], field_name: str) -> set[uuid.UUID]:
    parsed: set[uuid.UUID] = set()
    for value in values:
        try:
            parsed.add(uuid.UUID(value))
        except ValueError:
            raise ValidationError(f'Invalid id in "{field_name}" filter', details={"field": field_name, "value": value})
    return parsed


def _intersect(current: set | None, other: set) -> set:
    return other if current is None else current & other


def _resolve_grade_ids(db: Session, params: KitListParams) -> set[uuid.UUID] | None:
    # Grade codes and scales live on grades; kits only carry grade_id.
    grade_ids: set[uuid.UUID] | None = None
    if params.grades:
        rows = db.query(Grade.id).filter(Grade.code.in_(params.grades)).all()
        grade_ids = _intersect(grade_ids, {row.id for row in rows})
    if params.scales:
        rows = db.query(Grade.id).filter(Grade.scale.in_(params.scales)).all()
        grade_ids = _intersect(grade_ids, {row.id for row in rows})
    return grade_ids


def _resolve_series_ids(db: Session, params: KitListParams) -> set[uuid.UUID] | None:
    series_ids: set[uuid.UUID] | None = None
    if params.series:
        series_ids = _parse_uuid_list(params.series, "series")
    if params.timelines:
        timeline_ids = [row.id for row in db.query(Timeline.id).filter(Timeline.code.in_(params.timelines)).all()]
        in_timelines: set[uuid.UUID] = set()
        if timeline_ids:
            rows = db.query(Series.id).filter(Series.timeline_id.in_(timeline_ids)).all()
            in_timelines = {row.id for row in rows}
        series_ids = _intersect(series_ids, in_timelines)
    return series_ids


def kit_list_query(db: Session, params: KitListParams) -> ListQuery | None:
    """Build the list query for the public kit listing.

    Returns None when a code-based filter resolves to no rows, which means
    the listing is empty without touching the kits table.
    """
    grade_ids = _resolve_grade_ids(db, params)
    series_ids = _resolve_series_ids(db, params)
    if (grade_ids is not None and not grade_ids) or (series_ids is not None and not series_ids):
        return None
    filters: dict[str, Any] = {
        "grade_id": sorted(grade_ids, key=str) if grade_ids else [],
        "series_id": sorted(series_ids, key=str) if series_ids else [],
        "limited_type_id": sorted(_parse_uuid_list(params.limited_types, "limitedTypes"), key=str),
        "price_krw": RangeValue(min=params.price_min, max=params.price_max),
        "is_pbandai": True if params.pbandai_only else None,
    }
    return ListQuery(
        table_name=KIT_TABLE,
        search_term=params.search,
        searchable_fields=list(KIT_SEARCH_FIELDS),
        filters=filters,
        sort_field=params.sort_by,
        sort_descending=params.sort_order == "desc",
        page=params.page,
        page_size=params.limit,
    )


def list_kits(db: Session, params: KitListParams) -> PageResult:
    query = kit_list_query(db, params)
    if query is None:
        return PageResult(rows=[], total_count=0, page=params.page, page_size=params.limit)
    result = run_list_query(
        db,
        GundamKit,
        query,
        filterable_fields=KIT_FILTERABLE_FIELDS,
        sortable_fields=KIT_SORT_FIELDS,
        base_criteria=_active_kit_criteria(),
    )
    _LOG.debug("kits page=%s total=%s rows=%s", result.page, result.total_count, len(result.rows))
    return result.with_rows(shape_kit_rows(db, result.rows))


def _load_kit_or_404(db: Session, kit_id: str) -> GundamKit:
    try:
        pk = uuid.UUID(str(kit_id))
    except ValueError:
        raise NotFound("Kit not found", details=f"Invalid kit id: {kit_id}")
    kit = db.get(GundamKit, pk)
    if kit is None or kit.deleted_at is not None:
        raise NotFound("Kit not found", details=f"No kit with id {kit_id}")
    return kit


def _organization_summary(org: Organization | None) -> dict[str, Any] | None:
    if org is None:
        return None
    return {"id": str(org.id), "code": org.code, "name_ko": org.name_ko, "name_en": org.name_en}


def _mobile_suit_detail(db: Session, mobile_suit_id: uuid.UUID | None) -> dict[str, Any] | None:
    suit = db.get(MobileSuit, mobile_suit_id) if mobile_suit_id is not None else None
    if suit is None:
        return None

    pilot_links = (
        db.query(MobileSuitPilot)
        .filter(MobileSuitPilot.ms_id == suit.id)
        .order_by(MobileSuitPilot.created_at.asc(), MobileSuitPilot.id.asc())
        .all()
    )
    pilot_link = pick_primary(pilot_links)
    pilot = db.get(Pilot, pilot_link.pilot_id) if pilot_link is not None else None

    org_links = (
        db.query(MsOrganization)
        .filter(MsOrganization.mobile_suit_id == suit.id)
        .order_by(MsOrganization.created_at.asc(), MsOrganization.id.asc())
        .all()
    )
    manufacturer_link = pick_primary([link for link in org_links if link.relationship_type == "manufactured_by"])
    operator_link = pick_primary([link for link in org_links if link.relationship_type == "operated_by"])
    manufacturer = db.get(Organization, manufacturer_link.organization_id) if manufacturer_link else None
    operator = db.get(Organization, operator_link.organization_id) if operator_link else None

    faction = None
    if operator is not None:
        memberships = (
            db.query(OrgFactionMembership)
            .filter(OrgFactionMembership.organization_id == operator.id)
            .order_by(OrgFactionMembership.created_at.asc(), OrgFactionMembership.id.asc())
            .all()
        )
        membership = pick_primary(memberships)
        faction = db.get(Faction, membership.faction_id) if membership is not None else None

    payload = row_to_dict(suit)
    payload.update(
        {
            "series": series_summary(db.get(Series, suit.series_id) if suit.series_id else None),
            "pilot": (
                {"id": str(pilot.id), "code": pilot.code, "name_ko": pilot.name_ko, "name_en": pilot.name_en}
                if pilot is not None
                else None
            ),
            "manufacturer": _organization_summary(manufacturer),
            "operator": _organization_summary(operator),
            "faction": (
                {"id": faction.id, "name_ko": faction.name_ko, "name_en": faction.name_en, "color": faction.color}
                if faction is not None
                else None
            ),
        }
    )
    return payload


def _related_summary(record: dict[str, Any], relation_type: str) -> dict[str, Any]:
    return {
        "id": record["id"],
        "name_ko": record["name_ko"],
        "name_en": record["name_en"],
        "grade_code": record["grade_code"],
        "price_krw": record["price_krw"],
        "release_date": record["release_date"],
        "primary_image_url": record["primary_image_url"],
        "relation_type": relation_type,
    }


def _active_kits_by_id(db: Session, ids: list[uuid.UUID]) -> dict[uuid.UUID, GundamKit]:
    if not ids:
        return {}
    rows = db.query(GundamKit).filter(GundamKit.id.in_(ids), *_active_kit_criteria()).all()
    return {row.id: row for row in rows}


def _detail_related_kits(db: Session, kit: GundamKit) -> list[dict[str, Any]]:
    relations = (
        db.query(KitRelation)
        .filter(KitRelation.kit_id == kit.id)
        .order_by(KitRelation.created_at.asc(), KitRelation.id.asc())
        .all()
    )
    linked = _active_kits_by_id(db, [relation.related_kit_id for relation in relations])
    ordered: list[tuple[GundamKit, str]] = []
    seen = {kit.id}
    for relation in relations:
        related = linked.get(relation.related_kit_id)
        if related is None or related.id in seen:
            continue
        seen.add(related.id)
        ordered.append((related, relation.relation_type))

    if kit.mobile_suit_id is not None:
        same_suit = (
            db.query(GundamKit)
            .filter(GundamKit.mobile_suit_id == kit.mobile_suit_id, GundamKit.id != kit.id, *_active_kit_criteria())
            .order_by(GundamKit.release_date.desc(), GundamKit.id.asc())
            .limit(settings.RELATED_SAME_SUIT_LIMIT)
            .all()
        )
        for related in same_suit:
            if related.id in seen:
                continue
            seen.add(related.id)
            ordered.append((related, SAME_MOBILE_SUIT))

    shaped = shape_kit_rows(db, [related for related, _ in ordered])
    return [_related_summary(record, relation_type) for record, (_, relation_type) in zip(shaped, ordered)]


def get_kit_detail(db: Session, kit_id: str) -> dict[str, Any]:
    kit = _load_kit_or_404(db, kit_id)
    record = shape_kit_rows(db, [kit])[0]
    # Primary image first, the rest keep their sort order.
    record["images"] = sorted(record["images"], key=lambda image: not image["is_primary"])
    record["mobile_suit"] = _mobile_suit_detail(db, kit.mobile_suit_id)
    record["related_kits"] = _detail_related_kits(db, kit)
    return record


def get_related_kits(db: Session, kit_id: str) -> dict[str, list[dict[str, Any]]]:
    kit = _load_kit_or_404(db, kit_id)
    relations = (
        db.query(KitRelation)
        .filter(KitRelation.kit_id == kit.id, KitRelation.relation_type.in_(RELATION_TYPES))
        .order_by(KitRelation.created_at.asc(), KitRelation.id.asc())
        .all()
    )
    linked = _active_kits_by_id(db, [relation.related_kit_id for relation in relations])
    pairs = [(linked[relation.related_kit_id], relation.relation_type) for relation in relations if relation.related_kit_id in linked]
    shaped = shape_kit_rows(db, [related for related, _ in pairs])
    grouped: dict[str, list[dict[str, Any]]] = {relation_type: [] for relation_type in RELATION_TYPES}
    for record, (_, relation_type) in zip(shaped, pairs):
        grouped[relation_type].append(record)
    return grouped


def get_filter_options(db: Session) -> dict[str, list[dict[str, Any]]]:
    timelines = db.query(Timeline).order_by(Timeline.code.asc()).all()
    timelines_by_id = {row.id: row for row in timelines}
    grades = db.query(Grade).order_by(Grade.sort_order.asc(), Grade.code.asc()).all()
    series = db.query(Series).order_by(Series.name_ko.asc(), Series.id.asc()).all()
    limited_types = db.query(LimitedType).order_by(LimitedType.sort_order.asc(), LimitedType.code.asc()).all()

    def _series_item(row: Series) -> dict[str, Any]:
        timeline = timelines_by_id.get(row.timeline_id)
        return {
            "id": str(row.id),
            "name_ko": row.name_ko,
            "name_en": row.name_en,
            "timeline": {"code": timeline.code, "name_ko": timeline.name_ko} if timeline is not None else None,
        }

    return {
        "timelines": [row_to_dict(row, ("id", "code", "name_ko", "name_en")) for row in timelines],
        "grades": [row_to_dict(row, ("id", "code", "name", "scale")) for row in grades],
        "series": [_series_item(row) for row in series],
        "limitedTypes": [row_to_dict(row, ("id", "code", "name_ko", "name_en")) for row in limited_types],
    }


def get_stats(db: Session) -> dict[str, int]:
    return {
        "kits": db.query(GundamKit).filter(*_active_kit_criteria()).count(),
        "grades": db.query(Grade).count(),
        "series": db.query(Series).count(),
        "mobileSuits": db.query(MobileSuit).count(),
    }
