from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.inspection import inspect as sa_inspect

from app.core.config import settings
from app.core.errors import NotFound
from app.models.faction import Faction
from app.models.grade import Grade
from app.models.kit import GundamKit
from app.models.kit_image import KitImage
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

SYSTEM_FIELDS = {"id", "created_at", "updated_at"}

UNIVERSES = ("UC", "CE", "AD", "AC", "FC", "AG", "PD", "AS", "BD", "BUILD", "OTHER")
COMPANY_TYPES = ("manufacturer", "research", "conglomerate", "military_org")
PILOT_ROLES = ("protagonist", "antagonist", "supporting", "other")
KIT_STATUSES = ("active", "discontinued", "upcoming")
KIT_RELATION_TYPES = ("variant", "series", "similar")
MS_RELATIONSHIP_TYPES = ("manufactured_by", "operated_by", "developed_by")


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = "text"  # text|textarea|number|boolean|date|datetime|uuid|url
    required: bool = False
    upper: bool = False
    choices: tuple[str, ...] = ()
    reference: str | None = None
    create_only: bool = False


@dataclass(frozen=True)
class AdminResource:
    slug: str
    model: type
    label: str
    fields: tuple[FieldSpec, ...]
    search_fields: tuple[str, ...] = ("name_ko", "name_en")
    filterable_fields: tuple[str, ...] = ()
    default_sort: str = "updated_at"
    default_descending: bool = True
    page_size: int = field(default_factory=lambda: settings.ADMIN_PAGE_SIZE)

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def field_map(self) -> dict[str, FieldSpec]:
        return {spec.name: spec for spec in self.fields}

    @property
    def sortable_fields(self) -> tuple[str, ...]:
        return tuple(sa_inspect(self.model).columns.keys())

    @property
    def assigns_primary_key(self) -> bool:
        return any(spec.create_only and spec.name == "id" for spec in self.fields)


def _f(name: str, label: str, kind: str = "text", **kwargs) -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=kind, **kwargs)


_NAMES = (
    _f("name_ko", "Name (KO)", required=True),
    _f("name_en", "Name (EN)"),
)

RESOURCES: tuple[AdminResource, ...] = (
    AdminResource(
        slug="kits",
        model=GundamKit,
        label="Kits",
        fields=(
            *_NAMES,
            _f("name_ja", "Name (JA)"),
            _f("grade_id", "Grade", "uuid", reference="grades"),
            _f("series_id", "Series", "uuid", reference="series"),
            _f("mobile_suit_id", "Mobile suit", "uuid", reference="mobile-suits"),
            _f("limited_type_id", "Limited type", "uuid", reference="limited-types"),
            _f("product_code", "Product code", upper=True),
            _f("scale", "Scale"),
            _f("price_krw", "Price (KRW)", "number"),
            _f("price_jpy", "Price (JPY)", "number"),
            _f("release_date", "Release date", "date"),
            _f("release_type", "Release type"),
            _f("is_pbandai", "P-Bandai", "boolean"),
            _f("status", "Status", choices=KIT_STATUSES),
            _f("description", "Description", "textarea"),
            _f("box_art_url", "Box art", "url"),
            _f("view_count", "Views", "number"),
            _f("deleted_at", "Deleted at", "datetime"),
        ),
        search_fields=("name_ko", "name_en", "product_code"),
        filterable_fields=("grade_id", "series_id", "mobile_suit_id", "limited_type_id", "status", "is_pbandai", "price_krw", "release_date"),
    ),
    AdminResource(
        slug="series",
        model=Series,
        label="Series",
        fields=(
            *_NAMES,
            _f("name_ja", "Name (JA)"),
            _f("timeline_id", "Timeline", "uuid", reference="timelines"),
            _f("year_start", "Start year", "number"),
            _f("year_end", "End year", "number"),
            _f("description", "Description", "textarea"),
        ),
        search_fields=("name_ko", "name_en", "name_ja"),
        filterable_fields=("timeline_id", "year_start"),
    ),
    AdminResource(
        slug="factions",
        model=Faction,
        label="Factions",
        fields=(
            _f("id", "Code", required=True, upper=True, create_only=True),
            *_NAMES,
            _f("universe", "Universe", choices=UNIVERSES),
            _f("color", "Color"),
            _f("description", "Description", "textarea"),
            _f("sort_order", "Sort order", "number"),
        ),
        search_fields=("name_ko", "name_en", "id"),
        filterable_fields=("universe",),
        default_sort="sort_order",
        default_descending=False,
    ),
    AdminResource(
        slug="organizations",
        model=Organization,
        label="Organizations",
        fields=(
            _f("code", "Code", upper=True),
            *_NAMES,
            _f("org_type", "Type", choices=COMPANY_TYPES),
            _f("universe", "Universe", choices=UNIVERSES),
            _f("color", "Color"),
            _f("description", "Description", "textarea"),
        ),
        search_fields=("name_ko", "name_en", "code"),
        filterable_fields=("universe", "org_type"),
    ),
    AdminResource(
        slug="pilots",
        model=Pilot,
        label="Pilots",
        fields=(
            _f("code", "Code", upper=True),
            *_NAMES,
            _f("name_ja", "Name (JA)"),
            _f("affiliation_default_id", "Default faction", reference="factions"),
            _f("rank", "Rank"),
            _f("role", "Role", choices=PILOT_ROLES),
            _f("nationality", "Nationality"),
            _f("bio", "Biography", "textarea"),
            _f("image_url", "Image", "url"),
        ),
        filterable_fields=("affiliation_default_id", "role"),
    ),
    AdminResource(
        slug="mobile-suits",
        model=MobileSuit,
        label="Mobile suits",
        fields=(
            *_NAMES,
            _f("name_ja", "Name (JA)"),
            _f("model_number", "Model number", upper=True),
            _f("series_id", "Series", "uuid", reference="series"),
            _f("description", "Description", "textarea"),
            _f("image_url", "Image", "url"),
        ),
        search_fields=("name_ko", "name_en", "model_number"),
        filterable_fields=("series_id",),
    ),
    AdminResource(
        slug="mobile-suit-pilots",
        model=MobileSuitPilot,
        label="Mobile suit pilots",
        fields=(
            _f("ms_id", "Mobile suit", "uuid", required=True, reference="mobile-suits"),
            _f("pilot_id", "Pilot", "uuid", required=True, reference="pilots"),
            _f("faction_at_time_id", "Faction at the time", reference="factions"),
            _f("is_primary", "Primary", "boolean"),
            _f("notes", "Notes", "textarea"),
        ),
        search_fields=("notes",),
        filterable_fields=("ms_id", "pilot_id", "is_primary"),
    ),
    AdminResource(
        slug="ms-organizations",
        model=MsOrganization,
        label="Mobile suit organizations",
        fields=(
            _f("mobile_suit_id", "Mobile suit", "uuid", required=True, reference="mobile-suits"),
            _f("organization_id", "Organization", "uuid", required=True, reference="organizations"),
            _f("relationship_type", "Relationship", required=True, choices=MS_RELATIONSHIP_TYPES),
            _f("timeline_id", "Timeline", "uuid", reference="timelines"),
            _f("year_start", "Start year", "number"),
            _f("year_end", "End year", "number"),
            _f("is_primary", "Primary", "boolean"),
            _f("notes", "Notes", "textarea"),
        ),
        search_fields=("notes",),
        filterable_fields=("mobile_suit_id", "organization_id", "relationship_type", "is_primary"),
    ),
    AdminResource(
        slug="org-faction-memberships",
        model=OrgFactionMembership,
        label="Organization factions",
        fields=(
            _f("organization_id", "Organization", "uuid", required=True, reference="organizations"),
            _f("faction_id", "Faction", required=True, upper=True, reference="factions"),
            _f("timeline_id", "Timeline", "uuid", reference="timelines"),
            _f("year_start", "Start year", "number"),
            _f("year_end", "End year", "number"),
            _f("is_primary", "Primary", "boolean"),
            _f("notes", "Notes", "textarea"),
        ),
        search_fields=("notes",),
        filterable_fields=("organization_id", "faction_id", "is_primary"),
    ),
    AdminResource(
        slug="grades",
        model=Grade,
        label="Grades",
        fields=(
            _f("code", "Code", required=True, upper=True),
            _f("name", "Name", required=True),
            _f("scale", "Scale"),
            _f("difficulty", "Difficulty", "number"),
            _f("description", "Description", "textarea"),
            _f("sort_order", "Sort order", "number"),
        ),
        search_fields=("code", "name"),
        filterable_fields=("scale",),
        default_sort="sort_order",
        default_descending=False,
    ),
    AdminResource(
        slug="timelines",
        model=Timeline,
        label="Timelines",
        fields=(
            _f("code", "Code", required=True, upper=True),
            *_NAMES,
            _f("description", "Description", "textarea"),
        ),
        search_fields=("code", "name_ko", "name_en"),
        default_sort="code",
        default_descending=False,
    ),
    AdminResource(
        slug="limited-types",
        model=LimitedType,
        label="Limited types",
        fields=(
            _f("code", "Code", required=True, upper=True),
            *_NAMES,
            _f("sort_order", "Sort order", "number"),
        ),
        search_fields=("code", "name_ko", "name_en"),
        default_sort="sort_order",
        default_descending=False,
    ),
    AdminResource(
        slug="kit-images",
        model=KitImage,
        label="Kit images",
        fields=(
            _f("kit_id", "Kit", "uuid", required=True, reference="kits"),
            _f("image_url", "Image", "url", required=True),
            _f("image_type", "Type"),
            _f("sort_order", "Sort order", "number"),
            _f("is_primary", "Primary", "boolean"),
        ),
        search_fields=("image_url",),
        filterable_fields=("kit_id", "is_primary", "image_type"),
        default_sort="sort_order",
        default_descending=False,
    ),
    AdminResource(
        slug="kit-relations",
        model=KitRelation,
        label="Kit relations",
        fields=(
            _f("kit_id", "Kit", "uuid", required=True, reference="kits"),
            _f("related_kit_id", "Related kit", "uuid", required=True, reference="kits"),
            _f("relation_type", "Relation", required=True, choices=KIT_RELATION_TYPES),
        ),
        search_fields=("relation_type",),
        filterable_fields=("kit_id", "related_kit_id", "relation_type"),
    ),
)


def _normalize_slug(raw: str) -> str:
    return (raw or "").strip().lower().replace("_", "-")


@lru_cache(maxsize=1)
def _resource_map() -> dict[str, AdminResource]:
    mapping: dict[str, AdminResource] = {}
    for resource in RESOURCES:
        mapping[resource.slug] = resource
        # Table names are accepted as aliases (gundam_kits, mobile_suits, ...).
        mapping.setdefault(_normalize_slug(resource.table_name), resource)
    return mapping


def resolve_resource(raw: str) -> AdminResource:
    resource = _resource_map().get(_normalize_slug(raw))
    if resource is None:
        raise NotFound(f'Unknown admin resource "{raw}"')
    return resource
