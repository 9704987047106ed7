"""init
Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _uuid(name, nullable=True):
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def upgrade():
    op.create_table(
        "timelines",
        _id(),
        *_timestamps(),
        sa.Column("code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "grades",
        _id(),
        *_timestamps(),
        sa.Column("code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("scale", sa.String(length=20), nullable=True),
        sa.Column("difficulty", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "limited_types",
        _id(),
        *_timestamps(),
        sa.Column("code", sa.String(length=40), nullable=False, unique=True),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "series",
        _id(),
        *_timestamps(),
        _uuid("timeline_id"),
        sa.Column("name_ko", sa.String(length=300), nullable=False),
        sa.Column("name_en", sa.String(length=300), nullable=True),
        sa.Column("name_ja", sa.String(length=300), nullable=True),
        sa.Column("year_start", sa.Integer(), nullable=True),
        sa.Column("year_end", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_series_timeline_id", "series", ["timeline_id"])

    op.create_table(
        "factions",
        sa.Column("id", sa.String(length=40), primary_key=True),
        *_timestamps(),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("universe", sa.String(length=20), nullable=True),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "organizations",
        _id(),
        *_timestamps(),
        sa.Column("code", sa.String(length=60), nullable=True, unique=True),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("org_type", sa.String(length=40), nullable=True),
        sa.Column("universe", sa.String(length=20), nullable=True),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "pilots",
        _id(),
        *_timestamps(),
        sa.Column("code", sa.String(length=60), nullable=True, unique=True),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("name_ja", sa.String(length=200), nullable=True),
        sa.Column("affiliation_default_id", sa.String(length=40), nullable=True),
        sa.Column("rank", sa.String(length=100), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("nationality", sa.String(length=100), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_pilots_affiliation_default_id", "pilots", ["affiliation_default_id"])

    op.create_table(
        "mobile_suits",
        _id(),
        *_timestamps(),
        _uuid("series_id"),
        sa.Column("model_number", sa.String(length=60), nullable=True),
        sa.Column("name_ko", sa.String(length=200), nullable=False),
        sa.Column("name_en", sa.String(length=200), nullable=True),
        sa.Column("name_ja", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
    )
    op.create_index("ix_mobile_suits_series_id", "mobile_suits", ["series_id"])

    op.create_table(
        "mobile_suit_pilots",
        _id(),
        *_timestamps(),
        _uuid("ms_id", nullable=False),
        _uuid("pilot_id", nullable=False),
        sa.Column("faction_at_time_id", sa.String(length=40), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_mobile_suit_pilots_ms_id", "mobile_suit_pilots", ["ms_id"])
    op.create_index("ix_mobile_suit_pilots_pilot_id", "mobile_suit_pilots", ["pilot_id"])

    op.create_table(
        "ms_organizations",
        _id(),
        *_timestamps(),
        _uuid("mobile_suit_id", nullable=False),
        _uuid("organization_id", nullable=False),
        sa.Column("relationship_type", sa.String(length=30), nullable=False),
        _uuid("timeline_id"),
        sa.Column("year_start", sa.Integer(), nullable=True),
        sa.Column("year_end", sa.Integer(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_ms_organizations_mobile_suit_id", "ms_organizations", ["mobile_suit_id"])
    op.create_index("ix_ms_organizations_organization_id", "ms_organizations", ["organization_id"])

    op.create_table(
        "org_faction_memberships",
        _id(),
        *_timestamps(),
        _uuid("organization_id", nullable=False),
        sa.Column("faction_id", sa.String(length=40), nullable=False),
        _uuid("timeline_id"),
        sa.Column("year_start", sa.Integer(), nullable=True),
        sa.Column("year_end", sa.Integer(), nullable=True),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_org_faction_memberships_organization_id", "org_faction_memberships", ["organization_id"])
    op.create_index("ix_org_faction_memberships_faction_id", "org_faction_memberships", ["faction_id"])

    op.create_table(
        "gundam_kits",
        _id(),
        *_timestamps(),
        _uuid("grade_id"),
        _uuid("series_id"),
        _uuid("mobile_suit_id"),
        _uuid("limited_type_id"),
        sa.Column("product_code", sa.String(length=60), nullable=True),
        sa.Column("name_ko", sa.String(length=300), nullable=False),
        sa.Column("name_en", sa.String(length=300), nullable=True),
        sa.Column("name_ja", sa.String(length=300), nullable=True),
        sa.Column("price_jpy", sa.Integer(), nullable=True),
        sa.Column("price_krw", sa.Integer(), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("release_type", sa.String(length=30), nullable=True),
        sa.Column("is_pbandai", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("scale", sa.String(length=20), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("box_art_url", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    for column in ("grade_id", "series_id", "mobile_suit_id", "limited_type_id"):
        op.create_index(f"ix_gundam_kits_{column}", "gundam_kits", [column])

    op.create_table(
        "kit_images",
        _id(),
        *_timestamps(),
        _uuid("kit_id", nullable=False),
        sa.Column("image_url", sa.String(length=500), nullable=False),
        sa.Column("image_type", sa.String(length=30), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_kit_images_kit_id", "kit_images", ["kit_id"])

    op.create_table(
        "kit_relations",
        _id(),
        *_timestamps(),
        _uuid("kit_id", nullable=False),
        _uuid("related_kit_id", nullable=False),
        sa.Column("relation_type", sa.String(length=20), nullable=False),
    )
    op.create_index("ix_kit_relations_kit_id", "kit_relations", ["kit_id"])
    op.create_index("ix_kit_relations_related_kit_id", "kit_relations", ["related_kit_id"])

    op.create_table(
        "users",
        _id(),
        *_timestamps(),
        sa.Column("email", sa.String(length=200), nullable=False, unique=True),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )

    op.create_table(
        "suggestions",
        _id(),
        *_timestamps(),
        _uuid("kit_id"),
        _uuid("user_id", nullable=False),
        sa.Column("suggestion_type", sa.String(length=20), nullable=False),
        sa.Column("current_data", sa.JSON(), nullable=True),
        sa.Column("suggested_data", sa.JSON(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        _uuid("reviewed_by"),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_comment", sa.Text(), nullable=True),
    )
    op.create_index("ix_suggestions_kit_id", "suggestions", ["kit_id"])
    op.create_index("ix_suggestions_user_id", "suggestions", ["user_id"])

    op.create_table(
        "audit_log",
        _id(),
        *_timestamps(),
        sa.Column("actor_email", sa.String(length=200), nullable=True),
        sa.Column("entity", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=False),
        sa.Column("action", sa.String(length=30), nullable=False),
        sa.Column("diff", sa.JSON(), nullable=False),
    )


def downgrade():
    for table in (
        "audit_log",
        "suggestions",
        "users",
        "kit_relations",
        "kit_images",
        "gundam_kits",
        "org_faction_memberships",
        "ms_organizations",
        "mobile_suit_pilots",
        "mobile_suits",
        "pilots",
        "organizations",
        "factions",
        "series",
        "limited_types",
        "grades",
        "timelines",
    ):
        op.drop_table(table)
