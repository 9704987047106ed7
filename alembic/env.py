from logging.config import fileConfig
from alembic import context
from sqlalchemy import engine_from_config, pool
import os
from app.db.session import Base

# import models
from app.models.timeline import Timeline
from app.models.grade import Grade
from app.models.limited_type import LimitedType
from app.models.series import Series
from app.models.faction import Faction
from app.models.organization import Organization
from app.models.pilot import Pilot
from app.models.mobile_suit import MobileSuit
from app.models.mobile_suit_pilot import MobileSuitPilot
from app.models.ms_organization import MsOrganization
from app.models.org_faction_membership import OrgFactionMembership
from app.models.kit import GundamKit
from app.models.kit_image import KitImage
from app.models.kit_relation import KitRelation
from app.models.user import User
from app.models.suggestion import Suggestion
from app.models.audit_log import AuditLog

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
target_metadata = Base.metadata

def get_url():
    return os.getenv("DATABASE_URL")

def run_migrations_offline():
    context.configure(url=get_url(), target_metadata=target_metadata, literal_binds=True, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    cfg = config.get_section(config.config_ini_section) or {}
    cfg["sqlalchemy.url"] = get_url()
    connectable = engine_from_config(cfg, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
