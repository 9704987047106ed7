import os
import unittest
from datetime import date, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, delete
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure settings can be initialized in test environments
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from app.core.config import settings
from app.core.security import create_jwt, create_session_token
from app.db.session import get_db
from app.main import app
from app.models.audit_log import AuditLog
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
from app.models.suggestion import Suggestion
from app.models.timeline import Timeline
from app.models.user import User
from app.services.session_cache import InMemorySessionCache

CATALOG_MODELS = (
    Timeline,
    Grade,
    LimitedType,
    Series,
    Faction,
    Organization,
    Pilot,
    MobileSuit,
    MobileSuitPilot,
    MsOrganization,
    OrgFactionMembership,
    GundamKit,
    KitImage,
    KitRelation,
    User,
    Suggestion,
    AuditLog,
)


class CatalogDatabaseMixin:
    """In-memory catalog schema shared by API and client tests."""

    @classmethod
    def setUpClass(cls):
        cls.engine = create_engine(
            "sqlite+pysqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        cls.SessionLocal = sessionmaker(bind=cls.engine, autocommit=False, autoflush=False)
        for model in CATALOG_MODELS:
            model.__table__.create(bind=cls.engine)

    @classmethod
    def tearDownClass(cls):
        for model in reversed(CATALOG_MODELS):
            model.__table__.drop(bind=cls.engine)
        cls.engine.dispose()

    def _reset_database(self):
        with self.SessionLocal() as db:
            for model in reversed(CATALOG_MODELS):
                db.execute(delete(model))
            db.commit()

    def _install_overrides(self):
        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self._original_session_cache = app.state.session_cache
        self.session_cache = InMemorySessionCache()
        app.state.session_cache = self.session_cache

    def _remove_overrides(self):
        app.dependency_overrides.clear()
        app.state.session_cache = self._original_session_cache

    # Fixtures

    def _add(self, *rows):
        with self.SessionLocal() as db:
            db.add_all(rows)
            db.commit()
            for row in rows:
                db.refresh(row)
            db.expunge_all()
        return rows[0] if len(rows) == 1 else rows

    def _count(self, model, *criteria) -> int:
        with self.SessionLocal() as db:
            return db.query(model).filter(*criteria).count()

    def _get(self, model, pk):
        with self.SessionLocal() as db:
            row = db.get(model, pk)
            if row is not None:
                db.expunge(row)
            return row

    def make_timeline(self, code="UC", name_ko="우주세기"):
        return self._add(Timeline(code=code, name_ko=name_ko, name_en=code))

    def make_grade(self, code="HG", name="High Grade", scale="1/144", sort_order=0):
        return self._add(Grade(code=code, name=name, scale=scale, sort_order=sort_order))

    def make_series(self, name_ko="기동전사 건담", timeline=None, year_start=1979):
        return self._add(
            Series(name_ko=name_ko, name_en=name_ko, timeline_id=timeline.id if timeline else None, year_start=year_start)
        )

    def make_kit(self, name_ko="RX-78-2 건담", **kwargs):
        values = {
            "name_ko": name_ko,
            "price_krw": 20000,
            "release_date": date(2020, 1, 1),
        }
        values.update(kwargs)
        return self._add(GundamKit(**values))

    def make_kits(self, count, name_prefix="건담", **kwargs):
        rows = [
            GundamKit(
                name_ko=f"{name_prefix} {index:02d}",
                price_krw=10000 + (count - index) * 100,
                release_date=date(2020, 1, 1) + timedelta(days=index),
                **kwargs,
            )
            for index in range(count)
        ]
        result = self._add(*rows)
        return list(result) if isinstance(result, tuple) else [result]

    # Sessions

    @staticmethod
    def _session_token(email: str = "user@example.com", role: str = "user", sub: str | None = None) -> str:
        return create_session_token(sub=str(sub or uuid4()), email=email, role=role, name=email.split("@")[0])

    @classmethod
    def _auth_headers(cls, email: str = "user@example.com", role: str = "user", sub: str | None = None) -> dict[str, str]:
        return {"Authorization": f"Bearer {cls._session_token(email, role, sub)}"}

    @classmethod
    def _admin_headers(cls) -> dict[str, str]:
        return cls._auth_headers(settings.ADMIN_EMAIL, "admin")

    @staticmethod
    def _expired_token(email: str) -> str:
        return create_jwt(
            {"sub": str(uuid4()), "email": email, "role": "user"},
            settings.SESSION_JWT_SECRET,
            timedelta(minutes=-5),
        )


class CatalogTestBase(CatalogDatabaseMixin, unittest.TestCase):
    def setUp(self):
        self._reset_database()
        self._install_overrides()
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        self._remove_overrides()
