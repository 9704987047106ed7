import uuid
from datetime import date, datetime
from sqlalchemy import String, Boolean, Integer, Date, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class GundamKit(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "gundam_kits"
    grade_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True, nullable=True)
    series_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True, nullable=True)
    mobile_suit_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True, nullable=True)
    limited_type_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), index=True, nullable=True)
    product_code: Mapped[str | None] = mapped_column(String(60), nullable=True)
    name_ko: Mapped[str] = mapped_column(String(300), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(300), nullable=True)
    name_ja: Mapped[str | None] = mapped_column(String(300), nullable=True)
    price_jpy: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price_krw: Mapped[int | None] = mapped_column(Integer, nullable=True)
    release_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    release_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    is_pbandai: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    scale: Mapped[str | None] = mapped_column(String(20), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    box_art_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)  # active|discontinued|upcoming
    view_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
