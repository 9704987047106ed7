from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class Pilot(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "pilots"
    code: Mapped[str | None] = mapped_column(String(60), unique=True, nullable=True)
    name_ko: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(200), nullable=True)
    name_ja: Mapped[str | None] = mapped_column(String(200), nullable=True)
    affiliation_default_id: Mapped[str | None] = mapped_column(String(40), index=True, nullable=True)
    rank: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str | None] = mapped_column(String(20), nullable=True)  # protagonist|antagonist|supporting|other
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
