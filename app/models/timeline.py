from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class Timeline(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "timelines"
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)  # UC|CE|AD|...
    name_ko: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
