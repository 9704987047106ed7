from sqlalchemy import String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin, SortOrderMixin

class Grade(Base, UUIDMixin, TimestampMixin, SortOrderMixin):
    __tablename__ = "grades"
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)  # HG|RG|MG|PG|...
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    scale: Mapped[str | None] = mapped_column(String(20), nullable=True)
    difficulty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
