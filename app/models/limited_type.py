from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin, SortOrderMixin

class LimitedType(Base, UUIDMixin, TimestampMixin, SortOrderMixin):
    __tablename__ = "limited_types"
    code: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    name_ko: Mapped[str] = mapped_column(String(200), nullable=False)
    name_en: Mapped[str | None] = mapped_column(String(200), nullable=True)
