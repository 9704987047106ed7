import uuid
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin, SortOrderMixin

class KitImage(Base, UUIDMixin, TimestampMixin, SortOrderMixin):
    __tablename__ = "kit_images"
    kit_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    image_type: Mapped[str | None] = mapped_column(String(30), nullable=True)  # box_art|product|manual|...
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
