import uuid
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class KitRelation(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "kit_relations"
    kit_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    related_kit_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)
    relation_type: Mapped[str] = mapped_column(String(20), nullable=False)  # variant|series|similar
