from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import UUIDMixin, TimestampMixin

class AuditLog(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "audit_log"
    actor_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    entity: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False)
    action: Mapped[str] = mapped_column(String(30), nullable=False)  # CREATE|UPDATE|DELETE
    diff: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
