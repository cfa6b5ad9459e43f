from __future__ import annotations
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, String, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from safetool.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLog(Base):
    __tablename__ = "user_activity_log"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=_utcnow)
    action: Mapped[str] = mapped_column(String(32))
    resource_type: Mapped[str | None] = mapped_column(String(128))
    resource_id: Mapped[str | None] = mapped_column(String(128))
    http_method: Mapped[str | None] = mapped_column(String(10))
    path: Mapped[str | None] = mapped_column(String(512))
    status_code: Mapped[int | None] = mapped_column(Integer)
    actor_id: Mapped[str | None] = mapped_column(String(64))
    actor_username: Mapped[str | None] = mapped_column(String(150))
    request_id: Mapped[str | None] = mapped_column(String(64))
    ip: Mapped[str | None] = mapped_column(String(45))
    user_agent: Mapped[str | None] = mapped_column(String(512))
    changes_json: Mapped[str | None] = mapped_column(Text)
    request_body_sha256: Mapped[str | None] = mapped_column(String(64))
    request_body_json: Mapped[str | None] = mapped_column(Text)
