from __future__ import annotations
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from safetool.db.base import Base


class ElectricalDrawingLink(Base):
    __tablename__ = "ElectricalDrawingLinks"
    __table_args__ = (
        Index("IX_ElectricalDrawingLinks_Project_Resource", "ProjectId", "ResourceType", "ResourceId"),
        Index("IX_ElectricalDrawingLinks_Project_Drawing", "ProjectId", "DrawingId"),
    )

    Id: Mapped[str] = mapped_column(String(36), primary_key=True)
    ProjectId: Mapped[str] = mapped_column(String(128), nullable=False)
    ResourceType: Mapped[str] = mapped_column(String(64), nullable=False, default="")  # SRS/Function/Component/Checklist
    ResourceId: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    DrawingId: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    Drawing: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    LinkedAt: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    LinkedBy: Mapped[str] = mapped_column(String(150), nullable=False, default="")
    Notes: Mapped[str | None] = mapped_column(Text)
