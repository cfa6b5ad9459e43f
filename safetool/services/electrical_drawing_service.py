# safetool/services/electrical_drawing_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import Session

from safetool.db.models.electrical_drawing_link import ElectricalDrawingLink
from safetool.schemas.electrical_drawing import (
    DrawingValidationResult,
    ElectricalDrawingInfo,
    ElectricalDrawingLinkDTO,
)

log = logging.getLogger(__name__)

VALID_EXTENSIONS = {".dwg", ".dxf", ".pdf", ".png", ".jpg", ".jpeg"}


def _utcnow() -> datetime:
    # la columna es naive: se guarda en UTC sin tzinfo
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def file_extension(file_name: str) -> str:
    """
    Extensión desde el último punto del nombre base, punto incluido.

    ".pdf" -> ".pdf"; "plano" y "plano." -> "".
    """
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    idx = base.rfind(".")
    if idx < 0 or idx == len(base) - 1:
        return ""
    return base[idx:]


def to_dto(row: ElectricalDrawingLink) -> ElectricalDrawingLinkDTO:
    return ElectricalDrawingLinkDTO(
        id=row.Id,
        project_id=row.ProjectId,
        resource_type=row.ResourceType,
        resource_id=row.ResourceId,
        drawing=ElectricalDrawingInfo.model_validate(row.Drawing or {}),
        linked_at=_as_utc(row.LinkedAt),
        linked_by=row.LinkedBy,
        notes=row.Notes,
    )


class ElectricalDrawingService:
    def _project_links(self, db: Session, project_id: str):
        return (
            db.query(ElectricalDrawingLink)
            .filter(ElectricalDrawingLink.ProjectId == project_id)
            .order_by(ElectricalDrawingLink.LinkedAt)
        )

    def link_drawing(
        self,
        db: Session,
        project_id: str,
        resource_type: str,
        resource_id: str,
        drawing: ElectricalDrawingInfo,
        linked_by: str | None = None,
        link_id: str | None = None,
    ) -> ElectricalDrawingLinkDTO:
        # mismo id => reemplaza el vínculo existente
        obj = ElectricalDrawingLink(
            Id=link_id or str(uuid4()),
            ProjectId=project_id,
            ResourceType=resource_type,
            ResourceId=resource_id,
            DrawingId=drawing.id,
            Drawing=drawing.model_dump(mode="json", by_alias=True),
            LinkedAt=_utcnow(),
            LinkedBy=linked_by or "system",
        )
        obj = db.merge(obj)
        db.commit(); db.refresh(obj)
        log.info("Plano %s vinculado a %s/%s (proyecto %s, link %s)",
                 drawing.id, resource_type, resource_id, project_id, obj.Id)
        return to_dto(obj)

    def get_drawings(
        self,
        db: Session,
        project_id: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> list[ElectricalDrawingLinkDTO]:
        query = self._project_links(db, project_id)
        if resource_type:
            query = query.filter(ElectricalDrawingLink.ResourceType == resource_type)
        if resource_id:
            query = query.filter(ElectricalDrawingLink.ResourceId == resource_id)
        return [to_dto(x) for x in query.all()]

    def get_linked_resources(self, db: Session, project_id: str, drawing_id: str) -> list[ElectricalDrawingLinkDTO]:
        query = self._project_links(db, project_id).filter(ElectricalDrawingLink.DrawingId == drawing_id)
        return [to_dto(x) for x in query.all()]

    def unlink_drawing(self, db: Session, project_id: str, link_id: str) -> bool:
        obj = (
            db.query(ElectricalDrawingLink)
            .filter(
                ElectricalDrawingLink.ProjectId == project_id,
                ElectricalDrawingLink.Id == link_id,
            )
            .first()
        )
        if not obj:
            return False
        db.delete(obj); db.commit()
        log.info("Vínculo de plano %s eliminado (proyecto %s)", link_id, project_id)
        return True

    def validate_drawing(self, drawing: ElectricalDrawingInfo) -> DrawingValidationResult:
        issues: list[str] = []

        if not drawing.file_name:
            issues.append("Drawing file name is required")
        if not drawing.version:
            issues.append("Drawing version is required")
        if drawing.file_size <= 0:
            issues.append("Drawing file size is invalid")

        extension = file_extension(drawing.file_name).lower()
        if extension not in VALID_EXTENSIONS:
            issues.append(f"Unsupported file format: {extension}")

        return DrawingValidationResult(
            drawing_id=drawing.id,
            is_valid=not issues,
            message="Drawing information is valid" if not issues else None,
            issues=issues,
        )


electrical_drawing_service = ElectricalDrawingService()
