# safetool/api/v1/electrical_drawing.py
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from safetool.core.security import get_current_user
from safetool.dependencies.db import get_db
from safetool.dependencies.with_actor import with_actor
from safetool.schemas.auth import UserPublic
from safetool.schemas.electrical_drawing import (
    DrawingLinkRequest,
    DrawingValidationResult,
    ElectricalDrawingInfo,
    ElectricalDrawingLinkDTO,
)
from safetool.services.electrical_drawing_service import electrical_drawing_service as svc

router = APIRouter(prefix="/api/electrical-drawing", tags=["Planos eléctricos"])
DbDep = Annotated[Session, Depends(get_db)]
ActorDbDep = Annotated[Session, Depends(with_actor)]
CurrentUser = Annotated[UserPublic, Depends(get_current_user)]

@router.post("/validate", response_model=DrawingValidationResult, summary="Validar datos del plano")
def validate_drawing(payload: ElectricalDrawingInfo, _user: CurrentUser):
    return svc.validate_drawing(payload)

@router.get("/{project_id}", response_model=List[ElectricalDrawingLinkDTO], summary="Planos del proyecto")
def list_drawings(
    project_id: str,
    db: DbDep,
    _user: CurrentUser,
    resource_type: str | None = Query(default=None, alias="resourceType"),
    resource_id: str | None = Query(default=None, alias="resourceId"),
):
    return svc.get_drawings(db, project_id, resource_type, resource_id)

@router.post("/{project_id}/link", response_model=ElectricalDrawingLinkDTO, summary="Vincular plano a un recurso")
def link_drawing(project_id: str, payload: DrawingLinkRequest, db: ActorDbDep, user: CurrentUser):
    return svc.link_drawing(
        db, project_id, payload.resource_type, payload.resource_id, payload.drawing,
        linked_by=user.username,
    )

@router.get(
    "/{project_id}/drawing/{drawing_id}/resources",
    response_model=List[ElectricalDrawingLinkDTO],
    summary="Recursos vinculados a un plano",
)
def linked_resources(project_id: str, drawing_id: str, db: DbDep, _user: CurrentUser):
    return svc.get_linked_resources(db, project_id, drawing_id)

@router.delete("/{project_id}/link/{link_id}", summary="Eliminar vínculo")
def unlink_drawing(project_id: str, link_id: str, db: ActorDbDep):
    if not svc.unlink_drawing(db, project_id, link_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vínculo no encontrado")
    return {"ok": True}
