# safetool/schemas/electrical_drawing.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from safetool.schemas.base import CamelModel


class ElectricalDrawingInfo(CamelModel):
    id: str = ""
    file_name: str = ""
    version: str = ""
    file_size: int = 0
    file_path: Optional[str] = None
    drawing_number: Optional[str] = None
    sheet_number: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DrawingLinkRequest(CamelModel):
    """
    Body de POST /api/electrical-drawing/{projectId}/link.

    Los strings parten vacíos y `drawing` siempre está presente (instancia
    nueva por request), nunca None.
    """

    resource_type: str = ""  # SRS / Function / Component / Checklist
    resource_id: str = ""
    drawing: ElectricalDrawingInfo = Field(default_factory=ElectricalDrawingInfo)


class ElectricalDrawingLinkDTO(CamelModel):
    id: str = ""
    project_id: str = ""
    resource_type: str = ""
    resource_id: str = ""
    drawing: ElectricalDrawingInfo = Field(default_factory=ElectricalDrawingInfo)
    linked_at: Optional[datetime] = None
    linked_by: str = ""
    notes: Optional[str] = None


class DrawingValidationResult(CamelModel):
    drawing_id: str = ""
    is_valid: bool = True
    message: Optional[str] = None
    issues: List[str] = Field(default_factory=list)
