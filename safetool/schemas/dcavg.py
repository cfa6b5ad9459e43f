# safetool/schemas/dcavg.py
from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from safetool.schemas.base import CamelModel


class DeviceDcavgInfo(CamelModel):
    id: str = ""
    dcavg: float = 0.0


class DemandCalculationRequest(CamelModel):
    """
    Body de POST /api/iso13849/calculation/dcavg/regular.

    Contenedor pasivo: no valida rangos. `devices=None` es un estado válido
    ("no se enviaron equipos") y se distingue de una lista vacía.
    """

    devices: Optional[List[DeviceDcavgInfo]] = None
    demand_rate: float = 0.0
    series_count: int = 0


class DcavgCalculationResult(CamelModel):
    dcavg: float = 0.0
    method: str = ""
    masking_limit: float = 0.0
    warnings: List[str] = Field(default_factory=list)


class SeriesDeviceCheckRequest(CamelModel):
    series_count: int = 0
    target_dcavg: float = 0.0


class SeriesDeviceCheckResult(CamelModel):
    series_count: int = 0
    is_within_limit: bool = True
    warnings: List[str] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────────────────────
# Cálculo mejorado (Annex K con parámetros de prueba)
# ─────────────────────────────────────────────────────────────────────────────

class TestParameters(CamelModel):
    __test__ = False  # evita que pytest intente recolectarla

    test_frequency: float = 0.0  # pruebas por hora
    test_coverage: float = 0.0   # 0..1


class EnhancedDcavgInput(CamelModel):
    devices: List[DeviceDcavgInfo] = Field(default_factory=list)
    demand_rate: float = 1.0
    test_parameters: Optional[TestParameters] = None


class CalculationStep(CamelModel):
    step: int
    description: str = ""
    details: List[str] = Field(default_factory=list)


class DeviceContribution(CamelModel):
    device_id: str = ""
    dcavg: float = 0.0
    contribution: float = 0.0


class EnhancedDcavgResult(CamelModel):
    dcavg: float = 0.0
    method: str = ""
    masking_limit: float = 0.0
    intermediate_product: Optional[float] = None
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    calculation_steps: List[CalculationStep] = Field(default_factory=list)
