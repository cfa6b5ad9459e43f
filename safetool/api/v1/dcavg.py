# safetool/api/v1/dcavg.py
from typing import Annotated

from fastapi import APIRouter, Depends

from safetool.core.security import get_current_user
from safetool.schemas.auth import UserPublic
from safetool.schemas.dcavg import (
    DcavgCalculationResult,
    DemandCalculationRequest,
    EnhancedDcavgInput,
    EnhancedDcavgResult,
    SeriesDeviceCheckRequest,
    SeriesDeviceCheckResult,
)
from safetool.services.dcavg_service import dcavg_service as svc

CurrentUser = Annotated[UserPublic, Depends(get_current_user)]

# ISO 13849-1: cálculos puntuales
iso13849_router = APIRouter(prefix="/api/iso13849/calculation", tags=["ISO 13849"])

# DCavg con registro paso a paso
router = APIRouter(prefix="/api/dcavg", tags=["DCavg"])

@iso13849_router.post(
    "/dcavg/regular",
    response_model=DcavgCalculationResult,
    summary="DCavg de equipos en serie (método regular, Anexo K)",
)
def dcavg_regular(payload: DemandCalculationRequest, _user: CurrentUser):
    return svc.calculate_regular(payload.devices or [], payload.demand_rate, payload.series_count)

@iso13849_router.post(
    "/series/check",
    response_model=SeriesDeviceCheckResult,
    summary="Chequeo de cantidad de equipos en serie",
)
def series_check(payload: SeriesDeviceCheckRequest, _user: CurrentUser):
    return svc.check_series_limit(payload.series_count, payload.target_dcavg)

@router.post(
    "/calculate-enhanced",
    response_model=EnhancedDcavgResult,
    summary="DCavg mejorado con parámetros de prueba",
)
def calculate_enhanced(payload: EnhancedDcavgInput, _user: CurrentUser):
    return svc.calculate_enhanced(payload)
