# safetool/services/dcavg_service.py
"""
Cálculos de DCavg (cobertura de diagnóstico promedio) según ISO 13849-1, Anexo K.

Fórmula del método regular para N equipos en serie más el equipo de prueba:

    DCavg = 1 - (1 - DC1) * (1 - DC2) * ... * (1 - DCn) * (1 - DCtest)

El resultado se acota con el límite de enmascaramiento de fallas, que baja a
medida que crece la cantidad de equipos en serie. Ningún cálculo lanza
excepciones: los problemas de entrada se devuelven como advertencias.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional

from safetool.schemas.dcavg import (
    CalculationStep,
    DcavgCalculationResult,
    DeviceContribution,
    DeviceDcavgInfo,
    EnhancedDcavgInput,
    EnhancedDcavgResult,
    SeriesDeviceCheckResult,
    TestParameters,
)

log = logging.getLogger(__name__)

MAX_TEST_DC = 0.99
BASE_MASKING_LIMIT = 0.99
MIN_MASKING_LIMIT = 0.5
MAX_SERIES_REDUCTION = 0.1
SERIES_REDUCTION_STEP = 0.02
RECOMMENDED_MAX_SERIES = 10
LOW_DCAVG_THRESHOLD = 0.6
MANY_SERIES_DEVICES = 5
RECOMMENDED_TEST_COVERAGE = 0.9


def _in_unit_range(value: float) -> bool:
    return 0.0 <= value <= 1.0


def _simplified_test_dc(demand_rate: float) -> float:
    """DC del equipo de prueba estimado solo a partir de la tasa de demanda."""
    if demand_rate > 0:
        return min(MAX_TEST_DC, demand_rate * 0.1)
    return 0.0


class DcavgService:
    def masking_limit(self, series_count: int, demand_rate: float) -> float:
        """
        Límite de enmascaramiento de fallas (Anexo K).

        Con un solo equipo no hay enmascaramiento posible. Desde el segundo,
        cada equipo resta 2 puntos (máximo 10), y una tasa de demanda baja
        (0 < rate < 1) reduce el límite otro poco. Nunca baja de 0.5.
        """
        if series_count <= 1:
            return BASE_MASKING_LIMIT
        reduction = min(MAX_SERIES_REDUCTION, (series_count - 1) * SERIES_REDUCTION_STEP)
        limit = BASE_MASKING_LIMIT - reduction
        if 0 < demand_rate < 1:
            limit *= 0.8 + demand_rate * 0.2
        return max(MIN_MASKING_LIMIT, limit)

    def calculate_regular(
        self,
        devices: List[DeviceDcavgInfo],
        demand_rate: float,
        series_count: int,
    ) -> DcavgCalculationResult:
        if not devices:
            return DcavgCalculationResult(
                dcavg=0.0,
                method="regular",
                masking_limit=0.0,
                warnings=["No device information provided"],
            )

        warnings: List[str] = []
        product = 1.0
        for device in devices:
            if not _in_unit_range(device.dcavg):
                # fuera de rango: se informa y no entra al producto
                warnings.append(
                    f"Device {device.id} DCavg value {device.dcavg} is outside the valid range [0,1]"
                )
                continue
            product *= 1 - device.dcavg

        test_dc = _simplified_test_dc(demand_rate)
        dcavg = 1 - product * (1 - test_dc)

        limit = self.masking_limit(series_count, demand_rate)
        if dcavg > limit:
            warnings.append(
                f"Fault masking risk: DCavg ({dcavg:.2%}) exceeds the masking limit ({limit:.2%})"
            )
            warnings.append("Recommendation: reduce the number of series devices or increase the test frequency")
            dcavg = limit

        log.debug("DCavg regular: devices=%d series=%d dcavg=%.4f limit=%.4f",
                  len(devices), series_count, dcavg, limit)
        return DcavgCalculationResult(
            dcavg=dcavg,
            method="regular",
            masking_limit=limit,
            warnings=warnings,
        )

    def check_series_limit(self, series_count: int, target_dcavg: float) -> SeriesDeviceCheckResult:
        result = SeriesDeviceCheckResult(series_count=series_count, is_within_limit=True)

        if series_count > RECOMMENDED_MAX_SERIES:
            result.is_within_limit = False
            result.warnings.append(
                f"Series device count ({series_count}) exceeds the recommended maximum ({RECOMMENDED_MAX_SERIES})"
            )
            result.warnings.append(
                "Too many series devices increase the fault masking risk; consider redesigning the architecture"
            )

        estimated = self.masking_limit(series_count, 1.0)
        if target_dcavg > estimated:
            result.warnings.append(
                f"Target DCavg ({target_dcavg:.2%}) may not be reachable with this many series devices"
            )
            result.warnings.append(f"Suggested maximum DCavg is about {estimated:.2%}")

        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Cálculo mejorado: deja registro paso a paso
    # ─────────────────────────────────────────────────────────────────────────

    def calculate_enhanced(self, data: EnhancedDcavgInput) -> EnhancedDcavgResult:
        result = EnhancedDcavgResult(method="regular-enhanced")

        self._validate_input(data, result)
        contributions = self._device_contributions(data.devices, result)
        test_dc = self._test_dc(data.test_parameters, data.demand_rate, result)
        series_dcavg = self._series_dcavg(contributions, test_dc, result)

        # sin equipos no hay límite calculable: queda en 0, igual que el método regular
        limit = self.masking_limit(len(data.devices), data.demand_rate) if data.devices else 0.0
        result.dcavg = min(series_dcavg, limit)
        result.masking_limit = limit
        if series_dcavg > limit:
            result.warnings.append(
                f"DCavg ({series_dcavg:.2%}) exceeds the fault masking limit ({limit:.2%})"
            )
            result.warnings.append("The masking limit has been applied")
            result.recommendations.append("Reduce the number of series devices or increase the test frequency")

        self._suggestions(data, result)
        return result

    def _validate_input(self, data: EnhancedDcavgInput, result: EnhancedDcavgResult) -> None:
        result.calculation_steps.append(CalculationStep(step=1, description="Input validation"))

        if not data.devices:
            result.warnings.append("No device information provided")
            return

        for device in data.devices:
            if not _in_unit_range(device.dcavg):
                result.warnings.append(
                    f"Device {device.id} DCavg value {device.dcavg} is outside the valid range [0,1]"
                )

        if not _in_unit_range(data.demand_rate):
            result.warnings.append(
                f"Demand rate {data.demand_rate} is outside the valid range [0,1]"
            )

    def _device_contributions(
        self,
        devices: List[DeviceDcavgInfo],
        result: EnhancedDcavgResult,
    ) -> List[DeviceContribution]:
        step = CalculationStep(step=2, description="Device DC contributions")
        result.calculation_steps.append(step)

        contributions: List[DeviceContribution] = []
        product = 1.0
        for device in devices:
            c = DeviceContribution(device_id=device.id, dcavg=device.dcavg, contribution=1 - device.dcavg)
            contributions.append(c)
            product *= c.contribution
            step.details.append(
                f"Device {device.id}: DCavg={device.dcavg:.2%}, contribution={c.contribution:.2%}"
            )

        result.intermediate_product = product
        return contributions

    def _test_dc(
        self,
        params: Optional[TestParameters],
        demand_rate: float,
        result: EnhancedDcavgResult,
    ) -> float:
        step = CalculationStep(step=3, description="Test equipment DC")
        result.calculation_steps.append(step)

        if params is not None:
            if params.test_frequency > 0 and params.test_coverage > 0:
                effectiveness = 1 - math.exp(-demand_rate * params.test_frequency)
                test_dc = min(MAX_TEST_DC, params.test_coverage * effectiveness)
                step.details.append(
                    f"Test frequency={params.test_frequency}, test coverage={params.test_coverage:.2%}"
                )
                step.details.append(f"Test effectiveness={effectiveness:.2%}, test DC={test_dc:.2%}")
                return test_dc
            return 0.0

        test_dc = _simplified_test_dc(demand_rate)
        if demand_rate > 0:
            step.details.append(f"Simplified estimate: test DC={test_dc:.2%}")
        return test_dc

    def _series_dcavg(
        self,
        contributions: List[DeviceContribution],
        test_dc: float,
        result: EnhancedDcavgResult,
    ) -> float:
        step = CalculationStep(step=4, description="Series DCavg")
        result.calculation_steps.append(step)

        product = math.prod(c.contribution for c in contributions) * (1 - test_dc)
        dcavg = 1 - product
        step.details.append(f"Product={product:.4%}, final DCavg={dcavg:.2%}")
        return dcavg

    def _suggestions(self, data: EnhancedDcavgInput, result: EnhancedDcavgResult) -> None:
        result.calculation_steps.append(CalculationStep(step=5, description="Optimization suggestions"))

        low = [d for d in data.devices if d.dcavg < LOW_DCAVG_THRESHOLD]
        if low:
            result.recommendations.append(
                f"Found {len(low)} device(s) with low DCavg (<60%); improve their diagnostic coverage"
            )
            for d in low:
                result.recommendations.append(f"  - Device {d.id}: DCavg={d.dcavg:.2%}")

        if len(data.devices) > MANY_SERIES_DEVICES:
            result.recommendations.append(
                f"Series device count ({len(data.devices)}) is high; consider redesigning the architecture"
            )

        params = data.test_parameters
        if params is None or params.test_coverage < RECOMMENDED_TEST_COVERAGE:
            result.recommendations.append("Increase test coverage to 90% or more")


dcavg_service = DcavgService()
