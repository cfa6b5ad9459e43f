# tests/test_dcavg_service.py
import math

import pytest

from safetool.schemas.dcavg import DeviceDcavgInfo, EnhancedDcavgInput, TestParameters
from safetool.services.dcavg_service import DcavgService


@pytest.fixture()
def svc():
    return DcavgService()


def dev(id_, dc):
    return DeviceDcavgInfo(id=id_, dcavg=dc)


# ── límite de enmascaramiento ────────────────────────────────────────────────

@pytest.mark.parametrize("series, rate, expected", [
    (0, 0.5, 0.99),
    (1, 0.5, 0.99),
    (3, 1.0, 0.95),
    (3, 0.0, 0.95),
    (10, 1.0, 0.89),
    (20, 1.0, 0.89),
    (2, 0.5, 0.97 * 0.9),
    (10, 0.1, 0.89 * 0.82),
])
def test_masking_limit(svc, series, rate, expected):
    assert svc.masking_limit(series, rate) == pytest.approx(expected)


# ── método regular ───────────────────────────────────────────────────────────

def test_regular_without_devices(svc):
    r = svc.calculate_regular([], 0.5, 2)
    assert r.dcavg == 0
    assert r.method == "regular"
    assert r.masking_limit == 0
    assert r.warnings == ["No device information provided"]


def test_regular_single_device_no_test_equipment(svc):
    r = svc.calculate_regular([dev("a", 0.5)], 0.0, 1)
    assert r.dcavg == pytest.approx(0.5)
    assert r.masking_limit == pytest.approx(0.99)
    assert r.warnings == []


def test_regular_clamps_to_masking_limit(svc):
    r = svc.calculate_regular([dev("a", 0.9), dev("b", 0.6)], 0.5, 2)
    limit = 0.97 * 0.9
    assert r.masking_limit == pytest.approx(limit)
    assert r.dcavg == pytest.approx(limit)
    assert len(r.warnings) == 2
    assert r.warnings[0].startswith("Fault masking risk")
    assert "96.20%" in r.warnings[0]


def test_regular_skips_out_of_range_devices(svc):
    r = svc.calculate_regular([dev("x", 1.5), dev("y", 0.5)], 0.0, 1)
    assert r.dcavg == pytest.approx(0.5)
    assert r.warnings == ["Device x DCavg value 1.5 is outside the valid range [0,1]"]


def test_regular_test_equipment_dc_is_capped(svc):
    # demand_rate * 0.1 > 0.99 => se usa 0.99
    r = svc.calculate_regular([dev("a", 0.0)], 50.0, 1)
    assert r.dcavg == pytest.approx(0.99)


# ── chequeo de equipos en serie ──────────────────────────────────────────────

def test_series_check_within_limit(svc):
    r = svc.check_series_limit(3, 0.9)
    assert r.series_count == 3
    assert r.is_within_limit is True
    assert r.warnings == []


def test_series_check_too_many_devices_and_unreachable_target(svc):
    r = svc.check_series_limit(12, 0.95)
    assert r.is_within_limit is False
    assert len(r.warnings) == 4
    assert "(12)" in r.warnings[0]
    assert "95.00%" in r.warnings[2]
    assert "89.00%" in r.warnings[3]


def test_series_check_target_only(svc):
    r = svc.check_series_limit(2, 0.99)
    assert r.is_within_limit is True
    assert len(r.warnings) == 2


# ── cálculo mejorado ─────────────────────────────────────────────────────────

def test_enhanced_with_test_parameters(svc):
    data = EnhancedDcavgInput(
        devices=[dev("a", 0.9), dev("b", 0.5)],
        demand_rate=1.0,
        test_parameters=TestParameters(test_frequency=2.0, test_coverage=0.95),
    )
    r = svc.calculate_enhanced(data)

    assert r.method == "regular-enhanced"
    assert r.intermediate_product == pytest.approx(0.05)
    assert r.masking_limit == pytest.approx(0.97)
    assert r.dcavg == pytest.approx(0.97)
    assert [s.step for s in r.calculation_steps] == [1, 2, 3, 4, 5]
    assert len(r.calculation_steps[1].details) == 2
    assert len(r.calculation_steps[2].details) == 2
    assert len(r.warnings) == 2
    assert r.warnings[1] == "The masking limit has been applied"
    # límite + dispositivo con DCavg bajo (encabezado y detalle)
    assert len(r.recommendations) == 3
    assert r.recommendations[2] == "  - Device b: DCavg=50.00%"


def test_enhanced_without_devices_has_zero_limit(svc):
    r = svc.calculate_enhanced(EnhancedDcavgInput())
    assert r.intermediate_product == 1.0
    assert r.masking_limit == 0.0
    # el DC de prueba simplificado (0.1) queda recortado por el límite
    assert r.dcavg == 0.0
    assert r.warnings == [
        "No device information provided",
        "DCavg (10.00%) exceeds the fault masking limit (0.00%)",
        "The masking limit has been applied",
    ]
    assert r.recommendations == [
        "Reduce the number of series devices or increase the test frequency",
        "Increase test coverage to 90% or more",
    ]


def test_enhanced_reports_but_keeps_out_of_range_values(svc):
    data = EnhancedDcavgInput(devices=[dev("z", 1.2)], demand_rate=2.0)
    r = svc.calculate_enhanced(data)
    assert "Device z DCavg value 1.2 is outside the valid range [0,1]" in r.warnings
    assert "Demand rate 2.0 is outside the valid range [0,1]" in r.warnings
    assert r.intermediate_product == pytest.approx(-0.2)


def test_enhanced_test_parameters_without_frequency_give_no_test_dc(svc):
    data = EnhancedDcavgInput(
        devices=[dev("a", 0.5)],
        demand_rate=0.5,
        test_parameters=TestParameters(test_frequency=0.0, test_coverage=0.95),
    )
    r = svc.calculate_enhanced(data)
    assert r.dcavg == pytest.approx(0.5)
    assert r.calculation_steps[2].details == []


def test_enhanced_test_dc_formula(svc):
    params = TestParameters(test_frequency=1.0, test_coverage=0.5)
    data = EnhancedDcavgInput(devices=[dev("a", 0.0)], demand_rate=0.5, test_parameters=params)
    r = svc.calculate_enhanced(data)
    expected = 0.5 * (1 - math.exp(-0.5))
    assert r.dcavg == pytest.approx(expected)
    assert "Increase test coverage to 90% or more" in r.recommendations


def test_enhanced_many_series_devices_recommendation(svc):
    data = EnhancedDcavgInput(
        devices=[dev(f"d{i}", 0.9) for i in range(6)],
        test_parameters=TestParameters(test_frequency=1.0, test_coverage=0.99),
    )
    r = svc.calculate_enhanced(data)
    assert any("Series device count (6)" in x for x in r.recommendations)
