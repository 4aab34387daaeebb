# tests/test_engine_properties.py
# simulate() 의 물리적 성질 / 불변식 검증 (엔진 단위, HTTP 없음)

from __future__ import annotations

import math
import sys

import pytest
from pydantic import ValidationError

from app.schemas.treatment import (
    KineticParams,
    SimulationRequest,
    SystemParams,
    TreatmentResult,
    WaterQualityParams,
)
from app.services.simulation import PIPELINE, TreatmentSimulator, simulate
from app.services.simulation.engine import _run_pipeline


def run(system: dict | None = None, water: dict | None = None) -> TreatmentResult:
    return simulate(SystemParams(**(system or {})), WaterQualityParams(**(water or {})))


# -----------------------------------------------------------------------------
# 1) Default scenario
# -----------------------------------------------------------------------------
def test_default_scenario_end_to_end():
    r = run()

    assert r.hydraulic_retention_time_min == 18.0
    assert r.contact_time_t10_min == 10.8
    assert r.calculated_residual_mgL > 0
    assert r.ct_value == pytest.approx(0.51, abs=0.01)
    assert 0 < r.removal_mib_pct < 100
    assert 0 < r.removal_geosmin_pct < 100
    assert 0 < r.bromate_ugL < 10
    assert r.lrv_virus == pytest.approx(2.68, abs=0.01)
    assert r.lrv_bacteria == 4.0
    assert r.lrv_protozoa == pytest.approx(0.18, abs=0.01)
    assert r.final_ph == pytest.approx(7.675, abs=0.01)


def test_pipeline_order_is_fixed():
    assert [m.key for m in PIPELINE] == [
        "hydraulics",
        "residual",
        "ct_value",
        "oxidation",
        "bromate",
        "mineralization",
        "disinfection",
    ]


def test_out_of_order_pipeline_raises():
    reordered = (PIPELINE[2],) + PIPELINE[:2] + PIPELINE[3:]
    with pytest.raises(RuntimeError):
        _run_pipeline(SystemParams(), WaterQualityParams(), None, reordered)


# -----------------------------------------------------------------------------
# 2) Zero dose / degenerate input
# -----------------------------------------------------------------------------
def test_zero_ozone_dose_gives_no_credit_or_oxidation():
    r = run(system={"ozone_dose_mgL": 0})

    assert r.calculated_residual_mgL == 0.0
    assert r.ct_value == 0.0
    assert (r.lrv_virus, r.lrv_bacteria, r.lrv_protozoa) == (0.0, 0.0, 0.0)
    assert r.bromate_ugL == 0.0
    assert r.removal_mib_pct == 0.0
    assert r.removal_doc_pct == 0.0
    assert r.final_ph == 7.8


def test_zero_flow_is_finite():
    r = run(system={"flow_m3h": 0})
    assert r.hydraulic_retention_time_min == pytest.approx(18000.0)
    assert all(math.isfinite(v) for v in r.model_dump().values())


@pytest.mark.parametrize(
    "system, water",
    [
        ({"ozone_dose_mgL": 20, "h2o2_dose_mgL": 20}, {"ph": 14, "temperature_C": 40}),
        ({"ozone_dose_mgL": 0, "h2o2_dose_mgL": 5}, {"ph": 0, "temperature_C": 0}),
        ({"flow_m3h": 0, "ozone_dose_mgL": 20}, {"doc_mgL": 0.01}),
        ({"flow_m3h": 1e6, "baffling_factor": 0.01}, {"doc_mgL": 50, "bromide_ugL": 2000}),
        ({"ozone_dose_mgL": 10}, {"ph": 6.0, "ammonia_mgL": 5, "mib_ngL": 0, "geosmin_ngL": 0}),
    ],
)
def test_results_are_finite_and_non_negative(system, water):
    r = run(system, water)
    for name, v in r.model_dump().items():
        assert math.isfinite(v), name
        assert v >= 0, name
    assert r.lrv_virus <= 4.0
    assert r.lrv_bacteria <= 4.0
    assert r.lrv_protozoa <= 4.0
    assert r.removal_mib_pct <= 100.0
    assert r.removal_doc_pct <= 20.0


# -----------------------------------------------------------------------------
# 3) Peroxone / credit
# -----------------------------------------------------------------------------
def test_peroxone_mode_disqualifies_log_credit():
    r = run(system={"ozone_dose_mgL": 6.0, "h2o2_dose_mgL": 0.5})
    assert r.ct_value > 0
    assert (r.lrv_virus, r.lrv_bacteria, r.lrv_protozoa) == (0.0, 0.0, 0.0)


def test_peroxone_improves_taste_and_odor_removal():
    ozone = run(system={"ozone_dose_mgL": 2.5})
    aop = run(system={"ozone_dose_mgL": 2.5, "h2o2_dose_mgL": 1.0})
    assert aop.removal_mib_pct > ozone.removal_mib_pct
    assert aop.removal_doc_pct > ozone.removal_doc_pct


def test_log_credit_is_capped():
    r = run(system={"ozone_dose_mgL": 10.0, "flow_m3h": 10.0})
    assert r.lrv_virus == 4.0
    assert r.lrv_bacteria == 4.0
    assert r.lrv_protozoa == 4.0


# -----------------------------------------------------------------------------
# 4) Monotonicity
# -----------------------------------------------------------------------------
def test_ozone_only_results_monotone_in_dose():
    doses = [3.0, 4.0, 5.0, 6.0, 8.0]
    results = [run(system={"ozone_dose_mgL": d}) for d in doses]

    for lo, hi in zip(results, results[1:]):
        assert hi.ct_value > lo.ct_value
        assert hi.removal_mib_pct >= lo.removal_mib_pct
        assert hi.removal_geosmin_pct >= lo.removal_geosmin_pct
        assert hi.bromate_ugL > lo.bromate_ugL
        assert hi.lrv_virus >= lo.lrv_virus


def test_bromate_strictly_decreasing_in_peroxide():
    values = [run(system={"h2o2_dose_mgL": h}).bromate_ugL for h in (0.0, 0.5, 1.0, 2.0)]
    assert values == sorted(values, reverse=True)
    assert len(set(values)) == len(values)


def test_bromate_strictly_decreasing_in_ammonia():
    values = [run(water={"ammonia_mgL": n}).bromate_ugL for n in (0.0, 0.1, 0.5, 1.0)]
    assert values == sorted(values, reverse=True)
    assert len(set(values)) == len(values)


def test_bromate_increases_with_ph():
    low = run(water={"ph": 7.0, "ammonia_mgL": 0})
    high = run(water={"ph": 8.5, "ammonia_mgL": 0})
    assert high.bromate_ugL > low.bromate_ugL


def test_doc_scavenging_reduces_removal():
    clean = run(water={"doc_mgL": 1.0})
    dirty = run(water={"doc_mgL": 8.0})
    assert dirty.removal_mib_pct < clean.removal_mib_pct
    assert dirty.calculated_residual_mgL == 0.0


# -----------------------------------------------------------------------------
# 5) Concentration independence / kinetics scope / determinism
# -----------------------------------------------------------------------------
def test_percent_removal_independent_of_influent_concentration():
    a = run(water={"mib_ngL": 40.0, "geosmin_ngL": 35.0})
    b = run(water={"mib_ngL": 80.0, "geosmin_ngL": 70.0})

    assert a.removal_mib_pct == b.removal_mib_pct
    assert a.removal_geosmin_pct == b.removal_geosmin_pct
    assert b.final_mib_ngL == pytest.approx(2 * a.final_mib_ngL, abs=0.02)


def test_kinetic_override_only_affects_oxidation():
    base = simulate(SystemParams(), WaterQualityParams())
    slow = simulate(
        SystemParams(),
        WaterQualityParams(),
        KineticParams(mib_kOH=1.0e9, geosmin_kOH=1.0e9),
    )

    assert slow.removal_mib_pct < base.removal_mib_pct
    assert slow.removal_geosmin_pct < base.removal_geosmin_pct
    for field in ("ct_value", "bromate_ugL", "lrv_virus", "final_doc_mgL", "final_ph"):
        assert getattr(slow, field) == getattr(base, field)


def test_simulate_is_deterministic():
    system = SystemParams(ozone_dose_mgL=3.3, h2o2_dose_mgL=1.1)
    water = WaterQualityParams(ph=7.2, temperature_C=22)
    a = simulate(system, water)
    b = simulate(system, water)
    assert a == b
    assert a.model_dump_json() == b.model_dump_json()


def test_simulator_class_matches_module_function():
    req = SimulationRequest()
    assert TreatmentSimulator().simulate(req.system, req.water) == simulate(req.system, req.water)


def test_result_rounding_precision():
    r = run(system={"ozone_dose_mgL": 3.333}, water={"temperature_C": 17.7})
    assert r.ct_value == round(r.ct_value, 2)
    assert r.contact_time_t10_min == round(r.contact_time_t10_min, 1)
    assert r.removal_mib_pct == round(r.removal_mib_pct, 1)


# -----------------------------------------------------------------------------
# 6) Non-finite input / overflow
# -----------------------------------------------------------------------------
@pytest.mark.parametrize("value", [float("inf"), float("nan")])
def test_non_finite_inputs_are_rejected(value):
    with pytest.raises(ValidationError):
        SystemParams(ozone_dose_mgL=value)
    with pytest.raises(ValidationError):
        WaterQualityParams(bromide_ugL=value)
    with pytest.raises(ValidationError):
        KineticParams(mib_kOH=value)


def test_overflowing_contact_time_saturates_instead_of_zeroing():
    # 300 m³ / 1e-310 m³/h → HRT overflow (inf)
    r = run(system={"flow_m3h": 1e-310})

    assert r.hydraulic_retention_time_min == sys.float_info.max
    assert r.ct_value > 0
    assert r.lrv_virus == 4.0
    assert not (r.ct_value == 0 and r.lrv_virus > 0)
    for v in r.model_dump().values():
        assert math.isfinite(v)


def test_overflowing_contact_time_without_residual_gives_no_credit():
    r = run(system={"flow_m3h": 1e-310}, water={"doc_mgL": 8.0})
    assert r.ct_value == 0.0
    assert (r.lrv_virus, r.lrv_bacteria, r.lrv_protozoa) == (0.0, 0.0, 0.0)


def test_overflowing_bromate_is_reported_above_limit():
    req = SimulationRequest(
        system={"ozone_dose_mgL": 1e200},
        water={"bromide_ugL": 1e200},
    )
    out = TreatmentSimulator().run(req)

    assert out.result.bromate_ugL == sys.float_info.max
    assert out.compliance.bromate_status == "Above Limit"
    assert "bromate_limit" in {w.key for w in out.warnings}


# -----------------------------------------------------------------------------
# 7) Rounding
# -----------------------------------------------------------------------------
def test_doc_removal_rounds_exact_tie_up():
    r = run(system={"ozone_dose_mgL": 11.5}, water={"doc_mgL": 4.0})
    assert r.removal_doc_pct == 17.3
