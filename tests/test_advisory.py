# tests/test_advisory.py
from __future__ import annotations

import pytest

from app.core.config import Settings
from app.core.errors import AdvisoryUnavailableError
from app.schemas.treatment import SystemParams, WaterQualityParams
from app.services.advisory import (
    FALLBACK_ADVISORY,
    OpenAIAdvisoryBackend,
    build_advisory_prompt,
    get_expert_analysis,
    parse_advisory_json,
)
from app.services.simulation import simulate


@pytest.fixture()
def ozone_case():
    system, water = SystemParams(), WaterQualityParams()
    return system, water, simulate(system, water)


@pytest.fixture()
def peroxone_case():
    system, water = SystemParams(h2o2_dose_mgL=1.0), WaterQualityParams()
    return system, water, simulate(system, water)


# -----------------------------------------------------------------------------
# 1) Prompt
# -----------------------------------------------------------------------------
def test_prompt_describes_ozone_mode(ozone_case):
    system, water, result = ozone_case
    prompt = build_advisory_prompt(system, water, result)

    assert "standard Ozonation mode" in prompt
    assert "whether AOP should be considered" in prompt
    assert f"Bromate: {result.bromate_ugL}" in prompt
    assert f"CT Value: {result.ct_value}" in prompt
    assert "Bromide: 150" in prompt


def test_prompt_describes_peroxone_mode(peroxone_case):
    system, water, result = peroxone_case
    prompt = build_advisory_prompt(system, water, result, bromate_limit_ugL=5, lrv_target=3)

    assert "Peroxone (O3/H2O2)" in prompt
    assert "0.3-0.5" in prompt
    assert "below 5 µg/L" in prompt
    assert "Target 3.0 Log" in prompt


# -----------------------------------------------------------------------------
# 2) Parsing
# -----------------------------------------------------------------------------
def test_parse_accepts_code_fenced_json():
    text = '```json\n{"summary": "ok", "recommendations": ["a"], "warnings": ["b"]}\n```'
    report = parse_advisory_json(text)
    assert report.summary == "ok"
    assert report.recommendations == ["a"]
    assert report.warnings == ["b"]


@pytest.mark.parametrize("text", ["", "not json", '{"recommendations": []}', "[1, 2]"])
def test_parse_rejects_malformed(text):
    with pytest.raises(AdvisoryUnavailableError):
        parse_advisory_json(text)


# -----------------------------------------------------------------------------
# 3) get_expert_analysis
# -----------------------------------------------------------------------------
def test_successful_analysis(ozone_case, advisory_backend):
    out = get_expert_analysis(*ozone_case, backend=advisory_backend)

    assert out.source == "llm"
    assert out.model == "static-test"
    assert out.report.summary == "Residual is low."
    assert len(advisory_backend.prompts) == 1
    assert "standard Ozonation mode" in advisory_backend.prompts[0]


@pytest.mark.parametrize(
    "reply, error",
    [
        ("", ConnectionError("connection refused")),
        ("", TimeoutError("timed out")),
        ("this is not json", None),
        ('{"summary": 42}', None),
    ],
)
def test_any_failure_returns_fallback(ozone_case, backend_factory, reply, error):
    out = get_expert_analysis(*ozone_case, backend=backend_factory(reply=reply, error=error))

    assert out.source == "fallback"
    assert out.model is None
    assert out.report == FALLBACK_ADVISORY
    assert out.report.summary == (
        "AI Analysis is currently unavailable. Please check manual calculations."
    )
    assert out.report.recommendations == [
        "Ensure CT is maintained for target LRVs.",
        "Verify bromate formation potential.",
    ]
    assert out.report.warnings == ["Engine connectivity issue."]


def test_fallback_is_a_copy(ozone_case, backend_factory):
    out = get_expert_analysis(*ozone_case, backend=backend_factory(error=RuntimeError("x")))
    out.report.recommendations.append("mutated")
    assert len(FALLBACK_ADVISORY.recommendations) == 2


def test_unconfigured_openai_backend_falls_back(ozone_case):
    cfg = Settings(ADVISORY_API_KEY=None)
    backend = OpenAIAdvisoryBackend(cfg)

    with pytest.raises(AdvisoryUnavailableError):
        backend.complete("prompt")

    out = get_expert_analysis(*ozone_case, backend=backend, cfg=cfg)
    assert out.source == "fallback"
