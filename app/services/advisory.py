# app/services/advisory.py
# ✅ Advisory(LLM 공정 감사) 경계
# - prompt 구성 → backend.complete() → JSON 파싱 → AdvisoryReport
# - 어떤 실패든 FALLBACK_ADVISORY 로 대체 (호출자는 예외를 보지 않음)

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger
from pydantic import ValidationError

from app.core.config import Settings, settings as default_settings
from app.core.errors import AdvisoryUnavailableError
from app.schemas.advisory import AdvisoryOut, AdvisoryReport
from app.schemas.treatment import SystemParams, TreatmentResult, WaterQualityParams

SYSTEM_PROMPT = (
    "You are a senior water process engineer auditing ozone and peroxone "
    "treatment designs. Respond with a single JSON object with keys "
    '"summary" (string), "recommendations" (array of strings) and '
    '"warnings" (array of strings). No markdown, no code fences.'
)

FALLBACK_ADVISORY = AdvisoryReport(
    summary="AI Analysis is currently unavailable. Please check manual calculations.",
    recommendations=[
        "Ensure CT is maintained for target LRVs.",
        "Verify bromate formation potential.",
    ],
    warnings=["Engine connectivity issue."],
)


# -----------------------------------------------------------------------------
# Prompt
# -----------------------------------------------------------------------------
def build_advisory_prompt(
    system: SystemParams,
    water: WaterQualityParams,
    result: TreatmentResult,
    *,
    bromate_limit_ugL: float = 10.0,
    lrv_target: float = 4.0,
) -> str:
    is_aop = system.is_aop
    mode_line = (
        "The system is operating in Peroxone (O3/H2O2) Advanced Oxidation Mode."
        if is_aop
        else "The system is operating in standard Ozonation mode."
    )
    focus_line = (
        "the H2O2:O3 mass ratio (standard target is often 0.3-0.5 mg/mg)"
        if is_aop
        else "whether AOP should be considered for better taste and odor control"
    )

    sections = [
        "Analyze the following water ozone treatment simulation results as a senior water process engineer.",
        mode_line,
        "Focus on oxidation (MIB/Geosmin/DOC), disinfection inactivation, and the molar ratio balance.",
        "TREATMENT GOALS:\n"
        f"- Target {lrv_target:.1f} Log inactivation for Viruses, Bacteria, and Cryptosporidium.\n"
        f"- Bromate formation must stay below {bromate_limit_ugL:g} µg/L.\n"
        "- Maximize MIB/Geosmin removal.",
        "SYSTEM CONFIGURATION:\n"
        f"- Flow: {system.flow_m3h:g} m³/h\n"
        f"- Ozone Dose: {system.ozone_dose_mgL:g} mg/L\n"
        f"- H2O2 Dose: {system.h2o2_dose_mgL:g} mg/L\n"
        f"- Ozone Residual: {result.calculated_residual_mgL} mg/L\n"
        f"- T10 Contact Time: {result.contact_time_t10_min} min\n"
        f"- CT Value: {result.ct_value} mg·min/L",
        "INFLUENT WATER:\n"
        f"- Temperature: {water.temperature_C:g} °C\n"
        f"- pH: {water.ph:g}\n"
        f"- Bromide: {water.bromide_ugL:g} µg/L\n"
        f"- Ammonia: {water.ammonia_mgL:g} mg/L\n"
        f"- DOC: {water.doc_mgL:g} mg/L\n"
        f"- MIB/Geosmin: {water.mib_ngL:g}/{water.geosmin_ngL:g} ng/L",
        "TREATMENT RESULTS:\n"
        f"- Bromate: {result.bromate_ugL} µg/L\n"
        f"- MIB Removal: {result.removal_mib_pct}%\n"
        f"- Geosmin Removal: {result.removal_geosmin_pct}%\n"
        f"- DOC Removal: {result.removal_doc_pct}%\n"
        f"- Virus LRV: {result.lrv_virus}\n"
        f"- Bacteria LRV: {result.lrv_bacteria}\n"
        f"- Cryptosporidium LRV: {result.lrv_protozoa}",
        "Provide a professional analysis in JSON format addressing safety, efficiency, and regulatory risk. "
        f"Specifically comment on {focus_line}.",
    ]
    return "\n\n".join(sections)


def _strip_code_fences(text: str) -> str:
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_advisory_json(text: str) -> AdvisoryReport:
    try:
        payload = json.loads(_strip_code_fences(text or ""))
        return AdvisoryReport.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise AdvisoryUnavailableError(f"Malformed advisory response: {e}") from e


# -----------------------------------------------------------------------------
# Backends
# -----------------------------------------------------------------------------
class AdvisoryBackend(ABC):
    """구조화 요청(prompt) → 원문 텍스트. 실패 시 예외."""

    model: Optional[str] = None

    @abstractmethod
    def complete(self, prompt: str) -> str:
        ...


class OpenAIAdvisoryBackend(AdvisoryBackend):
    """OpenAI 호환 chat.completions 엔드포인트 (JSON response format)."""

    def __init__(self, cfg: Optional[Settings] = None) -> None:
        self.cfg = cfg or default_settings
        self.model = self.cfg.ADVISORY_MODEL

    def _client(self):
        if not self.cfg.ADVISORY_API_KEY:
            raise AdvisoryUnavailableError(
                "Advisory service not configured. Set ADVISORY_API_KEY."
            )
        from openai import OpenAI

        return OpenAI(
            api_key=self.cfg.ADVISORY_API_KEY,
            base_url=self.cfg.ADVISORY_BASE_URL,
            timeout=self.cfg.ADVISORY_TIMEOUT_S,
            max_retries=1,
        )

    def complete(self, prompt: str) -> str:
        client = self._client()
        logger.info(f"Advisory: calling model={self.model}")
        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.cfg.ADVISORY_MAX_TOKENS,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------
def get_expert_analysis(
    system: SystemParams,
    water: WaterQualityParams,
    result: TreatmentResult,
    backend: Optional[AdvisoryBackend] = None,
    cfg: Optional[Settings] = None,
) -> AdvisoryOut:
    cfg = cfg or default_settings
    backend = backend or OpenAIAdvisoryBackend(cfg)
    prompt = build_advisory_prompt(
        system,
        water,
        result,
        bromate_limit_ugL=cfg.BROMATE_LIMIT_UGL,
        lrv_target=cfg.LRV_TARGET,
    )

    try:
        report = parse_advisory_json(backend.complete(prompt))
    except Exception as e:
        # transport / timeout / schema 오류 모두 동일하게 fallback
        logger.warning(f"Advisory analysis failed, using fallback: {e}")
        return AdvisoryOut(report=FALLBACK_ADVISORY.model_copy(deep=True), source="fallback")

    return AdvisoryOut(report=report, source="llm", model=backend.model)
