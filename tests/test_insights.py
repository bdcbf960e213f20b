from __future__ import annotations

import json
import logging

import pytest

from neuro_core import azure_cfg, llm_bridge
from neuro_core.insights import (
    AzureInsightService,
    LocalInsightService,
    build_insight_service,
)
from neuro_core.recommendations import fallback_advice
from neuro_core.types import AssessmentResult


def _result(score: int, domain: str = "cognitive") -> AssessmentResult:
    return AssessmentResult(
        id=f"r{score}", domain=domain, score=score, risk_level="low",
        recommendations=[], responses={}, duration_ms=1000, question_count=5,
    )


@pytest.mark.parametrize(
    "scores,band",
    [([90, 80], "good"), ([60, 70], "moderate"), ([40, 50], "room for improvement")],
)
def test_local_insights_band(scores, band):
    ins = LocalInsightService().analyze_results([_result(s) for s in scores])
    assert f"This indicates {band} neurological health." in ins.overall_assessment
    assert ins.source == "local"
    assert bool(ins.risk_factors) == (band == "room for improvement")


def test_local_insights_with_no_results():
    ins = LocalInsightService().analyze_results([])
    assert "0/100" in ins.overall_assessment


def test_azure_insights_parse_camel_case_reply():
    reply = "Here you go:\n" + json.dumps({
        "overallAssessment": "Scores look stable.",
        "strengths": ["memory"],
        "areasForImprovement": ["speed"],
        "recommendations": ["sleep well"],
        "riskFactors": [],
        "nextSteps": ["retest in a month"],
        "personalizedAdvice": "Keep going.",
    })
    svc = AzureInsightService(chat=lambda system, user: reply)
    ins = svc.analyze_results([_result(88)])
    assert ins.source == "azure"
    assert ins.overall_assessment == "Scores look stable."
    assert ins.areas_for_improvement == ["speed"]
    assert ins.next_steps == ["retest in a month"]


@pytest.mark.parametrize(
    "reply",
    ["not json at all", '{"strengths": ["x"]}', '{"overallAssessment": "ok", "strengths": "x"}'],
)
def test_azure_insights_bad_reply_falls_back(reply, caplog):
    svc = AzureInsightService(chat=lambda system, user: reply)
    with caplog.at_level(logging.WARNING, logger="neuro_core.insights"):
        ins = svc.analyze_results([_result(88)])
    assert ins.source == "local"
    assert "using local insights" in caplog.text


def test_azure_backend_exception_falls_back(caplog):
    def boom(system, user):
        raise ConnectionError("timeout")

    svc = AzureInsightService(chat=boom)
    with caplog.at_level(logging.WARNING, logger="neuro_core.insights"):
        recs = svc.recommend(55, "motor", {})
    assert recs == fallback_advice("motor")
    assert "timeout" in caplog.text


def test_azure_recommend_json_list_and_bullets():
    svc = AzureInsightService(chat=lambda s, u: '["a", "b", "c", "d", "e", "f"]')
    assert svc.recommend(70, "speech", {}) == ["a", "b", "c", "d", "e"]
    svc = AzureInsightService(chat=lambda s, u: "Try these:\n- walk daily\n2) read aloud\n")
    assert svc.recommend(70, "speech", {}) == ["walk daily", "read aloud"]


def test_extract_helpers_reject_garbage():
    with pytest.raises(ValueError):
        llm_bridge.extract_json("nothing here")
    with pytest.raises(ValueError):
        llm_bridge.extract_list("nothing here")


def test_build_insight_service_picks_backend():
    assert isinstance(build_insight_service({}), LocalInsightService)
    assert isinstance(build_insight_service({"USE_LLM_INSIGHTS": True}), LocalInsightService)
    svc = build_insight_service({"USE_LLM_INSIGHTS": True, "INSIGHT_BACKEND": "Azure"})
    assert isinstance(svc, AzureInsightService)


def test_azure_settings_report_missing_keys(monkeypatch, tmp_path):
    for env in ("AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY",
                "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT"):
        monkeypatch.delenv(env, raising=False)
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
    with pytest.raises(RuntimeError) as exc:
        azure_cfg.settings(str(tmp_path / "missing.json"))
    assert "AZURE_OPENAI_API_KEY" in str(exc.value)
    assert "AZURE_OPENAI_ENDPOINT" not in str(exc.value)


def test_azure_settings_fill_from_json(monkeypatch, tmp_path):
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
    for env in ("AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "AZURE_OPENAI_DEPLOYMENT"):
        monkeypatch.delenv(env, raising=False)
    path = tmp_path / "azure.json"
    path.write_text(json.dumps({"api_key": "k", "api_version": "2024-02-01", "deployment": "gpt"}))
    s = azure_cfg.settings(str(path))
    assert s.endpoint == "https://example.openai.azure.com"
    assert s.deployment == "gpt"


def test_backend_in_use_reports_active_backend():
    assert llm_bridge.backend_in_use({}) == "none"
    assert llm_bridge.backend_in_use({"INSIGHT_BACKEND": "azure"}) == "none"
    assert llm_bridge.backend_in_use({"USE_LLM_INSIGHTS": True, "INSIGHT_BACKEND": " Azure "}) == "azure"
