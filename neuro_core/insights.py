# neuro_core/insights.py
from __future__ import annotations
import json, logging
from dataclasses import dataclass, asdict, field
from statistics import mean
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from . import llm_bridge
from .capture import capture_to_dict
from .config import get_backend, load_config
from .errors import InsightServiceError
from .recommendations import fallback_advice
from .types import AssessmentResult, Response

log = logging.getLogger(__name__)

_INSIGHT_KEYS = (
    "overall_assessment", "strengths", "areas_for_improvement", "recommendations",
    "risk_factors", "next_steps", "personalized_advice",
)
# camelCase keys the prompt asks the model for
_CAMEL = {
    "overallAssessment": "overall_assessment",
    "areasForImprovement": "areas_for_improvement",
    "riskFactors": "risk_factors",
    "nextSteps": "next_steps",
    "personalizedAdvice": "personalized_advice",
}


@dataclass
class Insights:
    overall_assessment: str
    strengths: List[str] = field(default_factory=list)
    areas_for_improvement: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_factors: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    personalized_advice: str = ""
    source: str = "local"

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class InsightService(Protocol):
    def analyze_results(self, results: Sequence[AssessmentResult]) -> Insights: ...
    def recommend(self, score: int, domain: str, responses: Mapping[str, Response]) -> List[str]: ...


def _band(avg: float) -> str:
    if avg >= 80: return "good"
    if avg >= 60: return "moderate"
    return "room for improvement"


class LocalInsightService:
    """Deterministic text built from the scores alone."""

    def analyze_results(self, results: Sequence[AssessmentResult]) -> Insights:
        avg = mean(r.score for r in results) if results else 0.0
        return Insights(
            overall_assessment=(
                f"Based on your test results, you have an average score of {round(avg)}/100. "
                f"This indicates {_band(avg)} neurological health."
            ),
            strengths=["Consistent test completion", "Good engagement with assessments"],
            areas_for_improvement=["Continue regular testing", "Focus on areas with lower scores"],
            recommendations=["Maintain regular assessment schedule", "Consider consulting a healthcare provider"],
            risk_factors=(["Low test scores may indicate need for evaluation"] if avg < 60 else []),
            next_steps=["Schedule follow-up tests", "Monitor progress over time"],
            personalized_advice="Continue with regular neurological assessments to track your health over time.",
        )

    def recommend(self, score: int, domain: str, responses: Mapping[str, Response]) -> List[str]:
        return fallback_advice(domain)


_ANALYZE_SYSTEM = (
    "You are a neurological health assistant reviewing screening results. "
    "Return ONLY a JSON object with keys: overallAssessment (string), strengths, areasForImprovement, "
    "recommendations, riskFactors, nextSteps (arrays of strings), personalizedAdvice (string). "
    "Be specific, actionable and empathetic. This is a screening aid, not a diagnosis."
)
_RECOMMEND_SYSTEM = (
    "You are a neurological health specialist. Return ONLY a JSON array of 5 short, specific, "
    "actionable recommendations."
)


def _responses_json(responses: Mapping[str, Response]) -> str:
    return json.dumps({iid: capture_to_dict(r.capture) for iid, r in responses.items()}, default=str)[:6000]


class AzureInsightService:
    """Narrative insights from Azure OpenAI with the local text as fallback.

    Any backend failure is logged and replaced by the fallback; callers never
    see an exception from here.
    """

    def __init__(self, chat: Optional[Callable[[str, str], str]] = None,
                 fallback: Optional[LocalInsightService] = None):
        self._chat = chat or (lambda system, user: llm_bridge.chat_azure(system, user))
        self.fallback = fallback or LocalInsightService()

    def _analyze(self, results: Sequence[AssessmentResult]) -> Insights:
        user = "Test results:\n" + json.dumps(
            [{"domain": r.domain, "score": r.score, "risk_level": r.risk_level,
              "completed_at": r.completed_at} for r in results], indent=2)
        raw = llm_bridge.extract_json(self._chat(_ANALYZE_SYSTEM, user))
        data: Dict[str, Any] = {_CAMEL.get(k, k): v for k, v in raw.items()}
        if not isinstance(data.get("overall_assessment"), str):
            raise InsightServiceError("reply is missing overallAssessment")
        kwargs: Dict[str, Any] = {}
        for k in _INSIGHT_KEYS:
            if k not in data:
                continue
            if k in ("overall_assessment", "personalized_advice"):
                kwargs[k] = str(data[k])
            elif isinstance(data[k], list):
                kwargs[k] = [str(x) for x in data[k]]
            else:
                raise InsightServiceError(f"{k} is not a list")
        return Insights(source="azure", **kwargs)

    def analyze_results(self, results: Sequence[AssessmentResult]) -> Insights:
        try:
            return self._analyze(results)
        except Exception as e:
            log.warning("insight backend failed, using local insights: %s", e)
            return self.fallback.analyze_results(results)

    def recommend(self, score: int, domain: str, responses: Mapping[str, Response]) -> List[str]:
        user = (f"A {domain} screening scored {score}/100. Test responses:\n"
                f"{_responses_json(responses)}")
        try:
            return llm_bridge.extract_list(self._chat(_RECOMMEND_SYSTEM, user))
        except Exception as e:
            log.warning("recommendation backend failed for %s, using fallback: %s", domain, e)
            return self.fallback.recommend(score, domain, responses)


def build_insight_service(cfg: Optional[Dict[str, Any]] = None) -> InsightService:
    backend = get_backend(cfg if cfg is not None else load_config())
    if backend == "azure":
        return AzureInsightService()
    return LocalInsightService()
