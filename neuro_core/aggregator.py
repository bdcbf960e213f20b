from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional
import logging, uuid

from .recommendations import for_risk
from .scoring import classify_risk, score_adaptive, score_domain
from .store import ResultStore
from .types import AssessmentResult, Response, SessionState, TestItem

log = logging.getLogger(__name__)


class ResultAggregator:
    """Builds the one immutable result of a finished session and hands it on."""

    def __init__(self, store: ResultStore, on_result: Optional[Callable[[AssessmentResult], None]] = None):
        self.store = store
        self.on_result = on_result

    def finalize(
        self,
        state: SessionState,
        items: List[TestItem],
        responses: Mapping[str, Response],
        now_ms: int,
        *,
        mode: str = "battery",
        difficulty_history: Optional[List[int]] = None,
        audit_events: Optional[List[Dict[str, object]]] = None,
    ) -> AssessmentResult:
        if mode == "adaptive":
            score = score_adaptive(items, responses)
        else:
            score = score_domain(state.domain, responses)
        risk = classify_risk(score)
        result = AssessmentResult(
            id=str(uuid.uuid4()),
            domain=state.domain,
            score=int(score),
            risk_level=risk,  # type: ignore[arg-type]
            recommendations=for_risk(state.domain, risk),
            responses=dict(responses),
            duration_ms=max(0, int(now_ms) - state.start_epoch_ms),
            question_count=len(items),
            mode=mode,  # type: ignore[arg-type]
            completed_at=datetime.now(timezone.utc).isoformat(),
            skipped_indices=list(state.skipped_indices),
            difficulty_history=list(difficulty_history or []),
            audit_events=list(audit_events or []),
        )
        self.store.add_result(result)
        log.info("session %s finished: %s %s score=%d risk=%s",
                 state.session_id, state.domain, mode, result.score, risk)
        if self.on_result is not None:
            self.on_result(result)
        return result
