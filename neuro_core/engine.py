# neuro_core/engine.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import logging, time, uuid

from .aggregator import ResultAggregator
from .batteries import load_battery
from .capture import ErrorCapture, RawCapture
from .config import (
    ADAPTIVE_FAMILIES,
    ADAPTIVE_MAX_ITEMS,
    DEBUG_TRACE,
    DOMAINS,
    TIMEOUT_MESSAGE,
    TRACE_FIELDS,
    load_config,
    seed_rng,
)
from .difficulty import AdaptiveDifficultyController
from .errors import SessionStateError
from .generator import ItemGenerator, ProceduralItemGenerator
from .insights import InsightService, Insights, LocalInsightService
from .scoring import performance_sample
from .sequencer import TestSequencer
from .session import SessionController
from .store import InMemoryResultStore, ResultStore
from .types import AssessmentResult, NextState, SessionProgress, SessionState, TestItem

log = logging.getLogger(__name__)

Clock = Callable[[], int]


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _emit_trace(**values: object) -> None:
    if not DEBUG_TRACE:
        return
    ordered = []
    for key in TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(str(val) for val in ordered))


class AssessmentSession:
    """One running assessment: sequencing, timing and (adaptive) difficulty.

    All transitions are driven by discrete calls from the host: a capture
    arriving, a capture error, a navigation action or a timer tick.
    """

    def __init__(
        self,
        state: SessionState,
        sequencer: TestSequencer,
        aggregator: ResultAggregator,
        clock: Clock,
        *,
        controller: Optional[AdaptiveDifficultyController] = None,
        on_finish: Optional[Callable[["AssessmentSession", AssessmentResult], None]] = None,
    ):
        self.state = state
        self.sequencer = sequencer
        self.aggregator = aggregator
        self.clock = clock
        self.controller = controller
        self.mode = "adaptive" if controller is not None else "battery"
        self.timing = SessionController(state, sequencer, mode=self.mode)
        self.audit_events: List[Dict[str, object]] = []
        self.result: Optional[AssessmentResult] = None
        self._on_finish = on_finish
        self._timeout_state: Optional[NextState] = None
        self.sequencer.mark_presented(self.clock())

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def finished(self) -> bool:
        return self.result is not None

    def current_item(self) -> Optional[TestItem]:
        return self.sequencer.current_item()

    def _check_item(self, item_id: Optional[str]) -> TestItem:
        if self.finished:
            raise SessionStateError("session already finished")
        it = self.sequencer.current_item()
        if it is None:
            raise SessionStateError("no current item")
        if item_id is not None and item_id != it.id:
            raise SessionStateError(f"response for {item_id} but current item is {it.id}")
        return it

    # ---- capture events ----
    def record(self, capture: RawCapture, item_id: Optional[str] = None) -> None:
        self._check_item(item_id)
        self.sequencer.record(capture, self.clock())

    def submit(self, capture: RawCapture, item_id: Optional[str] = None) -> NextState:
        self.record(capture, item_id)
        return self.advance()

    def fail(self, message: str, item_id: Optional[str] = None) -> NextState:
        """Capture could not be obtained; recorded as an error and the item completes."""
        return self.submit(ErrorCapture(message=message or "capture failed"), item_id)

    # ---- navigation ----
    def advance(self) -> NextState:
        if self.finished:
            return NextState(False, None, True, "session already finished")
        it = self.sequencer.current_item()
        resp = self.sequencer.current_response()
        if it is None or resp is None:
            return NextState(False, it, self.sequencer.is_terminal(), "no response recorded")

        spent = self.sequencer.time_spent_ms()
        sample = performance_sample(it, resp.capture, spent)
        level_before = self.controller.level if self.controller else None
        next_level = self.controller.update(sample) if self.controller else None
        event = {
            "t": datetime.now(timezone.utc).isoformat(),
            "item_id": it.id,
            "kind": it.kind,
            "difficulty": it.difficulty,
            "level_before": level_before,
            "level_after": next_level,
            "score": sample.score if sample else None,
            "accuracy": sample.accuracy if sample else None,
            "latency_ms": spent,
            "error": getattr(resp.capture, "message", None),
        }
        self.audit_events.append(event)
        _emit_trace(session=self.session_id, **event)

        self.timing.stop_item_timer()
        nxt = self.sequencer.advance(next_difficulty=next_level)
        if nxt.terminal:
            self._finish()
        else:
            self.sequencer.mark_presented(self.clock())
        return nxt

    def skip(self) -> NextState:
        if self.finished:
            return NextState(False, None, True, "session already finished")
        it = self.sequencer.current_item()
        nxt = self.sequencer.skip()
        if nxt.advanced:
            self.timing.stop_item_timer()
            self.audit_events.append({
                "t": datetime.now(timezone.utc).isoformat(),
                "item_id": it.id if it else "",
                "kind": it.kind if it else "",
                "error": "skipped",
            })
            if nxt.terminal:
                self._finish()
            else:
                self.sequencer.mark_presented(self.clock())
        return nxt

    def previous(self) -> bool:
        if self.finished:
            return False
        ok = self.sequencer.previous()
        if ok:
            self.timing.stop_item_timer()
        return ok

    # ---- timers ----
    def start_timer(self, seconds: Optional[float] = None) -> Optional[float]:
        if self.finished:
            return None
        return self.timing.start_item_timer(self._on_timeout, seconds)

    def _on_timeout(self) -> None:
        it = self.sequencer.current_item()
        if it is None:
            return
        log.debug("time limit reached on %s", it.id)
        if not self.sequencer.has_response():
            self.sequencer.record(ErrorCapture(message=TIMEOUT_MESSAGE), self.clock())
        self._timeout_state = self.advance()

    def tick(self, seconds: float = 1.0) -> Optional[NextState]:
        """Feed elapsed time to the item timer; returns the transition if it expired."""
        self._timeout_state = None
        if self.finished:
            return None
        self.timing.tick(seconds)
        return self._timeout_state

    # ---- snapshots ----
    def progress(self) -> SessionProgress:
        return self.timing.progress(self.clock(), self.controller.level if self.controller else None)

    def _finish(self) -> None:
        self.result = self.aggregator.finalize(
            self.state,
            self.sequencer.items,
            self.sequencer.responses,
            self.clock(),
            mode=self.mode,
            difficulty_history=self.controller.history if self.controller else None,
            audit_events=self.audit_events,
        )
        if self._on_finish is not None:
            self._on_finish(self, self.result)


class AssessmentEngine:
    """Creates sessions and owns the injected collaborators they share."""

    def __init__(
        self,
        store: Optional[ResultStore] = None,
        *,
        clock: Optional[Clock] = None,
        generator: Optional[ItemGenerator] = None,
        insight_service: Optional[InsightService] = None,
        on_result: Optional[Callable[[AssessmentResult], None]] = None,
    ):
        self.cfg = load_config()
        self.store = store if store is not None else InMemoryResultStore()
        self.clock = clock or _wall_clock_ms
        self.generator = generator or ProceduralItemGenerator(rng=seed_rng(self.cfg))
        self.insights = insight_service or LocalInsightService()
        self.aggregator = ResultAggregator(self.store, on_result=on_result)
        self.sessions: Dict[str, AssessmentSession] = {}

    def start_session(
        self,
        domain: str,
        *,
        adaptive: bool = False,
        family: str = "cognitive",
        items: Optional[List[TestItem]] = None,
        start_level: Optional[int] = None,
    ) -> AssessmentSession:
        sid = str(uuid.uuid4())
        controller = None
        if adaptive:
            if family not in ADAPTIVE_FAMILIES:
                raise ValueError(f"unknown adaptive family: {family}")
            domain = "cognitive"
            controller = AdaptiveDifficultyController(start_level=start_level, max_items=ADAPTIVE_MAX_ITEMS)
        elif domain not in DOMAINS:
            raise ValueError(f"unknown domain: {domain}")
        state = SessionState(session_id=sid, domain=domain, start_epoch_ms=self.clock())
        if controller is not None:
            seq = TestSequencer(state, items, generator=self.generator, family=family,
                                max_items=controller.max_items, start_difficulty=controller.level)
        else:
            seq = TestSequencer(state, items if items is not None else load_battery(domain))
        sess = AssessmentSession(state, seq, self.aggregator, self.clock,
                                 controller=controller, on_finish=self._session_finished)
        self.sessions[sid] = sess
        log.debug("session %s started: %s adaptive=%s", sid, domain, adaptive)
        return sess

    def get_session(self, sid: str) -> Optional[AssessmentSession]:
        return self.sessions.get(sid)

    def _session_finished(self, sess: AssessmentSession, result: AssessmentResult) -> None:
        self.sessions.pop(sess.session_id, None)

    def narrative_recommendations(self, result: AssessmentResult) -> List[str]:
        """Best-effort narrative advice; the fixed table is returned on any failure."""
        try:
            recs = self.insights.recommend(result.score, result.domain, result.responses)
        except Exception as e:
            log.warning("narrative recommendations failed for %s: %s", result.id, e)
            return list(result.recommendations)
        return list(recs) or list(result.recommendations)

    def analyze(self, domain: Optional[str] = None) -> Insights:
        domains = [domain] if domain else list(DOMAINS)
        results = [r for d in domains for r in self.store.get_results_by_type(d)]
        return self.insights.analyze_results(results)
