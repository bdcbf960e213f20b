from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Literal, Tuple
from .capture import RawCapture, capture_to_dict

Domain = Literal["cognitive","motor","speech","behavioral"]
RiskLevel = Literal["low","moderate","high"]
Mode = Literal["battery","adaptive"]
ItemKind = Literal[
    "continue","text","date","timed_text","radio","motion","tap","drawing","audio","gait",
    "reaction_time","spatial_memory","executive_function",
    "memory_game","number_sequence","word_association","pattern_recognition",
]

def _frozen_map(d: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(d or {}))

@dataclass(frozen=True)
class TestItem:
    id: str; domain: str; kind: str
    difficulty: Optional[int] = None
    time_limit_seconds: Optional[int] = None
    payload: Mapping[str, Any] = field(default_factory=dict)
    optional: bool = False
    __test__ = False  # keep pytest from collecting this as a test class
    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", _frozen_map(self.payload))
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id, "domain": self.domain, "kind": self.kind,
            "difficulty": self.difficulty, "time_limit_seconds": self.time_limit_seconds,
            "payload": dict(self.payload), "optional": self.optional,
        }
@dataclass(frozen=True)
class Response:
    item_id: str; capture: RawCapture; recorded_at_epoch_ms: int
    @property
    def is_error(self) -> bool:
        return self.capture.kind == "error"
@dataclass(frozen=True)
class PerformanceSample:
    score: float; accuracy: float; time_spent_ms: int = 0
@dataclass
class DifficultyState:
    level: int
    history: List[int] = field(default_factory=list)
@dataclass
class SessionState:
    session_id: str
    domain: str
    start_epoch_ms: int
    current_item_index: int = 0
    completed_indices: List[int] = field(default_factory=list)
    skipped_indices: List[int] = field(default_factory=list)
@dataclass(frozen=True)
class NextState:
    advanced: bool
    item: Optional[TestItem]
    terminal: bool
    reason: str = ""
@dataclass(frozen=True)
class SessionProgress:
    session_id: str
    domain: str
    mode: str
    current_item_index: int
    total_items: int
    completed_indices: List[int]
    skipped_indices: List[int]
    completion_rate: float
    elapsed_seconds: float
    estimated_remaining_seconds: int
    time_remaining_seconds: Optional[float] = None
    difficulty_level: Optional[int] = None
@dataclass(frozen=True)
class AssessmentResult:
    id: str
    domain: str
    score: int
    risk_level: RiskLevel
    recommendations: Tuple[str, ...]
    responses: Mapping[str, Response]
    duration_ms: int
    question_count: int
    mode: Mode = "battery"
    completed_at: str = ""
    skipped_indices: Tuple[int, ...] = ()
    difficulty_history: Tuple[int, ...] = ()
    audit_events: Tuple[Mapping[str, object], ...] = ()
    def __post_init__(self) -> None:
        # sequences arrive as the session's live lists; freeze copies
        object.__setattr__(self, "responses", _frozen_map(self.responses))
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "skipped_indices", tuple(self.skipped_indices))
        object.__setattr__(self, "difficulty_history", tuple(self.difficulty_history))
        object.__setattr__(self, "audit_events", tuple(_frozen_map(e) for e in self.audit_events))

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly representation handed to hosts and insight backends."""

        return {
            "id": self.id,
            "domain": self.domain,
            "mode": self.mode,
            "score": self.score,
            "risk_level": self.risk_level,
            "recommendations": list(self.recommendations),
            "responses": {
                iid: {"capture": capture_to_dict(r.capture), "recorded_at_epoch_ms": r.recorded_at_epoch_ms}
                for iid, r in self.responses.items()
            },
            "duration_ms": self.duration_ms,
            "question_count": self.question_count,
            "completed_at": self.completed_at,
            "skipped_indices": list(self.skipped_indices),
            "difficulty_history": list(self.difficulty_history),
            "audit_events": [dict(e) for e in self.audit_events],
        }
