from __future__ import annotations
import threading
from typing import Dict, List, Optional, Protocol
from .types import AssessmentResult


class ResultStore(Protocol):
    def add_result(self, result: AssessmentResult) -> None: ...
    def get_results_by_type(self, domain: str) -> List[AssessmentResult]: ...
    def get_latest_result(self, domain: str) -> Optional[AssessmentResult]: ...


class InMemoryResultStore:
    """Volatile, insertion-ordered store; one instance per host or per test."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: List[AssessmentResult] = []
        self._by_id: Dict[str, AssessmentResult] = {}

    def add_result(self, result: AssessmentResult) -> None:
        with self._lock:
            self._results.append(result)
            self._by_id[result.id] = result

    def get_results_by_type(self, domain: str) -> List[AssessmentResult]:
        with self._lock:
            return [r for r in self._results if r.domain == domain]

    def get_latest_result(self, domain: str) -> Optional[AssessmentResult]:
        with self._lock:
            for r in reversed(self._results):
                if r.domain == domain:
                    return r
        return None

    def get(self, result_id: str) -> Optional[AssessmentResult]:
        with self._lock:
            return self._by_id.get(result_id)

    def all(self) -> List[AssessmentResult]:
        with self._lock:
            return list(self._results)

    def __len__(self) -> int:
        return len(self._results)
