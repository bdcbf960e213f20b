from __future__ import annotations
from typing import Iterable, List


class EngineError(Exception):
    """Base class for assessment engine errors."""


class ValidationError(EngineError):
    """A manually entered response failed its item rules; the item does not advance."""

    def __init__(self, messages: Iterable[str]):
        self.messages: List[str] = [str(m) for m in messages]
        super().__init__("; ".join(self.messages) or "invalid response")


class SessionStateError(EngineError):
    pass


class InsightServiceError(EngineError):
    pass
