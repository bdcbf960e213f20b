# neuro_core/sequencer.py
from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Optional
import logging

from .capture import RawCapture
from .errors import SessionStateError
from .generator import ItemGenerator
from .types import NextState, Response, SessionState, TestItem
from .validators import validate

log = logging.getLogger(__name__)


class TestSequencer:
    """Ordered item list plus the response map for one session.

    Fixed batteries hand in the full list up front. Adaptive runs pass a
    generator and family; the list then grows by one item per ``advance``
    until ``max_items`` is reached.
    """

    __test__ = False

    def __init__(
        self,
        state: SessionState,
        items: Optional[List[TestItem]] = None,
        *,
        generator: Optional[ItemGenerator] = None,
        family: Optional[str] = None,
        max_items: Optional[int] = None,
        start_difficulty: Optional[int] = None,
    ):
        self.state = state
        self.adaptive = generator is not None
        self.generator = generator
        self.family = family
        self.items: List[TestItem] = list(items or [])
        self.responses: Dict[str, Response] = {}
        self._presented_at: Dict[int, int] = {}
        if self.adaptive:
            if not family or not max_items:
                raise ValueError("adaptive sequencing needs a family and max_items")
            self.max_items = int(max_items)
            if not self.items:
                self.items.append(self.generator.generate_item(family, int(start_difficulty or 1), 0))
        else:
            if not self.items:
                raise ValueError("a fixed battery needs at least one item")
            self.max_items = len(self.items)

    # ---- read side ----
    @property
    def index(self) -> int:
        return self.state.current_item_index

    @property
    def total_items(self) -> int:
        return self.max_items

    def is_terminal(self) -> bool:
        return self.state.current_item_index >= self.max_items

    def current_item(self) -> Optional[TestItem]:
        if self.is_terminal():
            return None
        return self.items[self.state.current_item_index]

    def current_response(self) -> Optional[Response]:
        it = self.current_item()
        return None if it is None else self.responses.get(it.id)

    def has_response(self) -> bool:
        return self.current_response() is not None

    def mark_presented(self, now_ms: int) -> None:
        self._presented_at.setdefault(self.state.current_item_index, int(now_ms))

    def time_spent_ms(self, index: Optional[int] = None) -> int:
        idx = self.state.current_item_index if index is None else index
        if idx >= len(self.items):
            return 0
        r = self.responses.get(self.items[idx].id)
        start = self._presented_at.get(idx)
        if r is None or start is None:
            return 0
        return max(0, r.recorded_at_epoch_ms - start)

    # ---- transitions ----
    def record(self, capture: RawCapture, now_ms: int) -> Response:
        """Attach ``capture`` to the current item, replacing any earlier one.

        Raises ``ValidationError`` (nothing recorded) when the capture breaks
        the item's rules; error captures are always accepted.
        """

        it = self.current_item()
        if it is None:
            raise SessionStateError("sequence already finished")
        validate(it, capture, today=datetime.fromtimestamp(now_ms / 1000.0).date())
        resp = Response(item_id=it.id, capture=capture, recorded_at_epoch_ms=int(now_ms))
        self.responses[it.id] = resp
        return resp

    def advance(self, next_difficulty: Optional[int] = None) -> NextState:
        if self.is_terminal():
            return NextState(False, None, True, "already terminal")
        idx = self.state.current_item_index
        it = self.items[idx]
        if it.id not in self.responses:
            log.debug("advance rejected: %s has no response", it.id)
            return NextState(False, it, False, "no response recorded")
        if idx not in self.state.completed_indices:
            self.state.completed_indices.append(idx)
        self.state.current_item_index = idx + 1
        if self.adaptive and self.state.current_item_index < self.max_items \
                and self.state.current_item_index == len(self.items):
            level = next_difficulty if next_difficulty is not None else (it.difficulty or 1)
            self.items.append(self.generator.generate_item(self.family, int(level), len(self.items)))
        return NextState(True, self.current_item(), self.is_terminal())

    def skip(self) -> NextState:
        it = self.current_item()
        if it is None:
            return NextState(False, None, True, "already terminal")
        if not it.optional:
            return NextState(False, it, False, "item is not skippable")
        idx = self.state.current_item_index
        self.responses.pop(it.id, None)
        if idx not in self.state.skipped_indices:
            self.state.skipped_indices.append(idx)
        self.state.current_item_index = idx + 1
        return NextState(True, self.current_item(), self.is_terminal())

    def previous(self) -> bool:
        """Step back one item; only while the current item is unanswered."""
        idx = self.state.current_item_index
        if self.adaptive or idx <= 0 or self.is_terminal() or self.has_response():
            return False
        back = idx - 1
        for bucket in (self.state.completed_indices, self.state.skipped_indices):
            if back in bucket:
                bucket.remove(back)
        self.state.current_item_index = back
        return True
