"""Per-item audit trail of a finished session, as JSON rows or CSV."""
from __future__ import annotations

from statistics import mean
from typing import Any, Callable, Dict, Iterable, List
import csv
import io

COLUMNS: tuple[str, ...] = (
    "t",
    "item_id",
    "kind",
    "difficulty",
    "level_before",
    "level_after",
    "score",
    "accuracy",
    "latency_ms",
    "error",
)


def _two_places(val: Any) -> float:
    return round(float(val), 2)


# columns with a numeric type; everything else is exported as text
_NUMERIC: Dict[str, Callable[[Any], Any]] = {
    "difficulty": int,
    "level_before": int,
    "level_after": int,
    "latency_ms": int,
    "score": _two_places,
    "accuracy": _two_places,
}


def _cell(column: str, val: Any) -> Any:
    cast = _NUMERIC.get(column)
    if cast is None:
        return "" if val is None else str(val)
    try:
        return cast(val)
    except (TypeError, ValueError):
        return 0 if cast is int else 0.0


def row(event: Dict[str, Any]) -> Dict[str, Any]:
    return {col: _cell(col, event.get(col)) for col in COLUMNS}


def summary(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    rows = [row(e or {}) for e in events]
    answered = [r for r in rows if not r["error"]]
    return {
        "items": len(rows),
        "errors": sum(1 for r in rows if r["error"] and r["error"] != "skipped"),
        "skipped": sum(1 for r in rows if r["error"] == "skipped"),
        "mean_latency_ms": round(mean(r["latency_ms"] for r in answered)) if answered else 0,
    }


def to_json(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    events = list(events)
    rows: List[Dict[str, Any]] = [row(e or {}) for e in events]
    return {"events": rows, "summary": summary(events)}


def to_csv(events: Iterable[Dict[str, Any]]) -> str:
    buf = io.StringIO()
    out = csv.DictWriter(buf, fieldnames=COLUMNS, lineterminator="\n")
    out.writeheader()
    out.writerows(row(e or {}) for e in events)
    return buf.getvalue()


__all__ = ["COLUMNS", "row", "summary", "to_json", "to_csv"]
