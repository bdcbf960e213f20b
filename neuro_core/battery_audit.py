from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List

from . import config
from .batteries import load_all
from .capture import ITEM_CAPTURE_KIND
from .heuristics import severity_penalty
from .types import TestItem

# item ids each weighted domain needs for every weight to be reachable
SCORED_IDS: Dict[str, tuple[str, ...]] = {
    "cognitive": tuple(config.COGNITIVE_WEIGHTS),
    "motor": tuple(config.MOTOR_WEIGHTS),
    "speech": tuple(config.SPEECH_WEIGHTS),
}


def audit_items(domain: str, items: Iterable[TestItem]) -> Dict[str, object]:
    kinds: Dict[str, int] = {}
    warnings: List[str] = []
    seen: set[str] = set()
    optional = 0
    timed_seconds = 0

    for item in items:
        kinds[item.kind] = kinds.get(item.kind, 0) + 1
        if item.id in seen:
            warnings.append(f"{domain} has duplicate item id {item.id!r}")
        seen.add(item.id)
        if item.kind not in ITEM_CAPTURE_KIND:
            warnings.append(f"{domain}/{item.id} has unknown kind {item.kind!r}")
        if item.time_limit_seconds is not None:
            if item.time_limit_seconds <= 0:
                warnings.append(f"{domain}/{item.id} has non-positive time limit")
            else:
                timed_seconds += int(item.time_limit_seconds)
        if item.optional:
            optional += 1
        if item.kind == "radio":
            opts = [str(o) for o in item.payload.get("options") or []]
            if len(opts) < 2:
                warnings.append(f"{domain}/{item.id} offers fewer than 2 options")
            elif domain == "behavioral" and not any(severity_penalty(o) for o in opts):
                warnings.append(f"{domain}/{item.id} has no option that moves the score")

    for iid in SCORED_IDS.get(domain, ()):
        if iid not in seen:
            warnings.append(f"{domain} is missing scored sub-task {iid!r}")

    return {
        "items": len(seen),
        "kinds": kinds,
        "optional": optional,
        "timed_seconds": timed_seconds,
        "warnings": warnings,
    }


def audit_batteries(batteries: Dict[str, List[TestItem]]) -> Dict[str, object]:
    coverage = {d: audit_items(d, batteries.get(d, [])) for d in config.DOMAINS}
    warnings: List[str] = []
    for d, data in coverage.items():
        if not data["items"]:
            warnings.append(f"{d} battery is empty")
        warnings.extend(data["warnings"])  # type: ignore[arg-type]
    totals = {"items": sum(int(c["items"]) for c in coverage.values())}  # type: ignore[call-overload]
    return {"coverage": coverage, "warnings": warnings, "totals": totals}


def print_report(summary: Dict[str, object]) -> None:
    coverage: Dict[str, Dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Battery Coverage ===")
    for domain in config.DOMAINS:
        data = coverage.get(domain) or {}
        print(f"\nDomain: {domain}  items={data.get('items', 0)}  optional={data.get('optional', 0)}"
              f"  timed={data.get('timed_seconds', 0)}s")
        for kind, n in sorted((data.get("kinds") or {}).items()):  # type: ignore[union-attr]
            print(f"  {kind:<20} {n:3d}")

    warnings: List[str] = summary["warnings"]  # type: ignore[assignment]
    if warnings:
        print("\nWarnings:")
        for msg in warnings:
            print(f" - {msg}")
    else:
        print("\nNo warnings.")
    print("\nTotals:", summary["totals"])


def write_summary(summary: Dict[str, object], path: Path) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: List[str] | None = None) -> int:
    summary = audit_batteries(load_all())
    print_report(summary)
    if argv:
        write_summary(summary, Path(argv[0]))
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
