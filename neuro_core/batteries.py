from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, List
from .config import DOMAINS
from .types import TestItem
_PATH = Path(__file__).with_name("data") / "batteries.json"
def load_raw() -> Dict[str, List[dict]]:
    return json.loads(_PATH.read_text(encoding="utf-8"))
def load_battery(domain: str) -> List[TestItem]:
    raw = load_raw()
    if domain not in raw:
        raise ValueError(f"no battery for domain: {domain}")
    return [TestItem(domain=domain, **r) for r in raw[domain]]
def load_all() -> Dict[str, List[TestItem]]:
    return {d: load_battery(d) for d in DOMAINS}
