# neuro_core/heuristics.py
from __future__ import annotations
import re
from typing import Optional

# lexical severity tiers for behavioral answers, most severe first
_SEVERE_RX   = re.compile(r'\b(nearly\s+every\s+day|severe|very\s+much|poor)', re.I)
_MODERATE_RX = re.compile(r'\b(more\s+than\s+half|moderate|a\s+little|fair)', re.I)
_MILD_RX     = re.compile(r'\b(several\s+days|mild)', re.I)

SEVERITY_TIERS: tuple[tuple[re.Pattern, int], ...] = (
    (_SEVERE_RX, 20),
    (_MODERATE_RX, 10),
    (_MILD_RX, 5),
)

def severity_penalty(text: Optional[str]) -> int:
    """Points deducted for one answer; only the most severe matching tier counts."""
    if not isinstance(text, str): return 0
    t = text.strip()
    if not t: return 0
    for rx, penalty in SEVERITY_TIERS:
        if rx.search(t):
            return penalty
    return 0
