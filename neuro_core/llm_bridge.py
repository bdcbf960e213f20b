from __future__ import annotations
import json, logging, os, re, time
from typing import Any, Dict, List, Optional
from .azure_cfg import client as azure_client, settings as azure_settings
from .config import get_backend, load_config

log = logging.getLogger(__name__)

_JSON_OBJ_RX = re.compile(r"\{[\s\S]*\}")
_JSON_LIST_RX = re.compile(r"\[[\s\S]*\]")
_BULLET_RX = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*(.+?)\s*$", re.M)

def backend_in_use(cfg: Optional[Dict[str, Any]] = None) -> str:
    return get_backend(cfg if cfg is not None else load_config()) or "none"

def chat_azure(system: str, user: str, max_tokens: int = 800, temperature: float = 0.3) -> str:
    s = azure_settings(); cli = azure_client(s)
    t0 = time.time()
    resp = cli.chat.completions.create(
        model=s.deployment, messages=[{"role":"system","content":system},{"role":"user","content":user}],
        temperature=temperature, max_tokens=max_tokens, top_p=1.0,
    )
    text = resp.choices[0].message.content or ""
    log.debug("azure chat %s: %d chars in %d ms", os.getenv("RUN_ID", ""), len(text), int((time.time()-t0)*1000))
    return text

def extract_json(text: str) -> Dict[str, Any]:
    """Pull the first {...} block out of a model reply."""
    m = _JSON_OBJ_RX.search(text or "")
    if not m:
        raise ValueError("no JSON object in model reply")
    data = json.loads(m.group(0))
    if not isinstance(data, dict):
        raise ValueError("model reply JSON is not an object")
    return data

def extract_list(text: str, limit: int = 5) -> List[str]:
    m = _JSON_LIST_RX.search(text or "")
    if m:
        try:
            data = json.loads(m.group(0))
            if isinstance(data, list):
                out = [str(x).strip() for x in data if str(x).strip()]
                if out: return out[:limit]
        except ValueError:
            pass
    bullets = [b for b in _BULLET_RX.findall(text or "") if b]
    if not bullets:
        raise ValueError("no recommendations in model reply")
    return bullets[:limit]
