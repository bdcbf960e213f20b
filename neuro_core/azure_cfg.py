# neuro_core/azure_cfg.py
"""Azure OpenAI settings for the narrative insight backend.

Environment variables win; any key still empty is filled from
``.azure_config.json`` in the working directory.
"""
from __future__ import annotations
import os, json, pathlib
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
from openai import AzureOpenAI

CONFIG_FILE = ".azure_config.json"
# settings field -> environment variable
ENV_KEYS: Dict[str, str] = {
    "endpoint": "AZURE_OPENAI_ENDPOINT",
    "api_key": "AZURE_OPENAI_API_KEY",
    "api_version": "AZURE_OPENAI_API_VERSION",
    "deployment": "AZURE_OPENAI_DEPLOYMENT",
}
REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class AzureSettings:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str

    def redacted(self) -> Dict[str, str]:
        shown = self.api_key[:4] + "..." if len(self.api_key) > 8 else "***"
        return {"endpoint": self.endpoint, "deployment": self.deployment,
                "api_version": self.api_version, "api_key": shown}


def read_json(path: str = CONFIG_FILE) -> Dict[str, str]:
    p = pathlib.Path(path)
    if not p.is_file():
        return {}
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    if not isinstance(raw, dict):
        return {}
    return {name: str(raw.get(name) or "") for name in ENV_KEYS}


def _merge(primary: Mapping[str, str], fallback: Mapping[str, str]) -> Dict[str, str]:
    return {name: primary.get(name) or fallback.get(name, "") for name in ENV_KEYS}


def settings(path: str = CONFIG_FILE) -> AzureSettings:
    env = {name: os.getenv(var, "").strip() for name, var in ENV_KEYS.items()}
    merged = env if all(env.values()) else _merge(env, read_json(path))
    missing = sorted(ENV_KEYS[name] for name, val in merged.items() if not val)
    if missing:
        raise RuntimeError(f"Azure OpenAI not configured. Missing: {', '.join(missing)}")
    return AzureSettings(**merged)


def is_configured(path: str = CONFIG_FILE) -> bool:
    try:
        settings(path)
    except RuntimeError:
        return False
    return True


def client(s: Optional[AzureSettings] = None) -> AzureOpenAI:
    s = s or settings()
    return AzureOpenAI(
        azure_endpoint=s.endpoint,
        api_key=s.api_key,
        api_version=s.api_version,
        timeout=REQUEST_TIMEOUT,
        max_retries=1,
    )
