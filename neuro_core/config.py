from __future__ import annotations
import os, json, pathlib, random


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


DOMAINS: tuple[str, ...] = ("cognitive", "motor", "speech", "behavioral")

RISK_LOW_MIN: int = 85
RISK_MODERATE_MIN: int = 70

DEFAULT_ITEM_SECONDS: int = 120

# cognitive sub-task weights; keys are battery item ids
COGNITIVE_WEIGHTS: dict[str, float] = {
    "recall": 15.0,
    "countdown": 10.0,
    "orientation": 10.0,
    "fluency": 10.0,
    "memory_game": 15.0,
    "number_sequence": 15.0,
    "word_association": 10.0,
    "pattern_recognition": 10.0,
    "reaction_time": 5.0,
    "spatial_memory": 5.0,
    "executive_function": 5.0,
}
RECALL_TARGETS: tuple[str, ...] = ("apple", "chair", "penny")
COUNTDOWN_EXPECTED: tuple[int, ...] = (100, 93, 86, 79, 72)
FLUENCY_FULL_AT: int = 5

MOTOR_WEIGHTS: dict[str, float] = {"tremor": 25.0, "tap": 25.0, "drawing": 25.0, "gait": 25.0}
GAIT_TARGET_STEP_SEC: float = 0.7
TREMOR_MIN_SAMPLES: int = 10
TAP_RATE_CAP: float = 50.0

SPEECH_WEIGHTS: dict[str, float] = {"reading": 33.3, "spontaneous": 33.3, "naming": 33.3}

BEHAVIORAL_BASE: int = 100

REACTION_FAST_MS: float = 200.0
REACTION_SLOW_MS: float = 1000.0

LEVEL_MIN: int = 1
LEVEL_MAX: int = 10
ADAPTIVE_START_LEVEL: int = 4
ADAPTIVE_MAX_ITEMS: int = 10
ADAPTIVE_FAMILIES: tuple[str, ...] = ("cognitive", "reaction_time", "spatial_memory", "executive_function")
ADAPTIVE_BASE_SECONDS: dict[str, int] = {
    "cognitive": 30,
    "reaction_time": 30,
    "spatial_memory": 60,
    "executive_function": 45,
}
ADAPTIVE_MIN_SECONDS: int = 10

TEXT_MAX_LENGTH: int = 1000
DATE_WINDOW_DAYS: int = 7
TIMED_TEXT_MIN_ITEMS: int = 3
MOTION_MIN_SAMPLES: int = 10
TAP_MIN_TAPS: int = 5
DRAWING_MIN_POINTS: int = 10
AUDIO_MIN_SECONDS: float = 5.0

TIMEOUT_MESSAGE: str = "time limit expired"

AUDIT_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
DEBUG_SEED: int | None = None
TRACE_FIELDS: tuple[str, ...] = (
    "session",
    "item_id",
    "kind",
    "difficulty",
    "level_before",
    "level_after",
    "score",
    "accuracy",
    "latency_ms",
)
# // env overrides for staging/ops; defaults remain conservative.
DEFAULT_ITEM_SECONDS = _env_int("DEFAULT_ITEM_SECONDS", DEFAULT_ITEM_SECONDS)
ADAPTIVE_START_LEVEL = max(LEVEL_MIN, min(LEVEL_MAX, _env_int("ADAPTIVE_START_LEVEL", ADAPTIVE_START_LEVEL)))
REACTION_FAST_MS = _env_float("REACTION_FAST_MS", REACTION_FAST_MS)
REACTION_SLOW_MS = _env_float("REACTION_SLOW_MS", REACTION_SLOW_MS)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
DEBUG_SEED = _env_int("DEBUG_SEED", 0) or None
AUDIT_EXPORT_ENABLED = _env_bool("AUDIT_EXPORT_ENABLED", AUDIT_EXPORT_ENABLED)

def _env_true(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1","true","yes","on")
def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("USE_LLM_INSIGHTS"): cfg["USE_LLM_INSIGHTS"] = _env_true("USE_LLM_INSIGHTS")
    if e.get("INSIGHT_BACKEND"): cfg["INSIGHT_BACKEND"] = e.get("INSIGHT_BACKEND")
    for k in ("AZURE_OPENAI_ENDPOINT","AZURE_OPENAI_API_VERSION","AZURE_OPENAI_API_KEY","AZURE_OPENAI_DEPLOYMENT"):
        if e.get(k): cfg[k] = e.get(k)
    if e.get("SEED"): cfg["SEED"] = int(e.get("SEED"))
    return cfg
def get_backend(cfg: dict) -> str|None:
    if not cfg.get("USE_LLM_INSIGHTS"): return None
    b = (cfg.get("INSIGHT_BACKEND") or "").lower().strip()
    return b if b == "azure" else None
def seed_rng(cfg: dict) -> random.Random:
    s = cfg.get("SEED", DEBUG_SEED)
    return random.Random(int(s)) if s is not None else random.Random()
