from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import os, typing as t

from neuro_core import azure_cfg

# A present .azure_config.json switches narrative insights to Azure unless env says otherwise.
def _load_azure_from_json(path: str = azure_cfg.CONFIG_FILE) -> None:
    if all(os.getenv(var) for var in azure_cfg.ENV_KEYS.values()):
        return
    found = azure_cfg.read_json(path)
    if not found:
        return
    os.environ.setdefault("USE_LLM_INSIGHTS", "1")
    os.environ.setdefault("INSIGHT_BACKEND", "azure")
    for name, var in azure_cfg.ENV_KEYS.items():
        if found.get(name):
            os.environ.setdefault(var, found[name])

_load_azure_from_json()

from neuro_core.analytics import summarize, trend
from neuro_core.audit_export import to_json as audit_to_json, to_csv as audit_to_csv
from neuro_core.capture import capture_kind_for, parse_capture
from neuro_core.config import AUDIT_EXPORT_ENABLED, DOMAINS, load_config
from neuro_core.engine import AssessmentEngine, AssessmentSession
from neuro_core.errors import SessionStateError, ValidationError
from neuro_core.insights import build_insight_service
from neuro_core.llm_bridge import backend_in_use
from neuro_core.store import InMemoryResultStore
from neuro_core.types import AssessmentResult, NextState

STORE = InMemoryResultStore()
ENGINE = AssessmentEngine(STORE, insight_service=build_insight_service(load_config()))

app = FastAPI(title="Neuro Screen API")

@app.get("/")
def root():
    return {"status": "ok", "service": "neuro-screen-api"}

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)

# ---- Schemas ----
class StartReq(BaseModel):
    domain: str = "cognitive"   # cognitive | motor | speech | behavioral
    adaptive: bool = False
    family: str = "cognitive"   # adaptive only: cognitive | reaction_time | spatial_memory | executive_function

class CaptureReq(BaseModel):
    item_id: str | None = None
    kind: str | None = None     # capture tag; defaults to the current item's
    payload: dict[str, t.Any] = {}

class ErrorReq(BaseModel):
    item_id: str | None = None
    message: str = "capture failed"

class TickReq(BaseModel):
    seconds: float = 1.0

class TimerReq(BaseModel):
    seconds: float | None = None

class InsightReq(BaseModel):
    domain: str | None = None

# ---- Helpers ----
def _session(sid: str) -> AssessmentSession:
    sess = ENGINE.get_session(sid)
    if sess is None:
        raise HTTPException(404, "session not found")
    return sess

def _result(rid: str) -> AssessmentResult:
    res = STORE.get(rid)
    if res is None:
        raise HTTPException(404, "result not found")
    return res

def _transition(sess: AssessmentSession, nxt: NextState | None) -> dict[str, t.Any]:
    body: dict[str, t.Any] = {
        "session_id": sess.session_id,
        "advanced": bool(nxt and nxt.advanced),
        "done": sess.finished,
        "reason": nxt.reason if nxt else "",
        "item": sess.current_item().to_dict() if sess.current_item() and not sess.finished else None,
    }
    if sess.result is not None:
        body["result"] = sess.result.to_dict()
    return body

# ---- Health ----
@app.get("/health")
def health():
    return {
        "insight_backend": backend_in_use(),
        "use_llm_insights": os.getenv("USE_LLM_INSIGHTS", "0"),
        "azure_configured": azure_cfg.is_configured(),
        "active_sessions": len(ENGINE.sessions),
        "results": len(STORE),
    }

# ---- Session endpoints ----
@app.post("/session/start")
def start(req: StartReq):
    if not req.adaptive and req.domain not in DOMAINS:
        raise HTTPException(400, f"unknown domain: {req.domain}")
    try:
        sess = ENGINE.start_session(req.domain, adaptive=req.adaptive, family=req.family)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"session_id": sess.session_id, "mode": sess.mode, "item": sess.current_item().to_dict()}

@app.get("/session/{sid}/item")
def current_item(sid: str):
    sess = _session(sid)
    it = sess.current_item()
    return {"item": it.to_dict() if it else None}

@app.post("/session/{sid}/capture")
def capture(sid: str, req: CaptureReq):
    sess = _session(sid)
    it = sess.current_item()
    if it is None:
        raise HTTPException(409, "no current item")
    try:
        cap = parse_capture(req.kind or capture_kind_for(it.kind), req.payload)
        nxt = sess.submit(cap, item_id=req.item_id)
    except ValidationError as e:
        raise HTTPException(422, {"errors": e.messages})
    except SessionStateError as e:
        raise HTTPException(409, str(e))
    return _transition(sess, nxt)

@app.post("/session/{sid}/error")
def capture_error(sid: str, req: ErrorReq):
    sess = _session(sid)
    try:
        nxt = sess.fail(req.message, item_id=req.item_id)
    except SessionStateError as e:
        raise HTTPException(409, str(e))
    return _transition(sess, nxt)

@app.post("/session/{sid}/skip")
def skip(sid: str):
    sess = _session(sid)
    nxt = sess.skip()
    if not nxt.advanced:
        raise HTTPException(409, nxt.reason or "cannot skip")
    return _transition(sess, nxt)

@app.post("/session/{sid}/previous")
def previous(sid: str):
    sess = _session(sid)
    if not sess.previous():
        raise HTTPException(409, "cannot go back from this item")
    return _transition(sess, None)

@app.post("/session/{sid}/timer/start")
def start_timer(sid: str, req: TimerReq):
    sess = _session(sid)
    return {"session_id": sid, "seconds": sess.start_timer(req.seconds)}

@app.post("/session/{sid}/tick")
def tick(sid: str, req: TickReq):
    sess = _session(sid)
    nxt = sess.tick(req.seconds)
    body = _transition(sess, nxt)
    body["expired"] = nxt is not None
    body["time_remaining_seconds"] = None if sess.finished else sess.progress().time_remaining_seconds
    return body

@app.get("/session/{sid}/progress")
def progress(sid: str):
    p = _session(sid).progress()
    return p.__dict__

# ---- Results ----
@app.get("/results")
def list_results(domain: str | None = Query(None)):
    rows = STORE.get_results_by_type(domain) if domain else STORE.all()
    return {"results": [r.to_dict() for r in rows]}

@app.get("/results/latest")
def latest_result(domain: str = Query(...)):
    res = STORE.get_latest_result(domain)
    if res is None:
        raise HTTPException(404, "no result for domain")
    return res.to_dict()

@app.get("/results/trend")
def result_trend(domain: str | None = Query(None)):
    rows = STORE.get_results_by_type(domain) if domain else STORE.all()
    return {"trend": trend(rows, domain).__dict__, "summary": summarize(rows)}

@app.get("/results/{rid}")
def get_result(rid: str):
    return _result(rid).to_dict()

@app.post("/results/{rid}/recommendations")
def narrative_recommendations(rid: str):
    res = _result(rid)
    return {"result_id": rid, "fixed": list(res.recommendations),
            "narrative": ENGINE.narrative_recommendations(res)}

@app.post("/insights")
def insights(req: InsightReq):
    return ENGINE.analyze(req.domain).to_dict()

@app.get("/results/{rid}/audit.json")
def get_audit_json(rid: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    res = _result(rid)
    return {"result_id": rid, **audit_to_json(res.audit_events)}

@app.get("/results/{rid}/audit.csv")
def get_audit_csv(rid: str):
    if not AUDIT_EXPORT_ENABLED:
        raise HTTPException(404, "audit export disabled")
    res = _result(rid)
    body = audit_to_csv(res.audit_events)
    filename = f"{rid}_audit.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )
