from __future__ import annotations

import uuid
from collections import OrderedDict

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from childcare_qa.client import ChildcareAPIClient, TransportFailure
from childcare_qa.config import Settings, get_settings
from childcare_qa.conversation import ConversationService
from childcare_qa.cost_estimator import (
    CostEstimateError,
    CostEstimateForm,
    estimate_cost,
    project_estimate_rows,
)
from childcare_qa.intents import input_placeholder, intent_value
from childcare_qa.logging import json_logger_middleware
from childcare_qa.render import render_estimate
from childcare_qa.request_builder import CostFields, FormState, ValidationRefusal
from childcare_qa.state import ChatSession

from api.models import (
    CostEstimateRequest,
    CostEstimateView,
    ErrorEnvelope,
    MessageView,
    SendRequest,
    SessionView,
)

_settings = get_settings()

app = FastAPI(title=_settings.APP_NAME, version="1.0.0")

# CORS (wide-open by default; tighten in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(json_logger_middleware())

# Page-view sessions, least recently used first; bounded by MAX_SESSIONS
SESSIONS: "OrderedDict[str, ChatSession]" = OrderedDict()


def get_api_client(settings: Settings = Depends(get_settings)) -> ChildcareAPIClient:
    return ChildcareAPIClient(settings)


def get_conversation_service(
    client: ChildcareAPIClient = Depends(get_api_client),
) -> ConversationService:
    return ConversationService(client)


def _get_session(session_id: str) -> ChatSession:
    sess = SESSIONS.get(session_id)
    if sess is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    SESSIONS.move_to_end(session_id)
    return sess


def _session_view(sess: ChatSession) -> SessionView:
    return SessionView(
        session_id=sess.session_id,
        loading=sess.loading,
        placeholder=input_placeholder(sess.form.intent),
        messages=[MessageView.from_message(m) for m in sess.messages],
    )


# ------------ Routes ------------


@app.get("/health")
def health() -> dict:
    return {"ok": True, "service": _settings.APP_NAME}


@app.post("/sessions", status_code=201)
def create_session(settings: Settings = Depends(get_settings)) -> SessionView:
    sid = str(uuid.uuid4())
    sess = ChatSession(
        session_id=sid,
        form=FormState(region=settings.DEFAULT_REGION, intent=settings.DEFAULT_INTENT),
    )
    SESSIONS[sid] = sess
    while len(SESSIONS) > max(settings.MAX_SESSIONS, 1):
        SESSIONS.popitem(last=False)
    return _session_view(sess)


@app.get("/sessions/{session_id}")
def get_session(session_id: str) -> SessionView:
    return _session_view(_get_session(session_id))


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> Response:
    if SESSIONS.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return Response(status_code=204)


@app.post("/sessions/{session_id}/send")
def send(
    session_id: str,
    payload: SendRequest,
    request: Request,
    service: ConversationService = Depends(get_conversation_service),
) -> SessionView:
    sess = _get_session(session_id)
    form = FormState(
        query=payload.query,
        region=payload.region,
        intent=payload.intent,
        cost=CostFields(
            county=payload.county,
            county_fips=payload.county_fips,
            age=payload.age,
            setting=payload.setting,
            metric=payload.metric,
            units=payload.units,
        ),
    )
    request.state.selected_intent = intent_value(payload.intent)
    before = len(sess.store)
    try:
        message = service.send(sess, form)
    except ValidationRefusal as e:
        raise HTTPException(status_code=400, detail=str(e))
    sess.form = form
    request.state.outcome = message.outcome.value
    request.state.messages_appended = len(sess.store) - before
    return _session_view(sess)


@app.post("/cost/estimate")
def cost_estimate(
    payload: CostEstimateRequest,
    client: ChildcareAPIClient = Depends(get_api_client),
) -> CostEstimateView:
    try:
        form = CostEstimateForm(**payload.model_dump())
        estimate = estimate_cost(form, client)
    except (ValidationError, ValidationRefusal) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CostEstimateError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except TransportFailure as e:
        raise HTTPException(status_code=502, detail=f"Network error: {e}")
    return CostEstimateView(
        message=estimate.message,
        primary_value=estimate.primary_value,
        rows=project_estimate_rows(estimate),
        text=render_estimate(estimate),
    )


@app.get("/")
def root():
    return {"message": f"{_settings.APP_NAME} API. See /health, POST /sessions, POST /sessions/{{id}}/send"}


# ------------ Exception Handlers ------------


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    env = ErrorEnvelope(
        code=str(exc.status_code),
        message=str(exc.detail or "HTTP error"),
        details={"path": str(request.url)},
    )
    return JSONResponse(status_code=exc.status_code, content=env.model_dump())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    env = ErrorEnvelope(
        code="internal_error",
        message="Unexpected server error",
        details={"path": str(request.url)},
    )
    return JSONResponse(status_code=500, content=env.model_dump())
