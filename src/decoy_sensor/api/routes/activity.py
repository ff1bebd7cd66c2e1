"""Decoy activity intake: POST /activity/* called by the decoy portal UI.

Every route answers 200 with the session id to keep using and the events
that were recorded. Detection never changes the response status.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from decoy_sensor.api.dependencies import (
    get_dispatcher,
    get_source_identity,
    get_user_agent,
)
from decoy_sensor.classifier import FieldName
from decoy_sensor.dispatcher import ActivityDispatcher, ActivityOutcome
from decoy_sensor.model.event import AttackEvent

router = APIRouter(prefix="/activity")


class VisitRequest(BaseModel):
    session_id: str | None = None
    page: str
    referrer: str | None = None


class SessionRequest(BaseModel):
    session_id: str | None = None


class FieldRequest(BaseModel):
    session_id: str | None = None
    field: FieldName
    value: str = ""


class UploadRequest(BaseModel):
    session_id: str | None = None
    filename: str
    mime_type: str | None = None
    size: int | None = Field(None, ge=0)


class LoginRequest(BaseModel):
    session_id: str | None = None
    username: str
    password: str


class LogoutRequest(BaseModel):
    session_id: str


class TouchRequest(BaseModel):
    session_id: str


class ActivityResponse(BaseModel):
    session_id: str
    events: list[AttackEvent]


class LoginResponse(ActivityResponse):
    success: bool
    token: str | None = None
    attempt_count: int


def _response(outcome: ActivityOutcome) -> ActivityResponse:
    return ActivityResponse(session_id=outcome.session_id, events=outcome.events)


@router.post("/visit", response_model=ActivityResponse)
async def visit(
    body: VisitRequest,
    source: str = Depends(get_source_identity),
    user_agent: str | None = Depends(get_user_agent),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> ActivityResponse:
    outcome = await dispatcher.page_visit(body.session_id, source, body.page, body.referrer, user_agent)
    return _response(outcome)


@router.post("/dashboard", response_model=ActivityResponse)
async def dashboard(
    body: SessionRequest,
    source: str = Depends(get_source_identity),
    user_agent: str | None = Depends(get_user_agent),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> ActivityResponse:
    return _response(await dispatcher.dashboard_access(body.session_id, source, user_agent))


@router.post("/field", response_model=ActivityResponse)
async def submit_field(
    body: FieldRequest,
    source: str = Depends(get_source_identity),
    user_agent: str | None = Depends(get_user_agent),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> ActivityResponse:
    outcome = await dispatcher.submit_field(body.session_id, source, body.field, body.value, user_agent)
    return _response(outcome)


@router.post("/upload", response_model=ActivityResponse)
async def upload(
    body: UploadRequest,
    source: str = Depends(get_source_identity),
    user_agent: str | None = Depends(get_user_agent),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> ActivityResponse:
    outcome = await dispatcher.upload_file(
        body.session_id, source, body.filename, body.mime_type, body.size, user_agent
    )
    return _response(outcome)


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    source: str = Depends(get_source_identity),
    user_agent: str | None = Depends(get_user_agent),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> LoginResponse:
    outcome = await dispatcher.login(body.session_id, source, body.username, body.password, user_agent)
    return LoginResponse(
        session_id=outcome.session_id,
        events=outcome.events,
        success=outcome.success,
        token=outcome.token,
        attempt_count=outcome.attempt_count,
    )


@router.post("/logout", response_model=ActivityResponse)
async def logout(
    body: LogoutRequest,
    source: str = Depends(get_source_identity),
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> ActivityResponse:
    return _response(await dispatcher.logout(body.session_id, source))


@router.post("/touch", response_model=dict)
async def touch(
    body: TouchRequest,
    dispatcher: ActivityDispatcher = Depends(get_dispatcher),
) -> dict:  # type: ignore[type-arg]
    await dispatcher.touch(body.session_id)
    return {"touched": True, "session_id": body.session_id}
