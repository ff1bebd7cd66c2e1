"""Maps sensor exceptions onto HTTP responses for every router."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from decoy_sensor.errors import InvalidClaim, MalformedInput, StorageUnavailable, UnknownSession


async def unknown_session_handler(request: Request, exc: UnknownSession) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": "Session not found"})


async def invalid_claim_handler(request: Request, exc: InvalidClaim) -> JSONResponse:
    # An invalid claim is treated as logged out
    return JSONResponse(status_code=401, content={"detail": f"Token {exc.status}"})


async def malformed_input_handler(request: Request, exc: MalformedInput) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def storage_unavailable_handler(request: Request, exc: StorageUnavailable) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(UnknownSession, unknown_session_handler)  # type: ignore[arg-type]
    app.add_exception_handler(InvalidClaim, invalid_claim_handler)  # type: ignore[arg-type]
    app.add_exception_handler(MalformedInput, malformed_input_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageUnavailable, storage_unavailable_handler)  # type: ignore[arg-type]
