"""Decoy token checks: POST /auth/validate, POST /auth/refresh."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from decoy_sensor.api.dependencies import get_issuer
from decoy_sensor.model.claim import AuthClaim, ClaimStatus
from decoy_sensor.tokens import TokenIssuer

router = APIRouter(prefix="/auth")


class TokenRequest(BaseModel):
    token: str


class ValidateResponse(BaseModel):
    status: ClaimStatus
    claim: AuthClaim | None = None


class RefreshResponse(BaseModel):
    token: str
    claim: AuthClaim


@router.post("/validate", response_model=ValidateResponse)
def validate(
    body: TokenRequest,
    issuer: TokenIssuer = Depends(get_issuer),
) -> ValidateResponse:
    status = issuer.validate(body.token)
    claim = issuer.decode(body.token) if status == "valid" else None
    return ValidateResponse(status=status, claim=claim)


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    body: TokenRequest,
    issuer: TokenIssuer = Depends(get_issuer),
) -> RefreshResponse:
    claim = issuer.refresh(body.token)
    return RefreshResponse(token=issuer.encode(claim), claim=claim)
