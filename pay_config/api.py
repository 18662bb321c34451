"""FastAPI admin router for user pay config tiers."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from common.auth import require_admin
from ledger import errors
from ledger.db import get_session

from .service import (InvalidScoreRange, LevelConflict, PayConfigError,
                      PayConfigNotFound, PayConfigService)

# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------


class CreateUserPayConfigRequest(BaseModel):
    level: int = Field(..., ge=0)
    min_score: int
    max_score: Optional[int] = None
    daily_limit: Optional[int] = Field(default=None, ge=0)
    fee_rate: Decimal = Decimal("0")


class UpdateUserPayConfigRequest(BaseModel):
    level: Optional[int] = Field(default=None, ge=0)
    min_score: Optional[int] = None
    max_score: Optional[int] = None
    daily_limit: Optional[int] = Field(default=None, ge=0)
    fee_rate: Optional[Decimal] = None


class UserPayConfigRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    level: int
    min_score: int
    max_score: Optional[int] = None
    daily_limit: Optional[int] = None
    fee_rate: Decimal
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR = {
    PayConfigNotFound: status.HTTP_404_NOT_FOUND,
    LevelConflict: status.HTTP_409_CONFLICT,
    InvalidScoreRange: status.HTTP_400_BAD_REQUEST,
}


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, errors.ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.code)
    code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=code, detail=getattr(exc, "code", "bad_request"))


def _service(
    session: Session = Depends(get_session),
    admin: str = Depends(require_admin),
) -> PayConfigService:
    return PayConfigService(session, actor=admin)


# ---------------------------------------------------------------------------
# Router definition
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/v1/admin/user-pay-configs", tags=["admin"])


@router.get("", response_model=List[UserPayConfigRead])
def list_pay_configs(svc: PayConfigService = Depends(_service)):
    return svc.list()


@router.get("/resolve", response_model=UserPayConfigRead)
def resolve_pay_config(
    score: int = Query(..., description="User credit score"),
    svc: PayConfigService = Depends(_service),
):
    try:
        return svc.resolve(score)
    except PayConfigError as exc:
        raise _http_error(exc) from exc


@router.get("/{config_id}", response_model=UserPayConfigRead)
def get_pay_config(config_id: int, svc: PayConfigService = Depends(_service)):
    try:
        return svc.get(config_id)
    except PayConfigError as exc:
        raise _http_error(exc) from exc


@router.post("", response_model=UserPayConfigRead, status_code=status.HTTP_201_CREATED)
def create_pay_config(req: CreateUserPayConfigRequest, svc: PayConfigService = Depends(_service)):
    try:
        return svc.create(**req.model_dump())
    except (errors.ValidationError, PayConfigError) as exc:
        raise _http_error(exc) from exc


@router.put("/{config_id}", response_model=UserPayConfigRead)
def update_pay_config(
    config_id: int,
    req: UpdateUserPayConfigRequest,
    svc: PayConfigService = Depends(_service),
):
    try:
        return svc.update(config_id, req.model_dump(exclude_unset=True))
    except (errors.ValidationError, PayConfigError) as exc:
        raise _http_error(exc) from exc


@router.delete("/{config_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_pay_config(config_id: int, svc: PayConfigService = Depends(_service)):
    try:
        svc.delete(config_id)
    except PayConfigError as exc:
        raise _http_error(exc) from exc
