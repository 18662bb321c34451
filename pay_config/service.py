"""Administrative maintenance of per-tier payment policy (UserPayConfig).

Every write passes the fee rate through ``validate_rates`` before anything is
flushed, so a rejected request leaves the table untouched.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from common.audit import log_event
from common.datetime import utcnow
from ledger.models import UserPayConfig
from ledger.validators import validate_rates
from ledger_observability.metrics import pay_config_writes_total

__all__ = [
    "PayConfigError",
    "PayConfigNotFound",
    "LevelConflict",
    "InvalidScoreRange",
    "PayConfigService",
]

logger = logging.getLogger(__name__)

_MUTABLE_FIELDS = ("level", "min_score", "max_score", "daily_limit", "fee_rate")
# None on these clears the limit; on the others it means "unchanged"
_NULLABLE_FIELDS = ("max_score", "daily_limit")


class PayConfigError(Exception):
    code = "pay_config_error"


class PayConfigNotFound(PayConfigError):
    code = "not_found"


class LevelConflict(PayConfigError):
    code = "level_conflict"


class InvalidScoreRange(PayConfigError):
    code = "invalid_score_range"


def _check_score_range(min_score: int, max_score: Optional[int]) -> None:
    if max_score is not None and max_score <= min_score:
        raise InvalidScoreRange(f"max_score {max_score} must be greater than min_score {min_score}")


def _audit_details(cfg: UserPayConfig) -> Dict[str, Any]:
    return {
        "id": cfg.id,
        "level": cfg.level,
        "min_score": cfg.min_score,
        "max_score": cfg.max_score,
        "daily_limit": cfg.daily_limit,
        "fee_rate": str(cfg.fee_rate),
    }


class PayConfigService:
    """CRUD and score-to-tier resolution for ``UserPayConfig``."""

    def __init__(self, session: Session, *, actor: Optional[str] = None):
        self.session = session
        self.actor = actor

    # ------------------------------------------------------------------
    def list(self) -> List[UserPayConfig]:
        return list(self.session.exec(select(UserPayConfig).order_by(UserPayConfig.level)).all())

    def get(self, config_id: int) -> UserPayConfig:
        cfg = self.session.get(UserPayConfig, config_id)
        if cfg is None:
            raise PayConfigNotFound(f"user pay config {config_id} not found")
        return cfg

    def resolve(self, score: int) -> UserPayConfig:
        """Return the tier whose ``[min_score, max_score)`` range contains *score*."""
        stmt = (
            select(UserPayConfig)
            .where(UserPayConfig.min_score <= score)
            .where(or_(UserPayConfig.max_score.is_(None), UserPayConfig.max_score > score))
            .order_by(UserPayConfig.min_score.desc())
        )
        cfg = self.session.exec(stmt).first()
        if cfg is None:
            raise PayConfigNotFound(f"no pay config covers score {score}")
        return cfg

    # ------------------------------------------------------------------
    def create(
        self,
        *,
        level: int,
        min_score: int,
        max_score: Optional[int] = None,
        daily_limit: Optional[int] = None,
        fee_rate: Decimal = Decimal("0"),
    ) -> UserPayConfig:
        validate_rates(fee_rate)
        _check_score_range(min_score, max_score)

        cfg = UserPayConfig(
            level=level,
            min_score=min_score,
            max_score=max_score,
            daily_limit=daily_limit,
            fee_rate=fee_rate,
        )
        self._commit(cfg)
        self._record("create", "PAY_CONFIG_CREATED", cfg)
        return cfg

    def update(self, config_id: int, changes: Dict[str, Any]) -> UserPayConfig:
        """Apply a partial update; keys outside the mutable set are ignored."""
        cfg = self.get(config_id)
        changes = {
            k: v
            for k, v in changes.items()
            if k in _MUTABLE_FIELDS and (v is not None or k in _NULLABLE_FIELDS)
        }

        if "fee_rate" in changes:
            validate_rates(changes["fee_rate"])
        _check_score_range(
            changes.get("min_score", cfg.min_score),
            changes["max_score"] if "max_score" in changes else cfg.max_score,
        )

        for key, value in changes.items():
            setattr(cfg, key, value)
        cfg.updated_at = utcnow()
        self._commit(cfg)
        self._record("update", "PAY_CONFIG_UPDATED", cfg)
        return cfg

    def delete(self, config_id: int) -> None:
        cfg = self.get(config_id)
        details = _audit_details(cfg)
        self.session.delete(cfg)
        self.session.commit()
        pay_config_writes_total.labels(action="delete").inc()
        log_event(service="pay_config", action="PAY_CONFIG_DELETED", actor=self.actor, details=details)
        logger.info("pay_config_deleted", extra={"username": self.actor})

    # ------------------------------------------------------------------
    def _commit(self, cfg: UserPayConfig) -> None:
        level = cfg.level
        self.session.add(cfg)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise LevelConflict(f"level {level} already configured") from exc
        self.session.refresh(cfg)

    def _record(self, action: str, audit_action: str, cfg: UserPayConfig) -> None:
        pay_config_writes_total.labels(action=action).inc()
        log_event(service="pay_config", action=audit_action, actor=self.actor, details=_audit_details(cfg))
        logger.info(audit_action.lower(), extra={"username": self.actor})
