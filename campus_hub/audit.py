"""
Audit sink.

Auditing is best-effort from the caller's point of view: `record_audit` logs
and swallows sink failures so an audit outage never fails or duplicates the
operation being audited.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session

from campus_hub.models.audit import AuditLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditActor:
    user_id: int
    email: str | None = None


@dataclass(frozen=True)
class AuditEntry:
    actor: AuditActor
    action: str
    target_type: str
    target_id: str
    success: bool
    error_code: str | None = None
    reason: str | None = None
    diff: dict[str, Any] = field(default_factory=dict)


class AuditSink(Protocol):
    def write(self, entry: AuditEntry) -> None: ...


class SqlAuditSink:
    """
    Persist entries to `audit_logs` in a dedicated session.

    A separate session keeps failure records even when the audited
    transaction was rolled back.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def write(self, entry: AuditEntry) -> None:
        with self._session_factory() as session:
            session.add(
                AuditLog(
                    actor_user_id=entry.actor.user_id,
                    actor_email=entry.actor.email,
                    action=entry.action,
                    target_type=entry.target_type,
                    target_id=entry.target_id,
                    success=entry.success,
                    error_code=entry.error_code,
                    reason=entry.reason,
                    diff=entry.diff or None,
                )
            )
            session.commit()


def record_audit(sink: AuditSink, entry: AuditEntry) -> None:
    try:
        sink.write(entry)
    except Exception:
        logger.exception(
            "Audit write failed action=%s target=%s:%s success=%s",
            entry.action,
            entry.target_type,
            entry.target_id,
            entry.success,
        )
