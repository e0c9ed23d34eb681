from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from ..core.enums import AuditOperation, AuditOutcome, ResolutionSource


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AuditEntry:
    """One resolution/binding/mark decision. Written once, never updated."""

    operation: AuditOperation
    faculty_id: Optional[str]
    class_key: Optional[str]
    source: Optional[ResolutionSource]
    actor: Optional[str]
    status: AuditOutcome = AuditOutcome.SUCCESS
    student_count: int = 0
    student_ids: Tuple[str, ...] = ()
    details: Mapping[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None
    recorded_at: datetime = field(default_factory=_utcnow)
