from __future__ import annotations

import logging
from typing import Optional

from .model import AuditEntry
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditLogger:
    """Fire-and-forget audit trail.

    A failed write never reaches the caller: attendance capture must not
    depend on the audit table being available. Failures go to this module's
    logger only.
    """

    def __init__(self, repository: AuditRepository):
        self._repository = repository

    def record(self, entry: AuditEntry) -> Optional[int]:
        try:
            entry_id = self._repository.append(entry)
        except Exception:
            logger.exception(
                "Audit write failed (operation=%s, faculty=%s, class=%s, status=%s)",
                entry.operation.value,
                entry.faculty_id,
                entry.class_key,
                entry.status.value,
            )
            return None

        logger.debug("Audit entry %s recorded for %s", entry_id, entry.operation.value)
        return entry_id
