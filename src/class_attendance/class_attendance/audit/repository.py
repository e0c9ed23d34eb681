from __future__ import annotations

from typing import Protocol

from .model import AuditEntry


class AuditRepository(Protocol):
    def append(self, entry: AuditEntry) -> int:
        """Insert-only; returns the new row id."""

        raise NotImplementedError
