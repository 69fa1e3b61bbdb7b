from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(slots=True)
class Animal:
    """Roster identity of an animal, enough to label report columns."""

    id: UUID
    tenant_id: UUID | None
    tag: str
    name: str | None = None
    status_code: str | None = None

    @property
    def label(self) -> str:
        if self.name:
            return f"{self.name} ({self.tag})"
        return self.tag
