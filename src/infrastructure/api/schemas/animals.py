from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.domain.models.animal import Animal


class AnimalResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: UUID
    tag: str
    name: str | None = None
    status_code: str | None = None

    def to_domain(self, tenant_id: UUID) -> Animal:
        return Animal(
            id=self.id,
            tenant_id=tenant_id,
            tag=self.tag,
            name=self.name,
            status_code=self.status_code,
        )


class AnimalsListResponse(BaseModel):
    items: list[AnimalResponse]
    next_cursor: str | None = None
    total: int | None = None
