from __future__ import annotations

from uuid import UUID

from src.application.interfaces.repositories.animals import AnimalsReader
from src.domain.models.animal import Animal
from src.infrastructure.api.client import ApiClient
from src.infrastructure.api.schemas.animals import AnimalResponse, AnimalsListResponse

# The animals endpoint caps pages at 100
ANIMALS_PAGE_SIZE = 100


class AnimalsHttpRepository(AnimalsReader):
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def list(
        self,
        tenant_id: UUID,
        *,
        status_codes: list[str] | None = None,
    ) -> list[Animal]:
        items: list[AnimalResponse] = []
        cursor: str | None = None
        while True:
            data = await self.client.get_json(
                "/animals/",
                {
                    "limit": ANIMALS_PAGE_SIZE,
                    "cursor": cursor,
                    "status_codes": ",".join(status_codes) if status_codes else None,
                },
            )
            page = AnimalsListResponse.model_validate(data)
            items.extend(page.items)
            if not page.next_cursor or not page.items:
                break
            cursor = page.next_cursor
        return [a.to_domain(tenant_id) for a in items]
