from __future__ import annotations

from typing import Protocol

from src.application.interfaces.repositories.animals import AnimalsReader
from src.application.interfaces.repositories.milk_deliveries import (
    MilkDeliveriesReader,
    MilkDeliveriesRepository,
)
from src.application.interfaces.repositories.milk_prices import MilkPricesReader
from src.application.interfaces.repositories.milk_productions import (
    MilkProductionsReader,
    MilkProductionsRepository,
)
from src.application.interfaces.repositories.tenant_config import TenantConfigReader


class DataSource(Protocol):
    """Read side supplied by the fetch layer."""

    animals: AnimalsReader
    milk_prices: MilkPricesReader
    milk_productions: MilkProductionsReader
    milk_deliveries: MilkDeliveriesReader
    tenant_config: TenantConfigReader


class UnitOfWork(DataSource, Protocol):
    """Write boundary owned by the persistence collaborator.

    Everything added before `commit` is persisted together or not at all.
    """

    milk_productions: MilkProductionsRepository
    milk_deliveries: MilkDeliveriesRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...
