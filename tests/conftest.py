from __future__ import annotations

import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID, uuid4

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT))

# ruff: noqa: E402
from src.domain.models.animal import Animal
from src.domain.models.milk_delivery import MilkDelivery
from src.domain.models.milk_price import MilkPrice
from src.domain.models.milk_production import MilkProduction
from src.domain.models.tenant_config import TenantConfig
from src.utils.datetime_tz import DEFAULT_TZ


class StubProductions:
    """Committed rows are visible to `list`; `add` only stages until commit."""

    def __init__(self, items=()) -> None:
        self.items: list[MilkProduction] = list(items)
        self.staged: list[MilkProduction] = []
        self.list_calls = 0

    async def list(self, tenant_id, *, date_from, date_to, animal_id=None):
        self.list_calls += 1
        return [
            p
            for p in self.items
            if p.tenant_id == tenant_id
            and (date_from is None or p.date >= date_from)
            and (date_to is None or p.date <= date_to)
            and (animal_id is None or p.animal_id == animal_id)
        ]

    async def get(self, tenant_id, production_id):
        return next(
            (p for p in self.items if p.tenant_id == tenant_id and p.id == production_id), None
        )

    async def add(self, mp):
        self.staged.append(mp)
        return mp

    async def update(self, tenant_id, production_id, data, expected_version):
        current = await self.get(tenant_id, production_id)
        if current is None or current.version != expected_version:
            return None
        for key, value in data.items():
            setattr(current, key, value)
        current.version += 1
        return current


class StubDeliveries:
    def __init__(self, items=()) -> None:
        self.items: list[MilkDelivery] = list(items)
        self.staged: list[MilkDelivery] = []

    async def list(self, tenant_id, *, date_from, date_to, buyer_id=None):
        return [
            d
            for d in self.items
            if d.tenant_id == tenant_id
            and (date_from is None or d.date >= date_from)
            and (date_to is None or d.date <= date_to)
            and (buyer_id is None or d.buyer_id == buyer_id)
        ]

    async def add(self, md):
        self.staged.append(md)
        return md


class StubPrices:
    def __init__(self, items=()) -> None:
        self.items: list[MilkPrice] = list(items)

    async def list(self, tenant_id, *, date_from, date_to, buyer_id=None):
        return [
            p
            for p in self.items
            if p.tenant_id == tenant_id
            and (date_from is None or p.date >= date_from)
            and (date_to is None or p.date <= date_to)
            and (buyer_id is None or p.buyer_id == buyer_id)
        ]


class StubTenantConfig:
    def __init__(self, config: TenantConfig | None) -> None:
        self.config = config

    async def get(self, tenant_id):
        if self.config is None or self.config.tenant_id != tenant_id:
            return None
        return self.config


class StubAnimals:
    def __init__(self, items=()) -> None:
        self.items: list[Animal] = list(items)

    async def list(self, tenant_id, *, status_codes=None):
        return [
            a
            for a in self.items
            if a.tenant_id == tenant_id and (not status_codes or a.status_code in status_codes)
        ]


class StubUnitOfWork:
    def __init__(
        self,
        *,
        productions=(),
        deliveries=(),
        prices=(),
        config: TenantConfig | None = None,
        animals=(),
    ) -> None:
        self.milk_productions = StubProductions(productions)
        self.milk_deliveries = StubDeliveries(deliveries)
        self.milk_prices = StubPrices(prices)
        self.tenant_config = StubTenantConfig(config)
        self.animals = StubAnimals(animals)
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.milk_productions.items.extend(self.milk_productions.staged)
        self.milk_productions.staged.clear()
        self.milk_deliveries.items.extend(self.milk_deliveries.staged)
        self.milk_deliveries.staged.clear()
        self.commits += 1

    async def rollback(self) -> None:
        self.milk_productions.staged.clear()
        self.milk_deliveries.staged.clear()
        self.rollbacks += 1


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def today(self) -> date:
        return self._now.date()


def local_dt(y: int, m: int, d: int, hh: int = 6, mm: int = 0) -> datetime:
    return datetime(y, m, d, hh, mm, tzinfo=DEFAULT_TZ)


def make_production(
    tenant_id: UUID,
    animal_id: UUID | None,
    when: datetime,
    quantity: str,
    *,
    unit: str = "l",
    density: str = "1.03",
    shift: str | None = None,
    price_snapshot: str | None = None,
    buyer_id: UUID | None = None,
) -> MilkProduction:
    return MilkProduction.create(
        tenant_id=tenant_id,
        animal_id=animal_id,
        buyer_id=buyer_id,
        date_time=when,
        shift=shift or ("AM" if when.astimezone(DEFAULT_TZ).hour < 12 else "PM"),
        input_unit=unit,
        input_quantity=Decimal(quantity),
        density=Decimal(density),
        price_snapshot=Decimal(price_snapshot) if price_snapshot is not None else None,
    )


@pytest.fixture(scope="session")
def tenant_id() -> UUID:
    return uuid4()


@pytest.fixture()
def tenant_config(tenant_id: UUID) -> TenantConfig:
    return TenantConfig(
        tenant_id=tenant_id,
        default_density=Decimal("1.03"),
        default_production_input_unit="lb",
        default_currency="USD",
        default_price_per_l=Decimal("0.40"),
    )
