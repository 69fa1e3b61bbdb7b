from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.interfaces.unit_of_work import DataSource
from src.domain.models.animal import Animal
from src.domain.models.milk_production import MilkProduction
from src.domain.services.daily_aggregate import DailyAggregate, aggregate_day, record_volume
from src.domain.services.pricing import PriceContext, resolve_price_quote
from src.utils.datetime_tz import DEFAULT_TZ, Clock, SystemClock, local_date, to_local


@dataclass(frozen=True, slots=True)
class RecentEntry:
    production_id: UUID
    animal_id: UUID | None
    animal: str
    volume_l: Decimal
    date_time: datetime
    time: str


@dataclass(slots=True)
class DailySummary:
    aggregate: DailyAggregate
    # Price the collection form would apply today; None means "not configured"
    effective_price: Decimal | None
    currency: str
    recent_entries: list[RecentEntry] = field(default_factory=list)


def _recent_entries(
    productions: list[MilkProduction],
    animals: list[Animal],
    the_date: date,
    tz: ZoneInfo,
    limit: int,
) -> list[RecentEntry]:
    by_id = {a.id: a for a in animals}
    rows = [
        p
        for p in productions
        if p.date_time is not None
        and p.deleted_at is None
        and record_volume(p) is not None
        and local_date(p.date_time, tz) == the_date
    ]
    rows.sort(key=lambda p: p.date_time, reverse=True)
    entries = []
    for p in rows[:limit]:
        animal = by_id.get(p.animal_id) if p.animal_id else None
        entries.append(
            RecentEntry(
                production_id=p.id,
                animal_id=p.animal_id,
                animal=animal.label if animal else "",
                volume_l=record_volume(p),
                date_time=p.date_time,
                time=to_local(p.date_time, tz).strftime("%H:%M"),
            )
        )
    return entries


async def execute(
    source: DataSource,
    tenant_id: UUID,
    *,
    the_date: date | None = None,
    buyer_id: UUID | None = None,
    clock: Clock | None = None,
    tz: ZoneInfo = DEFAULT_TZ,
    recent_limit: int = 5,
) -> DailySummary:
    the_date = the_date or (clock or SystemClock(tz)).today()
    productions, prices, cfg, animals = await asyncio.gather(
        # Include UTC spillover by extending date_to by +1 day
        source.milk_productions.list(
            tenant_id, date_from=the_date, date_to=the_date + timedelta(days=1)
        ),
        source.milk_prices.list(tenant_id, date_from=the_date, date_to=the_date),
        source.tenant_config.get(tenant_id),
        source.animals.list(tenant_id),
    )
    buyer_id = buyer_id or (cfg.default_buyer_id if cfg else None)
    ctx = PriceContext(prices=prices, tenant_default=cfg, buyer_id=buyer_id, tz=tz)
    quote = resolve_price_quote(the_date, buyer_id, prices, cfg)
    return DailySummary(
        aggregate=aggregate_day(productions, the_date, ctx),
        effective_price=quote.price_per_l if quote else None,
        currency=quote.currency if quote else (cfg.default_currency if cfg else "USD"),
        recent_entries=_recent_entries(productions, animals, the_date, tz, recent_limit),
    )
