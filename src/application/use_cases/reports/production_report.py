from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import ValidationError
from src.application.interfaces.unit_of_work import DataSource
from src.domain.services.daily_aggregate import record_volume
from src.domain.services.period_summary import (
    PeriodTotal,
    Retention,
    retention,
    summarize_by_period,
)
from src.domain.services.production_pivot import PivotResult, PivotRevenue, build_pivot
from src.domain.value_objects.summary_period import SummaryPeriod
from src.utils.datetime_tz import DEFAULT_TZ, local_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(slots=True)
class ProductionReport:
    date_from: date
    date_to: date
    pivot: PivotResult
    # None when the tenant has no default price configured
    revenue: PivotRevenue | None
    currency: str
    production_by_period: list[PeriodTotal]
    delivery_by_period: list[PeriodTotal]
    retention: Retention
    total_records: int
    avg_per_record: Decimal


async def execute(
    source: DataSource,
    tenant_id: UUID,
    *,
    date_from: date,
    date_to: date,
    period: SummaryPeriod | str = SummaryPeriod.DAILY,
    animal_ids: list[UUID] | None = None,
    tz: ZoneInfo = DEFAULT_TZ,
) -> ProductionReport:
    """Period report: date x animal pivot plus production and delivery series."""
    if date_to < date_from:
        raise ValidationError("date_to must not be before date_from")
    try:
        period = SummaryPeriod(period)
    except ValueError as exc:
        raise ValidationError("invalid period", details={"period": str(period)}) from exc

    # Include UTC spillover by extending date_to by +1 day
    fetch_to = date_to + timedelta(days=1)
    productions, deliveries, animals, cfg = await asyncio.gather(
        source.milk_productions.list(tenant_id, date_from=date_from, date_to=fetch_to),
        source.milk_deliveries.list(tenant_id, date_from=date_from, date_to=fetch_to),
        source.animals.list(tenant_id),
        source.tenant_config.get(tenant_id),
    )

    def in_period(row: object) -> bool:
        dt = getattr(row, "date_time", None)
        if dt is None or getattr(row, "deleted_at", None) is not None:
            return False
        return date_from <= local_date(dt, tz) <= date_to

    productions = [p for p in productions if in_period(p)]
    deliveries = [d for d in deliveries if in_period(d)]
    if animal_ids:
        wanted = set(animal_ids)
        productions = [p for p in productions if p.animal_id in wanted]
        animals = [a for a in animals if a.id in wanted]

    pivot = build_pivot(productions, animals, date_from, date_to, tz=tz)
    default_price = cfg.default_price_per_l if cfg else None
    delivered = sum((v for v in map(record_volume, deliveries) if v is not None), ZERO)
    valid_records = len(productions) - pivot.skipped
    logger.info(
        "Production report tenant=%s %s..%s: %d records, %d animals",
        tenant_id,
        date_from,
        date_to,
        valid_records,
        len(pivot.columns),
    )
    return ProductionReport(
        date_from=date_from,
        date_to=date_to,
        pivot=pivot,
        revenue=pivot.revenue(default_price),
        currency=cfg.default_currency if cfg else "USD",
        production_by_period=summarize_by_period(productions, period, tz=tz),
        delivery_by_period=summarize_by_period(deliveries, period, tz=tz),
        retention=retention(pivot.grand_total, delivered),
        total_records=valid_records,
        avg_per_record=pivot.grand_total / valid_records if valid_records > 0 else ZERO,
    )
