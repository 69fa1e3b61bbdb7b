from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from zoneinfo import ZoneInfo

from src.domain.services.daily_aggregate import record_volume
from src.domain.value_objects.summary_period import SummaryPeriod
from src.utils.datetime_tz import DEFAULT_TZ, local_date

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class PeriodTotal:
    period: str
    start: date
    total_liters: Decimal
    total_amount: Decimal
    count: int


@dataclass(frozen=True, slots=True)
class Retention:
    produced_l: Decimal
    delivered_l: Decimal
    difference_l: Decimal
    delivered_percentage: Decimal


def period_start(day: date, period: SummaryPeriod) -> date:
    if period is SummaryPeriod.WEEKLY:
        return day - timedelta(days=day.weekday())
    if period is SummaryPeriod.MONTHLY:
        return day.replace(day=1)
    return day


def period_label(start: date, period: SummaryPeriod) -> str:
    if period is SummaryPeriod.WEEKLY:
        return f"Semana {start.isocalendar()[1]}"
    if period is SummaryPeriod.MONTHLY:
        return start.strftime("%m/%Y")
    return start.strftime("%d/%m")


def summarize_by_period(
    rows: Iterable[object],
    period: SummaryPeriod | str = SummaryPeriod.DAILY,
    *,
    tz: ZoneInfo = DEFAULT_TZ,
) -> list[PeriodTotal]:
    """Liters and stored amounts per local day, ISO week or month, oldest first.

    Works for productions and deliveries alike; rows without a volume or
    timestamp and deleted rows are ignored; a missing amount counts as zero.
    """
    period = SummaryPeriod(period)
    liters: dict[date, Decimal] = {}
    amounts: dict[date, Decimal] = {}
    counts: dict[date, int] = {}
    for row in rows:
        if getattr(row, "deleted_at", None) is not None:
            continue
        dt = getattr(row, "date_time", None)
        volume = record_volume(row)
        if dt is None or volume is None:
            continue
        start = period_start(local_date(dt, tz), period)
        liters[start] = liters.get(start, ZERO) + volume
        amounts[start] = amounts.get(start, ZERO) + (getattr(row, "amount", None) or ZERO)
        counts[start] = counts.get(start, 0) + 1
    return [
        PeriodTotal(
            period=period_label(start, period),
            start=start,
            total_liters=liters[start],
            total_amount=amounts[start],
            count=counts[start],
        )
        for start in sorted(liters)
    ]


def retention(produced_l: Decimal, delivered_l: Decimal) -> Retention:
    percentage = (delivered_l / produced_l * 100) if produced_l > 0 else ZERO
    return Retention(
        produced_l=produced_l,
        delivered_l=delivered_l,
        difference_l=produced_l - delivered_l,
        delivered_percentage=percentage,
    )
