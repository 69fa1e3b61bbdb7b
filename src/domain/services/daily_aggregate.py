from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from src.application.errors import ValidationError
from src.domain.services.pricing import PriceContext, effective_price_for
from src.domain.services.units import as_decimal
from src.domain.value_objects.shift import Shift
from src.utils.datetime_tz import local_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class DailyAggregate:
    date: date
    am_count: int = 0
    am_liters: Decimal = ZERO
    pm_count: int = 0
    pm_liters: Decimal = ZERO
    total_animals: int = 0
    total_liters: Decimal = ZERO
    total_amount: Decimal = ZERO
    average_per_animal: Decimal = ZERO
    # Rows dropped as malformed
    skipped: int = 0
    # Rows with no snapshot and no resolvable price (contribute 0 to total_amount)
    unpriced: int = 0


def record_volume(record: object) -> Decimal | None:
    raw = getattr(record, "volume_l", None)
    if raw is None:
        return None
    try:
        return as_decimal(raw, "volume_l")
    except ValidationError:
        return None


def _coerce_price(price: object) -> Decimal | None:
    if price is None:
        return None
    try:
        return as_decimal(price, "price_per_l")
    except ValidationError:
        return None


def aggregate_day(
    records: Iterable[object],
    the_date: date,
    price_context: PriceContext | None = None,
) -> DailyAggregate:
    """Shift and daily totals for one local calendar day.

    Never raises on a bad row: rows of the day without a volume or valid
    shift, and rows without a timestamp, are skipped and counted. Deleted
    rows are ignored. A price that is not a number leaves the row unpriced.
    """
    ctx = price_context or PriceContext()
    counts = {Shift.AM: 0, Shift.PM: 0}
    liters = {Shift.AM: ZERO, Shift.PM: ZERO}
    total_amount = ZERO
    skipped = 0
    unpriced = 0

    for record in records:
        if getattr(record, "deleted_at", None) is not None:
            continue
        dt = getattr(record, "date_time", None)
        if dt is not None and local_date(dt, ctx.tz) != the_date:
            continue
        volume = record_volume(record)
        try:
            shift = Shift.parse(getattr(record, "shift", None))
        except ValueError:
            shift = None
        if dt is None or volume is None or shift is None:
            skipped += 1
            logger.debug("Skipping malformed production row id=%s", getattr(record, "id", None))
            continue
        counts[shift] += 1
        liters[shift] += volume
        price = _coerce_price(effective_price_for(record, ctx))
        if price is None:
            unpriced += 1
            continue
        total_amount += volume * price

    total_animals = counts[Shift.AM] + counts[Shift.PM]
    total_liters = liters[Shift.AM] + liters[Shift.PM]
    average = total_liters / total_animals if total_animals > 0 else ZERO
    if skipped:
        logger.info("Daily aggregate for %s skipped %d malformed rows", the_date, skipped)
    return DailyAggregate(
        date=the_date,
        am_count=counts[Shift.AM],
        am_liters=liters[Shift.AM],
        pm_count=counts[Shift.PM],
        pm_liters=liters[Shift.PM],
        total_animals=total_animals,
        total_liters=total_liters,
        total_amount=total_amount,
        average_per_animal=average,
        skipped=skipped,
        unpriced=unpriced,
    )
