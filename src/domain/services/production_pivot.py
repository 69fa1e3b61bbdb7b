from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.domain.models.animal import Animal
from src.domain.services.daily_aggregate import record_volume
from src.domain.services.units import liters_to_pounds
from src.utils.datetime_tz import DEFAULT_TZ, local_date

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True, slots=True)
class PivotCell:
    total_liters: Decimal

    @property
    def weight_lb(self) -> Decimal:
        # Display conversion of the same volume, not a separate measurement
        return liters_to_pounds(self.total_liters)


@dataclass(frozen=True, slots=True)
class PivotColumn:
    animal_id: UUID
    tag: str | None
    name: str | None
    in_roster: bool = True


@dataclass(frozen=True, slots=True)
class PivotRevenue:
    price_per_l: Decimal
    by_date: dict[date, Decimal]
    by_animal: dict[UUID, Decimal]
    total: Decimal


@dataclass(slots=True)
class PivotResult:
    period_from: date
    period_to: date
    columns: list[PivotColumn]
    # A missing (date, animal) entry means "no record", not zero
    matrix: dict[date, dict[UUID, PivotCell]]
    row_totals: dict[date, Decimal]
    col_totals: dict[UUID, Decimal]
    grand_total: Decimal
    skipped: int = 0
    _ascending: list[date] = field(default_factory=list, repr=False)

    def dates_ascending(self) -> list[date]:
        return list(self._ascending)

    def dates_descending(self) -> list[date]:
        return list(reversed(self._ascending))

    def cell(self, the_date: date, animal_id: UUID) -> PivotCell | None:
        return self.matrix.get(the_date, {}).get(animal_id)

    def revenue(self, price_per_l: Decimal | None) -> PivotRevenue | None:
        """Revenue at a single flat price (the tenant default).

        Reports deliberately ignore per-record snapshots here. Without a
        price there is no revenue figure at all.
        """
        if price_per_l is None:
            return None
        return PivotRevenue(
            price_per_l=price_per_l,
            by_date={d: total * price_per_l for d, total in self.row_totals.items()},
            by_animal={a: total * price_per_l for a, total in self.col_totals.items()},
            total=self.grand_total * price_per_l,
        )


def _roster_columns(animals: Iterable[Animal]) -> list[PivotColumn]:
    seen: set[UUID] = set()
    columns: list[PivotColumn] = []
    for animal in sorted(animals, key=lambda a: (a.tag or "", str(a.id))):
        if animal.id in seen:
            continue
        seen.add(animal.id)
        columns.append(PivotColumn(animal_id=animal.id, tag=animal.tag, name=animal.name))
    return columns


def build_pivot(
    records: Iterable[object],
    animals: Sequence[Animal],
    period_from: date,
    period_to: date,
    *,
    tz: ZoneInfo = DEFAULT_TZ,
) -> PivotResult:
    """Date x animal matrix of liters for the inclusive period.

    Every roster animal gets a column (zero total when it has no records).
    Animals found in records but absent from the roster still get a column
    so that row, column and grand totals agree.
    """
    sums: dict[date, dict[UUID, Decimal]] = {}
    skipped = 0
    for record in records:
        if getattr(record, "deleted_at", None) is not None:
            continue
        dt = getattr(record, "date_time", None)
        animal_id = getattr(record, "animal_id", None)
        volume = record_volume(record)
        if dt is None or animal_id is None or volume is None:
            skipped += 1
            continue
        day = local_date(dt, tz)
        if day < period_from or day > period_to:
            continue
        bucket = sums.setdefault(day, {})
        bucket[animal_id] = bucket.get(animal_id, ZERO) + volume
    if skipped:
        logger.debug("Pivot %s..%s skipped %d rows", period_from, period_to, skipped)

    columns = _roster_columns(animals)
    known = {c.animal_id for c in columns}
    extra = sorted({a for bucket in sums.values() for a in bucket} - known, key=str)
    columns.extend(PivotColumn(animal_id=a, tag=None, name=None, in_roster=False) for a in extra)

    ascending = sorted(sums)
    matrix = {d: {a: PivotCell(total_liters=v) for a, v in sums[d].items()} for d in ascending}
    row_totals = {d: sum(sums[d].values(), ZERO) for d in ascending}
    col_totals = {c.animal_id: ZERO for c in columns}
    for bucket in sums.values():
        for animal_id, volume in bucket.items():
            col_totals[animal_id] += volume
    grand_total = sum((v for bucket in sums.values() for v in bucket.values()), ZERO)

    return PivotResult(
        period_from=period_from,
        period_to=period_to,
        columns=columns,
        matrix=matrix,
        row_totals=row_totals,
        col_totals=col_totals,
        grand_total=grand_total,
        skipped=skipped,
        _ascending=ascending,
    )
