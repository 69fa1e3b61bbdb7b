from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.domain.models.milk_production import MilkProduction
from src.domain.value_objects.shift import Shift
from src.utils.datetime_tz import DEFAULT_TZ, format_day_date, local_date, shift_for


@dataclass(frozen=True, slots=True)
class ProposedEntry:
    animal_id: UUID
    date: date
    shift: Shift
    input_quantity: Decimal


@dataclass(frozen=True, slots=True)
class Conflict:
    animal_id: UUID
    date: date
    shift: Shift
    input_quantity: Decimal
    existing_id: UUID
    existing_date_time: datetime
    existing_volume_l: Decimal | None

    def as_details(self) -> dict[str, str | None]:
        return {
            "animal_id": str(self.animal_id),
            "date": self.date.isoformat(),
            "shift": self.shift.value,
            "input_quantity": str(self.input_quantity),
            "existing_id": str(self.existing_id),
            "existing_date_time": self.existing_date_time.isoformat(),
            "existing_volume_l": (
                str(self.existing_volume_l) if self.existing_volume_l is not None else None
            ),
        }

    def describe(self, tz: ZoneInfo = DEFAULT_TZ) -> str:
        existing = f"{self.existing_volume_l} L" if self.existing_volume_l is not None else "?"
        when = format_day_date(self.existing_date_time, include_time=True, tz=tz)
        return (
            f"Se intentó registrar {self.input_quantity} para el turno {self.shift.value}, "
            f"pero ya existe {existing} desde {when}"
        )


_Key = tuple[UUID, date, Shift]


def record_shift(record: MilkProduction, tz: ZoneInfo = DEFAULT_TZ) -> Shift:
    """Stored shift, or the local hour for legacy rows without one."""
    try:
        return Shift.parse(record.shift)
    except ValueError:
        return Shift(shift_for(record.date_time, tz))


def _index_existing(existing: Iterable[MilkProduction], tz: ZoneInfo) -> dict[_Key, MilkProduction]:
    index: dict[_Key, MilkProduction] = {}
    for record in existing:
        if record.animal_id is None or record.deleted_at is not None:
            continue
        key = (record.animal_id, local_date(record.date_time, tz), record_shift(record, tz))
        # Keep the first record seen so repeated runs report the same row
        index.setdefault(key, record)
    return index


def detect_conflicts(
    proposed: Sequence[ProposedEntry],
    existing: Iterable[MilkProduction],
    *,
    tz: ZoneInfo = DEFAULT_TZ,
) -> list[Conflict]:
    """Proposed entries that collide with an existing animal/day/shift record.

    Pure query: `existing` is only read. The caller decides policy; bulk
    submission rejects the whole batch when the result is non-empty.
    """
    index = _index_existing(existing, tz)
    conflicts: list[Conflict] = []
    for entry in proposed:
        dup = index.get((entry.animal_id, entry.date, Shift.parse(entry.shift)))
        if dup is None:
            continue
        conflicts.append(
            Conflict(
                animal_id=entry.animal_id,
                date=entry.date,
                shift=Shift.parse(entry.shift),
                input_quantity=entry.input_quantity,
                existing_id=dup.id,
                existing_date_time=dup.date_time,
                existing_volume_l=dup.volume_l,
            )
        )
    return conflicts
