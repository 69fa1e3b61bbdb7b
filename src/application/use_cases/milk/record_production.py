from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import ConflictError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.application.use_cases.milk import record_productions
from src.domain.models.milk_production import MilkProduction
from src.utils.datetime_tz import DEFAULT_TZ, Clock


@dataclass(slots=True)
class RecordProductionInput:
    animal_id: UUID
    input_quantity: Decimal
    date: date | None = None
    shift: str | None = None
    date_time: datetime | None = None
    input_unit: str | None = None
    density: Decimal | None = None
    buyer_id: UUID | None = None
    notes: str | None = None


async def execute(
    uow: UnitOfWork,
    tenant_id: UUID,
    payload: RecordProductionInput,
    *,
    clock: Clock | None = None,
    tz: ZoneInfo = DEFAULT_TZ,
) -> MilkProduction:
    batch = record_productions.RecordProductionsInput(
        items=[record_productions.BulkItem(payload.animal_id, payload.input_quantity)],
        date=payload.date,
        shift=payload.shift,
        date_time=payload.date_time,
        input_unit=payload.input_unit,
        density=payload.density,
        buyer_id=payload.buyer_id,
        notes=payload.notes,
    )
    try:
        result = await record_productions.execute(uow, tenant_id, batch, clock=clock, tz=tz)
    except ConflictError as exc:
        raise ConflictError(
            "Ya existe un registro para este animal en el mismo día y turno",
            details=exc.details,
        ) from exc
    return result.productions[0]
