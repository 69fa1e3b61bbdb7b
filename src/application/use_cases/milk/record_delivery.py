from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.application.errors import ValidationError
from src.application.interfaces.unit_of_work import UnitOfWork
from src.domain.models.milk_delivery import MilkDelivery
from src.domain.services.pricing import resolve_price_quote
from src.domain.services.units import as_decimal
from src.utils.datetime_tz import DEFAULT_TZ, assume_local_tz, local_date

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RecordDeliveryInput:
    date_time: datetime
    volume_l: Decimal
    buyer_id: UUID | None = None
    notes: str | None = None


def _round2(x: Decimal) -> Decimal:
    return x.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


async def execute(
    uow: UnitOfWork,
    tenant_id: UUID,
    payload: RecordDeliveryInput,
    *,
    tz: ZoneInfo = DEFAULT_TZ,
) -> MilkDelivery:
    volume = as_decimal(payload.volume_l, "volume_l")
    if volume <= 0:
        raise ValidationError("volume_l must be positive")
    dt = assume_local_tz(payload.date_time, tz)
    the_day = local_date(dt, tz)

    cfg = await uow.tenant_config.get(tenant_id)
    buyer_id = payload.buyer_id or (cfg.default_buyer_id if cfg else None)
    if buyer_id is None:
        raise ValidationError("buyer_id is required (no default buyer configured)")

    same_period, prices = await asyncio.gather(
        uow.milk_deliveries.list(
            tenant_id,
            date_from=the_day,
            date_to=the_day + timedelta(days=1),
            buyer_id=buyer_id,
        ),
        uow.milk_prices.list(tenant_id, date_from=the_day, date_to=the_day),
    )
    # One delivery per buyer and local day
    if any(local_date(d.date_time, tz) == the_day for d in same_period):
        raise ValidationError("Ya registró la entrega de leche para este comprador en esta fecha")

    quote = resolve_price_quote(the_day, buyer_id, prices, cfg)
    if quote is None:
        raise ValidationError("No price configured for this date and no default price set")

    delivery = MilkDelivery.create(
        tenant_id=tenant_id,
        buyer_id=buyer_id,
        date_time=dt,
        volume_l=volume,
        price_snapshot=quote.price_per_l,
        currency=quote.currency,
        amount=_round2(volume * quote.price_per_l),
        notes=payload.notes,
        tz=tz,
    )
    try:
        created = await uow.milk_deliveries.add(delivery)
        await uow.commit()
    except Exception:
        await uow.rollback()
        raise
    logger.info(
        "Recorded delivery tenant=%s buyer=%s date=%s volume=%s L amount=%s %s",
        tenant_id,
        buyer_id,
        the_day,
        volume,
        created.amount,
        created.currency,
    )
    return created
