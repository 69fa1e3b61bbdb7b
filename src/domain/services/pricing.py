from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import UUID

from zoneinfo import ZoneInfo

from src.domain.models.milk_price import MilkPrice
from src.domain.models.tenant_config import TenantConfig
from src.utils.datetime_tz import DEFAULT_TZ, local_date


@dataclass(frozen=True, slots=True)
class PriceQuote:
    price_per_l: Decimal
    currency: str
    source: str  # 'buyer' | 'general' | 'tenant_default'


@dataclass(frozen=True, slots=True)
class PriceContext:
    """Everything needed to price a record that carries no frozen snapshot."""

    prices: Sequence[MilkPrice] = field(default_factory=tuple)
    tenant_default: TenantConfig | None = None
    # Buyer used when the record itself has none
    buyer_id: UUID | None = None
    tz: ZoneInfo = DEFAULT_TZ


def _find(prices: Iterable[MilkPrice], the_date: date, buyer_id: UUID | None) -> MilkPrice | None:
    return next((p for p in prices if p.applies_to(the_date, buyer_id)), None)


def resolve_price_quote(
    the_date: date,
    buyer_id: UUID | None,
    prices: Iterable[MilkPrice],
    tenant_default: TenantConfig | None,
) -> PriceQuote | None:
    """Price per liter applicable on `the_date`.

    Resolution order, first match wins:
    1. the buyer's own price for that date (only when `buyer_id` is given),
    2. the general price for that date,
    3. the tenant default price,
    4. None: no price is known and callers must not treat it as 0.
    """
    candidates = list(prices)
    if buyer_id is not None:
        match = _find(candidates, the_date, buyer_id)
        if match is not None:
            return PriceQuote(match.price_per_l, match.currency, "buyer")
    match = _find(candidates, the_date, None)
    if match is not None:
        return PriceQuote(match.price_per_l, match.currency, "general")
    if tenant_default is not None and tenant_default.default_price_per_l is not None:
        return PriceQuote(
            tenant_default.default_price_per_l,
            tenant_default.default_currency,
            "tenant_default",
        )
    return None


def resolve_effective_price(
    the_date: date,
    buyer_id: UUID | None,
    prices: Iterable[MilkPrice],
    tenant_default: TenantConfig | None,
) -> Decimal | None:
    quote = resolve_price_quote(the_date, buyer_id, prices, tenant_default)
    return quote.price_per_l if quote is not None else None


def effective_price_for(record: object, context: PriceContext) -> Decimal | None:
    """Frozen snapshot first; live resolution only for records without one."""
    snapshot = getattr(record, "price_snapshot", None)
    if snapshot is not None:
        return snapshot
    buyer_id = getattr(record, "buyer_id", None) or context.buyer_id
    return resolve_effective_price(
        local_date(record.date_time, context.tz),
        buyer_id,
        context.prices,
        context.tenant_default,
    )
