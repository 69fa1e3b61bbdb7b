from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.application.errors import ValidationError
from src.domain.value_objects.input_unit import InputUnit

KG_PER_LB = Decimal("0.45359237")
LB_PER_L = Decimal("2.20462")
DENSITY_MIN = Decimal("1.02")
DENSITY_MAX = Decimal("1.04")
_LITERS_STEP = Decimal("0.001")

Number = Decimal | int | float | str


def as_decimal(value: Number, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number") from exc
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite")
    return result


def to_liters(quantity: Number, unit: InputUnit | str, density: Number | None) -> Decimal:
    """Canonical volume in liters for a field measurement.

    `l` returns the quantity unchanged and ignores density. `kg` divides by
    density; `lb` converts to kg first. Out-of-range density is accepted
    (see `density_warnings`); non-positive density is rejected.
    """
    try:
        parsed_unit = InputUnit.parse(unit)
    except ValueError as exc:
        raise ValidationError("invalid unit", details={"unit": str(unit)}) from exc
    qty = as_decimal(quantity, "input_quantity")
    if qty < 0:
        raise ValidationError("input_quantity must not be negative")
    if parsed_unit.is_volume:
        return qty
    if density is None:
        raise ValidationError("density is required for weight units")
    den = as_decimal(density, "density")
    if den <= 0:
        raise ValidationError("density must be positive")
    if parsed_unit is InputUnit.KILOGRAMS:
        return qty / den
    return (qty * KG_PER_LB) / den


def density_warnings(density: Number) -> list[str]:
    warnings: list[str] = []
    den = as_decimal(density, "density")
    if den < DENSITY_MIN or den > DENSITY_MAX:
        warnings.append(f"density out of typical range ({DENSITY_MIN}-{DENSITY_MAX})")
    return warnings


def quantize_liters(volume: Decimal) -> Decimal:
    return volume.quantize(_LITERS_STEP, rounding=ROUND_HALF_UP)


def liters_to_pounds(volume: Decimal) -> Decimal:
    return volume * LB_PER_L
