from __future__ import annotations

from enum import Enum


class InputUnit(str, Enum):
    LITERS = "l"
    KILOGRAMS = "kg"
    POUNDS = "lb"

    @classmethod
    def parse(cls, value: object) -> InputUnit:
        if isinstance(value, InputUnit):
            return value
        if not isinstance(value, str):
            raise ValueError(f"invalid unit: {value!r}")
        return cls(value.strip().lower())

    @property
    def is_volume(self) -> bool:
        return self is InputUnit.LITERS
