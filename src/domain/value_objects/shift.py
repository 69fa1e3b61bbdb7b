from __future__ import annotations

from enum import Enum


class Shift(str, Enum):
    AM = "AM"
    PM = "PM"

    @classmethod
    def parse(cls, value: object) -> Shift:
        """Accept 'am', ' PM ', Shift.AM; raise ValueError for anything else."""
        if isinstance(value, Shift):
            return value
        if not isinstance(value, str):
            raise ValueError(f"invalid shift: {value!r}")
        return cls(value.strip().upper())
