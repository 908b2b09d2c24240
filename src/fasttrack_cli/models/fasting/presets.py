"""Named fasting modes and quick-start presets."""

from __future__ import annotations

import math
from dataclasses import dataclass

# Quick-start windows, in hours
PRESET_HOURS = (12, 14, 16, 18, 20, 24)

MIN_CUSTOM_HOURS = 1


@dataclass(frozen=True)
class FastingMode:
    """A fasting/eating split such as 16:8."""

    label: str
    hours: float
    description: str = ""

    @property
    def key(self) -> str:
        return self.label.replace(" ", "").lower()

    @property
    def eating_hours(self) -> float:
        return max(0, 24 - self.hours)


FASTING_MODES = (
    FastingMode("12:12", 12, "Gentle overnight fast"),
    FastingMode("14:10", 14, "Beginner-friendly"),
    FastingMode("16:8", 16, "Most common daily window"),
    FastingMode("18:6", 18, "Extended daily fast"),
    FastingMode("20:4", 20, "Short evening eating window"),
    FastingMode("OMAD", 23, "One meal a day (about 1h to eat)"),
)


def find_mode(key: str) -> FastingMode | None:
    """Look up a mode by label, case- and space-insensitively (``16:8``, ``omad``)."""
    wanted = key.replace(" ", "").lower()
    for mode in FASTING_MODES:
        if mode.key == wanted:
            return mode
    return None


def resolve_hours(value: str) -> float:
    """
    Turn user input into planned hours.

    Accepts a mode label (``16:8``, ``OMAD``), a number of hours (``16``,
    ``13.5``) or an ``h`` suffix (``18h``). Numbers below one hour are raised
    to one hour.

    Raises:
        ValueError: If *value* is neither a known mode nor a positive number
    """
    mode = find_mode(value)
    if mode is not None:
        return mode.hours

    text = value.strip().lower().removesuffix("h")
    try:
        hours = float(text)
    except ValueError:
        raise ValueError(f"Unknown fasting window: {value!r}") from None

    if not math.isfinite(hours) or hours <= 0:
        raise ValueError("Hours must be greater than zero")
    return max(MIN_CUSTOM_HOURS, hours)
