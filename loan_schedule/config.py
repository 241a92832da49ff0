"""Engine settings.

Rounding, tolerance and day-count choices live here so callers can tune them
per run or through the environment (``LOAN_SCHEDULE_*`` variables).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from .daycount import get_day_count
from .utils import decimal_from_str

DECIMAL_PRECISION = 28  # precision used inside the engine's local decimal context


@dataclass(frozen=True)
class ScheduleSettings:
    money_quantum: Decimal = Decimal("0.01")
    rate_quantum: Decimal = Decimal("0.0001")
    tolerance: Decimal = Decimal("0.01")
    day_count: str = "ACT/365F"
    months_per_year: int = 12

    def __post_init__(self) -> None:
        # Fail on unknown conventions before any schedule is built.
        get_day_count(self.day_count)
        if self.money_quantum <= 0 or self.rate_quantum <= 0:
            raise ValueError("Rounding quanta must be positive")
        if self.tolerance < 0:
            raise ValueError("Tolerance must not be negative")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ScheduleSettings":
        """Build settings from ``LOAN_SCHEDULE_*`` environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        day_count = env.get("LOAN_SCHEDULE_DAY_COUNT", defaults.day_count)
        tolerance = env.get("LOAN_SCHEDULE_TOLERANCE")
        money_quantum = env.get("LOAN_SCHEDULE_MONEY_QUANTUM")
        return cls(
            money_quantum=decimal_from_str(money_quantum) if money_quantum else defaults.money_quantum,
            rate_quantum=defaults.rate_quantum,
            tolerance=decimal_from_str(tolerance) if tolerance else defaults.tolerance,
            day_count=day_count,
            months_per_year=defaults.months_per_year,
        )


DEFAULT_SETTINGS = ScheduleSettings()
