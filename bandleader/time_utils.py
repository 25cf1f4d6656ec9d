from __future__ import annotations

import re
from datetime import timedelta
from enum import Enum
from typing import NamedTuple, Optional

_DURATION_PATTERN = re.compile(r"^([0-9]+)([a-z]{1,2})$")


class DurationPeriod(Enum):
    """Base periods of time a duration can be expressed in."""
    MILLISECOND = "ms"
    SECOND = "s"
    MINUTE = "m"
    HOUR = "h"
    DAY = "d"
    WEEK = "w"


_PERIOD_MILLISECONDS = {
    DurationPeriod.MILLISECOND: 1,
    DurationPeriod.SECOND: 1000,
    DurationPeriod.MINUTE: 1000 * 60,
    DurationPeriod.HOUR: 1000 * 60 * 60,
    DurationPeriod.DAY: 1000 * 60 * 60 * 24,
    DurationPeriod.WEEK: 1000 * 60 * 60 * 24 * 7,
}


class Duration(NamedTuple):
    """A quantity of a base period, e.g. ``10m``. Supports milliseconds through weeks."""
    quantity: int
    period: DurationPeriod

    @classmethod
    def parse(cls, duration_string: str) -> Optional[Duration]:
        """Parse a duration string.

        :param duration_string: The string to parse, in the format '<quantity><period>' (e.g. '10m', '250ms').
        :return: The parsed duration, or None if the string is not a valid duration.
        """
        match = _DURATION_PATTERN.match(duration_string.strip())
        if match is None:
            return None

        period = _parse_period(match.group(2))
        if period is None:
            return None

        return cls(int(match.group(1)), period)

    @property
    def time(self) -> int:
        """The amount of time this duration represents in milliseconds."""
        return _PERIOD_MILLISECONDS[self.period] * self.quantity

    def as_timedelta(self) -> timedelta:
        return timedelta(milliseconds=self.time)

    def __str__(self) -> str:
        return f"{self.quantity}{self.period.value}"


def _parse_period(suffix: str) -> Optional[DurationPeriod]:
    try:
        return DurationPeriod(suffix)
    except ValueError:
        return None
