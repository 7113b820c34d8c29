"""Fixed daily settlement schedules.

Some sources do not publish a next-funding timestamp; their settlements
happen at fixed UTC times of day (Delta: 00:00, 08:00, 16:00). This module
derives the next instant from such a table.
"""

from collections.abc import Iterable

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR


class SettlementSchedule:
    """An ordered set of UTC times of day that repeats every day.

    Args:
        hours: Offsets from UTC midnight in hours. Fractions are allowed
            (5.5 is 05:30). Order and duplicates do not matter.

    Raises:
        ValueError: If the table is empty or an offset is outside [0, 24).
    """

    def __init__(self, hours: Iterable[float]) -> None:
        offsets: set[int] = set()
        for hour in hours:
            if not 0 <= hour < 24:
                raise ValueError(f"Settlement hour {hour} outside [0, 24)")
            offsets.add(round(hour * MS_PER_HOUR))
        if not offsets:
            raise ValueError("Settlement schedule needs at least one time of day")
        self._offsets_ms: tuple[int, ...] = tuple(sorted(offsets))

    @property
    def offsets_ms(self) -> tuple[int, ...]:
        return self._offsets_ms

    def next_settlement(self, now_ms: int) -> int:
        """Return the earliest scheduled instant strictly after ``now_ms``."""
        day_start = now_ms - now_ms % MS_PER_DAY
        for offset in self._offsets_ms:
            candidate = day_start + offset
            if candidate > now_ms:
                return candidate
        return day_start + MS_PER_DAY + self._offsets_ms[0]

    def __repr__(self) -> str:
        hours = ", ".join(f"{o / MS_PER_HOUR:g}" for o in self._offsets_ms)
        return f"SettlementSchedule([{hours}])"


def seconds_until(target_ms: int, now_ms: int) -> int:
    """Whole seconds left until ``target_ms``, never negative."""
    return max(0, (target_ms - now_ms) // 1000)
