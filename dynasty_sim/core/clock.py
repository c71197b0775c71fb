"""Time system for the simulation: ticks, months, years."""

from dynasty_sim.core.config import MONTH_NAMES, TICKS_PER_YEAR


def years_between(start_tick: int, end_tick: int) -> int:
    """Whole years elapsed between two ticks (never negative)."""
    return max(0, end_tick - start_tick) // TICKS_PER_YEAR


class SimClock:
    """Manages simulation time. One tick is one month."""

    def __init__(self, start_tick: int = 0) -> None:
        self.tick: int = start_tick

    @property
    def year(self) -> int:
        return self.tick // TICKS_PER_YEAR

    @property
    def month(self) -> int:
        return self.tick % TICKS_PER_YEAR

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month]

    def advance(self) -> None:
        """Advance the clock by one tick."""
        self.tick += 1

    def label(self) -> str:
        return f"Year {self.year}, {self.month_name}"
