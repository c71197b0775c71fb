"""Data collection, statistics and export."""

from __future__ import annotations

import csv
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from dynasty_sim.core.config import TICKS_PER_YEAR


@dataclass
class TickSnapshot:
    """A snapshot of simulation state for one tick."""

    tick: int = 0
    living: int = 0
    births: int = 0
    deaths: int = 0
    deaths_by_category: dict[str, int] = field(default_factory=dict)
    successions_by_mode: dict[str, int] = field(default_factory=dict)
    wounded: int = 0
    exiled: int = 0
    mean_age: float = 0.0
    rulers: int = 0
    promotions: int = 0


class MetricsCollector:
    """Collects time-series data every tick."""

    def __init__(self) -> None:
        self.snapshots: list[TickSnapshot] = []
        self._births: int = 0
        self._deaths: Counter = Counter()
        self._successions: Counter = Counter()
        self._promotions: int = 0

    def record_birth(self) -> None:
        self._births += 1

    def record_death(self, category: str = "other") -> None:
        self._deaths[category] += 1

    def record_succession(self, mode: str) -> None:
        self._successions[mode] += 1

    def record_promotion(self) -> None:
        self._promotions += 1

    def collect_tick(self, tick: int, characters: list["Character"]) -> TickSnapshot:  # noqa: F821
        """Collect all metrics for this tick."""
        alive = [c for c in characters if c.is_alive]
        n = len(alive)

        snapshot = TickSnapshot(
            tick=tick,
            living=n,
            births=self._births,
            deaths=sum(self._deaths.values()),
            deaths_by_category=dict(self._deaths),
            successions_by_mode=dict(self._successions),
            wounded=sum(1 for c in alive if c.is_wounded),
            exiled=sum(1 for c in alive if c.is_exiled),
            mean_age=sum(c.age for c in alive) / max(1, n),
            rulers=sum(1 for c in alive if c.role == "ruler"),
            promotions=self._promotions,
        )
        self.snapshots.append(snapshot)

        # Reset per-tick counters
        self._births = 0
        self._deaths.clear()
        self._successions.clear()
        self._promotions = 0

        return snapshot

    def totals(self) -> dict[str, Counter]:
        deaths: Counter = Counter()
        successions: Counter = Counter()
        for s in self.snapshots:
            deaths.update(s.deaths_by_category)
            successions.update(s.successions_by_mode)
        return {"deaths": deaths, "successions": successions}

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        totals = self.totals()
        categories = sorted(totals["deaths"])
        modes = sorted(totals["successions"])
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "tick", "living", "births", "deaths", "wounded", "exiled",
                "mean_age", "rulers", "promotions",
                *[f"deaths_{c}" for c in categories],
                *[f"succession_{m}" for m in modes],
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.tick, s.living, s.births, s.deaths, s.wounded, s.exiled,
                    f"{s.mean_age:.1f}", s.rulers, s.promotions,
                    *[s.deaths_by_category.get(c, 0) for c in categories],
                    *[s.successions_by_mode.get(m, 0) for m in modes],
                ])

    def summary_report(self, start_tick: int = 0, end_tick: Optional[int] = None) -> str:
        """Generate a human-readable summary of the simulation period."""
        relevant = [
            s for s in self.snapshots
            if s.tick >= start_tick and (end_tick is None or s.tick <= end_tick)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        deaths: Counter = Counter()
        successions: Counter = Counter()
        for s in relevant:
            deaths.update(s.deaths_by_category)
            successions.update(s.successions_by_mode)
        span = last.tick - first.tick + 1

        lines = [
            f"=== Chronicle Summary: Tick {first.tick} to Tick {last.tick} ===",
            f"Duration: {span} ticks ({span / TICKS_PER_YEAR:.1f} years)",
            f"",
            f"Living characters: {first.living} -> {last.living}",
            f"  Total births: {sum(s.births for s in relevant)}",
            f"  Total deaths: {sum(deaths.values())}",
            f"  Total promotions: {sum(s.promotions for s in relevant)}",
            f"  Mean age (final tick): {last.mean_age:.1f}",
            f"  Wounded / exiled (final tick): {last.wounded} / {last.exiled}",
        ]

        if deaths:
            lines.append(f"")
            lines.append(f"Deaths by cause:")
            for category, count in deaths.most_common():
                lines.append(f"  {category}: {count}")

        if successions:
            lines.append(f"")
            lines.append(f"Successions by mode:")
            for mode, count in successions.most_common():
                lines.append(f"  {mode}: {count}")

        return "\n".join(lines)
