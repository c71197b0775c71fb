"""Monte Carlo analysis: run N chronicles with different seeds, aggregate statistics."""

from __future__ import annotations

import csv
import os
import statistics
import time
from collections import Counter
from dataclasses import dataclass, field

import numpy as np

from dynasty_sim.core.config import TICKS_PER_YEAR


@dataclass
class RunResult:
    """Deaths, successions and dynasty depth for one seeded chronicle."""
    seed: int
    final_living: int
    peak_living: int
    total_births: int
    total_deaths: int
    deaths_by_category: dict[str, int] = field(default_factory=dict)
    successions_by_mode: dict[str, int] = field(default_factory=dict)
    contested_successions: int = 0
    longest_reign_years: int = 0
    max_dynasty_generation: int = 1
    ruler_invariant_held: bool = True
    elapsed_seconds: float = 0.0

    @property
    def total_successions(self) -> int:
        return sum(self.successions_by_mode.values())


def run_single(seed: int, years: int, territories: int) -> RunResult:
    """Run one chronicle and reduce it to a RunResult."""
    from dynasty_sim.simulation.engine import SimulationEngine

    engine = SimulationEngine(seed=seed, n_territories=territories)
    engine.initialize()

    t0 = time.time()
    engine.run(years * TICKS_PER_YEAR)
    elapsed = time.time() - t0

    snaps = engine.metrics.snapshots
    totals = engine.metrics.totals()
    characters = engine.registry.all()

    reigns = [c.reign_summary.years_reigned for c in characters if c.reign_summary is not None]
    held = all(len(engine.registry.rulers_of(tid)) == 1 for tid in engine.territories)

    return RunResult(
        seed=seed,
        final_living=snaps[-1].living if snaps else 0,
        peak_living=max((s.living for s in snaps), default=0),
        total_births=sum(s.births for s in snaps),
        total_deaths=sum(s.deaths for s in snaps),
        deaths_by_category=dict(totals["deaths"]),
        successions_by_mode=dict(totals["successions"]),
        contested_successions=sum(1 for e in engine.succession.history if e.contested),
        longest_reign_years=max(reigns, default=0),
        max_dynasty_generation=max((c.dynasty_generation for c in characters), default=1),
        ruler_invariant_held=held,
        elapsed_seconds=elapsed,
    )


def monte_carlo(
    n_runs: int = 20,
    years: int = 50,
    territories: int = 4,
    output_dir: str = "results/monte_carlo",
) -> list[RunResult]:
    """Run seeded chronicles and report how rulers fell and who replaced them."""

    os.makedirs(output_dir, exist_ok=True)
    results: list[RunResult] = []
    rng = np.random.default_rng(0)
    seeds = [int(s) for s in rng.integers(0, 100_000, size=n_runs)]

    print(f"=== Monte Carlo Chronicles ===")
    print(f"Runs: {n_runs} | Years/run: {years} | Territories: {territories}")
    print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
    print()

    total_t0 = time.time()

    for i, seed in enumerate(seeds):
        t0 = time.time()
        result = run_single(seed, years, territories)
        results.append(result)
        elapsed = time.time() - t0
        status = "OK" if result.ruler_invariant_held else "RULER INVARIANT BROKEN"
        print(
            f"  Run {i+1:>3}/{n_runs} | seed={seed:>5} | "
            f"living={result.final_living:>3} | "
            f"deaths={result.total_deaths:>3} | "
            f"successions={result.total_successions:>2} | "
            f"{status} | {elapsed:.1f}s"
        )

    total_elapsed = time.time() - total_t0
    print(f"\nAll {n_runs} runs completed in {total_elapsed:.1f}s "
          f"({total_elapsed/n_runs:.1f}s avg)")

    # ── Across runs ───────────────────────────────────────────────────
    print("\n" + "=" * 70)
    print("AGGREGATE RESULTS")
    print("=" * 70)

    def stat_line(label: str, values: list[float], fmt: str = ".1f") -> str:
        if not values:
            return f"  {label}: no data"
        mn = min(values)
        mx = max(values)
        avg = statistics.mean(values)
        med = statistics.median(values)
        std = statistics.stdev(values) if len(values) > 1 else 0
        return f"  {label:<30s}  mean={avg:{fmt}}  median={med:{fmt}}  std={std:{fmt}}  min={mn:{fmt}}  max={mx:{fmt}}"

    print("\nPOPULATION")
    print(stat_line("Final living characters", [r.final_living for r in results]))
    print(stat_line("Peak living characters", [r.peak_living for r in results]))
    print(stat_line("Total births", [r.total_births for r in results]))
    print(stat_line("Total deaths", [r.total_deaths for r in results]))

    print("\nDEATHS BY CAUSE (all runs)")
    causes: Counter = Counter()
    for r in results:
        causes.update(r.deaths_by_category)
    total_deaths = max(1, sum(causes.values()))
    for cause, count in causes.most_common():
        print(f"  {cause:<20s} {count:>5} ({count / total_deaths * 100:.0f}%)")

    print("\nSUCCESSION")
    print(stat_line("Successions per run", [r.total_successions for r in results]))
    print(stat_line("Longest reign (years)", [r.longest_reign_years for r in results]))
    print(stat_line("Deepest dynasty generation", [r.max_dynasty_generation for r in results]))
    modes: Counter = Counter()
    for r in results:
        modes.update(r.successions_by_mode)
    total_successions = max(1, sum(modes.values()))
    for mode, count in modes.most_common():
        print(f"  {mode:<20s} {count:>5} ({count / total_successions * 100:.0f}%)")
    contested = sum(r.contested_successions for r in results)
    print(f"  Contested inheritances: {contested}")
    broken = sum(1 for r in results if not r.ruler_invariant_held)
    print(f"  Runs ending without exactly one ruler per territory: {broken}/{n_runs}")

    # ── Export CSV ────────────────────────────────────────────────────
    mode_names = sorted(modes)
    cause_names = sorted(causes)
    csv_path = os.path.join(output_dir, "monte_carlo_results.csv")
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "seed", "final_living", "peak_living", "births", "deaths",
            "contested", "longest_reign", "max_generation", "ruler_invariant",
            *[f"succession_{m}" for m in mode_names],
            *[f"deaths_{c}" for c in cause_names],
            "elapsed_s",
        ])
        for r in results:
            writer.writerow([
                r.seed, r.final_living, r.peak_living, r.total_births, r.total_deaths,
                r.contested_successions, r.longest_reign_years, r.max_dynasty_generation,
                int(r.ruler_invariant_held),
                *[r.successions_by_mode.get(m, 0) for m in mode_names],
                *[r.deaths_by_category.get(c, 0) for c in cause_names],
                f"{r.elapsed_seconds:.1f}",
            ])
    print(f"\nResults exported to {csv_path}")

    return results


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Monte Carlo dynasty simulation")
    parser.add_argument("--runs", type=int, default=20, help="Number of runs")
    parser.add_argument("--years", type=int, default=50, help="Years per run")
    parser.add_argument("--territories", type=int, default=4, help="Territories per run")
    parser.add_argument("--output-dir", type=str, default="results/monte_carlo")
    args = parser.parse_args()

    monte_carlo(
        n_runs=args.runs,
        years=args.years,
        territories=args.territories,
        output_dir=args.output_dir,
    )
