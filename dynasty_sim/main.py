"""Entry point for the dynasty lifecycle and succession simulation."""

from __future__ import annotations

import argparse
import os
import time


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dynasty Lifecycle & Succession Simulation",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--years", type=int, default=50, help="Number of years to simulate")
    parser.add_argument("--territories", type=int, default=4, help="Number of territories")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--no-plots", action="store_true", help="Skip the matplotlib reports")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")

    args = parser.parse_args()

    # Import here to allow --help without loading everything
    from dynasty_sim.core.config import TICKS_PER_YEAR
    from dynasty_sim.simulation.engine import SimulationEngine
    from dynasty_sim.viz.logger import SimLogger

    ticks = args.years * TICKS_PER_YEAR
    print(f"=== Dynasty Lifecycle & Succession Simulation ===")
    print(f"Territories: {args.territories} | Years: {args.years} ({ticks} ticks) | Seed: {args.seed}")
    print(f"Output: {args.output_dir}")
    print()

    logger = SimLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "chronicle.log"),
        stdout=(args.verbosity > 0),
    )
    engine = SimulationEngine(seed=args.seed, n_territories=args.territories, logger=logger)

    print("Seating the courts...")
    engine.initialize()
    for tid, territory in sorted(engine.territories.items()):
        ruler = engine.registry.ruler_of(tid)
        religion = engine.religions[tid]
        faith = religion.name if religion else "no faith"
        print(
            f"  {territory.name:<12} pop {territory.population:>5} | "
            f"{ruler.display_name} of House {ruler.dynasty_name} | {faith}"
        )
    print()

    print(f"Running simulation for {ticks} ticks...")
    t0 = time.time()
    try:
        engine.run(ticks)
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
    elapsed = time.time() - t0
    ticks_run = engine.clock.tick
    print(f"\nSimulation complete: {ticks_run} ticks in {elapsed:.2f}s ({ticks_run / max(0.01, elapsed):.0f} ticks/sec)")

    os.makedirs(args.output_dir, exist_ok=True)
    csv_path = os.path.join(args.output_dir, "metrics.csv")
    engine.metrics.export_csv(csv_path)
    print(f"Metrics exported to {csv_path}")

    if not args.no_plots:
        from dynasty_sim.viz.dashboard import Dashboard
        Dashboard.comprehensive_report(engine.metrics, args.output_dir)

    print()
    print(engine.metrics.summary_report())

    print()
    print("Successions:")
    for event in engine.succession.history:
        name = engine.territories[event.territory_id].name
        print(f"  [tick {event.tick:>4}] {name}: {event.narrative}")
    if not engine.succession.history:
        print("  None. Every founding ruler still reigns.")

    engine.logger.export_json(os.path.join(args.output_dir, "events.json"))
    engine.logger.close()

    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
