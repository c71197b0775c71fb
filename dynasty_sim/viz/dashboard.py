"""Static matplotlib reports for a finished chronicle."""

from __future__ import annotations

import os

import matplotlib
matplotlib.use("Agg")  # Reports are written to disk, no display needed
import matplotlib.pyplot as plt
import numpy as np

from dynasty_sim.core.config import DASHBOARD_ROLLING_WINDOW


def rolling_mean(values: list[float], window: int = DASHBOARD_ROLLING_WINDOW) -> np.ndarray:
    """Trailing mean; the first points average over what exists so far."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    cumsum = np.cumsum(arr)
    out = np.empty_like(arr)
    for i in range(arr.size):
        lo = max(0, i - window + 1)
        total = cumsum[i] - (cumsum[lo - 1] if lo > 0 else 0.0)
        out[i] = total / (i - lo + 1)
    return out


class Dashboard:
    """Summary figure plus one PNG per panel."""

    @staticmethod
    def overview(metrics: "MetricsCollector", filepath: str) -> None:  # noqa: F821
        """Four panels on one figure."""
        snapshots = metrics.snapshots
        if not snapshots:
            return
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)

        ticks = [s.tick for s in snapshots]
        fig, axes = plt.subplots(2, 2, figsize=(14, 9))
        fig.suptitle("Dynasty Chronicle", fontsize=14)

        ax = axes[0, 0]
        ax.plot(ticks, [s.living for s in snapshots], "b-", linewidth=1.5)
        ax.set_title("Living Characters")

        ax = axes[0, 1]
        ax.plot(ticks, rolling_mean([s.births for s in snapshots]), "g-", label="Births")
        ax.plot(ticks, rolling_mean([s.deaths for s in snapshots]), "r-", label="Deaths")
        ax.set_title(f"Births & Deaths ({DASHBOARD_ROLLING_WINDOW}-tick mean)")
        ax.legend(fontsize=8)

        ax = axes[1, 0]
        ax.plot(ticks, [s.wounded for s in snapshots], "m-", label="Wounded")
        ax.plot(ticks, [s.exiled for s in snapshots], "k--", label="Exiled")
        ax.set_title("Wounded & Exiled")
        ax.legend(fontsize=8)

        ax = axes[1, 1]
        successions = metrics.totals()["successions"]
        if successions:
            modes = sorted(successions)
            ax.bar(modes, [successions[m] for m in modes], color="tab:purple")
        ax.set_title("Successions by Mode")

        for ax in axes.flat:
            ax.grid(True, alpha=0.3)
        plt.tight_layout()
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        plt.close(fig)

    @staticmethod
    def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> None:  # noqa: F821
        """Generate all plots and save to output directory."""
        os.makedirs(output_dir, exist_ok=True)

        snapshots = metrics.snapshots
        if not snapshots:
            return

        ticks = [s.tick for s in snapshots]

        # Living characters over time
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(ticks, [s.living for s in snapshots])
        ax.plot(ticks, [s.mean_age for s in snapshots], "--", alpha=0.7, label="Mean age")
        ax.set_title("Living Characters Over Time")
        ax.set_xlabel("Tick")
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)
        fig.savefig(os.path.join(output_dir, "population.png"), dpi=150)
        plt.close(fig)

        # Deaths by cause, stacked
        fig, ax = plt.subplots(figsize=(10, 5))
        categories = sorted(metrics.totals()["deaths"])
        if categories:
            series = [
                np.cumsum([s.deaths_by_category.get(c, 0) for s in snapshots])
                for c in categories
            ]
            ax.stackplot(ticks, *series, labels=categories, alpha=0.8)
            ax.legend(fontsize=8, loc="upper left")
        ax.set_title("Cumulative Deaths by Cause")
        ax.set_xlabel("Tick")
        ax.set_ylabel("Deaths")
        ax.grid(True, alpha=0.3)
        fig.savefig(os.path.join(output_dir, "deaths_by_cause.png"), dpi=150)
        plt.close(fig)

        # Succession modes
        fig, ax = plt.subplots(figsize=(8, 5))
        successions = metrics.totals()["successions"]
        if successions:
            modes = sorted(successions)
            ax.bar(modes, [successions[m] for m in modes])
        ax.set_title("Successions by Mode")
        ax.set_ylabel("Count")
        ax.grid(True, alpha=0.3, axis="y")
        fig.savefig(os.path.join(output_dir, "successions.png"), dpi=150)
        plt.close(fig)

        # Wounded and exiled
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(ticks, [s.wounded for s in snapshots], label="Wounded")
        ax.plot(ticks, [s.exiled for s in snapshots], label="Exiled")
        ax.set_title("Wounded and Exiled Characters")
        ax.set_xlabel("Tick")
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)
        fig.savefig(os.path.join(output_dir, "wounded_exiled.png"), dpi=150)
        plt.close(fig)

        Dashboard.overview(metrics, os.path.join(output_dir, "dashboard.png"))
        print(f"Reports saved to {output_dir}/")
