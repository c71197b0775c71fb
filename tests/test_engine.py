"""Integration tests: the engine loop, metrics, logging and reports."""
from __future__ import annotations

import csv
import json
from dataclasses import replace

import pytest

from dynasty_sim.agents.character import Plot
from dynasty_sim.core.config import PLOT_ASSASSINATION_CAUSE, REGICIDE_BOND_TYPE, TICKS_PER_YEAR
from dynasty_sim.monte_carlo import run_single
from dynasty_sim.simulation.engine import SimulationEngine
from dynasty_sim.viz.dashboard import Dashboard, rolling_mean
from dynasty_sim.viz.logger import SimLogger


def _engine(seed: int = 42, territories: int = 3) -> SimulationEngine:
    engine = SimulationEngine(seed=seed, n_territories=territories)
    engine.initialize()
    return engine


class TestInitialize:
    def test_every_territory_has_a_court(self) -> None:
        engine = _engine()
        assert len(engine.territories) == 3
        for tid in engine.territories:
            rulers = engine.registry.rulers_of(tid)
            assert len(rulers) == 1
            heirs = engine.registry.heirs_of(tid)
            assert len(heirs) == 1
            assert heirs[0].parent_ids == [rulers[0].id]
            assert heirs[0].dynasty_name == rulers[0].dynasty_name
            assert heirs[0].age < rulers[0].age
            assert engine.legitimacy.get(rulers[0].id).source == "inheritance"
        assert all(c.focus is not None for c in engine.registry)

    def test_priests_only_with_religion(self) -> None:
        engine = _engine(seed=3, territories=6)
        for tid, religion in engine.religions.items():
            has_priest = bool(engine.registry.with_role(tid, "priest"))
            assert has_priest == (religion is not None)


class TestRun:
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_one_ruler_per_territory_every_tick(self, seed: int) -> None:
        engine = _engine(seed=seed)
        broken: list[int] = []

        def check(tick, metrics) -> None:
            for tid in engine.territories:
                if len(engine.registry.rulers_of(tid)) != 1:
                    broken.append(tick)

        engine.set_tick_callback(check)
        engine.run(20 * TICKS_PER_YEAR)
        assert broken == []
        assert engine.clock.tick == 20 * TICKS_PER_YEAR

    def test_ages_follow_birth_ticks(self) -> None:
        engine = _engine()
        engine.run(5 * TICKS_PER_YEAR)
        tick = engine.clock.tick
        for character in engine.registry:
            if character.is_alive:
                assert character.age == (tick - character.birth_tick) // TICKS_PER_YEAR

    def test_dead_stay_dead(self) -> None:
        engine = _engine(seed=5)
        engine.run(10 * TICKS_PER_YEAR)
        dead = {c.id: c.death for c in engine.registry if not c.is_alive}
        engine.run(5 * TICKS_PER_YEAR)
        for cid, record in dead.items():
            assert engine.registry.get(cid).death == record

    def test_deterministic_per_seed(self) -> None:
        a, b = _engine(seed=9), _engine(seed=9)
        a.run(10 * TICKS_PER_YEAR)
        b.run(10 * TICKS_PER_YEAR)
        assert len(a.registry) == len(b.registry)
        assert [e.narrative for e in a.succession.history] == [e.narrative for e in b.succession.history]

    def test_metrics_collected_each_tick(self) -> None:
        engine = _engine()
        engine.run(24)
        assert [s.tick for s in engine.metrics.snapshots] == list(range(1, 25))
        assert all(s.rulers == 3 for s in engine.metrics.snapshots)


class TestIntrigue:
    def _plotter(self, engine: SimulationEngine, progress: int = 0):
        plotter = next(c for c in engine.registry.living_in(0) if c.role not in ("ruler", "heir"))
        plotter.active_plots.append(Plot(plot_type="coup", start_tick=0, progress_percent=progress))
        return plotter

    def test_discovered_plotter_exiled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("dynasty_sim.simulation.engine.PLOT_DISCOVERY_PER_VIGILANCE", 0.01)
        engine = _engine()
        ruler = engine.registry.ruler_of(0)
        ruler.traits = replace(ruler.traits, vigilance=100)
        plotter = self._plotter(engine)

        engine._intrigue(0, engine.clock.tick)
        engine.logger.flush_tick(engine.clock.tick)
        assert plotter.is_exiled
        assert plotter.exile.reason == "plotting coup"
        assert plotter.active_plots == []
        assert ruler.is_alive
        assert any(e.category == SimLogger.EXILE and plotter.id in e.character_ids for e in engine.logger.entries)

    def test_completed_coup_kills_ruler(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("dynasty_sim.simulation.engine.PLOT_DISCOVERY_PER_VIGILANCE", 0.0)
        engine = _engine()
        ruler = engine.registry.ruler_of(0)
        plotter = self._plotter(engine, progress=99)

        engine._intrigue(0, engine.clock.tick)
        assert not ruler.is_alive
        assert ruler.death.cause == PLOT_ASSASSINATION_CAUSE
        assert not plotter.is_exiled
        assert plotter.active_plots == []


class TestRegicide:
    def test_foreign_killing_reaches_both_territories(self) -> None:
        engine = _engine()
        ruler = engine.registry.ruler_of(0)
        outcome = engine.mutations.kill_character(ruler.id, "an arrow from the walls", engine.clock.tick, killer_territory_id=1)
        assert outcome.died

        engine.tick()
        assert engine.succession.is_resolved(ruler.id)
        assert engine.succession.history[0].deceased_ruler_id == ruler.id
        assert len(engine.registry.rulers_of(0)) == 1
        # Territory 1 is processed after 0 in the same tick and applies its side at once.
        assert [m.memory_type for m in engine.memories.memories_of(1)] == ["victory"]
        assert engine.consequences.pending_for(0) == 1

        engine.tick()
        assert engine.bonds.find(0, 1, REGICIDE_BOND_TYPE) is not None
        assert any(m.memory_type == "character_death" for m in engine.memories.memories_of(0))

    def test_succession_logged(self) -> None:
        engine = _engine()
        engine.mutations.kill_character(engine.registry.ruler_of(2).id, "a fever", engine.clock.tick)
        engine.tick()
        succession = [e for e in engine.logger.entries if e.category == SimLogger.SUCCESSION]
        assert any(e.territory_id == 2 for e in succession)
        assert engine.metrics.snapshots[-1].successions_by_mode


class TestLogger:
    def test_verbosity_filters_output(self, capsys: pytest.CaptureFixture) -> None:
        logger = SimLogger(verbosity=0)
        logger.log(SimLogger.DEATH, "A king died", tick=13)
        logger.log(SimLogger.WOUND, "A scratch", tick=13)
        logger.flush_tick(13)
        out = capsys.readouterr().out
        assert "A king died" in out
        assert "A scratch" not in out
        assert "[Y  1 M 2]" in out
        assert len(logger.entries) == 2

    def test_narrative_by_territory(self) -> None:
        logger = SimLogger(verbosity=0, stdout=False)
        logger.log(SimLogger.BIRTH, "A child in the north", tick=4, territory_id=0)
        logger.log(SimLogger.BIRTH, "A child in the south", tick=4, territory_id=1)
        logger.flush_tick(4)
        narrative = logger.get_narrative(4, territory_id=1)
        assert "south" in narrative
        assert "north" not in narrative
        assert logger.get_narrative(5) == "Tick 5: Nothing notable happened."

    def test_file_and_json(self, tmp_path) -> None:
        logger = SimLogger(verbosity=3, log_file=str(tmp_path / "logs" / "run.log"), stdout=False)
        logger.log(SimLogger.EXILE, "Banished", [3], tick=2, territory_id=0, reason="treason")
        logger.flush_tick(2)
        logger.export_json(str(tmp_path / "events.json"))
        logger.close()

        assert "Banished" in (tmp_path / "logs" / "run.log").read_text()
        entries = json.loads((tmp_path / "events.json").read_text())
        assert entries[0]["character_ids"] == [3]
        assert entries[0]["data"] == {"reason": "treason"}


class TestReports:
    def test_csv_and_summary(self, tmp_path) -> None:
        engine = _engine()
        engine.run(3 * TICKS_PER_YEAR)
        path = tmp_path / "metrics.csv"
        engine.metrics.export_csv(str(path))
        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0][:4] == ["tick", "living", "births", "deaths"]
        assert len(rows) == 3 * TICKS_PER_YEAR + 1
        summary = engine.metrics.summary_report()
        assert summary.startswith("=== Chronicle Summary: Tick 1 to Tick 36 ===")

    def test_empty_summary(self) -> None:
        assert SimulationEngine().metrics.summary_report() == "No data available for the specified period."

    def test_dashboard_writes_pngs(self, tmp_path) -> None:
        engine = _engine()
        engine.run(2 * TICKS_PER_YEAR)
        Dashboard.comprehensive_report(engine.metrics, str(tmp_path))
        for name in ("population", "deaths_by_cause", "successions", "wounded_exiled", "dashboard"):
            assert (tmp_path / f"{name}.png").exists()

    def test_rolling_mean(self) -> None:
        assert list(rolling_mean([2, 4, 6, 8], window=2)) == [2, 3, 5, 7]
        assert rolling_mean([]).size == 0


def test_monte_carlo_single_run() -> None:
    result = run_single(seed=7, years=3, territories=2)
    assert result.ruler_invariant_held
    assert result.final_living > 0
    assert result.total_deaths == sum(result.deaths_by_category.values())
