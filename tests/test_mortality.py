"""Tests for the mortality catalog."""
from __future__ import annotations

import numpy as np
import pytest

from dynasty_sim.agents.wounds import WoundSystem
from dynasty_sim.core.config import (
    ACCIDENT_WOUND_CHANCE,
    ACCIDENT_WOUND_SEVERITY,
    POISON_LETHALITY_RANGE,
    POISON_WOUND_SEVERITY,
    TICKS_PER_YEAR,
)
from dynasty_sim.core.results import FailureKind
from dynasty_sim.simulation.mortality import (
    Accident,
    Disease,
    Execution,
    ExileAttrition,
    Exposure,
    Famine,
    MortalityCatalog,
    NaturalDisaster,
    OldAge,
    Poisoning,
    UntreatedWound,
    accident_fatality,
    disease_mortality,
    exile_death_chance,
    old_age_hazard,
    poison_detection_chance,
)


@pytest.fixture
def catalog(rng: np.random.Generator) -> MortalityCatalog:
    return MortalityCatalog(rng, WoundSystem(rng))


class TestProbabilities:
    def test_accident_modifiers(self, make_character) -> None:
        assert accident_fatality("hunting", make_character(1, age=30)) == pytest.approx(0.15)
        assert accident_fatality("hunting", make_character(1, age=55)) == pytest.approx(0.25)
        assert accident_fatality("construction", make_character(1, age=55, strength=20)) == pytest.approx(0.20)
        assert accident_fatality("travel", make_character(1, age=65)) == pytest.approx(0.13)
        assert accident_fatality("tournament", make_character(1, courage=80, strength=30)) == pytest.approx(0.22)
        assert accident_fatality("fire", make_character(1, age=5)) == pytest.approx(0.30)

    def test_disease_age_bands(self) -> None:
        assert disease_mortality("plague", 3) == pytest.approx(0.55)
        assert disease_mortality("fever", 30) == pytest.approx(0.15)
        assert disease_mortality("dysentery", 10) == pytest.approx(0.17)
        assert disease_mortality("pox", 80) == pytest.approx(0.45)

    def test_poison_detection_capped(self) -> None:
        assert poison_detection_chance(0) == 0.0
        assert poison_detection_chance(40) == pytest.approx(0.2)
        assert poison_detection_chance(100) == pytest.approx(0.5)

    def test_exile_chance_grows_with_time_and_age(self) -> None:
        assert exile_death_chance(0, 30) == pytest.approx(0.01)
        assert exile_death_chance(10, 30) == pytest.approx(0.03)
        assert exile_death_chance(0, 55) == pytest.approx(0.02)
        assert exile_death_chance(0, 70) == pytest.approx(0.04)

    def test_old_age_hazard(self) -> None:
        assert old_age_hazard(40) == 0.0
        assert old_age_hazard(50) == 0.0
        assert old_age_hazard(60) == pytest.approx(0.05 / TICKS_PER_YEAR)
        assert old_age_hazard(80) == pytest.approx(0.25 / TICKS_PER_YEAR)
        assert old_age_hazard(90) == pytest.approx(0.55 / TICKS_PER_YEAR)


class TestResolve:
    def test_dead_character_short_circuits(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1)
        victim.die("fever", 0)
        outcome = catalog.resolve(victim, Famine(), 1)
        assert outcome.failure is FailureKind.NOT_FOUND
        assert victim.death.cause == "fever"

    def test_unknown_cause_invalid(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1)
        assert catalog.resolve(victim, "plague", 0).failure is FailureKind.INVALID_STATE
        assert catalog.resolve(victim, Accident("duel"), 0).failure is FailureKind.INVALID_STATE
        assert catalog.resolve(victim, Disease("boredom"), 0).failure is FailureKind.INVALID_STATE
        assert victim.is_alive

    @pytest.mark.parametrize(
        "cause, category, text",
        [
            (Famine(), "famine", "starvation"),
            (Exposure(), "exposure", "exposure"),
            (NaturalDisaster("earthquake"), "disaster", "crushed in an earthquake"),
            (NaturalDisaster("meteor"), "disaster", "killed by meteor"),
        ],
    )
    def test_deterministic_causes_kill(self, catalog: MortalityCatalog, make_character, cause, category, text) -> None:
        victim = make_character(1)
        outcome = catalog.resolve(victim, cause, 7)
        assert outcome.died
        assert outcome.side_effects["category"] == category
        assert victim.death.cause == text
        assert victim.death.tick == 7

    def test_execution(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1, title="Lord")
        outcome = catalog.resolve(victim, Execution("beheading", "treason"), 3)
        assert outcome.died
        assert "treason" in victim.death.cause
        assert "Lord Person1 was beheaded" in outcome.description

    def test_unknown_execution_method(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1)
        assert catalog.resolve(victim, Execution("tickling", "treason"), 3).failure is FailureKind.INVALID_STATE
        assert victim.is_alive

    def test_poison_detected_by_vigilant(self, make_character) -> None:
        catalog = MortalityCatalog(np.random.default_rng(8), WoundSystem(np.random.default_rng(9)))
        trials = 1000
        detected = 0
        for i in range(trials):
            target = make_character(i, vigilance=100)
            outcome = catalog.resolve(target, Poisoning("a rival"), 0)
            if outcome.side_effects.get("detected"):
                detected += 1
                assert target.is_alive
                assert not target.is_wounded
        assert detected / trials == pytest.approx(0.5, abs=0.05)

    def test_exile_attrition_requires_exile(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1)
        assert catalog.resolve(victim, ExileAttrition(), 0).failure is FailureKind.INVALID_STATE

    def test_untreated_wound_requires_wound(self, catalog: MortalityCatalog, make_character) -> None:
        victim = make_character(1)
        assert catalog.resolve(victim, UntreatedWound(), 0).failure is FailureKind.INVALID_STATE

    def test_young_never_die_of_old_age(self, catalog: MortalityCatalog, make_character) -> None:
        for i in range(200):
            assert not catalog.resolve(make_character(i, age=40), OldAge(), 0).died

    def test_accident_outcomes_are_terminal_at_most_once(self, catalog: MortalityCatalog, make_character) -> None:
        for i in range(300):
            victim = make_character(i, age=70)
            outcome = catalog.resolve(victim, Accident("fire"), 5)
            assert outcome.success
            assert outcome.died == (not victim.is_alive)
            if outcome.died:
                assert victim.death.tick == 5


class TestSurvivalRates:
    def test_poisoning_lethality_and_survivor_wounds(self, make_character) -> None:
        catalog = MortalityCatalog(np.random.default_rng(31), WoundSystem(np.random.default_rng(32)))
        trials = 4000
        deaths = 0
        lo, hi = POISON_WOUND_SEVERITY
        for i in range(trials):
            target = make_character(i, vigilance=0)
            outcome = catalog.resolve(target, Poisoning("a rival"), 0)
            if outcome.died:
                deaths += 1
                assert target.death.cause == "poisoning"
                continue
            severity = outcome.side_effects["wound_severity"]
            assert lo <= severity <= hi
            assert target.wound.severity == severity
            assert target.wound.cause == "poison"
        assert deaths / trials == pytest.approx(sum(POISON_LETHALITY_RANGE) / 2, abs=0.03)

    def test_accident_survivors_sometimes_wounded(self, make_character) -> None:
        catalog = MortalityCatalog(np.random.default_rng(41), WoundSystem(np.random.default_rng(42)))
        trials = 4000
        survivors = 0
        wounded = 0
        lo, hi = ACCIDENT_WOUND_SEVERITY
        for i in range(trials):
            victim = make_character(i, age=30)
            outcome = catalog.resolve(victim, Accident("travel"), 0)
            if outcome.died:
                continue
            survivors += 1
            if victim.is_wounded:
                wounded += 1
                assert lo <= outcome.side_effects["wound_severity"] <= hi
                assert victim.wound.cause == "travel accident"
            else:
                assert "narrowly escaped" in outcome.description
        assert 1 - survivors / trials == pytest.approx(accident_fatality("travel", make_character(0, age=30)), abs=0.02)
        assert wounded / survivors == pytest.approx(ACCIDENT_WOUND_CHANCE, abs=0.03)

    @pytest.mark.parametrize("age, ticks_in_exile", [(30, 50), (70, 10)])
    def test_exile_attrition_rate(self, make_character, age: int, ticks_in_exile: int) -> None:
        catalog = MortalityCatalog(np.random.default_rng(51), WoundSystem(np.random.default_rng(52)))
        trials = 5000
        deaths = 0
        for i in range(trials):
            exile = make_character(i, age=age)
            exile.exile.is_exiled = True
            exile.exile.exile_tick = -ticks_in_exile
            if catalog.resolve(exile, ExileAttrition(), 0).died:
                deaths += 1
                assert exile.death.cause == "died in exile"
        assert deaths / trials == pytest.approx(exile_death_chance(ticks_in_exile, age), abs=0.015)
