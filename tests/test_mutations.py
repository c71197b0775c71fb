"""Tests for the id-addressed mutation entry points."""
from __future__ import annotations

import numpy as np
import pytest

from dynasty_sim.agents.wounds import WoundSystem
from dynasty_sim.core.results import NOT_FOUND_MESSAGE, FailureKind
from dynasty_sim.simulation.mortality import MortalityCatalog
from dynasty_sim.simulation.mutations import CharacterMutations
from dynasty_sim.social.registry import CharacterRegistry


@pytest.fixture
def registry(make_character) -> CharacterRegistry:
    registry = CharacterRegistry()
    registry.add(make_character(0, role="ruler", title="King"))
    registry.add(make_character(1, role="general"))
    registry.add(make_character(2, role="rival"))
    return registry


@pytest.fixture
def mutations(rng: np.random.Generator, registry: CharacterRegistry) -> CharacterMutations:
    wounds = WoundSystem(rng)
    return CharacterMutations(registry, wounds, MortalityCatalog(rng, wounds))


def _every_entry_point(mutations: CharacterMutations, cid: int):
    return [
        mutations.wound(cid, 20, "sword", 5),
        mutations.apply_medication(cid, "herbal", 5),
        mutations.kill_character(cid, "a second death", 5),
        mutations.kill_from_famine(cid, 5),
        mutations.kill_from_exposure(cid, 5),
        mutations.kill_in_disaster(cid, "flood", 5),
        mutations.execute_character(cid, "hanging", "treason", 5),
        mutations.expose_to_disease(cid, "plague", 5),
        mutations.cause_accident(cid, "hunting", 5),
        mutations.attempt_poisoning(cid, 5),
        mutations.exile_character(cid, "treason", 5),
        mutations.record_combat(cid, kills=2),
        mutations.add_deed(cid, 5, "Haunted the keep", "strange"),
        mutations.adjust_traits(cid, courage=10),
        mutations.adjust_emotions(cid, hope=10),
    ]


class TestSoftFailure:
    def test_dead_character_untouched(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        general = registry.get(1)
        general.die("fever", 2)
        courage, hope = general.traits.courage, general.emotions.hope

        for outcome in _every_entry_point(mutations, 1):
            assert not outcome.success
            assert outcome.failure is FailureKind.NOT_FOUND
            assert outcome.description == NOT_FOUND_MESSAGE

        assert general.death.cause == "fever"
        assert general.death.tick == 2
        assert not general.is_wounded
        assert not general.is_exiled
        assert general.combat.kill_count == 0
        assert len(general.deeds) == 0
        assert (general.traits.courage, general.emotions.hope) == (courage, hope)

    def test_unknown_id(self, mutations: CharacterMutations) -> None:
        for outcome in _every_entry_point(mutations, 404):
            assert outcome.failure is FailureKind.NOT_FOUND


class TestDeath:
    def test_kill_character(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        outcome = mutations.kill_character(1, "fell from the walls", 9)
        assert outcome.died
        assert registry.get(1).death.cause == "fell from the walls"
        assert mutations.killer_territories == {}

    def test_killer_territory_remembered_for_rulers(self, mutations: CharacterMutations) -> None:
        mutations.kill_character(0, "an assassin's blade", 9, killer_territory_id=3)
        mutations.kill_character(1, "an assassin's blade", 9, killer_territory_id=3)
        assert mutations.killer_territories == {0: 3}

    def test_disaster_text(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        assert mutations.kill_in_disaster(2, "earthquake", 4).died
        assert registry.get(2).death.cause == "crushed in an earthquake"

    def test_failed_execution_changes_nothing(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        outcome = mutations.execute_character(2, "tickling", "treason", 4)
        assert outcome.failure is FailureKind.INVALID_STATE
        assert registry.get(2).is_alive


class TestExile:
    def test_exile_sets_state(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        rival = registry.get(2)
        despair = rival.emotions.despair
        outcome = mutations.exile_character(2, "plotting a coup", 30)
        assert outcome.success
        assert rival.is_exiled
        assert rival.exile.exile_tick == 30
        assert rival.exile.reason == "plotting a coup"
        assert rival.emotions.despair == min(100, despair + 20)
        assert rival.deeds[-1].deed_type == "disgrace"
        assert rival.ticks_in_exile(42) == 12

    def test_exile_twice_invalid(self, mutations: CharacterMutations) -> None:
        mutations.exile_character(2, "plotting", 30)
        assert mutations.exile_character(2, "plotting again", 31).failure is FailureKind.INVALID_STATE

    def test_ruler_cannot_be_exiled(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        assert mutations.exile_character(0, "tyranny", 30).failure is FailureKind.INVALID_STATE
        assert not registry.get(0).is_exiled


class TestRecords:
    def test_combat_record(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        mutations.record_combat(1, kills=3)
        mutations.record_combat(1, kills=1, duel_won=True)
        record = registry.get(1).combat
        assert (record.kill_count, record.battles_participated, record.duels_won) == (4, 2, 1)

    def test_negative_kills_invalid(self, mutations: CharacterMutations) -> None:
        assert mutations.record_combat(1, kills=-1).failure is FailureKind.INVALID_STATE

    def test_deeds_bounded(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        for tick in range(25):
            mutations.add_deed(1, tick, f"Deed {tick}", "heroic")
        deeds = registry.get(1).deeds
        assert len(deeds) == 20
        assert deeds[0].description == "Deed 5"

    def test_trait_adjustment(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        outcome = mutations.adjust_traits(1, courage=500)
        assert outcome.success
        assert registry.get(1).traits.courage == 100
        assert mutations.adjust_traits(1, luck=5).failure is FailureKind.INVALID_STATE
        assert mutations.adjust_emotions(1, joy=5).failure is FailureKind.INVALID_STATE

    def test_wound_then_treat(self, mutations: CharacterMutations, registry: CharacterRegistry) -> None:
        assert mutations.wound(1, 30, "arrow", 3).success
        assert registry.get(1).is_wounded
        assert mutations.apply_medication(1, "rest", 4).success
