"""Tests for ruler succession."""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pytest

from dynasty_sim.core.config import (
    CIVIL_WAR_CASUALTIES,
    CIVIL_WAR_DEATH_CAUSE,
    CIVIL_WAR_TITLE,
    COUP_TITLE,
    ELECTED_RULER_AGE,
    ELECTED_RULER_TITLE,
    REGICIDE_BOND_INTENSITY,
    REGICIDE_BOND_TYPE,
    REGICIDE_KILLER_MEMORY_WEIGHT,
    REGICIDE_VICTIM_MEMORY_WEIGHT,
    TICKS_PER_YEAR,
)
from dynasty_sim.core.results import FailureKind
from dynasty_sim.simulation.succession import SuccessionEvent, SuccessionResolver
from dynasty_sim.social.consequences import BondRegistry, ConsequenceQueue, LegitimacyRegistry, MemoryLog
from dynasty_sim.social.registry import CharacterRegistry

REIGN_END = 10 * TICKS_PER_YEAR


@dataclass
class Court:
    registry: CharacterRegistry
    bonds: BondRegistry
    memories: MemoryLog
    legitimacy: LegitimacyRegistry
    queue: ConsequenceQueue
    resolver: SuccessionResolver

    def living_rulers(self, territory_id: int = 0) -> list:
        return self.registry.rulers_of(territory_id)


def _court(seed: int, make_character, heir_loyalty: Optional[int] = None, claimants=()) -> Court:
    """A ruler (id 0) crowned at tick 0, an optional heir (id 1), claimants from id 10."""
    rng = np.random.default_rng(seed)
    registry = CharacterRegistry()
    bonds, memories, queue = BondRegistry(), MemoryLog(), ConsequenceQueue()
    legitimacy = LegitimacyRegistry(rng)
    resolver = SuccessionResolver(rng, registry, bonds, memories, legitimacy, queue)

    registry.add(make_character(0, role="ruler", age=50, title="King", dynasty_name="Vale", dynasty_generation=3))
    if heir_loyalty is not None:
        registry.add(make_character(1, role="heir", age=20, dynasty_name="Vale", loyalty=heir_loyalty, parent_ids=[0]))
    for i, traits in enumerate(claimants):
        registry.add(make_character(10 + i, role="rival", age=40, **traits))
    registry.add(make_character(20, role="advisor", age=50, ambition=30))
    return Court(registry, bonds, memories, legitimacy, queue, resolver)


@pytest.fixture
def court(make_character):
    def _make(seed: int = 1, heir_loyalty: Optional[int] = None, claimants=()) -> Court:
        return _court(seed, make_character, heir_loyalty, claimants)

    return _make


class TestModes:
    def test_loyal_heir_peaceful(self, court) -> None:
        c = court(heir_loyalty=70)
        outcome = c.resolver.resolve(0, REIGN_END, cause="poisoning")

        assert outcome.success
        event = outcome.payload
        assert isinstance(event, SuccessionEvent)
        assert event.mode == "peaceful"
        assert event.new_ruler_id == 1
        assert not event.contested
        heir = c.registry.get(1)
        assert heir.role == "ruler"
        assert heir.title == "King"
        assert heir.dynasty_generation == 4
        assert heir.coronation_tick == REIGN_END
        assert c.legitimacy.get(1).source == "inheritance"
        assert [r.id for r in c.living_rulers()] == [1]

    def test_old_ruler_record(self, court) -> None:
        c = court(heir_loyalty=70)
        c.resolver.resolve(0, REIGN_END, cause="poisoning")
        old = c.registry.get(0)
        assert not old.is_alive
        assert old.death.cause == "poisoning"
        assert old.death.tick == REIGN_END
        assert old.reign_summary.years_reigned == 10
        assert "ruled for 10 years" in old.reign_summary.obituary

    def test_already_dead_ruler_keeps_death_record(self, court) -> None:
        c = court(heir_loyalty=70)
        c.registry.get(0).die("a fall from his horse", REIGN_END - 5)
        outcome = c.resolver.resolve(0, REIGN_END)
        assert c.registry.get(0).death.cause == "a fall from his horse"
        assert "a fall from his horse" in outcome.description

    def test_civil_war(self, court) -> None:
        c = court(claimants=[
            dict(ambition=65, courage=50, cunning=50),
            dict(ambition=72, courage=80, cunning=70),
            dict(ambition=80, courage=60, cunning=60),
        ])
        event = c.resolver.resolve(0, REIGN_END, cause="fever").payload

        assert event.mode == "civil_war"
        assert event.new_ruler_id == 11
        winner = c.registry.get(11)
        assert winner.role == "ruler"
        assert winner.title == CIVIL_WAR_TITLE
        assert CIVIL_WAR_CASUALTIES[0] <= event.casualties < CIVIL_WAR_CASUALTIES[1]
        assert set(event.fallen_claimant_ids) <= {10, 12}
        for fallen in event.fallen_claimant_ids:
            assert c.registry.get(fallen).death.cause == CIVIL_WAR_DEATH_CAUSE
        assert c.legitimacy.get(11).source == "conquest"
        assert [r.id for r in c.living_rulers()] == [11]

    def test_civil_war_losers_die_half_the_time(self, court) -> None:
        claimants = [dict(ambition=70, courage=90, cunning=90), dict(ambition=70), dict(ambition=70)]
        losses = 0
        trials = 300
        for seed in range(trials):
            event = court(seed=seed, claimants=claimants).resolver.resolve(0, REIGN_END).payload
            assert event.new_ruler_id == 10
            losses += len(event.fallen_claimant_ids)
        assert losses / (2 * trials) == pytest.approx(0.5, abs=0.06)

    def test_civil_war_tie_goes_to_first_claimant(self, make_character) -> None:
        first = make_character(1, courage=60, cunning=40)
        second = make_character(2, courage=40, cunning=60)
        assert SuccessionResolver.civil_war_winner([first, second]) is first

    def test_single_claimant_coup(self, court) -> None:
        c = court(claimants=[dict(ambition=75)])
        event = c.resolver.resolve(0, REIGN_END, cause="fever").payload
        assert event.mode == "coup"
        assert event.new_ruler_id == 10
        assert c.registry.get(10).title == COUP_TITLE
        assert c.legitimacy.get(10).source == "coup"

    def test_claimants_beat_disloyal_heir(self, court) -> None:
        c = court(heir_loyalty=30, claimants=[dict(ambition=75)])
        event = c.resolver.resolve(0, REIGN_END).payload
        assert event.mode == "coup"
        assert c.registry.get(1).role == "heir"

    def test_disloyal_heir_contested(self, court) -> None:
        c = court(heir_loyalty=30)
        event = c.resolver.resolve(0, REIGN_END, cause="fever").payload
        assert event.mode == "peaceful"
        assert event.contested
        assert event.new_ruler_id == 1
        record = c.legitimacy.get(1)
        assert record.source == "inheritance"
        assert record.contested
        assert "doubt" in event.narrative

    def test_election(self, court) -> None:
        c = court()
        event = c.resolver.resolve(0, REIGN_END, cause="fever").payload
        assert event.mode == "election"
        chosen = c.registry.get(event.new_ruler_id)
        assert chosen.id not in (0, 20)
        assert chosen.title == ELECTED_RULER_TITLE
        assert chosen.age == ELECTED_RULER_AGE
        assert chosen.territory_id == 0
        assert c.legitimacy.get(chosen.id).source == "election"

    def test_exiled_heir_still_inherits(self, court) -> None:
        c = court(heir_loyalty=90)
        c.registry.get(1).exile.is_exiled = True
        event = c.resolver.resolve(0, REIGN_END).payload
        assert event.mode == "peaceful"
        assert event.new_ruler_id == 1

    def test_exiled_rival_can_seize_power(self, court) -> None:
        c = court(claimants=[dict(ambition=80)])
        c.registry.get(10).exile.is_exiled = True
        event = c.resolver.resolve(0, REIGN_END).payload
        assert event.mode == "coup"
        assert event.new_ruler_id == 10

    def test_ambitious_child_counts_as_claimant(self, court, make_character) -> None:
        c = court()
        c.registry.add(make_character(30, age=12, ambition=75))
        event = c.resolver.resolve(0, REIGN_END).payload
        assert event.mode == "coup"
        assert event.new_ruler_id == 30


class TestSingleRuler:
    @pytest.mark.parametrize(
        "heir_loyalty, n_claimants",
        list(itertools.product([None, 70, 30], [0, 1, 2, 3])),
    )
    def test_exactly_one_living_ruler(self, court, heir_loyalty, n_claimants) -> None:
        claimants = [dict(ambition=65 + 5 * i, courage=40 + 10 * i) for i in range(n_claimants)]
        for seed in range(5):
            c = court(seed=seed, heir_loyalty=heir_loyalty, claimants=claimants)
            outcome = c.resolver.resolve(0, REIGN_END)
            assert outcome.success
            rulers = c.living_rulers()
            assert len(rulers) == 1
            assert rulers[0].id == outcome.side_effects["new_ruler_id"]

    def test_stray_ruler_demoted(self, court, make_character) -> None:
        c = court(heir_loyalty=70)
        c.registry.add(make_character(40, role="ruler", ambition=10))
        c.resolver.resolve(0, REIGN_END)
        assert [r.id for r in c.living_rulers()] == [1]
        assert c.registry.get(40).role == "rival"


class TestResolveGuards:
    def test_unknown_ruler(self, court) -> None:
        assert court().resolver.resolve(99, REIGN_END).failure is FailureKind.NOT_FOUND

    def test_not_a_ruler(self, court) -> None:
        c = court()
        assert c.resolver.resolve(20, REIGN_END).failure is FailureKind.INVALID_STATE
        assert c.registry.get(20).is_alive

    def test_resolved_once(self, court) -> None:
        c = court(heir_loyalty=70)
        assert c.resolver.resolve(0, REIGN_END).success
        assert c.resolver.resolve(0, REIGN_END + 1).failure is FailureKind.INVALID_STATE
        assert len(c.resolver.history) == 1

    def test_pending_successions(self, court) -> None:
        c = court(heir_loyalty=70)
        assert c.resolver.pending_successions(0) == []
        c.registry.get(0).die("fever", REIGN_END)
        assert [r.id for r in c.resolver.pending_successions(0)] == [0]
        c.resolver.resolve(0, REIGN_END)
        assert c.resolver.pending_successions(0) == []
        assert c.resolver.is_resolved(0)


class TestConsequences:
    def test_regicide_queued_for_both_territories(self, court) -> None:
        c = court(heir_loyalty=70)
        c.resolver.resolve(0, REIGN_END, cause="an assassin's blade", killer_territory_id=1)
        assert c.queue.pending_for(0) == 1
        assert c.queue.pending_for(1) == 1
        assert c.bonds.bonds == []

        c.queue.drain(0)
        bond = c.bonds.find(0, 1, REGICIDE_BOND_TYPE)
        assert bond.intensity == REGICIDE_BOND_INTENSITY
        assert [m.emotional_weight for m in c.memories.memories_of(0)] == [REGICIDE_VICTIM_MEMORY_WEIGHT]

        c.queue.drain(1)
        assert [m.emotional_weight for m in c.memories.memories_of(1)] == [REGICIDE_KILLER_MEMORY_WEIGHT]
        assert c.queue.pending_for(0) == c.queue.pending_for(1) == 0

    def test_no_regicide_without_foreign_killer(self, court) -> None:
        c = court(heir_loyalty=70)
        c.resolver.resolve(0, REIGN_END, killer_territory_id=0)
        assert c.queue.pending_for(0) == 0

    def test_bonds_fade_with_each_ruler(self, court) -> None:
        c = court(heir_loyalty=70)
        grudge = c.bonds.create_bond(0, 2, "betrayal_grudge", 30, "The broken treaty", 0)
        oath = c.bonds.create_bond(0, 3, "oath", 50, "A personal oath", 0, is_hereditary=False)
        c.resolver.resolve(0, REIGN_END)
        assert grudge.intensity == 15
        assert grudge.status == "dormant"
        assert grudge.generations_passed == 1
        assert oath.intensity == 50

    def test_new_ruler_gets_a_deed(self, court) -> None:
        c = court(heir_loyalty=70)
        c.resolver.resolve(0, REIGN_END)
        assert c.registry.get(1).deeds[-1].deed_type == "political"
