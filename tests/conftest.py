from __future__ import annotations

from typing import Optional

import numpy as np
import pytest

from dynasty_sim.agents.character import Character
from dynasty_sim.agents.traits import TraitVector
from dynasty_sim.core.config import TICKS_PER_YEAR
from dynasty_sim.world.territory import TerritorySnapshot


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def make_character():
    """Factory for hand-built characters with chosen traits."""

    def _make(
        character_id: int,
        role: str = "commoner",
        age: int = 30,
        tick: int = 0,
        territory_id: int = 0,
        title: str = "",
        dynasty_name: Optional[str] = None,
        dynasty_generation: int = 1,
        parent_ids: Optional[list[int]] = None,
        **traits: int,
    ) -> Character:
        return Character(
            character_id=character_id,
            name=f"Person{character_id}",
            title=title,
            role=role,
            territory_id=territory_id,
            birth_tick=tick - age * TICKS_PER_YEAR,
            traits=TraitVector(**traits),
            current_tick=tick,
            dynasty_name=dynasty_name,
            dynasty_generation=dynasty_generation,
            parent_ids=parent_ids,
        )

    return _make


@pytest.fixture
def make_territory():
    def _make(territory_id: int = 0, **overrides) -> TerritorySnapshot:
        values = dict(
            territory_id=territory_id,
            name=f"Land{territory_id}",
            population=500,
            food=100.0,
            wealth=50.0,
            happiness=60.0,
            military=50.0,
            knowledge=50.0,
            shelter_capacity=600,
            at_war=False,
        )
        values.update(overrides)
        return TerritorySnapshot(**values)

    return _make
