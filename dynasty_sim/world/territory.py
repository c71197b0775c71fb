"""Read-only territory and society context handed to the engine each tick."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Mapping, Optional

import numpy as np
from numpy.random import Generator

from dynasty_sim.core.config import (
    PROSPERITY_MILITARY_SOFT_CAP,
    PROSPERITY_TIER_THRESHOLDS,
    RELIGION_NAMES,
    SKILL_NAMES,
    TERRITORY_DRIFT_SD,
    TERRITORY_FOOD_RANGE,
    TERRITORY_NAMES,
    TERRITORY_POPULATION_GROWTH_SD,
    TERRITORY_POPULATION_RANGE,
    TERRITORY_SHELTER_SLACK_RANGE,
    TERRITORY_STAT_RANGE,
    TERRITORY_WAR_CHANCE,
    TERRITORY_WAR_TOGGLE_CHANCE,
)


@dataclass(frozen=True)
class TerritorySnapshot:
    """Aggregate statistics of a territory as seen at the start of a tick."""

    territory_id: int
    name: str
    population: int
    food: float
    wealth: float
    happiness: float
    military: float
    knowledge: float
    shelter_capacity: int
    at_war: bool = False

    @property
    def prosperity_score(self) -> float:
        food_per_capita = self.food / max(1, self.population)
        food_security = min(1.0, food_per_capita / 2.0) * 100.0
        if self.military > PROSPERITY_MILITARY_SOFT_CAP:
            military = PROSPERITY_MILITARY_SOFT_CAP - (self.military - PROSPERITY_MILITARY_SOFT_CAP) * 0.3
        else:
            military = self.military
        score = (
            food_security * 0.15
            + self.wealth * 0.15
            + self.happiness * 0.30
            + self.knowledge * 0.20
            + military * 0.10
        )
        return max(0.0, score)

    @property
    def prosperity_tier(self) -> int:
        score = self.prosperity_score
        return sum(1 for threshold in PROSPERITY_TIER_THRESHOLDS if score >= threshold)


@dataclass(frozen=True)
class Religion:
    name: str
    founded_tick: int = 0


@dataclass(frozen=True)
class SocietyContext:
    """Society-wide values the engine reads but never writes."""

    skill_averages: Mapping[str, float] = field(default_factory=dict)
    active_religion: Optional[Religion] = None


def society_context_from(
    characters: Iterable["Character"],  # noqa: F821
    religion: Optional[Religion] = None,
) -> SocietyContext:
    """Average each skill over the living adults given."""
    skill_sets = [c.skills for c in characters if c.is_alive and c.life_stage != "child"]
    averages: dict[str, float] = {}
    if skill_sets:
        for name in SKILL_NAMES:
            averages[name] = float(np.mean([s.get(name, 0) for s in skill_sets]))
    return SocietyContext(skill_averages=averages, active_religion=religion)


# ------------------------------------------------------------------
# Demo world generation
# ------------------------------------------------------------------

def generate_territories(n: int, rng: Generator) -> list[TerritorySnapshot]:
    territories: list[TerritorySnapshot] = []
    names = list(rng.permutation(TERRITORY_NAMES))
    lo, hi = TERRITORY_STAT_RANGE
    for i in range(n):
        population = int(rng.integers(TERRITORY_POPULATION_RANGE[0], TERRITORY_POPULATION_RANGE[1] + 1))
        slack = rng.uniform(*TERRITORY_SHELTER_SLACK_RANGE)
        name = str(names[i % len(names)])
        if i >= len(names):
            name = f"{name} {i // len(names) + 1}"
        territories.append(TerritorySnapshot(
            territory_id=i,
            name=name,
            population=population,
            food=float(rng.integers(TERRITORY_FOOD_RANGE[0], TERRITORY_FOOD_RANGE[1] + 1)),
            wealth=float(rng.integers(lo, hi + 1)),
            happiness=float(rng.integers(lo, hi + 1)),
            military=float(rng.integers(lo, hi + 1)),
            knowledge=float(rng.integers(lo, hi + 1)),
            shelter_capacity=int(population * slack),
            at_war=bool(rng.random() < TERRITORY_WAR_CHANCE),
        ))
    return territories


def random_religion(rng: Generator, tick: int = 0) -> Religion:
    return Religion(name=str(rng.choice(RELIGION_NAMES)), founded_tick=tick)


def drift_territory(territory: TerritorySnapshot, rng: Generator) -> TerritorySnapshot:
    """Random walk of the aggregates so demo runs see changing conditions."""

    def walk(value: float) -> float:
        return max(0.0, value + rng.normal(0.0, TERRITORY_DRIFT_SD))

    growth = 1.0 + rng.normal(0.0, TERRITORY_POPULATION_GROWTH_SD)
    population = max(0, int(round(territory.population * growth)))
    at_war = territory.at_war
    if rng.random() < TERRITORY_WAR_TOGGLE_CHANCE:
        at_war = not at_war
    return replace(
        territory,
        population=population,
        food=walk(territory.food),
        wealth=walk(territory.wealth),
        happiness=min(100.0, walk(territory.happiness)),
        military=walk(territory.military),
        knowledge=walk(territory.knowledge),
        at_war=at_war,
    )


def apply_casualties(territory: TerritorySnapshot, casualties: int) -> TerritorySnapshot:
    return replace(territory, population=max(0, territory.population - casualties))
