"""Role-driven priorities, with rebel motives rebuilt from traits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from dynasty_sim.core.config import FOOD_SECURITY_THRESHOLD, MILITARY_SAFETY_THRESHOLD
from dynasty_sim.world.territory import TerritorySnapshot


class PriorityLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


Predicate = Callable[[TerritorySnapshot], bool]


@dataclass(frozen=True)
class Priority:
    name: str
    level: PriorityLevel
    # None: cannot be judged from the territory aggregates alone
    satisfied: Optional[Predicate] = None

    def is_met(self, territory: TerritorySnapshot) -> Optional[bool]:
        if self.satisfied is None:
            return None
        return self.satisfied(territory)


def _food_secure(t: TerritorySnapshot) -> bool:
    return t.food >= FOOD_SECURITY_THRESHOLD


def _sheltered(t: TerritorySnapshot) -> bool:
    return t.shelter_capacity >= t.population


def _safe(t: TerritorySnapshot) -> bool:
    return not t.at_war or t.military >= MILITARY_SAFETY_THRESHOLD


SURVIVAL_PRIORITIES: tuple[Priority, ...] = (
    Priority("secure food supply", PriorityLevel.CRITICAL, _food_secure),
    Priority("shelter the people", PriorityLevel.CRITICAL, _sheltered),
    Priority("defend the territory", PriorityLevel.CRITICAL, _safe),
)


def _p(name: str, level: PriorityLevel, satisfied: Optional[Predicate] = None) -> Priority:
    return Priority(name, level, satisfied)


H, M, L = PriorityLevel.HIGH, PriorityLevel.MEDIUM, PriorityLevel.LOW

ROLE_PRIORITIES: dict[str, tuple[Priority, ...]] = {
    "ruler": (
        _p("maintain order", H, lambda t: t.happiness >= 50),
        _p("secure the succession", H),
        _p("fill the treasury", M, lambda t: t.wealth >= 50),
        _p("patronise learning", L, lambda t: t.knowledge >= 50),
    ),
    "heir": (
        _p("prove worthy of the throne", H),
        _p("win allies at court", M),
    ),
    "general": (
        _p("strengthen the army", H, lambda t: t.military >= 50),
        _p("win glory in battle", M, lambda t: t.at_war),
    ),
    "advisor": (
        _p("keep the realm solvent", H, lambda t: t.wealth >= 40),
        _p("counsel the ruler", M),
        _p("advance knowledge", L, lambda t: t.knowledge >= 50),
    ),
    "rival": (
        _p("undermine the ruler", H),
        _p("build a power base", M),
    ),
    "commoner": (
        _p("feed the family", H, _food_secure),
        _p("keep the peace", M, lambda t: not t.at_war),
    ),
    "merchant": (
        _p("turn a profit", H, lambda t: t.wealth >= 40),
        _p("keep the roads safe", M, _safe),
    ),
    "scholar": (
        _p("preserve knowledge", H, lambda t: t.knowledge >= 40),
        _p("teach the young", M),
    ),
    "warrior": (
        _p("guard the borders", H, _safe),
        _p("earn renown", M),
    ),
    "priest": (
        _p("tend the faithful", H, lambda t: t.happiness >= 40),
        _p("spread the faith", M),
    ),
}


def rebel_priorities(character: "Character") -> list[Priority]:  # noqa: F821
    """A rebel's goals follow from why they turned, not from the role."""
    traits = character.traits
    motives: list[Priority] = []
    if traits.ambition > 60:
        motives.append(_p("seize power for self", H))
    if traits.honor > 60:
        motives.append(_p("restore justice", H))
    if traits.compassion > 50:
        motives.append(_p("free the people", H))
    if traits.wrath > 60 or traits.loyalty < 20:
        motives.append(_p("vengeance", H))
    motives.append(_p("avoid capture", H))
    motives.append(_p("gather supporters", M))
    return motives


class PriorityModel:
    """Ranks what a character wants, survival first."""

    def get_priorities(
        self,
        character: "Character",  # noqa: F821
        territory: TerritorySnapshot,
    ) -> list[Priority]:
        if character.role == "rebel_leader":
            role_priorities = rebel_priorities(character)
        else:
            role_priorities = list(ROLE_PRIORITIES.get(character.role, ()))
        return [*SURVIVAL_PRIORITIES, *role_priorities]

    def get_most_urgent_priority(
        self,
        character: "Character",  # noqa: F821
        territory: TerritorySnapshot,
    ) -> Optional[Priority]:
        """First unmet critical priority, else the top high priority as ranked.

        High priorities are surfaced by rank only; their predicates are not
        consulted here.
        """
        priorities = self.get_priorities(character, territory)
        for priority in priorities:
            if priority.level is PriorityLevel.CRITICAL and not priority.is_met(territory):
                return priority
        for priority in priorities:
            if priority.level is PriorityLevel.HIGH:
                return priority
        return None
