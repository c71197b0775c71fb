"""Core character record: identity, traits, lifecycle state and history."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from numpy.random import Generator

from dynasty_sim.agents.traits import (
    EmotionalState,
    TraitVector,
    clamp,
    generate_secret_goal,
    generate_skills,
    generate_traits,
    inherit_traits,
    random_emotional_state,
)
from dynasty_sim.agents.wounds import WoundState
from dynasty_sim.core.clock import years_between
from dynasty_sim.core.config import (
    CHILD_MATURITY_AGE,
    ELDER_AGE,
    MAX_DEEDS,
    ROLE_AGE_RANGES,
    ROLE_SOCIAL_CLASS,
    ROLE_TITLES,
    ROLES,
    TICKS_PER_YEAR,
)


_GIVEN_NAMES: list[str] = [
    "Aelric", "Bjorn", "Cassius", "Draven", "Einar", "Fenris", "Godfrey", "Harald",
    "Ivar", "Jorah", "Kael", "Lucius", "Magnus", "Nikolai", "Odo", "Ragnar",
    "Sigurd", "Theron", "Ulric", "Viktor", "Wulfric", "Xander", "Yorick", "Zephyr",
    "Alaric", "Brennan", "Cedric", "Darius", "Edmund", "Felix", "Gareth", "Hector",
    "Aldara", "Brenna", "Cassandra", "Diana", "Elena", "Freya", "Gwendolyn", "Helena",
    "Isolde", "Jocelyn", "Kira", "Lyra", "Morgana", "Nadia", "Ophelia", "Priscilla",
    "Quinn", "Rowena", "Selena", "Thalia", "Una", "Vivienne", "Wren", "Yara", "Zara",
]

_HOUSE_NAMES: list[str] = [
    "Ashford", "Blackthorn", "Caldmere", "Dunmore", "Evenhall", "Fairholt",
    "Greywater", "Holloway", "Ironwood", "Kestrel", "Lowmarch", "Marrow",
    "Northgate", "Oakheart", "Ravensworth", "Stonebridge", "Thornfield", "Vale",
]


def random_name(rng: Generator) -> str:
    return str(rng.choice(_GIVEN_NAMES))


def random_house(rng: Generator) -> str:
    return str(rng.choice(_HOUSE_NAMES))


def random_title(role: str, rng: Generator) -> str:
    return str(rng.choice(ROLE_TITLES[role]))


@dataclass(frozen=True)
class DeathRecord:
    tick: int
    cause: str


@dataclass(frozen=True)
class ReignSummary:
    years_reigned: int
    obituary: str


@dataclass(frozen=True)
class Deed:
    tick: int
    description: str
    deed_type: str  # "heroic", "villainous", "wise", "foolish", "merciful", "cruel", ...


@dataclass
class ExileState:
    is_exiled: bool = False
    exile_tick: Optional[int] = None
    reason: str = ""


@dataclass
class CombatRecord:
    kill_count: int = 0
    battles_participated: int = 0
    duels_won: int = 0


@dataclass
class Plot:
    plot_type: str   # "coup", "embezzlement", ...
    start_tick: int
    progress_percent: int = 0


class Character:
    """A named person inside a territory."""

    def __init__(
        self,
        character_id: int,
        name: str,
        title: str,
        role: str,
        territory_id: int,
        birth_tick: int,
        traits: TraitVector,
        current_tick: int,
        emotions: Optional[EmotionalState] = None,
        skills: Optional[dict[str, int]] = None,
        secret_goal: str = "none",
        dynasty_name: Optional[str] = None,
        dynasty_generation: int = 1,
        parent_ids: Optional[list[int]] = None,
        social_class: Optional[str] = None,
        piety: int = 0,
    ) -> None:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        self.id = character_id
        self.name = name
        self.title = title
        self.role = role
        self.territory_id = territory_id
        self.birth_tick = birth_tick
        self.social_class = social_class or ROLE_SOCIAL_CLASS[role]
        self.piety = piety

        # Psychology
        self.traits = traits
        self.emotions = emotions or EmotionalState()
        self.skills: dict[str, int] = dict(skills or {})
        self.secret_goal = secret_goal
        self.focus: Optional[str] = None

        # Lineage (back-references only, the registry owns every record)
        self.dynasty_name = dynasty_name
        self.dynasty_generation = dynasty_generation
        self.parent_ids: list[int] = list(parent_ids or [])

        # Lifecycle
        self._age: int = years_between(birth_tick, current_tick)
        self.recorded_stage: str = self.life_stage
        self.elder_bonus_granted: bool = False
        self.has_been_promoted: bool = False
        self.last_birth_tick: Optional[int] = None
        self.death: Optional[DeathRecord] = None

        # Condition
        self.wound = WoundState()
        self.exile = ExileState()
        self.combat = CombatRecord()

        # Rule and reputation
        self.coronation_tick: Optional[int] = current_tick if role == "ruler" else None
        self.reign_summary: Optional[ReignSummary] = None
        self.deeds: deque[Deed] = deque(maxlen=MAX_DEEDS)
        self.active_plots: list[Plot] = []

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_alive(self) -> bool:
        return self.death is None

    @property
    def age(self) -> int:
        return self._age

    @property
    def life_stage(self) -> str:
        if self._age < CHILD_MATURITY_AGE:
            return "child"
        if self._age >= ELDER_AGE:
            return "elder"
        return "adult"

    @property
    def is_wounded(self) -> bool:
        return self.wound.is_wounded

    @property
    def is_exiled(self) -> bool:
        return self.exile.is_exiled

    @property
    def display_name(self) -> str:
        return f"{self.title} {self.name}".strip()

    def age_at(self, tick: int) -> int:
        return years_between(self.birth_tick, tick)

    def ticks_in_exile(self, tick: int) -> int:
        if not self.exile.is_exiled or self.exile.exile_tick is None:
            return 0
        return max(0, tick - self.exile.exile_tick)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_age(self, tick: int) -> int:
        """Recompute age from the birth tick. The only way age changes."""
        self._age = years_between(self.birth_tick, tick)
        return self._age

    def die(self, cause: str, tick: int) -> bool:
        """Terminal transition. Returns False (and changes nothing) if already dead."""
        if self.death is not None:
            return False
        self.death = DeathRecord(tick=tick, cause=cause)
        self.wound.clear()
        return True

    def adjust_traits(self, **deltas: float) -> None:
        self.traits = self.traits.with_deltas(**deltas)

    def adjust_emotions(self, **deltas: float) -> None:
        self.emotions = self.emotions.shifted(**deltas)

    def adjust_skill(self, name: str, delta: float) -> None:
        self.skills = {**self.skills, name: clamp(self.skills.get(name, 0) + delta)}

    def add_deed(self, tick: int, description: str, deed_type: str) -> None:
        self.deeds.append(Deed(tick=tick, description=description, deed_type=deed_type))

    def attach_reign_summary(self, summary: ReignSummary) -> bool:
        """Obituaries are written once."""
        if self.reign_summary is not None:
            return False
        self.reign_summary = summary
        return True

    def promote(self, role: str, title: str, tick: int) -> None:
        self.role = role
        self.title = title
        self.has_been_promoted = True
        if role == "ruler":
            self.coronation_tick = tick

    def __repr__(self) -> str:
        state = "alive" if self.is_alive else f"dead@{self.death.tick}"
        return f"Character({self.id}, {self.display_name!r}, {self.role}, {state})"


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_character(
    character_id: int,
    territory_id: int,
    role: str,
    tick: int,
    rng: Generator,
    society_averages: Optional[Mapping[str, float]] = None,
    name: Optional[str] = None,
    title: Optional[str] = None,
    age: Optional[int] = None,
    dynasty_name: Optional[str] = None,
    dynasty_generation: int = 1,
    parents: Sequence[Character] = (),
) -> Character:
    """Create a character for a role with generated traits, skills and goals."""
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    if age is None:
        lo, hi = ROLE_AGE_RANGES[role]
        age = int(rng.integers(lo, hi + 1))

    traits = generate_traits(role, rng)
    if parents:
        traits = inherit_traits(traits, [p.traits for p in parents], rng)

    social_class = ROLE_SOCIAL_CLASS[role]
    skills = generate_skills(
        social_class,
        age,
        society_averages or {},
        rng,
        parent_skill_sets=[p.skills for p in parents],
    )

    return Character(
        character_id=character_id,
        name=name or random_name(rng),
        title=title if title is not None else random_title(role, rng),
        role=role,
        territory_id=territory_id,
        birth_tick=tick - age * TICKS_PER_YEAR,
        traits=traits,
        current_tick=tick,
        emotions=random_emotional_state(rng),
        skills=skills,
        secret_goal=generate_secret_goal(role, traits, rng),
        dynasty_name=dynasty_name,
        dynasty_generation=dynasty_generation,
        parent_ids=[p.id for p in parents],
        social_class=social_class,
        piety=int(rng.integers(0, 101)) if role == "priest" else int(rng.integers(0, 61)),
    )
