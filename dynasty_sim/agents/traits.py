"""Trait, emotion and skill generation with role baselines and inheritance."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Mapping, Optional, Sequence, Union

import numpy as np
from numpy.random import Generator

from dynasty_sim.core.config import (
    CHILD_MATURITY_AGE,
    ELDER_AGE,
    EMOTION_INITIAL_RANGES,
    INHERITANCE_NOISE,
    ROLE_TRAIT_BONUSES,
    SECRET_GOAL_FALLBACKS,
    SKILL_ELDER_RETENTION,
    SKILL_INHERITANCE_CEILING,
    SKILL_INHERITANCE_CEILING_WITH_PARENTS,
    SKILL_NAMES,
    SKILL_NOISE,
    SKILL_PARENT_SHARE,
    SKILL_SOCIETY_SHARE,
    SOCIAL_CLASS_SKILL_BASELINE,
    TRAIT_BASELINE_RANGE,
    TRAIT_DESCRIPTION_HIGH,
    TRAIT_DESCRIPTION_LOW,
    TRAIT_MAX,
    TRAIT_MIN,
    TRAIT_NAMES,
    TRAIT_VOLATILE_RANGES,
)


def clamp(value: float) -> int:
    """Round and clamp to the 0-100 scale."""
    return int(np.clip(round(value), TRAIT_MIN, TRAIT_MAX))


@dataclass(frozen=True)
class TraitVector:
    """Personality and physical traits, all on a 0-100 scale.

    Immutable: every change goes through ``with_deltas`` which returns a new
    clamped vector.
    """

    # Power
    ambition: int = 50
    greed: int = 50

    # Moral character
    loyalty: int = 50
    honor: int = 50
    cruelty: int = 30
    compassion: int = 50
    justice: int = 50
    generosity: int = 50

    # Mental
    cunning: int = 50
    wisdom: int = 50
    paranoia: int = 30
    vigilance: int = 50

    # Emotional
    courage: int = 50
    pride: int = 50
    wrath: int = 30

    # Social / physical
    charisma: int = 50
    diplomacy: int = 50
    strength: int = 50

    def __post_init__(self) -> None:
        for name in TRAIT_NAMES:
            object.__setattr__(self, name, clamp(getattr(self, name)))

    def get(self, name: str) -> int:
        return getattr(self, name)

    def with_deltas(self, **deltas: float) -> TraitVector:
        """Return a new vector with the deltas applied and clamped."""
        unknown = set(deltas) - set(TRAIT_NAMES)
        if unknown:
            raise ValueError(f"Unknown traits: {sorted(unknown)}")
        return replace(self, **{k: getattr(self, k) + v for k, v in deltas.items()})

    def as_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Mapping[str, float]) -> TraitVector:
        return cls(**{name: values[name] for name in TRAIT_NAMES if name in values})


@dataclass(frozen=True)
class EmotionalState:
    """Transient emotions, 0-100. Shifts with events, unlike traits."""

    hope: int = 50
    fear: int = 25
    shame: int = 10
    despair: int = 10
    contentment: int = 50
    rage: int = 15

    def __post_init__(self) -> None:
        for name in EMOTION_INITIAL_RANGES:
            object.__setattr__(self, name, clamp(getattr(self, name)))

    def shifted(self, **deltas: float) -> EmotionalState:
        unknown = set(deltas) - set(EMOTION_INITIAL_RANGES)
        if unknown:
            raise ValueError(f"Unknown emotions: {sorted(unknown)}")
        return replace(self, **{k: getattr(self, k) + v for k, v in deltas.items()})

    def describe(self) -> str:
        """Dominant emotions as a short phrase."""
        dominant: list[str] = []
        if self.hope > 70:
            dominant.append("hopeful")
        if self.fear > 70:
            dominant.append("fearful")
        if self.shame > 50:
            dominant.append("ashamed")
        if self.despair > 50:
            dominant.append("despairing")
        if self.contentment > 70:
            dominant.append("content")
        if self.rage > 60:
            dominant.append("angry")
        if not dominant:
            return "stable" if self.contentment > 50 else "troubled"
        return ", ".join(dominant)


TraitSource = Union[TraitVector, Sequence[TraitVector]]


# ------------------------------------------------------------------
# Trait generation
# ------------------------------------------------------------------

def _draw(rng: Generator, lo: int, hi: int) -> int:
    """Uniform integer in [lo, hi] inclusive."""
    return int(rng.integers(lo, hi + 1))


def generate_traits(role: str, rng: Generator) -> TraitVector:
    """Draw a baseline trait vector and apply the role bonus table."""
    if role not in ROLE_TRAIT_BONUSES:
        raise ValueError(f"Unknown role: {role}")

    values: dict[str, int] = {}
    for name in TRAIT_NAMES:
        lo, hi = TRAIT_VOLATILE_RANGES.get(name, TRAIT_BASELINE_RANGE)
        values[name] = _draw(rng, lo, hi)

    for name, bonus in ROLE_TRAIT_BONUSES[role].items():
        values[name] += bonus

    return TraitVector(**values)


def inherit_traits(child_base: TraitVector, parents: TraitSource, rng: Generator) -> TraitVector:
    """Blend a generated child baseline with its parents' traits.

    With several parents, their values are averaged first and the average is
    blended with the child baseline, so each parent counts equally.
    """
    if isinstance(parents, TraitVector):
        parents = [parents]
    if not parents:
        return child_base

    values: dict[str, float] = {}
    for name in TRAIT_NAMES:
        parent_mean = sum(p.get(name) for p in parents) / len(parents)
        midpoint = (child_base.get(name) + parent_mean) / 2.0
        noise = _draw(rng, -INHERITANCE_NOISE, INHERITANCE_NOISE)
        values[name] = midpoint + noise
    return TraitVector(**values)


def random_emotional_state(rng: Generator) -> EmotionalState:
    return EmotionalState(**{
        name: _draw(rng, lo, hi) for name, (lo, hi) in EMOTION_INITIAL_RANGES.items()
    })


def generate_secret_goal(role: str, traits: TraitVector, rng: Generator) -> str:
    """Pick a hidden agenda weighted by personality. Rulers already have power."""
    if role == "ruler":
        return "none"
    if traits.ambition > 70 and traits.loyalty < 40:
        return "seize_throne" if rng.random() < 0.6 else "independence"
    if traits.greed > 70:
        return "accumulate_wealth"
    if traits.wrath > 60 and rng.random() < 0.3:
        return "revenge"
    if traits.compassion > 70:
        return "protect_family"
    if traits.pride > 70 and traits.courage > 60:
        return "glory"
    if rng.random() < 0.5:
        return "none"
    return str(rng.choice(SECRET_GOAL_FALLBACKS))


# ------------------------------------------------------------------
# Skills
# ------------------------------------------------------------------

def _age_skill_factor(age: int) -> float:
    """Children have only part of their class baseline; elders keep most of it."""
    if age < CHILD_MATURITY_AGE:
        return max(0.0, age / CHILD_MATURITY_AGE)
    if age >= ELDER_AGE:
        return SKILL_ELDER_RETENTION
    return 1.0


def inherited_skill_bonus(
    society_average: float,
    parent_values: Optional[Sequence[float]] = None,
) -> float:
    """Learned (pre-noise) part of a skill: society plus caregivers, capped.

    The society share always applies; the parent share stacks on top when
    parents are known. The sum can never exceed the ceiling, which is higher
    when parents are known.
    """
    bonus = SKILL_SOCIETY_SHARE * max(0.0, society_average)
    if parent_values:
        bonus += SKILL_PARENT_SHARE * (sum(parent_values) / len(parent_values))
        return min(SKILL_INHERITANCE_CEILING_WITH_PARENTS, bonus)
    return min(SKILL_INHERITANCE_CEILING, bonus)


def generate_skills(
    social_class: str,
    age: int,
    society_averages: Mapping[str, float],
    rng: Generator,
    parent_skill_sets: Optional[Sequence[Mapping[str, float]]] = None,
) -> dict[str, int]:
    """Build a skill map: class/age baseline + capped inheritance + noise."""
    baseline = SOCIAL_CLASS_SKILL_BASELINE.get(social_class, SOCIAL_CLASS_SKILL_BASELINE["commoner"])
    age_factor = _age_skill_factor(age)
    parent_skill_sets = [p for p in (parent_skill_sets or []) if p]

    skills: dict[str, int] = {}
    for name in SKILL_NAMES:
        parent_values = [p.get(name, 0.0) for p in parent_skill_sets]
        inherited = inherited_skill_bonus(society_averages.get(name, 0.0), parent_values)
        noise = _draw(rng, -SKILL_NOISE, SKILL_NOISE)
        skills[name] = clamp(baseline.get(name, 0.0) * age_factor + inherited + noise)
    return skills


# ------------------------------------------------------------------
# Descriptions
# ------------------------------------------------------------------

_TRAIT_WORDS: dict[str, tuple[str, str, str]] = {
    "ambition": ("content with their station", "moderately ambitious", "burning with ambition"),
    "greed": ("generous and content", "practical about wealth", "consumed by greed"),
    "loyalty": ("untrustworthy", "pragmatic in loyalty", "fiercely loyal"),
    "honor": ("dishonorable", "practical about honor", "bound by honor"),
    "cruelty": ("merciful", "pragmatic", "cruel and ruthless"),
    "compassion": ("cold-hearted", "practical in compassion", "deeply compassionate"),
    "justice": ("arbitrary", "fair when convenient", "unbending in justice"),
    "generosity": ("miserly", "fair-handed", "lavishly generous"),
    "cunning": ("simple and direct", "reasonably shrewd", "masterfully cunning"),
    "wisdom": ("foolish", "reasonably wise", "profoundly wise"),
    "paranoia": ("trusting", "cautious", "deeply paranoid"),
    "vigilance": ("careless", "watchful", "ever-vigilant"),
    "courage": ("cowardly", "brave when needed", "fearlessly courageous"),
    "pride": ("humble", "appropriately proud", "consumed by pride"),
    "wrath": ("peaceful", "can be angered", "wrathful and vengeful"),
    "charisma": ("off-putting", "reasonably likable", "magnetically charismatic"),
    "diplomacy": ("tactless", "diplomatic when needed", "a masterful diplomat"),
    "strength": ("frail", "hale", "mighty"),
}


def describe_trait(name: str, value: int) -> str:
    words = _TRAIT_WORDS.get(name)
    if words is None:
        return "unknown"
    if value < TRAIT_DESCRIPTION_LOW:
        return words[0]
    if value < TRAIT_DESCRIPTION_HIGH:
        return words[1]
    return words[2]
