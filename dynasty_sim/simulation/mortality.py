"""Catalog of death and injury causes.

Each cause is a small frozen dataclass carrying its own parameters, and
``MortalityCatalog.resolve`` dispatches on its type. Every resolver is total
over a living character and ends in at most one terminal transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from numpy.random import Generator

from dynasty_sim.core.config import (
    ACCIDENT_BASE_FATALITY,
    ACCIDENT_WOUND_CHANCE,
    ACCIDENT_WOUND_SEVERITY,
    DISASTER_DEATH_TEXT,
    DISEASE_AGE_BANDS,
    DISEASE_BASE_MORTALITY,
    EXECUTION_METHODS,
    EXILE_AGE_SURCHARGES,
    EXILE_BASE_DEATH_CHANCE,
    EXILE_DEATH_CHANCE_PER_TICK,
    LATE_AGE_ONSET,
    LATE_AGE_RATE_PER_YEAR,
    OLD_AGE_CAUSES,
    OLD_AGE_ONSET,
    OLD_AGE_RATE_PER_YEAR,
    POISON_DETECTION_CAP,
    POISON_DETECTION_DIVISOR,
    POISON_LETHALITY_RANGE,
    POISON_WOUND_SEVERITY,
    TICKS_PER_YEAR,
    UNTREATED_DEATH_CHANCE,
    UNTREATED_MIN_TICKS_WOUNDED,
    UNTREATED_SEVERITY_THRESHOLD,
    UNTREATED_WINDOW_TICKS,
    UNTREATED_WOUND_DEATH_CAUSE,
    VERY_OLD_AGE,
    VERY_OLD_AGE_HAZARD,
)
from dynasty_sim.core.results import Outcome


# ------------------------------------------------------------------
# Cause variants
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Accident:
    kind: str  # "hunting", "construction", "travel", "tournament", "fire"


@dataclass(frozen=True)
class Disease:
    kind: str  # "plague", "fever", "consumption", "dysentery", "pox"


@dataclass(frozen=True)
class Poisoning:
    poisoner: Optional[str] = None


@dataclass(frozen=True)
class Execution:
    method: str
    crime: str


@dataclass(frozen=True)
class Exposure:
    pass


@dataclass(frozen=True)
class Famine:
    pass


@dataclass(frozen=True)
class NaturalDisaster:
    kind: str


@dataclass(frozen=True)
class ExileAttrition:
    pass


@dataclass(frozen=True)
class UntreatedWound:
    pass


@dataclass(frozen=True)
class OldAge:
    pass


Cause = Union[
    Accident, Disease, Poisoning, Execution, Exposure, Famine,
    NaturalDisaster, ExileAttrition, UntreatedWound, OldAge,
]


_ACCIDENT_DEATH_TEXT: dict[str, str] = {
    "hunting": "was gored by a boar on a hunt",
    "construction": "was crushed by falling masonry",
    "travel": "fell from a mountain pass while travelling",
    "tournament": "was struck down in the tournament lists",
    "fire": "perished when fire swept through their hall",
}

_ACCIDENT_INJURY_TEXT: dict[str, str] = {
    "hunting": "was injured on a hunt",
    "construction": "was hurt when scaffolding gave way",
    "travel": "was thrown from their horse",
    "tournament": "was unhorsed and badly bruised in the lists",
    "fire": "was burned escaping a fire",
}


# ------------------------------------------------------------------
# Probability rules
# ------------------------------------------------------------------

def _probability(value: float) -> float:
    return max(0.0, min(1.0, value))


def accident_fatality(kind: str, character: "Character") -> float:  # noqa: F821
    """Base fatality for the accident type plus trait/age modifiers."""
    chance = ACCIDENT_BASE_FATALITY[kind]
    age = character.age
    traits = character.traits
    if kind == "hunting" and age > 50:
        chance += 0.10
    elif kind == "construction":
        if traits.strength < 30:
            chance += 0.05
        if age > 50:
            chance += 0.05
    elif kind == "travel" and age > 60:
        chance += 0.05
    elif kind == "tournament":
        if traits.courage > 70:
            chance += 0.05
        if traits.strength < 40:
            chance += 0.05
    elif kind == "fire" and (age < 10 or age > 60):
        chance += 0.10
    return _probability(chance)


def disease_mortality(kind: str, age: int) -> float:
    chance = DISEASE_BASE_MORTALITY[kind]
    for upper, extra in DISEASE_AGE_BANDS:
        if age < upper:
            chance += extra
            break
    return _probability(chance)


def poison_detection_chance(vigilance: float) -> float:
    return min(POISON_DETECTION_CAP, max(0.0, vigilance) / POISON_DETECTION_DIVISOR)


def exile_death_chance(ticks_in_exile: int, age: int) -> float:
    """Grows linearly with time in exile, plus a surcharge for the old."""
    chance = EXILE_BASE_DEATH_CHANCE + EXILE_DEATH_CHANCE_PER_TICK * max(0, ticks_in_exile)
    for threshold, surcharge in EXILE_AGE_SURCHARGES:
        if age > threshold:
            chance += surcharge
    return _probability(chance)


def old_age_hazard(age: int) -> float:
    """Per-tick chance of dying of old age."""
    annual = 0.0
    if age > OLD_AGE_ONSET:
        annual = (age - OLD_AGE_ONSET) * OLD_AGE_RATE_PER_YEAR
    if age > LATE_AGE_ONSET:
        annual += (age - LATE_AGE_ONSET) * LATE_AGE_RATE_PER_YEAR
    if age > VERY_OLD_AGE:
        annual += VERY_OLD_AGE_HAZARD
    return _probability(annual / TICKS_PER_YEAR)


def untreated_wound_hazard(wound: "WoundState", tick: int) -> float:  # noqa: F821
    """Per-tick death chance for a severe wound nobody is treating."""
    if not wound.is_wounded:
        return 0.0
    last = wound.last_medication_tick
    if last is not None and tick - last <= UNTREATED_WINDOW_TICKS:
        return 0.0
    if wound.severity <= UNTREATED_SEVERITY_THRESHOLD:
        return 0.0
    if wound.ticks_wounded(tick) <= UNTREATED_MIN_TICKS_WOUNDED:
        return 0.0
    return UNTREATED_DEATH_CHANCE


# ------------------------------------------------------------------
# Catalog
# ------------------------------------------------------------------

class MortalityCatalog:
    """Resolves a cause against a living character."""

    def __init__(self, rng: Generator, wounds: "WoundSystem") -> None:  # noqa: F821
        self._rng = rng
        self._wounds = wounds
        self._handlers = {
            Accident: self._accident,
            Disease: self._disease,
            Poisoning: self._poisoning,
            Execution: self._execution,
            Exposure: self._exposure,
            Famine: self._famine,
            NaturalDisaster: self._disaster,
            ExileAttrition: self._exile_attrition,
            UntreatedWound: self._untreated_wound,
            OldAge: self._old_age,
        }

    def resolve(self, character: "Character", cause: Cause, tick: int) -> Outcome:  # noqa: F821
        """Evaluate one cause. A dead character short-circuits to a failure."""
        if not character.is_alive:
            return Outcome.not_found()
        handler = self._handlers.get(type(cause))
        if handler is None:
            return Outcome.invalid(f"Unknown cause of death: {cause!r}")
        return handler(character, cause, tick)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _kill(self, character, cause_text: str, category: str, description: str, tick: int) -> Outcome:
        character.die(cause_text, tick)
        return Outcome.ok(description, died=True, cause=cause_text, category=category)

    def _survived(self, description: str, category: str, **extra) -> Outcome:
        return Outcome.ok(description, died=False, category=category, **extra)

    # ------------------------------------------------------------------
    # Stochastic causes
    # ------------------------------------------------------------------

    def _accident(self, character, cause: Accident, tick: int) -> Outcome:
        if cause.kind not in ACCIDENT_BASE_FATALITY:
            return Outcome.invalid(f"Unknown accident type: {cause.kind}")
        name = character.display_name
        if self._rng.random() < accident_fatality(cause.kind, character):
            return self._kill(
                character, f"{cause.kind} accident", "accident",
                f"{name} {_ACCIDENT_DEATH_TEXT[cause.kind]}.", tick,
            )

        if self._rng.random() < ACCIDENT_WOUND_CHANCE:
            lo, hi = ACCIDENT_WOUND_SEVERITY
            severity = float(self._rng.integers(lo, hi + 1))
            wounded = self._wounds.inflict(character, severity, f"{cause.kind} accident", tick)
            if wounded.died:
                return Outcome.ok(
                    f"{name} {_ACCIDENT_INJURY_TEXT[cause.kind]} and did not survive the wounds.",
                    died=True, cause=character.death.cause, category="accident",
                )
            return self._survived(
                f"{name} {_ACCIDENT_INJURY_TEXT[cause.kind]}.", "accident", wound_severity=severity,
            )
        return self._survived(f"{name} narrowly escaped a {cause.kind} accident.", "accident")

    def _disease(self, character, cause: Disease, tick: int) -> Outcome:
        if cause.kind not in DISEASE_BASE_MORTALITY:
            return Outcome.invalid(f"Unknown disease: {cause.kind}")
        name = character.display_name
        if self._rng.random() < disease_mortality(cause.kind, character.age):
            return self._kill(
                character, cause.kind, "disease",
                f"{name} succumbed to {cause.kind} at age {character.age}.", tick,
            )
        return self._survived(f"{name} survived a bout of {cause.kind}.", "disease")

    def _poisoning(self, character, cause: Poisoning, tick: int) -> Outcome:
        name = character.display_name
        if self._rng.random() < poison_detection_chance(character.traits.vigilance):
            return self._survived(f"{name} detected poison in their cup and was unharmed.", "poisoning", detected=True)

        lo, hi = POISON_LETHALITY_RANGE
        if self._rng.random() < self._rng.uniform(lo, hi):
            by = f" by {cause.poisoner}" if cause.poisoner else ""
            return self._kill(character, "poisoning", "poisoning", f"{name} was poisoned{by}.", tick)

        slo, shi = POISON_WOUND_SEVERITY
        severity = float(self._rng.integers(slo, shi + 1))
        wounded = self._wounds.inflict(character, severity, "poison", tick)
        if wounded.died:
            return Outcome.ok(
                f"{name} lingered after being poisoned, then died.",
                died=True, cause=character.death.cause, category="poisoning",
            )
        return self._survived(
            f"{name} survived a poisoning but is gravely ill.", "poisoning", wound_severity=severity,
        )

    def _exile_attrition(self, character, cause: ExileAttrition, tick: int) -> Outcome:
        if not character.is_exiled:
            return Outcome.invalid(f"{character.display_name} is not in exile")
        chance = exile_death_chance(character.ticks_in_exile(tick), character.age)
        if self._rng.random() < chance:
            return self._kill(
                character, "died in exile", "exile",
                f"{character.display_name} died in exile, far from home.", tick,
            )
        return self._survived(f"{character.display_name} endures exile.", "exile")

    def _untreated_wound(self, character, cause: UntreatedWound, tick: int) -> Outcome:
        if not character.is_wounded:
            return Outcome.invalid(f"{character.display_name} is not wounded")
        if self._rng.random() < untreated_wound_hazard(character.wound, tick):
            return self._kill(
                character, UNTREATED_WOUND_DEATH_CAUSE, "wounds",
                f"{character.display_name} {UNTREATED_WOUND_DEATH_CAUSE}.", tick,
            )
        return self._survived(f"{character.display_name} clings to life.", "wounds")

    def _old_age(self, character, cause: OldAge, tick: int) -> Outcome:
        if self._rng.random() < old_age_hazard(character.age):
            cause_text = str(self._rng.choice(OLD_AGE_CAUSES))
            return self._kill(
                character, cause_text, "natural",
                f"{character.display_name} died of {cause_text} at age {character.age}.", tick,
            )
        return self._survived(f"{character.display_name} lives on.", "natural")

    # ------------------------------------------------------------------
    # Deterministic causes (decided by callers)
    # ------------------------------------------------------------------

    def _execution(self, character, cause: Execution, tick: int) -> Outcome:
        text = EXECUTION_METHODS.get(cause.method)
        if text is None:
            return Outcome.invalid(f"Unknown execution method: {cause.method}")
        return self._kill(
            character, f"executed ({cause.method}) for {cause.crime}", "execution",
            f"{character.display_name} {text} for the crime of {cause.crime}.", tick,
        )

    def _exposure(self, character, cause: Exposure, tick: int) -> Outcome:
        return self._kill(
            character, "exposure", "exposure",
            f"{character.display_name} froze to death in the bitter cold.", tick,
        )

    def _famine(self, character, cause: Famine, tick: int) -> Outcome:
        return self._kill(
            character, "starvation", "famine",
            f"{character.display_name} starved during the famine.", tick,
        )

    def _disaster(self, character, cause: NaturalDisaster, tick: int) -> Outcome:
        text = DISASTER_DEATH_TEXT.get(cause.kind, f"killed by {cause.kind}")
        return self._kill(character, text, "disaster", f"{character.display_name} was {text}.", tick)
