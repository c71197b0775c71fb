"""Wound, medication and healing state machine.

States: healthy -> wounded -> {healthy (recovered), dead}.

Wounds stack up to a severity of 100; a stack reaching the critical threshold
rolls for immediate death before the character is considered wounded at all.
Treatment heals faster but can itself kill, and neglecting a severe wound is a
hazard of its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from numpy.random import Generator

from dynasty_sim.core.config import (
    CRITICAL_WOUND_DEATH_CAUSE,
    CRITICAL_WOUND_DEATH_CHANCE,
    CRITICAL_WOUND_THRESHOLD,
    HEALING_COMPLETE,
    MEDICATION_EFFECTIVENESS_NOISE,
    MEDICATIONS,
    PASSIVE_HEALING_TYPE,
    TREATMENT_DEATH_CAUSE,
    UNTREATED_WOUND_DEATH_CAUSE,
    WOUND_SEVERITY_MAX,
)
from dynasty_sim.core.results import Outcome
from dynasty_sim.simulation.mortality import untreated_wound_hazard


@dataclass(frozen=True)
class MedicationRecord:
    tick: int
    medication: str
    healing: float
    side_effect: Optional[str] = None
    fatal: bool = False


@dataclass
class WoundState:
    """Wound fields are meaningful only while ``is_wounded`` is True."""

    is_wounded: bool = False
    severity: float = 0.0          # 0-100, stacks
    healing_progress: float = 0.0  # 0-100, 100 = healed
    cause: str = ""
    wounded_tick: Optional[int] = None
    last_medication_tick: Optional[int] = None
    medication_history: list[MedicationRecord] = field(default_factory=list)
    side_effects: list[str] = field(default_factory=list)

    def ticks_wounded(self, tick: int) -> int:
        if not self.is_wounded or self.wounded_tick is None:
            return 0
        return max(0, tick - self.wounded_tick)

    def clear(self) -> None:
        """Back to healthy. History and lasting side effects are kept."""
        self.is_wounded = False
        self.severity = 0.0
        self.healing_progress = 0.0
        self.cause = ""
        self.wounded_tick = None
        self.last_medication_tick = None


class WoundSystem:
    """Applies wounds, treatment and passive healing to characters."""

    def __init__(self, rng: Generator) -> None:
        self._rng = rng

    def inflict(
        self,
        character: "Character",  # noqa: F821
        severity: float,
        cause: str,
        tick: int,
    ) -> Outcome:
        """Add a wound. Severity stacks on any existing wound, capped at 100."""
        if not character.is_alive:
            return Outcome.not_found()
        if severity < 0:
            return Outcome.invalid(f"Wound severity must be positive, got {severity}")

        wound = character.wound
        stacked = min(WOUND_SEVERITY_MAX, wound.severity + severity)

        if stacked >= CRITICAL_WOUND_THRESHOLD and self._rng.random() < CRITICAL_WOUND_DEATH_CHANCE:
            character.die(f"{CRITICAL_WOUND_DEATH_CAUSE} from {cause}", tick)
            return Outcome.ok(
                f"{character.display_name} died of {cause} (severity {stacked:.0f})",
                died=True,
                category="wounds",
                severity=stacked,
            )

        if not wound.is_wounded:
            wound.wounded_tick = tick
        wound.is_wounded = True
        wound.severity = stacked
        wound.healing_progress = 0.0
        wound.cause = cause
        return Outcome.ok(
            f"{character.display_name} was wounded by {cause} (severity {stacked:.0f})",
            severity=stacked,
        )

    def apply_medication(
        self,
        character: "Character",  # noqa: F821
        medication: str,
        tick: int,
    ) -> Outcome:
        """Treat a wounded character: death roll, side-effect roll, then healing."""
        if not character.is_alive:
            return Outcome.not_found()
        profile = MEDICATIONS.get(medication)
        if profile is None:
            return Outcome.invalid(f"Unknown medication type: {medication}")
        wound = character.wound
        if not wound.is_wounded:
            return Outcome.invalid(f"{character.display_name} is not wounded")

        base = profile["effectiveness"]
        effectiveness = base * self._rng.uniform(
            1.0 - MEDICATION_EFFECTIVENESS_NOISE, 1.0 + MEDICATION_EFFECTIVENESS_NOISE,
        )

        if self._rng.random() < profile["risk_of_death"]:
            wound.medication_history.append(MedicationRecord(tick, medication, 0.0, fatal=True))
            character.die(TREATMENT_DEATH_CAUSE, tick)
            return Outcome.ok(
                f"{character.display_name} died of {TREATMENT_DEATH_CAUSE} ({medication})",
                died=True,
                category="treatment",
                medication=medication,
            )

        side_effect: Optional[str] = None
        if profile["side_effects"] and self._rng.random() < profile["risk_of_side_effects"]:
            side_effect = str(self._rng.choice(profile["side_effects"]))
            wound.side_effects.append(side_effect)

        healing = profile["healing_per_tick"] * effectiveness / base
        wound.last_medication_tick = tick
        wound.medication_history.append(MedicationRecord(tick, medication, healing, side_effect))
        recovered = self._heal(wound, healing)

        description = f"{character.display_name} received {medication} treatment"
        if side_effect:
            description += f", suffering {side_effect}"
        if recovered:
            description += " and has fully recovered"
        return Outcome.ok(
            description,
            medication=medication,
            healing=healing,
            effectiveness=effectiveness,
            side_effect=side_effect,
            recovered=recovered,
        )

    def passive_update(self, character: "Character", tick: int) -> Outcome:  # noqa: F821
        """Per-tick natural healing plus the neglect hazard for severe wounds."""
        if not character.is_alive:
            return Outcome.not_found()
        wound = character.wound
        if not wound.is_wounded:
            return Outcome.ok(f"{character.display_name} is healthy")

        if self._heal(wound, MEDICATIONS[PASSIVE_HEALING_TYPE]["healing_per_tick"]):
            return Outcome.ok(f"{character.display_name} has recovered from their wounds", recovered=True)

        hazard = untreated_wound_hazard(wound, tick)
        if hazard > 0 and self._rng.random() < hazard:
            cause = wound.cause
            character.die(UNTREATED_WOUND_DEATH_CAUSE, tick)
            return Outcome.ok(
                f"{character.display_name} {UNTREATED_WOUND_DEATH_CAUSE} from {cause}",
                died=True,
                category="wounds",
            )
        return Outcome.ok(
            f"{character.display_name} is healing ({wound.healing_progress:.0f}%)",
            healing_progress=wound.healing_progress,
        )

    @staticmethod
    def _heal(wound: WoundState, amount: float) -> bool:
        """Advance healing; returns True if the wound closed."""
        wound.healing_progress = min(HEALING_COMPLETE, wound.healing_progress + amount)
        if wound.healing_progress >= HEALING_COMPLETE:
            wound.clear()
            return True
        return False
