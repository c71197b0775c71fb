"""Entry points other systems use to change characters.

Every call looks the character up by id and returns an ``Outcome``. A missing
or dead character gets a not-found failure and nothing is changed.
"""

from __future__ import annotations

from typing import Optional

from dynasty_sim.core.results import Outcome
from dynasty_sim.simulation.mortality import (
    Accident,
    Disease,
    Execution,
    Exposure,
    Famine,
    MortalityCatalog,
    NaturalDisaster,
    Poisoning,
)


class CharacterMutations:
    """Id-addressed mutations, each failing softly."""

    def __init__(
        self,
        registry: "CharacterRegistry",  # noqa: F821
        wounds: "WoundSystem",  # noqa: F821
        mortality: MortalityCatalog,
    ) -> None:
        self._registry = registry
        self._wounds = wounds
        self._mortality = mortality
        # ruler id -> territory held responsible for the death
        self.killer_territories: dict[int, int] = {}

    # ------------------------------------------------------------------
    # Wounds
    # ------------------------------------------------------------------

    def wound(self, character_id: int, severity: float, cause: str, tick: int) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        return self._wounds.inflict(character, severity, cause, tick)

    def apply_medication(self, character_id: int, medication: str, tick: int) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        return self._wounds.apply_medication(character, medication, tick)

    # ------------------------------------------------------------------
    # Death
    # ------------------------------------------------------------------

    def kill_character(
        self,
        character_id: int,
        cause: str,
        tick: int,
        killer_territory_id: Optional[int] = None,
    ) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        character.die(cause, tick)
        if character.role == "ruler" and killer_territory_id is not None:
            self.killer_territories[character.id] = killer_territory_id
        return Outcome.ok(
            f"{character.display_name} died: {cause}.",
            died=True, cause=cause, category="killed",
        )

    def kill_from_famine(self, character_id: int, tick: int) -> Outcome:
        return self._resolve(character_id, Famine(), tick)

    def kill_from_exposure(self, character_id: int, tick: int) -> Outcome:
        return self._resolve(character_id, Exposure(), tick)

    def kill_in_disaster(self, character_id: int, disaster_type: str, tick: int) -> Outcome:
        return self._resolve(character_id, NaturalDisaster(disaster_type), tick)

    def execute_character(self, character_id: int, method: str, crime: str, tick: int) -> Outcome:
        return self._resolve(character_id, Execution(method, crime), tick)

    def expose_to_disease(self, character_id: int, disease: str, tick: int) -> Outcome:
        return self._resolve(character_id, Disease(disease), tick)

    def cause_accident(self, character_id: int, accident_type: str, tick: int) -> Outcome:
        return self._resolve(character_id, Accident(accident_type), tick)

    def attempt_poisoning(self, character_id: int, tick: int, poisoner: Optional[str] = None) -> Outcome:
        return self._resolve(character_id, Poisoning(poisoner), tick)

    def _resolve(self, character_id: int, cause, tick: int) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        return self._mortality.resolve(character, cause, tick)

    # ------------------------------------------------------------------
    # Exile
    # ------------------------------------------------------------------

    def exile_character(self, character_id: int, reason: str, tick: int) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        if character.role == "ruler":
            return Outcome.invalid(f"{character.display_name} rules and cannot be exiled")
        if character.is_exiled:
            return Outcome.invalid(f"{character.display_name} is already in exile")

        character.exile.is_exiled = True
        character.exile.exile_tick = tick
        character.exile.reason = reason
        character.adjust_emotions(despair=20, shame=10, rage=10)
        character.add_deed(tick, f"Exiled for {reason}", "disgrace")
        return Outcome.ok(f"{character.display_name} was exiled for {reason}.", reason=reason)

    # ------------------------------------------------------------------
    # Records and personality
    # ------------------------------------------------------------------

    def record_combat(
        self,
        character_id: int,
        kills: int = 0,
        battle: bool = True,
        duel_won: bool = False,
    ) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        if kills < 0:
            return Outcome.invalid(f"Kill count cannot be negative, got {kills}")
        record = character.combat
        record.kill_count += kills
        if battle:
            record.battles_participated += 1
        if duel_won:
            record.duels_won += 1
        return Outcome.ok(
            f"{character.display_name} has {record.kill_count} kills in {record.battles_participated} battles.",
            kill_count=record.kill_count,
        )

    def add_deed(self, character_id: int, tick: int, description: str, deed_type: str) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        character.add_deed(tick, description, deed_type)
        return Outcome.ok(f"{character.display_name}: {description}")

    def adjust_traits(self, character_id: int, **deltas: float) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        try:
            character.adjust_traits(**deltas)
        except ValueError as exc:
            return Outcome.invalid(str(exc))
        return Outcome.ok(f"{character.display_name}'s traits shifted", **{k: character.traits.get(k) for k in deltas})

    def adjust_emotions(self, character_id: int, **deltas: float) -> Outcome:
        character = self._registry.get_living(character_id)
        if character is None:
            return Outcome.not_found()
        try:
            character.adjust_emotions(**deltas)
        except ValueError as exc:
            return Outcome.invalid(str(exc))
        return Outcome.ok(f"{character.display_name} feels {character.emotions.describe()}")
