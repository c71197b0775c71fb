"""Per-tick lifecycle of a territory's characters.

Order for each living character: age, natural death, life-stage transition,
wound healing, exile attrition, sporadic accident/illness, births. Then once
per territory: rising stars and prosperity effects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from numpy.random import Generator

from dynasty_sim.agents.character import Character, Plot, create_character, random_title
from dynasty_sim.agents.priorities import PriorityModel
from dynasty_sim.core.config import (
    AMBITION_CLAIM_THRESHOLD,
    BIRTH_BASE_CHANCE,
    BIRTH_COOLDOWN_TICKS,
    BIRTH_PIETY_BONUS_PER_POINT,
    BIRTH_ROLES,
    DEFAULT_ACCIDENT_WEIGHTS,
    DISEASE_BASE_MORTALITY,
    ELDER_WISDOM_BONUS,
    FERTILITY_AGE_RANGE,
    MAX_LIVING_CHILDREN,
    PROMOTABLE_ROLES,
    PROSPERITY_AMBITION_TIER,
    PROSPERITY_COURAGE_FLOOR,
    PROSPERITY_COURAGE_LOSS,
    PROSPERITY_GOLDEN_TIER,
    PROSPERITY_GREED_GAIN,
    PROSPERITY_HOPE_BOOST,
    PROSPERITY_LOYALTY_LOSS,
    PROSPERITY_PLOT_CHANCE,
    PROSPERITY_PLOT_PROGRESS,
    PROSPERITY_SOFTENING_CHANCE,
    RISING_STAR_APTITUDE,
    RISING_STAR_BASE_CHANCE,
    RISING_STAR_FULL_POPULATION,
    RISING_STAR_MIN_POPULATION,
    RISING_STAR_PROMOTE_EXISTING_CHANCE,
    RISING_STAR_ROLES,
    ROLE_ACCIDENT_WEIGHTS,
    SPORADIC_ACCIDENT_CHANCE,
    SPORADIC_ILLNESS_CHANCE,
)
from dynasty_sim.core.results import Outcome
from dynasty_sim.simulation.mortality import (
    Accident,
    Disease,
    ExileAttrition,
    MortalityCatalog,
    OldAge,
    old_age_hazard,
)
from dynasty_sim.world.territory import SocietyContext, TerritorySnapshot


@dataclass
class LifeEvent:
    """Something that happened to one or more characters this tick."""

    event_type: str  # "birth", "death", "coming_of_age", "heir_named", "elder", "recovered", ...
    description: str
    tick: int
    character_ids: list[int]
    data: dict = field(default_factory=dict)


class LifecycleEngine:
    """Ages, heals, kills and begets the characters of a territory."""

    def __init__(
        self,
        rng: Generator,
        registry: "CharacterRegistry",  # noqa: F821
        wounds: "WoundSystem",  # noqa: F821
        mortality: MortalityCatalog,
        priorities: Optional[PriorityModel] = None,
    ) -> None:
        self._rng = rng
        self._registry = registry
        self._wounds = wounds
        self._mortality = mortality
        self._priorities = priorities or PriorityModel()

    def process_tick(
        self,
        territory: TerritorySnapshot,
        context: SocietyContext,
        tick: int,
    ) -> list[LifeEvent]:
        events: list[LifeEvent] = []
        for character in self._registry.living_in(territory.territory_id):
            events.extend(self.process_character(character, context, tick, territory))
        events.extend(self.check_rising_stars(territory, context, tick))
        events.extend(self.apply_prosperity_effects(territory, tick))
        return events

    def process_character(
        self,
        character: Character,
        context: SocietyContext,
        tick: int,
        territory: Optional[TerritorySnapshot] = None,
    ) -> list[LifeEvent]:
        """All per-character steps. Stops as soon as the character dies."""
        events: list[LifeEvent] = []
        character.update_age(tick)

        if old_age_hazard(character.age) > 0:
            if self._record(events, character, self._mortality.resolve(character, OldAge(), tick), tick, "death"):
                return events

        events.extend(self._stage_transition(character, tick, territory))

        if character.is_wounded:
            outcome = self._wounds.passive_update(character, tick)
            if self._record(events, character, outcome, tick, "death"):
                return events
            if outcome.side_effects.get("recovered"):
                events.append(LifeEvent("recovered", outcome.description, tick, [character.id]))

        if character.is_exiled:
            outcome = self._mortality.resolve(character, ExileAttrition(), tick)
            if self._record(events, character, outcome, tick, "death"):
                return events

        if self._sporadic_hazards(events, character, tick):
            return events

        birth = self._maybe_give_birth(character, context, tick, territory)
        if birth is not None:
            events.append(birth)
        return events

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def take_stock(self, character: Character, territory: Optional[TerritorySnapshot]) -> Optional[str]:
        """Set what the character cares about most right now; None without a snapshot."""
        if territory is None:
            return None
        priority = self._priorities.get_most_urgent_priority(character, territory)
        character.focus = priority.name if priority is not None else None
        return character.focus

    def _stage_transition(
        self,
        character: Character,
        tick: int,
        territory: Optional[TerritorySnapshot] = None,
    ) -> list[LifeEvent]:
        events: list[LifeEvent] = []
        stage = character.life_stage
        if stage == character.recorded_stage:
            return events

        if character.recorded_stage == "child" and stage != "child":
            named_heir = (
                character.role in PROMOTABLE_ROLES
                and not character.has_been_promoted
                and self._registry.is_biological_child_of_ruler(character)
            )
            if named_heir:
                character.promote("heir", random_title("heir", self._rng), tick)
            focus = self.take_stock(character, territory)
            events.append(LifeEvent(
                "coming_of_age",
                f"{character.display_name} has come of age.",
                tick, [character.id], {"priority": focus},
            ))
            if named_heir:
                events.append(LifeEvent(
                    "heir_named",
                    f"{character.name} is named heir to the throne.",
                    tick, [character.id], {"priority": focus},
                ))

        if stage == "elder" and not character.elder_bonus_granted:
            character.adjust_traits(wisdom=ELDER_WISDOM_BONUS)
            character.elder_bonus_granted = True
            events.append(LifeEvent(
                "elder",
                f"{character.display_name} has grown old and wise.",
                tick, [character.id],
            ))

        character.recorded_stage = stage
        return events

    def _sporadic_hazards(self, events: list[LifeEvent], character: Character, tick: int) -> bool:
        """Rare accidents and illnesses. Returns True if the character died."""
        roll = self._rng.random()
        if roll < SPORADIC_ACCIDENT_CHANCE:
            weights = ROLE_ACCIDENT_WEIGHTS.get(character.role, DEFAULT_ACCIDENT_WEIGHTS)
            kinds = list(weights)
            p = np.array([weights[k] for k in kinds], dtype=float)
            kind = str(self._rng.choice(kinds, p=p / p.sum()))
            outcome = self._mortality.resolve(character, Accident(kind), tick)
            return self._record(events, character, outcome, tick, "accident")
        if roll < SPORADIC_ACCIDENT_CHANCE + SPORADIC_ILLNESS_CHANCE:
            kind = str(self._rng.choice(list(DISEASE_BASE_MORTALITY)))
            outcome = self._mortality.resolve(character, Disease(kind), tick)
            return self._record(events, character, outcome, tick, "illness")
        return False

    def can_give_birth(self, character: Character, tick: int) -> bool:
        if character.role not in BIRTH_ROLES or character.is_exiled:
            return False
        lo, hi = FERTILITY_AGE_RANGE
        if not lo <= character.age <= hi:
            return False
        if len(self._registry.living_children_of(character.id)) >= MAX_LIVING_CHILDREN:
            return False
        if character.last_birth_tick is not None and tick - character.last_birth_tick < BIRTH_COOLDOWN_TICKS:
            return False
        return True

    def birth_chance(self, character: Character) -> float:
        return BIRTH_BASE_CHANCE + character.piety * BIRTH_PIETY_BONUS_PER_POINT

    def _maybe_give_birth(
        self,
        parent: Character,
        context: SocietyContext,
        tick: int,
        territory: Optional[TerritorySnapshot] = None,
    ) -> Optional[LifeEvent]:
        if not self.can_give_birth(parent, tick):
            return None
        if self._rng.random() >= self.birth_chance(parent):
            return None

        child = create_character(
            self._registry.next_id(),
            parent.territory_id,
            "commoner",
            tick,
            self._rng,
            society_averages=context.skill_averages,
            title="",
            age=0,
            dynasty_name=parent.dynasty_name,
            dynasty_generation=parent.dynasty_generation + 1,
            parents=[parent],
        )
        child.social_class = parent.social_class
        self._registry.add(child)
        focus = self.take_stock(child, territory)
        parent.last_birth_tick = tick
        house = f" of House {parent.dynasty_name}" if parent.dynasty_name else ""
        return LifeEvent(
            "birth",
            f"A child, {child.name}{house}, was born to {parent.display_name}.",
            tick,
            [parent.id, child.id],
            {"child_id": child.id, "parent_id": parent.id, "priority": focus},
        )

    # ------------------------------------------------------------------
    # Territory-wide steps
    # ------------------------------------------------------------------

    def vacant_roles(self, territory_id: int, context: SocietyContext) -> list[str]:
        vacant = []
        for role in RISING_STAR_ROLES:
            if role == "priest" and context.active_religion is None:
                continue
            if not self._registry.with_role(territory_id, role):
                vacant.append(role)
        return vacant

    @staticmethod
    def rising_star_chance(population: int) -> float:
        """Zero below the minimum population, scaling up to the full rate."""
        if population < RISING_STAR_MIN_POPULATION:
            return 0.0
        return RISING_STAR_BASE_CHANCE * min(1.0, population / RISING_STAR_FULL_POPULATION)

    def check_rising_stars(
        self,
        territory: TerritorySnapshot,
        context: SocietyContext,
        tick: int,
    ) -> list[LifeEvent]:
        vacant = self.vacant_roles(territory.territory_id, context)
        if not vacant:
            return []
        if self._rng.random() >= self.rising_star_chance(territory.population):
            return []

        role = str(self._rng.choice(vacant))
        title = random_title(role, self._rng)
        faith = ""
        if role == "priest" and context.active_religion is not None:
            faith = f" of {context.active_religion.name}"

        candidates = [
            c for c in self._registry.living_in(territory.territory_id)
            if c.role in PROMOTABLE_ROLES and c.life_stage != "child" and not c.is_exiled
        ]
        if candidates and self._rng.random() < RISING_STAR_PROMOTE_EXISTING_CHANCE:
            aptitude = RISING_STAR_APTITUDE[role]
            star = max(candidates, key=lambda c: (c.traits.get(aptitude), -c.id))
            old_role = star.role
            star.promote(role, title, tick)
            focus = self.take_stock(star, territory)
            return [LifeEvent(
                "promotion",
                f"{star.name} the {old_role} has risen to become {title}{faith}.",
                tick, [star.id], {"role": role, "promoted": True, "priority": focus},
            )]

        star = create_character(
            self._registry.next_id(),
            territory.territory_id,
            role,
            tick,
            self._rng,
            society_averages=context.skill_averages,
            title=title,
        )
        star.has_been_promoted = True
        self._registry.add(star)
        focus = self.take_stock(star, territory)
        return [LifeEvent(
            "rising_star",
            f"{star.display_name}{faith} has risen from among the people of {territory.name}.",
            tick, [star.id], {"role": role, "promoted": False, "priority": focus},
        )]

    def apply_prosperity_effects(self, territory: TerritorySnapshot, tick: int) -> list[LifeEvent]:
        """Good times breed ambition, and golden ages breed complacency."""
        tier = territory.prosperity_tier
        if tier < PROSPERITY_AMBITION_TIER:
            return []

        events: list[LifeEvent] = []
        for character in self._registry.living_in(territory.territory_id):
            if character.role == "ruler":
                continue
            traits = character.traits

            if traits.ambition > AMBITION_CLAIM_THRESHOLD:
                character.adjust_emotions(hope=PROSPERITY_HOPE_BOOST)
                if (
                    traits.cunning > 50
                    and traits.loyalty < 50
                    and not character.active_plots
                    and self._rng.random() < PROSPERITY_PLOT_CHANCE
                ):
                    plot_type = "embezzlement" if traits.greed > 60 else "coup"
                    character.active_plots.append(
                        Plot(plot_type=plot_type, start_tick=tick, progress_percent=PROSPERITY_PLOT_PROGRESS)
                    )
                    events.append(LifeEvent(
                        "plot_started",
                        f"{character.display_name} has begun scheming during the time of prosperity.",
                        tick, [character.id], {"plot_type": plot_type},
                    ))

            if tier >= PROSPERITY_GOLDEN_TIER:
                if character.role == "general" and self._rng.random() < PROSPERITY_SOFTENING_CHANCE:
                    target = max(PROSPERITY_COURAGE_FLOOR, traits.courage - PROSPERITY_COURAGE_LOSS)
                    character.adjust_traits(courage=min(0, target - traits.courage))
                elif (
                    character.role == "advisor"
                    and traits.greed > 50
                    and self._rng.random() < PROSPERITY_SOFTENING_CHANCE
                ):
                    character.adjust_traits(greed=PROSPERITY_GREED_GAIN, loyalty=-PROSPERITY_LOYALTY_LOSS)
        return events

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record(
        events: list[LifeEvent],
        character: Character,
        outcome: Outcome,
        tick: int,
        event_type: str,
    ) -> bool:
        """Turn an outcome into an event if anything happened; True on death."""
        if not outcome.success:
            return False
        if outcome.died:
            events.append(LifeEvent(
                "death",
                outcome.description,
                tick,
                [character.id],
                {
                    "cause": character.death.cause,
                    "category": outcome.side_effects.get("category", "other"),
                    "role": character.role,
                },
            ))
            return True
        if event_type != "death":
            events.append(LifeEvent(event_type, outcome.description, tick, [character.id], dict(outcome.side_effects)))
        return False
