"""Ruler succession: who takes the throne when a ruler dies.

Modes, tried in order: peaceful (loyal heir), civil war (two or more
ambitious claimants), coup (exactly one), contested peaceful (a disloyal
heir with nobody to oppose them), election (a new ruler from outside the
court). Whatever the path, the territory ends with exactly one living ruler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from numpy.random import Generator

from dynasty_sim.agents.character import Character, ReignSummary, create_character, random_house, random_title
from dynasty_sim.core.clock import years_between
from dynasty_sim.core.config import (
    AMBITION_CLAIM_THRESHOLD,
    CIVIL_WAR_CASUALTIES,
    CIVIL_WAR_DEATH_CAUSE,
    CIVIL_WAR_LOSER_DEATH_CHANCE,
    CIVIL_WAR_TITLE,
    COUP_TITLE,
    ELECTED_RULER_AGE,
    ELECTED_RULER_TITLE,
    HEIR_LOYALTY_THRESHOLD,
    REGICIDE_BOND_INTENSITY,
    REGICIDE_BOND_TYPE,
    REGICIDE_KILLER_MEMORY_WEIGHT,
    REGICIDE_VICTIM_MEMORY_WEIGHT,
)
from dynasty_sim.core.results import Outcome
from dynasty_sim.social.consequences import BondLedger, ConsequenceQueue, LegitimacyLedger, MemoryRecorder
from dynasty_sim.world.territory import SocietyContext

MODE_LEGITIMACY: dict[str, str] = {
    "peaceful": "inheritance",
    "civil_war": "conquest",
    "coup": "coup",
    "election": "election",
}


@dataclass(frozen=True)
class SuccessionEvent:
    territory_id: int
    tick: int
    deceased_ruler_id: int
    new_ruler_id: int
    mode: str  # "peaceful", "coup", "civil_war", "election"
    narrative: str
    legitimacy_source: str
    contested: bool = False
    casualties: Optional[int] = None
    fallen_claimant_ids: tuple[int, ...] = ()


class SuccessionResolver:
    """Picks the next ruler and raises the consequences of the old one's death."""

    def __init__(
        self,
        rng: Generator,
        registry: "CharacterRegistry",  # noqa: F821
        bonds: BondLedger,
        memories: MemoryRecorder,
        legitimacy: LegitimacyLedger,
        queue: ConsequenceQueue,
    ) -> None:
        self._rng = rng
        self._registry = registry
        self._bonds = bonds
        self._memories = memories
        self._legitimacy = legitimacy
        self._queue = queue
        self.history: list[SuccessionEvent] = []
        self._resolved: set[int] = set()

    def is_resolved(self, ruler_id: int) -> bool:
        return ruler_id in self._resolved

    def pending_successions(self, territory_id: int) -> list[Character]:
        """Dead rulers of the territory whose succession has not run yet."""
        return [
            c for c in self._registry.in_territory(territory_id)
            if c.role == "ruler" and not c.is_alive and c.id not in self._resolved
        ]

    def resolve(
        self,
        ruler_id: int,
        tick: int,
        cause: Optional[str] = None,
        killer_territory_id: Optional[int] = None,
        context: Optional[SocietyContext] = None,
    ) -> Outcome:
        """Run the full succession for a ruler. Payload is the ``SuccessionEvent``."""
        ruler = self._registry.get(ruler_id)
        if ruler is None:
            return Outcome.not_found()
        if ruler.role != "ruler":
            return Outcome.invalid(f"{ruler.display_name} is not a ruler")
        if ruler_id in self._resolved:
            return Outcome.invalid(f"Succession after {ruler.display_name} was already resolved")

        # 1. Terminal transition (a ruler already dead keeps their record)
        ruler.die(cause or "unknown causes", tick)
        cause = ruler.death.cause
        death_tick = ruler.death.tick
        self._resolved.add(ruler_id)

        if killer_territory_id is not None and killer_territory_id != ruler.territory_id:
            self._queue_regicide(ruler, killer_territory_id, tick)

        # 2. Obituary
        reign_start = ruler.coronation_tick if ruler.coronation_tick is not None else death_tick
        years = years_between(reign_start, death_tick)
        ruler.attach_reign_summary(ReignSummary(
            years_reigned=years,
            obituary=f"{ruler.display_name} ruled for {years} years before {cause}.",
        ))

        # 3-7. Candidate search
        territory_id = ruler.territory_id
        heirs = self._registry.heirs_of(territory_id)
        heir = heirs[0] if heirs else None
        contested = False
        casualties: Optional[int] = None
        fallen: list[int] = []

        if heir is not None and heir.traits.loyalty > HEIR_LOYALTY_THRESHOLD:
            mode = "peaceful"
            new_ruler = self._crown_heir(heir, ruler, tick)
        else:
            claimants = self.ambitious_claimants(territory_id, exclude_id=ruler_id)
            if len(claimants) >= 2:
                mode = "civil_war"
                new_ruler = self.civil_war_winner(claimants)
                casualties = int(self._rng.integers(*CIVIL_WAR_CASUALTIES))
                for loser in claimants:
                    if loser.id == new_ruler.id:
                        continue
                    if self._rng.random() < CIVIL_WAR_LOSER_DEATH_CHANCE:
                        loser.die(CIVIL_WAR_DEATH_CAUSE, tick)
                        fallen.append(loser.id)
                new_ruler.promote("ruler", CIVIL_WAR_TITLE, tick)
            elif len(claimants) == 1:
                mode = "coup"
                new_ruler = claimants[0]
                new_ruler.promote("ruler", COUP_TITLE, tick)
            elif heir is not None:
                mode = "peaceful"
                contested = True
                new_ruler = self._crown_heir(heir, ruler, tick)
            else:
                mode = "election"
                new_ruler = self._elect(territory_id, tick, context)

        self._enforce_single_ruler(territory_id, new_ruler, tick)

        # 8. Record and propagate
        source = MODE_LEGITIMACY[mode]
        self._legitimacy.initialize(new_ruler, source, tick, contested=contested)
        self._bonds.inherit_bonds(territory_id)
        new_ruler.add_deed(tick, f"Came to power by {mode.replace('_', ' ')} succession", "political")

        event = SuccessionEvent(
            territory_id=territory_id,
            tick=tick,
            deceased_ruler_id=ruler.id,
            new_ruler_id=new_ruler.id,
            mode=mode,
            narrative=succession_narrative(ruler, new_ruler, mode, cause, casualties, contested),
            legitimacy_source=source,
            contested=contested,
            casualties=casualties,
            fallen_claimant_ids=tuple(fallen),
        )
        self.history.append(event)
        return Outcome.ok(
            event.narrative,
            payload=event,
            mode=mode,
            new_ruler_id=new_ruler.id,
            casualties=casualties,
            fallen_claimant_ids=tuple(fallen),
        )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def ambitious_claimants(self, territory_id: int, exclude_id: int) -> list[Character]:
        """Living characters who would reach for the throne, in id order."""
        return [
            c for c in self._registry.living_in(territory_id)
            if c.id != exclude_id and c.traits.ambition > AMBITION_CLAIM_THRESHOLD
        ]

    @staticmethod
    def civil_war_winner(claimants: list[Character]) -> Character:
        """Highest courage + cunning; the earliest claimant keeps a tie."""
        winner = claimants[0]
        for claimant in claimants[1:]:
            if claimant.traits.courage + claimant.traits.cunning > winner.traits.courage + winner.traits.cunning:
                winner = claimant
        return winner

    # ------------------------------------------------------------------
    # Coronations
    # ------------------------------------------------------------------

    def _crown_heir(self, heir: Character, ruler: Character, tick: int) -> Character:
        heir.promote("ruler", ruler.title, tick)
        heir.dynasty_generation = (ruler.dynasty_generation or 1) + 1
        if heir.dynasty_name is None:
            heir.dynasty_name = ruler.dynasty_name
        return heir

    def _elect(self, territory_id: int, tick: int, context: Optional[SocietyContext]) -> Character:
        chosen = create_character(
            self._registry.next_id(),
            territory_id,
            "ruler",
            tick,
            self._rng,
            society_averages=context.skill_averages if context else None,
            title=ELECTED_RULER_TITLE,
            age=ELECTED_RULER_AGE,
            dynasty_name=random_house(self._rng),
        )
        self._registry.add(chosen)
        return chosen

    def _enforce_single_ruler(self, territory_id: int, new_ruler: Character, tick: int) -> None:
        """Any other living claimant to the title is pushed back into the court."""
        for other in self._registry.rulers_of(territory_id):
            if other.id != new_ruler.id:
                other.promote("rival", random_title("rival", self._rng), tick)

    # ------------------------------------------------------------------
    # Regicide
    # ------------------------------------------------------------------

    def _queue_regicide(self, ruler: Character, killer_territory_id: int, tick: int) -> None:
        victim_territory_id = ruler.territory_id
        name = ruler.display_name

        def grieve() -> None:
            self._bonds.create_bond(
                victim_territory_id, killer_territory_id, REGICIDE_BOND_TYPE,
                REGICIDE_BOND_INTENSITY, f"The murder of {name}", tick,
            )
            self._memories.record_memory(
                victim_territory_id, "character_death",
                f"Our ruler {name} was slain by foreign hands.",
                REGICIDE_VICTIM_MEMORY_WEIGHT, tick, target_territory_id=killer_territory_id,
            )

        def boast() -> None:
            self._memories.record_memory(
                killer_territory_id, "victory",
                f"We brought down {name}.",
                REGICIDE_KILLER_MEMORY_WEIGHT, tick, target_territory_id=victim_territory_id,
            )

        self._queue.enqueue(victim_territory_id, f"Blood debt for the death of {name}", grieve, tick)
        self._queue.enqueue(killer_territory_id, f"Triumph over {name}", boast, tick)


def succession_narrative(
    old: Character,
    new: Character,
    mode: str,
    cause: str,
    casualties: Optional[int] = None,
    contested: bool = False,
) -> str:
    old_name = old.display_name
    if mode == "peaceful" and contested:
        return (
            f"Following the {cause} of {old_name}, {new.display_name} claimed the throne, "
            f"though many at court doubt their loyalty."
        )
    if mode == "peaceful":
        return f"Following the {cause} of {old_name}, {new.display_name} ascended to power in a peaceful transition."
    if mode == "coup":
        return (
            f"Upon learning of {old_name}'s {cause}, {new.name} seized power in a swift coup, "
            f"declaring themselves {new.title}."
        )
    if mode == "civil_war":
        return (
            f"The {cause} of {old_name} sparked a bloody civil war. After {casualties} casualties, "
            f"{new.name} emerged victorious as {new.title}."
        )
    if mode == "election":
        return f"With no clear heir after {old_name}'s {cause}, the people chose {new.name} to lead them."
    return f"{new.display_name} came to power following the {cause} of {old_name}."
