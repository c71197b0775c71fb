"""Main simulation loop: one tick per month, territories processed in turn."""

from __future__ import annotations

from typing import Optional

import numpy as np
from numpy.random import Generator

from dynasty_sim.agents.character import Character, create_character, random_house
from dynasty_sim.agents.priorities import PriorityModel
from dynasty_sim.agents.wounds import WoundSystem
from dynasty_sim.core.clock import SimClock
from dynasty_sim.core.config import (
    INITIAL_COMMONERS,
    INITIAL_COURT,
    INITIAL_TERRITORIES,
    PLOT_ASSASSINATION_CAUSE,
    PLOT_COMPLETE,
    PLOT_DISCOVERY_PER_VIGILANCE,
    PLOT_PROGRESS_RANGE,
    PROMOTABLE_ROLES,
    RELIGION_CHANCE,
    ROLE_AGE_RANGES,
    TREATMENT_CHANCE,
    TREATMENT_WEIGHTS,
    WAR_ROLES,
    WAR_WOUND_CHANCE,
    WAR_WOUND_SEVERITY,
)
from dynasty_sim.simulation.lifecycle import LifeEvent, LifecycleEngine
from dynasty_sim.simulation.metrics import MetricsCollector
from dynasty_sim.simulation.mortality import MortalityCatalog
from dynasty_sim.simulation.mutations import CharacterMutations
from dynasty_sim.simulation.succession import SuccessionResolver
from dynasty_sim.social.consequences import BondRegistry, ConsequenceQueue, LegitimacyRegistry, MemoryLog
from dynasty_sim.social.registry import CharacterRegistry
from dynasty_sim.viz.logger import SimLogger
from dynasty_sim.world.territory import (
    Religion,
    SocietyContext,
    TerritorySnapshot,
    apply_casualties,
    drift_territory,
    generate_territories,
    random_religion,
    society_context_from,
)

_EVENT_CATEGORIES: dict[str, str] = {
    "birth": SimLogger.BIRTH,
    "death": SimLogger.DEATH,
    "coming_of_age": SimLogger.LIFECYCLE,
    "elder": SimLogger.LIFECYCLE,
    "heir_named": SimLogger.PROMOTION,
    "promotion": SimLogger.PROMOTION,
    "rising_star": SimLogger.PROMOTION,
    "recovered": SimLogger.WOUND,
    "accident": SimLogger.WOUND,
    "illness": SimLogger.WOUND,
    "plot_started": SimLogger.EVENT,
}


class SimulationEngine:
    """Orchestrates characters, succession and consequences across territories."""

    def __init__(
        self,
        seed: int = 42,
        n_territories: int = INITIAL_TERRITORIES,
        logger: Optional[SimLogger] = None,
    ) -> None:
        self.rng: Generator = np.random.default_rng(seed)
        self._n_territories = n_territories

        self.clock = SimClock()
        self.registry = CharacterRegistry()
        self.territories: dict[int, TerritorySnapshot] = {}
        self.religions: dict[int, Optional[Religion]] = {}

        # Collaborators
        self.bonds = BondRegistry()
        self.memories = MemoryLog()
        self.legitimacy = LegitimacyRegistry(self.rng)
        self.consequences = ConsequenceQueue()

        # Systems
        self.wounds = WoundSystem(self.rng)
        self.mortality = MortalityCatalog(self.rng, self.wounds)
        self.priorities = PriorityModel()
        self.lifecycle = LifecycleEngine(self.rng, self.registry, self.wounds, self.mortality, self.priorities)
        self.succession = SuccessionResolver(
            self.rng, self.registry, self.bonds, self.memories, self.legitimacy, self.consequences,
        )
        self.mutations = CharacterMutations(self.registry, self.wounds, self.mortality)

        self.metrics = MetricsCollector()
        self.logger = logger or SimLogger(verbosity=0, stdout=False)

        self._tick_callback = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Generate territories and seat a court in each."""
        tick = self.clock.tick
        for territory in generate_territories(self._n_territories, self.rng):
            tid = territory.territory_id
            self.territories[tid] = territory
            self.religions[tid] = random_religion(self.rng, tick) if self.rng.random() < RELIGION_CHANCE else None
            self._seat_court(territory, tick)
        self.logger.log(
            SimLogger.LIFECYCLE,
            f"The chronicle begins with {len(self.territories)} territories and {len(self.registry)} characters",
            tick=tick,
        )

    def _seat_court(self, territory: TerritorySnapshot, tick: int) -> None:
        tid = territory.territory_id
        context = SocietyContext(active_religion=self.religions[tid])
        house = random_house(self.rng)

        ruler = self._spawn(tid, "ruler", tick, context, dynasty_name=house)
        self.legitimacy.initialize(ruler, "inheritance", tick)

        for role in INITIAL_COURT:
            if role == "ruler":
                continue
            if role == "priest" and context.active_religion is None:
                continue
            if role == "heir":
                lo, hi = ROLE_AGE_RANGES["heir"]
                hi = max(lo, min(hi, ruler.age - lo - 1))
                self._spawn(
                    tid, "heir", tick, context,
                    age=int(self.rng.integers(lo, hi + 1)),
                    dynasty_name=house,
                    dynasty_generation=ruler.dynasty_generation + 1,
                    parents=[ruler],
                )
            else:
                self._spawn(tid, role, tick, context)

        common_roles = sorted(PROMOTABLE_ROLES)
        for _ in range(INITIAL_COMMONERS):
            self._spawn(tid, str(self.rng.choice(common_roles)), tick, context)

    def _spawn(self, territory_id: int, role: str, tick: int, context: SocietyContext, **kwargs) -> Character:
        character = create_character(
            self.registry.next_id(), territory_id, role, tick, self.rng,
            society_averages=context.skill_averages, **kwargs,
        )
        self.lifecycle.take_stock(character, self.territories[territory_id])
        return self.registry.add(character)

    def set_tick_callback(self, callback) -> None:
        """Set a callback invoked after every tick with (tick, metrics)."""
        self._tick_callback = callback

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self, ticks: int) -> None:
        """Run the simulation for a number of ticks."""
        for _ in range(ticks):
            self.tick()
            if self._tick_callback:
                self._tick_callback(self.clock.tick, self.metrics)

    def tick(self) -> None:
        """One month: every territory in turn, then metrics and log."""
        self.clock.advance()
        tick = self.clock.tick

        for tid in sorted(self.territories):
            self.process_territory(tid, tick)

        self.metrics.collect_tick(tick, self.registry.all())
        self.logger.flush_tick(tick)

    def process_territory(self, territory_id: int, tick: int) -> None:
        # 1. Apply anything other territories left for us
        for item in self.consequences.drain(territory_id):
            self.logger.log(SimLogger.CONSEQUENCE, item.description, tick=tick, territory_id=territory_id)

        # 2. Conditions for this tick (read-only from here on)
        territory = drift_territory(self.territories[territory_id], self.rng)
        self.territories[territory_id] = territory
        context = self.society_context(territory_id)

        # 3. Skirmishes, healers and intrigue
        self._skirmishes(territory, tick)
        self._healers(territory_id, tick)
        self._intrigue(territory_id, tick)

        # 4. Lifecycle
        for event in self.lifecycle.process_tick(territory, context, tick):
            self._record_event(event, territory_id)

        # 5. Succession for any ruler who died since last processed
        for dead_ruler in self.succession.pending_successions(territory_id):
            self.resolve_succession(dead_ruler, tick, context)

    def resolve_succession(self, dead_ruler: Character, tick: int, context: SocietyContext) -> None:
        killer = self.mutations.killer_territories.pop(dead_ruler.id, None)
        outcome = self.succession.resolve(dead_ruler.id, tick, killer_territory_id=killer, context=context)
        if not outcome.success:
            self.logger.log(SimLogger.EVENT, outcome.description, [dead_ruler.id], tick=tick)
            return

        event = outcome.payload
        tid = event.territory_id
        self.metrics.record_succession(event.mode)
        self.logger.log(
            SimLogger.SUCCESSION, event.narrative,
            [event.deceased_ruler_id, event.new_ruler_id],
            tick=tick, territory_id=tid, mode=event.mode, contested=event.contested,
        )
        for fallen_id in event.fallen_claimant_ids:
            fallen = self.registry.get(fallen_id)
            self.metrics.record_death("succession_war")
            self.logger.log(
                SimLogger.DEATH, f"{fallen.display_name} was {fallen.death.cause}.",
                [fallen_id], tick=tick, territory_id=tid,
            )
        if event.casualties:
            self.territories[tid] = apply_casualties(self.territories[tid], event.casualties)

    # ------------------------------------------------------------------
    # Stand-in collaborators
    # ------------------------------------------------------------------

    def _skirmishes(self, territory: TerritorySnapshot, tick: int) -> None:
        if not territory.at_war:
            return
        lo, hi = WAR_WOUND_SEVERITY
        for fighter in self.registry.living_in(territory.territory_id):
            if fighter.role not in WAR_ROLES or fighter.is_exiled:
                continue
            if self.rng.random() >= WAR_WOUND_CHANCE:
                continue
            self.mutations.record_combat(fighter.id, kills=int(self.rng.integers(0, 4)))
            outcome = self.mutations.wound(fighter.id, float(self.rng.integers(lo, hi + 1)), "battle", tick)
            self._record_outcome(outcome, fighter, tick)

    def _healers(self, territory_id: int, tick: int) -> None:
        kinds = list(TREATMENT_WEIGHTS)
        p = np.array([TREATMENT_WEIGHTS[k] for k in kinds], dtype=float)
        p /= p.sum()
        for patient in self.registry.living_in(territory_id):
            if not patient.is_wounded or self.rng.random() >= TREATMENT_CHANCE:
                continue
            medication = str(self.rng.choice(kinds, p=p))
            outcome = self.mutations.apply_medication(patient.id, medication, tick)
            self._record_outcome(outcome, patient, tick)

    def _intrigue(self, territory_id: int, tick: int) -> None:
        """Advance plots; the ruler's vigilance may uncover them first."""
        ruler = self.registry.ruler_of(territory_id)
        if ruler is None:
            return
        lo, hi = PLOT_PROGRESS_RANGE
        discovery = ruler.traits.vigilance * PLOT_DISCOVERY_PER_VIGILANCE
        for plotter in self.registry.living_in(territory_id):
            if not plotter.active_plots:
                continue
            if plotter.role == "ruler" or plotter.is_exiled:
                plotter.active_plots.clear()
                continue
            plot = plotter.active_plots[0]
            plot.progress_percent += int(self.rng.integers(lo, hi + 1))

            if self.rng.random() < discovery:
                plotter.active_plots.remove(plot)
                outcome = self.mutations.exile_character(plotter.id, f"plotting {plot.plot_type}", tick)
                if outcome.success:
                    self.logger.log(SimLogger.EXILE, outcome.description, [plotter.id, ruler.id],
                                    tick=tick, territory_id=territory_id)
                continue

            if plot.progress_percent < PLOT_COMPLETE:
                continue
            plotter.active_plots.remove(plot)
            if plot.plot_type == "coup" and ruler.is_alive:
                outcome = self.mutations.kill_character(ruler.id, PLOT_ASSASSINATION_CAUSE, tick)
                self._record_outcome(outcome, ruler, tick)
                self.mutations.add_deed(plotter.id, tick, f"Had {ruler.display_name} murdered", "villainous")
            else:
                self.mutations.add_deed(plotter.id, tick, f"Carried off a {plot.plot_type} scheme", "villainous")
                self.logger.log(SimLogger.EVENT, f"{plotter.display_name}'s {plot.plot_type} went unnoticed.",
                                [plotter.id], tick=tick, territory_id=territory_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def society_context(self, territory_id: int) -> SocietyContext:
        return society_context_from(self.registry.living_in(territory_id), self.religions.get(territory_id))

    def _record_event(self, event: LifeEvent, territory_id: int) -> None:
        if event.event_type == "birth":
            self.metrics.record_birth()
        elif event.event_type == "death":
            self.metrics.record_death(event.data.get("category", "other"))
        elif event.event_type in ("promotion", "rising_star", "heir_named"):
            self.metrics.record_promotion()
        category = _EVENT_CATEGORIES.get(event.event_type, SimLogger.EVENT)
        self.logger.log(
            category, event.description, event.character_ids,
            tick=event.tick, territory_id=territory_id, details=event.data,
        )

    def _record_outcome(self, outcome, character: Character, tick: int) -> None:
        if not outcome.success:
            return
        if outcome.died:
            self.metrics.record_death(outcome.side_effects.get("category", "other"))
            self.logger.log(SimLogger.DEATH, outcome.description, [character.id], tick=tick,
                            territory_id=character.territory_id)
        else:
            self.logger.log(SimLogger.WOUND, outcome.description, [character.id], tick=tick,
                            territory_id=character.territory_id)

    def living_rulers(self, territory_id: int) -> list[Character]:
        return self.registry.rulers_of(territory_id)
