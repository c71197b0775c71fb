"""Bonds, memories and legitimacy: the collaborators succession writes to.

The engine only talks to these through the small protocols below; the
in-memory registries are the default implementations used by the demo
engine and the tests. Cross-territory writes are deferred through
``ConsequenceQueue`` and applied when the owning territory is next processed.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import numpy as np
from numpy.random import Generator

from dynasty_sim.core.config import (
    BOND_DORMANT_THRESHOLD,
    BOND_FORGOTTEN_THRESHOLD,
    BOND_GENERATIONAL_DECAY,
    BOND_MAX_INTENSITY,
    BOND_REINFORCEMENT_BOOST,
    CONTESTED_LEGITIMACY_PENALTY,
    LEGITIMACY_BY_SOURCE,
    MEMORY_WEIGHT_RANGE,
    TRUST_BASE,
    TRUST_CHARISMA_FACTOR,
    TRUST_LEGITIMACY_FACTOR,
    TRUST_RANGE,
)


# ------------------------------------------------------------------
# Bonds
# ------------------------------------------------------------------

@dataclass
class Bond:
    """A persistent feeling one territory holds toward another."""

    bond_id: int
    from_territory_id: int
    to_territory_id: int
    bond_type: str        # "blood_debt", "betrayal_grudge", "savior_debt", ...
    intensity: float      # 0-100
    origin: str
    created_tick: int
    is_hereditary: bool = True
    status: str = "active"  # "active", "dormant", "forgotten"
    generations_passed: int = 0


class BondLedger(Protocol):
    def create_bond(
        self, from_territory_id: int, to_territory_id: int, bond_type: str,
        intensity: float, origin: str, tick: int, is_hereditary: bool = True,
    ) -> Bond: ...

    def inherit_bonds(self, territory_id: int) -> list[Bond]: ...


class BondRegistry:
    """In-memory bond ledger."""

    def __init__(self) -> None:
        self.bonds: list[Bond] = []
        self._next_id = 0

    def create_bond(
        self,
        from_territory_id: int,
        to_territory_id: int,
        bond_type: str,
        intensity: float,
        origin: str,
        tick: int,
        is_hereditary: bool = True,
    ) -> Bond:
        """New bond, or reinforce a live one of the same type and direction."""
        existing = self.find(from_territory_id, to_territory_id, bond_type)
        if existing is not None:
            existing.intensity = min(BOND_MAX_INTENSITY, existing.intensity + BOND_REINFORCEMENT_BOOST)
            existing.status = _status_for(existing.intensity)
            return existing

        intensity = min(BOND_MAX_INTENSITY, max(0.0, intensity))
        bond = Bond(
            bond_id=self._next_id,
            from_territory_id=from_territory_id,
            to_territory_id=to_territory_id,
            bond_type=bond_type,
            intensity=intensity,
            origin=origin,
            created_tick=tick,
            is_hereditary=is_hereditary,
            status=_status_for(intensity),
        )
        self._next_id += 1
        self.bonds.append(bond)
        return bond

    def find(self, from_territory_id: int, to_territory_id: int, bond_type: str) -> Optional[Bond]:
        for bond in self.bonds:
            if (
                bond.from_territory_id == from_territory_id
                and bond.to_territory_id == to_territory_id
                and bond.bond_type == bond_type
                and bond.status != "forgotten"
            ):
                return bond
        return None

    def bonds_from(self, territory_id: int, include_forgotten: bool = False) -> list[Bond]:
        return [
            b for b in self.bonds
            if b.from_territory_id == territory_id and (include_forgotten or b.status != "forgotten")
        ]

    def inherit_bonds(self, territory_id: int) -> list[Bond]:
        """A new ruler takes on the old one's hereditary bonds, a little faded."""
        inherited: list[Bond] = []
        for bond in self.bonds_from(territory_id):
            if not bond.is_hereditary:
                continue
            bond.intensity = max(0.0, bond.intensity - BOND_GENERATIONAL_DECAY)
            bond.generations_passed += 1
            bond.status = _status_for(bond.intensity)
            inherited.append(bond)
        return inherited


def _status_for(intensity: float) -> str:
    if intensity < BOND_FORGOTTEN_THRESHOLD:
        return "forgotten"
    if intensity < BOND_DORMANT_THRESHOLD:
        return "dormant"
    return "active"


# ------------------------------------------------------------------
# Memories
# ------------------------------------------------------------------

@dataclass(frozen=True)
class MemoryRecord:
    territory_id: int
    memory_type: str   # "war", "betrayal", "crisis", "character_death", ...
    description: str
    emotional_weight: float  # -100 (trauma) to 100 (triumph)
    tick: int
    target_territory_id: Optional[int] = None


class MemoryRecorder(Protocol):
    def record_memory(
        self, territory_id: int, memory_type: str, description: str,
        emotional_weight: float, tick: int, target_territory_id: Optional[int] = None,
    ) -> MemoryRecord: ...


class MemoryLog:
    """In-memory store of territory memories."""

    def __init__(self) -> None:
        self.memories: list[MemoryRecord] = []

    def record_memory(
        self,
        territory_id: int,
        memory_type: str,
        description: str,
        emotional_weight: float,
        tick: int,
        target_territory_id: Optional[int] = None,
    ) -> MemoryRecord:
        lo, hi = MEMORY_WEIGHT_RANGE
        record = MemoryRecord(
            territory_id=territory_id,
            memory_type=memory_type,
            description=description,
            emotional_weight=float(np.clip(emotional_weight, lo, hi)),
            tick=tick,
            target_territory_id=target_territory_id,
        )
        self.memories.append(record)
        return record

    def memories_of(self, territory_id: int) -> list[MemoryRecord]:
        return [m for m in self.memories if m.territory_id == territory_id]


# ------------------------------------------------------------------
# Legitimacy
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LegitimacyRecord:
    character_id: int
    source: str   # "inheritance", "election", "conquest", "coup"
    legitimacy: int
    popular_trust: int
    contested: bool
    tick: int


class LegitimacyLedger(Protocol):
    def initialize(
        self, ruler: "Character", source: str, tick: int, contested: bool = False,  # noqa: F821
    ) -> LegitimacyRecord: ...


class LegitimacyRegistry:
    """Seeds a new ruler's legitimacy from how they came to power."""

    def __init__(self, rng: Generator) -> None:
        self._rng = rng
        self.records: dict[int, LegitimacyRecord] = {}

    def initialize(
        self,
        ruler: "Character",  # noqa: F821
        source: str,
        tick: int,
        contested: bool = False,
    ) -> LegitimacyRecord:
        base, variance = LEGITIMACY_BY_SOURCE.get(source, LEGITIMACY_BY_SOURCE["election"])
        legitimacy = base + self._rng.uniform(-1.0, 1.0) * variance
        if contested:
            legitimacy -= CONTESTED_LEGITIMACY_PENALTY
        legitimacy = float(np.clip(legitimacy, 0.0, 100.0))

        charisma_bonus = (ruler.traits.charisma - 50) * TRUST_CHARISMA_FACTOR
        trust = TRUST_BASE + (legitimacy - 50) * TRUST_LEGITIMACY_FACTOR + charisma_bonus
        trust = float(np.clip(trust, *TRUST_RANGE))

        record = LegitimacyRecord(
            character_id=ruler.id,
            source=source,
            legitimacy=int(round(legitimacy)),
            popular_trust=int(round(trust)),
            contested=contested,
            tick=tick,
        )
        self.records[ruler.id] = record
        return record

    def get(self, character_id: int) -> Optional[LegitimacyRecord]:
        return self.records.get(character_id)


# ------------------------------------------------------------------
# Deferred cross-territory effects
# ------------------------------------------------------------------

@dataclass(frozen=True)
class PendingConsequence:
    territory_id: int
    description: str
    apply: Callable[[], object]
    queued_tick: int


class ConsequenceQueue:
    """Per-territory FIFO of effects raised elsewhere."""

    def __init__(self) -> None:
        self._pending: dict[int, deque[PendingConsequence]] = defaultdict(deque)

    def enqueue(self, territory_id: int, description: str, apply: Callable[[], object], tick: int) -> None:
        self._pending[territory_id].append(PendingConsequence(territory_id, description, apply, tick))

    def pending_for(self, territory_id: int) -> int:
        return len(self._pending.get(territory_id, ()))

    def drain(self, territory_id: int) -> list[PendingConsequence]:
        """Apply everything queued for the territory, oldest first."""
        applied: list[PendingConsequence] = []
        queue = self._pending.get(territory_id)
        while queue:
            item = queue.popleft()
            item.apply()
            applied.append(item)
        return applied
