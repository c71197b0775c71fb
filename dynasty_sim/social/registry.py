"""Arena of every character ever created, addressed by id.

Records are never removed: the dead stay for dynasty and obituary queries.
Parent links are ids looked up here, never object references.
"""

from __future__ import annotations

from typing import Iterator, Optional


class CharacterRegistry:
    """Owns all character records."""

    def __init__(self) -> None:
        self._characters: dict[int, "Character"] = {}  # noqa: F821
        self._next_id: int = 0

    def next_id(self) -> int:
        cid = self._next_id
        self._next_id += 1
        return cid

    def add(self, character: "Character") -> "Character":  # noqa: F821
        if character.id in self._characters:
            raise ValueError(f"Duplicate character id {character.id}")
        self._characters[character.id] = character
        self._next_id = max(self._next_id, character.id + 1)
        return character

    def get(self, character_id: int) -> Optional["Character"]:  # noqa: F821
        return self._characters.get(character_id)

    def get_living(self, character_id: int) -> Optional["Character"]:  # noqa: F821
        c = self._characters.get(character_id)
        if c is None or not c.is_alive:
            return None
        return c

    def __len__(self) -> int:
        return len(self._characters)

    def __iter__(self) -> Iterator["Character"]:  # noqa: F821
        return iter(self._characters.values())

    def all(self) -> list["Character"]:  # noqa: F821
        return list(self._characters.values())

    # ------------------------------------------------------------------
    # Territory queries
    # ------------------------------------------------------------------

    def in_territory(self, territory_id: int) -> list["Character"]:  # noqa: F821
        return [c for c in self._characters.values() if c.territory_id == territory_id]

    def living_in(self, territory_id: int) -> list["Character"]:  # noqa: F821
        """Living characters of a territory in id order."""
        return [c for c in self.in_territory(territory_id) if c.is_alive]

    def rulers_of(self, territory_id: int) -> list["Character"]:  # noqa: F821
        return [c for c in self.living_in(territory_id) if c.role == "ruler"]

    def ruler_of(self, territory_id: int) -> Optional["Character"]:  # noqa: F821
        rulers = self.rulers_of(territory_id)
        return rulers[0] if rulers else None

    def heirs_of(self, territory_id: int) -> list["Character"]:  # noqa: F821
        """Living heirs, eldest first (ties broken by id)."""
        heirs = [c for c in self.living_in(territory_id) if c.role == "heir"]
        heirs.sort(key=lambda c: (c.birth_tick, c.id))
        return heirs

    def with_role(self, territory_id: int, role: str) -> list["Character"]:  # noqa: F821
        return [c for c in self.living_in(territory_id) if c.role == role]

    # ------------------------------------------------------------------
    # Lineage queries
    # ------------------------------------------------------------------

    def children_of(self, character_id: int) -> list["Character"]:  # noqa: F821
        return [c for c in self._characters.values() if character_id in c.parent_ids]

    def living_children_of(self, character_id: int) -> list["Character"]:  # noqa: F821
        return [c for c in self.children_of(character_id) if c.is_alive]

    def parents_of(self, character_id: int) -> list["Character"]:  # noqa: F821
        c = self._characters.get(character_id)
        if c is None:
            return []
        return [self._characters[pid] for pid in c.parent_ids if pid in self._characters]

    def ancestors(self, character_id: int) -> list["Character"]:  # noqa: F821
        """Breadth-first walk up the parent links, nearest generation first."""
        seen: set[int] = set()
        result: list["Character"] = []  # noqa: F821
        frontier = [character_id]
        while frontier:
            next_frontier: list[int] = []
            for cid in frontier:
                for parent in self.parents_of(cid):
                    if parent.id in seen:
                        continue
                    seen.add(parent.id)
                    result.append(parent)
                    next_frontier.append(parent.id)
            frontier = next_frontier
        return result

    def living_descendants(self, character_id: int) -> list["Character"]:  # noqa: F821
        seen: set[int] = set()
        result: list["Character"] = []  # noqa: F821
        frontier = [character_id]
        while frontier:
            next_frontier: list[int] = []
            for cid in frontier:
                for child in self.children_of(cid):
                    if child.id in seen:
                        continue
                    seen.add(child.id)
                    if child.is_alive:
                        result.append(child)
                    next_frontier.append(child.id)
            frontier = next_frontier
        return result

    def dynasty_members(self, dynasty_name: str, living_only: bool = False) -> list["Character"]:  # noqa: F821
        members = [c for c in self._characters.values() if c.dynasty_name == dynasty_name]
        if living_only:
            members = [c for c in members if c.is_alive]
        members.sort(key=lambda c: (c.dynasty_generation, c.birth_tick, c.id))
        return members

    def is_biological_child_of_ruler(self, character: "Character") -> bool:  # noqa: F821
        """True if any parent ruled (or rules) the character's territory."""
        for parent in self.parents_of(character.id):
            if parent.territory_id != character.territory_id:
                continue
            if parent.role == "ruler" or parent.coronation_tick is not None:
                return True
        return False
