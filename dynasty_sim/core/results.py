"""Typed outcomes returned by every mutation entry point.

Nothing inside a tick raises for a bad target: callers get an ``Outcome``
describing what happened and, on failure, why.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


NOT_FOUND_MESSAGE = "Character not found or already dead"


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"


@dataclass(frozen=True)
class Outcome:
    """Result of an operation on a character or territory."""

    success: bool
    description: str
    died: bool = False
    failure: Optional[FailureKind] = None
    payload: Any = None
    side_effects: dict = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        description: str,
        died: bool = False,
        payload: Any = None,
        **side_effects: Any,
    ) -> Outcome:
        return cls(True, description, died=died, payload=payload, side_effects=side_effects)

    @classmethod
    def not_found(cls, description: str = NOT_FOUND_MESSAGE) -> Outcome:
        return cls(False, description, failure=FailureKind.NOT_FOUND)

    @classmethod
    def invalid(cls, description: str) -> Outcome:
        return cls(False, description, failure=FailureKind.INVALID_STATE)
