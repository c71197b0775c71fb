"""Structured chronicle logging for narrative and debugging."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional, TextIO

from dynasty_sim.core.config import TICKS_PER_YEAR


@dataclass
class LogEntry:
    """A single log entry."""

    tick: int
    category: str
    message: str
    territory_id: Optional[int] = None
    character_ids: list[int] = field(default_factory=list)
    data: dict = field(default_factory=dict)


class SimLogger:
    """Structured logging with categories and verbosity control."""

    # Category constants
    LIFECYCLE = "LIFECYCLE"
    BIRTH = "BIRTH"
    DEATH = "DEATH"
    WOUND = "WOUND"
    SUCCESSION = "SUCCESSION"
    PROMOTION = "PROMOTION"
    EXILE = "EXILE"
    CONSEQUENCE = "CONSEQUENCE"
    EVENT = "EVENT"

    _VERBOSITY_MAP = {
        SUCCESSION: 0,
        DEATH: 0,
        EVENT: 0,
        BIRTH: 1,
        PROMOTION: 1,
        EXILE: 1,
        CONSEQUENCE: 1,
        WOUND: 2,
        LIFECYCLE: 2,
    }

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        """
        verbosity levels:
            0 = only deaths, successions and events
            1 = + births, promotions, exiles, consequences
            2 = + wounds and life-stage changes
            3 = everything (debug)
        """
        self.verbosity = verbosity
        self._buffer: list[LogEntry] = []
        self._all_entries: list[LogEntry] = []
        self._file: Optional[TextIO] = None
        self._stdout = stdout

        if log_file:
            os.makedirs(os.path.dirname(log_file) if os.path.dirname(log_file) else ".", exist_ok=True)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        return self._all_entries

    def log(
        self,
        category: str,
        message: str,
        character_ids: Optional[list[int]] = None,
        tick: int = 0,
        territory_id: Optional[int] = None,
        **data,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            tick=tick,
            category=category,
            message=message,
            territory_id=territory_id,
            character_ids=character_ids or [],
            data=data,
        )
        self._buffer.append(entry)

    def flush_tick(self, tick: int) -> None:
        """Write buffered logs for the tick."""
        year, month = divmod(tick, TICKS_PER_YEAR)
        for entry in self._buffer:
            required_verbosity = self._VERBOSITY_MAP.get(entry.category, 3)
            if required_verbosity <= self.verbosity:
                line = f"[Y{year:>3} M{month + 1:>2}] [{entry.category:<11}] {entry.message}"
                if self._stdout:
                    print(line)
                if self._file:
                    self._file.write(line + "\n")

        self._all_entries.extend(self._buffer)
        self._buffer.clear()

        if self._file:
            self._file.flush()

    def get_narrative(self, tick: int, territory_id: Optional[int] = None) -> str:
        """Human-readable summary of a tick, optionally for one territory."""
        tick_entries = [
            e for e in self._all_entries
            if e.tick == tick and (territory_id is None or e.territory_id == territory_id)
        ]
        if not tick_entries:
            return f"Tick {tick}: Nothing notable happened."

        lines = [f"=== Tick {tick} ==="]
        for entry in tick_entries:
            lines.append(f"  [{entry.category}] {entry.message}")
        return "\n".join(lines)

    def export_json(self, filepath: str) -> None:
        """Export all log entries to JSON."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        data = [
            {
                "tick": e.tick,
                "category": e.category,
                "message": e.message,
                "territory_id": e.territory_id,
                "character_ids": e.character_ids,
                "data": e.data,
            }
            for e in self._all_entries
        ]
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None
