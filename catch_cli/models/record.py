"""
Data model for the records kept in a store file and the two dialects used
to encode them.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Dialect(Enum):
    """The two on-disk encodings of a record."""

    QUANTUM = "quantum"
    STANDARD = "standard"

    @property
    def begin_marker(self) -> str:
        return "###ENTRY###" if self is Dialect.QUANTUM else "---ENTRY---"

    @property
    def end_marker(self) -> str:
        return "###END###" if self is Dialect.QUANTUM else "---END---"

    @classmethod
    def for_store(cls, store_path: str | Path) -> "Dialect":
        """Picks the dialect from the store extension ('.dqb' is Quantum)."""
        return cls.QUANTUM if str(store_path).endswith(".dqb") else cls.STANDARD


BEGIN_MARKERS = {d.begin_marker: d for d in Dialect}
END_MARKERS = {d.end_marker: d for d in Dialect}


@dataclass
class Record:
    """A named payload as persisted between a begin and an end marker."""

    name: str
    payload: bytes
    dialect: Dialect
    # Declared length from the SIZE: line; never checked against the payload.
    size: int | None = None

    @property
    def size_matches(self) -> bool:
        return self.size == len(self.payload)
