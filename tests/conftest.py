"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest


class RecordingTask:
    """Stands in for a TransferTask and remembers every call."""

    def __init__(self):
        self.advanced = 0
        self.advance_calls = 0
        self.total = None
        self.statuses: list[str] = []
        self.finished_with: str | None = None
        self.resets = 0

    def advance(self, amount: int = 1) -> None:
        self.advanced += amount
        self.advance_calls += 1

    def reset(self) -> None:
        self.advanced = 0
        self.resets += 1

    def set_total(self, total: int) -> None:
        self.total = total

    def set_status(self, text: str) -> None:
        self.statuses.append(text)

    def finish(self, message: str) -> None:
        self.finished_with = message


@pytest.fixture
def progress() -> RecordingTask:
    return RecordingTask()


@pytest.fixture
def store_path(tmp_path):
    """Path of a store file that does not exist yet."""
    return tmp_path / "store.dlb"
