"""
Models for tracking transfer and probe statistics.
"""

import time
from dataclasses import dataclass, field


@dataclass
class TransferStats:
    """Tracks statistics for a single transfer, including real-time speed."""

    url: str = ""
    total_length: int = 0
    bytes_received: int = 0
    chunks_received: int = 0

    current_speed_bps: float = 0.0
    peak_speed_bps: float = 0.0
    _speed_samples: list[float] = field(default_factory=list, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _last_progress_time: float = field(default=0.0, repr=False)
    _last_progress_bytes: int = field(default=0, repr=False)

    def __post_init__(self):
        self._start_time = time.monotonic()
        self._last_progress_time = self._start_time

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._start_time

    def record_chunk(self, size: int) -> None:
        """
        Adds a received chunk and refreshes the speed estimate.

        Args:
            size: Number of bytes in the chunk.
        """
        self.bytes_received += size
        self.chunks_received += 1

        now = time.monotonic()
        elapsed = now - self._last_progress_time

        # Update speed roughly twice per second
        if elapsed > 0.5:
            bytes_diff = self.bytes_received - self._last_progress_bytes
            if bytes_diff > 0:
                self._speed_samples.append(bytes_diff / elapsed)
                # Keep a sliding window of the last 10 speed samples
                if len(self._speed_samples) > 10:
                    self._speed_samples.pop(0)
                self.current_speed_bps = sum(self._speed_samples) / len(
                    self._speed_samples
                )
                self.peak_speed_bps = max(self.peak_speed_bps, self.current_speed_bps)

            self._last_progress_time = now
            self._last_progress_bytes = self.bytes_received

    @property
    def average_speed_bps(self) -> float:
        elapsed = self.elapsed
        return self.bytes_received / elapsed if elapsed > 0 else 0.0


@dataclass
class PingStats:
    """Round-trip results of an ICMP echo probe."""

    host: str
    sent: int = 0
    round_trips: list[float] = field(default_factory=list)

    @property
    def received(self) -> int:
        return len(self.round_trips)

    @property
    def lost(self) -> int:
        return self.sent - self.received

    @property
    def loss_percent(self) -> int:
        if self.sent == 0:
            return 0
        return int(self.lost / self.sent * 100)

    @property
    def minimum(self) -> float | None:
        return min(self.round_trips) if self.round_trips else None

    @property
    def maximum(self) -> float | None:
        return max(self.round_trips) if self.round_trips else None

    @property
    def average(self) -> float | None:
        if not self.round_trips:
            return None
        return sum(self.round_trips) / len(self.round_trips)
