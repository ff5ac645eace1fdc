"""
Data Models Layer.

This package contains the core data structures used throughout the
application, such as records, configuration and statistics.
"""

from .config import CatchConfig
from .record import Dialect, Record
from .stats import PingStats, TransferStats

__all__ = ["CatchConfig", "Dialect", "PingStats", "Record", "TransferStats"]
