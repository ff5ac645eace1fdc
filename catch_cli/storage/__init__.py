"""
Storage Layer.

This package handles all data persistence: the record store codec, its
writer and reader, and the configuration file.
"""

from .config_manager import ConfigManager
from .reader import RecordParser, extract_record, find_record, iter_records
from .writer import append_record

__all__ = [
    "ConfigManager",
    "RecordParser",
    "append_record",
    "extract_record",
    "find_record",
    "iter_records",
]
