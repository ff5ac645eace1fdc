"""
Network Layer.

This package contains the HTTP transfer fetcher and the ICMP echo probe.
"""

from .fetcher import Fetcher, FetchResult
from .pinger import Pinger

__all__ = ["FetchResult", "Fetcher", "Pinger"]
