"""
catch-cli: capture downloaded payloads into a human-readable record store.
"""

__version__ = "0.3.0"
