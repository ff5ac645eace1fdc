"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class CatchCliError(Exception):
    """Base exception for all application-specific errors."""


class StoreIOError(CatchCliError):
    """Raised when reading or writing a record store (or an output file) fails."""


class RecordNotFoundError(CatchCliError):
    """Raised when a store scan reaches end of file without a matching record."""

    def __init__(self, name: str, store_path: str):
        super().__init__(f"No record named '{name}' in store '{store_path}'.")
        self.name = name
        self.store_path = store_path


class MalformedTokenError(CatchCliError):
    """Raised by strict decoding when a payload token is not a valid hex byte."""


class FetchError(CatchCliError):
    """Raised when a transfer fails due to an HTTP error status or transport error."""


class ProbeError(CatchCliError):
    """Raised when the ICMP echo probe cannot be run."""


class ConfigurationError(CatchCliError):
    """Raised for issues related to configuration loading or validation."""
