"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator

from catch_cli.models.record import Dialect

DIALECT_CHOICES = ("auto", "quantum", "standard")


class CatchConfig(BaseModel):
    """A validated configuration model for the application."""

    # Fetch Settings
    default_output: str = "output.html"
    default_store: str = ""
    chunk_size: int = 131072
    timeout: float = 90.0
    fetch_attempts: int = 1

    # Store Settings
    dialect: str = "auto"
    strict_decode: bool = False

    # Probe Settings
    ping_count: int = 4
    ping_timeout: float = 2.0

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("dialect")
    @classmethod
    def validate_dialect(cls, v: str) -> str:
        v = v.lower()
        if v not in DIALECT_CHOICES:
            raise ValueError(f"Dialect must be one of {', '.join(DIALECT_CHOICES)}.")
        return v

    @field_validator("chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        if v < 1024 or v > 16 * 1024 * 1024:
            raise ValueError("Chunk size must be between 1 KiB and 16 MiB.")
        return v

    @field_validator("timeout", "ping_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @field_validator("fetch_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Fetch attempts must be between 1 and 10.")
        return v

    @field_validator("ping_count")
    @classmethod
    def validate_ping_count(cls, v: int) -> int:
        if v < 1 or v > 1000:
            raise ValueError("Ping count must be between 1 and 1000.")
        return v

    def resolve_dialect(self, store_path: str) -> Dialect:
        """Returns the configured dialect, or the one implied by the store name."""
        if self.dialect == "auto":
            return Dialect.for_store(store_path)
        return Dialect(self.dialect)

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
