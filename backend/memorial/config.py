"""
Memorial Backend - Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Missing credentials are reported, not enforced:
    `check_required_credentials()` returns a structured `CredentialWarning`
    that the lifespan logs. The server keeps running so /health and the
    engager lookup stay available; the pinning service raises on first use.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

# Template placeholder for the JWT; counts as unset
PINATA_JWT_TEMPLATE = "your_pinata_jwt_here"


def pinata_jwt_is_set(jwt: str) -> bool:
    return bool(jwt) and jwt != PINATA_JWT_TEMPLATE


class CredentialWarning(BaseModel):
    """Result of the startup credential check when something is missing."""

    missing: List[str] = Field(description="Environment variable names that are unset")
    message: str = Field(description="Human-readable explanation for the startup log")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development except PINATA_JWT,
    which must be provided before memorial generation can succeed.
    """

    # ── Pinning Service (Pinata) ──────────────────────────────────────────
    # What: JWT used as a Bearer token for Pinata's pinning API
    # Required: YES for /api/generate-memorial-nft
    pinata_jwt: str = Field(
        default="",
        description="Pinata API JWT used for pinFileToIPFS / pinJSONToIPFS",
    )
    pinata_api_url: str = Field(default="https://api.pinata.cloud")
    pinata_gateway_url: str = Field(default="https://gateway.pinata.cloud/ipfs")

    # What: Upper bound for a single upload call to the pinning service
    pinning_timeout: float = Field(default=30.0, gt=0, le=300)

    # ── Tile Acquisition ──────────────────────────────────────────────────
    # What: Per-tile fetch timeout; exceeding it substitutes a placeholder
    tile_fetch_timeout: float = Field(default=10.0, gt=0, le=60)

    # What: Number of engagers rendered into the grid (layout holds 5 slots)
    max_tiles: int = Field(default=5, ge=1, le=5)

    # What: Output encoding handed to Pillow's Image.save
    composite_format: str = Field(default="PNG")

    # ── Engager Lookup ────────────────────────────────────────────────────
    # What: Simulated upstream latency for the mocked engager table (seconds)
    engager_lookup_delay: float = Field(default=1.0, ge=0, le=10)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("composite_format")
    @classmethod
    def validate_composite_format(cls, v: str) -> str:
        """Restricts output encoding to lossless raster formats."""
        upper = v.upper()
        if upper not in {"PNG", "WEBP", "BMP"}:
            raise ValueError(f"Invalid composite_format '{v}'. Use PNG, WEBP or BMP.")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    def check_required_credentials(self) -> Optional[CredentialWarning]:
        """
        What:  Reports credentials that are required for pinning but unset.
        When:  Called during app startup (lifespan). /health asks the
               pinning service instead, through the same pinata_jwt_is_set().
        How:   Returns None when everything is present, otherwise a
               CredentialWarning naming the missing variables. Never raises.
        """
        missing = []
        if not pinata_jwt_is_set(self.pinata_jwt):
            missing.append("PINATA_JWT")
        if not missing:
            return None
        return CredentialWarning(
            missing=missing,
            message=(
                "Pinning credentials are not configured: "
                + ", ".join(missing)
                + ". Memorial generation will fail until they are set. "
                "Create a JWT at https://app.pinata.cloud/developers/api-keys"
            ),
        )


# Singleton instance, imported throughout the application
settings = Settings()
