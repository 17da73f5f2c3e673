"""
Accumulator Configuration

Environment-based configuration for the RSA accumulator core.
Variables use the RSA_ACC_ prefix and may also come from a .env file.
"""

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Accumulator settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RSA_ACC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: json or text")

    app_name: str = Field(default="rsa-acc")
    app_version: str = Field(default="0.2.0")

    # Hash-to-prime
    prime_bits: int = Field(
        default=256,
        ge=64,
        description="Bit length of element prime representatives",
    )
    challenge_bits: int = Field(
        default=128,
        ge=64,
        description="Bit length of Fiat-Shamir challenge primes",
    )
    miller_rabin_rounds: int = Field(
        default=64,
        ge=1,
        description="Miller-Rabin rounds per primality test",
    )

    # Public parameters
    min_modulus_bits: int = Field(
        default=1024,
        description="Smallest modulus accepted by load_params()",
    )
    params_file: Optional[str] = Field(
        default=None,
        description="Path to a params.json holding hex N and g",
    )

    # Parallel batches
    max_workers: Optional[int] = Field(
        default=None,
        description="Worker processes for batch proofs (default: CPU count)",
    )
    parallel_threshold: int = Field(
        default=16,
        ge=1,
        description="Batches smaller than this run in-process",
    )

    # Registry policy for re-adding a committed element
    duplicate_policy: str = Field(
        default="reject",
        description="reject: raise AlreadyMember; ignore: idempotent no-op",
    )

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError('log_format must be "json" or "text"')
        return v.lower()

    @field_validator("duplicate_policy")
    @classmethod
    def validate_duplicate_policy(cls, v: str) -> str:
        if v.lower() not in ("reject", "ignore"):
            raise ValueError('duplicate_policy must be "reject" or "ignore"')
        return v.lower()

    @property
    def worker_count(self) -> int:
        """Effective number of worker processes."""
        if self.max_workers is not None:
            return max(1, self.max_workers)
        return os.cpu_count() or 1


@lru_cache()
def get_settings() -> Settings:
    """Get accumulator settings."""
    return Settings()
