"""Configuration models using Pydantic for validation."""

import ipaddress
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PingerKind = Literal["auto", "real", "mock"]

DEFAULT_COUNT = 3
DEFAULT_TIMEOUT = 0.3


def default_workers() -> int:
    """One worker per available CPU."""
    return os.cpu_count() or 1


class ScanOptions(BaseModel):
    """Validated options for a single subnet scan."""

    model_config = ConfigDict(frozen=True)

    subnet: str  # CIDR notation, e.g., "192.168.1.0/24"
    count: int = Field(default=DEFAULT_COUNT, ge=1)  # Echo requests per host
    interval: float = Field(default=0.0, ge=0.0)  # Seconds between requests
    timeout: float = Field(default=DEFAULT_TIMEOUT, ge=0.0)  # 0 means no explicit timeout
    max_workers: int = Field(default_factory=default_workers, ge=1)

    @field_validator("subnet")
    @classmethod
    def validate_cidr(cls, v: str) -> str:
        """Validate that subnet is a valid CIDR notation."""
        if not v or not v.strip():
            raise ValueError("subnet should be in CIDR notation and cannot be empty")
        try:
            ipaddress.ip_network(v.strip(), strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid CIDR range '{v}': {e}")
        return v.strip()


class MockHostConfig(BaseModel):
    """Canned behaviour of the mock pinger for one host."""

    latency: float = Field(default=0.0, ge=0.0)  # Seconds
    packet_loss: float = Field(default=0.0, ge=0.0, le=1.0)  # Ratio, not percent
    should_error: bool = False
    error_msg: str = "mock ping failure"


class MockPingerConfig(BaseModel):
    """Behaviour of the deterministic mock pinger."""

    default_latency: float = Field(default=0.010, ge=0.0)
    default_packet_loss: float = Field(default=0.0, ge=0.0, le=1.0)
    host_configs: dict[str, MockHostConfig] = Field(default_factory=dict)
    simulate_timing: bool = True


class Settings(BaseModel):
    """Scan defaults and general application settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "ERROR"
    pinger: PingerKind = "auto"
    count: int = Field(default=DEFAULT_COUNT, ge=1)
    interval: float = Field(default=0.0, ge=0.0)
    timeout: float = Field(default=DEFAULT_TIMEOUT, ge=0.0)
    max_workers: int = Field(default_factory=default_workers, ge=1)


class Config(BaseModel):
    """Main configuration model."""

    settings: Settings = Field(default_factory=Settings)
    mock: MockPingerConfig = Field(default_factory=MockPingerConfig)

    @classmethod
    def load(cls, path: Path | str = "subping.json") -> "Config":
        """Load configuration from a JSON file."""
        import json

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path | str = "subping.json") -> "Config":
        """Load configuration or return default if file doesn't exist."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()
