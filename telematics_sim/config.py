"""Simulator configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an env var
(``DEVICE_ID``, ``SERVER_HOST``, ...) or a local ``.env`` file; the CLI
overrides both.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from telematics_sim.sensors.random_source import available_profiles
from telematics_sim.session import encode_device_id


class SimulatorSettings(BaseSettings):
    """Telematics simulator runtime settings."""

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    # -- device -------------------------------------------------------------
    device_id: str = Field(
        default="357852034572894",
        description="Device identifier, ASCII, at most 15 bytes",
    )

    # -- server -------------------------------------------------------------
    server_host: str = Field(default="localhost", description="Collection server host")
    server_port: int = Field(default=8080, ge=1, le=65535)
    connect_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Give up opening the connection after this long",
    )

    # -- emission -----------------------------------------------------------
    interval_seconds: int = Field(
        default=5,
        ge=1,
        description="Seconds between frames",
    )
    timestamp_clock: Literal["local", "utc"] = Field(
        default="local",
        description="Clock the frame timestamp is counted on",
    )
    sensor_profile: str = Field(
        default="tunis",
        description="Sensor profile name (from sensor_profiles.json)",
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for reproducible sensor values",
    )

    # -- behaviour ----------------------------------------------------------
    dry_run: bool = Field(
        default=False,
        description="Build and log frames; never open a socket",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )

    @field_validator("device_id")
    @classmethod
    def validate_device_id(cls, v: str) -> str:
        encode_device_id(v)
        return v

    @field_validator("sensor_profile")
    @classmethod
    def validate_sensor_profile(cls, v: str) -> str:
        profiles = available_profiles()
        if v not in profiles:
            raise ValueError(
                f"Unknown sensor profile '{v}'. Available: {', '.join(profiles)}"
            )
        return v

    @property
    def server_address(self) -> str:
        return f"{self.server_host}:{self.server_port}"
