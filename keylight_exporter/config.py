"""
Configuration loading and validation.

Configuration may come from an optional YAML file; command-line flags
override whatever the file sets.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator


class MetricsConfig(BaseModel):
    addr: str = ":9288"
    path: str = "/metrics"

    @field_validator("path")
    @classmethod
    def _absolute_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("metrics path must start with '/'")
        return v

    @field_validator("addr")
    @classmethod
    def _host_port(cls, v: str) -> str:
        host, sep, port = v.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"listen address must be host:port, got {v!r}")
        return v

    @property
    def host(self) -> str | None:
        """Host to bind to; None listens on all interfaces."""
        host = self.addr.rpartition(":")[0].strip("[]")
        return host or None

    @property
    def port(self) -> int:
        return int(self.addr.rpartition(":")[2])


class FetchConfig(BaseModel):
    timeout_seconds: float = Field(default=5.0, gt=0)
    verify_tls: bool = True


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "text"] = "json"

    @field_validator("level", mode="before")
    @classmethod
    def _lower(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v


class ExporterConfig(BaseModel):
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> ExporterConfig:
    """Load and validate exporter configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return ExporterConfig.model_validate(raw)
