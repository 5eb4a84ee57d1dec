"""Configuration models for snapshot capture and validation."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = "snapshot-config.json"


class EnvironmentConfigError(ValueError):
    """An environment variable override holds an unusable value."""


def _default_max_concurrent() -> int:
    raw = os.environ.get("MAX_CONCURRENT", "5")
    try:
        return int(raw)
    except ValueError:
        raise EnvironmentConfigError(
            f"MAX_CONCURRENT must be an integer, got {raw!r}"
        ) from None


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 720


class SnapshotConfig(BaseModel):
    # Inputs and outputs
    urls_file: str = "public_urls.txt"
    snapshot_dir: str = "snapshot_latest"
    report_dir: str = "test-results"

    # Execution
    max_concurrent: int = Field(default_factory=_default_max_concurrent)
    navigation_timeout_ms: int = 180000
    # Fixed wait after the load event; dynamic pages that settle later
    # than this produce flaky snapshots.
    settle_delay_ms: int = 10000
    headless: bool = True
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)

    # Regions captured. Baselines are taken from the whole body while
    # validation looks at the main content container only.
    capture_selector: str = "body"
    validate_selector: str = ".eb-fullwidth-container"

    # Validation
    similarity_threshold: float = 95.0

    # Reporting
    report_formats: list[str] = Field(default_factory=lambda: ["json", "html"])

    @field_validator("max_concurrent")
    @classmethod
    def check_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrent must be at least 1")
        return v

    @field_validator("settle_delay_ms", "navigation_timeout_ms")
    @classmethod
    def check_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("timeouts and delays must not be negative")
        return v

    @field_validator("similarity_threshold")
    @classmethod
    def check_threshold(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError("similarity_threshold must be between 0 and 100")
        return v

    @classmethod
    def load(cls, path: str | Path) -> "SnapshotConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def load_or_default(cls, path: str | Path) -> "SnapshotConfig":
        """Load config if the file exists, otherwise fall back to defaults."""
        if Path(path).exists():
            return cls.load(path)
        return cls()

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
