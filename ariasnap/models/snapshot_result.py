"""Outcome data structures produced by the snapshot tasks and batch runner."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

CAPTURED = "CAPTURED"
PASS = "PASS"
FAIL = "FAIL"
MISSING = "MISSING"
ERROR = "ERROR"

ALL_STATUSES = (CAPTURED, PASS, FAIL, MISSING, ERROR)
# Statuses that count as a clean result for exit-code purposes
SUCCESS_STATUSES = (CAPTURED, PASS)

MODE_CAPTURE = "capture"
MODE_VALIDATE = "validate"


class DiffDetails(BaseModel):
    """Line-count summary attached to a failed validation."""
    model_config = ConfigDict(frozen=True)

    expected_lines: int
    actual_lines: int
    line_diff_percentage: float = 0.0
    similarity: float = 0.0
    threshold: float = 0.0


class TaskOutcome(BaseModel):
    """Result of capturing or validating a single URL."""
    model_config = ConfigDict(frozen=True)

    url: str
    filename: Optional[str] = None
    status: str  # CAPTURED, PASS, FAIL, MISSING, ERROR
    error: Optional[str] = None
    similarity: Optional[float] = None
    details: Optional[DiffDetails] = None
    index: int = -1  # position in the original target list
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status in SUCCESS_STATUSES


class BatchResult(BaseModel):
    """Sealed aggregate of every outcome from one batch run."""
    model_config = ConfigDict(frozen=True)

    mode: str  # capture, validate
    total_urls: int = 0
    started_at: str
    completed_at: str
    duration_seconds: float = 0.0
    outcomes: tuple[TaskOutcome, ...] = Field(default_factory=tuple)

    def with_status(self, status: str) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def captured(self) -> list[TaskOutcome]:
        return self.with_status(CAPTURED)

    @property
    def passed(self) -> list[TaskOutcome]:
        return self.with_status(PASS)

    @property
    def failed(self) -> list[TaskOutcome]:
        return self.with_status(FAIL)

    @property
    def missing(self) -> list[TaskOutcome]:
        return self.with_status(MISSING)

    @property
    def errors(self) -> list[TaskOutcome]:
        return self.with_status(ERROR)

    @property
    def successful(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def unsuccessful(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def counts(self) -> dict[str, int]:
        return {status: len(self.with_status(status)) for status in ALL_STATUSES}

    @property
    def has_issues(self) -> bool:
        return bool(self.unsuccessful)

    @property
    def success_rate(self) -> float:
        """Percentage of targets with a clean outcome."""
        if not self.total_urls:
            return 0.0
        return round(len(self.successful) / self.total_urls * 100, 2)

    @property
    def throughput(self) -> float:
        """Targets processed per second of wall-clock time."""
        if self.duration_seconds <= 0:
            return 0.0
        return round(self.total_urls / self.duration_seconds, 2)
