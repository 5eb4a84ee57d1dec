"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from ariasnap.models.snapshot_result import MODE_CAPTURE, BatchResult, TaskOutcome


def _record(outcome: TaskOutcome, with_details: bool = False) -> dict:
    record = {
        "url": outcome.url,
        "filename": outcome.filename,
        "status": outcome.status,
    }
    if outcome.error:
        record["error"] = outcome.error
    if outcome.similarity is not None:
        record["similarity"] = f"{outcome.similarity:.2f}"
    if with_details and outcome.details is not None:
        d = outcome.details
        record["details"] = {
            "expectedLines": d.expected_lines,
            "actualLines": d.actual_lines,
            "lineDiffPercentage": d.line_diff_percentage,
            "similarity": f"{d.similarity:.2f}",
            "threshold": d.threshold,
        }
    return record


def build_capture_report(result: BatchResult, timestamp: str) -> dict:
    return {
        "timestamp": timestamp,
        "totalUrls": result.total_urls,
        "successfulSnapshots": len(result.captured),
        "failedSnapshots": len(result.unsuccessful),
        "durationSeconds": result.duration_seconds,
        "speedSnapshotsPerSecond": f"{result.throughput:.2f}",
        "failedUrls": [{"url": o.url, "error": o.error} for o in result.unsuccessful],
        "successfulUrls": [{"url": o.url, "filename": o.filename} for o in result.captured],
    }


def build_validation_report(result: BatchResult, timestamp: str) -> dict:
    return {
        "timestamp": timestamp,
        "totalUrls": result.total_urls,
        "passedValidations": len(result.passed),
        "failedValidations": len(result.failed),
        "missingSnapshots": len(result.missing),
        "errors": len(result.errors),
        "durationSeconds": result.duration_seconds,
        "successRate": f"{result.success_rate:.2f}",
        "speedValidationsPerSecond": f"{result.throughput:.2f}",
        "passed": [_record(o) for o in result.passed],
        "failed": [_record(o, with_details=True) for o in result.failed],
        "missing": [_record(o) for o in result.missing],
        "errorDetails": [_record(o) for o in result.errors],
    }


def build_report(result: BatchResult, timestamp: str) -> dict:
    if result.mode == MODE_CAPTURE:
        return build_capture_report(result, timestamp)
    return build_validation_report(result, timestamp)


def generate_json_report(result: BatchResult, output_path: Path, timestamp: str) -> dict:
    """Write a machine-readable JSON report and return its contents."""
    report = build_report(result, timestamp)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, default=str)
    return report
