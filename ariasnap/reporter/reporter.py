"""Report generation orchestration."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from ariasnap.models.config import SnapshotConfig
from ariasnap.models.snapshot_result import MODE_VALIDATE, BatchResult

from .html_report import generate_html_report
from .json_report import build_report, generate_json_report

logger = logging.getLogger(__name__)

CAPTURE_PREFIX = "snapshot-report"
VALIDATION_PREFIX = "validation-report"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Reporter:
    """Writes JSON and HTML reports for a finished batch."""

    def __init__(self, config: SnapshotConfig):
        self.config = config

    def generate_reports(
        self, result: BatchResult, output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = Path(output_dir or self.config.report_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        validation = result.mode == MODE_VALIDATE
        prefix = VALIDATION_PREFIX if validation else CAPTURE_PREFIX
        timestamp = _timestamp()
        generated = {}

        # The JSON layout doubles as the input of the HTML view
        if "json" in self.config.report_formats:
            stamp = timestamp.replace(":", "-").replace(".", "-")
            json_path = out_dir / f"{prefix}-{stamp}.json"
            logger.debug("Generating JSON report...")
            report = generate_json_report(result, json_path, timestamp)
            generated["json"] = str(json_path)
            logger.info("JSON report: %s", json_path)
        else:
            report = build_report(result, timestamp)

        if "html" in self.config.report_formats:
            html_path = out_dir / f"{prefix}.html"
            logger.debug("Generating HTML report...")
            generate_html_report(report, html_path, validation)
            generated["html"] = str(html_path)
            logger.info("HTML report: %s", html_path)

        return generated

    def render_latest_html(self, output_dir: Path | None = None) -> Path:
        """Rebuild the validation HTML page from the newest validation JSON report."""
        out_dir = Path(output_dir or self.config.report_dir)
        candidates = sorted(out_dir.glob(f"{VALIDATION_PREFIX}-*.json")) if out_dir.exists() else []
        if not candidates:
            raise FileNotFoundError(
                f"No validation report found in {out_dir}. Run 'ariasnap validate' first."
            )
        latest = candidates[-1]
        logger.debug("Rendering HTML from %s", latest)
        with open(latest, encoding="utf-8") as f:
            report = json.load(f)
        html_path = out_dir / f"{VALIDATION_PREFIX}.html"
        generate_html_report(report, html_path, validation=True)
        return html_path
