"""HTML report generator — renders a self-contained page from a JSON report dict."""

from __future__ import annotations

import html
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _esc(value) -> str:
    return html.escape("" if value is None else str(value))


def _stat(value, label: str, css: str = "") -> str:
    return (f'<div class="stat {css}"><div class="value">{_esc(value)}</div>'
            f'<div class="label">{_esc(label)}</div></div>')


def _build_rows(items: list[dict], show_filename: bool = True) -> str:
    rows = []
    for i, item in enumerate(items, 1):
        cells = [f"<td>{i}</td>", f'<td class="url">{_esc(item.get("url"))}</td>']
        if show_filename:
            cells.append(f'<td><code>{_esc(item.get("filename"))}</code></td>')
        detail = ""
        if item.get("error"):
            detail += f'<div class="error-msg">{_esc(item["error"])}</div>'
        details = item.get("details")
        if details:
            detail += (f'<div class="details">Expected: {_esc(details.get("expectedLines"))} lines'
                       f' | Actual: {_esc(details.get("actualLines"))} lines</div>')
        if item.get("similarity") and not detail:
            detail = f'<span class="similarity">{_esc(item["similarity"])}% similar</span>'
        cells.append(f"<td>{detail}</td>")
        rows.append(f"<tr>{''.join(cells)}</tr>")
    return "".join(rows)


def _build_section(title: str, css: str, items: list[dict], show_filename: bool = True) -> str:
    if not items:
        return ""
    filename_head = "<th>Snapshot</th>" if show_filename else ""
    return f'''
  <div class="section">
    <h2>{_esc(title)} <span class="badge {css}">{len(items)}</span></h2>
    <table>
      <thead><tr><th>#</th><th>URL</th>{filename_head}<th>Result</th></tr></thead>
      <tbody>{_build_rows(items, show_filename)}</tbody>
    </table>
  </div>'''


def _capture_body(report: dict) -> tuple[str, str, str]:
    total = report.get("totalUrls", 0)
    ok = report.get("successfulSnapshots", 0)
    failed = report.get("failedSnapshots", 0)
    rate = f"{ok / total * 100:.1f}%" if total else "0.0%"
    status = "pass" if failed == 0 else "fail"
    headline = "All snapshots captured" if failed == 0 else f"{failed} snapshot(s) failed"

    summary = "".join([
        _stat(ok, "Successful", "pass"),
        _stat(failed, "Failed", "fail"),
        _stat(total, "Total URLs"),
        _stat(f'{report.get("durationSeconds", 0)}s', "Duration"),
        _stat(rate, "Success Rate"),
    ])
    sections = (
        _build_section("Failed Snapshots", "fail", report.get("failedUrls", []), show_filename=False)
        + _build_section("Captured Snapshots", "pass", report.get("successfulUrls", []))
    )
    return status, headline, f'<div class="summary">{summary}</div>{sections}'


def _validation_body(report: dict) -> tuple[str, str, str]:
    issues = (report.get("failedValidations", 0) + report.get("missingSnapshots", 0)
              + report.get("errors", 0))
    status = "pass" if issues == 0 else "fail"
    headline = ("All snapshots validated successfully" if issues == 0
                else f"{issues} issue(s) found")

    summary = "".join([
        _stat(report.get("passedValidations", 0), "Passed", "pass"),
        _stat(report.get("failedValidations", 0), "Failed", "fail"),
        _stat(report.get("missingSnapshots", 0), "Missing", "missing"),
        _stat(report.get("errors", 0), "Errors", "error"),
        _stat(report.get("totalUrls", 0), "Total URLs"),
        _stat(f'{report.get("successRate", "0.00")}%', "Success Rate"),
    ])
    sections = (
        _build_section("Failed Validations", "fail", report.get("failed", []))
        + _build_section("Missing Snapshots", "missing", report.get("missing", []))
        + _build_section("Errors", "error", report.get("errorDetails", []))
        + _build_section("Passed Validations", "pass", report.get("passed", []))
    )
    return status, headline, f'<div class="summary">{summary}</div>{sections}'


def render_html_report(report: dict, validation: bool) -> str:
    """Build the full HTML document for a capture or validation report."""
    if validation:
        status, headline, body = _validation_body(report)
        title = "Snapshot Validation Report"
        speed = f'{report.get("speedValidationsPerSecond", "0.00")} validations/sec'
    else:
        status, headline, body = _capture_body(report)
        title = "Snapshot Capture Report"
        speed = f'{report.get("speedSnapshotsPerSecond", "0.00")} snapshots/sec'

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{_esc(title)}</title>
<style>
  :root {{ --pass: #22c55e; --fail: #ef4444; --missing: #eab308; --error: #f97316; --bg: #f8fafc; --card: white; --border: #e2e8f0; --text: #1e293b; --muted: #64748b; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.6; padding: 1.5rem; }}
  .container {{ max-width: 1200px; margin: 0 auto; }}
  .header {{ border-radius: 8px; padding: 1.5rem; color: white; margin-bottom: 1.5rem; }}
  .header.pass {{ background: var(--pass); }}
  .header.fail {{ background: var(--fail); }}
  .header h1 {{ font-size: 1.8rem; }}
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(140px, 1fr)); gap: 0.8rem; margin-bottom: 1.5rem; }}
  .stat {{ background: var(--card); border-radius: 8px; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); text-align: center; }}
  .stat .value {{ font-size: 1.8rem; font-weight: 700; }}
  .stat .label {{ font-size: 0.8rem; color: var(--muted); }}
  .stat.pass .value {{ color: var(--pass); }}
  .stat.fail .value {{ color: var(--fail); }}
  .stat.missing .value {{ color: var(--missing); }}
  .stat.error .value {{ color: var(--error); }}
  .badge {{ display: inline-block; padding: 0.15rem 0.55rem; border-radius: 9999px; font-size: 0.75rem; font-weight: 600; }}
  .badge.pass {{ background: #dcfce7; color: #166534; }}
  .badge.fail {{ background: #fecaca; color: #991b1b; }}
  .badge.missing {{ background: #fef9c3; color: #854d0e; }}
  .badge.error {{ background: #fed7aa; color: #9a3412; }}
  .section {{ background: var(--card); border-radius: 8px; padding: 1rem; margin-bottom: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.08); }}
  .section h2 {{ font-size: 1.1rem; margin-bottom: 0.6rem; }}
  table {{ width: 100%; border-collapse: collapse; font-size: 0.88rem; }}
  th, td {{ text-align: left; padding: 0.45rem 0.6rem; border-bottom: 1px solid var(--border); vertical-align: top; }}
  th {{ color: var(--muted); font-weight: 600; }}
  td.url {{ word-break: break-all; }}
  code {{ background: #f1f5f9; padding: 0.1rem 0.3rem; border-radius: 3px; font-size: 0.8rem; }}
  .error-msg {{ color: var(--fail); }}
  .details {{ color: var(--muted); font-size: 0.8rem; }}
  .similarity {{ color: var(--pass); }}
  .footer {{ color: var(--muted); font-size: 0.8rem; text-align: center; margin-top: 1.5rem; }}
</style>
</head>
<body>
<div class="container">
  <div class="header {status}">
    <h1>{_esc(title)}</h1>
    <p>{_esc(headline)}</p>
  </div>
  {body}
  <p class="footer">Generated: {_esc(report.get("timestamp"))} &middot; Duration: {_esc(report.get("durationSeconds"))}s &middot; Speed: {_esc(speed)}</p>
</div>
</body>
</html>'''


def generate_html_report(report: dict, output_path: Path, validation: bool) -> None:
    """Write the HTML view of a JSON report dict."""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render_html_report(report, validation))
    logger.debug("Wrote HTML report to %s", output_path)
