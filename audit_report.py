"""
GritAudit - Report Generator
Produces the JSON artifact and the static HTML report for an AuditReport.
"""

import json
import logging
import os

from audit_models import AuditReport, round_half_up, to_fixed

logger = logging.getLogger(__name__)

JSON_FILENAME = "gritaudit-report.json"
HTML_FILENAME = "gritaudit-report.html"
REPORT_TITLE = "GritAudit Weekly Report"
NO_FINDINGS_TEXT = "No major issues flagged by rules this run."

SUMMARY_COLUMNS = ["URL", "Perf", "A11y", "BP", "SEO", "LCP (ms)", "CLS"]


def generate_json_report(report: AuditReport) -> dict:
    """Machine-readable form of the report, keys in data-model order."""
    return report.to_dict()


def summary_table_rows(report: AuditReport) -> list[list[str]]:
    """One row of display strings per page, mobile scores only."""
    rows = []
    for page in report.pages:
        scores = page.mobile.scores
        metrics = page.mobile.metrics
        rows.append([
            page.url,
            str(scores.performance),
            str(scores.accessibility),
            str(scores.best_practices),
            str(scores.seo),
            str(round_half_up(metrics.lcp_ms or 0)),
            to_fixed(metrics.cls or 0, 3),
        ])
    return rows


def finding_lines(report: AuditReport) -> list[tuple]:
    """All findings across all pages as (severity, url, type, recommendation), in page order."""
    return [
        (f.severity, page.url, f.type, f.recommendation)
        for page in report.pages
        for f in page.findings
    ]


def format_finding_line(severity: str, url: str, type_: str, recommendation: str) -> str:
    return f"[{severity}] {url} — {type_}: {recommendation}"


def generate_html_report(report: AuditReport) -> str:
    """Static single-page HTML report: summary table plus flattened recommendations."""
    header_html = "".join(f"<th>{_esc(c)}</th>" for c in SUMMARY_COLUMNS)

    rows_html = ""
    for row in summary_table_rows(report):
        cells = "".join(f"<td>{_esc(cell)}</td>" for cell in row)
        rows_html += f"\n      <tr>{cells}</tr>"

    items = finding_lines(report)
    if items:
        findings_html = "".join(
            f"\n    <li><b>[{_esc(sev)}]</b> {_esc(url)} — {_esc(type_)}: {_esc(rec)}</li>"
            for sev, url, type_, rec in items
        )
    else:
        findings_html = f"\n    <li>{_esc(NO_FINDINGS_TEXT)}</li>"

    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{REPORT_TITLE}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 24px; }}
    table {{ border-collapse: collapse; width: 100%; margin-top: 12px; }}
    th, td {{ border: 1px solid #ddd; padding: 8px; font-size: 14px; }}
    th {{ background: #f6f6f6; text-align: left; }}
    .small {{ color: #555; font-size: 13px; }}
  </style>
</head>
<body>
  <h1>{REPORT_TITLE}</h1>
  <div class="small">Generated: {_esc(report.generated_at)}</div>

  <h2>Summary Table (Mobile)</h2>
  <table>
    <thead>
      <tr>{header_html}</tr>
    </thead>
    <tbody>{rows_html}
    </tbody>
  </table>

  <h2>Prioritized Recommendations</h2>
  <ul>{findings_html}
  </ul>
</body>
</html>
"""


def write_reports(report: AuditReport, output_dir: str) -> tuple:
    """Write the JSON and HTML reports into output_dir (created if absent). Returns both paths.

    Both documents are rendered and staged as .tmp files before either
    report file is replaced, so a failure leaves no new report behind.
    """
    json_path = os.path.join(output_dir, JSON_FILENAME)
    html_path = os.path.join(output_dir, HTML_FILENAME)
    outputs = [
        (json_path, json.dumps(generate_json_report(report), indent=2)),
        (html_path, generate_html_report(report)),
    ]

    os.makedirs(output_dir, exist_ok=True)
    staged = []
    try:
        for path, text in outputs:
            tmp_path = path + ".tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                staged.append((tmp_path, path))
                f.write(text)
    except OSError:
        for tmp_path, _ in staged:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        raise

    for tmp_path, path in staged:
        os.replace(tmp_path, path)

    logger.info("Reports written to %s", output_dir)
    return json_path, html_path


def _esc(text: str) -> str:
    """Escape HTML special characters."""
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
