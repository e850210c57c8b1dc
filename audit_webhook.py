"""
GritAudit - Spreadsheet Webhook
Best-effort push of one summary row per page to a spreadsheet webhook
(e.g. a Google Apps Script web app). A failed push is logged and
reported back to the caller; it never raises.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from audit_errors import WebhookError
from audit_models import AuditReport

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 30
KEY_FINDINGS_LIMIT = 2


@dataclass
class WebhookResult:
    """Outcome of a webhook push."""
    success: bool
    status_code: int = 0
    error: str = ""
    skipped: bool = False


def summary_rows(report: AuditReport) -> list[dict]:
    """Flatten the report to one spreadsheet row per page (mobile numbers only)."""
    rows = []
    for page in report.pages:
        scores = page.mobile.scores
        metrics = page.mobile.metrics
        rows.append({
            "date": report.generated_at,
            "url": page.url,
            "perf_mobile": scores.performance,
            "a11y_mobile": scores.accessibility,
            "bp_mobile": scores.best_practices,
            "seo_mobile": scores.seo,
            "lcp_ms": metrics.lcp_ms,
            "cls": metrics.cls,
            "key_findings": " | ".join(
                f"[{f.severity}] {f.type}" for f in page.findings[:KEY_FINDINGS_LIMIT]
            ),
        })
    return rows


class WebhookSink:
    """POSTs JSON payloads to a configured endpoint. An empty URL disables the sink."""

    def __init__(self, url: str, timeout: float = WEBHOOK_TIMEOUT, session=None):
        self.url = url or ""
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def _send(self, payload: dict) -> requests.Response:
        try:
            resp = self.session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise WebhookError(f"Webhook request failed: {e}") from e
        if resp.status_code >= 400:
            raise WebhookError(f"Webhook returned HTTP {resp.status_code}")
        return resp

    def post(self, payload: dict) -> WebhookResult:
        if not self.enabled:
            logger.debug("No webhook URL configured - skipping push")
            return WebhookResult(success=False, skipped=True)
        try:
            resp = self._send(payload)
        except WebhookError as e:
            logger.warning("Spreadsheet webhook error: %s", e)
            return WebhookResult(success=False, error=str(e))
        logger.info("Posted %d summary row(s) to webhook: %s",
                    len(payload.get("rows", [])), resp.status_code)
        return WebhookResult(success=True, status_code=resp.status_code)


def post_summary(report: AuditReport, webhook_url: Optional[str], session=None) -> WebhookResult:
    """Push the report's summary rows as {"rows": [...]}."""
    sink = WebhookSink(webhook_url or "", session=session)
    return sink.post({"rows": summary_rows(report)})
