"""
GritAudit - Errors
Failures raised by the scorer, the page scanner and the webhook sink.
"""

from typing import Optional


class AuditError(Exception):
    """Base exception for all audit failures."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} ({self.url})"
        return self.message


class ScoringError(AuditError):
    """Lighthouse / PageSpeed scoring failed, or the browser could not be launched."""


class FetchError(AuditError):
    """Network-level failure while fetching a page's HTML."""


class WebhookError(AuditError):
    """Summary push to the spreadsheet webhook failed. Never fatal."""
