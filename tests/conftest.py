"""Shared fixtures for the GritAudit test suite."""

import pytest

from audit_models import AuditReport, Finding, ImageRecord, PageRecord
from tests.helpers import make_scan, make_score_report


@pytest.fixture
def sample_report():
    """Two pages: one with findings, one clean with unmeasured metrics."""
    busy = PageRecord(
        url="https://shop.example.com/products/socks",
        mobile=make_score_report(lcp_ms=4200.4, cls=0.1234, performance=41),
        desktop=make_score_report(),
        scan=make_scan(
            image_count=2, missing_alt_count=1, lazy_count=1,
            has_add_to_cart=True, has_price=True,
            images=[
                ImageRecord(src="/a.jpg", alt="Red socks", width="400", height="300", loading="lazy"),
                ImageRecord(src="/b.jpg"),
            ],
        ),
        findings=(
            Finding("HIGH", "Performance", "Mobile LCP is 4200ms. Target < 2500ms."),
            Finding("MED", "UX / Layout", "Mobile CLS is 0.123. Target < 0.10."),
            Finding("MED", "Accessibility / SEO", "1 images are missing alt text."),
        ),
    )
    clean = PageRecord(
        url="https://shop.example.com/",
        mobile=make_score_report(lcp_ms=None, cls=None),
        desktop=make_score_report(),
        scan=make_scan(),
    )
    return AuditReport(generated_at="2026-10-19T08:00:00.000Z", pages=(busy, clean))
