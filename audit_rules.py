"""
GritAudit - Findings Rules
Turns one page's mobile score report and scan result into a short,
prioritized list of findings.

Each rule is a plain function (mobile, scan) -> Finding | None. Rules run
in FINDING_RULES order and the output keeps that order; nothing is
re-sorted by severity. Rules are independent of each other and of any
previous call.
"""

import math

from audit_models import (
    SEVERITY_HIGH, SEVERITY_LOW, SEVERITY_MED,
    Finding, ScanResult, ScoreReport, round_half_up, to_fixed,
)

LCP_LIMIT_MS = 3500
LCP_TARGET_MS = 2500
CLS_LIMIT = 0.1
MANY_IMAGES = 25
MIN_LAZY_RATIO = 0.5


def check_lcp(mobile: ScoreReport, scan: ScanResult):
    lcp = mobile.metrics.lcp_ms
    if lcp is None or lcp <= LCP_LIMIT_MS:
        return None
    return Finding(
        severity=SEVERITY_HIGH,
        type="Performance",
        recommendation=(
            f"Mobile LCP is {round_half_up(lcp)}ms. Compress/resize above-the-fold images "
            f"and reduce heavy sections. Target < {LCP_TARGET_MS}ms."
        ),
    )


def check_cls(mobile: ScoreReport, scan: ScanResult):
    cls = mobile.metrics.cls
    if cls is None or cls <= CLS_LIMIT:
        return None
    return Finding(
        severity=SEVERITY_MED,
        type="UX / Layout",
        recommendation=(
            f"Mobile CLS is {to_fixed(cls, 3)}. Ensure images have width/height set; avoid late-loading "
            f"banners/popups pushing content. Target < {CLS_LIMIT:.2f}."
        ),
    )


def check_missing_alt(mobile: ScoreReport, scan: ScanResult):
    if scan.missing_alt_count <= 0:
        return None
    return Finding(
        severity=SEVERITY_MED,
        type="Accessibility / SEO",
        recommendation=(
            f"{scan.missing_alt_count} images are missing alt text. Add descriptive alt text "
            f"(especially on product/collection images)."
        ),
    )


def check_lazy_loading(mobile: ScoreReport, scan: ScanResult):
    if scan.image_count <= MANY_IMAGES:
        return None
    if scan.lazy_count >= math.floor(scan.image_count * MIN_LAZY_RATIO):
        return None
    return Finding(
        severity=SEVERITY_MED,
        type="Images",
        recommendation=(
            f"Many images ({scan.image_count}) but only {scan.lazy_count} lazy-loaded. "
            f"Consider enabling lazy-loading for below-the-fold images."
        ),
    )


def check_trust_copy(mobile: ScoreReport, scan: ScanResult):
    if not scan.has_add_to_cart or scan.has_shipping_text:
        return None
    return Finding(
        severity=SEVERITY_LOW,
        type="Trust / Conversion",
        recommendation=(
            "Page appears to have Add-to-Cart but little visible shipping/returns/guarantee text. "
            "Consider adding a short trust row near the ATC (shipping + guarantee)."
        ),
    )


FINDING_RULES = (
    check_lcp,
    check_cls,
    check_missing_alt,
    check_lazy_loading,
    check_trust_copy,
)


def prioritize_findings(mobile: ScoreReport, scan: ScanResult) -> list[Finding]:
    """Run every rule once, in order, and keep the ones that fired."""
    findings = []
    for rule in FINDING_RULES:
        finding = rule(mobile, scan)
        if finding is not None:
            findings.append(finding)
    return findings
