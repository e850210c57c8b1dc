"""Builders for test data."""

from audit_models import Metrics, ScanResult, ScoreReport, Scores


def make_score_report(lcp_ms=1000, cls=0.01, tbt_ms=50, speed_index_ms=1800,
                      performance=90, accessibility=95, best_practices=100, seo=92):
    return ScoreReport(
        scores=Scores(performance=performance, accessibility=accessibility,
                      best_practices=best_practices, seo=seo),
        metrics=Metrics(lcp_ms=lcp_ms, cls=cls, tbt_ms=tbt_ms, speed_index_ms=speed_index_ms),
    )


def make_scan(image_count=0, missing_alt_count=0, lazy_count=0, has_search=False,
              has_add_to_cart=False, has_price=False, has_shipping_text=False, images=()):
    return ScanResult(
        image_count=image_count,
        missing_alt_count=missing_alt_count,
        lazy_count=lazy_count,
        has_search=has_search,
        has_add_to_cart=has_add_to_cart,
        has_price=has_price,
        has_shipping_text=has_shipping_text,
        images=tuple(images),
    )


def make_lhr(performance=0.9, accessibility=0.95, best_practices=1.0, seo=0.92,
             lcp=2100.0, cls=0.02, tbt=120.0, speed_index=2400.0):
    """Minimal Lighthouse result with the categories and audits the scorer reads."""
    return {
        "lighthouseVersion": "12.0.0",
        "categories": {
            "performance": {"score": performance},
            "accessibility": {"score": accessibility},
            "best-practices": {"score": best_practices},
            "seo": {"score": seo},
        },
        "audits": {
            "largest-contentful-paint": {"numericValue": lcp},
            "cumulative-layout-shift": {"numericValue": cls},
            "total-blocking-time": {"numericValue": tbt},
            "speed-index": {"numericValue": speed_index},
        },
    }
