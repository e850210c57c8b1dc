"""
GritAudit - Data Model
Score reports, scan results, findings and the aggregate audit report.

Every record serializes to the camelCase JSON layout written to
gritaudit-report.json and can be rebuilt from it with from_dict().
"""

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, like a browser's Math.round."""
    return int(math.floor(value + 0.5))


def to_fixed(value: float, places: int) -> str:
    """Fixed-point text with ties rounded up, like a browser's Number.toFixed."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


# =============================================================================
# SCORING
# =============================================================================

@dataclass(frozen=True)
class Scores:
    performance: int = 0
    accessibility: int = 0
    best_practices: int = 0
    seo: int = 0

    def to_dict(self) -> dict:
        return {
            "performance": self.performance,
            "accessibility": self.accessibility,
            "bestPractices": self.best_practices,
            "seo": self.seo,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Scores":
        return cls(
            performance=data.get("performance", 0),
            accessibility=data.get("accessibility", 0),
            best_practices=data.get("bestPractices", 0),
            seo=data.get("seo", 0),
        )


@dataclass(frozen=True)
class Metrics:
    """Lab metrics. None means "not measured" and is distinct from 0."""
    lcp_ms: Optional[float] = None
    cls: Optional[float] = None
    tbt_ms: Optional[float] = None
    speed_index_ms: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "lcp_ms": self.lcp_ms,
            "cls": self.cls,
            "tbt_ms": self.tbt_ms,
            "speedIndex_ms": self.speed_index_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Metrics":
        return cls(
            lcp_ms=data.get("lcp_ms"),
            cls=data.get("cls"),
            tbt_ms=data.get("tbt_ms"),
            speed_index_ms=data.get("speedIndex_ms"),
        )


@dataclass(frozen=True)
class ScoreReport:
    scores: Scores = field(default_factory=Scores)
    metrics: Metrics = field(default_factory=Metrics)

    def to_dict(self) -> dict:
        return {"scores": self.scores.to_dict(), "metrics": self.metrics.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "ScoreReport":
        return cls(
            scores=Scores.from_dict(data.get("scores", {})),
            metrics=Metrics.from_dict(data.get("metrics", {})),
        )


# =============================================================================
# PAGE SCAN
# =============================================================================

@dataclass(frozen=True)
class ImageRecord:
    src: str = ""
    alt: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    loading: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "src": self.src,
            "alt": self.alt,
            "width": self.width,
            "height": self.height,
            "loading": self.loading,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ImageRecord":
        return cls(
            src=data.get("src", ""),
            alt=data.get("alt"),
            width=data.get("width"),
            height=data.get("height"),
            loading=data.get("loading"),
        )


@dataclass(frozen=True)
class ScanResult:
    image_count: int = 0
    missing_alt_count: int = 0
    lazy_count: int = 0
    has_search: bool = False
    has_add_to_cart: bool = False
    has_price: bool = False
    has_shipping_text: bool = False
    images: tuple = ()  # first MAX_IMAGE_RECORDS ImageRecords only

    def to_dict(self) -> dict:
        return {
            "imageCount": self.image_count,
            "missingAltCount": self.missing_alt_count,
            "lazyCount": self.lazy_count,
            "hasSearch": self.has_search,
            "hasAddToCart": self.has_add_to_cart,
            "hasPrice": self.has_price,
            "hasShippingText": self.has_shipping_text,
            "images": [img.to_dict() for img in self.images],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScanResult":
        return cls(
            image_count=data.get("imageCount", 0),
            missing_alt_count=data.get("missingAltCount", 0),
            lazy_count=data.get("lazyCount", 0),
            has_search=data.get("hasSearch", False),
            has_add_to_cart=data.get("hasAddToCart", False),
            has_price=data.get("hasPrice", False),
            has_shipping_text=data.get("hasShippingText", False),
            images=tuple(ImageRecord.from_dict(i) for i in data.get("images", [])),
        )


# =============================================================================
# FINDINGS AND THE AGGREGATE REPORT
# =============================================================================

SEVERITY_HIGH = "HIGH"
SEVERITY_MED = "MED"
SEVERITY_LOW = "LOW"
SEVERITIES = (SEVERITY_HIGH, SEVERITY_MED, SEVERITY_LOW)


@dataclass(frozen=True)
class Finding:
    severity: str  # "HIGH", "MED", "LOW"
    type: str
    recommendation: str

    def to_dict(self) -> dict:
        return {"severity": self.severity, "type": self.type, "recommendation": self.recommendation}

    @classmethod
    def from_dict(cls, data: dict) -> "Finding":
        return cls(severity=data["severity"], type=data["type"], recommendation=data["recommendation"])


@dataclass(frozen=True)
class PageRecord:
    url: str
    mobile: ScoreReport
    desktop: ScoreReport
    scan: ScanResult
    findings: tuple = ()

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "mobile": self.mobile.to_dict(),
            "desktop": self.desktop.to_dict(),
            "scan": self.scan.to_dict(),
            "findings": [f.to_dict() for f in self.findings],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PageRecord":
        return cls(
            url=data["url"],
            mobile=ScoreReport.from_dict(data.get("mobile", {})),
            desktop=ScoreReport.from_dict(data.get("desktop", {})),
            scan=ScanResult.from_dict(data.get("scan", {})),
            findings=tuple(Finding.from_dict(f) for f in data.get("findings", [])),
        )


@dataclass(frozen=True)
class AuditReport:
    generated_at: str
    pages: tuple = ()

    def to_dict(self) -> dict:
        return {
            "generatedAt": self.generated_at,
            "pages": [p.to_dict() for p in self.pages],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditReport":
        return cls(
            generated_at=data["generatedAt"],
            pages=tuple(PageRecord.from_dict(p) for p in data.get("pages", [])),
        )
