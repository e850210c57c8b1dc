"""
GritAudit - Configuration
Page list, output location, scorer backend and webhook endpoint.
Values come from the environment (a .env file is honoured by run_audit.py)
and can be overridden from the command line.
"""

import os
from dataclasses import dataclass, field, replace

DEFAULT_PAGES = (
    "https://gritarmy.com/",
    "https://gritarmy.com/collections/socks",
    "https://gritarmy.com/cart",
    "https://gritarmy.com/products/high-compression-socks-adult",
    "https://gritarmy.com/products/premium-athletic-crew-socks",
    "https://gritarmy.com/products/grit-army-trifecta",
)

SCORER_LIGHTHOUSE = "lighthouse"
SCORER_PSI = "psi"
SCORERS = (SCORER_LIGHTHOUSE, SCORER_PSI)

DEFAULT_OUTPUT_DIR = "out"
DEFAULT_REQUEST_TIMEOUT = 15
DEFAULT_LIGHTHOUSE_TIMEOUT = 180
DEFAULT_PSI_TIMEOUT = 120


@dataclass(frozen=True)
class AuditConfig:
    pages: tuple = DEFAULT_PAGES
    webhook_url: str = ""
    output_dir: str = DEFAULT_OUTPUT_DIR
    scorer: str = SCORER_LIGHTHOUSE
    psi_api_key: str = field(default="", repr=False)
    lighthouse_bin: str = "lighthouse"
    lighthouse_timeout: float = DEFAULT_LIGHTHOUSE_TIMEOUT
    psi_timeout: float = DEFAULT_PSI_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.pages:
            raise ValueError("At least one page URL is required")
        if self.scorer not in SCORERS:
            raise ValueError(f"Unknown scorer {self.scorer!r}; expected one of {', '.join(SCORERS)}")

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.webhook_url)

    def with_overrides(self, **overrides) -> "AuditConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "pages" in changes:
            changes["pages"] = tuple(changes["pages"])
        return replace(self, **changes)

    @classmethod
    def from_env(cls, environ=None) -> "AuditConfig":
        """Build a config from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ

        pages_value = env.get("GRITAUDIT_PAGES", "").strip()
        pages = _split_pages(pages_value) if pages_value else DEFAULT_PAGES

        return cls(
            pages=pages,
            webhook_url=env.get("GS_WEBHOOK_URL", "").strip(),
            output_dir=env.get("GRITAUDIT_OUT_DIR", "").strip() or DEFAULT_OUTPUT_DIR,
            scorer=env.get("GRITAUDIT_SCORER", "").strip().lower() or SCORER_LIGHTHOUSE,
            psi_api_key=env.get("PSI_API_KEY", "").strip(),
            lighthouse_bin=env.get("LIGHTHOUSE_PATH", "").strip() or "lighthouse",
            lighthouse_timeout=float(env.get("LIGHTHOUSE_TIMEOUT", "") or DEFAULT_LIGHTHOUSE_TIMEOUT),
            psi_timeout=float(env.get("PSI_TIMEOUT", "") or DEFAULT_PSI_TIMEOUT),
            request_timeout=float(env.get("REQUEST_TIMEOUT", "") or DEFAULT_REQUEST_TIMEOUT),
            log_level=env.get("LOG_LEVEL", "").strip().upper() or "INFO",
        )


def _split_pages(value: str) -> tuple:
    return tuple(p.strip() for p in value.split(",") if p.strip())


def load_pages_file(path: str) -> tuple:
    """Read page URLs from a text file: one per line, blank and #-comment lines ignored."""
    pages = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#"):
                pages.append(line)
    return tuple(pages)
