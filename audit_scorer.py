"""
GritAudit - Scorer
Runs Lighthouse against one URL under a mobile or desktop profile and
normalizes the result into a ScoreReport.

Two backends:
  LighthouseScorer  local Lighthouse CLI driving a Playwright-launched Chromium
  PageSpeedScorer   Google's PageSpeed Insights API (Lighthouse run remotely)
"""

import json
import logging
import os
import subprocess
import tempfile
import time
from contextlib import contextmanager

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from audit_config import DEFAULT_PSI_TIMEOUT, SCORER_LIGHTHOUSE, SCORER_PSI
from audit_errors import ScoringError
from audit_models import Metrics, ScoreReport, Scores, round_half_up

logger = logging.getLogger(__name__)

PROFILE_MOBILE = "mobile"
PROFILE_DESKTOP = "desktop"
PROFILES = (PROFILE_MOBILE, PROFILE_DESKTOP)

CATEGORIES = ("performance", "accessibility", "best-practices", "seo")
CHROME_FLAGS = ["--no-sandbox", "--disable-gpu", "--disable-dev-shm-usage"]

PSI_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
DEVTOOLS_PORT_FILE = "DevToolsActivePort"
DEVTOOLS_PORT_WAIT = 10


# =============================================================================
# LIGHTHOUSE RESULT NORMALIZATION
# =============================================================================

def _category_score(lhr: dict, key: str) -> int:
    category = lhr.get("categories", {}).get(key) or {}
    return round_half_up((category.get("score") or 0) * 100)


def _audit_value(lhr: dict, key: str):
    audit = lhr.get("audits", {}).get(key) or {}
    return audit.get("numericValue")


def normalize_lhr(lhr: dict) -> ScoreReport:
    """Reduce a Lighthouse result (LHR) to the four category scores and four lab metrics.

    Missing category scores become 0. Missing metrics stay None so that an
    unmeasured metric is never confused with a measured 0.
    """
    return ScoreReport(
        scores=Scores(
            performance=_category_score(lhr, "performance"),
            accessibility=_category_score(lhr, "accessibility"),
            best_practices=_category_score(lhr, "best-practices"),
            seo=_category_score(lhr, "seo"),
        ),
        metrics=Metrics(
            lcp_ms=_audit_value(lhr, "largest-contentful-paint"),
            cls=_audit_value(lhr, "cumulative-layout-shift"),
            tbt_ms=_audit_value(lhr, "total-blocking-time"),
            speed_index_ms=_audit_value(lhr, "speed-index"),
        ),
    )


def _raise_for_runtime_error(lhr: dict, url: str):
    """Lighthouse reports an unreachable page as a runtimeError, not a failed exit."""
    err = lhr.get("runtimeError")
    if err:
        raise ScoringError(
            f"Lighthouse could not audit the page: {err.get('code', 'UNKNOWN')} {err.get('message', '')}".strip(),
            url,
        )


def _check_profile(profile: str):
    if profile not in PROFILES:
        raise ValueError(f"Unknown device profile {profile!r}; expected one of {', '.join(PROFILES)}")


# =============================================================================
# LOCAL LIGHTHOUSE
# =============================================================================

def read_devtools_port(user_data_dir: str, wait: float = DEVTOOLS_PORT_WAIT) -> int:
    """Port Chromium chose for --remote-debugging-port=0, from its DevToolsActivePort file."""
    path = os.path.join(user_data_dir, DEVTOOLS_PORT_FILE)
    deadline = time.monotonic() + wait
    while True:
        try:
            with open(path, "r", encoding="utf-8") as f:
                first_line = f.readline().strip()
            if first_line:
                return int(first_line)
        except (FileNotFoundError, ValueError):
            # Not written (or half written) yet
            pass
        if time.monotonic() >= deadline:
            raise ScoringError(f"Browser did not report a DevTools port within {wait}s")
        time.sleep(0.1)


@contextmanager
def launch_browser():
    """Headless Chromium with its own profile and DevTools port. Yields the port.

    The browser picks its own free port. Closed on every exit path.
    """
    with tempfile.TemporaryDirectory(prefix="gritaudit-chrome-") as user_data_dir:
        try:
            pw = sync_playwright().start()
        except PlaywrightError as e:
            raise ScoringError(f"Could not start Playwright: {e}") from e
        try:
            try:
                context = pw.chromium.launch_persistent_context(
                    user_data_dir,
                    headless=True,
                    args=["--remote-debugging-port=0", *CHROME_FLAGS],
                )
            except PlaywrightError as e:
                raise ScoringError(f"Could not launch headless browser: {e}") from e
            try:
                port = read_devtools_port(user_data_dir)
                logger.debug("Browser up on DevTools port %s", port)
                yield port
            finally:
                context.close()
                logger.debug("Browser profile %s closed", user_data_dir)
        finally:
            pw.stop()


class LighthouseScorer:
    """Scores a URL with the Lighthouse CLI attached to a fresh browser per call."""

    def __init__(self, lighthouse_bin: str = "lighthouse", timeout: float = 180,
                 browser_factory=launch_browser):
        self.lighthouse_bin = lighthouse_bin
        self.timeout = timeout
        self.browser_factory = browser_factory

    def build_command(self, url: str, profile: str, port: int) -> list:
        cmd = [
            self.lighthouse_bin,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            f"--only-categories={','.join(CATEGORIES)}",
            "--quiet",
            "--no-enable-error-reporting",
        ]
        if profile == PROFILE_DESKTOP:
            cmd.append("--preset=desktop")
        else:
            cmd.append("--form-factor=mobile")
        return cmd

    def _run_lighthouse(self, url: str, profile: str, port: int) -> dict:
        cmd = self.build_command(url, profile, port)
        logger.debug("Running Lighthouse: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise ScoringError(f"Lighthouse CLI not found at {self.lighthouse_bin!r}", url) from e
        except subprocess.TimeoutExpired as e:
            raise ScoringError(f"Lighthouse timed out after {self.timeout}s", url) from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()[-500:]
            raise ScoringError(f"Lighthouse exited with code {proc.returncode}: {stderr}", url)

        try:
            return json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise ScoringError(f"Lighthouse produced unreadable JSON: {e}", url) from e

    def score(self, url: str, profile: str) -> ScoreReport:
        _check_profile(profile)
        logger.info("Lighthouse %s: %s", profile, url)
        with self.browser_factory() as port:
            lhr = self._run_lighthouse(url, profile, port)
        _raise_for_runtime_error(lhr, url)
        return normalize_lhr(lhr)


# =============================================================================
# PAGESPEED INSIGHTS
# =============================================================================

class PageSpeedScorer:
    """Scores a URL through the PageSpeed Insights v5 API. No local browser."""

    def __init__(self, api_key: str = "", timeout: float = DEFAULT_PSI_TIMEOUT, session=None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def score(self, url: str, profile: str) -> ScoreReport:
        _check_profile(profile)
        params = {
            "url": url,
            "strategy": profile.upper(),
            "category": [c.upper().replace("-", "_") for c in CATEGORIES],
        }
        if self.api_key:
            params["key"] = self.api_key

        logger.info("PageSpeed Insights %s: %s", profile, url)
        try:
            resp = self.session.get(PSI_ENDPOINT, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ScoringError(f"PageSpeed Insights request failed: {e}", url) from e

        if resp.status_code != 200:
            raise ScoringError(f"PageSpeed Insights returned {resp.status_code}", url)

        try:
            data = resp.json()
        except ValueError as e:
            raise ScoringError(f"PageSpeed Insights returned invalid JSON: {e}", url) from e

        lhr = data.get("lighthouseResult")
        if not lhr:
            raise ScoringError("PageSpeed Insights response has no lighthouseResult", url)
        _raise_for_runtime_error(lhr, url)
        return normalize_lhr(lhr)


def build_scorer(config):
    """Pick the scoring backend named by config.scorer."""
    if config.scorer == SCORER_PSI:
        return PageSpeedScorer(api_key=config.psi_api_key, timeout=config.psi_timeout)
    if config.scorer == SCORER_LIGHTHOUSE:
        return LighthouseScorer(lighthouse_bin=config.lighthouse_bin, timeout=config.lighthouse_timeout)
    raise ValueError(f"Unknown scorer {config.scorer!r}")
