"""
GritAudit - CLI Runner
Audits each configured page (mobile + desktop Lighthouse scores and an
HTML scan, run side by side), derives findings, and writes
out/gritaudit-report.json and out/gritaudit-report.html. Optionally pushes
a summary to a spreadsheet webhook.

Usage:
    python run_audit.py [url ...] [--pages-file FILE] [--output-dir DIR]
                        [--scorer lighthouse|psi] [--webhook-url URL | --no-webhook] [--open]
"""

import argparse
import logging
import os
import sys
import time
import webbrowser
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from dotenv import load_dotenv

from audit_config import SCORERS, AuditConfig, load_pages_file
from audit_models import AuditReport, PageRecord
from audit_report import NO_FINDINGS_TEXT, finding_lines, format_finding_line, write_reports
from audit_rules import prioritize_findings
from audit_scanner import PageScanner
from audit_scorer import PROFILE_DESKTOP, PROFILE_MOBILE, build_scorer
from audit_webhook import post_summary

logger = logging.getLogger("gritaudit")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AuditRunner:
    """Runs the per-page pipeline over the configured pages and assembles the report.

    Pages are processed one after another. Within a page the mobile score,
    desktop score and HTML scan run concurrently and are all awaited before
    findings are derived. Any failure aborts the whole run.
    """

    def __init__(self, config: AuditConfig, scorer=None, scanner=None, clock=_now_iso):
        self.config = config
        self.scorer = scorer or build_scorer(config)
        self.scanner = scanner or PageScanner(timeout=config.request_timeout)
        self.clock = clock

    def audit_page(self, url: str) -> PageRecord:
        with ThreadPoolExecutor(max_workers=3) as executor:
            mobile_future = executor.submit(self.scorer.score, url, PROFILE_MOBILE)
            desktop_future = executor.submit(self.scorer.score, url, PROFILE_DESKTOP)
            scan_future = executor.submit(self.scanner.scan, url)

            mobile = mobile_future.result()
            desktop = desktop_future.result()
            scan = scan_future.result()

        return PageRecord(
            url=url,
            mobile=mobile,
            desktop=desktop,
            scan=scan,
            findings=tuple(prioritize_findings(mobile, scan)),
        )

    def run(self) -> AuditReport:
        generated_at = self.clock()
        pages = []
        for url in self.config.pages:
            logger.info("Auditing: %s", url)
            pages.append(self.audit_page(url))
        return AuditReport(generated_at=generated_at, pages=tuple(pages))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GritAudit - weekly site performance / SEO audit")
    parser.add_argument("urls", nargs="*",
                        help="Page URLs to audit (default: GRITAUDIT_PAGES or the built-in list)")
    parser.add_argument("--pages-file",
                        help="Text file with one page URL per line")
    parser.add_argument("--output-dir",
                        help="Directory for the JSON and HTML reports (default: out)")
    parser.add_argument("--scorer", choices=SCORERS,
                        help="Scoring backend: local Lighthouse CLI or PageSpeed Insights API")
    webhook = parser.add_mutually_exclusive_group()
    webhook.add_argument("--webhook-url",
                         help="Spreadsheet webhook URL (default: GS_WEBHOOK_URL)")
    webhook.add_argument("--no-webhook", action="store_true",
                         help="Skip the spreadsheet webhook even if GS_WEBHOOK_URL is set")
    parser.add_argument("--open", action="store_true",
                        help="Open the HTML report in a browser when done")
    return parser


def _configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _load_config(args, parser: argparse.ArgumentParser) -> AuditConfig:
    try:
        config = AuditConfig.from_env()
        pages = list(args.urls) or None
        if args.pages_file:
            pages = load_pages_file(args.pages_file)
        return config.with_overrides(
            pages=pages,
            output_dir=args.output_dir,
            scorer=args.scorer,
            webhook_url="" if args.no_webhook else args.webhook_url,
        )
    except (ValueError, OSError) as e:
        parser.error(str(e))


def main(argv=None) -> int:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)
    config = _load_config(args, parser)
    _configure_logging(config.log_level)

    print("=" * 70)
    print("  GRITAUDIT")
    print(f"  Pages:   {len(config.pages)}")
    print(f"  Scorer:  {config.scorer}")
    print(f"  Webhook: {'on' if config.webhook_enabled else 'off'}")
    print("=" * 70)

    start_time = time.time()
    try:
        report = AuditRunner(config).run()
        json_path, html_path = write_reports(report, config.output_dir)
    except Exception:
        logger.exception("Audit run failed")
        return 1
    elapsed = time.time() - start_time

    lines = finding_lines(report)
    print()
    for line in lines:
        print("  " + format_finding_line(*line))
    if not lines:
        print(f"  {NO_FINDINGS_TEXT}")

    if config.webhook_enabled:
        post_summary(report, config.webhook_url)

    print()
    print("=" * 70)
    print(f"  AUDIT COMPLETE in {elapsed:.1f}s")
    print(f"  Findings: {sum(len(p.findings) for p in report.pages)} across {len(report.pages)} page(s)")
    print("=" * 70)
    print(f"\n  Reports saved:")
    print(f"    {json_path}")
    print(f"    {html_path}")

    if args.open:
        webbrowser.open(f"file://{os.path.abspath(html_path)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
