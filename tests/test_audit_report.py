"""Tests for the JSON and HTML report renderers."""

import json
import os
from unittest.mock import patch

import pytest

from audit_models import AuditReport, Finding, PageRecord
from audit_report import (
    HTML_FILENAME, JSON_FILENAME, NO_FINDINGS_TEXT,
    finding_lines, format_finding_line, generate_html_report, generate_json_report,
    summary_table_rows, write_reports,
)
from tests.helpers import make_scan, make_score_report


class TestJsonReport:

    def test_round_trip(self, sample_report):
        text = json.dumps(generate_json_report(sample_report), indent=2)
        assert AuditReport.from_dict(json.loads(text)) == sample_report

    def test_key_order_and_names(self, sample_report):
        data = generate_json_report(sample_report)
        assert list(data) == ["generatedAt", "pages"]
        page = data["pages"][0]
        assert list(page) == ["url", "mobile", "desktop", "scan", "findings"]
        assert list(page["mobile"]["scores"]) == ["performance", "accessibility", "bestPractices", "seo"]
        assert list(page["mobile"]["metrics"]) == ["lcp_ms", "cls", "tbt_ms", "speedIndex_ms"]
        assert list(page["scan"]) == [
            "imageCount", "missingAltCount", "lazyCount", "hasSearch",
            "hasAddToCart", "hasPrice", "hasShippingText", "images",
        ]
        assert list(page["findings"][0]) == ["severity", "type", "recommendation"]

    def test_unmeasured_metrics_serialize_as_null(self, sample_report):
        data = generate_json_report(sample_report)
        assert data["pages"][1]["mobile"]["metrics"]["lcp_ms"] is None
        assert data["pages"][0]["scan"]["images"][1]["alt"] is None


class TestHtmlParts:

    def test_summary_rows(self, sample_report):
        rows = summary_table_rows(sample_report)
        assert rows[0] == ["https://shop.example.com/products/socks", "41", "95", "100", "92", "4200", "0.123"]

    def test_summary_row_defaults_for_unmeasured(self, sample_report):
        rows = summary_table_rows(sample_report)
        assert rows[1][-2:] == ["0", "0.000"]

    def test_summary_cls_tie_rounds_up(self):
        page = PageRecord(url="https://a.example/", mobile=make_score_report(cls=0.0625),
                          desktop=make_score_report(), scan=make_scan())
        rows = summary_table_rows(AuditReport(generated_at="now", pages=(page,)))
        assert rows[0][-1] == "0.063"

    def test_finding_lines_flatten_in_page_order(self, sample_report):
        lines = finding_lines(sample_report)
        assert len(lines) == 3
        assert lines[0] == ("HIGH", "https://shop.example.com/products/socks", "Performance",
                            "Mobile LCP is 4200ms. Target < 2500ms.")
        assert [line[0] for line in lines] == ["HIGH", "MED", "MED"]

    def test_format_finding_line(self):
        line = format_finding_line("LOW", "https://a.example/", "Images", "Lazy-load more.")
        assert line == "[LOW] https://a.example/ — Images: Lazy-load more."


class TestHtmlReport:

    def test_contains_rows_and_findings(self, sample_report):
        html = generate_html_report(sample_report)
        assert "<title>GritAudit Weekly Report</title>" in html
        assert "Generated: 2026-10-19T08:00:00.000Z" in html
        assert html.count("<tr><td>") == 2
        assert html.count("<li>") == 3
        assert "<b>[HIGH]</b> https://shop.example.com/products/socks — Performance:" in html
        assert NO_FINDINGS_TEXT not in html

    def test_placeholder_when_no_findings(self):
        page = PageRecord(url="https://a.example/", mobile=make_score_report(),
                          desktop=make_score_report(), scan=make_scan())
        html = generate_html_report(AuditReport(generated_at="now", pages=(page,)))
        assert html.count("<li>") == 1
        assert f"<li>{NO_FINDINGS_TEXT}</li>" in html

    def test_text_is_escaped(self):
        page = PageRecord(
            url="https://a.example/?q=<script>",
            mobile=make_score_report(), desktop=make_score_report(), scan=make_scan(),
            findings=(Finding("LOW", "Trust & Conversion", 'Say "hi"'),),
        )
        html = generate_html_report(AuditReport(generated_at="now", pages=(page,)))
        assert "<script>" not in html
        assert "https://a.example/?q=&lt;script&gt;" in html
        assert "Trust &amp; Conversion: Say &quot;hi&quot;" in html


class TestWriteReports:

    def test_writes_both_files(self, sample_report, tmp_path):
        out_dir = tmp_path / "nested" / "out"
        json_path, html_path = write_reports(sample_report, str(out_dir))
        assert json_path == os.path.join(str(out_dir), JSON_FILENAME)
        assert html_path == os.path.join(str(out_dir), HTML_FILENAME)
        with open(json_path, encoding="utf-8") as f:
            assert AuditReport.from_dict(json.load(f)) == sample_report
        with open(html_path, encoding="utf-8") as f:
            assert f.read().startswith("<!doctype html>")

    def test_render_failure_writes_nothing(self, sample_report, tmp_path):
        out_dir = tmp_path / "out"
        with patch("audit_report.generate_html_report", side_effect=RuntimeError("template broke")):
            with pytest.raises(RuntimeError):
                write_reports(sample_report, str(out_dir))
        assert not out_dir.exists()

    def test_html_write_failure_leaves_no_json(self, sample_report, tmp_path):
        (tmp_path / (HTML_FILENAME + ".tmp")).mkdir()
        with pytest.raises(OSError):
            write_reports(sample_report, str(tmp_path))
        assert not (tmp_path / JSON_FILENAME).exists()
        assert not (tmp_path / (JSON_FILENAME + ".tmp")).exists()
        assert not (tmp_path / HTML_FILENAME).exists()

    def test_failed_rewrite_keeps_previous_reports(self, sample_report, tmp_path):
        write_reports(sample_report, str(tmp_path))
        before = (tmp_path / JSON_FILENAME).read_text(encoding="utf-8")
        changed = AuditReport(generated_at="2026-10-26T08:00:00.000Z", pages=sample_report.pages)
        (tmp_path / (HTML_FILENAME + ".tmp")).mkdir()
        with pytest.raises(OSError):
            write_reports(changed, str(tmp_path))
        assert (tmp_path / JSON_FILENAME).read_text(encoding="utf-8") == before
