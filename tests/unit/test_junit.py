"""Tests for formatters/junit.py."""

from __future__ import annotations

import json
from pathlib import Path
from xml.etree import ElementTree as ET

from evvl.formatters.junit import export_junit_results, export_results_json
from evvl.models.validation import ModelUnderTest, TestResult, TestStatus


class TestExportJunitResults:
    def _make_results(self) -> list[TestResult]:
        return [
            TestResult.for_model(
                ModelUnderTest(provider="openai", model="gpt-4o-mini", label="GPT-4o mini"),
                TestStatus.SUCCESS,
                latency=1250,
                tokens=21,
            ),
            TestResult.for_model(
                ModelUnderTest(provider="openai", model="dall-e-3"),
                TestStatus.FAILED,
                error="Incorrect API key provided",
                status_code=401,
            ),
            TestResult.for_model(
                ModelUnderTest(provider="anthropic", model="claude-3-haiku-20240307"),
                TestStatus.SKIPPED,
            ),
        ]

    def test_creates_xml_file(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        result = export_junit_results(self._make_results(), out)
        assert out.exists()
        assert result["total_tests"] == 3
        assert result["passed"] == 1

    def test_failed_is_failure(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_results(), out)
        root = ET.parse(out).getroot()
        failures = root.findall(".//failure")
        assert len(failures) == 1
        assert failures[0].get("message") == "Incorrect API key provided"
        assert failures[0].get("type") == "http_401"

    def test_skipped_element(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        result = export_junit_results(self._make_results(), out)
        root = ET.parse(out).getroot()
        assert len(root.findall(".//skipped")) == 1
        assert result["skipped"] == 1

    def test_suite_per_provider(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_results(), out, suite_name="Nightly", duration=10.5)
        root = ET.parse(out).getroot()
        assert root.get("name") == "Nightly"
        assert root.get("tests") == "3"
        assert root.get("time") == "10.5"
        assert [s.get("name") for s in root.findall("testsuite")] == ["openai", "anthropic"]

    def test_testcase_time_in_seconds(self, tmp_path: Path):
        out = tmp_path / "results.xml"
        export_junit_results(self._make_results(), out)
        root = ET.parse(out).getroot()
        first = root.find(".//testcase")
        assert first.get("name") == "GPT-4o mini (gpt-4o-mini)"
        assert first.get("time") == "1.25"

    def test_creates_parent_dirs(self, tmp_path: Path):
        out = tmp_path / "reports" / "ci" / "results.xml"
        export_junit_results(self._make_results(), out)
        assert out.exists()


class TestExportResultsJson:
    def test_wire_names_and_summary(self, tmp_path: Path):
        out = tmp_path / "results.json"
        results = TestExportJunitResults()._make_results()
        export_results_json(results, out)

        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["summary"]["passed"] == 1
        assert data["summary"]["avgLatency"] == 1250
        assert data["results"][0]["modelLabel"] == "GPT-4o mini"
        assert data["results"][1]["statusCode"] == 401
