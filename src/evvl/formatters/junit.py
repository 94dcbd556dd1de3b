"""JUnit XML and JSON export of validation results for CI/CD integration."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from xml.dom import minidom
from xml.etree import ElementTree as ET

from ..models.validation import TestResult, TestStatus, summarize


def export_junit_results(
    results: list[TestResult],
    output_path: Path,
    suite_name: str = "Evvl API validation",
    duration: float = 0,
) -> dict:
    """Export validation results as JUnit XML, one testsuite per provider.

    Failed models become ``<failure>`` elements; skipped and never-run models
    become ``<skipped>``.

    Returns:
        Dict with: path, total_tests, failures, skipped, passed.
    """
    testsuites = ET.Element("testsuites")
    testsuites.set("name", suite_name)
    testsuites.set("timestamp", datetime.now().strftime("%Y-%m-%dT%H:%M:%S"))

    by_provider: dict[str, list[TestResult]] = {}
    for result in results:
        by_provider.setdefault(result.provider, []).append(result)

    total_tests = 0
    total_failures = 0
    total_skipped = 0

    for provider, provider_results in by_provider.items():
        testsuite = ET.SubElement(testsuites, "testsuite")
        testsuite.set("name", provider)
        testsuite.set("tests", str(len(provider_results)))

        suite_failures = 0
        suite_skipped = 0

        for result in provider_results:
            total_tests += 1

            testcase = ET.SubElement(testsuite, "testcase")
            testcase.set("name", f"{result.model_label or result.model} ({result.model})")
            testcase.set("classname", f"{provider}.{result.type}")
            if result.latency is not None:
                testcase.set("time", str(round(result.latency / 1000, 3)))

            if result.status == TestStatus.FAILED:
                suite_failures += 1
                failure = ET.SubElement(testcase, "failure")
                failure.set("message", result.error or "failed")
                failure.set("type", f"http_{result.status_code}" if result.status_code else "error")
                failure.text = "\n".join(
                    part
                    for part in (
                        f"Provider: {provider}",
                        f"Model: {result.model}",
                        f"Status: {result.status_code}" if result.status_code else "",
                        f"\nError:\n{result.error}" if result.error else "",
                    )
                    if part
                )
            elif result.status != TestStatus.SUCCESS:
                suite_skipped += 1
                skipped = ET.SubElement(testcase, "skipped")
                skipped.set("message", f"not run ({result.status})")

        total_failures += suite_failures
        total_skipped += suite_skipped
        testsuite.set("failures", str(suite_failures))
        testsuite.set("errors", "0")
        testsuite.set("skipped", str(suite_skipped))

    testsuites.set("tests", str(total_tests))
    testsuites.set("failures", str(total_failures))
    testsuites.set("errors", "0")
    testsuites.set("skipped", str(total_skipped))
    if duration > 0:
        testsuites.set("time", str(round(duration, 2)))

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Pretty-print XML
    rough = ET.tostring(testsuites, encoding="unicode")
    dom = minidom.parseString(rough)
    xml_str = dom.toprettyxml(indent="  ", encoding="UTF-8")
    output_path.write_bytes(xml_str)

    return {
        "path": str(output_path),
        "total_tests": total_tests,
        "failures": total_failures,
        "skipped": total_skipped,
        "passed": total_tests - total_failures - total_skipped,
    }


def export_results_json(results: list[TestResult], output_path: Path) -> Path:
    """Write results plus a summary as JSON using the wire field names."""
    payload = {
        "generatedAt": datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
        "summary": summarize(results).model_dump(by_alias=True),
        "results": [r.model_dump(by_alias=True, exclude_none=True) for r in results],
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return output_path
