from __future__ import annotations

from pathlib import Path
from typing import Sequence

from junitparser import Failure, JUnitXml, TestCase, TestSuite

from assertkit.assertions.base import SoftFailure
from assertkit.assertions.schema import ValidationResult


def _first_line(message: str) -> str:
    return message.splitlines()[0] if message else ""


def _failure(message: str) -> Failure:
    # message attribute holds the first line, the element text holds all of it
    failure = Failure(_first_line(message))
    failure.text = message
    return failure


def soft_failures_suite(name: str, failures: Sequence[SoftFailure]) -> TestSuite:
    """One failed test case per recorded soft failure."""
    suite = TestSuite(name)
    for index, failure in enumerate(failures):
        case = TestCase(f"{index}: {_first_line(failure.message)}")
        case.classname = name
        case.result = _failure(failure.message)
        suite.add_testcase(case)
    if failures:
        suite.timestamp = failures[0].timestamp.isoformat()
    return suite


def validation_suite(name: str, result: ValidationResult) -> TestSuite:
    """A single passing case for valid data, otherwise one case per error."""
    suite = TestSuite(name)
    if result.is_valid:
        case = TestCase("schema")
        case.classname = name
        suite.add_testcase(case)
        return suite

    for index, error in enumerate(result.errors):
        case = TestCase(f"{index}: {error}")
        case.classname = name
        case.result = _failure(error)
        suite.add_testcase(case)
    return suite


def write_junit(junit_path: Path, suites: Sequence[TestSuite]) -> Path:
    """Write the suites to ``junit_path`` and return it."""
    xml = JUnitXml()
    for suite in suites:
        # Use append (not +=) to preserve properties and timestamps
        xml.append(suite)

    junit_path.parent.mkdir(parents=True, exist_ok=True)
    xml.write(str(junit_path), pretty=True)
    return junit_path
