"""Assertion engines for browser-automation tests."""

from assertkit.assertions.api import ApiAssertions
from assertkit.assertions.base import (
    AssertionFailedError,
    BaseAssertions,
    FailureKind,
    SoftAssertionsError,
    SoftFailure,
)
from assertkit.assertions.factory import AssertionFactory, Check
from assertkit.assertions.schema import ValidationResult, validate_schema
from assertkit.assertions.ui import UIAssertions

__all__ = [
    "ApiAssertions",
    "AssertionFactory",
    "AssertionFailedError",
    "BaseAssertions",
    "Check",
    "FailureKind",
    "SoftAssertionsError",
    "SoftFailure",
    "UIAssertions",
    "ValidationResult",
    "validate_schema",
]
