"""Assertion and response-validation engine for browser-automation tests."""
