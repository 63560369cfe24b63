"""JUnit XML export for assertion results."""
