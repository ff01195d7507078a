"""suite-doctor: static analysis and refactoring advice for e2e test suites."""

__version__ = "0.1.0"
