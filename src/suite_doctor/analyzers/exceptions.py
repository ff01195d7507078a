"""Exceptions for analysis operations."""


class AnalysisError(Exception):
    """Base exception for all analysis operations."""


class SourceFileError(AnalysisError):
    """Raised when a test file cannot be read or decoded."""


class DiscoveryError(AnalysisError):
    """Raised when the test directory cannot be walked."""


class CheckerError(AnalysisError):
    """Raised when a quality standard checker misbehaves."""


class ApplyError(AnalysisError):
    """Raised when an apply-mode rewrite cannot be completed."""
