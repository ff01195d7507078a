"""Command-line interface for suite-doctor."""
