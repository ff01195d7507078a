"""Test-file discovery and reading."""

import logging
import os
from pathlib import Path

from suite_doctor.analyzers.exceptions import DiscoveryError, SourceFileError
from suite_doctor.models.block_models import TestFile
from suite_doctor.models.config_models import DEFAULT_TEST_FILE_SUFFIXES
from suite_doctor.models.report_models import FileFailure, PipelineStage

logger = logging.getLogger(__name__)


def detect_newline(raw: str) -> str:
    return "\r\n" if "\r\n" in raw else "\n"


def read_test_file(file_path: str) -> TestFile:
    """Read a test file as UTF-8.

    ``content`` uses "\\n" line endings. The ending found on disk is kept in
    ``newline`` so a rewrite can restore it.

    Raises:
        SourceFileError: If the file cannot be read or decoded.
    """
    try:
        with open(file_path, encoding="utf-8", newline="") as handle:
            raw = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceFileError(f"Cannot read {file_path}: {exc}") from exc
    return TestFile(
        path=file_path,
        content=raw.replace("\r\n", "\n").replace("\r", "\n"),
        newline=detect_newline(raw),
    )


class SuiteIndexer:
    """Finds test files under a directory by naming convention."""

    def __init__(
        self,
        suffixes: tuple[str, ...] = DEFAULT_TEST_FILE_SUFFIXES,
        exclude_dirs: tuple[str, ...] | None = None,
    ):
        self.suffixes = suffixes
        self.exclude_dirs = set(exclude_dirs or ("node_modules", ".git"))

    def is_test_file(self, name: str) -> bool:
        return name.endswith(self.suffixes)

    def discover(self, directory: str) -> tuple[list[str], list[FileFailure]]:
        """Walk ``directory`` and return matching test files in sorted order.

        Subtrees that cannot be listed are skipped and reported as failures.

        Args:
            directory: Root of the test suite.

        Returns:
            Tuple of (absolute file paths, walk failures).

        Raises:
            DiscoveryError: If ``directory`` is not a directory.
        """
        root = Path(directory).resolve()
        if not root.is_dir():
            raise DiscoveryError(f"Test directory not found: {directory}")

        failures: list[FileFailure] = []

        def _on_error(exc: OSError) -> None:
            logger.warning("Skipping unreadable directory %s: %s", exc.filename, exc)
            failures.append(FileFailure(
                file_path=str(exc.filename or directory),
                stage=PipelineStage.DISCOVERY,
                error=str(exc),
            ))

        file_paths = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            # Prune excluded and symlinked directories in place
            dirnames[:] = sorted(
                name for name in dirnames
                if name not in self.exclude_dirs and not (Path(dirpath) / name).is_symlink()
            )
            for name in sorted(filenames):
                path = Path(dirpath) / name
                if path.is_symlink() or not self.is_test_file(name):
                    continue
                file_paths.append(str(path))

        logger.info("Discovered %d test files under %s", len(file_paths), root)
        return sorted(file_paths), failures
