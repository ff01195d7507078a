"""Shared pytest fixtures for suite-doctor tests."""
import logging

import pytest

from samples import LOGIN_SPEC, NO_CASES_SOURCE, PET_PROFILE_SPEC
from suite_doctor.logging_config import LOGGER_NAME
from suite_doctor.models import EnhancementOptions


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so later tests can rely on caplog."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def suite_dir(tmp_path):
    """A small suite: two analyzable spec files plus a helper module."""
    specs = tmp_path / "specs"
    (specs / "auth").mkdir(parents=True)
    (specs / "auth" / "login.spec.ts").write_text(LOGIN_SPEC, encoding="utf-8")
    (specs / "pet-profile.spec.ts").write_text(PET_PROFILE_SPEC, encoding="utf-8")
    (specs / "helpers.ts").write_text(NO_CASES_SOURCE, encoding="utf-8")
    return specs


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "reports"


@pytest.fixture
def make_options(suite_dir, output_dir):
    """Factory for EnhancementOptions pointed at the sample suite."""

    def _make(**overrides):
        values = {
            "test_directory": str(suite_dir),
            "output_directory": str(output_dir),
            "max_workers": 2,
        }
        values.update(overrides)
        return EnhancementOptions(**values)

    return _make
