"""Pytest configuration and shared fixtures for the adoc2ast test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import logging
import os
from pathlib import Path
from typing import Callable

import pytest
from hypothesis import Phase, Verbosity, settings

from adoc2ast import AsciiDocOptions, Document, load

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture
def parse() -> Callable[..., Document]:
    """Parse AsciiDoc text with keyword options.

    Returns
    -------
    callable
        ``parse(text, **options)`` returning the parsed Document

    """

    def _parse(text: str, **options) -> Document:
        return load(text, **options)

    return _parse


@pytest.fixture
def unsafe_options(tmp_path: Path) -> AsciiDocOptions:
    """Options that allow includes, rooted at the test's temporary directory."""
    return AsciiDocOptions(safe_mode="unsafe", base_dir=str(tmp_path))


@pytest.fixture
def warnings_log(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture adoc2ast diagnostics at WARNING level and above."""
    caplog.set_level(logging.WARNING, logger="adoc2ast")
    return caplog
