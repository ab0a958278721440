"""
Global pytest configuration for appctx

This file provides shared fixtures and enforces Python version requirements.
"""

from __future__ import annotations

import os
import sys

import pytest

from appctx.context import ApplicationContext

_MIN_PY_VERSION = (3, 11)


def _verify_python_version() -> str:
    """Return the interpreter version string or exit if <3.11."""
    version_info = sys.version_info
    version_str = ".".join(map(str, version_info[:3]))
    if version_info < _MIN_PY_VERSION:
        pytest.exit(
            f"ERROR: pytest must run on Python 3.11+ (detected {version_str}).",
            returncode=1,
        )
    return version_str


def pytest_report_header(config: pytest.Config) -> str:
    version_str = _verify_python_version()
    return f"Python interpreter verified for pytest: {version_str}"


def pytest_configure(config: pytest.Config) -> None:
    """Register project markers before collection to prevent unknown marker warnings."""
    markers = {
        "unit": "Unit tests that should execute quickly.",
        "integration": "Integration tests hitting multiple components.",
    }
    for name, description in markers.items():
        config.addinivalue_line("markers", f"{name}: {description}")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test in an empty directory without APPCTX_* overrides."""
    for key in list(os.environ):
        if key.startswith("APPCTX_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def context() -> ApplicationContext:
    """An unrefreshed context with three components."""
    ctx = ApplicationContext("test")
    ctx.register_instance("zebra", object())
    ctx.register_instance("Apple", object())
    ctx.register_instance("banana", object())
    return ctx
