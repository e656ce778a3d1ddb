"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import pytest


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from termnotify.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


class FakeTerminal:
    """Host terminal handle for tests."""

    def __init__(self, name: str = "build"):
        self.name = name
        self.show = AsyncMock()


class FakeWindow:
    """Host window recording every message it is asked to show."""

    def __init__(self, warning_choice=None):
        self.show_info = AsyncMock()
        self.show_warning = AsyncMock(return_value=warning_choice)
        self.show_error = AsyncMock()


@pytest.fixture
def make_terminal():
    """Factory for fake host terminals."""
    return FakeTerminal


@pytest.fixture
def window():
    """Fake host window."""
    return FakeWindow()
