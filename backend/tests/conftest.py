"""
Pytest configuration and shared fixtures for the session engine tests.
"""

import pytest

from fakes import FakeGateway, make_questions


class RecordingNavigator:
    """Collects navigation targets instead of changing screens."""

    def __init__(self):
        self.paths: list[str] = []

    def __call__(self, path: str) -> None:
        self.paths.append(path)


@pytest.fixture
def navigator():
    """Fixture providing a navigation recorder."""
    return RecordingNavigator()


@pytest.fixture
def gateway():
    """Fixture providing a three-question fake backend with three lives."""
    return FakeGateway(make_questions(3))
