"""Root-level test configuration and shared fixtures.

This conftest.py provides shared fixtures and utilities for all tests.
Module-specific fixtures should be placed in their respective conftest.py files.
"""

import sys
import time
from typing import Callable

import pytest
from PyQt5.QtCore import QCoreApplication, QEventLoop

from ptrap.pipeline.node import CommandNode


# ============================================================================
# Qt Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def qapp():
    """Create a headless QCoreApplication for signal/timer based tests."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1])
    yield app


def wait_until(predicate: Callable[[], bool], timeout_ms: int = 5000) -> bool:
    """Pump the Qt event loop until predicate() is true or the timeout expires.

    Returns:
        True if the predicate became true before the timeout
    """
    deadline = time.monotonic() + timeout_ms / 1000
    while not predicate():
        if time.monotonic() > deadline:
            return False
        QCoreApplication.processEvents(QEventLoop.AllEvents, 20)
        time.sleep(0.005)
    return True


def pump_events(duration_ms: int) -> None:
    """Keep processing Qt events for a fixed duration."""
    deadline = time.monotonic() + duration_ms / 1000
    while time.monotonic() < deadline:
        QCoreApplication.processEvents(QEventLoop.AllEvents, 20)
        time.sleep(0.005)


# ============================================================================
# Shared Data Fixtures
# ============================================================================


@pytest.fixture
def sample_input() -> str:
    return "hello\nworld\n"


@pytest.fixture
def cat_node() -> CommandNode:
    return CommandNode(command="cat")


@pytest.fixture
def grep_node() -> CommandNode:
    return CommandNode(command="grep", arg="wor")
