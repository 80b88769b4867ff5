"""Shared fixtures. Parameter generation is the slow step, so it runs once per session."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from tiac.groups import setup
from tiac.boundary import perform_setup


@pytest.fixture(scope="session")
def params():
    """Fresh 256-bit Setup output."""
    return setup(256)


@pytest.fixture(scope="session")
def other_params():
    """An unrelated Setup, for cross-group checks."""
    return setup(256)


@pytest.fixture(scope="session")
def setup_outcome():
    """Boundary-level Setup(256) outcome."""
    outcome = perform_setup(256)
    assert outcome.success, outcome.error_message
    return outcome
