"""Shared test fixtures and Hypothesis settings for property-based testing."""

import pytest
from hypothesis import settings

from propcheck.arbitrary import default_registry
from propcheck.models import RunConfig

# Configure Hypothesis default settings for all property-based tests
settings.register_profile("default", max_examples=100, deadline=None)
settings.load_profile("default")


@pytest.fixture
def run_config():
    """A RunConfig with a fixed seed so runs are reproducible."""
    return RunConfig(seed=20240115)


@pytest.fixture
def registry():
    """A fresh registry per test; tests never share registrations."""
    return default_registry()
