"""Pytest configuration and shared fixtures for rllab tests.

This module provides:
- A deterministic numpy RNG fixture
- A stream fixture capturing rllab log output
"""

import logging
import os
from io import StringIO

import numpy as np
import pytest

from rllab.logging import configure_logging


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    This ensures tests are reproducible while allowing override for debugging.

    Returns:
        A seeded numpy.random.Generator instance.
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function", autouse=True)
def set_random_seeds() -> None:
    """Auto-use fixture seeding numpy's legacy global generator.

    rllab itself never reads the global generator; this only pins third-party
    code that does.
    """
    np.random.seed(int(os.environ.get("TEST_RNG_SEED", "0")))


@pytest.fixture(scope="function")
def log_stream():
    """Route every rllab logger to a StringIO at DEBUG level for one test."""
    stream = StringIO()
    configure_logging(level=logging.DEBUG, stream=stream)
    try:
        yield stream
    finally:
        configure_logging(level=logging.WARNING)
