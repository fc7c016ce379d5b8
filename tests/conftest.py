"""
Shared test configuration.

Provides a seeded numpy Generator so every test that draws randomness is
reproducible.
"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Fresh, fixed-seed random source for one test."""
    return np.random.default_rng(42)
