"""
Pytest fixtures for the galaxy generator test suite.
"""
import logging
import os

# Pygame must pick the headless drivers before it is first initialized.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest

from galaxy import GalaxyParameters
from scene import Scene


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def small_params():
    """A galaxy small enough to generate many times per test."""
    return GalaxyParameters(count=500, radius=5.0, branches=5, spin=-2.0,
                            randomness=0.2, randomness_power=3.0)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def restore_root_logger():
    """Undoes setup_logging's changes to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
