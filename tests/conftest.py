"""
Central pytest configuration for this project.

This file is automatically discovered by pytest and is intended for:

- **Fixtures**: reusable objects or setup logic shared across multiple test files.
- **Pytest hooks**: project-wide customizations of pytest behavior (e.g., modifying CLI options, adding markers).

Notes
-----
- Contributors should
  install the package in editable mode (`pip install -e .`) so that imports are resolved
  consistently in local dev and CI environments.
- Keep this file focused on test setup. Do not add application logic here.
"""

import pytest

from qcsf.model.csf import CSFParams, evaluate_csf
from qcsf.utils.candidates import HypothesisGrid, StimulusGrid


@pytest.fixture
def small_hypotheses():
    """A 2 x 2 x 1 x 1 hypothesis grid in which every candidate survives pruning."""
    return HypothesisGrid((1.0, 1.5), (2.0, 4.0), (1.0,), (1.0,))


@pytest.fixture
def small_stimuli():
    """Two frequencies x three log-contrasts."""
    return StimulusGrid((1.0, 4.0), (-2.0, -1.0, 0.0))


@pytest.fixture
def true_csf():
    """Ground-truth curve of the simulated observer."""
    return CSFParams(peak_gain=1.8, peak_freq=3.0, bandwidth=1.2, truncation=1.6)


@pytest.fixture
def graded_observer(true_csf):
    """Noise-free graded observer: exact orientation when visible, "none" otherwise."""

    def respond(stimulus):
        visible = float(evaluate_csf(stimulus.frequency, true_csf)) + stimulus.log_contrast > 0
        return 0 if visible else -1

    return respond


@pytest.fixture
def binary_observer(true_csf):
    """Noise-free detection observer."""

    def respond(stimulus):
        return float(evaluate_csf(stimulus.frequency, true_csf)) + stimulus.log_contrast > 0

    return respond
