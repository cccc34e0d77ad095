"""
test_diagnostics.py
-------------------

Tests for posterior diagnostics (marginals, credible bands, parameter summaries).
"""

import jax.numpy as jnp
import numpy as np
import pytest

from qcsf.model.csf import evaluate_csf
from qcsf.posterior.grid_posterior import GridPosterior
from qcsf.utils.candidates import HypothesisGrid
from qcsf.utils.diagnostics import (
    credible_band,
    marginal_distribution,
    parameter_summary,
    print_parameter_summary,
)


@pytest.fixture
def grid():
    return HypothesisGrid((0.5, 1.0, 1.5), (1.0, 3.0), (1.0, 1.5), (1.5,))


@pytest.fixture
def uniform(grid):
    return GridPosterior(grid, jnp.ones(len(grid)))


@pytest.fixture
def point_mass(grid):
    return GridPosterior(grid, jnp.zeros(len(grid)).at[5].set(1.0))


def test_marginal_distribution(uniform):
    values, mass = marginal_distribution(uniform, "peak_gain")
    np.testing.assert_allclose(values, [0.5, 1.0, 1.5])
    assert mass.sum() == pytest.approx(1.0, abs=1e-6)
    np.testing.assert_allclose(mass, 1.0 / 3.0, atol=1e-6)


def test_marginal_of_point_mass(point_mass, grid):
    values, mass = marginal_distribution(point_mass, "peak_freq")
    assert values[int(np.argmax(mass))] == grid[5].peak_freq
    assert mass.max() == pytest.approx(1.0)


def test_credible_band_ordering(uniform):
    freqs = jnp.logspace(-0.3, 1.5, 20)
    low, high = credible_band(uniform, freqs, level=0.9)
    assert low.shape == high.shape == (20,)
    assert np.all(low <= high)


def test_credible_band_collapses_on_point_mass(point_mass, grid):
    freqs = jnp.array([1.0, 2.0, 4.0, 8.0])
    low, high = credible_band(point_mass, freqs)
    expected = np.asarray(evaluate_csf(freqs, grid[5]))
    np.testing.assert_allclose(low, expected, atol=1e-5)
    np.testing.assert_allclose(high, expected, atol=1e-5)


def test_credible_band_level_validation(uniform):
    with pytest.raises(ValueError):
        credible_band(uniform, jnp.array([1.0]), level=1.0)


def test_parameter_summary(point_mass, grid):
    summary = parameter_summary(point_mass)
    assert set(summary) == {"peak_gain", "peak_freq", "bandwidth", "truncation"}
    assert summary["peak_gain"]["mean"] == pytest.approx(grid[5].peak_gain)
    assert summary["peak_gain"]["sd"] == pytest.approx(0.0, abs=1e-6)
    assert summary["peak_freq"]["mean"] == pytest.approx(np.log10(grid[5].peak_freq), abs=1e-6)
    assert summary["bandwidth"]["map"] == grid[5].bandwidth


def test_print_parameter_summary(uniform, capsys):
    print_parameter_summary(uniform)
    out = capsys.readouterr().out
    assert "Parameter Summary" in out
    assert "peak_gain" in out


def test_peak_frequency_map_in_log_units(point_mass, grid):
    summary = parameter_summary(point_mass)
    assert grid[5].peak_freq == 1.0
    assert summary["peak_freq"]["map"] == pytest.approx(summary["peak_freq"]["mean"], abs=1e-6)

    at_three = GridPosterior(grid, jnp.zeros(len(grid)).at[2].set(1.0))
    peak = parameter_summary(at_three)["peak_freq"]
    assert grid[2].peak_freq == 3.0
    assert peak["map"] == pytest.approx(np.log10(3.0), abs=1e-6)
    assert peak["map"] == pytest.approx(peak["mean"], abs=1e-6)


def test_module_example_runs():
    import doctest

    from qcsf.utils import diagnostics

    results = doctest.testmod(diagnostics)
    assert results.attempted > 0
    assert results.failed == 0
