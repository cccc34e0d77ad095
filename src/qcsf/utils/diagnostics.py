"""
diagnostics.py
--------------

Posterior summaries for CSF estimates.

Functions
---------
- marginal_distribution : posterior mass per candidate value of one parameter.
- credible_band : posterior-weighted quantiles of log-sensitivity per frequency.
- parameter_summary : mean, SD and MAP of every parameter.
- print_parameter_summary : human-readable version of parameter_summary.

All summaries are exact weighted sums over the hypothesis grid, so they are
deterministic (no posterior sampling).

Examples
--------
>>> import jax.numpy as jnp
>>> from qcsf import ExperimentSession
>>> from qcsf.posterior import GridPosterior
>>> from qcsf.utils.diagnostics import credible_band
>>> session = ExperimentSession()
>>> freqs = jnp.logspace(-0.3, 1.7, 50)
>>> posterior = GridPosterior(session.hypotheses, session.posterior)
>>> low, high = credible_band(posterior, freqs, level=0.95)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jax.numpy as jnp
import numpy as np

from qcsf.model.csf import predict_log_sensitivity
from qcsf.utils.candidates import PARAM_NAMES

if TYPE_CHECKING:
    from qcsf.posterior.grid_posterior import GridPosterior


def marginal_distribution(
    posterior: GridPosterior, name: str
) -> tuple[np.ndarray, np.ndarray]:
    """
    Marginal posterior of a single parameter.

    Parameters
    ----------
    posterior : GridPosterior
        Posterior over the hypothesis grid.
    name : str
        One of "peak_gain", "peak_freq", "bandwidth", "truncation".

    Returns
    -------
    values : np.ndarray
        Sorted distinct candidate values present in the grid.
    probabilities : np.ndarray
        Posterior mass of each value (sums to 1).
    """
    column = posterior.hypotheses.column(name)
    values, inverse = np.unique(column, return_inverse=True)
    mass = np.zeros(values.shape[0])
    np.add.at(mass, inverse, np.asarray(posterior.probabilities, dtype=float))
    return values, mass


def _weighted_quantile(values: np.ndarray, weights: np.ndarray, q: float) -> np.ndarray:
    """Column-wise weighted quantile of values with shape (n, m)."""
    order = np.argsort(values, axis=0, kind="stable")
    sorted_values = np.take_along_axis(values, order, axis=0)
    cdf = np.cumsum(weights[order], axis=0)
    idx = (cdf < q * cdf[-1]).sum(axis=0)
    idx = np.minimum(idx, values.shape[0] - 1)
    return sorted_values[idx, np.arange(values.shape[1])]


def credible_band(
    posterior: GridPosterior, frequencies: jnp.ndarray, level: float = 0.95
) -> tuple[np.ndarray, np.ndarray]:
    """
    Equal-tailed credible band of the log-sensitivity curve.

    Parameters
    ----------
    posterior : GridPosterior
        Posterior over the hypothesis grid.
    frequencies : jnp.ndarray, shape (m,)
        Frequencies (cpd) to evaluate.
    level : float, default=0.95
        Credible mass inside the band.

    Returns
    -------
    low, high : np.ndarray, shape (m,)
        Lower and upper log-sensitivity bounds.
    """
    if not 0.0 < level < 1.0:
        raise ValueError(f"level must be in (0, 1), got {level}")
    h = posterior.hypotheses
    log_s = np.asarray(
        predict_log_sensitivity(
            jnp.asarray(frequencies)[None, :],
            jnp.asarray(h.peak_gain)[:, None],
            jnp.asarray(h.peak_freq)[:, None],
            jnp.asarray(h.bandwidth)[:, None],
            jnp.asarray(h.truncation)[:, None],
        ),
        dtype=float,
    )
    weights = np.asarray(posterior.probabilities, dtype=float)
    alpha = (1.0 - level) / 2.0
    return (
        _weighted_quantile(log_s, weights, alpha),
        _weighted_quantile(log_s, weights, 1.0 - alpha),
    )


def parameter_summary(posterior: GridPosterior) -> dict[str, dict[str, float]]:
    """
    Posterior mean, standard deviation and MAP value of each parameter.

    Peak frequency (mean, sd and MAP) is reported in log10 cpd.

    Returns
    -------
    dict
        {name: {"mean": ..., "sd": ..., "map": ...}}
    """
    weights = np.asarray(posterior.probabilities, dtype=float)
    map_params = posterior.map_params().as_dict()
    map_params["peak_freq"] = float(np.log10(map_params["peak_freq"]))
    summary = {}
    for name in PARAM_NAMES:
        values = posterior.hypotheses.column(name)
        if name == "peak_freq":
            values = np.log10(values)
        mean = float(np.sum(weights * values))
        sd = float(np.sqrt(np.sum(weights * (values - mean) ** 2)))
        summary[name] = {"mean": mean, "sd": sd, "map": map_params[name]}
    return summary


def print_parameter_summary(posterior: GridPosterior) -> None:
    """Print parameter_summary() as a table."""
    summary = parameter_summary(posterior)
    print(f"Parameter Summary (entropy {posterior.entropy():.2f} bits):\n")
    for name, stats in summary.items():
        unit = " (log10 cpd)" if name == "peak_freq" else ""
        print(f"{name}{unit}:")
        print(f"  Mean: {stats['mean']:.3f} ± {stats['sd']:.3f}")
        print(f"  MAP:  {stats['map']:.3f}")
        print()
