"""
prior.py
--------

Prior distributions over the CSF hypothesis grid.

Implements:
- UniformPrior : equal mass on every retained hypothesis.
- GaussianPrior : independent Gaussian weights in
  (peak gain, log10 peak frequency, bandwidth, truncation) space.

Connections
-----------
- ExperimentSession calls Prior.weights(hypotheses) once to initialise the
  GridPosterior.
- Weights are always re-normalised over the pruned grid, so the prior is a
  proper distribution on exactly the hypotheses that survived pruning.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

import jax.numpy as jnp

from qcsf.utils.math import gaussian_bump

if TYPE_CHECKING:
    from qcsf.utils.candidates import HypothesisGrid


@dataclass(frozen=True)
class UniformPrior:
    """Flat prior over the hypothesis grid."""

    def weights(self, hypotheses: HypothesisGrid) -> jnp.ndarray:
        n = len(hypotheses)
        return jnp.full((n,), 1.0 / n)


@dataclass(frozen=True)
class GaussianPrior:
    """
    Gaussian-weighted prior over the hypothesis grid.

    Each parameter contributes an independent Gaussian factor; peak frequency
    is weighted in log10 space because its candidate list is log-spaced.

    Parameters
    ----------
    gain_mean, gain_sd : float
        Peak log-sensitivity.
    log_freq_mean, log_freq_sd : float
        log10 of the peak frequency (cpd).
    bandwidth_mean, bandwidth_sd : float
        Curvature of the log-parabola.
    truncation_mean, truncation_sd : float
        High-frequency steepening.
    """

    gain_mean: float = 1.6
    gain_sd: float = 0.5
    log_freq_mean: float = 0.5
    log_freq_sd: float = 0.3
    bandwidth_mean: float = 1.3
    bandwidth_sd: float = 0.4
    truncation_mean: float = 1.8
    truncation_sd: float = 0.6

    def __post_init__(self):
        for name in ("gain_sd", "log_freq_sd", "bandwidth_sd", "truncation_sd"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    def weights(self, hypotheses: HypothesisGrid) -> jnp.ndarray:
        w = (
            gaussian_bump(jnp.asarray(hypotheses.peak_gain), self.gain_mean, self.gain_sd)
            * gaussian_bump(
                jnp.log10(jnp.asarray(hypotheses.peak_freq)),
                self.log_freq_mean,
                self.log_freq_sd,
            )
            * gaussian_bump(
                jnp.asarray(hypotheses.bandwidth), self.bandwidth_mean, self.bandwidth_sd
            )
            * gaussian_bump(
                jnp.asarray(hypotheses.truncation), self.truncation_mean, self.truncation_sd
            )
        )
        total = jnp.sum(w)
        if not total > 0:
            warnings.warn(
                "Gaussian prior puts no mass on the hypothesis grid; "
                "falling back to a uniform prior. Check the prior means and SDs.",
                RuntimeWarning,
                stacklevel=2,
            )
            return UniformPrior().weights(hypotheses)
        return w / total


Prior = Union[UniformPrior, GaussianPrior]
