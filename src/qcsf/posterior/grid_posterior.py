"""
grid_posterior.py
-----------------

Exact posterior over a fixed, enumerable hypothesis grid.

The posterior is a dense probability vector indexed by hypothesis id. Each
trial multiplies it by the likelihood of the observed outcome and
renormalises: a plain sequential Bayesian filter. Because the grid is fixed
and small enough to enumerate, no sampling or resampling is involved.

Guarantee
---------
After construction and after every successful update the vector is
non-negative and sums to 1 (within float tolerance).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import jax.numpy as jnp

from qcsf.model.csf import CSFParams
from qcsf.utils.math import entropy_bits

if TYPE_CHECKING:
    from qcsf.utils.candidates import HypothesisGrid

logger = logging.getLogger(__name__)


class PosteriorCollapseError(RuntimeError):
    """Posterior mass vanished after a likelihood multiply (fatal for the session)."""


class GridPosterior:
    """
    Posterior distribution over a HypothesisGrid.

    Parameters
    ----------
    hypotheses : HypothesisGrid
        The grid the probabilities refer to.
    weights : jnp.ndarray, shape (len(hypotheses),)
        Initial (prior) weights. Normalised on construction.

    Attributes
    ----------
    hypotheses : HypothesisGrid
    probabilities : jnp.ndarray
        Current posterior vector (JAX arrays are immutable, so handing it out
        does not expose internal state to mutation).
    """

    def __init__(self, hypotheses: HypothesisGrid, weights: jnp.ndarray):
        weights = jnp.asarray(weights)
        if weights.shape != (len(hypotheses),):
            raise ValueError(
                f"weights must have shape ({len(hypotheses)},), got {weights.shape}"
            )
        if bool(jnp.any(weights < 0)):
            raise ValueError("prior weights must be non-negative")
        total = jnp.sum(weights)
        if not total > 0:
            raise ValueError("prior weights must have positive total mass")
        self.hypotheses = hypotheses
        self.probabilities = weights / total

    def __len__(self) -> int:
        return self.probabilities.shape[0]

    # ------------------------------------------------------------------
    # UPDATE
    # ------------------------------------------------------------------
    def update(self, likelihood: jnp.ndarray) -> None:
        """
        Bayes update with per-hypothesis observation probabilities.

        Parameters
        ----------
        likelihood : jnp.ndarray, shape (n_hypotheses,)
            Probability of the observed outcome under each hypothesis.

        Raises
        ------
        PosteriorCollapseError
            If the unnormalised posterior has no positive, finite mass. The
            posterior is left unchanged.
        """
        unnormalised = self.probabilities * likelihood
        total = jnp.sum(unnormalised)
        if not (bool(jnp.isfinite(total)) and total > 0):
            logger.warning("Posterior mass collapsed (total=%s)", float(total))
            raise PosteriorCollapseError(
                f"posterior total mass is {float(total)} after the likelihood update"
            )
        self.probabilities = unnormalised / total

    # ------------------------------------------------------------------
    # SUMMARIES
    # ------------------------------------------------------------------
    def entropy(self) -> float:
        """Shannon entropy of the posterior, in bits."""
        return float(entropy_bits(self.probabilities))

    def map_index(self) -> int:
        """Index of the maximum-a-posteriori hypothesis (first one on ties)."""
        return int(jnp.argmax(self.probabilities))

    def map_params(self) -> CSFParams:
        """Maximum-a-posteriori hypothesis."""
        return self.hypotheses[self.map_index()]

    def mean_params(self) -> CSFParams:
        """
        Posterior-mean parameters.

        Peak frequency is averaged in log10 space and exponentiated back,
        matching its log-spaced discretisation.
        """
        w = self.probabilities
        h = self.hypotheses
        return CSFParams(
            peak_gain=float(jnp.sum(w * jnp.asarray(h.peak_gain))),
            peak_freq=float(10.0 ** jnp.sum(w * jnp.log10(jnp.asarray(h.peak_freq)))),
            bandwidth=float(jnp.sum(w * jnp.asarray(h.bandwidth))),
            truncation=float(jnp.sum(w * jnp.asarray(h.truncation))),
        )
