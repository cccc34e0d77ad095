"""
info_gain.py
------------

Minimum-expected-entropy placement with clinical coverage weighting.

For every candidate stimulus s the base score is the posterior-predictive
expected Shannon entropy of the hypothesis posterior after observing the
response at s:

    E[H | s] = sum_o P(o | s) * H(posterior | o, s)

with P(o | s) = sum_h p(h) * P(o | h, s). Lower is more informative.

The base score is modulated by four heuristic factors:

    score(s) = E[H | s] * diversity(s)
               / ((1 + boundary(s)) * freq_weight(s) * coverage(s))

- boundary : Gaussian bump around the contrast threshold predicted at f_s
  by the posterior-mean curve.
- freq_weight : smooth bonus centred on 4 cpd (clinically important band).
- diversity : linear penalty in the number of trials already run at f_s.
- coverage : fixed boost while the band containing f_s is under its quota.

The constants of these factors are clinically calibrated and kept exactly.
Selection is deterministic: the lowest score wins, the first candidate in
grid order on ties.

References
----------
Lesmes, Lu, Baek & Albright (2010). Bayesian adaptive estimation of the
contrast sensitivity function: the quick CSF method. J Vis 10(3):17.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, NamedTuple

import jax
import jax.numpy as jnp
import numpy as np
from jax.scipy.special import xlogy

from qcsf.model.csf import evaluate_csf
from qcsf.trial_placement.base import TrialPlacement
from qcsf.utils.candidates import DEFAULT_FREQUENCY_BANDS, FrequencyBand
from qcsf.utils.math import LOG2, gaussian_bump

if TYPE_CHECKING:
    from qcsf.model.likelihood import LikelihoodCache
    from qcsf.posterior.grid_posterior import GridPosterior
    from qcsf.utils.candidates import StimulusGrid

logger = logging.getLogger(__name__)


@jax.jit
def expected_posterior_entropy(weights: jnp.ndarray, outcome_probs: jnp.ndarray) -> jnp.ndarray:
    """
    Expected posterior entropy (bits) for every stimulus.

    Parameters
    ----------
    weights : jnp.ndarray, shape (n_hypotheses,)
        Current posterior.
    outcome_probs : jnp.ndarray, shape (n_outcomes, n_hypotheses, n_stimuli)
        P(o | h, s).

    Returns
    -------
    jnp.ndarray, shape (n_stimuli,)

    Notes
    -----
    With joint j = p(h) P(o | h, s) and marginal m = sum_h j,

        P(o) * H(posterior | o) = -sum_h j log j + m log m,

    so the expectation needs a single pass over the (o, h, s) table.
    """
    joint = weights[None, :, None] * outcome_probs
    marginal = jnp.sum(joint, axis=1)
    per_outcome = xlogy(marginal, marginal) - jnp.sum(xlogy(joint, joint), axis=1)
    return jnp.sum(per_outcome, axis=0) / LOG2


class PlacementScores(NamedTuple):
    """Final selection scores and the base expected entropies they derive from."""

    scores: jnp.ndarray
    base_entropy: jnp.ndarray


class InfoGainPlacement(TrialPlacement):
    """
    Information-gain placement over a fixed stimulus grid.

    Parameters
    ----------
    stimuli : StimulusGrid
        Candidate pool.
    boundary_sigma : float, default=0.2
        Spread (log10 contrast units) of the threshold-proximity bump.
    bands : sequence of FrequencyBand
        Frequency bands with minimum-trial quotas.
    reference_freq : float, default=4.0
        Centre (cpd) of the clinical frequency bonus.
    freq_weight_gain : float, default=1.5
        Height of the frequency bonus above 1.
    freq_weight_sigma : float, default=0.55
        Width of the frequency bonus in log10 cpd.
    diversity_rate : float, default=1.5
        Penalty added per trial already run at a frequency.
    coverage_boost : float, default=3.0
        Divisor applied to stimuli in bands still under quota.
    """

    def __init__(
        self,
        stimuli: StimulusGrid,
        boundary_sigma: float = 0.2,
        bands: Sequence[FrequencyBand] = DEFAULT_FREQUENCY_BANDS,
        reference_freq: float = 4.0,
        freq_weight_gain: float = 1.5,
        freq_weight_sigma: float = 0.55,
        diversity_rate: float = 1.5,
        coverage_boost: float = 3.0,
    ):
        if boundary_sigma <= 0:
            raise ValueError(f"boundary_sigma must be positive, got {boundary_sigma}")
        self.stimuli = stimuli
        self.boundary_sigma = float(boundary_sigma)
        self.bands = tuple(bands)
        self.diversity_rate = float(diversity_rate)
        self.coverage_boost = float(coverage_boost)

        self._frequencies = jnp.asarray(stimuli.frequencies)
        self._log_contrasts = jnp.asarray(stimuli.log_contrasts)
        self._frequency_index = np.asarray(stimuli.frequency_index)
        self._band_index = stimuli.band_index(self.bands)
        self._quotas = np.array([band.min_trials for band in self.bands], dtype=int)
        self._freq_weight = 1.0 + freq_weight_gain * gaussian_bump(
            jnp.log10(self._frequencies), jnp.log10(reference_freq), freq_weight_sigma
        )

    # ------------------------------------------------------------------
    # HEURISTIC FACTORS
    # ------------------------------------------------------------------
    def band_counts(self, frequency_counts: np.ndarray) -> np.ndarray:
        """Trials run in each band, shape (n_bands,)."""
        counts = np.zeros(len(self.bands), dtype=int)
        for freq_idx, band_idx in enumerate(self._band_index):
            if band_idx >= 0:
                counts[band_idx] += frequency_counts[freq_idx]
        return counts

    def _coverage(self, frequency_counts: np.ndarray) -> jnp.ndarray:
        under_quota = self.band_counts(frequency_counts) < self._quotas
        boosted = np.array(
            [band_idx >= 0 and under_quota[band_idx] for band_idx in self._band_index]
        )
        per_freq = np.where(boosted, self.coverage_boost, 1.0)
        return jnp.asarray(per_freq[self._frequency_index])

    def _diversity(self, frequency_counts: np.ndarray) -> jnp.ndarray:
        counts = np.asarray(frequency_counts, dtype=float)[self._frequency_index]
        return 1.0 + self.diversity_rate * jnp.asarray(counts)

    def _boundary(self, posterior: GridPosterior) -> jnp.ndarray:
        predicted_log_c = -evaluate_csf(self._frequencies, posterior.mean_params())
        return gaussian_bump(self._log_contrasts, predicted_log_c, self.boundary_sigma)

    # ------------------------------------------------------------------
    # SCORING / SELECTION
    # ------------------------------------------------------------------
    def score(
        self,
        posterior: GridPosterior,
        likelihood: LikelihoodCache,
        frequency_counts: np.ndarray,
    ) -> PlacementScores:
        """
        Score every candidate (lower is better).

        Returns
        -------
        PlacementScores
            Final scores and base expected entropies, each shape (n_stimuli,).
        """
        frequency_counts = np.asarray(frequency_counts)
        if frequency_counts.shape != (len(self.stimuli.frequency_values),):
            raise ValueError(
                "frequency_counts must have one entry per distinct grid frequency"
            )
        base = expected_posterior_entropy(posterior.probabilities, likelihood.outcome_probs)
        scores = (
            base
            * self._diversity(frequency_counts)
            / (
                (1.0 + self._boundary(posterior))
                * self._freq_weight
                * self._coverage(frequency_counts)
            )
        )
        return PlacementScores(scores=scores, base_entropy=base)

    def propose(
        self,
        posterior: GridPosterior,
        likelihood: LikelihoodCache,
        frequency_counts: np.ndarray,
    ) -> int:
        scores = self.score(posterior, likelihood, frequency_counts).scores
        best = int(jnp.argmin(scores))
        logger.debug("Selected stimulus %d (score %.4f)", best, float(scores[best]))
        return best
