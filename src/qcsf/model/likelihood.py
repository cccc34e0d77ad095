"""
likelihood.py
-------------

Precomputed likelihood tables for every (hypothesis, stimulus) pair.

The cache is built exactly once per engine, the single most expensive
precomputation (O(n_hypotheses * n_stimuli * n_outcomes)), and is never
mutated afterwards.

Contents
--------
psi : jnp.ndarray, shape (n_hypotheses, n_stimuli)
    Raw detection probability

        psi = logistic(slope * (logS(h, f_s) + logC_s))

    i.e. a logistic of the margin between predicted log-sensitivity and the
    stimulus' negative log-contrast, clamped to [0.001, 0.999].

outcome_probs : jnp.ndarray, shape (n_outcomes, n_hypotheses, n_stimuli)
    Outcome-class probabilities from the response model.

Robust mixing
-------------
Posterior updates use

    (1 - mix) * p_obs_raw + mix / n_outcomes

so that a single inattentive response cannot drive any hypothesis to zero.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import jax.numpy as jnp

from qcsf.model.csf import predict_log_sensitivity
from qcsf.utils.math import logistic

if TYPE_CHECKING:
    from qcsf.model.task import ResponseModel
    from qcsf.utils.candidates import HypothesisGrid, StimulusGrid

logger = logging.getLogger(__name__)

PSI_MIN = 0.001
PSI_MAX = 0.999


def detection_probability(
    hypotheses: HypothesisGrid, stimuli: StimulusGrid, slope: float
) -> jnp.ndarray:
    """
    Clamped logistic detection probability for every (hypothesis, stimulus).

    Returns
    -------
    jnp.ndarray, shape (len(hypotheses), len(stimuli))
    """
    log_s = predict_log_sensitivity(
        jnp.asarray(stimuli.frequencies)[None, :],
        jnp.asarray(hypotheses.peak_gain)[:, None],
        jnp.asarray(hypotheses.peak_freq)[:, None],
        jnp.asarray(hypotheses.bandwidth)[:, None],
        jnp.asarray(hypotheses.truncation)[:, None],
    )
    margin = log_s + jnp.asarray(stimuli.log_contrasts)[None, :]
    return jnp.clip(logistic(margin, slope), PSI_MIN, PSI_MAX)


class LikelihoodCache:
    """
    Dense likelihood tables for a fixed hypothesis grid and stimulus grid.

    Parameters
    ----------
    hypotheses : HypothesisGrid
        Parameter grid (rows).
    stimuli : StimulusGrid
        Stimulus grid (columns).
    response_model : ResponseModel
        Maps psi to outcome-class probabilities.
    slope : float
        Psychometric slope.
    mix : float, default=0.03
        Robust likelihood mixing fraction in [0, 1).
    """

    def __init__(
        self,
        hypotheses: HypothesisGrid,
        stimuli: StimulusGrid,
        response_model: ResponseModel,
        slope: float,
        mix: float = 0.03,
    ):
        if not 0.0 <= mix < 1.0:
            raise ValueError(f"mix must be in [0, 1), got {mix}")
        self.response_model = response_model
        self.slope = float(slope)
        self.mix = float(mix)
        self.psi = detection_probability(hypotheses, stimuli, self.slope)
        self.outcome_probs = response_model.outcome_probabilities(self.psi, hypotheses)
        expected = (response_model.n_outcomes,) + self.psi.shape
        if self.outcome_probs.shape != expected:
            raise ValueError(
                f"response model returned shape {self.outcome_probs.shape}, expected {expected}"
            )
        logger.debug(
            "Likelihood cache: %d hypotheses x %d stimuli x %d outcomes",
            *self.psi.shape,
            response_model.n_outcomes,
        )

    @property
    def n_outcomes(self) -> int:
        return self.outcome_probs.shape[0]

    def observation_probabilities(self, stimulus_id: int, outcome: int) -> jnp.ndarray:
        """
        Mixed probability of `outcome` at `stimulus_id` under every hypothesis.

        Returns
        -------
        jnp.ndarray, shape (n_hypotheses,)
        """
        raw = self.outcome_probs[outcome, :, stimulus_id]
        return (1.0 - self.mix) * raw + self.mix * self.response_model.uniform_probability
