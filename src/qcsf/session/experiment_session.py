"""
experiment_session.py
---------------------

ExperimentSession is the adaptive CSF engine: it owns every piece of state
of one measurement and runs the trial loop

    select_stimulus() -> (external render + response) -> update() -> ...

Responsibilities
----------------
1. Build the hypothesis grid, stimulus grid and likelihood cache once.
2. Keep the posterior over hypotheses (GridPosterior).
3. Delegate stimulus choice to a TrialPlacement strategy.
4. Record trials (TrialHistory) and per-frequency coverage counters.
5. Extract estimates and curve metrics for the reporting layer.

Every instance is independent: no module-level mutable state is read or
written, so concurrent subjects simply use separate sessions.

Failure model
-------------
- Invalid stimulus ids and responses are rejected before any state changes
  (ValueError / InvalidResponseError).
- If the posterior mass collapses, PosteriorCollapseError is raised and the
  session is marked failed; later select_stimulus()/update() calls raise it
  again so the caller terminates instead of continuing on a meaningless
  posterior.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import jax.numpy as jnp
import numpy as np

from qcsf.data.dataset import TrialHistory, TrialRecord
from qcsf.model.csf import (
    CSFParams,
    acuity_cutoff,
    area_under_log_csf,
    csf_curve,
    evaluate_csf,
)
from qcsf.model.likelihood import LikelihoodCache
from qcsf.model.task import ResponseModel, response_model_for
from qcsf.posterior.grid_posterior import GridPosterior, PosteriorCollapseError
from qcsf.session.config import EngineConfig
from qcsf.trial_placement.base import TrialPlacement
from qcsf.trial_placement.info_gain import InfoGainPlacement, PlacementScores
from qcsf.utils.candidates import HypothesisGrid, StimulusCandidate, StimulusGrid

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SessionResult:
    """
    Values handed to the reporting layer at the end of a session.

    Attributes
    ----------
    params : CSFParams
        Point estimate the metrics were computed from.
    aulcsf : float
        Area under the log CSF.
    curve : (frequencies, log_sensitivity)
        Densely sampled CSF.
    acuity_cutoff : float | None
        High-frequency cutoff (cpd), None if the curve never crosses zero.
    trial_count : int
        Number of completed trials.
    """

    params: CSFParams
    aulcsf: float
    curve: tuple[jnp.ndarray, jnp.ndarray]
    acuity_cutoff: float | None
    trial_count: int


class ExperimentSession:
    """
    Bayesian adaptive CSF engine.

    Parameters
    ----------
    config : EngineConfig, optional
        Engine configuration. Defaults to EngineConfig().
    response_model : ResponseModel, optional
        Response model strategy. Defaults to response_model_for(config.num_afc, ...).
    placement : TrialPlacement, optional
        Stimulus selection strategy. Defaults to InfoGainPlacement over the
        stimulus grid.

    Attributes
    ----------
    config : EngineConfig
    response_model : ResponseModel
    hypotheses : HypothesisGrid
    stimuli : StimulusGrid
    likelihood : LikelihoodCache
    placement : TrialPlacement

    Examples
    --------
    >>> session = ExperimentSession(EngineConfig.for_mode("gabor"))
    >>> stim = session.select_stimulus()
    >>> session.update(stim.stimulus_id, 0)  # reported the right orientation
    >>> session.trial_count
    1
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        response_model: ResponseModel | None = None,
        placement: TrialPlacement | None = None,
    ):
        self.config = config or EngineConfig()
        cfg = self.config
        self.response_model = response_model or response_model_for(
            cfg.num_afc,
            lapse=cfg.lapse,
            false_alarm_rate=cfg.false_alarm_rate,
            guess_rate=cfg.guess_rate,
        )

        self.hypotheses = HypothesisGrid(
            cfg.peak_gain_values,
            cfg.peak_freq_values,
            cfg.bandwidth_values,
            cfg.truncation_values,
        )
        self.stimuli = StimulusGrid(cfg.stim_freqs, cfg.stim_log_contrasts)
        self.likelihood = LikelihoodCache(
            self.hypotheses,
            self.stimuli,
            self.response_model,
            slope=cfg.psychometric_slope,
            mix=cfg.robust_likelihood_mix,
        )
        self.placement = placement or InfoGainPlacement(
            self.stimuli,
            boundary_sigma=cfg.boundary_sigma_log_c,
            bands=cfg.frequency_bands,
        )

        self._posterior = GridPosterior(self.hypotheses, cfg.prior.weights(self.hypotheses))
        self._history = TrialHistory()
        self._frequency_counts = np.zeros(len(self.stimuli.frequency_values), dtype=int)
        self._failed = False

        logger.info(
            "Initialized session: %d hypotheses, %d stimuli, %s",
            len(self.hypotheses),
            len(self.stimuli),
            type(self.response_model).__name__,
        )

    # ------------------------------------------------------------------
    # STATE (read-only views)
    # ------------------------------------------------------------------
    @property
    def trial_count(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple[TrialRecord, ...]:
        return self._history.records

    @property
    def posterior(self) -> jnp.ndarray:
        """Current posterior vector over hypothesis ids."""
        return self._posterior.probabilities

    @property
    def frequency_counts(self) -> dict[float, int]:
        """Trials run so far at each tested frequency."""
        return {
            freq: int(n)
            for freq, n in zip(self.stimuli.frequency_values, self._frequency_counts)
            if n > 0
        }

    @property
    def is_complete(self) -> bool:
        """True once config.max_trials trials have been run."""
        return self.config.max_trials is not None and self.trial_count >= self.config.max_trials

    @property
    def failed(self) -> bool:
        return self._failed

    # ------------------------------------------------------------------
    # TRIAL LOOP
    # ------------------------------------------------------------------
    def select_stimulus(self) -> StimulusCandidate:
        """
        Choose the next stimulus.

        Returns
        -------
        StimulusCandidate
            frequency (cpd), log_contrast, contrast = 10**log_contrast in
            (0, 1], and stimulus_id to pass back to update().
        """
        self._ensure_usable()
        stimulus_id = self.placement.propose(
            self._posterior, self.likelihood, self._frequency_counts.copy()
        )
        return self.stimuli[stimulus_id]

    def score_candidates(self) -> PlacementScores:
        """Scores and base expected entropies of every candidate (InfoGainPlacement only)."""
        if not isinstance(self.placement, InfoGainPlacement):
            raise TypeError(
                f"{type(self.placement).__name__} does not expose candidate scores"
            )
        return self.placement.score(
            self._posterior, self.likelihood, self._frequency_counts.copy()
        )

    def update(self, stimulus_id: int, response: Any) -> None:
        """
        Record a response and update the posterior.

        Parameters
        ----------
        stimulus_id : int
            Id returned by select_stimulus().
        response : bool | int
            Binary detection / correctness flag, or graded angular distance
            (0..3, -1 for "no target").

        Raises
        ------
        ValueError
            Unknown stimulus id.
        InvalidResponseError
            Response outside the response model's outcome classes.
        PosteriorCollapseError
            Posterior mass vanished; the session is now failed.
        """
        self._ensure_usable()
        if isinstance(stimulus_id, (bool, np.bool_)) or not isinstance(
            stimulus_id, (int, np.integer)
        ):
            raise ValueError(f"stimulus id must be an integer, got {stimulus_id!r}")
        stimulus = self.stimuli[int(stimulus_id)]
        outcome = self.response_model.outcome_index(response)

        likelihood = self.likelihood.observation_probabilities(stimulus.stimulus_id, outcome)
        try:
            self._posterior.update(likelihood)
        except PosteriorCollapseError:
            self._failed = True
            raise

        self._frequency_counts[self.stimuli.frequency_index[stimulus.stimulus_id]] += 1
        self._history.add_trial(
            TrialRecord(
                trial_index=self.trial_count + 1,
                stimulus_id=stimulus.stimulus_id,
                frequency=stimulus.frequency,
                log_contrast=stimulus.log_contrast,
                response=response,
            )
        )
        logger.debug(
            "Trial %d: f=%.2f cpd, logC=%.3f, response=%r",
            self.trial_count,
            stimulus.frequency,
            stimulus.log_contrast,
            response,
        )

    def _ensure_usable(self) -> None:
        if self._failed:
            raise PosteriorCollapseError(
                "session posterior collapsed earlier; start a new session"
            )

    # ------------------------------------------------------------------
    # ESTIMATES AND DERIVED METRICS
    # ------------------------------------------------------------------
    def mode_estimate(self) -> CSFParams:
        """Maximum-a-posteriori hypothesis."""
        return self._posterior.map_params()

    def expected_estimate(self) -> CSFParams:
        """Posterior-mean parameters (peak frequency averaged in log space)."""
        return self._posterior.mean_params()

    def _resolve(self, params: CSFParams | None) -> CSFParams:
        # Before any update this is the expected estimate of the initial prior.
        return self.expected_estimate() if params is None else params

    def evaluate_csf(self, freq, params: CSFParams | None = None) -> jnp.ndarray:
        return evaluate_csf(freq, self._resolve(params))

    def area_under_log_csf(self, params: CSFParams | None = None) -> float:
        """AULCSF of `params`, or of the expected estimate when None."""
        return area_under_log_csf(self._resolve(params))

    def csf_curve(self, params: CSFParams | None = None) -> tuple[jnp.ndarray, jnp.ndarray]:
        """Sampled (frequencies, log_sensitivity) of `params` or the expected estimate."""
        return csf_curve(self._resolve(params))

    def acuity_cutoff(self, curve: tuple[jnp.ndarray, jnp.ndarray] | None = None) -> float | None:
        """Cutoff frequency of `curve`, or of the expected-estimate curve when None."""
        return acuity_cutoff(curve if curve is not None else self.csf_curve())

    def result(self, estimate: Literal["mode", "mean"] = "mode") -> SessionResult:
        """
        Summary values for the reporting layer.

        Parameters
        ----------
        estimate : {"mode", "mean"}, default="mode"
            Point estimate to report. The MAP curve tracks the tested points;
            the posterior mean is smoother.
        """
        if estimate == "mode":
            params = self.mode_estimate()
        elif estimate == "mean":
            params = self.expected_estimate()
        else:
            raise ValueError(f"estimate must be 'mode' or 'mean', got {estimate!r}")
        curve = csf_curve(params)
        return SessionResult(
            params=params,
            aulcsf=area_under_log_csf(params),
            curve=curve,
            acuity_cutoff=acuity_cutoff(curve),
            trial_count=self.trial_count,
        )
