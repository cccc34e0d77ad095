"""
test_session.py
---------------

End-to-end tests of ExperimentSession: trial loop, convergence on simulated
observers, coverage quotas, determinism, input validation and posterior
collapse handling.
"""

import jax.numpy as jnp
import numpy as np
import pytest

from qcsf import (
    EngineConfig,
    ExperimentSession,
    GaussianPrior,
    InvalidResponseError,
    PosteriorCollapseError,
)
from qcsf.model.csf import area_under_log_csf
from qcsf.model.task import BinaryResponse, GradedOrientationResponse, ResponseModel
from qcsf.session.experiment_session import SessionResult
from qcsf.trial_placement.base import TrialPlacement
from qcsf.utils.math import entropy_bits


def run(session, observer, n_trials):
    stimuli = []
    for _ in range(n_trials):
        stim = session.select_stimulus()
        session.update(stim.stimulus_id, observer(stim))
        stimuli.append(stim)
    return stimuli


class TestConstruction:
    def test_default_session(self):
        session = ExperimentSession()
        assert session.trial_count == 0
        assert isinstance(session.response_model, BinaryResponse)
        assert session.response_model.num_afc == 5
        assert len(session.stimuli) == 18 * 30
        assert session.likelihood.outcome_probs.shape == (
            2,
            len(session.hypotheses),
            len(session.stimuli),
        )
        assert float(session.posterior.sum()) == pytest.approx(1.0, abs=1e-5)
        assert session.frequency_counts == {}

    def test_gabor_mode_is_graded(self):
        session = ExperimentSession(EngineConfig.for_mode("gabor"))
        assert isinstance(session.response_model, GradedOrientationResponse)
        assert session.likelihood.n_outcomes == 5

    def test_no_hypothesis_visible_beyond_ceiling(self):
        session = ExperimentSession()
        for i in range(0, len(session.hypotheses), 97):
            assert float(session.evaluate_csf(60.0, session.hypotheses[i])) <= 0.0


class TestTrialLoop:
    def test_select_stimulus_is_idempotent(self):
        session = ExperimentSession()
        assert session.select_stimulus() == session.select_stimulus()
        assert session.trial_count == 0

    def test_stimulus_contrast_in_unit_interval(self, binary_observer):
        session = ExperimentSession()
        for stim in run(session, binary_observer, 5):
            assert 0.0 < stim.contrast <= 1.0

    def test_history_and_counts(self, binary_observer):
        session = ExperimentSession()
        stimuli = run(session, binary_observer, 6)
        assert session.trial_count == 6
        assert [r.trial_index for r in session.history] == [1, 2, 3, 4, 5, 6]
        assert [r.stimulus_id for r in session.history] == [s.stimulus_id for s in stimuli]
        assert sum(session.frequency_counts.values()) == 6
        assert set(session.frequency_counts) == {s.frequency for s in stimuli}

    def test_is_complete(self, binary_observer):
        session = ExperimentSession(EngineConfig(max_trials=2))
        assert not session.is_complete
        run(session, binary_observer, 2)
        assert session.is_complete
        assert not ExperimentSession().is_complete

    @pytest.mark.parametrize("graded", [True, False], ids=["graded", "binary"])
    def test_posterior_normalised_after_every_update(self, graded, graded_observer, binary_observer):
        session = ExperimentSession(EngineConfig.for_mode("gabor") if graded else EngineConfig())
        observer = graded_observer if graded else binary_observer
        for _ in range(40):
            stim = session.select_stimulus()
            session.update(stim.stimulus_id, observer(stim))
            post = session.posterior
            assert float(post.sum()) == pytest.approx(1.0, abs=1e-5)
            assert float(post.min()) >= 0.0

    @pytest.mark.parametrize("graded", [True, False], ids=["graded", "binary"])
    def test_every_choice_is_at_least_as_informative_as_average(
        self, graded, graded_observer, binary_observer
    ):
        session = ExperimentSession(EngineConfig.for_mode("gabor") if graded else EngineConfig())
        observer = graded_observer if graded else binary_observer
        for _ in range(40):
            stim = session.select_stimulus()
            base = session.score_candidates().base_entropy
            assert float(base[stim.stimulus_id]) <= float(base.mean()) + 1e-5
            session.update(stim.stimulus_id, observer(stim))


class TestConvergence:
    def test_graded_correct_responses_raise_sensitivity(self):
        session = ExperimentSession(
            EngineConfig.for_mode("gabor", prior=GaussianPrior())
        )
        initial = session.expected_estimate()
        run(session, lambda stim: 0, 50)

        assert session.trial_count == 50
        assert float(session.posterior.sum()) == pytest.approx(1.0, abs=1e-5)
        assert session.expected_estimate().peak_gain > initial.peak_gain + 0.3

    def test_graded_no_target_responses_lower_sensitivity(self):
        config = EngineConfig.for_mode("gabor")
        session = ExperimentSession(config)
        initial_area = session.area_under_log_csf()
        run(session, lambda stim: -1, 50)

        # The smallest gain on the grid bounds how low the AULCSF can go.
        area = session.area_under_log_csf()
        assert area < 1.0
        assert area < 0.5 * initial_area
        assert session.expected_estimate().peak_gain == pytest.approx(
            min(config.peak_gain_values), abs=0.05
        )

    def test_binary_correct_responses_raise_sensitivity(self):
        session = ExperimentSession(EngineConfig(num_afc=2))
        initial = session.expected_estimate()
        run(session, lambda stim: True, 30)
        assert session.expected_estimate().peak_gain > initial.peak_gain

    def test_tracks_simulated_observer(self, graded_observer, true_csf):
        session = ExperimentSession(EngineConfig.for_mode("gabor"))
        run(session, graded_observer, 60)
        estimate = session.expected_estimate()
        assert estimate.peak_gain == pytest.approx(true_csf.peak_gain, abs=0.5)

    def test_entropy_decreases(self, graded_observer):
        session = ExperimentSession(EngineConfig.for_mode("gabor"))
        before = float(entropy_bits(session.posterior))
        run(session, graded_observer, 20)
        assert float(entropy_bits(session.posterior)) < before


class TestCoverage:
    def test_every_band_reaches_its_quota(self, binary_observer):
        config = EngineConfig(num_afc=2)
        session = ExperimentSession(config)
        run(session, binary_observer, 80)

        counts = session.frequency_counts
        for band in config.frequency_bands:
            in_band = sum(n for freq, n in counts.items() if band.contains(freq))
            assert in_band >= band.min_trials


class TestDeterminism:
    def test_identical_sessions_agree(self, graded_observer):
        a = ExperimentSession(EngineConfig.for_mode("gabor"))
        b = ExperimentSession(EngineConfig.for_mode("gabor"))
        seq_a = run(a, graded_observer, 12)
        seq_b = run(b, graded_observer, 12)
        assert seq_a == seq_b
        assert jnp.array_equal(a.posterior, b.posterior)

    def test_sessions_are_independent(self, graded_observer):
        a = ExperimentSession(EngineConfig.for_mode("gabor"))
        b = ExperimentSession(EngineConfig.for_mode("gabor"))
        before = b.posterior
        run(a, graded_observer, 3)
        assert b.trial_count == 0
        assert jnp.array_equal(b.posterior, before)


class TestValidation:
    @pytest.fixture
    def graded(self):
        return ExperimentSession(EngineConfig.for_mode("gabor"))

    @pytest.mark.parametrize("response", [4, -2, True, "none", None])
    def test_invalid_graded_response(self, graded, response):
        before = graded.posterior
        with pytest.raises(InvalidResponseError):
            graded.update(0, response)
        assert graded.trial_count == 0
        assert jnp.array_equal(graded.posterior, before)
        assert not graded.failed

    def test_invalid_binary_response(self):
        session = ExperimentSession(EngineConfig(num_afc=2))
        with pytest.raises(InvalidResponseError):
            session.update(0, "yes")
        assert session.trial_count == 0

    @pytest.mark.parametrize("stimulus_id", [-1, 18 * 30, True, 1.0, "3"])
    def test_invalid_stimulus_id(self, graded, stimulus_id):
        before = graded.posterior
        with pytest.raises(ValueError):
            graded.update(stimulus_id, 0)
        assert graded.trial_count == 0
        assert jnp.array_equal(graded.posterior, before)

    def test_numpy_integer_id_accepted(self, graded):
        graded.update(np.int64(5), 0)
        assert graded.history[0].stimulus_id == 5


class _ImpossibleResponse(ResponseModel):
    """Assigns zero probability to every outcome."""

    n_outcomes = 2

    def outcome_index(self, response):
        return 0

    def outcome_probabilities(self, psi, hypotheses=None):
        return jnp.zeros((2,) + psi.shape)


class TestCollapse:
    def test_collapse_fails_the_session(self):
        session = ExperimentSession(
            EngineConfig(robust_likelihood_mix=0.0), response_model=_ImpossibleResponse()
        )
        before = session.posterior
        with pytest.raises(PosteriorCollapseError):
            session.update(0, True)

        assert session.failed
        assert session.trial_count == 0
        assert jnp.array_equal(session.posterior, before)
        with pytest.raises(PosteriorCollapseError):
            session.select_stimulus()
        with pytest.raises(PosteriorCollapseError):
            session.update(0, True)

    def test_mixing_prevents_collapse(self):
        session = ExperimentSession(response_model=_ImpossibleResponse())
        session.update(0, True)
        assert session.trial_count == 1
        assert not session.failed


class TestEstimates:
    def test_estimates_are_idempotent(self, graded_observer):
        session = ExperimentSession(EngineConfig.for_mode("gabor"))
        run(session, graded_observer, 5)
        assert session.expected_estimate() == session.expected_estimate()
        assert session.mode_estimate() == session.mode_estimate()
        f1, s1 = session.csf_curve()
        f2, s2 = session.csf_curve()
        assert jnp.array_equal(f1, f2) and jnp.array_equal(s1, s2)

    def test_default_params_is_expected_estimate(self):
        session = ExperimentSession()
        expected = session.expected_estimate()
        assert session.area_under_log_csf() == area_under_log_csf(expected)
        assert float(session.evaluate_csf(4.0)) == float(session.evaluate_csf(4.0, expected))

    def test_initial_mode_is_first_hypothesis(self):
        session = ExperimentSession()
        assert session.mode_estimate() == session.hypotheses[0]

    def test_acuity_cutoff(self):
        session = ExperimentSession()
        cutoff = session.acuity_cutoff()
        assert cutoff is None or 0.5 < cutoff <= 60.0

    def test_result(self, graded_observer):
        session = ExperimentSession(EngineConfig.for_mode("gabor"))
        run(session, graded_observer, 10)

        result = session.result()
        assert isinstance(result, SessionResult)
        assert result.trial_count == 10
        assert result.params == session.mode_estimate()
        assert result.aulcsf == area_under_log_csf(result.params)
        assert result.curve[0].shape == (200,)

        mean = session.result(estimate="mean")
        assert mean.params == session.expected_estimate()
        with pytest.raises(ValueError):
            session.result(estimate="median")


class _FirstStimulus(TrialPlacement):
    def propose(self, posterior, likelihood, frequency_counts):
        return 0


class TestInjectedPlacement:
    def test_custom_placement_is_used(self):
        session = ExperimentSession(placement=_FirstStimulus())
        assert session.select_stimulus().stimulus_id == 0
        with pytest.raises(TypeError):
            session.score_candidates()
