def test_top_level_api_imports():
    import qcsf as q

    for name in [
        "ExperimentSession",
        "EngineConfig",
        "SessionResult",
        "CSFParams",
        "UniformPrior",
        "GaussianPrior",
        "BinaryResponse",
        "GradedOrientationResponse",
        "TrialRecord",
        "TrialHistory",
        "InvalidResponseError",
        "PosteriorCollapseError",
    ]:
        assert hasattr(q, name)


def test_subpackage_imports():
    from qcsf.model import LikelihoodCache, evaluate_csf  # noqa: F401
    from qcsf.posterior import GridPosterior  # noqa: F401
    from qcsf.session import STIMULUS_MODES  # noqa: F401
    from qcsf.trial_placement import InfoGainPlacement, TrialPlacement  # noqa: F401
    from qcsf.utils import HypothesisGrid, StimulusGrid, credible_band  # noqa: F401


def test_errors_are_value_and_runtime_errors():
    from qcsf import InvalidResponseError, PosteriorCollapseError

    assert issubclass(InvalidResponseError, ValueError)
    assert issubclass(PosteriorCollapseError, RuntimeError)
