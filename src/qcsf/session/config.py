"""
config.py
---------

Engine configuration.

EngineConfig gathers every tunable of the adaptive engine as plain scalars
and sequences. Nothing is read from globals or the environment: the caller
builds a config and hands it to ExperimentSession.

Default table
-------------
=====================  =============================================
num_afc                5
lapse                  0.04
false_alarm_rate       0.01 (yes/no only)
guess_rate             0.15 (graded mode only)
psychometric_slope     3.5
peak_gain_values       10 values, linear 0.5 .. 2.8
peak_freq_values       0.8 .. 18 cpd (10 values)
bandwidth_values       0.8, 1.05, 1.3, 1.6, 1.95
truncation_values      1.0, 1.4, 1.8, 2.2, 2.6
stim_freqs             0.5 .. 24 cpd (18 values)
stim_log_contrasts     30 values, linear -3.0 .. 0.0
robust_likelihood_mix  0.03
boundary_sigma_log_c   0.2
prior                  UniformPrior()
frequency_bands        DEFAULT_FREQUENCY_BANDS
max_trials             None (no trial limit)
=====================  =============================================
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

import numpy as np

from qcsf.model.prior import GaussianPrior, Prior, UniformPrior
from qcsf.utils.candidates import DEFAULT_FREQUENCY_BANDS, FrequencyBand


def _linspace(start: float, stop: float, num: int) -> tuple[float, ...]:
    return tuple(float(v) for v in np.linspace(start, stop, num))


# Presets for the supported stimulus paradigms.
STIMULUS_MODES: dict[str, dict] = {
    # 6 Gabor orientations + "no target" (graded)
    "gabor": {"num_afc": 7, "psychometric_slope": 3.5},
    "gabor4afc": {"num_afc": 4, "psychometric_slope": 3.5},
    "tumbling_e": {"num_afc": 4, "psychometric_slope": 3.5},
    "sloan": {"num_afc": 10, "psychometric_slope": 4.05},
}


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration of an ExperimentSession.

    Attributes
    ----------
    num_afc : int
        Number of response alternatives. 7 selects the graded orientation
        model, <= 1 the yes/no model, anything else n-AFC.
    lapse, false_alarm_rate, guess_rate : float
        Response model rates.
    psychometric_slope : float
        Slope of the logistic psychometric function.
    peak_gain_values, peak_freq_values, bandwidth_values, truncation_values :
        tuple of float
        Hypothesis grid axes.
    stim_freqs, stim_log_contrasts : tuple of float
        Stimulus grid axes.
    robust_likelihood_mix : float
        Fraction of uniform likelihood mixed into every update.
    boundary_sigma_log_c : float
        Spread of the threshold-proximity weighting.
    prior : UniformPrior | GaussianPrior
        Initial distribution over the hypothesis grid.
    frequency_bands : tuple of FrequencyBand
        Coverage quotas.
    max_trials : int | None
        Trial limit reported through ExperimentSession.is_complete.
    """

    num_afc: int = 5
    lapse: float = 0.04
    false_alarm_rate: float = 0.01
    guess_rate: float = 0.15
    psychometric_slope: float = 3.5
    peak_gain_values: tuple[float, ...] = field(default_factory=lambda: _linspace(0.5, 2.8, 10))
    peak_freq_values: tuple[float, ...] = (0.8, 1.2, 1.8, 2.5, 3.5, 5.0, 7.0, 10.0, 14.0, 18.0)
    bandwidth_values: tuple[float, ...] = (0.8, 1.05, 1.3, 1.6, 1.95)
    truncation_values: tuple[float, ...] = (1.0, 1.4, 1.8, 2.2, 2.6)
    stim_freqs: tuple[float, ...] = (
        0.5, 0.75, 1.0, 1.25, 1.5, 1.75, 2.0, 2.5, 3.0,
        3.5, 4.0, 4.5, 5.0, 6.0, 8.0, 12.0, 16.0, 24.0,
    )
    stim_log_contrasts: tuple[float, ...] = field(
        default_factory=lambda: _linspace(-3.0, 0.0, 30)
    )
    robust_likelihood_mix: float = 0.03
    boundary_sigma_log_c: float = 0.2
    prior: Prior = field(default_factory=UniformPrior)
    frequency_bands: tuple[FrequencyBand, ...] = DEFAULT_FREQUENCY_BANDS
    max_trials: int | None = None

    def __post_init__(self):
        """Validate configuration."""
        if self.psychometric_slope <= 0:
            raise ValueError(
                f"psychometric_slope must be positive, got {self.psychometric_slope}"
            )
        if not 0.0 <= self.robust_likelihood_mix < 1.0:
            raise ValueError(
                f"robust_likelihood_mix must be in [0, 1), got {self.robust_likelihood_mix}"
            )
        if self.boundary_sigma_log_c <= 0:
            raise ValueError(
                f"boundary_sigma_log_c must be positive, got {self.boundary_sigma_log_c}"
            )
        if self.max_trials is not None and self.max_trials <= 0:
            raise ValueError(f"max_trials must be positive, got {self.max_trials}")
        if not isinstance(self.prior, (UniformPrior, GaussianPrior)):
            raise ValueError(f"unsupported prior {self.prior!r}")

    @classmethod
    def for_mode(cls, mode: str, **overrides) -> EngineConfig:
        """
        Config preset for a stimulus paradigm.

        Parameters
        ----------
        mode : str
            One of STIMULUS_MODES ("gabor", "gabor4afc", "tumbling_e", "sloan").
        **overrides
            Any EngineConfig field.
        """
        if mode not in STIMULUS_MODES:
            raise ValueError(
                f"unknown stimulus mode {mode!r}, expected one of {sorted(STIMULUS_MODES)}"
            )
        return cls(**{**STIMULUS_MODES[mode], **overrides})

    def with_overrides(self, **overrides) -> EngineConfig:
        """Return a copy with some fields replaced (re-validated)."""
        return replace(self, **overrides)
