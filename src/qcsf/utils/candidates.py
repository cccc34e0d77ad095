"""
candidates.py
-------------

Hypothesis and stimulus grids for qcsf.

Definition
----------
- The hypothesis grid is the discretized 4-D CSF parameter space the
  posterior lives on.
- The stimulus grid is the set of all (frequency, log-contrast) pairs that
  the placement strategy may present.

Separation of concerns
----------------------
- Grid construction (this module) defines *what* hypotheses and stimuli exist.
- Trial placement (InfoGainPlacement) defines *which* stimulus to present next.

Both grids are built once and are read-only afterwards: their arrays are
NumPy arrays with the writeable flag cleared. Kernels convert them to JAX
arrays when needed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from qcsf.model.csf import MAX_HUMAN_CUTOFF_CPD, CSFParams, predict_log_sensitivity

logger = logging.getLogger(__name__)

PARAM_NAMES = ("peak_gain", "peak_freq", "bandwidth", "truncation")


def _frozen(values, dtype=float) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class FrequencyBand:
    """
    Half-open frequency band [min_freq, max_freq) with a minimum trial quota.
    """

    min_freq: float
    max_freq: float
    min_trials: int

    def __post_init__(self):
        if not self.min_freq < self.max_freq:
            raise ValueError(
                f"band needs min_freq < max_freq, got [{self.min_freq}, {self.max_freq})"
            )
        if self.min_trials < 0:
            raise ValueError(f"min_trials must be non-negative, got {self.min_trials}")

    def contains(self, freq: float) -> bool:
        return self.min_freq <= freq < self.max_freq


# Clinical coverage table: low, mid (clinical core), high-mid, high.
DEFAULT_FREQUENCY_BANDS = (
    FrequencyBand(0.5, 2.0, 8),
    FrequencyBand(2.0, 6.0, 10),
    FrequencyBand(6.0, 16.0, 8),
    FrequencyBand(16.0, 30.0, 5),
)


@dataclass(frozen=True)
class StimulusCandidate:
    """A single presentable stimulus of the stimulus grid."""

    stimulus_id: int
    frequency: float
    log_contrast: float

    @property
    def contrast(self) -> float:
        return 10.0**self.log_contrast


class HypothesisGrid:
    """
    Discretized CSF parameter space.

    The grid is the Cartesian product of the four candidate lists (peak gain
    outermost, truncation innermost), restricted to physiological curves:
    hypotheses whose predicted log-sensitivity at `ceiling_freq` is above 0
    (i.e. still detectable at 100% contrast beyond the acuity ceiling) are
    dropped.

    Parameters
    ----------
    peak_gain_values, peak_freq_values, bandwidth_values, truncation_values :
        sequence of float
        Candidate values for each parameter.
    ceiling_freq : float, default=60
        Physiological ceiling frequency (cpd).

    Attributes
    ----------
    peak_gain, peak_freq, bandwidth, truncation : np.ndarray, shape (n,)
        Parameter values of each retained hypothesis (read-only).
    """

    def __init__(
        self,
        peak_gain_values: Sequence[float],
        peak_freq_values: Sequence[float],
        bandwidth_values: Sequence[float],
        truncation_values: Sequence[float],
        ceiling_freq: float = MAX_HUMAN_CUTOFF_CPD,
    ):
        axes = [
            np.asarray(v, dtype=float)
            for v in (peak_gain_values, peak_freq_values, bandwidth_values, truncation_values)
        ]
        for name, axis in zip(PARAM_NAMES, axes):
            if axis.ndim != 1 or axis.size == 0:
                raise ValueError(f"{name} candidate list must be a non-empty 1-D sequence")

        g, f, b, d = (m.reshape(-1) for m in np.meshgrid(*axes, indexing="ij"))
        ceiling_log_s = np.asarray(predict_log_sensitivity(ceiling_freq, g, f, b, d))
        keep = ceiling_log_s <= 0
        if not keep.any():
            raise ValueError(
                "hypothesis grid is empty: every candidate curve is still above "
                f"threshold at {ceiling_freq} cpd"
            )

        self.ceiling_freq = float(ceiling_freq)
        self.peak_gain = _frozen(g[keep])
        self.peak_freq = _frozen(f[keep])
        self.bandwidth = _frozen(b[keep])
        self.truncation = _frozen(d[keep])
        logger.debug(
            "Hypothesis grid: kept %d of %d candidates", int(keep.sum()), keep.size
        )

    def __len__(self) -> int:
        return self.peak_gain.shape[0]

    def __getitem__(self, index: int) -> CSFParams:
        return CSFParams(
            peak_gain=float(self.peak_gain[index]),
            peak_freq=float(self.peak_freq[index]),
            bandwidth=float(self.bandwidth[index]),
            truncation=float(self.truncation[index]),
        )

    def column(self, name: str) -> np.ndarray:
        """Return the parameter array called `name` (one of PARAM_NAMES)."""
        if name not in PARAM_NAMES:
            raise ValueError(f"unknown parameter {name!r}, expected one of {PARAM_NAMES}")
        return getattr(self, name)


class StimulusGrid:
    """
    Candidate stimuli: Cartesian product of frequencies and log-contrasts.

    Stimulus ids run frequency-major, so stimulus `i` has frequency
    `frequency_values[i // n_contrasts]`.

    Parameters
    ----------
    frequencies : sequence of float
        Spatial frequencies in cpd (> 0, distinct).
    log_contrasts : sequence of float
        log10 Michelson contrasts (<= 0, so contrast stays within (0, 1]).
    """

    def __init__(self, frequencies: Sequence[float], log_contrasts: Sequence[float]):
        freq_values = tuple(float(f) for f in frequencies)
        log_c_values = tuple(float(c) for c in log_contrasts)
        if not freq_values or not log_c_values:
            raise ValueError("stimulus grid needs at least one frequency and one contrast")
        if min(freq_values) <= 0:
            raise ValueError("stimulus frequencies must be positive")
        if len(set(freq_values)) != len(freq_values):
            raise ValueError("stimulus frequencies must be distinct")
        if max(log_c_values) > 0:
            raise ValueError("stimulus log-contrasts must be <= 0 (contrast <= 100%)")

        n_c = len(log_c_values)
        self.frequency_values = freq_values
        self.frequency_index = _frozen(np.repeat(np.arange(len(freq_values)), n_c), dtype=int)
        self.frequencies = _frozen(np.repeat(freq_values, n_c))
        self.log_contrasts = _frozen(np.tile(log_c_values, len(freq_values)))
        logger.debug(
            "Stimulus grid: %d frequencies x %d contrasts", len(freq_values), n_c
        )

    def __len__(self) -> int:
        return self.frequencies.shape[0]

    def __getitem__(self, stimulus_id: int) -> StimulusCandidate:
        if not 0 <= stimulus_id < len(self):
            raise ValueError(
                f"stimulus id {stimulus_id} out of range for grid of size {len(self)}"
            )
        return StimulusCandidate(
            stimulus_id=int(stimulus_id),
            frequency=self.frequency_values[self.frequency_index[stimulus_id]],
            log_contrast=float(self.log_contrasts[stimulus_id]),
        )

    def band_index(self, bands: Sequence[FrequencyBand]) -> np.ndarray:
        """
        Band membership of each distinct frequency.

        Returns
        -------
        np.ndarray, shape (n_frequencies,)
            Index into `bands` of the first band containing each frequency,
            or -1 for frequencies outside every band.
        """
        index = np.full(len(self.frequency_values), -1, dtype=int)
        for i, freq in enumerate(self.frequency_values):
            for j, band in enumerate(bands):
                if band.contains(freq):
                    index[i] = j
                    break
        return index
