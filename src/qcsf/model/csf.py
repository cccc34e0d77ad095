"""
csf.py
------

Parametric contrast sensitivity function and curve-derived metrics.

The CSF is a log-parabola with an extra high-frequency truncation term:

    logS(f) = g - b * D**2 - d * D**4 * [D > 0],   D = log10(f) - log10(f0)

where
    g  = peak log-sensitivity (peak gain),
    f0 = peak spatial frequency (cpd),
    b  = curvature of the parabola (bandwidth),
    d  = extra steepening above the peak (truncation).

The curve rises from low spatial frequencies, peaks at f0 and falls off
faster above the peak, the usual shape of the human CSF.

Connections
-----------
- HypothesisGrid evaluates predict_log_sensitivity at the ceiling frequency
  to prune non-physiological hypotheses.
- LikelihoodCache evaluates it for every (hypothesis, stimulus) pair.
- ExperimentSession uses the curve metrics (AULCSF, sampled curve, acuity
  cutoff) for its reports.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

import jax.numpy as jnp

# Upper bound for high-contrast human acuity (100% contrast cutoff).
MAX_HUMAN_CUTOFF_CPD = 60.0

MIN_FREQUENCY = 0.05
MIN_PEAK_FREQUENCY = 0.2
MIN_SHAPE = 0.2


@dataclass(frozen=True)
class CSFParams:
    """
    One hypothesis of the CSF model.

    Attributes
    ----------
    peak_gain : float
        Peak log10 sensitivity.
    peak_freq : float
        Spatial frequency of the peak, in cpd.
    bandwidth : float
        Curvature of the log-parabola.
    truncation : float
        Quartic steepening applied above the peak.
    """

    peak_gain: float
    peak_freq: float
    bandwidth: float
    truncation: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def predict_log_sensitivity(freq, g, f, b, d) -> jnp.ndarray:
    """
    Predicted log10 sensitivity at spatial frequency `freq`.

    Parameters
    ----------
    freq : float or jnp.ndarray
        Spatial frequency (cpd). Floored at 0.05.
    g, f, b, d : float or jnp.ndarray
        Peak gain, peak frequency (floored at 0.2), bandwidth and
        truncation (both floored at 0.2).

    Returns
    -------
    jnp.ndarray
        Log sensitivity, broadcast over all inputs.

    Notes
    -----
    All arguments broadcast, so a column of hypotheses against a row of
    frequencies yields the full (hypothesis, frequency) table in one call.
    """
    log_f = jnp.log10(jnp.maximum(freq, MIN_FREQUENCY))
    log_peak = jnp.log10(jnp.maximum(f, MIN_PEAK_FREQUENCY))
    delta = log_f - log_peak
    base_drop = jnp.maximum(b, MIN_SHAPE) * delta**2
    high_freq_drop = jnp.where(delta > 0, jnp.maximum(d, MIN_SHAPE) * delta**4, 0.0)
    return g - base_drop - high_freq_drop


def evaluate_csf(freq, params: CSFParams) -> jnp.ndarray:
    """Evaluate the CSF of a single parameter set at `freq`."""
    return predict_log_sensitivity(
        freq, params.peak_gain, params.peak_freq, params.bandwidth, params.truncation
    )


def area_under_log_csf(
    params: CSFParams,
    f_min: float = 0.5,
    f_max: float = 36.0,
    n_steps: int = 500,
) -> float:
    """
    Area under the log CSF (AULCSF).

    Composite trapezoid rule over log10 frequency with `n_steps` intervals.
    Only the part of the curve above zero (threshold contrast below 100%)
    contributes.

    Parameters
    ----------
    params : CSFParams
        Curve to integrate.
    f_min, f_max : float
        Integration range in cpd.
    n_steps : int, default=500
        Number of trapezoid intervals.

    Returns
    -------
    float
        AULCSF in log10(sensitivity) x log10(cpd) units.
    """
    if n_steps < 1:
        raise ValueError(f"n_steps must be positive, got {n_steps}")
    log_min, log_max = jnp.log10(f_min), jnp.log10(f_max)
    d_log_f = (log_max - log_min) / n_steps
    freqs = 10.0 ** (log_min + jnp.arange(n_steps + 1) * d_log_f)
    log_s = evaluate_csf(freqs, params)
    positive = jnp.where(log_s > 0, log_s, 0.0)
    area = d_log_f * (jnp.sum(positive) - 0.5 * (positive[0] + positive[-1]))
    return float(area)


def csf_curve(
    params: CSFParams,
    n_points: int = 200,
    log_f_min: float = -0.3,
    log_f_max: float = 1.7,
) -> tuple[jnp.ndarray, jnp.ndarray]:
    """
    Densely sampled CSF for downstream plotting.

    Returns
    -------
    frequencies : jnp.ndarray, shape (n_points,)
        Sample frequencies in cpd, evenly spaced in log10.
    log_sensitivity : jnp.ndarray, shape (n_points,)
        Predicted log10 sensitivity at each frequency.
    """
    frequencies = jnp.logspace(log_f_min, log_f_max, n_points)
    return frequencies, evaluate_csf(frequencies, params)


def acuity_cutoff(
    curve: tuple[jnp.ndarray, jnp.ndarray],
    ceiling: float = MAX_HUMAN_CUTOFF_CPD,
) -> float | None:
    """
    High-frequency cutoff where the sampled curve crosses logS = 0.

    Finds the first sample pair going from >= 0 to < 0 and interpolates
    linearly in log10 frequency. The result is clamped to `ceiling`.

    Parameters
    ----------
    curve : (frequencies, log_sensitivity)
        Output of csf_curve().
    ceiling : float, default=60
        Physiological upper bound in cpd.

    Returns
    -------
    float | None
        Cutoff frequency in cpd, or None if the curve never crosses zero
        from above within its span.
    """
    frequencies, log_s = curve
    log_f = jnp.log10(jnp.asarray(frequencies))
    log_s = jnp.asarray(log_s)
    crossings = jnp.nonzero((log_s[:-1] >= 0) & (log_s[1:] < 0))[0]
    if crossings.size == 0:
        return None
    i = int(crossings[0])
    s1, s2 = log_s[i], log_s[i + 1]
    frac = (0.0 - s1) / (s2 - s1)
    cutoff = 10.0 ** (log_f[i] + frac * (log_f[i + 1] - log_f[i]))
    return min(float(cutoff), ceiling)
