"""
math.py
-------

Math utilities for qcsf.

Includes:
- logistic : psychometric detection probability from a log-sensitivity margin.
- entropy_bits : Shannon entropy of a discrete distribution, in bits.
- gaussian_bump : unnormalised Gaussian weight used by placement heuristics.

All functions use JAX (jax.numpy) so they can run inside jitted kernels.

Examples
--------
>>> import jax.numpy as jnp
>>> from qcsf.utils import math
>>> float(math.logistic(jnp.array(0.0), slope=3.5))
0.5
"""

from __future__ import annotations

import jax.numpy as jnp
from jax.scipy.special import xlogy

LOG2 = jnp.log(2.0)


def logistic(x: jnp.ndarray, slope: float) -> jnp.ndarray:
    """
    Logistic psychometric function of a signed margin.

    Parameters
    ----------
    x : jnp.ndarray
        Margin between predicted log-sensitivity and the stimulus'
        negative log-contrast. Positive means the stimulus is above threshold.
    slope : float
        Steepness of the psychometric function (per log10 unit).

    Returns
    -------
    jnp.ndarray
        Detection probability in (0, 1), same shape as x.
    """
    return 1.0 / (1.0 + jnp.exp(-slope * x))


def entropy_bits(p: jnp.ndarray, axis: int = -1) -> jnp.ndarray:
    """
    Shannon entropy (bits) of a probability vector along `axis`.

    Zero entries contribute nothing (0 * log 0 = 0).
    """
    return -jnp.sum(xlogy(p, p), axis=axis) / LOG2


def gaussian_bump(x: jnp.ndarray, center: float, sigma: float) -> jnp.ndarray:
    """exp(-0.5 * ((x - center) / sigma)**2), peak value 1 at the center."""
    return jnp.exp(-0.5 * ((x - center) / sigma) ** 2)
