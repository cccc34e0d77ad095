"""
utils
=====

Shared utility functions and helpers for qcsf.

This subpackage provides:
- candidates : hypothesis grid, stimulus grid and frequency bands.
- diagnostics : marginals, credible bands and parameter summaries.
- math : logistic, entropy in bits, Gaussian bumps.
"""

from .candidates import (
    DEFAULT_FREQUENCY_BANDS,
    FrequencyBand,
    HypothesisGrid,
    StimulusCandidate,
    StimulusGrid,
)
from .diagnostics import (
    credible_band,
    marginal_distribution,
    parameter_summary,
    print_parameter_summary,
)
from .math import entropy_bits, gaussian_bump, logistic

__all__ = [
    # candidates
    "HypothesisGrid",
    "StimulusGrid",
    "StimulusCandidate",
    "FrequencyBand",
    "DEFAULT_FREQUENCY_BANDS",
    # diagnostics
    "marginal_distribution",
    "credible_band",
    "parameter_summary",
    "print_parameter_summary",
    # math
    "logistic",
    "entropy_bits",
    "gaussian_bump",
]
