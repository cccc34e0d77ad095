"""
trial_placement
===============

Stimulus selection strategies.

- TrialPlacement: base class, propose() returns a stimulus id
- InfoGainPlacement: minimum expected posterior entropy with coverage weighting

Examples
--------
>>> from qcsf.trial_placement import InfoGainPlacement
>>> placement = InfoGainPlacement(session.stimuli)
>>> stimulus_id = placement.propose(posterior, likelihood, frequency_counts)
"""

from qcsf.trial_placement.base import TrialPlacement
from qcsf.trial_placement.info_gain import (
    InfoGainPlacement,
    PlacementScores,
    expected_posterior_entropy,
)

__all__ = [
    "TrialPlacement",
    "InfoGainPlacement",
    "PlacementScores",
    "expected_posterior_entropy",
]
