"""
base.py
-------

Abstract base class for trial placement strategies.

A placement strategy is bound to a candidate pool (the stimulus grid) and
implements:
- propose(posterior, likelihood, frequency_counts) -> int
    Return the id of the stimulus to present next. Strategies read, and
    never mutate, the posterior, the likelihood cache and the coverage
    counters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from qcsf.model.likelihood import LikelihoodCache
    from qcsf.posterior.grid_posterior import GridPosterior


class TrialPlacement(ABC):
    @abstractmethod
    def propose(
        self,
        posterior: GridPosterior,
        likelihood: LikelihoodCache,
        frequency_counts: np.ndarray,
    ) -> int:
        """
        Return the id of the stimulus to present next.

        Parameters
        ----------
        posterior : GridPosterior
            Current posterior.
        likelihood : LikelihoodCache
            Precomputed outcome probabilities.
        frequency_counts : np.ndarray, shape (n_frequencies,)
            Trials already run at each distinct grid frequency.
        """
        ...
