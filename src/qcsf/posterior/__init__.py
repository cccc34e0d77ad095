"""
posterior
=========

Discrete posterior over the CSF hypothesis grid.

This subpackage provides:
- GridPosterior: normalized weights with Bayes update, entropy and estimates
- PosteriorCollapseError: raised when an update leaves no posterior mass
"""

from .grid_posterior import GridPosterior, PosteriorCollapseError

__all__ = ["GridPosterior", "PosteriorCollapseError"]
