"""
qcsf.data
=========

submodule for trial records.

Includes:
- dataset: TrialRecord, TrialHistory
"""

from .dataset import TrialHistory, TrialRecord

__all__ = ["TrialHistory", "TrialRecord"]
