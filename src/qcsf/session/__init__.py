"""
session
=======

Experiment orchestration.

This subpackage provides:
- EngineConfig : all tunables of the engine, with stimulus-mode presets.
- ExperimentSession : owns grids, likelihood cache, posterior and history,
  and runs select_stimulus() / update().
- SessionResult : end-of-session values for reporting.
"""

from .config import STIMULUS_MODES, EngineConfig
from .experiment_session import ExperimentSession, SessionResult

__all__ = ["EngineConfig", "ExperimentSession", "SessionResult", "STIMULUS_MODES"]
