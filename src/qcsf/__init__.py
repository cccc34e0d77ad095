"""
qcsf
====

Bayesian adaptive estimation of the contrast sensitivity function (qCSF).

The engine keeps a discrete posterior over four-parameter truncated
log-parabola CSFs, picks the next (spatial frequency, contrast) stimulus by
minimum expected posterior entropy, and updates the posterior from binary
or graded orientation responses.

----------------------------------------------------------------------
Workflow
----------------------------------------------------------------------

Core design
-----------
1. CSF model (model/csf.py):
   - Truncated log-parabola log-sensitivity in 4 parameters.
   - Derived metrics: AULCSF, dense curve, acuity cutoff.

2. Hypothesis and stimulus grids (utils/candidates.py):
   - Cartesian hypothesis grid, pruned of implausible curves.
   - Frequency-major stimulus grid with stable integer ids.

3. ResponseModel (model/task.py):
   - BinaryResponse: n-AFC or yes/no detection.
   - GradedOrientationResponse: 6 orientations + "no target".

4. LikelihoodCache (model/likelihood.py):
   - P(outcome | hypothesis, stimulus) precomputed once per session.

5. GridPosterior (posterior/grid_posterior.py):
   - Normalized Bayes updates with robust likelihood mixing.

6. InfoGainPlacement (trial_placement/info_gain.py):
   - Expected-entropy scoring with coverage heuristics.

Unified import style
--------------------
Top-level:
  from qcsf import ExperimentSession, EngineConfig, CSFParams
  from qcsf import UniformPrior, GaussianPrior
  from qcsf import BinaryResponse, GradedOrientationResponse

Subpackages:
  from qcsf.model import evaluate_csf, area_under_log_csf, LikelihoodCache
  from qcsf.posterior import GridPosterior, PosteriorCollapseError
  from qcsf.trial_placement import InfoGainPlacement
  from qcsf.utils import HypothesisGrid, StimulusGrid, credible_band

Data flow
---------
    session = ExperimentSession(EngineConfig.for_mode("gabor"))
    while not done:
        stim = session.select_stimulus()      # frequency, contrast, id
        response = present(stim)              # external
        session.update(stim.stimulus_id, response)
    report(session.result())

----------------------------------------------------------------------
"""

# Re-export subpackages for unified import style (e.g., qcsf.model, qcsf.utils)
from . import data as data
from . import model as model
from . import posterior as posterior
from . import session as session
from . import trial_placement as trial_placement
from . import utils as utils
from .data.dataset import TrialHistory, TrialRecord
from .model.csf import CSFParams
from .model.prior import GaussianPrior, UniformPrior
from .model.task import BinaryResponse, GradedOrientationResponse, InvalidResponseError
from .posterior.grid_posterior import PosteriorCollapseError

# Experiment orchestration
from .session.config import EngineConfig
from .session.experiment_session import ExperimentSession, SessionResult

__all__ = [
    # Session orchestration
    "ExperimentSession",
    "EngineConfig",
    "SessionResult",
    # Model
    "CSFParams",
    "UniformPrior",
    "GaussianPrior",
    "BinaryResponse",
    "GradedOrientationResponse",
    # Data handling
    "TrialRecord",
    "TrialHistory",
    # Errors
    "InvalidResponseError",
    "PosteriorCollapseError",
    # Subpackages
    "model",
    "posterior",
    "trial_placement",
    "utils",
    "data",
    "session",
]
