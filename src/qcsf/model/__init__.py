"""
qcsf.model
==========

Model-layer API: everything model-related in one place.

Includes
--------
- CSF model (CSFParams, evaluate_csf and curve metrics)
- Priors (UniformPrior, GaussianPrior)
- Response models (ResponseModel base, BinaryResponse, GradedOrientationResponse)
- LikelihoodCache

Typical usage
-------------
    from qcsf.model import CSFParams, evaluate_csf, GradedOrientationResponse
"""

from .csf import (
    CSFParams,
    acuity_cutoff,
    area_under_log_csf,
    csf_curve,
    evaluate_csf,
    predict_log_sensitivity,
)
from .likelihood import LikelihoodCache, detection_probability
from .prior import GaussianPrior, Prior, UniformPrior
from .task import (
    BinaryResponse,
    GradedOrientationResponse,
    InvalidResponseError,
    ResponseModel,
    orientation_distance,
    response_model_for,
)

__all__ = [
    # CSF
    "CSFParams",
    "predict_log_sensitivity",
    "evaluate_csf",
    "area_under_log_csf",
    "csf_curve",
    "acuity_cutoff",
    # Likelihood
    "LikelihoodCache",
    "detection_probability",
    # Priors
    "Prior",
    "UniformPrior",
    "GaussianPrior",
    # Response models
    "ResponseModel",
    "BinaryResponse",
    "GradedOrientationResponse",
    "InvalidResponseError",
    "response_model_for",
    "orientation_distance",
]
