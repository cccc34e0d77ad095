"""
task.py
-------

Response models for different psychophysical paradigms.

Each ResponseModel defines:
- outcome_index(response)
    Map a domain response value to one of the model's outcome classes.

- outcome_probabilities(psi, hypotheses)
    Map raw detection probabilities psi to the probability of every
    outcome class. The leading axis indexes outcomes and sums to 1.

Implemented paradigms:
- BinaryResponse: n-AFC (guess rate 1/n) and yes/no (false-alarm rate)
  with a single correct/incorrect outcome.
- GradedOrientationResponse: 6-orientation Gabor identification with an
  extra "no target" response. Outcomes are the angular distance (0-3 steps
  of 30 deg) between the presented and the reported orientation, plus
  "none". A detected target can still be reported at a confusable
  orientation; a missed target yields a blind orientation guess or, mostly,
  "none".

Connections
-----------
- LikelihoodCache calls outcome_probabilities() once on the full
  (hypothesis, stimulus) psi table.
- ExperimentSession calls outcome_index() to validate a response before it
  touches the posterior.
- New paradigms are added by subclassing ResponseModel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import jax.numpy as jnp
import numpy as np

if TYPE_CHECKING:
    from qcsf.utils.candidates import HypothesisGrid

# 6 orientations + "no target"
GRADED_NUM_AFC = 7
NO_TARGET = -1


class InvalidResponseError(ValueError):
    """A response value that does not map onto any modelled outcome class."""


def _is_integer(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


class ResponseModel(ABC):
    """
    Abstract base class for response models.

    Attributes
    ----------
    n_outcomes : int
        Number of outcome classes.
    """

    n_outcomes: int

    @property
    def uniform_probability(self) -> float:
        """Probability of each outcome under a response that carries no information."""
        return 1.0 / self.n_outcomes

    @abstractmethod
    def outcome_index(self, response: Any) -> int:
        """Return the outcome class of `response` or raise InvalidResponseError."""
        ...

    @abstractmethod
    def outcome_probabilities(
        self, psi: jnp.ndarray, hypotheses: HypothesisGrid | None = None
    ) -> jnp.ndarray:
        """
        Probability of every outcome class given detection probabilities.

        Parameters
        ----------
        psi : jnp.ndarray
            Raw detection probabilities, any shape.
        hypotheses : HypothesisGrid | None
            Grid the rows of psi belong to. Available to response models whose
            outcome mapping depends on the curve parameters; the built-in
            models ignore it.

        Returns
        -------
        jnp.ndarray, shape (n_outcomes, *psi.shape)
        """
        ...

    def observation_probability(
        self, psi: jnp.ndarray, response: Any, hypotheses: HypothesisGrid | None = None
    ) -> jnp.ndarray:
        """Probability of the observed `response`, same shape as psi."""
        return self.outcome_probabilities(psi, hypotheses)[self.outcome_index(response)]


@dataclass(frozen=True)
class BinaryResponse(ResponseModel):
    """
    Correct/incorrect response model.

    P(correct | h, s) = gamma + (1 - gamma - lapse) * psi(h, s)

    Parameters
    ----------
    num_afc : int, default=2
        Number of forced-choice alternatives. num_afc <= 1 selects the yes/no
        paradigm, where "correct" means "I see it".
    lapse : float, default=0.04
        Lapse rate.
    false_alarm_rate : float, default=0.01
        Guess rate used in yes/no mode only.

    Notes
    -----
    Outcome 0 is correct / detected, outcome 1 is incorrect / not detected.
    Accepted responses are booleans and the integers 1 (correct) and 0.
    """

    num_afc: int = 2
    lapse: float = 0.04
    false_alarm_rate: float = 0.01

    n_outcomes = 2

    def __post_init__(self):
        if not 0.0 <= self.lapse < 1.0:
            raise ValueError(f"lapse must be in [0, 1), got {self.lapse}")
        if not 0.0 <= self.false_alarm_rate < 1.0:
            raise ValueError(
                f"false_alarm_rate must be in [0, 1), got {self.false_alarm_rate}"
            )
        if self.gamma + self.lapse >= 1.0:
            raise ValueError(
                f"guess rate ({self.gamma}) plus lapse ({self.lapse}) must stay below 1"
            )

    @property
    def is_yes_no(self) -> bool:
        return self.num_afc <= 1

    @property
    def gamma(self) -> float:
        """Chance rate: false-alarm rate for yes/no, 1/num_afc otherwise."""
        return self.false_alarm_rate if self.is_yes_no else 1.0 / self.num_afc

    def outcome_index(self, response: Any) -> int:
        if isinstance(response, (bool, np.bool_)):
            return 0 if response else 1
        if _is_integer(response) and response in (0, 1):
            return 0 if response == 1 else 1
        raise InvalidResponseError(
            f"binary response must be a boolean or 0/1, got {response!r}"
        )

    def outcome_probabilities(
        self, psi: jnp.ndarray, hypotheses: HypothesisGrid | None = None
    ) -> jnp.ndarray:
        psi = jnp.asarray(psi)
        p_correct = self.gamma + (1.0 - self.gamma - self.lapse) * psi
        return jnp.stack([p_correct, 1.0 - p_correct])


@dataclass(frozen=True)
class GradedOrientationResponse(ResponseModel):
    """
    Graded orientation-identification response model.

    The target is always present at one of `sum(multiplicity)` orientations.
    For the angular distance d between presented and reported orientation,
    a single reported orientation at distance d has probability

        P(d | h, s) = psi * (1 - lapse) * kernel[d] + (1 - psi) * guess_rate / n

    and the outcome class "distance d" collects multiplicity[d] orientations.
    The "no target" response has probability

        P(none | h, s) = psi * lapse + (1 - psi) * (1 - guess_rate)

    Parameters
    ----------
    lapse : float, default=0.04
        Probability of answering "none" although the target was seen.
    guess_rate : float, default=0.15
        Probability of guessing an orientation when the target was missed.
    kernel : tuple of float, default=(0.82, 0.07, 0.015, 0.01)
        Confusion kernel: mass per single orientation at distance 0..3 when the
        target is detected. sum(multiplicity * kernel) must be 1.
    multiplicity : tuple of int, default=(1, 2, 2, 1)
        Number of orientations at each distance (30 deg steps, 180 deg symmetry).

    Notes
    -----
    Outcomes 0..3 are the distances, outcome 4 is "none". Accepted responses
    are the integers 0, 1, 2, 3 and -1 (no target perceived).
    """

    lapse: float = 0.04
    guess_rate: float = 0.15
    kernel: tuple[float, ...] = (0.82, 0.07, 0.015, 0.01)
    multiplicity: tuple[int, ...] = (1, 2, 2, 1)

    def __post_init__(self):
        if len(self.kernel) != len(self.multiplicity):
            raise ValueError("kernel and multiplicity must have the same length")
        if not 0.0 <= self.lapse < 1.0:
            raise ValueError(f"lapse must be in [0, 1), got {self.lapse}")
        if not 0.0 <= self.guess_rate <= 1.0:
            raise ValueError(f"guess_rate must be in [0, 1], got {self.guess_rate}")
        if min(self.kernel) < 0:
            raise ValueError("kernel entries must be non-negative")
        mass = sum(m * k for m, k in zip(self.multiplicity, self.kernel))
        if abs(mass - 1.0) > 1e-6:
            raise ValueError(
                f"sum(multiplicity * kernel) must equal 1, got {mass:.6f}"
            )

    @property
    def n_outcomes(self) -> int:
        return len(self.kernel) + 1

    @property
    def n_orientations(self) -> int:
        return sum(self.multiplicity)

    @property
    def none_index(self) -> int:
        return len(self.kernel)

    def outcome_index(self, response: Any) -> int:
        if _is_integer(response):
            if response == NO_TARGET:
                return self.none_index
            if 0 <= response < len(self.kernel):
                return int(response)
        raise InvalidResponseError(
            f"graded response must be an integer in -1..{len(self.kernel) - 1}, "
            f"got {response!r}"
        )

    def outcome_probabilities(
        self, psi: jnp.ndarray, hypotheses: HypothesisGrid | None = None
    ) -> jnp.ndarray:
        psi = jnp.asarray(psi)
        shape = (-1,) + (1,) * psi.ndim
        kernel = jnp.asarray(self.kernel).reshape(shape)
        multiplicity = jnp.asarray(self.multiplicity, dtype=kernel.dtype).reshape(shape)

        per_orientation = psi * (1.0 - self.lapse) * kernel + (1.0 - psi) * (
            self.guess_rate / self.n_orientations
        )
        none = psi * self.lapse + (1.0 - psi) * (1.0 - self.guess_rate)
        return jnp.concatenate([multiplicity * per_orientation, none[None]], axis=0)


def response_model_for(
    num_afc: int,
    lapse: float = 0.04,
    false_alarm_rate: float = 0.01,
    guess_rate: float = 0.15,
) -> ResponseModel:
    """
    Default response model for a paradigm with `num_afc` response keys.

    7 keys (6 orientations + "no target") select the graded model; anything
    else is a binary n-AFC or, for num_afc <= 1, yes/no model.
    """
    if num_afc == GRADED_NUM_AFC:
        return GradedOrientationResponse(lapse=lapse, guess_rate=guess_rate)
    return BinaryResponse(num_afc=num_afc, lapse=lapse, false_alarm_rate=false_alarm_rate)


def orientation_distance(
    presented_deg: float, response_deg: float | None, step_deg: float = 30.0
) -> int:
    """
    Graded response value for an orientation answer.

    Gabor patches are symmetric under 180 deg rotation, so the largest
    possible error is 90 deg (3 steps of 30 deg).

    Parameters
    ----------
    presented_deg : float
        Orientation that was shown.
    response_deg : float | None
        Orientation the subject reported, or None for "no target".
    step_deg : float, default=30
        Angular spacing between response orientations.

    Returns
    -------
    int
        Distance in steps (0..3), or -1 for "no target".
    """
    if response_deg is None:
        return NO_TARGET
    diff = abs(presented_deg - response_deg) % 180.0
    return int(round(min(diff, 180.0 - diff) / step_deg))
