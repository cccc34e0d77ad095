"""
dataset.py
-----------

Core data containers for qcsf.

defines:
- TrialRecord: one presented stimulus and the response it received
- TrialHistory: ordered, append-only container of TrialRecords

Notes
-----
- Records are frozen dataclasses; the history only ever grows.
- Use to_numpy() for analysis or plotting in downstream layers.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

import numpy as np

Response = Union[bool, int]


@dataclass(frozen=True)
class TrialRecord:
    """
    A single completed trial.

    Attributes
    ----------
    trial_index : int
        1-based position of the trial in the session.
    stimulus_id : int
        Index into the stimulus grid.
    frequency : float
        Spatial frequency presented (cpd).
    log_contrast : float
        log10 contrast presented.
    response : bool | int
        Binary detection flag, or graded angular distance (0-3, -1 = none).
    """

    trial_index: int
    stimulus_id: int
    frequency: float
    log_contrast: float
    response: Response

    @property
    def contrast(self) -> float:
        return 10.0**self.log_contrast


class TrialHistory:
    """
    Ordered, append-only container of trial records.

    Attributes
    ----------
    records : tuple[TrialRecord, ...]
        All trials in presentation order.
    """

    def __init__(self) -> None:
        self._records: list[TrialRecord] = []

    def add_trial(self, record: TrialRecord) -> None:
        """Append a single trial."""
        self._records.append(record)

    @property
    def records(self) -> tuple[TrialRecord, ...]:
        return tuple(self._records)

    @property
    def responses(self) -> list[Response]:
        return [r.response for r in self._records]

    def to_numpy(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return frequencies, log-contrasts and responses as numpy arrays.

        Returns
        -------
        frequencies : np.ndarray
        log_contrasts : np.ndarray
        responses : np.ndarray
        """
        return (
            np.array([r.frequency for r in self._records], dtype=float),
            np.array([r.log_contrast for r in self._records], dtype=float),
            np.array([int(r.response) for r in self._records], dtype=int),
        )

    def __len__(self) -> int:
        """Return number of trials."""
        return len(self._records)

    def __iter__(self) -> Iterator[TrialRecord]:
        return iter(tuple(self._records))

    def tail(self, n: int) -> TrialHistory:
        """Return the last n trials as a new TrialHistory."""
        new_history = TrialHistory()
        new_history._records = self._records[-n:] if n > 0 else []
        return new_history

    def copy(self) -> TrialHistory:
        new_history = TrialHistory()
        new_history._records = list(self._records)
        return new_history
