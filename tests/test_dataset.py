"""
test_dataset.py
---------------

Tests for TrialRecord and TrialHistory.
"""

import numpy as np
import pytest

from qcsf.data.dataset import TrialHistory, TrialRecord


@pytest.fixture
def history():
    h = TrialHistory()
    h.add_trial(TrialRecord(1, 10, 2.0, -1.0, True))
    h.add_trial(TrialRecord(2, 40, 4.0, -1.5, False))
    h.add_trial(TrialRecord(3, 70, 8.0, -0.5, True))
    return h


def test_records_in_order(history):
    assert len(history) == 3
    assert [r.trial_index for r in history] == [1, 2, 3]
    assert history.responses == [True, False, True]


def test_records_view_is_immutable(history):
    records = history.records
    assert isinstance(records, tuple)
    history.add_trial(TrialRecord(4, 0, 1.0, 0.0, False))
    assert len(records) == 3
    assert len(history) == 4


def test_to_numpy(history):
    freqs, log_c, resp = history.to_numpy()
    np.testing.assert_allclose(freqs, [2.0, 4.0, 8.0])
    np.testing.assert_allclose(log_c, [-1.0, -1.5, -0.5])
    np.testing.assert_array_equal(resp, [1, 0, 1])


def test_tail_and_copy(history):
    assert [r.trial_index for r in history.tail(2)] == [2, 3]
    assert len(history.tail(0)) == 0
    clone = history.copy()
    clone.add_trial(TrialRecord(4, 0, 1.0, 0.0, False))
    assert len(history) == 3


def test_contrast():
    assert TrialRecord(1, 0, 1.0, -2.0, -1).contrast == pytest.approx(0.01)
