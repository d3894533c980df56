"""Tests for clock drift discontinuity detection and repair"""

import unittest

import numpy as np

from rxclock.clock.discontinuity import (
    detect_discontinuities, median_window, repair_discontinuities
)

N_EPOCHS = 20
SPIKE = 5e-5


def _drift(*spikes):
    """Slowly increasing drift (1e-7 s/s steps) with spikes at given indices"""
    drift = 1e-7 * np.arange(N_EPOCHS - 1)
    for k in spikes:
        drift[k] = SPIKE
    return drift


class TestDetectDiscontinuities(unittest.TestCase):

    def test_single_outlier(self):
        drift = np.zeros(N_EPOCHS - 1)
        drift[7] = 2e-5
        np.testing.assert_array_equal(detect_discontinuities(drift), [7])

    def test_within_threshold(self):
        drift = np.full(N_EPOCHS - 1, 1e-6)
        drift[3] = 5e-6
        self.assertEqual(detect_discontinuities(drift).size, 0)

    def test_custom_threshold(self):
        drift = np.zeros(N_EPOCHS - 1)
        drift[3] = 5e-6
        np.testing.assert_array_equal(detect_discontinuities(drift, threshold=1e-6), [3])

    def test_empty(self):
        self.assertEqual(detect_discontinuities(np.zeros(0)).size, 0)


class TestMedianWindow(unittest.TestCase):
    """Window bounds for a 20-epoch session (19 drift samples)"""

    def test_leading_indices_use_first_ten(self):
        for k in range(4):
            self.assertEqual(median_window(k, N_EPOCHS), slice(0, 10))

    def test_centred_window(self):
        self.assertEqual(median_window(4, N_EPOCHS), slice(0, 10))
        self.assertEqual(median_window(5, N_EPOCHS), slice(1, 11))
        self.assertEqual(median_window(10, N_EPOCHS), slice(6, 16))
        self.assertEqual(median_window(13, N_EPOCHS), slice(9, 19))

    def test_trailing_indices_use_last_ten(self):
        for k in range(14, N_EPOCHS - 1):
            self.assertEqual(median_window(k, N_EPOCHS), slice(9, 19))

    def test_short_session_is_clamped(self):
        self.assertEqual(median_window(5, 8), slice(0, 7))
        self.assertEqual(median_window(1, 8), slice(0, 10))


class TestRepairDiscontinuities(unittest.TestCase):

    def _repair(self, *spikes):
        drift = _drift(*spikes)
        disc = detect_discontinuities(drift)
        np.testing.assert_array_equal(disc, list(spikes))
        return repair_discontinuities(drift, disc, N_EPOCHS)

    def test_index_four_uses_first_ten(self):
        repaired = self._repair(4)
        # 0, 1, 2, 3, 5, ..., 9 and the spike -> (5 + 6) / 2
        self.assertAlmostEqual(repaired[4], 5.5e-7, places=15)

    def test_index_five_uses_centred_window(self):
        repaired = self._repair(5)
        # 1..10 without 5 and the spike -> (6 + 7) / 2; first ten would give 5e-7
        self.assertAlmostEqual(repaired[5], 6.5e-7, places=15)

    def test_middle_index(self):
        repaired = self._repair(10)
        self.assertAlmostEqual(repaired[10], 11.5e-7, places=15)

    def test_trailing_index(self):
        repaired = self._repair(17)
        # 9..18 without 17 and the spike -> (13 + 14) / 2
        self.assertAlmostEqual(repaired[17], 13.5e-7, places=15)

    def test_repairs_are_sequential(self):
        repaired = self._repair(5, 6)
        self.assertAlmostEqual(repaired[5], 7.5e-7, places=15)
        # Window of index 6 already holds the repaired index 5
        self.assertAlmostEqual(repaired[6], 7.75e-7, places=15)

    def test_other_samples_untouched(self):
        drift = _drift(10)
        repaired = repair_discontinuities(drift, np.array([10]), N_EPOCHS)
        mask = np.arange(N_EPOCHS - 1) != 10
        np.testing.assert_array_equal(repaired[mask], drift[mask])
        self.assertEqual(drift[10], SPIKE)


if __name__ == '__main__':
    unittest.main()
