#!/usr/bin/env python3
"""Test suite for the satellite slot layout"""

import unittest

import numpy as np

from rxclock.core.constants import CLIGHT, DFREQ_G1, FREQ_G1, FREQ_L1, FREQ_L2, SYS_GAL, SYS_GLO
from rxclock.core.satellite_layout import SatelliteLayout


class TestSatelliteLayout(unittest.TestCase):

    def test_gps_only(self):
        layout = SatelliteLayout("G")
        self.assertEqual(layout.n_sat_tot, 32)
        self.assertEqual(layout.n_sys, 1)
        self.assertEqual(layout.slot('G', 1), 0)
        self.assertEqual(layout.slot('G', 32), 31)

    def test_fixed_block_order(self):
        # Selection order does not matter
        layout = SatelliteLayout("EG")
        self.assertEqual(layout.n_sat_tot, 32 + 36)
        self.assertEqual(layout.slot('E', 1), 32)
        self.assertEqual(layout.system_of(40), SYS_GAL)

    def test_disabled_or_out_of_range(self):
        layout = SatelliteLayout("GR")
        self.assertEqual(layout.slot('E', 3), -1)
        self.assertEqual(layout.slot('G', 33), -1)
        self.assertEqual(layout.slot('R', 0), -1)

    def test_satellite_lookup(self):
        layout = SatelliteLayout("GR")
        self.assertEqual(layout.satellite(34), ('R', 3))
        self.assertEqual(layout.satellite_id(4), 'G05')
        self.assertEqual(layout.system_of(33), SYS_GLO)
        with self.assertRaises(IndexError):
            layout.satellite(56)

    def test_invalid_selection(self):
        with self.assertRaises(ValueError):
            SatelliteLayout("")
        with self.assertRaises(ValueError):
            SatelliteLayout("GX")

    def test_wavelengths(self):
        layout = SatelliteLayout("GR", glonass_channels={2: -4})
        lam = layout.wavelengths()
        self.assertEqual(lam.shape, (56, 2))
        np.testing.assert_allclose(lam[0], [CLIGHT / FREQ_L1, CLIGHT / FREQ_L2])
        self.assertAlmostEqual(lam[layout.slot('R', 1), 0], CLIGHT / FREQ_G1)
        self.assertAlmostEqual(lam[layout.slot('R', 2), 0], CLIGHT / (FREQ_G1 - 4 * DFREQ_G1))
        self.assertTrue(np.all(lam > 0))


if __name__ == '__main__':
    unittest.main()
