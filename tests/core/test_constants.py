#!/usr/bin/env python3
"""Test suite for constants and system helpers"""

import unittest

from rxclock.core.constants import (
    CLIGHT, CLOCK_CORRECTED_THRESHOLD, CLOCK_DRIFT_THRESHOLD, DFREQ_G1, DFREQ_G2,
    FREQ_G1, FREQ_G2, FREQ_L1, FREQ_L2, FREQ_L5, JUMP_THRESHOLD_FACTOR,
    MEDIAN_WINDOW, MIN_SAT_BASE, SYS_GAL, SYS_GLO, SYS_GPS, SYS_NONE,
    char2sys, lam_carr, sys2char
)


class TestPhysicalConstants(unittest.TestCase):
    """Test physical constants values"""

    def test_speed_of_light(self):
        self.assertEqual(CLIGHT, 299792458.0)

    def test_gps_frequencies(self):
        """Test GPS frequency constants"""
        self.assertAlmostEqual(FREQ_L1, 1575.42e6, delta=1e3)
        self.assertAlmostEqual(FREQ_L2, 1227.60e6, delta=1e3)
        self.assertGreater(FREQ_L1, FREQ_L2)
        self.assertGreater(FREQ_L2, FREQ_L5)

    def test_glonass_frequencies(self):
        self.assertAlmostEqual(FREQ_G1, 1602.0e6, delta=1e3)
        self.assertAlmostEqual(FREQ_G2, 1246.0e6, delta=1e3)
        self.assertAlmostEqual(DFREQ_G1 / DFREQ_G2, 9.0 / 7.0)

    def test_wavelength(self):
        # L1 wavelength ~19 cm
        self.assertAlmostEqual(lam_carr(FREQ_L1), 0.1903, places=4)
        self.assertEqual(lam_carr(0.0), 0.0)


class TestClockThresholds(unittest.TestCase):
    """Test receiver clock pre-processing thresholds"""

    def test_values(self):
        self.assertEqual(CLOCK_DRIFT_THRESHOLD, 1e-5)
        self.assertEqual(CLOCK_CORRECTED_THRESHOLD, 1e-6)
        self.assertEqual(JUMP_THRESHOLD_FACTOR, 10.0)
        self.assertEqual(MIN_SAT_BASE, 3)
        self.assertEqual(MEDIAN_WINDOW, 10)

    def test_jump_threshold_in_meters(self):
        # About 30 km, i.e. a 0.1 ms clock jump
        jump = CLOCK_DRIFT_THRESHOLD * JUMP_THRESHOLD_FACTOR * CLIGHT
        self.assertAlmostEqual(jump, 29979.2458, places=3)


class TestSystemConversion(unittest.TestCase):

    def test_round_trip(self):
        for char in "GREC":
            self.assertEqual(sys2char(char2sys(char)), char)

    def test_lower_case(self):
        self.assertEqual(char2sys('e'), SYS_GAL)

    def test_unknown(self):
        self.assertEqual(char2sys('X'), SYS_NONE)
        self.assertEqual(sys2char(0x80), ' ')

    def test_distinct_bits(self):
        self.assertEqual(SYS_GPS & SYS_GLO, 0)


if __name__ == '__main__':
    unittest.main()
