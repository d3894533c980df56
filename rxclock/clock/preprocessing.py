# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Receiver clock pre-processing pipeline.

Pipeline:
1. Clock error and drift estimation over all epochs
2. Drift discontinuity detection and median repair
3. Early exit when the peak clock error shows observations are already
   clock corrected
4. Clock jump classification at the discontinuities
5. Frequency correction and resampling of code and phase observations
"""

import logging
from typing import Any, Optional

import numpy as np

from ..core.config import ClockConfig
from ..core.data_structures import ClockPreprocessingResult, ObservationSet
from .correction import ObservationCorrector
from .discontinuity import detect_discontinuities, repair_discontinuities
from .estimator import ClockEstimator, ProgressCallback, extend_drift
from .interfaces import EphemerisSelector, EpochPositionSolver
from .jumps import classify_jumps

logger = logging.getLogger(__name__)


class ClockPreprocessor:
    """Estimate the receiver clock and correct observations for it"""

    def __init__(self,
                 ephemeris_selector: EphemerisSelector,
                 position_solver: EpochPositionSolver,
                 config: Optional[ClockConfig] = None):
        self.config = config if config is not None else ClockConfig()
        self.estimator = ClockEstimator(ephemeris_selector, position_solver, self.config)

    def run(self,
            time_ref,
            time,
            observations: ObservationSet,
            ephemerides: Any = None,
            precise: Any = None,
            iono: Any = None,
            approx_pos: Optional[np.ndarray] = None,
            progress: Optional[ProgressCallback] = None) -> ClockPreprocessingResult:
        """
        Run the full pipeline

        Parameters
        ----------
        time_ref : array_like
            GPS reference time per epoch (s)
        time : array_like
            Nominal receiver time per epoch, as read from RINEX (s)
        observations : ObservationSet
            Raw observations; left unmodified
        ephemerides, precise, iono : Any
            Passed through to the ephemeris selector and position solver
        approx_pos : array_like, optional
            Approximate receiver position (ECEF, m)
        progress : callable, optional
            Called as ``progress(done, total)`` after each epoch solve

        Returns
        -------
        ClockPreprocessingResult
            Corrected observations, clock solution and bad-satellite flags
        """
        time = np.asarray(time, dtype=float)
        time_ref = np.asarray(time_ref, dtype=float)
        if time.size == 0:
            raise ValueError("Empty epoch series")
        if time_ref.shape != time.shape:
            raise ValueError(f"time_ref has {time_ref.size} epochs, time has {time.size}")

        n_epochs = len(time)
        clock = self.estimator.estimate(time, observations, ephemerides, precise,
                                        iono, approx_pos, progress)

        discontinuities = detect_discontinuities(clock.drift, self.config.drift_threshold)
        if len(discontinuities):
            logger.info(f"{len(discontinuities)} clock drift discontinuities repaired")
        clock.drift = extend_drift(repair_discontinuities(clock.drift, discontinuities, n_epochs))

        bad_sats = np.zeros(observations.n_sat_tot, dtype=bool)
        peak = float(np.max(np.abs(clock.dtr)))
        if peak < self.config.clock_corrected_threshold:
            logger.info(f"Peak clock error {peak:.3e} s: observations already clock corrected")
            return ClockPreprocessingResult(
                observations=observations.copy(),
                clock=clock,
                bad_sats=bad_sats,
                discontinuities=discontinuities,
                already_corrected=True,
            )

        jump_flags = classify_jumps(discontinuities, observations, self.config.jump_threshold)
        corrector = ObservationCorrector(jump_flags)
        corrected, bad_sats, corrected_ref = corrector.correct(
            observations.copy(), time, time_ref, clock.dtr)

        return ClockPreprocessingResult(
            observations=corrected,
            clock=clock,
            bad_sats=bad_sats,
            discontinuities=discontinuities,
            jump_flags=jump_flags,
            time_ref=corrected_ref,
        )


def preprocess_clock(time_ref,
                     time,
                     observations: ObservationSet,
                     ephemeris_selector: EphemerisSelector,
                     position_solver: EpochPositionSolver,
                     ephemerides: Any = None,
                     precise: Any = None,
                     iono: Any = None,
                     approx_pos: Optional[np.ndarray] = None,
                     config: Optional[ClockConfig] = None,
                     progress: Optional[ProgressCallback] = None) -> ClockPreprocessingResult:
    """Convenience wrapper around :class:`ClockPreprocessor`"""
    preprocessor = ClockPreprocessor(ephemeris_selector, position_solver, config)
    return preprocessor.run(time_ref, time, observations, ephemerides, precise,
                            iono, approx_pos, progress)
