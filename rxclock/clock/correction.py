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

"""Observation correction for the receiver clock error.

Two independent corrections are applied, as described in the RINEX
specification:

1. Frequency correction: subtract ``c * dtR`` (code, meters) or
   ``c * dtR / lambda`` (phase, cycles), only for observables whose jump flag
   is set, since self-steering receivers already remove it.
2. Receiver-satellite dynamics correction: resample every series from the
   nominal time tags onto the reference time shifted by ``dtR``, using a
   not-a-knot cubic spline.

A satellite is flagged bad when an observable has at most one usable epoch,
or when it has code but no phase on a frequency. Bad satellites stay in the
matrices untouched.
"""

import logging
from typing import Tuple

import numpy as np
from scipy.interpolate import CubicSpline

from ..core.constants import CLIGHT
from ..core.data_structures import CORRECTED_TYPES, JumpFlags, ObservationSet, ObsType

logger = logging.getLogger(__name__)

# Phase without code is fine, code without phase is not
CODE_COUNTERPART = {
    ObsType.PHASE_L1: ObsType.CODE_L1,
    ObsType.PHASE_L2: ObsType.CODE_L2,
}


def valid_epochs(time: np.ndarray) -> np.ndarray:
    """Epochs with a nominal time tag"""
    time = np.asarray(time, dtype=float)
    return np.flatnonzero((time != 0) & np.isfinite(time))


def realign_reference_time(time: np.ndarray, time_ref: np.ndarray,
                           dtr: np.ndarray) -> np.ndarray:
    """
    Shift the reference time by the receiver clock error

    ``time_ref = time + dtr + (time_ref - time)`` on epochs with a nominal
    time; other epochs keep their reference time.
    """
    time = np.asarray(time, dtype=float)
    corrected = np.array(time_ref, dtype=float)
    time_desync = corrected - time
    index = valid_epochs(time)
    corrected[index] = time[index] + dtr[index] + time_desync[index]
    return corrected


def resample_series(t: np.ndarray, y: np.ndarray, t_new: np.ndarray) -> np.ndarray:
    """
    Cubic spline resampling of ``y(t)`` onto ``t_new``

    Parameters
    ----------
    t : np.ndarray
        Strictly increasing sample times, at least two
    y : np.ndarray
        Samples
    t_new : np.ndarray
        Target times; outside ``t`` the spline extrapolates

    Returns
    -------
    np.ndarray
        Resampled values; targets equal to their own sample time return
        the sample unchanged
    """
    spline = CubicSpline(t, y, bc_type='not-a-knot', extrapolate=True)
    resampled = spline(t_new)
    at_node = t_new == t
    resampled[at_node] = y[at_node]
    return resampled


class ObservationCorrector:
    """Correct code and phase observations for the receiver clock error"""

    def __init__(self, jump_flags: JumpFlags):
        """
        Parameters
        ----------
        jump_flags : JumpFlags
            Observables needing the ``c * dtR`` frequency correction
        """
        self.jump_flags = jump_flags

    def correct(self,
                observations: ObservationSet,
                time: np.ndarray,
                time_ref: np.ndarray,
                dtr: np.ndarray) -> Tuple[ObservationSet, np.ndarray, np.ndarray]:
        """
        Correct all satellites and observables

        Parameters
        ----------
        observations : ObservationSet
            Observations to correct; modified in place
        time : np.ndarray
            Nominal receiver time per epoch (s)
        time_ref : np.ndarray
            Reference time per epoch (s)
        dtr : np.ndarray
            Receiver clock error per epoch (s)

        Returns
        -------
        observations : ObservationSet
            The corrected observations
        bad_sats : np.ndarray
            Bad-satellite flags, shape (n_sat_tot,)
        time_ref : np.ndarray
            Clock-corrected reference time
        """
        time = np.asarray(time, dtype=float)
        dtr = np.asarray(dtr, dtype=float)
        corrected_ref = realign_reference_time(time, time_ref, dtr)
        epochs = valid_epochs(time)
        bad_sats = np.zeros(observations.n_sat_tot, dtype=bool)

        for sat in range(observations.n_sat_tot):
            for obs_type in CORRECTED_TYPES:
                if not self._correct_series(observations, obs_type, sat, epochs,
                                            time, corrected_ref, dtr):
                    bad_sats[sat] = True

        n_bad = int(np.count_nonzero(bad_sats))
        if n_bad:
            logger.info(f"{n_bad} satellites flagged bad: {np.flatnonzero(bad_sats).tolist()}")
        return observations, bad_sats, corrected_ref

    def _correct_series(self, observations, obs_type, sat, epochs,
                        time, time_ref, dtr) -> bool:
        """Correct one satellite/observable; return False if the satellite is bad"""
        matrix = observations[obs_type]

        if not matrix.has_any(sat):
            counterpart = CODE_COUNTERPART.get(obs_type)
            if counterpart is not None and observations[counterpart].has_any(sat):
                logger.debug(f"Sat {sat}: {counterpart.value} without {obs_type.value}")
                return False
            return True

        index = np.intersect1d(epochs, matrix.epochs(sat))
        if len(index) <= 1:
            logger.debug(f"Sat {sat}: {len(index)} usable {obs_type.value} epochs")
            return False

        series = matrix.values[sat, index]
        if self.jump_flags[obs_type]:
            offset = CLIGHT * dtr[index]
            if obs_type.is_phase:
                offset = offset / observations.wavelength(sat, obs_type)
            series = series - offset

        matrix.values[sat, index] = resample_series(time[index], series, time_ref[index])
        return True
