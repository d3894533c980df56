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

"""Receiver clock jump classification.

Receivers disagree on whether they steer their observations for the clock
offset. At each drift discontinuity the raw observations show whether they
follow the clock: a step of more than ``jump_threshold`` meters between the
two epochs of the discontinuity means that observable carries the clock jump
and must get the ``c * dtR`` frequency correction.

The four flags (code-L1, code-L2, phase-L1, phase-L2) hold for the whole
session.
"""

import logging

import numpy as np
from numba import njit

from ..core.constants import CLIGHT, CLOCK_DRIFT_THRESHOLD, JUMP_THRESHOLD_FACTOR
from ..core.data_structures import CORRECTED_TYPES, JumpFlags, ObservationSet

logger = logging.getLogger(__name__)

JUMP_THRESHOLD = CLOCK_DRIFT_THRESHOLD * JUMP_THRESHOLD_FACTOR * CLIGHT  # meters


@njit(cache=True)
def _scan_jumps(discontinuities, values, present, scales, threshold):
    """
    Scan consecutive observation pairs for jumps.

    Parameters
    ----------
    discontinuities : ndarray, shape (n_disc,)
        Epoch k of each (k, k+1) pair to inspect
    values : ndarray, shape (n_types, n_sat, n_epochs)
        Observation values
    present : ndarray, shape (n_types, n_sat, n_epochs)
        Observation presence mask
    scales : ndarray, shape (n_types, n_sat)
        Factor converting each observable to meters
    threshold : float
        Jump threshold in meters

    Returns
    -------
    flags : ndarray, shape (n_types,)
        True for observable types showing a jump
    """
    n_types, n_sat, n_epochs = values.shape
    flags = np.zeros(n_types, dtype=np.bool_)
    n_set = 0

    for k in discontinuities:
        if k + 1 >= n_epochs:
            continue
        for s in range(n_sat):
            for t in range(n_types):
                if flags[t] or not (present[t, s, k] and present[t, s, k + 1]):
                    continue
                if abs(values[t, s, k + 1] - values[t, s, k]) * scales[t, s] > threshold:
                    flags[t] = True
                    n_set += 1
            if n_set == n_types:
                break
        if n_set == n_types:
            break

    return flags


def classify_jumps(discontinuities: np.ndarray,
                   observations: ObservationSet,
                   threshold: float = JUMP_THRESHOLD) -> JumpFlags:
    """
    Decide which observables carry receiver clock jumps

    Parameters
    ----------
    discontinuities : np.ndarray
        Drift discontinuity indices; index k compares epochs k and k+1
    observations : ObservationSet
        Raw (uncorrected) observations
    threshold : float
        Jump threshold in meters

    Returns
    -------
    JumpFlags
        Session-wide flags for code-L1, code-L2, phase-L1 and phase-L2
    """
    values = np.stack([observations[t].values for t in CORRECTED_TYPES])
    present = np.stack([observations[t].present for t in CORRECTED_TYPES])

    # Phase is compared in meters
    scales = np.ones((len(CORRECTED_TYPES), observations.n_sat_tot))
    for row, obs_type in enumerate(CORRECTED_TYPES):
        if obs_type.is_phase:
            scales[row] = observations.wavelengths[:, obs_type.band]

    flags = _scan_jumps(np.asarray(discontinuities, dtype=np.int64),
                        values, present, scales, float(threshold))
    jump_flags = JumpFlags.from_array(flags)

    logger.info(f"Clock jumps: code L1={jump_flags.code_l1} L2={jump_flags.code_l2}, "
                f"phase L1={jump_flags.phase_l1} L2={jump_flags.phase_l2}")
    return jump_flags
