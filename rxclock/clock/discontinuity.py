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

"""Clock drift discontinuity detection and repair.

A drift sample is a discontinuity when it deviates from the series mean by
more than the drift threshold. Each one is replaced by the median of a
10-sample window whose position depends on where the sample sits:

==========================  ===========================================
drift index k (zero-based)  window
==========================  ===========================================
k < 4                       drift[0:10]
4 <= k <= n_epochs - 7      drift[k-4 : k+6]
k > n_epochs - 7            drift[n_epochs-11 : n_epochs-1]
==========================  ===========================================

``n_epochs`` counts epochs, so the drift series holds ``n_epochs - 1``
samples and the last window is its final ten samples. The bounds are fixed
offsets; they are clamped only when the session is too short to hold a full
window.
"""

import logging

import numpy as np

from ..core.constants import CLOCK_DRIFT_THRESHOLD, MEDIAN_WINDOW

logger = logging.getLogger(__name__)

# Samples before / after the repaired index in the centred window
WINDOW_BEFORE = 4
WINDOW_AFTER = MEDIAN_WINDOW - WINDOW_BEFORE


def detect_discontinuities(drift: np.ndarray,
                           threshold: float = CLOCK_DRIFT_THRESHOLD) -> np.ndarray:
    """Indices where ``|drift - mean(drift)| > threshold``"""
    drift = np.asarray(drift, dtype=float)
    if drift.size == 0:
        return np.zeros(0, dtype=int)
    return np.flatnonzero(np.abs(drift - np.mean(drift)) > threshold)


def median_window(k: int, n_epochs: int) -> slice:
    """Drift window whose median replaces the discontinuity at ``k``"""
    if k < WINDOW_BEFORE:
        return slice(0, MEDIAN_WINDOW)
    if k <= n_epochs - 1 - WINDOW_AFTER:
        return slice(k - WINDOW_BEFORE, k + WINDOW_AFTER)
    return slice(max(n_epochs - 1 - MEDIAN_WINDOW, 0), n_epochs - 1)


def repair_discontinuities(drift: np.ndarray, discontinuities: np.ndarray,
                           n_epochs: int) -> np.ndarray:
    """
    Replace discontinuities with the median of their window

    Parameters
    ----------
    drift : np.ndarray
        Drift series of length ``n_epochs - 1`` (s/s)
    discontinuities : np.ndarray
        Indices to repair; processed in order, each repair sees the
        previous ones
    n_epochs : int
        Number of epochs of the session

    Returns
    -------
    np.ndarray
        Repaired copy of the drift series
    """
    repaired = np.array(drift, dtype=float)
    for k in discontinuities:
        window = median_window(int(k), n_epochs)
        value = float(np.median(repaired[window]))
        logger.debug(f"Drift discontinuity at {k}: {repaired[k]:.3e} -> {value:.3e} "
                     f"(window {window.start}:{window.stop})")
        repaired[k] = value
    return repaired
