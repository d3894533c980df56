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

"""Receiver clock estimation and observation correction.

Key Components:
- ClockEstimator: per-epoch clock solve with extrapolation fallback and drift
- Drift discontinuity detection and median repair
- Clock jump classification per observable type
- ObservationCorrector: frequency correction and spline resampling
- ClockPreprocessor / preprocess_clock: the complete pipeline

Examples:
    >>> from rxclock.clock import preprocess_clock
    >>> result = preprocess_clock(time_ref, time, observations,
    ...                           select_eph, solve_epoch, ephemerides=eph)
    >>> result.bad_satellites()
"""

from .correction import ObservationCorrector, realign_reference_time, resample_series
from .discontinuity import detect_discontinuities, median_window, repair_discontinuities
from .estimator import ClockEstimator, extend_drift, resolve_clock
from .interfaces import EpochInput, EpochPositionSolver, EpochSolution, EphemerisSelector
from .jumps import JUMP_THRESHOLD, classify_jumps
from .preprocessing import ClockPreprocessor, preprocess_clock

__all__ = [
    'ClockEstimator', 'ClockPreprocessor', 'EpochInput', 'EpochPositionSolver',
    'EpochSolution', 'EphemerisSelector', 'JUMP_THRESHOLD', 'ObservationCorrector',
    'classify_jumps', 'detect_discontinuities', 'extend_drift', 'median_window',
    'preprocess_clock', 'realign_reference_time', 'repair_discontinuities',
    'resample_series', 'resolve_clock',
]
