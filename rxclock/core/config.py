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

"""Receiver clock pre-processing configuration"""

from dataclasses import dataclass, fields
from typing import Any, Dict

from .constants import (
    CLIGHT, CLOCK_CORRECTED_THRESHOLD, CLOCK_DRIFT_THRESHOLD,
    JUMP_THRESHOLD_FACTOR, MIN_SAT_BASE
)


@dataclass
class ClockConfig:
    """Processing options passed explicitly to the clock estimator and jump classifier.

    Attributes
    ----------
    cutoff : float
        Elevation cutoff angle handed to the position solver (degrees)
    snr_threshold : float
        SNR threshold handed to the position solver (dB-Hz)
    n_sys : int
        Number of active constellations; each adds one clock bias unknown
    drift_threshold : float
        Deviation of the clock drift from its mean flagged as a
        discontinuity (s/s)
    clock_corrected_threshold : float
        Peak absolute clock error below which observations are taken as
        already clock corrected (s)
    jump_threshold_factor : float
        Multiplier on ``drift_threshold`` giving the observation jump
        threshold in seconds
    max_workers : int
        Worker threads for the per-epoch solver calls (1 = serial)
    """
    cutoff: float = 10.0
    snr_threshold: float = 0.0
    n_sys: int = 1
    drift_threshold: float = CLOCK_DRIFT_THRESHOLD
    clock_corrected_threshold: float = CLOCK_CORRECTED_THRESHOLD
    jump_threshold_factor: float = JUMP_THRESHOLD_FACTOR
    max_workers: int = 1

    def __post_init__(self) -> None:
        if not -90.0 <= self.cutoff <= 90.0:
            raise ValueError(f"cutoff must be within [-90, 90] degrees, got {self.cutoff}")
        if self.n_sys < 1:
            raise ValueError(f"n_sys must be at least 1, got {self.n_sys}")
        if self.drift_threshold <= 0.0:
            raise ValueError("drift_threshold must be positive")
        if self.clock_corrected_threshold < 0.0:
            raise ValueError("clock_corrected_threshold must not be negative")
        if self.jump_threshold_factor <= 0.0:
            raise ValueError("jump_threshold_factor must be positive")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

    @property
    def min_satellites(self) -> int:
        """Minimum satellite count for a clock solution (3 + one clock per system)"""
        return MIN_SAT_BASE + self.n_sys

    @property
    def jump_threshold(self) -> float:
        """Observation jump threshold in meters"""
        return self.drift_threshold * self.jump_threshold_factor * CLIGHT

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ClockConfig":
        """Configure from dictionary

        Example config:
        {
            'cutoff': 15.0,
            'snr_threshold': 30.0,
            'n_sys': 2,
            'max_workers': 4
        }
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config) - known
        if unknown:
            raise ValueError(f"Unknown clock configuration keys: {sorted(unknown)}")
        return cls(**config)
