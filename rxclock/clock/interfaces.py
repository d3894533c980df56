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

"""Collaborators of the clock estimator.

Ephemeris selection and the per-epoch positioning solve live outside this
package. Any callables with the signatures below can be plugged in, e.g. a
least-squares SPP solver wrapped to return an :class:`EpochSolution`.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import numpy as np

from ..core.config import ClockConfig


@dataclass
class EpochInput:
    """Everything the position solver receives for one epoch.

    Attributes
    ----------
    epoch : int
        Zero-based epoch index
    time : float
        Nominal receiver time (s)
    sats : np.ndarray
        Slots of the satellites with a code-L1 observation
    code : np.ndarray
        Code-L1 pseudoranges of ``sats`` (m)
    snr : np.ndarray
        SNR-L1 of ``sats`` (dB-Hz), 0 where not observed
    wavelengths : np.ndarray
        Wavelength table rows of ``sats``, shape (len(sats), 2)
    ephemerides : Any
        Ephemerides valid at ``time``, as returned by the selector
    precise : Any
        Precise orbit/clock products, passed through untouched
    iono : Any
        Ionosphere model parameters, passed through untouched
    approx_pos : np.ndarray, optional
        Approximate receiver position (ECEF, m)
    has_approx_pos : bool
        False when no usable approximate position was given
    """
    epoch: int
    time: float
    sats: np.ndarray
    code: np.ndarray
    snr: np.ndarray
    wavelengths: np.ndarray
    ephemerides: Any = None
    precise: Any = None
    iono: Any = None
    approx_pos: Optional[np.ndarray] = None
    has_approx_pos: bool = False


@dataclass
class EpochSolution:
    """Position solver output for one epoch.

    Attributes
    ----------
    dtr : float, optional
        Receiver clock error (s); None when no estimate was produced
    used_sats : np.ndarray
        Slots of the satellites kept by the solver
    position : np.ndarray, optional
        Receiver position (ECEF, m) if the solver provides it
    """
    dtr: Optional[float] = None
    used_sats: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))
    position: Optional[np.ndarray] = None

    @property
    def n_used(self) -> int:
        return len(self.used_sats)


class EphemerisSelector(Protocol):
    """Return the ephemerides valid at ``time`` for up to ``n_sat_tot`` satellites"""

    def __call__(self, ephemerides: Any, time: float, n_sat_tot: int) -> Any:
        ...


class EpochPositionSolver(Protocol):
    """Solve one epoch; return None when no solution could be computed"""

    def __call__(self, epoch: EpochInput, config: ClockConfig) -> Optional[EpochSolution]:
        ...


def has_approx_position(approx_pos) -> bool:
    """True if an approximate position was given and is not all zeros"""
    if approx_pos is None:
        return False
    approx_pos = np.asarray(approx_pos, dtype=float)
    return approx_pos.size > 0 and float(np.sum(np.abs(approx_pos))) != 0.0
