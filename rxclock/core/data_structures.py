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

"""Core data structures for receiver clock pre-processing"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

import numpy as np
import pandas as pd


class ObsType(Enum):
    """Observables carried by an :class:`ObservationSet`.

    Attributes
    ----------
    CODE_L1, CODE_L2 : str
        Pseudoranges in meters
    PHASE_L1, PHASE_L2 : str
        Carrier phases in cycles
    DOPPLER_L1, DOPPLER_L2 : str
        Doppler shifts in Hz
    SNR_L1 : str
        Signal-to-noise ratio in dB-Hz
    """
    CODE_L1 = "code_l1"
    CODE_L2 = "code_l2"
    PHASE_L1 = "phase_l1"
    PHASE_L2 = "phase_l2"
    DOPPLER_L1 = "doppler_l1"
    DOPPLER_L2 = "doppler_l2"
    SNR_L1 = "snr_l1"

    @property
    def is_phase(self) -> bool:
        return self in (ObsType.PHASE_L1, ObsType.PHASE_L2)

    @property
    def band(self) -> int:
        """Wavelength table column (0 = first carrier, 1 = second)"""
        return 1 if self.value.endswith("l2") else 0


# Observables corrected for the receiver clock, in processing order
CORRECTED_TYPES = (ObsType.CODE_L1, ObsType.CODE_L2, ObsType.PHASE_L1, ObsType.PHASE_L2)


@dataclass
class ObservableMatrix:
    """Satellite x epoch grid of one observable with an explicit presence mask.

    Attributes
    ----------
    values : np.ndarray
        Measurement values, shape (n_sat_tot, n_epochs)
    present : np.ndarray
        True where a measurement exists, same shape, dtype bool

    Notes
    -----
    Values under ``present == False`` carry no meaning; they are kept at
    zero so that :meth:`to_zero_filled` round-trips RINEX style matrices.
    """
    values: np.ndarray
    present: np.ndarray

    def __post_init__(self):
        self.values = np.array(self.values, dtype=float, ndmin=2)
        self.present = np.array(self.present, dtype=bool, ndmin=2)
        if self.values.shape != self.present.shape:
            raise ValueError(
                f"values shape {self.values.shape} does not match mask shape {self.present.shape}")

    @classmethod
    def from_zero_filled(cls, matrix) -> "ObservableMatrix":
        """Build from a matrix where 0 marks a missing observation"""
        values = np.array(matrix, dtype=float, ndmin=2)
        present = (values != 0) & np.isfinite(values)
        return cls(np.where(present, values, 0.0), present)

    @classmethod
    def empty(cls, n_sat: int, n_epochs: int) -> "ObservableMatrix":
        """Matrix without any observation"""
        return cls(np.zeros((n_sat, n_epochs)), np.zeros((n_sat, n_epochs), dtype=bool))

    @property
    def shape(self):
        return self.values.shape

    def to_zero_filled(self) -> np.ndarray:
        """Return the values with 0 wherever no observation exists"""
        return np.where(self.present, self.values, 0.0)

    def has_any(self, sat: int) -> bool:
        """True if the satellite has at least one observation"""
        return bool(self.present[sat].any())

    def epochs(self, sat: int) -> np.ndarray:
        """Epoch indices where the satellite is observed"""
        return np.flatnonzero(self.present[sat])

    def visible(self, epoch: int) -> np.ndarray:
        """Satellite indices observed at an epoch"""
        return np.flatnonzero(self.present[:, epoch])

    def copy(self) -> "ObservableMatrix":
        return ObservableMatrix(self.values.copy(), self.present.copy())


@dataclass
class ObservationSet:
    """All observables of a session plus the wavelength table.

    Every matrix has shape (n_sat_tot, n_epochs) and shares the satellite
    indexing of ``wavelengths`` (n_sat_tot, 2), whose columns hold the first
    and second carrier wavelengths in meters.
    """
    code_l1: ObservableMatrix
    phase_l1: ObservableMatrix
    code_l2: ObservableMatrix
    phase_l2: ObservableMatrix
    doppler_l1: ObservableMatrix
    doppler_l2: ObservableMatrix
    snr_l1: ObservableMatrix
    wavelengths: np.ndarray

    def __post_init__(self):
        shape = self.code_l1.shape
        for obs_type in ObsType:
            if self[obs_type].shape != shape:
                raise ValueError(
                    f"{obs_type.value} shape {self[obs_type].shape} differs from code_l1 shape {shape}")
        self.wavelengths = np.asarray(self.wavelengths, dtype=float)
        if self.wavelengths.shape != (shape[0], 2):
            raise ValueError(
                f"wavelength table must have shape {(shape[0], 2)}, got {self.wavelengths.shape}")

    @classmethod
    def from_zero_filled(cls, pr1, ph1, pr2, ph2, wavelengths,
                         dop1=None, dop2=None, snr1=None) -> "ObservationSet":
        """Build from zero-filled satellite x epoch matrices.

        Parameters
        ----------
        pr1, pr2 : array_like
            Code observations on L1/L2 (m)
        ph1, ph2 : array_like
            Phase observations on L1/L2 (cycles)
        wavelengths : array_like
            Wavelength table (n_sat_tot, 2) in meters
        dop1, dop2, snr1 : array_like, optional
            Doppler (Hz) and SNR (dB-Hz); missing matrices are empty
        """
        code_l1 = ObservableMatrix.from_zero_filled(pr1)
        n_sat, n_epochs = code_l1.shape

        def _optional(matrix):
            if matrix is None:
                return ObservableMatrix.empty(n_sat, n_epochs)
            return ObservableMatrix.from_zero_filled(matrix)

        return cls(
            code_l1=code_l1,
            phase_l1=ObservableMatrix.from_zero_filled(ph1),
            code_l2=ObservableMatrix.from_zero_filled(pr2),
            phase_l2=ObservableMatrix.from_zero_filled(ph2),
            doppler_l1=_optional(dop1),
            doppler_l2=_optional(dop2),
            snr_l1=_optional(snr1),
            wavelengths=wavelengths,
        )

    def __getitem__(self, obs_type: ObsType) -> ObservableMatrix:
        return getattr(self, obs_type.value)

    @property
    def n_sat_tot(self) -> int:
        return self.code_l1.shape[0]

    @property
    def n_epochs(self) -> int:
        return self.code_l1.shape[1]

    def wavelength(self, sat: int, obs_type: ObsType) -> float:
        return float(self.wavelengths[sat, obs_type.band])

    def to_zero_filled(self) -> Dict[str, np.ndarray]:
        """Zero-filled matrices keyed by observable name"""
        return {obs_type.value: self[obs_type].to_zero_filled() for obs_type in ObsType}

    def copy(self) -> "ObservationSet":
        return ObservationSet(
            **{obs_type.value: self[obs_type].copy() for obs_type in ObsType},
            wavelengths=self.wavelengths.copy(),
        )


class EpochStatus(Enum):
    """How the clock error of an epoch was obtained"""
    UNRESOLVED = 0     # no usable solution and no history to extrapolate from
    SOLVED = 1         # position solver with enough satellites
    EXTRAPOLATED = 2   # linear extrapolation from the two previous epochs


@dataclass
class ClockSolution:
    """Receiver clock error and drift over a session.

    Attributes
    ----------
    time : np.ndarray
        Nominal receiver time of each epoch (s)
    dtr : np.ndarray
        Receiver clock error per epoch (s), zero where unresolved
    drift : np.ndarray
        Receiver clock drift (s/s), one value per epoch once extended
    status : np.ndarray
        :class:`EpochStatus` value per epoch
    n_used : np.ndarray
        Satellites used by the position solver per epoch
    """
    time: np.ndarray
    dtr: np.ndarray
    drift: np.ndarray
    status: np.ndarray = None
    n_used: np.ndarray = None

    def __post_init__(self):
        n_epochs = len(self.time)
        if self.status is None:
            self.status = np.full(n_epochs, EpochStatus.UNRESOLVED.value, dtype=int)
        if self.n_used is None:
            self.n_used = np.zeros(n_epochs, dtype=int)

    @property
    def n_epochs(self) -> int:
        return len(self.time)

    def count(self, status: EpochStatus) -> int:
        return int(np.count_nonzero(self.status == status.value))

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate the solution, one row per epoch"""
        drift = np.full(self.n_epochs, np.nan)
        drift[:len(self.drift)] = self.drift[:self.n_epochs]
        return pd.DataFrame({
            'time': self.time,
            'dtr': self.dtr,
            'drift': drift,
            'status': [EpochStatus(s).name for s in self.status],
            'n_used': self.n_used,
        })


@dataclass
class JumpFlags:
    """Session-wide flags telling which observables carry receiver clock jumps"""
    code_l1: bool = False
    code_l2: bool = False
    phase_l1: bool = False
    phase_l2: bool = False

    @classmethod
    def from_array(cls, flags) -> "JumpFlags":
        """Build from four booleans ordered as :data:`CORRECTED_TYPES`"""
        return cls(*(bool(f) for f in flags))

    def __getitem__(self, obs_type: ObsType) -> bool:
        return getattr(self, obs_type.value)

    def any(self) -> bool:
        return self.code_l1 or self.code_l2 or self.phase_l1 or self.phase_l2

    def all(self) -> bool:
        return self.code_l1 and self.code_l2 and self.phase_l1 and self.phase_l2


@dataclass
class ClockPreprocessingResult:
    """Output of the receiver clock pre-processing pipeline.

    Attributes
    ----------
    observations : ObservationSet
        Corrected observations (a copy; the input is never modified)
    clock : ClockSolution
        Clock error and repaired drift
    bad_sats : np.ndarray
        Bad-satellite flags, shape (n_sat_tot,), dtype bool
    discontinuities : np.ndarray
        Drift indices detected as discontinuities
    jump_flags : JumpFlags, optional
        None when the observations were already clock corrected
    time_ref : np.ndarray, optional
        Clock-corrected reference time the observations were resampled to
    already_corrected : bool
        True when the peak clock error was below the correction threshold
    """
    observations: ObservationSet
    clock: ClockSolution
    bad_sats: np.ndarray
    discontinuities: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))
    jump_flags: Optional[JumpFlags] = None
    time_ref: Optional[np.ndarray] = None
    already_corrected: bool = False

    @property
    def dtr(self) -> np.ndarray:
        return self.clock.dtr

    @property
    def drift(self) -> np.ndarray:
        return self.clock.drift

    def bad_satellites(self) -> np.ndarray:
        """Indices of satellites flagged bad"""
        return np.flatnonzero(self.bad_sats)
