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

"""Receiver clock error and clock drift estimation.

The estimation runs in two passes. The first pass calls the external
position solver once per epoch; those calls only depend on their own epoch
and may run in a thread pool. The second pass walks the epochs in order and
applies the fallback policy, which needs the clock errors of the two
previous epochs:

- solver succeeded with at least ``3 + n_sys`` satellites: keep its clock
  error and compute the drift into the epoch when both clock errors are
  nonzero
- otherwise, from the third epoch on: extrapolate linearly from the two
  previous clock errors and compute the drift into the epoch
- otherwise the epoch keeps whatever was stored (zero if nothing)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, List, Optional, Sequence

import numpy as np

from ..core.config import ClockConfig
from ..core.data_structures import ClockSolution, EpochStatus, ObservationSet
from .interfaces import (
    EpochInput, EpochPositionSolver, EpochSolution, EphemerisSelector,
    has_approx_position
)

logger = logging.getLogger(__name__)

# Fallback needs two previous epochs; drift needs one
MIN_EXTRAPOLATION_EPOCH = 2
MIN_DRIFT_EPOCH = 1

ProgressCallback = Callable[[int, int], None]


class ClockEstimator:
    """Estimate the receiver clock error and drift of a session"""

    def __init__(self,
                 ephemeris_selector: EphemerisSelector,
                 position_solver: EpochPositionSolver,
                 config: Optional[ClockConfig] = None):
        """
        Parameters
        ----------
        ephemeris_selector : EphemerisSelector
            Returns the ephemerides valid at an epoch
        position_solver : EpochPositionSolver
            Per-epoch positioning solve returning the receiver clock error
        config : ClockConfig, optional
            Processing options (defaults to :class:`ClockConfig`)
        """
        self.ephemeris_selector = ephemeris_selector
        self.position_solver = position_solver
        self.config = config if config is not None else ClockConfig()

    def solve_epoch(self,
                    i: int,
                    time: np.ndarray,
                    observations: ObservationSet,
                    ephemerides: Any = None,
                    precise: Any = None,
                    iono: Any = None,
                    approx_pos: Optional[np.ndarray] = None) -> Optional[EpochSolution]:
        """Run ephemeris selection and, with enough satellites, the position solver"""
        sats = observations.code_l1.visible(i)
        eph_t = self.ephemeris_selector(ephemerides, time[i], observations.n_sat_tot)

        if len(sats) < self.config.min_satellites:
            logger.debug(f"Epoch {i}: {len(sats)} satellites visible, "
                         f"{self.config.min_satellites} required")
            return None

        snr = observations.snr_l1
        epoch = EpochInput(
            epoch=i,
            time=float(time[i]),
            sats=sats,
            code=observations.code_l1.values[sats, i].copy(),
            snr=np.where(snr.present[sats, i], snr.values[sats, i], 0.0),
            wavelengths=observations.wavelengths[sats],
            ephemerides=eph_t,
            precise=precise,
            iono=iono,
            approx_pos=approx_pos,
            has_approx_pos=has_approx_position(approx_pos),
        )
        return self.position_solver(epoch, self.config)

    def solve_epochs(self,
                     time: np.ndarray,
                     observations: ObservationSet,
                     ephemerides: Any = None,
                     precise: Any = None,
                     iono: Any = None,
                     approx_pos: Optional[np.ndarray] = None,
                     progress: Optional[ProgressCallback] = None) -> List[Optional[EpochSolution]]:
        """First pass: one independent solver call per epoch"""
        n_epochs = len(time)
        solutions: List[Optional[EpochSolution]] = [None] * n_epochs
        args = (time, observations, ephemerides, precise, iono, approx_pos)

        if self.config.max_workers <= 1:
            for i in range(n_epochs):
                solutions[i] = self.solve_epoch(i, *args)
                if progress is not None:
                    progress(i + 1, n_epochs)
            return solutions

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(self.solve_epoch, i, *args): i for i in range(n_epochs)}
            for done, future in enumerate(as_completed(futures), start=1):
                solutions[futures[future]] = future.result()
                if progress is not None:
                    progress(done, n_epochs)
        return solutions

    def estimate(self,
                 time,
                 observations: ObservationSet,
                 ephemerides: Any = None,
                 precise: Any = None,
                 iono: Any = None,
                 approx_pos: Optional[np.ndarray] = None,
                 progress: Optional[ProgressCallback] = None) -> ClockSolution:
        """
        Estimate clock error and drift for every epoch

        Parameters
        ----------
        time : array_like
            Nominal receiver time per epoch (s)
        observations : ObservationSet
            Session observations; code-L1 presence selects visible satellites
        ephemerides, precise, iono : Any
            Passed through to the selector and solver
        approx_pos : array_like, optional
            Approximate receiver position (ECEF, m)
        progress : callable, optional
            Called as ``progress(done, total)`` after each solved epoch

        Returns
        -------
        ClockSolution
            Clock error per epoch and drift per transition (not yet extended)
        """
        time = np.asarray(time, dtype=float)
        if len(time) != observations.n_epochs:
            raise ValueError(f"time has {len(time)} epochs, observations have {observations.n_epochs}")

        solutions = self.solve_epochs(time, observations, ephemerides, precise,
                                      iono, approx_pos, progress)
        clock = resolve_clock(time, solutions, self.config.min_satellites)

        logger.info(f"Clock estimated over {clock.n_epochs} epochs: "
                    f"{clock.count(EpochStatus.SOLVED)} solved, "
                    f"{clock.count(EpochStatus.EXTRAPOLATED)} extrapolated, "
                    f"{clock.count(EpochStatus.UNRESOLVED)} unresolved")
        return clock


def resolve_clock(time: np.ndarray,
                  solutions: Sequence[Optional[EpochSolution]],
                  min_satellites: int) -> ClockSolution:
    """Second pass: sequential fallback and drift computation.

    Parameters
    ----------
    time : np.ndarray
        Nominal receiver time per epoch (s)
    solutions : sequence of EpochSolution or None
        Solver output per epoch, None where the solver was not run or failed
    min_satellites : int
        Satellites the solver must have used for its result to be trusted

    Returns
    -------
    ClockSolution
        ``dtr`` of length n_epochs and ``drift`` of length n_epochs - 1
    """
    time = np.asarray(time, dtype=float)
    n_epochs = len(time)
    dtr = np.zeros(n_epochs)
    drift = np.zeros(max(n_epochs - 1, 0))
    status = np.full(n_epochs, EpochStatus.UNRESOLVED.value, dtype=int)
    n_used = np.zeros(n_epochs, dtype=int)

    with np.errstate(divide='ignore', invalid='ignore'):
        for i, sol in enumerate(solutions):
            if sol is not None:
                n_used[i] = sol.n_used
                if sol.dtr is not None:
                    dtr[i] = sol.dtr

            if sol is not None and sol.n_used >= min_satellites:
                if sol.dtr is not None:
                    status[i] = EpochStatus.SOLVED.value
                if i >= MIN_DRIFT_EPOCH and dtr[i] != 0 and dtr[i - 1] != 0:
                    drift[i - 1] = (dtr[i] - dtr[i - 1]) / (time[i] - time[i - 1])
            elif i >= MIN_EXTRAPOLATION_EPOCH:
                dtr[i] = dtr[i - 1] + (dtr[i - 1] - dtr[i - 2])
                drift[i - 1] = (dtr[i] - dtr[i - 1]) / (time[i] - time[i - 1])
                status[i] = EpochStatus.EXTRAPOLATED.value
                logger.debug(f"Epoch {i}: clock extrapolated to {dtr[i]:.3e} s")
            else:
                logger.debug(f"Epoch {i}: no clock solution and no history to extrapolate from")

    return ClockSolution(time=time, dtr=dtr, drift=drift, status=status, n_used=n_used)


def extend_drift(drift: np.ndarray) -> np.ndarray:
    """Append the last drift value so the series has one value per epoch"""
    drift = np.asarray(drift, dtype=float)
    if drift.size == 0:
        return np.zeros(1)
    return np.append(drift, drift[-1])
