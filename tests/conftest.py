"""Shared fixtures: synthetic sessions and a scripted position solver"""

import numpy as np
import pytest

from rxclock.core.constants import CLIGHT, FREQ_L1, FREQ_L2
from rxclock.clock.interfaces import EpochSolution

LAM1 = CLIGHT / FREQ_L1
LAM2 = CLIGHT / FREQ_L2


class ScriptedSolver:
    """Position solver returning a prepared clock error per epoch.

    ``dtr`` holds the clock error per epoch; ``fail`` lists epochs without a
    solution and ``n_used`` overrides the used-satellite count per epoch.
    """

    def __init__(self, dtr, fail=(), n_used=None):
        self.dtr = np.asarray(dtr, dtype=float)
        self.fail = set(fail)
        self.n_used = dict(n_used or {})
        self.calls = []
        self.inputs = {}

    def __call__(self, epoch, config):
        self.calls.append(epoch.epoch)
        self.inputs[epoch.epoch] = epoch
        if epoch.epoch in self.fail:
            return None
        n_used = self.n_used.get(epoch.epoch, len(epoch.sats))
        return EpochSolution(dtr=float(self.dtr[epoch.epoch]), used_sats=epoch.sats[:n_used])


def select_all(ephemerides, time, n_sat_tot):
    return ephemerides


def make_session(n_epochs=20, n_sat=6, t0=1000.0, dtr=None):
    """Linear-range session with every satellite observed on both frequencies.

    Code carries the receiver clock (``rho + c * dtr``), phase does not.
    """
    time = t0 + np.arange(n_epochs, dtype=float)
    dtr = np.zeros(n_epochs) if dtr is None else np.asarray(dtr, dtype=float)
    u = time - t0
    rho = 2.0e7 + 1.0e5 * np.arange(n_sat)[:, None] + 400.0 * u[None, :]
    pr1 = rho + CLIGHT * dtr[None, :]
    pr2 = pr1 + 3.0
    ph1 = rho / LAM1
    ph2 = rho / LAM2
    snr1 = np.full((n_sat, n_epochs), 45.0)
    lam = np.tile([LAM1, LAM2], (n_sat, 1))
    return time, dict(pr1=pr1, ph1=ph1, pr2=pr2, ph2=ph2, snr1=snr1, wavelengths=lam)


@pytest.fixture
def scripted_solver():
    return ScriptedSolver


@pytest.fixture
def selector():
    return select_all


@pytest.fixture
def session():
    return make_session
