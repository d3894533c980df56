"""End-to-end tests of the receiver clock pre-processing pipeline"""

import numpy as np
import pytest

from rxclock.core.config import ClockConfig
from rxclock.core.constants import CLIGHT, FREQ_L1
from rxclock.core.data_structures import ObservationSet
from rxclock.clock.preprocessing import ClockPreprocessor, preprocess_clock

LAM1 = CLIGHT / FREQ_L1

N_EPOCHS = 20
N_SAT = 6


def _reset_clock():
    """Receiver clock drifting 1 us/s with a 1 ms reset before epoch 10"""
    k = np.arange(N_EPOCHS)
    dtr = 5e-4 + 1e-6 * k
    dtr[10:] -= 1e-3
    return dtr


def _expected_range(time, dtr, sat):
    u = time - time[0] + dtr
    return 2.0e7 + 1.0e5 * sat + 400.0 * u


class TestEarlyExit:

    def test_already_corrected_observations_untouched(self, session, selector, scripted_solver):
        dtr = np.full(N_EPOCHS, 1e-7)
        time, matrices = session(N_EPOCHS, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)

        result = ClockPreprocessor(selector, scripted_solver(dtr)).run(time, time, obs)

        assert result.already_corrected
        assert result.jump_flags is None
        assert result.time_ref is None
        assert not result.bad_sats.any()
        assert result.bad_sats.shape == (N_SAT,)
        for name, matrix in result.observations.to_zero_filled().items():
            np.testing.assert_array_equal(matrix, obs.to_zero_filled()[name])
        assert result.observations is not obs
        np.testing.assert_array_equal(result.dtr, dtr)
        assert len(result.drift) == N_EPOCHS

    def test_no_solution_at_all(self, session, selector, scripted_solver):
        time, matrices = session(N_EPOCHS, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)
        solver = scripted_solver(np.zeros(N_EPOCHS), fail=range(N_EPOCHS))

        result = preprocess_clock(time, time, obs, selector, solver)

        assert result.already_corrected
        np.testing.assert_array_equal(result.dtr, np.zeros(N_EPOCHS))


class TestClockResetReceiver:
    """Code follows the receiver clock (including its reset), phase does not"""

    @pytest.fixture
    def run(self, session, selector, scripted_solver):
        dtr = _reset_clock()
        time, matrices = session(N_EPOCHS, N_SAT, dtr=dtr)
        # Satellite 4: a single code sample, satellite 5: code without phase
        matrices['pr1'][4, :] = 0.0
        matrices['pr1'][4, 3] = 2.2e7
        for name in ('pr2', 'ph1', 'ph2'):
            matrices[name][4, :] = 0.0
        matrices['ph1'][5, :] = 0.0
        matrices['ph2'][5, :] = 0.0
        obs = ObservationSet.from_zero_filled(**matrices)
        raw = obs.copy()

        result = ClockPreprocessor(selector, scripted_solver(dtr), ClockConfig(n_sys=1)).run(
            time, time, obs)
        return time, dtr, obs, raw, result

    def test_clock_and_drift(self, run):
        time, dtr, _, _, result = run
        np.testing.assert_array_equal(result.dtr, dtr)
        assert 9 in result.discontinuities
        assert len(result.drift) == N_EPOCHS
        np.testing.assert_allclose(result.drift, 1e-6, rtol=1e-6)

    def test_jump_flags(self, run):
        result = run[4]
        assert result.jump_flags.code_l1
        assert result.jump_flags.code_l2
        assert not result.jump_flags.phase_l1
        assert not result.jump_flags.phase_l2
        assert not result.already_corrected

    def test_code_offset_and_resampling(self, run):
        time, dtr, _, _, result = run
        np.testing.assert_allclose(result.time_ref, time + dtr)
        for sat in (0, 3, 5):
            expected = _expected_range(time, dtr, sat)
            np.testing.assert_allclose(result.observations.code_l1.values[sat], expected, atol=1e-4)
            np.testing.assert_allclose(result.observations.code_l2.values[sat], expected + 3.0,
                                       atol=1e-4)

    def test_phase_resampled_only(self, run):
        time, dtr, _, _, result = run
        expected = _expected_range(time, dtr, 1) / LAM1
        np.testing.assert_allclose(result.observations.phase_l1.values[1], expected, rtol=1e-12)

    def test_bad_satellites(self, run):
        result = run[4]
        np.testing.assert_array_equal(result.bad_satellites(), [4, 5])
        assert result.observations.code_l1.values[4, 3] == 2.2e7

    def test_input_not_modified(self, run):
        _, _, obs, raw, _ = run
        for name, matrix in obs.to_zero_filled().items():
            np.testing.assert_array_equal(matrix, raw.to_zero_filled()[name])


class TestSteeredReceiver:
    """Observations already free of clock jumps: resampling only"""

    def test_no_frequency_correction(self, session, selector, scripted_solver):
        dtr = 2e-4 + 1e-7 * np.arange(N_EPOCHS)
        time, matrices = session(N_EPOCHS, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)

        result = preprocess_clock(time, time, obs, selector, scripted_solver(dtr),
                                  config=ClockConfig.from_dict({'n_sys': 1, 'cutoff': 15.0}))

        assert result.discontinuities.size == 0
        assert not result.jump_flags.any()
        np.testing.assert_allclose(result.observations.code_l1.values[2],
                                   _expected_range(time, dtr, 2), atol=1e-4)

    def test_desynchronised_time_tags(self, session, selector, scripted_solver):
        dtr = 2e-4 + 1e-7 * np.arange(N_EPOCHS)
        time, matrices = session(N_EPOCHS, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)
        time_ref = time + 0.01

        result = preprocess_clock(time_ref, time, obs, selector, scripted_solver(dtr))

        np.testing.assert_allclose(result.time_ref, time_ref + dtr)
        np.testing.assert_allclose(result.observations.code_l1.values[0],
                                   _expected_range(time, dtr + 0.01, 0), atol=1e-4)


class TestInputValidation:

    def test_empty_session(self, session, selector, scripted_solver):
        time, matrices = session(1, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)
        with pytest.raises(ValueError):
            preprocess_clock(np.zeros(0), np.zeros(0), obs, selector, scripted_solver([0.0]))

    def test_time_ref_length(self, session, selector, scripted_solver):
        time, matrices = session(5, N_SAT)
        obs = ObservationSet.from_zero_filled(**matrices)
        with pytest.raises(ValueError):
            preprocess_clock(time[:-1], time, obs, selector, scripted_solver(np.zeros(5)))
