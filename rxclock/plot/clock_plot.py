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

"""Diagnostic plots of the receiver clock solution"""

import numpy as np

from ..core.data_structures import ClockPreprocessingResult, EpochStatus


def plot_clock_solution(result: ClockPreprocessingResult, axes=None):
    """
    Plot clock error and drift of a pre-processing run

    Extrapolated epochs are drawn as crosses on the clock error panel and
    repaired drift discontinuities as vertical lines on the drift panel.

    Parameters
    ----------
    result : ClockPreprocessingResult
        Pipeline output
    axes : sequence of two matplotlib Axes, optional
        Target axes (clock error, drift); created when None

    Returns
    -------
    fig, axes
        Figure and the two axes
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("Matplotlib required for visualization")

    if axes is None:
        fig, axes = plt.subplots(2, 1, sharex=True, figsize=(10, 6))
    else:
        fig = axes[0].figure

    clock = result.clock
    t = clock.time - clock.time[0]

    ax_dtr, ax_drift = axes
    ax_dtr.plot(t, clock.dtr * 1e6, 'b.-', label='dtR')
    extrapolated = clock.status == EpochStatus.EXTRAPOLATED.value
    if np.any(extrapolated):
        ax_dtr.plot(t[extrapolated], clock.dtr[extrapolated] * 1e6, 'rx', label='extrapolated')
    ax_dtr.set_ylabel('Clock error (us)')
    ax_dtr.legend()
    ax_dtr.grid(True)

    ax_drift.plot(t[:len(clock.drift)], clock.drift * 1e6, 'g.-', label='dtR dot')
    for k in result.discontinuities:
        ax_drift.axvline(t[k], color='r', linestyle='--', alpha=0.5)
    ax_drift.set_xlabel('Time since first epoch (s)')
    ax_drift.set_ylabel('Clock drift (us/s)')
    ax_drift.legend()
    ax_drift.grid(True)

    title = 'Receiver clock'
    if result.already_corrected:
        title += ' (observations already clock corrected)'
    ax_dtr.set_title(title)

    return fig, axes
