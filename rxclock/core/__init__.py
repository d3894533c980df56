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

"""Core receiver clock pre-processing module.

This module provides the fundamental components shared by the clock
pipeline:

- **Constants**: physical constants, carrier frequencies, system IDs and the
  pre-processing thresholds
- **Configuration**: :class:`ClockConfig`, the explicit processing options
- **Data Structures**: observable matrices with presence masks, the
  observation set, clock solution, jump flags and pipeline result
- **Satellite Layout**: contiguous satellite slots and wavelength tables for
  the enabled constellations

Example Usage:
    >>> from rxclock.core import *
    >>>
    >>> layout = SatelliteLayout("GR")
    >>> config = ClockConfig(cutoff=15.0, n_sys=layout.n_sys)
    >>> config.min_satellites
    5
"""

from .constants import *
from .config import ClockConfig
from .data_structures import *
from .satellite_layout import SatelliteLayout
