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

"""Satellite slot layout for the enabled constellations.

Observation matrices are indexed by satellite *slot*: every enabled
constellation owns a contiguous block of slots, in the fixed order below,
sized to the largest PRN the constellation can broadcast.

- GPS (G): 32 slots
- GLONASS (R): 24 slots
- Galileo (E): 36 slots
- BeiDou (C): 63 slots
- QZSS (J): 7 slots

The total slot count is the ``n_sat_tot`` shared by the observation
matrices, the wavelength table and the bad-satellite vector.
"""

from typing import Dict, Optional, Tuple

import numpy as np

from .constants import (
    DFREQ_G1, DFREQ_G2, FREQ_B1I, FREQ_B3, FREQ_E1, FREQ_E5b,
    FREQ_G1, FREQ_G2, FREQ_L1, FREQ_L2, SYS_BDS, SYS_GAL, SYS_GLO,
    SYS_GPS, SYS_QZS, char2sys, lam_carr, sys2char
)

# Slot block order and size per system
SYSTEM_ORDER = (SYS_GPS, SYS_GLO, SYS_GAL, SYS_BDS, SYS_QZS)
SYSTEM_SIZES = {
    SYS_GPS: 32,
    SYS_GLO: 24,
    SYS_GAL: 36,
    SYS_BDS: 63,
    SYS_QZS: 7,
}

# (first, second) carrier per system; GLONASS is handled per channel
SYSTEM_FREQS = {
    SYS_GPS: (FREQ_L1, FREQ_L2),
    SYS_GAL: (FREQ_E1, FREQ_E5b),
    SYS_BDS: (FREQ_B1I, FREQ_B3),
    SYS_QZS: (FREQ_L1, FREQ_L2),
}


class SatelliteLayout:
    """Map (system, PRN) pairs onto contiguous matrix slots"""

    def __init__(self, systems: str = "G",
                 glonass_channels: Optional[Dict[int, int]] = None):
        """
        Parameters
        ----------
        systems : str
            Enabled constellations as system characters, e.g. ``"GRE"``
        glonass_channels : dict, optional
            GLONASS frequency channel number by PRN (-7 to +6); missing
            PRNs use channel 0
        """
        enabled = {char2sys(c) for c in systems}
        if not enabled or any(sys not in SYSTEM_SIZES for sys in enabled):
            raise ValueError(f"Unsupported system selection: {systems!r}")

        self.systems: Tuple[int, ...] = tuple(s for s in SYSTEM_ORDER if s in enabled)
        self.glonass_channels = dict(glonass_channels or {})

        self._offsets = {}
        offset = 0
        for sys in self.systems:
            self._offsets[sys] = offset
            offset += SYSTEM_SIZES[sys]
        self.n_sat_tot = offset

    @property
    def n_sys(self) -> int:
        """Number of enabled constellations"""
        return len(self.systems)

    def slot(self, system_char: str, prn: int) -> int:
        """Return the zero-based slot of a satellite, or -1 if not enabled"""
        sys = char2sys(system_char)
        if sys not in self._offsets or not 1 <= prn <= SYSTEM_SIZES[sys]:
            return -1
        return self._offsets[sys] + prn - 1

    def satellite(self, slot: int) -> Tuple[str, int]:
        """Return the (system character, PRN) pair stored at a slot"""
        for sys in self.systems:
            start = self._offsets[sys]
            if start <= slot < start + SYSTEM_SIZES[sys]:
                return sys2char(sys), slot - start + 1
        raise IndexError(f"Slot {slot} outside layout of {self.n_sat_tot} satellites")

    def system_of(self, slot: int) -> int:
        """Return the system ID owning a slot"""
        return char2sys(self.satellite(slot)[0])

    def satellite_id(self, slot: int) -> str:
        """RINEX style satellite ID, e.g. ``'G05'``"""
        system_char, prn = self.satellite(slot)
        return f"{system_char}{prn:02d}"

    def wavelengths(self) -> np.ndarray:
        """Build the ``n_sat_tot x 2`` first/second carrier wavelength table"""
        lam = np.zeros((self.n_sat_tot, 2))
        for sys in self.systems:
            start = self._offsets[sys]
            for prn in range(1, SYSTEM_SIZES[sys] + 1):
                if sys == SYS_GLO:
                    fcn = self.glonass_channels.get(prn, 0)
                    f1 = FREQ_G1 + fcn * DFREQ_G1
                    f2 = FREQ_G2 + fcn * DFREQ_G2
                else:
                    f1, f2 = SYSTEM_FREQS[sys]
                lam[start + prn - 1] = (lam_carr(f1), lam_carr(f2))
        return lam
