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

"""GNSS constants and pre-processing thresholds"""

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# GPS frequencies
FREQ_L1 = 1.57542E9   # L1 frequency (Hz)
FREQ_L2 = 1.22760E9   # L2 frequency (Hz)
FREQ_L5 = 1.17645E9   # L5 frequency (Hz)

# GLONASS frequencies
FREQ_G1 = 1.60200E9   # GLONASS G1 base frequency (Hz)
FREQ_G2 = 1.24600E9   # GLONASS G2 base frequency (Hz)
DFREQ_G1 = 0.56250E6  # GLONASS G1 channel spacing (Hz)
DFREQ_G2 = 0.43750E6  # GLONASS G2 channel spacing (Hz)

# Galileo frequencies
FREQ_E1 = 1.57542E9   # E1 frequency (Hz)
FREQ_E5b = 1.20714E9  # E5b frequency (Hz)

# BeiDou frequencies
FREQ_B1I = 1.561098E9  # B1I frequency (Hz)
FREQ_B3 = 1.26852E9    # B3 frequency (Hz)

# GNSS System IDs
SYS_NONE = 0x00
SYS_GPS = 0x01    # GPS
SYS_GLO = 0x02    # GLONASS
SYS_GAL = 0x04    # Galileo
SYS_BDS = 0x08    # BeiDou
SYS_QZS = 0x10    # QZSS
SYS_SBS = 0x20    # SBAS
SYS_IRN = 0x40    # IRNSS

# Receiver clock pre-processing
CLOCK_DRIFT_THRESHOLD = 1e-5       # drift discontinuity threshold (s/s)
CLOCK_CORRECTED_THRESHOLD = 1e-6   # peak clock error below which obs are already corrected (s)
JUMP_THRESHOLD_FACTOR = 10.0       # jump threshold = factor * drift threshold * c
MIN_SAT_BASE = 3                   # minimum satellites = MIN_SAT_BASE + number of systems
MEDIAN_WINDOW = 10                 # drift repair median window length (samples)



def lam_carr(freq):
    """Get carrier wavelength"""
    return CLIGHT / freq if freq > 0 else 0.0


def sys2char(sys):
    """Convert system ID to character"""
    syschar = {
        SYS_GPS: 'G',
        SYS_GLO: 'R',
        SYS_GAL: 'E',
        SYS_BDS: 'C',
        SYS_QZS: 'J',
        SYS_SBS: 'S',
        SYS_IRN: 'I'
    }
    return syschar.get(sys, ' ')


def char2sys(c):
    """Convert character to system ID"""
    charmap = {
        'G': SYS_GPS,
        'R': SYS_GLO,
        'E': SYS_GAL,
        'C': SYS_BDS,
        'J': SYS_QZS,
        'S': SYS_SBS,
        'I': SYS_IRN
    }
    return charmap.get(c.upper(), SYS_NONE)
