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

"""
rxclock - GNSS Receiver Clock Pre-processing

Estimates the receiver clock error and drift over an observation session,
repairs drift discontinuities, and corrects code and phase observations for
the receiver clock before positioning.
"""

__version__ = "1.0.0"
__author__ = "rxclock Development Team"
__title__ = "rxclock"
__description__ = "GNSS receiver clock error estimation and observation correction"

from .core import *
from .clock import *
