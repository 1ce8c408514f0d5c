"""
Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import math
from typing import List

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.elements.polarization.jones_element_mixin import JonesElementMixin
    from ray_optics_engine.core.polarization import wave_plate_matrix
    from ray_optics_engine.core.ray import Ray
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from .jones_element_mixin import JonesElementMixin
    from ...polarization import wave_plate_matrix
    from ...ray import Ray


class WavePlate(JonesElementMixin, LineElementMixin, BaseElement):
    """
    Retarder with the shape of a line segment.

    Delays the slow axis by `retardance` relative to the fast axis, which
    lies at `fastAxis` degrees in the element frame. The plate is lossless;
    only the polarization changes.
    """

    type = 'WavePlate'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'fastAxis': 45.0,
        'retardance': 90.0,
    }
    absorption_kind = 'wave_plate'

    def retardance_rad(self) -> float:
        return math.radians(self.retardance)

    def jones_matrix(self, ray: Ray) -> np.ndarray:
        return wave_plate_matrix(self.retardance_rad(),
                                 self.ray_frame_angle(self.fastAxis, ray.direction))

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        return self.transmit_jones(ray, hit.point)


class HalfWavePlate(WavePlate):
    """
    Half-wave plate: rotates linear polarization at angle phi to 2*fastAxis - phi
    and flips circular handedness.
    """

    type = 'HalfWavePlate'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'fastAxis': 22.5,
    }

    def retardance_rad(self) -> float:
        return math.pi


class QuarterWavePlate(WavePlate):
    """Quarter-wave plate: linear at 45 degrees to the fast axis becomes circular, and back."""

    type = 'QuarterWavePlate'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'fastAxis': 45.0,
    }

    def retardance_rad(self) -> float:
        return math.pi / 2.0
