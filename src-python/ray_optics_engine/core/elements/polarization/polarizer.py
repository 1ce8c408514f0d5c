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

from typing import List

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.elements.polarization.jones_element_mixin import JonesElementMixin
    from ray_optics_engine.core.polarization import linear_polarizer_matrix
    from ray_optics_engine.core.ray import Ray
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from .jones_element_mixin import JonesElementMixin
    from ...polarization import linear_polarizer_matrix
    from ...ray import Ray


# Intensity leakage along the blocked axis (1 / extinction ratio)
POLARIZER_LEAKAGE = {
    'linear': 0.0,
    'glan': 1e-5,
    'wire_grid': 1e-3,
}


class Polarizer(JonesElementMixin, LineElementMixin, BaseElement):
    """
    Linear polarizer with the shape of a line segment.

    Applies the Jones matrix of a polarizer whose transmission axis is at
    `transmissionAxis` degrees in the element frame (0 = in the trace plane,
    90 = out of the plane). Linearly polarized light follows Malus's law
    I' = I cos^2(theta); unpolarized light loses half its power. The
    'linear' type is ideal and outputs exactly Linear(axis); 'glan' and
    'wire_grid' leak a little of the blocked component.
    """

    type = 'Polarizer'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'transmissionAxis': 0.0,
        'polarizerType': 'linear',
    }
    absorption_kind = 'polarizer'

    def validate(self) -> None:
        if self.polarizerType not in POLARIZER_LEAKAGE:
            raise ValueError(
                f"{self.get_display_name()}: polarizerType must be one of {sorted(POLARIZER_LEAKAGE)}, "
                f"got {self.polarizerType!r}"
            )

    @property
    def extinction_ratio(self) -> float:
        leakage = POLARIZER_LEAKAGE[self.polarizerType]
        return float('inf') if leakage == 0 else 1.0 / leakage

    def jones_matrix(self, ray: Ray) -> np.ndarray:
        axis = self.ray_frame_angle(self.transmissionAxis, ray.direction)
        return linear_polarizer_matrix(axis, POLARIZER_LEAKAGE[self.polarizerType])

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        return self.transmit_jones(ray, hit.point)
