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
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ray_optics_engine.core.elements.polarization.jones_element_mixin import JonesElementMixin
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.polarization import rotation_matrix, linear_polarizer_matrix
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from .jones_element_mixin import JonesElementMixin
    from ...geometry import Vector
    from ...polarization import rotation_matrix, linear_polarizer_matrix
    from ...ray import Ray, TerminationReason


class FaradayRotator(JonesElementMixin, PolygonElementMixin, BaseElement):
    """
    Magneto-optic rotator: a rectangular crystal in an axial magnetic field.

    The field points along the local x axis of the body (`angle` degrees).
    A ray crossing the crystal has its polarization rotated by
    sign(d . field) * rotationAngle. In its own frame a returning ray gets
    the opposite sign, so a double pass rotates by 2 * rotationAngle
    instead of cancelling (non-reciprocal).
    """

    type = 'FaradayRotator'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'width': 40.0,
        'height': 25.0,
        'angle': 0.0,
        'rotationAngle': 45.0,
    }
    absorption_kind = 'faraday_rotator'

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"{self.get_display_name()}: width and height must be positive")

    def build_vertices(self) -> List[Vector]:
        return rectangle_vertices(Vector.from_dict(self.center), self.width, self.height,
                                  math.radians(self.angle))

    def jones_reference(self) -> Vector:
        return Vector.from_angle(math.radians(self.angle))

    def jones_matrix(self, ray: Ray) -> np.ndarray:
        return rotation_matrix(self.ray_frame_angle(self.rotationAngle, ray.direction))

    def exit_point(self, ray: Ray, hit: Hit) -> Vector:
        """Where the ray leaves the body; internal path is added to its history."""
        if not hit.data['entering']:
            return hit.point
        exit_hit = self.exit_hit(hit.point, ray.direction)
        if exit_hit is None:
            return hit.point
        ray.append_history(exit_hit.point)
        return exit_hit.point

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        return self.transmit_jones(ray, self.exit_point(ray, hit))


class FaradayIsolator(FaradayRotator):
    """
    Optical isolator: input polarizer, 45 degree Faraday rotator and output
    polarizer at 45 degrees.

    Light travelling along the field axis is polarized and rotated onto the
    output polarizer's axis. Light travelling against it is blocked and the
    ray is terminated 'absorbed_isolator'.
    """

    type = 'FaradayIsolator'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'width': 80.0,
        'height': 30.0,
        'angle': 0.0,
        'inputAxis': 0.0,
        'insertionLoss': 0.0,
    }
    absorption_kind = 'isolator'

    rotationAngle = 45.0

    def validate(self) -> None:
        super().validate()
        if not 0.0 <= self.insertionLoss < 1.0:
            raise ValueError(f"{self.get_display_name()}: insertionLoss must be in [0, 1), got {self.insertionLoss}")

    def is_forward(self, direction: Vector) -> bool:
        return self.frame_sign(direction) > 0

    def jones_matrix(self, ray: Ray) -> np.ndarray:
        axis_in = math.radians(self.inputAxis)
        rotation = math.radians(self.rotationAngle)
        return (linear_polarizer_matrix(axis_in + rotation)
                @ rotation_matrix(rotation)
                @ linear_polarizer_matrix(axis_in))

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        if not self.is_forward(ray.direction):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        return self.transmit_jones(ray, self.exit_point(ray, hit), efficiency=1.0 - self.insertionLoss)
