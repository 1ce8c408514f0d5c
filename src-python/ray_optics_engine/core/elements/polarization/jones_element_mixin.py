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
from typing import List, Optional, TYPE_CHECKING

import numpy as np

from ...geometry import Vector
from ...ray import TerminationReason

if TYPE_CHECKING:
    from ...ray import Ray


class JonesElementMixin:
    """
    Mixin class for elements that act on the polarization through a Jones matrix.

    Jones vectors live in the frame of the ray: x is the in-plane transverse
    direction (the ray direction rotated by +90 degrees, the p axis) and y
    points out of the trace plane (the s axis). Element angles such as a
    transmission axis are given in the element's own frame, whose reference
    direction is `jones_reference(...)`. A ray travelling against that
    reference sees the transverse plane from behind, so the angle changes
    sign: theta_ray = sign(d . reference) * theta_element.

    Subclasses implement jones_matrix(ray) and call transmit_jones().
    """

    def jones_reference(self) -> Vector:
        """Direction that defines the element frame. Line elements use their normal."""
        return self.geometry['normal']

    def frame_sign(self, direction: Vector) -> float:
        return 1.0 if direction.dot(self.jones_reference()) >= 0 else -1.0

    def ray_frame_angle(self, element_angle_deg: float, direction: Vector) -> float:
        """Element angle (degrees) expressed in the ray's Jones frame (radians)."""
        return self.frame_sign(direction) * math.radians(element_angle_deg)

    def jones_matrix(self, ray: 'Ray') -> np.ndarray:
        raise NotImplementedError

    def transmit_jones(self, ray: 'Ray', point: Vector, efficiency: float = 1.0,
                       matrix: Optional[np.ndarray] = None) -> List['Ray']:
        """
        Emit the ray through the element from `point`, transformed by its Jones matrix.

        The transmitted power is I * |M j|^2 * efficiency. The parent is
        terminated 'transmitted', or absorbed when nothing useful passes.
        """
        m = self.jones_matrix(ray) if matrix is None else matrix
        polarization, fraction = ray.polarization.transformed(m)
        intensity = ray.intensity * fraction * efficiency
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        child = self.spawn_child(ray, point, ray.direction, 'transmit',
                                 intensity=intensity, polarization=polarization)
        ray.terminate(TerminationReason.TRANSMITTED)
        return [child] if child is not None else []
