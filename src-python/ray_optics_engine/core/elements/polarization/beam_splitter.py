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
    from ray_optics_engine.core.fresnel import reflect_direction
    from ray_optics_engine.core.polarization import REFLECTION_MATRIX
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from ...fresnel import reflect_direction
    from ...polarization import REFLECTION_MATRIX
    from ...ray import Ray, TerminationReason


# p passes, s is reflected
PBS_TRANSMIT_MATRIX = np.array([[1.0, 0.0], [0.0, 0.0]], dtype=complex)
PBS_REFLECT_MATRIX = REFLECTION_MATRIX @ np.array([[0.0, 0.0], [0.0, 1.0]], dtype=complex)


class BeamSplitter(LineElementMixin, BaseElement):
    """
    Plate beam splitter with the shape of a line segment.

    'non_polarizing' splits the power independently of polarization:

        R = I * splitRatio * (1 - loss)
        T = I * (1 - splitRatio) * (1 - loss)

    so R + T <= I. 'polarizing' (a PBS) transmits the p component (in the
    trace plane) and reflects the s component (out of the plane); an
    unpolarized ray is split 50:50 into p and s. The reflected child gains
    a phase of pi and its Jones vector is mirrored.
    """

    type = 'BeamSplitter'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'splitRatio': 0.5,
        'loss': 0.0,
        'splitterType': 'non_polarizing',
    }
    absorption_kind = 'beam_splitter'

    def validate(self) -> None:
        if not 0.0 <= self.splitRatio <= 1.0:
            raise ValueError(f"{self.get_display_name()}: splitRatio must be in [0, 1], got {self.splitRatio}")
        if not 0.0 <= self.loss <= 1.0:
            raise ValueError(f"{self.get_display_name()}: loss must be in [0, 1], got {self.loss}")
        if self.splitterType not in ('non_polarizing', 'polarizing'):
            raise ValueError(
                f"{self.get_display_name()}: splitterType must be 'non_polarizing' or 'polarizing', "
                f"got {self.splitterType!r}"
            )

    def split(self, ray: Ray):
        """
        Returns:
            ((T, pol_T), (R, pol_R)) the transmitted and reflected intensities and states.
        """
        efficiency = 1.0 - self.loss
        if self.splitterType == 'polarizing':
            pol_t, frac_t = ray.polarization.transformed(PBS_TRANSMIT_MATRIX)
            pol_r, frac_r = ray.polarization.transformed(PBS_REFLECT_MATRIX)
        else:
            pol_t, frac_t = ray.polarization, 1.0 - self.splitRatio
            pol_r, frac_r = ray.polarization.reflected(), self.splitRatio
        return ((ray.intensity * frac_t * efficiency, pol_t),
                (ray.intensity * frac_r * efficiency, pol_r))

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        (intensity_t, pol_t), (intensity_r, pol_r) = self.split(ray)
        children = []

        if self.survives(ray, intensity_t):
            child = self.spawn_child(ray, hit.point, ray.direction, 'transmit',
                                     intensity=intensity_t, polarization=pol_t)
            if child is not None:
                children.append(child)

        if self.survives(ray, intensity_r):
            child = self.spawn_child(ray, hit.point, reflect_direction(ray.direction, hit.normal), 'reflect',
                                     intensity=intensity_r, polarization=pol_r,
                                     phase=ray.phase + math.pi)
            if child is not None:
                children.append(child)

        if children:
            ray.terminate(TerminationReason.SPLIT)
        else:
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return children
