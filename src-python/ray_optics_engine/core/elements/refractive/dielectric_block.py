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

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ray_optics_engine.core.elements.refractive_mixin import RefractiveMixin
    from ray_optics_engine.core.dispersion import DEFAULT_CAUCHY_B
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ..refractive_mixin import RefractiveMixin
    from ...dispersion import DEFAULT_CAUCHY_B
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason


class DielectricBlock(RefractiveMixin, PolygonElementMixin, BaseElement):
    """
    Rectangular glass block with bulk absorption.

    Surfaces refract with the Fresnel split. A ray leaving the glass has
    travelled `hit.distance` inside it (its origin is the surface it
    entered through), so its power is scaled by exp(-absorptionCoeff * d)
    before the exit surface is evaluated.
    """

    type = 'DielectricBlock'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'width': 100.0,
        'height': 60.0,
        'angle': 0.0,
        'refIndex': 1.5,
        'cauchyB': DEFAULT_CAUCHY_B,
        'absorptionCoeff': 0.001,
    }
    absorption_kind = 'block'

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"{self.get_display_name()}: width and height must be positive")
        if self.absorptionCoeff < 0:
            raise ValueError(f"{self.get_display_name()}: absorptionCoeff must be >= 0, got {self.absorptionCoeff}")
        if self.refIndex <= 0:
            raise ValueError(f"{self.get_display_name()}: refIndex must be positive, got {self.refIndex}")

    def build_vertices(self) -> List[Vector]:
        return rectangle_vertices(Vector.from_dict(self.center), self.width, self.height,
                                  math.radians(self.angle))

    def transmittance(self, path_length: float) -> float:
        """Beer-Lambert bulk transmittance over a path inside the glass."""
        return math.exp(-self.absorptionCoeff * path_length)

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        entering = hit.data['entering']
        attenuation = 1.0
        if not entering and self.absorptionCoeff > 0:
            attenuation = self.transmittance(hit.distance)
            if not self.survives(ray, ray.intensity * attenuation):
                ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
                return []
        return self.refract_at_surface(ray, hit, entering, attenuation)
