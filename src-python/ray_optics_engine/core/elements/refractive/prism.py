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
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin
    from ray_optics_engine.core.elements.refractive_mixin import RefractiveMixin
    from ray_optics_engine.core.dispersion import DEFAULT_CAUCHY_B
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin
    from ..refractive_mixin import RefractiveMixin
    from ...dispersion import DEFAULT_CAUCHY_B
    from ...geometry import Vector
    from ...ray import Ray


class Prism(RefractiveMixin, PolygonElementMixin, BaseElement):
    """
    Isosceles triangular prism.

    In the local frame the apex points toward -y and the base of length
    `baseLength` lies at +y; the frame is rotated by `angle` degrees about
    `center`. The glass follows a Cauchy curve anchored at 550 nm, so
    shorter wavelengths are refracted more strongly.

    Attributes:
        center: Position of the prism.
        baseLength: Length of the base.
        apexAngle: Apex angle in degrees, in (0, 180).
        angle: Rotation in degrees.
        refIndex: Index at 550 nm.
        cauchyB: Cauchy B coefficient (um^2).
    """

    type = 'Prism'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'baseLength': 100.0,
        'apexAngle': 60.0,
        'angle': 0.0,
        'refIndex': 1.5,
        'cauchyB': DEFAULT_CAUCHY_B,
    }

    def validate(self) -> None:
        if not 0 < self.apexAngle < 180:
            raise ValueError(f"{self.get_display_name()}: apexAngle must be in (0, 180), got {self.apexAngle}")
        if self.baseLength <= 0:
            raise ValueError(f"{self.get_display_name()}: baseLength must be positive, got {self.baseLength}")
        if self.refIndex <= 0:
            raise ValueError(f"{self.get_display_name()}: refIndex must be positive, got {self.refIndex}")

    def build_vertices(self) -> List[Vector]:
        half_base = self.baseLength / 2.0
        base_angle = (math.pi - math.radians(self.apexAngle)) / 2.0
        height = half_base * math.tan(base_angle)
        local = [Vector(0.0, -height / 2.0), Vector(-half_base, height / 2.0), Vector(half_base, height / 2.0)]
        center = Vector.from_dict(self.center)
        rotation = math.radians(self.angle)
        return [center + v.rotate(rotation) for v in local]

    def minimum_deviation(self, wavelength_nm: float) -> float:
        """Angle of minimum deviation in degrees: 2 asin(n sin(A/2)) - A."""
        apex = math.radians(self.apexAngle)
        n = self.refractive_index(wavelength_nm) / self.ambient_refractive_index
        s = n * math.sin(apex / 2.0)
        if s >= 1.0:
            return math.nan
        return math.degrees(2.0 * math.asin(s) - apex)

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        return self.refract_at_surface(ray, hit, hit.data['entering'])
