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
from typing import Optional, Dict, Any, List

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.mirrors.base_mirror import BaseMirror, MIRROR_DEFAULTS
    from ray_optics_engine.core.elements.base_element import Hit
    from ray_optics_engine.core.constants import HIT_EPSILON
    from ray_optics_engine.core.geometry import Vector, geometry
else:
    from .base_mirror import BaseMirror, MIRROR_DEFAULTS
    from ..base_element import Hit
    from ...constants import HIT_EPSILON
    from ...geometry import Vector, geometry


class SphericalMirror(BaseMirror):
    """
    Mirror with the shape of a circular arc.

    The arc is centred on `center` with radius `radius`, spans `arcAngle`
    degrees and is centred on the direction `centerAngle` (degrees) seen from
    the circle center. Both faces reflect; the local normal is radial.

    With centerAngle = 0 the arc bulges toward +x, so light coming from the
    center side sees a concave mirror with focal length radius/2.
    """

    type = 'SphericalMirror'
    serializable_defaults = {
        'center': {'x': 0.0, 'y': 0.0},
        'radius': 100.0,
        'centerAngle': 0.0,
        'arcAngle': 60.0,
        **MIRROR_DEFAULTS,
    }
    geometry_keys = ('center', 'radius', 'centerAngle', 'arcAngle')

    def validate(self) -> None:
        super().validate()
        if self.radius <= 0:
            raise ValueError(f"{self.get_display_name()}: radius must be positive, got {self.radius}")
        if not 0 < self.arcAngle <= 360:
            raise ValueError(f"{self.get_display_name()}: arcAngle must be in (0, 360], got {self.arcAngle}")

    def _build_geometry(self) -> Dict[str, Any]:
        center = Vector.from_dict(self.center)
        center_angle = math.radians(self.centerAngle)
        half_span = math.radians(self.arcAngle) / 2.0
        angles = np.linspace(center_angle - half_span, center_angle + half_span, 64)
        points = [center + Vector.from_angle(float(a)) * self.radius for a in angles]
        return {
            'center': center,
            'center_angle': center_angle,
            'half_span': half_span,
            'vertex': center + Vector.from_angle(center_angle) * self.radius,
            'shape': geometry.polyline(points),
        }

    @property
    def focal_length(self) -> float:
        return self.radius / 2.0

    def shape(self):
        return self.geometry['shape']

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.center = {'x': self.center['x'] + diff_x, 'y': self.center['y'] + diff_y}
        return True

    def rotate(self, angle: float, center: Optional[Vector] = None) -> bool:
        c = center if center is not None else Vector.from_dict(self.center)
        self.center = (c + (Vector.from_dict(self.center) - c).rotate(angle)).to_dict()
        self.centerAngle += math.degrees(angle)
        return True

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        hits = []
        for t in geometry.ray_circle_intersections(origin, direction, g['center'], self.radius):
            if t <= HIT_EPSILON:
                continue
            point = origin + direction * t
            radial = (point - g['center']) / self.radius
            if not geometry.angle_in_arc(radial.angle(), g['center_angle'], g['half_span']):
                continue
            hits.append(self.make_hit(t, point, radial, direction, 'arc'))
        return hits
