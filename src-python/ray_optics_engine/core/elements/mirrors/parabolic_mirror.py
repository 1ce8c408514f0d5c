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


class ParabolicMirror(BaseMirror):
    """
    Parabolic mirror u = v^2 / (4f) in local coordinates.

    The local u axis starts at `vertex` and points along `axisAngle` (degrees)
    toward the focus; v is perpendicular to it. The mirror extends over
    |v| <= aperture/2. Rays parallel to the axis arriving from the focus side
    reflect exactly through the focus at vertex + f * axis.
    """

    type = 'ParabolicMirror'
    serializable_defaults = {
        'vertex': {'x': 100.0, 'y': 0.0},
        'axisAngle': 180.0,
        'focalLength': 50.0,
        'aperture': 100.0,
        **MIRROR_DEFAULTS,
    }
    geometry_keys = ('vertex', 'axisAngle', 'focalLength', 'aperture')

    def validate(self) -> None:
        super().validate()
        if self.focalLength <= 0:
            raise ValueError(f"{self.get_display_name()}: focalLength must be positive, got {self.focalLength}")
        if self.aperture <= 0:
            raise ValueError(f"{self.get_display_name()}: aperture must be positive, got {self.aperture}")

    def _build_geometry(self) -> Dict[str, Any]:
        vertex = Vector.from_dict(self.vertex)
        axis = Vector.from_angle(math.radians(self.axisAngle))
        lateral = axis.perpendicular()
        f = self.focalLength
        vs = np.linspace(-self.aperture / 2.0, self.aperture / 2.0, 65)
        points = [vertex + axis * (float(v) ** 2 / (4.0 * f)) + lateral * float(v) for v in vs]
        return {
            'vertex': vertex,
            'axis': axis,
            'lateral': lateral,
            'focus': vertex + axis * f,
            'shape': geometry.polyline(points),
        }

    @property
    def focal_point(self) -> Vector:
        return self.geometry['focus']

    def shape(self):
        return self.geometry['shape']

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.vertex = {'x': self.vertex['x'] + diff_x, 'y': self.vertex['y'] + diff_y}
        return True

    def rotate(self, angle: float, center: Optional[Vector] = None) -> bool:
        c = center if center is not None else Vector.from_dict(self.vertex)
        self.vertex = (c + (Vector.from_dict(self.vertex) - c).rotate(angle)).to_dict()
        self.axisAngle += math.degrees(angle)
        return True

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        f = self.focalLength
        rel = origin - g['vertex']
        ou, ov = rel.dot(g['axis']), rel.dot(g['lateral'])
        du, dv = direction.dot(g['axis']), direction.dot(g['lateral'])

        # (ov + t dv)^2 = 4f (ou + t du)
        a = dv * dv
        b = 2.0 * ov * dv - 4.0 * f * du
        c = ov * ov - 4.0 * f * ou

        hits = []
        for t in geometry.solve_quadratic(a, b, c):
            if t <= HIT_EPSILON:
                continue
            v = ov + t * dv
            if abs(v) > self.aperture / 2.0:
                continue
            point = origin + direction * t
            # Gradient of v^2/(4f) - u
            normal = (g['lateral'] * (v / (2.0 * f)) - g['axis']).normalize()
            hits.append(self.make_hit(t, point, normal, direction, 'surface', v=v))
        return hits


# Example usage and testing
if __name__ == "__main__":
    from ray_optics_engine.core.ray import Ray

    mirror = ParabolicMirror()
    for y in (-30.0, -10.0, 10.0, 30.0):
        ray = Ray(Vector(0, y), Vector(1, 0))
        hit = min(mirror.intersect(ray.origin, ray.direction), key=lambda h: h.distance)
        ray.append_history(hit.point)
        child = mirror.interact(ray, hit)[0]
        # Distance from the reflected line to the focus
        to_focus = mirror.focal_point - child.origin
        miss = abs(to_focus.cross(child.direction))
        print(f"y={y:+.0f}: reflected ray misses focus by {miss:.2e}")
