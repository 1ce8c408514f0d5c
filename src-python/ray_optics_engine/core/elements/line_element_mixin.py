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

if __name__ == "__main__":
    import sys
    import os
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
    from constants import HIT_EPSILON
    from geometry import Vector, geometry
else:
    from ..constants import HIT_EPSILON
    from ..geometry import Vector, geometry


class LineElementMixin:
    """
    Mixin class for elements that are defined by a line segment p1-p2.

    Provides:
    - Transformation methods (move, rotate, scale)
    - Derived segment geometry (tangent, normal, length, center)
    - Ray-segment intersection returning a single Hit

    The segment normal is the tangent rotated by +90 degrees; intersect()
    flips it against the incoming ray.

    Usage:
        class MyLineElement(LineElementMixin, BaseElement):
            serializable_defaults = {
                'p1': {'x': 0, 'y': 0},
                'p2': {'x': 0, 'y': 100}
            }

    Note: In Python's MRO, mixins should come before the base class.
    """

    def move(self, diff_x: float, diff_y: float) -> bool:
        """Move the segment by the given displacement."""
        self.p1 = {'x': self.p1['x'] + diff_x, 'y': self.p1['y'] + diff_y}
        self.p2 = {'x': self.p2['x'] + diff_x, 'y': self.p2['y'] + diff_y}
        return True

    def rotate(self, angle: float, center: Optional[Vector] = None) -> bool:
        """
        Rotate the segment by `angle` radians (counter-clockwise) about `center`,
        or about its midpoint if center is None.
        """
        c = center if center is not None else self.get_default_center()
        p1 = c + (Vector.from_dict(self.p1) - c).rotate(angle)
        p2 = c + (Vector.from_dict(self.p2) - c).rotate(angle)
        self.p1 = p1.to_dict()
        self.p2 = p2.to_dict()
        return True

    def scale(self, scale: float, center: Optional[Vector] = None) -> bool:
        """Scale the segment about `center` (default: midpoint)."""
        c = center if center is not None else self.get_default_center()
        self.p1 = (c + (Vector.from_dict(self.p1) - c) * scale).to_dict()
        self.p2 = (c + (Vector.from_dict(self.p2) - c) * scale).to_dict()
        return True

    def get_default_center(self) -> Vector:
        """Midpoint of the segment."""
        return Vector.from_dict(self.p1).lerp(Vector.from_dict(self.p2), 0.5)

    def _build_geometry(self) -> Dict[str, Any]:
        cache = super()._build_geometry()
        p1 = Vector.from_dict(self.p1)
        p2 = Vector.from_dict(self.p2)
        seg = p2 - p1
        length = seg.magnitude()
        if length < 1e-12:
            raise ValueError(f"{self.get_display_name()}: p1 and p2 coincide")
        tangent = seg / length
        cache.update({
            'p1': p1,
            'p2': p2,
            'length': length,
            'tangent': tangent,
            'normal': tangent.perpendicular(),
            'center': p1.lerp(p2, 0.5),
            'shape': geometry.segment(p1, p2),
        })
        return cache

    def shape(self):
        return self.geometry['shape']

    def check_ray_intersects_segment(self, origin: Vector, direction: Vector) -> List:
        """
        Intersect the ray with the segment.

        Returns:
            A list with at most one Hit. Hit.data['u'] is the position along
            the segment in [0, 1] and Hit.data['offset'] the signed distance
            from the segment center along the tangent.
        """
        g = self.geometry
        result = geometry.ray_segment_intersection(origin, direction, g['p1'], g['p2'])
        if result is None:
            return []
        t, u = result
        if t <= HIT_EPSILON:
            return []
        point = origin + direction * t
        offset = (u - 0.5) * g['length']
        return [self.make_hit(t, point, g['normal'], direction, 'surface', u=u, offset=offset)]

    def intersect(self, origin: Vector, direction: Vector) -> List:
        return self.check_ray_intersects_segment(origin, direction)

    def incidence_side(self, direction: Vector) -> float:
        """+1 if the ray travels along the segment normal, -1 otherwise."""
        return 1.0 if direction.dot(self.geometry['normal']) >= 0 else -1.0


# Example usage
if __name__ == "__main__":
    from base_element import BaseElement

    class LineObject(LineElementMixin, BaseElement):
        type = 'LineObject'
        serializable_defaults = {
            'p1': {'x': 0, 'y': -50},
            'p2': {'x': 0, 'y': 50}
        }

    obj = LineObject()
    print(f"Initial: p1={obj.p1}, p2={obj.p2}, normal={obj.geometry['normal']}")

    obj.move(10, 20)
    print(f"After move(10, 20): p1={obj.p1}, p2={obj.p2}")

    obj.rotate(math.pi / 4)
    print(f"After rotate(45 deg): p1={obj.p1}, p2={obj.p2}")

    hits = obj.intersect(Vector(-100, 20), Vector(1, 0))
    print(f"Hits: {hits}")
