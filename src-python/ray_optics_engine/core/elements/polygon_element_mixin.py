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

from shapely.geometry import Point as ShapelyPoint

if __name__ == "__main__":
    import sys
    import os
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
    from constants import HIT_EPSILON
    from geometry import Vector, geometry
else:
    from ..constants import HIT_EPSILON
    from ..geometry import Vector, geometry


def rectangle_vertices(center: Vector, width: float, height: float, angle: float) -> List[Vector]:
    """
    Corners of a rectangle, counter-clockwise.

    `width` runs along the local x axis, which is rotated by `angle` radians.
    """
    ux = Vector.from_angle(angle)
    uy = ux.perpendicular()
    hw = width / 2.0
    hh = height / 2.0
    return [
        center - ux * hw - uy * hh,
        center + ux * hw - uy * hh,
        center + ux * hw + uy * hh,
        center - ux * hw + uy * hh,
    ]


class PolygonElementMixin:
    """
    Mixin class for elements with a closed polygonal body.

    Subclasses implement build_vertices() returning the polygon corners. The
    mixin orders them counter-clockwise and derives edges, outward normals
    and a shapely Polygon.

    Hit.data for polygon hits:
        edge (int): Index of the edge that was hit
        entering (bool): True if the ray enters the body through this edge
        outward_normal (Vector): Outward normal of the edge

    Elements that are positioned by a 'center' parameter get move/rotate/scale
    through it (rotation also updates an 'angle' parameter in degrees).
    """

    def build_vertices(self) -> List[Vector]:
        raise NotImplementedError

    def _build_geometry(self) -> Dict[str, Any]:
        cache = super()._build_geometry()
        vertices = self.build_vertices()
        if len(vertices) < 3:
            raise ValueError(f"{self.get_display_name()}: a body needs at least 3 vertices")
        # Shoelace signed area, positive for counter-clockwise
        area2 = sum(a.cross(b) for a, b in zip(vertices, vertices[1:] + vertices[:1]))
        if abs(area2) < 1e-12:
            raise ValueError(f"{self.get_display_name()}: degenerate body")
        if area2 < 0:
            vertices = list(reversed(vertices))
        edges = list(zip(vertices, vertices[1:] + vertices[:1]))
        outward = [(b - a).normalize().perpendicular() * -1.0 for a, b in edges]
        cache.update({
            'vertices': vertices,
            'edges': edges,
            'outward_normals': outward,
            'shape': geometry.polygon(vertices),
        })
        return cache

    def shape(self):
        return self.geometry['shape']

    def contains(self, point: Vector) -> bool:
        """True if the point is inside the body or on its boundary."""
        return self.geometry['shape'].buffer(1e-9).covers(ShapelyPoint(point.x, point.y))

    def check_ray_intersects_polygon(self, origin: Vector, direction: Vector) -> List:
        """All forward intersections with the polygon edges."""
        g = self.geometry
        hits = []
        for i, ((a, b), n_out) in enumerate(zip(g['edges'], g['outward_normals'])):
            result = geometry.ray_segment_intersection(origin, direction, a, b)
            if result is None:
                continue
            t, u = result
            if t <= HIT_EPSILON:
                continue
            point = origin + direction * t
            hits.append(self.make_hit(
                t, point, n_out, direction, f'edge_{i}',
                edge=i, u=u, entering=n_out.dot(direction) < 0, outward_normal=n_out
            ))
        return hits

    def intersect(self, origin: Vector, direction: Vector) -> List:
        return self.check_ray_intersects_polygon(origin, direction)

    def exit_hit(self, point: Vector, direction: Vector):
        """
        Where a ray starting inside the body at `point` leaves it.

        Returns:
            The nearest forward hit that exits the body, or None.
        """
        exits = [h for h in self.check_ray_intersects_polygon(point, direction) if not h.data['entering']]
        if not exits:
            return None
        return min(exits, key=lambda h: h.distance)

    # ==================== Transformations ====================

    def move(self, diff_x: float, diff_y: float) -> bool:
        if not hasattr(self, 'center'):
            return False
        self.center = {'x': self.center['x'] + diff_x, 'y': self.center['y'] + diff_y}
        return True

    def rotate(self, angle: float, center: Optional[Vector] = None) -> bool:
        if not hasattr(self, 'center') or not hasattr(self, 'angle'):
            return False
        c = center if center is not None else Vector.from_dict(self.center)
        self.center = (c + (Vector.from_dict(self.center) - c).rotate(angle)).to_dict()
        self.angle = self.angle + math.degrees(angle)
        return True

    def get_default_center(self) -> Vector:
        return Vector.from_shapely(self.geometry['shape'].centroid)


# Example usage
if __name__ == "__main__":
    from base_element import BaseElement

    class Box(PolygonElementMixin, BaseElement):
        type = 'Box'
        serializable_defaults = {'center': {'x': 0, 'y': 0}, 'width': 40, 'height': 20, 'angle': 0}

        def build_vertices(self):
            return rectangle_vertices(Vector.from_dict(self.center), self.width, self.height,
                                      math.radians(self.angle))

    box = Box()
    for h in box.intersect(Vector(-100, 0), Vector(1, 0)):
        print(f"{h.surface_id}: t={h.distance:.3f}, entering={h.data['entering']}, normal={h.normal}")
    print(f"Exit from center: {box.exit_hit(Vector(0, 0), Vector(1, 0)).point}")
