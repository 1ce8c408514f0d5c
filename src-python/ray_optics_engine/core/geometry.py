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
from typing import Union, List, Tuple, Dict, Optional, Sequence
from shapely.geometry import Point as ShapelyPoint, LineString, Polygon

if __name__ == "__main__":
    from constants import NORMALIZE_EPSILON
else:
    from .constants import NORMALIZE_EPSILON


class DegenerateVectorError(ValueError):
    """Raised when a vector is too short to define a direction."""


class Vector:
    """
    An immutable 2D vector, used both for points and directions.

    Can be converted to/from Shapely Point objects and to the {'x', 'y'}
    dict representation used by element parameters.
    """

    __slots__ = ('x', 'y')

    def __init__(self, x: float, y: float):
        object.__setattr__(self, 'x', float(x))
        object.__setattr__(self, 'y', float(y))

    def __setattr__(self, name, value):
        raise AttributeError("Vector is immutable")

    # ---- construction ----

    @classmethod
    def from_angle(cls, angle: float) -> 'Vector':
        """Unit vector pointing at `angle` radians from +x."""
        return cls(math.cos(angle), math.sin(angle))

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'Vector':
        return cls(d['x'], d['y'])

    @classmethod
    def from_shapely(cls, sp: ShapelyPoint) -> 'Vector':
        """Create Vector from Shapely Point."""
        return cls(sp.x, sp.y)

    # ---- arithmetic ----

    def add(self, other: 'Vector') -> 'Vector':
        return Vector(self.x + other.x, self.y + other.y)

    def subtract(self, other: 'Vector') -> 'Vector':
        return Vector(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> 'Vector':
        return Vector(self.x * factor, self.y * factor)

    def dot(self, other: 'Vector') -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Vector') -> float:
        """z-component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def magnitude_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalize(self) -> 'Vector':
        """
        Return the unit vector in the same direction.

        Raises:
            DegenerateVectorError: If the magnitude is below NORMALIZE_EPSILON
                or not finite.
        """
        mag = self.magnitude()
        if not math.isfinite(mag) or mag < NORMALIZE_EPSILON:
            raise DegenerateVectorError(f"Cannot normalize vector {self!r} (magnitude {mag})")
        return Vector(self.x / mag, self.y / mag)

    def rotate(self, angle: float) -> 'Vector':
        """Rotate counter-clockwise by `angle` radians."""
        c = math.cos(angle)
        s = math.sin(angle)
        return Vector(self.x * c - self.y * s, self.x * s + self.y * c)

    def perpendicular(self) -> 'Vector':
        """The vector rotated by +90 degrees."""
        return Vector(-self.y, self.x)

    def distance_to(self, other: 'Vector') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def angle(self) -> float:
        """Polar angle in (-pi, pi]."""
        return math.atan2(self.y, self.x)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def has_nan(self) -> bool:
        return math.isnan(self.x) or math.isnan(self.y)

    def lerp(self, other: 'Vector', t: float) -> 'Vector':
        return Vector(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    # ---- operators ----

    def __add__(self, other: 'Vector') -> 'Vector':
        return self.add(other)

    def __sub__(self, other: 'Vector') -> 'Vector':
        return self.subtract(other)

    def __mul__(self, factor: float) -> 'Vector':
        return self.scale(factor)

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> 'Vector':
        return Vector(self.x / factor, self.y / factor)

    def __neg__(self) -> 'Vector':
        return Vector(-self.x, -self.y)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Vector):
            return NotImplemented
        return self.x == other.x and self.y == other.y

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __iter__(self):
        yield self.x
        yield self.y

    # ---- conversions ----

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary representation."""
        return {'x': self.x, 'y': self.y}

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Vector(x={self.x}, y={self.y})"


PointLike = Union[Vector, Dict[str, float], Tuple[float, float]]


class Geometry:
    """
    Geometric helpers shared by the optical elements.

    Intersection routines take a ray as (origin, direction) with a unit
    direction and return the ray parameter `t` (the distance along the ray).
    """

    @staticmethod
    def point(x: float, y: float) -> Vector:
        return Vector(x, y)

    @staticmethod
    def as_vector(p: PointLike) -> Vector:
        """Accept a Vector, an {'x','y'} dict or an (x, y) tuple."""
        if isinstance(p, Vector):
            return p
        if isinstance(p, dict):
            return Vector(p['x'], p['y'])
        return Vector(p[0], p[1])

    @staticmethod
    def ray_segment_intersection(
        origin: Vector,
        direction: Vector,
        p1: Vector,
        p2: Vector
    ) -> Optional[Tuple[float, float]]:
        """
        Intersect a ray with the segment p1-p2.

        Returns:
            (t, u) where t is the distance along the ray and u in [0, 1] is the
            position along the segment, or None if they do not meet or the ray
            is parallel to the segment.
        """
        seg = p2 - p1
        denom = direction.cross(seg)
        if abs(denom) < 1e-12:
            return None
        diff = p1 - origin
        t = diff.cross(seg) / denom
        u = diff.cross(direction) / denom
        if u < 0.0 or u > 1.0:
            return None
        return t, u

    @staticmethod
    def solve_quadratic(a: float, b: float, c: float) -> List[float]:
        """Real roots of a*s^2 + b*s + c = 0 (handles the linear case)."""
        if abs(a) < 1e-12:
            if abs(b) < 1e-12:
                return []
            return [-c / b]
        disc = b * b - 4.0 * a * c
        if disc < 0.0:
            return []
        sq = math.sqrt(disc)
        # Numerically stable form
        q = -0.5 * (b + math.copysign(sq, b))
        roots = [q / a]
        if abs(q) > 1e-300:
            roots.append(c / q)
        return sorted(roots)

    @staticmethod
    def ray_circle_intersections(
        origin: Vector,
        direction: Vector,
        center: Vector,
        radius: float
    ) -> List[float]:
        """Distances along the ray to the circle, in increasing order (may be negative)."""
        oc = origin - center
        b = 2.0 * direction.dot(oc)
        c = oc.magnitude_squared() - radius * radius
        return Geometry.solve_quadratic(direction.magnitude_squared(), b, c)

    @staticmethod
    def angle_in_arc(angle: float, center_angle: float, half_span: float) -> bool:
        """True if `angle` lies within +/- half_span of center_angle (radians, wrap-safe)."""
        delta = math.atan2(math.sin(angle - center_angle), math.cos(angle - center_angle))
        return abs(delta) <= half_span + 1e-12

    @staticmethod
    def wrap_angle(angle: float) -> float:
        """Wrap to (-pi, pi]."""
        wrapped = math.atan2(math.sin(angle), math.cos(angle))
        if wrapped == -math.pi:
            return math.pi
        return wrapped

    @staticmethod
    def polyline(points: Sequence[Vector]) -> LineString:
        """Shapely LineString through the points (at least two are required)."""
        return LineString([(p.x, p.y) for p in points])

    @staticmethod
    def polygon(points: Sequence[Vector]) -> Polygon:
        return Polygon([(p.x, p.y) for p in points])

    @staticmethod
    def segment(p1: Vector, p2: Vector) -> LineString:
        return LineString([(p1.x, p1.y), (p2.x, p2.y)])


# Create a singleton instance for convenience
geometry = Geometry()


# Example usage and testing
if __name__ == "__main__":
    p1 = geometry.point(0, 0)
    p2 = geometry.point(3, 4)

    print(f"Distance between {p1} and {p2}: {p1.distance_to(p2)}")
    print(f"Normalized {p2}: {p2.normalize()}")
    print(f"Rotated (1, 0) by 90 degrees: {Vector(1, 0).rotate(math.pi / 2)}")

    hit = geometry.ray_segment_intersection(Vector(0, 0), Vector(1, 0), Vector(5, -1), Vector(5, 1))
    print(f"Ray/segment hit: {hit}")

    roots = geometry.ray_circle_intersections(Vector(-10, 0), Vector(1, 0), Vector(0, 0), 2.0)
    print(f"Ray/circle distances: {roots}")

    try:
        Vector(0, 0).normalize()
    except DegenerateVectorError as e:
        print(f"Degenerate: {e}")
