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
import logging
from typing import Optional, Dict, Any, List, Tuple

import numpy as np
from scipy.optimize import brentq

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.refractive_mixin import RefractiveMixin
    from ray_optics_engine.core.constants import HIT_EPSILON
    from ray_optics_engine.core.dispersion import DEFAULT_CAUCHY_B
    from ray_optics_engine.core.geometry import Vector, geometry
    from ray_optics_engine.core.ray import Ray
else:
    from ..base_element import BaseElement, Hit
    from ..refractive_mixin import RefractiveMixin
    from ...constants import HIT_EPSILON
    from ...dispersion import DEFAULT_CAUCHY_B
    from ...geometry import Vector, geometry
    from ...ray import Ray

logger = logging.getLogger(__name__)

# Samples used to bracket roots of the sag equation along a ray
ROOT_BRACKET_SAMPLES = 256
ROOT_XTOL = 1e-12


class AsphericLens(RefractiveMixin, BaseElement):
    """
    Plano-aspheric lens with surface-exact refraction.

    The front face follows the even asphere sag

        z(r) = (r^2/R) / (1 + sqrt(1 - (1+k)(r/R)^2)) + A4 r^4 + A6 r^6 + A8 r^8 + A10 r^10

    measured along the optical axis from `vertex`, for |r| <= diameter/2.
    The back face is flat, `thickness` behind the vertex, and the two faces
    are joined by flat side walls. Every face refracts with the Fresnel split
    of RefractiveMixin.

    Attributes:
        vertex: Front vertex of the lens.
        angle: Direction of the optical axis in degrees (from the front face into the glass).
        diameter: Clear aperture.
        baseRadius: Vertex radius of curvature R (0 means no conic term).
        conicConstant: k (0 sphere, -1 parabola, < -1 hyperbola).
        asphericCoeffs: [A4, A6, A8, A10].
        thickness: Distance from the vertex to the flat back face.
        refIndex: Index at 550 nm.
        cauchyB: Cauchy B coefficient (um^2).
    """

    type = 'AsphericLens'
    serializable_defaults = {
        'vertex': {'x': 100.0, 'y': 0.0},
        'angle': 0.0,
        'diameter': 60.0,
        'baseRadius': 100.0,
        'conicConstant': 0.0,
        'asphericCoeffs': [0.0, 0.0, 0.0, 0.0],
        'thickness': 20.0,
        'refIndex': 1.5,
        'cauchyB': DEFAULT_CAUCHY_B,
    }
    absorption_kind = 'lens'

    def validate(self) -> None:
        if self.diameter <= 0:
            raise ValueError(f"{self.get_display_name()}: diameter must be positive, got {self.diameter}")
        if len(self.asphericCoeffs) != 4:
            raise ValueError(f"{self.get_display_name()}: asphericCoeffs needs 4 values [A4, A6, A8, A10]")
        if self.refIndex <= 0:
            raise ValueError(f"{self.get_display_name()}: refIndex must be positive, got {self.refIndex}")
        half = self.diameter / 2.0
        if self.baseRadius != 0 and (1.0 + self.conicConstant) * (half / self.baseRadius) ** 2 >= 1.0:
            raise ValueError(f"{self.get_display_name()}: the sag is undefined inside the aperture")
        max_sag = max(self.sag(float(r)) for r in np.linspace(-half, half, 101))
        if self.thickness <= max_sag:
            raise ValueError(
                f"{self.get_display_name()}: thickness {self.thickness} must exceed the maximum sag {max_sag:.3f}"
            )

    # ==================== Surface ====================

    def sag(self, r: float) -> float:
        """Surface height along the axis at radial coordinate r."""
        A4, A6, A8, A10 = self.asphericCoeffs
        r2 = r * r
        z = A4 * r2 ** 2 + A6 * r2 ** 3 + A8 * r2 ** 4 + A10 * r2 ** 5
        if self.baseRadius != 0:
            c = 1.0 / self.baseRadius
            arg = 1.0 - (1.0 + self.conicConstant) * c * c * r2
            z += c * r2 / (1.0 + math.sqrt(max(arg, 0.0)))
        return z

    def sag_slope(self, r: float) -> float:
        """dz/dr."""
        A4, A6, A8, A10 = self.asphericCoeffs
        slope = 4 * A4 * r ** 3 + 6 * A6 * r ** 5 + 8 * A8 * r ** 7 + 10 * A10 * r ** 9
        if self.baseRadius != 0:
            c = 1.0 / self.baseRadius
            arg = 1.0 - (1.0 + self.conicConstant) * c * c * r * r
            slope += c * r / math.sqrt(max(arg, 1e-12))
        return slope

    def _build_geometry(self) -> Dict[str, Any]:
        vertex = Vector.from_dict(self.vertex)
        axis = Vector.from_angle(math.radians(self.angle))
        lateral = axis.perpendicular()
        half = self.diameter / 2.0

        def to_world(u, v):
            return vertex + axis * u + lateral * v

        rs = np.linspace(-half, half, 65)
        front = [to_world(self.sag(float(r)), float(r)) for r in rs]
        back_top = to_world(self.thickness, half)
        back_bottom = to_world(self.thickness, -half)
        sags = [self.sag(float(r)) for r in rs]
        return {
            'vertex': vertex,
            'axis': axis,
            'lateral': lateral,
            'half': half,
            'sag_range': (min(sags), max(sags)),
            'back': (back_bottom, back_top),
            'sides': ((front[-1], back_top, 1.0), (front[0], back_bottom, -1.0)),
            'shape': geometry.polygon(front + [back_top, back_bottom]),
        }

    def shape(self):
        return self.geometry['shape']

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.vertex = {'x': self.vertex['x'] + diff_x, 'y': self.vertex['y'] + diff_y}
        return True

    def rotate(self, angle: float, center: Optional[Vector] = None) -> bool:
        c = center if center is not None else Vector.from_dict(self.vertex)
        self.vertex = (c + (Vector.from_dict(self.vertex) - c).rotate(angle)).to_dict()
        self.angle += math.degrees(angle)
        return True

    # ==================== Intersection ====================

    def _front_parameter_range(self, ou: float, ov: float, du: float, dv: float) -> Optional[Tuple[float, float]]:
        """Ray parameters for which the ray lies in the slab around the front face."""
        g = self.geometry
        lo, hi = HIT_EPSILON, math.inf
        u_min, u_max = g['sag_range'][0] - 1.0, g['sag_range'][1] + 1.0
        for o, d, a, b in ((ou, du, u_min, u_max), (ov, dv, -g['half'], g['half'])):
            if abs(d) < 1e-12:
                if o < a or o > b:
                    return None
                continue
            t1, t2 = sorted(((a - o) / d, (b - o) / d))
            lo, hi = max(lo, t1), min(hi, t2)
        if lo >= hi:
            return None
        return lo, hi

    def _front_hits(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        rel = origin - g['vertex']
        ou, ov = rel.dot(g['axis']), rel.dot(g['lateral'])
        du, dv = direction.dot(g['axis']), direction.dot(g['lateral'])
        t_range = self._front_parameter_range(ou, ov, du, dv)
        if t_range is None:
            return []

        def residual(t):
            return ou + t * du - self.sag(ov + t * dv)

        ts = np.linspace(t_range[0], t_range[1], ROOT_BRACKET_SAMPLES)
        values = [residual(float(t)) for t in ts]
        hits = []
        for (t_a, f_a), (t_b, f_b) in zip(zip(ts, values), zip(ts[1:], values[1:])):
            if f_a == 0.0:
                t_root = float(t_a)
            elif f_a * f_b < 0.0:
                t_root = brentq(residual, float(t_a), float(t_b), xtol=ROOT_XTOL)
            else:
                continue
            if t_root <= HIT_EPSILON:
                continue
            v = ov + t_root * dv
            outward = (g['lateral'] * self.sag_slope(v) - g['axis']).normalize()
            point = origin + direction * t_root
            hits.append(self.make_hit(t_root, point, outward, direction, 'front',
                                      entering=outward.dot(direction) < 0, outward_normal=outward))
        if not hits and min(abs(v) for v in values) < 1e-6:
            logger.debug("%s: grazing ray, sag root not bracketed", self.get_display_name())
        return hits

    def _flat_hit(self, origin: Vector, direction: Vector, p1: Vector, p2: Vector,
                  outward: Vector, surface_id: str) -> List[Hit]:
        result = geometry.ray_segment_intersection(origin, direction, p1, p2)
        if result is None or result[0] <= HIT_EPSILON:
            return []
        t = result[0]
        return [self.make_hit(t, origin + direction * t, outward, direction, surface_id,
                              entering=outward.dot(direction) < 0, outward_normal=outward)]

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        hits = self._front_hits(origin, direction)
        hits += self._flat_hit(origin, direction, g['back'][0], g['back'][1], g['axis'], 'back')
        for front_edge, back_corner, side in g['sides']:
            hits += self._flat_hit(origin, direction, front_edge, back_corner,
                                   g['lateral'] * side, 'side')
        return hits

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        return self.refract_at_surface(ray, hit, hit.data['entering'])


# Example usage and testing
if __name__ == "__main__":
    lens = AsphericLens(json_obj={'conicConstant': -1.0})
    for y in (-20.0, 0.0, 20.0):
        hits = lens.intersect(Vector(0, y), Vector(1, 0))
        for h in sorted(hits, key=lambda h: h.distance):
            print(f"y={y:+.0f}: {h.surface_id} at {h.point}, entering={h.data['entering']}")
