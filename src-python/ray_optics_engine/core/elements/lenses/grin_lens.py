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
from typing import Dict, Any, List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ray_optics_engine.core.equation import compile_expression
    from ray_optics_engine.core.fresnel import evaluate_interface, transmission_matrix
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ...equation import compile_expression
    from ...fresnel import evaluate_interface, transmission_matrix
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason

logger = logging.getLogger(__name__)


class GRINLens(PolygonElementMixin, BaseElement):
    """
    Gradient-index rod lens.

    The body is a rectangle of `length` (along the optical axis, direction
    `angle` in degrees) by `diameter`, centred on `center`. Inside, the index
    follows `indexProfile`, an expression of

        r: signed distance from the optical axis
        z: depth along the axis, from 0 at one end face to `length` at the other

    with the named constants n_0 (= n0) and g (= gradientConstant). The
    default is the parabolic profile n(r) = n_0 (1 - g^2 r^2 / 2), whose
    pitch is 2*pi/g.

    A ray is refracted into the body with Snell's law, then the ray equation

        dT/ds = (grad n - (grad n . T) T) / n

    is integrated with fixed Euler steps of `stepSize`. Reaching a face, the
    ray refracts out (or is totally reflected and keeps going inside). The
    whole internal path is recorded in the parent's history before the
    emerging child is spawned, so one interaction covers the full transit.

    Only the transmitted power is traced; surface reflections are lost.
    """

    type = 'GRINLens'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'angle': 0.0,
        'length': 40.0,
        'diameter': 50.0,
        'n0': 1.6,
        'gradientConstant': 0.01,
        'indexProfile': 'n_0*(1 - g^2*r^2/2)',
        'stepSize': 0.25,
        'quality': 0.98,
    }
    absorption_kind = 'lens'

    max_internal_reflections: int = 20

    def validate(self) -> None:
        if self.length <= 0 or self.diameter <= 0:
            raise ValueError(f"{self.get_display_name()}: length and diameter must be positive")
        if self.stepSize <= 0:
            raise ValueError(f"{self.get_display_name()}: stepSize must be positive, got {self.stepSize}")
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"{self.get_display_name()}: quality must be in [0, 1], got {self.quality}")
        # Fail early on a profile that does not parse
        self.index_function()

    def build_vertices(self) -> List[Vector]:
        return rectangle_vertices(Vector.from_dict(self.center), self.length, self.diameter,
                                  math.radians(self.angle))

    def _build_geometry(self) -> Dict[str, Any]:
        cache = super()._build_geometry()
        axis = Vector.from_angle(math.radians(self.angle))
        cache.update({
            'axis': axis,
            'lateral': axis.perpendicular(),
            'entry_center': Vector.from_dict(self.center) - axis * (self.length / 2.0),
        })
        return cache

    def index_function(self):
        """The compiled profile and its gradient, see equation.compile_expression."""
        return compile_expression(self.indexProfile, ('r', 'z'),
                                  {'n_0': self.n0, 'g': self.gradientConstant})

    @property
    def pitch(self) -> float:
        """Period of the sinusoidal ray path for the parabolic profile."""
        if self.gradientConstant <= 0:
            return math.inf
        return 2.0 * math.pi / self.gradientConstant

    def effective_focal_length(self) -> float:
        """Paraxial focal length 1 / (n0 g sin(g L)) of the parabolic profile."""
        g = self.gradientConstant
        s = math.sin(g * self.length)
        if g <= 0 or abs(s) < 1e-9:
            return math.inf
        return 1.0 / (self.n0 * g * s)

    def _local(self, point: Vector) -> Tuple[float, float]:
        g = self.geometry
        rel = point - g['entry_center']
        return rel.dot(g['lateral']), rel.dot(g['axis'])

    def index_at(self, point: Vector) -> Tuple[float, Vector]:
        """Index and its world-frame gradient at `point`."""
        fn, grad = self.index_function()
        g = self.geometry
        r, z = self._local(point)
        n = float(fn(r, z))
        gradient = g['lateral'] * float(grad['r'](r, z)) + g['axis'] * float(grad['z'](r, z))
        return n, gradient

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        n_inside, _ = self.index_at(hit.point)
        if not hit.data['entering']:
            # Started inside the body: leave through this face directly
            return self._emerge(ray, hit.point, ray.direction, hit.normal, n_inside, 1.0)

        iface = evaluate_interface(ray.direction, hit.normal, ray.medium_refractive_index, n_inside)
        if iface.is_tir:
            child = self.spawn_child(ray, hit.point, iface.reflected, 'tir')
            ray.terminate(TerminationReason.TOTAL_INTERNAL_REFLECTION)
            return [child] if child is not None else []
        polarization, fraction = ray.polarization.transformed(transmission_matrix(iface))

        position, direction = hit.point, iface.refracted
        reflections = 0
        max_steps = int(math.ceil(50.0 * (self.length + self.diameter) / self.stepSize))
        for _ in range(max_steps):
            n, gradient = self.index_at(position)
            step = direction * self.stepSize
            exit_hit = self.exit_hit(position, direction)
            if exit_hit is not None and exit_hit.distance <= self.stepSize:
                ray.append_history(exit_hit.point, refractive_index=n)
                n_exit, _ = self.index_at(exit_hit.point)
                iface_out = evaluate_interface(direction, exit_hit.normal, n_exit, self.ambient_refractive_index)
                if iface_out.is_tir:
                    reflections += 1
                    if reflections > self.max_internal_reflections:
                        break
                    position, direction = exit_hit.point, iface_out.reflected
                    continue
                return self._emerge(ray, exit_hit.point, direction, exit_hit.normal, n_exit, fraction,
                                    polarization)
            position = position + step
            ray.append_history(position, refractive_index=n)
            bent = direction + (gradient - direction * gradient.dot(direction)) * (self.stepSize / n)
            direction = bent.normalize()

        logger.debug("%s: ray %s did not leave the body, absorbing it",
                     self.get_display_name(), ray.uuid[:8])
        ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return []

    def _emerge(self, ray: Ray, point: Vector, direction: Vector, normal: Vector,
                n_inside: float, fraction: float, polarization=None) -> List[Ray]:
        iface = evaluate_interface(direction, normal, n_inside, self.ambient_refractive_index)
        if iface.is_tir:
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        pol_in = polarization if polarization is not None else ray.polarization
        pol_out, fraction_out = pol_in.transformed(transmission_matrix(iface))
        intensity = ray.intensity * fraction * fraction_out * self.quality
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        child = self.spawn_child(ray, point, iface.refracted, 'refract', intensity=intensity,
                                 polarization=pol_out, medium_refractive_index=self.ambient_refractive_index)
        ray.terminate(TerminationReason.REFRACTED)
        return [child] if child is not None else []


# Example usage and testing
if __name__ == "__main__":
    lens = GRINLens(json_obj={'length': 157.08})
    print(f"Pitch: {lens.pitch:.2f}, focal length: {lens.effective_focal_length():.2f}")
    for y in (-15.0, 0.0, 15.0):
        ray = Ray(Vector(0, y), Vector(1, 0))
        hit = min(lens.intersect(ray.origin, ray.direction), key=lambda h: h.distance)
        ray.append_history(hit.point)
        children = lens.interact(ray, hit)
        for c in children:
            print(f"y={y:+.0f}: exits at {c.origin}, direction {c.direction}")
