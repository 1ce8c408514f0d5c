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

from shapely.geometry import MultiLineString

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.constants import HIT_EPSILON
    from ray_optics_engine.core.geometry import Vector, geometry
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ...constants import HIT_EPSILON
    from ...geometry import Vector, geometry
    from ...ray import Ray, TerminationReason

# Scene units (um) per kilometre
PIXELS_PER_KM = 1e6


class OpticalFiber(BaseElement):
    """
    Fiber with an input facet and an output facet.

    A ray hitting the front of the input facet couples when it lands on
    the core (|offset| <= coreDiameter/2) within the acceptance cone
    asin(NA / n_ambient). The coupled power is

        I * intrinsicEfficiency * angle_factor * position_factor * 10^(-loss_dB / 10)

    with angle_factor = (cos(theta) - cos(theta_max)) / (1 - cos(theta_max)),
    position_factor = 1 - offset / core_radius and loss_dB the dB/km loss
    over the straight distance between the facets. The output ray leaves
    the output facet along `outputAngle`. Rays that hit the facet outside
    the core or the acceptance cone are terminated 'not_coupled'.

    Attributes:
        inputPos, angle: Input facet center and the direction (degrees) its face looks toward.
        outputPos, outputAngle: Output facet center and emission direction (degrees).
        numericalAperture: NA of the fiber.
        coreDiameter: Core diameter.
        intrinsicEfficiency: Coupling efficiency for a perfectly matched ray.
        lossDbPerKm: Propagation loss.
        facetLength: Length of the input facet (core and cladding).
        coreIndex: Core index, used for the phase accumulated along the fiber.
    """

    type = 'OpticalFiber'
    serializable_defaults = {
        'inputPos': {'x': 100.0, 'y': 0.0},
        'angle': 180.0,
        'outputPos': {'x': 200.0, 'y': 0.0},
        'outputAngle': 0.0,
        'numericalAperture': 0.22,
        'coreDiameter': 9.0,
        'intrinsicEfficiency': 1.0,
        'lossDbPerKm': 0.0,
        'facetLength': 15.0,
        'coreIndex': 1.468,
    }
    absorption_kind = 'fiber'

    def __init__(self, scene=None, json_obj: Optional[Dict[str, Any]] = None):
        super().__init__(scene, json_obj)
        self.last_coupling_factor: float = 0.0
        self.coupled_count: int = 0

    def validate(self) -> None:
        if not 0 < self.numericalAperture <= 1.0:
            raise ValueError(f"{self.get_display_name()}: numericalAperture must be in (0, 1], got {self.numericalAperture}")
        if self.coreDiameter <= 0 or self.facetLength < self.coreDiameter:
            raise ValueError(f"{self.get_display_name()}: need 0 < coreDiameter <= facetLength")
        if not 0.0 <= self.intrinsicEfficiency <= 1.0:
            raise ValueError(f"{self.get_display_name()}: intrinsicEfficiency must be in [0, 1]")
        if self.lossDbPerKm < 0:
            raise ValueError(f"{self.get_display_name()}: lossDbPerKm must be >= 0, got {self.lossDbPerKm}")

    def _build_geometry(self) -> Dict[str, Any]:
        inp = Vector.from_dict(self.inputPos)
        out = Vector.from_dict(self.outputPos)
        face = Vector.from_angle(math.radians(self.angle))
        half = face.perpendicular() * (self.facetLength / 2.0)
        return {
            'input': inp,
            'output': out,
            'face_normal': face,
            'facet': (inp - half, inp + half),
            'output_direction': Vector.from_angle(math.radians(self.outputAngle)),
            'length': inp.distance_to(out),
        }

    def shape(self):
        g = self.geometry
        p1, p2 = g['facet']
        return MultiLineString([
            [p1.to_tuple(), p2.to_tuple()],
            [g['input'].to_tuple(), g['output'].to_tuple()],
        ])

    def move(self, diff_x: float, diff_y: float) -> bool:
        for key in ('inputPos', 'outputPos'):
            p = getattr(self, key)
            setattr(self, key, {'x': p['x'] + diff_x, 'y': p['y'] + diff_y})
        return True

    def on_trace_start(self, config=None) -> None:
        super().on_trace_start(config)
        self.last_coupling_factor = 0.0
        self.coupled_count = 0

    @property
    def acceptance_angle(self) -> float:
        """Half-angle of the acceptance cone in radians."""
        return math.asin(min(1.0, self.numericalAperture / self.ambient_refractive_index))

    def transmission_factor(self) -> float:
        """Propagation loss between the facets as a power ratio."""
        length_km = self.geometry['length'] / PIXELS_PER_KM
        return 10.0 ** (-self.lossDbPerKm * length_km / 10.0)

    def coupling_factor(self, direction: Vector, offset: float) -> float:
        """
        Fraction of the power coupled into the core, or 0.0 outside the core or the cone.
        """
        core_radius = self.coreDiameter / 2.0
        if abs(offset) > core_radius + 1e-9:
            return 0.0
        cos_theta = -direction.dot(self.geometry['face_normal'])
        cos_max = math.cos(self.acceptance_angle)
        if cos_theta < cos_max - 1e-12:
            return 0.0
        angle_factor = 1.0 if cos_max >= 1.0 - 1e-9 else (cos_theta - cos_max) / (1.0 - cos_max)
        position_factor = 1.0 - abs(offset) / core_radius
        return max(0.0, min(1.0, angle_factor * position_factor))

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        # Only the polished front of the input facet accepts light
        if direction.dot(g['face_normal']) >= 0:
            return []
        p1, p2 = g['facet']
        result = geometry.ray_segment_intersection(origin, direction, p1, p2)
        if result is None or result[0] <= HIT_EPSILON:
            return []
        t, u = result
        offset = (u - 0.5) * self.facetLength
        return [self.make_hit(t, origin + direction * t, g['face_normal'], direction,
                              'input_facet', offset=offset)]

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        coupling = self.coupling_factor(ray.direction, hit.data['offset'])
        self.last_coupling_factor = coupling
        if coupling <= 0.0:
            ray.terminate(TerminationReason.NOT_COUPLED)
            return []

        intensity = ray.intensity * self.intrinsicEfficiency * coupling * self.transmission_factor()
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []

        g = self.geometry
        ray.append_history(g['output'], refractive_index=self.coreIndex)
        child = self.spawn_child(ray, g['output'], g['output_direction'], 'transmit',
                                 intensity=intensity, medium_refractive_index=self.ambient_refractive_index)
        ray.terminate(TerminationReason.COUPLED)
        if child is None:
            return []
        self.coupled_count += 1
        return [child]
