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
from typing import Dict, List, Optional

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.constants import PIXELS_PER_NANOMETER, PIXELS_PER_MICROMETER
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from ...constants import PIXELS_PER_NANOMETER, PIXELS_PER_MICROMETER
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason


class DiffractionGrating(LineElementMixin, BaseElement):
    """
    Ruled grating with the shape of a line segment.

    For each order m in [-maxOrder, maxOrder] the tangential component of
    the direction obeys the grating equation

        t_out = t_in + m * lambda / d

    (t measured along the grating tangent, p1 -> p2). Orders with
    |t_out| > 1 are evanescent and skipped. The normal component keeps the
    incoming side in 'reflection' mode and crosses the grating in
    'transmission' mode. Each order carries I * efficiency(|m|).

    Attributes:
        p1, p2: Endpoints of the grating.
        period: Groove period in micrometres.
        maxOrder: Highest diffraction order traced.
        mode: 'reflection' or 'transmission'.
        efficiencies: Power efficiency per |m|, as {"0": ..., "1": ...}. Missing orders get 0.
    """

    type = 'DiffractionGrating'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -50.0},
        'p2': {'x': 100.0, 'y': 50.0},
        'period': 1.0,
        'maxOrder': 2,
        'mode': 'reflection',
        'efficiencies': {'0': 0.60, '1': 0.15, '2': 0.05},
    }
    absorption_kind = 'grating'

    def validate(self) -> None:
        if self.period <= 0:
            raise ValueError(f"{self.get_display_name()}: period must be positive, got {self.period}")
        if int(self.maxOrder) != self.maxOrder or self.maxOrder < 0:
            raise ValueError(f"{self.get_display_name()}: maxOrder must be a non-negative integer, got {self.maxOrder}")
        if self.mode not in ('reflection', 'transmission'):
            raise ValueError(f"{self.get_display_name()}: mode must be 'reflection' or 'transmission', got {self.mode!r}")
        total = self.efficiency(0) + 2 * sum(self.efficiency(m) for m in range(1, int(self.maxOrder) + 1))
        if any(v < 0 for v in self.efficiencies.values()) or total > 1.0 + 1e-9:
            raise ValueError(f"{self.get_display_name()}: efficiencies must be >= 0 and sum to at most 1 over all orders")

    def efficiency(self, order: int) -> float:
        return float(self.efficiencies.get(str(abs(order)), 0.0))

    @property
    def period_px(self) -> float:
        return self.period * PIXELS_PER_MICROMETER

    def order_direction(self, direction: Vector, normal: Vector, order: int,
                        wavelength_nm: float) -> Optional[Vector]:
        """
        Direction of diffraction order `order`, or None if it is evanescent.

        `normal` faces the incoming ray.
        """
        tangent = self.geometry['tangent']
        t_out = direction.dot(tangent) + order * wavelength_nm * PIXELS_PER_NANOMETER / self.period_px
        if abs(t_out) > 1.0:
            return None
        n_out = math.sqrt(max(0.0, 1.0 - t_out * t_out))
        side = normal if self.mode == 'reflection' else -normal
        return (tangent * t_out + side * n_out).normalize()

    def diffraction_angles(self, incidence_deg: float, wavelength_nm: float) -> Dict[int, float]:
        """Angles (degrees from the normal) of the propagating orders for a given incidence."""
        angles = {}
        sin_i = math.sin(math.radians(incidence_deg))
        for m in range(-int(self.maxOrder), int(self.maxOrder) + 1):
            s = sin_i + m * wavelength_nm * PIXELS_PER_NANOMETER / self.period_px
            if abs(s) <= 1.0:
                angles[m] = math.degrees(math.asin(s))
        return angles

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        children = []
        for m in range(-int(self.maxOrder), int(self.maxOrder) + 1):
            intensity = ray.intensity * self.efficiency(m)
            if not self.survives(ray, intensity):
                continue
            direction = self.order_direction(ray.direction, hit.normal, m, ray.wavelength_nm)
            if direction is None:
                continue
            child = self.spawn_child(ray, hit.point, direction, 'diffract', intensity=intensity)
            if child is not None:
                children.append(child)
        if children:
            ray.terminate(TerminationReason.DIFFRACTED)
        else:
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return children
