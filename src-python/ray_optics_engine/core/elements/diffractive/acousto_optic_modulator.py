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
from typing import List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ray_optics_engine.core.constants import SPEED_OF_LIGHT
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ...constants import SPEED_OF_LIGHT
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason

# Largest deflection the model allows
MAX_DEFLECTION = math.pi / 6


class AcoustoOpticModulator(PolygonElementMixin, BaseElement):
    """
    Acousto-optic modulator: a crystal driven by an RF acoustic wave.

    A ray crossing the crystal leaves it split into diffraction orders:

    - order 0 continues undeviated with efficiency 1 - rfPower;
    - order +-1 is deflected by the Bragg angle lambda * f / v (clamped to
      +-30 degrees) and Doppler shifted by the RF frequency, so its optical
      frequency becomes nu +- f and its wavelength c / (c/lambda +- f).

    In 'bragg' mode only the order given by `braggOrder` is produced, with
    efficiency rfPower. In 'raman_nath' mode both first orders are produced,
    sharing rfPower equally.

    Attributes:
        center, width, height, angle: The crystal rectangle.
        rfFrequency: Drive frequency in MHz.
        rfPower: Normalized drive power in [0, 1] (first-order efficiency).
        acousticVelocity: Speed of sound in the crystal (m/s).
        mode: 'bragg' or 'raman_nath'.
        braggOrder: +1 or -1, the order used in Bragg mode.
    """

    type = 'AcoustoOpticModulator'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'width': 50.0,
        'height': 20.0,
        'angle': 0.0,
        'rfFrequency': 80.0,
        'rfPower': 0.5,
        'acousticVelocity': 4200.0,
        'mode': 'bragg',
        'braggOrder': 1,
    }
    absorption_kind = 'aom'

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"{self.get_display_name()}: width and height must be positive")
        if self.rfFrequency <= 0 or self.acousticVelocity <= 0:
            raise ValueError(f"{self.get_display_name()}: rfFrequency and acousticVelocity must be positive")
        if not 0.0 <= self.rfPower <= 1.0:
            raise ValueError(f"{self.get_display_name()}: rfPower must be in [0, 1], got {self.rfPower}")
        if self.mode not in ('bragg', 'raman_nath'):
            raise ValueError(f"{self.get_display_name()}: mode must be 'bragg' or 'raman_nath', got {self.mode!r}")
        if self.braggOrder not in (1, -1):
            raise ValueError(f"{self.get_display_name()}: braggOrder must be +1 or -1, got {self.braggOrder}")

    def build_vertices(self) -> List[Vector]:
        return rectangle_vertices(Vector.from_dict(self.center), self.width, self.height,
                                  math.radians(self.angle))

    def bragg_angle(self, wavelength_nm: float) -> float:
        """First-order deflection in radians, lambda * f / v, clamped to +-30 degrees."""
        theta = wavelength_nm * 1e-9 * self.rfFrequency * 1e6 / self.acousticVelocity
        return max(-MAX_DEFLECTION, min(MAX_DEFLECTION, theta))

    def shifted_wavelength(self, wavelength_nm: float, order: int) -> float:
        """Wavelength (nm) after a frequency shift of order * rfFrequency."""
        frequency = SPEED_OF_LIGHT / (wavelength_nm * 1e-9)
        return SPEED_OF_LIGHT / (frequency + order * self.rfFrequency * 1e6) * 1e9

    def orders(self) -> List[Tuple[int, float]]:
        """(order, efficiency) pairs for the current mode."""
        result = [(0, 1.0 - self.rfPower)]
        if self.mode == 'bragg':
            result.append((self.braggOrder, self.rfPower))
        else:
            result += [(1, self.rfPower / 2.0), (-1, self.rfPower / 2.0)]
        return result

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        point = hit.point
        if hit.data['entering']:
            exit_hit = self.exit_hit(hit.point, ray.direction)
            if exit_hit is not None:
                point = exit_hit.point
                ray.append_history(point)

        children = []
        for order, efficiency in self.orders():
            intensity = ray.intensity * efficiency
            if not self.survives(ray, intensity):
                continue
            if order == 0:
                child = self.spawn_child(ray, point, ray.direction, 'transmit', intensity=intensity)
            else:
                direction = ray.direction.rotate(order * self.bragg_angle(ray.wavelength_nm))
                child = self.spawn_child(
                    ray, point, direction, 'diffract',
                    intensity=intensity,
                    wavelength_nm=self.shifted_wavelength(ray.wavelength_nm, order),
                )
            if child is not None:
                children.append(child)

        if children:
            ray.terminate(TerminationReason.DIFFRACTED)
        else:
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return children
