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
from typing import Dict, Any, List

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.constants import GREEN_WAVELENGTH
    from ray_optics_engine.core.fresnel import reflect_direction
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ...constants import GREEN_WAVELENGTH
    from ...fresnel import reflect_direction
    from ...ray import Ray, TerminationReason


MIRROR_DEFAULTS: Dict[str, Any] = {
    'reflectivity': 1.0,
    'filter': False,
    'invert': False,
    'filterWavelength': GREEN_WAVELENGTH,
    'bandwidth': 10,
}
"""Parameters shared by every mirror. Subclasses merge these into their own defaults."""


class BaseMirror(BaseElement):
    """
    Base class for mirrors.

    Reflection follows d' = d - 2(d.n)n with n the local surface normal at
    the hit point, supplied by the subclass's intersect(). The reflected
    child carries intensity * reflectivity, gains a phase of pi and has its
    Jones vector mirrored (handedness flips).

    Attributes:
        reflectivity (float): Power reflectivity in [0, 1].
        filter (bool): Whether it is a dichroic mirror (wavelength-selective).
        invert (bool): If True, rays with wavelength outside the bandwidth are
                      reflected. If False, rays with wavelength inside the
                      bandwidth are reflected.
        filterWavelength (float): The target wavelength if dichroic is enabled (nm)
        bandwidth (float): The half-width of the band if dichroic is enabled (nm)

    Rays rejected by the dichroic filter pass straight through.
    """

    absorption_kind = 'mirror'

    def validate(self) -> None:
        if not 0.0 <= self.reflectivity <= 1.0:
            raise ValueError(f"{self.get_display_name()}: reflectivity must be in [0, 1], got {self.reflectivity}")

    def reflects_wavelength(self, wavelength_nm: float) -> bool:
        """
        Whether the dichroic filter lets this wavelength be reflected.

        Reflection happens when (ray matches AND not inverted) OR (ray doesn't match AND inverted).
        """
        if not self.filter:
            return True
        matches = abs(self.filterWavelength - wavelength_nm) <= self.bandwidth
        return matches != self.invert

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        if not self.reflects_wavelength(ray.wavelength_nm):
            child = self.spawn_child(ray, hit.point, ray.direction, 'transmit')
            ray.terminate(TerminationReason.TRANSMITTED)
            return [child] if child is not None else []

        intensity = ray.intensity * self.reflectivity
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []

        direction = reflect_direction(ray.direction, hit.normal)
        child = self.spawn_child(
            ray, hit.point, direction, 'reflect',
            intensity=intensity,
            phase=ray.phase + math.pi,
            polarization=ray.polarization.reflected(),
        )
        ray.terminate(TerminationReason.REFLECTED)
        return [child] if child is not None else []
