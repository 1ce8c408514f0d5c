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
from typing import Dict, Any, List, Optional, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement
    from ray_optics_engine.core.constants import (
        DEFAULT_WAVELENGTH_NM, MAX_RAYS_PER_SOURCE, PIXELS_PER_NANOMETER
    )
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.polarization import Polarization
    from ray_optics_engine.core.ray import Ray, RayCreationError
else:
    from ..base_element import BaseElement
    from ...constants import DEFAULT_WAVELENGTH_NM, MAX_RAYS_PER_SOURCE, PIXELS_PER_NANOMETER
    from ...geometry import Vector
    from ...polarization import Polarization
    from ...ray import Ray, RayCreationError

logger = logging.getLogger(__name__)


SOURCE_DEFAULTS: Dict[str, Any] = {
    'brightness': 1.0,
    'wavelength': DEFAULT_WAVELENGTH_NM,
    'polarization': 'unpolarized',
    'polarizationAngle': 0.0,
    'beamDiameter': 0.0,
    'beamWaist': 0.0,
    'ignoreDecay': False,
    'enabled': True,
}
"""Parameters shared by every source. Subclasses merge these into their own defaults."""


class BaseSource(BaseElement):
    """
    Base class for light sources.

    Sources never intersect rays. generate_rays() emits N rays whose
    intensities sum to `brightness`, all with the source's wavelength and
    polarization.

    Attributes:
        brightness: Total emitted intensity, split evenly over the rays.
        wavelength: Wavelength in nm.
        polarization: 'unpolarized', 'linear', 'circular-right' or 'circular-left'.
        polarizationAngle: Linear polarization angle in degrees (ray frame).
        beamDiameter: Nominal beam diameter carried by each ray.
        beamWaist: Gaussian waist radius w0 (0 disables Gaussian data).
        ignoreDecay: Rays never terminate for low intensity.
        enabled: Disabled sources emit nothing.
    """

    is_source = True

    def validate(self) -> None:
        if not (isinstance(self.brightness, (int, float)) and self.brightness >= 0):
            raise ValueError(f"{self.get_display_name()}: brightness must be >= 0, got {self.brightness}")
        if not (isinstance(self.wavelength, (int, float)) and self.wavelength > 0):
            raise ValueError(f"{self.get_display_name()}: wavelength must be > 0, got {self.wavelength}")
        num_rays = getattr(self, 'numRays', 1)
        if not (isinstance(num_rays, (int, float)) and num_rays >= 1):
            raise ValueError(f"{self.get_display_name()}: numRays must be >= 1, got {num_rays}")
        if self.beamWaist < 0 or self.beamDiameter < 0:
            raise ValueError(f"{self.get_display_name()}: beam sizes must be >= 0")
        # Raises ValueError for an unknown option
        self.get_polarization()

    def get_polarization(self) -> Polarization:
        return Polarization.from_name(self.polarization, math.radians(self.polarizationAngle))

    def gaussian_parameters(self) -> Tuple[Optional[float], Optional[float]]:
        """(waist, rayleigh_range) with z_R = pi w0^2 / lambda, or (None, None)."""
        if not self.beamWaist:
            return None, None
        wavelength_px = self.wavelength * PIXELS_PER_NANOMETER
        return self.beamWaist, math.pi * self.beamWaist ** 2 / wavelength_px

    def ray_count(self, max_rays: Optional[int] = None) -> int:
        """Number of rays to emit: the configured count, capped by max_rays."""
        cap = MAX_RAYS_PER_SOURCE if max_rays is None else max_rays
        requested = int(getattr(self, 'numRays', 1))
        if requested > cap:
            logger.info("%s: ray count %d capped at %d", self.get_display_name(), requested, cap)
        return min(requested, cap)

    def emission(self, count: int) -> List[Tuple[Vector, Vector]]:
        """(origin, direction) for each of the `count` rays."""
        raise NotImplementedError

    def generate_rays(self, max_rays: Optional[int] = None) -> List[Ray]:
        if not self.enabled:
            return []
        count = self.ray_count(max_rays)
        intensity = self.brightness / count
        polarization = self.get_polarization()
        waist, rayleigh_range = self.gaussian_parameters()
        rays = []
        for origin, direction in self.emission(count):
            try:
                ray = Ray(
                    origin, direction,
                    wavelength_nm=self.wavelength,
                    intensity=intensity,
                    polarization=polarization,
                    source_id=self.uuid,
                    beam_diameter=self.beamDiameter,
                    beam_waist=waist,
                    rayleigh_range=rayleigh_range,
                    ignore_decay=self.ignoreDecay,
                    medium_refractive_index=self.ambient_refractive_index,
                )
            except RayCreationError as e:
                logger.warning("%s: could not emit ray: %s", self.get_display_name(), e)
                continue
            rays.append(ray)
        return rays
