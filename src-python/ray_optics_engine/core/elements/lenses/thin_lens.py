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

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.constants import DEFAULT_WAVELENGTH_NM, PIXELS_PER_NANOMETER
    from ray_optics_engine.core.dispersion import n_anchored_cauchy, DEFAULT_CAUCHY_B
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from ...constants import DEFAULT_WAVELENGTH_NM, PIXELS_PER_NANOMETER
    from ...dispersion import n_anchored_cauchy, DEFAULT_CAUCHY_B
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason


class ThinLens(LineElementMixin, BaseElement):
    """
    Ideal thin lens with the shape of a line segment.

    Rays are deviated with the paraxial height/angle map:

        theta_out = theta_in - h / f(lambda)

    where theta is measured from the lens axis (the segment normal, oriented
    along the incoming ray) and h is the signed height of the hit point from
    the lens center. This is exact only for small h/f; off-axis aberrations
    are not modelled.

    With `chromatic` enabled the focal length follows the lensmaker scaling
    f(lambda) = f * (n_base - 1) / (n(lambda) - 1), where n(lambda) is a Cauchy
    curve anchored at 550 nm. A negative focal length gives a diverging lens.

    Attributes:
        p1, p2: Endpoints of the lens (the aperture).
        focalLength: Focal length at 550 nm (scene units).
        quality: Power transmission of the lens.
        chromatic: Whether the focal length depends on wavelength.
        refIndex: Glass index at 550 nm used for the chromatic scaling.
        cauchyB: Cauchy B coefficient (um^2).
    """

    type = 'ThinLens'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -40.0},
        'p2': {'x': 100.0, 'y': 40.0},
        'focalLength': 100.0,
        'quality': 0.98,
        'chromatic': True,
        'refIndex': 1.5,
        'cauchyB': DEFAULT_CAUCHY_B,
    }
    absorption_kind = 'lens'

    def validate(self) -> None:
        if self.focalLength == 0 or not math.isfinite(self.focalLength):
            raise ValueError(f"{self.get_display_name()}: focalLength must be finite and non-zero, got {self.focalLength}")
        if not 0.0 <= self.quality <= 1.0:
            raise ValueError(f"{self.get_display_name()}: quality must be in [0, 1], got {self.quality}")
        if self.refIndex <= 1.0:
            raise ValueError(f"{self.get_display_name()}: refIndex must be greater than 1, got {self.refIndex}")

    def focal_length_at(self, wavelength_nm: float) -> float:
        """Focal length for the given wavelength."""
        if not self.chromatic:
            return self.focalLength
        n = n_anchored_cauchy(wavelength_nm, self.refIndex, self.cauchyB)
        return self.focalLength * (self.refIndex - 1.0) / (n - 1.0)

    def optical_power(self, wavelength_nm: float) -> float:
        """1/f for this wavelength. Subclasses override to switch the power off."""
        return 1.0 / self.focal_length_at(wavelength_nm)

    def focal_points(self, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> Tuple[Vector, Vector]:
        """The two focal points, on either side of the lens center."""
        g = self.geometry
        f = self.focal_length_at(wavelength_nm)
        return g['center'] - g['normal'] * f, g['center'] + g['normal'] * f

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        g = self.geometry
        axis = g['normal'] * self.incidence_side(ray.direction)
        across = axis.perpendicular()

        h = (hit.point - g['center']).dot(across)

        theta_in = math.atan2(ray.direction.dot(across), ray.direction.dot(axis))
        theta_out = theta_in - h * self.optical_power(ray.wavelength_nm)
        direction = axis * math.cos(theta_out) + across * math.sin(theta_out)

        intensity = ray.intensity * self.quality
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        child = self.spawn_child(ray, hit.point, direction, 'refract', intensity=intensity)
        ray.terminate(TerminationReason.REFRACTED)
        return [child] if child is not None else []

    # ==================== Gaussian beam (ABCD) ====================

    def abcd_matrix(self, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> np.ndarray:
        """
        Ray transfer matrix of the lens: [[1, 0], [-1/f, 1]].
        """
        return np.array([[1.0, 0.0], [-self.optical_power(wavelength_nm), 1.0]])

    def transform_q(self, q: complex, wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> complex:
        """
        Transform the complex beam parameter q = z + i*z_R through the lens.

        q' = (A q + B) / (C q + D). If the denominator vanishes q is returned unchanged.
        """
        (A, B), (C, D) = self.abcd_matrix(wavelength_nm)
        denominator = C * q + D
        if abs(denominator) < 1e-12:
            return q
        return (A * q + B) / denominator

    def transform_beam_parameters(self, w0: float, z: float,
                                  wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> Tuple[float, float]:
        """
        Gaussian beam after the lens.

        Args:
            w0: Input waist radius (scene units)
            z: Distance from the input waist to the lens (positive if the waist is before the lens)
            wavelength_nm: Wavelength in nm

        Returns:
            (w0_out, z_out): the output waist radius and its distance after the lens.
        """
        wavelength_px = wavelength_nm * PIXELS_PER_NANOMETER
        z_r = math.pi * w0 * w0 / wavelength_px
        q_out = self.transform_q(complex(z, z_r), wavelength_nm)
        z_r_out = abs(q_out.imag)
        w0_out = math.sqrt(z_r_out * wavelength_px / math.pi)
        # q' = -d + i z_R' where d is the waist position after the lens
        return w0_out, -q_out.real


# Example usage and testing
if __name__ == "__main__":
    lens = ThinLens()
    for y in (-20.0, 0.0, 20.0):
        ray = Ray(Vector(0, y), Vector(1, 0))
        hit = lens.intersect(ray.origin, ray.direction)[0]
        ray.append_history(hit.point)
        child = lens.interact(ray, hit)[0]
        print(f"y={y:+.0f}: angle out {math.degrees(child.direction.angle()):+.3f} deg")

    w0_out, z_out = lens.transform_beam_parameters(5.0, 200.0)
    print(f"Gaussian beam: w0'={w0_out:.3f}, waist {z_out:.1f} after the lens")
