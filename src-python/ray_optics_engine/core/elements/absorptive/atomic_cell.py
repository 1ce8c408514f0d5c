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
from typing import List, Dict, Tuple, Union

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ray_optics_engine.core.constants import SPEED_OF_LIGHT, BOLTZMANN_CONSTANT, ATOMIC_MASS_UNIT
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..polygon_element_mixin import PolygonElementMixin, rectangle_vertices
    from ...constants import SPEED_OF_LIGHT, BOLTZMANN_CONSTANT, ATOMIC_MASS_UNIT
    from ...geometry import Vector
    from ...ray import Ray, TerminationReason


# Alkali D-line data: resonance wavelength (nm) and natural linewidth (MHz)
ATOM_DATA: Dict[str, Dict[str, Tuple[float, float]]] = {
    'Rb85': {'D1': (794.98, 5.75), 'D2': (780.24, 6.07)},
    'Rb87': {'D1': (794.98, 5.75), 'D2': (780.24, 6.07)},
    'Cs133': {'D1': (894.35, 4.56), 'D2': (852.35, 5.22)},
    'Na23': {'D1': (589.76, 9.76), 'D2': (589.16, 9.76)},
    'K39': {'D1': (770.11, 5.96), 'D2': (766.70, 6.04)},
}

# Mass numbers used for the Doppler width
ATOM_MASS_NUMBER: Dict[str, int] = {
    'Rb85': 85,
    'Rb87': 87,
    'Cs133': 133,
    'Na23': 23,
    'K39': 39,
}


class AtomicCell(PolygonElementMixin, BaseElement):
    """
    Rectangular alkali vapour cell with resonant absorption.

    A ray crossing the cell is attenuated by Beer-Lambert,
    I' = I * exp(-alpha(lambda) * L), where L is the chord between the
    entry point and the exit point found by a second intersection with the
    cell walls. The absorption coefficient uses a pseudo-Voigt line shape
    that mixes the natural (Lorentzian) and Doppler (Gaussian) widths:

        alpha = density * sigma0 * V(lambda - lambda0) * doppler_width

    with sigma0 = 3 lambda0^2 / (2 pi). The ray continues undeflected.

    Attributes:
        atomType: One of ATOM_DATA ('Rb85', 'Rb87', 'Cs133', 'Na23', 'K39').
        transitionLine: 'D1' or 'D2'.
        density: Number density in atoms/cm^3.
        temperature: Vapour temperature in K.
        lengthScaleCm: Centimetres per scene unit for the path length.
    """

    type = 'AtomicCell'
    serializable_defaults = {
        'center': {'x': 100.0, 'y': 0.0},
        'width': 80.0,
        'height': 40.0,
        'angle': 0.0,
        'atomType': 'Rb87',
        'transitionLine': 'D2',
        'density': 1e10,
        'temperature': 300.0,
        'lengthScaleCm': 0.01,
    }
    geometry_keys = ('center', 'width', 'height', 'angle')
    absorption_kind = 'atomic_cell'

    def validate(self) -> None:
        if self.atomType not in ATOM_DATA:
            raise ValueError(
                f"{self.get_display_name()}: unknown atom species {self.atomType!r}, "
                f"expected one of {sorted(ATOM_DATA)}"
            )
        if self.transitionLine not in ('D1', 'D2'):
            raise ValueError(f"{self.get_display_name()}: transitionLine must be 'D1' or 'D2'")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"{self.get_display_name()}: width and height must be positive")
        if self.density < 0:
            raise ValueError(f"{self.get_display_name()}: density must be >= 0, got {self.density}")
        if self.temperature <= 0:
            raise ValueError(f"{self.get_display_name()}: temperature must be positive, got {self.temperature}")
        if self.lengthScaleCm <= 0:
            raise ValueError(f"{self.get_display_name()}: lengthScaleCm must be positive")

    def build_vertices(self) -> List[Vector]:
        return rectangle_vertices(Vector.from_dict(self.center), self.width, self.height,
                                  math.radians(self.angle))

    # ==================== Spectroscopy ====================

    @property
    def resonance_wavelength(self) -> float:
        return ATOM_DATA[self.atomType][self.transitionLine][0]

    @property
    def natural_linewidth(self) -> float:
        """Natural FWHM in nm: lambda^2 * Gamma / c."""
        wavelength_nm, linewidth_mhz = ATOM_DATA[self.atomType][self.transitionLine]
        return wavelength_nm ** 2 * linewidth_mhz * 1e6 / (SPEED_OF_LIGHT * 1e9)

    @property
    def doppler_linewidth(self) -> float:
        """Doppler FWHM in nm: lambda * sqrt(8 k T ln2 / (m c^2))."""
        mass = ATOM_MASS_NUMBER[self.atomType] * ATOMIC_MASS_UNIT
        return self.resonance_wavelength * math.sqrt(
            8.0 * BOLTZMANN_CONSTANT * self.temperature * math.log(2.0) / (mass * SPEED_OF_LIGHT ** 2)
        )

    def line_profile(self, wavelength_nm: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Pseudo-Voigt profile (1/nm), normalized to unit area."""
        f_g = self.doppler_linewidth
        f_l = self.natural_linewidth
        f = (f_g ** 5 + 2.69269 * f_g ** 4 * f_l + 2.42843 * f_g ** 3 * f_l ** 2
             + 4.47163 * f_g ** 2 * f_l ** 3 + 0.07842 * f_g * f_l ** 4 + f_l ** 5) ** 0.2
        ratio = f_l / f
        eta = 1.36603 * ratio - 0.47719 * ratio ** 2 + 0.11116 * ratio ** 3

        sigma_g = f_g / (2.0 * math.sqrt(2.0 * math.log(2.0)))
        gamma_l = f_l / 2.0
        detuning = np.asarray(wavelength_nm, dtype=float) - self.resonance_wavelength
        gaussian = np.exp(-detuning ** 2 / (2.0 * sigma_g ** 2)) / (sigma_g * math.sqrt(2.0 * math.pi))
        lorentzian = (gamma_l / math.pi) / (detuning ** 2 + gamma_l ** 2)
        profile = eta * lorentzian + (1.0 - eta) * gaussian
        return float(profile) if np.ndim(profile) == 0 else profile

    @property
    def peak_cross_section(self) -> float:
        """sigma0 = 3 lambda0^2 / (2 pi) in cm^2."""
        return 3.0 * (self.resonance_wavelength * 1e-7) ** 2 / (2.0 * math.pi)

    def absorption_coefficient(self, wavelength_nm: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """Absorption coefficient alpha in 1/cm."""
        alpha = self.density * self.peak_cross_section * np.asarray(self.line_profile(wavelength_nm)) \
            * self.doppler_linewidth
        alpha = np.maximum(alpha, 0.0)
        return float(alpha) if np.ndim(alpha) == 0 else alpha

    def transmission(self, wavelength_nm: Union[float, np.ndarray],
                     path_length: float) -> Union[float, np.ndarray]:
        """Beer-Lambert transmission over `path_length` scene units."""
        path_cm = path_length * self.lengthScaleCm
        result = np.exp(-np.asarray(self.absorption_coefficient(wavelength_nm)) * path_cm)
        return float(result) if np.ndim(result) == 0 else result

    # ==================== Interaction ====================

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        if hit.data['entering']:
            exit_hit = self.exit_hit(hit.point, ray.direction)
            if exit_hit is None:
                path_length = 0.0
                exit_point = hit.point
            else:
                path_length = exit_hit.distance
                exit_point = exit_hit.point
                ray.append_history(exit_point)
        else:
            # Ray started inside the cell
            path_length = hit.distance
            exit_point = hit.point

        intensity = ray.intensity * self.transmission(ray.wavelength_nm, path_length)
        if not self.survives(ray, intensity):
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        child = self.spawn_child(ray, exit_point, ray.direction, 'transmit', intensity=intensity)
        ray.terminate(TerminationReason.TRANSMITTED)
        return [child] if child is not None else []


# Example usage
if __name__ == "__main__":
    cell = AtomicCell(json_obj={'atomType': 'Rb87', 'density': 1e12})
    print(f"{cell}: lambda0={cell.resonance_wavelength} nm")
    print(f"  natural width: {cell.natural_linewidth:.3e} nm")
    print(f"  doppler width: {cell.doppler_linewidth:.3e} nm")
    for wl in (780.24, 780.245, 780.3, 795.0):
        print(f"  T({wl} nm, L=80) = {cell.transmission(wl, 80.0):.4f}")
