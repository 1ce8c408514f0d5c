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
from typing import List, TYPE_CHECKING

if __name__ == "__main__":
    import sys
    import os
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
    from ray import TerminationReason
    from fresnel import evaluate_interface, transmission_matrix, reflection_matrix
    from dispersion import n_anchored_cauchy
else:
    from ..ray import TerminationReason
    from ..fresnel import evaluate_interface, transmission_matrix, reflection_matrix
    from ..dispersion import n_anchored_cauchy

if TYPE_CHECKING:
    from ..ray import Ray
    from .base_element import Hit


class RefractiveMixin:
    """
    Mixin class for elements whose surfaces separate the ambient medium from glass.

    Implements Snell refraction with the Fresnel split:
    - the refracted child carries the transmitted power and the Jones state
      transformed by the Fresnel amplitude matrix;
    - the reflected child (when `fresnel_reflections` is True) carries the
      rest and gains a phase of pi;
    - under total internal reflection the whole ray is reflected and the
      parent is terminated 'total_internal_reflection'.

    The glass index comes from refractive_index(wavelength_nm), which by
    default is a Cauchy curve anchored at 550 nm using the 'refIndex' and
    'cauchyB' parameters.
    """

    fresnel_reflections: bool = True
    """Whether partial reflections are traced as separate children."""

    def refractive_index(self, wavelength_nm: float) -> float:
        return n_anchored_cauchy(wavelength_nm, self.refIndex, getattr(self, 'cauchyB', 0.0))

    def refract_at_surface(self, ray: 'Ray', hit: 'Hit', entering: bool,
                           attenuation: float = 1.0) -> List['Ray']:
        """
        Refract `ray` at `hit` entering or leaving the glass.

        `attenuation` scales the power handed to the children (bulk absorption
        along the segment that ends at `hit`); the parent keeps its intensity.

        Returns:
            The children (refracted and/or reflected). The parent is always terminated.
        """
        n_glass = self.refractive_index(ray.wavelength_nm)
        if entering:
            n1, n2 = ray.medium_refractive_index, n_glass
        else:
            n1, n2 = n_glass, self.ambient_refractive_index

        iface = evaluate_interface(ray.direction, hit.normal, n1, n2)
        children = []

        if iface.is_tir:
            child = self.spawn_child(ray, hit.point, iface.reflected, 'tir',
                                     intensity=ray.intensity * attenuation,
                                     medium_refractive_index=n1)
            ray.terminate(TerminationReason.TOTAL_INTERNAL_REFLECTION)
            if child is not None and self.survives(ray, child.intensity):
                children.append(child)
            return children

        pol_t, frac_t = ray.polarization.transformed(transmission_matrix(iface))
        if not self.fresnel_reflections:
            # Without a traced reflection the transmitted beam keeps its power
            frac_t = 1.0 if frac_t > 0 else 0.0
        intensity_t = ray.intensity * attenuation * frac_t
        if self.survives(ray, intensity_t):
            child = self.spawn_child(ray, hit.point, iface.refracted, 'refract',
                                     intensity=intensity_t, polarization=pol_t,
                                     medium_refractive_index=n2)
            if child is not None:
                children.append(child)

        if self.fresnel_reflections:
            pol_r, frac_r = ray.polarization.transformed(reflection_matrix(iface))
            intensity_r = ray.intensity * attenuation * frac_r
            if self.survives(ray, intensity_r):
                child = self.spawn_child(ray, hit.point, iface.reflected, 'reflect',
                                         intensity=intensity_r, polarization=pol_r,
                                         phase=ray.phase + math.pi,
                                         medium_refractive_index=n1)
                if child is not None:
                    children.append(child)

        ray.terminate(TerminationReason.REFRACTED)
        return children
