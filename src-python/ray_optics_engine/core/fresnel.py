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

"""
===============================================================================
Snell refraction and Fresnel equations
===============================================================================
Vector-form Snell's law and the Fresnel power coefficients shared by every
refracting element (prisms, blocks, lenses, fibers).

Conventions:
    - `normal` is a unit vector oriented against the incoming ray,
      i.e. dot(normal, direction) <= 0.
    - Jones matrices use the ray frame of core.polarization, where x is the
      p-component and y the s-component for in-plane interfaces.
===============================================================================
"""

import math
from typing import Optional, Tuple, NamedTuple

import numpy as np

if __name__ == "__main__":
    from geometry import Vector
else:
    from .geometry import Vector


# sin^2(theta_t) at or above 1 - TIR_EPSILON is treated as total internal reflection
TIR_EPSILON = 1e-9


class Interface(NamedTuple):
    """
    Result of evaluating an interface for one incoming direction.

    Attributes:
        cos_i: Cosine of the incidence angle
        cos_t: Cosine of the refraction angle (0.0 under TIR)
        R_s: s-polarization power reflectance
        R_p: p-polarization power reflectance
        refracted: Refracted unit direction, or None under TIR
        reflected: Specularly reflected unit direction
    """
    cos_i: float
    cos_t: float
    R_s: float
    R_p: float
    refracted: Optional[Vector]
    reflected: Vector

    @property
    def is_tir(self) -> bool:
        return self.refracted is None

    @property
    def R_average(self) -> float:
        """Reflectance for unpolarized light."""
        return 0.5 * (self.R_s + self.R_p)


def reflect_direction(direction: Vector, normal: Vector) -> Vector:
    """d' = d - 2(d.n)n"""
    return direction - normal * (2.0 * direction.dot(normal))


def refract_direction(direction: Vector, normal: Vector, n1: float, n2: float) -> Optional[Vector]:
    """
    Snell's law in vector form.

    Reference: http://en.wikipedia.org/wiki/Snell%27s_law#Vector_form

    Returns:
        The refracted unit direction, or None under total internal reflection.
    """
    eta = n1 / n2
    cos1 = -normal.dot(direction)
    sin_t2 = eta * eta * (1.0 - cos1 * cos1)
    if sin_t2 >= 1.0 - TIR_EPSILON:
        return None
    cos2 = math.sqrt(1.0 - sin_t2)
    return (direction * eta + normal * (eta * cos1 - cos2)).normalize()


def fresnel_power_coefficients(n1: float, n2: float, cos_i: float, cos_t: float) -> Tuple[float, float]:
    """
    Fresnel power reflectances (R_s, R_p) for a dielectric interface.

    Reference: http://en.wikipedia.org/wiki/Fresnel_equations
    """
    R_s = ((n1 * cos_i - n2 * cos_t) / (n1 * cos_i + n2 * cos_t)) ** 2
    R_p = ((n2 * cos_i - n1 * cos_t) / (n2 * cos_i + n1 * cos_t)) ** 2
    return R_s, R_p


def evaluate_interface(direction: Vector, normal: Vector, n1: float, n2: float) -> Interface:
    """
    Evaluate refraction and Fresnel reflection for a ray crossing from n1 into n2.
    """
    cos_i = max(0.0, min(1.0, -normal.dot(direction)))
    reflected = reflect_direction(direction, normal)
    refracted = refract_direction(direction, normal, n1, n2)
    if refracted is None:
        return Interface(cos_i, 0.0, 1.0, 1.0, None, reflected)
    cos_t = max(0.0, min(1.0, -normal.dot(refracted)))
    R_s, R_p = fresnel_power_coefficients(n1, n2, cos_i, cos_t)
    return Interface(cos_i, cos_t, R_s, R_p, refracted, reflected)


def transmission_matrix(interface: Interface) -> np.ndarray:
    """Jones amplitude matrix for the transmitted beam (phase of t ignored)."""
    return np.array([
        [math.sqrt(max(0.0, 1.0 - interface.R_p)), 0.0],
        [0.0, math.sqrt(max(0.0, 1.0 - interface.R_s))],
    ], dtype=complex)


def reflection_matrix(interface: Interface) -> np.ndarray:
    """Jones amplitude matrix for the reflected beam, with the frame flip of reflection."""
    return np.array([
        [math.sqrt(interface.R_p), 0.0],
        [0.0, -math.sqrt(interface.R_s)],
    ], dtype=complex)


def critical_angle(n1: float, n2: float) -> float:
    """
    Critical angle for total internal reflection, in degrees.

    Raises:
        ValueError: If n1 <= n2 (no TIR possible).
    """
    if n1 <= n2:
        raise ValueError(
            f"No TIR possible: n1={n1} must be greater than n2={n2}."
        )
    return math.degrees(math.asin(n2 / n1))


def brewster_angle(n1: float, n2: float) -> float:
    """Brewster's angle (where R_p = 0), in degrees."""
    return math.degrees(math.atan(n2 / n1))


# Example usage and testing
if __name__ == "__main__":
    n_glass = 1.5
    for deg in (0, 30, 45, brewster_angle(1.0, n_glass)):
        d = Vector.from_angle(math.radians(-90 + deg))
        iface = evaluate_interface(d, Vector(0, 1), 1.0, n_glass)
        print(f"theta_i={deg:6.2f}: R_s={iface.R_s:.4f}, R_p={iface.R_p:.4f}, refracted={iface.refracted}")

    d = Vector.from_angle(math.radians(-90 + 60))
    iface = evaluate_interface(d, Vector(0, 1), n_glass, 1.0)
    print(f"Glass->air at 60 deg: TIR={iface.is_tir} (critical angle {critical_angle(n_glass, 1.0):.2f} deg)")
