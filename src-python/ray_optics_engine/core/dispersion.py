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
DISPERSION MODELS
===============================================================================
Wavelength-dependent refractive index used by the refracting elements.

- Cauchy: n(lambda) = A + B / lambda^2 (lambda in micrometers)
- Anchored Cauchy: A chosen so that n(550 nm) equals a given base index
- Sellmeier: n^2 = 1 + sum(B_i lambda^2 / (lambda^2 - C_i))
===============================================================================
"""

import math
from typing import Sequence

import numpy as np

if __name__ == "__main__":
    from constants import DEFAULT_WAVELENGTH_NM
else:
    from .constants import DEFAULT_WAVELENGTH_NM


# Default Cauchy B coefficient (um^2), a typical crown glass
DEFAULT_CAUCHY_B = 0.005

# Schott N-BK7 Sellmeier coefficients (C in um^2)
BK7_SELLMEIER_B = (1.03961212, 0.231792344, 1.01046945)
BK7_SELLMEIER_C = (0.00600069867, 0.0200179144, 103.560653)


def n_cauchy(wavelength_nm: float, A: float, B: float) -> float:
    """
    Refractive index from Cauchy's equation.

    Args:
        wavelength_nm: Wavelength in nanometers.
        A: Cauchy coefficient A (dimensionless, typically ~1.5).
        B: Cauchy coefficient B (in um^2, typically ~0.004).

    Example:
        >>> n_cauchy(589.0, 1.5046, 0.00420)  # BK7 glass at sodium D line
        1.5168...
    """
    wavelength_um = wavelength_nm / 1000.0
    return A + B / (wavelength_um ** 2)


def cauchy_A_for_base_index(n_base: float, B: float,
                            anchor_wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> float:
    """Cauchy A such that n(anchor) == n_base."""
    anchor_um = anchor_wavelength_nm / 1000.0
    return n_base - B / (anchor_um ** 2)


def n_anchored_cauchy(wavelength_nm: float, n_base: float, B: float,
                      anchor_wavelength_nm: float = DEFAULT_WAVELENGTH_NM) -> float:
    """
    Cauchy index anchored at `anchor_wavelength_nm`.

    With B = 0 the material is non-dispersive and n == n_base everywhere.
    """
    A = cauchy_A_for_base_index(n_base, B, anchor_wavelength_nm)
    return n_cauchy(wavelength_nm, A, B)


def n_sellmeier(wavelength_nm: float,
                B: Sequence[float] = BK7_SELLMEIER_B,
                C: Sequence[float] = BK7_SELLMEIER_C) -> float:
    """
    Refractive index from the Sellmeier equation.

    Args:
        wavelength_nm: Wavelength in nanometers.
        B: Sellmeier B coefficients (dimensionless).
        C: Sellmeier C coefficients (um^2).
    """
    lam2 = (wavelength_nm / 1000.0) ** 2
    b = np.asarray(B, dtype=float)
    c = np.asarray(C, dtype=float)
    return math.sqrt(1.0 + float(np.sum(b * lam2 / (lam2 - c))))


# Example usage and testing
if __name__ == "__main__":
    for wl in (450, 550, 650):
        print(f"{wl} nm: anchored Cauchy n={n_anchored_cauchy(wl, 1.5, DEFAULT_CAUCHY_B):.5f}, "
              f"BK7 Sellmeier n={n_sellmeier(wl):.5f}")
