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
Constants used throughout the ray propagation engine.

These are the defaults that TraceConfig starts from. Elements and the Ray
class import them directly so that no module needs a reference to a
running tracer to know the shared numeric conventions.
"""

import math

# Refractive index of air at standard conditions
N_AIR = 1.000293

# Default wavelength for sources and dispersion anchors (nm)
DEFAULT_WAVELENGTH_NM = 550.0

# Per-ray limits
MAX_RAY_BOUNCES = 500
MIN_RAY_INTENSITY = 1e-4
MAX_RAYS_PER_SOURCE = 1001

# Tracer safety valve
MAX_TRACE_ITERATIONS = 10000

# One scene unit is one micrometre, so 1 nm = 1e-3 units
PIXELS_PER_NANOMETER = 1e-3
PIXELS_PER_MICROMETER = 1.0

# Minimum forward distance for a hit to count (avoids self-intersection).
# Children are also offset by this much from the surface they leave.
HIT_EPSILON = 1e-6

# History points closer than this to the previous point are dropped.
# Must stay larger than HIT_EPSILON so child origin offsets never enter history.
HISTORY_EPSILON = 1e-5

# Below this magnitude a vector cannot be normalized
NORMALIZE_EPSILON = 1e-9

# Jones/polarization classification thresholds
JONES_INTENSITY_EPSILON = 1e-9
JONES_PHASE_EPSILON = 1e-4

# Extension multiplier for rays that leave the scene
NO_HIT_EXTENSION_FACTOR = 2.0

# Scene extent used when the element bounds are degenerate (empty scene, single point)
MIN_SCENE_EXTENT = 1000.0

# Wavelengths (in nanometers)
UV_WAVELENGTH = 380          # Ultraviolet wavelength boundary
INFRARED_WAVELENGTH = 700    # Infrared wavelength boundary
GREEN_WAVELENGTH = 532       # Default green wavelength for lasers
RED_WAVELENGTH = 650
BLUE_WAVELENGTH = 450

# Physical constants (SI)
SPEED_OF_LIGHT = 299792458.0
BOLTZMANN_CONSTANT = 1.380649e-23
ATOMIC_MASS_UNIT = 1.66053906660e-27

TWO_PI = 2.0 * math.pi
