"""
Diffractive elements (grating, acousto-optic modulator).

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .diffraction_grating import DiffractionGrating
from .acousto_optic_modulator import AcoustoOpticModulator

__all__ = ['DiffractionGrating', 'AcoustoOpticModulator']
