"""
Apertures and detectors.

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .aperture import Aperture
from .screen import Screen
from .photodiode import Photodiode

__all__ = ['Aperture', 'Screen', 'Photodiode']
