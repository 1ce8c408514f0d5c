"""
Refractive bodies (prism, dielectric block, optical fiber).

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .prism import Prism
from .dielectric_block import DielectricBlock
from .optical_fiber import OpticalFiber

__all__ = ['Prism', 'DielectricBlock', 'OpticalFiber']
