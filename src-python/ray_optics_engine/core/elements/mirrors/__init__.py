"""
Mirrors (plane, spherical, parabolic).

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .base_mirror import BaseMirror, MIRROR_DEFAULTS
from .plane_mirror import PlaneMirror
from .spherical_mirror import SphericalMirror
from .parabolic_mirror import ParabolicMirror

__all__ = ['BaseMirror', 'MIRROR_DEFAULTS', 'PlaneMirror', 'SphericalMirror', 'ParabolicMirror']
