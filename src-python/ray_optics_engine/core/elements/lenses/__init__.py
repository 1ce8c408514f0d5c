"""
Lenses (thin, cylindrical, aspheric, GRIN).

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .thin_lens import ThinLens
from .cylindrical_lens import CylindricalLens
from .aspheric_lens import AsphericLens
from .grin_lens import GRINLens

__all__ = ['ThinLens', 'CylindricalLens', 'AsphericLens', 'GRINLens']
