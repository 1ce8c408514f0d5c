"""
Absorptive media.

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .atomic_cell import AtomicCell, ATOM_DATA

__all__ = ['AtomicCell', 'ATOM_DATA']
