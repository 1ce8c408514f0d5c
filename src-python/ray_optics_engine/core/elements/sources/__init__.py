"""
Light sources.

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .base_source import BaseSource, SOURCE_DEFAULTS
from .point_source import PointSource
from .fan_source import FanSource
from .line_source import LineSource

__all__ = ['BaseSource', 'SOURCE_DEFAULTS', 'PointSource', 'FanSource', 'LineSource']
