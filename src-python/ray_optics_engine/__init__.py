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

Ray Optics Engine
=================

A 2D optical ray-propagation engine using Shapely for geometry and NumPy
for Jones calculus.

Main modules:
- core: Tracing engine (Ray, TraceConfig, Tracer, Scene) and optical elements
- analysis: Post-processing of traced rays (statistics, lineage, geometry queries)

Quick start:
    from ray_optics_engine import trace
    from ray_optics_engine.core.elements import PointSource, PlaneMirror

    rays = trace([PointSource(json_obj={'numRays': 1}), PlaneMirror()])
"""

import logging
import sys

__version__ = "0.1.0"

# Convenience imports for common usage
from .core.config import TraceConfig
from .core.ray import Ray, TerminationReason
from .core.polarization import Polarization
from .core.scene import Scene
from .core.tracer import Tracer, trace

logging.getLogger(__name__).addHandler(logging.NullHandler())


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Send the package's log records to stdout.

    Only the 'ray_optics_engine' logger is configured; the root logger is
    left alone.
    """
    logger = logging.getLogger(__name__)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.StreamHandler) and getattr(handler, '_ray_optics_console', False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    ))
    handler._ray_optics_console = True
    logger.addHandler(handler)
    return logger


__all__ = [
    'TraceConfig',
    'Ray',
    'TerminationReason',
    'Polarization',
    'Scene',
    'Tracer',
    'trace',
    'setup_logging',
    '__version__',
]
