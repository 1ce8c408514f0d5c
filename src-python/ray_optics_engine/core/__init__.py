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

from .geometry import geometry, Geometry, Vector, DegenerateVectorError
from . import constants
from .config import TraceConfig
from .polarization import Polarization, PolarizationKind
from .ray import Ray, RayCreationError, TerminatedRayError, TerminationReason
from .ray_lineage import RayLineage
from .tracer import Tracer, trace
from .scene import Scene

__all__ = [
    'geometry', 'Geometry', 'Vector', 'DegenerateVectorError',
    'constants',
    'TraceConfig',
    'Polarization', 'PolarizationKind',
    'Ray', 'RayCreationError', 'TerminatedRayError', 'TerminationReason',
    'RayLineage',
    'Tracer', 'trace',
    'Scene',
]
