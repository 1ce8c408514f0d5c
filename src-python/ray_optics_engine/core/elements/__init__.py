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

from typing import Any, Dict

from .base_element import BaseElement, Hit
from .line_element_mixin import LineElementMixin
from .polygon_element_mixin import PolygonElementMixin, rectangle_vertices
from .refractive_mixin import RefractiveMixin
from .sources import PointSource, FanSource, LineSource
from .mirrors import PlaneMirror, SphericalMirror, ParabolicMirror
from .lenses import ThinLens, CylindricalLens, AsphericLens, GRINLens
from .refractive import Prism, DielectricBlock, OpticalFiber
from .diffractive import DiffractionGrating, AcoustoOpticModulator
from .polarization import (
    Polarizer, WavePlate, HalfWavePlate, QuarterWavePlate, BeamSplitter, FaradayRotator, FaradayIsolator
)
from .absorptive import AtomicCell
from .detectors import Aperture, Screen, Photodiode

ELEMENT_TYPES = {
    cls.type: cls for cls in (
        PointSource, FanSource, LineSource,
        PlaneMirror, SphericalMirror, ParabolicMirror,
        ThinLens, CylindricalLens, AsphericLens, GRINLens,
        Prism, DielectricBlock, OpticalFiber,
        DiffractionGrating, AcoustoOpticModulator,
        Polarizer, WavePlate, HalfWavePlate, QuarterWavePlate, BeamSplitter, FaradayRotator, FaradayIsolator,
        AtomicCell,
        Aperture, Screen, Photodiode,
    )
}
"""Element classes by their `type` string."""


def create_element(json_obj: Dict[str, Any], scene=None) -> BaseElement:
    """
    Build an element from a dict with a 'type' key and parameter overrides.

    Raises:
        ValueError: For an unknown type or invalid parameters.
    """
    type_name = json_obj.get('type')
    if type_name not in ELEMENT_TYPES:
        raise ValueError(f"Unknown element type {type_name!r}")
    return ELEMENT_TYPES[type_name](scene, json_obj)


__all__ = [
    'BaseElement', 'Hit', 'LineElementMixin', 'PolygonElementMixin', 'rectangle_vertices', 'RefractiveMixin',
    'PointSource', 'FanSource', 'LineSource',
    'PlaneMirror', 'SphericalMirror', 'ParabolicMirror',
    'ThinLens', 'CylindricalLens', 'AsphericLens', 'GRINLens',
    'Prism', 'DielectricBlock', 'OpticalFiber',
    'DiffractionGrating', 'AcoustoOpticModulator',
    'Polarizer', 'WavePlate', 'HalfWavePlate', 'QuarterWavePlate', 'BeamSplitter',
    'FaradayRotator', 'FaradayIsolator',
    'AtomicCell',
    'Aperture', 'Screen', 'Photodiode',
    'ELEMENT_TYPES', 'create_element',
]
