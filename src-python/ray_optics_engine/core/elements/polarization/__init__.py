"""
Polarization optics acting through Jones matrices.

Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors
Licensed under the Apache License, Version 2.0
"""

from .jones_element_mixin import JonesElementMixin
from .polarizer import Polarizer
from .wave_plates import WavePlate, HalfWavePlate, QuarterWavePlate
from .beam_splitter import BeamSplitter
from .faraday import FaradayRotator, FaradayIsolator

__all__ = ['JonesElementMixin', 'Polarizer', 'WavePlate', 'HalfWavePlate', 'QuarterWavePlate',
           'BeamSplitter', 'FaradayRotator', 'FaradayIsolator']
