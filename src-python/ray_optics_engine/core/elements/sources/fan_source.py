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

import math
from typing import List, Tuple

import numpy as np
from shapely.geometry import Point as ShapelyPoint

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.sources.base_source import BaseSource, SOURCE_DEFAULTS
    from ray_optics_engine.core.geometry import Vector
else:
    from .base_source import BaseSource, SOURCE_DEFAULTS
    from ...geometry import Vector


class FanSource(BaseSource):
    """
    Fan of rays from a point, evenly spaced across `fanAngle` degrees
    centred on `angle`.
    """

    type = 'FanSource'
    serializable_defaults = {
        'x': 0.0,
        'y': 0.0,
        'angle': 0.0,
        'fanAngle': 30.0,
        'numRays': 201,
        **SOURCE_DEFAULTS,
    }

    def validate(self) -> None:
        super().validate()
        if not 0 <= self.fanAngle <= 360:
            raise ValueError(f"{self.get_display_name()}: fanAngle must be in [0, 360], got {self.fanAngle}")

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.x += diff_x
        self.y += diff_y
        return True

    def shape(self):
        return ShapelyPoint(self.x, self.y)

    def emission(self, count: int) -> List[Tuple[Vector, Vector]]:
        origin = Vector(self.x, self.y)
        if count == 1:
            angles = np.array([self.angle])
        else:
            half = self.fanAngle / 2.0
            angles = np.linspace(self.angle - half, self.angle + half, count)
        return [(origin, Vector.from_angle(math.radians(float(a)))) for a in angles]
