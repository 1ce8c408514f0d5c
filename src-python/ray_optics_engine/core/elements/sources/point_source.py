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

from shapely.geometry import Point as ShapelyPoint

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.sources.base_source import BaseSource, SOURCE_DEFAULTS
    from ray_optics_engine.core.geometry import Vector
else:
    from .base_source import BaseSource, SOURCE_DEFAULTS
    from ...geometry import Vector


class PointSource(BaseSource):
    """
    Point source emitting rays over an angular range.

    With spread = 360 the rays are spaced evenly around the full circle
    starting at `angle`. With a smaller spread they are spaced evenly from
    angle - spread/2 to angle + spread/2 inclusive. A single ray always
    travels along `angle`.

    Attributes:
        x, y: Position of the source.
        angle: Central emission angle in degrees.
        spread: Angular range in degrees (0 < spread <= 360).
        numRays: Number of rays.

    Usage:
        Point sources are useful for:
        - Testing optical systems with diverging light
        - Placing at focal points to create collimated beams
        - Single test rays (numRays = 1)
    """

    type = 'PointSource'
    serializable_defaults = {
        'x': 0.0,
        'y': 0.0,
        'angle': 0.0,
        'spread': 360.0,
        'numRays': 36,
        **SOURCE_DEFAULTS,
    }

    def validate(self) -> None:
        super().validate()
        if not 0 < self.spread <= 360:
            raise ValueError(f"{self.get_display_name()}: spread must be in (0, 360], got {self.spread}")

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.x += diff_x
        self.y += diff_y
        return True

    def shape(self):
        return ShapelyPoint(self.x, self.y)

    def emission(self, count: int) -> List[Tuple[Vector, Vector]]:
        origin = Vector(self.x, self.y)
        if count == 1:
            angles = [self.angle]
        elif self.spread >= 360:
            angles = [self.angle + i * 360.0 / count for i in range(count)]
        else:
            step = self.spread / (count - 1)
            angles = [self.angle - self.spread / 2 + i * step for i in range(count)]
        return [(origin, Vector.from_angle(math.radians(a))) for a in angles]


# Example usage and testing
if __name__ == "__main__":
    src = PointSource(json_obj={'numRays': 4})
    for ray in src.generate_rays():
        print(ray)
