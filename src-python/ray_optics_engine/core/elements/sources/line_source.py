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

from typing import List, Tuple

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.sources.base_source import BaseSource, SOURCE_DEFAULTS
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.geometry import Vector
else:
    from .base_source import BaseSource, SOURCE_DEFAULTS
    from ..line_element_mixin import LineElementMixin
    from ...geometry import Vector


class LineSource(LineElementMixin, BaseSource):
    """
    Collimated source: parallel rays emitted from points along the segment p1-p2.

    Rays leave along the segment normal (the p1->p2 direction rotated by
    +90 degrees). Ray i starts at lerp(p1, p2, i/(N-1)); a single ray starts
    at the midpoint.
    """

    type = 'LineSource'
    serializable_defaults = {
        'p1': {'x': 0.0, 'y': 20.0},
        'p2': {'x': 0.0, 'y': -20.0},
        'numRays': 11,
        **SOURCE_DEFAULTS,
    }

    def intersect(self, origin: Vector, direction: Vector) -> List:
        return []

    def emission(self, count: int) -> List[Tuple[Vector, Vector]]:
        g = self.geometry
        direction = g['normal']
        if count == 1:
            return [(g['p1'].lerp(g['p2'], 0.5), direction)]
        return [(g['p1'].lerp(g['p2'], i / (count - 1)), direction) for i in range(count)]
