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
from typing import Optional, Dict, Any, List, TYPE_CHECKING

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.constants import HIT_EPSILON
    from ray_optics_engine.core.geometry import Vector, geometry
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ...constants import HIT_EPSILON
    from ...geometry import Vector, geometry
    from ...ray import Ray, TerminationReason

if TYPE_CHECKING:
    from ...config import TraceConfig


class Photodiode(BaseElement):
    """
    Single-element power detector.

    The active area is a disc of `diameter` (a segment in 2D) centred on
    `center` and facing `angle` degrees. Only rays arriving on the active
    face are detected; the back is not sensitive. Detected rays are
    absorbed and their intensity accumulated.
    """

    type = 'Photodiode'
    serializable_defaults = {
        'center': {'x': 200.0, 'y': 0.0},
        'angle': 180.0,
        'diameter': 20.0,
        'responsivity': 0.5,
    }
    geometry_keys = ('center', 'angle', 'diameter')
    absorption_kind = 'photodiode'

    def __init__(self, scene=None, json_obj: Optional[Dict[str, Any]] = None):
        super().__init__(scene, json_obj)
        self.incident_power = 0.0
        self.hit_count = 0

    def validate(self) -> None:
        if self.diameter <= 0:
            raise ValueError(f"{self.get_display_name()}: diameter must be positive, got {self.diameter}")
        if self.responsivity < 0:
            raise ValueError(f"{self.get_display_name()}: responsivity must be >= 0, got {self.responsivity}")

    def _build_geometry(self) -> Dict[str, Any]:
        center = Vector.from_dict(self.center)
        facing = Vector.from_angle(math.radians(self.angle))
        half = facing.perpendicular() * (self.diameter / 2.0)
        return {
            'center': center,
            'facing': facing,
            'p1': center - half,
            'p2': center + half,
            'shape': geometry.segment(center - half, center + half),
        }

    def shape(self):
        return self.geometry['shape']

    def move(self, diff_x: float, diff_y: float) -> bool:
        self.center = {'x': self.center['x'] + diff_x, 'y': self.center['y'] + diff_y}
        return True

    def on_trace_start(self, config: Optional['TraceConfig'] = None) -> None:
        super().on_trace_start(config)
        self.incident_power = 0.0
        self.hit_count = 0

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        g = self.geometry
        if direction.dot(g['facing']) >= 0:
            return []
        result = geometry.ray_segment_intersection(origin, direction, g['p1'], g['p2'])
        if result is None:
            return []
        t, u = result
        if t <= HIT_EPSILON:
            return []
        return [self.make_hit(t, origin + direction * t, g['facing'], direction, 'detector_surface', u=u)]

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        self.incident_power += ray.intensity
        self.hit_count += 1
        ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return []

    @property
    def photocurrent(self) -> float:
        """Responsivity (A/W) times the detected power."""
        return self.responsivity * self.incident_power

    def get_measurements(self) -> Dict[str, float]:
        return {
            'power': self.incident_power,
            'hits': self.hit_count,
            'photocurrent': self.photocurrent,
        }
