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

from typing import List, Tuple, Dict, Any, Optional

from shapely.geometry import MultiLineString

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from ...ray import Ray, TerminationReason


class Aperture(LineElementMixin, BaseElement):
    """
    Opaque stop with one or more slits, with the shape of a line segment.

    The slits are centred on the segment midpoint, `slitSeparation` apart
    (centre to centre), each `slitWidth` wide. A ray hitting an opening
    passes straight through; a ray hitting the blocking part is terminated
    'absorbed_aperture'.

    Attributes:
        p1, p2: Endpoints of the stop (the default is 150 long)
        numberOfSlits: Number of openings (1 = single slit, 2 = double slit...)
        slitWidth: Width of each opening
        slitSeparation: Centre-to-centre distance between adjacent openings
    """

    type = 'Aperture'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -75.0},
        'p2': {'x': 100.0, 'y': 75.0},
        'numberOfSlits': 1,
        'slitWidth': 10.0,
        'slitSeparation': 20.0,
    }
    absorption_kind = 'aperture'

    def validate(self) -> None:
        if int(self.numberOfSlits) < 1:
            raise ValueError(f"{self.get_display_name()}: numberOfSlits must be >= 1, got {self.numberOfSlits}")
        if self.slitWidth <= 0:
            raise ValueError(f"{self.get_display_name()}: slitWidth must be positive, got {self.slitWidth}")
        if self.numberOfSlits > 1 and self.slitSeparation < self.slitWidth:
            raise ValueError(
                f"{self.get_display_name()}: slitSeparation ({self.slitSeparation}) "
                f"must be >= slitWidth ({self.slitWidth})"
            )

    def _build_geometry(self) -> Dict[str, Any]:
        cache = super()._build_geometry()
        half_length = cache['length'] / 2.0
        count = int(self.numberOfSlits)
        first = -(count - 1) * self.slitSeparation / 2.0
        openings = []
        for i in range(count):
            mid = first + i * self.slitSeparation
            lo = max(mid - self.slitWidth / 2.0, -half_length)
            hi = min(mid + self.slitWidth / 2.0, half_length)
            if hi > lo:
                openings.append((lo, hi))
        cache['openings'] = openings
        return cache

    @property
    def openings(self) -> List[Tuple[float, float]]:
        """(start, end) of each opening, as offsets from the centre along p1->p2."""
        return self.geometry['openings']

    def opening_at(self, offset: float) -> Optional[int]:
        """Index of the opening containing `offset`, or None if it is blocked."""
        for i, (lo, hi) in enumerate(self.openings):
            if lo <= offset <= hi:
                return i
        return None

    def shape(self):
        """The blocking parts of the stop."""
        g = self.geometry
        center, tangent = g['center'], g['tangent']
        half_length = g['length'] / 2.0
        parts = []
        start = -half_length
        for lo, hi in self.openings + [(half_length, half_length)]:
            if lo > start:
                a = center + tangent * start
                b = center + tangent * lo
                parts.append([(a.x, a.y), (b.x, b.y)])
            start = hi
        return MultiLineString(parts)

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        if self.opening_at(hit.data['offset']) is None:
            ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
            return []
        child = self.spawn_child(ray, hit.point, ray.direction, 'transmit')
        ray.terminate(TerminationReason.TRANSMITTED)
        return [child] if child is not None else []


# Example usage
if __name__ == "__main__":
    slit = Aperture(json_obj={'numberOfSlits': 2, 'slitWidth': 5, 'slitSeparation': 30})
    print(f"{slit}: openings={slit.openings}")
    for offset in (-15.0, 0.0, 16.0, 40.0):
        print(f"  offset {offset}: opening {slit.opening_at(offset)}")
