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

from typing import Optional, Dict, Any, List, TYPE_CHECKING

import numpy as np

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.base_element import BaseElement, Hit
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
    from ray_optics_engine.core.ray import Ray, TerminationReason
else:
    from ..base_element import BaseElement, Hit
    from ..line_element_mixin import LineElementMixin
    from ...ray import Ray, TerminationReason

if TYPE_CHECKING:
    from ...config import TraceConfig


class Screen(LineElementMixin, BaseElement):
    """
    Observation screen that records where rays land.

    The screen is a line segment divided into `numBins` equal bins. Every
    ray that hits it is absorbed and its intensity added to the bin under
    the hit point. The readout is reset at the start of each trace pass.

    Attributes:
        p1 (dict): The first endpoint of the screen {'x': float, 'y': float}
        p2 (dict): The second endpoint of the screen {'x': float, 'y': float}
        numBins (int): Number of bins along the screen
        bin_intensity (np.ndarray): Summed intensity per bin
        bin_hits (np.ndarray): Number of rays per bin
    """

    type = 'Screen'
    serializable_defaults = {
        'p1': {'x': 200.0, 'y': -75.0},
        'p2': {'x': 200.0, 'y': 75.0},
        'numBins': 200,
    }
    absorption_kind = 'screen'

    def __init__(self, scene=None, json_obj: Optional[Dict[str, Any]] = None):
        super().__init__(scene, json_obj)
        self.bin_intensity = np.zeros(int(self.numBins))
        self.bin_hits = np.zeros(int(self.numBins), dtype=int)

    def validate(self) -> None:
        if int(self.numBins) < 1:
            raise ValueError(f"{self.get_display_name()}: numBins must be >= 1, got {self.numBins}")

    @property
    def bin_width(self) -> float:
        return self.geometry['length'] / int(self.numBins)

    def on_trace_start(self, config: Optional['TraceConfig'] = None) -> None:
        super().on_trace_start(config)
        self.bin_intensity = np.zeros(int(self.numBins))
        self.bin_hits = np.zeros(int(self.numBins), dtype=int)

    def bin_index(self, u: float) -> int:
        """Bin under the segment parameter u in [0, 1]."""
        return int(min(max(int(u * int(self.numBins)), 0), int(self.numBins) - 1))

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        index = self.bin_index(hit.data['u'])
        self.bin_intensity[index] += ray.intensity
        self.bin_hits[index] += 1
        ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return []

    @property
    def total_power(self) -> float:
        return float(self.bin_intensity.sum())

    @property
    def hit_count(self) -> int:
        return int(self.bin_hits.sum())

    def get_profile(self) -> List[Dict[str, float]]:
        """
        Get the intensity profile as a list of bin records.

        Returns:
            List of dictionaries with 'position' (bin centre, measured from p1),
            'intensity' and 'hits' keys.
        """
        width = self.bin_width
        return [
            {'position': (i + 0.5) * width, 'intensity': float(intensity), 'hits': int(hits)}
            for i, (intensity, hits) in enumerate(zip(self.bin_intensity, self.bin_hits))
        ]

    def export_csv(self) -> str:
        """
        Export the intensity profile as CSV.

        Returns:
            CSV string with Position, Intensity and Hits columns.
        """
        lines = ["Position,Intensity,Hits"]
        for record in self.get_profile():
            lines.append(f"{record['position']},{record['intensity']},{record['hits']}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (f"Screen(p1={self.p1}, p2={self.p2}, bins={self.numBins}, "
                f"power={self.total_power:.4f}, hits={self.hit_count})")
