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
import logging
from collections import deque
from typing import List, Optional, Sequence, Tuple, Deque, TYPE_CHECKING

from shapely.ops import unary_union

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from config import TraceConfig
    from geometry import Vector
    from ray import Ray, TerminationReason
else:
    from .config import TraceConfig
    from .geometry import Vector
    from .ray import Ray, TerminationReason

if TYPE_CHECKING:
    from .elements.base_element import BaseElement, Hit

logger = logging.getLogger(__name__)


def scene_diagonal(elements: Sequence['BaseElement'], min_extent: float) -> float:
    """
    Diagonal of the bounding box of all element shapes.

    Falls back to `min_extent` for an empty scene or degenerate bounds.
    """
    shapes = [s for s in (e.shape() for e in elements) if s is not None and not s.is_empty]
    if not shapes:
        return min_extent
    minx, miny, maxx, maxy = unary_union(shapes).bounds
    diagonal = math.hypot(maxx - minx, maxy - miny)
    if not math.isfinite(diagonal) or diagonal <= 0:
        return min_extent
    return diagonal


class Tracer:
    """
    Iterative multi-ray tracing engine.

    The tracer keeps an explicit FIFO queue of rays in flight. Each step
    pops one ray and:

    1. checks the guard conditions (NaN, zero direction, bounce limit,
       low intensity) and terminates the ray if one holds;
    2. asks every element for its forward hits and keeps the nearest one
       with distance > hit_epsilon (on a tie the element listed first wins);
    3. with no hit, extends the ray by the scene diagonal times
       extension_factor and terminates it 'no_intersection';
    4. otherwise appends the hit point to the ray's history and lets the
       element consume the ray; the children are queued.

    Every popped ray lands in the completed list, so the result of a pass
    is the full set of terminated segments. The pass stops after
    max_iterations pops; the rays still queued are kept in `pending`
    and `warning` is set.

    Attributes:
        elements (list): Optical elements, in tie-break order
        config (TraceConfig): Settings for the pass
        iterations (int): Queue pops in the last pass
        pending (list): Rays left in the queue when the iteration cap was hit
        warning (str or None): Pass-level warning of the last pass
    """

    def __init__(self, elements: Sequence['BaseElement'], config: Optional[TraceConfig] = None) -> None:
        self.elements: List['BaseElement'] = list(elements)
        self.config: TraceConfig = config if config is not None else TraceConfig()
        self.iterations: int = 0
        self.warning: Optional[str] = None
        self.pending: List[Ray] = []

    @property
    def optical_elements(self) -> List['BaseElement']:
        return [e for e in self.elements if e.is_optical and not e.is_source]

    def emit(self, sources: Optional[Sequence['BaseElement']] = None) -> List[Ray]:
        """Collect the initial rays from the sources (all source elements by default)."""
        if sources is None:
            sources = [e for e in self.elements if e.is_source]
        rays = []
        for source in sources:
            rays.extend(self.admit(source.generate_rays(self.config.max_rays_per_source)))
        return rays

    def admit(self, rays: Sequence[Ray]) -> List[Ray]:
        """
        Prepare rays for the queue.

        Each ray takes the pass threshold as its min_intensity and goes
        through the guard checks, so a ray already below the threshold is
        terminated 'low_intensity' before any hit test.
        """
        admitted = list(rays)
        for ray in admitted:
            ray.min_intensity = self.config.min_intensity
            ray.check_termination(self.config.max_bounces, self.config.min_intensity)
        return admitted

    def find_nearest_hit(self, ray: Ray,
                         elements: Sequence['BaseElement']) -> Optional[Tuple['BaseElement', 'Hit']]:
        """Nearest hit with distance > hit_epsilon. Strict '<' keeps the first element on ties."""
        nearest: Optional[Tuple['BaseElement', 'Hit']] = None
        for element in elements:
            for hit in element.intersect(ray.origin, ray.direction):
                if not hit.distance > self.config.hit_epsilon:
                    continue
                if nearest is None or hit.distance < nearest[1].distance:
                    nearest = (element, hit)
        return nearest

    def run(self, sources: Optional[Sequence['BaseElement']] = None,
            initial_rays: Optional[Sequence[Ray]] = None) -> List[Ray]:
        """
        Run one trace pass.

        Args:
            sources: Sources to emit from. None means every source element.
            initial_rays: Extra rays to trace in addition to the emitted ones.

        Returns:
            list: All processed rays, in the order they were popped.
        """
        config = self.config
        self.iterations = 0
        self.warning = None

        for element in self.elements:
            element.on_trace_start(config)

        queue: Deque[Ray] = deque(self.emit(sources))
        if initial_rays:
            queue.extend(self.admit(initial_rays))

        elements = self.optical_elements
        extension = scene_diagonal(self.elements, config.min_scene_extent) * config.extension_factor
        completed: List[Ray] = []

        while queue and self.iterations < config.max_iterations:
            ray = queue.popleft()
            self.iterations += 1
            completed.append(ray)

            if config.verbose >= 1:
                logger.info("Ray %d: %r", self.iterations, ray)

            if ray.check_termination(config.max_bounces, config.min_intensity) is not None:
                if config.verbose >= 2:
                    logger.debug("  guard: %s", ray.termination_reason)
                continue

            nearest = self.find_nearest_hit(ray, elements)
            if nearest is None:
                ray.append_history(ray.origin + ray.direction * extension)
                ray.terminate(TerminationReason.NO_INTERSECTION)
                if config.verbose >= 2:
                    logger.debug("  no intersection")
                continue

            element, hit = nearest
            if config.verbose >= 2:
                logger.debug("  hit %s at (%.4f, %.4f), distance %.6f",
                             element.get_display_name(), hit.point.x, hit.point.y, hit.distance)
            ray.append_history(hit.point)
            children = element.interact(ray, hit)
            if not ray.terminated:
                logger.warning("%s did not terminate ray %s; absorbing it",
                               element.get_display_name(), ray.uuid[:8])
                ray.terminate(TerminationReason.absorbed(element.get_absorption_kind()))
            if config.verbose >= 2:
                logger.debug("  %s -> %d children", ray.termination_reason, len(children))
            queue.extend(child for child in children if child is not None)

        if queue:
            self.warning = (f"Trace stopped: maximum iteration count ({config.max_iterations}) reached, "
                            f"{len(queue)} rays left in the queue")
            logger.warning(self.warning)
        self.pending = list(queue)

        return completed


def trace(elements: Sequence['BaseElement'],
          sources: Optional[Sequence['BaseElement']] = None,
          config: Optional[TraceConfig] = None) -> List[Ray]:
    """
    Trace all rays emitted by `sources` through `elements`.

    Args:
        elements: The scene's elements. Order decides equal-distance ties.
        sources: Sources to emit from. None means the source elements in `elements`.
        config: Settings for the pass. None means TraceConfig().

    Returns:
        list: The completed rays.
    """
    return Tracer(elements, config).run(sources)


# Example usage and testing
if __name__ == "__main__":
    import sys
    import os
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

    from ray_optics_engine.core.elements.sources.point_source import PointSource
    from ray_optics_engine.core.elements.mirrors.plane_mirror import PlaneMirror

    source = PointSource(json_obj={'x': 0, 'y': 0, 'numRays': 1})
    mirror = PlaneMirror(json_obj={'p1': {'x': 100, 'y': -50}, 'p2': {'x': 100, 'y': 50}})
    for ray in trace([source, mirror]):
        print(f"{ray.termination_reason}: {[p.to_tuple() for p in ray.history]}")
