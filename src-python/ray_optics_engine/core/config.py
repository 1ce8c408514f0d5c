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

"""
Trace configuration.

A TraceConfig is passed explicitly into every trace pass. There is no
module-level mutable state: two passes with different configs can run
one after the other without affecting each other.
"""

import math
import dataclasses
from dataclasses import dataclass
from typing import Dict, Any

if __name__ == "__main__":
    from constants import (
        MAX_TRACE_ITERATIONS, MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, HIT_EPSILON,
        NO_HIT_EXTENSION_FACTOR, MIN_SCENE_EXTENT, MAX_RAYS_PER_SOURCE, N_AIR
    )
else:
    from .constants import (
        MAX_TRACE_ITERATIONS, MAX_RAY_BOUNCES, MIN_RAY_INTENSITY, HIT_EPSILON,
        NO_HIT_EXTENSION_FACTOR, MIN_SCENE_EXTENT, MAX_RAYS_PER_SOURCE, N_AIR
    )


@dataclass(frozen=True)
class TraceConfig:
    """
    Settings for one trace pass.

    Attributes:
        max_iterations (int): Hard cap on queue pops per pass
        max_bounces (int): Rays with bounces_so_far >= this are terminated 'max_bounces'
        min_intensity (float): Rays below this are terminated 'low_intensity'
        hit_epsilon (float): Hits closer than this to the ray origin are ignored
        extension_factor (float): Rays that hit nothing are extended by
            bounding_diagonal * extension_factor
        min_scene_extent (float): Diagonal used when the scene bounds are degenerate
        max_rays_per_source (int): Cap on rays emitted by one source
        ambient_refractive_index (float): Index of the surrounding medium
        verbose (int): 0 = silent, 1 = log each ray, 2 = log each hit and interaction
    """

    max_iterations: int = MAX_TRACE_ITERATIONS
    max_bounces: int = MAX_RAY_BOUNCES
    min_intensity: float = MIN_RAY_INTENSITY
    hit_epsilon: float = HIT_EPSILON
    extension_factor: float = NO_HIT_EXTENSION_FACTOR
    min_scene_extent: float = MIN_SCENE_EXTENT
    max_rays_per_source: int = MAX_RAYS_PER_SOURCE
    ambient_refractive_index: float = N_AIR
    verbose: int = 0

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.max_bounces < 1:
            raise ValueError(f"max_bounces must be >= 1, got {self.max_bounces}")
        if self.max_rays_per_source < 1:
            raise ValueError(f"max_rays_per_source must be >= 1, got {self.max_rays_per_source}")
        for name in ('min_intensity', 'hit_epsilon', 'extension_factor', 'min_scene_extent'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {value}")
        if self.hit_epsilon == 0 or self.extension_factor == 0 or self.min_scene_extent == 0:
            raise ValueError("hit_epsilon, extension_factor and min_scene_extent must be positive")
        if not math.isfinite(self.ambient_refractive_index) or self.ambient_refractive_index < 1.0:
            raise ValueError(f"ambient_refractive_index must be >= 1, got {self.ambient_refractive_index}")
        if self.verbose not in (0, 1, 2):
            raise ValueError(f"verbose must be 0, 1 or 2, got {self.verbose}")

    @classmethod
    def from_dict(cls, overrides: Dict[str, Any]) -> 'TraceConfig':
        """
        Build a config from a dict of overrides.

        Raises:
            ValueError: If a key is not a TraceConfig field.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown TraceConfig keys: {sorted(unknown)}")
        return cls(**overrides)

    def replace(self, **changes: Any) -> 'TraceConfig':
        """Return a copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


# Example usage and testing
if __name__ == "__main__":
    config = TraceConfig()
    print(f"Default: {config}")
    print(f"Strict: {config.replace(max_bounces=10, verbose=1)}")
    try:
        TraceConfig.from_dict({'max_bounce': 3})
    except ValueError as e:
        print(f"Rejected: {e}")
