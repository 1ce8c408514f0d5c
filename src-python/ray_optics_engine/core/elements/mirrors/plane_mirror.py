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

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from ray_optics_engine.core.elements.mirrors.base_mirror import BaseMirror, MIRROR_DEFAULTS
    from ray_optics_engine.core.elements.line_element_mixin import LineElementMixin
else:
    from .base_mirror import BaseMirror, MIRROR_DEFAULTS
    from ..line_element_mixin import LineElementMixin


class PlaneMirror(LineElementMixin, BaseMirror):
    """
    Mirror with shape of a line segment.

    This is a simple flat (planar) mirror that reflects light according to
    the law of reflection (angle of incidence = angle of reflection). Both
    faces reflect.

    Attributes:
        p1 (dict): The first endpoint of the mirror line segment
        p2 (dict): The second endpoint of the mirror line segment
    """

    type = 'PlaneMirror'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -50.0},
        'p2': {'x': 100.0, 'y': 50.0},
        **MIRROR_DEFAULTS,
    }


# Example usage and testing
if __name__ == "__main__":
    from ray_optics_engine.core.geometry import Vector
    from ray_optics_engine.core.ray import Ray

    mirror = PlaneMirror()
    ray = Ray(Vector(0, 0), Vector(1, 0.2))
    hit = mirror.intersect(ray.origin, ray.direction)[0]
    ray.append_history(hit.point)
    child = mirror.interact(ray, hit)[0]
    print(f"Hit at {hit.point}, reflected direction {child.direction}")
