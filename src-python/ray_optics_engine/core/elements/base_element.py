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

import json
import copy
import logging
import uuid as uuid_module
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple, TYPE_CHECKING

from shapely.geometry.base import BaseGeometry

if __name__ == "__main__":
    import sys
    import os
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
    from constants import HIT_EPSILON, N_AIR
    from geometry import Vector, DegenerateVectorError
    from ray import Ray, RayCreationError, TerminationReason
else:
    from ..constants import HIT_EPSILON, N_AIR
    from ..geometry import Vector, DegenerateVectorError
    from ..ray import Ray, RayCreationError, TerminationReason

if TYPE_CHECKING:
    from ..config import TraceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hit:
    """
    One forward intersection between a ray and an element surface.

    Attributes:
        distance: Distance from the ray origin along its direction (> HIT_EPSILON)
        point: Intersection point
        normal: Unit surface normal oriented against the ray (dot(normal, d) <= 0)
        surface_id: Which surface of the element was hit (e.g. 'front', 'edge_2')
        data: Element-specific extras (entering flag, segment parameter, ...)
    """
    distance: float
    point: Vector
    normal: Vector
    surface_id: str = 'surface'
    data: Dict[str, Any] = field(default_factory=dict)


class BaseElement:
    """
    Base class for every optical element in a scene.

    An element implements the three-method capability used by the tracer:

        intersect(origin, direction) -> List[Hit]
            All forward hits with distance > HIT_EPSILON. Order is irrelevant.
        interact(ray, hit) -> List[Ray]
            Consume `ray` (always via ray.terminate) and return 0..N children.
        generate_rays(max_rays) -> List[Ray]
            Sources only. Disabled sources return [].

    Configuration follows the serializable_defaults pattern: the class
    declares default parameter values and `json_obj` overrides them. Points
    are stored as {'x', 'y'} dicts.

    Derived geometry (corners, normals, focal points...) is built by
    _build_geometry() and cached. The cache is keyed on the current values
    of the geometry parameters, so it is rebuilt whenever the element is
    moved, rotated, resized or reconfigured.
    """

    type: str = ''
    """The type of the element."""

    serializable_defaults: Dict[str, Any] = {}
    """
    Default values of the element parameters.

    IMPORTANT: Points should be stored as dictionaries {'x': ..., 'y': ...}, not as Vector instances.
    """

    geometry_keys: Optional[Tuple[str, ...]] = None
    """Parameters the geometry cache depends on. None means all of serializable_defaults."""

    is_optical: bool = True
    """Whether the element takes part in tracing."""

    is_source: bool = False
    """Whether the element emits rays."""

    absorption_kind: str = ''
    """Suffix of the 'absorbed_<kind>' termination reason. Defaults to `type`."""

    def __init__(self, scene=None, json_obj: Optional[Dict[str, Any]] = None):
        """
        Initialize the element.

        Args:
            scene: The scene the element belongs to (may be None).
            json_obj: Parameter overrides. Unknown keys raise ValueError.

        Raises:
            ValueError: If json_obj contains a key that is not a parameter.
        """
        self.scene = scene
        self.ambient_refractive_index: float = N_AIR

        self._uuid: str = str(uuid_module.uuid4())
        self._name: Optional[str] = None

        self._cache: Optional[Dict[str, Any]] = None
        self._cache_key: Optional[str] = None

        serializable_defaults = self.__class__.serializable_defaults
        json_obj = json_obj or {}
        known_keys = ['type', 'name'] + list(serializable_defaults.keys())
        for key in json_obj:
            if key not in known_keys:
                raise ValueError(f"Unknown parameter '{key}' for type '{self.__class__.type}'")

        for prop_name, default_value in serializable_defaults.items():
            if prop_name in json_obj:
                # Deep copy to avoid reference issues
                setattr(self, prop_name, copy.deepcopy(json_obj[prop_name]))
            else:
                setattr(self, prop_name, copy.deepcopy(default_value))
        if 'name' in json_obj:
            self._name = json_obj['name']

        self.validate()

    def validate(self) -> None:
        """
        Check the parameters. Subclasses raise ValueError for invalid values.
        """

    def serialize(self) -> Dict[str, Any]:
        """
        Serialize the element to a JSON-compatible dictionary.

        Only parameters that differ from their defaults are included.
        """
        json_obj = {'type': self.__class__.type}
        for prop_name, default_value in self.__class__.serializable_defaults.items():
            current_value = getattr(self, prop_name)
            if json.dumps(current_value, sort_keys=True) != json.dumps(default_value, sort_keys=True):
                json_obj[prop_name] = copy.deepcopy(current_value)
        return json_obj

    # ==================== Geometry cache ====================

    def _geometry_state(self) -> str:
        keys = self.geometry_keys
        if keys is None:
            keys = tuple(self.__class__.serializable_defaults.keys())
        return json.dumps([getattr(self, k) for k in keys], sort_keys=True, default=str)

    @property
    def geometry(self) -> Dict[str, Any]:
        """The derived geometry, rebuilt if any geometry parameter changed."""
        key = self._geometry_state()
        if self._cache is None or key != self._cache_key:
            self._cache = self._build_geometry()
            self._cache_key = key
        return self._cache

    def _build_geometry(self) -> Dict[str, Any]:
        """Compute derived geometry from the parameters."""
        return {}

    def shape(self) -> Optional[BaseGeometry]:
        """Shapely geometry of the element, used for scene bounds and analysis."""
        return None

    # ==================== Capability ====================

    def on_trace_start(self, config: Optional['TraceConfig'] = None) -> None:
        """
        Called by the tracer before a pass. Detectors reset their readouts here.
        """
        if config is not None:
            self.ambient_refractive_index = config.ambient_refractive_index

    def generate_rays(self, max_rays: Optional[int] = None) -> List[Ray]:
        """Emit the initial rays. Only sources emit anything."""
        return []

    def intersect(self, origin: Vector, direction: Vector) -> List[Hit]:
        """All forward hits of the ray (origin, direction) with this element."""
        return []

    def interact(self, ray: Ray, hit: Hit) -> List[Ray]:
        """
        Consume `ray` at `hit` and return the outgoing rays.

        The default absorbs the ray.
        """
        ray.terminate(TerminationReason.absorbed(self.get_absorption_kind()))
        return []

    # ==================== Helpers for subclasses ====================

    def get_absorption_kind(self) -> str:
        return self.absorption_kind or self.__class__.type

    @staticmethod
    def make_hit(distance: float, point: Vector, normal: Vector, direction: Vector,
                 surface_id: str = 'surface', **data: Any) -> Hit:
        """Build a Hit whose normal faces against `direction`."""
        if normal.dot(direction) > 0:
            normal = -normal
        return Hit(distance, point, normal, surface_id, data)

    @staticmethod
    def survives(ray: Ray, intensity: float) -> bool:
        """Whether a child of `ray` with this intensity is worth emitting."""
        if intensity <= 0.0:
            return False
        return ray.ignore_decay or intensity >= ray.min_intensity

    def spawn_child(self, parent: Ray, origin: Vector, direction: Vector,
                    interaction_type: str = 'transmit', **overrides: Any) -> Optional[Ray]:
        """
        Build a child ray starting at `origin` offset by HIT_EPSILON along `direction`.

        A failed construction is logged and reported as None so that one bad
        child never aborts the pass.
        """
        try:
            unit = direction.normalize()
            child = parent.spawn(origin + unit * HIT_EPSILON, unit,
                                 interaction_type=interaction_type, **overrides)
        except (RayCreationError, DegenerateVectorError) as e:
            logger.warning("%s: could not create %s child of ray %s: %s",
                           self.get_display_name(), interaction_type, parent.uuid[:8], e)
            return None
        return child

    # ==================== Identification ====================

    @property
    def uuid(self) -> str:
        """Auto-generated unique identifier for this element."""
        return self._uuid

    @property
    def name(self) -> Optional[str]:
        """Optional human-readable name."""
        return self._name

    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._name = value

    def get_display_name(self) -> str:
        """
        Returns the user-defined name if set, otherwise the element type
        with a short UUID suffix (e.g. "PlaneMirror_a1b2c3d4").
        """
        if self._name:
            return self._name
        type_name = self.__class__.type or self.__class__.__name__
        return f"{type_name}_{self._uuid[:8]}"

    def __repr__(self) -> str:
        type_name = self.__class__.type or self.__class__.__name__
        return f"<{type_name} '{self.get_display_name()}'>"


# Example of how to create a subclass
if __name__ == "__main__":
    class ExampleAbsorber(BaseElement):
        type = 'ExampleAbsorber'
        serializable_defaults = {
            'p1': {'x': 0, 'y': 0},
            'p2': {'x': 100, 'y': 100},
        }

        def _build_geometry(self):
            print("  (rebuilding geometry)")
            p1 = Vector.from_dict(self.p1)
            p2 = Vector.from_dict(self.p2)
            return {'length': p1.distance_to(p2)}

    obj = ExampleAbsorber(json_obj={'p2': {'x': 30, 'y': 40}})
    print(f"{obj}: length={obj.geometry['length']}")
    print(f"Cached: length={obj.geometry['length']}")
    obj.p2['x'] = 0
    print(f"After edit: length={obj.geometry['length']}")
    print(f"Serialized: {obj.serialize()}")
