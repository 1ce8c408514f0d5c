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

import uuid as uuid_module
from typing import List, Optional, Tuple, TYPE_CHECKING

from shapely.ops import unary_union

# Handle both relative imports (when used as a module) and absolute imports (when run as script)
if __name__ == "__main__":
    from config import TraceConfig
    from tracer import Tracer
else:
    from .config import TraceConfig
    from .tracer import Tracer

if TYPE_CHECKING:
    from .elements.base_element import BaseElement
    from .ray import Ray


class Scene:
    """
    Ordered collection of elements with a dirty flag.

    The element order is the tie-break order used by the tracer. The caller
    owns the dirty flag: every structural change made through the Scene
    sets it, and edits made directly on an element should be followed by
    mark_dirty(). retrace() runs a pass only when the flag is set.

    Attributes:
        objs (list): All elements in the scene
        config (TraceConfig): Settings used by retrace()
        dirty (bool): Whether the last result is out of date
        rays (list): Completed rays of the last pass
        warning (str or None): Warning message of the last pass
        name (str or None): Optional name for the scene
    """

    def __init__(self, config: Optional[TraceConfig] = None):
        """Initialize an empty scene."""
        self.objs: List['BaseElement'] = []
        self.config: TraceConfig = config if config is not None else TraceConfig()
        self.dirty: bool = True
        self.rays: List['Ray'] = []
        self.warning: Optional[str] = None
        self.name: Optional[str] = None
        self._uuid: str = str(uuid_module.uuid4())

    @property
    def uuid(self) -> str:
        return self._uuid

    def get_display_name(self) -> str:
        """The user-defined name if set, otherwise "Scene_" plus a short UUID."""
        if self.name:
            return self.name
        return f"Scene_{self._uuid[:8]}"

    @property
    def optical_objs(self) -> List['BaseElement']:
        """Elements that take part in tracing, sources excluded."""
        return [obj for obj in self.objs if obj.is_optical and not obj.is_source]

    @property
    def sources(self) -> List['BaseElement']:
        return [obj for obj in self.objs if obj.is_source]

    def add_object(self, obj: 'BaseElement') -> 'BaseElement':
        """
        Append an element to the scene.

        Returns:
            The element, for chaining.
        """
        obj.scene = self
        self.objs.append(obj)
        self.dirty = True
        return obj

    def remove_object(self, obj: 'BaseElement') -> None:
        if obj in self.objs:
            self.objs.remove(obj)
            self.dirty = True

    def clear(self) -> None:
        """Remove all elements from the scene."""
        self.objs.clear()
        self.rays = []
        self.warning = None
        self.dirty = True

    def get_object_by_name(self, name: str) -> Optional['BaseElement']:
        for obj in self.objs:
            if obj.name == name:
                return obj
        return None

    def mark_dirty(self) -> None:
        self.dirty = True

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """(minx, miny, maxx, maxy) of all element shapes, or None for an empty scene."""
        shapes = [s for s in (obj.shape() for obj in self.objs) if s is not None and not s.is_empty]
        if not shapes:
            return None
        return unary_union(shapes).bounds

    def retrace(self, force: bool = False) -> List['Ray']:
        """
        Trace the scene if it is dirty (or `force` is set) and clear the flag.

        Returns:
            The completed rays of the latest pass.
        """
        if not (self.dirty or force):
            return self.rays
        tracer = Tracer(self.objs, self.config)
        self.rays = tracer.run()
        self.warning = tracer.warning
        self.dirty = False
        return self.rays

    def __repr__(self) -> str:
        return f"<Scene '{self.get_display_name()}' objs={len(self.objs)} dirty={self.dirty}>"
