"""
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

===============================================================================
PYTHON-SPECIFIC MODULE: Ray-Geometry Query Tools
===============================================================================
Functions for querying traced rays in relation to scene geometry. They
turn each ray's history into a Shapely LineString and use contains /
intersects / length. They do NOT depend on the lineage tree -- they
operate on a flat List[Ray] and compose with lineage queries via uuids.
===============================================================================
"""

from __future__ import annotations

from typing import List, Optional, Dict, TYPE_CHECKING

from shapely.geometry import LineString
from shapely.geometry.base import BaseGeometry

if TYPE_CHECKING:
    from ..core.ray import Ray
    from ..core.scene import Scene
    from ..core.elements.base_element import BaseElement


# =============================================================================
# Scene element lookup utilities
# =============================================================================

def get_object_by_name(scene: 'Scene', name: str) -> 'BaseElement':
    """
    Find an element by its user-defined name.

    Raises:
        ValueError: If no element has that name.
    """
    obj = scene.get_object_by_name(name)
    if obj is None:
        names = [o.name for o in scene.objs if o.name]
        raise ValueError(f"No element named {name!r}. Named elements: {names}")
    return obj


def get_objects_by_type(scene: 'Scene', type_name: str) -> List['BaseElement']:
    """All elements whose `type` matches (case-sensitive)."""
    return [o for o in scene.objs if o.type == type_name]


# =============================================================================
# Ray geometry
# =============================================================================

def ray_path(ray: 'Ray') -> Optional[LineString]:
    """The ray's history as a LineString, or None if it has fewer than two points."""
    points = [(p.x, p.y) for p in ray.history]
    if len(points) < 2:
        return None
    return LineString(points)


def path_lengths(rays: List['Ray']) -> Dict[str, float]:
    """{uuid: geometric length of the history}."""
    result = {}
    for ray in rays:
        path = ray_path(ray)
        result[ray.uuid] = path.length if path is not None else 0.0
    return result


def find_rays_crossing(rays: List['Ray'], target) -> List['Ray']:
    """
    Rays whose path meets `target`.

    Args:
        rays: Rays to search.
        target: An element (its shape() is used) or any Shapely geometry.
    """
    shape = target if isinstance(target, BaseGeometry) else target.shape()
    if shape is None:
        return []
    result = []
    for ray in rays:
        path = ray_path(ray)
        if path is not None and path.intersects(shape):
            result.append(ray)
    return result


def find_rays_inside(rays: List['Ray'], region) -> List['Ray']:
    """
    Rays with at least one history segment that runs through `region`.

    A segment counts when a positive length of it lies in the region;
    one that meets the region at a single point does not.

    Args:
        rays: Rays to search.
        region: A polygonal element (its shape() is used) or a Shapely Polygon.
    """
    shape = region if isinstance(region, BaseGeometry) else region.shape()
    if shape is None:
        return []
    result = []
    for ray in rays:
        history = ray.history
        for a, b in zip(history, history[1:]):
            segment = LineString([(a.x, a.y), (b.x, b.y)])
            if segment.intersection(shape).length > 0:
                result.append(ray)
                break
    return result


def length_inside(ray: 'Ray', region) -> float:
    """Length of the ray's path that lies inside `region`."""
    shape = region if isinstance(region, BaseGeometry) else region.shape()
    path = ray_path(ray)
    if path is None or shape is None:
        return 0.0
    return path.intersection(shape).length


def find_rays_by_polarization(rays: List['Ray'], kind: str) -> List['Ray']:
    """Rays whose polarization kind is `kind` ('unpolarized', 'linear', ...)."""
    return [ray for ray in rays if ray.polarization.kind == kind]
