"""
Python-specific module: Ray Lineage Tracking

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

===============================================================================
PYTHON-SPECIFIC MODULE: Ray Lineage Tracker
===============================================================================
Rebuilds the ray tree of a completed trace pass from the uuid/parent_uuid
links every Ray carries. Uses a dict-based tree internally, with optional
NetworkX export for graph algorithms.
===============================================================================
"""

from __future__ import annotations
from collections import deque
from typing import Optional, List, Set, Dict, Any, Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from .ray import Ray


class RayLineage:
    """
    Parent-child relationships between the rays of a trace pass.

    Internally maintains:
    - _parents: maps uuid -> parent_uuid (or None for source rays)
    - _children: maps uuid -> list of child uuids, in creation order
    - _rays: maps uuid -> Ray object

    All query methods return Ray objects, not uuids; get_subtree_uuids()
    is the uuid-level exception.

    Usage:
        lineage = RayLineage.from_rays(trace(elements))
        path = lineage.get_full_path(some_ray.uuid)
        tree = lineage.to_networkx()  # requires networkx
    """

    def __init__(self) -> None:
        self._parents: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self._rays: Dict[str, 'Ray'] = {}

    @classmethod
    def from_rays(cls, rays: Iterable['Ray']) -> 'RayLineage':
        lineage = cls()
        for ray in rays:
            lineage.register(ray)
        return lineage

    def register(self, ray: 'Ray') -> None:
        """Add one ray. Children may be registered before their parent."""
        self._rays[ray.uuid] = ray
        self._parents[ray.uuid] = ray.parent_uuid
        self._children.setdefault(ray.uuid, [])
        if ray.parent_uuid:
            self._children.setdefault(ray.parent_uuid, []).append(ray.uuid)

    def __len__(self) -> int:
        return len(self._rays)

    def get_ray(self, uuid: str) -> Optional['Ray']:
        return self._rays.get(uuid)

    # =========================================================================
    # Ancestor / descendant queries
    # =========================================================================

    def get_ancestors(self, uuid: str) -> List['Ray']:
        """Rays back to the source, root first, excluding the ray itself."""
        result = []
        current = self._parents.get(uuid)
        while current is not None and current in self._rays:
            result.append(self._rays[current])
            current = self._parents.get(current)
        result.reverse()
        return result

    def get_full_path(self, uuid: str) -> List['Ray']:
        """Source ray to this ray, inclusive."""
        ray = self._rays.get(uuid)
        if ray is None:
            return []
        return self.get_ancestors(uuid) + [ray]

    def get_children(self, uuid: str) -> List['Ray']:
        return [self._rays[c] for c in self._children.get(uuid, []) if c in self._rays]

    def get_subtree_uuids(self, uuid: str) -> Set[str]:
        """All uuids in the subtree rooted at uuid (inclusive)."""
        result = {uuid}
        queue = deque(self._children.get(uuid, []))
        while queue:
            child = queue.popleft()
            result.add(child)
            queue.extend(self._children.get(child, []))
        return result

    def get_descendants(self, uuid: str) -> List['Ray']:
        """Every ray spawned from this one, breadth first."""
        result = []
        queue = deque(self._children.get(uuid, []))
        while queue:
            child = queue.popleft()
            if child in self._rays:
                result.append(self._rays[child])
            queue.extend(self._children.get(child, []))
        return result

    def get_siblings(self, uuid: str) -> List['Ray']:
        """
        Other rays from the same parent, e.g. the reflected ray for a refracted one.
        """
        parent = self._parents.get(uuid)
        if parent is None:
            return []
        return [self._rays[c] for c in self._children.get(parent, []) if c != uuid and c in self._rays]

    def get_roots(self) -> List['Ray']:
        """Rays emitted by sources."""
        return [self._rays[u] for u, p in self._parents.items() if p is None]

    def get_leaves(self) -> List['Ray']:
        """Rays that spawned nothing."""
        return [self._rays[u] for u, children in self._children.items() if not children and u in self._rays]

    def get_depth(self, uuid: str) -> int:
        """Number of ancestors (0 for source rays)."""
        return len(self.get_ancestors(uuid))

    def get_rays_by_interaction(self, interaction_type: str) -> List['Ray']:
        return [r for r in self._rays.values() if r.interaction_type == interaction_type]

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """
        Returns:
            Dict with keys:
            - ray_count, root_count, leaf_count, max_depth
            - interaction_counts: interaction_type -> count
            - branching_factor_avg: mean number of children of non-leaf rays
        """
        leaves = self.get_leaves()
        interaction_counts: Dict[str, int] = {}
        for ray in self._rays.values():
            interaction_counts[ray.interaction_type] = interaction_counts.get(ray.interaction_type, 0) + 1
        non_leaves = [children for children in self._children.values() if children]
        branching = sum(len(c) for c in non_leaves) / len(non_leaves) if non_leaves else 0.0
        return {
            'ray_count': len(self._rays),
            'root_count': len(self.get_roots()),
            'leaf_count': len(leaves),
            'max_depth': max((self.get_depth(r.uuid) for r in leaves), default=0),
            'interaction_counts': interaction_counts,
            'branching_factor_avg': branching,
        }

    # =========================================================================
    # NetworkX export (optional dependency)
    # =========================================================================

    def to_networkx(self) -> Any:
        """
        Export to a NetworkX DiGraph with edges from parent to child.

        Node attributes: interaction, intensity, termination_reason.

        Raises:
            ImportError: if networkx is not installed
        """
        import networkx as nx
        G = nx.DiGraph()
        for uuid, ray in self._rays.items():
            G.add_node(uuid, interaction=ray.interaction_type, intensity=ray.intensity,
                       termination_reason=ray.termination_reason)
        for uuid, parent in self._parents.items():
            if parent is not None and parent in self._rays:
                G.add_edge(parent, uuid)
        return G

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"RayLineage(rays={stats['ray_count']}, roots={stats['root_count']}, "
                f"leaves={stats['leaf_count']}, max_depth={stats['max_depth']})")
