"""
Python-specific module: Post-hoc Path Analysis

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

===============================================================================
PYTHON-SPECIFIC MODULE: Post-hoc Lineage Analysis
===============================================================================
Analysis utilities that operate on a completed pass's RayLineage: path
energy rankings, energy conservation at branch points, and the
distribution of termination reasons along the ray tree.

All functions take a RayLineage as input and return plain dicts/lists --
no side effects.
===============================================================================
"""

from __future__ import annotations
from typing import List, Dict, Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.ray_lineage import RayLineage


# =============================================================================
# Energy path ranking
# =============================================================================

def rank_paths_by_energy(
    lineage: 'RayLineage',
    leaf_uuids: Optional[List[str]] = None
) -> List[Dict[str, Any]]:
    """
    Rank optical paths by the intensity of their last ray.

    Args:
        lineage: A populated RayLineage.
        leaf_uuids: Optional list of specific leaf uuids to analyze.
            If None, all leaves are used.

    Returns:
        List of dicts, highest intensity first, each containing:
        - 'uuid': uuid of the last ray
        - 'intensity': its intensity
        - 'termination_reason': how the path ended
        - 'depth': number of rays in the path
        - 'path_types': interaction_type of each ray along the path
        - 'path': list of Ray objects from source to leaf
    """
    if leaf_uuids is None:
        leaves = lineage.get_leaves()
    else:
        leaves = [r for r in (lineage.get_ray(u) for u in leaf_uuids) if r is not None]

    results = []
    for leaf in leaves:
        path = lineage.get_full_path(leaf.uuid)
        results.append({
            'uuid': leaf.uuid,
            'intensity': leaf.intensity,
            'termination_reason': leaf.termination_reason,
            'depth': len(path),
            'path_types': [r.interaction_type for r in path],
            'path': path,
        })

    results.sort(key=lambda x: x['intensity'], reverse=True)
    return results


# =============================================================================
# Path energy conservation check
# =============================================================================

def check_energy_conservation(lineage: 'RayLineage', tolerance: float = 1e-6) -> Dict[str, Any]:
    """
    Verify that no branch point creates energy.

    The children of a ray never carry more intensity than the ray had
    when it reached the element, within a relative `tolerance`.

    Returns:
        Dict with:
        - 'total_checks': number of branching points checked
        - 'violations': list of dicts for any violations found
        - 'max_ratio': largest child_sum / parent ratio seen
        - 'is_valid': True if no violations found
    """
    violations = []
    max_ratio = 0.0
    total_checks = 0

    for parent in _all_rays(lineage):
        children = lineage.get_children(parent.uuid)
        if not children or parent.intensity < 1e-12:
            continue
        total_checks += 1
        child_sum = sum(c.intensity for c in children)
        ratio = child_sum / parent.intensity
        max_ratio = max(max_ratio, ratio)
        if ratio > 1.0 + tolerance:
            violations.append({
                'parent_uuid': parent.uuid,
                'parent_intensity': parent.intensity,
                'child_intensity_sum': child_sum,
                'ratio': ratio,
                'child_types': [c.interaction_type for c in children],
            })

    return {
        'total_checks': total_checks,
        'violations': violations,
        'max_ratio': max_ratio,
        'is_valid': not violations,
    }


def _all_rays(lineage: 'RayLineage') -> List:
    rays = []
    for root in lineage.get_roots():
        rays.append(root)
        rays.extend(lineage.get_descendants(root.uuid))
    return rays


# =============================================================================
# Termination summary
# =============================================================================

def termination_reasons_by_depth(lineage: 'RayLineage') -> Dict[int, Dict[str, int]]:
    """
    Count termination reasons per tree depth.

    Returns:
        {depth: {reason: count}}, depth 0 being the source rays.
    """
    result: Dict[int, Dict[str, int]] = {}
    for ray in _all_rays(lineage):
        depth = lineage.get_depth(ray.uuid)
        reason = ray.termination_reason or 'pending'
        bucket = result.setdefault(depth, {})
        bucket[reason] = bucket.get(reason, 0) + 1
    return result


def delivered_intensity(lineage: 'RayLineage') -> Dict[str, float]:
    """
    Intensity of the leaves, summed per termination reason.

    Returns:
        {reason: total intensity}. Rays absorbed by detectors show up under
        'absorbed_screen' / 'absorbed_photodiode'.
    """
    totals: Dict[str, float] = {}
    for leaf in lineage.get_leaves():
        reason = leaf.termination_reason or 'pending'
        totals[reason] = totals.get(reason, 0.0) + leaf.intensity
    return totals
