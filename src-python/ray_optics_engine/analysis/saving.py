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

===============================================================================
PYTHON-SPECIFIC MODULE: Ray Data Export Utilities
===============================================================================
Utilities for summarizing and exporting the rays of a completed trace
pass:

- Statistics: counts by termination reason and source, intensity by reason
- CSV: one row per ray with its physical state, lineage and path
===============================================================================
"""

import csv
from pathlib import Path
from typing import List, Union, Dict, Any

from ..core.ray import Ray, TerminationReason


def filter_by_reason(rays: List[Ray], reason: str) -> List[Ray]:
    """
    Rays with the given termination reason.

    The prefix 'absorbed_' alone matches every absorption.
    """
    if reason == TerminationReason.ABSORBED_PREFIX:
        return [r for r in rays if TerminationReason.is_absorbed(r.termination_reason)]
    return [r for r in rays if r.termination_reason == reason]


def get_ray_statistics(rays: List[Ray]) -> Dict[str, Any]:
    """
    Summary statistics for a list of rays.

    Returns:
        Dict with keys:
        - 'total': number of rays
        - 'terminated': number of terminated rays
        - 'by_reason': {termination_reason: count}
        - 'by_source': {source_id: count}
        - 'intensity_by_reason': {termination_reason: summed intensity}
        - 'max_bounces': largest bounces_so_far
        - 'total_path_length': summed history length
    """
    by_reason: Dict[str, int] = {}
    by_source: Dict[str, int] = {}
    intensity_by_reason: Dict[str, float] = {}
    for ray in rays:
        reason = ray.termination_reason or 'pending'
        by_reason[reason] = by_reason.get(reason, 0) + 1
        intensity_by_reason[reason] = intensity_by_reason.get(reason, 0.0) + ray.intensity
        source = ray.source_id or 'unknown'
        by_source[source] = by_source.get(source, 0) + 1

    return {
        'total': len(rays),
        'terminated': sum(1 for r in rays if r.terminated),
        'by_reason': by_reason,
        'by_source': by_source,
        'intensity_by_reason': intensity_by_reason,
        'max_bounces': max((r.bounces_so_far for r in rays), default=0),
        'total_path_length': sum(r.path_length for r in rays),
    }


def save_rays_csv(
    rays: List[Ray],
    output_path: Union[str, Path],
    filename: str = "rays.csv",
    precision_coords: int = 4,
    precision_intensity: int = 6,
) -> Path:
    """
    Export the rays to a CSV file.

    Args:
        rays: List of Ray objects to export.
        output_path: Directory where the CSV file will be saved (created if needed).
        filename: Name of the output CSV file (default: "rays.csv").
        precision_coords: Decimal places for coordinate values (default: 4).
        precision_intensity: Decimal places for intensity values (default: 6).

    Returns:
        Path: Full path to the created CSV file.

    Raises:
        OSError: If the output directory cannot be created or file cannot be written.
    """
    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_file = output_dir / filename

    coord_fmt = f"{{:.{precision_coords}f}}"
    intensity_fmt = f"{{:.{precision_intensity}f}}"

    with open(csv_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow([
            'ray_index',
            'uuid',
            'parent_uuid',
            'interaction_type',
            'source_id',
            'origin_x',
            'origin_y',
            'end_x',
            'end_y',
            'direction_x',
            'direction_y',
            'wavelength_nm',
            'intensity',
            'phase',
            'polarization',
            'bounces',
            'path_length',
            'termination_reason',
            'history',
        ])

        for i, ray in enumerate(rays):
            history = ray.history
            end = history[-1] if history else ray.origin
            writer.writerow([
                i,
                ray.uuid,
                ray.parent_uuid or '',
                ray.interaction_type,
                ray.source_id or '',
                coord_fmt.format(ray.origin.x),
                coord_fmt.format(ray.origin.y),
                coord_fmt.format(end.x),
                coord_fmt.format(end.y),
                coord_fmt.format(ray.direction.x),
                coord_fmt.format(ray.direction.y),
                ray.wavelength_nm,
                intensity_fmt.format(ray.intensity),
                coord_fmt.format(ray.phase),
                ray.polarization.kind,
                ray.bounces_so_far,
                coord_fmt.format(ray.path_length),
                ray.termination_reason or '',
                ' '.join(f"{coord_fmt.format(p.x)}:{coord_fmt.format(p.y)}" for p in history),
            ])

    return csv_file
