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
PYTHON-SPECIFIC MODULE: Analysis Utilities
===============================================================================
Post-processing for the rays of a completed trace pass:

- Statistics and CSV export
- Lineage-based path analysis (energy ranking, conservation checks)
- Shapely-based geometry queries on ray paths
===============================================================================
"""

from .saving import (
    save_rays_csv,
    filter_by_reason,
    get_ray_statistics,
)
from .lineage_analysis import (
    rank_paths_by_energy,
    check_energy_conservation,
    termination_reasons_by_depth,
    delivered_intensity,
)
from .ray_geometry_queries import (
    get_object_by_name,
    get_objects_by_type,
    ray_path,
    path_lengths,
    find_rays_crossing,
    find_rays_inside,
    length_inside,
    find_rays_by_polarization,
)

__all__ = [
    'save_rays_csv', 'filter_by_reason', 'get_ray_statistics',
    'rank_paths_by_energy', 'check_energy_conservation', 'termination_reasons_by_depth',
    'delivered_intensity',
    'get_object_by_name', 'get_objects_by_type', 'ray_path', 'path_lengths',
    'find_rays_crossing', 'find_rays_inside', 'length_inside', 'find_rays_by_polarization',
]
