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
    from ray_optics_engine.core.elements.lenses.thin_lens import ThinLens
else:
    from .thin_lens import ThinLens


class CylindricalLens(ThinLens):
    """
    Thin lens that focuses along one transverse direction only.

    The cylinder axis is either 'perpendicular' to the trace plane, in which
    case the lens acts as an ordinary thin lens in 2D, or 'parallel' to it,
    in which case the curvature lies out of the plane and rays pass
    undeviated (still attenuated by `quality`).
    """

    type = 'CylindricalLens'
    serializable_defaults = {
        **ThinLens.serializable_defaults,
        'cylinderAxis': 'perpendicular',
    }

    def validate(self) -> None:
        super().validate()
        if self.cylinderAxis not in ('perpendicular', 'parallel'):
            raise ValueError(
                f"{self.get_display_name()}: cylinderAxis must be 'perpendicular' or 'parallel', "
                f"got {self.cylinderAxis!r}"
            )

    def optical_power(self, wavelength_nm: float) -> float:
        if self.cylinderAxis == 'parallel':
            return 0.0
        return super().optical_power(wavelength_nm)
