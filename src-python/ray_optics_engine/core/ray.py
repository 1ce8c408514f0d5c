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

import math
import logging
import uuid as _uuid_mod
from typing import List, Optional, Any

if __name__ == "__main__":
    from constants import (
        N_AIR, DEFAULT_WAVELENGTH_NM, MIN_RAY_INTENSITY, MAX_RAY_BOUNCES,
        HISTORY_EPSILON, NORMALIZE_EPSILON, PIXELS_PER_NANOMETER, TWO_PI
    )
    from geometry import Vector, Geometry, DegenerateVectorError
    from polarization import Polarization
else:
    from .constants import (
        N_AIR, DEFAULT_WAVELENGTH_NM, MIN_RAY_INTENSITY, MAX_RAY_BOUNCES,
        HISTORY_EPSILON, NORMALIZE_EPSILON, PIXELS_PER_NANOMETER, TWO_PI
    )
    from .geometry import Vector, Geometry, DegenerateVectorError
    from .polarization import Polarization

logger = logging.getLogger(__name__)


class RayCreationError(ValueError):
    """Raised when a Ray cannot be built from the given parameters."""


class TerminatedRayError(RuntimeError):
    """Raised when a terminated (inert) ray is mutated."""


class TerminationReason:
    """
    String constants for Ray.termination_reason.

    Guard conditions (checked by the tracer before every step):
        zero_direction, nan_value, max_bounces, low_intensity
    Exits:
        no_intersection
    Interaction outcomes (set by elements on the consumed parent ray):
        reflected, refracted, transmitted, split, diffracted,
        total_internal_reflection, coupled, not_coupled
    Absorption:
        absorbed_<element kind>, see absorbed()
    """

    ZERO_DIRECTION = 'zero_direction'
    NAN_VALUE = 'nan_value'
    MAX_BOUNCES = 'max_bounces'
    LOW_INTENSITY = 'low_intensity'
    NO_INTERSECTION = 'no_intersection'

    REFLECTED = 'reflected'
    REFRACTED = 'refracted'
    TRANSMITTED = 'transmitted'
    SPLIT = 'split'
    DIFFRACTED = 'diffracted'
    TOTAL_INTERNAL_REFLECTION = 'total_internal_reflection'
    COUPLED = 'coupled'
    NOT_COUPLED = 'not_coupled'

    ABSORBED_PREFIX = 'absorbed_'

    @staticmethod
    def absorbed(kind: str) -> str:
        """Reason for full absorption by an element of the given kind, e.g. 'absorbed_aperture'."""
        return TerminationReason.ABSORBED_PREFIX + kind

    @staticmethod
    def is_absorbed(reason: Optional[str]) -> bool:
        return reason is not None and reason.startswith(TerminationReason.ABSORBED_PREFIX)


def _wrap_phase(phase: float) -> float:
    return Geometry.wrap_angle(phase)


class Ray:
    """
    One light path segment in flight.

    A ray starts at `origin`, travels along the unit vector `direction` and
    carries its wavelength, intensity, phase and polarization. Every point
    the ray visits is appended to `history`, which the tracer and elements
    only extend through append_history().

    Once terminate() has been called the ray is inert: the setters for
    origin, direction, intensity, phase and polarization raise
    TerminatedRayError and append_history() is a no-op.

    Attributes:
        wavelength_nm (float): Wavelength in nm
        bounces_so_far (int): Number of interactions in this ray's lineage
        medium_refractive_index (float): Index of the medium the ray travels in
        source_id (str or None): uuid of the emitting source
        beam_diameter (float): Nominal beam diameter (scene units)
        beam_waist (float or None): Gaussian waist radius w0 (scene units)
        rayleigh_range (float or None): Gaussian Rayleigh range zR (scene units)
        ignore_decay (bool): If True, low intensity never terminates the ray
        min_intensity (float): Threshold used by low_intensity checks and by elements
            deciding whether a child is worth emitting
        history (list of Vector): Visited points, first entry is the origin
        terminated (bool): True once the ray has been consumed
        termination_reason (str or None): One of TerminationReason

    Lineage Tracking Attributes:
        uuid (str): Unique identifier for this ray segment (auto-generated)
        parent_uuid (str or None): UUID of the parent ray that spawned this one
        interaction_type (str): How this ray was created, e.g. 'source',
            'reflect', 'refract', 'tir', 'transmit', 'diffract'
    """

    def __init__(
        self,
        origin: Any,
        direction: Any,
        wavelength_nm: float = DEFAULT_WAVELENGTH_NM,
        intensity: float = 1.0,
        phase: float = 0.0,
        polarization: Optional[Polarization] = None,
        bounces_so_far: int = 0,
        medium_refractive_index: float = N_AIR,
        source_id: Optional[str] = None,
        beam_diameter: float = 0.0,
        beam_waist: Optional[float] = None,
        rayleigh_range: Optional[float] = None,
        ignore_decay: bool = False,
        min_intensity: float = MIN_RAY_INTENSITY,
        history: Optional[List[Vector]] = None
    ) -> None:
        """
        Initialize a ray.

        Args:
            origin: Start point (Vector, {'x','y'} dict or (x, y) tuple)
            direction: Propagation direction, renormalized here
            history: Points visited by the ancestors of this ray. The list is
                copied and the origin appended to it (subject to the usual
                HISTORY_EPSILON rule).

        Raises:
            RayCreationError: For a non-vector origin/direction, a non-positive
                or non-finite wavelength, or a NaN/infinite/negative intensity.
        """
        self.terminated: bool = False
        self.termination_reason: Optional[str] = None

        try:
            origin_v = Geometry.as_vector(origin)
            direction_v = Geometry.as_vector(direction)
        except (TypeError, KeyError, IndexError, ValueError) as e:
            raise RayCreationError(f"Invalid origin/direction: {e}") from e

        try:
            wavelength_nm = float(wavelength_nm)
            intensity = float(intensity)
            phase = float(phase)
        except (TypeError, ValueError) as e:
            raise RayCreationError(f"Non-numeric ray parameter: {e}") from e
        if not math.isfinite(wavelength_nm) or wavelength_nm <= 0:
            raise RayCreationError(f"Wavelength must be positive and finite, got {wavelength_nm}")
        if not math.isfinite(intensity):
            raise RayCreationError(f"Intensity must be finite, got {intensity}")
        if intensity < 0:
            # Tiny negatives come from floating-point cancellation
            if intensity > -1e-12:
                intensity = 0.0
            else:
                raise RayCreationError(f"Intensity must be non-negative, got {intensity}")
        if polarization is None:
            polarization = Polarization.unpolarized()
        if not isinstance(polarization, Polarization):
            raise RayCreationError(f"polarization must be a Polarization, got {type(polarization).__name__}")

        self._origin: Vector = origin_v
        self._direction: Vector = direction_v
        self._intensity: float = float(intensity)
        self._phase: float = 0.0 if math.isnan(phase) else _wrap_phase(phase)
        self._polarization: Polarization = polarization
        self.wavelength_nm: float = float(wavelength_nm)
        self.bounces_so_far: int = int(bounces_so_far)
        self.medium_refractive_index: float = medium_refractive_index
        self.source_id: Optional[str] = source_id
        self.beam_diameter: float = beam_diameter
        self.beam_waist: Optional[float] = beam_waist
        self.rayleigh_range: Optional[float] = rayleigh_range
        self.ignore_decay: bool = ignore_decay
        self.min_intensity: float = min_intensity

        # Lineage
        self.uuid: str = str(_uuid_mod.uuid4())
        self.parent_uuid: Optional[str] = None
        self.interaction_type: str = 'source'

        self._history: List[Vector] = list(history) if history else []
        if origin_v.is_finite():
            if self._history:
                self._append_point(origin_v, advance_phase=False)
            else:
                self._history.append(origin_v)

        # Guard conditions detected at construction leave the ray inert
        if origin_v.has_nan() or direction_v.has_nan() or math.isnan(phase):
            self.terminate(TerminationReason.NAN_VALUE)
        else:
            try:
                self._direction = direction_v.normalize()
            except DegenerateVectorError:
                self.terminate(TerminationReason.ZERO_DIRECTION)

    # =========================================================================
    # Guarded state
    # =========================================================================

    def _check_mutable(self, field: str) -> None:
        if self.terminated:
            raise TerminatedRayError(
                f"Cannot set {field} on terminated ray {self.uuid[:8]} ({self.termination_reason})"
            )

    @property
    def origin(self) -> Vector:
        return self._origin

    @origin.setter
    def origin(self, value: Vector) -> None:
        self._check_mutable('origin')
        self._origin = Geometry.as_vector(value)

    @property
    def direction(self) -> Vector:
        return self._direction

    @direction.setter
    def direction(self, value: Vector) -> None:
        self._check_mutable('direction')
        self._direction = Geometry.as_vector(value).normalize()

    @property
    def intensity(self) -> float:
        return self._intensity

    @intensity.setter
    def intensity(self, value: float) -> None:
        self._check_mutable('intensity')
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Intensity must be finite and non-negative, got {value}")
        self._intensity = float(value)

    @property
    def phase(self) -> float:
        """Phase in (-pi, pi]."""
        return self._phase

    @phase.setter
    def phase(self, value: float) -> None:
        self._check_mutable('phase')
        self._phase = _wrap_phase(value)

    @property
    def polarization(self) -> Polarization:
        return self._polarization

    @polarization.setter
    def polarization(self, value: Polarization) -> None:
        """The only way to change polarization. Kind and Jones vector come from the same object."""
        self._check_mutable('polarization')
        if not isinstance(value, Polarization):
            raise TypeError(f"polarization must be a Polarization, got {type(value).__name__}")
        self._polarization = value

    @property
    def history(self) -> List[Vector]:
        """A copy of the visited points."""
        return list(self._history)

    # =========================================================================
    # History and phase
    # =========================================================================

    def _append_point(self, point: Vector, advance_phase: bool,
                      refractive_index: Optional[float] = None) -> bool:
        if point.has_nan():
            return False
        if self._history and point.distance_to(self._history[-1]) <= HISTORY_EPSILON:
            return False
        if advance_phase and self._history:
            self.advance_phase(point.distance_to(self._history[-1]), refractive_index)
        self._history.append(point)
        return True

    def append_history(self, point: Vector, refractive_index: Optional[float] = None) -> bool:
        """
        Append a visited point and advance the phase over the new segment.

        The phase advances with `refractive_index`, or with the ray's
        medium index when it is None (elements pass the glass index for
        points inside their body).

        The point is skipped if it contains NaN or lies within HISTORY_EPSILON
        of the previous point. Terminated rays ignore the call.

        Returns:
            bool: True if the point was appended.
        """
        if self.terminated:
            logger.debug("append_history ignored on terminated ray %s", self.uuid[:8])
            return False
        return self._append_point(Geometry.as_vector(point), advance_phase=True,
                                  refractive_index=refractive_index)

    def advance_phase(self, distance: float, refractive_index: Optional[float] = None) -> None:
        """Add the optical phase 2*pi/lambda * n * distance (lambda in scene units)."""
        n = self.medium_refractive_index if refractive_index is None else refractive_index
        wavelength_px = self.wavelength_nm * PIXELS_PER_NANOMETER
        self._phase = _wrap_phase(self._phase + TWO_PI / wavelength_px * distance * n)

    def add_phase(self, delta: float) -> None:
        """Add a fixed phase shift, e.g. pi on reflection."""
        if not self.terminated:
            self._phase = _wrap_phase(self._phase + delta)

    @property
    def path_length(self) -> float:
        """Geometric length of the history polyline."""
        return sum(a.distance_to(b) for a, b in zip(self._history, self._history[1:]))

    # =========================================================================
    # Termination
    # =========================================================================

    def terminate(self, reason: str) -> None:
        """Mark the ray as consumed. The first reason given wins."""
        if self.terminated:
            return
        self.terminated = True
        self.termination_reason = reason

    def guard_reason(self, max_bounces: int = MAX_RAY_BOUNCES,
                     min_intensity: Optional[float] = None) -> Optional[str]:
        """
        Return the guard condition this ray violates, or None.

        Checked in order: NaN anywhere, degenerate direction, bounce limit,
        low intensity (skipped when ignore_decay is set).
        """
        threshold = self.min_intensity if min_intensity is None else min_intensity
        if (self._origin.has_nan() or self._direction.has_nan()
                or math.isnan(self._intensity) or math.isnan(self._phase)):
            return TerminationReason.NAN_VALUE
        if self._direction.magnitude() < NORMALIZE_EPSILON:
            return TerminationReason.ZERO_DIRECTION
        if self.bounces_so_far >= max_bounces:
            return TerminationReason.MAX_BOUNCES
        if not self.ignore_decay and self._intensity < threshold:
            return TerminationReason.LOW_INTENSITY
        return None

    def check_termination(self, max_bounces: int = MAX_RAY_BOUNCES,
                          min_intensity: Optional[float] = None) -> Optional[str]:
        """Terminate the ray if a guard condition holds. Returns the reason, if any."""
        if self.terminated:
            return self.termination_reason
        reason = self.guard_reason(max_bounces, min_intensity)
        if reason is not None:
            self.terminate(reason)
        return reason

    # =========================================================================
    # Children
    # =========================================================================

    def spawn(self, origin: Vector, direction: Vector, interaction_type: str = 'transmit',
              **overrides: Any) -> 'Ray':
        """
        Create a child ray that continues this ray's lineage.

        The child copies every physical field of this ray, its history and
        its lineage, increments bounces_so_far, and then applies `overrides`
        (any Ray.__init__ keyword).

        Raises:
            RayCreationError: If the child parameters are invalid.
        """
        kwargs = dict(
            wavelength_nm=self.wavelength_nm,
            intensity=self._intensity,
            phase=self._phase,
            polarization=self._polarization,
            bounces_so_far=self.bounces_so_far + 1,
            medium_refractive_index=self.medium_refractive_index,
            source_id=self.source_id,
            beam_diameter=self.beam_diameter,
            beam_waist=self.beam_waist,
            rayleigh_range=self.rayleigh_range,
            ignore_decay=self.ignore_decay,
            min_intensity=self.min_intensity,
            history=self._history,
        )
        kwargs.update(overrides)
        child = Ray(origin, direction, **kwargs)
        child.parent_uuid = self.uuid
        child.interaction_type = interaction_type
        return child

    # =========================================================================
    # Gaussian beam
    # =========================================================================

    def width_at(self, distance: float) -> float:
        """
        Beam radius after propagating `distance` from the waist.

        Uses w(z) = w0 * sqrt(1 + (z/zR)^2). Without Gaussian data the
        nominal radius beam_diameter/2 is returned.
        """
        if self.beam_waist is None:
            return self.beam_diameter / 2.0
        if not self.rayleigh_range:
            return self.beam_waist
        return self.beam_waist * math.sqrt(1.0 + (distance / self.rayleigh_range) ** 2)

    def __repr__(self) -> str:
        """String representation for debugging."""
        state = f", terminated={self.termination_reason}" if self.terminated else ""
        lineage_str: str = f", uuid={self.uuid[:8]}..."
        if self.parent_uuid:
            lineage_str += f", parent={self.parent_uuid[:8]}..., {self.interaction_type}"
        return (f"Ray(origin=({self._origin.x:.4f}, {self._origin.y:.4f}), "
                f"direction=({self._direction.x:.4f}, {self._direction.y:.4f}), "
                f"wavelength={self.wavelength_nm}, intensity={self._intensity:.6f}, "
                f"bounces={self.bounces_so_far}{state}{lineage_str})")


# Example usage and testing
if __name__ == "__main__":
    print("Testing Ray class...\n")

    ray1 = Ray(Vector(0, 0), Vector(3, 4), intensity=1.0)
    print(f"  {ray1}")
    print(f"  |direction| = {ray1.direction.magnitude()}")

    ray1.append_history(Vector(30, 40))
    print(f"  History: {ray1.history}, phase={ray1.phase:.4f}")

    child = ray1.spawn(Vector(30, 40), Vector(-3, -4), interaction_type='reflect', intensity=0.5)
    ray1.terminate(TerminationReason.REFLECTED)
    print(f"  Child: {child}")
    print(f"  Child history: {child.history}")

    zero = Ray(Vector(0, 0), Vector(0, 0))
    print(f"  Zero-direction ray: {zero.termination_reason}")

    try:
        Ray(Vector(0, 0), Vector(1, 0), intensity=-1.0)
    except RayCreationError as e:
        print(f"  RayCreationError: {e}")

    print("\nRay test completed successfully!")
