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

"""
Polarization state of a ray, with Jones-calculus helpers.

Jones vectors are expressed in the ray's own transverse frame:
    x component: in the trace plane, along the ray direction rotated by +90 deg
    y component: perpendicular to the trace plane
With this convention the p-polarization of any in-plane interface is the
x component and the s-polarization is the y component.

Polarization is immutable. The scalar kind (unpolarized/linear/circular/
elliptical) is always derived from the Jones vector, so the two can never
disagree.
"""

import math
import cmath
from typing import Optional, Tuple, Sequence

import numpy as np

if __name__ == "__main__":
    from constants import JONES_INTENSITY_EPSILON, JONES_PHASE_EPSILON
else:
    from .constants import JONES_INTENSITY_EPSILON, JONES_PHASE_EPSILON


# Degree of polarization above which a partially polarized state is
# tracked as a pure Jones state
PURE_STATE_THRESHOLD = 0.99


class PolarizationKind:
    UNPOLARIZED = 'unpolarized'
    LINEAR = 'linear'
    CIRCULAR = 'circular'
    ELLIPTICAL = 'elliptical'


# =============================================================================
# Jones matrices
# =============================================================================

def rotation_matrix(angle: float) -> np.ndarray:
    """Rotation of the transverse frame by `angle` radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([[c, -s], [s, c]], dtype=complex)


def linear_polarizer_matrix(axis_angle: float, leakage: float = 0.0) -> np.ndarray:
    """
    Jones matrix of a linear polarizer.

    Args:
        axis_angle: Transmission axis angle in the ray frame (radians).
        leakage: Intensity transmission along the blocked axis (1/extinction ratio).
    """
    core = np.array([[1.0, 0.0], [0.0, math.sqrt(leakage)]], dtype=complex)
    r = rotation_matrix(axis_angle)
    return r @ core @ r.T


def wave_plate_matrix(retardance: float, fast_axis_angle: float) -> np.ndarray:
    """
    Jones matrix of a retarder with the given retardance (radians).

    Half-wave plate: retardance = pi. Quarter-wave plate: retardance = pi/2.
    """
    core = np.array([[1.0, 0.0], [0.0, cmath.exp(1j * retardance)]], dtype=complex)
    r = rotation_matrix(fast_axis_angle)
    return r @ core @ r.T


# Reflection at normal-ish incidence flips the handedness of the frame
REFLECTION_MATRIX = np.array([[1.0, 0.0], [0.0, -1.0]], dtype=complex)


class Polarization:
    """
    Immutable polarization state.

    Use the named constructors rather than __init__:
        Polarization.unpolarized()
        Polarization.linear(angle)
        Polarization.circular(right=True)
        Polarization.from_jones(jones)

    Attributes:
        kind (str): One of PolarizationKind
        jones (np.ndarray or None): Normalized complex 2-vector, None when unpolarized
        angle (float or None): Linear axis angle in [0, pi), for linear states
        handedness (str or None): 'right' or 'left' for circular and elliptical states
    """

    __slots__ = ('_kind', '_jones', '_angle', '_handedness')

    def __init__(self, kind: str, jones: Optional[np.ndarray] = None,
                 angle: Optional[float] = None, handedness: Optional[str] = None):
        self._kind = kind
        self._jones = None if jones is None else np.array(jones, dtype=complex)
        self._angle = angle
        self._handedness = handedness

    # ---- named constructors ----

    @classmethod
    def unpolarized(cls) -> 'Polarization':
        return cls(PolarizationKind.UNPOLARIZED)

    @classmethod
    def linear(cls, angle: float) -> 'Polarization':
        """Linear polarization at `angle` radians in the ray frame."""
        return cls.from_jones(np.array([math.cos(angle), math.sin(angle)], dtype=complex))

    @classmethod
    def circular(cls, right: bool = True) -> 'Polarization':
        inv = 1.0 / math.sqrt(2.0)
        sign = 1.0 if right else -1.0
        return cls.from_jones(np.array([inv, sign * 1j * inv], dtype=complex))

    @classmethod
    def from_name(cls, name: str, angle: float = 0.0) -> 'Polarization':
        """
        Build a state from the option names used by light sources.

        Args:
            name: 'unpolarized', 'linear', 'circular-right' or 'circular-left'
            angle: Linear axis angle (radians), used for 'linear' only
        """
        if name == 'unpolarized':
            return cls.unpolarized()
        if name == 'linear':
            return cls.linear(angle)
        if name == 'circular-right':
            return cls.circular(right=True)
        if name == 'circular-left':
            return cls.circular(right=False)
        raise ValueError(f"Unknown polarization option: {name!r}")

    @classmethod
    def from_jones(cls, jones: Sequence[complex]) -> 'Polarization':
        """
        Classify a Jones vector and return the corresponding state.

        The vector is normalized and its global phase removed so that the
        larger component is real and positive.

        Raises:
            ValueError: If the vector has (near) zero intensity.
        """
        j = np.asarray(jones, dtype=complex).reshape(2)
        total = float(np.vdot(j, j).real)
        if not math.isfinite(total) or total < JONES_INTENSITY_EPSILON:
            raise ValueError("Jones vector has no intensity")
        j = j / math.sqrt(total)
        ref = j[0] if abs(j[0]) >= abs(j[1]) else j[1]
        j = j * (abs(ref) / ref)

        ax = abs(j[0])
        ay = abs(j[1])
        if ax < JONES_PHASE_EPSILON or ay < JONES_PHASE_EPSILON:
            delta = 0.0
        else:
            delta = cmath.phase(j[1]) - cmath.phase(j[0])
            delta = math.atan2(math.sin(delta), math.cos(delta))

        if abs(math.sin(delta)) < JONES_PHASE_EPSILON:
            sign = 1.0 if math.cos(delta) >= 0 else -1.0
            angle = math.atan2(sign * ay, ax) % math.pi
            return cls(PolarizationKind.LINEAR, j, angle=angle)

        handedness = 'right' if delta > 0 else 'left'
        if abs(ax - ay) < JONES_PHASE_EPSILON and abs(abs(delta) - math.pi / 2) < JONES_PHASE_EPSILON:
            return cls(PolarizationKind.CIRCULAR, j, handedness=handedness)
        return cls(PolarizationKind.ELLIPTICAL, j, handedness=handedness)

    # ---- accessors ----

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def jones(self) -> Optional[np.ndarray]:
        return None if self._jones is None else self._jones.copy()

    @property
    def angle(self) -> Optional[float]:
        return self._angle

    @property
    def handedness(self) -> Optional[str]:
        return self._handedness

    # ---- transformations ----

    def transformed(self, matrix: np.ndarray) -> Tuple['Polarization', float]:
        """
        Apply a Jones matrix.

        Returns:
            (new_state, transmitted_fraction). An unpolarized input is treated
            through its coherency matrix: if the output is (almost) fully
            polarized it becomes the pure state, otherwise it stays unpolarized.
            When nothing is transmitted the fraction is 0.0 and the state is
            returned unchanged.
        """
        m = np.asarray(matrix, dtype=complex)
        if self._jones is not None:
            out = m @ self._jones
            fraction = float(np.vdot(out, out).real)
            if fraction < JONES_INTENSITY_EPSILON:
                return self, 0.0
            return Polarization.from_jones(out), fraction

        coherency = 0.5 * (m @ m.conj().T)
        fraction = float(np.trace(coherency).real)
        if fraction < JONES_INTENSITY_EPSILON:
            return self, 0.0
        det = float(np.linalg.det(coherency).real)
        dop = math.sqrt(max(0.0, 1.0 - 4.0 * det / (fraction * fraction)))
        if dop < PURE_STATE_THRESHOLD:
            return Polarization.unpolarized(), fraction
        _, vectors = np.linalg.eigh(coherency)
        return Polarization.from_jones(vectors[:, -1]), fraction

    def reflected(self) -> 'Polarization':
        """State after a mirror reflection (handedness flips)."""
        if self._jones is None:
            return self
        return Polarization.from_jones(REFLECTION_MATRIX @ self._jones)

    # ---- dunder ----

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polarization):
            return NotImplemented
        if self._kind != other._kind:
            return False
        if self._jones is None or other._jones is None:
            return self._jones is None and other._jones is None
        return bool(np.allclose(self._jones, other._jones, atol=1e-9))

    def __hash__(self) -> int:
        return hash(self._kind)

    def __repr__(self) -> str:
        if self._kind == PolarizationKind.LINEAR:
            return f"Polarization(linear, angle={math.degrees(self._angle):.3f} deg)"
        if self._kind in (PolarizationKind.CIRCULAR, PolarizationKind.ELLIPTICAL):
            return f"Polarization({self._kind}, {self._handedness})"
        return "Polarization(unpolarized)"


# Example usage and testing
if __name__ == "__main__":
    h = Polarization.linear(0.0)
    print(f"Horizontal: {h}")

    state, t = h.transformed(linear_polarizer_matrix(math.radians(60)))
    print(f"After polarizer at 60 deg: {state}, transmitted {t:.4f} (Malus: {math.cos(math.radians(60)) ** 2:.4f})")

    state, t = Polarization.linear(math.radians(45)).transformed(wave_plate_matrix(math.pi / 2, 0.0))
    print(f"45 deg through quarter-wave plate: {state}, transmitted {t:.4f}")

    print(f"Right circular reflected: {Polarization.circular(right=True).reflected()}")

    state, t = Polarization.unpolarized().transformed(linear_polarizer_matrix(0.3))
    print(f"Unpolarized through polarizer: {state}, transmitted {t:.4f}")
