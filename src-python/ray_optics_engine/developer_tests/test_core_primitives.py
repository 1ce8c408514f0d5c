"""
===============================================================================
CORE PRIMITIVES - Vector, Ray, Polarization, TraceConfig, Fresnel, Dispersion
===============================================================================

Tests for the building blocks every element and the tracer rely on:

1. VECTOR
   - Normalization, rotation, reflection, immutability
   - DegenerateVectorError for zero-length vectors

2. RAY
   - Unit direction after construction
   - Guard conditions detected at construction (zero direction, NaN)
   - RayCreationError for invalid wavelength / intensity
   - Terminated rays are inert (TerminatedRayError on mutation)
   - History is append-only and skips near-duplicate points
   - spawn() continues the lineage
   - Phase wrapping, Gaussian beam width

3. POLARIZATION
   - Classification of Jones vectors (linear / circular / elliptical)
   - Malus's law and the unpolarized coherency path
   - Handedness flip on reflection

4. CONFIG, FRESNEL, DISPERSION, EXPRESSIONS

Run with:
    python developer_tests/test_core_primitives.py

Or with pytest:
    pytest developer_tests/test_core_primitives.py -v
===============================================================================
"""

import sys
import math
import dataclasses
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ray_optics_engine.core.geometry import Vector, geometry, DegenerateVectorError
from ray_optics_engine.core.ray import Ray, RayCreationError, TerminatedRayError, TerminationReason
from ray_optics_engine.core.polarization import (
    Polarization, PolarizationKind, linear_polarizer_matrix, wave_plate_matrix
)
from ray_optics_engine.core.config import TraceConfig
from ray_optics_engine.core import fresnel
from ray_optics_engine.core.dispersion import n_anchored_cauchy, n_sellmeier, DEFAULT_CAUCHY_B
from ray_optics_engine.core.equation import compile_expression


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

TOLERANCE = 1e-9


def assert_close(actual, expected, tol=TOLERANCE, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


def assert_raises(exc_type, func, *args, **kwargs):
    """Assert that func(*args, **kwargs) raises exc_type."""
    try:
        func(*args, **kwargs)
    except exc_type:
        return
    raise AssertionError(f"{func.__name__} did not raise {exc_type.__name__}")


# =============================================================================
# VECTOR
# =============================================================================

def test_vector_operations():
    """Normalize, rotate, reflect and the immutability of Vector."""
    print("\n" + "=" * 60)
    print("TEST: Vector operations")
    print("=" * 60)

    v = Vector(3, 4).normalize()
    assert_close(v.x, 0.6, msg="normalized x")
    assert_close(v.y, 0.8, msg="normalized y")
    assert_close(v.magnitude(), 1.0, msg="unit length")
    print(f"  (3, 4) normalized: {v} - PASS")

    r = Vector(1, 0).rotate(math.pi / 2)
    assert_close(r.x, 0.0, msg="rotated x")
    assert_close(r.y, 1.0, msg="rotated y")
    assert Vector(1, 0).perpendicular() == Vector(0, 1)
    print(f"  rotate(90 deg) and perpendicular() - PASS")

    reflected = fresnel.reflect_direction(Vector(1, -1).normalize(), Vector(0, 1))
    assert_close(reflected.x, math.sqrt(0.5), msg="reflected x")
    assert_close(reflected.y, math.sqrt(0.5), msg="reflected y")
    print(f"  reflect about +y normal: {reflected} - PASS")

    assert_raises(DegenerateVectorError, Vector(0, 0).normalize)
    assert_raises(DegenerateVectorError, Vector(float('nan'), 1).normalize)
    print("  Zero / NaN vectors raise DegenerateVectorError - PASS")

    try:
        v.x = 5.0
    except AttributeError:
        pass
    else:
        raise AssertionError("Vector should be immutable")
    print("  Vector is immutable - PASS")

    assert Vector.from_dict({'x': 1, 'y': 2}).to_tuple() == (1.0, 2.0)
    assert geometry.as_vector((1, 2)) == Vector(1, 2)
    print("  dict / tuple conversions - PASS")


def test_ray_segment_intersection():
    """Ray-segment intersection returns (t, u) and rejects misses and parallels."""
    print("\n" + "=" * 60)
    print("TEST: Ray-segment intersection")
    print("=" * 60)

    t, u = geometry.ray_segment_intersection(Vector(0, 0), Vector(1, 0), Vector(5, -1), Vector(5, 1))
    assert_close(t, 5.0, msg="distance")
    assert_close(u, 0.5, msg="segment parameter")
    print(f"  Hit: t={t}, u={u} - PASS")

    assert geometry.ray_segment_intersection(Vector(0, 3), Vector(1, 0), Vector(5, -1), Vector(5, 1)) is None
    assert geometry.ray_segment_intersection(Vector(0, 0), Vector(1, 0), Vector(1, 1), Vector(5, 1)) is None
    print("  Miss and parallel segment return None - PASS")

    roots = geometry.ray_circle_intersections(Vector(-10, 0), Vector(1, 0), Vector(0, 0), 2.0)
    assert len(roots) == 2
    assert_close(roots[0], 8.0, msg="near root")
    assert_close(roots[1], 12.0, msg="far root")
    print(f"  Ray-circle distances: {roots} - PASS")


# =============================================================================
# RAY
# =============================================================================

def test_ray_normalization():
    """Every constructed ray has a unit direction."""
    print("\n" + "=" * 60)
    print("TEST: Ray direction normalization")
    print("=" * 60)

    for d in [(3, 4), (1e-3, 0), (-7, 2), (0, -250)]:
        ray = Ray(Vector(0, 0), Vector(*d))
        assert_close(ray.direction.magnitude(), 1.0, 1e-6, f"|direction| for {d}")
    print("  All directions normalized - PASS")

    ray = Ray({'x': 1, 'y': 2}, (0, 5))
    assert ray.origin == Vector(1, 2)
    assert_close(ray.direction.y, 1.0, msg="tuple direction")
    print("  dict origin and tuple direction accepted - PASS")


def test_ray_guard_conditions():
    """Construction-time guards leave the ray terminated and inert."""
    print("\n" + "=" * 60)
    print("TEST: Ray guard conditions")
    print("=" * 60)

    zero = Ray(Vector(0, 0), Vector(0, 0))
    assert zero.terminated
    assert zero.termination_reason == TerminationReason.ZERO_DIRECTION
    print("  Zero direction -> zero_direction - PASS")

    nan_ray = Ray(Vector(float('nan'), 0), Vector(1, 0))
    assert nan_ray.termination_reason == TerminationReason.NAN_VALUE
    assert nan_ray.history == []
    print("  NaN origin -> nan_value, empty history - PASS")

    ray = Ray(Vector(0, 0), Vector(1, 0), bounces_so_far=5)
    assert ray.check_termination(max_bounces=5) == TerminationReason.MAX_BOUNCES
    print("  bounces_so_far >= max_bounces -> max_bounces - PASS")

    dim = Ray(Vector(0, 0), Vector(1, 0), intensity=1e-6)
    assert dim.check_termination(min_intensity=1e-4) == TerminationReason.LOW_INTENSITY
    kept = Ray(Vector(0, 0), Vector(1, 0), intensity=1e-6, ignore_decay=True)
    assert kept.check_termination(min_intensity=1e-4) is None
    assert not kept.terminated
    print("  low_intensity, and ignore_decay disables it - PASS")


def test_ray_creation_errors():
    """Invalid parameters raise RayCreationError."""
    print("\n" + "=" * 60)
    print("TEST: RayCreationError")
    print("=" * 60)

    assert_raises(RayCreationError, Ray, Vector(0, 0), Vector(1, 0), intensity=-1.0)
    assert_raises(RayCreationError, Ray, Vector(0, 0), Vector(1, 0), intensity=float('inf'))
    assert_raises(RayCreationError, Ray, Vector(0, 0), Vector(1, 0), wavelength_nm=0)
    assert_raises(RayCreationError, Ray, Vector(0, 0), Vector(1, 0), wavelength_nm=float('nan'))
    assert_raises(RayCreationError, Ray, "origin", Vector(1, 0))
    assert_raises(RayCreationError, Ray, Vector(0, 0), Vector(1, 0), polarization='linear')
    print("  Negative/infinite intensity, bad wavelength, bad types rejected - PASS")

    # Floating-point cancellation noise is clamped, not rejected
    ray = Ray(Vector(0, 0), Vector(1, 0), intensity=-1e-15)
    assert ray.intensity == 0.0
    print("  Tiny negative intensity clamped to 0 - PASS")


def test_terminated_ray_is_inert():
    """Setters raise and history is frozen once a ray is terminated."""
    print("\n" + "=" * 60)
    print("TEST: Terminated ray is inert")
    print("=" * 60)

    ray = Ray(Vector(0, 0), Vector(1, 0))
    ray.terminate(TerminationReason.REFLECTED)
    ray.terminate(TerminationReason.NO_INTERSECTION)
    assert ray.termination_reason == TerminationReason.REFLECTED
    print("  First termination reason wins - PASS")

    assert_raises(TerminatedRayError, setattr, ray, 'intensity', 0.5)
    assert_raises(TerminatedRayError, setattr, ray, 'direction', Vector(0, 1))
    assert_raises(TerminatedRayError, setattr, ray, 'polarization', Polarization.linear(0))
    print("  Setters raise TerminatedRayError - PASS")

    assert ray.append_history(Vector(10, 0)) is False
    assert len(ray.history) == 1
    print("  append_history ignored - PASS")


def test_ray_history_and_spawn():
    """History rules and lineage continuation through spawn()."""
    print("\n" + "=" * 60)
    print("TEST: Ray history and spawn")
    print("=" * 60)

    ray = Ray(Vector(0, 0), Vector(1, 0))
    assert ray.append_history(Vector(50, 0))
    assert not ray.append_history(Vector(50, 1e-7))
    history = ray.history
    history.append(Vector(999, 999))
    assert len(ray.history) == 2
    assert_close(ray.path_length, 50.0, msg="path length")
    print("  Near-duplicate skipped, history() is a copy - PASS")

    child = ray.spawn(Vector(50, 0), Vector(-1, 0), interaction_type='reflect', intensity=0.5)
    assert child.parent_uuid == ray.uuid
    assert child.interaction_type == 'reflect'
    assert child.bounces_so_far == ray.bounces_so_far + 1
    assert child.intensity == 0.5
    assert child.wavelength_nm == ray.wavelength_nm
    assert [p.to_tuple() for p in child.history] == [(0.0, 0.0), (50.0, 0.0)]
    print("  Child inherits history and lineage - PASS")


def test_ray_phase_and_beam():
    """Phase stays in (-pi, pi]; Gaussian width follows w0 sqrt(1 + (z/zR)^2)."""
    print("\n" + "=" * 60)
    print("TEST: Phase wrapping and beam width")
    print("=" * 60)

    for phase in (3 * math.pi, -3.5 * math.pi, 100.0):
        ray = Ray(Vector(0, 0), Vector(1, 0), phase=phase)
        assert -math.pi < ray.phase <= math.pi, f"phase {ray.phase} out of range"
    ray = Ray(Vector(0, 0), Vector(1, 0))
    ray.append_history(Vector(1000, 0))
    assert -math.pi < ray.phase <= math.pi
    print("  Phase wrapped after construction and propagation - PASS")

    beam = Ray(Vector(0, 0), Vector(1, 0), beam_waist=5.0, rayleigh_range=10.0)
    assert_close(beam.width_at(0.0), 5.0, msg="waist")
    assert_close(beam.width_at(10.0), 5.0 * math.sqrt(2.0), msg="width at zR")
    plain = Ray(Vector(0, 0), Vector(1, 0), beam_diameter=4.0)
    assert_close(plain.width_at(100.0), 2.0, msg="nominal radius")
    print("  Gaussian width_at() - PASS")


# =============================================================================
# POLARIZATION
# =============================================================================

def test_polarization_classification():
    """Jones vectors map to the right kind."""
    print("\n" + "=" * 60)
    print("TEST: Polarization classification")
    print("=" * 60)

    lin = Polarization.linear(math.radians(30))
    assert lin.kind == PolarizationKind.LINEAR
    assert_close(lin.angle, math.radians(30), 1e-9, "linear angle")

    right = Polarization.circular(right=True)
    assert right.kind == PolarizationKind.CIRCULAR
    assert right.handedness == 'right'

    ell = Polarization.from_jones([1.0, 0.5j])
    assert ell.kind == PolarizationKind.ELLIPTICAL

    assert Polarization.unpolarized().jones is None
    assert Polarization.from_name('circular-left').handedness == 'left'
    assert_raises(ValueError, Polarization.from_name, 'radial')
    assert_raises(ValueError, Polarization.from_jones, [0.0, 0.0])
    print("  linear / circular / elliptical / unpolarized - PASS")


def test_malus_law():
    """I = I0 cos^2(theta) through an ideal polarizer."""
    print("\n" + "=" * 60)
    print("TEST: Malus's law")
    print("=" * 60)

    h = Polarization.linear(0.0)
    for deg in (0, 15, 30, 45, 60, 75, 90):
        _, fraction = h.transformed(linear_polarizer_matrix(math.radians(deg)))
        assert_close(fraction, math.cos(math.radians(deg)) ** 2, 1e-9, f"Malus at {deg} deg")
    print("  cos^2 law at 0..90 deg - PASS")

    state, fraction = Polarization.unpolarized().transformed(linear_polarizer_matrix(0.3))
    assert_close(fraction, 0.5, 1e-9, "unpolarized fraction")
    assert state.kind == PolarizationKind.LINEAR
    assert_close(state.angle, 0.3, 1e-6, "output axis")
    print("  Unpolarized -> half power, linear along the axis - PASS")

    state, fraction = Polarization.unpolarized().transformed(wave_plate_matrix(math.pi / 2, 0.2))
    assert state.kind == PolarizationKind.UNPOLARIZED
    assert_close(fraction, 1.0, 1e-9, "retarder is lossless")
    print("  Unpolarized through a retarder stays unpolarized - PASS")


def test_wave_plate_and_reflection():
    """QWP turns 45 deg linear into circular; reflection flips handedness."""
    print("\n" + "=" * 60)
    print("TEST: Wave plate and reflection")
    print("=" * 60)

    state, fraction = Polarization.linear(math.radians(45)).transformed(wave_plate_matrix(math.pi / 2, 0.0))
    assert state.kind == PolarizationKind.CIRCULAR
    assert_close(fraction, 1.0, 1e-9, "QWP transmission")
    print(f"  45 deg through QWP: {state} - PASS")

    assert Polarization.circular(right=True).reflected().handedness == 'left'
    assert Polarization.unpolarized().reflected().kind == PolarizationKind.UNPOLARIZED
    print("  Reflection flips handedness - PASS")


# =============================================================================
# CONFIG, FRESNEL, DISPERSION, EXPRESSIONS
# =============================================================================

def test_trace_config():
    """Defaults, validation and overrides."""
    print("\n" + "=" * 60)
    print("TEST: TraceConfig")
    print("=" * 60)

    config = TraceConfig()
    assert config.max_iterations == 10000
    assert config.hit_epsilon == 1e-6
    assert config.extension_factor == 2.0
    print(f"  Defaults: {config} - PASS")

    assert_raises(ValueError, TraceConfig, max_bounces=0)
    assert_raises(ValueError, TraceConfig, hit_epsilon=0.0)
    assert_raises(ValueError, TraceConfig, min_intensity=-1.0)
    assert_raises(ValueError, TraceConfig, verbose=3)
    assert_raises(ValueError, TraceConfig.from_dict, {'max_bounce': 3})
    print("  Invalid values and unknown keys rejected - PASS")

    strict = config.replace(max_bounces=10)
    assert strict.max_bounces == 10 and config.max_bounces != 10
    assert TraceConfig.from_dict({'verbose': 1}).verbose == 1
    assert_raises(dataclasses.FrozenInstanceError, setattr, config, 'verbose', 2)
    print("  replace() / from_dict() / frozen - PASS")


def test_fresnel():
    """Normal incidence reflectance, Brewster angle, TIR."""
    print("\n" + "=" * 60)
    print("TEST: Fresnel equations")
    print("=" * 60)

    iface = fresnel.evaluate_interface(Vector(0, -1), Vector(0, 1), 1.0, 1.5)
    assert_close(iface.R_s, 0.04, 1e-12, "R_s at normal incidence")
    assert_close(iface.R_p, 0.04, 1e-12, "R_p at normal incidence")
    print("  R = 0.04 at normal incidence (1.0 -> 1.5) - PASS")

    theta_b = math.radians(fresnel.brewster_angle(1.0, 1.5))
    d = Vector(math.sin(theta_b), -math.cos(theta_b))
    iface = fresnel.evaluate_interface(d, Vector(0, 1), 1.0, 1.5)
    assert iface.R_p < 1e-12
    print(f"  R_p = {iface.R_p:.2e} at Brewster - PASS")

    for deg in (10, 35, 60):
        theta = math.radians(deg)
        d = Vector(math.sin(theta), -math.cos(theta))
        iface = fresnel.evaluate_interface(d, Vector(0, 1), 1.0, 1.5)
        sin_t = iface.refracted.x
        assert_close(1.0 * math.sin(theta), 1.5 * sin_t, 1e-9, f"Snell at {deg} deg")
    print("  Snell's law holds - PASS")

    assert_close(fresnel.critical_angle(1.5, 1.0), math.degrees(math.asin(1 / 1.5)), 1e-9, "critical angle")
    theta = math.radians(60)
    iface = fresnel.evaluate_interface(Vector(math.sin(theta), -math.cos(theta)), Vector(0, 1), 1.5, 1.0)
    assert iface.is_tir
    assert_raises(ValueError, fresnel.critical_angle, 1.0, 1.5)
    print("  TIR beyond the critical angle - PASS")


def test_dispersion_and_expressions():
    """Anchored Cauchy curve, Sellmeier BK7 and expression compilation."""
    print("\n" + "=" * 60)
    print("TEST: Dispersion and expressions")
    print("=" * 60)

    assert_close(n_anchored_cauchy(550.0, 1.5, DEFAULT_CAUCHY_B), 1.5, 1e-12, "anchor")
    assert n_anchored_cauchy(450.0, 1.5, DEFAULT_CAUCHY_B) > 1.5 > n_anchored_cauchy(650.0, 1.5, DEFAULT_CAUCHY_B)
    assert_close(n_anchored_cauchy(450.0, 1.5, 0.0), 1.5, 1e-12, "non-dispersive")
    assert_close(n_sellmeier(587.6), 1.5168, 1e-3, "BK7 at the d line")
    print("  Cauchy and Sellmeier - PASS")

    fn, grad = compile_expression("a r^2", ('r',), {'a': 2.0})
    assert_close(fn(3.0), 18.0, msg="value")
    assert_close(grad['r'](3.0), 12.0, msg="derivative")
    fn, grad = compile_expression(r"n_0 \left(1 - \frac{g^2 r^2}{2}\right)", ('r', 'z'), {'n_0': 1.6, 'g': 0.01})
    assert_close(fn(0.0, 0.0), 1.6, msg="GRIN profile on axis")
    assert grad['r'](5.0, 0.0) < 0
    assert_raises(ValueError, compile_expression, "a r + b", ('r',), {'a': 1.0})
    print("  compile_expression values, gradients and unknown symbols - PASS")


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("CORE PRIMITIVES TESTS")
    print("=" * 78)

    tests = [
        ("Vector operations", test_vector_operations),
        ("Ray-segment intersection", test_ray_segment_intersection),
        ("Ray normalization", test_ray_normalization),
        ("Ray guard conditions", test_ray_guard_conditions),
        ("RayCreationError", test_ray_creation_errors),
        ("Terminated ray is inert", test_terminated_ray_is_inert),
        ("Ray history and spawn", test_ray_history_and_spawn),
        ("Phase and beam width", test_ray_phase_and_beam),
        ("Polarization classification", test_polarization_classification),
        ("Malus's law", test_malus_law),
        ("Wave plate and reflection", test_wave_plate_and_reflection),
        ("TraceConfig", test_trace_config),
        ("Fresnel", test_fresnel),
        ("Dispersion and expressions", test_dispersion_and_expressions),
    ]

    passed = 0
    failed = 0
    errors = []

    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except Exception as e:
            failed += 1
            errors.append((name, str(e)))
            print(f"\n  FAILED: {name}")
            print(f"    Error: {e}")

    print("\n" + "=" * 78)
    print(f"SUMMARY: {passed}/{len(tests)} tests passed")
    print("=" * 78)

    if errors:
        print("\nFailed tests:")
        for name, error in errors:
            print(f"  - {name}: {error}")
        return False

    print("\nAll tests passed!")
    return True


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
