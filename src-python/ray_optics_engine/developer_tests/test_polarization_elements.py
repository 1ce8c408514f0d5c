"""
===============================================================================
POLARIZATION ELEMENTS - Polarizers, wave plates, beam splitters, Faraday devices
===============================================================================

Tests for the Jones-calculus elements:

1. POLARIZER
   - Malus's law through a traced element
   - Unpolarized light loses half its power
   - Crossed polarizer absorbs the ray
   - Leaky polarizer types

2. WAVE PLATES
   - Quarter-wave plate: linear -> circular
   - Half-wave plate: rotation of the linear axis

3. BEAM SPLITTER
   - 50:50 split of a single ray, R + T <= I for random parameters
   - Polarizing splitter: p transmitted, s reflected, unpolarized shared

4. FARADAY ROTATOR AND ISOLATOR
   - Single-pass rotation, non-reciprocal double pass
   - Isolator transmits forward and blocks backward light

Run with:
    python developer_tests/test_polarization_elements.py

Or with pytest:
    pytest developer_tests/test_polarization_elements.py -v
===============================================================================
"""

import sys
import math
import random
from pathlib import Path

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ray_optics_engine.core.geometry import Vector
from ray_optics_engine.core.ray import Ray, TerminationReason
from ray_optics_engine.core.polarization import Polarization, PolarizationKind
from ray_optics_engine.core.tracer import trace
from ray_optics_engine.core.elements import (
    PointSource, PlaneMirror, Polarizer, WavePlate, HalfWavePlate, QuarterWavePlate,
    BeamSplitter, FaradayRotator, FaradayIsolator,
)


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


def interact_once(element, ray):
    """Send `ray` to its nearest hit on `element` and return the children."""
    hits = element.intersect(ray.origin, ray.direction)
    assert hits, f"{ray} misses {element}"
    hit = min(hits, key=lambda h: h.distance)
    ray.append_history(hit.point)
    return element.interact(ray, hit)


def horizontal_ray(polarization=None, intensity=1.0, origin=(0.0, 0.0), direction=(1.0, 0.0)):
    return Ray(Vector(*origin), Vector(*direction), intensity=intensity,
               polarization=polarization if polarization is not None else Polarization.unpolarized())


# =============================================================================
# POLARIZER
# =============================================================================

def test_polarizer_malus():
    """Traced polarizer follows Malus's law."""
    print("\n" + "=" * 60)
    print("TEST: Polarizer - Malus's law")
    print("=" * 60)

    for deg in (0, 20, 45, 60, 85):
        polarizer = Polarizer(json_obj={'transmissionAxis': deg})
        ray = horizontal_ray(Polarization.linear(0.0))
        children = interact_once(polarizer, ray)
        assert ray.termination_reason == TerminationReason.TRANSMITTED
        assert_close(children[0].intensity, math.cos(math.radians(deg)) ** 2, 1e-9, f"Malus at {deg} deg")

        expected_state = Polarization.linear(polarizer.ray_frame_angle(deg, ray.direction))
        assert children[0].polarization == expected_state, f"output state at {deg} deg"
    print("  I = cos^2(theta), output along the transmission axis - PASS")

    ray = horizontal_ray()
    children = interact_once(Polarizer(), ray)
    assert_close(children[0].intensity, 0.5, msg="unpolarized")
    assert children[0].polarization.kind == PolarizationKind.LINEAR
    print("  Unpolarized -> 0.5, linear - PASS")

    ray = horizontal_ray(Polarization.linear(0.0))
    children = interact_once(Polarizer(json_obj={'transmissionAxis': 90}), ray)
    assert children == []
    assert ray.termination_reason == 'absorbed_polarizer'
    print("  Crossed polarizer -> absorbed_polarizer - PASS")


def test_leaky_polarizers():
    """Real polarizer types leak the blocked component."""
    print("\n" + "=" * 60)
    print("TEST: Polarizer types")
    print("=" * 60)

    wire_grid = Polarizer(json_obj={'transmissionAxis': 90, 'polarizerType': 'wire_grid'})
    assert_close(wire_grid.extinction_ratio, 1000.0, 1e-6, "wire grid extinction ratio")
    ray = horizontal_ray(Polarization.linear(0.0))
    ray.min_intensity = 1e-6
    children = interact_once(wire_grid, ray)
    assert_close(children[0].intensity, 1e-3, 1e-12, "wire grid leakage")
    print("  Wire grid leaks 1e-3 through crossed axes - PASS")

    assert Polarizer().extinction_ratio == float('inf')
    assert_close(Polarizer(json_obj={'polarizerType': 'glan'}).extinction_ratio, 1e5, 1e-4, "glan extinction ratio")
    try:
        Polarizer(json_obj={'polarizerType': 'sheet'})
    except ValueError:
        print("  Unknown polarizerType rejected - PASS")
    else:
        raise AssertionError("Unknown polarizerType accepted")


# =============================================================================
# WAVE PLATES
# =============================================================================

def test_wave_plates():
    """QWP makes circular light; HWP rotates the linear axis."""
    print("\n" + "=" * 60)
    print("TEST: Wave plates")
    print("=" * 60)

    ray = horizontal_ray(Polarization.linear(0.0))
    children = interact_once(QuarterWavePlate(), ray)
    assert children[0].polarization.kind == PolarizationKind.CIRCULAR
    assert_close(children[0].intensity, 1.0, msg="lossless")
    print(f"  QWP at 45 deg: {children[0].polarization} - PASS")

    hwp = HalfWavePlate()
    ray = horizontal_ray(Polarization.linear(0.0))
    children = interact_once(hwp, ray)
    out = children[0].polarization
    # Fast axis seen from the ray is -22.5 deg, so the axis goes to -45 deg
    assert out.kind == PolarizationKind.LINEAR
    assert_close(out.angle, 3 * math.pi / 4, 1e-9, "HWP output angle")
    print(f"  HWP at 22.5 deg: {out} - PASS")

    generic = WavePlate(json_obj={'retardance': 180.0, 'fastAxis': 22.5})
    ray = horizontal_ray(Polarization.linear(0.0))
    assert interact_once(generic, ray)[0].polarization == out
    print("  WavePlate(retardance=180) matches HalfWavePlate - PASS")

    ray = horizontal_ray(Polarization.circular(right=True))
    children = interact_once(QuarterWavePlate(), ray)
    assert children[0].polarization.kind == PolarizationKind.LINEAR
    print("  QWP turns circular back into linear - PASS")


# =============================================================================
# BEAM SPLITTER
# =============================================================================

def test_beam_splitter_split():
    """A 50:50 splitter halves a ray of intensity 2."""
    print("\n" + "=" * 60)
    print("TEST: Non-polarizing beam splitter")
    print("=" * 60)

    splitter = BeamSplitter()
    ray = horizontal_ray(intensity=2.0)
    children = interact_once(splitter, ray)
    assert ray.termination_reason == TerminationReason.SPLIT
    assert len(children) == 2
    transmitted, reflected = children
    assert_close(transmitted.intensity, 1.0, msg="T")
    assert_close(reflected.intensity, 1.0, msg="R")
    assert transmitted.direction.x > 0 and reflected.direction.x < 0
    assert transmitted.interaction_type == 'transmit' and reflected.interaction_type == 'reflect'
    print("  T = R = 1.0 - PASS")

    rng = random.Random(7)
    for case in range(200):
        bs = BeamSplitter(json_obj={'splitRatio': rng.random(), 'loss': rng.random()})
        intensity = rng.uniform(0.0, 5.0)
        (t, _), (r, _) = bs.split(horizontal_ray(intensity=intensity))
        assert t >= 0 and r >= 0
        assert r + t <= intensity + 1e-12, f"case {case}: R + T = {r + t} > I = {intensity}"
    print("  R + T <= I for 200 random splitters - PASS")


def test_polarizing_beam_splitter():
    """PBS transmits p, reflects s and shares unpolarized light."""
    print("\n" + "=" * 60)
    print("TEST: Polarizing beam splitter")
    print("=" * 60)

    pbs = BeamSplitter(json_obj={'splitterType': 'polarizing'})

    children = interact_once(pbs, horizontal_ray(Polarization.linear(0.0)))
    assert len(children) == 1 and children[0].interaction_type == 'transmit'
    assert_close(children[0].intensity, 1.0, msg="p transmitted")
    print("  p -> transmitted - PASS")

    children = interact_once(pbs, horizontal_ray(Polarization.linear(math.pi / 2)))
    assert len(children) == 1 and children[0].interaction_type == 'reflect'
    assert_close(children[0].intensity, 1.0, msg="s reflected")
    print("  s -> reflected - PASS")

    (t, pol_t), (r, pol_r) = pbs.split(horizontal_ray())
    assert_close(t, 0.5, msg="unpolarized T")
    assert_close(r, 0.5, msg="unpolarized R")
    assert pol_t == Polarization.linear(0.0)
    assert pol_r == Polarization.linear(math.pi / 2)
    print("  Unpolarized -> 0.5 p + 0.5 s - PASS")


# =============================================================================
# FARADAY ROTATOR AND ISOLATOR
# =============================================================================

def test_faraday_rotator():
    """Rotation on a single pass, doubled on a mirror round trip."""
    print("\n" + "=" * 60)
    print("TEST: Faraday rotator")
    print("=" * 60)

    rotator = FaradayRotator()
    ray = horizontal_ray(Polarization.linear(0.0))
    children = interact_once(rotator, ray)
    assert ray.history[-1].to_tuple() == (120.0, 0.0), "exit face recorded"
    assert_close(children[0].polarization.angle, math.pi / 4, 1e-9, "single pass")
    print("  Single pass: 0 -> 45 deg, exit point in history - PASS")

    source = PointSource(json_obj={'numRays': 1, 'polarization': 'linear', 'polarizationAngle': 0.0})
    mirror = PlaneMirror(json_obj={'p1': {'x': 200, 'y': -50}, 'p2': {'x': 200, 'y': 50}})
    rays = trace([source, FaradayRotator(), mirror])
    final = rays[-1]
    assert final.termination_reason == TerminationReason.NO_INTERSECTION
    assert final.direction.x < 0
    assert_close(final.polarization.angle, math.pi / 2, 1e-9, "double pass")
    print(f"  Round trip through the mirror: {final.polarization} - PASS")


def test_faraday_isolator():
    """Forward light passes at 45 degrees; backward light is absorbed."""
    print("\n" + "=" * 60)
    print("TEST: Faraday isolator")
    print("=" * 60)

    isolator = FaradayIsolator()
    children = interact_once(isolator, horizontal_ray(Polarization.linear(0.0)))
    assert_close(children[0].intensity, 1.0, msg="forward, aligned")
    assert_close(children[0].polarization.angle, math.pi / 4, 1e-9, "output axis")
    assert_close(children[0].origin.x, 140.0, 1e-5, "exit face")
    print("  Forward linear(0): I = 1.0 at 45 deg - PASS")

    children = interact_once(isolator, horizontal_ray())
    assert_close(children[0].intensity, 0.5, msg="forward, unpolarized")
    print("  Forward unpolarized: I = 0.5 - PASS")

    ray = horizontal_ray(Polarization.linear(math.pi / 4), origin=(300.0, 0.0), direction=(-1.0, 0.0))
    children = interact_once(isolator, ray)
    assert children == []
    assert ray.termination_reason == 'absorbed_isolator'
    print("  Backward -> absorbed_isolator - PASS")

    lossy = FaradayIsolator(json_obj={'insertionLoss': 0.1})
    children = interact_once(lossy, horizontal_ray(Polarization.linear(0.0)))
    assert_close(children[0].intensity, 0.9, 1e-12, "insertion loss")
    print("  Insertion loss 0.1 -> 0.9 - PASS")


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("POLARIZATION ELEMENT TESTS")
    print("=" * 78)

    tests = [
        ("Polarizer - Malus's law", test_polarizer_malus),
        ("Polarizer types", test_leaky_polarizers),
        ("Wave plates", test_wave_plates),
        ("Non-polarizing beam splitter", test_beam_splitter_split),
        ("Polarizing beam splitter", test_polarizing_beam_splitter),
        ("Faraday rotator", test_faraday_rotator),
        ("Faraday isolator", test_faraday_isolator),
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
