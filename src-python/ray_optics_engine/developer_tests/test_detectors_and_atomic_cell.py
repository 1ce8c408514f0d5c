"""
===============================================================================
DETECTORS AND ATOMIC CELL - Apertures, screens, photodiodes, vapour cells
===============================================================================

Tests for core.elements.detectors and core.elements.absorptive:

1. APERTURE
   - Rays through an opening continue, rays on the stop are absorbed
   - Double-slit opening layout and blocking shape

2. SCREEN
   - Binned intensity readout, reset between passes, CSV export

3. PHOTODIODE
   - Detected power and photocurrent, insensitive back face

4. ATOMIC CELL
   - Line widths, resonant absorption, Beer-Lambert scaling
   - Attenuated transmission and full absorption in a traced scene

Run with:
    python developer_tests/test_detectors_and_atomic_cell.py

Or with pytest:
    pytest developer_tests/test_detectors_and_atomic_cell.py -v
===============================================================================
"""

import sys
from pathlib import Path

import numpy as np

# Add the src-python directory to the path
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ray_optics_engine.core.geometry import Vector
from ray_optics_engine.core.ray import Ray, TerminationReason
from ray_optics_engine.core.tracer import Tracer
from ray_optics_engine.core.elements import Aperture, Screen, Photodiode, AtomicCell, LineSource


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


def horizontal_ray(y=0.0, intensity=1.0, **kwargs):
    return Ray(Vector(0, y), Vector(1, 0), intensity=intensity, **kwargs)


# =============================================================================
# TEST: APERTURE
# =============================================================================

def test_aperture():
    """Open part passes, blocked part absorbs."""
    print("\n" + "=" * 60)
    print("TEST: Aperture")
    print("=" * 60)

    slit = Aperture()
    assert slit.openings == [(-5.0, 5.0)]

    rays = Tracer([slit]).run(initial_rays=[horizontal_ray(0.0), horizontal_ray(20.0)])
    through = [r for r in rays if r.interaction_type == 'transmit']
    assert len(through) == 1
    assert_close(through[0].origin.y, 0.0, msg="transmitted ray height")
    assert through[0].direction.x == 1.0
    absorbed = [r for r in rays if r.termination_reason == 'absorbed_aperture']
    assert len(absorbed) == 1
    assert_close(absorbed[0].history[-1].y, 20.0, msg="blocked ray end")
    print("  y=0 passes the 10-wide slit, y=20 is absorbed - PASS")

    double = Aperture(json_obj={'numberOfSlits': 2, 'slitWidth': 5, 'slitSeparation': 30})
    assert double.openings == [(-17.5, -12.5), (12.5, 17.5)]
    assert double.opening_at(15.0) == 1
    assert double.opening_at(-15.0) == 0
    assert double.opening_at(0.0) is None
    assert_close(double.shape().length, 140.0, 1e-9, "blocking length")
    print("  Double slit openings at +/-15 and 140 units of stop - PASS")

    try:
        Aperture(json_obj={'numberOfSlits': 2, 'slitWidth': 10, 'slitSeparation': 5})
        raise AssertionError("overlapping slits should be rejected")
    except ValueError:
        pass
    print("  Overlapping slits rejected - PASS")


# =============================================================================
# TEST: SCREEN
# =============================================================================

def test_screen():
    """Binned readout of a traced line source."""
    print("\n" + "=" * 60)
    print("TEST: Screen")
    print("=" * 60)

    source = LineSource()
    screen = Screen()
    tracer = Tracer([source, screen])
    rays = tracer.run()

    assert len(rays) == 11
    assert all(r.termination_reason == 'absorbed_screen' for r in rays)
    assert screen.hit_count == 11
    assert_close(screen.total_power, 1.0, 1e-12, "total power")
    # The central ray lands at the middle of the screen
    assert screen.bin_hits[99:101].sum() == 1
    print(f"  11 rays, total power {screen.total_power:.6f} - PASS")

    tracer.run()
    assert screen.hit_count == 11
    assert_close(screen.total_power, 1.0, 1e-12, "power after re-trace")
    print("  Readout reset at the start of each pass - PASS")

    profile = screen.get_profile()
    assert len(profile) == 200
    assert_close(profile[0]['position'], 0.375, msg="first bin centre")
    assert_close(sum(p['intensity'] for p in profile), 1.0, 1e-12, "profile sum")

    lines = screen.export_csv().split("\n")
    assert lines[0] == "Position,Intensity,Hits"
    assert len(lines) == 201
    print("  Profile and CSV export have one record per bin - PASS")


# =============================================================================
# TEST: PHOTODIODE
# =============================================================================

def test_photodiode():
    """Front face detects, back face does not."""
    print("\n" + "=" * 60)
    print("TEST: Photodiode")
    print("=" * 60)

    diode = Photodiode()
    rays = Tracer([diode]).run(initial_rays=[horizontal_ray(intensity=0.8)])

    assert rays[0].termination_reason == 'absorbed_photodiode'
    assert_close(rays[0].history[-1].x, 200.0, msg="detection point")
    assert_close(diode.incident_power, 0.8, msg="incident power")
    assert diode.hit_count == 1
    assert_close(diode.photocurrent, 0.4, msg="photocurrent")
    measurements = diode.get_measurements()
    assert measurements['hits'] == 1
    assert_close(measurements['power'], 0.8, msg="measured power")
    print(f"  P = {diode.incident_power}, I = {diode.photocurrent} A - PASS")

    behind = Ray(Vector(300, 0), Vector(-1, 0))
    rays = Tracer([diode]).run(initial_rays=[behind])
    assert rays[0].termination_reason == TerminationReason.NO_INTERSECTION
    assert diode.incident_power == 0.0
    assert diode.hit_count == 0
    print("  Ray arriving from behind passes undetected - PASS")


# =============================================================================
# TEST: ATOMIC CELL SPECTROSCOPY
# =============================================================================

def test_atomic_cell_spectroscopy():
    """Line widths and Beer-Lambert scaling."""
    print("\n" + "=" * 60)
    print("TEST: Atomic Cell Spectroscopy")
    print("=" * 60)

    cell = AtomicCell()
    assert cell.resonance_wavelength == 780.24
    # Doppler broadening dominates at room temperature
    assert cell.doppler_linewidth > 10 * cell.natural_linewidth
    assert 5e-4 < cell.doppler_linewidth < 2e-3
    assert 5e-6 < cell.natural_linewidth < 5e-5
    print(f"  Natural {cell.natural_linewidth:.3e} nm, Doppler {cell.doppler_linewidth:.3e} nm - PASS")

    lengths = [0.5, 1.0, 2.0, 4.0]
    values = [cell.transmission(780.24, length) for length in lengths]
    assert all(a > b for a, b in zip(values, values[1:]))
    t1 = cell.transmission(780.24, 1.0)
    t2 = cell.transmission(780.24, 2.0)
    assert_close(t2, t1 ** 2, 1e-12, "T(2L) = T(L)^2")
    print("  Transmission falls with length, T(2L) = T(L)^2 - PASS")

    densities = [1e8, 1e9, 1e10]
    values = [AtomicCell(json_obj={'density': d}).transmission(780.24, 1.0) for d in densities]
    assert all(a > b for a, b in zip(values, values[1:]))
    print("  Transmission falls with density - PASS")

    assert_close(cell.transmission(550.0, 80.0), 1.0, 1e-9, "off-resonance")
    spectrum = cell.transmission(np.array([780.0, 780.24, 780.5]), 1.0)
    assert spectrum.shape == (3,)
    assert int(np.argmin(spectrum)) == 1
    print("  Off-resonance light passes, array input gives a dip at the line - PASS")

    try:
        AtomicCell(json_obj={'atomType': 'Xe131'})
        raise AssertionError("unknown species should be rejected")
    except ValueError:
        pass
    print("  Unknown species rejected - PASS")


# =============================================================================
# TEST: ATOMIC CELL IN A TRACE
# =============================================================================

def test_atomic_cell_trace():
    """Attenuation over the chord, or absorption for a dense vapour."""
    print("\n" + "=" * 60)
    print("TEST: Atomic Cell Trace")
    print("=" * 60)

    thin = AtomicCell(json_obj={'density': 1e8})
    rays = Tracer([thin]).run(initial_rays=[horizontal_ray(wavelength_nm=780.24)])
    assert rays[0].termination_reason == TerminationReason.TRANSMITTED
    child = rays[1]
    assert_close(child.origin.x, 140.0, 1e-5, "exit face")
    assert_close(child.intensity, thin.transmission(780.24, 80.0), 1e-9, "attenuated intensity")
    assert 0.0 < child.intensity < 1.0
    print(f"  Density 1e8: transmitted {child.intensity:.4f} - PASS")

    dense = AtomicCell()
    rays = Tracer([dense]).run(initial_rays=[horizontal_ray(wavelength_nm=780.24)])
    assert len(rays) == 1
    assert rays[0].termination_reason == 'absorbed_atomic_cell'
    print("  Density 1e10: absorbed_atomic_cell - PASS")

    rays = Tracer([dense]).run(initial_rays=[horizontal_ray(wavelength_nm=550.0)])
    assert_close(rays[1].intensity, 1.0, 1e-9, "green light")
    print("  Off-resonance ray crosses the dense cell unchanged - PASS")


# =============================================================================
# RUN ALL TESTS
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 60)
    print("DETECTORS AND ATOMIC CELL TESTS")
    print("=" * 60)

    tests = [
        ("Aperture", test_aperture),
        ("Screen", test_screen),
        ("Photodiode", test_photodiode),
        ("Atomic Cell Spectroscopy", test_atomic_cell_spectroscopy),
        ("Atomic Cell Trace", test_atomic_cell_trace),
    ]

    passed = 0
    failed = 0

    for name, test_func in tests:
        try:
            test_func()
            passed += 1
        except AssertionError as e:
            print(f"\n  FAILED: {name}")
            print(f"    {e}")
            failed += 1
        except Exception as e:
            print(f"\n  ERROR: {name}")
            print(f"    {type(e).__name__}: {e}")
            failed += 1

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print(f"  Passed: {passed}")
    print(f"  Failed: {failed}")
    print(f"  Total:  {len(tests)}")

    if failed == 0:
        print("\n  All tests passed!")
    else:
        print(f"\n  {failed} test(s) failed")

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
