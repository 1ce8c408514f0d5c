"""
===============================================================================
TRACER - Queue-driven propagation, termination and tie-breaking
===============================================================================

Tests for core.tracer and core.scene:

1. SINGLE MIRROR SCENARIO
   - Exact history of the source ray and its reflected child
   - Extension of rays that leave the scene

2. LAW OF REFLECTION
   - 1000 randomized mirror orientations and incidence angles

3. TERMINATION
   - Every returned ray is terminated with a reason
   - Two facing mirrors stop at max_bounces
   - The iteration cap sets a warning and keeps the queue in `pending`
   - Elements that forget to terminate a ray have it absorbed

4. EDGE CASES
   - Equal-distance hits: the element listed first wins
   - Empty scene uses the minimum scene extent
   - Rays passed to run() obey the pass intensity threshold
   - Failed child construction is reported as None

5. SCENE
   - Dirty flag, cached results, element factory

Run with:
    python developer_tests/test_tracer.py

Or with pytest:
    pytest developer_tests/test_tracer.py -v
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
from ray_optics_engine.core.config import TraceConfig
from ray_optics_engine.core.tracer import Tracer, trace, scene_diagonal
from ray_optics_engine.core.scene import Scene
from ray_optics_engine.core.elements import (
    BaseElement, LineElementMixin, PointSource, FanSource, LineSource, PlaneMirror, BeamSplitter,
    create_element
)


# =============================================================================
# TEST CONFIGURATION
# =============================================================================

TOLERANCE = 1e-6


def assert_close(actual, expected, tol=TOLERANCE, msg=""):
    """Assert that two values are close within tolerance."""
    if abs(actual - expected) > tol:
        raise AssertionError(
            f"{msg}: expected {expected}, got {actual} (diff: {abs(actual - expected)})"
        )


def mirror_at(x, half_height=50.0, **params):
    """Vertical plane mirror at the given x."""
    json_obj = {'p1': {'x': x, 'y': -half_height}, 'p2': {'x': x, 'y': half_height}}
    json_obj.update(params)
    return PlaneMirror(json_obj=json_obj)


class LazyAbsorber(LineElementMixin, BaseElement):
    """Element whose interact() forgets to terminate the ray."""

    type = 'LazyAbsorber'
    serializable_defaults = {
        'p1': {'x': 100.0, 'y': -50.0},
        'p2': {'x': 100.0, 'y': 50.0},
    }

    def interact(self, ray, hit):
        return []


# =============================================================================
# SINGLE MIRROR
# =============================================================================

def test_single_mirror_scenario():
    """One ray, one plane mirror: exact histories and reasons."""
    print("\n" + "=" * 60)
    print("TEST: Single mirror scenario")
    print("=" * 60)

    source = PointSource(json_obj={'x': 0, 'y': 0, 'numRays': 1})
    mirror = PlaneMirror()
    rays = trace([source, mirror])

    assert len(rays) == 2, f"Expected 2 rays, got {len(rays)}"
    parent, child = rays
    print(f"  {len(rays)} rays returned - PASS")

    assert parent.termination_reason == TerminationReason.REFLECTED
    assert [p.to_tuple() for p in parent.history] == [(0.0, 0.0), (100.0, 0.0)]
    print(f"  Parent history {[p.to_tuple() for p in parent.history]} - PASS")

    assert child.parent_uuid == parent.uuid
    assert child.bounces_so_far == 1
    assert child.termination_reason == TerminationReason.NO_INTERSECTION
    assert_close(child.direction.x, -1.0, msg="reflected direction")

    # Bounds (0, -50)-(100, 50), extension = 2 * diagonal
    extension = 2.0 * math.hypot(100.0, 100.0)
    history = child.history
    assert len(history) == 3, f"Expected 3 history points, got {len(history)}"
    assert history[1].to_tuple() == (100.0, 0.0)
    assert_close(history[2].x, 100.0 - 1e-6 - extension, 1e-9, "exit point x")
    assert_close(history[2].y, 0.0, 1e-9, "exit point y")
    print(f"  Child exits at x={history[2].x:.4f} - PASS")

    assert_close(child.intensity, 1.0, msg="ideal mirror keeps intensity")
    assert child.polarization == parent.polarization
    print("  Intensity and polarization kept - PASS")


def test_reflection_law_random():
    """d' = d - 2(d.n)n for 1000 random mirror orientations and angles."""
    print("\n" + "=" * 60)
    print("TEST: Law of reflection (1000 random cases)")
    print("=" * 60)

    rng = random.Random(12345)
    for case in range(1000):
        alpha = rng.uniform(0.0, 2 * math.pi)
        tangent = Vector.from_angle(alpha)
        c = Vector(rng.uniform(-100, 100), rng.uniform(-100, 100))
        mirror = PlaneMirror(json_obj={
            'p1': (c - tangent * 500.0).to_dict(),
            'p2': (c + tangent * 500.0).to_dict(),
        })
        n = mirror.geometry['normal']
        origin = c + n * 100.0 + tangent * rng.uniform(-50, 50)
        direction = (-n).rotate(math.radians(rng.uniform(-75, 75)))

        hits = mirror.intersect(origin, direction)
        assert len(hits) == 1, f"case {case}: expected one hit"
        ray = Ray(origin, direction)
        ray.append_history(hits[0].point)
        children = mirror.interact(ray, hits[0])
        assert len(children) == 1, f"case {case}: expected one child"
        out = children[0].direction

        assert_close(out.dot(n), -direction.dot(n), 1e-9, f"case {case}: normal component")
        assert_close(out.dot(tangent), direction.dot(tangent), 1e-9, f"case {case}: tangential component")
        assert_close(out.magnitude(), 1.0, 1e-9, f"case {case}: unit length")
    print("  1000 cases: normal component negated, tangential preserved - PASS")


# =============================================================================
# TERMINATION
# =============================================================================

def test_termination_is_total():
    """Every returned ray carries a termination reason."""
    print("\n" + "=" * 60)
    print("TEST: Every ray is terminated")
    print("=" * 60)

    elements = [
        PointSource(json_obj={'x': 50, 'y': 10, 'numRays': 24}),
        mirror_at(0),
        mirror_at(100, reflectivity=0.7),
        PlaneMirror(json_obj={'p1': {'x': 0, 'y': 60}, 'p2': {'x': 100, 'y': 60}, 'reflectivity': 0.5}),
    ]
    tracer = Tracer(elements)
    rays = tracer.run()
    assert rays, "Expected rays"
    assert tracer.warning is None
    for ray in rays:
        assert ray.terminated, f"{ray} is not terminated"
        assert ray.termination_reason is not None
    reasons = {r.termination_reason for r in rays}
    print(f"  {len(rays)} rays, reasons: {sorted(reasons)} - PASS")

    emitted = sum(r.intensity for r in rays if r.parent_uuid is None)
    leaves = sum(r.intensity for r in rays if r.termination_reason != TerminationReason.REFLECTED)
    assert leaves <= emitted + 1e-9, "Leaf intensity exceeds emitted intensity"
    print("  Leaf intensity does not exceed emitted intensity - PASS")


def test_two_facing_mirrors_stop_at_max_bounces():
    """A ray trapped between two mirrors stops at the bounce limit."""
    print("\n" + "=" * 60)
    print("TEST: Facing mirrors and max_bounces")
    print("=" * 60)

    elements = [mirror_at(0), mirror_at(100)]
    ray = Ray(Vector(50, 0), Vector(1, 0))
    tracer = Tracer(elements, TraceConfig(max_bounces=20))
    rays = tracer.run(initial_rays=[ray])

    assert len(rays) == 21, f"Expected 21 rays, got {len(rays)}"
    assert rays[-1].termination_reason == TerminationReason.MAX_BOUNCES
    assert rays[-1].bounces_so_far == 20
    assert all(r.termination_reason == TerminationReason.REFLECTED for r in rays[:-1])
    assert tracer.warning is None
    print(f"  21 rays, last one '{rays[-1].termination_reason}' - PASS")

    rays = Tracer(elements).run(initial_rays=[Ray(Vector(50, 0), Vector(1, 0))])
    assert rays[-1].termination_reason == TerminationReason.MAX_BOUNCES
    assert len(rays) == TraceConfig().max_bounces + 1
    print(f"  Default config: {len(rays)} rays - PASS")


def test_iteration_cap():
    """The pass stops at max_iterations, with a warning and pending rays."""
    print("\n" + "=" * 60)
    print("TEST: Iteration cap")
    print("=" * 60)

    elements = [mirror_at(0), mirror_at(100)]
    tracer = Tracer(elements, TraceConfig(max_iterations=5))
    rays = tracer.run(initial_rays=[Ray(Vector(50, 0), Vector(1, 0))])

    assert tracer.iterations == 5
    assert len(rays) == 5
    assert tracer.warning is not None and 'maximum iteration' in tracer.warning
    assert len(tracer.pending) == 1
    assert not tracer.pending[0].terminated
    # The cap is reported as a warning only
    assert not hasattr(tracer, 'error')
    print(f"  warning: {tracer.warning} - PASS")


def test_forgetful_element_absorbs():
    """A ray left alive by interact() is absorbed by the tracer."""
    print("\n" + "=" * 60)
    print("TEST: Element that does not terminate its ray")
    print("=" * 60)

    rays = Tracer([LazyAbsorber()]).run(initial_rays=[Ray(Vector(0, 0), Vector(1, 0))])
    assert len(rays) == 1
    assert rays[0].termination_reason == 'absorbed_LazyAbsorber'
    assert rays[0].history[-1].to_tuple() == (100.0, 0.0)
    print(f"  reason: {rays[0].termination_reason} - PASS")


# =============================================================================
# EDGE CASES
# =============================================================================

def test_equal_distance_tie_break():
    """With two coincident surfaces the element listed first handles the ray."""
    print("\n" + "=" * 60)
    print("TEST: Equal-distance tie-break")
    print("=" * 60)

    weak = mirror_at(100, reflectivity=0.5)
    strong = mirror_at(100, reflectivity=0.9)

    for first, second, expected in ((weak, strong, 0.5), (strong, weak, 0.9)):
        source = PointSource(json_obj={'numRays': 1})
        rays = trace([source, first, second])
        assert len(rays) == 2
        assert_close(rays[1].intensity, expected, msg="child intensity")
        print(f"  First mirror reflectivity {first.reflectivity} -> child {rays[1].intensity} - PASS")


def test_empty_scene_extension():
    """Without elements the minimum scene extent sets the exit distance."""
    print("\n" + "=" * 60)
    print("TEST: Empty scene")
    print("=" * 60)

    assert scene_diagonal([], 1000.0) == 1000.0
    rays = Tracer([]).run(initial_rays=[Ray(Vector(0, 0), Vector(1, 0))])
    assert len(rays) == 1
    assert rays[0].termination_reason == TerminationReason.NO_INTERSECTION
    assert_close(rays[0].history[-1].x, 2000.0, msg="exit point")
    print(f"  Ray extended to {rays[0].history[-1]} - PASS")

    # A lone point source has degenerate bounds
    assert scene_diagonal([PointSource()], 1000.0) == 1000.0
    print("  Degenerate bounds fall back to min extent - PASS")


def test_guarded_initial_rays():
    """Rays invalid at construction pass straight to the result."""
    print("\n" + "=" * 60)
    print("TEST: Guarded initial rays")
    print("=" * 60)

    zero = Ray(Vector(0, 0), Vector(0, 0))
    dim = Ray(Vector(0, 0), Vector(1, 0), intensity=1e-8)
    rays = Tracer([mirror_at(100)]).run(initial_rays=[zero, dim])
    assert [r.termination_reason for r in rays] == [TerminationReason.ZERO_DIRECTION,
                                                     TerminationReason.LOW_INTENSITY]
    assert len(rays[1].history) == 1
    print("  zero_direction and low_intensity before any hit test - PASS")


def test_initial_rays_use_pass_threshold():
    """Rays handed to run() get the same intensity threshold as source rays."""
    print("\n" + "=" * 60)
    print("TEST: Initial rays and the intensity threshold")
    print("=" * 60)

    config = TraceConfig(min_intensity=0.01)
    # Above the ray's own default threshold, below the pass threshold
    dim = Ray(Vector(0, 0), Vector(1, 0), intensity=0.005)
    assert not dim.terminated
    rays = Tracer([mirror_at(100)], config).run(initial_rays=[dim])
    assert rays == [dim]
    assert dim.termination_reason == TerminationReason.LOW_INTENSITY
    assert len(dim.history) == 1
    assert dim.min_intensity == 0.01
    print("  Ray below min_intensity terminated before any hit test - PASS")

    # Both 0.5 halves of the split fall below the threshold
    ray = Ray(Vector(0, 0), Vector(1, 0))
    rays = Tracer([BeamSplitter()], TraceConfig(min_intensity=0.6)).run(initial_rays=[ray])
    assert rays == [ray]
    assert ray.termination_reason == 'absorbed_beam_splitter'
    print("  Children of an initial ray obey the pass threshold - PASS")


def test_spawn_failure_is_reported():
    """spawn_child returns None for invalid children instead of raising."""
    print("\n" + "=" * 60)
    print("TEST: Failed child construction")
    print("=" * 60)

    mirror = PlaneMirror()
    parent = Ray(Vector(0, 0), Vector(1, 0))
    assert mirror.spawn_child(parent, Vector(100, 0), Vector(-1, 0), intensity=-5.0) is None
    assert mirror.spawn_child(parent, Vector(100, 0), Vector(0, 0)) is None
    child = mirror.spawn_child(parent, Vector(100, 0), Vector(-1, 0))
    assert child is not None
    assert_close(child.origin.x, 100.0 - 1e-6, 1e-12, "origin offset")
    print("  Invalid children -> None, valid child offset by HIT_EPSILON - PASS")


# =============================================================================
# SCENE
# =============================================================================

def test_scene_retrace():
    """retrace() traces only when dirty."""
    print("\n" + "=" * 60)
    print("TEST: Scene dirty flag")
    print("=" * 60)

    scene = Scene()
    scene.add_object(PointSource(json_obj={'numRays': 1}))
    mirror = scene.add_object(PlaneMirror())
    assert scene.dirty
    assert mirror.scene is scene

    first = scene.retrace()
    assert len(first) == 2 and not scene.dirty
    assert scene.retrace() is first
    print("  Clean scene returns the cached rays - PASS")

    mirror.reflectivity = 0.0
    scene.mark_dirty()
    second = scene.retrace()
    assert second is not first
    assert len(second) == 1
    assert second[0].termination_reason == 'absorbed_mirror'
    print("  mark_dirty() triggers a new pass - PASS")

    assert scene.bounds() == (0.0, -50.0, 100.0, 50.0)
    assert scene.optical_objs == [mirror]
    assert len(scene.sources) == 1
    mirror.name = 'M1'
    assert scene.get_object_by_name('M1') is mirror
    scene.remove_object(mirror)
    assert scene.dirty and len(scene.objs) == 1
    scene.clear()
    assert scene.bounds() is None and scene.rays == []
    assert scene.get_display_name().startswith('Scene_')
    print("  bounds / lookup / remove / clear - PASS")


def test_element_factory_and_parameters():
    """create_element() and parameter validation."""
    print("\n" + "=" * 60)
    print("TEST: Element factory")
    print("=" * 60)

    mirror = create_element({'type': 'PlaneMirror', 'name': 'M', 'reflectivity': 0.8})
    assert isinstance(mirror, PlaneMirror)
    assert mirror.name == 'M' and mirror.reflectivity == 0.8
    assert mirror.serialize() == {'type': 'PlaneMirror', 'reflectivity': 0.8}
    print("  create_element and serialize - PASS")

    for bad in ({'type': 'Teleporter'}, {'type': 'PlaneMirror', 'colour': 'red'},
                {'type': 'PlaneMirror', 'reflectivity': 1.5}):
        try:
            create_element(bad)
        except ValueError:
            continue
        raise AssertionError(f"{bad} should be rejected")
    print("  Unknown type, unknown key and out-of-range value rejected - PASS")

    source = LineSource()
    rays = source.generate_rays()
    assert len(rays) == 11
    assert_close(sum(r.intensity for r in rays), 1.0, 1e-9, "brightness split")
    assert all(abs(r.direction.x - 1.0) < 1e-12 for r in rays)
    assert LineSource(json_obj={'enabled': False}).generate_rays() == []
    print("  LineSource emits 11 rays along +x, disabled source emits none - PASS")

    for source_cls in (PointSource, FanSource, LineSource):
        for count in (0, -3):
            try:
                source_cls(json_obj={'numRays': count})
            except ValueError:
                continue
            raise AssertionError(f"{source_cls.__name__} accepted numRays={count}")
    print("  numRays below 1 rejected by every source - PASS")

    mirror.move(10, 0)
    assert mirror.geometry['p1'].x == 110.0
    print("  Geometry cache rebuilt after move() - PASS")


# =============================================================================
# MAIN
# =============================================================================

def run_all_tests():
    """Run all tests and report results."""
    print("\n" + "=" * 78)
    print("TRACER TESTS")
    print("=" * 78)

    tests = [
        ("Single mirror scenario", test_single_mirror_scenario),
        ("Law of reflection", test_reflection_law_random),
        ("Every ray is terminated", test_termination_is_total),
        ("Facing mirrors", test_two_facing_mirrors_stop_at_max_bounces),
        ("Iteration cap", test_iteration_cap),
        ("Forgetful element", test_forgetful_element_absorbs),
        ("Equal-distance tie-break", test_equal_distance_tie_break),
        ("Empty scene", test_empty_scene_extension),
        ("Guarded initial rays", test_guarded_initial_rays),
        ("Initial rays and min_intensity", test_initial_rays_use_pass_threshold),
        ("Failed child construction", test_spawn_failure_is_reported),
        ("Scene dirty flag", test_scene_retrace),
        ("Element factory", test_element_factory_and_parameters),
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
