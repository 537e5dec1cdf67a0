import math

import numpy as np
import pytest

from graytrace.utils.colliders import (
    CONE,
    CYLINDER,
    DISK,
    RECTANGLE,
    SPHERE,
    T_EPS,
    collider_intersect,
    collider_sample,
    cone_intersect,
    cylinder_intersect,
    disk_intersect,
    rectangle_intersect,
    sphere_intersect,
)
from graytrace.utils.sampling import diffuse_direction, specular_direction

KINDS = [SPHERE, DISK, CYLINDER, RECTANGLE, CONE]


def v(*xs):
    return np.array(xs, dtype=np.float64)


def on_surface(kind, p, tol=1e-9):
    x, y, z = p
    if kind == SPHERE:
        return abs(x*x + y*y + z*z - 1.0) < tol
    if kind == DISK:
        return abs(z) < tol and x*x + y*y < 1.0
    if kind == RECTANGLE:
        return abs(z) < tol and -0.5 < x < 0.5 and -0.5 < y < 0.5
    if kind == CYLINDER:
        return abs(x*x + y*y - 1.0) < tol and -0.5 - tol <= z <= 0.5 + tol
    if kind == CONE:
        return abs((1.0 - z)**2 - (x*x + y*y)) < tol and 0.0 < z < 1.0
    raise AssertionError(kind)


def random_unit(gen):
    u = gen.normal(size=3)
    return u / np.linalg.norm(u)


@pytest.mark.parametrize("kind", KINDS)
def test_rays_aimed_at_surface_points_hit_the_surface(kind):
    # Aim rays from a few units away at points drawn on the primitive; the
    # nearest hit must lie on the primitive (at the target or in front of it).
    rng = np.random.default_rng(7)
    gen = np.random.default_rng(8)
    for _ in range(500):
        target, _n = collider_sample(kind, rng)
        origin = target + 3.0 * random_unit(gen)
        d = target - origin
        hit, t, p, n = collider_intersect(kind, origin, d)
        assert hit
        assert t > T_EPS
        assert t <= 1.0 + 1e-9
        assert on_surface(kind, p, tol=1e-7)
        assert abs(np.linalg.norm(n) - 1.0) < 1e-12
        assert np.allclose(p, origin + t * d)


@pytest.mark.parametrize("kind", KINDS)
def test_samples_lie_on_surface_with_unit_normals(kind):
    rng = np.random.default_rng(3)
    for _ in range(1000):
        p, n = collider_sample(kind, rng)
        assert on_surface(kind, p, tol=1e-9)
        assert abs(np.linalg.norm(n) - 1.0) < 1e-12


def test_sphere_hit_from_outside():
    hit, t, p, n = sphere_intersect(v(0, 0, 5), v(0, 0, -1))
    assert hit
    assert t == pytest.approx(4.0)
    assert np.allclose(p, [0, 0, 1])
    assert np.allclose(n, [0, 0, 1])


def test_sphere_hit_from_inside_uses_far_root():
    hit, t, p, n = sphere_intersect(v(0, 0, 0), v(1, 0, 0))
    assert hit
    assert t == pytest.approx(1.0)
    assert np.allclose(n, [1, 0, 0])


def test_sphere_misses():
    # pointing away
    assert not sphere_intersect(v(0, 0, 5), v(0, 0, 1))[0]
    # passing beside
    assert not sphere_intersect(v(2, 0, 5), v(0, 0, -1))[0]
    # both roots beyond the far limit
    assert not sphere_intersect(v(0, 0, -200), v(0, 0, 1))[0]
    # zero direction
    assert not sphere_intersect(v(0, 0, 5), v(0, 0, 0))[0]


def test_sphere_ignores_own_surface_point():
    # starting on the surface and leaving outward must not self-intersect
    assert not sphere_intersect(v(0, 0, 1), v(0, 0, 1))[0]


def test_disk_hit_and_misses():
    hit, t, p, n = disk_intersect(v(0.3, 0.2, 2), v(0, 0, -1))
    assert hit
    assert t == pytest.approx(2.0)
    assert np.allclose(n, [0, 0, 1])

    # hit from below keeps the +Z normal
    hit, t, p, n = disk_intersect(v(0, 0, -1), v(0, 0, 1))
    assert hit and np.allclose(n, [0, 0, 1])

    # parallel to the plane
    hit, t, p, n = disk_intersect(v(0, 0, 1), v(1, 0, 0))
    assert not hit
    assert not math.isnan(t) and not np.any(np.isnan(p))
    # outside the rim
    assert not disk_intersect(v(1.0, 0.5, 1), v(0, 0, -1))[0]
    # behind the origin
    assert not disk_intersect(v(0, 0, 1), v(0, 0, 1))[0]


def test_rectangle_bounds_are_strict():
    assert rectangle_intersect(v(0.49, -0.49, 1), v(0, 0, -1))[0]
    assert not rectangle_intersect(v(0.5, 0.0, 1), v(0, 0, -1))[0]
    assert not rectangle_intersect(v(0.0, -0.5, 1), v(0, 0, -1))[0]
    assert not rectangle_intersect(v(0.0, 0.0, 1), v(0, 1, 0))[0]


def test_cylinder_from_inside_and_outside():
    hit, t, p, n = cylinder_intersect(v(0, 0, 0), v(1, 0, 0))
    assert hit
    assert t == pytest.approx(1.0)
    assert np.allclose(n, [1, 0, 0])

    hit, t, p, n = cylinder_intersect(v(-3, 0, 0.2), v(1, 0, 0))
    assert hit
    assert t == pytest.approx(2.0)
    assert np.allclose(p, [-1, 0, 0.2])
    assert np.allclose(n, [-1, 0, 0])


def test_cylinder_near_root_outside_height_falls_back_to_far_root():
    # Enters above the top rim, exits through the lateral surface
    o = v(-2, 0, 1.0)
    d = v(2, 0, -0.8)
    hit, t, p, n = cylinder_intersect(o, d)
    assert hit
    assert p[0] == pytest.approx(1.0)
    assert -0.5 <= p[2] <= 0.5


def test_cylinder_misses():
    # parallel to the axis: a == 0
    hit, t, p, n = cylinder_intersect(v(0.5, 0, 0), v(0, 0, 1))
    assert not hit
    assert not math.isnan(t)
    # above the open top
    assert not cylinder_intersect(v(-3, 0, 0.8), v(1, 0, 0))[0]
    # beside
    assert not cylinder_intersect(v(-3, 2, 0), v(1, 0, 0))[0]


def test_cone_hits():
    hit, t, p, n = cone_intersect(v(3, 0, 0.5), v(-1, 0, 0))
    assert hit
    assert t == pytest.approx(2.5)
    assert np.allclose(p, [0.5, 0, 0.5])
    assert np.allclose(n, np.array([1, 0, 1]) / math.sqrt(2))

    # from the inside through the base plane region
    hit, t, p, n = cone_intersect(v(0, 0, 0.25), v(1, 0, 0))
    assert hit
    assert p[0] == pytest.approx(0.75)


def test_cone_misses():
    # a == 0: direction on the cone's asymptotic slope
    hit, t, p, n = cone_intersect(v(3, 0, 0.5), v(1, 0, 1))
    assert not hit
    assert not math.isnan(t)
    # only the upper nappe (z > 1) is in the way
    assert not cone_intersect(v(3, 0, 1.5), v(-1, 0, 0))[0]
    # below the base
    assert not cone_intersect(v(3, 0, -0.5), v(-1, 0, 0))[0]


def test_diffuse_direction_is_cosine_weighted():
    rng = np.random.default_rng(11)
    n = v(0.0, 0.6, 0.8)
    cosines = []
    for _ in range(20000):
        d = diffuse_direction(n, rng)
        assert abs(np.linalg.norm(d) - 1.0) < 1e-12
        cosines.append(float(np.dot(d, n)))
    cosines = np.asarray(cosines)
    assert cosines.min() >= -1e-12
    # Lambertian: E[cos] = 2/3
    assert abs(cosines.mean() - 2.0 / 3.0) < 0.01


def test_specular_direction_mirrors_about_normal():
    d = specular_direction(v(1, 0, -1), v(0, 0, 1))
    assert np.allclose(d, [1, 0, 1])


def test_disk_sampling_is_area_uniform():
    rng = np.random.default_rng(5)
    r2 = [float(np.sum(collider_sample(DISK, rng)[0][:2] ** 2)) for _ in range(20000)]
    # E[r^2] = 1/2 for a uniform disk
    assert abs(np.mean(r2) - 0.5) < 0.01
