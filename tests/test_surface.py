import dataclasses
import math

import numpy as np
import pytest

from graytrace import Collider, Ray, Reflection, Surface


def test_sphere_world_hit_and_samples():
    s = Surface.sphere([1, 2, 3], 2.0)
    hit = s.intersect(Ray([1, 2, 10], [0, 0, -1]))
    assert hit is not None
    assert hit.t == pytest.approx(5.0)
    assert np.allclose(hit.position, [1, 2, 5])
    assert np.allclose(hit.normal, [0, 0, 1])
    assert s.intersect(Ray([5, 2, 10], [0, 0, -1])) is None

    rng = np.random.default_rng(0)
    for _ in range(200):
        smp = s.sample(rng)
        r = smp.position - np.array([1, 2, 3])
        assert np.linalg.norm(r) == pytest.approx(2.0)
        assert np.allclose(smp.normal, r / 2.0)


def test_disk_world_hit():
    s = Surface.disk([0, 0, 1], 2.0, [0, 0, -1])
    hit = s.intersect(Ray([0, 0, 0], [0, 0, 1]))
    assert hit is not None
    assert hit.t == pytest.approx(1.0)
    assert np.allclose(hit.normal, [0, 0, -1])
    assert s.intersect(Ray([1.5, 0, 0], [0, 0, 1])) is not None
    assert s.intersect(Ray([2.5, 0, 0], [0, 0, 1])) is None


def test_rectangle_world_extent():
    # width 2 along x, height 4 along z cross x = y
    s = Surface.rectangle([0, 0, 0], 2.0, 4.0, [0, 0, 1], [1, 0, 0])
    assert s.intersect(Ray([0.9, 1.9, 1], [0, 0, -1])) is not None
    assert s.intersect(Ray([1.1, 0.0, 1], [0, 0, -1])) is None
    assert s.intersect(Ray([0.0, 2.1, 1], [0, 0, -1])) is None

    rng = np.random.default_rng(1)
    for _ in range(200):
        smp = s.sample(rng)
        assert abs(smp.position[0]) <= 1.0
        assert abs(smp.position[1]) <= 2.0
        assert smp.position[2] == pytest.approx(0.0)
        assert np.allclose(smp.normal, [0, 0, 1])


def test_cylinder_world_hit():
    s = Surface.cylinder([0, 0, 0], 2.0, 4.0, [0, 0, 1])
    hit = s.intersect(Ray([0, 0, 0], [1, 0, 0]))
    assert hit is not None
    assert hit.t == pytest.approx(2.0)
    assert np.allclose(hit.normal, [1, 0, 0])

    hit = s.intersect(Ray([0, 0, 0], [1, 0, 0.5]))
    assert hit is not None
    assert np.allclose(hit.position, [2, 0, 1])

    # above the open end
    assert s.intersect(Ray([0, 0, 0], [1, 0, 2])) is None


def test_cone_world_hit_normal():
    s = Surface.cone([0, 0, 0], 1.0, 2.0, [0, 0, 1])
    hit = s.intersect(Ray([5, 0, 1], [-1, 0, 0]))
    assert hit is not None
    assert hit.t == pytest.approx(4.5)
    assert np.allclose(hit.position, [0.5, 0, 1])
    assert np.allclose(hit.normal, np.array([2.0, 0.0, 1.0]) / math.sqrt(5.0))


def test_defaults_and_property_copies():
    s = Surface.sphere([0, 0, 0], 1.0)
    assert s.collider == Collider.SPHERE
    assert s.emissivity == 1.0
    assert s.reflection == Reflection.DIFFUSE

    gray = s.gray_body(0.3).specular()
    assert gray.emissivity == 0.3
    assert gray.is_specular
    assert gray.transform is s.transform
    # the original is untouched
    assert s.emissivity == 1.0
    assert not s.is_specular
    assert not gray.diffuse().is_specular


def test_surfaces_are_immutable():
    s = Surface.disk([0, 0, 0], 1.0, [0, 0, 1])
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.emissivity = 0.5


@pytest.mark.parametrize("e", [-0.1, 1.5])
def test_emissivity_out_of_range(e):
    with pytest.raises(ValueError):
        Surface.sphere([0, 0, 0], 1.0).gray_body(e)


def test_degenerate_orientation_rejected():
    with pytest.raises(ValueError):
        Surface.disk([0, 0, 0], 1.0, [0, 0, 0])
    with pytest.raises(ValueError):
        Surface.rectangle([0, 0, 0], 1.0, 1.0, [0, 0, 1], [0, 0, 1])
