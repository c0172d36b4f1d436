"""Unit tests for the dielectric material.

Tests cover:
- White attenuation and no absorption
- Refraction ratio and normal orientation by face
- IOR 1.0 leaves rays unchanged except for rare Schlick reflections
- Normal incidence passes straight through
- Total internal reflection
- Material registry and validation
"""

import math

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 4000


def _scatter_many(ior, incoming, normal=(0.0, 1.0, 0.0), front_face=1, n=N_SAMPLES):
    """Scatter n rays through a dielectric surface, one stream per ray."""
    from glint.core.ray import make_ray, vec3
    from glint.geometry.sphere import HitRecord
    from glint.materials.dielectric import scatter_dielectric

    scattered = ti.field(dtype=ti.i32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def scatter_kernel(eta: ti.f32, d: vec3, nrm: vec3, front: ti.i32):
        for i in range(n):
            hit = HitRecord(hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=nrm, front_face=front)
            rec = scatter_dielectric(eta, make_ray(-d, d), hit, i)
            scattered[i] = rec.scattered
            directions[i] = rec.direction
            attenuations[i] = rec.attenuation

    scatter_kernel(ior, vec3(*incoming), vec3(*normal), front_face)
    return scattered.to_numpy(), directions.to_numpy(), attenuations.to_numpy()


class TestDielectricScatter:
    """Tests for scatter_dielectric."""

    def test_never_absorbs_and_attenuation_is_white(self):
        """Test glass scatters every ray with white attenuation."""
        scattered, _, attenuations = _scatter_many(1.5, (0.3, -1.0, 0.2))
        assert np.all(scattered == 1)
        np.testing.assert_allclose(attenuations, 1.0)

    def test_ior_one_leaves_direction_unchanged(self):
        """Test matched indices pass the normalized direction straight through."""
        incoming = np.array([0.4, -1.0, 0.1])
        unit = incoming / np.linalg.norm(incoming)
        _, directions, _ = _scatter_many(1.0, tuple(incoming))
        unchanged = np.all(np.abs(directions - unit) < 1e-5, axis=1)
        # Schlick reflectance at eta = 1 is (1 - cos)^5, tiny at this angle
        assert unchanged.mean() >= 0.95

    def test_normal_incidence_transmits_straight(self):
        """Test head-on rays refract without bending."""
        _, directions, _ = _scatter_many(1.5, (0.0, -1.0, 0.0))
        transmitted = directions[:, 1] < 0.0
        np.testing.assert_allclose(directions[transmitted], np.tile([0.0, -1.0, 0.0], (transmitted.sum(), 1)), atol=1e-5)
        # R0 for glass is 0.04
        assert (~transmitted).mean() == pytest.approx(0.04, abs=0.015)

    def test_front_face_bends_toward_normal(self):
        """Test entering glass from outside uses the ratio 1/ior."""
        theta_i = math.radians(45.0)
        incoming = (math.sin(theta_i), -math.cos(theta_i), 0.0)
        _, directions, _ = _scatter_many(1.5, incoming, front_face=1)
        transmitted = directions[directions[:, 1] < 0.0]
        expected_sin = math.sin(theta_i) / 1.5
        np.testing.assert_allclose(transmitted[:, 0], expected_sin, atol=1e-5)

    def test_back_face_total_internal_reflection(self):
        """Test leaving glass beyond the critical angle always reflects."""
        theta_i = math.radians(60.0)
        # Inside the sphere: the ray travels along the outward normal (0, 1, 0)
        incoming = (math.sin(theta_i), math.cos(theta_i), 0.0)
        scattered, directions, _ = _scatter_many(1.5, incoming, front_face=0, n=256)
        assert np.all(scattered == 1)
        expected = np.array([math.sin(theta_i), -math.cos(theta_i), 0.0])
        np.testing.assert_allclose(directions, np.tile(expected, (256, 1)), atol=1e-5)


class TestDielectricHelpers:
    """Tests for the reflectance helpers."""

    def test_will_reflect_and_fresnel(self):
        """Test TIR detection and head-on reflectance."""
        from glint.core.ray import make_ray, vec3
        from glint.geometry.sphere import HitRecord
        from glint.materials.dielectric import fresnel_reflectance, will_reflect

        tir = ti.field(dtype=ti.i32, shape=2)
        reflectance = ti.field(dtype=ti.f32, shape=())
        s60 = math.sin(math.radians(60.0))
        c60 = math.cos(math.radians(60.0))

        @ti.kernel
        def test_kernel():
            up = vec3(0.0, 1.0, 0.0)
            inside = HitRecord(hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=up, front_face=0)
            outside = HitRecord(hit=1, t=1.0, point=vec3(0.0, 0.0, 0.0), normal=up, front_face=1)
            tir[0] = will_reflect(1.5, make_ray(vec3(0.0, 0.0, 0.0), vec3(s60, c60, 0.0)), inside)
            tir[1] = will_reflect(1.5, make_ray(vec3(0.0, 0.0, 0.0), vec3(s60, -c60, 0.0)), outside)
            reflectance[None] = fresnel_reflectance(1.5, make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, -1.0, 0.0)), outside)

        test_kernel()
        assert tir[0] == 1
        assert tir[1] == 0
        assert reflectance[None] == pytest.approx(0.04, abs=1e-5)


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_count(self):
        """Test materials are appended with sequential indices."""
        from glint.materials.dielectric import add_dielectric_material, get_dielectric_material_count

        assert add_dielectric_material(1.5) == 0
        assert add_dielectric_material(1.33) == 1
        assert get_dielectric_material_count() == 2

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior(self, ior):
        """Test non-positive IOR raises ValueError."""
        from glint.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(ior)
