"""Unit tests for the Lambertian material.

Tests cover:
- Scatter direction in the hemisphere around the normal
- Attenuation equals albedo, never absorbed
- Scattered ray originates at the hit point
- Approximately cosine-weighted distribution
- Material registry
"""

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 10000


def _scatter_many(albedo=(0.5, 0.3, 0.2), normal=(0.0, 1.0, 0.0), n=N_SAMPLES):
    """Scatter n rays off a Lambertian surface, one stream per ray."""
    from glint.core.ray import make_ray, vec3
    from glint.geometry.sphere import HitRecord
    from glint.materials.lambertian import scatter_lambertian

    scattered = ti.field(dtype=ti.i32, shape=n)
    origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def scatter_kernel(a: vec3, nrm: vec3):
        for i in range(n):
            hit = HitRecord(hit=1, t=1.0, point=vec3(1.0, 2.0, 3.0), normal=nrm, front_face=1)
            ray = make_ray(vec3(1.0, 3.0, 3.0), -nrm)
            rec = scatter_lambertian(a, ray, hit, i)
            scattered[i] = rec.scattered
            origins[i] = rec.origin
            directions[i] = rec.direction
            attenuations[i] = rec.attenuation

    scatter_kernel(vec3(*albedo), vec3(*normal))
    return (
        scattered.to_numpy(),
        origins.to_numpy(),
        directions.to_numpy(),
        attenuations.to_numpy(),
    )


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_always_scatters_with_albedo(self):
        """Test every sample scatters with attenuation equal to albedo."""
        scattered, _, _, attenuations = _scatter_many(albedo=(0.5, 0.3, 0.2))
        assert np.all(scattered == 1)
        np.testing.assert_allclose(attenuations, np.tile([0.5, 0.3, 0.2], (N_SAMPLES, 1)), atol=1e-6)

    def test_origin_is_hit_point(self):
        """Test the scattered ray starts at the hit point."""
        _, origins, _, _ = _scatter_many()
        np.testing.assert_allclose(origins, np.tile([1.0, 2.0, 3.0], (N_SAMPLES, 1)), atol=1e-6)

    def test_directions_in_upper_hemisphere(self):
        """Test normal + unit vector never points below the surface."""
        _, _, directions, _ = _scatter_many(normal=(0.0, 1.0, 0.0))
        assert np.all(directions[:, 1] >= -1e-6)

    def test_cosine_weighted(self):
        """Test the mean cosine with the normal is 2/3."""
        _, _, directions, _ = _scatter_many(normal=(0.0, 0.0, 1.0))
        lengths = np.linalg.norm(directions, axis=1)
        cosines = directions[:, 2] / lengths
        assert cosines.mean() == pytest.approx(2.0 / 3.0, abs=0.02)

    def test_degenerate_direction_falls_back_to_normal(self):
        """Test directions are never near zero."""
        _, _, directions, _ = _scatter_many()
        assert np.all(np.linalg.norm(directions, axis=1) >= 1e-8)


class TestLambertianRegistry:
    """Tests for the Lambertian material registry."""

    def test_add_and_get(self):
        """Test materials are stored and retrievable by index."""
        from glint.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
            get_lambertian_material_count,
        )

        assert add_lambertian_material((0.1, 0.2, 0.3)) == 0
        assert add_lambertian_material((0.4, 0.5, 0.6)) == 1
        assert get_lambertian_material_count() == 2

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def read():
            result[None] = get_lambertian_albedo(1)

        read()
        assert tuple(result[None].to_numpy()) == pytest.approx((0.4, 0.5, 0.6))

    @pytest.mark.parametrize("albedo", [(-0.1, 0.5, 0.5), (0.5, 1.01, 0.5)])
    def test_albedo_out_of_range(self, albedo):
        """Test albedo components outside [0, 1] raise ValueError."""
        from glint.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError):
            add_lambertian_material(albedo)

    def test_clear(self):
        """Test clearing resets the count."""
        from glint.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.5, 0.5, 0.5))
        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0
