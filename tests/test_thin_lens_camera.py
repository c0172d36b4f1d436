"""Unit tests for the thin-lens camera module.

Tests cover:
- Camera setup and orthonormal basis computation
- Viewport geometry on the focus plane
- Ray generation with and without an aperture
- Jittered pixel mapping
- Parameter validation and dictionary conversion
"""

import math

import numpy as np
import pytest
import taichi as ti


def _make_camera(**overrides):
    from glint.camera.thin_lens import ThinLensCamera

    params = {
        "lookfrom": (0.0, 0.0, 0.0),
        "lookat": (0.0, 0.0, -1.0),
        "vup": (0.0, 1.0, 0.0),
        "vfov": 90.0,
        "aspect_ratio": 2.0,
        "aperture": 0.0,
        "focus_dist": 1.0,
    }
    params.update(overrides)
    return ThinLensCamera(**params)


def _generate_rays(su, sv, n=1):
    """Generate n rays through (su, sv), one stream per ray."""
    from glint.camera.thin_lens import get_ray

    origins = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def generate(u: ti.f32, v: ti.f32):
        for i in range(n):
            ray = get_ray(u, v, i)
            origins[i] = ray.origin
            directions[i] = ray.direction

    generate(su, sv)
    return origins.to_numpy(), directions.to_numpy()


class TestCameraSetup:
    """Tests for camera setup and basis computation."""

    def test_orthonormal_basis(self):
        """Test that u, v, w form an orthonormal basis for an oblique camera."""
        from glint.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_make_camera(lookfrom=(3.0, 3.0, 2.0), lookat=(0.0, 0.0, -1.0)))
        info = get_camera_info()
        basis = np.array([info["u"], info["v"], info["w"]])
        np.testing.assert_allclose(basis @ basis.T, np.eye(3), atol=1e-6)

    def test_basis_looking_down_negative_z(self):
        """Test basis vectors for the canonical view."""
        from glint.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_make_camera())
        info = get_camera_info()
        assert info["u"] == pytest.approx((1.0, 0.0, 0.0), abs=1e-6)
        assert info["v"] == pytest.approx((0.0, 1.0, 0.0), abs=1e-6)
        assert info["w"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)

    def test_viewport_on_focus_plane(self):
        """Test viewport spans scale with focus distance and FOV."""
        from glint.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_make_camera(vfov=90.0, aspect_ratio=2.0, focus_dist=3.0))
        info = get_camera_info()
        # height = 2 tan(45 deg) = 2, width = 4, both scaled by 3
        assert info["horizontal"] == pytest.approx((12.0, 0.0, 0.0), abs=1e-5)
        assert info["vertical"] == pytest.approx((0.0, 6.0, 0.0), abs=1e-5)
        assert info["lower_left"] == pytest.approx((-6.0, -3.0, -3.0), abs=1e-5)

    def test_lens_radius_is_half_aperture(self):
        """Test the lens radius is aperture / 2."""
        from glint.camera.thin_lens import get_camera_info, setup_camera

        setup_camera(_make_camera(aperture=2.0))
        assert get_camera_info()["lens_radius"] == pytest.approx(1.0)


class TestRayGeneration:
    """Tests for get_ray."""

    def test_center_ray_points_at_target(self):
        """Test the ray through the center of the viewport aims at lookat."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera())
        origins, directions = _generate_rays(0.5, 0.5)
        np.testing.assert_allclose(origins[0], [0.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(directions[0], [0.0, 0.0, -1.0], atol=1e-6)

    def test_corner_rays(self):
        """Test (0, 0) maps to the lower-left and (1, 1) to the upper-right."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera())
        _, lower_left = _generate_rays(0.0, 0.0)
        _, upper_right = _generate_rays(1.0, 1.0)
        np.testing.assert_allclose(lower_left[0], [-2.0, -1.0, -1.0], atol=1e-6)
        np.testing.assert_allclose(upper_right[0], [2.0, 1.0, -1.0], atol=1e-6)

    def test_direction_not_normalized(self):
        """Test directions reach the focus plane rather than being unit length."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera(focus_dist=4.0))
        _, directions = _generate_rays(0.5, 0.5)
        assert np.linalg.norm(directions[0]) == pytest.approx(4.0, abs=1e-5)

    def test_zero_aperture_origins_at_eye(self):
        """Test a pinhole camera starts every ray at the eye."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera(lookfrom=(1.0, 2.0, 3.0), lookat=(1.0, 2.0, 0.0)))
        origins, _ = _generate_rays(0.3, 0.7, n=256)
        np.testing.assert_allclose(origins, np.tile([1.0, 2.0, 3.0], (256, 1)), atol=1e-6)

    def test_aperture_origins_on_lens_disc(self):
        """Test ray origins lie in the lens disc perpendicular to the view."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera(aperture=1.0, focus_dist=2.0))
        origins, _ = _generate_rays(0.5, 0.5, n=2048)
        assert np.all(np.abs(origins[:, 2]) < 1e-6)
        radii = np.linalg.norm(origins[:, :2], axis=1)
        assert np.all(radii <= 0.5 + 1e-6)
        assert radii.max() > 0.4

    def test_rays_converge_on_focus_plane(self):
        """Test every lens sample through (su, sv) meets at the same focus point."""
        from glint.camera.thin_lens import setup_camera

        setup_camera(_make_camera(aperture=1.0, focus_dist=2.0))
        origins, directions = _generate_rays(0.25, 0.75, n=512)
        targets = origins + directions
        np.testing.assert_allclose(targets, np.tile(targets[0], (512, 1)), atol=1e-5)
        assert targets[0][2] == pytest.approx(-2.0, abs=1e-6)


class TestJitteredRays:
    """Tests for get_ray_jittered."""

    def test_pixel_mapping(self):
        """Test jittered rays for a pixel stay within its viewport cell."""
        from glint.camera.thin_lens import get_ray_jittered, setup_camera

        setup_camera(_make_camera())
        width, height = 5, 3
        n = 256
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def generate():
            for i in range(n):
                directions[i] = get_ray_jittered(0, 0, width, height, i).direction

        generate()
        d = directions.to_numpy()
        # Top-left pixel: su in [0, 1/4), sv in (1/2, 1]
        su = (d[:, 0] + 2.0) / 4.0
        sv = (d[:, 1] + 1.0) / 2.0
        assert np.all((su >= 0.0) & (su < 0.25 + 1e-6))
        assert np.all((sv > 0.5 - 1e-6) & (sv <= 1.0 + 1e-6))


class TestCameraConfig:
    """Tests for validation and dictionary conversion."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"aspect_ratio": 0.0},
            {"aperture": -1.0},
            {"focus_dist": 0.0},
            {"lookat": (0.0, 0.0, 0.0)},
            {"vup": (0.0, 0.0, 1.0)},
        ],
    )
    def test_invalid_parameters(self, overrides):
        """Test invalid parameters raise ValueError during setup."""
        from glint.camera.thin_lens import setup_camera

        with pytest.raises(ValueError):
            setup_camera(_make_camera(**overrides))

    def test_dict_round_trip(self):
        """Test to_dict and from_dict preserve every field."""
        from glint.camera.thin_lens import ThinLensCamera

        camera = _make_camera(lookfrom=(3.0, 3.0, 2.0), aperture=2.0, focus_dist=5.0)
        assert ThinLensCamera.from_dict(camera.to_dict()) == camera

    def test_from_dict_focuses_on_lookat_by_default(self):
        """Test a missing focus distance focuses on the target."""
        from glint.camera.thin_lens import ThinLensCamera

        camera = ThinLensCamera.from_dict({"lookfrom": [3, 3, 2], "lookat": [0, 0, -1]})
        assert camera.focus_dist == pytest.approx(math.sqrt(27.0))
        assert camera.lookfrom == (3.0, 3.0, 2.0)
