"""Thin-lens camera model with depth of field.

The camera is positioned with look-at parameters (lookfrom, lookat, vup) and
builds an orthonormal basis from them:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the focus plane, focus_dist in front of the eye.
Rays start at a random point on a lens disc of radius aperture / 2 centered
at the eye, so only geometry on the focus plane is sharp. With a zero
aperture every ray starts at the eye and the camera behaves like a pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(3.0, 3.0, 2.0),
    ...     lookat=(0.0, 0.0, -1.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=2.0,
    ...     focus_dist=5.196,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5, 0)  # Ray through image center, stream 0
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np
import taichi as ti

from glint.core.ray import Ray, make_ray, vec3
from glint.core.sampling import uniform, uniform_in_unit_disc

logger = logging.getLogger(__name__)

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        lookfrom: Camera position (the eye) in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_dist: Distance from the eye to the plane in perfect focus.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float = 1.0

    def validate(self) -> None:
        """Check the parameters describe a usable camera.

        Raises:
            ValueError: If any parameter is out of range or the view
                direction is degenerate.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")

        view = np.asarray(self.lookfrom, dtype=np.float64) - np.asarray(self.lookat, dtype=np.float64)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")

    def to_dict(self) -> dict[str, Any]:
        """Export the camera to a dictionary (for JSON serialization)."""
        data = asdict(self)
        for key in ("lookfrom", "lookat", "vup"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ThinLensCamera":
        """Build a camera from a dictionary, using defaults for missing keys.

        When focus_dist is absent the camera focuses on the lookat point.

        Raises:
            ValueError: If a vector does not have 3 numeric components or a
                scalar is not a number.
        """
        defaults = cls()
        lookfrom = _vector_param(data, "lookfrom", defaults.lookfrom)
        lookat = _vector_param(data, "lookat", defaults.lookat)
        if "focus_dist" in data:
            focus_dist = _scalar_param(data, "focus_dist", defaults.focus_dist)
        else:
            focus_dist = float(np.linalg.norm(np.subtract(lookfrom, lookat)))

        return cls(
            lookfrom=lookfrom,
            lookat=lookat,
            vup=_vector_param(data, "vup", defaults.vup),
            vfov=_scalar_param(data, "vfov", defaults.vfov),
            aspect_ratio=_scalar_param(data, "aspect_ratio", defaults.aspect_ratio),
            aperture=_scalar_param(data, "aperture", defaults.aperture),
            focus_dist=focus_dist,
        )


def _as_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"camera {key} must be a number, got {value!r}")
    return float(value)


def _scalar_param(data: dict[str, Any], key: str, default: float) -> float:
    return _as_number(data.get(key, default), key)


def _vector_param(
    data: dict[str, Any], key: str, default: tuple[float, float, float]
) -> tuple[float, float, float]:
    value = data.get(key, default)
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"camera {key} must be a list of 3 numbers, got {value!r}")
    x, y, z = (_as_number(c, key) for c in value)
    return (x, y, z)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (the eye, center of the lens)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis and the viewport spanned on the focus
    plane, and stores them in Taichi fields for use by get_ray. Must be
    called before rendering and whenever the camera changes.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera parameters are invalid.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0

    logger.debug(
        "Camera at %s looking at %s, vfov=%.1f, aperture=%.3f, focus_dist=%.3f",
        camera.lookfrom,
        camera.lookat,
        camera.vfov,
        camera.aperture,
        camera.focus_dist,
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(su: ti.f32, sv: ti.f32, stream: ti.i32) -> Ray:
    """Generate a primary ray through normalized image coordinates.

    The coordinates run across the viewport: su = 0 is the left edge and
    su = 1 the right edge; sv = 0 is the bottom edge and sv = 1 the top.

    Args:
        su: Horizontal coordinate (left to right).
        sv: Vertical coordinate (bottom to top).
        stream: Random stream for the lens sample.

    Returns:
        A Ray starting on the lens disc and aimed at the matching point on
        the focus plane. The direction is not normalized.
    """
    rd = _lens_radius[None] * uniform_in_unit_disc(stream)
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None]
        + su * _viewport_horizontal[None]
        + sv * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32, stream: ti.i32) -> Ray:
    """Generate a jittered primary ray for pixel (row, col).

    Rows count from the top of the image. The pixel position plus a uniform
    offset in [0, 1) on each axis is divided by (dimension - 1), floored at
    1, so the first and last columns map to the viewport edges.

    Example:
        @ti.kernel
        def render():
            for row, col in image:
                ray = get_ray_jittered(row, col, width, height, row * width + col)
    """
    jitter_u = uniform(stream)
    jitter_v = uniform(stream)

    su = (ti.cast(col, ti.f32) + jitter_u) / ti.cast(ti.max(width - 1, 1), ti.f32)
    sv = 1.0 - (ti.cast(row, ti.f32) + jitter_v) / ti.cast(ti.max(height - 1, 1), ti.f32)

    return get_ray(su, sv, stream)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (the eye) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        as float tuples, and the lens_radius.
    """
    info: dict[str, Any] = {}
    for name, vec_field in (
        ("origin", _camera_origin),
        ("u", _camera_u),
        ("v", _camera_v),
        ("w", _camera_w),
        ("horizontal", _viewport_horizontal),
        ("vertical", _viewport_vertical),
        ("lower_left", _lower_left_corner),
    ):
        vec = vec_field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    info["lens_radius"] = float(_lens_radius[None])
    return info
