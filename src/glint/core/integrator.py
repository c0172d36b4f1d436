"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimate for a single ray and the kernel
that accumulates one jittered sample per pixel into the render target.

A path bounces off surfaces according to their materials until it escapes
to the sky, is absorbed, or exhausts its bounce budget. The estimate is the
sky color seen by the escaping ray multiplied by every attenuation collected
on the way; absorbed and exhausted paths contribute black.

Taichi functions cannot recurse, so the path is followed in a loop carrying
the running product of attenuations. For any sequence of random draws the
result equals the recursive form
    trace(ray, n) = attenuation * trace(scattered, n - 1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.core.integrator import render_image, setup_render_target
    >>> from glint.scene.presets import create_default_scene
    >>> from glint.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(num_samples=32)
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from glint.camera.thin_lens import get_ray_jittered
from glint.core.ray import Ray, make_ray
from glint.core.sampling import MAX_STREAMS, ensure_streams_seeded
from glint.geometry.sphere import HitRecord
from glint.materials.dielectric import scatter_dielectric_by_id
from glint.materials.lambertian import scatter_lambertian_by_id
from glint.materials.material import ScatterRecord, make_absorbed
from glint.materials.metal import scatter_metal_by_id
from glint.scene.intersection import SceneHitRecord, intersect_scene
from glint.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Scattered rays ignore hits closer than this to avoid self-intersection
T_MIN = 0.001
T_MAX = math.inf

# Bounce budget of the reference render
DEFAULT_MAX_BOUNCES = 40

# Sky color at the zenith; the horizon is white
SKY_BLUE = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all samples per pixel, indexed [row, col] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Number of completed sample passes
_sample_count = ti.field(dtype=ti.i32, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the accumulator.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width * height > MAX_STREAMS:
        raise ValueError(f"Image has more pixels than random streams ({MAX_STREAMS})")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()
    ensure_streams_seeded()
    logger.debug("Render target set to %dx%d", width, height)


def clear_render_target() -> None:
    """Clear the accumulator and the sample count."""
    _color_buffer.fill(0.0)
    _sample_count[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Sky and Material Dispatch
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Blends white at the horizon into sky blue overhead by the height of the
    normalized direction.
    """
    t = 0.5 * (tm.normalize(direction).y + 1.0)
    return (1.0 - t) * vec3(1.0, 1.0, 1.0) + t * SKY_BLUE


@ti.func
def _to_hit_record(rec: SceneHitRecord) -> HitRecord:
    """Drop the material ID from a scene hit record."""
    return HitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
    )


@ti.func
def _scatter_material(ray: Ray, rec: SceneHitRecord, stream: ti.i32) -> ScatterRecord:
    """Dispatch to the scattering function of the hit material.

    Unknown material IDs absorb the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)
    hit = _to_hit_record(rec)

    result = make_absorbed()
    if mat_type == int(MaterialType.LAMBERTIAN):
        result = scatter_lambertian_by_id(type_index, ray, hit, stream)
    elif mat_type == int(MaterialType.METAL):
        result = scatter_metal_by_id(type_index, ray, hit, stream)
    elif mat_type == int(MaterialType.DIELECTRIC):
        result = scatter_dielectric_by_id(type_index, ray, hit, stream)
    return result


# =============================================================================
# Path Tracing Core
# =============================================================================

# Longest path trace_path() can record
MAX_RECORDED_BOUNCES = 64

# Surface interactions of the last trace_path() call, in path order
_path_length = ti.field(dtype=ti.i32, shape=())
_path_t = ti.field(dtype=ti.f32, shape=MAX_RECORDED_BOUNCES)
_path_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECORDED_BOUNCES)
_path_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECORDED_BOUNCES)
_path_material_ids = ti.field(dtype=ti.i32, shape=MAX_RECORDED_BOUNCES)
_path_front_faces = ti.field(dtype=ti.i32, shape=MAX_RECORDED_BOUNCES)
_path_scattered = ti.field(dtype=ti.i32, shape=MAX_RECORDED_BOUNCES)
_path_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECORDED_BOUNCES)
_path_attenuations = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RECORDED_BOUNCES)


@ti.func
def _follow_path(ray: Ray, max_bounces: ti.i32, stream: ti.i32, record: ti.template()) -> vec3:
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    remaining = max_bounces

    # Serial loop: each bounce depends on the previous scatter
    active = 1
    while active == 1:
        if remaining <= 0:
            active = 0
        else:
            rec = intersect_scene(current, T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * sky_color(current.direction)
                active = 0
            else:
                scatter = _scatter_material(current, rec, stream)
                if ti.static(record):
                    i = _path_length[None]
                    _path_t[i] = rec.t
                    _path_points[i] = rec.point
                    _path_normals[i] = rec.normal
                    _path_material_ids[i] = rec.material_id
                    _path_front_faces[i] = rec.front_face
                    _path_scattered[i] = scatter.scattered
                    _path_directions[i] = scatter.direction
                    _path_attenuations[i] = scatter.attenuation
                    _path_length[None] = i + 1
                if scatter.scattered == 0:
                    active = 0
                else:
                    throughput *= scatter.attenuation
                    current = make_ray(scatter.origin, scatter.direction)
                    remaining -= 1

    return color


@ti.func
def trace(ray: Ray, max_bounces: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to follow. Its direction need not be unit length.
        max_bounces: Number of surface interactions allowed. Zero or less
            returns black without probing the scene.
        stream: Random stream used by every scattering event on the path.

    Returns:
        The radiance estimate (RGB), unclamped.
    """
    return _follow_path(ray, max_bounces, stream, False)


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_bounces: ti.i32, stream: ti.i32) -> vec3:
    return trace(make_ray(origin, direction), max_bounces, stream)


@ti.kernel
def _record_path_kernel(origin: vec3, direction: vec3, max_bounces: ti.i32, stream: ti.i32) -> vec3:
    _path_length[None] = 0
    return _follow_path(make_ray(origin, direction), max_bounces, stream, True)


def trace_ray(
    origin: Sequence[float],
    direction: Sequence[float],
    max_bounces: int = DEFAULT_MAX_BOUNCES,
    stream: int = 0,
) -> vec3:
    """Trace a single ray from Python.

    Used for testing and for inspecting individual paths. Seeds the random
    streams first if nothing has seeded them yet.
    """
    ensure_streams_seeded()
    return _trace_ray_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_bounces,
        stream,
    )


@dataclass
class PathEvent:
    """One surface interaction recorded by trace_path()."""

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int
    front_face: bool
    scattered: bool
    direction: tuple[float, float, float]
    attenuation: tuple[float, float, float]


def trace_path(
    origin: Sequence[float],
    direction: Sequence[float],
    max_bounces: int = DEFAULT_MAX_BOUNCES,
    stream: int = 0,
) -> tuple[npt.NDArray[np.float32], list[PathEvent]]:
    """Trace one ray and report every surface it interacts with.

    Follows the same path trace_ray() would for the same stream state and
    logs each interaction at DEBUG level: the hit, the material, whether the
    ray arrived from outside and the scattered ray.

    Returns:
        The radiance estimate and the interactions in path order. The last
        event has scattered=False when the path was absorbed.

    Raises:
        ValueError: If max_bounces exceeds MAX_RECORDED_BOUNCES.
    """
    if max_bounces > MAX_RECORDED_BOUNCES:
        raise ValueError(
            f"max_bounces ({max_bounces}) exceeds the recordable maximum ({MAX_RECORDED_BOUNCES})"
        )
    ensure_streams_seeded()
    color = _record_path_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_bounces,
        stream,
    )

    n = int(_path_length[None])
    t = _path_t.to_numpy()
    points = _path_points.to_numpy()
    normals = _path_normals.to_numpy()
    material_ids = _path_material_ids.to_numpy()
    front_faces = _path_front_faces.to_numpy()
    scattered = _path_scattered.to_numpy()
    directions = _path_directions.to_numpy()
    attenuations = _path_attenuations.to_numpy()

    events = []
    for i in range(n):
        event = PathEvent(
            t=float(t[i]),
            point=tuple(float(x) for x in points[i]),
            normal=tuple(float(x) for x in normals[i]),
            material_id=int(material_ids[i]),
            front_face=bool(front_faces[i]),
            scattered=bool(scattered[i]),
            direction=tuple(float(x) for x in directions[i]),
            attenuation=tuple(float(x) for x in attenuations[i]),
        )
        logger.debug(
            "bounce %d: t=%.4f point=%s material=%d %s -> %s",
            i,
            event.t,
            event.point,
            event.material_id,
            "outside" if event.front_face else "inside",
            f"direction={event.direction}" if event.scattered else "absorbed",
        )
        events.append(event)

    return np.array([color[0], color[1], color[2]], dtype=np.float32), events


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32, max_bounces: ti.i32):
    """Trace one jittered sample through every pixel and accumulate it.

    Pixel (row, col) draws from stream row * width + col, so the result does
    not depend on the order pixels are processed in.
    """
    for row, col in ti.ndrange(height, width):
        stream = row * width + col
        ray = get_ray_jittered(row, col, width, height, stream)
        _color_buffer[row, col] += trace(ray, max_bounces, stream)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(num_samples: int = 1, max_bounces: int = DEFAULT_MAX_BOUNCES) -> None:
    """Add samples to every pixel of the render target.

    Can be called repeatedly; samples keep accumulating until the target is
    cleared.

    Args:
        num_samples: Number of samples to render per pixel.
        max_bounces: Bounce budget of every path.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    ensure_streams_seeded()
    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height, max_bounces)
        _sample_count[None] += 1


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    return int(_sample_count[None])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear image as a NumPy array.

    Returns the accumulated sum divided by the sample count, unclamped.
    The array shape is (height, width, 3) with row 0 at the top. Before any
    sample is taken the image is black.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:height, :width, :]
    samples = get_total_samples()
    if samples > 0:
        image = image / np.float32(samples)
    return image.astype(np.float32)
