"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    sampling: Random streams and Monte Carlo sampling primitives
    integrator: Radiance estimate per ray and the per-pixel sampling kernel
    progressive: Sample accumulation driver
    framebuffer: Gamma encoding and 8-bit quantization

All per-ray work is written as Taichi functions and kernels.
"""

from .ray import (
    NEAR_ZERO_EPSILON,
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampling import (
    MAX_STREAMS,
    ensure_streams_seeded,
    get_stream_count,
    seed_streams,
    standard_normal,
    uniform,
    uniform_in_unit_ball,
    uniform_in_unit_disc,
    uniform_on_unit_sphere,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from glint.core.integrator or glint.core.progressive when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "NEAR_ZERO_EPSILON",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "MAX_STREAMS",
    "seed_streams",
    "ensure_streams_seeded",
    "get_stream_count",
    "uniform",
    "standard_normal",
    "uniform_on_unit_sphere",
    "uniform_in_unit_ball",
    "uniform_in_unit_disc",
]
