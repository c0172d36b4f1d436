"""Random streams and Monte Carlo sampling primitives.

Every sampling routine draws from an explicit random *stream*: an integer
handle selecting one xorshift32 state word in a Taichi field. Nothing in this
module owns an implicit global generator, so a kernel decides which stream
each unit of work consumes (the frame driver gives every pixel its own) and a
single seed passed to seed_streams() reproduces every draw of a render.

Distributions:
    uniform: Uniform float in [0, 1)
    standard_normal: Gaussian with zero mean and unit variance (Box-Muller)
    uniform_on_unit_sphere: Uniform direction (normalized Gaussian triple)
    uniform_in_unit_ball: Uniform point in the unit ball
    uniform_in_unit_disc: Uniform point in the unit disc (polar method)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.core.sampling import seed_streams, uniform_on_unit_sphere
    >>> seed_streams(42)
    >>> @ti.kernel
    ... def sample():
    ...     for i in range(16):
    ...         d = uniform_on_unit_sphere(i)  # stream i
"""

import logging

import numpy as np
import taichi as ti
import taichi.math as tm

from glint.core.ray import vec3

logger = logging.getLogger(__name__)

vec2 = tm.vec2

# One stream per pixel of the largest supported image
MAX_STREAMS = 1024 * 1024

# xorshift32 state per stream. Zero is a fixed point, so the field holds
# zeros only until the first seed_streams() or ensure_streams_seeded() call.
_stream_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)
_streams_seeded = False

# Scale mapping a 24-bit integer onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0


def seed_streams(seed: int | None = None) -> None:
    """Seed every random stream.

    States are drawn from NumPy's SeedSequence so that neighbouring streams
    are statistically independent. The same seed always produces the same
    states.

    Args:
        seed: Root seed. None draws fresh entropy from the operating system.
    """
    global _streams_seeded
    sequence = np.random.SeedSequence(seed)
    states = sequence.generate_state(MAX_STREAMS, dtype=np.uint32)
    # xorshift never leaves the all-zero state
    states[states == 0] = 0x9E3779B9
    _stream_states.from_numpy(states)
    _streams_seeded = True
    logger.debug("Seeded %d random streams (entropy=%s)", MAX_STREAMS, sequence.entropy)


def ensure_streams_seeded() -> None:
    """Seed the streams from OS entropy unless they were seeded already.

    Host entry points that launch sampling kernels call this, so a render
    never draws from the all-zero state.
    """
    if not _streams_seeded:
        seed_streams()


def get_stream_count() -> int:
    """Get the number of available random streams."""
    return MAX_STREAMS


@ti.func
def _next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream's xorshift32 state and return the new word."""
    x = _stream_states[stream]
    x ^= x << 13
    x ^= x >> 17
    x ^= x << 5
    _stream_states[stream] = x
    return x


@ti.func
def uniform(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream.

    Uses the top 24 bits of the next state word so every value is exactly
    representable as f32.

    Args:
        stream: Index of the random stream to consume.

    Returns:
        A float in [0, 1).
    """
    bits = (_next_u32(stream) >> 8) & 0xFFFFFF
    return ti.cast(bits, ti.f32) * _INV_2_24


@ti.func
def standard_normal(stream: ti.i32) -> ti.f32:
    """Draw a standard normal value with the Box-Muller transform.

    Args:
        stream: Index of the random stream to consume (two uniform draws).

    Returns:
        A normally distributed float with mean 0 and variance 1.
    """
    # 1 - u lies in (0, 1], keeping the logarithm finite
    u1 = 1.0 - uniform(stream)
    u2 = uniform(stream)
    return ti.sqrt(-2.0 * ti.log(u1)) * ti.cos(2.0 * tm.pi * u2)


@ti.func
def uniform_on_unit_sphere(stream: ti.i32) -> vec3:
    """Sample a direction uniformly distributed on the unit sphere.

    Three independent standard normals form an isotropic Gaussian vector;
    normalizing it gives uniform angular density without rejection.

    Args:
        stream: Index of the random stream to consume.

    Returns:
        A unit vector.
    """
    p = vec3(standard_normal(stream), standard_normal(stream), standard_normal(stream))
    return tm.normalize(p)


@ti.func
def uniform_in_unit_ball(stream: ti.i32) -> vec3:
    """Sample a point uniformly distributed inside the unit ball.

    A uniform direction is scaled by the cube root of a uniform draw, the
    inverse CDF of the radial distribution of a uniform ball.

    Args:
        stream: Index of the random stream to consume.

    Returns:
        A vector with length <= 1.
    """
    direction = uniform_on_unit_sphere(stream)
    radius = uniform(stream) ** (1.0 / 3.0)
    return radius * direction


@ti.func
def uniform_in_unit_disc(stream: ti.i32) -> vec2:
    """Sample a point uniformly distributed inside the unit disc.

    Polar method: the radius is the square root of a uniform draw so that
    area density stays constant.

    Args:
        stream: Index of the random stream to consume.

    Returns:
        A 2D point with length <= 1.
    """
    r = ti.sqrt(uniform(stream))
    phi = 2.0 * tm.pi * uniform(stream)
    return vec2(r * ti.cos(phi), r * ti.sin(phi))
