"""Common scatter result shared by every material model.

A material maps an incoming ray and a hit record to either a scattered ray
with a color attenuation or to absorption. Taichi functions cannot return a
sum type, so both outcomes are carried by one ScatterRecord whose scattered
flag tells them apart.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class ScatterRecord:
    """Outcome of scattering a ray off a surface.

    Attributes:
        scattered: 1 if the ray continues, 0 if it was absorbed.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray (not necessarily unit).
        attenuation: Color factor applied to light arriving along the
            scattered ray. Zero when absorbed.
    """

    scattered: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


@ti.func
def make_scattered(origin: vec3, direction: vec3, attenuation: vec3) -> ScatterRecord:
    """Build a record for a ray that continues from origin along direction."""
    return ScatterRecord(
        scattered=1,
        origin=origin,
        direction=direction,
        attenuation=attenuation,
    )


@ti.func
def make_absorbed() -> ScatterRecord:
    """Build a record for a ray absorbed by the surface."""
    return ScatterRecord(
        scattered=0,
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )
