"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the probe
function that intersects a ray with a sphere by solving the half-b form of
the ray-sphere quadratic.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.geometry.sphere import Sphere, probe_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use probe_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Must be positive; a non-positive
            radius gives undefined intersection results.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The outward geometric normal at the intersection point
            (unit length, pointing away from the center). It is not flipped
            toward the ray. Only valid if hit == 1.
        front_face: 1 if the ray approaches the surface from outside,
            0 if it hits the surface from inside. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def is_front_face(ray_direction: vec3, outward_normal: vec3) -> ti.i32:
    """Classify a hit as front (ray arriving from outside) or back.

    The dielectric material relies on this convention: front hits enter the
    medium and use the refraction ratio 1/ior.

    Args:
        ray_direction: The incoming ray direction.
        outward_normal: The outward geometric normal at the hit point.

    Returns:
        1 if the ray travels against the outward normal, 0 otherwise.
    """
    return tm.dot(ray_direction, outward_normal) < 0.0


@ti.func
def probe_sphere(
    ray: Ray,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    Substituting the ray into |p - center|^2 = radius^2 gives

        a*t^2 + 2*h*t + c = 0

    where:
        a = dot(direction, direction)
        h = dot(origin - center, direction)
        c = |origin - center|^2 - radius^2

    A negative discriminant h^2 - a*c means no intersection. Otherwise the
    nearer root (-h - sqrt(d)) / a is tried first and the farther root
    (-h + sqrt(d)) / a second; a root counts when t_min < t <= t_max. A
    tangent ray has a single double root and counts as a hit. The direction
    need not be normalized; t is measured in units of its length.

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Inclusive upper bound on t.

    Returns:
        A HitRecord. Check the hit field to determine if intersection
        occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    front = 0

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-h - sqrt_d) / a
        valid = root > t_min and root <= t_max
        if not valid:
            root = (-h + sqrt_d) / a
            valid = root > t_min and root <= t_max

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            hit_normal = (hit_point - sphere.center) / sphere.radius
            front = is_front_face(ray.direction, hit_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=front,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi scope."""
    return Sphere(center=center, radius=radius)
