"""Scene-level sphere storage and closest-hit queries.

The scene is an ordered list of spheres, each paired with a unified material
ID. Spheres are stored in Taichi fields so rendering kernels can test every
primitive; materials are referenced by ID, which lets many spheres share one
material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(ti.math.vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray
from glint.geometry.sphere import HitRecord, Sphere, probe_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the basic HitRecord with material_id for scene-level queries.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The outward geometric normal at the intersection point.
        front_face: 1 if the ray hit the surface from outside, 0 otherwise.
        material_id: The unified material ID of the hit sphere.
            -1 for a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout, index-aligned with material IDs
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere paired with a material ID.

    No validity checks are made on the geometry or the material ID; the
    scene manager validates before calling this.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The unified material ID to pair with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material ID to a sphere hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> SceneHitRecord:
    """Find the closest intersection of a ray with the scene.

    Tests the spheres in insertion order, shrinking the upper bound to the
    closest hit found so far, so the result is the nearest hit in
    (t_min, t_max] regardless of the order spheres were added in.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on t.
        t_max: Inclusive upper bound on t.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record if
        no sphere is hit within the interval.
    """
    closest_t = t_max
    result = _make_miss_record()

    # Serial loop: each test depends on the bound narrowed by the previous one
    n_spheres = num_spheres[None]
    i = 0
    while i < n_spheres:
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = probe_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])
        i += 1

    return result

