"""Lambertian (ideal diffuse) material implementation.

Diffuse scattering adds a uniformly distributed unit vector to the surface
normal. The resulting directions follow an approximately cosine-weighted
distribution about the normal, so the attenuation is simply the albedo with
no angle-dependent weight.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_lambertian(albedo, ray, hit, stream)
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray, near_zero
from glint.core.sampling import uniform_on_unit_sphere
from glint.geometry.sphere import HitRecord
from glint.materials.material import ScatterRecord, make_scattered

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(
    albedo: vec3,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface.

    The scatter direction is normal + uniform_on_unit_sphere(). When the
    sample nearly cancels the normal the sum is degenerate and the normal
    itself is used instead. A Lambertian surface never absorbs.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray: The incoming ray (unused; diffuse scattering ignores it).
        hit: The hit record at the surface.
        stream: Random stream to sample the scatter direction from.

    Returns:
        A scattered ScatterRecord with attenuation equal to the albedo.
    """
    direction = hit.normal + uniform_on_unit_sphere(stream)
    if near_zero(direction):
        direction = hit.normal
    return make_scattered(hit.point, direction, albedo)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component should be in [0, 1] for energy conservation.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by type-local index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter off a registered Lambertian material.

    Looks up the albedo from the material registry and calls
    scatter_lambertian.
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), ray, hit, stream)
