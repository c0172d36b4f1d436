"""Metal (specular reflective) material implementation.

This module implements mirror reflection with optional roughness (fuzz).
Perfect metals (roughness=0) reflect deterministically; rough metals perturb
the mirror direction by a random point in a ball whose radius is the
roughness.

The reflection formula is:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the surface normal.
A perturbed direction that ends up at or below the surface is absorbed,
which darkens rough metals at grazing angles.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_metal(albedo, roughness, ray, hit, stream)
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray, reflect
from glint.core.sampling import uniform_in_unit_ball
from glint.geometry.sphere import HitRecord
from glint.materials.material import ScatterRecord, make_absorbed, make_scattered

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    roughness: ti.f32,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter a ray off a metal surface.

    Reflects the normalized incoming direction about the hit normal, then
    adds roughness * uniform_in_unit_ball(). The fuzzed direction is not
    renormalized.

    Args:
        albedo: The reflective color (RGB).
        roughness: Fuzz radius. 0 = perfect mirror; values above 1 are
            allowed and scatter very widely.
        ray: The incoming ray.
        hit: The hit record at the surface.
        stream: Random stream for the fuzz sample.

    Returns:
        A scattered ScatterRecord with attenuation equal to the albedo, or an
        absorbed record if the fuzzed direction does not leave the surface.
    """
    reflected = reflect(tm.normalize(ray.direction), hit.normal)
    direction = reflected + roughness * uniform_in_unit_ball(stream)

    result = make_absorbed()
    if tm.dot(direction, hit.normal) > 0.0:
        result = make_scattered(hit.point, direction, albedo)
    return result


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_roughnesses = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    roughness: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component should be in [0, 1].
        roughness: The fuzz radius. Default is 0 (perfect mirror). Must be
            non-negative; it is not clamped to 1.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If roughness is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if roughness < 0.0:
        raise ValueError(f"Roughness = {roughness} is negative.")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_roughnesses[idx] = roughness
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by type-local index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_roughness(material_idx: ti.i32) -> ti.f32:
    """Get the roughness for a metal material by type-local index."""
    return metal_roughnesses[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter off a registered metal material.

    Looks up the albedo and roughness from the material registry and calls
    scatter_metal.
    """
    albedo = get_metal_albedo(material_idx)
    roughness = get_metal_roughness(material_idx)
    return scatter_metal(albedo, roughness, ray, hit, stream)
