"""Dielectric (glass/water) material implementation.

This module implements transparent materials that refract light and reflect
part of it according to a Fresnel term.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when sin(theta_t) would exceed 1

The material chooses between reflection and refraction with one uniform draw
compared against the Schlick reflectance, which increases toward grazing
angles. Glass absorbs nothing: the attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_dielectric(ior, ray, hit, stream)
"""

import taichi as ti
import taichi.math as tm

from glint.core.ray import Ray, near_zero, reflect, refract, schlick_reflectance
from glint.core.sampling import uniform
from glint.geometry.sphere import HitRecord
from glint.materials.material import ScatterRecord, make_scattered

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio of refractive indices for a surface crossing.

    Front hits travel from the outside medium into the dielectric (1/ior);
    back hits leave it (ior).
    """
    ratio = 1.0 / ior
    if front_face == 0:
        ratio = ior
    return ratio


@ti.func
def facing_normal(normal: vec3, front_face: ti.i32) -> vec3:
    """Orient the outward normal against the incoming ray."""
    result = normal
    if front_face == 0:
        result = -normal
    return result


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter a ray through a dielectric surface.

    Refracts the normalized incoming direction through the normal facing the
    ray. The mirror reflection is used instead when refraction is impossible
    (total internal reflection) or when a uniform draw falls below the
    Schlick reflectance.

    Args:
        ior: Index of refraction of the material.
        ray: The incoming ray.
        hit: The hit record; its front_face flag selects the ratio.
        stream: Random stream for the reflect-or-refract decision.

    Returns:
        A scattered ScatterRecord with white attenuation. Dielectrics never
        absorb.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ratio = refraction_ratio(ior, hit.front_face)
    normal = facing_normal(hit.normal, hit.front_face)
    unit_direction = tm.normalize(ray.direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)

    direction = refract(unit_direction, normal, ratio)
    # Exactly one draw per scatter, whatever the outcome
    draw = uniform(stream)
    if near_zero(direction) or schlick_reflectance(cos_theta, ratio) > draw:
        direction = reflect(unit_direction, normal)

    return make_scattered(hit.point, direction, attenuation)


@ti.func
def will_reflect(ior: ti.f32, ray: Ray, hit: HitRecord) -> ti.i32:
    """Determine if total internal reflection will occur at a hit.

    Returns:
        1 if refraction is impossible for this ray, 0 otherwise.
    """
    ratio = refraction_ratio(ior, hit.front_face)
    normal = facing_normal(hit.normal, hit.front_face)
    direction = refract(tm.normalize(ray.direction), normal, ratio)
    return near_zero(direction)


@ti.func
def fresnel_reflectance(ior: ti.f32, ray: Ray, hit: HitRecord) -> ti.f32:
    """Compute the Schlick reflection probability at a hit."""
    ratio = refraction_ratio(ior, hit.front_face)
    normal = facing_normal(hit.normal, hit.front_face)
    cos_theta = tm.min(-tm.dot(tm.normalize(ray.direction), normal), 1.0)
    return schlick_reflectance(cos_theta, ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction. Default is 1.5 (typical glass).
            Must be positive. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    """Get the IOR for a dielectric material by type-local index."""
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    ray: Ray,
    hit: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Scatter off a registered dielectric material.

    Looks up the IOR from the material registry and calls scatter_dielectric.
    """
    return scatter_dielectric(get_dielectric_ior(material_idx), ray, hit, stream)
