"""Materials module for surface scattering models.

This module implements the material models a ray can scatter off:

Components:
    material: ScatterRecord shared by all materials (scattered or absorbed)
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional roughness
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides:
    - scatter_*(): Map an incoming ray and hit record to a ScatterRecord
    - add_*_material(): Register parameters in a type-specific field registry
    - scatter_*_by_id(): Scatter using parameters looked up by registry index

All scattering is implemented as Taichi functions drawing randomness from an
explicit stream handle (see glint.core.sampling).
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .material import ScatterRecord, make_absorbed, make_scattered
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_material_count,
    get_metal_roughness,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Common
    "ScatterRecord",
    "make_scattered",
    "make_absorbed",
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_roughness",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ior",
    "fresnel_reflectance",
    "will_reflect",
]
