"""Unified scene manager coordinating spheres and materials.

This module provides a high-level scene building API on top of the sphere
storage and the type-specific material registries. It tracks which material
type (Lambertian, Metal, Dielectric) each unified material ID refers to, so
the integrator can dispatch to the right scattering function.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- Methods for adding spheres with new or shared materials
- Scene configuration export and import

Materials are immutable once added and are referenced by ID, so any number
of spheres can share one material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> glass = scene.add_dielectric_material(ior=1.5)
    >>> scene.add_sphere(center=(-1, 0, -1), radius=0.5, material_id=glass)
    >>> scene.add_sphere(center=(-1, 0, 1), radius=0.25, material_id=glass)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from glint.materials.dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    add_dielectric_material,
    clear_dielectric_materials,
)
from glint.materials.lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    add_lambertian_material,
    clear_lambertian_materials,
)
from glint.materials.metal import (
    MAX_METAL_MATERIALS,
    add_metal_material,
    clear_metal_materials,
)
from glint.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Material kinds, stored per material ID for scatter dispatch."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# 256 per registry, three registries
MAX_MATERIALS = 768

# Per material ID: its MaterialType and its row in that type's registry
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Forget every material ID."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """MaterialType value of a material ID, or -1 if the ID is unknown."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Registry row of a material ID, or -1 if the ID is unknown."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Python-side record of a material and the parameters it was built from."""

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Python-side record of a stored sphere."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene.

    Materials appear in material ID order; sphere entries refer to them by
    position.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_float(value: Any, name: str) -> float:
    """Convert a configuration scalar into a float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence from a configuration into a float tuple."""
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise ValueError(f"{name} must be a list of 3 numbers, got {values!r}")
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (
        _as_float(values[0], name),
        _as_float(values[1], name),
        _as_float(values[2], name),
    )


def _as_albedo(values: Any) -> tuple[float, float, float]:
    albedo = _as_triple(values, "albedo")
    if not all(0.0 <= c <= 1.0 for c in albedo):
        raise ValueError(f"albedo components must lie in [0, 1], got {albedo}")
    return albedo


def _entries(values: Any, name: str) -> list[dict[str, Any]]:
    """Check a configuration list holds only objects."""
    if not isinstance(values, list):
        raise ValueError(f"{name} must be a list, got {type(values).__name__}")
    for i, entry in enumerate(values):
        if not isinstance(entry, dict):
            raise ValueError(f"{name}[{i}] must be an object, got {entry!r}")
    return values


_TYPE_CAPACITY = {
    MaterialType.LAMBERTIAN: MAX_LAMBERTIAN_MATERIALS,
    MaterialType.METAL: MAX_METAL_MATERIALS,
    MaterialType.DIELECTRIC: MAX_DIELECTRIC_MATERIALS,
}


def parse_config(
    config: SceneConfig,
) -> tuple[list[tuple[MaterialType, dict[str, Any]]], list[tuple[tuple[float, float, float], float, int]]]:
    """Check a whole configuration and convert it to typed values.

    Raises:
        ValueError: If any entry is malformed or out of range.
    """
    materials: list[tuple[MaterialType, dict[str, Any]]] = []
    for entry in _entries(config.materials, "materials"):
        kind = str(entry.get("type", "")).lower()
        if kind == "lambertian":
            params = {"albedo": _as_albedo(entry.get("albedo", [0.5, 0.5, 0.5]))}
            materials.append((MaterialType.LAMBERTIAN, params))
        elif kind == "metal":
            roughness = _as_float(entry.get("roughness", 0.0), "roughness")
            if roughness < 0.0:
                raise ValueError(f"roughness must be non-negative, got {roughness}")
            params = {"albedo": _as_albedo(entry.get("albedo", [0.8, 0.8, 0.8])), "roughness": roughness}
            materials.append((MaterialType.METAL, params))
        elif kind == "dielectric":
            ior = _as_float(entry.get("ior", 1.5), "ior")
            if ior <= 0.0:
                raise ValueError(f"ior must be positive, got {ior}")
            materials.append((MaterialType.DIELECTRIC, {"ior": ior}))
        else:
            raise ValueError(f"Unknown material type: {kind}")

    for material_type, capacity in _TYPE_CAPACITY.items():
        count = sum(1 for t, _ in materials if t == material_type)
        if count > capacity:
            raise ValueError(f"Too many {material_type.name.lower()} materials ({count} > {capacity})")

    spheres: list[tuple[tuple[float, float, float], float, int]] = []
    for entry in _entries(config.spheres, "spheres"):
        center = _as_triple(entry.get("center", [0, 0, 0]), "center")
        radius = _as_float(entry.get("radius", 1.0), "radius")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        material_id = entry.get("material_id", 0)
        if isinstance(material_id, bool) or not isinstance(material_id, int):
            raise ValueError(f"material_id must be an integer, got {material_id!r}")
        if not 0 <= material_id < len(materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        spheres.append((center, radius, material_id))

    if len(spheres) > MAX_SPHERES:
        raise ValueError(f"Too many spheres ({len(spheres)} > {MAX_SPHERES})")

    return materials, spheres


class SceneManager:
    """Builds the sphere list and material arena the integrator reads.

    Storage lives in module-level Taichi fields, so creating a SceneManager
    discards whatever scene was built before.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), roughness=0.0)
        >>> scene.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere and material."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    # =========================================================================
    # Materials
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(MaterialInfo(material_id, material_type, type_index, params))
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material and return its material ID.

        Raises:
            RuntimeError: If the material arena is full.
            ValueError: If an albedo component lies outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> int:
        """Register a metal and return its material ID.

        Args:
            albedo: Reflected color, components in [0, 1].
            roughness: Radius of the fuzz ball added to the mirror direction.
                0 gives a perfect mirror.

        Raises:
            RuntimeError: If the material arena is full.
            ValueError: If the albedo or roughness is out of range.
        """
        type_index = add_metal_material(albedo, roughness)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "roughness": roughness}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a clear refractive material (glass at 1.5) and return its ID.

        Raises:
            RuntimeError: If the material arena is full.
            ValueError: If ior is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Look a material up by ID; None when the ID was never issued."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Python-scope counterpart of get_material_type()."""
        info = self.get_material_info(material_id)
        return info.material_type if info is not None else None

    # =========================================================================
    # Spheres
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere that uses an already registered material.

        Any number of spheres may share one material ID.

        Returns:
            Position of the new sphere in the scene's sphere list.

        Raises:
            RuntimeError: If the sphere storage is full.
            ValueError: If material_id was never issued or radius <= 0.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, radius, material_id))
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Shorthand for a diffuse material plus a sphere using it.

        Returns:
            (sphere_index, material_id)
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        roughness: float = 0.0,
    ) -> tuple[int, int]:
        """Shorthand for a metal plus a sphere using it."""
        material_id = self.add_metal_material(albedo, roughness)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Shorthand for a dielectric plus a sphere using it."""
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Snapshot the scene as JSON-friendly lists and dicts."""
        materials = []
        for info in self.materials:
            entry: dict[str, Any] = {"type": info.material_type.name.lower()}
            for key, value in info.params.items():
                entry[key] = list(value) if isinstance(value, tuple) else value
            materials.append(entry)

        spheres = [
            {"center": list(s.center), "radius": s.radius, "material_id": s.material_id}
            for s in self.spheres
        ]
        return SceneConfig(materials=materials, spheres=spheres)

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the one described by config.

        Materials are registered first, in order, so a sphere's material_id
        is the position of its material in config.materials.

        The whole configuration is checked before anything is cleared, so a
        bad configuration leaves the current scene untouched.

        Raises:
            ValueError: If an entry is malformed, out of range or names an
                unknown type.
        """
        materials, spheres = parse_config(config)
        self.clear()

        for material_type, params in materials:
            if material_type == MaterialType.LAMBERTIAN:
                self.add_lambertian_material(params["albedo"])
            elif material_type == MaterialType.METAL:
                self.add_metal_material(params["albedo"], params["roughness"])
            else:
                self.add_dielectric_material(params["ior"])

        for center, radius, material_id in spheres:
            self.add_sphere(center, radius, material_id)

        logger.info(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dict with "materials" and "spheres" lists.

        Raises:
            ValueError: If data is not a dict or describes an invalid scene.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene data must be a dict, got {type(data).__name__}")
        self.from_config(SceneConfig(data.get("materials", []), data.get("spheres", [])))

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
