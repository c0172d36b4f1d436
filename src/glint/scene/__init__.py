"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage and closest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    presets: Built-in reference scene
    loader: JSON scene files

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - Index-aligned material ID array
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .loader import load_scene, save_scene, scene_from_dict
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import create_default_camera, create_default_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets and files
    "create_default_scene",
    "create_default_camera",
    "load_scene",
    "save_scene",
    "scene_from_dict",
]
