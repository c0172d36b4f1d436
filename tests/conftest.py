"""Pytest configuration for glint tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session, before any glint
module that allocates fields is imported. Test modules therefore import
glint inside test functions.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field allocated so far.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and material data and reseed the random streams.

    This ensures tests are isolated from each other and reproducible.
    """
    from glint.core.sampling import seed_streams
    from glint.materials.dielectric import clear_dielectric_materials
    from glint.materials.lambertian import clear_lambertian_materials
    from glint.materials.metal import clear_metal_materials
    from glint.scene.intersection import clear_scene
    from glint.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

    _clear_all()
    seed_streams(42)

    yield

    _clear_all()
