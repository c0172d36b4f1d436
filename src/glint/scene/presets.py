"""Built-in reference scene.

The default scene is four spheres resting on a huge ground sphere:
- Center: blue-violet diffuse sphere
- Ground: yellow diffuse sphere of radius 100
- Left: glass sphere (ior 1.5)
- Right: polished gold metal sphere

The camera looks down at the group from (3, 3, 2) with a narrow field of
view and a wide aperture focused on the center sphere, so the foreground
and background blur noticeably.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.scene.presets import create_default_scene
    >>> from glint.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

import math

from glint.camera.thin_lens import ThinLensCamera
from glint.scene.manager import SceneManager

# =============================================================================
# Default Scene Constants
# =============================================================================

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

CENTER_ALBEDO = (0.3, 0.2, 0.8)
GROUND_ALBEDO = (0.8, 0.8, 0.0)
GLASS_IOR = 1.5
GOLD_ALBEDO = (0.8, 0.6, 0.2)
GOLD_ROUGHNESS = 0.0

CAMERA_LOOKFROM = (3.0, 3.0, 2.0)
CAMERA_LOOKAT = (0.0, 0.0, -1.0)
CAMERA_VUP = (0.0, 1.0, 0.0)
CAMERA_VFOV = 20.0
CAMERA_APERTURE = 2.0


def create_default_camera(aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> ThinLensCamera:
    """Create the reference camera, focused on the look-at point."""
    return ThinLensCamera(
        lookfrom=CAMERA_LOOKFROM,
        lookat=CAMERA_LOOKAT,
        vup=CAMERA_VUP,
        vfov=CAMERA_VFOV,
        aspect_ratio=aspect_ratio,
        aperture=CAMERA_APERTURE,
        focus_dist=math.dist(CAMERA_LOOKFROM, CAMERA_LOOKAT),
    )


def create_default_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the reference four-sphere scene and its camera.

    Args:
        aspect_ratio: Width divided by height of the output image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera). The camera still has to
        be passed to setup_camera() before rendering.

    Example:
        >>> scene, camera = create_default_scene()
        >>> scene.get_sphere_count()
        4
    """
    scene = SceneManager()

    center_mat = scene.add_lambertian_material(albedo=CENTER_ALBEDO)
    ground_mat = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    glass_mat = scene.add_dielectric_material(ior=GLASS_IOR)
    gold_mat = scene.add_metal_material(albedo=GOLD_ALBEDO, roughness=GOLD_ROUGHNESS)

    scene.add_sphere(center=(0.0, 0.0, -1.0), radius=0.5, material_id=center_mat)
    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground_mat)
    scene.add_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material_id=glass_mat)
    scene.add_sphere(center=(1.0, 0.0, -1.0), radius=0.5, material_id=gold_mat)

    return scene, create_default_camera(aspect_ratio)
