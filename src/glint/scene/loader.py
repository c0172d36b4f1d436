"""JSON scene files.

A scene file holds the materials, the spheres referencing them by index and
an optional camera:

    {
        "materials": [
            {"type": "lambertian", "albedo": [0.8, 0.8, 0.0]},
            {"type": "metal", "albedo": [0.8, 0.6, 0.2], "roughness": 0.0},
            {"type": "dielectric", "ior": 1.5}
        ],
        "spheres": [
            {"center": [0.0, -100.5, -1.0], "radius": 100.0, "material_id": 0}
        ],
        "camera": {"lookfrom": [3, 3, 2], "lookat": [0, 0, -1], "vfov": 20}
    }

Missing camera keys take the ThinLensCamera defaults; a missing focus_dist
focuses on the lookat point.
"""

import json
import logging
from pathlib import Path
from typing import Any

from glint.camera.thin_lens import ThinLensCamera
from glint.scene.manager import SceneConfig, SceneManager, parse_config

logger = logging.getLogger(__name__)


def scene_from_dict(
    data: dict[str, Any],
    aspect_ratio: float | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Build a scene and camera from a parsed scene document.

    Args:
        data: The scene document.
        aspect_ratio: Overrides the camera's aspect ratio when given.

    Raises:
        ValueError: If the document is malformed.
    """
    if not isinstance(data, dict):
        raise ValueError("Scene document must be a JSON object")

    camera_data = data.get("camera", {})
    if not isinstance(camera_data, dict):
        raise ValueError(f"camera must be a JSON object, got {camera_data!r}")
    camera_data = dict(camera_data)
    if aspect_ratio is not None:
        camera_data["aspect_ratio"] = aspect_ratio
    camera = ThinLensCamera.from_dict(camera_data)
    camera.validate()

    # Check the scene before SceneManager() clears the current one
    parse_config(SceneConfig(data.get("materials", []), data.get("spheres", [])))
    scene = SceneManager()
    scene.from_dict(data)
    return scene, camera


def load_scene(
    path: str | Path,
    aspect_ratio: float | None = None,
) -> tuple[SceneManager, ThinLensCamera]:
    """Load a scene and camera from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid JSON or describes an invalid scene.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} is not valid JSON: {e}") from e

    scene, camera = scene_from_dict(data, aspect_ratio)
    logger.info("Loaded scene %s", path)
    return scene, camera


def save_scene(path: str | Path, scene: SceneManager, camera: ThinLensCamera) -> None:
    """Write a scene and camera to a JSON file."""
    data = scene.to_dict()
    data["camera"] = camera.to_dict()
    with Path(path).open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info("Saved scene %s", path)
