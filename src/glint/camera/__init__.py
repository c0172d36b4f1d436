"""Camera module for view and ray generation.

Components:
    thin_lens: Look-at camera with an aperture and a focus distance

Camera responsibilities:
    - Map normalized (su, sv) image coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Sample the lens disc for depth of field

Ray generation uses normalized viewport coordinates:
    su in [0, 1]: left to right across image
    sv in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
