"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PNG export of frame buffers (Pillow)

Example:
    >>> from glint.preview import show_preview, save_png
    >>> from glint.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(32)
    >>> save_png(renderer, "output.png")
    >>> show_preview(renderer)
"""

from glint.preview.display import show_preview
from glint.preview.export import (
    compute_rmse,
    framebuffer_to_image,
    save_framebuffer_png,
    save_png,
)

__all__ = [
    "show_preview",
    "save_png",
    "save_framebuffer_png",
    "framebuffer_to_image",
    "compute_rmse",
]
