"""Image export utilities for rendered images.

Frame buffers are written as 8-bit RGB PNG files via Pillow.

Example:
    >>> from glint.preview.export import save_png
    >>> from glint.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(32)
    >>> save_png(renderer, "render.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from glint.core.framebuffer import DEFAULT_GAMMA

if TYPE_CHECKING:
    from glint.core.progressive import ProgressiveRenderer

logger = logging.getLogger(__name__)


def framebuffer_to_image(buf: bytes, width: int, height: int) -> PILImage.Image:
    """Wrap a frame buffer in a Pillow RGB image.

    Raises:
        ValueError: If the buffer length is not width * height * 3.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    expected = width * height * 3
    if len(buf) != expected:
        raise ValueError(
            f"Frame buffer has {len(buf)} bytes, expected {expected} for {width}x{height} RGB"
        )
    return PILImage.frombytes("RGB", (width, height), bytes(buf))


def save_framebuffer_png(buf: bytes, width: int, height: int, filepath: str | Path) -> None:
    """Save a frame buffer (top row first, RGB) as a PNG file.

    Raises:
        ValueError: If the buffer does not match the dimensions.
    """
    framebuffer_to_image(buf, width, height).save(filepath, format="PNG")
    logger.info("Wrote %dx%d PNG to %s", width, height, filepath)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save the renderer's current image as a PNG file.

    Example:
        >>> renderer = ProgressiveRenderer(400, 225)
        >>> renderer.render(32)
        >>> save_png(renderer, "output.png")
    """
    buf = renderer.get_framebuffer(gamma=gamma)
    save_framebuffer_png(buf, renderer.width, renderer.height, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
