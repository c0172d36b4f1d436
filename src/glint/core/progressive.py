"""Frame driver: accumulates supersamples and produces the frame buffer.

Each pass traces one jittered path per pixel. Passes run in batches, with a
progress callback or a generator reporting after each batch, and the running
average can be read back at any time as linear floats, 8-bit pixels or the
final byte buffer.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from glint.core.progressive import ProgressiveRenderer, RenderSettings
    >>> from glint.scene.presets import create_default_scene
    >>> from glint.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 225, seed=7)
    >>> renderer.render(32)
    >>> framebuffer = renderer.get_framebuffer()
"""

import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from glint.core.framebuffer import DEFAULT_GAMMA, apply_gamma, quantize, to_bytes
from glint.core.integrator import (
    DEFAULT_MAX_BOUNCES,
    clear_render_target,
    get_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from glint.core.sampling import seed_streams

logger = logging.getLogger(__name__)

# (samples so far, samples once the current call finishes)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RenderSettings:
    """Image and sampling parameters of a render.

    Attributes:
        width: Image width in pixels.
        aspect_ratio: Width divided by height.
        samples_per_pixel: Number of samples averaged per pixel.
        max_bounces: Bounce budget of every path.
        seed: Root seed for the random streams. None seeds from OS entropy.
    """

    width: int = 400
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 32
    max_bounces: int = DEFAULT_MAX_BOUNCES
    seed: int | None = None

    @property
    def height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.width / self.aspect_ratio))

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any setting is out of range.
        """
        if self.width <= 0:
            raise ValueError(f"width must be positive, got {self.width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_bounces < 0:
            raise ValueError(f"max_bounces must be non-negative, got {self.max_bounces}")


class ProgressiveRenderer:
    """Accumulates samples for one image at a time.

    The renderer keeps its own width, height and bounce budget and delegates
    to the module-level integrator buffers (which are Taichi fields), so only
    one renderer is active at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_bounces: Bounce budget of every path.
    """

    def __init__(
        self,
        width: int,
        height: int,
        max_bounces: int = DEFAULT_MAX_BOUNCES,
        seed: int | None = None,
    ) -> None:
        """Initialize the renderer and seed the random streams.

        Args:
            width: Image width in pixels (max 1024).
            height: Image height in pixels (max 1024).
            max_bounces: Bounce budget of every path.
            seed: Root seed for the random streams. None draws OS entropy.

        Raises:
            ValueError: If dimensions are out of range.
        """
        self._width = width
        self._height = height
        self.max_bounces = max_bounces
        setup_render_target(width, height)
        seed_streams(seed)

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> "ProgressiveRenderer":
        """Create a renderer sized and seeded from RenderSettings."""
        settings.validate()
        return cls(settings.width, settings.height, settings.max_bounces, settings.seed)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Samples averaged into every pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulator without changing the image dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Change the image size, discarding accumulated samples.

        Raises:
            ValueError: If dimensions are out of range.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add num_samples passes to the image.

        Repeated calls keep refining the same image. The callback, if any,
        runs after every batch of batch_size passes with
        (samples so far, samples once this call finishes).

        Example:
            >>> renderer.render(32, batch_size=8, callback=lambda n, total: print(n, total))
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Generator form of render().

        Yields:
            (samples so far, samples once this call finishes) after each batch.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target_samples = self.sample_count + num_samples
        logger.info(
            "Rendering %dx%d, %d samples per pixel, %d bounces",
            self.width,
            self.height,
            num_samples,
            self.max_bounces,
        )

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch, self.max_bounces)
            remaining -= batch
            logger.debug("Accumulated %d/%d samples", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the averaged linear image, shape (height, width, 3), top row first."""
        return get_image_numpy()

    def get_image_uint8(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.uint8]:
        """Get the gamma-encoded image as an 8-bit array of shape (height, width, 3)."""
        return quantize(apply_gamma(self.get_image_numpy(), gamma))

    def get_framebuffer(self, gamma: float = DEFAULT_GAMMA) -> bytes:
        """Get the frame buffer: width * height * 3 bytes, top row first."""
        return to_bytes(self.get_image_numpy(), gamma)

    def save_image(self, filepath: str | Path, gamma: float = DEFAULT_GAMMA) -> None:
        """Save the rendered image to a file (format from the extension)."""
        from PIL import Image as PILImage

        pil_image = PILImage.fromarray(self.get_image_uint8(gamma=gamma), mode="RGB")
        pil_image.save(filepath)
        logger.info("Saved %s", filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
