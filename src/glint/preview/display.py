"""Matplotlib-based preview display for rendered images.

Example:
    >>> from glint.preview.display import show_preview
    >>> from glint.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 225)
    >>> renderer.render(32)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from glint.core.framebuffer import DEFAULT_GAMMA

if TYPE_CHECKING:
    from glint.core.progressive import ProgressiveRenderer


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = DEFAULT_GAMMA,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4.5),
    block: bool = True,
) -> None:
    """Display the rendered image in a Matplotlib window.

    Shows exactly the pixels that would be written to a PNG.

    Args:
        renderer: The renderer whose image to show.
        gamma: Gamma correction value (default 2.2).
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = renderer.get_image_uint8(gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.sample_count} SPP"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
