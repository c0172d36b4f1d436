"""Command-line entry point: render a scene to a PNG file.

Usage:
    glint [options]
    python -m glint.cli [options]

Options:
    -o, --out PATH        Output PNG path (default: render.png)
    --width WIDTH         Image width in pixels (default: 400)
    --samples SAMPLES     Samples per pixel (default: 32)
    --max-bounces N       Bounce budget per path (default: 40)
    --seed SEED           Seed for the random streams (default: OS entropy)
    --scene PATH          JSON scene file (default: built-in scene)
    --arch {cpu,gpu}      Taichi backend (default: cpu)
    --batch-size SIZE     Samples per progress update (default: 4)
    --preview             Show the result in a Matplotlib window
    --quiet               Suppress progress output
    --log-level LEVEL     Logging level (default: INFO)

Example:
    glint -o spheres.png --width 200 --samples 16 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti
from tqdm import tqdm

logger = logging.getLogger("glint")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Send glint log records to stderr at the given level."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="glint",
        description="Render a scene of spheres with a Monte Carlo path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=Path("render.png"),
        help="Output PNG path (default: render.png)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels; height follows the 16:9 aspect (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=32,
        help="Number of samples per pixel (default: 32)",
    )
    parser.add_argument(
        "--max-bounces",
        type=int,
        default=40,
        help="Maximum number of bounces per path (default: 40)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random streams (default: fresh entropy)",
    )
    parser.add_argument(
        "--scene",
        type=Path,
        default=None,
        help="JSON scene file (default: built-in four-sphere scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=4,
        help="Samples per progress update (default: 4)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default=None,
        help="Logging level (default: INFO, WARNING with --quiet)",
    )
    return parser.parse_args(argv)


def render(args: argparse.Namespace) -> Path:
    """Render the requested scene and save it.

    Taichi must already be initialized.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports: these modules allocate Taichi fields on import
    from glint.camera.thin_lens import setup_camera
    from glint.core.progressive import ProgressiveRenderer, RenderSettings
    from glint.preview.export import save_png
    from glint.scene.loader import load_scene
    from glint.scene.presets import create_default_scene

    settings = RenderSettings(
        width=args.width,
        samples_per_pixel=args.samples,
        max_bounces=args.max_bounces,
        seed=args.seed,
    )
    settings.validate()

    if args.scene is not None:
        scene, camera = load_scene(args.scene, aspect_ratio=settings.aspect_ratio)
    else:
        scene, camera = create_default_scene(settings.aspect_ratio)
    logger.info(
        "Scene has %d spheres and %d materials",
        scene.get_sphere_count(),
        scene.get_material_count(),
    )
    setup_camera(camera)

    renderer = ProgressiveRenderer.from_settings(settings)

    start_time = time.time()
    with tqdm(
        total=settings.samples_per_pixel,
        desc="Rendering",
        unit="spp",
        disable=args.quiet,
    ) as pbar:
        for current, _ in renderer.render_progressive(
            settings.samples_per_pixel, batch_size=args.batch_size
        ):
            pbar.update(current - pbar.n)

    save_png(renderer, args.out)
    logger.info("Rendered %s in %.2fs", args.out, time.time() - start_time)

    if args.preview:
        from glint.preview.display import show_preview

        show_preview(renderer)

    return args.out


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    level = args.log_level or ("WARNING" if args.quiet else "INFO")
    setup_logging(level)

    ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    try:
        render(args)
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("Render failed: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
