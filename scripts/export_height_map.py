"""Export a layer's normalized height map as a grayscale PNG preview."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from strata import config
from strata.factory import create_terrain

logger = logging.getLogger(__name__)


def height_map_to_image(heights: np.ndarray) -> Image.Image:
    """Convert a (columns, rows) height array in [0, 1] to an 8-bit image."""
    # Image rows run along y, so transpose the column-major grid.
    pixels = (heights.T * 255).clip(0, 255).astype(np.uint8)
    return Image.fromarray(pixels)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Export a height map preview")
    parser.add_argument("--size", type=int, default=256, help="Grid size in cells")
    parser.add_argument("--seed", type=str, default="0", help="Noise seed")
    parser.add_argument("--layer", type=int, default=0, help="Layer index")
    parser.add_argument(
        "--zoom", type=int, default=0, help="Zoom steps around the map center"
    )
    parser.add_argument(
        "--output", type=Path, default=Path("height_map.png"), help="Output PNG"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

    seed: int | str = int(args.seed) if args.seed.lstrip("-").isdigit() else args.seed
    terrain, noise = create_terrain("islands", (args.size, args.size), seed=seed)
    center = (args.size / 2, args.size / 2)
    for _ in range(abs(args.zoom)):
        terrain.zoom(center, config.DEFAULT_ZOOM_FACTOR, 1 if args.zoom > 0 else -1)
    heights = terrain.layer(args.layer).height_map(noise)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    height_map_to_image(heights).save(args.output)
    logger.info(f"Wrote {args.output} ({heights.shape[0]}x{heights.shape[1]})")


if __name__ == "__main__":
    main()
