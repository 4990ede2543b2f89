"""Grayscale and colour-map textures for generated fields."""

from typing import Sequence

import numpy as np

from .errors import InvalidDimensions
from .field_grid import FieldGrid


def texture_from_height_map(grid: FieldGrid) -> np.ndarray:
    """
    Render a 2D field as an RGBA image, black at 0 and white at 1.

    Values outside [0, 1] are clamped.

    Returns:
        ``(height, width, 4)`` uint8 array, row ``y`` holding ``values[:, y]``
    """
    if grid.ndim != 2:
        raise InvalidDimensions("texture_from_height_map expects a 2D grid")
    grey = np.clip(grid.values.T.astype(np.float64), 0.0, 1.0)
    image = np.empty(grey.shape + (4,), dtype=np.uint8)
    image[..., :3] = np.round(grey * 255.0)[..., None].astype(np.uint8)
    image[..., 3] = 255
    return image


def texture_from_colour_map(colours: Sequence, width: int, height: int) -> np.ndarray:
    """
    Arrange a flat, row-major list of colours into an image.

    Args:
        colours: ``width * height`` RGB or RGBA colours, floats in [0, 1] or uint8
        width: Image width
        height: Image height

    Returns:
        ``(height, width, 4)`` uint8 array
    """
    colours = np.asarray(colours)
    if colours.ndim != 2 or colours.shape[1] not in (3, 4):
        raise InvalidDimensions(f"colours must be an (N, 3) or (N, 4) array, got {colours.shape}")
    if colours.shape[0] != width * height:
        raise InvalidDimensions(
            f"expected {width * height} colours for a {width}x{height} image, got {colours.shape[0]}"
        )

    if np.issubdtype(colours.dtype, np.floating):
        colours = np.round(np.clip(colours, 0.0, 1.0) * 255.0)
    colours = colours.astype(np.uint8)
    if colours.shape[1] == 3:
        alpha = np.full((colours.shape[0], 1), 255, dtype=np.uint8)
        colours = np.concatenate([colours, alpha], axis=1)
    return colours.reshape(height, width, 4)
