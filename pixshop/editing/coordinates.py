"""
Coordinate Mapper

Converts pointer positions between rendered (on-screen, possibly scaled)
image coordinates and natural (source-resolution) pixel coordinates.

Both axes are scaled independently, so a stretched element still maps
correctly. Rounding is nearest-integer with halves rounded up, matching
how browsers report integer pixel positions.
"""

from typing import Tuple
import math
import logging

from ..errors import GeometryError
from .models import Size

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded towards +inf."""
    return int(math.floor(value + 0.5))


def scale_factors(rendered: Size, natural: Size) -> Tuple[float, float]:
    """
    Per-axis scale from rendered to natural space.

    Args:
        rendered: Size of the on-screen image element
        natural: Size of the source image

    Returns:
        (scale_x, scale_y)

    Raises:
        GeometryError: If the rendered surface has zero width or height
    """
    if rendered.width <= 0 or rendered.height <= 0:
        raise GeometryError(
            f"Cannot map coordinates on a {rendered.width}x{rendered.height} render surface"
        )
    if natural.width <= 0 or natural.height <= 0:
        raise GeometryError(
            f"Source image has invalid size {natural.width}x{natural.height}"
        )
    return natural.width / rendered.width, natural.height / rendered.height


def to_natural(x: float, y: float, rendered: Size, natural: Size) -> Tuple[int, int]:
    """Map a rendered-space point to natural pixel coordinates (unclamped)."""
    scale_x, scale_y = scale_factors(rendered, natural)
    return round_half_up(x * scale_x), round_half_up(y * scale_y)


def to_rendered(x: float, y: float, rendered: Size, natural: Size) -> Tuple[float, float]:
    """Inverse of `to_natural`, without rounding."""
    scale_x, scale_y = scale_factors(rendered, natural)
    return x / scale_x, y / scale_y


def clamp_to_image(x: int, y: int, natural: Size) -> Tuple[int, int]:
    """Clamp a natural point into the valid pixel index range."""
    max_x = max(int(natural.width) - 1, 0)
    max_y = max(int(natural.height) - 1, 0)
    return min(max(x, 0), max_x), min(max(y, 0), max_y)
