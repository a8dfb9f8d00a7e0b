"""
Crop Resolver

Turns a crop rectangle drawn over the rendered image into a natural-pixel
rectangle and extracts it from the source image at full resolution.
"""

from dataclasses import dataclass, replace
from io import BytesIO
from typing import Optional
import math
import logging

from PIL import Image

from ..errors import GeometryError
from .coordinates import round_half_up, scale_factors
from .models import Size

logger = logging.getLogger(__name__)

# Rounding both edges of a rectangle can push it at most one pixel past the border
ROUNDING_SLACK_PX = 1


@dataclass(frozen=True)
class CropRegion:
    """Crop rectangle in rendered coordinates, optionally aspect-locked."""
    x: float
    y: float
    width: float
    height: float
    aspect: Optional[float] = None

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0

    def matches_aspect(self) -> bool:
        """True when unlocked, or when width/height honours the lock."""
        if self.aspect is None:
            return True
        if not self.has_area:
            return False
        return math.isclose(self.width, self.height * self.aspect, abs_tol=0.5)

    def with_aspect(self, aspect: Optional[float] = None) -> "CropRegion":
        """
        Enforce an aspect lock by shrinking the longer side.

        The top-left corner stays put, the way a crop handle behaves when the
        lock is switched on.

        Args:
            aspect: Width/height ratio; defaults to the region's own lock

        Returns:
            New region carrying the lock
        """
        aspect = self.aspect if aspect is None else aspect
        if aspect is None:
            return self
        if aspect <= 0:
            raise GeometryError(f"Invalid aspect ratio: {aspect}")
        if not self.has_area:
            return replace(self, aspect=aspect)

        if self.width / self.height > aspect:
            return replace(self, width=self.height * aspect, aspect=aspect)
        return replace(self, height=self.width / aspect, aspect=aspect)

    def clamped(self, bounds: Size) -> "CropRegion":
        """
        Move (and if needed uniformly shrink) the region inside `bounds`.

        Shrinking is uniform so an aspect lock survives clamping.
        """
        if not self.has_area:
            return self
        factor = min(1.0, bounds.width / self.width, bounds.height / self.height)
        width = self.width * factor
        height = self.height * factor
        x = min(max(self.x, 0.0), bounds.width - width)
        y = min(max(self.y, 0.0), bounds.height - height)
        return replace(self, x=x, y=y, width=width, height=height)


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle in natural pixels."""
    x: int
    y: int
    width: int
    height: int

    def box(self):
        """(left, upper, right, lower) as Pillow expects."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def _fit_axis(start: int, length: int, limit: float, axis: str) -> int:
    """Return the usable length along one axis, or fail if out of bounds."""
    if start < 0:
        raise GeometryError(f"Crop starts outside the image on the {axis} axis ({start})")
    overflow = start + length - int(limit)
    if overflow > ROUNDING_SLACK_PX:
        raise GeometryError(
            f"Crop extends {overflow}px past the image on the {axis} axis; clamp it first"
        )
    if overflow > 0:
        length -= overflow
    return length


def resolve_crop(region: CropRegion, rendered: Size, natural: Size) -> PixelRect:
    """
    Map a rendered crop region to natural pixels.

    Args:
        region: Crop rectangle in rendered coordinates
        rendered: On-screen image size
        natural: Source image size

    Returns:
        PixelRect in natural coordinates

    Raises:
        GeometryError: On zero area, zero-sized render surface, or a rectangle
            outside the source bounds
    """
    if not region.has_area:
        raise GeometryError(f"Crop region has no area ({region.width}x{region.height})")

    scale_x, scale_y = scale_factors(rendered, natural)
    x = round_half_up(region.x * scale_x)
    y = round_half_up(region.y * scale_y)
    width = round_half_up(region.width * scale_x)
    height = round_half_up(region.height * scale_y)

    width = _fit_axis(x, width, natural.width, "x")
    height = _fit_axis(y, height, natural.height, "y")
    if width <= 0 or height <= 0:
        raise GeometryError(f"Crop resolves to an empty {width}x{height} rectangle")

    return PixelRect(x=x, y=y, width=width, height=height)


def extract_crop(data: bytes, rect: PixelRect, density: float = 1.0) -> bytes:
    """
    Cut `rect` out of an encoded image and return it as PNG.

    The natural-pixel rectangle is always what gets sampled; `density` only
    scales the output buffer (`width * density` x `height * density`).

    Args:
        data: Encoded source image
        rect: Natural-pixel rectangle
        density: Device pixel density multiplier

    Returns:
        PNG-encoded crop
    """
    if density <= 0:
        raise GeometryError(f"Pixel density must be positive, got {density}")

    with Image.open(BytesIO(data)) as image:
        image_width, image_height = image.size
        if rect.x + rect.width > image_width or rect.y + rect.height > image_height:
            raise GeometryError(
                f"Crop {rect.box()} is outside the {image_width}x{image_height} source"
            )

        cropped = image.crop(rect.box())
        if cropped.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            cropped = cropped.convert("RGBA")

        if density != 1.0:
            target = (
                max(round_half_up(rect.width * density), 1),
                max(round_half_up(rect.height * density), 1),
            )
            cropped = cropped.resize(target, Image.Resampling.LANCZOS)

        buffer = BytesIO()
        cropped.save(buffer, format="PNG")

    logger.debug(f"Extracted crop {rect.box()} at density {density}")
    return buffer.getvalue()
