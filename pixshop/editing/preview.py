"""
Full-screen preview transform (wheel zoom about the cursor, drag to pan).
"""

from dataclasses import dataclass

MIN_SCALE = 0.1
MAX_SCALE = 10.0
WHEEL_SENSITIVITY = 0.001


@dataclass
class PreviewTransform:
    scale: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def zoom(self, delta_y: float, mouse_x: float, mouse_y: float) -> None:
        """
        Apply a wheel step, keeping the point under the cursor fixed.

        Args:
            delta_y: Wheel delta (positive zooms out)
            mouse_x: Cursor x relative to the preview container
            mouse_y: Cursor y relative to the preview container
        """
        new_scale = min(max(MIN_SCALE, self.scale - delta_y * WHEEL_SENSITIVITY), MAX_SCALE)
        ratio = new_scale / self.scale
        self.x = mouse_x - (mouse_x - self.x) * ratio
        self.y = mouse_y - (mouse_y - self.y) * ratio
        self.scale = new_scale

    def pan(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def reset(self) -> None:
        self.scale, self.x, self.y = 1.0, 0.0, 0.0
