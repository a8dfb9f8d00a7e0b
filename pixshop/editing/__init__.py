"""
Edit session engine: version history, coordinate mapping, crop geometry,
single-flight action dispatch and display handle lifecycle.
"""

from .models import ImageVersion, Hotspot, OperationKind, Size, Tab
from .coordinates import to_natural, to_rendered, clamp_to_image
from .crop import CropRegion, PixelRect, resolve_crop, extract_crop
from .history import VersionHistory
from .handles import DisplayHandle, HandleRegistry, SessionHandles
from .session import ChatMessage, EditSession
from .dispatcher import ActionDispatcher

__all__ = [
    "ImageVersion",
    "Hotspot",
    "OperationKind",
    "Size",
    "Tab",
    "to_natural",
    "to_rendered",
    "clamp_to_image",
    "CropRegion",
    "PixelRect",
    "resolve_crop",
    "extract_crop",
    "VersionHistory",
    "DisplayHandle",
    "HandleRegistry",
    "SessionHandles",
    "ChatMessage",
    "EditSession",
    "ActionDispatcher",
]
