"""
Session State Schemas

Type-safe snapshots of edit sessions for the UI boundary.
"""

from .session_state import (
    VersionInfo,
    HotspotState,
    CropState,
    ChatMessageState,
    PreviewState,
    ErrorState,
    SessionSnapshot,
)

__all__ = [
    "VersionInfo",
    "HotspotState",
    "CropState",
    "ChatMessageState",
    "PreviewState",
    "ErrorState",
    "SessionSnapshot",
]
