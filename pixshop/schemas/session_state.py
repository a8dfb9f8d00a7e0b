"""
Session State Schemas

Serializable snapshot of an edit session, shared by the Studio boundary
and the HTTP backend.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class VersionInfo(BaseModel):
    """One entry of the version history (without the image bytes)."""
    sequence: int = Field(description="Stable, monotonically increasing version identity")
    origin: str = Field(description="Operation that produced this version (e.g., 'upload', 'retouch')")
    filename: str
    mime_type: str
    size_bytes: int = Field(ge=0)
    created_at: float


class HotspotState(BaseModel):
    natural_x: int
    natural_y: int
    display_x: float
    display_y: float


class CropState(BaseModel):
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    aspect: Optional[float] = None


class ChatMessageState(BaseModel):
    role: str = Field(description="'user' or 'model'")
    text: str


class PreviewState(BaseModel):
    open: bool = False
    scale: float = 1.0
    x: float = 0.0
    y: float = 0.0


class ErrorState(BaseModel):
    type: str = Field(description="Error class, e.g. 'ValidationError'")
    message: str
    operation: Optional[str] = None


class SessionSnapshot(BaseModel):
    """Everything a frontend needs to render the editor."""
    has_image: bool = False
    session_id: Optional[str] = None
    active_tab: Optional[str] = None

    # History
    versions: List[VersionInfo] = Field(default_factory=list)
    cursor: int = -1
    can_undo: bool = False
    can_redo: bool = False

    # Display handles
    current_url: Optional[str] = None
    original_url: Optional[str] = None
    display_url: Optional[str] = None
    comparing: bool = False

    # Transient editing state
    hotspot: Optional[HotspotState] = None
    crop: Optional[CropState] = None
    aspect: Optional[float] = None

    # Operations
    pending: Optional[str] = None
    chat_pending: bool = False
    chat: List[ChatMessageState] = Field(default_factory=list)
    preview: PreviewState = Field(default_factory=PreviewState)
    last_error: Optional[ErrorState] = None
