"""
Edit Session

Everything that belongs to one loaded image: its version history, the
retouch hotspot, the crop selection, the in-flight operation, the chat
transcript and the display handles. A new upload replaces the session
wholesale; the old one is closed and its handles released.
"""

from dataclasses import dataclass
from typing import List, Optional
import uuid
import logging

from ..errors import PixshopError
from .crop import CropRegion
from .handles import HandleRegistry, SessionHandles, SLOT_CURRENT, SLOT_ORIGINAL
from .history import VersionHistory
from .models import Hotspot, ImageVersion, OperationKind, Size, Tab
from .preview import PreviewTransform

logger = logging.getLogger(__name__)


@dataclass
class ChatMessage:
    role: str  # "user" or "model"
    text: str


class EditSession:
    """Owned context object passed to the dispatcher and the UI boundary."""

    def __init__(self, original: ImageVersion, registry: HandleRegistry):
        self.session_id = str(uuid.uuid4())
        self.history = VersionHistory(original)

        # Transient editing state
        self.hotspot: Optional[Hotspot] = None
        self.crop: Optional[CropRegion] = None
        self.crop_surface: Optional[Size] = None
        self.aspect: Optional[float] = None
        self.active_tab: Tab = Tab.RETOUCH

        # Operation state
        self.pending: Optional[OperationKind] = None
        self.last_error: Optional[PixshopError] = None

        # Chat
        self.chat: List[ChatMessage] = []
        self.chat_pending = False

        # Viewing
        self.comparing = False
        self.preview_open = False
        self.preview = PreviewTransform()

        self.handles = SessionHandles(registry)
        self.closed = False
        self.refresh_handles()

        logger.info(f"Session {self.session_id} started with version {original.sequence}")

    @property
    def is_pending(self) -> bool:
        return self.pending is not None

    def current(self) -> Optional[ImageVersion]:
        return self.history.current()

    def original(self) -> Optional[ImageVersion]:
        return self.history.original()

    def refresh_handles(self) -> None:
        """Re-point display handles after the cursor or the sequence moved."""
        if self.closed:
            return
        self.handles.sync(self.history.current(), self.history.original())

    def display_url(self) -> Optional[str]:
        """Handle currently rendered: the original while comparing."""
        if self.comparing and self.handles.get(SLOT_ORIGINAL) is not None:
            return self.handles.url(SLOT_ORIGINAL)
        return self.handles.url(SLOT_CURRENT)

    def clear_crop(self) -> None:
        self.crop = None
        self.crop_surface = None

    def record_error(self, error: PixshopError) -> None:
        self.last_error = error
        logger.warning(f"Session {self.session_id}: {error.__class__.__name__}: {error.message}")

    def close(self) -> None:
        """Tear down the session and release its handles."""
        if self.closed:
            return
        self.handles.close()
        self.closed = True
        logger.info(f"Session {self.session_id} closed")
