"""
Studio - the UI boundary of the editor

Translates user gestures (upload, click, undo, tab switches, submit,
download, preview) into operations on the current edit session. A Studio
owns at most one session at a time; uploading replaces it.
"""

from dataclasses import asdict, replace
from typing import Optional, Tuple, Union
import logging

from .adapters.image_editing_adapter import BaseImageEditor
from .editing.coordinates import clamp_to_image, to_natural
from .editing.crop import CropRegion
from .editing.dispatcher import ActionDispatcher
from .editing.handles import HandleRegistry, SLOT_CURRENT, SLOT_ORIGINAL
from .editing.models import Hotspot, ImageVersion, OperationKind, Size, Tab, timestamp_ms
from .editing.session import EditSession
from .errors import GeometryError, OperationBusyError, PixshopError, ValidationError
from .schemas import (
    ChatMessageState,
    CropState,
    ErrorState,
    HotspotState,
    PreviewState,
    SessionSnapshot,
    VersionInfo,
)
from .utils import UNKNOWN_MIME, read_image_info, read_image_size

logger = logging.getLogger(__name__)

DOWNLOAD_PREFIX = "pixshop-edit"

# Suggestions shown under the freestyle instruction box
FREESTYLE_EXAMPLES = [
    "Add a dreamy nebula to the sky",
    "Dress the person in a space suit",
    "Turn this photo into a Van Gogh style oil painting",
    "Add a cute kitten on the grass",
]


class Studio:
    """
    Owns the active EditSession and exposes every user-facing action.

    Errors are recorded as the session's last error and re-raised, so the
    caller can both report them immediately and render them later.
    """

    def __init__(
        self,
        editor: BaseImageEditor,
        pixel_density: float = 1.0,
        registry: Optional[HandleRegistry] = None,
    ):
        self.registry = registry or HandleRegistry()
        self.dispatcher = ActionDispatcher(editor, pixel_density=pixel_density)
        self.session: Optional[EditSession] = None

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #

    def upload(self, data: bytes, filename: str = "upload.png", mime_type: Optional[str] = None) -> EditSession:
        """
        Start a new session from an uploaded image.

        The previous session (if any) is closed, releasing its handles; a
        result still in flight for it will be discarded on arrival.
        The MIME type sniffed from the bytes wins over the declared one.
        """
        try:
            size, detected_mime = read_image_info(data)
        except ValidationError as e:
            if self.session is not None:
                self.session.record_error(e)
            raise
        version = ImageVersion(
            data=data,
            origin=OperationKind.UPLOAD,
            mime_type=detected_mime if detected_mime != UNKNOWN_MIME else (mime_type or detected_mime),
            filename=filename,
        )

        if self.session is not None:
            self.session.close()
        self.session = EditSession(version, self.registry)

        logger.info(f"✓ Uploaded {filename} ({int(size.width)}x{int(size.height)}, {len(data)} bytes)")
        return self.session

    def close(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None
        self.dispatcher.shutdown()

    def _require_session(self, operation: Optional[str] = None) -> EditSession:
        if self.session is None:
            raise ValidationError("No image loaded", operation)
        return self.session

    def _guarded(self, session: EditSession, func, *args):
        """Run a synchronous action, recording any error on the session."""
        try:
            return func(*args)
        except PixshopError as e:
            session.record_error(e)
            raise

    # ------------------------------------------------------------------ #
    # Pointer input and tabs
    # ------------------------------------------------------------------ #

    def click(self, x: float, y: float, rendered: Size) -> Optional[Hotspot]:
        """
        Handle a click at rendered coordinates `(x, y)`.

        Retouch tab: sets the hotspot. Crop tab: ignored. Any other tab:
        opens the full-screen preview.

        Returns:
            The new hotspot in retouch mode, otherwise None
        """
        session = self._require_session("click")

        if session.active_tab == Tab.RETOUCH:
            return self._guarded(session, self._set_hotspot, session, x, y, rendered)
        if session.active_tab != Tab.CROP:
            self.view_fullscreen()
        return None

    def _set_hotspot(self, session: EditSession, x: float, y: float, rendered: Size) -> Hotspot:
        natural = read_image_size(session.current().data)
        natural_x, natural_y = clamp_to_image(*to_natural(x, y, rendered, natural), natural)
        session.hotspot = Hotspot(natural_x=natural_x, natural_y=natural_y, display_x=x, display_y=y)
        session.last_error = None
        logger.info(f"Hotspot set at natural ({natural_x}, {natural_y})")
        return session.hotspot

    def select_tab(self, tab: Union[Tab, str]) -> Tab:
        session = self._require_session("select_tab")
        try:
            session.active_tab = Tab(tab)
        except ValueError:
            error = ValidationError(f"Unknown tab: {tab}", "select_tab")
            session.record_error(error)
            raise error
        return session.active_tab

    # ------------------------------------------------------------------ #
    # Crop selection
    # ------------------------------------------------------------------ #

    def set_crop(self, region: Optional[CropRegion], rendered: Optional[Size] = None) -> Optional[CropRegion]:
        """
        Store the crop selection, applying the aspect lock and clamping it
        to the rendered surface. Passing None clears the selection.
        """
        session = self._require_session("crop")
        if region is None:
            session.clear_crop()
            return None
        if rendered is None or rendered.width <= 0 or rendered.height <= 0:
            error = GeometryError("Crop selection needs a non-empty render surface", "crop")
            session.record_error(error)
            raise error

        def apply():
            locked = region.with_aspect(session.aspect) if session.aspect else region.with_aspect()
            return locked.clamped(rendered)

        session.crop = self._guarded(session, apply)
        session.crop_surface = rendered
        return session.crop

    def set_aspect(self, aspect: Optional[float]) -> None:
        """Lock (or with None, unlock) the crop aspect ratio."""
        session = self._require_session("crop")
        if aspect is not None and aspect <= 0:
            error = ValidationError(f"Invalid aspect ratio: {aspect}", "crop")
            session.record_error(error)
            raise error

        session.aspect = aspect
        if session.crop is not None:
            if aspect:
                session.crop = session.crop.with_aspect(aspect)
            else:
                session.crop = replace(session.crop, aspect=None)

    # ------------------------------------------------------------------ #
    # History
    # ------------------------------------------------------------------ #

    def undo(self) -> int:
        return self._move_cursor("undo")

    def redo(self) -> int:
        return self._move_cursor("redo")

    def _move_cursor(self, direction: str) -> int:
        session = self._require_session(direction)

        def move():
            if session.is_pending:
                raise OperationBusyError(
                    f"Cannot {direction} while {session.pending.value} is in progress", direction
                )
            return session.history.undo() if direction == "undo" else session.history.redo()

        cursor = self._guarded(session, move)
        session.refresh_handles()
        logger.info(f"{direction.capitalize()} -> version {cursor + 1}/{len(session.history)}")
        return cursor

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    async def submit(self, kind: Union[OperationKind, str], instruction: Optional[str] = None) -> Optional[ImageVersion]:
        """Run an editing action through the dispatcher."""
        session = self._require_session(getattr(kind, "value", kind))
        try:
            kind = OperationKind(kind)
            if kind == OperationKind.UPLOAD:
                raise ValidationError("Use upload() to load a new image", kind.value)
        except ValueError:
            error = ValidationError(f"Unknown operation: {kind}")
            session.record_error(error)
            raise error
        except ValidationError as e:
            session.record_error(e)
            raise
        return await self.dispatcher.submit(session, kind, instruction)

    async def send_message(self, message: str) -> str:
        session = self._require_session("chat")
        return await self.dispatcher.send_message(session, message)

    # ------------------------------------------------------------------ #
    # Viewing
    # ------------------------------------------------------------------ #

    def set_comparing(self, comparing: bool) -> Optional[str]:
        """Hold to show the original; returns the handle now displayed."""
        session = self._require_session("compare")
        session.comparing = comparing
        return session.display_url()

    def download(self) -> Tuple[str, str, bytes]:
        """
        Current version as a download.

        Returns:
            (filename, mime_type, data)
        """
        session = self._require_session("download")
        version = session.current()
        return f"{DOWNLOAD_PREFIX}-{timestamp_ms()}.png", version.mime_type, version.data

    def view_fullscreen(self) -> Optional[str]:
        session = self._require_session("preview")
        session.preview_open = True
        session.preview.reset()
        return session.handles.url(SLOT_CURRENT)

    def close_preview(self) -> None:
        session = self._require_session("preview")
        session.preview_open = False
        session.preview.reset()

    def zoom_preview(self, delta_y: float, mouse_x: float, mouse_y: float) -> PreviewState:
        session = self._require_session("preview")
        session.preview.zoom(delta_y, mouse_x, mouse_y)
        return self._preview_state(session)

    def pan_preview(self, dx: float, dy: float) -> PreviewState:
        session = self._require_session("preview")
        session.preview.pan(dx, dy)
        return self._preview_state(session)

    def reset_preview(self) -> PreviewState:
        session = self._require_session("preview")
        session.preview.reset()
        return self._preview_state(session)

    def resolve_handle(self, token: str) -> Optional[ImageVersion]:
        return self.registry.resolve(token)

    # ------------------------------------------------------------------ #
    # Snapshot
    # ------------------------------------------------------------------ #

    def _preview_state(self, session: EditSession) -> PreviewState:
        return PreviewState(
            open=session.preview_open,
            scale=session.preview.scale,
            x=session.preview.x,
            y=session.preview.y,
        )

    def snapshot(self) -> SessionSnapshot:
        """Serializable view of the current session."""
        session = self.session
        if session is None:
            return SessionSnapshot()

        history = session.history
        hotspot = session.hotspot
        crop = session.crop
        error = session.last_error

        return SessionSnapshot(
            has_image=True,
            session_id=session.session_id,
            active_tab=session.active_tab.value,
            versions=[
                VersionInfo(
                    sequence=v.sequence,
                    origin=v.origin.value,
                    filename=v.filename,
                    mime_type=v.mime_type,
                    size_bytes=v.size_bytes,
                    created_at=v.created_at,
                )
                for v in history.versions
            ],
            cursor=history.cursor,
            can_undo=history.can_undo,
            can_redo=history.can_redo,
            current_url=session.handles.url(SLOT_CURRENT),
            original_url=session.handles.url(SLOT_ORIGINAL),
            display_url=session.display_url(),
            comparing=session.comparing,
            hotspot=HotspotState(**asdict(hotspot)) if hotspot else None,
            crop=CropState(**asdict(crop)) if crop else None,
            aspect=session.aspect,
            pending=session.pending.value if session.pending else None,
            chat_pending=session.chat_pending,
            chat=[ChatMessageState(role=m.role, text=m.text) for m in session.chat],
            preview=self._preview_state(session),
            last_error=ErrorState(**error.to_dict()) if error else None,
        )
