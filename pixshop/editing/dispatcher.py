"""
Action Dispatcher

Runs each mutating user action (retouch, filter, adjustment, background,
freestyle, crop) as a single-flight task against a session:

    Idle --submit--> Pending(kind) --success/failure--> Idle

Preconditions are checked before the transition, so a rejected request
leaves the session untouched. Only one operation may be pending per
session; a second submit is rejected as busy rather than queued, because
two edits of the same version do not commute.
"""

from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Optional
import asyncio
import logging

from ..adapters.image_editing_adapter import BaseImageEditor, GeneratedImage
from ..errors import (
    CollaboratorError,
    GeometryError,
    OperationBusyError,
    PixshopError,
    ValidationError,
)
from ..utils import read_image_size
from .crop import extract_crop, resolve_crop
from .models import GENERATIVE_OPERATIONS, Hotspot, ImageVersion, OperationKind, result_filename
from .session import ChatMessage, EditSession

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """
    Single-flight executor for session actions.

    Blocking work (the service SDK call, the crop extraction) runs in a
    single-worker thread pool so the event loop stays responsive; the
    await on that work is the only point where a pending operation yields.
    """

    def __init__(
        self,
        editor: BaseImageEditor,
        pixel_density: float = 1.0,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.editor = editor
        self.pixel_density = pixel_density
        self.executor = executor or ThreadPoolExecutor(max_workers=1)

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(self.executor, partial(func, *args))

    def validate(self, session: EditSession, kind: OperationKind, instruction: Optional[str]) -> None:
        """
        Check every precondition for `Idle -> Pending(kind)`.

        Raises:
            OperationBusyError: If another operation is pending
            ValidationError: If a required input is missing
        """
        if session.closed or session.current() is None:
            raise ValidationError("No image loaded to edit", kind.value)
        if session.is_pending:
            raise OperationBusyError(
                f"Cannot start {kind.value} while {session.pending.value} is in progress",
                kind.value,
            )

        if kind == OperationKind.CROP:
            if session.crop is None or session.crop_surface is None:
                raise ValidationError("Select a crop area first", kind.value)
            if not session.crop.has_area:
                raise ValidationError("Crop area has no size", kind.value)
            if not session.crop.matches_aspect():
                raise ValidationError(
                    f"Crop area {session.crop.width:g}x{session.crop.height:g} "
                    f"does not match aspect ratio {session.crop.aspect:g}",
                    kind.value,
                )
            return

        if kind not in GENERATIVE_OPERATIONS:
            raise ValidationError(f"Unsupported operation: {kind.value}", kind.value)
        if not instruction or not instruction.strip():
            raise ValidationError("Describe the edit you want to make", kind.value)
        if kind == OperationKind.RETOUCH and session.hotspot is None:
            raise ValidationError("Click on the image to choose the area to retouch", kind.value)

    async def submit(
        self,
        session: EditSession,
        kind: OperationKind,
        instruction: Optional[str] = None,
    ) -> Optional[ImageVersion]:
        """
        Run one action and commit its result to the session's history.

        Args:
            session: Session to act on
            kind: Operation to run
            instruction: Natural-language instruction (not used by crop)

        Returns:
            The committed version, or None if the session was replaced
            while the operation was in flight

        Raises:
            ValidationError, OperationBusyError: Synchronously, before any work
            CollaboratorError, GeometryError: After the await; history is unchanged
        """
        kind = OperationKind(kind)
        try:
            self.validate(session, kind, instruction)
        except PixshopError as e:
            session.record_error(e)
            raise

        source = session.current()
        hotspot = session.hotspot
        session.pending = kind
        session.last_error = None
        logger.info(f"Session {session.session_id}: {kind.value} started on version {source.sequence}")

        try:
            if kind == OperationKind.CROP:
                result = await self._crop(session, source)
            else:
                result = await self._generate(kind, source, instruction.strip(), hotspot)
            if not result.data:
                raise CollaboratorError(kind.value, "The service returned an empty image")
        except PixshopError as e:
            if isinstance(e, CollaboratorError) and e.operation is None:
                e = CollaboratorError(kind.value, e.reason)
            return self._fail(session, kind, e)
        except Exception as e:
            logger.error(f"{kind.value} failed unexpectedly: {e}", exc_info=True)
            if kind == OperationKind.CROP:
                error = GeometryError(f"Could not crop image: {e}", kind.value)
            else:
                error = CollaboratorError(kind.value, str(e) or e.__class__.__name__)
            return self._fail(session, kind, error)
        finally:
            session.pending = None

        if session.closed:
            logger.warning(f"Discarding stale {kind.value} result for closed session {session.session_id}")
            return None

        version = ImageVersion(
            data=result.data,
            origin=kind,
            mime_type=result.mime_type,
            filename=result_filename(kind),
        )
        cursor = session.history.append(version)
        session.last_error = None

        # A hotspot placed while the retouch was running belongs to the next edit
        if kind == OperationKind.RETOUCH and session.hotspot is hotspot:
            session.hotspot = None
        session.clear_crop()
        session.refresh_handles()

        logger.info(f"✓ Session {session.session_id}: {kind.value} committed version {version.sequence} at {cursor}")
        return version

    def _fail(self, session: EditSession, kind: OperationKind, error: PixshopError):
        if session.closed:
            logger.warning(f"Ignoring {kind.value} failure for closed session {session.session_id}: {error.message}")
            return None
        session.record_error(error)
        raise error

    async def _generate(
        self,
        kind: OperationKind,
        source: ImageVersion,
        instruction: str,
        hotspot: Optional[Hotspot],
    ) -> GeneratedImage:
        if kind == OperationKind.RETOUCH:
            return await self._run_blocking(
                self.editor.retouch, source.data, source.mime_type, instruction, hotspot
            )

        operations = {
            OperationKind.FILTER: self.editor.apply_filter,
            OperationKind.ADJUST: self.editor.apply_adjustment,
            OperationKind.BACKGROUND: self.editor.replace_background,
            OperationKind.FREESTYLE: self.editor.freestyle,
        }
        return await self._run_blocking(operations[kind], source.data, source.mime_type, instruction)

    async def _crop(self, session: EditSession, source: ImageVersion) -> GeneratedImage:
        rendered = session.crop_surface
        region = session.crop.clamped(rendered)
        rect = resolve_crop(region, rendered, read_image_size(source.data))

        logger.info(f"Cropping natural rect {rect.box()} (density {self.pixel_density})")
        data = await self._run_blocking(extract_crop, source.data, rect, self.pixel_density)
        return GeneratedImage(data=data, mime_type="image/png")

    async def send_message(self, session: EditSession, message: str) -> str:
        """
        Exchange one chat message. The user's message stays in the
        transcript even when the reply fails.
        """
        if not message or not message.strip():
            error = ValidationError("Message is empty", "chat")
            session.record_error(error)
            raise error
        if session.chat_pending:
            error = OperationBusyError("Waiting for the previous reply", "chat")
            session.record_error(error)
            raise error

        session.chat.append(ChatMessage(role="user", text=message))
        session.chat_pending = True
        session.last_error = None

        try:
            reply = await self._run_blocking(self.editor.chat, message)
        except PixshopError as e:
            reason = e.reason if isinstance(e, CollaboratorError) else e.message
            error = CollaboratorError("chat", reason)
            session.record_error(error)
            raise error
        except Exception as e:
            logger.error(f"Chat failed unexpectedly: {e}", exc_info=True)
            error = CollaboratorError("chat", str(e) or e.__class__.__name__)
            session.record_error(error)
            raise error
        finally:
            session.chat_pending = False

        session.chat.append(ChatMessage(role="model", text=reply))
        return reply

    def shutdown(self) -> None:
        self.executor.shutdown(wait=False)
