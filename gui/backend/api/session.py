"""
Session API Endpoints

Every endpoint operates on the single active edit session of the studio
and returns the resulting session snapshot, which is also pushed to
WebSocket clients.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
import logging

from pixshop.editing import CropRegion, Size
from pixshop.errors import PixshopError, ValidationError
from pixshop.schemas import PreviewState, SessionSnapshot
from pixshop.studio import FREESTYLE_EXAMPLES
from pixshop.utils import decode_data_url

from config import MAX_UPLOAD_BYTES, MAX_UPLOAD_MB
from models.session import (
    AspectRequest,
    ChatRequest,
    ChatResponse,
    ClickRequest,
    CompareRequest,
    CropRequest,
    PanRequest,
    SubmitRequest,
    TabRequest,
    UploadRequest,
    ZoomRequest,
)
from services.session_service import get_studio, to_http_error
from api.websocket import manager

router = APIRouter()
logger = logging.getLogger(__name__)


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error during {action}: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


async def _publish(studio) -> SessionSnapshot:
    snapshot = studio.snapshot()
    await manager.broadcast_session_state(snapshot.dict())
    return snapshot


async def _report(error: PixshopError) -> HTTPException:
    await manager.broadcast_error(error.to_dict())
    return to_http_error(error)


@router.get("/state", response_model=SessionSnapshot)
async def get_session_state():
    """Get the current session snapshot"""
    return get_studio().snapshot()


@router.get("/examples")
async def get_freestyle_examples():
    """Example prompts for the freestyle tab"""
    return {"freestyle": FREESTYLE_EXAMPLES}


@router.post("/upload", response_model=SessionSnapshot)
async def upload_image(request: UploadRequest):
    """
    Start a new session from an uploaded image.

    The image is sent as a data URL; the previous session is discarded.
    """
    studio = get_studio()
    try:
        mime_type, data = decode_data_url(request.data_url)
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationError(f"Image exceeds the {MAX_UPLOAD_MB:g} MB upload limit", "upload")

        studio.upload(data, filename=request.filename, mime_type=mime_type)
        return await _publish(studio)

    except PixshopError as e:
        raise await _report(e)
    except Exception as e:
        raise _unexpected("upload", e)


@router.post("/click", response_model=SessionSnapshot)
async def click_image(request: ClickRequest):
    """Set the retouch hotspot, or open the preview outside retouch/crop tabs"""
    studio = get_studio()
    try:
        studio.click(request.x, request.y, Size(request.rendered.width, request.rendered.height))
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/tab", response_model=SessionSnapshot)
async def select_tab(request: TabRequest):
    studio = get_studio()
    try:
        studio.select_tab(request.tab)
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/crop", response_model=SessionSnapshot)
async def set_crop(request: CropRequest):
    """Update (or clear) the crop selection"""
    studio = get_studio()
    try:
        if request.clear:
            studio.set_crop(None)
        else:
            rendered = Size(request.rendered.width, request.rendered.height) if request.rendered else None
            region = CropRegion(x=request.x, y=request.y, width=request.width, height=request.height)
            studio.set_crop(region, rendered)
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/aspect", response_model=SessionSnapshot)
async def set_aspect(request: AspectRequest):
    studio = get_studio()
    try:
        studio.set_aspect(request.aspect)
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/compare", response_model=SessionSnapshot)
async def set_comparing(request: CompareRequest):
    """Hold to compare with the original"""
    studio = get_studio()
    try:
        studio.set_comparing(request.comparing)
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/undo", response_model=SessionSnapshot)
async def undo():
    studio = get_studio()
    try:
        studio.undo()
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/redo", response_model=SessionSnapshot)
async def redo():
    studio = get_studio()
    try:
        studio.redo()
        return await _publish(studio)
    except PixshopError as e:
        raise await _report(e)


@router.post("/submit", response_model=SessionSnapshot)
async def submit_action(request: SubmitRequest):
    """
    Run an editing action and wait for the result.

    Returns 409 if another action is still in progress and 502 if the
    generative service fails; the history is unchanged in both cases.
    """
    studio = get_studio()
    try:
        await manager.broadcast_operation(request.kind, "pending")
        version = await studio.submit(request.kind, request.instruction)
        await manager.broadcast_operation(request.kind, "completed")

        if version is not None:
            logger.info(f"✓ {request.kind} committed version {version.sequence}")
        return await _publish(studio)

    except PixshopError as e:
        await manager.broadcast_operation(request.kind, "error")
        raise await _report(e)
    except Exception as e:
        raise _unexpected(request.kind, e)


@router.post("/chat", response_model=ChatResponse)
async def send_chat_message(request: ChatRequest):
    """Send a chat message; the user message is kept even if the reply fails"""
    studio = get_studio()
    try:
        reply = await studio.send_message(request.message)
        await _publish(studio)
        return ChatResponse(reply=reply)
    except PixshopError as e:
        if studio.session is not None:
            await _publish(studio)
        raise await _report(e)
    except Exception as e:
        raise _unexpected("chat", e)


@router.get("/download")
async def download_image():
    """Download the current version"""
    studio = get_studio()
    try:
        filename, mime_type, data = studio.download()
    except PixshopError as e:
        raise to_http_error(e)

    return Response(
        content=data,
        media_type=mime_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/preview/open")
async def open_preview():
    """Open the full-screen preview of the current version"""
    studio = get_studio()
    try:
        url = studio.view_fullscreen()
        await _publish(studio)
        return {"url": url}
    except PixshopError as e:
        raise to_http_error(e)


@router.post("/preview/close", response_model=SessionSnapshot)
async def close_preview():
    studio = get_studio()
    try:
        studio.close_preview()
        return await _publish(studio)
    except PixshopError as e:
        raise to_http_error(e)


@router.post("/preview/zoom", response_model=PreviewState)
async def zoom_preview(request: ZoomRequest):
    try:
        return get_studio().zoom_preview(request.delta_y, request.mouse_x, request.mouse_y)
    except PixshopError as e:
        raise to_http_error(e)


@router.post("/preview/pan", response_model=PreviewState)
async def pan_preview(request: PanRequest):
    try:
        return get_studio().pan_preview(request.dx, request.dy)
    except PixshopError as e:
        raise to_http_error(e)


@router.post("/preview/reset", response_model=PreviewState)
async def reset_preview():
    try:
        return get_studio().reset_preview()
    except PixshopError as e:
        raise to_http_error(e)
