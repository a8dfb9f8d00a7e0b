"""
Image Serving API Endpoints

Serves the bytes behind live display handles. Once a handle has been
released (its version is no longer current/original, or the session was
replaced) it returns 404.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
import logging

from services.session_service import get_studio

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{token}")
async def serve_image(token: str):
    """
    Serve the image behind a display handle

    Example: /api/images/3f2a9c...
    """
    version = get_studio().resolve_handle(token)
    if version is None:
        logger.warning(f"Handle not found or released: {token}")
        raise HTTPException(status_code=404, detail="Image not found")

    return Response(
        content=version.data,
        media_type=version.mime_type,
        headers={
            "Cache-Control": "private, max-age=3600"  # Token content never changes
        },
    )
