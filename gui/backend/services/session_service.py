"""
Session Service

Owns the process-wide Studio and maps session errors to HTTP errors.
The Studio is created lazily, so the generative editor (and its API key
check) is only initialized once the first request needs it.
"""

import sys
from pathlib import Path
from typing import Optional
import logging

# Add pixshop to Python path
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi import HTTPException

from pixshop import Studio
from pixshop.errors import (
    CollaboratorError,
    GeometryError,
    OperationBusyError,
    PixshopError,
    ValidationError,
)
from config import PIXEL_DENSITY, get_editor

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    GeometryError: 400,
    OperationBusyError: 409,
    CollaboratorError: 502,
}


def to_http_error(error: PixshopError) -> HTTPException:
    """Translate a session error into an HTTPException with a structured body."""
    status = ERROR_STATUS.get(type(error), 500)
    return HTTPException(status_code=status, detail=error.to_dict())


# Global studio instance
_studio: Optional[Studio] = None


def get_studio() -> Studio:
    """Get or create global studio instance."""
    global _studio

    if _studio is None:
        logger.info("Initializing studio...")
        _studio = Studio(get_editor(), pixel_density=PIXEL_DENSITY)
        logger.info("✓ Studio initialized")

    return _studio


def set_studio(studio: Optional[Studio]) -> None:
    """Replace the global studio (used at shutdown and by tests)."""
    global _studio

    if _studio is not None and _studio is not studio:
        _studio.close()
    _studio = studio
