"""
Pydantic Models for Session Requests
"""

from pydantic import BaseModel, Field
from typing import Optional


class RenderedSize(BaseModel):
    """Size of the on-screen image element"""
    width: float = Field(..., description="Rendered width in CSS pixels")
    height: float = Field(..., description="Rendered height in CSS pixels")


class UploadRequest(BaseModel):
    """Upload a new image as a data URL"""
    filename: str = Field(default="upload.png", description="Original file name")
    data_url: str = Field(..., description="Image as data:<mime>;base64,<payload>")


class ClickRequest(BaseModel):
    """Pointer click relative to the image element's top-left corner"""
    x: float
    y: float
    rendered: RenderedSize


class TabRequest(BaseModel):
    tab: str = Field(..., description="retouch | freestyle | background | adjust | filters | crop | chat")


class CropRequest(BaseModel):
    """Crop selection in rendered coordinates (omit region to clear)"""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rendered: Optional[RenderedSize] = None
    clear: bool = Field(default=False, description="Clear the current selection")


class AspectRequest(BaseModel):
    aspect: Optional[float] = Field(default=None, description="Width/height ratio, or null to unlock")


class CompareRequest(BaseModel):
    comparing: bool


class SubmitRequest(BaseModel):
    """Run an editing action"""
    kind: str = Field(..., description="retouch | filter | adjust | background | freestyle | crop")
    instruction: Optional[str] = Field(default=None, description="Natural-language edit instruction")


class ChatRequest(BaseModel):
    message: str


class ZoomRequest(BaseModel):
    delta_y: float
    mouse_x: float
    mouse_y: float


class PanRequest(BaseModel):
    dx: float
    dy: float


class ChatResponse(BaseModel):
    reply: str


class ErrorResponse(BaseModel):
    """Body of a failed request"""
    type: str
    message: str
    operation: Optional[str] = None
