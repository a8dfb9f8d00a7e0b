"""
Pixshop Studio - FastAPI Backend

This backend provides REST API and WebSocket endpoints for the
photo-editing frontend to drive an edit session.
"""

import sys
from pathlib import Path

# Add pixshop-studio root to Python path
root_dir = Path(__file__).parent.parent.parent
if str(root_dir) not in sys.path:
    sys.path.insert(0, str(root_dir))

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging

from config import CORS_ORIGINS
from api.session import router as session_router
from api.images import router as images_router
from api.websocket import manager
from services.session_service import set_studio

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Pixshop Studio API",
    description="Backend API for the Pixshop photo editor",
    version="0.1.0"
)

# Configure CORS for the frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(session_router, prefix="/api/session", tags=["session"])
app.include_router(images_router, prefix="/api/images", tags=["images"])


@app.on_event("shutdown")
async def shutdown():
    """Release the session's display handles"""
    set_studio(None)
    logger.info("Studio closed")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Pixshop Studio API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.websocket("/ws/session")
async def websocket_session(websocket: WebSocket):
    """
    WebSocket endpoint for real-time session updates

    Sends messages in the format:
    {
        "type": "session_update" | "operation" | "error",
        "session": {...},          # session_update
        "operation": str,          # operation
        "status": "pending" | "completed" | "error",
        "error": {...}             # error
    }
    """
    await manager.connect(websocket)
    try:
        while True:
            # Keep connection alive; clients only listen
            data = await websocket.receive_text()
            logger.debug(f"Received from client: {data}")
    except WebSocketDisconnect:
        manager.disconnect(websocket)
        logger.info("Client disconnected")


if __name__ == "__main__":
    logger.info("Starting Pixshop Studio API server...")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes
        log_level="info"
    )
