"""
WebSocket Manager for Real-time Updates
"""

from fastapi import WebSocket
from typing import List, Dict, Any
import json
import logging
import time

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and broadcasts"""

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        """Accept and store a new WebSocket connection"""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"Client connected. Total connections: {len(self.active_connections)}")

    def disconnect(self, websocket: WebSocket):
        """Remove a WebSocket connection"""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        logger.info(f"Client disconnected. Total connections: {len(self.active_connections)}")

    async def broadcast(self, message: Dict[Any, Any]):
        """Send a message to all connected clients"""
        disconnected = []
        for connection in self.active_connections:
            try:
                await connection.send_text(json.dumps(message))
            except Exception as e:
                logger.error(f"Error broadcasting to client: {e}")
                disconnected.append(connection)

        # Clean up disconnected clients
        for connection in disconnected:
            self.disconnect(connection)

    async def broadcast_session_state(self, snapshot: Dict[Any, Any]):
        """
        Broadcast the full session snapshot

        Args:
            snapshot: SessionSnapshot as a dict
        """
        message = {
            "type": "session_update",
            "session": snapshot,
            "timestamp": time.time()
        }
        await self.broadcast(message)
        logger.debug(f"Broadcasted session state (cursor {snapshot.get('cursor')})")

    async def broadcast_operation(self, operation: str, status: str):
        """
        Broadcast an operation status change

        Args:
            operation: Operation kind (e.g., "retouch", "crop", "chat")
            status: "pending", "completed" or "error"
        """
        message = {
            "type": "operation",
            "operation": operation,
            "status": status,
            "timestamp": time.time()
        }
        await self.broadcast(message)
        logger.info(f"Broadcasted {operation}: {status}")

    async def broadcast_error(self, error: Dict[Any, Any]):
        """Broadcast an error message"""
        message = {
            "type": "error",
            "error": error,
            "timestamp": time.time()
        }
        await self.broadcast(message)
        logger.error(f"Broadcasted error: {error.get('message')}")


# Global connection manager instance
manager = ConnectionManager()
