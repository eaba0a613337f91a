"""HTTP/WebSocket host for the filesystem tools (requires the `api` extra)."""

from .server import create_app
from .websocket import WebSocketConfirmationProvider, handle_websocket

__all__ = ["create_app", "handle_websocket", "WebSocketConfirmationProvider"]
