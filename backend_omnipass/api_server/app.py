"""
FastAPI/ASGI application entrypoint.

Run with: uvicorn backend_omnipass.api_server.app:app --host 0.0.0.0 --port 3001
"""

from backend_omnipass.api_server.server import app, create_app

__all__ = ["app", "create_app"]
