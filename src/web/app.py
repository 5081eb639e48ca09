"""
FastAPI application factory for the live detection status API.

Routes:
- /api/health    -> platform and configured model/camera summary
- /api/status    -> loop state, rates and the latest detections
- /api/frame.jpg -> latest frame with the overlay composited on top
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .routes import api
from .state import SharedState


def create_app(shared: Optional[SharedState] = None) -> FastAPI:
    """Create the FastAPI app bound to the loop's shared state."""
    app = FastAPI(
        title="Live Detection",
        version="0.1.0",
        description="Status API for the live object detection overlay",
    )
    app.state.shared = shared or SharedState()
    app.include_router(api.router, prefix="/api")
    return app
