import logging
import socket

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import ApiError, api_error_handler, http_exception_handler, unhandled_exception_handler
from app.core.logging import setup_logging

# Import API routers
from app.api.v1 import files as files_router
from app.api.v1 import media as media_router

logger = logging.getLogger(__name__)

# Initialize the FastAPI application
app = FastAPI(title="Local Video Player API")

# Configure CORS (Cross-Origin Resource Sharing)
# Lets a front-end dev server on another port call the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
)

# Every failure leaves the API as {"error": "..."}
app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include API Routers

# Directory browsing: GET /api/browse
app.include_router(
    files_router.router,
    prefix="/api",
    tags=["Files"]           # Grouping label for the /docs Swagger UI
)

# Video streaming: GET /api/video
app.include_router(
    media_router.router,
    prefix="/api",
    tags=["Media"]
)


# SPA fallback. Registered last so the API routes above win.
@app.get("/{full_path:path}", include_in_schema=False)
async def serve_client(full_path: str):
    """
    Serve the bundled front-end entry document for every non-API route.
    """
    if full_path == "api" or full_path.startswith("api/"):
        raise HTTPException(status_code=404, detail="Not found")

    index_file = settings.CLIENT_BUILD_PATH / "index.html"
    if not index_file.is_file():
        raise HTTPException(status_code=404, detail="Client build not found")
    return FileResponse(index_file, media_type="text/html")


def get_local_ip() -> str:
    """
    Return the first non-loopback IPv4 address of this machine, or "localhost".
    """
    try:
        # No packets are sent; connecting a UDP socket only selects the outgoing interface
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("10.255.255.255", 1))
            address = s.getsockname()[0]
    except OSError:
        return "localhost"
    if address.startswith("127."):
        return "localhost"
    return address


def run() -> None:
    """
    Start the server on HOST:PORT.
    """
    setup_logging()
    local_ip = get_local_ip()
    logger.info("Server running at:")
    logger.info("  Local:   http://localhost:%d", settings.PORT)
    logger.info("  Network: http://%s:%d", local_ip, settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
