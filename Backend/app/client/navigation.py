# app/client/navigation.py
# Client-side navigation: walks the tree through repeated /api/browse calls.
# The server keeps no session, so the current directory lives here.
import logging
from typing import Callable, Optional

import requests

from app.models.file import BrowseResult, DirectoryEntry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"


class NavigationState:
    """
    Tracks the directory being shown and the last error to display.

    Args:
        base_url: Where the player API is served.
        session: Any requests-compatible client. Defaults to a new requests.Session.
        on_video_select: Called with the path of a file the user opens.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, session=None,
                 on_video_select: Optional[Callable[[str], object]] = None,
                 timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.on_video_select = on_video_select
        self.timeout = timeout
        self.listing: Optional[BrowseResult] = None
        self.error: Optional[str] = None

    @property
    def current_path(self) -> Optional[str]:
        return self.listing.path if self.listing else None

    def load(self, path: Optional[str] = None) -> Optional[BrowseResult]:
        """
        List a directory (the server's root directory when path is None).
        On failure the listing is kept and the error message is stored.
        """
        params = {"path": path} if path else {}
        try:
            response = self.session.get(f"{self.base_url}/api/browse", params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Error loading directory %s: %s", path, e)
            self.error = f"Failed to load directory: {e}"
            return None

        if response.status_code >= 400:
            self.error = _error_message(response)
            return None

        self.listing = BrowseResult.model_validate(response.json())
        self.error = None
        return self.listing

    def up(self) -> Optional[BrowseResult]:
        """Go to the parent of the current directory."""
        if self.listing is None:
            return self.load()
        return self.load(self.listing.parent)

    def open(self, entry: DirectoryEntry) -> Optional[BrowseResult]:
        """Enter a directory, or hand a file to the player."""
        if entry.is_directory:
            return self.load(entry.path)
        if self.on_video_select is not None:
            self.on_video_select(entry.path)
        return None

    def find(self, name: str) -> Optional[DirectoryEntry]:
        if self.listing is None:
            return None
        return next((item for item in self.listing.items if item.name == name), None)


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Failed to load directory (HTTP {response.status_code})"
