import logging
import os
import platform
import re
import stat
from datetime import datetime

from app.core.errors import AccessDenied, FileIOError, NotFound
from app.core.security import guard_path
from app.models.file import BrowseResult, DirectoryEntry
from app.services.media import is_video_file

logger = logging.getLogger(__name__)


def get_root_directory() -> str:
    """
    Return the directory listed when no path is requested.
    On Windows this is the root of the drive holding the working directory, "/" elsewhere.
    """
    if platform.system() == "Windows":
        drive = re.match(r"^([A-Za-z]):", os.getcwd())
        if drive:
            return f"{drive.group(1).upper()}:\\"
        return "C:\\"
    return "/"


def get_parent_directory(path: str) -> str:
    """dirname of path, clamped so a filesystem root is its own parent."""
    parent = os.path.dirname(path)
    return parent if parent != path else path


def sort_key(entry: DirectoryEntry):
    # Directories first, then videos, then other files; case-insensitive name within each group
    return (not entry.is_directory, not entry.is_video, entry.name.lower(), entry.name)


def _build_entry(directory: str, name: str) -> DirectoryEntry:
    # Undecodable bytes come back from scandir as lone surrogates, which cannot be sent as JSON
    name.encode("utf-8")
    full_path = os.path.join(directory, name)
    st = os.stat(full_path)
    is_dir = stat.S_ISDIR(st.st_mode)
    return DirectoryEntry(
        name=name,
        path=full_path,
        is_directory=is_dir,
        is_video=not is_dir and is_video_file(name),
        size=0 if is_dir else st.st_size,
        modified=datetime.fromtimestamp(st.st_mtime),
    )


def list_directory(path: str | None = None) -> BrowseResult:
    """
    List the immediate children of a directory.

    Args:
        path: Directory to list. Defaults to the OS root directory.

    Raises:
        AccessDenied: If the path is outside the permitted roots or unreadable.
        NotFound: If the path does not exist or is not a directory.
        FileIOError: For any other failure reading the directory itself.
    """
    real_path = guard_path(path or get_root_directory())

    if not os.path.isdir(real_path):
        raise NotFound(f"Directory not found: {real_path}")

    items: list[DirectoryEntry] = []
    try:
        with os.scandir(real_path) as entries:
            names = [entry.name for entry in entries]
    except PermissionError:
        raise AccessDenied("Permission denied reading directory")
    except FileNotFoundError:
        raise NotFound(f"Directory not found: {real_path}")
    except OSError as e:
        logger.error("Error browsing directory %s: %s", real_path, e)
        raise FileIOError(str(e))

    for name in names:
        try:
            items.append(_build_entry(real_path, name))
        except (OSError, ValueError) as e:
            # Broken symlinks, races, permission problems and undecodable names only drop the entry
            logger.warning("Error accessing %r: %s", os.path.join(real_path, name), e)

    items.sort(key=sort_key)

    return BrowseResult(
        path=real_path,
        parent=get_parent_directory(real_path),
        items=items,
    )
