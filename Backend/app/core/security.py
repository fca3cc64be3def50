# app/core/security.py
# Path containment check shared by the browse and video endpoints.
# Best-effort only: symlinks are not followed, ".." segments are collapsed.
import os
import re
from pathlib import Path

from app.core.config import settings
from app.core.errors import AccessDenied

# A drive letter followed by a separator, e.g. "C:\" or "d:/"
VOLUME_ROOT_PATTERN = re.compile(r"^[A-Za-z]:[\\/]")


def canonicalize(requested_path: str) -> str:
    """
    Resolve a user supplied path to an absolute, normalized form.
    Relative paths are taken against the current working directory.
    """
    return os.path.abspath(requested_path)


def _is_within(path: str, root: str) -> bool:
    # Compare whole components so "/srv/media-other" is not inside "/srv/media"
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        # Different drives on volume-letter systems
        return False


def permitted_roots() -> list[str]:
    roots = [os.getcwd()]
    roots.extend(canonicalize(str(p)) for p in settings.ALLOWED_ROOTS)
    return roots


def is_allowed(requested_path: str) -> bool:
    """
    Return True if the path may be read.

    Allowed are the current working directory and everything below it,
    any path on a lettered volume (C:\\, D:\\ ...), and the configured
    ALLOWED_ROOTS.
    """
    resolved = canonicalize(requested_path)
    if VOLUME_ROOT_PATTERN.match(resolved):
        return True
    return any(_is_within(resolved, root) for root in permitted_roots())


def guard_path(requested_path: str | Path) -> str:
    """
    Validate a requested path before any I/O happens.

    Returns:
        str: The canonical absolute path.

    Raises:
        AccessDenied: If the path is outside every permitted root.
    """
    resolved = canonicalize(str(requested_path))
    if not is_allowed(resolved):
        raise AccessDenied()
    return resolved
