import logging
import os
import re
from typing import BinaryIO, Iterator

from app.core.config import settings
from app.core.errors import BadRequest, FileIOError, NotFound, RangeNotSatisfiable
from app.core.security import guard_path
from app.models.file import RangeRequest
from app.services.media import get_video_mime_type

logger = logging.getLogger(__name__)

RANGE_PATTERN = re.compile(r"^\s*(\d*)\s*-\s*(\d*)\s*$")


def parse_range(range_header: str, total_size: int, path: str = "") -> RangeRequest:
    """
    Parse a "bytes=<start>-[end]" header into an inclusive range.

    Only the first range of a multi-range header is used. The start offset is
    required; a missing end means "to the end of the file".

    Raises:
        RangeNotSatisfiable: If the header is malformed or the range lies outside the file.
    """
    unit, _, spec = range_header.partition("=")
    if unit.strip().lower() != "bytes" or not spec:
        raise RangeNotSatisfiable(total_size, "Unsupported range unit")

    first = spec.split(",")[0]
    match = RANGE_PATTERN.match(first)
    if not match or not match.group(1):
        raise RangeNotSatisfiable(total_size, "Malformed range")

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else total_size - 1

    if start >= total_size or end >= total_size or start > end:
        raise RangeNotSatisfiable(total_size)

    return RangeRequest(path=path, start=start, end=end, total_size=total_size)


def iter_file(file: BinaryIO, start: int, length: int, chunk_size: int) -> Iterator[bytes]:
    """
    Yield `length` bytes of an open file starting at `start`, one chunk at a time.
    The file is closed when iteration ends or the consumer stops early.
    """
    try:
        file.seek(start)
        remaining = length
        while remaining > 0:
            chunk = file.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk
    finally:
        file.close()


def open_stream(path: str | None, range_header: str | None = None):
    """
    Prepare a full or partial response for a video file.

    Returns:
        tuple: (status_code, headers, body_iterator)

    Raises:
        BadRequest: If no path was given.
        AccessDenied: If the path is outside the permitted roots.
        NotFound: If the file does not exist or is a directory.
        FileIOError: If the file cannot be stat-ed or opened.
        RangeNotSatisfiable: If the requested range lies outside the file.
    """
    if not path:
        raise BadRequest("Video path is required")

    real_path = guard_path(path)

    try:
        st = os.stat(real_path)
    except FileNotFoundError:
        raise NotFound(f"File not found: {real_path}")
    except (OSError, ValueError) as e:
        logger.error("Error streaming video %s: %s", real_path, e)
        raise FileIOError(str(e))

    if os.path.isdir(real_path):
        raise NotFound(f"Not a file: {real_path}")

    file_size = st.st_size
    mime_type = get_video_mime_type(real_path)
    logger.info(
        "Serving video path=%s size=%d mime_type=%s has_range=%s",
        real_path, file_size, mime_type, bool(range_header),
    )

    if range_header:
        byte_range = parse_range(range_header, file_size, real_path)
        status_code = 206
        start, length = byte_range.start, byte_range.length
        headers = {
            "Content-Range": f"bytes {byte_range.start}-{byte_range.end}/{file_size}",
            "Accept-Ranges": "bytes",
            "Content-Length": str(length),
            "Content-Type": mime_type,
            "Cache-Control": "no-cache",
        }
    else:
        status_code = 200
        start, length = 0, file_size
        headers = {
            "Content-Length": str(file_size),
            "Content-Type": mime_type,
            "Accept-Ranges": "bytes",
            "Cache-Control": "no-cache",
        }

    try:
        file = open(real_path, "rb")
    except (OSError, ValueError) as e:
        logger.error("Error opening video %s: %s", real_path, e)
        raise FileIOError(str(e))

    return status_code, headers, iter_file(file, start, length, settings.CHUNK_SIZE)
