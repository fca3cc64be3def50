import os
from types import MappingProxyType

# Extensions listed as playable videos in the browser
VIDEO_EXTENSIONS = frozenset({
    '.mp4', '.avi', '.mkv', '.mov', '.wmv', '.flv', '.webm', '.m4v', '.3gp', '.ogv'
})

# Content-Type sent for each video extension. Unknown extensions fall back to DEFAULT_VIDEO_MIME_TYPE.
VIDEO_MIME_TYPES = MappingProxyType({
    '.mp4': 'video/mp4',
    '.m4v': 'video/mp4',
    '.webm': 'video/webm',
    '.ogv': 'video/ogg',
    '.avi': 'video/x-msvideo',
    '.mov': 'video/quicktime',
    '.wmv': 'video/x-ms-wmv',
    '.flv': 'video/x-flv',
    '.mkv': 'video/x-matroska',
    '.3gp': 'video/3gpp',
})

DEFAULT_VIDEO_MIME_TYPE = 'video/mp4'


def get_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def is_video_file(filename: str) -> bool:
    """
    Check if the file extension corresponds to a video file.
    """
    return get_extension(filename) in VIDEO_EXTENSIONS


def get_video_mime_type(filename: str) -> str:
    """
    Return the MIME type for a video file, defaulting to video/mp4.
    """
    return VIDEO_MIME_TYPES.get(get_extension(filename), DEFAULT_VIDEO_MIME_TYPE)
