from enum import IntEnum
from typing import Optional

# Formats a browser is told the MIME type for; others are left to sniffing
BROWSER_SUPPORTED_FORMATS = frozenset({'mp4', 'm4v', 'webm', 'ogv', 'mov'})

# Formats that need no conversion hint
NATIVE_FORMATS = frozenset({'mp4', 'm4v', 'webm', 'ogv'})

MKV_REMUX_COMMAND = "ffmpeg -i input.mkv -c copy output.mp4"


class MediaErrorCode(IntEnum):
    """Error codes reported by an HTML media element."""
    ABORTED = 1
    NETWORK = 2
    DECODE = 3
    SRC_NOT_SUPPORTED = 4


def describe_media_error(code: int, extension: str = "", message: Optional[str] = None) -> str:
    """
    Turn a media element error into a message for the user.

    Args:
        code (int): The media error code (1-4, anything else is reported verbatim).
        extension (str): File extension of the video, with or without the leading dot.
        message (str, optional): Extra detail reported by the player.
    """
    ext = extension.lower().lstrip(".")
    text = "Unable to play this video. "

    if code == MediaErrorCode.ABORTED:
        text += "Video loading was aborted."
    elif code == MediaErrorCode.NETWORK:
        text += "Network error while loading video. Check your connection."
    elif code == MediaErrorCode.DECODE:
        text += "Error decoding video. The file may be corrupted or the codec is not supported."
    elif code == MediaErrorCode.SRC_NOT_SUPPORTED:
        if ext == "mkv":
            text += (
                "MKV format is not supported by browsers. If the file uses x264/AAC codecs, "
                "convert it to the MP4 container (fast remux, no re-encoding): "
                f"{MKV_REMUX_COMMAND}"
            )
        else:
            text += (
                f"The video format ({ext or 'unknown'}) is not supported by your browser. "
                "MP4 (H.264) format is recommended."
            )
    else:
        text += f"Error code: {code}"

    if message:
        text += f" Details: {message}"
    return text


def format_hint(extension: str) -> Optional[str]:
    """Conversion hint shown under the error for formats browsers cannot play."""
    ext = extension.lower().lstrip(".")
    if ext == "mkv":
        return f"Convert to MP4 using: {MKV_REMUX_COMMAND} (remuxing only, no re-encoding)"
    if ext and ext not in NATIVE_FORMATS:
        return f"Format {ext.upper()} is not supported. Convert to MP4 for best compatibility."
    return None
