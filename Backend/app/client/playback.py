# app/client/playback.py
# Client-side playback state: the single "last played" slot and resume logic.
import logging
import re
import time
from typing import Callable, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.client.errors import BROWSER_SUPPORTED_FORMATS, describe_media_error, format_hint
from app.client.storage import KeyValueStorage
from app.services.media import get_extension, get_video_mime_type

logger = logging.getLogger(__name__)

STORAGE_KEY = "lastPlayedVideo"

# How often the position is saved while playing, in seconds
POSITION_SAVE_INTERVAL = 5.0

# Positions closer than this to the end are treated as finished
RESUME_END_MARGIN = 5.0

# Past this position the resume button says "Resume" instead of "Play"
RESUME_LABEL_THRESHOLD = 10.0

MAX_LABEL_LENGTH = 25


class LastPlayedRecord(BaseModel):
    """The most recently selected video. Only one exists at a time."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    display_name: str = Field(alias="displayName")
    timestamp_ms: int = Field(alias="timestampMs")
    position_seconds: Optional[float] = Field(default=None, alias="positionSeconds")


def display_name(path: str) -> str:
    """Last segment of a path, for either separator style."""
    name = re.split(r"[\\/]", path.rstrip("\\/"))[-1]
    return name or "Unknown"


def format_time(seconds: float) -> str:
    """Format seconds as m:ss, or h:mm:ss from one hour on."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def resume_label(record: LastPlayedRecord) -> str:
    """Text for the resume button, e.g. "Resume: Some Movie.mp4"."""
    position = record.position_seconds
    verb = "Resume" if position and position > RESUME_LABEL_THRESHOLD else "Play"
    name = record.display_name
    if len(name) > MAX_LABEL_LENGTH:
        name = name[:MAX_LABEL_LENGTH] + "..."
    return f"{verb}: {name}"


class PlaybackState:
    """
    Owns the last-played record and the currently selected video.
    The record is persisted through the injected storage after every change.
    """

    def __init__(self, storage: KeyValueStorage, key: str = STORAGE_KEY,
                 clock: Callable[[], float] = time.time):
        self.storage = storage
        self.key = key
        self.clock = clock
        self.selected: Optional[str] = None
        self.last_played: Optional[LastPlayedRecord] = self._load()

    def _load(self) -> Optional[LastPlayedRecord]:
        raw = self.storage.get(self.key)
        if not raw:
            return None
        try:
            return LastPlayedRecord.model_validate_json(raw)
        except ValidationError as e:
            logger.error("Error loading last played video: %s", e)
            return None

    def _save(self, record: LastPlayedRecord) -> None:
        self.storage.set(self.key, record.model_dump_json(by_alias=True, exclude_none=True))
        self.last_played = record

    def select(self, path: str) -> LastPlayedRecord:
        """Start playing a video; overwrites the last-played record."""
        self.selected = path
        record = LastPlayedRecord(
            path=path,
            display_name=display_name(path),
            timestamp_ms=int(self.clock() * 1000),
        )
        self._save(record)
        return record

    def update_position(self, path: str, seconds: Optional[float]) -> bool:
        """
        Store the playback position for the selected video.
        Updates for any other path, or non-positive positions, are ignored.
        """
        record = self.last_played
        if record is None or path != self.selected or record.path != path:
            return False
        if seconds is None or seconds <= 0:
            return False
        self._save(record.model_copy(update={"position_seconds": seconds}))
        return True

    def resume(self) -> Optional[str]:
        """Select the last-played video again, returning its path."""
        if self.last_played is None:
            return None
        self.selected = self.last_played.path
        return self.selected

    def resume_position(self, duration: Optional[float]) -> Optional[float]:
        """
        Position to seek to once the duration is known, or None to start from the beginning.
        """
        record = self.last_played
        if record is None or record.path != self.selected:
            return None
        position = record.position_seconds
        if not position or position <= 0 or not duration:
            return None
        if position >= duration - RESUME_END_MARGIN:
            return None
        return position

    def close(self) -> None:
        self.selected = None

    def clear(self) -> None:
        self.storage.remove(self.key)
        self.last_played = None

    def stream_url(self, base_url: str = "") -> Optional[str]:
        if self.selected is None:
            return None
        return f"{base_url.rstrip('/')}/api/video?{urlencode({'path': self.selected})}"

    def source_type(self) -> Optional[str]:
        """MIME type to hand the player, or None to let the browser detect it."""
        if self.selected is None:
            return None
        if get_extension(self.selected).lstrip(".") not in BROWSER_SUPPORTED_FORMATS:
            return None
        return get_video_mime_type(self.selected)

    def source(self, base_url: str = "") -> Optional[dict[str, str]]:
        """
        Player source for the selected video: {"src": url} plus "type" when the
        format is one browsers play natively.
        """
        url = self.stream_url(base_url)
        if url is None:
            return None
        source = {"src": url}
        mime_type = self.source_type()
        if mime_type:
            source["type"] = mime_type
        return source

    def error_message(self, code: int, detail: Optional[str] = None) -> tuple[str, Optional[str]]:
        """Message and conversion hint to show when the player reports an error."""
        extension = get_extension(self.selected or "")
        return describe_media_error(code, extension, detail), format_hint(extension)


class PositionReporter:
    """
    Feeds player events into a PlaybackState.
    Saves every POSITION_SAVE_INTERVAL seconds while playing, and on pause and seek.
    """

    def __init__(self, state: PlaybackState, interval: float = POSITION_SAVE_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        self.state = state
        self.interval = interval
        self.clock = clock
        self.playing = False
        self._last_save: Optional[float] = None

    def _save(self, current_time: Optional[float]) -> None:
        if self.state.selected is None:
            return
        self.state.update_position(self.state.selected, current_time)
        self._last_save = self.clock()

    def on_play(self) -> None:
        self.playing = True
        self._last_save = self.clock()

    def on_time_update(self, current_time: float) -> None:
        if not self.playing or self._last_save is None:
            return
        if self.clock() - self._last_save >= self.interval:
            self._save(current_time)

    def on_pause(self, current_time: float) -> None:
        self.playing = False
        self._save(current_time)

    def on_seeked(self, current_time: float) -> None:
        self._save(current_time)

    def on_close(self, current_time: Optional[float]) -> None:
        # Final save before the player goes away
        self._save(current_time)
        self.playing = False
        self.state.close()
