from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class DirectoryEntry(BaseModel):
    """
    Represents a single file or directory inside a browsed directory.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    path: str  # Absolute, resolved path of the entry
    is_directory: bool = Field(alias="isDirectory")
    is_video: bool = Field(alias="isVideo")  # Always False for directories
    size: int  # File size in bytes (0 for directories)
    modified: datetime


class BrowseResult(BaseModel):
    """
    Represents the contents of a directory for API responses.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str  # The resolved directory being browsed
    parent: str  # Equal to path at a filesystem root
    items: list[DirectoryEntry]


class RangeRequest(BaseModel):
    """
    A single inclusive byte range of a file, parsed from a Range header.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    start: int
    end: int
    total_size: int = Field(alias="totalSize")

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class ErrorResponse(BaseModel):
    error: str
