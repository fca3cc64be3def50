import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app

VIDEO_SIZE = 10000


def make_bytes(size: int) -> bytes:
    return bytes(i % 251 for i in range(size))


@pytest.fixture
def video_bytes() -> bytes:
    """Contents of movies/a.mkv in the media_tree fixture."""
    return make_bytes(VIDEO_SIZE)


@pytest.fixture
def workdir(tmp_path, monkeypatch) -> Path:
    """A temporary working directory; the path guard permits everything below it."""
    monkeypatch.chdir(tmp_path)
    return Path(os.getcwd())


@pytest.fixture
def media_tree(workdir) -> Path:
    """
    workdir/
      movies/
        a.mkv          (10000 bytes)
        B.mp4
        clip.WEBM
        notes.txt
        Extras/
        archive/
      readme.md
    """
    movies = workdir / "movies"
    movies.mkdir()
    (movies / "a.mkv").write_bytes(make_bytes(VIDEO_SIZE))
    (movies / "B.mp4").write_bytes(make_bytes(2048))
    (movies / "clip.WEBM").write_bytes(make_bytes(10))
    (movies / "notes.txt").write_text("hello")
    (movies / "Extras").mkdir()
    (movies / "archive").mkdir()
    (workdir / "readme.md").write_text("# media")
    return workdir


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
