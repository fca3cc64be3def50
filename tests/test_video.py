import errno
import os

import pytest
from fastapi.testclient import TestClient

from app.core.errors import RangeNotSatisfiable
from app.main import app
from app.services import streamer
from app.services.streamer import iter_file, parse_range


@pytest.fixture
def video_path(media_tree) -> str:
    return str(media_tree / "movies" / "a.mkv")


def test_full_file_without_range(client, video_path, video_bytes):
    response = client.get("/api/video", params={"path": video_path})
    assert response.status_code == 200
    assert response.headers["content-length"] == str(len(video_bytes))
    assert response.headers["content-type"] == "video/x-matroska"
    assert response.headers["accept-ranges"] == "bytes"
    assert response.headers["cache-control"] == "no-cache"
    assert response.content == video_bytes


def test_first_hundred_bytes(client, video_path, video_bytes):
    response = client.get("/api/video", params={"path": video_path}, headers={"Range": "bytes=0-99"})
    assert response.status_code == 206
    assert response.headers["content-length"] == "100"
    assert response.headers["content-range"] == f"bytes 0-99/{len(video_bytes)}"
    assert response.content == video_bytes[:100]


def test_middle_range(client, video_path, video_bytes):
    response = client.get("/api/video", params={"path": video_path}, headers={"Range": "bytes=500-999"})
    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 500-999/10000"
    assert response.headers["content-length"] == "500"
    assert response.headers["accept-ranges"] == "bytes"
    assert response.headers["cache-control"] == "no-cache"
    assert response.content == video_bytes[500:1000]


def test_open_ended_range_runs_to_end_of_file(client, video_path, video_bytes):
    response = client.get("/api/video", params={"path": video_path}, headers={"Range": "bytes=9990-"})
    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 9990-9999/10000"
    assert response.content == video_bytes[9990:]


def test_multi_range_serves_first_range(client, video_path, video_bytes):
    response = client.get("/api/video", params={"path": video_path}, headers={"Range": "bytes=0-9,20-29"})
    assert response.status_code == 206
    assert response.headers["content-range"] == "bytes 0-9/10000"
    assert response.content == video_bytes[:10]


@pytest.mark.parametrize("header", [
    "bytes=10000-10000",
    "bytes=0-10000",
    "bytes=600-500",
    "bytes=-500",
    "bytes=abc-",
    "items=0-10",
])
def test_unsatisfiable_ranges(client, video_path, header):
    response = client.get("/api/video", params={"path": video_path}, headers={"Range": header})
    assert response.status_code == 416
    assert response.headers["content-range"] == "bytes */10000"
    assert response.headers["accept-ranges"] == "bytes"
    assert response.content == b""


def test_missing_path_is_bad_request(client, media_tree):
    response = client.get("/api/video")
    assert response.status_code == 400
    assert response.json() == {"error": "Video path is required"}


def test_path_outside_roots_is_forbidden(client, media_tree):
    response = client.get("/api/video", params={"path": "../../etc/passwd"})
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied"}


def test_missing_file_is_not_found(client, media_tree):
    response = client.get("/api/video", params={"path": str(media_tree / "movies" / "gone.mp4")})
    assert response.status_code == 404
    assert "error" in response.json()


def test_directory_is_not_streamed(client, media_tree):
    response = client.get("/api/video", params={"path": str(media_tree / "movies")})
    assert response.status_code == 404


def test_unknown_extension_defaults_to_mp4(client, media_tree):
    (media_tree / "raw.bin").write_bytes(b"\x00" * 16)
    response = client.get("/api/video", params={"path": "raw.bin"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "video/mp4"


def test_parse_range_defaults_end_to_last_byte():
    byte_range = parse_range("bytes=100-", 1000, "/x.mp4")
    assert (byte_range.start, byte_range.end, byte_range.total_size) == (100, 999, 1000)
    assert byte_range.length == 900


def test_parse_range_rejects_empty_file():
    with pytest.raises(RangeNotSatisfiable) as exc_info:
        parse_range("bytes=0-", 0)
    assert exc_info.value.headers["Content-Range"] == "bytes */0"


def test_iter_file_chunks_and_closes(tmp_path, video_bytes):
    target = tmp_path / "data.bin"
    target.write_bytes(video_bytes[:1000])
    handle = open(target, "rb")
    chunks = list(iter_file(handle, 10, 95, chunk_size=30))
    assert [len(c) for c in chunks] == [30, 30, 30, 5]
    assert b"".join(chunks) == video_bytes[:1000][10:105]
    assert handle.closed


def test_iter_file_closes_when_consumer_stops_early(tmp_path, video_bytes):
    target = tmp_path / "data.bin"
    target.write_bytes(video_bytes[:1000])
    handle = open(target, "rb")
    stream = iter_file(handle, 0, 1000, chunk_size=100)
    next(stream)
    stream.close()
    assert handle.closed


def test_stat_failure_is_server_error(client, video_path, monkeypatch):
    real_stat = os.stat

    def failing_stat(path, *args, **kwargs):
        if path == video_path:
            raise OSError(errno.EIO, "Input/output error", path)
        return real_stat(path, *args, **kwargs)

    monkeypatch.setattr(streamer.os, "stat", failing_stat)
    response = client.get("/api/video", params={"path": video_path})
    assert response.status_code == 500
    assert "Input/output error" in response.json()["error"]


def test_open_failure_is_server_error(client, video_path, monkeypatch):
    def failing_open(path, *args, **kwargs):
        raise PermissionError(errno.EACCES, "Permission denied", path)

    monkeypatch.setattr(streamer, "open", failing_open, raising=False)
    response = client.get("/api/video", params={"path": video_path})
    assert response.status_code == 500
    assert "Permission denied" in response.json()["error"]


def test_path_with_nul_byte_is_json_error(client, media_tree):
    response = client.get("/api/video", params={"path": "movies/a\x00.mkv"})
    assert response.status_code == 500
    assert "error" in response.json()


def test_unexpected_exception_is_json_error(media_tree, monkeypatch):
    def broken(path, range_header=None):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr("app.api.v1.media.open_stream", broken)
    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/video", params={"path": "movies/a.mkv"})
    assert response.status_code == 500
    assert response.json() == {"error": "disk on fire"}
