from typing import Optional

from fastapi import APIRouter, Header, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from app.models.file import ErrorResponse
from app.services.streamer import open_stream

router = APIRouter()


@router.get(
    "/video",
    response_class=StreamingResponse,
    responses={
        206: {"description": "Partial content"},
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        416: {"description": "Range not satisfiable"},
        500: {"model": ErrorResponse},
    },
)
async def stream_video(
    path: Optional[str] = Query(default=None, description="Path of the video file"),
    range_header: Optional[str] = Header(default=None, alias="Range"),
):
    """
    Stream a video file, honoring single byte-range requests for seeking.
    """
    status_code, headers, body = await run_in_threadpool(open_stream, path, range_header)
    return StreamingResponse(body, status_code=status_code, headers=headers)
