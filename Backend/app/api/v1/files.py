from typing import Optional

from fastapi import APIRouter, Query
from fastapi.concurrency import run_in_threadpool

from app.models.file import BrowseResult, ErrorResponse
from app.services.browser import list_directory

router = APIRouter()


@router.get(
    "/browse",
    response_model=BrowseResult,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def browse_directory(
    # Omitting the path lists the OS root directory
    path: Optional[str] = Query(default=None, description="Absolute or working-directory relative path to browse")
):
    """
    List files and directories within a specific path.
    """
    # Stat calls are blocking; keep them off the event loop
    return await run_in_threadpool(list_directory, path)
