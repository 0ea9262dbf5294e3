"""Serves stored assignment attachments."""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from quizdesk.core.files import resolve_stored_file

router = APIRouter(tags=["files"])


@router.get("/files/{name}")
async def get_file(name: str) -> FileResponse:
    """Attachments are public, like the links handed to students."""
    return FileResponse(resolve_stored_file(name))
