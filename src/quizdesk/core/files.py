"""Assignment attachments: upload validation, storage and preview.

Files are written to the configured storage directory under a random name
and served back by the web app at /files/{name}.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from urllib.parse import quote

import structlog

from quizdesk.config.app_config import load_app_config
from quizdesk.core.errors import FileTooLargeError, NotFoundError, UploadRejectedError

logger = structlog.get_logger(__name__)

FileType = Literal["image", "pdf", "document", "presentation"]
FileCategory = Literal["image", "pdf", "document", "presentation", "spreadsheet", "unknown"]

MIME_EXTENSIONS = {
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
}

ALLOWED_MIME_TYPES = tuple(MIME_EXTENSIONS)

_SAFE_EXTENSION = re.compile(r"[A-Za-z0-9]{1,10}")

OFFICE_VIEWER_URL = "https://view.officeapps.live.com/op/embed.aspx?src="


@dataclass
class StoredFile:
    """Result of a successful upload."""

    name: str
    url: str
    file_type: FileType | None
    size: int


def validate_upload(size: int, mime: str) -> None:
    """Check size and MIME type.

    Raises:
        FileTooLargeError: Over the configured limit (10 MB by default)
        UploadRejectedError: MIME type not allowed
    """
    if size > load_app_config().storage.max_file_bytes:
        raise FileTooLargeError("File size exceeds 10MB limit")
    if mime not in ALLOWED_MIME_TYPES:
        raise UploadRejectedError(
            "Invalid file type. Allowed: PDF, Word, PowerPoint, Images"
        )


def file_type_for_mime(mime: str) -> FileType | None:
    """Map an upload MIME type to the stored file_type column."""
    if mime.startswith("image/"):
        return "image"
    if mime == "application/pdf":
        return "pdf"
    if mime in (
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ):
        return "document"
    if mime in (
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ):
        return "presentation"
    return None


def _extension(filename: str, mime: str) -> str:
    # Client suffix when it is plain alphanumerics, else derived from the MIME type
    suffix = Path(filename).suffix[1:]
    if _SAFE_EXTENSION.fullmatch(suffix):
        return suffix.lower()
    return MIME_EXTENSIONS[mime]


def storage_dir() -> Path:
    directory = load_app_config().storage.directory
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def public_url(name: str) -> str:
    return f"{load_app_config().storage.public_base_url}/files/{name}"


def store_upload(filename: str, content: bytes, mime: str) -> StoredFile:
    """Validate and save an uploaded file.

    Returns:
        StoredFile with the public URL and mapped file type
    """
    validate_upload(len(content), mime)

    name = f"{uuid.uuid4()}.{_extension(filename, mime)}"
    (storage_dir() / name).write_bytes(content)

    logger.info("files.stored", name=name, size=len(content), mime=mime)
    return StoredFile(
        name=name,
        url=public_url(name),
        file_type=file_type_for_mime(mime),
        size=len(content),
    )


def resolve_stored_file(name: str) -> Path:
    """Path of a stored file.

    Raises:
        NotFoundError: Unknown name or a name escaping the storage directory
    """
    directory = storage_dir().resolve()
    path = (directory / name).resolve()
    if path.parent != directory or not path.is_file():
        raise NotFoundError(f"File '{name}' not found")
    return path


def file_category(file_type: str | None) -> FileCategory:
    """Loose category used for previews; accepts stored types or MIME types."""
    if not file_type:
        return "unknown"
    if file_type.startswith("image"):
        return "image"
    if file_type in ("pdf", "application/pdf"):
        return "pdf"
    if file_type == "document" or "word" in file_type or file_type == "text/plain":
        return "document"
    if file_type == "presentation" or "powerpoint" in file_type:
        return "presentation"
    if file_type == "spreadsheet" or "excel" in file_type or "sheet" in file_type:
        return "spreadsheet"
    return "unknown"


def office_viewer_url(file_url: str) -> str:
    return OFFICE_VIEWER_URL + quote(file_url, safe="")


def preview_for(file_url: str, file_type: str | None) -> dict[str, str]:
    """How a client should display an attachment.

    Returns:
        Dict with category, kind (img, iframe or link) and embed_url
    """
    category = file_category(file_type)
    if category == "image":
        return {"category": category, "kind": "img", "embed_url": file_url}
    if category == "pdf":
        return {"category": category, "kind": "iframe", "embed_url": file_url}
    if category in ("document", "presentation", "spreadsheet"):
        return {
            "category": category,
            "kind": "iframe",
            "embed_url": office_viewer_url(file_url),
        }
    return {"category": category, "kind": "link", "embed_url": file_url}
