"""
Validates incoming timetable uploads (image, PDF or CSV) for size, type, corruption, etc.
"""

import mimetypes
from typing import Optional

import fitz  # PyMuPDF
from fastapi import HTTPException

from config import config
from logging_config import configure_logging

logger = configure_logging(name="upload")

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff")


def detect_file_kind(filename: Optional[str], content_type: Optional[str] = None) -> Optional[str]:
    """Return "csv", "pdf", "image" or None from the extension / MIME type."""
    name = (filename or "").lower()
    mime = (content_type or "").lower()
    if not mime:
        mime = (mimetypes.guess_type(name)[0] or "").lower()

    if name.endswith(".csv") or "csv" in mime:
        return "csv"
    if name.endswith(".pdf") or "pdf" in mime:
        return "pdf"
    if name.endswith(IMAGE_EXTENSIONS) or mime.startswith("image/"):
        return "image"
    return None


def guess_mime_type(filename: Optional[str], content_type: Optional[str] = None) -> str:
    if content_type and content_type != "application/octet-stream":
        return content_type
    guessed = mimetypes.guess_type(filename or "")[0]
    if guessed:
        return guessed
    kind = detect_file_kind(filename, content_type)
    return {"pdf": "application/pdf", "csv": "text/csv"}.get(kind, "image/jpeg")


def validate_upload(filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
    """Validate an uploaded timetable.

    Raises `HTTPException` for any validation failure.
    Returns the detected file kind on success.
    """

    # 1. Validate type
    kind = detect_file_kind(filename, content_type)
    if kind is None:
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "Only images (JPEG/PNG), PDF and CSV files are supported."}
        )

    # 2. Validate size
    size_mb = len(data) / (1024 * 1024)
    if size_mb > config.MAX_UPLOAD_SIZE_MB:
        raise HTTPException(
            status_code=413,
            detail={
                "success": False,
                "error": f"File too large ({size_mb:.2f}MB). Max allowed is {config.MAX_UPLOAD_SIZE_MB}MB."
            }
        )

    # 3. Validate non-empty
    if not data or not data.strip():
        raise HTTPException(
            status_code=400,
            detail={"success": False, "error": "File appears empty or corrupted."}
        )

    # 4. Validate page count and check for password protection (for PDFs only)
    if kind == "pdf":
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise HTTPException(
                status_code=400,
                detail={"success": False, "error": f"PDF could not be opened: {e}"}
            ) from e

        try:
            if doc.is_encrypted:
                raise HTTPException(
                    status_code=400,
                    detail={
                        "success": False,
                        "error": "PDF is password-protected. Please remove the password and try again.",
                        "error_type": "encrypted_pdf"
                    }
                )
            page_count = len(doc)
        finally:
            doc.close()

        if page_count > config.PDF_MAX_PAGES:
            raise HTTPException(
                status_code=413,
                detail={
                    "success": False,
                    "error": f"PDF has {page_count} pages, exceeds maximum allowed ({config.PDF_MAX_PAGES} pages).",
                    "page_count": page_count,
                    "max_pages": config.PDF_MAX_PAGES
                }
            )
        logger.debug(f"PDF upload ok: {page_count} pages")

    return kind
