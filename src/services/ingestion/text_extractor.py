"""Plain-text extraction from drive files, dispatched on media type.

Native cloud documents are exported by the drive itself; binary formats
are downloaded and converted locally:

    Google Docs   → drive plain-text export
    PDF           → PyMuPDF (fitz), page texts joined with newlines
    DOCX          → python-docx, paragraph texts joined with newlines
    DOC (legacy)  → python-docx attempted; failure logged, empty text
    RTF           → striprtf
    TXT / CSV     → UTF-8 decode (invalid bytes replaced)

Spreadsheets, presentations, images and unknown types yield ``""`` with a
warning instead of raising, so the orchestrator can skip them like any
other near-empty document.
"""

from __future__ import annotations

import asyncio
import io

import docx
import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog
from striprtf.striprtf import rtf_to_text

from src.interfaces.drive_provider import IDriveProvider
from src.models.documents import DriveFile
from src.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

GOOGLE_DOC = "application/vnd.google-apps.document"
GOOGLE_SHEET = "application/vnd.google-apps.spreadsheet"
GOOGLE_SLIDES = "application/vnd.google-apps.presentation"
PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC = "application/msword"
RTF_TYPES = frozenset({"application/rtf", "text/rtf"})
PLAIN_TEXT_TYPES = frozenset({"text/plain", "text/csv"})

# Media types the orchestrator hands to the extractor at all.
SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    {GOOGLE_DOC, PDF, DOCX, DOC} | RTF_TYPES | PLAIN_TEXT_TYPES
)

# Documents whose stripped text is shorter than this are skipped.
MIN_TEXT_LENGTH = 50


def is_supported(mime_type: str) -> bool:
    return mime_type in SUPPORTED_MIME_TYPES


def _pdf_to_text(data: bytes) -> str:
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return "\n".join(page.get_text("text") for page in doc)
    finally:
        doc.close()


def _docx_to_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(para.text for para in document.paragraphs)


def _rtf_to_text(data: bytes) -> str:
    return rtf_to_text(data.decode("utf-8", errors="replace"))


class TextExtractor:
    """Convert a :class:`DriveFile` to plain text through an :class:`IDriveProvider`."""

    def __init__(self, drive: IDriveProvider) -> None:
        self._drive = drive

    async def extract(self, file: DriveFile) -> str:
        """Return the file's text, or ``""`` for unsupported types.

        Raises
        ------
        ExtractionError
            If a PDF, DOCX or RTF file cannot be parsed.
        src.utils.errors.ProviderUnavailableError
            If the drive download or export fails.
        """
        mime_type = file.mime_type

        if mime_type == GOOGLE_DOC:
            return await self._drive.export_as_plain_text(file.id)

        if mime_type == GOOGLE_SHEET:
            logger.warning("extraction_skipped_spreadsheet", file=file.name)
            return ""
        if mime_type == GOOGLE_SLIDES:
            logger.warning("extraction_skipped_presentation", file=file.name)
            return ""
        if mime_type.startswith("image/"):
            logger.warning("extraction_skipped_image", file=file.name)
            return ""
        if mime_type not in SUPPORTED_MIME_TYPES:
            logger.warning("extraction_unsupported_mime_type", file=file.name, mime_type=mime_type)
            return ""

        data = await self._drive.download(file.id)

        if mime_type in PLAIN_TEXT_TYPES:
            return data.decode("utf-8", errors="replace")

        if mime_type == DOC:
            # Most legacy .doc files are not OOXML; python-docx only reads
            # the ones that were saved with a .doc name but DOCX content.
            try:
                return await asyncio.to_thread(_docx_to_text, data)
            except Exception as exc:
                logger.warning("extraction_doc_failed", file=file.name, error=str(exc))
                return ""

        converter = {PDF: _pdf_to_text, DOCX: _docx_to_text}.get(mime_type, _rtf_to_text)
        try:
            return await asyncio.to_thread(converter, data)
        except Exception as exc:
            raise ExtractionError(
                message=f"Could not extract text from {file.name}: {exc}",
            ) from exc
