"""Turn file references and pasted text into processed documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from cardnews.config import settings
from cardnews.errors import (
    ExtractionError,
    ExtractionErrorKind,
    FileAccessError,
    FileAccessErrorKind,
)
from cardnews.ingestion.extractors import DocumentExtractor
from cardnews.ingestion.file_access import FileAccessResolver, FileReference, reference_to_path
from cardnews.models.document import DocumentFormat, DocumentInfo, ProcessedDocument
from cardnews.utils.text import normalize_text

logger = logging.getLogger(__name__)

PASTED_TEXT_SOURCE = "pasted-text"


def detect_format(reference: FileReference) -> DocumentFormat:
    path = reference_to_path(reference)
    document_format = DocumentFormat.from_file_name(path.name)
    if document_format is None:
        raise ExtractionError(
            ExtractionErrorKind.UNSUPPORTED_FORMAT,
            f"unsupported extension {path.suffix!r}",
            file_name=path.name,
        )
    return document_format


def check_file_size(path: Path, max_file_size: Optional[int] = None) -> int:
    """Return the size of a local file, rejecting empty and oversized files."""
    limit = max_file_size if max_file_size is not None else settings.max_file_size
    try:
        size = path.stat().st_size
    except FileNotFoundError as exc:
        raise FileAccessError(FileAccessErrorKind.NOT_FOUND, file_name=path.name) from exc
    except PermissionError as exc:
        raise FileAccessError(FileAccessErrorKind.DENIED, file_name=path.name) from exc
    if size == 0:
        raise FileAccessError(FileAccessErrorKind.CORRUPTED, "file is empty", file_name=path.name)
    if size > limit:
        raise ExtractionError(
            ExtractionErrorKind.TOO_LARGE,
            f"file is {size} bytes, limit is {limit}",
            file_name=path.name,
        )
    return size


def validate_document(path: Path, max_file_size: Optional[int] = None) -> DocumentFormat:
    """Check that a local file has a supported extension and an acceptable size."""
    document_format = detect_format(path)
    check_file_size(path, max_file_size)
    return document_format


def load_document(
    reference: FileReference,
    document_format: Optional[DocumentFormat] = None,
    resolver: Optional[FileAccessResolver] = None,
    extractor: Optional[DocumentExtractor] = None,
    preview_length: Optional[int] = None,
) -> ProcessedDocument:
    """Resolve a file reference, extract its text and wrap it as a ProcessedDocument.

    Temporary copies made during resolution are removed before returning,
    whether extraction succeeded or not.
    """
    resolver = resolver or FileAccessResolver()
    extractor = extractor or DocumentExtractor()
    document_format = document_format or detect_format(reference)
    original = reference_to_path(reference)

    with resolver.resolve(reference, document_format.value) as resolved:
        info = DocumentInfo(
            file_name=original.name,
            format=document_format,
            file_size=check_file_size(resolved.path),
            source=str(reference),
        )
        content = extractor.extract(resolved.path, document_format)

    logger.info("Processed %s (%s, %s bytes)", info.file_name, info.format.value, info.file_size)
    return ProcessedDocument.from_content(
        info, content, preview_length if preview_length is not None else settings.preview_length
    )


def build_text_document(
    text: str, title: Optional[str] = None, preview_length: Optional[int] = None
) -> ProcessedDocument:
    """Wrap pasted text as a ProcessedDocument without touching the filesystem."""
    content = normalize_text(text)
    if not content:
        raise ExtractionError(ExtractionErrorKind.EMPTY_CONTENT, file_name=title)
    info = DocumentInfo(
        file_name=title or "Pasted text",
        format=DocumentFormat.TXT,
        file_size=len(text.encode("utf-8")),
        source=PASTED_TEXT_SOURCE,
    )
    return ProcessedDocument.from_content(
        info, content, preview_length if preview_length is not None else settings.preview_length
    )
