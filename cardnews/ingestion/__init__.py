"""Document ingestion: file access, text extraction and document assembly."""

from .documents import build_text_document, detect_format, load_document, validate_document
from .extractors import DocumentExtractor
from .file_access import FileAccessResolver, ResolvedFile

__all__ = [
    "DocumentExtractor",
    "FileAccessResolver",
    "ResolvedFile",
    "build_text_document",
    "detect_format",
    "load_document",
    "validate_document",
]
