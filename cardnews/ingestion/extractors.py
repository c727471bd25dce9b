"""Extract normalized plain text from PDF, DOCX and plain-text files."""

from __future__ import annotations

import logging
import re
import zipfile
from pathlib import Path
from typing import Callable, Dict

import fitz

from cardnews.errors import (
    ExtractionError,
    ExtractionErrorKind,
    FileAccessError,
    FileAccessErrorKind,
)
from cardnews.models.document import DocumentFormat
from cardnews.utils.text import normalize_text

logger = logging.getLogger(__name__)

DOCX_BODY_ENTRY = "word/document.xml"
# Text runs (<w:t>, <w:t xml:space="preserve">) and paragraph ends, in document order.
# Self-closing <w:t/> elements carry no text and are not run openers.
DOCX_TOKEN_PATTERN = re.compile(r"<w:t(?:\s[^>]*?)?(?<!/)>(.*?)</w:t>|(</w:p>)", re.DOTALL)
XML_ENTITY_PATTERN = re.compile(r"&(lt|gt|amp|quot|apos);")
XML_ENTITIES = {"lt": "<", "gt": ">", "amp": "&", "quot": '"', "apos": "'"}


def decode_xml_entities(text: str) -> str:
    return XML_ENTITY_PATTERN.sub(lambda match: XML_ENTITIES[match.group(1)], text)


def extract_docx_xml_text(xml_content: str) -> str:
    """Concatenate text runs, emitting a newline at every paragraph close."""
    parts = []
    for match in DOCX_TOKEN_PATTERN.finditer(xml_content):
        if match.group(2):
            parts.append("\n")
        else:
            parts.append(decode_xml_entities(match.group(1)))
    return "".join(parts)


def _access_error(exc: OSError, path: Path) -> FileAccessError:
    if isinstance(exc, FileNotFoundError):
        kind = FileAccessErrorKind.NOT_FOUND
    elif isinstance(exc, PermissionError):
        kind = FileAccessErrorKind.DENIED
    else:
        kind = FileAccessErrorKind.CORRUPTED
    return FileAccessError(kind, str(exc), file_name=path.name)


class DocumentExtractor:
    """Turns a readable local file into normalized text according to its format."""

    def __init__(self) -> None:
        self._handlers: Dict[DocumentFormat, Callable[[Path], str]] = {
            DocumentFormat.PDF: self.extract_pdf,
            DocumentFormat.DOCX: self.extract_docx,
            DocumentFormat.DOC: self.extract_doc,
            DocumentFormat.TXT: self.extract_txt,
        }

    def extract(self, path: Path, document_format: DocumentFormat) -> str:
        path = Path(path)
        handler = self._handlers.get(document_format)
        if handler is None:
            raise ExtractionError(
                ExtractionErrorKind.UNSUPPORTED_FORMAT,
                f"no extractor for {document_format}",
                file_name=path.name,
            )
        try:
            raw = handler(path)
        except OSError as exc:
            raise _access_error(exc, path) from exc
        text = normalize_text(raw)
        if not text:
            raise ExtractionError(ExtractionErrorKind.EMPTY_CONTENT, file_name=path.name)
        logger.debug("Extracted %s characters from %s", len(text), path.name)
        return text

    def extract_pdf(self, path: Path) -> str:
        if not path.exists():
            raise FileNotFoundError(str(path))
        try:
            doc = fitz.open(str(path))
        except (RuntimeError, ValueError) as exc:
            raise ExtractionError(
                ExtractionErrorKind.MALFORMED, str(exc), file_name=path.name
            ) from exc
        try:
            if doc.page_count == 0:
                raise ExtractionError(
                    ExtractionErrorKind.EMPTY_CONTENT, "document has no pages", file_name=path.name
                )
            pages = []
            for page_index in range(doc.page_count):
                try:
                    page = doc.load_page(page_index)
                    pages.append(page.get_text() + "\n")
                except (RuntimeError, ValueError) as exc:
                    logger.warning("Skipping page %s of %s: %s", page_index + 1, path.name, exc)
            return "".join(pages)
        finally:
            doc.close()

    def extract_docx(self, path: Path) -> str:
        try:
            with zipfile.ZipFile(path) as archive:
                try:
                    raw_xml = archive.read(DOCX_BODY_ENTRY)
                except KeyError as exc:
                    raise ExtractionError(
                        ExtractionErrorKind.MALFORMED,
                        f"missing {DOCX_BODY_ENTRY}",
                        file_name=path.name,
                    ) from exc
        except zipfile.BadZipFile as exc:
            raise ExtractionError(
                ExtractionErrorKind.MALFORMED, "not a zip archive", file_name=path.name
            ) from exc
        return extract_docx_xml_text(raw_xml.decode("utf-8", errors="replace"))

    def extract_doc(self, path: Path) -> str:
        raise ExtractionError(
            ExtractionErrorKind.UNSUPPORTED_FORMAT,
            "legacy .doc files are not supported",
            file_name=path.name,
        )

    def extract_txt(self, path: Path) -> str:
        return path.read_bytes().decode("utf-8-sig", errors="replace")
