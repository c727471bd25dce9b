"""Unit tests for document loading and validation."""

import pytest

from cardnews.errors import ExtractionError, ExtractionErrorKind, FileAccessError, FileAccessErrorKind
from cardnews.ingestion.documents import (
    PASTED_TEXT_SOURCE,
    build_text_document,
    check_file_size,
    detect_format,
    load_document,
    validate_document,
)
from cardnews.ingestion.file_access import FileAccessResolver
from cardnews.models.document import DocumentFormat


def test_detect_format_from_extension():
    assert detect_format("/docs/Report.PDF") is DocumentFormat.PDF
    assert detect_format("file:///docs/notes.docx") is DocumentFormat.DOCX


def test_detect_format_rejects_unknown_extension():
    with pytest.raises(ExtractionError) as excinfo:
        detect_format("slides.pptx")
    assert excinfo.value.kind is ExtractionErrorKind.UNSUPPORTED_FORMAT


def test_load_docx_from_outside_private_storage(make_docx, private_root):
    path = make_docx(["Hello", "World"], name="greeting.docx")
    document = load_document(path, resolver=FileAccessResolver(private_root), preview_length=5)

    assert document.content == "Hello\nWorld"
    assert document.word_count == 2
    assert document.character_count == 11
    assert document.preview == "Hello..."
    assert document.document.file_name == "greeting.docx"
    assert document.document.format is DocumentFormat.DOCX
    assert document.document.file_size == path.stat().st_size
    assert list(private_root.iterdir()) == []


def test_load_pdf_with_explicit_format(make_pdf, private_root):
    path = make_pdf(["Quarterly results"], name="report.bin")
    document = load_document(path, DocumentFormat.PDF, resolver=FileAccessResolver(private_root))
    assert document.content == "Quarterly results"


def test_copies_removed_after_extraction_failure(make_docx, private_root):
    path = make_docx(include_body=False)
    with pytest.raises(ExtractionError):
        load_document(path, resolver=FileAccessResolver(private_root))
    assert list(private_root.iterdir()) == []


def test_missing_file_surfaces_not_found(tmp_path, private_root):
    with pytest.raises(FileAccessError) as excinfo:
        load_document(tmp_path / "missing.pdf", resolver=FileAccessResolver(private_root))
    assert excinfo.value.kind is FileAccessErrorKind.NOT_FOUND


class TestValidation:
    def test_empty_file_is_corrupted(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")
        with pytest.raises(FileAccessError) as excinfo:
            validate_document(path)
        assert excinfo.value.kind is FileAccessErrorKind.CORRUPTED

    def test_oversized_file_is_rejected(self, tmp_path):
        path = tmp_path / "big.txt"
        path.write_bytes(b"x" * 11)
        with pytest.raises(ExtractionError) as excinfo:
            check_file_size(path, max_file_size=10)
        assert excinfo.value.kind is ExtractionErrorKind.TOO_LARGE
        assert excinfo.value.retryable is False
        assert "too large" in excinfo.value.user_message()

    def test_valid_file_returns_format(self, tmp_path):
        path = tmp_path / "fine.txt"
        path.write_text("content")
        assert validate_document(path) is DocumentFormat.TXT


class TestPastedText:
    def test_text_is_normalized(self):
        document = build_text_document("  Big   news\n\n\ntoday  ", title="Memo")
        assert document.content == "Big news\ntoday"
        assert document.document.file_name == "Memo"
        assert document.document.source == PASTED_TEXT_SOURCE
        assert document.document.format is DocumentFormat.TXT

    def test_blank_text_is_empty_content(self):
        with pytest.raises(ExtractionError) as excinfo:
            build_text_document(" \n\t ")
        assert excinfo.value.kind is ExtractionErrorKind.EMPTY_CONTENT
