"""Unit tests for DocumentExtractor."""

import pytest

from cardnews.errors import ExtractionError, ExtractionErrorKind, FileAccessError, FileAccessErrorKind
from cardnews.ingestion.extractors import DocumentExtractor, extract_docx_xml_text
from cardnews.models.document import DocumentFormat


@pytest.fixture
def extractor():
    return DocumentExtractor()


class TestDocx:
    """Zipped-XML word-processor extraction."""

    def test_paragraphs_become_lines(self, extractor, make_docx):
        """Two paragraphs yield two normalized lines."""
        path = make_docx(["Hello", "World"])
        assert extractor.extract(path, DocumentFormat.DOCX) == "Hello\nWorld"

    def test_runs_in_one_paragraph_are_concatenated(self, extractor, make_docx):
        body = (
            '<w:document xmlns:w="x"><w:body>'
            '<w:p><w:r><w:t>Hello, </w:t></w:r><w:r><w:t xml:space="preserve">big </w:t></w:r>'
            "<w:r><w:t>world</w:t></w:r></w:p>"
            "</w:body></w:document>"
        )
        path = make_docx(body=body)
        assert extractor.extract(path, DocumentFormat.DOCX) == "Hello, big world"

    def test_xml_entities_are_decoded(self, extractor, make_docx):
        path = make_docx(["Tom &amp; Jerry &lt;3 &quot;cheese&quot; &apos;n&apos; &gt; all"])
        assert extractor.extract(path, DocumentFormat.DOCX) == "Tom & Jerry <3 \"cheese\" 'n' > all"

    def test_entities_decode_only_once(self):
        """&amp;lt; is the literal text '&lt;', not '<'."""
        xml = "<w:p><w:r><w:t>&amp;lt;</w:t></w:r></w:p>"
        assert extract_docx_xml_text(xml) == "&lt;\n"

    def test_tab_and_table_tags_are_not_text_runs(self):
        xml = "<w:p><w:r><w:tab/><w:t>A</w:t></w:r></w:p><w:tbl><w:tr><w:p><w:r><w:t>B</w:t></w:r></w:p></w:tr></w:tbl>"
        assert extract_docx_xml_text(xml) == "A\nB\n"

    def test_self_closing_run_is_not_a_text_opener(self, extractor, make_docx):
        """An empty <w:t .../> must not swallow the markup up to the next run."""
        body = (
            '<w:body><w:p><w:r><w:t xml:space="preserve"/></w:r></w:p>'
            "<w:p><w:r><w:t>Hello</w:t></w:r></w:p></w:body>"
        )
        path = make_docx(body=body)
        assert extractor.extract(path, DocumentFormat.DOCX) == "Hello"

    def test_bare_self_closing_run_is_skipped(self):
        xml = "<w:p><w:r><w:t/><w:t>A</w:t></w:r></w:p>"
        assert extract_docx_xml_text(xml) == "A\n"

    def test_empty_paragraphs_collapse(self, extractor, make_docx):
        """Paragraph closes without text only add blank lines, which normalization removes."""
        body = (
            "<w:body><w:p></w:p><w:p><w:r><w:t>Only</w:t></w:r></w:p><w:p/></w:p>"
            "<w:p><w:r><w:t>Lines</w:t></w:r></w:p></w:body>"
        )
        path = make_docx(body=body)
        assert extractor.extract(path, DocumentFormat.DOCX) == "Only\nLines"

    def test_missing_body_entry_is_malformed(self, extractor, make_docx):
        path = make_docx(include_body=False)
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.DOCX)
        assert excinfo.value.kind is ExtractionErrorKind.MALFORMED

    def test_not_a_zip_is_malformed(self, extractor, tmp_path):
        path = tmp_path / "fake.docx"
        path.write_text("definitely not a zip archive")
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.DOCX)
        assert excinfo.value.kind is ExtractionErrorKind.MALFORMED

    def test_no_text_is_empty_content(self, extractor, make_docx):
        path = make_docx(body="<w:body><w:p></w:p><w:p></w:p></w:body>")
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.DOCX)
        assert excinfo.value.kind is ExtractionErrorKind.EMPTY_CONTENT


class TestPdf:
    """Paginated document extraction."""

    def test_pages_are_concatenated_in_order(self, extractor, make_pdf):
        path = make_pdf(["First page", "Second page"])
        assert extractor.extract(path, DocumentFormat.PDF) == "First page\nSecond page"

    def test_blank_pages_are_empty_content(self, extractor, make_pdf):
        """A PDF with pages but no glyphs never succeeds with an empty string."""
        path = make_pdf([None, None])
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.PDF)
        assert excinfo.value.kind is ExtractionErrorKind.EMPTY_CONTENT

    def test_garbage_is_malformed(self, extractor, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf at all")
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.PDF)
        assert excinfo.value.kind is ExtractionErrorKind.MALFORMED

    def test_missing_file_is_access_error(self, extractor, tmp_path):
        with pytest.raises(FileAccessError) as excinfo:
            extractor.extract(tmp_path / "missing.pdf", DocumentFormat.PDF)
        assert excinfo.value.kind is FileAccessErrorKind.NOT_FOUND
        assert excinfo.value.retryable is True


class TestOtherFormats:
    def test_doc_is_always_unsupported(self, extractor, tmp_path):
        path = tmp_path / "legacy.doc"
        path.write_bytes(b"\xd0\xcf\x11\xe0binary")
        with pytest.raises(ExtractionError) as excinfo:
            extractor.extract(path, DocumentFormat.DOC)
        assert excinfo.value.kind is ExtractionErrorKind.UNSUPPORTED_FORMAT
        assert excinfo.value.retryable is False

    def test_txt_is_normalized(self, extractor, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_bytes("﻿First   line\n\n\nSecond line  ".encode("utf-8"))
        assert extractor.extract(path, DocumentFormat.TXT) == "First line\nSecond line"
