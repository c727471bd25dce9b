from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Iterable, Optional

import fitz
import pytest

from fakes import docx_body


@pytest.fixture
def make_docx(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a minimal .docx archive."""

    def _make(
        paragraphs: Iterable[str] = ("Hello", "World"),
        name: str = "sample.docx",
        body: Optional[str] = None,
        include_body: bool = True,
    ) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("[Content_Types].xml", "<Types/>")
            if include_body:
                archive.writestr("word/document.xml", body if body is not None else docx_body(paragraphs))
        return path

    return _make


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a PDF with one page per entry (None for a blank page)."""

    def _make(pages: Iterable[Optional[str]] = ("Hello PDF",), name: str = "sample.pdf") -> Path:
        path = tmp_path / name
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        doc.save(str(path))
        doc.close()
        return path

    return _make


@pytest.fixture
def private_root(tmp_path: Path) -> Path:
    root = tmp_path / "private"
    root.mkdir()
    return root
