"""Document-level data models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePath
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from cardnews.utils.text import count_words, make_preview


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentFormat(str, Enum):
    """Declared format tag of an uploaded document."""

    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    TXT = "txt"

    @classmethod
    def from_file_name(cls, file_name: str) -> Optional["DocumentFormat"]:
        """Return the format implied by a file extension, if it is a known one."""
        suffix = PurePath(file_name).suffix.lower().lstrip(".")
        try:
            return cls(suffix)
        except ValueError:
            return None


class DocumentInfo(BaseModel):
    """Metadata captured once a file reference has been resolved."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    file_name: str
    format: DocumentFormat
    file_size: int = Field(ge=0)
    source: str
    discovered_at: datetime = Field(default_factory=_utcnow)


class ProcessedDocument(BaseModel):
    """Extracted, normalized text of a document plus derived statistics."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    document: DocumentInfo
    content: str = Field(min_length=1)
    word_count: int
    character_count: int
    preview: str
    processed_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_content(
        cls, document: DocumentInfo, content: str, preview_length: int = 200
    ) -> "ProcessedDocument":
        return cls(
            document=document,
            content=content,
            word_count=count_words(content),
            character_count=len(content),
            preview=make_preview(content, preview_length),
        )
