"""Summary configuration and card result models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .document import DocumentInfo


class CardCount(int, Enum):
    FOUR = 4
    SIX = 6
    EIGHT = 8


class OutputStyle(str, Enum):
    TEXT = "text"
    WEBTOON = "webtoon"
    IMAGE = "image"

    @property
    def description(self) -> str:
        return {
            OutputStyle.TEXT: "concise text that organizes the key points",
            OutputStyle.WEBTOON: "a webtoon-like narrative with dialogue and expressive emotion",
            OutputStyle.IMAGE: "a visual layout centred on keywords and imagery",
        }[self]


class SummaryLanguage(str, Enum):
    KOREAN = "ko"
    ENGLISH = "en"
    JAPANESE = "ja"

    @property
    def display_name(self) -> str:
        return {
            SummaryLanguage.KOREAN: "Korean (한국어)",
            SummaryLanguage.ENGLISH: "English",
            SummaryLanguage.JAPANESE: "Japanese (日本語)",
        }[self]


class SummaryTone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    ACADEMIC = "academic"
    FRIENDLY = "friendly"


class SummaryConfig(BaseModel):
    """Options chosen by the caller for one summary request."""

    model_config = ConfigDict(frozen=True)

    card_count: CardCount = CardCount.FOUR
    output_style: OutputStyle = OutputStyle.TEXT
    language: SummaryLanguage = SummaryLanguage.KOREAN
    tone: SummaryTone = SummaryTone.FRIENDLY


class CardContent(BaseModel):
    """A single numbered card."""

    model_config = ConfigDict(frozen=True)

    card_number: int = Field(ge=1)
    title: str
    content: str
    image_prompt: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None

    def is_blank(self) -> bool:
        return not self.title.strip() or not self.content.strip()


class SummaryResult(BaseModel):
    """Finished card sequence handed off to the caller."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    config: SummaryConfig
    document: DocumentInfo
    cards: Tuple[CardContent, ...]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tokens_used: int = 0
