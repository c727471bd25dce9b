"""Wire models for the Anthropic Messages endpoint."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SummaryPrompt(BaseModel):
    """System instructions and user content for one summary request."""

    system: str
    user: str


class Message(BaseModel):
    role: str
    content: str


class MessageRequest(BaseModel):
    model: str
    max_tokens: int
    messages: List[Message]
    system: Optional[str] = None


class ContentBlock(BaseModel):
    type: str
    text: str = ""


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total(self) -> int:
        return self.input_tokens + self.output_tokens


class MessageResponse(BaseModel):
    id: str
    type: str = "message"
    role: str
    content: List[ContentBlock] = Field(default_factory=list)
    model: Optional[str] = None
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None
    usage: Usage = Field(default_factory=Usage)

    def text(self) -> str:
        """Concatenate the text blocks of the reply."""
        return "\n".join(block.text for block in self.content if block.type == "text" and block.text)


class ErrorDetail(BaseModel):
    type: str
    message: str


class ErrorEnvelope(BaseModel):
    type: str = "error"
    error: ErrorDetail


class Completion(BaseModel):
    """Raw model text plus the tokens spent producing it."""

    text: str
    tokens_used: int
