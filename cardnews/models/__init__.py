"""Typed models shared across the application."""

from .document import DocumentFormat, DocumentInfo, ProcessedDocument
from .messages import (
    Completion,
    ContentBlock,
    ErrorEnvelope,
    Message,
    MessageRequest,
    MessageResponse,
    SummaryPrompt,
    Usage,
)
from .summary import (
    CardContent,
    CardCount,
    OutputStyle,
    SummaryConfig,
    SummaryLanguage,
    SummaryResult,
    SummaryTone,
)

__all__ = [
    "CardContent",
    "CardCount",
    "Completion",
    "ContentBlock",
    "DocumentFormat",
    "DocumentInfo",
    "ErrorEnvelope",
    "Message",
    "MessageRequest",
    "MessageResponse",
    "OutputStyle",
    "ProcessedDocument",
    "SummaryConfig",
    "SummaryLanguage",
    "SummaryPrompt",
    "SummaryResult",
    "SummaryTone",
    "Usage",
]
