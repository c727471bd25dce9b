"""LLM integration helpers."""

from .anthropic_client import AnthropicMessagesClient
from .card_generator import CardNewsGenerator
from .prompts import build_summary_prompt
from .response_repair import ResponseRepair

__all__ = [
    "AnthropicMessagesClient",
    "CardNewsGenerator",
    "ResponseRepair",
    "build_summary_prompt",
]
