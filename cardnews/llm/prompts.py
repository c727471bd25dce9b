"""Prompt templates for the card summarization stage."""

from __future__ import annotations

from typing import Optional

from cardnews.config import settings
from cardnews.models.document import ProcessedDocument
from cardnews.models.messages import SummaryPrompt
from cardnews.models.summary import OutputStyle, SummaryConfig, SummaryTone

TRUNCATION_MARKER = "\n[... document truncated ...]"

TONE_GUIDANCE = {
    SummaryTone.PROFESSIONAL: "clear, precise and businesslike",
    SummaryTone.CASUAL: "relaxed and conversational",
    SummaryTone.ACADEMIC: "rigorous and formal, using accurate terminology",
    SummaryTone.FRIENDLY: "warm and approachable, as if explaining to a friend",
}

STYLE_GUIDANCE = {
    OutputStyle.TEXT: "Keep each card text-focused: a short headline and two to four compact sentences.",
    OutputStyle.WEBTOON: (
        "Write each card like a webtoon panel: short dialogue lines or narration, "
        "with characters reacting to the ideas. Describe the scene in imagePrompt."
    ),
    OutputStyle.IMAGE: (
        "Make each card visual: a keyword-driven headline, one or two short lines of body text, "
        "and a concrete illustration description in imagePrompt."
    ),
}

OUTPUT_SHAPE = """{
  "cards": [
    {
      "cardNumber": 1,
      "title": "string",
      "content": "string",
      "imagePrompt": "string or null",
      "backgroundColor": "#RRGGBB or null",
      "textColor": "#RRGGBB or null"
    }
  ]
}"""


def build_system_prompt(config: SummaryConfig) -> str:
    count = config.card_count.value
    return f"""You turn documents into card news: a numbered series of short cards that summarize the document.

Requirements:
- Produce exactly {count} cards. Not {count - 1}, not {count + 1}: exactly {count}.
- Number the cards with cardNumber 1 through {count}, contiguous, in reading order.
- Every card must have a non-empty title and non-empty content.
- Each card must make sense on its own, while the series flows as one continuous story from first to last card.
- The first card introduces the topic; the last card concludes it.
- Write in {config.language.display_name}.
- Style: {config.output_style.description}. {STYLE_GUIDANCE[config.output_style]}
- Tone: {TONE_GUIDANCE[config.tone]}.

Respond with JSON only, inside a ```json fenced block, using exactly this shape:
{OUTPUT_SHAPE}"""


def truncate_content(content: str, char_budget: int) -> str:
    if len(content) <= char_budget:
        return content
    return content[:char_budget].rstrip() + TRUNCATION_MARKER


def build_user_prompt(document: ProcessedDocument, config: SummaryConfig, char_budget: int) -> str:
    return f"""Document: {document.document.file_name}
Words: {document.word_count}
Characters: {document.character_count}

Content:
{truncate_content(document.content, char_budget)}

Summarize this document into exactly {config.card_count.value} cards."""


def build_summary_prompt(
    document: ProcessedDocument,
    config: SummaryConfig,
    char_budget: Optional[int] = None,
) -> SummaryPrompt:
    """Build the request payload for one document and configuration. Performs no I/O."""
    budget = char_budget if char_budget is not None else settings.input_char_budget
    return SummaryPrompt(
        system=build_system_prompt(config),
        user=build_user_prompt(document, config, budget),
    )
