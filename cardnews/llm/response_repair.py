"""Coerce free-form model replies into an exact-length card list."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from cardnews.errors import ParsingError
from cardnews.models.summary import CardContent
from cardnews.utils.strategies import first_success

logger = logging.getLogger(__name__)

JSON_FENCE_PATTERN = re.compile(r"```[ \t]*json[ \t]*\n?(.*?)```", re.DOTALL | re.IGNORECASE)

PLACEHOLDER_TITLE = "More to explore"
PLACEHOLDER_CONTENT = "This card completes the series. See the original document for further details."

NUMBER_KEYS = ("cardNumber", "card_number", "number")
BODY_KEYS = ("content", "body")


def _parse_cards(candidate: Optional[str]) -> Optional[List[Any]]:
    """Parse a candidate payload; return its ``cards`` array, or None."""
    if not candidate or not candidate.strip():
        return None
    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    cards = payload.get("cards")
    return cards if isinstance(cards, list) else None


def fenced_json_block(raw: str) -> Optional[List[Any]]:
    match = JSON_FENCE_PATTERN.search(raw)
    return _parse_cards(match.group(1)) if match else None


def outer_brace_span(raw: str) -> Optional[List[Any]]:
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        return None
    return _parse_cards(raw[start : end + 1])


def whole_text(raw: str) -> Optional[List[Any]]:
    return _parse_cards(raw.strip())


def _position(entry: Dict[str, Any]) -> Optional[int]:
    for key in NUMBER_KEYS:
        value = entry.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
    return None


def _text(entry: Dict[str, Any], *keys: str) -> str:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _optional_text(entry: Dict[str, Any], key: str) -> Optional[str]:
    return _text(entry, key) or None


class ResponseRepair:
    """Extracts, validates and count-reconciles cards from raw model text.

    Candidate payloads are tried in order: a ```json fenced block, the span
    between the first ``{`` and the last ``}``, then the whole reply.
    """

    def __init__(self) -> None:
        self.strategies = [fenced_json_block, outer_brace_span, whole_text]

    def repair(self, raw: str, expected_count: int) -> List[CardContent]:
        """Return exactly ``expected_count`` cards numbered 1..expected_count.

        Raises:
            ParsingError: when no candidate yields a single well-formed card
        """
        entries = first_success(self.strategies, raw or "")
        if entries is None:
            logger.error("No cards array found in model output (%s chars)", len(raw or ""))
            raise ParsingError("no parseable cards array", stage="extract")

        cards = self.validate(entries)
        if not cards:
            raise ParsingError("no card had a position, title and content", stage="validate")
        return self.reconcile(cards, expected_count)

    def validate(self, entries: List[Any]) -> List[CardContent]:
        cards: List[CardContent] = []
        for index, entry in enumerate(entries, start=1):
            if not isinstance(entry, dict):
                logger.warning("Dropping card entry %s: not an object", index)
                continue
            position = _position(entry)
            title = _text(entry, "title")
            content = _text(entry, *BODY_KEYS)
            if position is None or not title or not content:
                logger.warning("Dropping card entry %s: missing number, title or content", index)
                continue
            cards.append(
                CardContent(
                    card_number=max(position, 1),
                    title=title,
                    content=content,
                    image_prompt=_optional_text(entry, "imagePrompt"),
                    background_color=_optional_text(entry, "backgroundColor"),
                    text_color=_optional_text(entry, "textColor"),
                )
            )
        return cards

    def reconcile(self, cards: List[CardContent], expected_count: int) -> List[CardContent]:
        """Pad with placeholders or truncate so exactly ``expected_count`` cards remain."""
        if len(cards) > expected_count:
            logger.warning("Model returned %s cards, keeping the first %s", len(cards), expected_count)
            cards = cards[:expected_count]
        elif len(cards) < expected_count:
            logger.warning(
                "Model returned %s cards, padding to %s with placeholders", len(cards), expected_count
            )

        reconciled = [
            card if card.card_number == number else card.model_copy(update={"card_number": number})
            for number, card in enumerate(cards, start=1)
        ]
        for number in range(len(reconciled) + 1, expected_count + 1):
            reconciled.append(
                CardContent(card_number=number, title=PLACEHOLDER_TITLE, content=PLACEHOLDER_CONTENT)
            )
        return reconciled
