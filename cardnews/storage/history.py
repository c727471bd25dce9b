"""JSON-file history of finished summaries."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Protocol

from pydantic import ValidationError

from cardnews.config import settings
from cardnews.models.summary import SummaryResult

logger = logging.getLogger(__name__)


class SummaryStore(Protocol):
    """Persistence collaborator accepting finished results."""

    def save(self, result: SummaryResult) -> Optional[SummaryResult]:
        ...


def has_valid_cards(result: SummaryResult) -> bool:
    return any(not card.is_blank() for card in result.cards)


class SummaryHistory:
    """Newest-first list of summaries kept in a single JSON file.

    Cards with a blank title or body are dropped on save, results with no
    usable cards are never written, and entries that fail validation on load
    are filtered out and the file rewritten without them.
    """

    def __init__(self, path: Optional[Path] = None, limit: Optional[int] = None) -> None:
        self.path = Path(path or settings.history_path_obj)
        self.limit = limit if limit is not None else settings.history_limit

    def save(self, result: SummaryResult) -> Optional[SummaryResult]:
        """Store a result; return the stored (validated) copy, or None when rejected."""
        valid_cards = tuple(card for card in result.cards if not card.is_blank())
        if not valid_cards:
            logger.error("Refusing to store %s: no card has a title and content", result.document.file_name)
            return None
        if len(valid_cards) != len(result.cards):
            logger.warning(
                "Dropping %s blank cards from %s", len(result.cards) - len(valid_cards), result.id
            )
        validated = result.model_copy(update={"cards": valid_cards})

        summaries = [validated] + [item for item in self.load() if item.id != validated.id]
        self._write(summaries[: self.limit])
        logger.info("Stored summary %s (%s cards)", validated.id, len(valid_cards))
        return validated

    def load(self) -> List[SummaryResult]:
        if not self.path.exists():
            return []
        try:
            raw_items = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read summary history %s: %s", self.path, exc)
            return []
        if not isinstance(raw_items, list):
            logger.error("Summary history %s is not a list; ignoring it", self.path)
            return []

        summaries: List[SummaryResult] = []
        for item in raw_items:
            try:
                summary = SummaryResult.model_validate(item)
            except ValidationError as exc:
                logger.warning("Skipping unreadable history entry: %s", exc.error_count())
                continue
            if has_valid_cards(summary):
                summaries.append(summary)

        if len(summaries) != len(raw_items):
            logger.info("Cleaning %s invalid entries from history", len(raw_items) - len(summaries))
            self._write(summaries)
        return summaries

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    def _write(self, summaries: List[SummaryResult]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        payload = [summary.model_dump(mode="json") for summary in summaries]
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)
