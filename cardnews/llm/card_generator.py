"""Glue module that turns a document into a card sequence via the Messages API."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Callable, Optional, Protocol

from cardnews.config import EnvironmentProfile, settings
from cardnews.errors import CardNewsError, is_filesystem_retryable
from cardnews.ingestion.documents import build_text_document, load_document
from cardnews.ingestion.extractors import DocumentExtractor
from cardnews.ingestion.file_access import FileAccessResolver, FileReference
from cardnews.llm.anthropic_client import AnthropicMessagesClient
from cardnews.llm.prompts import build_summary_prompt
from cardnews.llm.response_repair import ResponseRepair
from cardnews.models.document import DocumentFormat, ProcessedDocument
from cardnews.models.messages import Completion, SummaryPrompt
from cardnews.models.summary import (
    CardCount,
    OutputStyle,
    SummaryConfig,
    SummaryLanguage,
    SummaryResult,
    SummaryTone,
)
from cardnews.storage.history import SummaryStore
from cardnews.utils.retry import RetryExecutor

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[SummaryResult], None]


class SummaryBackend(Protocol):
    async def summarize(self, prompt: SummaryPrompt) -> Completion:
        ...


class CardNewsGenerator:
    """Runs one document through resolve, extract, prompt, call and repair.

    Stages run strictly one after another; each ``await`` is a point where a
    cancelled task stops before starting the next stage. Filesystem failures
    around resolve+extract are retried with the profile's budget; content
    failures are not.
    """

    def __init__(
        self,
        client: Optional[SummaryBackend] = None,
        resolver: Optional[FileAccessResolver] = None,
        extractor: Optional[DocumentExtractor] = None,
        repair: Optional[ResponseRepair] = None,
        store: Optional[SummaryStore] = None,
        profile: Optional[EnvironmentProfile] = None,
        retry: Optional[RetryExecutor] = None,
        on_complete: Optional[CompletionCallback] = None,
        char_budget: Optional[int] = None,
    ) -> None:
        self.profile = profile or settings.profile
        self.retry = retry or RetryExecutor()
        self.client = client or AnthropicMessagesClient(profile=self.profile, retry=self.retry)
        self.resolver = resolver or FileAccessResolver()
        self.extractor = extractor or DocumentExtractor()
        self.repair = repair or ResponseRepair()
        self.store = store
        self.on_complete = on_complete
        self.char_budget = char_budget

    async def process_file(
        self, reference: FileReference, document_format: Optional[DocumentFormat] = None
    ) -> ProcessedDocument:
        return await self.retry.run(
            lambda: asyncio.to_thread(
                load_document, reference, document_format, self.resolver, self.extractor
            ),
            is_filesystem_retryable,
            self.profile.file_access_attempts,
            self.profile.file_access_base_delay,
        )

    async def generate(
        self,
        reference: FileReference,
        config: SummaryConfig,
        document_format: Optional[DocumentFormat] = None,
    ) -> SummaryResult:
        document = await self.process_file(reference, document_format)
        return await self.summarize(document, config)

    async def generate_from_text(
        self, text: str, config: SummaryConfig, title: Optional[str] = None
    ) -> SummaryResult:
        document = build_text_document(text, title)
        return await self.summarize(document, config)

    async def summarize(self, document: ProcessedDocument, config: SummaryConfig) -> SummaryResult:
        prompt = build_summary_prompt(document, config, self.char_budget)
        completion = await self.client.summarize(prompt)
        cards = self.repair.repair(completion.text, config.card_count.value)
        result = SummaryResult(
            config=config,
            document=document.document,
            cards=tuple(cards),
            tokens_used=completion.tokens_used,
        )
        logger.info(
            "Generated %s cards for %s (%s tokens)",
            len(result.cards),
            document.document.file_name,
            result.tokens_used,
        )
        return await self._publish(result)

    async def _publish(self, result: SummaryResult) -> SummaryResult:
        stored = result
        if self.store is not None:
            saved = await asyncio.to_thread(self.store.save, result)
            if saved is None:
                return result
            stored = saved
        if self.on_complete is not None:
            self.on_complete(stored)
        return stored


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Summarize a document into card news.")
    parser.add_argument("path", nargs="?", help="PDF, DOCX or TXT file to summarize")
    parser.add_argument("--text", help="Summarize this text instead of a file")
    parser.add_argument("--cards", type=int, choices=[c.value for c in CardCount], default=4)
    parser.add_argument("--style", choices=[s.value for s in OutputStyle], default="text")
    parser.add_argument("--language", choices=[lang.value for lang in SummaryLanguage], default="ko")
    parser.add_argument("--tone", choices=[t.value for t in SummaryTone], default="friendly")
    return parser


def main(argv: Optional[list] = None) -> int:
    logging.basicConfig(level=settings.log_level)
    args = build_parser().parse_args(argv)
    if not args.path and not args.text:
        build_parser().error("either a file path or --text is required")

    config = SummaryConfig(
        card_count=CardCount(args.cards),
        output_style=OutputStyle(args.style),
        language=SummaryLanguage(args.language),
        tone=SummaryTone(args.tone),
    )
    generator = CardNewsGenerator()
    try:
        if args.text:
            result = asyncio.run(generator.generate_from_text(args.text, config))
        else:
            result = asyncio.run(generator.generate(args.path, config))
    except CardNewsError as exc:
        logger.error("Summary failed: %s", exc)
        print(exc.user_message(config.language.value), file=sys.stderr)
        return 1

    print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
