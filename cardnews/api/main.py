"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from cardnews.config import settings
from cardnews.errors import (
    APIError,
    APIErrorKind,
    CardNewsError,
    DEFAULT_LANGUAGE,
    ExtractionError,
    ExtractionErrorKind,
    FileAccessError,
    FileAccessErrorKind,
    USER_MESSAGES,
)
from cardnews.ingestion.documents import detect_format
from cardnews.llm.card_generator import CardNewsGenerator
from cardnews.models.summary import (
    CardCount,
    OutputStyle,
    SummaryConfig,
    SummaryLanguage,
    SummaryResult,
    SummaryTone,
)
from cardnews.storage.history import SummaryHistory
from cardnews.storage.usage import UsageLedger

logger = logging.getLogger(__name__)


class TextSummaryRequest(BaseModel):
    """Pasted-text summary payload."""

    text: str = Field(..., min_length=1)
    title: Optional[str] = None
    config: SummaryConfig = Field(default_factory=SummaryConfig)


EXTRACTION_STATUS = {
    ExtractionErrorKind.UNSUPPORTED_FORMAT: 415,
    ExtractionErrorKind.TOO_LARGE: 413,
}


def error_status(error: CardNewsError) -> int:
    if isinstance(error, FileAccessError):
        return 404 if error.kind is FileAccessErrorKind.NOT_FOUND else 400
    if isinstance(error, ExtractionError):
        return EXTRACTION_STATUS.get(error.kind, 422)
    if isinstance(error, APIError) and error.kind is APIErrorKind.RATE_LIMITED:
        return 429
    return 502


def request_language(request: Request) -> str:
    """Pick the error-message language: Accept-Language, then the summary language, then English."""
    header = request.headers.get("accept-language", "")
    language = header[:2].lower()
    if language in USER_MESSAGES:
        return language
    configured = getattr(request.state, "language", None)
    return configured if configured in USER_MESSAGES else DEFAULT_LANGUAGE


def create_app(
    generator: Optional[CardNewsGenerator] = None,
    history: Optional[SummaryHistory] = None,
    ledger: Optional[UsageLedger] = None,
    upload_dir: Optional[Path] = None,
) -> FastAPI:
    app = FastAPI(
        title="CardNews",
        description="Turn documents into card news summaries",
        version="0.1.0",
    )
    history = history or SummaryHistory()
    app.state.history = history
    app.state.ledger = ledger or UsageLedger()
    app.state.generator = generator or CardNewsGenerator(store=history)
    app.state.upload_dir = Path(upload_dir or settings.private_root_path / "uploads")

    @app.exception_handler(CardNewsError)
    async def card_news_error_handler(request: Request, exc: CardNewsError) -> JSONResponse:
        logger.error("Request failed: %s", exc)
        message = exc.user_message(request_language(request))
        return JSONResponse(
            status_code=error_status(exc),
            content={"error": {"code": exc.kind.value, "message": message}},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple readiness probe."""
        return {"status": "ok"}

    @app.get("/summaries", response_model=List[SummaryResult])
    def list_summaries() -> List[SummaryResult]:
        return app.state.history.load()

    @app.post("/summaries", response_model=SummaryResult)
    async def summarize_file(
        request: Request,
        file: UploadFile = File(...),
        card_count: int = Form(CardCount.FOUR.value),
        output_style: str = Form(OutputStyle.TEXT.value),
        language: str = Form(SummaryLanguage.KOREAN.value),
        tone: str = Form(SummaryTone.FRIENDLY.value),
    ) -> SummaryResult:
        """Summarize an uploaded PDF, DOCX or TXT file."""
        try:
            config = SummaryConfig(
                card_count=card_count, output_style=output_style, language=language, tone=tone
            )
        except ValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors(include_url=False)) from exc
        request.state.language = config.language.value
        _check_entitlement(app, config)
        file_name = Path(file.filename or "upload").name
        document_format = detect_format(file_name)

        content = await file.read()
        target = await asyncio.to_thread(_stage_upload, app.state.upload_dir, file_name, content)
        try:
            result = await app.state.generator.generate(target, config, document_format)
        finally:
            await asyncio.to_thread(shutil.rmtree, target.parent, ignore_errors=True)

        await asyncio.to_thread(_record_usage, app, config)
        return result

    @app.post("/summaries/text", response_model=SummaryResult)
    async def summarize_text(request: Request, payload: TextSummaryRequest) -> SummaryResult:
        """Summarize pasted text."""
        request.state.language = payload.config.language.value
        _check_entitlement(app, payload.config)
        result = await app.state.generator.generate_from_text(
            payload.text, payload.config, payload.title
        )
        await asyncio.to_thread(_record_usage, app, payload.config)
        return result

    return app


def _check_entitlement(app: FastAPI, config: SummaryConfig) -> None:
    if not app.state.ledger.can_create(config.output_style):
        raise HTTPException(
            status_code=403,
            detail=f"Your plan does not allow more '{config.output_style.value}' summaries.",
        )


def _stage_upload(upload_dir: Path, file_name: str, content: bytes) -> Path:
    """Write an upload into its own directory under private storage."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = Path(tempfile.mkdtemp(dir=upload_dir)) / file_name
    target.write_bytes(content)
    return target


def _record_usage(app: FastAPI, config: SummaryConfig) -> None:
    app.state.ledger.record(config.output_style)
    app.state.ledger.save()


app = create_app()


def serve() -> None:
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    serve()
