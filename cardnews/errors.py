"""Error taxonomy shared by the ingestion and summarization stages.

Every failure raised by the pipeline is a ``CardNewsError`` subclass tagged
with a ``kind`` and a ``retryable`` flag at the point it is classified. The
``user_message`` of each kind is the only text ever shown to end users; the
``detail`` attribute keeps the internal reason for logs.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class FileAccessErrorKind(str, Enum):
    DENIED = "denied"
    NOT_FOUND = "not_found"
    CORRUPTED = "corrupted"


class ExtractionErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    EMPTY_CONTENT = "empty_content"
    MALFORMED = "malformed"
    TOO_LARGE = "too_large"


class APIErrorKind(str, Enum):
    INVALID_KEY = "invalid_key"
    INVALID_REQUEST = "invalid_request"
    RATE_LIMITED = "rate_limited"
    INSUFFICIENT_CREDIT = "insufficient_credit"
    SERVER_ERROR = "server_error"
    NETWORK = "network"
    DECODING = "decoding"


class ParsingErrorKind(str, Enum):
    NO_CARDS = "no_cards"


USER_MESSAGES: Dict[str, Dict[Enum, str]] = {
    "en": {
        FileAccessErrorKind.DENIED: "Cannot access the file. Please check permissions.",
        FileAccessErrorKind.NOT_FOUND: "The selected file could not be found.",
        FileAccessErrorKind.CORRUPTED: "The file is corrupted or cannot be read.",
        ExtractionErrorKind.UNSUPPORTED_FORMAT: (
            "Unsupported file format. Only PDF and Word (.docx) files are supported."
        ),
        ExtractionErrorKind.EMPTY_CONTENT: "The document has no text content.",
        ExtractionErrorKind.MALFORMED: "The document structure could not be read.",
        ExtractionErrorKind.TOO_LARGE: "The file is too large. Please upload a smaller file.",
        APIErrorKind.INVALID_KEY: "The API key is invalid. Please check your settings.",
        APIErrorKind.INVALID_REQUEST: "The request was rejected. Please check its format.",
        APIErrorKind.RATE_LIMITED: "Too many requests. Please try again shortly.",
        APIErrorKind.INSUFFICIENT_CREDIT: "API credit is insufficient. Please check your account.",
        APIErrorKind.SERVER_ERROR: "A server error occurred. (code: {status_code})",
        APIErrorKind.NETWORK: "A network error occurred. Please check your connection.",
        APIErrorKind.DECODING: "The response from the server could not be processed.",
        ParsingErrorKind.NO_CARDS: "The summary could not be turned into cards. Please try again.",
    },
    "ko": {
        FileAccessErrorKind.DENIED: "파일에 접근할 수 없습니다. 권한을 확인해주세요.",
        FileAccessErrorKind.NOT_FOUND: "선택한 파일을 찾을 수 없습니다.",
        FileAccessErrorKind.CORRUPTED: "파일이 손상되었거나 읽을 수 없습니다.",
        ExtractionErrorKind.UNSUPPORTED_FORMAT: (
            "지원하지 않는 파일 형식입니다. PDF 또는 Word(.docx) 파일만 업로드 가능합니다."
        ),
        ExtractionErrorKind.EMPTY_CONTENT: "문서에 텍스트 내용이 없습니다.",
        ExtractionErrorKind.MALFORMED: "문서 구조를 읽을 수 없습니다.",
        ExtractionErrorKind.TOO_LARGE: "파일 크기가 너무 큽니다. 더 작은 파일을 업로드해주세요.",
        APIErrorKind.INVALID_KEY: "API 키가 유효하지 않습니다. 설정을 확인해주세요.",
        APIErrorKind.INVALID_REQUEST: "잘못된 요청입니다. 요청 형식을 확인해주세요.",
        APIErrorKind.RATE_LIMITED: "API 호출 한도를 초과했습니다. 잠시 후 다시 시도해주세요.",
        APIErrorKind.INSUFFICIENT_CREDIT: "API 크레딧이 부족합니다. 계정을 확인해주세요.",
        APIErrorKind.SERVER_ERROR: "서버 오류가 발생했습니다. (코드: {status_code})",
        APIErrorKind.NETWORK: "네트워크 오류가 발생했습니다. 연결을 확인해주세요.",
        APIErrorKind.DECODING: "응답을 처리하지 못했습니다.",
        ParsingErrorKind.NO_CARDS: "요약 결과를 카드로 변환하지 못했습니다. 다시 시도해주세요.",
    },
    "ja": {
        FileAccessErrorKind.DENIED: "ファイルにアクセスできません。権限を確認してください。",
        FileAccessErrorKind.NOT_FOUND: "選択したファイルが見つかりません。",
        FileAccessErrorKind.CORRUPTED: "ファイルが破損しているか、読み込めません。",
        ExtractionErrorKind.UNSUPPORTED_FORMAT: (
            "サポートされていないファイル形式です。PDFまたはWord(.docx)ファイルのみアップロードできます。"
        ),
        ExtractionErrorKind.EMPTY_CONTENT: "文書にテキストが含まれていません。",
        ExtractionErrorKind.MALFORMED: "文書の構造を読み取れません。",
        ExtractionErrorKind.TOO_LARGE: "ファイルサイズが大きすぎます。より小さいファイルをアップロードしてください。",
        APIErrorKind.INVALID_KEY: "APIキーが無効です。設定を確認してください。",
        APIErrorKind.INVALID_REQUEST: "リクエストが拒否されました。形式を確認してください。",
        APIErrorKind.RATE_LIMITED: "リクエストが多すぎます。しばらくしてから再試行してください。",
        APIErrorKind.INSUFFICIENT_CREDIT: "APIクレジットが不足しています。アカウントを確認してください。",
        APIErrorKind.SERVER_ERROR: "サーバーエラーが発生しました。(コード: {status_code})",
        APIErrorKind.NETWORK: "ネットワークエラーが発生しました。接続を確認してください。",
        APIErrorKind.DECODING: "応答を処理できませんでした。",
        ParsingErrorKind.NO_CARDS: "要約をカードに変換できませんでした。もう一度お試しください。",
    },
}

DEFAULT_LANGUAGE = "en"


class CardNewsError(Exception):
    """Base class for every classified pipeline failure."""

    retryable: bool = False

    def __init__(
        self,
        kind: Enum,
        detail: Optional[str] = None,
        *,
        file_name: Optional[str] = None,
        status_code: Optional[int] = None,
        stage: Optional[str] = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.file_name = file_name
        self.status_code = status_code
        self.stage = stage
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [f"{type(self).__name__}[{self.kind.value}]"]
        if self.file_name:
            parts.append(f"file={self.file_name}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.stage:
            parts.append(f"stage={self.stage}")
        if self.detail:
            parts.append(self.detail)
        return " ".join(parts)

    def user_message(self, language: str = DEFAULT_LANGUAGE) -> str:
        """Localized, user-facing message for this error's kind."""
        catalog = USER_MESSAGES.get(language) or USER_MESSAGES[DEFAULT_LANGUAGE]
        template = catalog[self.kind]
        return template.format(status_code=self.status_code if self.status_code is not None else "?")


class FileAccessError(CardNewsError):
    """The file could not be opened or read from the filesystem."""

    retryable = True

    def __init__(self, kind: FileAccessErrorKind, detail: Optional[str] = None, **context) -> None:
        super().__init__(kind, detail, **context)


class ExtractionError(CardNewsError):
    """The file was readable but its content could not be turned into text."""

    def __init__(self, kind: ExtractionErrorKind, detail: Optional[str] = None, **context) -> None:
        super().__init__(kind, detail, **context)


class APIError(CardNewsError):
    """The LLM endpoint call failed."""

    def __init__(self, kind: APIErrorKind, detail: Optional[str] = None, **context) -> None:
        super().__init__(kind, detail, **context)

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        if self.kind is APIErrorKind.SERVER_ERROR:
            return (self.status_code or 0) >= 500
        return self.kind in (APIErrorKind.NETWORK, APIErrorKind.RATE_LIMITED)

    @classmethod
    def from_status(cls, status_code: int, detail: Optional[str] = None) -> "APIError":
        """Classify a non-2xx HTTP status."""
        kind = STATUS_KINDS.get(status_code, APIErrorKind.SERVER_ERROR)
        return cls(kind, detail, status_code=status_code)


STATUS_KINDS: Dict[int, APIErrorKind] = {
    400: APIErrorKind.INVALID_REQUEST,
    401: APIErrorKind.INVALID_KEY,
    402: APIErrorKind.INSUFFICIENT_CREDIT,
    429: APIErrorKind.RATE_LIMITED,
}


class ParsingError(CardNewsError):
    """No well-formed card data could be recovered from the model output."""

    def __init__(self, detail: Optional[str] = None, *, stage: Optional[str] = None) -> None:
        super().__init__(ParsingErrorKind.NO_CARDS, detail, stage=stage)


def is_filesystem_retryable(error: BaseException) -> bool:
    """Retry predicate for the resolve-then-extract sequence."""
    return isinstance(error, FileAccessError)


def is_api_retryable(error: BaseException) -> bool:
    """Retry predicate for LLM endpoint calls."""
    return isinstance(error, APIError) and error.retryable
