"""HTTP-level tests for the FastAPI application."""

import pytest
from fastapi.testclient import TestClient

from cardnews.api.main import create_app
from cardnews.config import EnvironmentProfile, settings
from cardnews.ingestion.file_access import FileAccessResolver
from cardnews.llm.card_generator import CardNewsGenerator
from cardnews.storage.history import SummaryHistory
from cardnews.storage.usage import SubscriptionTier, UsageLedger
from cardnews.utils.retry import RetryExecutor
from fakes import FakeBackend, RecordingSleep, cards_json


@pytest.fixture
def backend():
    return FakeBackend(cards_json(4))


@pytest.fixture
def ledger(tmp_path):
    return UsageLedger(tmp_path / "usage.json", free_limit=2)


@pytest.fixture
def client(tmp_path, private_root, backend, ledger):
    history = SummaryHistory(tmp_path / "summaries.json", limit=10)
    generator = CardNewsGenerator(
        client=backend,
        resolver=FileAccessResolver(private_root),
        store=history,
        profile=EnvironmentProfile(file_access_attempts=1),
        retry=RetryExecutor(sleep=RecordingSleep()),
    )
    app = create_app(
        generator=generator, history=history, ledger=ledger, upload_dir=private_root / "uploads"
    )
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_upload_docx(client, make_docx, private_root):
    path = make_docx(["Hello", "World"], name="story.docx")
    with path.open("rb") as handle:
        response = client.post(
            "/summaries",
            files={"file": ("story.docx", handle, "application/octet-stream")},
            data={"card_count": "4", "language": "en"},
        )

    assert response.status_code == 200
    body = response.json()
    assert [card["card_number"] for card in body["cards"]] == [1, 2, 3, 4]
    assert body["document"]["file_name"] == "story.docx"
    assert body["config"]["language"] == "en"
    assert list((private_root / "uploads").iterdir()) == []

    listed = client.get("/summaries").json()
    assert [item["id"] for item in listed] == [body["id"]]


def test_text_summary(client, backend):
    response = client.post(
        "/summaries/text",
        json={"text": "Pasted   article text", "title": "Article", "config": {"card_count": 4}},
    )
    assert response.status_code == 200
    assert response.json()["document"]["source"] == "pasted-text"
    assert "Pasted article text" in backend.prompts[0].user


def test_invalid_card_count_is_rejected(client, make_docx):
    path = make_docx()
    with path.open("rb") as handle:
        response = client.post(
            "/summaries",
            files={"file": ("sample.docx", handle, "application/octet-stream")},
            data={"card_count": "5"},
        )
    assert response.status_code == 422


def test_unsupported_upload_has_localized_message(client, tmp_path):
    path = tmp_path / "slides.pptx"
    path.write_bytes(b"pptx bytes")
    with path.open("rb") as handle:
        response = client.post(
            "/summaries",
            files={"file": ("slides.pptx", handle, "application/octet-stream")},
            headers={"Accept-Language": "ko-KR"},
        )
    assert response.status_code == 415
    error = response.json()["error"]
    assert error["code"] == "unsupported_format"
    assert "지원하지 않는 파일 형식" in error["message"]


def test_empty_text_document_is_unprocessable(client):
    response = client.post("/summaries/text", json={"text": "   \n  "})
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "empty_content"


def test_unparseable_model_reply_is_bad_gateway(client, backend):
    backend.text = "no cards here"
    response = client.post("/summaries/text", json={"text": "Something"})
    assert response.status_code == 502
    assert response.json()["error"]["code"] == "no_cards"


def test_free_quota_is_enforced(client, ledger):
    for _ in range(2):
        assert client.post("/summaries/text", json={"text": "Something"}).status_code == 200

    response = client.post("/summaries/text", json={"text": "Something"})
    assert response.status_code == 403
    assert ledger.remaining_free == 0


def test_image_style_requires_subscription(client, ledger):
    payload = {"text": "Something", "config": {"output_style": "image"}}
    assert client.post("/summaries/text", json=payload).status_code == 403

    ledger.update_subscription(True, SubscriptionTier.PREMIUM)
    assert client.post("/summaries/text", json=payload).status_code == 200


def test_oversized_upload_is_rejected(client, make_docx, monkeypatch):
    monkeypatch.setattr(settings, "max_file_size", 10)
    path = make_docx()
    with path.open("rb") as handle:
        response = client.post(
            "/summaries",
            files={"file": ("sample.docx", handle, "application/octet-stream")},
            headers={"Accept-Language": "en-US"},
        )
    assert response.status_code == 413
    assert response.json()["error"]["code"] == "too_large"
    assert "too large" in response.json()["error"]["message"]


def test_error_language_follows_summary_language(client):
    """Without Accept-Language, errors use the requested summary language."""
    response = client.post(
        "/summaries/text", json={"text": "   \n  ", "config": {"language": "ja"}}
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "文書にテキストが含まれていません。"


def test_error_language_defaults_to_korean_summaries(client):
    response = client.post("/summaries/text", json={"text": "   \n  "})
    assert response.json()["error"]["message"] == "문서에 텍스트 내용이 없습니다."
