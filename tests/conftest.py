"""Pytest configuration and shared fixtures.

Database fixtures use a file-backed SQLite database (aiosqlite) per test, so
concurrent pipeline runs get real connection-level isolation. Blob storage
uses LocalBlobStore under tmp_path and the LLM is a scripted fake.
"""

import json
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

import fitz  # PyMuPDF
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from focusflow_processing.database import create_session_factory, init_models
from focusflow_processing.llm import LLMProvider, LLMProviderError, LLMResponse, ResponseFormat
from focusflow_processing.processing.prompts import BIONIC_SYSTEM_PROMPT
from focusflow_processing.schemas.content import ContentRecord, InputType
from focusflow_processing.services.content_store import SqlContentStore
from focusflow_processing.services.preferences_store import SqlPreferencesStore
from focusflow_processing.storage import LocalBlobStore

VALID_SUMMARY_JSON = json.dumps({"summary": "Focus matters. Short text helps."})
VALID_BIONIC_JSON = json.dumps(
    {
        "paragraphs": [
            {
                "sentences": [
                    {"text": "<b>Foc</b>us <b>mat</b>ters."},
                    {"text": "<b>Sho</b>rt <b>te</b>xt <b>he</b>lps."},
                ]
            }
        ]
    }
)

ARTICLE_HTML = """<html>
<head><title>Example</title><script>var tracking = 1;</script></head>
<body>
  <nav>Home | About | Contact</nav>
  <div class="ad-banner">Buy now</div>
  <article>
    <h1>Why focus matters</h1>
    <p>Short paragraphs make long articles easier to follow for everyone.</p>
    <p>Bold word starts guide the eye through each line.</p>
  </article>
  <footer>Copyright 2024</footer>
</body>
</html>"""


class FakeLLMProvider(LLMProvider):
    """Scripted LLM provider.

    Summary calls return ``summary_responses`` in order (then the last one
    again); bionic calls return ``bionic_content``. ``error_on`` makes the
    named call kind ("summary" or "bionic") raise LLMProviderError.
    """

    def __init__(
        self,
        summary_responses: list[str] | None = None,
        bionic_content: str = VALID_BIONIC_JSON,
        error_on: str | None = None,
    ) -> None:
        self.summary_responses = list(summary_responses or [VALID_SUMMARY_JSON])
        self.bionic_content = bionic_content
        self.error_on = error_on
        self.calls: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    def calls_of(self, kind: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["kind"] == kind]

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        response_format: ResponseFormat = "text",
        max_tokens: int = 4096,
        temperature: float = 0.3,
    ) -> LLMResponse:
        kind = "bionic" if system_prompt == BIONIC_SYSTEM_PROMPT else "summary"
        self.calls.append(
            {
                "kind": kind,
                "prompt": prompt,
                "system_prompt": system_prompt,
                "response_format": response_format,
                "temperature": temperature,
            }
        )
        if self.error_on == kind:
            raise LLMProviderError(provider="fake", message=f"{kind} service unavailable")

        if kind == "bionic":
            content = self.bionic_content
        elif len(self.summary_responses) > 1:
            content = self.summary_responses.pop(0)
        else:
            content = self.summary_responses[0]

        return LLMResponse(
            content=content,
            tokens_input=len(prompt) // 4,
            tokens_output=len(content) // 4,
            model="fake-model",
            provider="fake",
        )


def make_pdf(*pages: str) -> bytes:
    """Build a PDF with one page per string (empty string = blank page)."""
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """httpx client whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database with all tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture
def content_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlContentStore:
    return SqlContentStore(session_factory)


@pytest.fixture
def preferences_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlPreferencesStore:
    return SqlPreferencesStore(session_factory)


# ============================================================================
# Clients
# ============================================================================


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture
def fake_llm() -> FakeLLMProvider:
    return FakeLLMProvider()


# ============================================================================
# Records
# ============================================================================


@pytest.fixture
def make_record(content_store: SqlContentStore) -> Callable[..., Any]:
    """Factory inserting a content record in UPLOADED state."""

    async def _make(
        content_id: str = "content-1",
        user_id: str = "user-1",
        input_type: InputType = InputType.TEXT,
        raw_storage_ref: str = "Plain text that needs a summary.",
    ) -> ContentRecord:
        record = ContentRecord(
            content_id=content_id,
            user_id=user_id,
            input_type=input_type,
            raw_storage_ref=raw_storage_ref,
        )
        return await content_store.create(record)

    return _make


# ============================================================================
# Factories (helpers exposed as fixtures so test modules need no imports)
# ============================================================================


@pytest.fixture
def llm_factory() -> type[FakeLLMProvider]:
    return FakeLLMProvider


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf


@pytest.fixture
def http_client_factory() -> Callable[..., httpx.AsyncClient]:
    return mock_http_client


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML
