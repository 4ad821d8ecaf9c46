"""Web page text extraction using httpx + BeautifulSoup."""

import re
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from focusflow_processing.config import BROWSER_USER_AGENT
from focusflow_processing.logging_config import get_logger
from focusflow_processing.schemas.content import InputType

from .base import BaseExtractor
from .exceptions import EmptyContentError, ExtractionError, NetworkError
from .utils import collapse_whitespace

logger = get_logger(__name__)

ERROR_PREFIX = "Failed to extract text from URL: "

# Elements that never carry article prose
NON_CONTENT_TAGS = ["script", "style", "nav", "header", "footer", "noscript", "iframe", "ad"]

# class / id tokens marking advertisement containers (e.g. "ad", "ads-top", "advertisement")
AD_MARKER = re.compile(r"^(ad|ads|advert|advertisement|advertising|sponsored)([-_].*)?$", re.IGNORECASE)

# Content roots are never dropped, whatever their class says ("ad-free", "ad_hoc")
STRUCTURAL_TAGS = frozenset({"html", "body", "main", "article"})


def _is_ad_marker(element) -> bool:
    if not getattr(element, "attrs", None) or element.name in STRUCTURAL_TAGS:
        return False
    tokens = list(element.get("class") or [])
    element_id = element.get("id")
    if element_id:
        tokens.append(element_id)
    return any(AD_MARKER.match(token) for token in tokens)


def extract_html_text(html: str) -> str:
    """Strip non-content markup and return the page's readable text.

    Prefers the ``<article>`` element(s) when present, otherwise the body.
    All whitespace runs collapse to single spaces.
    """
    soup = BeautifulSoup(html, "html.parser")

    # Nested matches (a script inside a nav) are already gone with their parent
    for element in soup.find_all(NON_CONTENT_TAGS) + soup.find_all(_is_ad_marker):
        if not element.decomposed:
            element.decompose()

    articles = soup.find_all("article")
    if articles:
        text = " ".join(article.get_text(separator=" ") for article in articles)
    else:
        root = soup.body or soup
        text = root.get_text(separator=" ")

    return collapse_whitespace(text)


class LinkExtractor(BaseExtractor):
    """Fetch a web page and extract its main text.

    The payload is the URL itself (the resolver hands bare links through
    unchanged). A shared httpx client may be injected; otherwise one is
    opened per fetch.
    """

    input_type = InputType.LINK

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        user_agent: str = BROWSER_USER_AGENT,
        min_content_length: int = 50,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.min_content_length = min_content_length
        self._client = client

    async def extract(self, content: bytes) -> str:
        url = content.decode("utf-8", errors="replace").strip()
        if urlparse(url).scheme not in ("http", "https"):
            raise ExtractionError(f"{ERROR_PREFIX}not an http(s) URL: {url[:200]}")

        html = await self._fetch(url)
        text = extract_html_text(html)

        if len(text) < self.min_content_length:
            raise EmptyContentError(f"{ERROR_PREFIX}Could not extract meaningful text from URL")

        logger.debug("link_extracted", url=url, chars=len(text))
        return text

    async def _fetch(self, url: str) -> str:
        headers = {"User-Agent": self.user_agent}
        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self.timeout_seconds, follow_redirects=True
                )
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout_seconds,
                    follow_redirects=True,
                    headers=headers,
                ) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"{ERROR_PREFIX}timed out after {self.timeout_seconds:g}s fetching {url}"
            ) from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"{ERROR_PREFIX}HTTP {e.response.status_code} fetching {url}"
            ) from e
        except httpx.RequestError as e:
            raise NetworkError(f"{ERROR_PREFIX}request error fetching {url}: {e}") from e

        return response.text
