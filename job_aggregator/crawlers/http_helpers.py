from __future__ import annotations
import logging
from typing import Any

from bs4 import BeautifulSoup
import httpx

from job_aggregator.core.config import settings

logger = logging.getLogger(__name__)


class HttpSession:
    def __init__(self, timeout: float | None = None, user_agent: str | None = None):
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.user_agent = user_agent or settings.user_agent
        self._client: httpx.Client | None = None

    def open(self) -> HttpSession:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
            )
            logger.debug("HTTP session opened (timeout=%ss)", self.timeout)
        return self

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.debug("HTTP session closed")

    def __enter__(self) -> HttpSession:
        return self.open()

    def __exit__(self, *_exc) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            raise RuntimeError("HTTP session not opened. Call open() first.")
        return self._client

    def get_json(self, url: str, params: dict | None = None) -> Any:
        resp = self.client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()


def html_to_text(fragment: str | None) -> str:
    if not fragment:
        return ""
    soup = BeautifulSoup(fragment, "html.parser")
    return " ".join(soup.get_text(" ", strip=True).split())
