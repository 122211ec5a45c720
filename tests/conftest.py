"""Shared fixtures for the Levine Links test suite.

Network access is never real: tests patch ``requests.head``/``get``/``post``
and hand back :class:`FakeResponse` objects.
"""

from __future__ import annotations

import pytest

from levine_links.config import get_default_config


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code=200, headers=None, url="", text="", json_data=None):
        self.status_code = status_code
        self.headers = headers or {}
        self.url = url
        self.text = text
        self._json = json_data

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json


def completion(content: str) -> FakeResponse:
    """A chat-completion shaped response carrying *content*."""
    return FakeResponse(200, json_data={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def config() -> dict:
    cfg = get_default_config()
    cfg["summarizer"]["api_key"] = ""
    return cfg
