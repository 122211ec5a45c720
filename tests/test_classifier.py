"""Tests for URL classification (skip / tracking / paywall)."""

from __future__ import annotations

import pytest

from levine_links.crawl.classifier import (
    is_newsletter_archive,
    is_paywalled,
    is_tracking_url,
    should_skip,
)


class TestShouldSkip:
    @pytest.mark.parametrize(
        "url",
        [
            "mailto:a@b.com",
            "#section-2",
            "https://cdn.example.com/chart.png",
            "https://example.com/report.PDF",
            "https://twitter.com/matt_levine",
            "https://www.youtube.com/watch?v=abc",
            "https://www.bloomberg.com/account/newsletters",
            "https://example.com/unsubscribe?u=1",
            "https://www.bloomberg.com/",
            "https://www.bloomberg.com/opinion/newsletters/2025-11-24/money-stuff",
            "https://r.liveintent.com/click?x=1",
        ],
    )
    def test_skipped_urls(self, url: str) -> None:
        assert should_skip(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.wsj.com/articles/foo",
            "https://links.message.bloomberg.com/s/c/abc",
            "https://www.bloomberg.com/news/articles/2025-11-24/some-story",
            "https://example.com/story",
        ],
    )
    def test_article_urls_kept(self, url: str) -> None:
        assert should_skip(url) is False

    def test_malformed_url_is_skipped(self) -> None:
        assert should_skip("http://[not-an-ip/x") is True
        assert should_skip("not a url") is True
        assert should_skip("") is True


class TestIsTrackingUrl:
    def test_known_redirectors(self) -> None:
        assert is_tracking_url("https://links.message.bloomberg.com/s/c/abc") is True
        assert is_tracking_url("https://sli.bloomberg.com/click?id=1") is True

    def test_regular_urls(self) -> None:
        assert is_tracking_url("https://www.wsj.com/articles/foo") is False
        assert is_tracking_url("https://example.com/links.message.bloomberg.com") is False

    def test_malformed_url_is_false(self) -> None:
        assert is_tracking_url("http://[broken") is False


class TestIsPaywalled:
    def test_exact_and_subdomains(self) -> None:
        assert is_paywalled("https://wsj.com/articles/foo") is True
        assert is_paywalled("https://www.wsj.com/articles/foo") is True
        assert is_paywalled("https://www.ft.com/content/123") is True

    def test_lookalike_domains_not_paywalled(self) -> None:
        assert is_paywalled("https://notwsj.com/articles/foo") is False
        assert is_paywalled("https://example.com/?ref=wsj.com") is False

    def test_malformed_url_is_false(self) -> None:
        assert is_paywalled("::::") is False


def test_newsletter_archive_pattern() -> None:
    assert is_newsletter_archive(
        "https://www.bloomberg.com/opinion/newsletters/2025-12-04/money-stuff"
    )
    assert not is_newsletter_archive("https://www.bloomberg.com/news/articles/2025-12-04/x")
