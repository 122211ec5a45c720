"""Tests for link rewriting and footnote inlining."""

from __future__ import annotations

from levine_links.models import EnrichedLink, RawLink
from levine_links.wrap.rewriter import (
    escape_html,
    extract_footnotes,
    inline_footnotes,
    relabel_view_in_browser,
    render_enriched_link,
    rewrite_links,
    split_sentences,
)

FAVICON = "https://www.google.com/s2/favicons?domain=example.com&sz=32"
ARCHIVE = "https://archive.ph/abc12"


def _link(url: str = "https://t.example/x", text: str = "Story", extra: str = "") -> RawLink:
    return RawLink(matched_markup=f'<a href="{url}"{extra}>{text}</a>', url=url, display_text=text)


def _data(resolved: str, **kwargs) -> EnrichedLink:
    return EnrichedLink(original_url="https://t.example/x", resolved_url=resolved, **kwargs)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_escape_html() -> None:
    assert escape_html('a&b"c<d>') == "a&amp;b&quot;c&lt;d&gt;"


class TestSplitSentences:
    def test_keeps_unterminated_tail(self) -> None:
        assert split_sentences("One. Two! Three? tail") == ["One.", "Two!", "Three?", "tail"]

    def test_no_terminator(self) -> None:
        assert split_sentences("no terminator") == ["no terminator"]


# ---------------------------------------------------------------------------
# render_enriched_link
# ---------------------------------------------------------------------------


class TestRenderEnrichedLink:
    def test_resolved_href_target_and_favicon(self) -> None:
        link = _link(extra=' target="_self"')
        out = render_enriched_link(link, _data("https://example.com/story?a=1&b=2", favicon=FAVICON))

        assert out.startswith('<a target="_blank" rel="noopener" href="https://example.com/story?a=1&amp;b=2"')
        assert "_self" not in out
        assert '<img src="https://www.google.com/s2/favicons?domain=example.com&amp;sz=32"' in out
        assert out.endswith('alt="">Story</a>')
        assert "💡" not in out

    def test_short_text_gets_no_favicon(self) -> None:
        out = render_enriched_link(_link(text="ab"), _data("https://example.com/a", favicon=FAVICON))
        assert "<img" not in out

    def test_paywalled_with_summary_and_archive(self) -> None:
        data = _data(
            "https://www.wsj.com/articles/a",
            favicon=FAVICON,
            is_paywalled=True,
            summary="First sentence. Second sentence. Third sentence.",
            archive_url=ARCHIVE,
        )
        out = render_enriched_link(_link(), data)

        assert "💡" in out
        assert "First sentence. Second sentence." in out
        assert "[more]</summary><span>Third sentence.</span>" in out
        assert '[read]</a>' in out
        assert f'href="{ARCHIVE}"' in out
        assert "[archive]</a>" in out

    def test_two_sentence_summary_has_no_more_toggle(self) -> None:
        data = _data("https://www.wsj.com/articles/a", is_paywalled=True, summary="One. Two.")
        out = render_enriched_link(_link(), data)
        assert "[more]" not in out
        assert "[archive]" not in out

    def test_paywalled_archive_only(self) -> None:
        data = _data("https://www.wsj.com/articles/a", is_paywalled=True, archive_url=ARCHIVE)
        out = render_enriched_link(_link(), data)

        assert "💡" not in out
        assert out.endswith(f'</a> <a href="{ARCHIVE}" target="_blank" rel="noopener" '
                            'style="text-decoration:none;font-size:13px;" '
                            'title="Read archived (no paywall)">📰</a>')

    def test_paywalled_without_lookups(self) -> None:
        data = _data("https://www.wsj.com/articles/a", is_paywalled=True)
        out = render_enriched_link(_link(), data)
        assert out == '<a target="_blank" rel="noopener" href="https://www.wsj.com/articles/a">Story</a>'

    def test_summary_skipped_for_textless_anchor(self) -> None:
        link = _link(text="")
        data = _data("https://www.wsj.com/articles/a", is_paywalled=True, summary="One. Two.")
        assert "💡" not in render_enriched_link(link, data)


# ---------------------------------------------------------------------------
# rewrite_links
# ---------------------------------------------------------------------------


class TestRewriteLinks:
    def test_every_occurrence_rewritten(self) -> None:
        first = _link(text="first")
        second = _link(text="second")
        content = f"<p>{first.matched_markup} and {second.matched_markup}</p>"
        enriched = {first.url: _data("https://example.com/final")}

        out = rewrite_links(content, [first, second], enriched)

        assert out.count('href="https://example.com/final"') == 2
        assert "t.example" not in out

    def test_identical_markup_both_rewritten(self) -> None:
        link = _link()
        content = f"{link.matched_markup} {link.matched_markup}"
        out = rewrite_links(content, [link, link], {link.url: _data("https://example.com/final")})
        assert out.count('target="_blank"') == 2

    def test_unknown_urls_left_alone(self) -> None:
        link = _link()
        content = f"<p>{link.matched_markup}</p>"
        assert rewrite_links(content, [link], {}) == content


def test_relabel_view_in_browser() -> None:
    html = '<a href="https://example.com/view">View in browser</a>'
    assert relabel_view_in_browser(html) == '<a href="https://example.com/view">View enhanced version</a>'


# ---------------------------------------------------------------------------
# Footnotes
# ---------------------------------------------------------------------------

FOOTNOTE_HTML = (
    'Text<a href="#footnote-3"><span>[3]</span></a> more.'
    '<div id="footnote-3"><p>[3] Some &amp; <em>note</em>.</p></div>'
)


class TestFootnotes:
    def test_extract(self) -> None:
        footnotes = extract_footnotes(FOOTNOTE_HTML)
        assert len(footnotes) == 1
        assert footnotes[0].number == "3"
        assert footnotes[0].content == "Some & note."

    def test_inline(self) -> None:
        out = inline_footnotes(FOOTNOTE_HTML)

        assert 'id="footnote-3"' not in out
        assert 'href="#footnote-3"' not in out
        assert out.startswith("Text<sup><details")
        assert ">[3]</summary>" in out
        assert "Some &amp; note." in out
        assert out.endswith("</details></sup> more.")

    def test_no_footnotes(self) -> None:
        assert inline_footnotes("<p>plain</p>") == "<p>plain</p>"
