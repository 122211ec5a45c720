"""Tests for anchor extraction."""

from __future__ import annotations

from levine_links.wrap.links import extract_links, first_texts, strip_tags, unique_urls

CONTENT = (
    '<p>See <a href="https://example.com/a?x=1&amp;y=2" class="c">the <b>story</b></a> and '
    '<a href="mailto:tips@example.com">mail</a> and <a href="#top">top</a> and '
    '<a href="https://example.com/img"><img src="i.png"></a></p>'
)


class TestExtractLinks:
    def test_keeps_article_and_image_links(self) -> None:
        links = extract_links(CONTENT)

        assert [link.url for link in links] == [
            "https://example.com/a?x=1&y=2",
            "https://example.com/img",
        ]
        assert links[0].display_text == "the story"
        assert links[0].matched_markup == (
            '<a href="https://example.com/a?x=1&amp;y=2" class="c">the <b>story</b></a>'
        )
        assert links[0].has_text is True
        assert links[1].display_text == ""
        assert links[1].has_text is False

    def test_context_is_plain_text(self) -> None:
        link = extract_links(CONTENT)[0]
        assert link.context.startswith("See the story and mail and top")

    def test_adjacent_anchors_do_not_merge(self) -> None:
        links = extract_links('<a href="https://a.com/1">one</a><a href="https://a.com/2">two</a>')
        assert [(link.url, link.display_text) for link in links] == [
            ("https://a.com/1", "one"),
            ("https://a.com/2", "two"),
        ]

    def test_single_quoted_href(self) -> None:
        links = extract_links("<A HREF='https://a.com/x' target='_blank'>Story</A>")
        assert links[0].url == "https://a.com/x"
        assert links[0].display_text == "Story"

    def test_no_anchors(self) -> None:
        assert extract_links("<p>nothing here</p>") == []
        assert extract_links("") == []


def test_unique_urls_and_first_texts() -> None:
    links = extract_links(
        '<a href="https://a.com/1">first</a> <a href="https://a.com/2">other</a> '
        '<a href="https://a.com/1">second</a>'
    )
    assert unique_urls(links) == ["https://a.com/1", "https://a.com/2"]
    assert first_texts(links) == {"https://a.com/1": "first", "https://a.com/2": "other"}


def test_strip_tags() -> None:
    assert strip_tags("<em>a</em> <b>b</b>") == "a b"
