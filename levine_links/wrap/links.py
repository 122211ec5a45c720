"""
Anchor extraction for newsletter HTML.
"""

import re
import html
import logging

from levine_links.models import RawLink

logger = logging.getLogger(__name__)

# Non-greedy body so one match never spans two anchors
LINK_PATTERN = re.compile(
    r'<a\s+[^>]*?href=(["\'])([^"\']*)\1[^>]*>([\s\S]*?)</a>',
    re.IGNORECASE,
)

CONTEXT_CHARS = 100


def strip_tags(text):
    return re.sub(r'<[^>]+>', '', text)


def _context(content, start, end):
    """Return tag-stripped text around content[start:end]."""
    snippet = content[max(0, start - CONTEXT_CHARS):min(len(content), end + CONTEXT_CHARS)]
    snippet = re.sub(r'<[^>]+>', ' ', snippet)
    return re.sub(r'\s+', ' ', snippet).strip()


def extract_links(content):
    """Extract anchors from HTML in document order.

    Anchors without an href, with a mailto: href or with a fragment-only href
    are left out. Anchors whose text is empty (image links, for example) are
    still returned with an empty ``display_text``.

    Args:
        content (str): Cleaned newsletter HTML.

    Returns:
        list: RawLink records, one per anchor occurrence.
    """
    links = []

    for match in LINK_PATTERN.finditer(content or ''):
        url = html.unescape(match.group(2)).strip()

        if not url or url.lower().startswith('mailto:') or url.startswith('#'):
            continue

        text = strip_tags(match.group(3)).strip()
        links.append(RawLink(
            matched_markup=match.group(0),
            url=url,
            display_text=text,
            context=_context(content, match.start(), match.end()),
        ))

    logger.debug(f"Extracted {len(links)} anchors from content")
    return links


def unique_urls(links):
    """Return each distinct URL once, in order of first appearance."""
    seen = set()
    urls = []
    for link in links:
        if link.url not in seen:
            seen.add(link.url)
            urls.append(link.url)
    return urls


def first_texts(links):
    """Map each URL to the display text of its first occurrence."""
    texts = {}
    for link in links:
        texts.setdefault(link.url, link.display_text)
    return texts
