"""
Forwarded-message cleanup for Levine Links.

Newsletters usually reach us as forwards, wrapped in whatever the forwarding
mail client adds: Gmail quote containers, Apple Mail "cite" blockquotes,
plain-text "Forwarded message" markers and header blocks. This module peels
those layers off with pattern matching and leaves the original newsletter
body. Input that matches none of the patterns is returned unchanged.
"""

import re
import logging

logger = logging.getLogger(__name__)

# Gmail: <div class="gmail_quote"> holding a gmail_attr header block and the message
GMAIL_ATTR = re.compile(
    r'<div[^>]*class=["\'][^"\']*\bgmail_attr\b[^"\']*["\'][^>]*>[\s\S]*?</div>',
    re.IGNORECASE,
)
GMAIL_QUOTE_OPEN = re.compile(
    r'<div[^>]*class=["\'][^"\']*\bgmail_quote\b[^"\']*["\'][^>]*>',
    re.IGNORECASE,
)
# Only tags may sit between the quote container and the message container
GMAIL_MESSAGE_OPEN = re.compile(
    r'^\s*(?:<[^>]+>\s*)*?<div[^>]*class=["\'][^"\']*\bmsg-?\d+[^"\']*["\'][^>]*>',
    re.IGNORECASE,
)

FORWARDED_MARKER = re.compile(
    r'-{5,}\s*Forwarded message\s*-{5,}[\s\S]*?(?=<table|<div[^>]*class|<center)',
    re.IGNORECASE,
)

# Apple Mail: "Begin forwarded message:" element followed by a header blockquote
APPLE_FORWARD_LEAD = re.compile(
    r'>\s*Begin forwarded message:\s*</\w+>[\s\S]*?<blockquote[^>]*>',
    re.IGNORECASE,
)
APPLE_HEADER_BLOCKQUOTE = re.compile(
    r'<blockquote[^>]*>(?:(?!</?blockquote)[\s\S])*?<b>From:</b>(?:(?!</?blockquote)[\s\S])*?'
    r'<b>To:</b>[\s\S]*?</blockquote>',
    re.IGNORECASE,
)

CITE_BLOCKQUOTE_HEAD = re.compile(
    r'(<blockquote[^>]*type=["\']?cite["\']?[^>]*>)([\s\S]*?)<br\s*/?>',
    re.IGNORECASE,
)

BEGIN_FORWARDED_PATTERNS = [
    # Header block inside a single div, ending at the Reply-To line
    re.compile(
        r'<div[^>]*>(?:(?!<div)[\s\S])*?Begin forwarded message:[\s\S]*?Reply-To:[^<]*</div>',
        re.IGNORECASE,
    ),
    # Freestanding text followed by up to 10 <br>-separated header lines
    re.compile(
        r'Begin forwarded message:[\s\S]*?(?:From:|Subject:|Date:|To:|Reply-To:)[^<]*'
        r'(?:<br\s*/?>[^<]*){0,10}(?=<)',
        re.IGNORECASE,
    ),
    re.compile(
        r'<blockquote[^>]*>(?:(?!<blockquote)[\s\S])*?Begin forwarded message:[\s\S]*?</blockquote>',
        re.IGNORECASE,
    ),
    re.compile(
        r'Begin forwarded message:\s*(?:<br\s*/?>|\n|\r)+'
        r'(?:[^<\n]*?(?:From|Subject|Date|To|Reply-To):[^\n<]+(?:<br\s*/?>|\n|\r)*)+',
        re.IGNORECASE,
    ),
    re.compile(
        r'<[^>]*>Begin forwarded message:</[^>]*>[\s\S]*?<[^>]*>Reply-To:[^<]*</[^>]*>',
        re.IGNORECASE,
    ),
    # Marker left alone in its own element once the headers are gone
    re.compile(r'<(\w+)[^>]*>\s*Begin forwarded message:\s*</\1>', re.IGNORECASE),
]

MAX_FORWARD_LAYERS = 10

HEADER_FIELDS = re.compile(r'\b(From|Subject|Date|To):', re.IGNORECASE)

LEADING_EMPTY = re.compile(
    r'^(?:\s|<br\s*/?>|<(div|p|span|blockquote)\b[^>]*>\s*</\1>)+',
    re.IGNORECASE,
)
TRAILING_EMPTY = re.compile(
    r'(?:\s|<br\s*/?>|<(div|p|span|blockquote)\b[^>]*>\s*</\1>)+$',
    re.IGNORECASE,
)


def _drop_unbalanced_closing_divs(html):
    """Remove trailing </div> tags left without an opening tag."""
    opened = len(re.findall(r'<div\b', html, re.IGNORECASE))
    closed = len(re.findall(r'</div\s*>', html, re.IGNORECASE))

    while closed > opened:
        stripped = re.sub(r'</div\s*>\s*$', '', html.rstrip(), count=1, flags=re.IGNORECASE)
        if stripped == html.rstrip():
            break
        html = stripped
        closed -= 1
    return html


def strip_gmail_wrapper(html):
    """Unwrap a Gmail forward, keeping only the quoted message."""
    if 'gmail_quote' not in html and 'gmail_attr' not in html:
        return html

    logger.info("Detected Gmail forwarding structure")
    html = GMAIL_ATTR.sub('', html)

    quote = GMAIL_QUOTE_OPEN.search(html)
    if quote:
        html = html[quote.end():]

    message = GMAIL_MESSAGE_OPEN.match(html)
    if message:
        html = html[message.end():]

    return _drop_unbalanced_closing_divs(html)


def strip_cite_headers(html):
    """Drop the header block at the top of a cite blockquote."""

    def _strip(match):
        head = re.sub(r'<[^>]+>', ' ', match.group(2))
        fields = {field.lower() for field in HEADER_FIELDS.findall(head)}
        if 'from' in fields and len(fields) > 1:
            return match.group(1)
        return match.group(0)

    return CITE_BLOCKQUOTE_HEAD.sub(_strip, html)


def trim_empty_edges(html):
    """Trim stray line breaks and empty elements from both ends."""
    html = LEADING_EMPTY.sub('', html)
    html = TRAILING_EMPTY.sub('', html)
    return html.strip()


def _strip_one_layer(html):
    result = strip_gmail_wrapper(html)
    result = FORWARDED_MARKER.sub('', result, count=1)
    result = APPLE_HEADER_BLOCKQUOTE.sub('', result)
    result = strip_cite_headers(result)
    result = APPLE_FORWARD_LEAD.sub('>', result, count=1)

    for pattern in BEGIN_FORWARDED_PATTERNS:
        result = pattern.sub('', result)

    return trim_empty_edges(result)


def strip_forwarded_headers(html):
    """Remove forwarding wrappers and header blocks from newsletter HTML.

    A newsletter forwarded more than once carries one wrapper per forward,
    so layers are peeled off until the markup stops changing.

    Args:
        html (str): Raw HTML body of a (possibly forwarded) email.

    Returns:
        str: Best-effort original newsletter body.
    """
    if not html:
        return ''

    result = html
    for _ in range(MAX_FORWARD_LAYERS):
        stripped = _strip_one_layer(result)
        if stripped == result:
            break
        result = stripped
    else:
        logger.warning(f"Still stripping forwarding wrappers after {MAX_FORWARD_LAYERS} passes")

    if len(result) != len(html):
        logger.info(f"Stripped forwarding wrapper ({len(html)} -> {len(result)} chars)")
    return result
