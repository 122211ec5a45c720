"""
HTML rewriting for enriched newsletters.

Each original anchor is swapped for an enriched version: resolved href, new
tab target, a favicon and, for paywalled articles, an inline expandable
summary with read/archive links. Footnote definitions are folded into their
reference points as expandable inline notes.

Substitution works on the literal anchor markup, not on a parsed tree. Two
anchors with byte-identical markup therefore receive the same replacement.
"""

import re
import html
import logging

from levine_links.models import Footnote

logger = logging.getLogger(__name__)

DETAILS_STYLE = "display:inline-block;vertical-align:baseline;margin:0;padding:0;"
SUMMARY_TOGGLE_STYLE = "cursor:pointer;list-style:none;display:inline;margin:0;padding:0;"
FAVICON_STYLE = "width:20px;height:20px;vertical-align:middle;margin-right:6px;border:0;"
ARCHIVE_TITLE = "Read archived (no paywall)"

SENTENCE_PATTERN = re.compile(r'[^.!?]+[.!?]+')

FOOTNOTE_DEFINITION = re.compile(
    r'<div\s+id="footnote-(\d+)"[^>]*>[\s\S]*?<p[^>]*>\[?\d+\]?\s*([\s\S]*?)</p>[\s\S]*?</div>',
    re.IGNORECASE,
)
FOOTNOTE_BLOCK = re.compile(r'<div\s+id="footnote-\d+"[^>]*>[\s\S]*?</div>', re.IGNORECASE)

VIEW_IN_BROWSER = re.compile(r'>View in browser</a>', re.IGNORECASE)


def escape_html(text):
    return html.escape(text, quote=True)


def split_sentences(text):
    """Split *text* into sentences, keeping any unterminated tail."""
    sentences = [s.strip() for s in SENTENCE_PATTERN.findall(text)]
    consumed = sum(len(m.group(0)) for m in SENTENCE_PATTERN.finditer(text))
    tail = text[consumed:].strip()
    if tail:
        sentences.append(tail)
    return [s for s in sentences if s] or [text]


def _archive_icon(archive_url, style):
    return (
        f'<a href="{escape_html(archive_url)}" target="_blank" rel="noopener" '
        f'style="{style}" title="{ARCHIVE_TITLE}">📰</a>'
    )


def render_summary_block(data):
    """Build the expandable summary annotation for a paywalled link."""
    full_text = re.sub(r'\s+', ' ', data.summary).strip()
    sentences = split_sentences(full_text)
    preview_text = ' '.join(sentences[:2]).strip()
    rest_text = ' '.join(sentences[2:]).strip()

    block = ''
    if data.archive_url:
        block += _archive_icon(
            data.archive_url,
            "text-decoration:none;font-size:13px;vertical-align:middle;margin-right:4px;",
        )

    block += (
        f'<details style="{DETAILS_STYLE}"><summary style="{SUMMARY_TOGGLE_STYLE}">💡</summary>'
        f'<span style="font-size:13px;color:#444;margin-left:4px;">{escape_html(preview_text)}'
    )
    if rest_text:
        block += (
            f' <details style="display:inline;margin:0;padding:0;">'
            f'<summary style="cursor:pointer;color:#1976d2;font-size:11px;list-style:none;'
            f'display:inline;margin:0;padding:0;">[more]</summary>'
            f'<span>{escape_html(rest_text)}</span></details>'
        )
    block += (
        f' <a href="{escape_html(data.resolved_url)}" target="_blank" rel="noopener" '
        f'style="color:#1976d2;font-size:11px;text-decoration:none;">[read]</a>'
    )
    if data.archive_url:
        block += (
            f' <a href="{escape_html(data.archive_url)}" target="_blank" rel="noopener" '
            f'style="color:#2e7d32;font-size:11px;text-decoration:none;">[archive]</a>'
        )
    block += '</span></details>'
    return block


def render_enriched_link(link, data):
    """Return the replacement markup for one anchor.

    Args:
        link: The RawLink being replaced.
        data: The EnrichedLink for ``link.url``.
    """
    resolved = escape_html(data.resolved_url)

    updated = re.sub(
        r'href=(["\'])[^"\']*\1',
        lambda m: f'href={m.group(1)}{resolved}{m.group(1)}',
        link.matched_markup,
        count=1,
    )
    updated = re.sub(r'\s+(?:target|rel)=(["\'])[^"\']*\1', '', updated, flags=re.IGNORECASE)
    updated = re.sub(r'^<a\s+', '<a target="_blank" rel="noopener" ', updated, count=1, flags=re.IGNORECASE)

    if link.has_text and data.favicon:
        favicon_html = f'<img src="{escape_html(data.favicon)}" style="{FAVICON_STYLE}" alt="">'
        updated = re.sub(
            r'>\s*(' + re.escape(link.display_text) + ')',
            lambda m: '>' + favicon_html + m.group(1),
            updated,
            count=1,
        )

    if not (link.has_text and data.is_paywalled):
        return updated

    if data.summary:
        return updated + render_summary_block(data)
    if data.archive_url:
        return updated + ' ' + _archive_icon(data.archive_url, "text-decoration:none;font-size:13px;")
    return updated


def rewrite_links(content, links, enriched):
    """Apply enrichment to every anchor occurrence in *content*.

    Args:
        content (str): Newsletter HTML.
        links: RawLink records in document order.
        enriched (dict): EnrichedLink records keyed by original URL.

    Returns:
        str: HTML with every matched anchor replaced.
    """
    rewritten = 0
    for link in links:
        data = enriched.get(link.url)
        if data is None:
            continue

        if link.matched_markup not in content:
            logger.debug(f"Anchor for {link.url} no longer present, leaving it unmodified")
            continue

        content = content.replace(link.matched_markup, render_enriched_link(link, data), 1)
        rewritten += 1

    logger.info(f"Rewrote {rewritten} of {len(links)} anchors")
    return content


def relabel_view_in_browser(content):
    return VIEW_IN_BROWSER.sub('>View enhanced version</a>', content)


def extract_footnotes(content):
    """Collect footnote definitions as plain text, keyed by number."""
    footnotes = []
    for match in FOOTNOTE_DEFINITION.finditer(content):
        text = re.sub(r'<[^>]+>', '', match.group(2))
        text = re.sub(r'\s+', ' ', html.unescape(text)).strip()
        footnotes.append(Footnote(number=match.group(1), content=text))
    return footnotes


def render_footnote(footnote):
    return (
        f'<sup><details style="{DETAILS_STYLE}">'
        f'<summary style="cursor:pointer;color:#1976d2;list-style:none;display:inline;'
        f'font-size:11px;margin:0;padding:0;">[{footnote.number}]</summary>'
        f'<span style="font-size:12px;color:#555;background:#f5f5f5;padding:2px 6px;'
        f'border-radius:3px;margin-left:2px;">{escape_html(footnote.content)}</span></details></sup>'
    )


def inline_footnotes(content):
    """Replace footnote references with inline notes and drop the definitions."""
    footnotes = extract_footnotes(content)
    if not footnotes:
        return content

    for footnote in footnotes:
        reference = re.compile(
            rf'<a\s+href="#footnote-{footnote.number}"[^>]*>\s*<span>\[{footnote.number}\]</span>\s*</a>',
            re.IGNORECASE,
        )
        replacement = render_footnote(footnote)
        content = reference.sub(lambda m: replacement, content)

    content = FOOTNOTE_BLOCK.sub('', content)
    logger.info(f"Inlined {len(footnotes)} footnotes")
    return content
