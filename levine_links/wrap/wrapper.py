"""
Newsletter wrapper for Levine Links.

This module ties the pipeline together: strip the forwarding wrapper, clean
the markup, find and classify links, enrich the unique URLs across worker
groups, rewrite the HTML and derive a plaintext preview and cover image.
"""

import re
import logging
from bs4 import BeautifulSoup, Comment

from levine_links.config import get_default_config
from levine_links.crawl.classifier import should_skip
from levine_links.enrich.fanout import LinkEnricher, build_tasks
from levine_links.mail_handling.forwarding import strip_forwarded_headers
from levine_links.models import WrapResult
from levine_links.wrap.cleaner import clean_html
from levine_links.wrap.links import extract_links, first_texts, unique_urls
from levine_links.wrap.rewriter import inline_footnotes, relabel_view_in_browser, rewrite_links

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


def extract_preview(html_content, length=PREVIEW_LENGTH):
    """Return the first *length* characters of readable text in the HTML."""
    if not html_content:
        return ""

    try:
        soup = BeautifulSoup(html_content, 'html.parser')
        for tag in soup(['script', 'style']):
            tag.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()
        text = soup.get_text(' ')
    except Exception as e:
        logger.exception(f"Error extracting text from HTML: {e}")
        # Fallback to a simple tag removal if BeautifulSoup fails
        text = re.sub(r'<(style|script)[^>]*>[\s\S]*?</\1>', '', html_content, flags=re.IGNORECASE)
        text = re.sub(r'<!--[\s\S]*?-->', '', text)
        text = re.sub(r'<[^>]+>', ' ', text)

    text = re.sub(r'\s+', ' ', text).strip()
    return text[:length].strip()


def wrap_newsletter(html, api_key=None, limit=None, config=None):
    """Turn a forwarded newsletter into an enriched, self-contained document.

    Args:
        html (str): The newsletter body (HTML, or text when no HTML exists).
        api_key (str): Summarization API key. Without it paywalled links are
            still resolved but get no summary or archive link.
        limit (int): Maximum number of unique URLs to summarize. Defaults to
            ``enrichment.summary_limit`` from the config (unlimited if unset).
        config (dict): Full configuration; defaults are used when omitted.

    Returns:
        WrapResult: Rewritten HTML, plaintext preview and cover image.
    """
    config = config or get_default_config()
    if limit is None:
        limit = config['enrichment'].get('summary_limit')

    processed = strip_forwarded_headers(html or '')
    processed = clean_html(processed)

    links = [link for link in extract_links(processed) if not should_skip(link.url)]

    # Most important links sit near the end of the newsletter
    urls = list(reversed(unique_urls(links)))
    logger.info(f"Found {len(links)} candidate anchors, {len(urls)} unique URLs")

    enricher = LinkEnricher(config, api_key=api_key)
    enriched = enricher.enrich(build_tasks(urls, first_texts(links), limit))

    processed = rewrite_links(processed, links, enriched)
    processed = relabel_view_in_browser(processed)
    processed = inline_footnotes(processed)

    preview = extract_preview(processed)

    ordered = [enriched[url] for url in urls if url in enriched]
    og_image = enricher.find_cover_image(ordered)

    return WrapResult(html=processed, preview=preview, og_image=og_image, links=enriched)
