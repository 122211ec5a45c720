"""
Text cleanup for newsletter HTML.

Repairs UTF-8 text that was decoded as Windows-1252 somewhere along the
forwarding chain, removes styling left behind by mail clients, and deletes
fixed publisher boilerplate.
"""

import re
import logging

logger = logging.getLogger(__name__)

# Longer sequences first: the bare "â€" prefix must be replaced last
MOJIBAKE_REPLACEMENTS = [
    ('â€œ', '“'),  # left double quote
    ('â€\u009d', '”'),  # right double quote
    ('â€™', '’'),  # right single quote
    ('â€˜', '‘'),  # left single quote
    ('â€”', '—'),  # em dash
    ('â€“', '–'),  # en dash
    ('â€¦', '…'),  # ellipsis
    ('â€', '”'),
    ('Â ', ' '),
    ('Â ', ' '),
    ('Â', ''),
]

CLIENT_ARTIFACT_PATTERNS = [
    (re.compile(r'background-color:\s*rgb\(204,\s*204,\s*204\);?', re.IGNORECASE), ''),
    (re.compile(r'x-msg://\d+/', re.IGNORECASE), ''),
    (re.compile(r'<span class="Apple-converted-space">[^<]*</span>', re.IGNORECASE), ' '),
]

BOILERPLATE_PATTERNS = [
    re.compile(r'<img[^>]*alt=["\']Listen to the money stuff podcast["\'][^>]*>', re.IGNORECASE),
    re.compile(r'You received this message because you are subscribed to Bloomberg[^<]*</\w+>', re.IGNORECASE),
    re.compile(r'Ads Powered By Liveintent[^<]*Ad Choices', re.IGNORECASE),
    re.compile(r'Bloomberg L\.P\.\s*731 Lexington[^<]*10022', re.IGNORECASE),
    re.compile(r'<a[^>]*>Unsubscribe</a>', re.IGNORECASE),
    re.compile(r'<a[^>]*>Contact Us</a>', re.IGNORECASE),
]


def fix_mojibake(text):
    """Replace common UTF-8-as-Windows-1252 sequences with the intended characters."""
    for broken, fixed in MOJIBAKE_REPLACEMENTS:
        text = text.replace(broken, fixed)
    return text


def remove_client_artifacts(html):
    for pattern, replacement in CLIENT_ARTIFACT_PATTERNS:
        html = pattern.sub(replacement, html)
    return html


def remove_boilerplate(html):
    """Delete subscription footers, ad disclosures and other fixed publisher text."""
    for pattern in BOILERPLATE_PATTERNS:
        html = pattern.sub('', html)
    return html


def clean_html(html):
    """Run every cleanup step over *html*."""
    if not html:
        return ''

    cleaned = fix_mojibake(html)
    cleaned = remove_client_artifacts(cleaned)
    cleaned = remove_boilerplate(cleaned)

    if len(cleaned) != len(html):
        logger.debug(f"Cleaned newsletter HTML ({len(html)} -> {len(cleaned)} chars)")
    return cleaned
