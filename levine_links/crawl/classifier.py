"""
URL classification for Levine Links.

Three independent checks decide what happens to a link found in a newsletter:
whether it is skipped outright, whether it is a tracking redirector that has
to be resolved first, and whether its destination sits behind a paywall.
"""

import re
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# Redirector hosts used by the newsletter's email platform
TRACKING_DOMAINS = [
    'links.message.bloomberg.com',
    'bloom.bg',
    'sli.bloomberg.com',
]

PAYWALLED_DOMAINS = [
    'wsj.com',
    'nytimes.com',
    'ft.com',
    'economist.com',
    'washingtonpost.com',
    'bloomberg.com',
    'barrons.com',
    'theatlantic.com',
    'newyorker.com',
    'hbr.org',
    'businessinsider.com',
    'reuters.com',
    'theinformation.com',
    'stratechery.com',
    'theathletic.com',
    'fortune.com',
    'seekingalpha.com',
]

# Matched against the hostname and the full URL
SKIP_DOMAINS = [
    'twitter.com',
    'x.com',
    'youtube.com',
    'youtu.be',
    'bloomberg.com/account',
    'bloomberg.com/email-settings',
    'bloomberg.com/help',
    'bloomberg.com/subscriptions',
    'bloomberg.com/privacy',
    'bloomberg.com/tos',
    'bloombergmedia.com',
    'unsubscribe',
    'bloom.bg',
    'mail.bloombergbusiness.com',
    'link.mail.bloombergbusiness.com',
    'liveintent.com',
    'assets.bwbx.io',
    'spmailtechnolo.com',
]

SKIP_EXACT_URLS = [
    'http://bloomberg.com/',
    'https://bloomberg.com/',
    'http://www.bloomberg.com/',
    'https://www.bloomberg.com/',
]

NEWSLETTER_ARCHIVE_PATTERNS = [
    re.compile(r'bloomberg\.com/.*/newsletters/\d{4}-\d{2}-\d{2}'),
]

SKIP_PATTERNS = [
    re.compile(r'^mailto:'),
    re.compile(r'^#'),
    re.compile(r'\.(jpg|jpeg|png|gif|webp|svg|pdf)$', re.IGNORECASE),
]


def _hostname(url):
    """Return the lowercased hostname of *url*, or None if it cannot be parsed."""
    if not url or not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or not hostname:
        return None
    return hostname.lower()


def is_newsletter_archive(url):
    """Check if a URL points at a past issue of the newsletter itself."""
    return any(pattern.search(url or '') for pattern in NEWSLETTER_ARCHIVE_PATTERNS)


def should_skip(url):
    """Check if a URL should be left out of enrichment entirely.

    Social, video, account/legal, ad-tech and asset links are skipped, as are
    bare publisher homepages and links back to the newsletter archive.
    Unparseable URLs are skipped as well.
    """
    if not url or not isinstance(url, str):
        return True

    if any(pattern.search(url) for pattern in SKIP_PATTERNS):
        return True
    if is_newsletter_archive(url):
        return True
    if url.lower() in SKIP_EXACT_URLS:
        return True

    hostname = _hostname(url)
    if hostname is None:
        return True

    full_url = url.lower()
    return any(domain in hostname or domain in full_url for domain in SKIP_DOMAINS)


def is_tracking_url(url):
    """Check if a URL is served by a known tracking redirector."""
    hostname = _hostname(url)
    if hostname is None:
        return False
    return any(domain in hostname for domain in TRACKING_DOMAINS)


def is_paywalled(url):
    """Check if a (resolved) URL belongs to a paywalled publisher."""
    hostname = _hostname(url)
    if hostname is None:
        return False
    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in PAYWALLED_DOMAINS
    )
