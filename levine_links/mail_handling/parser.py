"""
Newsletter intake for Levine Links.

This module takes a parsed email message and works out what the pipeline
needs from it: the body to wrap, a clean subject and the date the newsletter
was originally sent.
"""

import re
import logging
from datetime import date, datetime

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Money Stuff"

SKIP_SUBJECT_MARKERS = ['the podcast']

FORWARD_PREFIX = re.compile(r'^(?:\s*fwd?:\s*)+', re.IGNORECASE)

SHORT_MONTH_DATE = re.compile(
    r'Date:\s*(?:\w+,\s*)?(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s+(\d{1,2}),?\s+(\d{4})',
    re.IGNORECASE,
)
FULL_MONTH_DATE = re.compile(
    r'Date:\s*(?:\w+,\s*)?(January|February|March|April|May|June|July|August|September|'
    r'October|November|December)\s+(\d{1,2}),?\s+(\d{4})',
    re.IGNORECASE,
)
URL_DATE_PATTERNS = [
    re.compile(r'/(\d{4}-\d{2}-\d{2})/'),
    re.compile(r'newsletters/(\d{4}-\d{2}-\d{2})'),
]


def clean_subject(subject):
    """Strip forwarding prefixes such as "Fwd: FW:" from a subject."""
    cleaned = FORWARD_PREFIX.sub('', subject or '').strip()
    return cleaned or DEFAULT_SUBJECT


def _parse_month_date(month, day, year, fmt):
    try:
        return datetime.strptime(f"{month.title()} {int(day)} {year}", fmt).date()
    except ValueError:
        return None


def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        # ISO strings from the ingestion layer or raw RFC 2822 header values
        try:
            return date_parser.parse(value).date()
        except (ValueError, OverflowError):
            logger.warning(f"Could not parse message date: {value}")
    return None


def extract_newsletter_date(html, fallback_date=None):
    """Find the date the newsletter was originally sent.

    Forwarded header lines win over dates embedded in URLs, which win over
    the message's own date. Today's date is the last resort.

    Returns:
        str: The date formatted as YYYY-MM-DD.
    """
    html = html or ''

    match = SHORT_MONTH_DATE.search(html)
    if match:
        parsed = _parse_month_date(*match.groups(), fmt="%b %d %Y")
        if parsed:
            logger.info(f"Extracted date from forwarded header: {match.group(0)}")
            return parsed.isoformat()

    match = FULL_MONTH_DATE.search(html)
    if match:
        parsed = _parse_month_date(*match.groups(), fmt="%B %d %Y")
        if parsed:
            logger.info(f"Extracted date from header: {match.group(0)}")
            return parsed.isoformat()

    for pattern in URL_DATE_PATTERNS:
        match = pattern.search(html)
        if match:
            logger.info(f"Extracted date from URL: {match.group(1)}")
            return match.group(1)

    fallback = _as_date(fallback_date) or date.today()
    logger.info(f"Using fallback date: {fallback.isoformat()}")
    return fallback.isoformat()


class NewsletterParser:
    """Prepares a parsed email message for wrapping."""

    def parse(self, message):
        """Parse a message from the mail ingestion layer.

        Args:
            message (dict): ``subject``, and optionally ``date``, ``html`` and
                ``text``.

        Returns:
            dict: ``subject``, ``date`` (YYYY-MM-DD), ``html`` (the body to
            wrap) and ``skip`` (True for issues that should not be wrapped).
        """
        message = message or {}
        body = message.get('html') or message.get('text') or ''
        subject = clean_subject(message.get('subject'))

        skip = any(marker in subject.lower() for marker in SKIP_SUBJECT_MARKERS)
        if skip:
            logger.info(f"Skipping non-newsletter email: {subject}")

        newsletter_date = extract_newsletter_date(body, message.get('date'))
        logger.info(f"Parsed newsletter: {subject} ({newsletter_date})")

        return {
            'subject': subject,
            'date': newsletter_date,
            'html': body,
            'skip': skip,
        }
