"""
Article summarizer for Levine Links.

This module asks a web-search backed chat completion API to find and
summarize a paywalled article, and rejects answers where the model could not
actually reach the page.
"""

import re
import logging
import requests

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You search the web to find and summarize news articles. "
    "Provide a 2-3 sentence summary of the key points. Be factual and concise."
)

SUMMARY_USER_PROMPT = "Search for and summarize the news article at this URL: {url}"

# Lowercased phrases meaning the model never saw the article
REFUSAL_PHRASES = [
    "unable to",
    "cannot access",
    "i don't have",
    "no news article available",
    "i cannot",
    "i'm unable",
    "not available",
    "page not found",
    "access denied",
]

_ARTICLE_NOUNS = r'(?:article|piece|report|story|post|blog)'
_ARTICLE_VERBS = r'(?:discusses|explains|covers|details|examines|explores|highlights|reports|describes|analyzes)'

LEAD_IN_PATTERNS = [
    re.compile(rf'^The {_ARTICLE_NOUNS}(?: from [^.]+)? {_ARTICLE_VERBS}', re.IGNORECASE),
    re.compile(rf'^This {_ARTICLE_NOUNS} {_ARTICLE_VERBS}', re.IGNORECASE),
]

CITATION_PATTERN = re.compile(r'\[\d+\]')


def is_refusal(content):
    lower = content.lower()
    return any(phrase in lower for phrase in REFUSAL_PHRASES)


def clean_summary(summary_text):
    """Clean up a summary by removing lead-ins and citation markers."""
    cleaned = summary_text.strip()
    for pattern in LEAD_IN_PATTERNS:
        cleaned = pattern.sub('', cleaned, count=1).strip()

    cleaned = CITATION_PATTERN.sub('', cleaned)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()

    if cleaned:
        cleaned = cleaned[0].upper() + cleaned[1:]
    return cleaned


class ArticleSummarizer:
    """Generates short article summaries using the Perplexity API."""

    def __init__(self, config, api_key=None):
        """Initialize with summarizer configuration.

        Args:
            config: The ``summarizer`` config section.
            api_key: Overrides ``config['api_key']`` when given.
        """
        self.api_key = api_key if api_key is not None else config.get('api_key', '')
        self.api_url = config['api_url']
        self.model = config['model']
        self.max_tokens = config['max_tokens']
        self.timeout = config['request_timeout']
        self.min_length = config['min_length']

    @property
    def enabled(self):
        return bool(self.api_key)

    def _build_payload(self, url):
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                {"role": "user", "content": SUMMARY_USER_PROMPT.format(url=url)},
            ],
            "max_tokens": self.max_tokens,
        }

    def summarize(self, url):
        """Summarize the article at *url*.

        Returns:
            str or None: A cleaned 2-3 sentence summary, or None when the API
            failed, answered too briefly or could not read the article.
        """
        if not self.enabled:
            return None

        try:
            response = requests.post(
                self.api_url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json=self._build_payload(url),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Summary request failed for {url}: {e}")
            return None

        if not response.ok:
            logger.warning(f"Summary API error for {url}: {response.status_code}")
            return None

        try:
            data = response.json()
            content = data['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected summary response for {url}: {e}")
            return None

        if not content or len(content) < self.min_length:
            logger.info(f"Empty or short summary for {url}")
            return None

        if is_refusal(content):
            logger.info(f"Summarizer could not access {url}")
            return None

        summary = clean_summary(content)
        logger.info(f"Got summary for {url} ({len(summary)} chars)")
        return summary or None
