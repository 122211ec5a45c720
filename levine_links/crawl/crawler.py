"""
Web crawler for Levine Links.

This module follows tracking redirects to the real article URL, builds
favicon references and fetches article pages for their cover image.
"""

import logging
import requests
from bs4 import BeautifulSoup
from urllib.parse import urljoin, urlparse

from levine_links.crawl.classifier import is_tracking_url

logger = logging.getLogger(__name__)


class FaviconCache:
    """Favicon URLs keyed by hostname, scoped to one worker group."""

    def __init__(self, template):
        self.template = template
        self._by_host = {}

    def get(self, url):
        """Return the favicon URL for the host of *url*, or None."""
        try:
            hostname = urlparse(url).hostname
        except ValueError:
            return None
        if not hostname:
            return None

        if hostname not in self._by_host:
            self._by_host[hostname] = self.template.format(domain=hostname)
        return self._by_host[hostname]

    def __len__(self):
        return len(self._by_host)


class WebCrawler:
    """Resolves redirects and fetches article pages."""

    def __init__(self, config):
        """Initialize with crawler configuration."""
        self.user_agent = config['user_agent']
        self.timeout = config['request_timeout']
        self.max_depth = config['max_redirect_depth']
        self.favicon_template = config['favicon_template']
        self.headers = {
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
        }

    def new_favicon_cache(self):
        return FaviconCache(self.favicon_template)

    def resolve_redirect(self, url):
        """Follow tracking redirects to get the destination URL.

        Only URLs on a tracking host are requested; anything else is returned
        as-is without touching the network. At most ``max_depth`` hops are
        followed and a URL seen twice ends the walk.

        Args:
            url: The URL found in the newsletter.

        Returns:
            str: The last URL reached, or *url* when nothing could be resolved.
        """
        current = url
        visited = {url}

        for hop in range(self.max_depth):
            if not is_tracking_url(current):
                return current

            try:
                response = requests.head(
                    current,
                    headers=self.headers,
                    allow_redirects=False,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                logger.warning(f"Could not resolve tracking URL {current}: {e}")
                return current

            location = response.headers.get('Location')
            if not location:
                return current

            next_url = urljoin(current, location)
            if next_url in visited:
                logger.warning(f"Redirect cycle detected at {next_url}, stopping")
                return current

            logger.debug(f"Hop {hop + 1}: {current} redirected to {next_url}")
            visited.add(next_url)
            current = next_url

        if current != url:
            logger.info(f"Resolved {url} to {current}")
        return current

    def fetch_page(self, url):
        """Fetch a web page and return its content."""
        try:
            logger.info(f"Fetching URL: {url}")
            response = requests.get(url, headers=self.headers, timeout=self.timeout)

            if response.status_code == 200:
                return response.text
            else:
                logger.warning(f"Failed to fetch URL: {url} (Status code: {response.status_code})")
                return None

        except requests.RequestException as e:
            logger.warning(f"Error fetching page {url}: {e}")
            return None

    def fetch_og_image(self, url):
        """Return the open-graph (or Twitter card) image of a page, if any."""
        page_content = self.fetch_page(url)
        if not page_content:
            return None
        return extract_og_image(page_content)


def extract_og_image(html_content):
    """Find the og:image or twitter:image meta tag in page markup."""
    if not html_content:
        return None

    soup = BeautifulSoup(html_content, 'html.parser')

    for attr, value in (('property', 'og:image'), ('name', 'og:image'),
                        ('name', 'twitter:image'), ('property', 'twitter:image')):
        meta_tag = soup.find('meta', attrs={attr: value})
        if meta_tag and meta_tag.get('content'):
            return meta_tag['content'].strip()

    return None
