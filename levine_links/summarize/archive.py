"""
Archive mirror lookup for Levine Links.
"""

import re
import logging
import requests
from urllib.parse import quote

logger = logging.getLogger(__name__)

ARCHIVE_URL_PATTERN = re.compile(r'archive\.(?:is|today|ph|md)/\w+')


class ArchiveLookup:
    """Finds the newest archived snapshot of a page."""

    def __init__(self, config):
        self.search_url = config['search_url']
        self.timeout = config['request_timeout']

    def search_url_for(self, url):
        return f"{self.search_url}{quote(url, safe='')}"

    def find(self, url):
        """Return the URL of the newest snapshot of *url*, or None.

        A missing snapshot is a normal outcome, not an error.
        """
        search_url = self.search_url_for(url)

        try:
            response = requests.head(search_url, allow_redirects=False, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Archive lookup failed for {url}: {e}")
            return None

        location = response.headers.get('Location')
        if location and ARCHIVE_URL_PATTERN.search(location):
            logger.info(f"Archive found for {url}")
            return location

        if response.status_code == 200:
            final_url = response.url or ''
            if ARCHIVE_URL_PATTERN.search(final_url) and '/newest/' not in final_url:
                logger.info(f"Archive found for {url}")
                return final_url

        return None
