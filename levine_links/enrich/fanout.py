"""
Enrichment fan-out for Levine Links.

Unique link URLs are split into a small, fixed number of groups. Each group
runs on its own worker and handles its URLs one at a time: resolve tracking
redirects, look up a favicon and, for paywalled destinations, ask for a
summary and an archived copy at the same time. Groups share nothing, so the
results are simply merged by original URL at the end.

With ``worker_count`` set to 1 everything runs in a single group, which is
the same as enriching the links in-process.
"""

import math
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from levine_links.crawl.classifier import is_paywalled, is_newsletter_archive, should_skip
from levine_links.crawl.crawler import WebCrawler
from levine_links.models import EnrichedLink, EnrichmentTask
from levine_links.summarize.archive import ArchiveLookup
from levine_links.summarize.summarizer import ArticleSummarizer

logger = logging.getLogger(__name__)


def partition(items, num_groups):
    """Split *items* into at most *num_groups* contiguous, roughly equal groups."""
    if not items:
        return []
    num_groups = max(1, num_groups)
    size = math.ceil(len(items) / num_groups)
    return [items[i:i + size] for i in range(0, len(items), size)]


def build_tasks(urls, texts=None, limit=None):
    """Create enrichment tasks for *urls*, given in priority order.

    Only the first *limit* URLs are marked for summarization; the rest still
    get redirect resolution and a favicon. The limit counts every unique URL,
    paywalled or not, since paywall status is only known after resolution.
    A limit smaller than the number of open-access links at the end of the
    newsletter can therefore yield no summaries at all.
    """
    texts = texts or {}
    return [
        EnrichmentTask(
            url=url,
            text=texts.get(url, ''),
            summarize=limit is None or index < limit,
        )
        for index, url in enumerate(urls)
    ]


class LinkEnricher:
    """Enriches unique newsletter URLs across a bounded pool of worker groups."""

    def __init__(self, config, api_key=None):
        """Initialize with the full pipeline configuration.

        Args:
            config: Config dict with ``crawler``, ``summarizer``, ``archive``
                and ``enrichment`` sections.
            api_key: Summarization credential. Without one, paywalled links
                get no summary or archive lookup.
        """
        self.crawler_config = config['crawler']
        self.worker_count = config['enrichment']['worker_count']
        self.og_image_samples = config['enrichment']['og_image_samples']
        self.summarizer = ArticleSummarizer(config['summarizer'], api_key=api_key)
        self.archive = ArchiveLookup(config['archive'])

    def enrich(self, tasks):
        """Enrich every task and return EnrichedLink records keyed by original URL."""
        groups = partition(tasks, self.worker_count)
        if not groups:
            return {}

        logger.info(f"Processing {len(tasks)} links via {len(groups)} worker group(s)")

        enriched = {}
        with ThreadPoolExecutor(max_workers=len(groups)) as pool:
            future_to_group = {
                pool.submit(self._process_group, group): index
                for index, group in enumerate(groups)
            }
            for future in as_completed(future_to_group):
                index = future_to_group[future]
                try:
                    results = future.result()
                except Exception as e:
                    logger.error(f"Worker group {index} failed: {e}", exc_info=True)
                    continue
                enriched.update(results)

        paywalled = sum(1 for link in enriched.values() if link.is_paywalled)
        logger.info(f"Got {len(enriched)} results from workers ({paywalled} paywalled)")
        return enriched

    def _process_group(self, group):
        """Handle one group sequentially with its own crawler and favicon cache."""
        crawler = WebCrawler(self.crawler_config)
        favicons = crawler.new_favicon_cache()
        results = {}

        for task in group:
            results[task.url] = self._process_task(task, crawler, favicons)

        return results

    def _process_task(self, task, crawler, favicons):
        result = EnrichedLink(original_url=task.url, resolved_url=task.url)
        logger.debug(f"Enriching {task.url} ({task.text or 'no text'})")

        try:
            result.resolved_url = crawler.resolve_redirect(task.url)
            result.favicon = favicons.get(result.resolved_url)
            result.is_paywalled = is_paywalled(result.resolved_url)

            if result.is_paywalled and task.summarize and self.summarizer.enabled:
                result.summary, result.archive_url = self._lookup_paywalled(result.resolved_url)
        except Exception as e:
            logger.error(f"Error processing {task.url}: {e}", exc_info=True)

        return result

    def _lookup_paywalled(self, url):
        """Request the summary and archive copy of *url* concurrently."""
        with ThreadPoolExecutor(max_workers=2) as pool:
            summary_future = pool.submit(self.summarizer.summarize, url)
            archive_future = pool.submit(self.archive.find, url)

            summary = None
            archive_url = None
            try:
                summary = summary_future.result()
            except Exception as e:
                logger.error(f"Summary lookup crashed for {url}: {e}", exc_info=True)
            try:
                archive_url = archive_future.result()
            except Exception as e:
                logger.error(f"Archive lookup crashed for {url}: {e}", exc_info=True)

        return summary, archive_url

    def find_cover_image(self, enriched_links):
        """Return the first og:image found among a few enriched article URLs.

        Args:
            enriched_links: EnrichedLink records in priority order.
        """
        candidates = {}
        for link in enriched_links:
            url = link.resolved_url
            if not url or url in candidates or should_skip(url) or is_newsletter_archive(url):
                continue
            candidates[url] = link
            if len(candidates) >= self.og_image_samples:
                break

        if not candidates:
            return None

        logger.info(f"Fetching OG images from {len(candidates)} URLs")
        crawler = WebCrawler(self.crawler_config)
        for url, link in candidates.items():
            try:
                og_image = crawler.fetch_og_image(url)
            except Exception as e:
                logger.error(f"Error fetching OG image from {url}: {e}", exc_info=True)
                continue
            if og_image:
                logger.info(f"Got OG image from {url}")
                link.og_image = og_image
                return og_image

        return None
