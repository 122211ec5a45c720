"""
Data models for the Levine Links pipeline.

These are plain in-memory records; nothing here is persisted by the pipeline
itself. Storage of the final artifacts is left to the caller.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RawLink:
    """One syntactic occurrence of an anchor in the newsletter HTML."""

    matched_markup: str
    url: str
    display_text: str
    context: str = ''

    @property
    def has_text(self):
        return len(self.display_text) >= 3


@dataclass
class EnrichmentTask:
    """A unique URL queued for enrichment by a worker group."""

    url: str
    text: str = ''
    summarize: bool = True


@dataclass
class EnrichedLink:
    """Enrichment record for a single unique original URL."""

    original_url: str
    resolved_url: str
    favicon: Optional[str] = None
    is_paywalled: bool = False
    summary: Optional[str] = None
    archive_url: Optional[str] = None
    og_image: Optional[str] = None


@dataclass(frozen=True)
class Footnote:
    number: str
    content: str


@dataclass
class WrapResult:
    """Terminal artifact of the pipeline, handed to storage and delivery."""

    html: str
    preview: str
    og_image: Optional[str] = None
    links: dict = field(default_factory=dict, repr=False)

    def to_dict(self):
        return {
            'html': self.html,
            'preview': self.preview,
            'ogImage': self.og_image,
        }
