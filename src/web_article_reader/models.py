"""Data models for web article reader."""

from dataclasses import dataclass


@dataclass
class Article:
    """Readable content extracted from a page."""

    url: str | None
    title: str | None
    text: str
    byline: str | None = None
    excerpt: str | None = None
    site_name: str | None = None
    image: str | None = None
    language: str | None = None
    published_time: str | None = None

    @property
    def length(self) -> int:
        return len(self.text)
