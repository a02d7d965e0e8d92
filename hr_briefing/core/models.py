# File: hr_briefing/core/models.py
"""Article data models for each pipeline stage"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Dict, Any, Iterable, Tuple


class Site(Enum):
    KACTA = "세무사신문"
    NOMU = "노무사신문"


@dataclass(frozen=True)
class ArticleMeta:
    """Candidate article collected from a site's homepage"""
    title: str
    url: str
    published_at: str
    site: Site
    section: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if isinstance(self.site, Site):
            data['site'] = self.site.value
        return data


@dataclass(frozen=True)
class ScrapedArticle(ArticleMeta):
    """Article metadata hydrated with body text"""
    content: str = ""

    @classmethod
    def from_meta(cls, meta: ArticleMeta, content: str, published_at: Optional[str] = None) -> 'ScrapedArticle':
        return cls(
            title=meta.title,
            url=meta.url,
            published_at=published_at or meta.published_at,
            site=meta.site,
            section=meta.section,
            content=content,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScrapedArticle':
        """Create instance from dictionary.

        Unknown site values are kept as-is so that validation can reject them.
        """
        data = dict(data)
        site = data.get('site')
        if isinstance(site, str):
            try:
                data['site'] = Site(site)
            except ValueError:
                pass
        if isinstance(data.get('tags'), list):
            data['tags'] = tuple(data['tags'])

        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass(frozen=True)
class FilteredArticle(ScrapedArticle):
    """Relevant article tagged with the include keywords it matched"""
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_scraped(cls, article: ScrapedArticle, tags: Iterable[str]) -> 'FilteredArticle':
        return cls(
            title=article.title,
            url=article.url,
            published_at=article.published_at,
            site=Site(article.site),
            section=article.section,
            content=article.content,
            tags=tuple(tags),
        )
