# File: hr_briefing/scrapers/base.py
"""Base site scraper with selector fallback chains"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from hr_briefing.core.models import ArticleMeta, ScrapedArticle, Site
from hr_briefing.utils.dates import now_iso, try_parse_date
from hr_briefing.utils.http_client import AsyncHTTPClient
from hr_briefing.utils.logger import get_logger
from hr_briefing.utils.rate_limiter import ConcurrencyLimiter

logger = get_logger(__name__)

DEFAULT_SECTION = '일반'
TEXT_BLOCK_SELECTOR = 'p, li, div'


def first_match(soup: BeautifulSoup, candidates: Sequence[str]) -> List[Tag]:
    """Elements of the first selector candidate that matches anything"""
    for selector in candidates:
        nodes = soup.select(selector)
        if nodes:
            return nodes
    return []


def first_text(element: Tag, candidates: Sequence[str]) -> str:
    """Text of the first candidate descendant that has any"""
    for selector in candidates:
        for node in element.select(selector):
            text = node.get_text().strip()
            if text:
                return text
    return ''


def absolute_url(base: str, href: str) -> str:
    if href.startswith('http'):
        return href
    return urljoin(base, href)


class BaseSiteScraper(ABC):
    """Scrapes one fixed site: homepage listing, then article bodies.

    Subclasses fill in the site's hand-tuned selector lists and implement
    publish-date lookup on the detail page.
    """

    site: Site
    base_url: str
    # Link groups on the homepage, tried in order
    list_selectors: Sequence[str] = ()
    title_selectors: Sequence[str] = ()
    # Only hrefs containing this are articles
    url_marker: str = ''
    # (substring, section label), first hit wins
    section_rules: Sequence[Tuple[str, str]] = ()
    body_selectors: Sequence[str] = ()
    max_items: Optional[int] = None

    min_line_length = 10
    min_content_length = 50

    def __init__(self, http_client: AsyncHTTPClient, limiter: ConcurrencyLimiter, config: Optional[dict] = None):
        self.http_client = http_client
        self.limiter = limiter
        self.config = config or {}
        self.name = self.site.value
        self.min_content_length = self.config.get('min_content_length', self.min_content_length)
        self.min_line_length = self.config.get('min_line_length', self.min_line_length)

    # --- listing -------------------------------------------------------

    async def scrape_list(self) -> List[ArticleMeta]:
        """Fetch the homepage and extract candidate articles"""
        html = await self.http_client.fetch_text(self.base_url)
        items = self.parse_list(html)
        logger.info(f"{self.name}: collected {len(items)} list items", extra={'site': self.name, 'count': len(items)})
        return items

    def parse_list(self, html: str, scraped_at: Optional[str] = None) -> List[ArticleMeta]:
        soup = BeautifulSoup(html, 'html.parser')
        # Placeholder until the article page tells us better
        published_at = scraped_at or now_iso()
        items: List[ArticleMeta] = []
        seen = set()

        for selector in self.list_selectors:
            for link in soup.select(selector):
                title = first_text(link, self.title_selectors)
                if not title:
                    continue

                href = link.get('href')
                if not href or not self.is_article_href(href):
                    continue

                url = absolute_url(self.base_url, href)
                if url in seen:
                    continue
                seen.add(url)

                items.append(ArticleMeta(
                    title=title,
                    url=url,
                    published_at=published_at,
                    site=self.site,
                    section=self.classify_section(href, selector),
                ))

        if self.max_items is not None:
            return items[:self.max_items]
        return items

    def is_article_href(self, href: str) -> bool:
        return self.url_marker in href

    def classify_section(self, href: str, selector: str) -> str:
        key = self.section_key(href, selector)
        for needle, label in self.section_rules:
            if needle in key:
                return label
        return DEFAULT_SECTION

    @abstractmethod
    def section_key(self, href: str, selector: str) -> str:
        """String the section rules are matched against"""
        pass

    # --- article bodies ------------------------------------------------

    async def scrape_content(self, meta: ArticleMeta) -> Optional[ScrapedArticle]:
        """Hydrate one article; any failure yields None"""
        try:
            html = await self.http_client.fetch_text(meta.url)
            article = self.parse_content(meta, html)
            if article is None:
                logger.info(f"{self.name}: no usable body for '{meta.title[:50]}'", extra={'url': meta.url})
            return article
        except Exception as e:
            logger.error(f"{self.name}: content extraction failed for {meta.url}: {e}", extra={'url': meta.url})
            return None

    def parse_content(self, meta: ArticleMeta, html: str) -> Optional[ScrapedArticle]:
        soup = BeautifulSoup(html, 'html.parser')

        published_at = meta.published_at
        parsed = try_parse_date(self.extract_published_at(soup))
        if parsed is not None:
            published_at = parsed.isoformat()

        content = self.extract_body(soup)
        if not content or len(content) < self.min_content_length:
            return None

        return ScrapedArticle.from_meta(meta, content=content, published_at=published_at)

    def extract_body(self, soup: BeautifulSoup) -> str:
        lines = []
        for container in first_match(soup, self.body_selectors):
            for block in container.select(TEXT_BLOCK_SELECTOR):
                text = block.get_text().strip()
                # Captions, bylines and buttons are short
                if len(text) >= self.min_line_length:
                    lines.append(text)
        return '\n'.join(lines)

    @abstractmethod
    def extract_published_at(self, soup: BeautifulSoup) -> Optional[str]:
        """Raw publish date from the article page, if the site exposes one"""
        pass

    async def enrich(self, metas: Sequence[ArticleMeta]) -> List[ScrapedArticle]:
        """Scrape bodies for all metas through the shared limiter"""
        results = await self.limiter.map(self.scrape_content, metas)
        articles = [article for article in results if article is not None]
        logger.info(f"{self.name}: extracted {len(articles)}/{len(metas)} article bodies",
                    extra={'site': self.name, 'count': len(articles)})
        return articles
