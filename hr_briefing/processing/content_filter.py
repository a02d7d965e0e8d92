# File: hr_briefing/processing/content_filter.py
"""Validation, deduplication and keyword filtering of scraped articles"""
import re
from typing import Dict, Any, List, Optional, Pattern, Tuple
from urllib.parse import urlparse

from hr_briefing.core.exceptions import ValidationError
from hr_briefing.core.models import FilteredArticle, ScrapedArticle, Site
from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

INCLUDE_KEYWORDS = (
    '휴가', '채용', '임금', '최저임금', '통상임금',
    '4대보험', '국민연금', '건강보험', '고용보험', '산재보험',
    '원천세', '연말정산', '소득세', '퇴직', '근로계약',
    '근로시간', '연차', '탄력근로', '모성보호', '출산휴가',
    '육아휴직', '산재', '노조', '단체교섭', '해고',
    '징계', '근로자', 'HR', '페이롤', '세액',
    '공제', '상여', '수당', '복리후생', '주52',
    '주 52', '노사', '법령', '행정해석',
)

# Promotional content
EXCLUDE_KEYWORDS = ('광고', '이벤트', '쿠폰', '구독', '후기', '상생페이백')


def dedup_key(url: str) -> str:
    """URL without its fragment"""
    return url.split('#', 1)[0]


def _compile(keywords) -> List[Tuple[str, Pattern]]:
    return [(keyword, re.compile(re.escape(keyword), re.IGNORECASE)) for keyword in keywords]


class ContentFilter:
    """Reduces a scraped batch to valid, unique, relevant, tagged articles"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        keywords = self.config.get('keywords', {}) or {}
        include = list(INCLUDE_KEYWORDS) + [k for k in keywords.get('include_extra', []) if k not in INCLUDE_KEYWORDS]
        exclude = list(EXCLUDE_KEYWORDS) + [k for k in keywords.get('exclude_extra', []) if k not in EXCLUDE_KEYWORDS]
        self.include_patterns = _compile(include)
        self.exclude_patterns = _compile(exclude)

    def filter_articles(self, articles: List[ScrapedArticle]) -> List[FilteredArticle]:
        if not isinstance(articles, list):
            raise ValidationError(f"Expected a list of articles, got {type(articles).__name__}")

        logger.info(f"Filtering {len(articles)} articles", extra={'count': len(articles)})

        validated = [article for article in articles if self.is_valid_shape(article)]
        logger.info(f"Shape validation passed: {len(validated)}/{len(articles)}")

        unique = self.deduplicate(validated)
        logger.info(f"Unique after dedup: {len(unique)}")

        filtered = []
        for article in unique:
            if self.is_excluded(article):
                logger.debug(f"Excluded promotional article: '{article.title[:50]}'")
                continue
            tags = self.find_tags(article)
            if not tags:
                logger.debug(f"No include keyword: '{article.title[:50]}'")
                continue
            filtered.append(FilteredArticle.from_scraped(article, tags))

        logger.info(f"Keyword filtering kept {len(filtered)} articles", extra={'count': len(filtered)})
        return filtered

    def is_valid_shape(self, article: Any) -> bool:
        reason = self._invalid_reason(article)
        if reason:
            logger.warning(f"Invalid article skipped ({reason}): {getattr(article, 'url', article)!r}")
            return False
        return True

    def _invalid_reason(self, article: Any) -> Optional[str]:
        title = getattr(article, 'title', None)
        if not isinstance(title, str) or not title.strip():
            return 'empty title'

        url = getattr(article, 'url', None)
        if not isinstance(url, str) or not self._is_absolute_url(url):
            return 'invalid url'

        published_at = getattr(article, 'published_at', None)
        if not isinstance(published_at, str) or not published_at:
            return 'missing published_at'

        try:
            Site(getattr(article, 'site', None))
        except ValueError:
            return 'unknown site'

        content = getattr(article, 'content', None)
        if not isinstance(content, str) or not content:
            return 'empty content'

        return None

    @staticmethod
    def _is_absolute_url(url: str) -> bool:
        try:
            parsed = urlparse(url)
        except ValueError:
            return False
        return parsed.scheme in ('http', 'https') and bool(parsed.netloc)

    def deduplicate(self, articles: List[ScrapedArticle]) -> List[ScrapedArticle]:
        """First article per fragment-less URL wins"""
        unique: Dict[str, ScrapedArticle] = {}
        for article in articles:
            key = dedup_key(article.url)
            if key in unique:
                logger.debug(f"Duplicate article dropped: {article.url}")
                continue
            unique[key] = article
        return list(unique.values())

    @staticmethod
    def _search_text(article: ScrapedArticle) -> str:
        return f"{article.title}\n{article.content}"

    def is_excluded(self, article: ScrapedArticle) -> bool:
        text = self._search_text(article)
        return any(pattern.search(text) for _, pattern in self.exclude_patterns)

    def find_tags(self, article: ScrapedArticle) -> List[str]:
        """Matched include keywords in keyword-list order"""
        text = self._search_text(article)
        tags = []
        for keyword, pattern in self.include_patterns:
            if keyword not in tags and pattern.search(text):
                tags.append(keyword)
        return tags
