# File: hr_briefing/orchestration/coordinator.py
"""Orchestration of one briefing run"""
import asyncio
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from hr_briefing.config.settings import ScrapingConfig
from hr_briefing.core.exceptions import PipelineError, ScrapingError
from hr_briefing.core.models import FilteredArticle, ScrapedArticle
from hr_briefing.delivery.kakaowork import KakaoWorkSender
from hr_briefing.processing.content_filter import ContentFilter
from hr_briefing.processing.summarizer import Summarizer
from hr_briefing.scrapers.base import BaseSiteScraper
from hr_briefing.utils.dates import is_recent
from hr_briefing.utils.http_client import AsyncHTTPClient
from hr_briefing.utils.logger import build_error_report, get_logger

logger = get_logger(__name__)

FAILURE_ALERT = '🚨 파이프라인 실패 알림'


@dataclass
class PipelineResult:
    scraped: int
    recent: int
    filtered: int
    duration: float
    timestamp: str


class BriefingCoordinator:
    """Runs scrape -> recency gate -> filter -> summarize -> deliver.

    The HTTP client and the scrapers (which share one concurrency limiter)
    are built once by the caller and handed in.
    """

    def __init__(self, http_client: AsyncHTTPClient, scrapers: Sequence[BaseSiteScraper],
                 content_filter: ContentFilter, summarizer: Summarizer, sender: KakaoWorkSender,
                 scraping_config: Optional[ScrapingConfig] = None):
        self.http_client = http_client
        self.scrapers = list(scrapers)
        self.content_filter = content_filter
        self.summarizer = summarizer
        self.sender = sender
        self.scraping_config = scraping_config or ScrapingConfig()

    async def scrape_articles(self) -> List[ScrapedArticle]:
        """List every site concurrently, then hydrate all bodies"""
        lists = await asyncio.gather(*(scraper.scrape_list() for scraper in self.scrapers),
                                     return_exceptions=True)

        jobs = []
        failures = []
        for scraper, result in zip(self.scrapers, lists):
            if isinstance(result, Exception):
                failures.append(f"{scraper.name}: {result}")
                logger.error(f"{scraper.name}: list scraping failed: {result}")
                continue
            jobs.append((scraper, result))

        if self.scrapers and len(failures) == len(self.scrapers):
            raise ScrapingError(f"List scraping failed for every site ({'; '.join(failures)})")

        enriched = await asyncio.gather(*(scraper.enrich(metas) for scraper, metas in jobs))

        articles: List[ScrapedArticle] = []
        for batch in enriched:
            articles.extend(batch)
        return articles

    def filter_recent(self, articles: List[ScrapedArticle]) -> List[ScrapedArticle]:
        days = self.scraping_config.recent_days
        return [article for article in articles if is_recent(article.published_at, days=days)]

    async def run(self) -> PipelineResult:
        """Run the full pipeline; failures are reported and re-raised as PipelineError"""
        start_time = time.time()
        logger.info("=== Starting Briefing Pipeline ===")

        try:
            async with self.http_client:
                scraped = await self.scrape_articles()

            recent = self.filter_recent(scraped)
            logger.info(f"Recent articles: {len(recent)}/{len(scraped)} "
                        f"within {self.scraping_config.recent_days} days")

            filtered: List[FilteredArticle] = self.content_filter.filter_articles(recent)
            logger.info(f"Filtered articles: {len(filtered)}", extra={'count': len(filtered)})

            summary = await self.summarizer.summarize(filtered)
            logger.info("Summary generated")

            await self.sender.send(summary, filtered)
            logger.info("Digest delivered")

        except Exception as e:
            report = build_error_report('파이프라인 실패', e)
            logger.error(report)
            await self._notify_failure(report)
            raise PipelineError(str(e)) from e

        duration = time.time() - start_time
        logger.info("=== Briefing Pipeline Complete ===")
        logger.info(f"Duration: {duration:.1f} seconds")

        return PipelineResult(
            scraped=len(scraped),
            recent=len(recent),
            filtered=len(filtered),
            duration=duration,
            timestamp=datetime.now().isoformat()
        )

    async def _notify_failure(self, report: str):
        """Best-effort alert about the failure through the delivery channel"""
        if not self.sender.is_configured:
            return
        try:
            await self.sender.send(f"{FAILURE_ALERT}\n\n{report}", [])
        except Exception as e:
            logger.error(build_error_report('실패 리포트 전송 실패', e))
