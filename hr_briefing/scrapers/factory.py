# File: hr_briefing/scrapers/factory.py
"""Scraper factory for the configured sites"""
from typing import Dict, Any, List, Optional, Type

from hr_briefing.scrapers.base import BaseSiteScraper
from hr_briefing.scrapers.kacta_scraper import KactaScraper
from hr_briefing.scrapers.nomu_scraper import NomuScraper
from hr_briefing.utils.http_client import AsyncHTTPClient
from hr_briefing.utils.logger import get_logger
from hr_briefing.utils.rate_limiter import ConcurrencyLimiter

logger = get_logger(__name__)

SCRAPERS: Dict[str, Type[BaseSiteScraper]] = {
    'kacta': KactaScraper,
    'nomu': NomuScraper,
}


class ScraperFactory:
    """Builds site scrapers that share one HTTP client and one limiter"""

    def __init__(self, http_client: AsyncHTTPClient, limiter: ConcurrencyLimiter,
                 global_config: Dict[str, Any] = None):
        self.http_client = http_client
        self.limiter = limiter
        self.global_config = global_config or {}

    def create_scraper(self, site_config: Dict[str, Any]) -> Optional[BaseSiteScraper]:
        """Create the scraper for one site entry"""
        key = site_config.get('key', '')
        scraper_cls = SCRAPERS.get(key)
        if scraper_cls is None:
            logger.warning(f"Unknown site key: {key}")
            return None
        return scraper_cls(self.http_client, self.limiter, {**self.global_config, **site_config})

    def create_enabled(self, sites: List[Dict[str, Any]]) -> List[BaseSiteScraper]:
        scrapers = []
        for site_config in sites:
            if not site_config.get('enabled', True):
                continue
            scraper = self.create_scraper(site_config)
            if scraper is not None:
                scrapers.append(scraper)
        return scrapers

    @classmethod
    def get_available_scrapers(cls) -> List[str]:
        """Get list of available site keys"""
        return list(SCRAPERS)
