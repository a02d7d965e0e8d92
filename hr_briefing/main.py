# File: hr_briefing/main.py
"""Main entry point for the HR/payroll briefing pipeline"""
import asyncio
import sys
import time
from typing import Optional

import schedule

from hr_briefing.config.settings import ConfigManager
from hr_briefing.core.exceptions import BriefingError, ConfigurationError
from hr_briefing.delivery.kakaowork import KakaoWorkSender
from hr_briefing.orchestration.coordinator import BriefingCoordinator, PipelineResult
from hr_briefing.processing.content_filter import ContentFilter
from hr_briefing.processing.summarizer import Summarizer
from hr_briefing.scrapers.factory import ScraperFactory
from hr_briefing.utils.http_client import AsyncHTTPClient
from hr_briefing.utils.logger import setup_logging, get_logger
from hr_briefing.utils.rate_limiter import ConcurrencyLimiter


class BriefingApp:
    """Main application class"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()

        setup_logging(self.config.get('logging', {}))
        self.logger = get_logger('main')

        self.scraping_config = self.config_manager.get_scraping_config()
        self.delivery_config = self.config_manager.get_delivery_config()

    def build_coordinator(self) -> BriefingCoordinator:
        """Wire one HTTP client and one limiter through every scraper"""
        http_client = AsyncHTTPClient(self.config_manager.get_http_config().to_dict())
        limiter = ConcurrencyLimiter(self.scraping_config.max_concurrent_fetches)
        factory = ScraperFactory(http_client, limiter, {
            'min_content_length': self.scraping_config.min_content_length,
            'min_line_length': self.scraping_config.min_line_length,
        })

        return BriefingCoordinator(
            http_client=http_client,
            scrapers=factory.create_enabled(self.config_manager.get_enabled_sites()),
            content_filter=ContentFilter(self.config),
            summarizer=Summarizer(self.config_manager.get_summarizer_config()),
            sender=KakaoWorkSender(self.delivery_config),
            scraping_config=self.scraping_config
        )

    async def run_once(self) -> PipelineResult:
        result = await self.build_coordinator().run()
        self.logger.info(f"Run complete: {result.filtered} articles delivered "
                         f"({result.scraped} scraped, {result.recent} recent)")
        return result

    def run_scheduled(self):
        """Run the pipeline every day at the configured time"""
        run_at = self.delivery_config.schedule_time
        self.logger.info(f"Scheduling daily briefing at {run_at}")

        def job():
            try:
                asyncio.run(self.run_once())
            except BriefingError as e:
                self.logger.error(f"Scheduled run failed: {e}")

        schedule.every().day.at(run_at).do(job)

        try:
            while True:
                schedule.run_pending()
                time.sleep(30)
        except KeyboardInterrupt:
            self.logger.info("Scheduled briefing stopped by user")


async def run_pipeline() -> PipelineResult:
    """Run the full pipeline once with configuration from the environment"""
    return await BriefingApp().run_once()


def main():
    """CLI interface"""
    if len(sys.argv) < 2:
        print("Usage:")
        print("  python -m hr_briefing.main run            # Single briefing run")
        print("  python -m hr_briefing.main serve [port]   # HTTP trigger endpoint")
        print("  python -m hr_briefing.main schedule       # Daily scheduled runs")
        return

    command = sys.argv[1]

    try:
        if command == "run":
            asyncio.run(run_pipeline())

        elif command == "serve":
            from hr_briefing.server import serve
            port = int(sys.argv[2]) if len(sys.argv) > 2 else 8080
            serve(port)

        elif command == "schedule":
            BriefingApp().run_scheduled()

        else:
            print(f"Unknown command: {command}")
            sys.exit(2)

    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except BriefingError as e:
        print(f"Pipeline error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("Application stopped by user")


if __name__ == "__main__":
    main()
