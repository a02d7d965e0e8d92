"""Tests for orchestration.coordinator."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from hr_briefing.config.settings import ScrapingConfig
from hr_briefing.core.exceptions import FetchError, PipelineError, ScrapingError, SummarizationError
from hr_briefing.core.models import FilteredArticle
from hr_briefing.orchestration.coordinator import FAILURE_ALERT, BriefingCoordinator
from hr_briefing.processing.content_filter import ContentFilter

from conftest import make_article


def days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


class FakeClient:
    def __init__(self):
        self.entered = 0
        self.exited = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.exited += 1
        return False


class FakeScraper:
    def __init__(self, name, articles=(), list_error=None):
        self.name = name
        self.articles = list(articles)
        self.list_error = list_error
        self.enriched = None

    async def scrape_list(self):
        if self.list_error:
            raise self.list_error
        return [f"meta-{i}" for i in range(len(self.articles))]

    async def enrich(self, metas):
        self.enriched = metas
        return self.articles


def make_sender(configured=True):
    sender = Mock()
    sender.is_configured = configured
    sender.send = AsyncMock()
    return sender


def make_coordinator(scrapers, summarizer=None, sender=None, client=None):
    if summarizer is None:
        summarizer = Mock()
        summarizer.summarize = AsyncMock(return_value="요약")
    return BriefingCoordinator(
        http_client=client or FakeClient(),
        scrapers=scrapers,
        content_filter=ContentFilter(),
        summarizer=summarizer,
        sender=sender or make_sender(),
        scraping_config=ScrapingConfig(recent_days=7),
    )


RELEVANT = dict(title="최저임금 인상 확정", content="본문")
IRRELEVANT = dict(title="지역 축제 소식", content="행사 안내")


class TestRun:
    def test_full_run_delivers_filtered_articles(self) -> None:
        kacta = FakeScraper("세무사신문", [
            make_article(url="https://k/1", published_at=days_ago(1), **RELEVANT),
            make_article(url="https://k/2", published_at=days_ago(1), **IRRELEVANT),
        ])
        nomu = FakeScraper("노무사신문", [
            make_article(url="https://n/1", published_at=days_ago(10), **RELEVANT),
            make_article(url="https://n/2", published_at=days_ago(2), title="4대보험 요율", content="x"),
        ])
        client = FakeClient()
        sender = make_sender()
        coordinator = make_coordinator([kacta, nomu], sender=sender, client=client)

        result = asyncio.run(coordinator.run())

        assert (result.scraped, result.recent, result.filtered) == (4, 3, 2)
        assert client.entered == client.exited == 1
        summary, delivered = sender.send.await_args.args
        assert summary == "요약"
        assert [a.url for a in delivered] == ["https://k/1", "https://n/2"]
        assert all(isinstance(a, FilteredArticle) for a in delivered)

    def test_empty_batch_still_reaches_summarizer_and_sender(self) -> None:
        summarizer = Mock()
        summarizer.summarize = AsyncMock(return_value="없음")
        sender = make_sender()
        coordinator = make_coordinator([FakeScraper("세무사신문")], summarizer=summarizer, sender=sender)

        asyncio.run(coordinator.run())

        summarizer.summarize.assert_awaited_once_with([])
        sender.send.assert_awaited_once_with("없음", [])

    def test_one_site_list_failure_is_tolerated(self) -> None:
        good = FakeScraper("노무사신문", [make_article(published_at=days_ago(1), **RELEVANT)])
        bad = FakeScraper("세무사신문", list_error=FetchError("https://k", "down", status=503))
        result = asyncio.run(make_coordinator([bad, good]).run())
        assert result.filtered == 1
        assert bad.enriched is None

    def test_every_site_failing_aborts_and_alerts(self) -> None:
        scrapers = [
            FakeScraper("세무사신문", list_error=FetchError("https://k", "down")),
            FakeScraper("노무사신문", list_error=FetchError("https://n", "down")),
        ]
        sender = make_sender()
        with pytest.raises(PipelineError) as excinfo:
            asyncio.run(make_coordinator(scrapers, sender=sender).run())

        assert isinstance(excinfo.value.__cause__, ScrapingError)
        alert, articles = sender.send.await_args.args
        assert alert.startswith(FAILURE_ALERT)
        assert "실패 지점: 파이프라인 실패" in alert
        assert articles == []

    def test_summarizer_failure_skips_digest_delivery(self) -> None:
        summarizer = Mock()
        summarizer.summarize = AsyncMock(side_effect=SummarizationError("quota"))
        sender = make_sender()
        scraper = FakeScraper("세무사신문", [make_article(published_at=days_ago(1), **RELEVANT)])

        with pytest.raises(PipelineError, match="quota"):
            asyncio.run(make_coordinator([scraper], summarizer=summarizer, sender=sender).run())

        assert sender.send.await_count == 1
        assert sender.send.await_args.args[0].startswith(FAILURE_ALERT)

    def test_unconfigured_sender_gets_no_alert(self) -> None:
        sender = make_sender(configured=False)
        scraper = FakeScraper("세무사신문", list_error=RuntimeError("boom"))
        with pytest.raises(PipelineError):
            asyncio.run(make_coordinator([scraper], sender=sender).run())
        sender.send.assert_not_awaited()

    def test_alert_failure_does_not_mask_pipeline_error(self) -> None:
        sender = make_sender()
        sender.send.side_effect = RuntimeError("kakaowork down")
        scraper = FakeScraper("세무사신문", list_error=RuntimeError("boom"))
        with pytest.raises(PipelineError, match="boom"):
            asyncio.run(make_coordinator([scraper], sender=sender).run())


class TestFilterRecent:
    def test_window_and_unparseable_dates(self) -> None:
        coordinator = make_coordinator([])
        articles = [
            make_article(url="https://a/1", published_at=days_ago(6.5)),
            make_article(url="https://a/2", published_at=days_ago(7.5)),
            make_article(url="https://a/3", published_at="언젠가"),
        ]
        assert [a.url for a in coordinator.filter_recent(articles)] == ["https://a/1"]
