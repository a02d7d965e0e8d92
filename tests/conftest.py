"""Shared fakes for tests."""

import asyncio
from collections import defaultdict, deque

import pytest

from hr_briefing.core.models import ScrapedArticle, Site


class FakeResponse:
    def __init__(self, status=200, body="", json_data=None):
        self.status = status
        self._body = body
        self._json = json_data if json_data is not None else {"success": True}

    async def text(self):
        return self._body

    async def json(self, content_type=None):
        return self._json

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.

    Responses are queued per URL; an Exception instance in the queue is raised
    instead of returning a response. The last queued item repeats.
    """

    def __init__(self, responses=None, delay=0.0):
        self.queues = defaultdict(deque)
        for url, items in (responses or {}).items():
            self.queues[url].extend(items)
        self.delay = delay
        self.calls = []
        self.posts = []
        self.in_flight = 0
        self.peak_in_flight = 0

    def _next(self, url):
        queue = self.queues[url]
        if not queue:
            return FakeResponse(status=404)
        return queue.popleft() if len(queue) > 1 else queue[0]

    def get(self, url, **kwargs):
        self.calls.append(url)
        item = self._next(url)
        if isinstance(item, Exception):
            raise item
        return _Tracked(self, item)

    def post(self, url, json=None, headers=None):
        self.posts.append((url, json, headers))
        item = self._next(url)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        pass


class _Tracked:
    """Counts concurrent in-flight requests on the owning session."""

    def __init__(self, session, response):
        self.session = session
        self.response = response

    async def __aenter__(self):
        self.session.in_flight += 1
        self.session.peak_in_flight = max(self.session.peak_in_flight, self.session.in_flight)
        if self.session.delay:
            await asyncio.sleep(self.session.delay)
        return self.response

    async def __aexit__(self, exc_type, exc, tb):
        self.session.in_flight -= 1
        return False


def make_article(**overrides) -> ScrapedArticle:
    data = {
        "title": "테스트 기사",
        "url": "https://example.com/article",
        "published_at": "2026-10-16T00:00:00+00:00",
        "site": Site.KACTA,
        "section": "테스트",
        "content": "본문 텍스트",
    }
    data.update(overrides)
    return ScrapedArticle(**data)


@pytest.fixture
def article_factory():
    return make_article
