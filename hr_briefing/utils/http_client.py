# File: hr_briefing/utils/http_client.py
"""Async HTTP client with retry on server errors"""
import asyncio
import random
from dataclasses import dataclass
from typing import Optional

import aiohttp

from hr_briefing.core.exceptions import FetchError
from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 0.1
    max_delay: float = 10.0
    exponential_base: float = 2.0
    jitter: bool = True

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            # Up to 20% extra to spread simultaneous retries
            delay *= 1 + random.random() * 0.2
        return delay


class AsyncHTTPClient:
    """Shared async HTTP client.

    Every GET carries the same browser identity and a per-attempt timeout.
    Only 5xx responses are retried; anything else fails immediately with
    ``FetchError``.
    """

    def __init__(self, config: Optional[dict] = None, session: Optional[aiohttp.ClientSession] = None):
        self.config = config or {}
        self.session = session
        self._owns_session = session is None
        self.timeout = float(self.config.get('timeout_seconds', 15))
        self.retry_config = RetryConfig(
            max_retries=self.config.get('max_retries', 3),
            base_delay=self.config.get('base_delay', 0.1),
            max_delay=self.config.get('max_delay', 10.0),
            jitter=self.config.get('jitter', True)
        )
        self.headers = {
            'User-Agent': self.config.get('user_agent', DEFAULT_USER_AGENT),
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
        }

    async def __aenter__(self):
        """Async context manager entry"""
        if self.session is None:
            connector = aiohttp.TCPConnector(
                limit=self.config.get('connection_pool_size', 20),
                ttl_dns_cache=self.config.get('dns_cache_ttl', 300),
                enable_cleanup_closed=True
            )
            self.session = aiohttp.ClientSession(
                connector=connector,
                headers=self.headers,
                raise_for_status=False
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    async def fetch_text(self, url: str) -> str:
        """GET url and return the body text, retrying 5xx responses"""
        if self.session is None:
            raise RuntimeError("AsyncHTTPClient must be used as an async context manager")

        max_retries = self.retry_config.max_retries
        for attempt in range(max_retries + 1):
            # A fresh timeout per attempt
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            try:
                async with self.session.get(url, headers=self.headers, timeout=timeout) as response:
                    status = response.status
                    if status < 400:
                        content = await response.text()
                        logger.debug(f"Fetched {url} (attempt {attempt + 1})")
                        return content
                    if status < 500:
                        raise FetchError(url, f"Client error {status}", status=status)
            except asyncio.TimeoutError as e:
                raise FetchError(url, f"Timed out after {self.timeout:.0f}s") from e
            except aiohttp.ClientError as e:
                raise FetchError(url, f"Request error: {e}") from e

            if attempt < max_retries:
                delay = self.retry_config.delay_for(attempt)
                logger.warning(f"Retrying request ({attempt + 1}) for {url} after status {status}, "
                               f"waiting {delay:.2f}s")
                await asyncio.sleep(delay)

        raise FetchError(url, f"Server error {status} after {max_retries + 1} attempts", status=status)
