# File: hr_briefing/delivery/kakaowork.py
"""Digest delivery through the KakaoWork bot API"""
from datetime import datetime
from typing import List, Optional

import aiohttp
from dateutil import tz

from hr_briefing.config.settings import DeliveryConfig
from hr_briefing.core.exceptions import ConfigurationError, DeliveryError
from hr_briefing.core.models import FilteredArticle
from hr_briefing.utils.dates import KST
from hr_briefing.utils.logger import build_error_report, get_logger

logger = get_logger(__name__)

DIGEST_TITLE = 'HR/페이롤 아침 브리핑'


def chunk_text(text: str, max_length: int = 4000) -> List[str]:
    """Split on line boundaries into chunks of at most max_length.

    A single line longer than max_length is cut into max_length pieces.
    """
    chunks: List[str] = []
    buffer: List[str] = []
    length = 0

    lines = []
    for line in text.split('\n'):
        if len(line) > max_length:
            lines.extend(line[i:i + max_length] for i in range(0, len(line), max_length))
        else:
            lines.append(line)

    for line in lines:
        projected = length + len(line) + 1
        if projected > max_length and buffer:
            chunks.append('\n'.join(buffer))
            buffer = [line]
            length = len(line) + 1
        else:
            buffer.append(line)
            length = projected

    if buffer:
        chunks.append('\n'.join(buffer))
    return chunks


def build_link_digest(articles: List[FilteredArticle]) -> str:
    if not articles:
        return ''
    lines = [
        f"- {article.site.value} | {article.section or '일반'} | [{article.title}]({article.url})"
        for article in articles
    ]
    return '\n'.join(['원문 링크'] + lines)


def build_message(summary: str, articles: List[FilteredArticle], now: Optional[datetime] = None) -> str:
    today = (now or datetime.now(tz.UTC)).astimezone(KST).strftime('%Y-%m-%d')
    header = f'{today} {DIGEST_TITLE}'
    parts = [header, summary, build_link_digest(articles)]
    return '\n\n'.join(part for part in parts if part)


class KakaoWorkSender:
    """Sends each chunk to every recipient.

    A chunk that reached no recipient at all is re-sent to the fallback group
    conversation.
    """

    def __init__(self, config: DeliveryConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self.session = session

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    def _headers(self) -> dict:
        return {
            'Authorization': f'Bearer {self.config.app_key}',
            'Content-Type': 'application/json',
        }

    async def _post(self, session: aiohttp.ClientSession, endpoint: str, payload: dict):
        url = f"{self.config.api_base}/{endpoint}"
        async with session.post(url, json=payload, headers=self._headers()) as response:
            if response.status >= 400:
                body = await response.text()
                raise DeliveryError(f"KakaoWork {endpoint} returned {response.status}: {body[:200]}")
            data = await response.json(content_type=None)
            # The API reports logical failures with HTTP 200 and success=false
            if isinstance(data, dict) and data.get('success') is False:
                raise DeliveryError(f"KakaoWork {endpoint} failed: {data.get('error')}")
            return data

    async def send_by_email(self, session: aiohttp.ClientSession, email: str, text: str) -> bool:
        try:
            await self._post(session, 'messages.send_by_email', {'email': email, 'text': text})
            logger.info(f"KakaoWork message sent to {email}")
            return True
        except Exception as e:
            logger.warning(build_error_report(f'KakaoWork email delivery to {email}', e))
            return False

    async def send_by_conversation(self, session: aiohttp.ClientSession, text: str):
        try:
            await self._post(session, 'messages.send',
                             {'conversation_id': self.config.conversation_id, 'text': text})
            logger.info("KakaoWork fallback conversation delivery succeeded")
        except Exception as e:
            logger.error(build_error_report('KakaoWork fallback conversation delivery', e))
            if isinstance(e, DeliveryError):
                raise
            raise DeliveryError(f"Fallback conversation delivery failed: {e}") from e

    async def send(self, summary: str, articles: List[FilteredArticle]):
        if not self.config.app_key:
            raise ConfigurationError('KWORK_APP_KEY is required')
        if not self.config.recipients:
            raise ConfigurationError('KWORK_TO_EMAIL is required')

        message = build_message(summary, articles)
        chunks = chunk_text(message, self.config.max_message_length)
        logger.info(f"Delivering digest in {len(chunks)} chunk(s) to {len(self.config.recipients)} recipient(s)")

        if self.session is not None:
            await self._send_chunks(self.session, chunks)
        else:
            async with aiohttp.ClientSession() as session:
                await self._send_chunks(session, chunks)

    async def _send_chunks(self, session: aiohttp.ClientSession, chunks: List[str]):
        for chunk in chunks:
            delivered = 0
            for email in self.config.recipients:
                if await self.send_by_email(session, email, chunk):
                    delivered += 1

            if delivered:
                continue

            if not self.config.conversation_id:
                raise DeliveryError('Every email delivery failed and KWORK_CONVERSATION_ID is not set')
            await self.send_by_conversation(session, chunk)
