# File: hr_briefing/processing/summarizer.py
"""Korean briefing summaries via a chat-completions model"""
import re
from typing import List, Optional

from openai import AsyncOpenAI

from hr_briefing.config.settings import SummarizerConfig
from hr_briefing.core.exceptions import ConfigurationError, SummarizationError
from hr_briefing.core.models import FilteredArticle
from hr_briefing.utils.dates import KST, try_parse_date
from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_DIGEST = '오늘 전달할 HR/페이롤 관련 기사가 확인되지 않았습니다.'
FALLBACK_SUMMARY = '요약 생성에 실패했습니다.'

SYSTEM_PROMPT = (
    '당신은 한국어로 HR/노무 실무 담당자를 위한 요약을 작성하는 전문가입니다. '
    '날짜와 수치를 정확히 유지하세요.'
)

PROMPT_HEADER = """역할: 한국 HR/세무/노무 담당자에게 보내는 실무 브리핑 작성자
요구사항:
- 법/제도 변경, 정부 발표, 판결/행정해석, 실무 영향 강조
- 급여/원천/4대보험/연말정산 관련 정량 정보(금액/날짜/대상) 보존
- 각 항목은 5~7줄 이내로 요약하고, 핵심 bullet 1~2개 포함
- 각 항목마다 '왜 중요한지' 한 줄 포함
- 사이트/섹션/제목을 명확히 구분하여 표기
- 불필요한 수식어를 제거하고 간결하게 작성
- 마크다운 문법 사용 금지 (**, *, #, -, [] 등 사용하지 말 것)
- 일반 텍스트로만 작성
- 출력은 한국어
"""

# (pattern, replacement, flags), applied in order
MARKDOWN_RULES = (
    (r'```[\s\S]*?```', '', 0),
    (r'\*\*(.*?)\*\*', r'\1', 0),
    (r'__(.*?)__', r'\1', 0),
    (r'\*(.*?)\*', r'\1', 0),
    (r'_(.*?)_', r'\1', 0),
    (r'^#{1,6}\s+', '', re.MULTILINE),
    (r'^\s*[-*+]\s+', '• ', re.MULTILINE),
    (r'\[([^\]]+)\]\([^)]+\)', r'\1', 0),
    (r'`([^`]+)`', r'\1', 0),
    (r'^>\s*', '', re.MULTILINE),
    (r'^---+$', '', re.MULTILINE),
    (r'\n\s*\n\s*\n', '\n\n', 0),
)


def strip_markdown(text: str) -> str:
    for pattern, replacement, flags in MARKDOWN_RULES:
        text = re.sub(pattern, replacement, text, flags=flags)
    return text.strip()


def format_article(article: FilteredArticle, index: int) -> str:
    published = try_parse_date(article.published_at)
    published_text = published.astimezone(KST).strftime('%Y-%m-%d %H:%M') if published else article.published_at
    tags = ', '.join(article.tags) if article.tags else '태그 없음'

    return '\n'.join([
        f'기사 {index + 1}',
        f'사이트: {article.site.value}',
        f"섹션: {article.section or '미지정'}",
        f'제목: {article.title}',
        f'발행: {published_text}',
        f'키워드: {tags}',
        f'본문: {article.content}',
    ])


def build_prompt(articles: List[FilteredArticle]) -> str:
    body = '\n\n---\n\n'.join(format_article(article, i) for i, article in enumerate(articles))
    return f'{PROMPT_HEADER}\n기사 목록:\n{body}'


class Summarizer:
    """Turns the filtered batch into a plain-text briefing"""

    def __init__(self, config: SummarizerConfig, client: Optional[AsyncOpenAI] = None):
        self.config = config
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.config.api_key:
                raise ConfigurationError('OPENAI_API_KEY is not set')
            self._client = AsyncOpenAI(api_key=self.config.api_key, base_url=self.config.base_url)
        return self._client

    async def summarize(self, articles: List[FilteredArticle]) -> str:
        if not articles:
            logger.info("No articles to summarize, sending the empty digest")
            return EMPTY_DIGEST

        client = self.client
        prompt = build_prompt(articles)
        logger.info(f"Summarizing {len(articles)} articles with {self.config.model}",
                    extra={'count': len(articles)})

        try:
            response = await client.chat.completions.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except Exception as e:
            logger.error(f"Summarization request failed: {e}")
            raise SummarizationError(f"Summarization request failed: {e}") from e

        content = ''
        if response.choices:
            content = (response.choices[0].message.content or '').strip()
        return strip_markdown(content) if content else FALLBACK_SUMMARY
