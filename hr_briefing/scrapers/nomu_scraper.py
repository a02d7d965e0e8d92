# File: hr_briefing/scrapers/nomu_scraper.py
"""노무사신문 (nomu4.net) scraper"""
import re
from typing import Optional

from bs4 import BeautifulSoup

from hr_briefing.core.models import Site
from hr_briefing.scrapers.base import BaseSiteScraper

REGISTERED_AT = re.compile(r'(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2})')


class NomuScraper(BaseSiteScraper):
    site = Site.NOMU
    base_url = 'https://nomu4.net/'

    list_selectors = (
        '.section1-slider li a',        # 실시간 뉴스
        '.section2-slider li a',        # 헤드라인 뉴스
        '.section2-left-list li a',     # 중요뉴스
        '.section2-right-list li a',    # 최신뉴스
        '.section4-slider li a',        # 영상뉴스
        '.section5-left-item a',        # 노무사뉴스
        '.section5-right-list li a',    # 오피니언
        '.section6-slider-inner li a',  # 사무실알리기
        '.section7-item a',             # 각종 콘텐츠
    )
    title_selectors = (
        'h4', 'h5', 'h6',
        '.section2-slider-tit',
        '.section4-slider-title',
        '.section5-left-item-sub-tit',
        '.section5-right-tit',
        '.section7-item-main-tit',
    )
    url_marker = 'view.php'
    # Order matters: 'section2-slider' must be checked before the other section2 groups
    section_rules = (
        ('section1', '실시간뉴스'),
        ('section2-slider', '헤드라인뉴스'),
        ('section2-left', '중요뉴스'),
        ('section2-right', '최신뉴스'),
        ('section4', '영상뉴스'),
        ('section5-left', '노무사뉴스'),
        ('section5-right', '오피니언'),
        ('section6', '사무실알리기'),
        ('section7', '노동법콘텐츠'),
    )
    body_selectors = (
        '.fr-view',
        '.view_content',
        '.board_view .cont',
        '#bo_v_con',
        '.article-content',
        '.content',
        '.article-body',
        'article',
        '.view_con',
    )

    def section_key(self, href: str, selector: str) -> str:
        return selector

    def extract_published_at(self, soup: BeautifulSoup) -> Optional[str]:
        items = soup.select('.article-head-info .info-text li')
        if not items:
            return None

        text = items[-1].get_text().strip()
        if '등록' not in text:
            return None

        match = REGISTERED_AT.search(text)
        return match.group(1) if match else None
