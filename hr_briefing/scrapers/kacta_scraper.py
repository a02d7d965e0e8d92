# File: hr_briefing/scrapers/kacta_scraper.py
"""세무사신문 (webzine.kacta.or.kr) scraper"""
from typing import Optional

from bs4 import BeautifulSoup

from hr_briefing.core.models import Site
from hr_briefing.scrapers.base import BaseSiteScraper


class KactaScraper(BaseSiteScraper):
    site = Site.KACTA
    base_url = 'https://webzine.kacta.or.kr/'

    list_selectors = (
        '#skin-3 .item a',   # 메인 기사
        '#skin-11 .item a',  # 일반 기사
        '#skin-12 .item a',
        '#skin-13 .item a',
        '#skin-14 .item a',
        '#skin-15 .item a',
        '#skin-16 .item a',
        '#skin-17 .item a',  # 많이 본 뉴스
        '#skin-19 .item a',  # 오피니언
        '#skin-20 .item a',  # 회무
        '#skin-21 .item a',  # 조세뉴스
        '#skin-23 .item a',  # People
        '#skin-24 .item a',  # 사회경제
    )
    title_selectors = ('h2', '.auto-titles')
    url_marker = 'articleView.html'
    section_rules = (
        ('sc_section_code=S1N1', '회무'),
        ('sc_section_code=S1N2', '세정'),
        ('sc_section_code=S1N5', '기획'),
        ('sc_section_code=S1N6', 'People'),
        ('sc_section_code=S1N7', '오피니언'),
        ('sc_sub_section_code=S2N1', '조세뉴스'),
        ('sc_sub_section_code=S2N2', '사회경제'),
    )
    body_selectors = (
        '#article-view-content-div',
        '.article-veiw-body',
        '.view_con',
        '.board_view .content',
        '#contentDetail',
        '.article-content',
        '.content',
        '.article-body',
        'article',
        '.view_content',
    )
    max_items = 30

    def section_key(self, href: str, selector: str) -> str:
        return href

    def extract_published_at(self, soup: BeautifulSoup) -> Optional[str]:
        meta = soup.select_one('meta[property="article:published_time"]')
        if meta is None:
            return None
        return meta.get('content') or None
