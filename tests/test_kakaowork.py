"""Tests for delivery.kakaowork."""

import asyncio
from datetime import datetime, timezone

import pytest

from hr_briefing.config.settings import DeliveryConfig
from hr_briefing.core.exceptions import ConfigurationError, DeliveryError
from hr_briefing.core.models import FilteredArticle, Site
from hr_briefing.delivery.kakaowork import KakaoWorkSender, build_message, chunk_text

from conftest import FakeResponse, FakeSession, make_article

API = "https://api.kakaowork.com/v1"
EMAIL_URL = f"{API}/messages.send_by_email"
CONVERSATION_URL = f"{API}/messages.send"


def config(**overrides) -> DeliveryConfig:
    values = {"app_key": "key", "recipients": ["a@x.com", "b@x.com"], "conversation_id": "42"}
    values.update(overrides)
    return DeliveryConfig(**values)


def send(sender, summary="요약", articles=()):
    asyncio.run(sender.send(summary, list(articles)))


class TestChunkText:
    def test_short_text_is_single_chunk(self) -> None:
        assert chunk_text("a\nb", 4000) == ["a\nb"]

    def test_splits_on_line_boundaries(self) -> None:
        lines = [f"{i:02d}" + "x" * 7 for i in range(10)]
        chunks = chunk_text("\n".join(lines), 25)
        assert all(len(chunk) <= 25 for chunk in chunks)
        assert "\n".join(chunks) == "\n".join(lines)
        assert all(line in lines for chunk in chunks for line in chunk.split("\n"))

    def test_overlong_line_is_cut_to_the_cap(self) -> None:
        chunks = chunk_text("short\n" + "y" * 50 + "\nend", 20)
        assert chunks == ["short", "y" * 20, "y" * 20, "y" * 10 + "\nend"]

    def test_no_chunk_exceeds_delivery_limit(self) -> None:
        chunks = chunk_text("머리말\n" + "가" * 9000, 4000)
        assert all(len(chunk) <= 4000 for chunk in chunks)
        assert "".join(chunks).replace("\n", "") == "머리말" + "가" * 9000


class TestBuildMessage:
    def test_header_summary_and_links(self) -> None:
        article = FilteredArticle.from_scraped(
            make_article(title="최저임금", url="https://x/1", section=None, site=Site.NOMU), ["최저임금"]
        )
        now = datetime(2026, 10, 16, 20, 0, tzinfo=timezone.utc)
        message = build_message("요약 본문", [article], now=now)
        assert message == (
            "2026-10-17 HR/페이롤 아침 브리핑\n\n"
            "요약 본문\n\n"
            "원문 링크\n"
            "- 노무사신문 | 일반 | [최저임금](https://x/1)"
        )

    def test_no_link_digest_without_articles(self) -> None:
        message = build_message("요약", [], now=datetime(2026, 10, 17, tzinfo=timezone.utc))
        assert message.endswith("브리핑\n\n요약")


class TestSender:
    def test_sends_each_chunk_to_every_recipient(self) -> None:
        session = FakeSession({EMAIL_URL: [FakeResponse(200)]})
        send(KakaoWorkSender(config(), session=session))
        assert [json["email"] for _, json, _ in session.posts] == ["a@x.com", "b@x.com"]
        assert session.posts[0][2]["Authorization"] == "Bearer key"

    def test_partial_failure_does_not_trigger_fallback(self) -> None:
        session = FakeSession({EMAIL_URL: [FakeResponse(500, "err"), FakeResponse(200)]})
        send(KakaoWorkSender(config(), session=session))
        assert all(url == EMAIL_URL for url, _, _ in session.posts)

    def test_falls_back_when_every_recipient_fails(self) -> None:
        session = FakeSession({
            EMAIL_URL: [FakeResponse(200, json_data={"success": False, "error": {"code": "x"}})],
            CONVERSATION_URL: [FakeResponse(200)],
        })
        send(KakaoWorkSender(config(), session=session))
        assert session.posts[-1][0] == CONVERSATION_URL
        assert session.posts[-1][1]["conversation_id"] == "42"

    def test_raises_without_fallback_conversation(self) -> None:
        session = FakeSession({EMAIL_URL: [FakeResponse(500)]})
        with pytest.raises(DeliveryError):
            send(KakaoWorkSender(config(conversation_id=None), session=session))

    def test_raises_when_fallback_fails(self) -> None:
        session = FakeSession({EMAIL_URL: [FakeResponse(500)], CONVERSATION_URL: [FakeResponse(403)]})
        with pytest.raises(DeliveryError):
            send(KakaoWorkSender(config(), session=session))

    def test_long_message_sent_in_chunks(self) -> None:
        session = FakeSession({EMAIL_URL: [FakeResponse(200)]})
        summary = "\n".join("문장" * 50 for _ in range(100))
        send(KakaoWorkSender(config(recipients=["a@x.com"]), session=session), summary=summary)
        assert len(session.posts) > 1
        assert all(len(json["text"]) <= 4000 for _, json, _ in session.posts)

    @pytest.mark.parametrize("overrides", [{"app_key": None}, {"recipients": []}])
    def test_missing_credentials(self, overrides) -> None:
        with pytest.raises(ConfigurationError):
            send(KakaoWorkSender(config(**overrides), session=FakeSession()))
