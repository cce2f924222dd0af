# Tests for chat command routing
# Created: 2026-10-04

import pytest

from fireflies.chat import prompts
from fireflies.chat.commands import (
    COMMAND_NAMES,
    Calculate,
    ClearContext,
    PlainChat,
    Scrape,
    Search,
    UsageHint,
    route,
)
from fireflies.errors import ErrorKind


class TestRoute:
    def test_dispatch_order(self):
        assert COMMAND_NAMES == ("/clear", "/cari", "/web", "/kalkulator")

    def test_search(self):
        assert route("/cari cuaca jakarta hari ini") == Search(query="cuaca jakarta hari ini")

    def test_search_is_case_insensitive_and_trimmed(self):
        assert route("  /CARI   berita terbaru  ") == Search(query="berita terbaru")

    def test_search_without_query(self):
        assert route("/cari") == UsageHint("cari", prompts.SEARCH_USAGE)
        assert route("/cari    ") == UsageHint("cari", prompts.SEARCH_USAGE)

    def test_scrape_question_before_url(self):
        assert route("/web ambil fungsi yang ada di web https://example.com/docs") == Scrape(
            question="ambil fungsi yang ada di web", url="https://example.com/docs"
        )

    def test_scrape_url_first(self):
        assert route("/web http://example.com   ringkas   isinya") == Scrape(
            question="ringkas isinya", url="http://example.com"
        )

    def test_scrape_uses_first_url(self):
        command = route("/web bandingkan https://a.example https://b.example")
        assert command == Scrape(question="bandingkan https://b.example", url="https://a.example")

    def test_scrape_without_url(self):
        assert route("/web apa isi halaman ini") == UsageHint("web", prompts.WEB_URL_USAGE)
        assert route("/web") == UsageHint("web", prompts.WEB_URL_USAGE)

    def test_scrape_without_question(self):
        assert route("/web https://example.com") == UsageHint("web", prompts.WEB_QUESTION_USAGE)

    def test_calculate(self):
        assert route("/kalkulator 2 + 2 * 5") == Calculate(expression="2 + 2 * 5")

    def test_calculate_without_expression(self):
        assert route("/kalkulator") == UsageHint("kalkulator", prompts.CALCULATOR_USAGE)

    def test_clear(self):
        assert route("/clear") == ClearContext()
        assert route(" /Clear ") == ClearContext()

    def test_clear_with_payload_is_plain_chat(self):
        assert route("/clear semuanya") == PlainChat(text="/clear semuanya")

    def test_prefix_must_be_whole_token(self):
        assert route("/cariberita") == PlainChat(text="/cariberita")

    def test_command_not_at_start_is_plain_chat(self):
        assert route("tolong /cari resep") == PlainChat(text="tolong /cari resep")

    def test_plain_chat_keeps_image(self):
        assert route("apa ini?", image=b"\x89PNG") == PlainChat(text="apa ini?", image=b"\x89PNG")

    def test_commands_ignore_attached_image(self):
        assert route("/cari kucing", image=b"\x89PNG") == Search(query="kucing")

    @pytest.mark.parametrize(
        "message",
        ["", "halo", "/cari", "/cari x", "/web", "/web q https://x.io", "/kalkulator 1",
         "/clear", "/clear x", "/unknown", "   "],
    )
    def test_every_message_routes_to_one_command(self, message):
        command = route(message)
        assert isinstance(command, (Search, Scrape, Calculate, ClearContext, PlainChat, UsageHint))


class TestRouteExamples:
    def test_search_example(self):
        assert route("/cari jakarta weather") == Search(query="jakarta weather")

    def test_scrape_example(self):
        assert route("/web what is this https://a.com") == Scrape(
            question="what is this", url="https://a.com"
        )

    def test_plain_example(self):
        assert route("hello") == PlainChat(text="hello")

    def test_usage_hint_is_malformed_command(self):
        assert route("/kalkulator").kind is ErrorKind.MALFORMED_COMMAND
