"""Tests for reply_markup builders."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tehsdk.keyboards import InlineKeyboardBuilder, ReplyKeyboardBuilder, force_reply, remove_keyboard


class TestInlineKeyboardBuilder:
    def test_rows(self) -> None:
        markup = (
            InlineKeyboardBuilder()
            .text("Yes", "vote:yes").text("No", "vote:no")
            .row()
            .url("Docs", "https://core.telegram.org")
            .build()
        )
        assert markup == {
            "inline_keyboard": [
                [{"text": "Yes", "callback_data": "vote:yes"}, {"text": "No", "callback_data": "vote:no"}],
                [{"text": "Docs", "url": "https://core.telegram.org"}],
            ]
        }

    def test_empty_rows_dropped(self) -> None:
        markup = InlineKeyboardBuilder().row().text("A", "a").row().row().build()
        assert markup == {"inline_keyboard": [[{"text": "A", "callback_data": "a"}]]}

    def test_special_buttons(self) -> None:
        row = (
            InlineKeyboardBuilder()
            .switch_inline("Share", "q")
            .switch_inline_current("Here")
            .game("Play")
            .pay("Pay")
            .build()["inline_keyboard"][0]
        )
        assert row[0] == {"text": "Share", "switch_inline_query": "q"}
        assert row[1] == {"text": "Here", "switch_inline_query_current_chat": ""}
        assert row[2] == {"text": "Play", "callback_game": {}}
        assert row[3] == {"text": "Pay", "pay": True}


class TestReplyKeyboardBuilder:
    def test_options(self) -> None:
        markup = (
            ReplyKeyboardBuilder()
            .text("Menu")
            .row()
            .request_contact("Share phone").request_location("Share location")
            .resize()
            .one_time()
            .placeholder("Pick one")
            .build()
        )
        assert markup["keyboard"] == [
            [{"text": "Menu"}],
            [{"text": "Share phone", "request_contact": True}, {"text": "Share location", "request_location": True}],
        ]
        assert markup["resize_keyboard"] is True
        assert markup["one_time_keyboard"] is True
        assert markup["input_field_placeholder"] == "Pick one"
        assert "selective" not in markup

    def test_request_poll(self) -> None:
        button = ReplyKeyboardBuilder().request_poll("New quiz").build()["keyboard"][0][0]
        assert button == {"text": "New quiz", "request_poll": {"type": "quiz"}}


class TestMarkupHelpers:
    def test_remove_keyboard(self) -> None:
        assert remove_keyboard() == {"remove_keyboard": True}
        assert remove_keyboard(selective=True) == {"remove_keyboard": True, "selective": True}

    def test_force_reply(self) -> None:
        assert force_reply(placeholder="Your name") == {"force_reply": True, "input_field_placeholder": "Your name"}
