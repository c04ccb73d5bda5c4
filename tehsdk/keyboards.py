"""Builders for ``reply_markup`` payloads.

Both builders accumulate buttons into the current row; :meth:`row` starts a
new one.  Empty rows are dropped by :meth:`build`, so a trailing ``row()``
call is harmless.
"""

from typing import Any, Dict, List, Optional


class _RowBuilder:
    def __init__(self) -> None:
        self._rows: List[List[Dict[str, Any]]] = [[]]

    def _add(self, button: Dict[str, Any]) -> "_RowBuilder":
        self._rows[-1].append(button)
        return self

    def row(self) -> "_RowBuilder":
        """Start a new row of buttons."""
        self._rows.append([])
        return self

    def _keyboard(self) -> List[List[Dict[str, Any]]]:
        return [list(row) for row in self._rows if row]


class InlineKeyboardBuilder(_RowBuilder):
    """Accumulates an ``InlineKeyboardMarkup``.

    Usage::

        markup = (
            InlineKeyboardBuilder()
            .text("Yes", "vote:yes").text("No", "vote:no")
            .row()
            .url("Docs", "https://core.telegram.org/bots/api")
            .build()
        )
    """

    def text(self, text: str, callback_data: str) -> "InlineKeyboardBuilder":
        return self._add({"text": text, "callback_data": callback_data})

    def url(self, text: str, url: str) -> "InlineKeyboardBuilder":
        return self._add({"text": text, "url": url})

    def login(self, text: str, login_url: Dict[str, Any]) -> "InlineKeyboardBuilder":
        return self._add({"text": text, "login_url": login_url})

    def switch_inline(self, text: str, query: str = "") -> "InlineKeyboardBuilder":
        return self._add({"text": text, "switch_inline_query": query})

    def switch_inline_current(self, text: str, query: str = "") -> "InlineKeyboardBuilder":
        return self._add({"text": text, "switch_inline_query_current_chat": query})

    def game(self, text: str) -> "InlineKeyboardBuilder":
        return self._add({"text": text, "callback_game": {}})

    def pay(self, text: str) -> "InlineKeyboardBuilder":
        return self._add({"text": text, "pay": True})

    def build(self) -> Dict[str, Any]:
        return {"inline_keyboard": self._keyboard()}


class ReplyKeyboardBuilder(_RowBuilder):
    """Accumulates a ``ReplyKeyboardMarkup`` plus its display options."""

    def __init__(self) -> None:
        super().__init__()
        self._options: Dict[str, Any] = {}

    def text(self, text: str) -> "ReplyKeyboardBuilder":
        return self._add({"text": text})

    def request_contact(self, text: str) -> "ReplyKeyboardBuilder":
        return self._add({"text": text, "request_contact": True})

    def request_location(self, text: str) -> "ReplyKeyboardBuilder":
        return self._add({"text": text, "request_location": True})

    def request_poll(self, text: str, poll_type: Optional[str] = "quiz") -> "ReplyKeyboardBuilder":
        request_poll = {"type": poll_type} if poll_type else {}
        return self._add({"text": text, "request_poll": request_poll})

    def resize(self, resize: bool = True) -> "ReplyKeyboardBuilder":
        self._options["resize_keyboard"] = resize
        return self

    def one_time(self, one_time: bool = True) -> "ReplyKeyboardBuilder":
        self._options["one_time_keyboard"] = one_time
        return self

    def selective(self, selective: bool = True) -> "ReplyKeyboardBuilder":
        self._options["selective"] = selective
        return self

    def placeholder(self, text: str) -> "ReplyKeyboardBuilder":
        self._options["input_field_placeholder"] = text
        return self

    def build(self) -> Dict[str, Any]:
        return {"keyboard": self._keyboard(), **self._options}


def remove_keyboard(selective: Optional[bool] = None) -> Dict[str, Any]:
    """``ReplyKeyboardRemove`` payload."""
    markup: Dict[str, Any] = {"remove_keyboard": True}
    if selective is not None:
        markup["selective"] = selective
    return markup


def force_reply(placeholder: Optional[str] = None, selective: Optional[bool] = None) -> Dict[str, Any]:
    """``ForceReply`` payload."""
    markup: Dict[str, Any] = {"force_reply": True}
    if placeholder is not None:
        markup["input_field_placeholder"] = placeholder
    if selective is not None:
        markup["selective"] = selective
    return markup
