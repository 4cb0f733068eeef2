"""Chat session tests."""

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.chat_session import CHAT_TEMPERATURE, ChatSession
from ups_finalizer.gemini_client import GeminiError


class FakeClient:
    def __init__(self, reply: str = "Neuer Abschnitt", fail: bool = False) -> None:
        self.reply = reply
        self.fail = fail
        self.calls = []

    def generate_content(self, prompt=None, **kwargs):
        self.calls.append(kwargs)
        if self.fail:
            raise GeminiError("quota exceeded")
        return self.reply


def test_init_sets_system_message() -> None:
    chat = ChatSession()
    chat.init("# A3 Summary: X")
    assert chat.messages[0].role == "system"
    assert "# A3 Summary: X" in chat.system_instruction()
    assert chat.history() == []


def test_send_message_sends_history() -> None:
    chat = ChatSession()
    chat.init("# A3")
    client = FakeClient()
    assert chat.send_message("Kürzer bitte", client) == "Neuer Abschnitt"
    call = client.calls[0]
    assert call["contents"] == [{"role": "user", "parts": [{"text": "Kürzer bitte"}]}]
    assert call["temperature"] == CHAT_TEMPERATURE
    assert "# A3" in call["system_instruction"]
    assert [m.role for m in chat.history()] == ["user", "assistant"]
    chat.send_message("Noch kürzer", client)
    roles = [c["role"] for c in client.calls[1]["contents"]]
    assert roles == ["user", "model", "user"]


def test_failed_send_drops_user_message() -> None:
    chat = ChatSession()
    chat.init("# A3")
    with pytest.raises(GeminiError):
        chat.send_message("Hallo", FakeClient(fail=True))
    assert chat.history() == []


def test_empty_message_is_rejected() -> None:
    with pytest.raises(ValueError):
        ChatSession().send_message("  ", FakeClient())


def test_update_context_keeps_history() -> None:
    chat = ChatSession()
    chat.init("alt")
    chat.send_message("Frage", FakeClient())
    chat.update_context("neu")
    assert chat.context == "neu"
    assert "neu" in chat.system_instruction()
    assert len(chat.history()) == 2


def test_clear_and_round_trip() -> None:
    chat = ChatSession()
    chat.init("Summary")
    chat.send_message("Frage", FakeClient())
    restored = ChatSession.from_dict(chat.to_dict())
    assert restored == chat
    restored.clear()
    assert restored.history() == []
    assert restored.context == "Summary"
    assert ChatSession.from_dict(None) == ChatSession()
