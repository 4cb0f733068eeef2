from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping
from .gemini_client import GeminiClient
from .prompt_builder import build_chat_system_prompt
logger = logging.getLogger(__name__)
CHAT_TEMPERATURE = 0.7
@dataclass
class ChatMessage:
    role: str
    content: str
    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}
@dataclass
class ChatSession:
    """Refinement chat about the current A3 summary.
    The first message is always the system message carrying the summary;
    it is sent to Gemini as ``systemInstruction``, the rest as ``contents``.
    """
    context: str = ""
    messages: List[ChatMessage] = field(default_factory=list)
    def init(self, summary: str) -> None:
        self.context = summary or ""
        self.messages = [ChatMessage("system", build_chat_system_prompt(self.context))]
    def update_context(self, summary: str) -> None:
        self.context = summary or ""
        system = ChatMessage("system", build_chat_system_prompt(self.context))
        if self.messages and self.messages[0].role == "system":
            self.messages[0] = system
        else:
            self.messages.insert(0, system)
    def clear(self) -> None:
        self.messages = [ChatMessage("system", build_chat_system_prompt(self.context))]
    def history(self) -> List[ChatMessage]:
        return [m for m in self.messages if m.role != "system"]
    def gemini_contents(self) -> list[dict]:
        return [
            {"role": "user" if m.role == "user" else "model", "parts": [{"text": m.content}]}
            for m in self.history()
        ]
    def system_instruction(self) -> str:
        for message in self.messages:
            if message.role == "system":
                return message.content
        return ""
    def send_message(self, text: str, client: GeminiClient) -> str:
        message = (text or "").strip()
        if not message:
            raise ValueError("Chat message is empty.")
        if not self.messages:
            self.init(self.context)
        self.messages.append(ChatMessage("user", message))
        try:
            reply = client.generate_content(
                contents=self.gemini_contents(),
                system_instruction=self.system_instruction() or None,
                temperature=CHAT_TEMPERATURE,
            )
        except Exception:
            self.messages.pop()
            raise
        self.messages.append(ChatMessage("assistant", reply))
        logger.info("Chat reply received (%d chars)", len(reply))
        return reply
    def to_dict(self) -> dict:
        return {"context": self.context, "messages": [m.to_dict() for m in self.messages]}
    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ChatSession":
        if not isinstance(data, Mapping):
            return cls()
        messages = [
            ChatMessage(role=str(item.get("role", "")), content=str(item.get("content", "")))
            for item in data.get("messages") or []
            if isinstance(item, Mapping)
        ]
        context = data.get("context")
        return cls(context=context if isinstance(context, str) else "", messages=messages)
