"""Recognising chat notifications that a bot should answer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

CHAT_MESSAGE_CREATED = "chat_message_created"


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field `{key}` must be an integer")
    return value


@dataclass
class ChatMessage:
    """A message posted to a chat."""

    id: int
    chat_id: int
    sender_id: int
    content: str
    files: list[str] = field(default_factory=list)
    modified_content: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatMessage":
        """Build from decoded JSON; raises ValueError on malformed data."""
        if not isinstance(data, dict):
            raise ValueError("message must be an object")
        content = data.get("content")
        if not isinstance(content, str):
            raise ValueError("field `content` must be a string")
        files = data.get("files") or []
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ValueError("field `files` must be a list of strings")
        modified = data.get("modified_content")
        if modified is not None and not isinstance(modified, str):
            raise ValueError("field `modified_content` must be a string")
        created = data.get("created_at")
        return cls(
            id=_int(data, "id"),
            chat_id=_int(data, "chat_id"),
            sender_id=_int(data, "sender_id"),
            content=content,
            files=list(files),
            modified_content=modified,
            created_at=None if created is None else str(created),
        )


@dataclass
class Notification:
    """A message addressed to a bot, and the bot it concerns."""

    user_id: int
    event: ChatMessage

    @classmethod
    def load(
        cls, channel: str, payload: str, bots: Iterable[int]
    ) -> Optional["Notification"]:
        """Return a notification if ``payload`` is a one-to-one message to a bot."""
        if channel != CHAT_MESSAGE_CREATED:
            return None
        try:
            data = json.loads(payload)
            if not isinstance(data, dict):
                return None
            raw_members = data.get("members")
            if not isinstance(raw_members, list) or any(
                isinstance(m, bool) or not isinstance(m, int) for m in raw_members
            ):
                return None
            message = ChatMessage.from_dict(data.get("message"))
        except ValueError:
            return None
        members = set(raw_members)
        members.discard(message.sender_id)
        if len(members) != 1:
            return None
        (bot_id,) = members
        if bot_id not in set(bots):
            return None
        return cls(user_id=bot_id, event=message)