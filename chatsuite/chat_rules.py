"""Rules for creating chats and messages and for paging through messages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from chatsuite.chat_errors import CreateChatError, MessageCreateError
from chatsuite.chat_files import ChatFile

_I64_MAX = (1 << 63) - 1
_MIN_PAGE_SIZE = 100
_MAX_PAGE_SIZE = 500
_MAX_UNNAMED_MEMBERS = 8


class ChatType(enum.Enum):
    """Kind of a chat, derived from its name, size and visibility."""

    SINGLE = "single"
    GROUP = "group"
    PRIVATE_CHANNEL = "private_channel"
    PUBLIC_CHANNEL = "public_channel"


@dataclass
class CreateChat:
    """Request to create or update a chat."""

    name: Optional[str] = None
    members: list[int] = field(default_factory=list)
    public: bool = False

    @classmethod
    def new(cls, name: str, members: Iterable[int], public: bool) -> "CreateChat":
        """Build a request; an empty name means the chat is unnamed."""
        return cls(name=name or None, members=list(members), public=public)


def chat_type_for(chat: CreateChat, existing_user_ids: Iterable[int]) -> ChatType:
    """Check ``chat`` against the creation rules and return its type.

    ``existing_user_ids`` are the ids of users known to exist.
    Raises CreateChatError when a rule is broken.
    """
    count = len(chat.members)
    if count < 2:
        raise CreateChatError("Chat must have at least 2 members")
    if count > _MAX_UNNAMED_MEMBERS and chat.name is None:
        raise CreateChatError(
            "Group chat with more than 8 members must have a name"
        )
    found = set(chat.members) & set(existing_user_ids)
    if len(found) != count:
        raise CreateChatError("Some members do not exist")
    if chat.name is None:
        return ChatType.SINGLE if count == 2 else ChatType.GROUP
    return ChatType.PUBLIC_CHANNEL if chat.public else ChatType.PRIVATE_CHANNEL


@dataclass
class CreateMessage:
    """Request to post a message, optionally referring to uploaded files."""

    content: str = ""
    files: list[str] = field(default_factory=list)

    def validate(self, base_dir: Union[str, Path]) -> list[ChatFile]:
        """Check the content and that every referenced file is stored.

        Returns the parsed files. Raises MessageCreateError, or
        ChatFileError for a malformed file URL.
        """
        if not self.content:
            raise MessageCreateError("content is required")
        parsed = []
        for url in self.files:
            chat_file = ChatFile.parse(url)
            if not chat_file.path(base_dir).exists():
                raise MessageCreateError("file not exists")
            parsed.append(chat_file)
        return parsed


@dataclass
class ListMessages:
    """Paging parameters for listing a chat's messages."""

    last_id: Optional[int] = None
    page_size: int = 0

    def __post_init__(self) -> None:
        if self.last_id is not None and self.last_id < 0:
            raise ValueError("last_id must not be negative")
        if self.page_size < 0:
            raise ValueError("page_size must not be negative")

    def effective_page_size(self) -> int:
        """The page size clamped to the allowed range."""
        return min(max(self.page_size, _MIN_PAGE_SIZE), _MAX_PAGE_SIZE)

    def effective_last_id(self) -> int:
        """The id to list messages before; unbounded when none was given."""
        return _I64_MAX if self.last_id is None else self.last_id