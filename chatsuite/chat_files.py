"""Content-addressed files uploaded to a chat workspace."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from chatsuite.chat_errors import ChatFileError

_PREFIX = "/files/"
_I64 = re.compile(r"[+-]?[0-9]+")
_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class ChatFile:
    """A file stored under its SHA-1 hash within a workspace."""

    ws_id: int
    hash: str
    ext: str

    @classmethod
    def from_upload(cls, ws_id: int, filename: str, data: bytes) -> "ChatFile":
        """Describe uploaded ``data``; the extension is the text after the last dot."""
        return cls(
            ws_id=ws_id,
            hash=hashlib.sha1(data).hexdigest(),
            ext=filename.rsplit(".", 1)[-1],
        )

    @classmethod
    def parse(cls, s: str) -> "ChatFile":
        """Parse a URL of the form ``/files/<ws>/<abc>/<def>/<rest>.<ext>``."""
        if not s.startswith(_PREFIX):
            raise ChatFileError("invalid file path")
        parts = s[len(_PREFIX):].split("/")
        if len(parts) != 4:
            raise ChatFileError("File path does not valid")
        ws_text, first, second, last = parts
        if not _I64.fullmatch(ws_text) or not _I64_MIN <= int(ws_text) <= _I64_MAX:
            raise ChatFileError("invalid workspace id")
        if "." not in last:
            raise ChatFileError("invalid file name")
        third, ext = last.split(".", 1)
        return cls(ws_id=int(ws_text), hash=f"{first}{second}{third}", ext=ext)

    def url(self) -> str:
        return f"/files/{self.ws_id}/{self.hash_to_path()}"

    def path(self, base_dir: Union[str, Path]) -> Path:
        return Path(base_dir) / str(self.ws_id) / self.hash_to_path()

    def hash_to_path(self) -> str:
        """Split the hash into two 3-character directories and a file name."""
        if len(self.hash) < 6:
            raise ValueError("hash is too short to split into a path")
        return f"{self.hash[:3]}/{self.hash[3:6]}/{self.hash[6:]}.{self.ext}"