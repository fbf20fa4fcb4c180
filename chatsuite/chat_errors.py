"""Errors raised by the chat service, each mapped to an HTTP status."""

from __future__ import annotations

from http import HTTPStatus


class ChatError(Exception):
    """Base error of the chat service, carrying an HTTP status."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    _template = "{}"

    def __init__(self, detail: str = "") -> None:
        super().__init__(self._template.format(detail))
        self.detail = detail

    def to_response(self) -> tuple[int, dict[str, str]]:
        """Return the HTTP status and JSON body describing this error."""
        return int(self.status_code), {"error": str(self)}


class NotFound(ChatError):
    status_code = HTTPStatus.NOT_FOUND
    _template = "chat not found: {}"


class CreateChatError(ChatError):
    status_code = HTTPStatus.BAD_REQUEST
    _template = "create chat error {}"


class EmailAlreadyExists(ChatError):
    status_code = HTTPStatus.CONFLICT
    _template = "email already exists: {}"


class WorkspaceNotExists(ChatError):
    status_code = HTTPStatus.NOT_FOUND
    _template = "workspace not exists: {}"


class InternalError(ChatError):
    status_code = HTTPStatus.BAD_REQUEST
    _template = "internal error {}"


class MessageCreateError(ChatError):
    status_code = HTTPStatus.BAD_REQUEST
    _template = "message create error {}"


class ChatFileError(ChatError):
    status_code = HTTPStatus.NOT_FOUND
    _template = "Chat file error {}"


class UserNotInChat(ChatError):
    status_code = HTTPStatus.FORBIDDEN
    _template = "user not in chat {}"


class CreateAgentError(ChatError):
    status_code = HTTPStatus.BAD_REQUEST
    _template = "create agent error {}"


class AgentExists(ChatError):
    status_code = HTTPStatus.CONFLICT
    _template = "agent exists {}"


class AgentFailure(ChatError):
    """An agent could not process a message."""

    status_code = HTTPStatus.BAD_REQUEST
    _template = " {}"