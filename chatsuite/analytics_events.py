"""Flattening of analytics events into storage rows, and the errors involved."""

from __future__ import annotations

import enum
import logging
from dataclasses import asdict, dataclass
from http import HTTPStatus
from typing import Any, Optional

from chatsuite.analytics_pb import (
    AnalyticsEvent,
    AppExitEvent,
    AppStartEvent,
    ChatCreatedEvent,
    ChatJoinedEvent,
    ChatLeftEvent,
    EventContext,
    MessageSentEvent,
    NavigationEvent,
    UserLoginEvent,
    UserLogoutEvent,
    UserRegisterEvent,
)

log = logging.getLogger(__name__)


class AnalyticsError(Exception):
    """Base error of the analytics service, carrying an HTTP status."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def to_response(self) -> tuple[int, dict[str, str]]:
        """Return the HTTP status and JSON body describing this error."""
        msg = str(self)
        log.warning("Status code: %s, Error: %s", int(self.status_code), msg)
        return int(self.status_code), {"error": msg}


class InvalidEvent(AnalyticsError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self) -> None:
        super().__init__("invalid event")


class CreateAnalyticsEventError(AnalyticsError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(f"create analytics event error {detail}")
        self.detail = detail


class MissingEventType(AnalyticsError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self) -> None:
        super().__init__("Missing event type")


class MissingEventContext(AnalyticsError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self) -> None:
        super().__init__("Missing event context")


class MissingSystemInfo(AnalyticsError):
    status_code = HTTPStatus.BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(f"missing system info {detail}")
        self.detail = detail


class EventTypeRow(enum.IntEnum):
    """Event kind as stored in the events table."""

    UNSPECIFIED = 0
    APP_START = 1
    APP_EXIT = 2
    USER_LOGIN = 3
    USER_LOGOUT = 4
    USER_REGISTER = 5
    MESSAGE_SENT = 6
    CHAT_CREATED = 7
    CHAT_JOINED = 8
    CHAT_LEFT = 9
    NAVIGATION = 10


class AppExitCode(enum.IntEnum):
    """Application exit status as stored in the events table."""

    UNKNOWN = 0
    SUCCESS = 1
    FAILURE = 2

    @classmethod
    def from_code(cls, value: int) -> "AppExitCode":
        """Map a wire value to an exit code; unknown values become UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class AnalyticsEventRow:
    """One flat row of the analytics events table."""

    client_id: str = ""
    app_version: str = ""
    system_os: str = ""
    system_arch: str = ""
    system_language: str = ""
    system_timezone: str = ""
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None
    geo_country: Optional[str] = None
    geo_region: Optional[str] = None
    geo_city: Optional[str] = None
    client_ts: int = 0
    server_ts: int = 0
    event_type: EventTypeRow = EventTypeRow.UNSPECIFIED
    app_exit_code: Optional[AppExitCode] = None
    email: Optional[str] = None
    register_workspace_id: Optional[str] = None
    chat_created_workspace_id: Optional[str] = None
    message_sent_chat_id: Optional[str] = None
    message_sent_type: Optional[str] = None
    message_sent_size: Optional[int] = None
    message_sent_total_files: Optional[int] = None
    chat_joined_id: Optional[str] = None
    chat_left_id: Optional[str] = None
    navigation_from: Optional[str] = None
    navigation_to: Optional[str] = None

    @classmethod
    def from_event(cls, event: AnalyticsEvent) -> "AnalyticsEventRow":
        """Flatten an event; raises an AnalyticsError if parts are missing."""
        row = cls()
        if event.event_type is None:
            raise MissingEventType()
        row._apply_event(event.event_type)
        if event.context is None:
            raise MissingEventContext()
        row._apply_context(event.context)
        return row

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping of the row, enums given as their integer values."""
        data = asdict(self)
        data["event_type"] = int(self.event_type)
        if self.app_exit_code is not None:
            data["app_exit_code"] = int(self.app_exit_code)
        return data

    def _apply_context(self, ctx: EventContext) -> None:
        self.client_id = ctx.client_id
        self.app_version = ctx.app_version
        if ctx.system is None:
            raise MissingSystemInfo("system_info missing")
        self.system_os = ctx.system.os
        self.system_arch = ctx.system.arch
        self.system_language = ctx.system.language
        self.system_timezone = ctx.system.timezone
        if ctx.geo is not None:
            self.geo_country = ctx.geo.country
            self.geo_region = ctx.geo.region
            self.geo_city = ctx.geo.city
        self.user_id = ctx.user_id or None
        self.ip_address = ctx.ip_address or None
        self.user_agent = ctx.user_agent or None
        self.referer = ctx.referer or None
        self.client_ts = ctx.client_ts
        self.server_ts = ctx.server_ts

    def _apply_event(self, ev: Any) -> None:
        match ev:
            case AppStartEvent():
                self.event_type = EventTypeRow.APP_START
            case AppExitEvent():
                self.event_type = EventTypeRow.APP_EXIT
                self.app_exit_code = AppExitCode.from_code(ev.exit_code)
            case UserLoginEvent():
                self.event_type = EventTypeRow.USER_LOGIN
                self.email = ev.email
            case UserLogoutEvent():
                self.event_type = EventTypeRow.USER_LOGOUT
                self.email = ev.email
            case UserRegisterEvent():
                self.event_type = EventTypeRow.USER_REGISTER
                self.email = ev.email
                self.register_workspace_id = ev.workspace_id
            case MessageSentEvent():
                self.event_type = EventTypeRow.MESSAGE_SENT
                self.message_sent_chat_id = ev.chat_id
                self.message_sent_type = ev.type
                self.message_sent_size = ev.size
                self.message_sent_total_files = ev.total_files
            case ChatCreatedEvent():
                self.event_type = EventTypeRow.CHAT_CREATED
                self.chat_created_workspace_id = ev.workspace_id
            case ChatJoinedEvent():
                self.event_type = EventTypeRow.CHAT_JOINED
                self.chat_joined_id = ev.chat_id
            case ChatLeftEvent():
                self.event_type = EventTypeRow.CHAT_LEFT
                self.chat_left_id = ev.chat_id
            case NavigationEvent():
                self.event_type = EventTypeRow.NAVIGATION
                self.navigation_from = ev.from_
                self.navigation_to = ev.to
            case _:
                raise InvalidEvent()