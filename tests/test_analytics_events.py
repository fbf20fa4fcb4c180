import pytest

from chatsuite.analytics_events import (
    AnalyticsEventRow,
    AppExitCode,
    CreateAnalyticsEventError,
    EventTypeRow,
    InvalidEvent,
    MissingEventContext,
    MissingEventType,
    MissingSystemInfo,
)
from chatsuite.analytics_pb import (
    AnalyticsEvent,
    AppExitEvent,
    AppStartEvent,
    ChatJoinedEvent,
    EventContext,
    GeoLocation,
    MessageSentEvent,
    NavigationEvent,
    SystemInfo,
    UserRegisterEvent,
)


def _context(**kwargs):
    base = dict(
        client_id="client-1",
        app_version="1.0.0",
        system=SystemInfo(os="linux", arch="x86_64", language="en", timezone="UTC"),
    )
    base.update(kwargs)
    return EventContext(**base)


def test_message_sent_row():
    event = AnalyticsEvent(
        context=_context(client_ts=100, server_ts=200),
        event_type=MessageSentEvent(chat_id="7", type="text", size=12, total_files=3),
    )
    row = AnalyticsEventRow.from_event(event)
    assert row.event_type is EventTypeRow.MESSAGE_SENT
    assert row.message_sent_chat_id == "7"
    assert row.message_sent_type == "text"
    assert row.message_sent_size == 12
    assert row.message_sent_total_files == 3
    assert row.client_ts == 100 and row.server_ts == 200
    assert row.system_os == "linux"
    assert row.system_timezone == "UTC"


def test_empty_context_strings_become_none():
    row = AnalyticsEventRow.from_event(
        AnalyticsEvent(context=_context(), event_type=AppStartEvent())
    )
    assert row.user_id is None
    assert row.ip_address is None
    assert row.user_agent is None
    assert row.referer is None
    assert row.geo_city is None


def test_context_optional_fields_filled():
    ctx = _context(
        user_id="42",
        referer="home",
        geo=GeoLocation(country="FR", region="IDF", city="Paris"),
    )
    row = AnalyticsEventRow.from_event(
        AnalyticsEvent(context=ctx, event_type=ChatJoinedEvent(chat_id="9"))
    )
    assert row.user_id == "42"
    assert row.referer == "home"
    assert (row.geo_country, row.geo_region, row.geo_city) == ("FR", "IDF", "Paris")
    assert row.chat_joined_id == "9"
    assert row.event_type is EventTypeRow.CHAT_JOINED


def test_register_and_navigation():
    row = AnalyticsEventRow.from_event(
        AnalyticsEvent(
            context=_context(),
            event_type=UserRegisterEvent(email="alice@example.com", workspace_id="3"),
        )
    )
    assert row.email == "alice@example.com"
    assert row.register_workspace_id == "3"
    nav = AnalyticsEventRow.from_event(
        AnalyticsEvent(context=_context(), event_type=NavigationEvent(from_="/a", to="/b"))
    )
    assert (nav.navigation_from, nav.navigation_to) == ("/a", "/b")


def test_exit_code_mapping():
    row = AnalyticsEventRow.from_event(
        AnalyticsEvent(context=_context(), event_type=AppExitEvent(exit_code=2))
    )
    assert row.app_exit_code is AppExitCode.FAILURE
    assert AppExitCode.from_code(1) is AppExitCode.SUCCESS
    assert AppExitCode.from_code(99) is AppExitCode.UNKNOWN


def test_missing_event_type_checked_first():
    with pytest.raises(MissingEventType):
        AnalyticsEventRow.from_event(AnalyticsEvent())


def test_missing_context():
    with pytest.raises(MissingEventContext):
        AnalyticsEventRow.from_event(AnalyticsEvent(event_type=AppStartEvent()))


def test_missing_system_info():
    with pytest.raises(MissingSystemInfo) as info:
        AnalyticsEventRow.from_event(
            AnalyticsEvent(context=EventContext(client_id="c"), event_type=AppStartEvent())
        )
    assert str(info.value) == "missing system info system_info missing"


def test_unknown_event_object_is_invalid():
    with pytest.raises(InvalidEvent):
        AnalyticsEventRow.from_event(AnalyticsEvent(context=_context(), event_type=object()))


def test_roundtrip_through_wire_bytes():
    event = AnalyticsEvent(
        context=_context(user_id="5", client_ts=-3),
        event_type=MessageSentEvent(chat_id="1", type="image", size=4, total_files=1),
    )
    decoded = AnalyticsEvent.from_bytes(event.to_bytes())
    assert AnalyticsEventRow.from_event(decoded) == AnalyticsEventRow.from_event(event)


def test_to_dict_uses_integer_enums():
    row = AnalyticsEventRow.from_event(
        AnalyticsEvent(context=_context(), event_type=AppExitEvent(exit_code=1))
    )
    data = row.to_dict()
    assert data["event_type"] == int(EventTypeRow.APP_EXIT)
    assert type(data["event_type"]) is int
    assert data["app_exit_code"] == int(AppExitCode.SUCCESS)
    assert data["client_id"] == "client-1"


def test_error_responses():
    assert MissingEventType().to_response() == (400, {"error": "Missing event type"})
    assert MissingEventContext().to_response() == (400, {"error": "Missing event context"})
    assert InvalidEvent().to_response() == (400, {"error": "invalid event"})
    status, body = CreateAnalyticsEventError("bad").to_response()
    assert status == 400
    assert body == {"error": "create analytics event error bad"}