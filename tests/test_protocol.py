"""Pure transition tests for the live-channel state machine and message parsing."""

import pytest

from livetimers.core.errors import ProtocolViolation
from livetimers.realtime.protocol import (
    AUTH_FAILED_REASON,
    POLICY_VIOLATION,
    AuthResolved,
    Close,
    ConnectionState,
    CreateTimer,
    Disconnected,
    Phase,
    PushSnapshot,
    Register,
    ResolveToken,
    StopTimer,
    Unregister,
    handle,
)
from livetimers.schemas.messages import (
    AuthenticateMessage,
    CreateTimerMessage,
    StopTimerMessage,
    parse_client_message,
)

AUTHED = ConnectionState(phase=Phase.AUTHENTICATED, user_id="u1")


def test_authenticate_requests_token_lookup():
    state, effects = handle(ConnectionState(), AuthenticateMessage(type="authenticate", token="tok"))

    assert state.phase is Phase.UNAUTHENTICATED
    assert effects == [ResolveToken("tok")]


def test_missing_token_closes_immediately():
    state, effects = handle(ConnectionState(), AuthenticateMessage(type="authenticate"))

    assert state.phase is Phase.CLOSED
    assert effects == [Close(POLICY_VIOLATION, AUTH_FAILED_REASON)]


def test_successful_lookup_registers_and_pushes_snapshot():
    state, effects = handle(ConnectionState(), AuthResolved("u1"))

    assert state == AUTHED
    assert effects == [Register("u1"), PushSnapshot("u1")]


def test_failed_lookup_closes_with_policy_violation():
    state, effects = handle(ConnectionState(), AuthResolved(None))

    assert state.phase is Phase.CLOSED
    assert effects == [Close(1008, "Authentication failed")]


@pytest.mark.parametrize(
    "message",
    [
        CreateTimerMessage(type="create_timer", description="early"),
        StopTimerMessage(type="stop_timer", timerId="t1"),
    ],
)
def test_mutations_before_authentication_are_ignored(message):
    state, effects = handle(ConnectionState(), message)

    assert state == ConnectionState()
    assert effects == []


def test_create_timer_inserts_then_pushes():
    state, effects = handle(AUTHED, CreateTimerMessage(type="create_timer", description="write report"))

    assert state == AUTHED
    assert effects == [CreateTimer("u1", "write report"), PushSnapshot("u1")]


def test_blank_description_is_ignored():
    _, effects = handle(AUTHED, CreateTimerMessage(type="create_timer", description="   "))

    assert effects == []


def test_stop_timer_stops_then_pushes():
    _, effects = handle(AUTHED, StopTimerMessage(type="stop_timer", timerId="t1"))

    assert effects == [StopTimer("u1", "t1"), PushSnapshot("u1")]


def test_reauthentication_is_ignored():
    state, effects = handle(AUTHED, AuthenticateMessage(type="authenticate", token="other"))

    assert state == AUTHED
    assert effects == []


def test_disconnect_after_authentication_unregisters():
    state, effects = handle(AUTHED, Disconnected())

    assert state.phase is Phase.CLOSED
    assert effects == [Unregister("u1")]


def test_disconnect_before_authentication_has_no_effects():
    state, effects = handle(ConnectionState(), Disconnected())

    assert state.phase is Phase.CLOSED
    assert effects == []


def test_closed_is_terminal():
    closed = ConnectionState(phase=Phase.CLOSED, user_id="u1")

    for event in (
        AuthResolved("u1"),
        AuthenticateMessage(type="authenticate", token="tok"),
        CreateTimerMessage(type="create_timer", description="x"),
        Disconnected(),
    ):
        assert handle(closed, event) == (closed, [])


def test_parse_known_messages():
    assert parse_client_message('{"type":"authenticate","token":"abc"}') == AuthenticateMessage(
        type="authenticate", token="abc"
    )
    created = parse_client_message('{"type":"create_timer","description":"  write report  "}')
    assert created.description == "write report"
    stopped = parse_client_message(b'{"type":"stop_timer","timerId":"t-9"}')
    assert stopped.timer_id == "t-9"


def test_null_token_parses_as_missing():
    message = parse_client_message('{"type":"authenticate","token":null}')
    assert message.token is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "{",
        "[]",
        '{"type":"dance"}',
        '{"description":"no type"}',
        '{"type":"stop_timer"}',
        '{"type":"stop_timer","timerId":""}',
    ],
)
def test_malformed_frames_are_protocol_violations(raw):
    with pytest.raises(ProtocolViolation):
        parse_client_message(raw)
