from __future__ import annotations

import pytest

from itas_realtime.application.exceptions import InvalidTransitionError
from itas_realtime.domain.state_machine import ConnectionStateMachine
from itas_realtime.domain.value_objects.enums import ChannelTrigger as T
from itas_realtime.domain.value_objects.enums import ConnectionState as S


def _machine_in(state: S) -> ConnectionStateMachine:
    machine = ConnectionStateMachine()
    if state is S.CONNECTING:
        machine.apply(T.CONNECT)
    elif state is S.OPEN:
        machine.apply(T.CONNECT)
        machine.apply(T.TRANSPORT_OPEN)
    return machine


@pytest.mark.parametrize(
    ("start", "trigger", "expected"),
    [
        (S.CLOSED, T.CONNECT, S.CONNECTING),
        (S.CONNECTING, T.TRANSPORT_OPEN, S.OPEN),
        (S.CONNECTING, T.TRANSPORT_ERROR, S.CONNECTING),
        (S.OPEN, T.TRANSPORT_CLOSE, S.CLOSED),
        (S.CONNECTING, T.TRANSPORT_CLOSE, S.CLOSED),
        (S.OPEN, T.DISCONNECT, S.CLOSED),
        (S.CONNECTING, T.DISCONNECT, S.CLOSED),
        (S.OPEN, T.CONNECT, S.OPEN),
    ],
)
def test_legal_transitions(start, trigger, expected):
    machine = _machine_in(start)

    transition = machine.apply(trigger)

    assert machine.state is expected
    assert transition.previous is start
    assert transition.current is expected
    assert transition.changed is (start is not expected)


@pytest.mark.parametrize(
    ("start", "trigger"),
    [
        (S.CLOSED, T.TRANSPORT_OPEN),
        (S.CLOSED, T.TRANSPORT_CLOSE),
        (S.CLOSED, T.TRANSPORT_ERROR),
        (S.OPEN, T.TRANSPORT_OPEN),
    ],
)
def test_illegal_transitions_raise(start, trigger):
    machine = _machine_in(start)

    assert machine.can_apply(trigger) is False
    with pytest.raises(InvalidTransitionError):
        machine.apply(trigger)
    assert machine.state is start


def test_disconnect_when_closed_is_noop():
    machine = ConnectionStateMachine()

    assert machine.apply(T.DISCONNECT).changed is False


def test_attempt_resets_on_open_only():
    machine = ConnectionStateMachine()
    machine.apply(T.CONNECT)
    machine.next_attempt()
    machine.next_attempt()
    machine.apply(T.TRANSPORT_CLOSE)
    assert machine.attempt == 2

    machine.apply(T.CONNECT)
    assert machine.attempt == 2

    machine.apply(T.TRANSPORT_OPEN)
    assert machine.attempt == 0
