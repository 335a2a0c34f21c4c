"""Connection lifecycle for one logical realtime connection."""
from __future__ import annotations

from dataclasses import dataclass

from itas_realtime.application.exceptions import InvalidTransitionError
from itas_realtime.domain.value_objects.enums import ChannelTrigger, ConnectionState

_S = ConnectionState
_T = ChannelTrigger

_TRANSITIONS: dict[tuple[ConnectionState, ChannelTrigger], ConnectionState] = {
    (_S.CLOSED, _T.CONNECT): _S.CONNECTING,
    (_S.CONNECTING, _T.CONNECT): _S.CONNECTING,
    (_S.OPEN, _T.CONNECT): _S.OPEN,
    (_S.CONNECTING, _T.TRANSPORT_OPEN): _S.OPEN,
    (_S.CONNECTING, _T.TRANSPORT_ERROR): _S.CONNECTING,
    (_S.OPEN, _T.TRANSPORT_ERROR): _S.OPEN,
    (_S.CONNECTING, _T.TRANSPORT_CLOSE): _S.CLOSED,
    (_S.OPEN, _T.TRANSPORT_CLOSE): _S.CLOSED,
    (_S.CONNECTING, _T.DISCONNECT): _S.CLOSED,
    (_S.OPEN, _T.DISCONNECT): _S.CLOSED,
    (_S.CLOSED, _T.DISCONNECT): _S.CLOSED,
}


@dataclass(frozen=True, slots=True)
class Transition:
    previous: ConnectionState
    current: ConnectionState
    trigger: ChannelTrigger

    @property
    def changed(self) -> bool:
        return self.previous != self.current


class ConnectionStateMachine:
    """Single authority over ``state`` and the consecutive-attempt counter."""

    def __init__(self) -> None:
        self._state = ConnectionState.CLOSED
        self._attempt = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempt(self) -> int:
        return self._attempt

    def can_apply(self, trigger: ChannelTrigger) -> bool:
        return (self._state, trigger) in _TRANSITIONS

    def apply(self, trigger: ChannelTrigger) -> Transition:
        try:
            target = _TRANSITIONS[(self._state, trigger)]
        except KeyError:
            raise InvalidTransitionError(
                f"cannot apply {trigger} in state {self._state}"
            ) from None
        transition = Transition(previous=self._state, current=target, trigger=trigger)
        self._state = target
        if transition.changed and target is ConnectionState.OPEN:
            self._attempt = 0
        return transition

    def next_attempt(self) -> int:
        self._attempt += 1
        return self._attempt
