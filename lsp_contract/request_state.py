from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Union

from .exceptions import InvalidTransitionError
from .methods import RequestMethodEnum
from .registry import (
    MethodRegistry,
    NotificationEnvelope,
    ReplyEnvelope,
    RequestEnvelope,
)
from .utils.enums import StrEnum


class RequestState(StrEnum):
    SENT = "sent"
    AWAITING_REPLY = "awaiting_reply"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class NotificationState(StrEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    """
    Assumed once the message was handed to the transport, a notification is never acknowledged.
    """


_REQUEST_TRANSITIONS: Dict[RequestState, FrozenSet[RequestState]] = {
    RequestState.SENT: frozenset({RequestState.AWAITING_REPLY}),
    RequestState.AWAITING_REPLY: frozenset(
        {RequestState.COMPLETED, RequestState.FAILED, RequestState.CANCELLED}
    ),
    RequestState.COMPLETED: frozenset(),
    RequestState.FAILED: frozenset(),
    RequestState.CANCELLED: frozenset(),
}


class PendingRequest:
    """
    Lifecycle of one outgoing request:
    SENT -> AWAITING_REPLY -> COMPLETED | FAILED | CANCELLED.
    """

    __id: Union[int, str]
    __envelope: RequestEnvelope
    __state: RequestState
    __reply: Optional[ReplyEnvelope]
    __cancellable: bool

    def __init__(
        self,
        id: Union[int, str],
        envelope: RequestEnvelope,
        registry: MethodRegistry,
    ):
        self.__id = id
        self.__envelope = envelope
        self.__state = RequestState.SENT
        self.__reply = None
        self.__cancellable = RequestMethodEnum.CANCEL_REQUEST in registry

    def __repr__(self) -> str:
        return f"PendingRequest({self.__id!r}, {self.__envelope.method!r}, {self.__state.value})"

    @property
    def id(self) -> Union[int, str]:
        return self.__id

    @property
    def envelope(self) -> RequestEnvelope:
        return self.__envelope

    @property
    def state(self) -> RequestState:
        return self.__state

    @property
    def reply(self) -> Optional[ReplyEnvelope]:
        return self.__reply

    @property
    def cancellable(self) -> bool:
        return self.__cancellable

    @property
    def done(self) -> bool:
        return len(_REQUEST_TRANSITIONS[self.__state]) == 0

    def __transition(self, state: RequestState) -> None:
        if state not in _REQUEST_TRANSITIONS[self.__state]:
            raise InvalidTransitionError(
                f"Request {self.__id!r} ({self.__envelope.method}) cannot move from "
                f"{self.__state.value} to {state.value}"
            )
        self.__state = state

    def mark_awaiting(self) -> None:
        self.__transition(RequestState.AWAITING_REPLY)

    def resolve(self, reply: ReplyEnvelope) -> None:
        if reply.descriptor != self.__envelope.descriptor:
            raise InvalidTransitionError(
                f"Reply to {reply.method} cannot resolve request {self.__id!r} ({self.__envelope.method})"
            )
        self.__transition(RequestState.FAILED if reply.failed else RequestState.COMPLETED)
        self.__reply = reply

    def cancel(self) -> None:
        if not self.__cancellable:
            raise InvalidTransitionError(
                f"Request {self.__id!r} cannot be cancelled, "
                f"{RequestMethodEnum.CANCEL_REQUEST.value} is not part of the catalog"
            )
        self.__transition(RequestState.CANCELLED)


class NotificationRecord:
    __envelope: NotificationEnvelope
    __state: NotificationState

    def __init__(self, envelope: NotificationEnvelope):
        self.__envelope = envelope
        self.__state = NotificationState.SENT

    @property
    def envelope(self) -> NotificationEnvelope:
        return self.__envelope

    @property
    def state(self) -> NotificationState:
        return self.__state

    def mark_delivered(self) -> None:
        if self.__state != NotificationState.SENT:
            raise InvalidTransitionError(
                f"Notification {self.__envelope.method} was already delivered"
            )
        self.__state = NotificationState.DELIVERED
