"""
Method registry binding every protocol method name to its direction and to the
wire shapes of its parameters, result and error payload.

A registry is populated once and then frozen. Envelopes built through a
registry are guaranteed to carry payloads conforming to the shapes of the
method they were built for.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from pydantic import BaseModel

from .codec import decode, encode
from .core import get_logger
from .exceptions import (
    DuplicateMethodError,
    InvalidDescriptorError,
    MethodNotFoundError,
    ProtocolViolationError,
    RegistryFrozenError,
    ShapeError,
    WrongDirectionError,
)
from .protocol_structures import JSONRPC_VERSION, ResponseError
from .shapes import (
    Shape,
    UnionShape,
    check_acyclic,
    find_ambiguous_unions,
    may_overlap,
    shape_for,
)
from .utils.enums import StrEnum

logger = get_logger(__name__)


class MessageDirection(StrEnum):
    REQUEST = "request"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    direction: MessageDirection
    params: Shape
    result: Optional[Shape] = None
    error: Optional[Shape] = None

    def __post_init__(self):
        if len(self.name) == 0:
            raise InvalidDescriptorError("Method name must not be empty")
        if self.direction == MessageDirection.REQUEST:
            if self.result is None or self.error is None:
                raise InvalidDescriptorError(
                    f"Request '{self.name}' must declare both a result and an error shape"
                )
        elif self.result is not None or self.error is not None:
            raise InvalidDescriptorError(
                f"Notification '{self.name}' must not declare a result or an error shape"
            )

    @property
    def is_request(self) -> bool:
        return self.direction == MessageDirection.REQUEST


@dataclass(frozen=True)
class RequestEnvelope:
    descriptor: MethodDescriptor
    params: Any
    """
    Typed parameters.
    """
    payload: Any
    """
    Wire representation of `params`.
    """

    @property
    def method(self) -> str:
        return self.descriptor.name

    def to_message(self, id: Union[int, str]) -> Dict[str, Any]:
        message = {"jsonrpc": JSONRPC_VERSION, "id": id, "method": self.method}
        if self.payload is not None:
            message["params"] = self.payload
        return message


@dataclass(frozen=True)
class NotificationEnvelope:
    descriptor: MethodDescriptor
    params: Any
    payload: Any

    @property
    def method(self) -> str:
        return self.descriptor.name

    def to_message(self) -> Dict[str, Any]:
        message = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.payload is not None:
            message["params"] = self.payload
        return message


@dataclass(frozen=True)
class ReplyEnvelope:
    descriptor: MethodDescriptor
    result: Any = None
    error: Any = None
    payload: Any = field(default=None, compare=False)
    """
    Wire representation of either `result` or `error`.
    """

    @property
    def method(self) -> str:
        return self.descriptor.name

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_message(self, id: Optional[Union[int, str]]) -> Dict[str, Any]:
        message: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": id}
        if self.failed:
            message["error"] = self.payload
        else:
            message["result"] = self.payload
        return message


@dataclass(frozen=True)
class Ambiguity:
    method: str
    shape: Shape
    reason: str

    def __str__(self) -> str:
        return f"{self.method}: {self.reason} ({self.shape.describe()})"


def _method_name(name: Union[str, enum.Enum]) -> str:
    if isinstance(name, enum.Enum):
        return str(name.value)
    return name


def _is_typed(value: Any) -> bool:
    if isinstance(value, BaseModel):
        return True
    if isinstance(value, (list, tuple)):
        return any(_is_typed(v) for v in value)
    return False


class MethodRegistry:
    __name: str
    __version: str
    __methods: Dict[str, MethodDescriptor]
    __frozen: bool

    def __init__(self, name: str, version: str):
        self.__name = name
        self.__version = version
        self.__methods = {}
        self.__frozen = False

    def __repr__(self) -> str:
        return f"MethodRegistry({self.__name!r}, {self.__version!r}, methods={len(self.__methods)})"

    def __len__(self) -> int:
        return len(self.__methods)

    def __iter__(self) -> Iterator[MethodDescriptor]:
        return iter(self.__methods.values())

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, enum.Enum)):
            return False
        return _method_name(name) in self.__methods

    def __getitem__(self, name: Union[str, enum.Enum]) -> MethodDescriptor:
        descriptor = self.lookup(name)
        if descriptor is None:
            raise MethodNotFoundError(_method_name(name))
        return descriptor

    @property
    def name(self) -> str:
        return self.__name

    @property
    def version(self) -> str:
        return self.__version

    @property
    def frozen(self) -> bool:
        return self.__frozen

    def register(self, descriptor: MethodDescriptor) -> MethodDescriptor:
        if self.__frozen:
            raise RegistryFrozenError(
                f"Cannot register '{descriptor.name}', registry {self.__name} is frozen"
            )
        if descriptor.name in self.__methods:
            raise DuplicateMethodError(descriptor.name)

        for shape in (descriptor.params, descriptor.result, descriptor.error):
            if shape is not None:
                check_acyclic(shape)
        self.__methods[descriptor.name] = descriptor
        return descriptor

    def request(
        self,
        name: Union[str, enum.Enum],
        params: Any,
        result: Any,
        error: Any = ResponseError,
    ) -> MethodDescriptor:
        return self.register(
            MethodDescriptor(
                _method_name(name),
                MessageDirection.REQUEST,
                shape_for(params),
                shape_for(result),
                shape_for(error),
            )
        )

    def notification(
        self, name: Union[str, enum.Enum], params: Any
    ) -> MethodDescriptor:
        return self.register(
            MethodDescriptor(
                _method_name(name), MessageDirection.NOTIFICATION, shape_for(params)
            )
        )

    def freeze(self) -> MethodRegistry:
        self.__frozen = True
        return self

    def lookup(self, name: Union[str, enum.Enum]) -> Optional[MethodDescriptor]:
        return self.__methods.get(_method_name(name))

    def _expect(
        self, name: Union[str, enum.Enum], direction: MessageDirection
    ) -> MethodDescriptor:
        descriptor = self[name]
        if descriptor.direction != direction:
            raise WrongDirectionError(descriptor.name, descriptor.direction)
        return descriptor

    @staticmethod
    def _conform(descriptor: MethodDescriptor, params: Any):
        try:
            if _is_typed(params):
                return params, encode(params, descriptor.params)
            value = decode(params, descriptor.params)
            return value, encode(value, descriptor.params)
        except ShapeError as e:
            raise e.for_method(descriptor.name) from None

    def build_request(
        self, name: Union[str, enum.Enum], params: Any = None
    ) -> RequestEnvelope:
        """
        Build a request envelope. `params` may be a typed value or its wire representation.

        Raises:
            MethodNotFoundError: if the method is not registered.
            WrongDirectionError: if the method is a notification.
            ShapeError: if `params` do not conform to the parameter shape of the method.
        """
        descriptor = self._expect(name, MessageDirection.REQUEST)
        value, payload = self._conform(descriptor, params)
        logger.debug(f"Built {descriptor.name} request")
        return RequestEnvelope(descriptor, value, payload)

    def build_notification(
        self, name: Union[str, enum.Enum], params: Any = None
    ) -> NotificationEnvelope:
        descriptor = self._expect(name, MessageDirection.NOTIFICATION)
        value, payload = self._conform(descriptor, params)
        logger.debug(f"Built {descriptor.name} notification")
        return NotificationEnvelope(descriptor, value, payload)

    def decode_params(self, name: Union[str, enum.Enum], wire: Any) -> Any:
        """
        Decode the wire parameters of an incoming request or notification.
        """
        descriptor = self[name]
        try:
            return decode(wire, descriptor.params)
        except ShapeError as e:
            raise e.for_method(descriptor.name) from None

    def build_reply(
        self, name: Union[str, enum.Enum], result: Any = None, *, error: Any = None
    ) -> ReplyEnvelope:
        """
        Build the reply to an incoming request, either successful (`result`) or failed (`error`).
        """
        descriptor = self._expect(name, MessageDirection.REQUEST)
        assert descriptor.result is not None and descriptor.error is not None
        try:
            if error is not None:
                return ReplyEnvelope(
                    descriptor, None, error, encode(error, descriptor.error)
                )
            return ReplyEnvelope(
                descriptor, result, None, encode(result, descriptor.result)
            )
        except ShapeError as e:
            raise e.for_method(descriptor.name) from None

    def accept_result(self, name: Union[str, enum.Enum], wire: Any) -> ReplyEnvelope:
        """
        Decode a reply payload that must conform to exactly one of the result and the error shape.

        Raises:
            ProtocolViolationError: if the payload conforms to neither or to both shapes.
        """
        descriptor = self._expect(name, MessageDirection.REQUEST)
        assert descriptor.result is not None and descriptor.error is not None

        result_failure: Optional[ShapeError] = None
        error_failure: Optional[ShapeError] = None
        try:
            result = decode(wire, descriptor.result)
        except ShapeError as e:
            result_failure = e
        try:
            error = decode(wire, descriptor.error)
        except ShapeError as e:
            error_failure = e

        if result_failure is None and error_failure is None:
            raise ProtocolViolationError(
                UnionShape((descriptor.result, descriptor.error)),
                wire,
                "reply matches both the result and the error shape",
                method=descriptor.name,
            )
        if result_failure is not None and error_failure is not None:
            raise ProtocolViolationError(
                result_failure.expected_shape,
                result_failure.actual_value,
                f"reply matches neither the result nor the error shape ({result_failure.reason})",
                result_failure.path,
                descriptor.name,
            )
        if result_failure is None:
            return ReplyEnvelope(descriptor, result, None, wire)
        return ReplyEnvelope(descriptor, None, error, wire)

    def accept_response(
        self, name: Union[str, enum.Enum], message: Dict[str, Any]
    ) -> ReplyEnvelope:
        """
        Decode a complete JSON-RPC response object to a request of method `name`.
        """
        descriptor = self._expect(name, MessageDirection.REQUEST)
        assert descriptor.result is not None and descriptor.error is not None

        if not isinstance(message, dict):
            raise ProtocolViolationError(
                UnionShape((descriptor.result, descriptor.error)),
                message,
                "response is not an object",
                method=descriptor.name,
            )
        has_result = "result" in message
        has_error = "error" in message
        if has_result == has_error:
            raise ProtocolViolationError(
                UnionShape((descriptor.result, descriptor.error)),
                message,
                "response must carry exactly one of 'result' and 'error'",
                method=descriptor.name,
            )

        try:
            if has_error:
                error = decode(message["error"], descriptor.error)
                return ReplyEnvelope(descriptor, None, error, message["error"])
            result = decode(message["result"], descriptor.result)
            return ReplyEnvelope(descriptor, result, None, message["result"])
        except ShapeError as e:
            raise e.prefixed("error" if has_error else "result").for_method(
                descriptor.name
            ) from None

    def find_ambiguities(self) -> List[Ambiguity]:
        """
        Report every union whose alternatives may overlap and every request whose result shape
        may overlap its error shape.
        """
        ambiguities = []
        for descriptor in self.__methods.values():
            reported = set()
            for shape in (descriptor.params, descriptor.result, descriptor.error):
                if shape is None:
                    continue
                for union in find_ambiguous_unions(shape):
                    if union in reported:
                        continue
                    reported.add(union)
                    ambiguities.append(
                        Ambiguity(descriptor.name, union, "union alternatives overlap")
                    )

            if (
                descriptor.result is not None
                and descriptor.error is not None
                and may_overlap(descriptor.result, descriptor.error)
            ):
                ambiguities.append(
                    Ambiguity(
                        descriptor.name,
                        UnionShape((descriptor.result, descriptor.error)),
                        "result and error shapes overlap",
                    )
                )
        return ambiguities
