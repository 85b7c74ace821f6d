from __future__ import annotations

import reprlib
from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple, Union

if TYPE_CHECKING:
    from .registry import MessageDirection
    from .shapes import Shape


_value_repr = reprlib.Repr()
_value_repr.maxstring = 80
_value_repr.maxother = 80


class LspContractError(Exception):
    pass


class ShapeDefinitionError(LspContractError, TypeError):
    """
    A catalog type cannot be expressed as a wire shape (unsupported annotation or infinite recursion).
    """


class InvalidDescriptorError(LspContractError, ValueError):
    pass


class DuplicateMethodError(LspContractError):
    __name: str

    def __init__(self, name: str):
        super().__init__(f"Method '{name}' is already registered")
        self.__name = name

    @property
    def name(self) -> str:
        return self.__name


class MethodNotFoundError(LspContractError, KeyError):
    __name: str

    def __init__(self, name: str):
        super().__init__(f"Method '{name}' is not registered")
        self.__name = name

    def __str__(self) -> str:
        return self.args[0]

    @property
    def name(self) -> str:
        return self.__name


class WrongDirectionError(LspContractError):
    __name: str
    __direction: MessageDirection

    def __init__(self, name: str, direction: MessageDirection):
        super().__init__(f"Method '{name}' is a {direction.value}")
        self.__name = name
        self.__direction = direction

    @property
    def name(self) -> str:
        return self.__name

    @property
    def direction(self) -> MessageDirection:
        return self.__direction


class RegistryFrozenError(LspContractError, RuntimeError):
    pass


class InvalidTransitionError(LspContractError, RuntimeError):
    pass


class ShapeError(LspContractError, ValueError):
    """
    A value does not conform to the expected wire shape.
    """

    __expected_shape: Shape
    __actual_value: Any
    __path: Tuple[Union[str, int], ...]
    __reason: str
    __method: Optional[str]

    def __init__(
        self,
        expected_shape: Shape,
        actual_value: Any,
        reason: str,
        path: Sequence[Union[str, int]] = (),
        method: Optional[str] = None,
    ):
        super().__init__(reason)
        self.__expected_shape = expected_shape
        self.__actual_value = actual_value
        self.__reason = reason
        self.__path = tuple(path)
        self.__method = method

    def __str__(self) -> str:
        location = "".join(
            f"[{p}]" if isinstance(p, int) else f".{p}" for p in self.__path
        )
        prefix = f"{self.__method}: " if self.__method is not None else ""
        return (
            f"{prefix}{self.__reason} at ${location}: expected {self.__expected_shape.describe()}, "
            f"got {_value_repr.repr(self.__actual_value)}"
        )

    @property
    def expected_shape(self) -> Shape:
        return self.__expected_shape

    @property
    def actual_value(self) -> Any:
        return self.__actual_value

    @property
    def path(self) -> Tuple[Union[str, int], ...]:
        return self.__path

    @property
    def reason(self) -> str:
        return self.__reason

    @property
    def method(self) -> Optional[str]:
        return self.__method

    def prefixed(self, *segments: Union[str, int]) -> ShapeError:
        """
        Return a copy of the error located under `segments` of the enclosing value.
        """
        return type(self)(
            self.__expected_shape,
            self.__actual_value,
            self.__reason,
            segments + self.__path,
            self.__method,
        )

    def for_method(self, method: str) -> ShapeError:
        return type(self)(
            self.__expected_shape,
            self.__actual_value,
            self.__reason,
            self.__path,
            method,
        )


class ProtocolViolationError(ShapeError):
    """
    A reply that matches neither or both of the result and error shapes of its request.
    """


class LspError(LspContractError):
    __code: int
    __message: str
    __data: Any

    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(f"[{code}] {message}")
        self.__code = code
        self.__message = message
        self.__data = data

    @property
    def code(self) -> int:
        return self.__code

    @property
    def message(self) -> str:
        return self.__message

    @property
    def data(self) -> Any:
        return self.__data
