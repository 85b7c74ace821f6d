from .codec import decode, encode, matches
from .exceptions import (
    DuplicateMethodError,
    InvalidDescriptorError,
    InvalidTransitionError,
    LspContractError,
    LspError,
    MethodNotFoundError,
    ProtocolViolationError,
    RegistryFrozenError,
    ShapeDefinitionError,
    ShapeError,
    WrongDirectionError,
)
from .registry import (
    MessageDirection,
    MethodDescriptor,
    MethodRegistry,
    NotificationEnvelope,
    ReplyEnvelope,
    RequestEnvelope,
)
from .shapes import find_ambiguous_unions, may_overlap, shape_for
