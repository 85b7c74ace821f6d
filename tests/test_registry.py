from typing import List, Optional, Union

import pytest

from lsp_contract.catalogs import STANDARD
from lsp_contract.codec import matches
from lsp_contract.common_structures import (
    Position,
    TextDocumentIdentifier,
    TextDocumentPositionParams,
)
from lsp_contract.exceptions import (
    DuplicateMethodError,
    InvalidDescriptorError,
    MethodNotFoundError,
    ProtocolViolationError,
    RegistryFrozenError,
    ShapeDefinitionError,
    ShapeError,
    WrongDirectionError,
)
from lsp_contract.features.hover import Hover, HoverParams
from lsp_contract.lsp_data_model import LspModel
from lsp_contract.methods import RequestMethodEnum
from lsp_contract.protocol_structures import ResponseError
from lsp_contract.registry import MessageDirection, MethodDescriptor, MethodRegistry
from lsp_contract.shapes import NULL, STRING, shape_for

HOVER = RequestMethodEnum.HOVER
HOVER_PARAMS = {
    "textDocument": {"uri": "file:///a.txt"},
    "position": {"line": 3, "character": 7},
}


class Ping(LspModel):
    message: str


class Pong(LspModel):
    message: str
    count: int


class Loose(LspModel):
    a: Optional[int] = None


class AlsoLoose(LspModel):
    b: Optional[int] = None


class InfiniteNode(LspModel):
    name: str
    next: "InfiniteNode"


def _registry() -> MethodRegistry:
    registry = MethodRegistry("test", "1.0")
    registry.request("ping", Ping, Pong)
    registry.notification("note", Ping)
    return registry


def test_register_and_lookup():
    registry = _registry()
    assert registry.name == "test"
    assert registry.version == "1.0"
    assert len(registry) == 2
    assert [d.name for d in registry] == ["ping", "note"]

    assert "ping" in registry
    assert "missing" not in registry
    assert 42 not in registry

    assert registry["ping"].is_request
    assert registry["ping"].result == shape_for(Pong)
    assert registry["ping"].error == shape_for(ResponseError)
    assert registry["note"].direction == MessageDirection.NOTIFICATION
    assert registry["note"].result is None
    assert registry.lookup("missing") is None

    with pytest.raises(MethodNotFoundError) as e:
        registry["missing"]
    assert e.value.name == "missing"
    with pytest.raises(KeyError):
        registry["missing"]


def test_enum_names():
    assert HOVER in STANDARD
    assert STANDARD[HOVER] is STANDARD["textDocument/hover"]


def test_duplicate_method():
    registry = _registry()
    with pytest.raises(DuplicateMethodError) as e:
        registry.notification("ping", Ping)
    assert e.value.name == "ping"
    assert registry["ping"].is_request


def test_frozen_registry():
    registry = _registry()
    assert not registry.frozen
    assert registry.freeze() is registry
    assert registry.frozen

    with pytest.raises(RegistryFrozenError):
        registry.notification("other", Ping)
    assert len(registry) == 2

    assert STANDARD.frozen


def test_descriptor_invariants():
    with pytest.raises(InvalidDescriptorError):
        MethodDescriptor("", MessageDirection.NOTIFICATION, NULL)
    with pytest.raises(InvalidDescriptorError):
        MethodDescriptor("x", MessageDirection.REQUEST, NULL, STRING)
    with pytest.raises(InvalidDescriptorError):
        MethodDescriptor("x", MessageDirection.REQUEST, NULL, error=STRING)
    with pytest.raises(InvalidDescriptorError):
        MethodDescriptor("x", MessageDirection.NOTIFICATION, NULL, STRING)

    descriptor = MethodDescriptor("x", MessageDirection.REQUEST, NULL, NULL, STRING)
    assert descriptor.is_request


def test_recursive_shape_rejected():
    registry = MethodRegistry("test", "1.0")
    with pytest.raises(ShapeDefinitionError):
        registry.notification("loop", InfiniteNode)
    assert "loop" not in registry


def test_build_request():
    params = HoverParams(
        text_document=TextDocumentIdentifier(uri="file:///a.txt"),
        position=Position(line=3, character=7),
    )
    envelope = STANDARD.build_request(HOVER, params)
    assert envelope.method == "textDocument/hover"
    assert envelope.params is params
    assert envelope.payload == HOVER_PARAMS
    assert matches(envelope.payload, shape_for(TextDocumentPositionParams))
    assert envelope.to_message(1) == {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "textDocument/hover",
        "params": HOVER_PARAMS,
    }

    from_wire = STANDARD.build_request("textDocument/hover", HOVER_PARAMS)
    assert isinstance(from_wire.params, HoverParams)
    assert from_wire.params == params
    assert from_wire.payload == HOVER_PARAMS


def test_build_request_without_params():
    envelope = STANDARD.build_request(RequestMethodEnum.SHUTDOWN)
    assert envelope.params is None
    assert envelope.to_message("abc") == {
        "jsonrpc": "2.0",
        "id": "abc",
        "method": "shutdown",
    }


def test_build_request_nonconforming():
    with pytest.raises(ShapeError) as e:
        STANDARD.build_request(HOVER, {"textDocument": {"uri": "file:///a.txt"}})
    assert e.value.method == "textDocument/hover"
    assert "position" in e.value.reason
    assert str(e.value).startswith("textDocument/hover: ")

    with pytest.raises(ShapeError) as e:
        STANDARD.build_request(
            HOVER, {**HOVER_PARAMS, "position": {"line": -1, "character": 0}}
        )
    assert e.value.path == ("position", "line")

    with pytest.raises(ShapeError):
        STANDARD.build_request(RequestMethodEnum.SHUTDOWN, {"unexpected": True})


def test_wrong_direction():
    with pytest.raises(WrongDirectionError) as e:
        STANDARD.build_request(RequestMethodEnum.EXIT)
    assert e.value.direction == MessageDirection.NOTIFICATION

    with pytest.raises(WrongDirectionError):
        STANDARD.build_notification(HOVER, HOVER_PARAMS)
    with pytest.raises(WrongDirectionError):
        STANDARD.build_reply(RequestMethodEnum.EXIT)
    with pytest.raises(MethodNotFoundError):
        STANDARD.build_request("textDocument/rename", {})


def test_build_notification():
    envelope = STANDARD.build_notification(RequestMethodEnum.EXIT)
    assert envelope.to_message() == {"jsonrpc": "2.0", "method": "exit"}

    envelope = STANDARD.build_notification(
        RequestMethodEnum.WINDOW_LOG_MESSAGE, {"type": 3, "message": "hello"}
    )
    assert envelope.to_message() == {
        "jsonrpc": "2.0",
        "method": "window/logMessage",
        "params": {"type": 3, "message": "hello"},
    }


def test_decode_params():
    params = STANDARD.decode_params(HOVER, HOVER_PARAMS)
    assert isinstance(params, HoverParams)
    assert params.position == Position(line=3, character=7)

    with pytest.raises(ShapeError) as e:
        STANDARD.decode_params(HOVER, {})
    assert e.value.method == "textDocument/hover"


def test_build_reply():
    reply = STANDARD.build_reply(HOVER, Hover(contents="some text"))
    assert not reply.failed
    assert reply.to_message(7) == {
        "jsonrpc": "2.0",
        "id": 7,
        "result": {"contents": "some text"},
    }

    reply = STANDARD.build_reply(HOVER, None)
    assert reply.to_message(7) == {"jsonrpc": "2.0", "id": 7, "result": None}

    reply = STANDARD.build_reply(
        HOVER, error=ResponseError(code=-32603, message="internal")
    )
    assert reply.failed
    assert reply.to_message(7) == {
        "jsonrpc": "2.0",
        "id": 7,
        "error": {"code": -32603, "message": "internal"},
    }

    with pytest.raises(ShapeError):
        STANDARD.build_reply(HOVER, Ping(message="x"))


def test_accept_result():
    reply = STANDARD.accept_result(HOVER, {"contents": "some text"})
    assert not reply.failed
    assert reply.result == Hover(contents="some text")

    reply = STANDARD.accept_result(HOVER, None)
    assert not reply.failed
    assert reply.result is None

    reply = STANDARD.accept_result(HOVER, {"code": -32600, "message": "bad"})
    assert reply.failed
    assert reply.error.code == -32600

    with pytest.raises(ProtocolViolationError) as e:
        STANDARD.accept_result(HOVER, {"contents": 42})
    assert isinstance(e.value, ShapeError)
    assert e.value.method == "textDocument/hover"
    assert "neither" in e.value.reason


def test_accept_result_matching_both():
    registry = MethodRegistry("test", "1.0")
    registry.request("loose", None, Loose)

    with pytest.raises(ProtocolViolationError) as e:
        registry.accept_result("loose", {"code": 1, "message": "x"})
    assert "both" in e.value.reason


def test_accept_response():
    reply = STANDARD.accept_response(
        HOVER, {"jsonrpc": "2.0", "id": 1, "result": {"contents": "x"}}
    )
    assert reply.result == Hover(contents="x")

    reply = STANDARD.accept_response(
        HOVER,
        {"jsonrpc": "2.0", "id": 1, "error": {"code": -32800, "message": "cancelled"}},
    )
    assert reply.failed
    assert reply.error == ResponseError(code=-32800, message="cancelled")

    with pytest.raises(ProtocolViolationError):
        STANDARD.accept_response(
            HOVER,
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": None,
                "error": {"code": 1, "message": "x"},
            },
        )
    with pytest.raises(ProtocolViolationError):
        STANDARD.accept_response(HOVER, {"jsonrpc": "2.0", "id": 1})

    with pytest.raises(ShapeError) as e:
        STANDARD.accept_response(
            HOVER, {"jsonrpc": "2.0", "id": 1, "error": {"code": "x", "message": "m"}}
        )
    assert e.value.path == ("error", "code")


def test_find_ambiguities():
    registry = MethodRegistry("test", "1.0")
    registry.request("ping", Ping, Pong)
    registry.notification("either", Union[Loose, AlsoLoose])
    registry.notification("lists", Union[List[int], List[str]])
    registry.request("overlap", None, Loose)

    ambiguities = registry.find_ambiguities()
    found = {(a.method, a.reason) for a in ambiguities}
    assert found == {
        ("either", "union alternatives overlap"),
        ("lists", "union alternatives overlap"),
        ("overlap", "result and error shapes overlap"),
    }
    assert len(ambiguities) == 3
    assert str(ambiguities[0]).startswith("either: union alternatives overlap")
