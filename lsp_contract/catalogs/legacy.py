"""
Legacy vendor catalog modelled after the 2.x protocol generation.

Geometry and document identity types are shared with the standard catalog,
completion and hover payloads diverge from it.
"""
import enum
from typing import Any, List, Optional, Union

from ..common_structures import (
    Command,
    InitializeResponseError,
    Location,
    LogMessageParams,
    Range,
    ShowMessageParams,
    TextDocumentPositionParams,
    TextEdit,
)
from ..document_sync import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
)
from ..features.diagnostic import PublishDiagnosticsParams
from ..features.hover import MarkedStringType
from ..features.references import ReferenceParams
from ..lsp_data_model import LspModel
from ..methods import RequestMethodEnum
from ..protocol_structures import CancelParams
from ..registry import MethodRegistry

NAME = "legacy"
VERSION = "2.1"


class LegacyCompletionItemKind(enum.IntEnum):
    TEXT = 1
    METHOD = 2
    FUNCTION = 3
    CONSTRUCTOR = 4
    FIELD = 5
    VARIABLE = 6
    CLASS = 7
    INTERFACE = 8
    MODULE = 9
    PROPERTY = 10
    UNIT = 11
    VALUE = 12
    ENUM = 13
    KEYWORD = 14
    SNIPPET = 15
    COLOR = 16
    FILE = 17
    REFERENCE = 18


class LegacyTextDocumentSyncKind(enum.IntEnum):
    NONE = 0
    FULL = 1
    INCREMENTAL = 2


class LegacyCompletionItem(LspModel):
    label: str
    kind: Optional[LegacyCompletionItemKind] = None
    detail: Optional[str] = None
    documentation: Optional[str] = None
    """
    A human-readable string that represents a doc-comment. Plain text only.
    """
    sort_text: Optional[str] = None
    filter_text: Optional[str] = None
    insert_text: Optional[str] = None
    text_edit: Optional[TextEdit] = None
    additional_text_edits: Optional[List[TextEdit]] = None
    command: Optional[Command] = None
    data: Optional[Any] = None


class LegacyCompletionList(LspModel):
    is_incomplete: bool
    items: List[LegacyCompletionItem]


class LegacyHover(LspModel):
    contents: Union[MarkedStringType, List[MarkedStringType]]
    range: Optional[Range] = None


class LegacyCompletionOptions(LspModel):
    resolve_provider: Optional[bool] = None
    trigger_characters: Optional[List[str]] = None


class LegacyServerCapabilities(LspModel):
    text_document_sync: Optional[LegacyTextDocumentSyncKind] = None
    hover_provider: Optional[bool] = None
    completion_provider: Optional[LegacyCompletionOptions] = None
    definition_provider: Optional[bool] = None
    references_provider: Optional[bool] = None


class LegacyInitializeParams(LspModel):
    process_id: Optional[int]
    root_path: Optional[str]
    """
    The rootPath of the workspace. Is null if no folder is open.
    """
    initialization_options: Optional[Any] = None
    capabilities: Any
    """
    Client capabilities are not interpreted by this protocol generation.
    """


class LegacyInitializeResult(LspModel):
    capabilities: LegacyServerCapabilities


def build_registry() -> MethodRegistry:
    registry = MethodRegistry(NAME, VERSION)

    registry.request(
        RequestMethodEnum.INITIALIZE,
        LegacyInitializeParams,
        LegacyInitializeResult,
        InitializeResponseError,
    )
    registry.request(RequestMethodEnum.SHUTDOWN, None, None)
    registry.notification(RequestMethodEnum.EXIT, None)
    registry.notification(RequestMethodEnum.CANCEL_REQUEST, CancelParams)

    registry.notification(RequestMethodEnum.WINDOW_LOG_MESSAGE, LogMessageParams)
    registry.notification(RequestMethodEnum.WINDOW_SHOW_MESSAGE, ShowMessageParams)

    registry.notification(
        RequestMethodEnum.TEXT_DOCUMENT_DID_OPEN, DidOpenTextDocumentParams
    )
    registry.notification(
        RequestMethodEnum.TEXT_DOCUMENT_DID_CHANGE, DidChangeTextDocumentParams
    )
    registry.notification(
        RequestMethodEnum.TEXT_DOCUMENT_DID_SAVE, DidSaveTextDocumentParams
    )
    registry.notification(
        RequestMethodEnum.TEXT_DOCUMENT_DID_CLOSE, DidCloseTextDocumentParams
    )
    registry.notification(
        RequestMethodEnum.PUBLISH_DIAGNOSTICS, PublishDiagnosticsParams
    )

    registry.request(
        RequestMethodEnum.HOVER, TextDocumentPositionParams, Optional[LegacyHover]
    )
    registry.request(
        RequestMethodEnum.DEFINITION,
        TextDocumentPositionParams,
        Optional[Union[Location, List[Location]]],
    )
    registry.request(
        RequestMethodEnum.REFERENCES, ReferenceParams, Optional[List[Location]]
    )
    registry.request(
        RequestMethodEnum.COMPLETION,
        TextDocumentPositionParams,
        Optional[Union[List[LegacyCompletionItem], LegacyCompletionList]],
    )
    registry.request(
        RequestMethodEnum.COMPLETION_ITEM_RESOLVE,
        LegacyCompletionItem,
        LegacyCompletionItem,
    )
    return registry.freeze()


LEGACY = build_registry()
