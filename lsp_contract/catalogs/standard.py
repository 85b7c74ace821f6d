"""
Standard catalog, a subset of the Language Server Protocol 3.17.
"""
from typing import List, Optional

from ..client_capabilities import InitializeParams
from ..common_structures import (
    InitializedParams,
    InitializeResponseError,
    Location,
    LogMessageParams,
    SetTraceParams,
    ShowMessageParams,
    TextEdit,
)
from ..document_sync import (
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
)
from ..features.completion import CompletionItem, CompletionParams, CompletionResult
from ..features.definition import Definition, DefinitionParams
from ..features.diagnostic import PublishDiagnosticsParams
from ..features.formatting import (
    DocumentFormattingParams,
    DocumentRangeFormattingParams,
)
from ..features.hover import Hover, HoverParams
from ..features.references import ReferenceParams
from ..methods import RequestMethodEnum
from ..protocol_structures import CancelParams
from ..registry import MethodRegistry
from ..server_capabilities import InitializeResult

NAME = "standard"
VERSION = "3.17"


def build_registry() -> MethodRegistry:
    registry = MethodRegistry(NAME, VERSION)

    # General
    registry.request(
        RequestMethodEnum.INITIALIZE,
        InitializeParams,
        InitializeResult,
        InitializeResponseError,
    )
    registry.notification(RequestMethodEnum.INITIALIZED, InitializedParams)
    registry.request(RequestMethodEnum.SHUTDOWN, None, None)
    registry.notification(RequestMethodEnum.EXIT, None)
    registry.notification(RequestMethodEnum.CANCEL_REQUEST, CancelParams)
    registry.notification(RequestMethodEnum.SET_TRACE, SetTraceParams)

    # Window
    registry.notification(RequestMethodEnum.WINDOW_LOG_MESSAGE, LogMessageParams)
    registry.notification(RequestMethodEnum.WINDOW_SHOW_MESSAGE, ShowMessageParams)

    # Text Synchronization
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

    # Language Features
    registry.notification(
        RequestMethodEnum.PUBLISH_DIAGNOSTICS, PublishDiagnosticsParams
    )
    registry.request(RequestMethodEnum.HOVER, HoverParams, Optional[Hover])
    registry.request(
        RequestMethodEnum.DEFINITION, DefinitionParams, Optional[Definition]
    )
    registry.request(
        RequestMethodEnum.REFERENCES, ReferenceParams, Optional[List[Location]]
    )
    registry.request(
        RequestMethodEnum.COMPLETION, CompletionParams, Optional[CompletionResult]
    )
    registry.request(
        RequestMethodEnum.COMPLETION_ITEM_RESOLVE, CompletionItem, CompletionItem
    )
    registry.request(
        RequestMethodEnum.FORMATTING,
        DocumentFormattingParams,
        Optional[List[TextEdit]],
    )
    registry.request(
        RequestMethodEnum.RANGE_FORMATTING,
        DocumentRangeFormattingParams,
        Optional[List[TextEdit]],
    )
    return registry.freeze()


STANDARD = build_registry()
