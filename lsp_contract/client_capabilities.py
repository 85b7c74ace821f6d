from typing import Any, List, Optional

from .common_structures import (
    DocumentUri,
    TraceValue,
    WorkDoneProgressParams,
    WorkspaceFolder,
)
from .document_sync import TextDocumentSyncClientCapabilities
from .features.completion import CompletionClientCapabilities
from .features.definition import DefinitionClientCapabilities
from .features.diagnostic import PublishDiagnosticsClientCapabilities
from .features.formatting import DocumentFormattingClientCapabilities
from .features.hover import HoverClientCapabilities
from .features.references import ReferenceClientCapabilities
from .lsp_data_model import LspModel, Nullable
from .server_capabilities import PositionEncodingKind


class TextDocumentClientCapabilities(LspModel):
    synchronization: Optional[TextDocumentSyncClientCapabilities] = None
    completion: Optional[CompletionClientCapabilities] = None
    hover: Optional[HoverClientCapabilities] = None
    definition: Optional[DefinitionClientCapabilities] = None
    references: Optional[ReferenceClientCapabilities] = None
    formatting: Optional[DocumentFormattingClientCapabilities] = None
    range_formatting: Optional[DocumentFormattingClientCapabilities] = None
    publish_diagnostics: Optional[PublishDiagnosticsClientCapabilities] = None


class ClientCapabilitiesWindow(LspModel):
    work_done_progress: Optional[bool] = None


class ClientCapabilitiesGeneral(LspModel):
    position_encodings: Optional[List[PositionEncodingKind]] = None
    """
    The position encodings supported by the client, in decreasing order of preference.
    If omitted it defaults to `['utf-16']`.
    """


class ClientCapabilities(LspModel):
    text_document: Optional[TextDocumentClientCapabilities] = None
    window: Optional[ClientCapabilitiesWindow] = None
    general: Optional[ClientCapabilitiesGeneral] = None
    experimental: Optional[Any] = None


class InitializeParamsClientInfo(LspModel):
    name: str
    version: Optional[str] = None


class InitializeParams(WorkDoneProgressParams):
    process_id: Optional[int]
    """
    The process Id of the parent process that started the server. Is null if
    the process has not been started by another process.
    """
    client_info: Optional[InitializeParamsClientInfo] = None
    locale: Optional[str] = None
    root_uri: Optional[DocumentUri]
    """
    The rootUri of the workspace. Is null if no folder is open.
    """
    initialization_options: Optional[Any] = None
    """
    User provided initialization options.
    """
    capabilities: ClientCapabilities
    trace: Optional[TraceValue] = None
    workspace_folders: Nullable[List[WorkspaceFolder]] = None
    """
    The workspace folders configured in the client when the server starts.
    `null` if the client supports workspace folders but none are configured.
    """
