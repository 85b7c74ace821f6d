from typing import Any, Optional, Union

from .document_sync import TextDocumentSyncKind, TextDocumentSyncOptions
from .features.completion import CompletionOptions
from .features.definition import DefinitionOptions
from .features.formatting import (
    DocumentFormattingOptions,
    DocumentRangeFormattingOptions,
)
from .features.hover import HoverOptions
from .features.references import ReferenceOptions
from .lsp_data_model import LspModel
from .utils.enums import StrEnum


class PositionEncodingKind(StrEnum):
    UTF8 = "utf-8"
    UTF16 = "utf-16"
    """
    Character offsets count UTF-16 code units. This is the default and must
    always be supported by servers.
    """
    UTF32 = "utf-32"


class ServerCapabilities(LspModel):
    position_encoding: Optional[PositionEncodingKind] = None
    """
    The position encoding the server picked from the encodings offered
    by the client via the client capability `general.positionEncodings`.
    """
    text_document_sync: Optional[
        Union[TextDocumentSyncOptions, TextDocumentSyncKind]
    ] = None
    completion_provider: Optional[CompletionOptions] = None
    hover_provider: Optional[Union[bool, HoverOptions]] = None
    definition_provider: Optional[Union[bool, DefinitionOptions]] = None
    references_provider: Optional[Union[bool, ReferenceOptions]] = None
    document_formatting_provider: Optional[
        Union[bool, DocumentFormattingOptions]
    ] = None
    document_range_formatting_provider: Optional[
        Union[bool, DocumentRangeFormattingOptions]
    ] = None
    experimental: Optional[Any] = None


class InitializeResultServerInfo(LspModel):
    name: str
    version: Optional[str] = None


class InitializeResult(LspModel):
    capabilities: ServerCapabilities
    """
    The capabilities the language server provides.
    """
    server_info: Optional[InitializeResultServerInfo] = None
