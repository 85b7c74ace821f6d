from enum import IntEnum
from typing import Any, List, NewType, Optional, Union

from pydantic import NonNegativeInt, model_validator

from .lsp_data_model import LspModel
from .protocol_structures import ResponseError
from .utils.enums import StrEnum

DocumentUri = NewType("DocumentUri", str)
URI = NewType("URI", str)
ProgressToken = Union[int, str]


class TraceValue(StrEnum):
    OFF = "off"
    MESSAGES = "messages"
    VERBOSE = "verbose"


class Position(LspModel, frozen=True):
    line: NonNegativeInt
    """
    Line position in a document (zero-based).
    """
    character: NonNegativeInt
    """
    Character offset on a line in a document (zero-based), measured in UTF-16 code units.
    A position is between two characters like an 'insert' cursor in an editor.
    """

    def __lt__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.character) < (other.line, other.character)

    def __le__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.character) <= (other.line, other.character)

    def __gt__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.character) > (other.line, other.character)

    def __ge__(self, other: "Position") -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (self.line, self.character) >= (other.line, other.character)


class Range(LspModel, frozen=True):
    start: Position
    """
    The range's start position.
    """
    end: Position
    """
    The range's end position. Exclusive; a range with `start == end` denotes an insertion point.
    """

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.start > self.end:
            raise ValueError(
                f"Range start ({self.start.line}:{self.start.character}) is after "
                f"its end ({self.end.line}:{self.end.character})"
            )
        return self

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class Location(LspModel, frozen=True):
    """
    Represents a location inside a resource, such as a line inside a text file.
    """

    uri: DocumentUri
    range: Range


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class DiagnosticTag(IntEnum):
    UNNECESSARY = 1
    """
    Unused or unnecessary code
    """
    DEPRECATED = 2
    """
    Deprecated or obsolete code
    """


class DiagnosticRelatedInformation(LspModel):
    location: Location
    """
    The location of this related diagnostic information.
    """
    message: str
    """
    The message of this related diagnostic information.
    """


class CodeDescription(LspModel):
    href: URI
    """
    URI to open with more info.
    """


class Diagnostic(LspModel):
    range: Range
    """
    The range at which the message applies.
    """
    severity: Optional[DiagnosticSeverity] = None
    """
    The diagnostic's severity. If omitted it is up to the client to interpret
    diagnostics as error, warning, info or hint.
    """
    code: Optional[Union[int, str]] = None
    """
    The diagnostic's code.
    """
    code_description: Optional[CodeDescription] = None
    """
    An URI to open with more information about the diagnostic error.
    """
    source: Optional[str] = None
    """
    A human-readable string describing the source of this diagnostic
    """
    message: str
    """
    The diagnostic's message.
    """
    tags: Optional[List[DiagnosticTag]] = None
    """
    Additional metadata about the diagnostic.
    """
    related_information: Optional[List[DiagnosticRelatedInformation]] = None
    """
    An array of related diagnostic information,
    e.g. when symbol-names within a scope collide all definitions can be marked via this property.
    """
    data: Optional[Any] = None
    """
    A data entry field that is preserved between
    a `textDocument/publishDiagnostics` notification and `textDocument/codeAction` request.
    """


class Command(LspModel):
    title: str
    """
    Title of the command, like `save`.
    """
    command: str
    """
    The identifier of the actual command handler.
    """
    arguments: Optional[List[Any]] = None
    """
    Arguments that the command handler should be invoked with.
    """


class TextEdit(LspModel):
    range: Range
    """
    The range of the text document to be manipulated.
    To insert text into a document create a range where start === end.
    """
    new_text: str
    """
    The text to be inserted. For delete operations use an empty string.
    """


class TextDocumentIdentifier(LspModel):
    uri: DocumentUri
    """
    The text document's URI.
    """


class VersionedTextDocumentIdentifier(TextDocumentIdentifier):
    version: int
    """
    The version number of this document.
    The version number of a document will increase after each change,
    including undo/redo. The number doesn't need to be consecutive.
    """


class OptionalVersionedTextDocumentIdentifier(TextDocumentIdentifier):
    version: Optional[int]
    """
    The version number of this document. If an optional versioned text document
    identifier is sent from the server to the client and the file is not
    open in the editor (the server has not received an open notification
    before) the server can send `null` to indicate that the version is
    known and the content on disk is the master (as specified with document
    content ownership).
    """


class TextDocumentItem(VersionedTextDocumentIdentifier):
    language_id: str
    """
    The text document's language identifier.
    """
    text: str
    """
    The content of the opened text document.
    """


class TextDocumentPositionParams(LspModel):
    text_document: TextDocumentIdentifier
    """
    The text document.
    """
    position: Position
    """
    The position inside the text document.
    """


class MarkupKind(StrEnum):
    PLAIN_TEXT = "plaintext"
    MARKDOWN = "markdown"


class MarkupContent(LspModel):
    kind: MarkupKind
    """
    The type of the Markup.
    """
    value: str
    """
    The content itself.
    """


class WorkDoneProgressParams(LspModel):
    work_done_token: Optional[ProgressToken] = None
    """
    An optional token that a server can use to report work done progress.
    """


class WorkDoneProgressOptions(LspModel):
    work_done_progress: Optional[bool] = None


class PartialResultParams(LspModel):
    partial_result_token: Optional[ProgressToken] = None
    """
    An optional token that a server can use to report partial results (e.g. streaming)
    to the client.
    """


# ##################### Lifecycle Message #####################


class InitializeError(LspModel):
    retry: bool
    """
    Indicates whether the client execute the following retry logic:
    (1) show the message provided by the ResponseError to the user
    (2) user selects retry or cancel
    (3) if user selected retry the initialize method is sent again.
    """


class InitializeResponseError(ResponseError):
    data: Optional[InitializeError] = None


class InitializedParams(LspModel):
    pass


class WorkspaceFolder(LspModel):
    uri: DocumentUri
    name: str


class MessageType(IntEnum):
    ERROR = 1
    WARNING = 2
    INFO = 3
    LOG = 4


class ShowMessageParams(LspModel):
    type: MessageType
    message: str


class LogMessageParams(LspModel):
    type: MessageType
    """
    The message type
    """
    message: str
    """
    The actual message
    """


class SetTraceParams(LspModel):
    value: TraceValue
    """
    The new value that should be assigned to the trace setting.
    """
