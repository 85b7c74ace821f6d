import enum
from typing import Any, List, Optional, Union

from ..common_structures import (
    Command,
    MarkupContent,
    MarkupKind,
    PartialResultParams,
    Range,
    TextDocumentPositionParams,
    TextEdit,
    WorkDoneProgressOptions,
    WorkDoneProgressParams,
)
from ..lsp_data_model import LspModel


class CompletionItemKind(enum.IntEnum):
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
    FOLDER = 19
    ENUM_MEMBER = 20
    CONSTANT = 21
    STRUCT = 22
    EVENT = 23
    OPERATOR = 24
    TYPE_PARAMETER = 25


class CompletionItemTag(enum.IntEnum):
    DEPRECATED = 1
    """
    Render a completion as obsolete, usually using a strike-out.
    """


class InsertTextMode(enum.IntEnum):
    AS_IS = 1
    """
    The insertion or replace strings is taken as it is. If the
    value is multi line the lines below the cursor will be
    inserted using the indentation defined in the string value.
    The client will not apply any kind of adjustments to the
    string.
    """
    ADJUST_INDENTATION = 2
    """
    The editor adjusts leading whitespace of new lines so that
    they match the indentation up to the cursor of the line for
    which the item is accepted.
    """


class InsertTextFormat(enum.IntEnum):
    PLAIN_TEXT = 1
    """
    The primary text to be inserted is treated as a plain string.
    """
    SNIPPET = 2
    """
    The primary text to be inserted is treated as a snippet.
    A snippet can define tab stops and placeholders with `$1`, `$2`
    and `${3:foo}`. `$0` defines the final tab stop, it defaults to
    the end of the snippet. Placeholders with equal identifiers are linked,
    that is typing in one will update others too.
    """


class CompletionTriggerKind(enum.IntEnum):
    INVOKED = 1
    """
    Completion was triggered by typing an identifier (24x7 code
    complete), manual invocation (e.g Ctrl+Space) or via API.
    """
    TRIGGER_CHARACTER = 2
    """
    Completion was triggered by a trigger character specified by
    the `triggerCharacters` properties of the
    `CompletionRegistrationOptions`.
    """
    TRIGGER_FOR_INCOMPLETE_COMPLETIONS = 3
    """
    Completion was re-triggered as the current completion list is incomplete.
    """


#################################################################
# ########## CompletionClientCapabilities subclasses ############


class ClientCapabilitiesCompletionItemTagSupport(LspModel):
    value_set: List[CompletionItemTag]


class ClientCapabilitiesCompletionItemKind(LspModel):
    value_set: Optional[List[CompletionItemKind]] = None
    """
    If this property is not present the client only supports
    the completion items kinds from `Text` to `Reference` as defined in
    the initial version of the protocol.
    """


class ClientCapabilitiesCompletionItem(LspModel):
    snippet_support: Optional[bool] = None
    """
    Client supports snippets as insert text.
    """
    commit_characters_support: Optional[bool] = None
    """
    Client supports commit characters on a completion item.
    """
    documentation_format: Optional[List[MarkupKind]] = None
    """
    Client supports the following content formats for the documentation
    property. The order describes the preferred format of the client.
    """
    deprecated_support: Optional[bool] = None
    preselect_support: Optional[bool] = None
    tag_support: Optional[ClientCapabilitiesCompletionItemTagSupport] = None
    insert_replace_support: Optional[bool] = None
    """
    Client supports insert replace edit to control different behavior if
    a completion item is inserted in the text or should replace text.
    """
    label_details_support: Optional[bool] = None


#################################################################


class CompletionClientCapabilities(LspModel):
    dynamic_registration: Optional[bool] = None
    """
    Whether completion supports dynamic registration.
    """
    completion_item: Optional[ClientCapabilitiesCompletionItem] = None
    completion_item_kind: Optional[ClientCapabilitiesCompletionItemKind] = None
    context_support: Optional[bool] = None
    """
    The client supports to send additional context information for a
    `textDocument/completion` request.
    """
    insert_text_mode: Optional[InsertTextMode] = None


class CompletionOptions(WorkDoneProgressOptions):
    trigger_characters: Optional[List[str]] = None
    """
    Most tools trigger completion request automatically without explicitly
    requesting it using a keyboard shortcut (e.g. Ctrl+Space). Typically they
    do so when the user starts to type an identifier. If the user types characters
    listed here, completion is triggered as well.
    """
    all_commit_characters: Optional[List[str]] = None
    resolve_provider: Optional[bool] = None
    """
    The server provides support to resolve additional
    information for a completion item.
    """


class CompletionContext(LspModel):
    trigger_kind: CompletionTriggerKind
    """
    How the completion was triggered.
    """
    trigger_character: Optional[str] = None
    """
    The trigger character (a single character) that has trigger code
    complete. Is undefined if
    `triggerKind !== CompletionTriggerKind.TriggerCharacter`
    """


class CompletionParams(
    TextDocumentPositionParams, WorkDoneProgressParams, PartialResultParams
):
    context: Optional[CompletionContext] = None
    """
    The completion context. This is only available if the client specifies
    to send this using the client capability
    `completion.contextSupport === true`
    """


class InsertReplaceEdit(LspModel):
    new_text: str
    """
    The string to be inserted.
    """
    insert: Range
    """
    The range if the insert is requested
    """
    replace: Range
    """
    The range if the replace is requested.
    """


class CompletionItemLabelDetails(LspModel):
    detail: Optional[str] = None
    """
    An optional string which is rendered less prominently directly after
    `CompletionItem.label`, without any spacing.
    """
    description: Optional[str] = None
    """
    An optional string which is rendered less prominently after
    `CompletionItemLabelDetails.detail`.
    """


class CompletionItem(LspModel):
    label: str
    """
    The label of this completion item.
    """
    label_details: Optional[CompletionItemLabelDetails] = None
    kind: Optional[CompletionItemKind] = None
    """
    The kind of this completion item. Based of the kind
    an icon is chosen by the editor.
    """
    tags: Optional[List[CompletionItemTag]] = None
    detail: Optional[str] = None
    """
    A human-readable string with additional information
    about this item, like type or symbol information.
    """
    documentation: Optional[Union[str, MarkupContent]] = None
    """
    A human-readable string that represents a doc-comment.
    """
    deprecated: Optional[bool] = None
    preselect: Optional[bool] = None
    sort_text: Optional[str] = None
    filter_text: Optional[str] = None
    insert_text: Optional[str] = None
    insert_text_format: Optional[InsertTextFormat] = None
    insert_text_mode: Optional[InsertTextMode] = None
    text_edit: Optional[Union[TextEdit, InsertReplaceEdit]] = None
    """
    An edit which is applied to a document when selecting this completion.
    When an edit is provided the value of `insertText` is ignored.
    """
    additional_text_edits: Optional[List[TextEdit]] = None
    commit_characters: Optional[List[str]] = None
    command: Optional[Command] = None
    data: Optional[Any] = None
    """
    A data entry field that is preserved on a completion item between
    a completion and a completion resolve request.
    """


class CompletionList(LspModel):
    is_incomplete: bool
    """
    This list is not complete. Further typing should result in recomputing
    this list.
    """
    items: List[CompletionItem]
    """
    The completion items.
    """


CompletionResult = Union[List[CompletionItem], CompletionList]
