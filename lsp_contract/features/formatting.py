from typing import Optional

from pydantic import PositiveInt

from ..common_structures import (
    Range,
    TextDocumentIdentifier,
    WorkDoneProgressOptions,
    WorkDoneProgressParams,
)
from ..lsp_data_model import LspModel


class DocumentFormattingClientCapabilities(LspModel):
    dynamic_registration: Optional[bool] = None


class DocumentFormattingOptions(WorkDoneProgressOptions):
    pass


class DocumentRangeFormattingOptions(WorkDoneProgressOptions):
    pass


class FormattingOptions(LspModel):
    tab_size: PositiveInt
    """
    Size of a tab in spaces.
    """
    insert_spaces: bool
    """
    Prefer spaces over tabs.
    """
    trim_trailing_whitespace: Optional[bool] = None
    """
    Trim trailing whitespace on a line.
    """
    insert_final_newline: Optional[bool] = None
    """
    Insert a newline character at the end of the file if one does not exist.
    """
    trim_final_newlines: Optional[bool] = None
    """
    Trim all newlines after the final newline at the end of the file.
    """


class DocumentFormattingParams(WorkDoneProgressParams):
    text_document: TextDocumentIdentifier
    """
    The document to format.
    """
    options: FormattingOptions
    """
    The format options.
    """


class DocumentRangeFormattingParams(DocumentFormattingParams):
    range: Range
    """
    The range to format.
    """
