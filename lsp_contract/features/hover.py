from typing import List, Optional, Union

from ..common_structures import (
    MarkupContent,
    MarkupKind,
    Range,
    TextDocumentPositionParams,
    WorkDoneProgressOptions,
    WorkDoneProgressParams,
)
from ..lsp_data_model import LspModel


class HoverClientCapabilities(LspModel):
    dynamic_registration: Optional[bool] = None
    content_format: Optional[List[MarkupKind]] = None


class HoverOptions(WorkDoneProgressOptions):
    pass


class HoverParams(TextDocumentPositionParams, WorkDoneProgressParams):
    pass


class MarkedString(LspModel):
    """
    A code block tagged with its language, rendered e.g. as
    ```${language}
    ${value}
    ```
    """

    language: str
    value: str


MarkedStringType = Union[str, MarkedString]


class Hover(LspModel):
    contents: Union[MarkedStringType, List[MarkedStringType], MarkupContent]
    """
    The hover's content.
    """
    range: Optional[Range] = None
    """
    An optional range is a range inside a text document
    that is used to visualize a hover, e.g. by changing the background color.
    """
