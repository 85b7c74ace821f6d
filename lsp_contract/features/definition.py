from typing import List, Optional, Union

from ..common_structures import (
    Location,
    PartialResultParams,
    TextDocumentPositionParams,
    WorkDoneProgressOptions,
    WorkDoneProgressParams,
)
from ..lsp_data_model import LspModel


class DefinitionClientCapabilities(LspModel):
    dynamic_registration: Optional[bool] = None
    """
    Whether definition supports dynamic registration.
    """
    link_support: Optional[bool] = None
    """
    The client supports additional metadata in the form of definition links.
    """


class DefinitionOptions(WorkDoneProgressOptions):
    pass


class DefinitionParams(
    TextDocumentPositionParams, WorkDoneProgressParams, PartialResultParams
):
    pass


Definition = Union[Location, List[Location]]
