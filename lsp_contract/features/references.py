from typing import Optional

from ..common_structures import (
    PartialResultParams,
    TextDocumentPositionParams,
    WorkDoneProgressOptions,
    WorkDoneProgressParams,
)
from ..lsp_data_model import LspModel


class ReferenceClientCapabilities(LspModel):
    dynamic_registration: Optional[bool] = None


class ReferenceOptions(WorkDoneProgressOptions):
    pass


class ReferenceContext(LspModel):
    include_declaration: bool
    """
    Include the declaration of the current symbol.
    """


class ReferenceParams(
    TextDocumentPositionParams, WorkDoneProgressParams, PartialResultParams
):
    context: ReferenceContext
