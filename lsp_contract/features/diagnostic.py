from typing import List, Optional

from ..common_structures import Diagnostic, DocumentUri
from ..lsp_data_model import LspModel


class PublishDiagnosticsClientCapabilities(LspModel):
    related_information: Optional[bool] = None
    """
    Whether the clients accepts diagnostics with related information.
    """
    version_support: Optional[bool] = None
    """
    Whether the client interprets the version property of the
    `textDocument/publishDiagnostics` notification's parameter.
    """
    code_description_support: Optional[bool] = None
    data_support: Optional[bool] = None


class PublishDiagnosticsParams(LspModel):
    uri: DocumentUri
    """
    The URI for which diagnostic information is reported.
    """
    version: Optional[int] = None
    """
    Optional the version number of the document the diagnostics are published
    for.
    """
    diagnostics: List[Diagnostic]
    """
    An array of diagnostic information items.
    """
