from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from ..utils import StrEnum


class ContractConfigModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class CatalogName(StrEnum):
    STANDARD = "standard"
    LEGACY = "legacy"


class TransportConfig(ContractConfigModel):
    encoding: str = "utf-8"
    """
    Encoding of message content, announced in the `Content-Type` header.
    """
    content_type: str = "application/vscode-jsonrpc"
    max_content_length: PositiveInt = 16 * 1024 * 1024
    """
    Largest accepted message content in bytes.
    """


class LoggingConfig(ContractConfigModel):
    debug: bool = False


class TopLevelConfig(ContractConfigModel):
    catalog: CatalogName = CatalogName.STANDARD
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
