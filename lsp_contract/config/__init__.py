from .contract_config import ContractConfig
from .data_model import CatalogName, LoggingConfig, TopLevelConfig, TransportConfig
