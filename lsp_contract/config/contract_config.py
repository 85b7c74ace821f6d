import reprlib
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Set, Union

import tomli

from ..core import get_logger
from .data_model import CatalogName, LoggingConfig, TopLevelConfig, TransportConfig

logger = get_logger(__name__)


class ContractConfig:
    """
    Configuration of the protocol contract: active catalog, stream transport and logging options.
    """

    __local_config_path: Path
    __loaded_files: Set[Path]
    __config_raw: Dict[str, Any]
    __config: TopLevelConfig

    def __init__(self, *_, local_config_path: Optional[Union[str, Path]] = None):
        """
        If `local_config_path` is not provided, the `lsp-contract.toml` file in the current working directory is used.
        """
        if local_config_path is None:
            self.__local_config_path = Path.cwd().resolve() / "lsp-contract.toml"
        else:
            self.__local_config_path = Path(local_config_path).resolve()

        self.__loaded_files = set()
        self.__config = TopLevelConfig()
        self.__config_raw = self.__config.model_dump(mode="json")

    def __str__(self) -> str:
        return self.__config.model_dump_json(exclude_unset=True)

    def __repr__(self) -> str:
        config_dict = reprlib.repr(self.__config_raw)
        return f"{self.__class__.__name__}.fromdict({config_dict})"

    def __merge_dicts(self, old: Dict[str, Any], new: Dict[str, Any]) -> None:
        for k, v in new.items():
            if k not in old.keys():
                old[k] = v
            else:
                if isinstance(v, dict):
                    self.__merge_dicts(old[k], new[k])
                else:
                    old[k] = v

    @classmethod
    def fromdict(cls, config_dict: Dict[str, Any]) -> "ContractConfig":
        """
        Args:
            config_dict: Dictionary containing the config options.

        Returns:
            Instance of the `ContractConfig` class with the provided config options.
        """
        instance = cls()
        parsed_config = TopLevelConfig.model_validate(config_dict)
        instance.__config_raw = parsed_config.model_dump(
            mode="json", exclude_unset=True
        )
        instance.__config = parsed_config
        return instance

    def todict(self) -> Dict[str, Any]:
        return self.__config_raw

    def load_configs(self) -> None:
        """
        Clear any previous config options and load the local config file.
        """
        self.__loaded_files = set()
        self.__config = TopLevelConfig()
        self.__config_raw = self.__config.model_dump(mode="json")
        self.load(self.__local_config_path)

    def load(self, path: Path) -> None:
        """
        Load config from the provided file path. Any already loaded config options are overridden by the options loaded
        from this file.
        """
        path = path.resolve()
        if not path.is_file():
            logger.info(f"Config file '{path}' does not exist.")
            return

        with path.open("rb") as f:
            loaded_config = tomli.load(f)

        # validate before merging so that an invalid file leaves the config untouched
        parsed_config = TopLevelConfig.model_validate(loaded_config)
        config_raw_copy = deepcopy(self.__config_raw)
        self.__merge_dicts(
            config_raw_copy, parsed_config.model_dump(mode="json", exclude_unset=True)
        )

        self.__config = TopLevelConfig.model_validate(config_raw_copy)
        self.__config_raw = config_raw_copy
        self.__loaded_files.add(path)

    @property
    def loaded_files(self) -> FrozenSet[Path]:
        return frozenset(self.__loaded_files)

    @property
    def local_config_path(self) -> Path:
        return self.__local_config_path

    @property
    def catalog(self) -> CatalogName:
        """
        Returns:
            Name of the method catalog in use.
        """
        return self.__config.catalog

    @property
    def transport(self) -> TransportConfig:
        return self.__config.transport

    @property
    def logging(self) -> LoggingConfig:
        return self.__config.logging
