import reprlib
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Set, Union

import networkx as nx
import tomli
from pydantic import ValidationError

from abigen.core import get_logger
from abigen.utils import change_cwd

from .data_model import CodegenConfig, TopLevelConfig

logger = get_logger(__name__)

CONFIG_FILE_NAME = "abigen.toml"


class AbigenConfigError(Exception):
    """
    A config file is missing, cannot be parsed or contains invalid options.
    """


class AbigenConfig:
    """
    Abigen configuration class. Loads, stores and merges config options from `abigen.toml` and its subconfigs.
    """

    __local_config_path: Path
    __project_root_path: Path
    __loaded_files: Set[Path]
    __config_raw: Dict[str, Any]
    __config: TopLevelConfig

    def __init__(
        self,
        *_,
        local_config_path: Optional[Union[str, Path]] = None,
        project_root_path: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize the `AbigenConfig` class. If `project_root_path` is not provided, the current working directory is used.
        If `local_config_path` is not provided, the `abigen.toml` file in the project root directory is used.
        """
        if project_root_path is None:
            self.__project_root_path = Path.cwd().resolve()
        else:
            self.__project_root_path = Path(project_root_path).resolve()

        if local_config_path is None:
            self.__local_config_path = self.__project_root_path / CONFIG_FILE_NAME
        else:
            self.__local_config_path = Path(local_config_path).resolve()

        if not self.__project_root_path.is_dir():
            raise ValueError(
                f"Project root path '{self.__project_root_path}' is not a directory."
            )

        self.__loaded_files = set()
        with change_cwd(self.__project_root_path):
            self.__config = TopLevelConfig()
        self.__config_raw = self.__config.model_dump(by_alias=True)

    def __str__(self) -> str:
        """
        Returns:
            JSON representation of the config.
        """
        return self.__config.model_dump_json(by_alias=True, exclude_unset=True)

    def __repr__(self) -> str:
        config_dict = reprlib.repr(self.__config_raw)
        return f"{self.__class__.__name__}.fromdict({config_dict}, project_root_path={repr(self.__project_root_path)})"

    def __merge_dicts(self, old: Dict[str, Any], new: Dict[str, Any]) -> None:
        for k, v in new.items():
            if k in old and isinstance(v, dict) and isinstance(old[k], dict):
                self.__merge_dicts(old[k], v)
            else:
                old[k] = v

    @staticmethod
    def __parse(config_dict: Dict[str, Any], source: str) -> TopLevelConfig:
        try:
            return TopLevelConfig.model_validate(config_dict)
        except ValidationError as e:
            raise AbigenConfigError(f"Invalid config in {source}:\n{e}") from e

    def __load_file(
        self,
        parent: Optional[Path],
        path: Path,
        new_config: Dict[str, Any],
        graph: nx.DiGraph,
    ) -> None:
        if not path.is_file():
            if parent is None:
                logger.info(f"Config file '{path}' does not exist.")
            else:
                logger.warning(
                    f"Config file '{path}' loaded from '{parent}' does not exist."
                )
            return

        # change the current working dir so that we can resolve relative paths
        with change_cwd(path.parent):
            try:
                with path.open("rb") as f:
                    loaded_config = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise AbigenConfigError(f"Failed to parse '{path}': {e}") from e

            graph.add_node(path, config=loaded_config)
            if parent is not None:
                graph.add_edge(parent, path)

            # detect cyclic subconfigs
            if not nx.is_directed_acyclic_graph(graph):
                cycles = list(nx.simple_cycles(graph))
                error = "Found cyclic config subconfigs:"
                for no, cycle in enumerate(cycles):
                    error += f"\nCycle {no}:\n"
                    for p in cycle:
                        error += f"{p}\n"
                raise AbigenConfigError(error)

            parsed_config = self.__parse(loaded_config, f"'{path}'")

            # rebuild the loaded config from the pydantic model
            # this ensures that all stored paths are absolute
            loaded_config = parsed_config.model_dump(by_alias=True, exclude_unset=True)
            self.__merge_dicts(new_config, loaded_config)

            for subconfig_path in parsed_config.subconfigs:
                self.__load_file(path, subconfig_path, new_config, graph)

    @classmethod
    def fromdict(
        cls,
        config_dict: Dict[str, Any],
        *,
        project_root_path: Optional[Union[str, Path]] = None,
    ) -> "AbigenConfig":
        """
        Args:
            config_dict: Dictionary containing the config options.
            project_root_path: Path to the project root directory, relative paths are resolved against it.

        Returns:
            Instance of the `AbigenConfig` class with the provided config options.
        """
        instance = cls(project_root_path=project_root_path)
        with change_cwd(instance.project_root_path):
            parsed_config = cls.__parse(config_dict, "config dictionary")
        instance.__config_raw = parsed_config.model_dump(
            by_alias=True, exclude_unset=True
        )
        instance.__config = parsed_config
        return instance

    def todict(self) -> Dict[str, Any]:
        """
        Returns:
            Dictionary containing the config options.
        """
        return self.__config_raw

    def load_configs(self) -> None:
        """
        Clear any previous config options and load the project config file and its subconfigs.
        """
        self.__loaded_files = set()
        with change_cwd(self.__project_root_path):
            self.__config = TopLevelConfig()
        self.__config_raw = self.__config.model_dump(by_alias=True)

        self.load(self.local_config_path)

    def load(self, path: Path) -> None:
        """
        Load config from the provided file path. Any already loaded config options are overridden by the options loaded
        from this file.

        Args:
            path: System path to the config file.
        """
        subconfigs_graph = nx.DiGraph()
        config_raw_copy = deepcopy(self.__config_raw)

        self.__load_file(None, Path(path).resolve(), config_raw_copy, subconfigs_graph)

        config = self.__parse(config_raw_copy, f"'{path}'")
        self.__config_raw = config_raw_copy
        self.__config = config
        self.__loaded_files.update(subconfigs_graph.nodes)

    @property
    def loaded_files(self) -> FrozenSet[Path]:
        """
        Returns:
            Paths of all config files that were loaded, including subconfigs.
        """
        return frozenset(self.__loaded_files)

    @property
    def project_root_path(self) -> Path:
        return self.__project_root_path

    @property
    def local_config_path(self) -> Path:
        return self.__local_config_path

    @property
    def codegen(self) -> CodegenConfig:
        return self.__config.codegen

    @property
    def abis(self) -> Dict[str, Path]:
        """
        Returns:
            Contract name to ABI file path mapping, in declaration order.
        """
        return dict(self.__config.abis)
