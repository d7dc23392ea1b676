"""YAML config file lookup and a lazily loaded global config holder."""

from pathlib import Path
from typing import Callable, Generic, TypeVar

import yaml

T = TypeVar("T")

YAML_SUFFIXES = (".yaml", ".yml")


def find_config_path(config: str | Path, config_dir: Path) -> Path:
    """Resolve a config name or file path to an existing YAML file.

    ``config`` is either a path ending in .yaml/.yml, used as given, or a
    bare name looked up as ``<config_dir>/<name>.yaml``.

    Raises:
        FileNotFoundError: If the resolved file does not exist.
    """
    config = str(config)
    if config.endswith(YAML_SUFFIXES):
        path = Path(config)
    else:
        path = Path(config_dir) / f"{config}.yaml"

    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    return path


def load_yaml(path: Path) -> dict:
    """Read a YAML mapping; an empty file reads as {}.

    Raises:
        ValueError: If the top level of the file is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


class ConfigSingleton(Generic[T]):
    """Holds one config object for the process.

    ``get`` calls the loader the first time and caches the result; ``set``
    installs a config directly (the CLI does this after applying command
    line overrides); ``reset`` drops it so the next ``get`` reloads.
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._loader = loader
        self._config: T | None = None

    def get(self) -> T:
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config set and no loader to build one")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        self._config = config

    def reset(self) -> None:
        self._config = None
