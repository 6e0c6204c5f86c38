"""Configuration loader for scopecss."""
import importlib.util
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

from scopecss.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "scopecss.config.py"

# CSS name code points. A leading hex digit would extend a trailing hex
# escape in the class name (`.x\61` + `0` reads as `\610`).
_SEPARATOR_RE = re.compile(r"(?![0-9A-Fa-f])[A-Za-z0-9_\-\u0080-\U0010FFFF]+\Z")


@dataclass(frozen=True)
class ScopeConfig:
    """Settings shared by the transformer and the collector."""
    separator: str = "_"  # joins class name and fingerprint
    root_class: str = "root"  # class resolved by root_attribute()

    def __post_init__(self) -> None:
        if not isinstance(self.separator, str):
            raise ConfigError(f"SEPARATOR must be a string, got {type(self.separator).__name__}")
        if not _SEPARATOR_RE.match(self.separator):
            raise ConfigError(
                f"SEPARATOR must be CSS name characters not starting with a hex digit, got {self.separator!r}"
            )
        if not isinstance(self.root_class, str) or not self.root_class:
            raise ConfigError("ROOT_CLASS must be a non-empty string")


def _read_module(path: Path) -> Dict[str, Any]:
    spec = importlib.util.spec_from_file_location("scopecss_config", path)
    if spec is None or spec.loader is None:
        return {}

    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return {key: getattr(module, key) for key in dir(module) if key.isupper()}


def load_config(path: Union[Path, str, None] = None) -> ScopeConfig:
    """
    Load configuration from a python file.

    If path is provided, loads from there.
    Otherwise, looks for scopecss.config.py in the current working directory.

    Uppercase names map onto ScopeConfig fields:
    SEPARATOR -> separator
    ROOT_CLASS -> root_class
    """
    if path is None:
        path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    else:
        path = Path(path)

    if not path.exists():
        return ScopeConfig()

    try:
        values = _read_module(path)
    except Exception as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return ScopeConfig()

    mapped: Dict[str, Any] = {}
    if "SEPARATOR" in values:
        mapped["separator"] = values["SEPARATOR"]
    if "ROOT_CLASS" in values:
        mapped["root_class"] = values["ROOT_CLASS"]

    return ScopeConfig(**mapped)
