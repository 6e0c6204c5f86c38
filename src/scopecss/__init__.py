"""Content-hashed scoping of CSS class selectors."""

from scopecss.collector import LockedStyleCollector, StyleCollector
from scopecss.config import ScopeConfig, load_config
from scopecss.exceptions import ClassNotFoundError, ConfigError, ScopeCSSError
from scopecss.hasher import fingerprint
from scopecss.transformer import ScopedStylesheet, ScopeTransformer, process

__all__ = [
    "ClassNotFoundError",
    "ConfigError",
    "LockedStyleCollector",
    "ScopeCSSError",
    "ScopeConfig",
    "ScopeTransformer",
    "ScopedStylesheet",
    "StyleCollector",
    "fingerprint",
    "load_config",
    "process",
]
