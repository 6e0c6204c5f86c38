"""Style collector for scoped CSS."""
import logging
import threading
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, TextIO, Union

from scopecss.config import ScopeConfig
from scopecss.exceptions import ClassNotFoundError
from scopecss.renderer import render_style, write_style
from scopecss.transformer import ScopeTransformer

logger = logging.getLogger(__name__)


def _as_text(rules: Union[str, bytes]) -> str:
    if isinstance(rules, bytes):
        return rules.decode("utf-8", errors="replace")
    return rules


class StyleCollector:
    """
    Scopes rulesets, caches their class mappings and collects their CSS.

    Results are cached by the exact ruleset text, so passing the same
    string twice scopes it once and contributes its CSS once. Two rulesets
    that differ in any character are separate entries.

    Not safe for concurrent use. Populate it from one thread (typically
    while building a document) and render once at the end, or wrap it in
    LockedStyleCollector.
    """

    def __init__(
        self,
        config: Optional[ScopeConfig] = None,
        transformer: Optional[ScopeTransformer] = None,
    ):
        self.config = config or ScopeConfig()
        self.transformer = transformer or ScopeTransformer.from_config(self.config)
        self._rules: Dict[str, Mapping[str, str]] = {}  # ruleset text -> class mapping
        self._styles: List[str] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rules: Union[str, bytes]) -> bool:
        return _as_text(rules) in self._rules

    def classes(self, rules: Union[str, bytes]) -> Mapping[str, str]:
        """Return the classes of rules mapped to their scoped names."""
        rules = _as_text(rules)
        mapping = self._rules.get(rules)
        if mapping is not None:
            return mapping

        result = self.transformer.process(rules)
        logger.debug(
            "Scoped ruleset %s: %d class(es)", result.fingerprint, len(result.classes)
        )
        self._styles.append(result.css)
        mapping = MappingProxyType(result.classes)
        self._rules[rules] = mapping
        return mapping

    def class_attribute(self, rules: Union[str, bytes], *class_names: str) -> str:
        """
        Return the class attribute value for class_names, in the given order.

        Raises ClassNotFoundError if rules does not define one of them.
        """
        mapping = self.classes(rules)
        scoped = []
        for name in class_names:
            if name not in mapping:
                raise ClassNotFoundError(name, mapping.keys())
            scoped.append(mapping[name])
        return " ".join(scoped)

    def root_attribute(self, rules: Union[str, bytes]) -> str:
        """Return the class attribute value for the root class of rules."""
        return self.class_attribute(rules, self.config.root_class)

    @property
    def css(self) -> str:
        """All collected CSS in first-seen order, each ruleset followed by a newline."""
        return "".join(f"{styles}\n" for styles in self._styles)

    def render(self) -> str:
        """Render all collected styles as a single <style> block."""
        return render_style(self.css)

    def render_to(self, out: TextIO) -> None:
        """Write the <style> block to out."""
        write_style(out, self.css)


class LockedStyleCollector:
    """StyleCollector wrapper that serializes every call with a lock."""

    def __init__(self, collector: Optional[StyleCollector] = None):
        self._lock = threading.Lock()
        self._collector = collector if collector is not None else StyleCollector()

    def __len__(self) -> int:
        with self._lock:
            return len(self._collector)

    def __contains__(self, rules: Union[str, bytes]) -> bool:
        with self._lock:
            return rules in self._collector

    def classes(self, rules: Union[str, bytes]) -> Mapping[str, str]:
        with self._lock:
            return self._collector.classes(rules)

    def class_attribute(self, rules: Union[str, bytes], *class_names: str) -> str:
        with self._lock:
            return self._collector.class_attribute(rules, *class_names)

    def root_attribute(self, rules: Union[str, bytes]) -> str:
        with self._lock:
            return self._collector.root_attribute(rules)

    @property
    def css(self) -> str:
        with self._lock:
            return self._collector.css

    def render(self) -> str:
        with self._lock:
            return self._collector.render()

    def render_to(self, out: TextIO) -> None:
        with self._lock:
            self._collector.render_to(out)
