"""
Scope transformer: rewrites class selectors with a content fingerprint.

Every `.name` selector becomes `.name_<fingerprint>`, where the fingerprint
is computed over the whole ruleset text. Rules wrapped in `:global { ... }`
are emitted unscoped with the wrapping braces removed. `@media` blocks are
copied through with the class selectors inside them scoped.

Only `@media` gets block handling. Other at-rules (`@supports`,
`@container`, `@keyframes`, ...) are plain token text to the transformer.
"""
import io
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Union

from scopecss.config import ScopeConfig
from scopecss.hasher import fingerprint
from scopecss.lexer import CSSTokenStream
from scopecss.tokens import Token, TokenKind, TokenStream

logger = logging.getLogger(__name__)

GLOBAL_KEYWORD = "global"
MEDIA_KEYWORD = "media"


@dataclass
class ScopedStylesheet:
    """Result of scoping one ruleset."""
    css: str
    classes: Dict[str, str] = field(default_factory=dict)
    fingerprint: str = ""


class _State(Enum):
    NORMAL = auto()
    PENDING_GLOBAL_CHECK = auto()
    GLOBAL_BLOCK = auto()
    MEDIA_BLOCK = auto()
    PENDING_CLASS_NAME = auto()


class _ScopeRun:
    """Per-call state of the transformer. Consumes tokens one at a time."""

    def __init__(self, suffix: str):
        self.suffix = suffix
        self.out = io.StringIO()
        self.pending: List[str] = []
        self.classes: Dict[str, str] = {}
        self.state = _State.NORMAL
        self.depth = 0
        # state to return to after a class name has been read
        self.resume = _State.NORMAL
        self._handlers: Dict[_State, Callable[[Token], _State]] = {
            _State.NORMAL: self._normal,
            _State.PENDING_GLOBAL_CHECK: self._pending_global_check,
            _State.GLOBAL_BLOCK: self._global_block,
            _State.MEDIA_BLOCK: self._media_block,
            _State.PENDING_CLASS_NAME: self._pending_class_name,
        }

    def feed(self, token: Token) -> None:
        self.state = self._handlers[self.state](token)

    def finish(self) -> str:
        if self.state is _State.GLOBAL_BLOCK:
            logger.debug(":global block not closed before end of input")
        elif self.state is _State.MEDIA_BLOCK:
            logger.debug("@media block not closed before end of input")
        self._flush()
        return self.out.getvalue()

    def _flush(self) -> None:
        for chunk in self.pending:
            self.out.write(chunk)
        self.pending.clear()

    def _scope(self, token: Token) -> None:
        scoped = token.value + self.suffix
        self.classes[token.value] = scoped
        self.out.write(token.raw + self.suffix)

    def _normal(self, token: Token) -> _State:
        if token.kind is TokenKind.COLON:
            self.pending.append(token.raw)
            return _State.PENDING_GLOBAL_CHECK

        self.out.write(token.raw)
        if token.kind is TokenKind.AT_KEYWORD and token.value == MEDIA_KEYWORD:
            self.depth = 0
            return _State.MEDIA_BLOCK
        if token.is_delim("."):
            self.resume = _State.NORMAL
            return _State.PENDING_CLASS_NAME
        return _State.NORMAL

    def _pending_global_check(self, token: Token) -> _State:
        if token.kind is TokenKind.IDENT and token.value == GLOBAL_KEYWORD:
            self.pending.clear()
            self.depth = 0
            return _State.GLOBAL_BLOCK

        self._flush()
        self.out.write(token.raw)
        return _State.NORMAL

    def _global_block(self, token: Token) -> _State:
        # The outermost braces wrap the block and are dropped.
        if token.kind is TokenKind.LEFT_BRACE:
            if self.depth != 0:
                self.out.write(token.raw)
            self.depth += 1
        elif token.kind is TokenKind.RIGHT_BRACE:
            if self.depth != 1:
                self.out.write(token.raw)
            self.depth -= 1
            if self.depth <= 0:
                return _State.NORMAL
        else:
            self.out.write(token.raw)
        return _State.GLOBAL_BLOCK

    def _media_block(self, token: Token) -> _State:
        self.out.write(token.raw)
        if token.is_delim("."):
            self.resume = _State.MEDIA_BLOCK
            return _State.PENDING_CLASS_NAME
        if token.kind is TokenKind.LEFT_BRACE:
            self.depth += 1
        elif token.kind is TokenKind.RIGHT_BRACE:
            self.depth -= 1
            if self.depth <= 0:
                return _State.NORMAL
        return _State.MEDIA_BLOCK

    def _pending_class_name(self, token: Token) -> _State:
        if token.kind is TokenKind.IDENT:
            self._scope(token)
        else:
            # not a class selector (". foo", ".:hover"), pass it through
            self.out.write(token.raw)
        return self.resume


class ScopeTransformer:
    """
    Scopes the class selectors of a stylesheet.

    Holds no state between calls, so one instance can be shared freely.
    stream_factory builds the TokenStream for a stylesheet; it defaults to
    the tinycss2-backed CSSTokenStream.
    """

    def __init__(
        self,
        separator: str = "_",
        stream_factory: Optional[Callable[[str], TokenStream]] = None,
    ):
        self.separator = separator
        self.stream_factory = stream_factory or CSSTokenStream

    @classmethod
    def from_config(cls, config: ScopeConfig, **kwargs) -> "ScopeTransformer":
        return cls(separator=config.separator, **kwargs)

    def scoped_name(self, class_name: str, styles: Union[str, bytes]) -> str:
        """Return the name class_name gets when styles is processed."""
        return f"{class_name}{self.separator}{fingerprint(styles)}"

    def process(self, styles: Union[str, bytes]) -> ScopedStylesheet:
        """
        Scope every class selector in styles.

        Malformed CSS never raises: processing stops at the first token the
        stream reports as an error and returns what was produced up to there.
        """
        digest = fingerprint(styles)
        if isinstance(styles, bytes):
            styles = styles.decode("utf-8", errors="replace")

        run = _ScopeRun(self.separator + digest)
        stream = self.stream_factory(styles)

        while True:
            token = stream.next_token()
            if token.kind is TokenKind.EOF:
                break
            if token.kind is TokenKind.ERROR:
                logger.debug(
                    "Stopped scoping at lexical error %r (line %d, column %d)",
                    token.value, token.line, token.column,
                )
                break
            run.feed(token)

        return ScopedStylesheet(css=run.finish(), classes=run.classes, fingerprint=digest)


_default_transformer = ScopeTransformer()


def process(styles: Union[str, bytes]) -> ScopedStylesheet:
    """Scope styles with the default transformer."""
    return _default_transformer.process(styles)
