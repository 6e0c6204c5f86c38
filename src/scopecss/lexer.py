"""
tinycss2-backed token stream.

tinycss2 returns a tree of component values and normalizes some of them
when serializing (quotes, unterminated comments). The scope transformer needs
a flat stream whose tokens reproduce the source exactly, so the tree is
flattened here. Positions are computed on the preprocessed text tinycss2
sees, then mapped back so each token's text is sliced from the original
input, line endings and NUL bytes included.
"""
import bisect
import logging
import re
from typing import List, Optional, Sequence, Tuple

import tinycss2
from tinycss2 import ast as css_ast

from scopecss.tokens import EOF_TOKEN, Token, TokenKind, TokenStream

logger = logging.getLogger(__name__)

_NEWLINE_RE = re.compile("\n")
_PREPROCESS_RE = re.compile("\r\n?|\f|\0")

_CLOSERS = {
    "{} block": "}",
    "[] block": "]",
    "() block": ")",
    "function": ")",
}

# Parse errors that still leave usable source text behind them.
_PASSTHROUGH_ERRORS = {"bad-string", "bad-url", "eof-in-string", "eof-in-url"}

_IDENT_LIKE = {"ident", "at-keyword", "hash", "dimension"}

# (kind, value, offset, line, column)
_Event = Tuple[TokenKind, str, int, int, int]


def preprocess(css: str) -> Tuple[str, List[int]]:
    """
    Apply the CSS input preprocessing tinycss2 performs before tokenizing.

    Returns the preprocessed text and, for every offset into it (plus one
    past the end), the matching offset into css.
    """
    pieces: List[str] = []
    origin: List[int] = []
    last = 0
    for match in _PREPROCESS_RE.finditer(css):
        pieces.append(css[last:match.start()])
        origin.extend(range(last, match.start()))
        pieces.append("\uFFFD" if match.group() == "\0" else "\n")
        origin.append(match.start())
        last = match.end()
    pieces.append(css[last:])
    origin.extend(range(last, len(css) + 1))
    return "".join(pieces), origin


def _children(node) -> Optional[Sequence]:
    if node.type == "function":
        return node.arguments
    if node.type in _CLOSERS:
        return node.content
    return None


class CSSTokenStream(TokenStream):
    """TokenStream over tinycss2's component values."""

    def __init__(self, styles: str):
        self.styles = styles
        # tinycss2 positions refer to the preprocessed source
        self.source, self._origin = preprocess(styles)
        self._line_starts = [0] + [m.end() for m in _NEWLINE_RE.finditer(self.source)]
        self._tokens = self._tokenize()
        self._index = 0

    def next_token(self) -> Token:
        if self._index >= len(self._tokens):
            return EOF_TOKEN
        token = self._tokens[self._index]
        self._index += 1
        return token

    def _offset(self, node) -> int:
        return self._line_starts[node.source_line - 1] + node.source_column - 1

    def _position(self, offset: int) -> Tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def _tokenize(self) -> List[Token]:
        nodes = tinycss2.parse_component_value_list(self.source, skip_comments=False)
        events: List[_Event] = []
        self._flatten(nodes, len(self.source), True, events)

        tokens = []
        for i, (kind, value, start, line, column) in enumerate(events):
            end = events[i + 1][2] if i + 1 < len(events) else len(self.source)
            raw = self.styles[self._origin[start]:self._origin[end]]
            tokens.append(Token(kind, raw, value, line, column))
        return tokens

    def _flatten(self, nodes: Sequence, boundary: int, at_eof: bool, events: List[_Event]) -> None:
        """
        Append events for nodes whose text ends at boundary.

        at_eof is True while every enclosing block is still open at the end
        of input; only then can a trailing block be unterminated.
        """
        for i, node in enumerate(nodes):
            start = self._offset(node)
            is_last = i + 1 == len(nodes)
            stop = boundary if is_last else self._offset(nodes[i + 1])
            children = _children(node)

            if children is None:
                events.append(self._leaf_event(node, start))
                continue

            kind = TokenKind.LEFT_BRACE if node.type == "{} block" else TokenKind.OTHER
            events.append((kind, "", start, node.source_line, node.source_column))

            closed = not (is_last and at_eof) or self._closes_at(node, stop)
            if not closed:
                logger.debug("Unterminated %s at line %d", node.type, node.source_line)
                self._flatten(children, stop, True, events)
                continue

            self._flatten(children, stop - 1, False, events)
            kind = TokenKind.RIGHT_BRACE if node.type == "{} block" else TokenKind.OTHER
            line, column = self._position(stop - 1)
            events.append((kind, _CLOSERS[node.type], stop - 1, line, column))

    def _closes_at(self, block, end: int) -> bool:
        """Whether block's closing character sits at end - 1."""
        if end - 1 <= self._offset(block) or self.source[end - 1] != _CLOSERS[block.type]:
            return False
        children = _children(block)
        if not children:
            return True
        last = children[-1]
        if _children(last) is not None:
            return self._closes_at(last, end - 1)
        return not self._reaches(last, end)

    def _reaches(self, leaf, end: int) -> bool:
        """Whether a trailing leaf token runs up to end."""
        if leaf.type == "comment":
            # unterminated comments run to the end of input
            return self._offset(leaf) + 2 + len(leaf.value) == len(self.source)
        if leaf.type == "error":
            return leaf.kind.startswith("eof-")
        # an escaped closing character is part of the identifier
        return leaf.type in _IDENT_LIKE and self.source[end - 2] == "\\"

    def _leaf_event(self, node, start: int) -> _Event:
        line, column = node.source_line, node.source_column
        if node.type == "ident":
            return (TokenKind.IDENT, node.value, start, line, column)
        if node.type == "at-keyword":
            return (TokenKind.AT_KEYWORD, node.value, start, line, column)
        if node.type == "literal":
            kind = TokenKind.COLON if node.value == ":" else TokenKind.DELIM
            return (kind, node.value, start, line, column)
        if node.type == "error":
            return (self._error_kind(node), node.kind, start, line, column)
        return (TokenKind.OTHER, "", start, line, column)

    @staticmethod
    def _error_kind(node: css_ast.ParseError) -> TokenKind:
        if node.kind == "}":
            return TokenKind.RIGHT_BRACE
        if node.kind in (")", "]") or node.kind in _PASSTHROUGH_ERRORS:
            return TokenKind.OTHER
        return TokenKind.ERROR


def tokenize(styles: str) -> List[Token]:
    """Return every token of styles, excluding the final EOF."""
    return list(CSSTokenStream(styles))
