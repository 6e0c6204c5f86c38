"""Token model consumed by the scope transformer."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator


class TokenKind(Enum):
    IDENT = "ident"
    DELIM = "delim"
    COLON = "colon"
    AT_KEYWORD = "at-keyword"
    LEFT_BRACE = "left-brace"
    RIGHT_BRACE = "right-brace"
    OTHER = "other"
    ERROR = "error"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    """A single lexical token and the exact source text it came from."""
    kind: TokenKind
    raw: str  # source text, written through verbatim
    value: str = ""  # ident name, at-keyword name without '@', delim char
    line: int = 0
    column: int = 0

    def is_delim(self, char: str) -> bool:
        return self.kind is TokenKind.DELIM and self.value == char


EOF_TOKEN = Token(TokenKind.EOF, "")


class TokenStream(ABC):
    """
    Minimal tokenizer interface.

    next_token() returns tokens in source order. Once the input is exhausted
    it keeps returning an EOF token. A lexical error the tokenizer cannot
    recover from is reported as an ERROR token.
    """

    @abstractmethod
    def next_token(self) -> Token:
        pass

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token.kind is TokenKind.EOF:
                return
            yield token
