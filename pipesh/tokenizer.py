"""Quote and escape aware tokenizer for command lines."""

from __future__ import annotations

from .exceptions import UnterminatedQuote

_SEPARATOR = " "
_SINGLE = "'"
_DOUBLE = '"'
_BACKSLASH = "\\"
# Characters a backslash may escape inside double quotes.
_DOUBLE_ESCAPABLE = (_DOUBLE, _BACKSLASH)


class Token(str):
    """A lexical word. ``quoted`` is set when any part came from quoting or escaping."""

    quoted: bool

    def __new__(cls, value: str, *, quoted: bool = False) -> "Token":
        token = super().__new__(cls, value)
        token.quoted = quoted
        return token


class _Lexer:
    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self.chars: list[str] = []
        self.quoted = False

    def add(self, char: str, *, quoted: bool = False) -> None:
        self.chars.append(char)
        self.quoted = self.quoted or quoted

    def flush(self) -> None:
        # Empty words (e.g. a bare '') never become tokens.
        if self.chars:
            self.tokens.append(Token("".join(self.chars), quoted=self.quoted))
        self.chars = []
        self.quoted = False


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into tokens.

    Single quotes keep everything literally. Double quotes keep everything
    except ``\\"`` and ``\\\\``. Outside quotes a backslash escapes the next
    character. An unterminated quote raises :class:`UnterminatedQuote`.
    """

    lexer = _Lexer()
    quote: str | None = None
    idx = 0
    length = len(line)
    while idx < length:
        char = line[idx]
        if quote == _SINGLE:
            if char == _SINGLE:
                quote = None
            else:
                lexer.add(char, quoted=True)
        elif quote == _DOUBLE:
            if char == _DOUBLE:
                quote = None
            elif char == _BACKSLASH and idx + 1 < length and line[idx + 1] in _DOUBLE_ESCAPABLE:
                lexer.add(line[idx + 1], quoted=True)
                idx += 1
            else:
                lexer.add(char, quoted=True)
        elif char in (_SINGLE, _DOUBLE):
            quote = char
            lexer.quoted = True
        elif char == _BACKSLASH:
            if idx + 1 < length:
                lexer.add(line[idx + 1], quoted=True)
                idx += 1
            else:
                lexer.add(char)
        elif char == _SEPARATOR:
            lexer.flush()
        else:
            lexer.add(char)
        idx += 1

    if quote is not None:
        raise UnterminatedQuote(quote)
    lexer.flush()
    return lexer.tokens


def is_operator(token: str, operators: tuple[str, ...] | frozenset[str]) -> bool:
    """True when ``token`` is one of ``operators`` and was written unquoted."""

    return token in operators and not getattr(token, "quoted", False)


__all__ = ["Token", "tokenize", "is_operator"]
