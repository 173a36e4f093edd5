"""Lexer for the JavaScript/TypeScript module subset found in route files.

The whole source is tokenized up front so the parser can backtrack by index
when it has to guess (arrow functions, generic calls). Two constructs are
context sensitive and decided from the previous token:

- ``/`` starts a regular-expression literal only where an operand may begin.
- ``<`` starts a JSX element only in JSX-capable sources and only where an
  operand may begin. JSX is not tokenized further: the element is skipped as
  one token whose value is its tag name (empty for fragments).

``>`` is always emitted as a single-character token so that nested generic
type arguments (``Array<Array<T>>``) close one level at a time; the parser
recombines adjacent ``>`` tokens into shift operators.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class SourceSyntaxError(Exception):
    """Raised when source text cannot be tokenized or parsed."""

    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"{message} (line {line})")
        self.reason = message
        self.line = line


class TokenizeError(SourceSyntaxError):
    """Raised when source text contains something no token can start with."""


class TokenKind(StrEnum):
    NAME = "name"
    STRING = "string"
    TEMPLATE = "template"
    NUMBER = "number"
    REGEX = "regex"
    PUNCT = "punct"
    JSX = "jsx"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class Token:
    """One lexical token.

    ``value`` is the decoded string for STRING, the cooked text for TEMPLATE
    (empty when interpolated), the tag name for JSX. ``nl_before`` records a
    line terminator between this token and the previous one, which drives
    automatic semicolon insertion.
    """

    kind: TokenKind
    value: str
    line: int
    start: int
    end: int
    nl_before: bool = False
    interpolated: bool = False

    def is_punct(self, *values: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.value in values

    def is_name(self, *values: str) -> bool:
        return self.kind is TokenKind.NAME and (not values or self.value in values)


_PUNCTUATORS: tuple[str, ...] = (
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
)
_SINGLE_PUNCT = frozenset("{}()[];,<>+-*/%&|^!~?:=.@")
_WHITESPACE = frozenset(" \t\r\f\v\ufeff\u00a0\u2028\u2029")

_IDENT_RE = re.compile(r"(?:[^\W\d]|\$)(?:\w|\$)*")
_NUMBER_RE = re.compile(r"(?:0[xXbBoO][0-9a-fA-F_]+|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?)n?")
_JSX_NAME_RE = re.compile(r"[A-Za-z_$][\w$.:\-]*")

# Keywords after which an operand (regex, JSX) may start
_OPERAND_KEYWORDS = frozenset(
    {
        "return",
        "typeof",
        "case",
        "do",
        "else",
        "in",
        "instanceof",
        "new",
        "delete",
        "void",
        "throw",
        "yield",
        "await",
        "of",
        "default",
        "extends",
    }
)
# Punctuators after which an operand cannot start
_OPERAND_END_PUNCT = frozenset({")", "]", "}"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def _decode_escapes(raw: str) -> str:
    """Decode JavaScript string escapes in ``raw``."""
    if "\\" not in raw:
        return raw
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch != "\\" or i + 1 >= len(raw):
            out.append(ch)
            i += 1
            continue
        nxt = raw[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt == "x" and i + 3 < len(raw) + 1:
            try:
                out.append(chr(int(raw[i + 2 : i + 4], 16)))
                i += 4
            except ValueError:
                out.append(nxt)
                i += 2
        elif nxt == "u":
            if raw.startswith("{", i + 2):
                close = raw.find("}", i + 3)
                digits = raw[i + 3 : close] if close != -1 else ""
                step = close + 1 - i if close != -1 else 2
            else:
                digits = raw[i + 2 : i + 6]
                step = 6
            try:
                out.append(chr(int(digits, 16)))
                i += step
            except ValueError:
                out.append(nxt)
                i += 2
        elif nxt in "\r\n":
            # Line continuation
            i += 2
            if nxt == "\r" and raw.startswith("\n", i):
                i += 1
        else:
            out.append(nxt)
            i += 2
    return "".join(out)


class Lexer:
    """Single-use tokenizer over one source text."""

    def __init__(self, source: str, *, jsx: bool = True) -> None:
        self.source = source
        self.jsx = jsx
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        src = self.source
        if src.startswith("#!"):
            end = src.find("\n")
            self.pos = len(src) if end == -1 else end
        while True:
            nl_before = self._skip_trivia()
            if self.pos >= len(src):
                self.tokens.append(Token(TokenKind.EOF, "", self.line, self.pos, self.pos, nl_before))
                return self.tokens
            self.tokens.append(self._next_token(nl_before))

    # -- trivia -------------------------------------------------------------

    def _skip_trivia(self) -> bool:
        src = self.source
        saw_newline = False
        while self.pos < len(src):
            ch = src[self.pos]
            if ch == "\n":
                self.line += 1
                saw_newline = True
                self.pos += 1
            elif ch in _WHITESPACE:
                self.pos += 1
            elif src.startswith("//", self.pos):
                end = src.find("\n", self.pos)
                self.pos = len(src) if end == -1 else end
            elif src.startswith("/*", self.pos):
                end = src.find("*/", self.pos + 2)
                if end == -1:
                    raise TokenizeError("Unterminated comment", self.line)
                newlines = src.count("\n", self.pos, end)
                if newlines:
                    self.line += newlines
                    saw_newline = True
                self.pos = end + 2
            else:
                break
        return saw_newline

    # -- tokens -------------------------------------------------------------

    def _operand_allowed(self) -> bool:
        if not self.tokens:
            return True
        prev = self.tokens[-1]
        if prev.kind is TokenKind.NAME:
            return prev.value in _OPERAND_KEYWORDS
        if prev.kind is TokenKind.PUNCT:
            return prev.value not in _OPERAND_END_PUNCT
        return False

    def _next_token(self, nl_before: bool) -> Token:
        src = self.source
        start = self.pos
        line = self.line
        ch = src[start]

        if ch in "\"'":
            value = self._read_string(ch)
            return Token(TokenKind.STRING, value, line, start, self.pos, nl_before)
        if ch == "`":
            value, interpolated = self._read_template()
            return Token(TokenKind.TEMPLATE, value, line, start, self.pos, nl_before, interpolated)

        match = _IDENT_RE.match(src, start)
        if match is not None:
            self.pos = match.end()
            return Token(TokenKind.NAME, match.group(), line, start, self.pos, nl_before)
        if ch == "#":
            match = _IDENT_RE.match(src, start + 1)
            if match is not None:
                self.pos = match.end()
                return Token(TokenKind.NAME, src[start : self.pos], line, start, self.pos, nl_before)

        if ch.isdigit() or (ch == "." and start + 1 < len(src) and src[start + 1].isdigit()):
            match = _NUMBER_RE.match(src, start)
            if match is None:
                raise TokenizeError(f"Malformed number literal {ch!r}", line)
            self.pos = match.end()
            return Token(TokenKind.NUMBER, match.group(), line, start, self.pos, nl_before)

        if ch == "/" and self._operand_allowed():
            value = self._read_regex()
            return Token(TokenKind.REGEX, value, line, start, self.pos, nl_before)

        if ch == "<" and self.jsx and self._operand_allowed():
            tag = self._try_read_jsx()
            if tag is not None:
                return Token(TokenKind.JSX, tag, line, start, self.pos, nl_before)

        for punct in _PUNCTUATORS:
            if src.startswith(punct, start):
                # `?.5` is a conditional followed by a number
                if punct == "?." and start + 2 < len(src) and src[start + 2].isdigit():
                    continue
                self.pos = start + len(punct)
                return Token(TokenKind.PUNCT, punct, line, start, self.pos, nl_before)
        if ch in _SINGLE_PUNCT:
            self.pos = start + 1
            return Token(TokenKind.PUNCT, ch, line, start, self.pos, nl_before)

        raise TokenizeError(f"Unexpected character {ch!r}", line)

    def _read_string(self, quote: str) -> str:
        src = self.source
        i = self.pos + 1
        while i < len(src):
            ch = src[i]
            if ch == "\\":
                if i + 1 < len(src) and src[i + 1] == "\n":
                    self.line += 1
                i += 2
                continue
            if ch == quote:
                raw = src[self.pos + 1 : i]
                self.pos = i + 1
                return _decode_escapes(raw)
            if ch == "\n":
                break
            i += 1
        raise TokenizeError("Unterminated string literal", self.line)

    def _read_template(self) -> tuple[str, bool]:
        src = self.source
        i = self.pos + 1
        interpolated = False
        while i < len(src):
            ch = src[i]
            if ch == "\\":
                i += 2
                continue
            if ch == "\n":
                self.line += 1
            elif ch == "`":
                raw = src[self.pos + 1 : i]
                self.pos = i + 1
                return ("" if interpolated else _decode_escapes(raw)), interpolated
            elif src.startswith("${", i):
                interpolated = True
                i = self._skip_balanced(i + 1)
                continue
            i += 1
        raise TokenizeError("Unterminated template literal", self.line)

    def _read_regex(self) -> str:
        src = self.source
        i = self.pos + 1
        in_class = False
        while i < len(src):
            ch = src[i]
            if ch == "\\":
                i += 2
                continue
            if ch == "\n":
                break
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                i += 1
                while i < len(src) and (src[i].isalnum() or src[i] in "_$"):
                    i += 1
                value = src[self.pos : i]
                self.pos = i
                return value
            i += 1
        raise TokenizeError("Unterminated regular expression", self.line)

    def _skip_balanced(self, i: int) -> int:
        """Skip from an opening ``{`` at ``i`` to just past its matching ``}``.

        Strings, templates and comments inside are skipped so braces within
        them do not count. Line numbers are advanced for skipped newlines.
        """
        src = self.source
        depth = 0
        while i < len(src):
            ch = src[i]
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return i + 1
            elif ch == "\n":
                self.line += 1
            elif ch in "\"'":
                end = i + 1
                while end < len(src) and src[end] != ch:
                    if src[end] == "\n":
                        raise TokenizeError("Unterminated string literal", self.line)
                    end += 2 if src[end] == "\\" else 1
                i = end
            elif ch == "`":
                saved = self.pos
                self.pos = i
                self._read_template()
                i = self.pos - 1
                self.pos = saved
            elif src.startswith("//", i):
                end = src.find("\n", i)
                i = len(src) if end == -1 else end - 1
            elif src.startswith("/*", i):
                end = src.find("*/", i + 2)
                if end == -1:
                    raise TokenizeError("Unterminated comment", self.line)
                self.line += src.count("\n", i, end)
                i = end + 1
            i += 1
        raise TokenizeError("Unbalanced braces", self.line)

    # -- JSX ----------------------------------------------------------------

    def _try_read_jsx(self) -> str | None:
        """Skip a JSX element starting at ``<``; return its tag name.

        Returns None (and consumes nothing) when the text after ``<`` is not
        a JSX element, e.g. a TypeScript generic parameter list ``<T,>``.
        """
        saved_pos, saved_line = self.pos, self.line
        try:
            tag = self._read_jsx_element(self.pos)
        except TokenizeError:
            self.pos, self.line = saved_pos, saved_line
            return None
        return tag

    def _read_jsx_element(self, i: int) -> str:
        src = self.source
        i += 1
        while i < len(src) and src[i] in " \t\r\n":
            i = self._advance_ws(i)
        if i < len(src) and src[i] == ">":
            self.pos = self._read_jsx_children(i + 1, "")
            return ""
        match = _JSX_NAME_RE.match(src, i)
        if match is None:
            raise TokenizeError("Invalid JSX tag", self.line)
        tag = match.group()
        i = match.end()
        # Attributes
        while True:
            while i < len(src) and src[i] in " \t\r\n":
                i = self._advance_ws(i)
            if i >= len(src):
                raise TokenizeError("Unterminated JSX element", self.line)
            ch = src[i]
            if src.startswith("/>", i):
                self.pos = i + 2
                return tag
            if ch == ">":
                self.pos = self._read_jsx_children(i + 1, tag)
                return tag
            if ch == "{":
                i = self._skip_balanced(i)
            elif ch in "\"'":
                end = src.find(ch, i + 1)
                if end == -1:
                    raise TokenizeError("Unterminated JSX attribute", self.line)
                self.line += src.count("\n", i, end)
                i = end + 1
            elif ch == "=":
                i += 1
            else:
                attr = _JSX_NAME_RE.match(src, i)
                if attr is None:
                    raise TokenizeError("Invalid JSX attribute", self.line)
                i = attr.end()

    def _read_jsx_children(self, i: int, tag: str) -> int:
        src = self.source
        while i < len(src):
            ch = src[i]
            if ch == "\n":
                self.line += 1
                i += 1
            elif ch == "{":
                i = self._skip_balanced(i)
            elif src.startswith("</", i):
                end = src.find(">", i)
                if end == -1:
                    raise TokenizeError("Unterminated JSX closing tag", self.line)
                closing = src[i + 2 : end].strip()
                if closing != tag:
                    raise TokenizeError(f"Mismatched JSX closing tag </{closing}>", self.line)
                return end + 1
            elif ch == "<":
                self._read_jsx_element(i)
                i = self.pos
            else:
                i += 1
        raise TokenizeError("Unterminated JSX element", self.line)

    def _advance_ws(self, i: int) -> int:
        if self.source[i] == "\n":
            self.line += 1
        return i + 1


def tokenize(source: str, *, jsx: bool = True) -> list[Token]:
    """Tokenize ``source``; the list always ends with an EOF token."""
    return Lexer(source, jsx=jsx).tokenize()
