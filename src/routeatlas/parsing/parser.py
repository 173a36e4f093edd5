"""Recursive-descent parser for route-declaring modules.

Parses the statements route files are made of (imports, exports, variable
declarations, decorated classes, expression statements) into the closed node
set of ``routeatlas.parsing.syntax``. Function bodies, TypeScript type-level
declarations and control flow are skipped by balanced-token scanning: their
contents never contribute route declarations.

Type annotations are skipped, not parsed. Their text is kept only where a
consumer needs it (``const routes: Routes = [...]``).
"""

from __future__ import annotations

import math

from routeatlas.parsing.syntax import (
    Arrow,
    ArrayExpr,
    Binary,
    Call,
    ClassDecl,
    Conditional,
    Declarator,
    ExportAll,
    ExportDefault,
    ExportNamed,
    ExportSpec,
    Expr,
    ExprStatement,
    Identifier,
    ImportDecl,
    ImportSpec,
    Jsx,
    Literal,
    Logical,
    Member,
    Module,
    ObjectExpr,
    Property,
    Spread,
    Statement,
    Template,
    TypeAssertion,
    Unary,
    Unsupported,
    VarDecl,
)
from routeatlas.parsing.tokenizer import SourceSyntaxError, Token, TokenKind, tokenize

# Binary operator precedence (higher binds tighter)
_BINARY_PRECEDENCE: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}
_LOGICAL_OPERATORS = frozenset({"??", "||", "&&"})
_ASSIGNMENT_OPERATORS = frozenset(
    {"=", "+=", "-=", "*=", "/=", "%=", "**=", "<<=", "&=", "|=", "^=", "&&=", "||=", "??="}
)
_PREFIX_PUNCT = frozenset({"!", "-", "+", "~", "++", "--"})
_PREFIX_KEYWORDS = frozenset({"typeof", "void", "delete", "await"})
_DECLARATION_KEYWORDS = frozenset({"const", "let", "var"})
_CONTROL_KEYWORDS = frozenset({"if", "for", "while", "with", "switch"})
_TS_DECLARATION_KEYWORDS = frozenset({"interface", "type", "enum", "declare", "namespace", "module", "abstract"})
_RESERVED_WORDS = frozenset(
    {
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "export",
        "extends",
        "finally",
        "for",
        "function",
        "if",
        "in",
        "instanceof",
        "new",
        "return",
        "switch",
        "throw",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
    }
)

# Tokens that keep a type annotation going across a line break
_TYPE_CONTINUATION = frozenset({"|", "&", ".", "?.", "<", ",", "=>", "(", "[", "{", ":", "=", "extends", "keyof", "typeof"})
# Where a type annotation after ``as``/``satisfies`` ends
_ASSERTION_STOPS = frozenset(
    {",", ";", "=", "?", ":", "&&", "||", "??", "===", "!==", "==", "!=", "+", "-", "*", "/", "%", "as", "satisfies", "in", "instanceof"}
)
_DECLARATOR_TYPE_STOPS = frozenset({"=", ",", ";"})
_RETURN_TYPE_STOPS = frozenset({"=>", "{", ";"})


class Parser:
    """Parser over a pre-tokenized source; use :func:`parse_module`."""

    def __init__(self, tokens: list[Token], *, jsx: bool = True) -> None:
        self.tokens = tokens
        self.jsx = jsx
        self.i = 0

    # -- token helpers -------------------------------------------------------

    def peek(self, offset: int = 0) -> Token:
        index = min(self.i + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        tok = self.tokens[self.i]
        if tok.kind is not TokenKind.EOF:
            self.i += 1
        return tok

    def at_punct(self, *values: str) -> bool:
        return self.peek().is_punct(*values)

    def at_name(self, *values: str) -> bool:
        return self.peek().is_name(*values)

    def at_eof(self) -> bool:
        return self.peek().kind is TokenKind.EOF

    def expect_punct(self, value: str) -> Token:
        tok = self.peek()
        if not tok.is_punct(value):
            raise self.error(f"Expected '{value}' but found {self._describe(tok)}", tok)
        return self.advance()

    def expect_name(self, *values: str) -> Token:
        tok = self.peek()
        if not tok.is_name(*values):
            expected = f"'{values[0]}'" if len(values) == 1 else "identifier"
            raise self.error(f"Expected {expected} but found {self._describe(tok)}", tok)
        return self.advance()

    def error(self, message: str, tok: Token | None = None) -> SourceSyntaxError:
        tok = tok if tok is not None else self.peek()
        return SourceSyntaxError(message, tok.line)

    @staticmethod
    def _describe(tok: Token) -> str:
        if tok.kind is TokenKind.EOF:
            return "end of input"
        return f"'{tok.value}'" if tok.kind in (TokenKind.PUNCT, TokenKind.NAME) else tok.kind.value

    def consume_semicolon(self) -> None:
        """Consume ``;`` or accept an automatically inserted one."""
        tok = self.peek()
        if tok.is_punct(";"):
            self.advance()
        elif tok.is_punct("}") or tok.kind is TokenKind.EOF or tok.nl_before:
            return
        else:
            raise self.error(f"Unexpected token {self._describe(tok)}", tok)

    # -- skipping ------------------------------------------------------------

    def skip_balanced(self) -> None:
        """Skip from an opening bracket to just past its matching closer."""
        opener = self.advance()
        closers = {"(": ")", "[": "]", "{": "}"}
        stack = [closers[opener.value]]
        while stack:
            tok = self.advance()
            if tok.kind is TokenKind.EOF:
                raise self.error(f"Unclosed '{opener.value}'", opener)
            if tok.kind is not TokenKind.PUNCT:
                continue
            if tok.value in closers:
                stack.append(closers[tok.value])
            elif tok.value in (")", "]", "}"):
                if tok.value != stack[-1]:
                    raise self.error(f"Unexpected '{tok.value}'", tok)
                stack.pop()

    def skip_angle_brackets(self) -> None:
        """Skip a ``<...>`` type argument or parameter list."""
        opener = self.expect_punct("<")
        depth = 1
        while depth:
            tok = self.peek()
            if tok.kind is TokenKind.EOF:
                raise self.error("Unclosed '<'", opener)
            if tok.is_punct("(", "[", "{"):
                self.skip_balanced()
                continue
            if tok.is_punct("<"):
                depth += 1
            elif tok.is_punct(">"):
                depth -= 1
            elif tok.is_punct(";", ")", "]", "}"):
                raise self.error(f"Unexpected '{tok.value}' in type arguments", tok)
            self.advance()

    def skip_type(self, stops: frozenset[str]) -> str:
        """Skip a type annotation and return its text.

        Stops before a depth-0 token in ``stops``, an unmatched closing
        bracket, or a line break that cannot continue the type.
        """
        parts: list[Token] = []
        depth = 0
        while True:
            tok = self.peek()
            if tok.kind is TokenKind.EOF:
                break
            if depth == 0:
                if tok.kind in (TokenKind.PUNCT, TokenKind.NAME) and tok.value in stops:
                    break
                if (
                    parts
                    and tok.nl_before
                    and tok.value not in _TYPE_CONTINUATION
                    and parts[-1].value not in _TYPE_CONTINUATION
                ):
                    break
            if tok.is_punct("(", "[", "{", "<"):
                depth += 1
            elif tok.is_punct(")", "]", "}", ">"):
                if depth == 0:
                    break
                depth -= 1
            parts.append(self.advance())
        if not parts:
            raise self.error(f"Expected type but found {self._describe(self.peek())}")
        return _render_type(parts)

    def skip_until_statement_end(self) -> None:
        depth = 0
        first = True
        prev: Token | None = None
        while True:
            tok = self.peek()
            if tok.kind is TokenKind.EOF:
                return
            if depth == 0 and not first:
                if tok.is_punct(";"):
                    self.advance()
                    return
                if tok.is_punct("}"):
                    return
                if (
                    tok.nl_before
                    and tok.value not in _TYPE_CONTINUATION
                    and prev is not None
                    and prev.value not in _TYPE_CONTINUATION
                ):
                    return
            if tok.is_punct("(", "[", "{"):
                depth += 1
            elif tok.is_punct(")", "]", "}"):
                depth -= 1
                if depth < 0:
                    raise self.error(f"Unexpected '{tok.value}'", tok)
            first = False
            prev = self.advance()

    def skip_function(self) -> None:
        """Skip ``[async] function[*] [name][<T>](params)[: R] {body}``."""
        if self.at_name("async"):
            self.advance()
        self.expect_name("function")
        if self.at_punct("*"):
            self.advance()
        if self.peek().kind is TokenKind.NAME:
            self.advance()
        if self.at_punct("<"):
            self.skip_angle_brackets()
        if not self.at_punct("("):
            raise self.error("Expected '(' in function declaration")
        self.skip_balanced()
        if self.at_punct(":"):
            self.advance()
            self.skip_type(_RETURN_TYPE_STOPS)
        if self.at_punct("{"):
            self.skip_balanced()
        else:
            # Overload signature or ambient declaration
            self.consume_semicolon()

    def skip_class_tail(self) -> str | None:
        """Skip ``class [Name] [extends ...] [implements ...] {body}``; return the name."""
        self.expect_name("class")
        name: str | None = None
        tok = self.peek()
        if tok.kind is TokenKind.NAME and tok.value not in ("extends", "implements"):
            name = self.advance().value
        while not self.at_punct("{"):
            if self.at_eof():
                raise self.error("Expected class body")
            if self.at_punct("(", "["):
                self.skip_balanced()
            elif self.at_punct("<"):
                self.skip_angle_brackets()
            else:
                self.advance()
        self.skip_balanced()
        return name

    def skip_statement(self) -> None:
        """Skip one statement that cannot declare routes."""
        tok = self.peek()
        if tok.is_punct("{"):
            self.skip_balanced()
        elif tok.is_name(*_CONTROL_KEYWORDS):
            keyword = self.advance().value
            if keyword == "for" and self.at_name("await"):
                self.advance()
            if self.at_punct("("):
                self.skip_balanced()
            if keyword == "switch":
                self.skip_balanced()
                return
            self.skip_statement()
            if keyword == "if" and self.at_name("else"):
                self.advance()
                self.skip_statement()
        elif tok.is_name("do"):
            self.advance()
            self.skip_statement()
            self.expect_name("while")
            self.skip_balanced()
            if self.at_punct(";"):
                self.advance()
        elif tok.is_name("try"):
            self.advance()
            self.skip_balanced()
            while self.at_name("catch", "finally"):
                self.advance()
                if self.at_punct("("):
                    self.skip_balanced()
                self.skip_balanced()
        elif tok.is_name("function") or (tok.is_name("async") and self.peek(1).is_name("function")):
            self.skip_function()
        elif tok.kind is TokenKind.NAME and tok.value not in _RESERVED_WORDS and self.peek(1).is_punct(":"):
            # Labelled statement
            self.advance()
            self.advance()
            self.skip_statement()
        else:
            self.skip_until_statement_end()

    def skip_ts_declaration(self) -> None:
        """Skip interface/type/enum/declare/namespace declarations."""
        keyword = self.advance().value
        if keyword == "abstract":
            self.skip_class_tail()
            return
        if keyword == "declare":
            if self.at_name("module", "namespace", "global"):
                self.skip_ts_declaration()
            elif self.at_name("function", "async"):
                self.skip_function()
            elif self.at_name("class", "abstract"):
                self.skip_until_statement_end()
            else:
                self.skip_until_statement_end()
            return
        if keyword in ("interface", "enum", "namespace", "module", "global"):
            while not self.at_punct("{"):
                if self.at_eof() or self.at_punct(";"):
                    self.consume_semicolon()
                    return
                if self.at_punct("<"):
                    self.skip_angle_brackets()
                else:
                    self.advance()
            self.skip_balanced()
            return
        # type alias
        self.skip_until_statement_end()

    # -- statements ----------------------------------------------------------

    def parse_module(self) -> Module:
        body: list[Statement] = []
        while not self.at_eof():
            stmt = self.parse_statement()
            if stmt is not None:
                body.append(stmt)
        return Module(tuple(body))

    def parse_statement(self) -> Statement | None:
        tok = self.peek()
        if tok.is_punct(";"):
            self.advance()
            return None
        if tok.is_punct("@"):
            decorators = self.parse_decorators()
            exported = False
            if self.at_name("export"):
                self.advance()
                exported = True
                if self.at_name("default"):
                    self.advance()
            if self.at_name("abstract"):
                self.advance()
            name = self.skip_class_tail()
            return ClassDecl(name, decorators, tok.line, exported)
        if tok.is_name("import") and not self.peek(1).is_punct("(", "."):
            return self.parse_import()
        if tok.is_name("export"):
            return self.parse_export()
        if tok.is_name(*_DECLARATION_KEYWORDS) and self._starts_declaration():
            return self.parse_var_decl(exported=False)
        if tok.is_name("class"):
            name = self.skip_class_tail()
            return ClassDecl(name, (), tok.line)
        if tok.is_name(*_TS_DECLARATION_KEYWORDS) and self._starts_ts_declaration():
            self.skip_ts_declaration()
            return None
        if (
            tok.is_name(*_CONTROL_KEYWORDS, "do", "try", "function")
            or tok.is_punct("{")
            or (tok.is_name("async") and self.peek(1).is_name("function"))
            or (tok.kind is TokenKind.NAME and tok.value not in _RESERVED_WORDS and self.peek(1).is_punct(":"))
        ):
            self.skip_statement()
            return None
        if tok.is_name("return", "throw", "break", "continue", "debugger"):
            self.skip_until_statement_end()
            return None
        expression = self.parse_expression()
        self.consume_semicolon()
        return ExprStatement(expression, tok.line)

    def _starts_declaration(self) -> bool:
        nxt = self.peek(1)
        if self.at_name("const") and nxt.is_name("enum"):
            return True
        return nxt.kind is TokenKind.NAME or nxt.is_punct("{", "[")

    def _starts_ts_declaration(self) -> bool:
        tok = self.peek()
        nxt = self.peek(1)
        if nxt.nl_before and tok.value in ("type", "namespace", "module", "abstract"):
            return False
        if tok.value == "abstract":
            return nxt.is_name("class")
        if tok.value in ("module", "namespace"):
            return nxt.kind in (TokenKind.NAME, TokenKind.STRING)
        return nxt.kind is TokenKind.NAME

    def parse_decorators(self) -> tuple[Expr, ...]:
        decorators: list[Expr] = []
        while self.at_punct("@"):
            self.advance()
            decorators.append(self.parse_postfix(self.parse_primary()))
        return tuple(decorators)

    def parse_import(self) -> ImportDecl | None:
        start = self.expect_name("import")
        type_only = False
        if self.at_name("type") and not self.peek(1).is_punct(",") and not self.peek(1).is_name("from"):
            self.advance()
            type_only = True
        if self.peek().kind is TokenKind.STRING:
            source = self.advance().value
            self._skip_import_attributes()
            self.consume_semicolon()
            return ImportDecl(source, (), start.line, type_only)
        if self.peek().kind is TokenKind.NAME and self.peek(1).is_punct("="):
            # import x = require("y")
            self.skip_until_statement_end()
            return None

        specifiers: list[ImportSpec] = []
        if self.peek().kind is TokenKind.NAME and not self.at_name("from"):
            specifiers.append(ImportSpec("default", self.advance().value))
            if self.at_punct(","):
                self.advance()
        if self.at_punct("*"):
            self.advance()
            self.expect_name("as")
            specifiers.append(ImportSpec("*", self.expect_name().value))
        elif self.at_punct("{"):
            self.advance()
            while not self.at_punct("}"):
                if self.at_name("type") and self.peek(1).kind in (TokenKind.NAME, TokenKind.STRING) and not self.peek(1).is_name("as"):
                    self.advance()
                imported_tok = self.advance()
                if imported_tok.kind not in (TokenKind.NAME, TokenKind.STRING):
                    raise self.error("Expected import specifier", imported_tok)
                local = imported_tok.value
                if self.at_name("as"):
                    self.advance()
                    local = self.expect_name().value
                specifiers.append(ImportSpec(imported_tok.value, local))
                if not self.at_punct("}"):
                    self.expect_punct(",")
            self.advance()
        self.expect_name("from")
        source_tok = self.advance()
        if source_tok.kind is not TokenKind.STRING:
            raise self.error("Expected module specifier string", source_tok)
        self._skip_import_attributes()
        self.consume_semicolon()
        return ImportDecl(source_tok.value, tuple(specifiers), start.line, type_only)

    def _skip_import_attributes(self) -> None:
        if self.at_name("assert", "with") and self.peek(1).is_punct("{") and not self.peek().nl_before:
            self.advance()
            self.skip_balanced()

    def parse_export(self) -> Statement | None:
        start = self.expect_name("export")
        tok = self.peek()
        if tok.is_name("default"):
            self.advance()
            if self.at_name("function") or (self.at_name("async") and self.peek(1).is_name("function")):
                self.skip_function()
                return ExportDefault(None, start.line)
            if self.at_punct("@"):
                decorators = self.parse_decorators()
                name = self.skip_class_tail()
                return ClassDecl(name, decorators, start.line, exported=True)
            if self.at_name("class") or (self.at_name("abstract") and self.peek(1).is_name("class")):
                if self.at_name("abstract"):
                    self.advance()
                name = self.skip_class_tail()
                return ClassDecl(name, (), start.line, exported=True)
            if self.at_name("interface"):
                self.skip_ts_declaration()
                return None
            expression = self.parse_assignment()
            self.consume_semicolon()
            return ExportDefault(expression, start.line)
        if tok.is_punct("{"):
            return self._parse_export_list(start)
        if tok.is_name("type") and self.peek(1).is_punct("{"):
            self.advance()
            self._parse_export_list(start)
            return None
        if tok.is_punct("*"):
            self.advance()
            if self.at_name("as"):
                self.advance()
                self.advance()
            self.expect_name("from")
            source = self.advance().value
            self.consume_semicolon()
            return ExportAll(source, start.line)
        if tok.is_name(*_DECLARATION_KEYWORDS):
            return self.parse_var_decl(exported=True)
        if tok.is_punct("@"):
            decorators = self.parse_decorators()
            name = self.skip_class_tail()
            return ClassDecl(name, decorators, start.line, exported=True)
        if tok.is_name("class"):
            name = self.skip_class_tail()
            return ClassDecl(name, (), start.line, exported=True)
        if tok.is_name("function") or (tok.is_name("async") and self.peek(1).is_name("function")):
            self.skip_function()
            return None
        if tok.is_name(*_TS_DECLARATION_KEYWORDS):
            self.skip_ts_declaration()
            return None
        # export import x = ..., export = x, export as namespace x
        self.skip_until_statement_end()
        return None

    def _parse_export_list(self, start: Token) -> ExportNamed:
        self.expect_punct("{")
        specifiers: list[ExportSpec] = []
        while not self.at_punct("}"):
            if self.at_name("type") and self.peek(1).kind is TokenKind.NAME and not self.peek(1).is_name("as"):
                self.advance()
            local_tok = self.advance()
            if local_tok.kind not in (TokenKind.NAME, TokenKind.STRING):
                raise self.error("Expected export specifier", local_tok)
            exported = local_tok.value
            if self.at_name("as"):
                self.advance()
                exported = self.advance().value
            specifiers.append(ExportSpec(local_tok.value, exported))
            if not self.at_punct("}"):
                self.expect_punct(",")
        self.advance()
        source: str | None = None
        if self.at_name("from"):
            self.advance()
            source_tok = self.advance()
            if source_tok.kind is not TokenKind.STRING:
                raise self.error("Expected module specifier string", source_tok)
            source = source_tok.value
        self.consume_semicolon()
        return ExportNamed(tuple(specifiers), start.line, source)

    def parse_var_decl(self, *, exported: bool) -> VarDecl | None:
        start = self.advance()
        if start.value == "const" and self.at_name("enum"):
            self.skip_ts_declaration()
            return None
        declarators: list[Declarator] = []
        while True:
            tok = self.peek()
            name: str | None = None
            if tok.kind is TokenKind.NAME:
                name = self.advance().value
            elif tok.is_punct("{", "["):
                self.skip_balanced()
            else:
                raise self.error(f"Expected binding name but found {self._describe(tok)}", tok)
            if self.at_punct("!"):
                self.advance()
            annotation: str | None = None
            if self.at_punct(":"):
                self.advance()
                annotation = self.skip_type(_DECLARATOR_TYPE_STOPS)
            init: Expr | None = None
            if self.at_punct("="):
                self.advance()
                init = self.parse_assignment()
            declarators.append(Declarator(name, annotation, init, tok.line))
            if not self.at_punct(","):
                break
            self.advance()
        self.consume_semicolon()
        return VarDecl(tuple(declarators), start.line, exported)

    # -- expressions ---------------------------------------------------------

    def parse_expression(self) -> Expr:
        expr = self.parse_assignment()
        if self.at_punct(","):
            line = expr.line
            while self.at_punct(","):
                self.advance()
                self.parse_assignment()
            return Unsupported("sequence expression", line)
        return expr

    def parse_assignment(self) -> Expr:
        arrow = self.try_arrow()
        if arrow is not None:
            return arrow
        left = self.parse_conditional()
        tok = self.peek()
        if tok.kind is TokenKind.PUNCT and tok.value in _ASSIGNMENT_OPERATORS:
            self.advance()
            self.parse_assignment()
            return Unsupported("assignment expression", left.line)
        if tok.is_punct(">") and self._joined_operator() in (">>=", ">>>="):
            for _ in range(len(self._joined_operator())):
                self.advance()
            self.parse_assignment()
            return Unsupported("assignment expression", left.line)
        return left

    def try_arrow(self) -> Arrow | None:
        tok = self.peek()
        is_async = False
        offset = 0
        if tok.is_name("async") and not self.peek(1).nl_before and (
            self.peek(1).is_punct("(", "<") or (self.peek(1).kind is TokenKind.NAME and self.peek(2).is_punct("=>"))
        ):
            is_async = True
            offset = 1
        first = self.peek(offset)
        if first.kind is TokenKind.NAME and first.value not in _RESERVED_WORDS and self.peek(offset + 1).is_punct("=>"):
            for _ in range(offset + 1):
                self.advance()
            return self._finish_arrow((first.value,), tok.line, is_async)
        if not first.is_punct("(", "<"):
            return None

        saved = self.i
        try:
            for _ in range(offset):
                self.advance()
            if self.at_punct("<"):
                self.skip_angle_brackets()
            if not self.at_punct("("):
                raise self.error("not an arrow")
            params = self._arrow_params()
            if self.at_punct(":"):
                self.advance()
                self.skip_type(_RETURN_TYPE_STOPS)
            if not self.at_punct("=>"):
                raise self.error("not an arrow")
        except SourceSyntaxError:
            self.i = saved
            return None
        return self._finish_arrow(params, tok.line, is_async)

    def _arrow_params(self) -> tuple[str, ...]:
        """Skip a parenthesised parameter list, collecting simple parameter names."""
        open_index = self.i
        self.skip_balanced()
        params: list[str] = []
        depth = 0
        for index in range(open_index, self.i):
            tok = self.tokens[index]
            if tok.is_punct("(", "[", "{", "<"):
                depth += 1
                continue
            if tok.is_punct(")", "]", "}", ">"):
                depth -= 1
                continue
            if depth != 1 or tok.kind is not TokenKind.NAME:
                continue
            prev = self.tokens[index - 1]
            nxt = self.tokens[index + 1]
            if prev.is_punct("(", ",", "...") and nxt.is_punct(",", ")", ":", "=", "?"):
                params.append(tok.value)
        return tuple(params)

    def _finish_arrow(self, params: tuple[str, ...], line: int, is_async: bool) -> Arrow:
        self.expect_punct("=>")
        if self.at_punct("{"):
            self.skip_balanced()
            return Arrow(params, None, line, is_async)
        return Arrow(params, self.parse_assignment(), line, is_async)

    def parse_conditional(self) -> Expr:
        test = self.parse_binary(0)
        if not self.at_punct("?"):
            return test
        self.advance()
        consequent = self.parse_assignment()
        self.expect_punct(":")
        alternate = self.parse_assignment()
        return Conditional(test, consequent, alternate, test.line)

    def _joined_operator(self) -> str:
        """Recombine ``>`` tokens written without spaces (``>>``, ``>=``, ``>>>``)."""
        text = ">"
        end = self.peek().end
        offset = 1
        while len(text) < 4:
            nxt = self.peek(offset)
            if nxt.start != end or not nxt.is_punct(">", "=", "=="):
                break
            text += nxt.value
            end = nxt.end
            offset += 1
        for candidate in (">>>=", ">>>", ">>=", ">>", ">=", ">"):
            if text.startswith(candidate):
                return candidate
        return ">"

    def _binary_operator(self) -> str | None:
        tok = self.peek()
        if tok.kind is TokenKind.PUNCT:
            if tok.value == ">":
                return self._joined_operator()
            return tok.value if tok.value in _BINARY_PRECEDENCE else None
        if tok.is_name("instanceof", "in"):
            return tok.value
        return None

    def parse_binary(self, min_precedence: int) -> Expr:
        left = self.parse_unary()
        while True:
            tok = self.peek()
            if tok.is_name("as", "satisfies") and not tok.nl_before:
                self.advance()
                if self.at_name("const"):
                    self.advance()
                else:
                    self.skip_type(_ASSERTION_STOPS)
                left = TypeAssertion(left, left.line)
                continue
            operator = self._binary_operator()
            if operator is None or operator.endswith("=") and operator not in _BINARY_PRECEDENCE:
                return left
            precedence = _BINARY_PRECEDENCE[operator]
            if precedence <= min_precedence:
                return left
            if operator.startswith(">"):
                for _ in range(len(operator)):
                    self.advance()
            else:
                self.advance()
            # ** is right-associative
            right = self.parse_binary(precedence - 1 if operator == "**" else precedence)
            if operator in _LOGICAL_OPERATORS:
                left = Logical(operator, left, right, left.line)
            else:
                left = Binary(operator, left, right, left.line)

    def parse_unary(self) -> Expr:
        tok = self.peek()
        if (tok.kind is TokenKind.PUNCT and tok.value in _PREFIX_PUNCT) or (
            tok.kind is TokenKind.NAME and tok.value in _PREFIX_KEYWORDS and self._operand_follows()
        ):
            self.advance()
            return Unary(tok.value, self.parse_unary(), tok.line)
        if tok.is_punct("<") and not self.jsx:
            # Old-style type assertion <T>expr
            self.skip_angle_brackets()
            return TypeAssertion(self.parse_unary(), tok.line)
        expr = self.parse_postfix(self.parse_primary())
        nxt = self.peek()
        if nxt.is_punct("++", "--") and not nxt.nl_before:
            self.advance()
            return Unary(nxt.value, expr, expr.line)
        return expr

    def _operand_follows(self) -> bool:
        nxt = self.peek(1)
        if nxt.kind is TokenKind.EOF:
            return False
        return not (nxt.kind is TokenKind.PUNCT and nxt.value in (")", "]", "}", ",", ";", "=", ".", "=>", ":", "?"))

    def parse_postfix(self, expr: Expr) -> Expr:
        while True:
            tok = self.peek()
            if tok.is_punct("."):
                self.advance()
                name_tok = self.advance()
                if name_tok.kind is not TokenKind.NAME:
                    raise self.error("Expected property name after '.'", name_tok)
                expr = Member(expr, name_tok.value, tok.line)
            elif tok.is_punct("?."):
                self.advance()
                if self.at_punct("("):
                    expr = Call(expr, self.parse_arguments(), tok.line)
                elif self.at_punct("["):
                    self.advance()
                    self.parse_expression()
                    self.expect_punct("]")
                    expr = Member(expr, None, tok.line, optional=True)
                else:
                    name_tok = self.advance()
                    if name_tok.kind is not TokenKind.NAME:
                        raise self.error("Expected property name after '?.'", name_tok)
                    expr = Member(expr, name_tok.value, tok.line, optional=True)
            elif tok.is_punct("["):
                self.advance()
                self.parse_expression()
                self.expect_punct("]")
                expr = Member(expr, None, tok.line)
            elif tok.is_punct("("):
                expr = Call(expr, self.parse_arguments(), expr.line)
            elif tok.is_punct("!") and not tok.nl_before:
                self.advance()
                expr = TypeAssertion(expr, expr.line)
            elif tok.is_punct("<") and tok.start == self.tokens[self.i - 1].end and self._generic_call_follows():
                self.skip_angle_brackets()
                if self.at_punct("("):
                    expr = Call(expr, self.parse_arguments(), expr.line)
            elif tok.kind is TokenKind.TEMPLATE and not tok.nl_before:
                self.advance()
                expr = Unsupported("tagged template", expr.line)
            else:
                return expr

    def _generic_call_follows(self) -> bool:
        """True when ``<...>`` at the cursor is a type-argument list before a call."""
        saved = self.i
        try:
            self.skip_angle_brackets()
            return self.at_punct("(") or (self.at_punct(".") and not self.peek().nl_before)
        except SourceSyntaxError:
            return False
        finally:
            self.i = saved

    def parse_arguments(self) -> tuple[Expr, ...]:
        self.expect_punct("(")
        args: list[Expr] = []
        while not self.at_punct(")"):
            if self.at_punct("..."):
                spread_tok = self.advance()
                args.append(Spread(self.parse_assignment(), spread_tok.line))
            else:
                args.append(self.parse_assignment())
            if not self.at_punct(")"):
                self.expect_punct(",")
        self.advance()
        return tuple(args)

    def parse_primary(self) -> Expr:
        tok = self.peek()
        kind = tok.kind
        if kind is TokenKind.STRING:
            self.advance()
            return Literal(tok.value, tok.line)
        if kind is TokenKind.NUMBER:
            self.advance()
            return Literal(_number_value(tok.value), tok.line)
        if kind is TokenKind.TEMPLATE:
            self.advance()
            return Template(None if tok.interpolated else tok.value, tok.line)
        if kind is TokenKind.REGEX:
            self.advance()
            return Unsupported("regular expression", tok.line)
        if kind is TokenKind.JSX:
            self.advance()
            return Jsx(tok.value, tok.line)
        if kind is TokenKind.NAME:
            return self._parse_name_primary()
        if tok.is_punct("("):
            self.advance()
            expr = self.parse_expression()
            self.expect_punct(")")
            return expr
        if tok.is_punct("["):
            return self.parse_array()
        if tok.is_punct("{"):
            return self.parse_object()
        raise self.error(f"Unexpected token {self._describe(tok)}", tok)

    def _parse_name_primary(self) -> Expr:
        tok = self.peek()
        value = tok.value
        if value == "function" or (value == "async" and self.peek(1).is_name("function") and not self.peek(1).nl_before):
            self.skip_function()
            return Unsupported("function expression", tok.line)
        if value == "class":
            self.skip_class_tail()
            return Unsupported("class expression", tok.line)
        if value == "new":
            return self.parse_new()
        self.advance()
        if value == "true":
            return Literal(True, tok.line)
        if value == "false":
            return Literal(False, tok.line)
        if value == "null":
            return Literal(None, tok.line)
        if value in _RESERVED_WORDS:
            raise self.error(f"Unexpected keyword '{value}'", tok)
        return Identifier(value, tok.line)

    def parse_new(self) -> Expr:
        start = self.expect_name("new")
        if self.at_punct("."):
            # new.target
            self.advance()
            self.expect_name()
            return Unsupported("new.target", start.line)
        callee: Expr = self.parse_primary()
        while True:
            if self.at_punct("."):
                self.advance()
                callee = Member(callee, self.expect_name().value, start.line)
            elif self.at_punct("["):
                self.advance()
                self.parse_expression()
                self.expect_punct("]")
                callee = Member(callee, None, start.line)
            else:
                break
        if self.at_punct("<") and self._generic_call_follows():
            self.skip_angle_brackets()
        args: tuple[Expr, ...] = ()
        if self.at_punct("("):
            args = self.parse_arguments()
        return Call(callee, args, start.line, is_new=True)

    def parse_array(self) -> ArrayExpr:
        start = self.expect_punct("[")
        elements: list[Expr | None] = []
        while not self.at_punct("]"):
            if self.at_punct(","):
                self.advance()
                elements.append(None)
                continue
            if self.at_punct("..."):
                spread_tok = self.advance()
                elements.append(Spread(self.parse_assignment(), spread_tok.line))
            else:
                elements.append(self.parse_assignment())
            if not self.at_punct("]"):
                self.expect_punct(",")
        self.advance()
        return ArrayExpr(tuple(elements), start.line)

    def parse_object(self) -> ObjectExpr:
        start = self.expect_punct("{")
        members: list[Property | Spread] = []
        while not self.at_punct("}"):
            tok = self.peek()
            if tok.is_punct("..."):
                self.advance()
                members.append(Spread(self.parse_assignment(), tok.line))
            else:
                members.append(self._parse_property())
            if not self.at_punct("}"):
                self.expect_punct(",")
        self.advance()
        return ObjectExpr(tuple(members), start.line)

    def _parse_property(self) -> Property:
        tok = self.peek()
        # get/set/async/* modifiers introduce methods
        if tok.is_punct("*") or (
            tok.is_name("get", "set", "async") and not self.peek(1).is_punct(":", ",", "}", "(", "<", "=")
        ):
            self.advance()
            if self.at_punct("*"):
                self.advance()
            key = self._parse_property_key()
            self._skip_method_tail()
            return Property(key, Unsupported("method", tok.line), tok.line, method=True)

        key = self._parse_property_key()
        if self.at_punct("?"):
            self.advance()
        if self.at_punct(":"):
            self.advance()
            return Property(key, self.parse_assignment(), tok.line)
        if self.at_punct("(", "<"):
            self._skip_method_tail()
            return Property(key, Unsupported("method", tok.line), tok.line, method=True)
        if key is None or tok.kind is not TokenKind.NAME:
            raise self.error("Expected ':' after property key", self.peek())
        if self.at_punct("="):
            # Shorthand with default value (destructuring-like pattern)
            self.advance()
            self.parse_assignment()
        return Property(key, Identifier(key, tok.line), tok.line, shorthand=True)

    def _parse_property_key(self) -> str | None:
        tok = self.advance()
        if tok.kind in (TokenKind.NAME, TokenKind.STRING):
            return tok.value
        if tok.kind is TokenKind.NUMBER:
            number = _number_value(tok.value)
            return str(int(number)) if number.is_integer() else str(number)
        if tok.is_punct("["):
            self.parse_assignment()
            self.expect_punct("]")
            return None
        raise self.error(f"Unexpected token {self._describe(tok)} in object literal", tok)

    def _skip_method_tail(self) -> None:
        if self.at_punct("<"):
            self.skip_angle_brackets()
        if not self.at_punct("("):
            raise self.error("Expected '(' in method definition")
        self.skip_balanced()
        if self.at_punct(":"):
            self.advance()
            self.skip_type(_RETURN_TYPE_STOPS)
        if not self.at_punct("{"):
            raise self.error("Expected method body")
        self.skip_balanced()


def _number_value(text: str) -> float:
    cleaned = text.replace("_", "").rstrip("n")
    try:
        if len(cleaned) > 1 and cleaned[0] == "0" and cleaned[1] in "xXbBoO":
            return float(int(cleaned, 0))
        return float(cleaned)
    except ValueError:
        return math.nan


def _render_type(parts: list[Token]) -> str:
    out: list[str] = []
    prev: Token | None = None
    for tok in parts:
        if prev is not None and prev.kind is not TokenKind.PUNCT and tok.kind is not TokenKind.PUNCT:
            out.append(" ")
        out.append(tok.value if tok.kind is not TokenKind.STRING else repr(tok.value))
        prev = tok
    return "".join(out)


def parse_module(source: str, *, jsx: bool = True) -> Module:
    """Tokenize and parse one module.

    Raises:
        SourceSyntaxError: If the text cannot be tokenized or parsed
    """
    tokens = tokenize(source, jsx=jsx)
    return Parser(tokens, jsx=jsx).parse_module()


def is_jsx_path(path: str) -> bool:
    """JSX is enabled everywhere except TypeScript files without the x suffix."""
    return not path.lower().endswith((".ts", ".mts", ".cts"))
