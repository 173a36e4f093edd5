"""Syntax tree for the parsed module subset.

Expressions form a small closed set of node shapes. Every shape the parser
can produce is listed in NodeKind, so a consumer that matches on the shapes it
understands can report anything else as an explicit unsupported case instead
of silently missing it. NodeKind values double as the display names used in
diagnostics ("Dynamic path value (TemplateLiteral)").
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar


class NodeKind(StrEnum):
    LITERAL = "Literal"
    TEMPLATE = "TemplateLiteral"
    ARRAY = "ArrayExpression"
    OBJECT = "ObjectExpression"
    IDENTIFIER = "Identifier"
    MEMBER = "MemberExpression"
    CALL = "CallExpression"
    CONDITIONAL = "ConditionalExpression"
    LOGICAL = "LogicalExpression"
    BINARY = "BinaryExpression"
    UNARY = "UnaryExpression"
    SPREAD = "SpreadElement"
    ARROW = "ArrowFunctionExpression"
    JSX = "JSXElement"
    TYPE_ASSERTION = "TypeAssertion"
    UNSUPPORTED = "Unsupported"


# -- expressions -------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Literal:
    """String, number, boolean or null literal."""

    kind: ClassVar[NodeKind] = NodeKind.LITERAL
    value: str | float | bool | None
    line: int

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)


@dataclass(frozen=True, slots=True)
class Template:
    """Template literal; ``value`` is only known when nothing is interpolated."""

    kind: ClassVar[NodeKind] = NodeKind.TEMPLATE
    value: str | None
    line: int


@dataclass(frozen=True, slots=True)
class ArrayExpr:
    kind: ClassVar[NodeKind] = NodeKind.ARRAY
    elements: tuple[Expr | None, ...]
    line: int


@dataclass(frozen=True, slots=True)
class Property:
    """Object member. ``key`` is None for computed keys."""

    key: str | None
    value: Expr
    line: int
    shorthand: bool = False
    method: bool = False


@dataclass(frozen=True, slots=True)
class ObjectExpr:
    kind: ClassVar[NodeKind] = NodeKind.OBJECT
    members: tuple[Property | Spread, ...]
    line: int

    def get(self, key: str) -> Expr | None:
        """Value of the last non-computed property named ``key``."""
        found: Expr | None = None
        for member in self.members:
            if isinstance(member, Property) and member.key == key:
                found = member.value
        return found

    def find_property(self, key: str) -> Property | None:
        found: Property | None = None
        for member in self.members:
            if isinstance(member, Property) and member.key == key:
                found = member
        return found


@dataclass(frozen=True, slots=True)
class Identifier:
    kind: ClassVar[NodeKind] = NodeKind.IDENTIFIER
    name: str
    line: int


@dataclass(frozen=True, slots=True)
class Member:
    """Property access. ``name`` is None for computed access ``a[b]``."""

    kind: ClassVar[NodeKind] = NodeKind.MEMBER
    object: Expr
    name: str | None
    line: int
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Call:
    """Call or ``new`` expression; dynamic ``import(...)`` has callee Identifier("import")."""

    kind: ClassVar[NodeKind] = NodeKind.CALL
    callee: Expr
    arguments: tuple[Expr, ...]
    line: int
    is_new: bool = False

    @property
    def callee_name(self) -> str | None:
        return self.callee.name if isinstance(self.callee, Identifier) else None

    @property
    def is_dynamic_import(self) -> bool:
        return self.callee_name == "import" and not self.is_new


@dataclass(frozen=True, slots=True)
class Conditional:
    kind: ClassVar[NodeKind] = NodeKind.CONDITIONAL
    test: Expr
    consequent: Expr
    alternate: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Logical:
    kind: ClassVar[NodeKind] = NodeKind.LOGICAL
    operator: str
    left: Expr
    right: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Binary:
    kind: ClassVar[NodeKind] = NodeKind.BINARY
    operator: str
    left: Expr
    right: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Unary:
    kind: ClassVar[NodeKind] = NodeKind.UNARY
    operator: str
    argument: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Spread:
    kind: ClassVar[NodeKind] = NodeKind.SPREAD
    argument: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Arrow:
    """Arrow function. ``body`` is None when the body is a statement block."""

    kind: ClassVar[NodeKind] = NodeKind.ARROW
    params: tuple[str, ...]
    body: Expr | None
    line: int
    is_async: bool = False


@dataclass(frozen=True, slots=True)
class Jsx:
    """JSX element; ``tag`` is empty for fragments."""

    kind: ClassVar[NodeKind] = NodeKind.JSX
    tag: str
    line: int


@dataclass(frozen=True, slots=True)
class TypeAssertion:
    """``x as T``, ``x satisfies T``, ``x!`` or ``<T>x``."""

    kind: ClassVar[NodeKind] = NodeKind.TYPE_ASSERTION
    expression: Expr
    line: int


@dataclass(frozen=True, slots=True)
class Unsupported:
    """Any expression outside the recognised shapes (function, class, sequence...)."""

    kind: ClassVar[NodeKind] = NodeKind.UNSUPPORTED
    description: str
    line: int


type Expr = (
    Literal
    | Template
    | ArrayExpr
    | ObjectExpr
    | Identifier
    | Member
    | Call
    | Conditional
    | Logical
    | Binary
    | Unary
    | Spread
    | Arrow
    | Jsx
    | TypeAssertion
    | Unsupported
)


def unwrap(node: Expr) -> Expr:
    """Strip type-assertion wrappers."""
    while isinstance(node, TypeAssertion):
        node = node.expression
    return node


def string_value(node: Expr | None) -> str | None:
    """Static string value of a string literal or plain template, else None."""
    if node is None:
        return None
    node = unwrap(node)
    if isinstance(node, Literal) and isinstance(node.value, str):
        return node.value
    if isinstance(node, Template):
        return node.value
    return None


def child_expressions(node: Expr) -> tuple[Expr, ...]:
    """Direct sub-expressions of ``node``, in source order."""
    match node:
        case ArrayExpr(elements=elements):
            return tuple(e for e in elements if e is not None)
        case ObjectExpr(members=members):
            return tuple(m.argument if isinstance(m, Spread) else m.value for m in members)
        case Member(object=obj):
            return (obj,)
        case Call(callee=callee, arguments=arguments):
            return (callee, *arguments)
        case Conditional(test=test, consequent=consequent, alternate=alternate):
            return (test, consequent, alternate)
        case Logical(left=left, right=right) | Binary(left=left, right=right):
            return (left, right)
        case Unary(argument=argument) | Spread(argument=argument):
            return (argument,)
        case Arrow(body=body):
            return (body,) if body is not None else ()
        case TypeAssertion(expression=expression):
            return (expression,)
        case _:
            return ()


def walk(node: Expr) -> Iterator[Expr]:
    """Pre-order traversal of an expression tree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(child_expressions(current)))


# -- statements --------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportSpec:
    """``imported`` is "default" for default imports and "*" for namespaces."""

    imported: str
    local: str


@dataclass(frozen=True, slots=True)
class ImportDecl:
    source: str
    specifiers: tuple[ImportSpec, ...]
    line: int
    type_only: bool = False


@dataclass(frozen=True, slots=True)
class Declarator:
    """One ``name[: Type] = init`` binding; ``name`` is None for destructuring."""

    name: str | None
    annotation: str | None
    init: Expr | None
    line: int


@dataclass(frozen=True, slots=True)
class VarDecl:
    declarators: tuple[Declarator, ...]
    line: int
    exported: bool = False


@dataclass(frozen=True, slots=True)
class ExportDefault:
    """``export default <expr>``; expression is None for function/class declarations."""

    expression: Expr | None
    line: int


@dataclass(frozen=True, slots=True)
class ExportSpec:
    local: str
    exported: str


@dataclass(frozen=True, slots=True)
class ExportNamed:
    """``export { a, b as c } [from "x"]``."""

    specifiers: tuple[ExportSpec, ...]
    line: int
    source: str | None = None


@dataclass(frozen=True, slots=True)
class ExportAll:
    source: str
    line: int


@dataclass(frozen=True, slots=True)
class ClassDecl:
    name: str | None
    decorators: tuple[Expr, ...]
    line: int
    exported: bool = False


@dataclass(frozen=True, slots=True)
class ExprStatement:
    expression: Expr
    line: int


type Statement = ImportDecl | VarDecl | ExportDefault | ExportNamed | ExportAll | ClassDecl | ExprStatement


@dataclass(frozen=True, slots=True)
class Module:
    """Top-level statements of one source file, in order."""

    body: tuple[Statement, ...]

    def declarators(self) -> list[tuple[Declarator, bool]]:
        """Every top-level variable binding with its exported flag."""
        return [(d, stmt.exported) for stmt in self.body if isinstance(stmt, VarDecl) for d in stmt.declarators]

    def find_declarator(self, name: str) -> Declarator | None:
        for declarator, _exported in self.declarators():
            if declarator.name == name:
                return declarator
        return None

    def imports(self) -> list[ImportDecl]:
        return [stmt for stmt in self.body if isinstance(stmt, ImportDecl)]
