"""gotestsynth IR - Go type expressions, value expressions, statements.

This module defines the data the synthesizers consume and produce:

    Go source -> Frontend -> [TypeExpr / TypeSpec] -> Synthesizer -> [Expr / Stmt / Decl] -> Printer -> Go text
    JSON capture -> Decoder -> [Stmt] -> Printer -> Go text

Type expressions are frozen (immutable, hashable) and form finite trees: a
self-referential declaration refers to itself by name only. Expressions and
statements are plain dataclasses; the decoder's substitution pass is the only
code that mutates them after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


# ============================================================
# TYPE EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class TypeExpr:
    """Base for all Go type expressions. Abstract."""


@dataclass(frozen=True)
class Ident(TypeExpr):
    """Bare identifier: basic type, `error`, `any`, or a name to resolve.

    Names that are neither basic nor builtin resolve through the symbol
    resolver to a TypeSpec in the current package.
    """

    name: str


@dataclass(frozen=True)
class Selector(TypeExpr):
    """Package-qualified reference: `pkg.Name`."""

    package: str
    name: str


@dataclass(frozen=True)
class StarExpr(TypeExpr):
    """Pointer type: `*T`."""

    elem: TypeExpr


@dataclass(frozen=True)
class ArrayType(TypeExpr):
    """Slice or array type.

    | length   | Go      |
    |----------|---------|
    | None     | []T     |
    | "3"      | [3]T    |
    | "N"      | [N]T    |
    | "..."    | [...]T  |
    """

    elem: TypeExpr
    length: str | None = None


@dataclass(frozen=True)
class MapType(TypeExpr):
    """Map type: `map[K]V`."""

    key: TypeExpr
    value: TypeExpr


ChanDir = Literal["both", "send", "recv"]


@dataclass(frozen=True)
class ChanType(TypeExpr):
    """Channel type.

    | direction | Go         |
    |-----------|------------|
    | both      | chan T     |
    | send      | chan<- T   |
    | recv      | <-chan T   |
    """

    elem: TypeExpr
    direction: ChanDir = "both"


@dataclass(frozen=True)
class Field:
    """Entry of a field list.

    Used for struct fields, function parameters/results, and interface
    methods. An interface method is a Field with one name and a FuncType;
    an embedded struct field or embedded interface has no names.
    """

    names: tuple[str, ...]
    typ: TypeExpr


@dataclass(frozen=True)
class FuncType(TypeExpr):
    """Function signature: `func(params) results`."""

    params: tuple[Field, ...] = ()
    results: tuple[Field, ...] = ()


@dataclass(frozen=True)
class InterfaceType(TypeExpr):
    """Structural interface: method set plus embedded interfaces."""

    methods: tuple[Field, ...] = ()


@dataclass(frozen=True)
class StructType(TypeExpr):
    """Struct type body (named via TypeSpec, or anonymous)."""

    fields: tuple[Field, ...] = ()


@dataclass(frozen=True)
class Ellipsis(TypeExpr):
    """Variadic parameter type: `...T`."""

    elem: TypeExpr


# ============================================================
# SOURCE DECLARATIONS
# ============================================================


@dataclass(frozen=True)
class TypeSpec:
    """`type Name <typ>` declaration found in Go source."""

    name: str
    typ: TypeExpr


@dataclass(frozen=True)
class FuncDecl:
    """Function or method declaration (body not retained).

    Invariants:
    - receiver is None for plain functions
    - receiver holds exactly one Field for methods
    """

    name: str
    typ: FuncType
    receiver: Field | None = None


# ============================================================
# VALUE EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for value expressions. Abstract."""


@dataclass
class Name(Expr):
    """Identifier or opaque variable path (e.g. `res[i]`)."""

    name: str


@dataclass
class BasicLit(Expr):
    """Literal source text, printed verbatim (`42`, `"abc"`, `int8(3)`)."""

    value: str


EMPTY = ""


@dataclass
class CallExpr(Expr):
    """Call or conversion.

    `fun` is a TypeExpr for conversions like `MyInt(3)`; an argument is a
    TypeExpr only for builtins taking a type (`make(chan int)`).
    """

    fun: Expr | TypeExpr
    args: list[Expr | TypeExpr] = field(default_factory=list)


@dataclass
class KeyValue(Expr):
    """`key: value` element of a composite literal."""

    key: Expr
    value: Expr


@dataclass
class CompositeLit(Expr):
    """Composite literal `T{elts}`; struct elements are KeyValue with Name keys."""

    typ: TypeExpr
    elts: list[Expr] = field(default_factory=list)


@dataclass
class UnaryExpr(Expr):
    """`&x` (address-of) or `*x` (dereference)."""

    op: Literal["&", "*"]
    x: Expr


@dataclass
class FuncLit(Expr):
    """Function literal `func(...) ... { body }`."""

    typ: FuncType
    body: list[Stmt] = field(default_factory=list)


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for statements. Abstract."""


@dataclass
class Assign(Stmt):
    """Assignment to a single target.

    | is_declaration | decl_type | Go              |
    |----------------|-----------|-----------------|
    | True           | None      | x := v          |
    | True           | T         | var x T = v     |
    | False          | -         | x = v           |
    """

    target: str
    value: Expr
    is_declaration: bool = True
    decl_type: TypeExpr | None = None


@dataclass
class MultiAssign(Stmt):
    """`a, b := call` for functions with several results."""

    targets: list[str]
    value: Expr
    is_declaration: bool = True


@dataclass
class ExprStmt(Stmt):
    """Expression evaluated for side effects."""

    expr: Expr


@dataclass
class Return(Stmt):
    """`return a, b`; bare return when values is empty."""

    values: list[Expr] = field(default_factory=list)


class AssertKind(Enum):
    """Assertion forms understood by the printer."""

    EQUAL_VALUES = "EqualValues"
    TRUE = "True"
    FALSE = "False"
    NIL = "Nil"
    ERROR = "Error"
    NO_ERROR = "NoError"


@dataclass
class Assert(Stmt):
    """Assertion on a runtime value.

    Invariants:
    - expected is present only for EQUAL_VALUES
    """

    kind: AssertKind
    value: Expr
    expected: Expr | None = None


# ============================================================
# GENERATED DECLARATIONS
# ============================================================


@dataclass
class Decl:
    """Base for top-level declarations emitted next to a test. Abstract."""


@dataclass
class StructDecl(Decl):
    """Synthesized implementing type: `type Name struct{}`."""

    name: str
    fields: list[Field] = field(default_factory=list)


@dataclass
class MethodDecl(Decl):
    """Method attached to a synthesized type: `func (s *Recv) Name(...) ... {}`."""

    receiver_name: str
    receiver_type: TypeExpr
    name: str
    typ: FuncType
    body: list[Stmt] = field(default_factory=list)


# ============================================================
# BUILTIN NAMES
# ============================================================

INT_TYPES: frozenset[str] = frozenset(
    {
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "byte",
        "rune",
    }
)

FLOAT_TYPES: frozenset[str] = frozenset({"float32", "float64"})

COMPLEX_TYPES: frozenset[str] = frozenset({"complex64", "complex128"})

BASIC_TYPES: frozenset[str] = INT_TYPES | FLOAT_TYPES | COMPLEX_TYPES | {"string", "bool"}

ERROR_TYPE = "error"
ANY_TYPE = "any"


def is_exported(name: str) -> bool:
    """Go visibility rule: upper-case leading letter is exported."""
    return len(name) > 0 and name[0].isupper()
