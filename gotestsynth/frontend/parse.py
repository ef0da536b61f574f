"""Go declaration parser - recursive descent over the token stream.

Only the parts of a Go file that matter for value synthesis are kept: the
package clause, imports, type declarations and function signatures. Function
bodies and var/const declarations are skipped by bracket matching.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gotestsynth.ir import (
    ArrayType,
    ChanType,
    Ellipsis,
    Field,
    FuncDecl,
    FuncType,
    Ident,
    InterfaceType,
    MapType,
    Selector,
    StarExpr,
    StructType,
    TypeExpr,
    TypeSpec,
)

from .tokens import TK_EOF, TK_IDENT, TK_STRING, Token, tokenize


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


@dataclass
class Import:
    """One import spec; alias is None when the package name is implied."""

    path: str
    alias: str | None = None


@dataclass
class GoFile:
    """Declarations collected from one Go source file."""

    package: str
    imports: list[Import] = field(default_factory=list)
    types: list[TypeSpec] = field(default_factory=list)
    funcs: list[FuncDecl] = field(default_factory=list)

    def find_type(self, name: str) -> TypeSpec | None:
        for spec in self.types:
            if spec.name == name:
                return spec
        return None


_TYPE_START_OPS: set[str] = {"*", "[", "(", "<-"}
_TYPE_START_KEYWORDS: set[str] = {"map", "chan", "func", "interface", "struct"}
_OPEN: dict[str, str] = {"(": ")", "[": "]", "{": "}"}


class Parser:
    """Recursive descent parser for Go declarations and type expressions."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and tok.type != TK_STRING

    def at_ident(self) -> bool:
        return self.current().type == TK_IDENT

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "', got '" + self.current().value + "'")
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got '" + tok.value + "'")
        return self.advance()

    def skip_semis(self) -> None:
        while self.at(";"):
            self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def skip_balanced(self) -> None:
        """Skip an opening bracket and everything up to its matching close."""
        stack: list[str] = [_OPEN[self.advance().value]]
        while stack:
            tok = self.current()
            if tok.type == TK_EOF:
                raise self.error("unbalanced '" + stack[-1] + "'")
            if tok.type != TK_STRING and tok.value in _OPEN:
                stack.append(_OPEN[tok.value])
            elif tok.type != TK_STRING and tok.value == stack[-1]:
                stack.pop()
            self.advance()

    def skip_to_semi(self) -> None:
        """Skip a declaration up to the `;` that ends it at bracket depth zero."""
        while not self.at(";") and self.current().type != TK_EOF:
            if self.current().type != TK_STRING and self.current().value in _OPEN:
                self.skip_balanced()
            else:
                self.advance()

    # ── Top Level ────────────────────────────────────────────

    def parse_file(self) -> GoFile:
        self.skip_semis()
        self.expect("package")
        gofile = GoFile(self.expect_ident().value)
        self.skip_semis()
        while self.at("import"):
            gofile.imports.extend(self.parse_import_decl())
            self.skip_semis()
        while self.current().type != TK_EOF:
            if self.at("type"):
                gofile.types.extend(self.parse_type_decl())
            elif self.at("func"):
                decl = self.parse_func_decl()
                if decl is not None:
                    gofile.funcs.append(decl)
            elif self.at("var") or self.at("const"):
                self.skip_to_semi()
            elif self.at("import"):
                raise self.error("imports must precede other declarations")
            else:
                raise self.error("expected declaration, got '" + self.current().value + "'")
            self.skip_semis()
        return gofile

    def parse_import_decl(self) -> list[Import]:
        self.expect("import")
        if not self.at("("):
            return [self.parse_import_spec()]
        self.advance()
        imports: list[Import] = []
        self.skip_semis()
        while not self.at(")"):
            imports.append(self.parse_import_spec())
            self.skip_semis()
        self.expect(")")
        return imports

    def parse_import_spec(self) -> Import:
        alias: str | None = None
        if self.at_ident() or self.at("."):
            alias = self.advance().value
        tok = self.current()
        if tok.type != TK_STRING:
            raise self.error("expected import path, got '" + tok.value + "'")
        self.advance()
        return Import(tok.value[1:-1], alias)

    def parse_type_decl(self) -> list[TypeSpec]:
        self.expect("type")
        if not self.at("("):
            return [self.parse_type_spec()]
        self.advance()
        specs: list[TypeSpec] = []
        self.skip_semis()
        while not self.at(")"):
            specs.append(self.parse_type_spec())
            self.skip_semis()
        self.expect(")")
        return specs

    def parse_type_spec(self) -> TypeSpec:
        name = self.expect_ident().value
        if self.at("[") and self.peek(1).type == TK_IDENT and not self.peek(2).value == "]":
            raise self.error("type parameters are not supported")
        if self.at("="):
            self.advance()
        return TypeSpec(name, self.parse_type())

    def parse_func_decl(self) -> FuncDecl | None:
        self.expect("func")
        receiver: Field | None = None
        if self.at("("):
            self.advance()
            recv_fields = self.parse_param_list()
            self.expect(")")
            if len(recv_fields) != 1:
                raise self.error("method receiver must be a single field")
            receiver = recv_fields[0]
        name = self.expect_ident().value
        if self.at("["):
            raise self.error("type parameters are not supported")
        typ = self.parse_signature()
        if self.at("{"):
            self.skip_balanced()
        return FuncDecl(name, typ, receiver)

    # ── Signatures ───────────────────────────────────────────

    def parse_signature(self) -> FuncType:
        """Signature = Parameters [ Result ]"""
        self.expect("(")
        params = self.parse_param_list()
        self.expect(")")
        results: list[Field] = []
        if self.at("("):
            self.advance()
            results = self.parse_param_list()
            self.expect(")")
        elif self.at_type_start():
            results = [Field((), self.parse_type())]
        return FuncType(tuple(params), tuple(results))

    def at_type_start(self) -> bool:
        tok = self.current()
        if tok.type == TK_IDENT:
            return True
        if tok.type in _TYPE_START_KEYWORDS:
            return True
        return tok.type != TK_STRING and tok.value in _TYPE_START_OPS

    def parse_param_list(self) -> list[Field]:
        """Parse parameters up to (not including) the closing paren.

        Either every entry is named (`a, b int, c string`) or none is
        (`int, string`); bare identifiers are names in the first form and
        types in the second.
        """
        entries: list[tuple[str | None, TypeExpr | None]] = []
        self.skip_semis()
        while not self.at(")"):
            if self.at_ident() and not self.peek(1).value == ".":
                name = self.advance().value
                if self.at(",") or self.at(")") or self.at(";"):
                    entries.append((name, None))
                else:
                    entries.append((name, self.parse_param_type()))
            else:
                entries.append((None, self.parse_param_type()))
            if not self.at(")"):
                self.expect(",")
            self.skip_semis()
        named = any(n is not None and t is not None for n, t in entries)
        fields: list[Field] = []
        if not named:
            for name, typ in entries:
                if typ is None:
                    typ = Ident(name or "")
                fields.append(Field((), typ))
            return fields
        pending: list[str] = []
        for name, typ in entries:
            if name is None:
                raise self.error("mixed named and unnamed parameters")
            pending.append(name)
            if typ is not None:
                fields.append(Field(tuple(pending), typ))
                pending = []
        if pending:
            raise self.error("missing parameter type")
        return fields

    def parse_param_type(self) -> TypeExpr:
        if self.at("..."):
            self.advance()
            return Ellipsis(self.parse_type())
        return self.parse_type()

    # ── Types ────────────────────────────────────────────────

    def parse_type(self) -> TypeExpr:
        tok = self.current()
        if tok.type == TK_IDENT:
            self.advance()
            if self.at(".") and self.peek(1).type == TK_IDENT:
                self.advance()
                return Selector(tok.value, self.advance().value)
            if self.at("["):
                raise self.error("generic type instantiation is not supported")
            return Ident(tok.value)
        if self.at("*"):
            self.advance()
            return StarExpr(self.parse_type())
        if self.at("("):
            self.advance()
            inner = self.parse_type()
            self.expect(")")
            return inner
        if self.at("["):
            return self.parse_array_type()
        if self.at("map"):
            self.advance()
            self.expect("[")
            key = self.parse_type()
            self.expect("]")
            return MapType(key, self.parse_type())
        if self.at("chan"):
            self.advance()
            if self.at("<-"):
                self.advance()
                return ChanType(self.parse_type(), "send")
            return ChanType(self.parse_type(), "both")
        if self.at("<-"):
            self.advance()
            self.expect("chan")
            return ChanType(self.parse_type(), "recv")
        if self.at("func"):
            self.advance()
            return self.parse_signature()
        if self.at("interface"):
            return self.parse_interface_type()
        if self.at("struct"):
            return self.parse_struct_type()
        raise self.error("expected type, got '" + tok.value + "'")

    def parse_array_type(self) -> ArrayType:
        self.expect("[")
        if self.at("]"):
            self.advance()
            return ArrayType(self.parse_type())
        parts: list[str] = []
        depth = 0
        while depth > 0 or not self.at("]"):
            tok = self.current()
            if tok.type == TK_EOF:
                raise self.error("unterminated array length")
            if tok.value in ("(", "["):
                depth += 1
            elif tok.value in (")", "]"):
                depth -= 1
            parts.append(self.advance().value)
        self.expect("]")
        return ArrayType(self.parse_type(), "".join(parts))

    def parse_interface_type(self) -> InterfaceType:
        self.expect("interface")
        self.expect("{")
        methods: list[Field] = []
        self.skip_semis()
        while not self.at("}"):
            if self.at("~"):
                raise self.error("type constraints are not supported")
            if self.at_ident() and self.peek(1).value == "(":
                name = self.advance().value
                methods.append(Field((name,), self.parse_signature()))
            else:
                methods.append(Field((), self.parse_type()))
            if self.at("|"):
                raise self.error("type constraints are not supported")
            self.skip_semis()
        self.expect("}")
        return InterfaceType(tuple(methods))

    def parse_struct_type(self) -> StructType:
        self.expect("struct")
        self.expect("{")
        fields: list[Field] = []
        self.skip_semis()
        while not self.at("}"):
            fields.append(self.parse_field_decl())
            if self.current().type == TK_STRING:
                self.advance()  # struct tag
            self.skip_semis()
        self.expect("}")
        return StructType(tuple(fields))

    def parse_field_decl(self) -> Field:
        if self.at("*"):
            return Field((), self.parse_type())
        if self.at_ident():
            nxt = self.peek(1)
            if nxt.type == TK_STRING or nxt.value in (";", "}", "."):
                return Field((), self.parse_type())
            names = [self.advance().value]
            while self.at(","):
                self.advance()
                names.append(self.expect_ident().value)
            return Field(tuple(names), self.parse_type())
        raise self.error("expected field, got '" + self.current().value + "'")


def parse(source: str) -> GoFile:
    """Parse Go source into the declarations the synthesizer needs."""
    return Parser(tokenize(source)).parse_file()


def parse_type(source: str) -> TypeExpr:
    """Parse a standalone Go type expression, e.g. `map[string]*Node`."""
    parser = Parser(tokenize(source))
    typ = parser.parse_type()
    parser.skip_semis()
    if parser.current().type != TK_EOF:
        raise parser.error("unexpected '" + parser.current().value + "' after type")
    return typ
