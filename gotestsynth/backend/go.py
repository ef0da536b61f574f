"""GoPrinter: IR -> Go source text.

Pure syntax emission - no analysis. Statements and declarations render as
gofmt-style lines (tab indentation); expressions render inline, except for
function literals whose bodies span several lines at the current indent.

Assertions render as testify suite calls on a configurable receiver:

    s.EqualValues(int(42), x)
    s.True(ok)
    s.NoError(err)
"""

from __future__ import annotations

from gotestsynth.ir import (
    ArrayType,
    Assert,
    AssertKind,
    Assign,
    BasicLit,
    CallExpr,
    ChanType,
    CompositeLit,
    Decl,
    Ellipsis,
    Expr,
    ExprStmt,
    Field,
    FuncLit,
    FuncType,
    Ident,
    InterfaceType,
    KeyValue,
    MapType,
    MethodDecl,
    MultiAssign,
    Name,
    Return,
    Selector,
    StarExpr,
    Stmt,
    StructDecl,
    StructType,
    TypeExpr,
    UnaryExpr,
)


class GoPrinter:
    """Render IR nodes as Go text."""

    def __init__(self, assert_receiver: str = "s") -> None:
        self.assert_receiver = assert_receiver
        self.output: list[str] = []
        self.indent = 0

    # ============================================================
    # PUBLIC ENTRY POINTS
    # ============================================================

    def stmt(self, stmt: Stmt) -> str:
        """Render one statement (possibly several lines) at indent zero."""
        self.output = []
        self.indent = 0
        self._emit_stmt(stmt)
        return "\n".join(self.output)

    def stmts(self, stmts: list[Stmt]) -> list[str]:
        return [self.stmt(s) for s in stmts]

    def decl(self, decl: Decl) -> str:
        """Render a top-level declaration."""
        self.output = []
        self.indent = 0
        if isinstance(decl, StructDecl):
            self._emit_struct_decl(decl)
        elif isinstance(decl, MethodDecl):
            self._emit_method_decl(decl)
        else:
            self._line("// unknown declaration")
        return "\n".join(self.output)

    def expr(self, expr: Expr) -> str:
        return self._emit_expr(expr)

    def type_expr(self, typ: TypeExpr) -> str:
        return self._type_to_go(typ)

    # ============================================================
    # DECLARATION EMISSION
    # ============================================================

    def _emit_struct_decl(self, decl: StructDecl) -> None:
        if not decl.fields:
            self._line(f"type {decl.name} struct{{}}")
            return
        self._line(f"type {decl.name} struct {{")
        self.indent += 1
        for f in decl.fields:
            self._line(self._field_to_go(f))
        self.indent -= 1
        self._line("}")

    def _emit_method_decl(self, decl: MethodDecl) -> None:
        recv = f"{decl.receiver_name} {self._type_to_go(decl.receiver_type)}"
        sig = self._signature(decl.typ)
        self._line(f"func ({recv}) {decl.name}{sig} {{")
        self.indent += 1
        for s in decl.body:
            self._emit_stmt(s)
        self.indent -= 1
        self._line("}")

    # ============================================================
    # STATEMENT EMISSION
    # ============================================================

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Assign):
            self._emit_stmt_Assign(stmt)
        elif isinstance(stmt, MultiAssign):
            self._emit_stmt_MultiAssign(stmt)
        elif isinstance(stmt, ExprStmt):
            self._line(self._emit_expr(stmt.expr))
        elif isinstance(stmt, Return):
            self._emit_stmt_Return(stmt)
        elif isinstance(stmt, Assert):
            self._emit_stmt_Assert(stmt)
        else:
            self._line("// unknown statement")

    def _emit_stmt_Assign(self, stmt: Assign) -> None:
        value = self._emit_expr(stmt.value)
        if not stmt.is_declaration:
            self._line(f"{stmt.target} = {value}")
        elif stmt.decl_type is not None:
            self._line(f"var {stmt.target} {self._type_to_go(stmt.decl_type)} = {value}")
        else:
            self._line(f"{stmt.target} := {value}")

    def _emit_stmt_MultiAssign(self, stmt: MultiAssign) -> None:
        targets = ", ".join(stmt.targets)
        op = ":=" if stmt.is_declaration else "="
        self._line(f"{targets} {op} {self._emit_expr(stmt.value)}")

    def _emit_stmt_Return(self, stmt: Return) -> None:
        if not stmt.values:
            self._line("return")
            return
        values = ", ".join(self._emit_expr(v) for v in stmt.values)
        self._line(f"return {values}")

    def _emit_stmt_Assert(self, stmt: Assert) -> None:
        value = self._emit_expr(stmt.value)
        method = f"{self.assert_receiver}.{stmt.kind.value}"
        if stmt.kind == AssertKind.EQUAL_VALUES and stmt.expected is not None:
            self._line(f"{method}({self._emit_expr(stmt.expected)}, {value})")
        else:
            self._line(f"{method}({value})")

    # ============================================================
    # EXPRESSION EMISSION
    # ============================================================

    def _emit_expr(self, expr: Expr) -> str:
        if isinstance(expr, Name):
            return expr.name
        if isinstance(expr, BasicLit):
            return expr.value
        if isinstance(expr, CallExpr):
            return self._emit_expr_CallExpr(expr)
        if isinstance(expr, CompositeLit):
            return self._emit_expr_CompositeLit(expr)
        if isinstance(expr, KeyValue):
            return f"{self._emit_expr(expr.key)}: {self._emit_expr(expr.value)}"
        if isinstance(expr, UnaryExpr):
            return f"{expr.op}{self._emit_expr(expr.x)}"
        if isinstance(expr, FuncLit):
            return self._emit_expr_FuncLit(expr)
        return "/* unknown expression */"

    def _emit_arg(self, arg: Expr | TypeExpr) -> str:
        if isinstance(arg, TypeExpr):
            return self._type_to_go(arg)
        return self._emit_expr(arg)

    def _emit_expr_CallExpr(self, expr: CallExpr) -> str:
        args = ", ".join(self._emit_arg(a) for a in expr.args)
        if isinstance(expr.fun, TypeExpr):
            fun = self._type_to_go(expr.fun)
            # Conversions to composite types need parentheses: (*T)(x), (func())(nil)
            if isinstance(expr.fun, (StarExpr, FuncType, ChanType)):
                fun = f"({fun})"
        else:
            fun = self._emit_expr(expr.fun)
        return f"{fun}({args})"

    def _emit_expr_CompositeLit(self, expr: CompositeLit) -> str:
        elts = ", ".join(self._emit_expr(e) for e in expr.elts)
        return f"{self._type_to_go(expr.typ)}{{{elts}}}"

    def _emit_expr_FuncLit(self, expr: FuncLit) -> str:
        saved_output = self.output
        self.output = []
        self.indent += 1
        for s in expr.body:
            self._emit_stmt(s)
        self.indent -= 1
        body = self.output
        self.output = saved_output
        closing = "\t" * self.indent + "}"
        return "\n".join([f"func{self._signature(expr.typ)} {{"] + body + [closing])

    # ============================================================
    # TYPE EMISSION
    # ============================================================

    def _type_to_go(self, typ: TypeExpr) -> str:
        if isinstance(typ, Ident):
            return typ.name
        if isinstance(typ, Selector):
            return f"{typ.package}.{typ.name}"
        if isinstance(typ, StarExpr):
            return f"*{self._type_to_go(typ.elem)}"
        if isinstance(typ, ArrayType):
            length = typ.length if typ.length is not None else ""
            return f"[{length}]{self._type_to_go(typ.elem)}"
        if isinstance(typ, MapType):
            return f"map[{self._type_to_go(typ.key)}]{self._type_to_go(typ.value)}"
        if isinstance(typ, ChanType):
            elem = self._type_to_go(typ.elem)
            if typ.direction == "send":
                return f"chan<- {elem}"
            if typ.direction == "recv":
                return f"<-chan {elem}"
            return f"chan {elem}"
        if isinstance(typ, FuncType):
            return "func" + self._signature(typ)
        if isinstance(typ, InterfaceType):
            return self._interface_to_go(typ)
        if isinstance(typ, StructType):
            if not typ.fields:
                return "struct{}"
            fields = "; ".join(self._field_to_go(f) for f in typ.fields)
            return f"struct{{ {fields} }}"
        if isinstance(typ, Ellipsis):
            return f"...{self._type_to_go(typ.elem)}"
        return "interface{}"

    def _interface_to_go(self, typ: InterfaceType) -> str:
        if not typ.methods:
            return "interface{}"
        parts: list[str] = []
        for m in typ.methods:
            if m.names and isinstance(m.typ, FuncType):
                parts.append(m.names[0] + self._signature(m.typ))
            else:
                parts.append(self._type_to_go(m.typ))
        return "interface{ " + "; ".join(parts) + " }"

    def _signature(self, typ: FuncType) -> str:
        """Parameter list plus result list, without the `func` keyword."""
        params = "(" + self._field_list(typ.params) + ")"
        if not typ.results:
            return params
        if len(typ.results) == 1 and not typ.results[0].names:
            return f"{params} {self._type_to_go(typ.results[0].typ)}"
        return f"{params} ({self._field_list(typ.results)})"

    def _field_list(self, fields: tuple[Field, ...]) -> str:
        return ", ".join(self._field_to_go(f) for f in fields)

    def _field_to_go(self, f: Field) -> str:
        typ = self._type_to_go(f.typ)
        if not f.names:
            return typ
        return f"{', '.join(f.names)} {typ}"

    # ============================================================
    # OUTPUT HELPERS
    # ============================================================

    def _line(self, text: str) -> None:
        """Emit a line with current indentation."""
        self.output.append("\t" * self.indent + text)
