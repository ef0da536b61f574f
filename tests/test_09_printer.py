"""Go printer output for IR nodes."""

from gotestsynth.backend.go import GoPrinter
from gotestsynth.backend.util import lower_first, quote, raw_quote, upper_first
from gotestsynth.frontend.parse import parse_type
from gotestsynth.ir import (
    Assert,
    AssertKind,
    Assign,
    BasicLit,
    CallExpr,
    CompositeLit,
    ExprStmt,
    Field,
    FuncLit,
    FuncType,
    Ident,
    KeyValue,
    MethodDecl,
    MultiAssign,
    Name,
    Return,
    StarExpr,
    StructDecl,
    UnaryExpr,
)


def test_assign_forms(printer: GoPrinter) -> None:
    assert printer.stmt(Assign("x", BasicLit("1"))) == "x := 1"
    assert printer.stmt(Assign("x", BasicLit("1"), decl_type=Ident("int"))) == "var x int = 1"
    assert printer.stmt(Assign("x", BasicLit("1"), is_declaration=False, decl_type=Ident("int"))) == "x = 1"
    assert printer.stmt(MultiAssign(["a", "b"], CallExpr(Name("F")))) == "a, b := F()"
    assert printer.stmt(MultiAssign(["a"], Name("b"), is_declaration=False)) == "a = b"


def test_assertions(printer: GoPrinter) -> None:
    assert printer.stmt(Assert(AssertKind.EQUAL_VALUES, Name("x"), BasicLit("int(1)"))) == "s.EqualValues(int(1), x)"
    assert printer.stmt(Assert(AssertKind.TRUE, Name("ok"))) == "s.True(ok)"
    assert printer.stmt(Assert(AssertKind.NO_ERROR, Name("err"))) == "s.NoError(err)"
    assert GoPrinter("t").stmt(Assert(AssertKind.NIL, Name("p"))) == "t.Nil(p)"


def test_conversions_to_composite_types_are_parenthesized(printer: GoPrinter) -> None:
    assert printer.expr(CallExpr(StarExpr(Ident("T")), [Name("nil")])) == "(*T)(nil)"
    assert printer.expr(CallExpr(parse_type("func()"), [Name("nil")])) == "(func())(nil)"
    assert printer.expr(CallExpr(Ident("MyInt"), [BasicLit("3")])) == "MyInt(3)"
    assert printer.expr(CallExpr(Name("make"), [parse_type("chan<- int")])) == "make(chan<- int)"


def test_composite_and_unary(printer: GoPrinter) -> None:
    lit = CompositeLit(Ident("P"), [KeyValue(Name("X"), BasicLit("1")), KeyValue(Name("Y"), BasicLit("2"))])
    assert printer.expr(UnaryExpr("&", lit)) == "&P{X: 1, Y: 2}"
    assert printer.expr(UnaryExpr("*", Name("p"))) == "*p"


def test_nested_func_literal_indentation(printer: GoPrinter) -> None:
    inner = FuncLit(FuncType((), (Field((), Ident("int")),)), [Return([BasicLit("1")])])
    outer = FuncLit(FuncType((), (Field((), parse_type("func() int")),)), [Assign("f", inner), Return([Name("f")])])
    assert printer.stmt(ExprStmt(CallExpr(outer))) == (
        "func() func() int {\n\tf := func() int {\n\t\treturn 1\n\t}\n\treturn f\n}()"
    )


def test_struct_decl(printer: GoPrinter) -> None:
    assert printer.decl(StructDecl("V1")) == "type V1 struct{}"
    decl = StructDecl("P", [Field(("X", "Y"), Ident("int")), Field((), parse_type("*Base"))])
    assert printer.decl(decl) == "type P struct {\n\tX, Y int\n\t*Base\n}"


def test_method_decl(printer: GoPrinter) -> None:
    sig = parse_type("func(ctx context.Context, n int) (bool, error)")
    body = [Return([Name("true"), Name("nil")])]
    decl = MethodDecl("s", StarExpr(Ident("V1")), "Check", sig, body)
    assert printer.decl(decl) == "func (s *V1) Check(ctx context.Context, n int) (bool, error) {\n\treturn true, nil\n}"


def test_type_expressions(printer: GoPrinter) -> None:
    for text in [
        "map[string][]*pkg.Item",
        "[4][N]byte",
        "<-chan error",
        "chan<- struct{}",
        "chan int",
        "func(...string) int",
        "func() (n int, err error)",
        "interface{ Len() int; io.Reader }",
        "struct{ A int; b, c string }",
        "interface{}",
    ]:
        assert printer.type_expr(parse_type(text)) == text


# ── String helpers ───────────────────────────────────────────


def test_lower_first_avoids_keywords() -> None:
    assert lower_first("Next") == "next"
    assert lower_first("Type") == "type_"
    assert lower_first("") == ""


def test_upper_first() -> None:
    assert upper_first("v1") == "V1"
    assert upper_first("") == ""


def test_quote_escapes() -> None:
    assert quote('a"b\n') == '"a\\"b\\n"'
    assert raw_quote("a\nb") == "`a\nb`"
    assert raw_quote("a`b") == '"a`b"'
