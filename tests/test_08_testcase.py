"""Test-case driver: functions and methods to input statements and calls."""

from conftest import ROOT_PACKAGE, build_index, make_options

from gotestsynth.overrides import OverrideStore
from gotestsynth.runtime.validate import validate
from gotestsynth.synth.testcase import Header, TestCaseBuilder

SOURCE = """package app

type Counter struct {
	N int
}

func (c *Counter) Inc() { c.N++ }

func (c Counter) Value() int { return c.N }

func Add(a, b int) int { return a + b }

func Pair() (x, y int, err error) { return 0, 0, nil }

func Sum(xs ...int) int { return 0 }

func Drain(c chan int, d <-chan int) {}

func Skip(int, string) {}

func main() {}
"""


def setup(overrides=None, per_func: int = 2):
    index = build_index({"app.go": (ROOT_PACKAGE, SOURCE)})
    options = make_options()
    options.test_cases_per_func = per_func
    return TestCaseBuilder(index, overrides, options), index


def build(name: str, overrides=None):
    builder, index = setup(overrides)
    gofile = index.files["app.go"]
    decl = next(d for d in gofile.funcs if d.name == name)
    return builder.for_func(decl, index.handle_for("app.go"), gofile.package)


def test_plain_function() -> None:
    case = build("Add")
    assert case.name == "Add"
    assert case.header == Header("app", "app.go", "Add")
    assert case.stmts == ["var v1 int = 0", "var v2 int = 0"]
    assert case.func_stmt == "Add(v1, v2)"
    assert case.result_stmt == "v3 := Add(v1, v2)"
    assert case.result_usages == ["_ = v3"]
    assert case.body() == ["var v1 int = 0", "var v2 int = 0", "v3 := Add(v1, v2)", "_ = v3"]


def test_pointer_receiver() -> None:
    case = build("Inc")
    assert case.name == "CounterInc"
    assert case.stmts == ["var v1v2 Counter = Counter{N: 0}", "var v1 *Counter = &v1v2"]
    assert not case.has_result()
    assert case.body()[-1] == "v1.Inc()"


def test_value_receiver_with_result() -> None:
    case = build("Value")
    assert case.name == "CounterValue"
    assert case.stmts == ["var v1 Counter = Counter{N: 0}"]
    assert case.result_stmt == "v2 := v1.Value()"


def test_named_results_get_one_ident_each() -> None:
    case = build("Pair")
    assert case.result_idents == ["v1", "v2", "v3"]
    assert case.result_stmt == "v1, v2, v3 := Pair()"
    assert case.result_usages == ["_ = v1", "_ = v2", "_ = v3"]


def test_variadic_declares_element_type() -> None:
    case = build("Sum")
    assert case.stmts == ["var v1 int = 0"]
    assert case.func_stmt == "Sum(v1)"


def test_channels_are_tracked() -> None:
    case = build("Drain")
    assert case.stmts == [
        "v2 := make(chan int)",
        "var v1 chan int = v2",
        "v4 := make(<-chan int)",
        "var v3 <-chan int = v4",
    ]
    assert case.has_chan()
    assert case.chan_idents == ["v2"]


def test_unnamed_parameters() -> None:
    case = build("Skip")
    assert case.func_stmt == "Skip(v1, v2)"
    assert case.stmts == ["var v1 int = 0", 'var v2 string = ""']


def test_interface_decls_are_printed() -> None:
    builder, index = setup()
    index.add_file(ROOT_PACKAGE, "shape.go", "package app\n\ntype Shape interface {\n\tArea() int\n}\n\nfunc Describe(sh Shape) string { return \"\" }\n")
    gofile = index.files["shape.go"]
    case = builder.for_func(gofile.funcs[0], index.handle_for("shape.go"))
    assert case.decls == ["type V2 struct{}", "func (s *V2) Area() int {\n\tvar v3 int = 0\n\treturn v3\n}"]
    assert case.stmts == ["var v1 Shape = &V2{}"]


# ── Overrides ────────────────────────────────────────────────


def test_param_override_replaces_synthesis() -> None:
    overrides = OverrideStore()
    overrides.add_value("app.go", "Add", "a", ["42"])
    case = build("Add", overrides)
    assert case.stmts == ["v1 := 42", "var v2 int = 0"]


def test_receiver_override() -> None:
    overrides = OverrideStore()
    overrides.add_receiver("app.go", "Inc", ["&Counter{N: 5}"])
    case = build("Inc", overrides)
    assert case.stmts == ["v1 := &Counter{N: 5}"]
    assert case.func_stmt == "v1.Inc()"


def test_override_for_other_file_is_ignored() -> None:
    overrides = OverrideStore()
    overrides.add_value("other.go", "Add", "a", ["42"])
    assert build("Add", overrides).stmts[0] == "var v1 int = 0"


# ── Files and packages ───────────────────────────────────────


def test_for_file_skips_main() -> None:
    builder, index = setup()
    cases = builder.for_file(index.files["app.go"], index.handle_for("app.go"))
    assert sorted(cases) == ["Add", "CounterInc", "CounterValue", "Drain", "Pair", "Skip", "Sum"]
    assert all(len(v) == 2 for v in cases.values())


def test_for_file_skips_ignored_funcs() -> None:
    overrides = OverrideStore(ignore_funcs={"app.go": {"Skip", "Inc"}})
    builder, index = setup(overrides)
    cases = builder.for_file(index.files["app.go"], index.handle_for("app.go"))
    assert "Skip" not in cases
    assert "CounterInc" not in cases
    assert "Add" in cases


def test_for_package_skips_ignored_files() -> None:
    builder, index = setup(OverrideStore(ignore_files={"app.go"}))
    assert builder.for_package(index) == {}


def test_for_package_only_root_files() -> None:
    builder, index = setup(per_func=1)
    index.add_file("example.com/app/util", "util/util.go", "package util\n\nfunc Helper() {}\n")
    assert list(builder.for_package(index)) == ["app.go"]


def test_cases_use_fresh_identifiers() -> None:
    builder, index = setup()
    cases = builder.for_file(index.files["app.go"], index.handle_for("app.go"))
    first, second = cases["Add"]
    assert first.result_stmt != second.result_stmt


# ── Runtime information ──────────────────────────────────────


def test_assertions_only_when_valid() -> None:
    case = build("Add")
    line = '{"type":"int","var_name":"v3","val":"0"}'
    assert case.assertions() == []
    case.runtime = validate([line], [line])
    assert case.body()[-1] == "s.EqualValues(int(0), v3)"
    case.runtime = validate([line], [])
    assert case.assertions() == []
