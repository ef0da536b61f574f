"""CLI tests for the gotestsynth entry point.

Cases live in 01_cli/*.tests files. Each case runs `python -m gotestsynth.cli`
with the given arguments and the remaining input lines on stdin:

    === test name
    args: inputs --seed 1 --count 1
    package calc
    ...
    ---
    exit: 0
    stdout-contains: v3 := Add(v1, v2)
    stderr-empty: true
    ---

Expectations are `directive: value` lines; see CHECKS for the directives.
"""

import re
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from gotestsynth.cli import EXIT_NONDETERMINISTIC, EXIT_USAGE, main, parse_args, UsageError

CLI_DIR = Path(__file__).parent / "01_cli"
REPO_DIR = Path(__file__).parent.parent


def _text(data: bytes) -> str:
    return data.decode(errors="replace")


def check_exit(result: subprocess.CompletedProcess[bytes], value: str) -> None:
    assert result.returncode == int(value), f"exit {result.returncode}, wanted {value}\nstderr: {_text(result.stderr)}"


def contains(stream: str):
    def check(result: subprocess.CompletedProcess[bytes], value: str) -> None:
        actual = _text(getattr(result, stream))
        assert value in actual, f"{stream} lacks {value!r}: {actual!r}"

    return check


def empty(stream: str):
    def check(result: subprocess.CompletedProcess[bytes], value: str) -> None:
        actual = getattr(result, stream)
        assert actual == b"", f"{stream} should be empty: {actual[:200]!r}"

    return check


CHECKS = {
    "exit": check_exit,
    "stdout-contains": contains("stdout"),
    "stdout-empty": empty("stdout"),
    "stderr-contains": contains("stderr"),
    "stderr-empty": empty("stderr"),
}


@dataclass
class CliCase:
    args: list[str]
    stdin: str
    expect: list[tuple[str, str]] = field(default_factory=list)


def read_case(block: str) -> CliCase:
    """One `=== ` block, name line already removed."""
    given, expected = re.split(r"^---$", block, flags=re.MULTILINE)[:2]
    head, _, stdin = given.strip("\n").partition("\n")
    if not head.startswith("args:"):
        raise ValueError(f"case must start with args:, got {head!r}")
    case = CliCase(head[len("args:") :].split(), stdin)
    for line in expected.splitlines():
        directive, _, value = line.strip().partition(":")
        if not directive:
            continue
        if directive not in CHECKS:
            raise ValueError(f"unknown directive {directive!r}")
        case.expect.append((directive, value.strip()))
    return case


def discover_cli_tests() -> list[tuple[str, CliCase]]:
    results = []
    for test_file in sorted(CLI_DIR.glob("*.tests")):
        for block in re.split(r"^=== ", test_file.read_text(), flags=re.MULTILINE)[1:]:
            name, _, rest = block.partition("\n")
            results.append((f"{test_file.stem}/{name.strip()}", read_case(rest)))
    return results


def pytest_generate_tests(metafunc):
    if "cli_case" in metafunc.fixturenames:
        params = [pytest.param(case, id=test_id) for test_id, case in discover_cli_tests()]
        metafunc.parametrize("cli_case", params)


def test_cli(cli_case: CliCase) -> None:
    cmd = [sys.executable, "-m", "gotestsynth.cli", *cli_case.args]
    result = subprocess.run(cmd, input=cli_case.stdin.encode(), capture_output=True, cwd=REPO_DIR)
    for directive, value in cli_case.expect:
        CHECKS[directive](result, value)


def test_read_case_rejects_unknown_directive() -> None:
    with pytest.raises(ValueError, match="unknown directive 'stdout-equals'"):
        read_case("\nargs: inputs\npackage a\n---\nstdout-equals: x\n---\n")


# ── In-process runs ──────────────────────────────────────────

POINTER_CAPTURE = '{"type":"pointer","var_name":"p","val":"0xc000010000","child":{"type":"int","var_name":"y","val":"7"}}'


def test_asserts_two_agreeing_runs(tmp_path: Path, capsys) -> None:
    first = tmp_path / "first.jsonl"
    second = tmp_path / "second.jsonl"
    first.write_text(POINTER_CAPTURE + "\n")
    second.write_text(POINTER_CAPTURE + "\n")
    assert main(["asserts", str(first), str(second)]) == 0
    out = capsys.readouterr().out
    assert out == "y := *p\ns.EqualValues(int(7), y)\n"


def test_asserts_disagreeing_runs(tmp_path: Path, capsys) -> None:
    first = tmp_path / "first.jsonl"
    second = tmp_path / "second.jsonl"
    first.write_text('{"type":"int","var_name":"x","val":"1"}\n')
    second.write_text('{"type":"int","var_name":"x","val":"2"}\n')
    assert main(["asserts", str(first), str(second)]) == EXIT_NONDETERMINISTIC
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "not deterministic" in captured.err


def test_inputs_writes_output_file(tmp_path: Path) -> None:
    source = tmp_path / "calc.go"
    source.write_text("package calc\n\nfunc Double(x int) int { return 2 * x }\n")
    out = tmp_path / "out.go"
    assert main(["inputs", "--seed", "3", "--count", "2", str(source), "-o", str(out)]) == 0
    text = out.read_text()
    assert text.startswith("// calc.go")
    assert "func (s *Suite) TestDouble0() {" in text
    assert "func (s *Suite) TestDouble1() {" in text


def test_inputs_module_root(tmp_path: Path, capsys) -> None:
    (tmp_path / "go.mod").write_text("module example.com/shop\n\ngo 1.21\n")
    (tmp_path / "shop.go").write_text(
        'package shop\n\nimport "example.com/shop/money"\n\nfunc Charge(a money.Amount) error { return nil }\n'
    )
    (tmp_path / "money").mkdir()
    (tmp_path / "money" / "money.go").write_text("package money\n\ntype Amount struct {\n\tCents int\n\tcurrency string\n}\n")
    assert main(["inputs", "--root", str(tmp_path), "--count", "1", "--func", "Charge"]) == 0
    out = capsys.readouterr().out
    assert "var v1 money.Amount = money.Amount{Cents: " in out
    assert "currency" not in out
    assert "v2 := Charge(v1)" in out


def test_parse_args_flags() -> None:
    args = parse_args(["inputs", "--seed", "9", "--max-recursion", "2", "-v", "x.go"])
    assert args.seed == 9
    assert args.max_recursion == 2
    assert args.inputs == ["x.go"]


def test_parse_args_rejects_non_integer() -> None:
    with pytest.raises(UsageError):
        parse_args(["inputs", "--count", "many"])


def test_main_usage_error(capsys) -> None:
    assert main(["inputs", "--bogus"]) == EXIT_USAGE
    assert "unknown flag '--bogus'" in capsys.readouterr().err
