"""gotestsynth command line entry point."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from .frontend.packages import PackageIndex, load_module
from .frontend.parse import ParseError
from .frontend.tokens import TokenizeError
from .overrides import OverrideError, OverrideStore, load as load_overrides
from .policy import DefaultValues, NameGenerator, Options
from .runtime.validate import decode_run, validate
from .synth.testcase import TestCase, TestCaseBuilder

USAGE: str = """\
gotestsynth inputs [OPTIONS] [INPUT.go] [-o OUTPUT]
gotestsynth asserts [OPTIONS] FIRST [SECOND] [-o OUTPUT]

Commands:
  inputs              Synthesize test inputs for the functions of a Go file
                      (stdin when INPUT is omitted) or of the module at --root
  asserts             Decode runtime captures (one JSON object per line);
                      with two runs, print assertions only if both agree

Options:
  --root DIR          Load every package of the Go module at DIR
  --func NAME         Only synthesize for function (or Type.Method) NAME
  --count N           Test cases per function (default 18)
  --seed N            Seed for literal values and lengths
  --max-recursion N   Constructions of one struct/interface per value (default 3)
  --overrides FILE    JSON file with manual input overrides
  -o, --output FILE   Write output to FILE instead of stdout
  -v, --verbose       Log debug messages
  -q, --quiet         Log errors only
  --help              Show this help message
"""

COMMANDS: list[str] = ["inputs", "asserts"]

# Package path given to a single file read without --root
SINGLE_FILE_PACKAGE = "main"

EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_NONDETERMINISTIC = 3


class UsageError(Exception):
    """Bad command line."""


@dataclass
class Args:
    command: str
    inputs: list[str]
    root: str | None = None
    func: str | None = None
    count: int | None = None
    seed: int | None = None
    max_recursion: int | None = None
    overrides: str | None = None
    output: str | None = None
    log_level: int = logging.WARNING


_VALUE_FLAGS: dict[str, str] = {
    "--root": "root",
    "--func": "func",
    "--count": "count",
    "--seed": "seed",
    "--max-recursion": "max_recursion",
    "--overrides": "overrides",
    "-o": "output",
    "--output": "output",
}

_INT_FLAGS: set[str] = {"count", "seed", "max_recursion"}


def parse_args(argv: list[str]) -> Args:
    """Parse command-line arguments; raises UsageError."""
    if len(argv) == 0:
        raise UsageError("missing command")
    if argv[0] == "--help" or argv[0] == "-h":
        print(USAGE, end="")
        sys.exit(0)
    if argv[0] not in COMMANDS:
        raise UsageError("unknown command '" + argv[0] + "'")
    args = Args(argv[0], [])
    i = 1
    while i < len(argv):
        arg = argv[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg in _VALUE_FLAGS:
            if i + 1 >= len(argv):
                raise UsageError(arg + " requires an argument")
            attr = _VALUE_FLAGS[arg]
            value: str | int = argv[i + 1]
            if attr in _INT_FLAGS:
                try:
                    value = int(argv[i + 1])
                except ValueError:
                    raise UsageError(arg + " expects an integer") from None
            setattr(args, attr, value)
            i += 2
        elif arg == "-v" or arg == "--verbose":
            args.log_level = logging.DEBUG
            i += 1
        elif arg == "-q" or arg == "--quiet":
            args.log_level = logging.ERROR
            i += 1
        elif arg.startswith("-") and arg != "-":
            raise UsageError("unknown flag '" + arg + "'")
        else:
            args.inputs.append(arg)
            i += 1
    if args.command == "inputs" and len(args.inputs) > 1:
        raise UsageError("unexpected argument '" + args.inputs[1] + "'")
    if args.command == "inputs" and args.root is not None and args.inputs:
        raise UsageError("INPUT and --root are exclusive")
    if args.command == "asserts" and not 1 <= len(args.inputs) <= 2:
        raise UsageError("asserts expects one or two capture files")
    return args


def read_text(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text()


def write_output(output: str, output_file: str | None) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file is not None:
        try:
            Path(output_file).write_text(output)
        except OSError:
            print("error: cannot write '" + output_file + "'", file=sys.stderr)
            return EXIT_ERROR
        return 0
    print(output, end="")
    return 0


# ============================================================
# INPUTS
# ============================================================


def render_cases(cases: dict[str, list[TestCase]], suite: str = "Suite") -> str:
    """Go text: generated declarations, then one suite method per test case."""
    out: list[str] = []
    for name in sorted(cases):
        for i, case in enumerate(cases[name]):
            for decl in case.decls:
                out.append(decl)
                out.append("")
            out.append(f"func (s *{suite}) Test{name[:1].upper()}{name[1:]}{i}() {{")
            for stmt in case.body():
                out.extend("\t" + line for line in stmt.split("\n"))
            out.append("}")
            out.append("")
    return "\n".join(out)


def run_inputs(args: Args) -> tuple[int, str]:
    if args.root is not None:
        index = load_module(Path(args.root))
    else:
        source = read_text(args.inputs[0] if args.inputs else None)
        index = PackageIndex(SINGLE_FILE_PACKAGE)
        file = Path(args.inputs[0]).name if args.inputs else "stdin.go"
        index.add_file(SINGLE_FILE_PACKAGE, file, source)
    overrides = load_overrides(Path(args.overrides)) if args.overrides is not None else OverrideStore()
    options = Options(values=DefaultValues(args.seed), names=NameGenerator())
    if args.count is not None:
        options.test_cases_per_func = args.count
    if args.max_recursion is not None:
        options.max_recursion = args.max_recursion
    builder = TestCaseBuilder(index, overrides, options)
    parts: list[str] = []
    for file, cases in builder.for_package(index).items():
        if args.func is not None:
            cases = {k: v for k, v in cases.items() if k == args.func.replace(".", "")}
        if not cases:
            continue
        parts.append("// " + file + "\n\n" + render_cases(cases))
    return 0, "\n".join(parts)


# ============================================================
# ASSERTS
# ============================================================


def run_asserts(args: Args) -> tuple[int, str]:
    runs = [read_text(path).split("\n") for path in args.inputs]
    if len(runs) == 1:
        lines = decode_run(runs[0])
    else:
        info = validate(runs[0], runs[1])
        if not info.is_valid:
            print("error: runs are not deterministic", file=sys.stderr)
            return EXIT_NONDETERMINISTIC, ""
        lines = info.assert_stmts
    if not lines:
        return 0, ""
    return 0, "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as e:
        print("error: " + str(e), file=sys.stderr)
        print(USAGE, end="", file=sys.stderr)
        return EXIT_USAGE
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    try:
        if args.command == "inputs":
            code, output = run_inputs(args)
        else:
            code, output = run_asserts(args)
    except (TokenizeError, ParseError, OverrideError, OSError) as e:
        print("error: " + str(e), file=sys.stderr)
        return EXIT_ERROR
    if code != 0:
        return code
    if len(output) > 0:
        return write_output(output, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
