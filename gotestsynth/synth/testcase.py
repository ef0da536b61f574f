"""Test-case driver: one function declaration -> input statements and call.

For each parameter (and the receiver of a method) the driver either uses a
manual override or synthesizes a value from scratch, then emits the call
twice: once as a bare expression statement and once assigning its results
so instrumentation can capture them.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field

from gotestsynth.backend.go import GoPrinter
from gotestsynth.backend.util import lower_first
from gotestsynth.frontend.packages import Handle, PackageIndex, Resolver
from gotestsynth.frontend.parse import GoFile
from gotestsynth.ir import (
    Assign,
    BasicLit,
    CallExpr,
    Decl,
    Ellipsis,
    ExprStmt,
    Field,
    FuncDecl,
    Ident,
    MultiAssign,
    Name,
    Selector,
    StarExpr,
    Stmt,
    TypeExpr,
)
from gotestsynth.overrides import OverrideStore
from gotestsynth.policy import Options
from gotestsynth.runtime.validate import RunTimeInfo

from .values import Synthesizer

logger = logging.getLogger(__name__)


@dataclass
class Header:
    package_name: str
    file_path: str
    func_name: str


@dataclass
class TestCase:
    """Printed Go text for one synthesized call of one function."""

    header: Header
    name: str
    stmts: list[str] = field(default_factory=list)
    decls: list[str] = field(default_factory=list)
    func_stmt: str = ""
    result_stmt: str | None = None
    result_usages: list[str] = field(default_factory=list)
    result_idents: list[str] = field(default_factory=list)
    chan_idents: list[str] = field(default_factory=list)
    runtime: RunTimeInfo = field(default_factory=RunTimeInfo)

    __test__ = False

    def has_result(self) -> bool:
        return self.result_stmt is not None

    def has_chan(self) -> bool:
        return len(self.chan_idents) > 0

    def assertions(self) -> list[str]:
        """Assertions of a validated run, or nothing."""
        if not self.runtime.is_valid:
            return []
        return list(self.runtime.assert_stmts)

    def body(self) -> list[str]:
        """Statements of the test function body, in order."""
        lines = list(self.stmts)
        if self.result_stmt is not None:
            lines.append(self.result_stmt)
            lines.extend(self.result_usages)
        else:
            lines.append(self.func_stmt)
        lines.extend(self.assertions())
        return lines


@dataclass
class _Inputs:
    idents: list[str] = field(default_factory=list)
    stmts: list[Stmt] = field(default_factory=list)
    decls: list[Decl] = field(default_factory=list)
    chan_idents: list[str] = field(default_factory=list)


class TestCaseBuilder:
    """Builds test cases for the functions of the root package."""

    __test__ = False

    def __init__(
        self,
        resolver: Resolver,
        overrides: OverrideStore | None = None,
        options: Options | None = None,
        printer: GoPrinter | None = None,
    ) -> None:
        self.options = options if options is not None else Options()
        self.printer = printer if printer is not None else GoPrinter()
        self.resolver = resolver
        self.overrides = overrides if overrides is not None else OverrideStore()
        self.synth = Synthesizer(resolver, self.options, self.printer)
        self.values = self.options.values
        self.names = self.options.names

    def for_package(self, index: PackageIndex) -> dict[str, dict[str, list[TestCase]]]:
        """Test cases for every function of every root-package file, keyed by file."""
        result: dict[str, dict[str, list[TestCase]]] = {}
        for file in index.root_files():
            if self.overrides.should_ignore_file(posixpath.basename(file)):
                logger.debug("ignoring file %s", file)
                continue
            result[file] = self.for_file(index.files[file], index.handle_for(file))
        return result

    def for_file(self, gofile: GoFile, handle: Handle) -> dict[str, list[TestCase]]:
        """`test_cases_per_func` test cases per function, keyed by prefixed name."""
        file_name = posixpath.basename(handle.file)
        result: dict[str, list[TestCase]] = {}
        for decl in gofile.funcs:
            if decl.name == "main" or self.overrides.should_ignore_func(file_name, decl.name):
                continue
            logger.debug("building test cases for %s", decl.name)
            cases = [self.for_func(decl, handle, gofile.package) for _ in range(self.options.test_cases_per_func)]
            result[self.prefix(decl) + decl.name] = cases
        return result

    def for_func(self, decl: FuncDecl, handle: Handle, package_name: str = "") -> TestCase:
        file_name = posixpath.basename(handle.file)
        receiver = self._receiver(decl, handle, file_name)
        params = self._params(decl, handle, file_name)
        if decl.receiver is not None and receiver.idents:
            fun = Name(receiver.idents[0] + "." + decl.name)
        else:
            fun = Name(decl.name)
        call = CallExpr(fun, [Name(i) for i in params.idents])
        case = TestCase(
            Header(package_name, handle.file, decl.name),
            self.prefix(decl) + decl.name,
            stmts=self.printer.stmts(receiver.stmts + params.stmts),
            decls=[self.printer.decl(d) for d in receiver.decls + params.decls],
            func_stmt=self.printer.stmt(ExprStmt(call)),
            chan_idents=receiver.chan_idents + params.chan_idents,
        )
        count = sum(max(1, len(f.names)) for f in decl.typ.results)
        if count > 0:
            case.result_idents = [lower_first(self.names.generate()) for _ in range(count)]
            case.result_stmt = self.printer.stmt(MultiAssign(case.result_idents, call))
            case.result_usages = [self.printer.stmt(Assign("_", Name(i), is_declaration=False)) for i in case.result_idents]
        return case

    def prefix(self, decl: FuncDecl) -> str:
        """Receiver type name for methods, so `T.Run` and `Run` do not collide."""
        if decl.receiver is None:
            return ""
        return self._type_prefix(decl.receiver.typ)

    def _type_prefix(self, typ: TypeExpr) -> str:
        if isinstance(typ, Ident):
            return typ.name
        if isinstance(typ, StarExpr):
            return self._type_prefix(typ.elem)
        if isinstance(typ, Selector):
            return typ.name
        logger.warning("unexpected receiver type %r", typ)
        return lower_first(self.names.generate())

    # ============================================================
    # INPUTS
    # ============================================================

    def _receiver(self, decl: FuncDecl, handle: Handle, file_name: str) -> _Inputs:
        inputs = _Inputs()
        if decl.receiver is None:
            return inputs
        if self.overrides.has_receiver(file_name, decl.name) and self.values.use_override():
            ident = lower_first(self.names.generate())
            values = self.overrides.get_receiver(file_name, decl.name)
            inputs.idents.append(ident)
            inputs.stmts.append(Assign(ident, BasicLit(values[self.values.override_index(len(values))])))
            return inputs
        self._field(decl.receiver, decl.name, handle, file_name, inputs)
        return inputs

    def _params(self, decl: FuncDecl, handle: Handle, file_name: str) -> _Inputs:
        inputs = _Inputs()
        for f in decl.typ.params:
            self._field(f, decl.name, handle, file_name, inputs)
        return inputs

    def _field(self, f: Field, func: str, handle: Handle, file_name: str, inputs: _Inputs) -> None:
        for param in f.names if f.names else ("_",):
            ident = lower_first(self.names.generate())
            inputs.idents.append(ident)
            if self.overrides.has_value(file_name, func, param) and self.values.use_override():
                values = self.overrides.get_values(file_name, func, param)
                inputs.stmts.append(Assign(ident, BasicLit(values[self.values.override_index(len(values))])))
                continue
            result = self.synth.value_for(f.typ, ident, handle)
            decl_type = f.typ.elem if isinstance(f.typ, Ellipsis) else f.typ
            inputs.stmts.extend(result.stmts)
            inputs.stmts.append(Assign(ident, result.expr, decl_type=decl_type))
            inputs.decls.extend(result.decls)
            inputs.chan_idents.extend(result.chan_idents)
