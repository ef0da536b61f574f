"""Interface and function stubs.

A non-empty interface gets a brand-new implementing type:

    type V1 struct{}
    func (s *V1) Len() int {
        var v2 int = 42
        return v2
    }

and the value `&V1{}`. Interfaces and function types that cannot be
implemented from the test package (unresolvable names, unexported methods of
another package) get nil stubs instead:

    func() pkg.Iface { return nil }()     interface
    pkg.Handler(nil)                      function type

The feasibility check is conservative and memoized per synthesizer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from gotestsynth.backend.util import upper_first
from gotestsynth.frontend.packages import Handle
from gotestsynth.ir import (
    ANY_TYPE,
    ERROR_TYPE,
    ArrayType,
    CallExpr,
    ChanType,
    CompositeLit,
    Ellipsis,
    Field,
    FuncLit,
    FuncType,
    Ident,
    InterfaceType,
    MapType,
    MethodDecl,
    Name,
    Return,
    Selector,
    StarExpr,
    StructDecl,
    StructType,
    TypeExpr,
    TypeSpec,
    UnaryExpr,
    is_exported,
)

from .cycles import SynthesisContext, SynthesisResult

if TYPE_CHECKING:
    from .values import Synthesizer

logger = logging.getLogger(__name__)

RECEIVER_NAME = "s"

# Method contributed by embedding the builtin `error` interface.
ERROR_SIGNATURE = FuncType((), (Field((), Ident("string")),))


class StubSynthesizer:
    """Implementing types and nil stubs for interfaces and function types."""

    def __init__(self, synth: Synthesizer) -> None:
        self.synth = synth
        self.resolver = synth.resolver
        self.feasible: dict[tuple[str, str, str], bool] = {}

    # ============================================================
    # FEASIBILITY
    # ============================================================

    def interface_ungeneratable(self, typ: TypeExpr, handle: Handle) -> bool:
        """True when `typ` is an interface no type in the test package can implement."""
        if not isinstance(typ, InterfaceType):
            return False
        return not self._memo("interface", typ, handle, lambda: self._interface_ok(typ, handle, set()))

    def func_ungeneratable(self, typ: TypeExpr, handle: Handle) -> bool:
        """True when `typ` is a function type whose literal cannot be written."""
        if not isinstance(typ, FuncType):
            return False
        return not self._memo("func", typ, handle, lambda: self._func_ok(typ, handle, set()))

    def _memo(self, kind: str, typ: TypeExpr, handle: Handle, check: Callable[[], bool]) -> bool:
        key = (kind, handle.package_path, self.synth.printer.type_expr(typ))
        if key not in self.feasible:
            self.feasible[key] = check()
            if not self.feasible[key]:
                logger.debug("%s %s in %s cannot be generated", kind, key[2], handle.package_path)
        return self.feasible[key]

    def _interface_ok(self, typ: InterfaceType, handle: Handle, visiting: set[tuple[str, str]]) -> bool:
        root = self.resolver.is_root_package(handle)
        for m in typ.methods:
            if m.names:
                if not root and not is_exported(m.names[0]):
                    return False
                if not isinstance(m.typ, FuncType) or not self._func_ok(m.typ, handle, visiting):
                    return False
                continue
            if isinstance(m.typ, Ident) and m.typ.name == ERROR_TYPE:
                continue
            resolved = self._resolve(m.typ, handle)
            if resolved is None or not isinstance(resolved[0].typ, InterfaceType):
                return False
            spec, decl_handle = resolved
            key = (decl_handle.package_path, spec.name)
            if key in visiting:
                continue
            visiting.add(key)
            if not self._interface_ok(spec.typ, decl_handle, visiting):
                return False
        return True

    def _func_ok(self, typ: FuncType, handle: Handle, visiting: set[tuple[str, str]]) -> bool:
        for f in typ.params + typ.results:
            if not self._resolvable(f.typ, handle):
                return False
        for f in typ.results:
            underlying, decl_handle = f.typ, handle
            if isinstance(f.typ, (Ident, Selector)):
                resolved = self._resolve(f.typ, handle)
                if resolved is None:
                    continue
                spec, decl_handle = resolved
                key = (decl_handle.package_path, spec.name)
                if key in visiting:
                    continue
                visiting.add(key)
                underlying = spec.typ
            if isinstance(underlying, InterfaceType) and not self._interface_ok(underlying, decl_handle, visiting):
                return False
            if isinstance(underlying, FuncType) and not self._func_ok(underlying, decl_handle, visiting):
                return False
        return True

    def _resolvable(self, typ: TypeExpr, handle: Handle) -> bool:
        """Whether every name in `typ` can be written from the test package."""
        if isinstance(typ, Ident):
            if self.synth.values.is_basic(typ.name) or typ.name in (ERROR_TYPE, ANY_TYPE):
                return True
            if not self.resolver.is_root_package(handle) and not is_exported(typ.name):
                return False
            return self.resolver.find_in_same_package(handle, typ.name)[0]
        if isinstance(typ, Selector):
            return is_exported(typ.name) and self.resolver.find_in_import(handle, typ.package, typ.name)[0]
        if isinstance(typ, (StarExpr, ArrayType, ChanType, Ellipsis)):
            return self._resolvable(typ.elem, handle)
        if isinstance(typ, MapType):
            return self._resolvable(typ.key, handle) and self._resolvable(typ.value, handle)
        if isinstance(typ, FuncType):
            return all(self._resolvable(f.typ, handle) for f in typ.params + typ.results)
        if isinstance(typ, InterfaceType):
            return all(self._resolvable(f.typ, handle) for f in typ.methods)
        if isinstance(typ, StructType):
            return all(self._resolvable(f.typ, handle) for f in typ.fields)
        logger.warning("unexpected type %r in signature", typ)
        return False

    def _resolve(self, typ: TypeExpr, handle: Handle) -> tuple[TypeSpec, Handle] | None:
        if isinstance(typ, Ident):
            found, spec, decl_handle = self.resolver.find_in_same_package(handle, typ.name)
        elif isinstance(typ, Selector):
            found, spec, decl_handle = self.resolver.find_in_import(handle, typ.package, typ.name)
        else:
            return None
        if not found or spec is None:
            return None
        return spec, decl_handle

    # ============================================================
    # NIL STUBS
    # ============================================================

    def interface_nil(self, typ: TypeExpr, ctx: SynthesisContext) -> SynthesisResult:
        """Immediately invoked `func() T { return nil }`."""
        sig = FuncType((), (Field((), self.synth.correct_type(typ, ctx.handle)),))
        return SynthesisResult(CallExpr(FuncLit(sig, [Return([Name("nil")])])))

    def func_nil(self, typ: TypeExpr, ctx: SynthesisContext) -> SynthesisResult:
        """`T(nil)`."""
        return SynthesisResult(CallExpr(self.synth.correct_type(typ, ctx.handle), [Name("nil")]))

    # ============================================================
    # IMPLEMENTING TYPES
    # ============================================================

    def interface_value(self, typ: InterfaceType, ctx: SynthesisContext) -> SynthesisResult:
        if not typ.methods:
            values = self.synth.values
            return SynthesisResult(values.basic_value(values.any_type()))
        key = ctx.handle.package_path + ":" + self.synth.printer.type_expr(typ)
        ident = ctx.cycles.identity(key)
        count = ctx.cycles.visit_interface(ident)
        impl = upper_first(self.synth.names.generate())
        decl = StructDecl(impl)
        memo = ctx.cycles.interface_memo.get(ident)
        if memo is None:
            ctx.cycles.interface_memo[ident] = decl
        if count > self.synth.options.max_recursion and memo is not None:
            logger.debug("interface %s reached depth %d, reusing %s", key, count, memo.name)
            return SynthesisResult(UnaryExpr("&", CompositeLit(Ident(memo.name))))
        result = SynthesisResult()
        result.decls.append(decl)
        result.merge(self.method_impls(typ, ctx, Ident(impl), set()))
        result.expr = UnaryExpr("&", CompositeLit(Ident(impl)))
        return result

    def method_impls(self, typ: InterfaceType, ctx: SynthesisContext, impl: Ident, seen: set[str]) -> SynthesisResult:
        """One method declaration per method of `typ`, embedded interfaces included."""
        result = SynthesisResult()
        for m in typ.methods:
            if m.names and isinstance(m.typ, FuncType):
                self._add_method(result, m.names[0], m.typ, ctx, impl, seen)
            elif isinstance(m.typ, Ident) and m.typ.name == ERROR_TYPE:
                self._add_method(result, "Error", ERROR_SIGNATURE, ctx, impl, seen)
            elif isinstance(m.typ, (Ident, Selector)):
                resolved = self._resolve(m.typ, ctx.handle)
                if resolved is None or not isinstance(resolved[0].typ, InterfaceType):
                    logger.warning("embedded interface %r not resolved in %s", m.typ, ctx.handle.file)
                    continue
                spec, handle = resolved
                result.merge(self.method_impls(spec.typ, ctx.derive(spec.typ, handle=handle), impl, seen))
            else:
                logger.warning("interface method with non-function type %r", m.typ)
        return result

    def _add_method(
        self, result: SynthesisResult, name: str, typ: FuncType, ctx: SynthesisContext, impl: Ident, seen: set[str]
    ) -> None:
        if name in seen:
            return
        seen.add(name)
        body = self.synth.return_list(typ, ctx)
        result.decls.extend(body.decls)
        result.chan_idents.extend(body.chan_idents)
        sig = self.synth.correct_signature(typ, ctx.handle)
        result.decls.append(MethodDecl(RECEIVER_NAME, StarExpr(impl), name, sig, body.stmts))
