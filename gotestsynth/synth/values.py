"""Type-to-value synthesis: Go type expression -> constructible value expression.

Recursive descent over the TypeExpr IR. Every arm returns a SynthesisResult
whose statements must run, in order, before its expression is evaluated.

    Ident      basic literal / nil error / any / same-package name
    StarExpr   temporary + address-of
    ArrayType  composite literal, policy length (bounded by fixed length)
    MapType    composite literal, textually distinct keys
    ChanType   make(...) into a fresh identifier
    FuncType   function literal whose body returns synthesized results
    Interface  implementing type (see stubs)
    StructType composite literal of the fields
    Selector   imported declaration, rewritten to the selector as written
    Ellipsis   element type

Unsupported shapes and unresolved names log a warning and produce the empty
result; synthesis of the enclosing value continues.
"""

from __future__ import annotations

import logging

from gotestsynth.backend.go import GoPrinter
from gotestsynth.backend.util import lower_first
from gotestsynth.frontend.packages import Handle, Resolver
from gotestsynth.ir import (
    ANY_TYPE,
    ERROR_TYPE,
    ArrayType,
    Assign,
    CallExpr,
    ChanType,
    CompositeLit,
    Ellipsis,
    Field,
    FuncLit,
    FuncType,
    Ident,
    InterfaceType,
    KeyValue,
    MapType,
    Name,
    Return,
    Selector,
    StarExpr,
    StructType,
    TypeExpr,
    TypeSpec,
    UnaryExpr,
    is_exported,
)
from gotestsynth.policy import Options

from .cycles import CycleInfo, SynthesisContext, SynthesisResult, empty_result
from .stubs import StubSynthesizer

logger = logging.getLogger(__name__)

# Underlying shapes through which a named type can contain itself without a struct
RECURSIVE_SHAPES = (FuncType, ArrayType, MapType, ChanType, StarExpr)


class Synthesizer:
    """Builds Go values for type expressions."""

    def __init__(self, resolver: Resolver, options: Options | None = None, printer: GoPrinter | None = None) -> None:
        self.resolver = resolver
        self.options = options if options is not None else Options()
        self.values = self.options.values
        self.names = self.options.names
        self.printer = printer if printer is not None else GoPrinter()
        self.stubs = StubSynthesizer(self)

    # ============================================================
    # ENTRY POINTS
    # ============================================================

    def value_for(self, typ: TypeExpr, var_name: str, handle: Handle) -> SynthesisResult:
        """Synthesize `typ` from scratch with an empty CycleInfo."""
        return self.synthesize(SynthesisContext(typ, var_name, handle, CycleInfo()))

    def synthesize(self, ctx: SynthesisContext) -> SynthesisResult:
        typ = ctx.typ
        if isinstance(typ, Ident):
            return self._synth_Ident(typ, ctx)
        if isinstance(typ, StarExpr):
            return self._synth_StarExpr(typ, ctx)
        if isinstance(typ, ArrayType):
            return self._synth_ArrayType(typ, ctx)
        if isinstance(typ, MapType):
            return self._synth_MapType(typ, ctx)
        if isinstance(typ, ChanType):
            return self._synth_ChanType(typ, ctx)
        if isinstance(typ, FuncType):
            return self._synth_FuncType(typ, ctx)
        if isinstance(typ, InterfaceType):
            return self.stubs.interface_value(typ, ctx)
        if isinstance(typ, StructType):
            elts, result = self.struct_fields(typ, ctx)
            result.expr = CompositeLit(self.correct_type(typ, ctx.handle), elts)
            return result
        if isinstance(typ, Selector):
            return self._synth_Selector(typ, ctx)
        if isinstance(typ, Ellipsis):
            return self.synthesize(ctx.derive(typ.elem))
        logger.warning("cannot synthesize type %r for %s in %s", typ, ctx.var_name, ctx.handle.file)
        return empty_result()

    # ============================================================
    # IDENTIFIERS AND NAMED TYPES
    # ============================================================

    def _synth_Ident(self, typ: Ident, ctx: SynthesisContext) -> SynthesisResult:
        if self.values.is_basic(typ.name):
            return SynthesisResult(self.values.basic_value(typ.name))
        if typ.name == ERROR_TYPE:
            return SynthesisResult(Name("nil"))
        if typ.name == ANY_TYPE:
            return self.stubs.interface_value(InterfaceType(), ctx)
        found, spec, handle = self.resolver.find_in_same_package(ctx.handle, typ.name)
        if not found or spec is None:
            logger.warning("identifier %s not found in package %s (%s)", typ.name, ctx.handle.package_path, ctx.handle.file)
            return empty_result()
        return self.named(spec, ctx.derive(spec.typ, handle=handle))

    def named(self, spec: TypeSpec, ctx: SynthesisContext) -> SynthesisResult:
        """Value of a declared type; `ctx.handle` locates the declaration."""
        if isinstance(spec.typ, StructType):
            return self._synth_struct(spec.typ, ctx.derive(spec.typ, var_name=spec.name))
        name = Ident(spec.name)
        if self.stubs.interface_ungeneratable(spec.typ, ctx.handle):
            return self.stubs.interface_nil(name, ctx)
        if self.stubs.func_ungeneratable(spec.typ, ctx.handle):
            return self.stubs.func_nil(name, ctx)
        if isinstance(spec.typ, InterfaceType):
            return self.synthesize(ctx.derive(spec.typ))
        if isinstance(spec.typ, RECURSIVE_SHAPES):
            key = self.cycle_key(spec.name, ctx.handle)
            count = ctx.cycles.visit_named(ctx.cycles.identity(key))
            if count > self.options.max_recursion:
                logger.debug("type %s reached depth %d, using its zero value", key, count)
                return self.named_zero(name, spec.typ, ctx)
        inner = self.synthesize(ctx.derive(spec.typ))
        result = SynthesisResult()
        result.merge(inner)
        result.expr = CallExpr(self.correct_type(name, ctx.handle), [inner.expr])
        return result

    def named_zero(self, name: Ident, typ: TypeExpr, ctx: SynthesisContext) -> SynthesisResult:
        """`T{}` for fixed-length arrays, `T(nil)` for every other recursive shape."""
        corrected = self.correct_type(name, ctx.handle)
        if isinstance(typ, ArrayType) and typ.length is not None:
            return SynthesisResult(CompositeLit(corrected))
        return SynthesisResult(CallExpr(corrected, [Name("nil")]))

    def cycle_key(self, name: str, handle: Handle) -> str:
        """Guard key of a declared type: `Name` in the root package, `pkg.Name` elsewhere."""
        if self.resolver.is_root_package(handle):
            return name
        return self.resolver.package_name_for(handle) + "." + name

    def _synth_Selector(self, typ: Selector, ctx: SynthesisContext) -> SynthesisResult:
        found, spec, handle = self.resolver.find_in_import(ctx.handle, typ.package, typ.name)
        if not found or spec is None:
            logger.warning("identifier %s.%s not found in imports of %s", typ.package, typ.name, ctx.handle.file)
            return empty_result()
        if self.stubs.interface_ungeneratable(spec.typ, handle):
            return self.stubs.interface_nil(typ, ctx)
        if self.stubs.func_ungeneratable(spec.typ, handle):
            return self.stubs.func_nil(typ, ctx)
        inner = self.named(spec, ctx.derive(spec.typ, handle=handle))
        # The declaration's own package name may differ from the import alias
        if isinstance(inner.expr, CompositeLit):
            inner.expr.typ = typ
        elif isinstance(inner.expr, CallExpr) and isinstance(inner.expr.fun, (Ident, Selector)):
            inner.expr.fun = typ
        return inner

    # ============================================================
    # STRUCTS
    # ============================================================

    def _synth_struct(self, typ: StructType, ctx: SynthesisContext) -> SynthesisResult:
        """Named struct `ctx.var_name`, bounded by the cycle guard."""
        type_name = self.correct_type(Ident(ctx.var_name), ctx.handle)
        key = self.cycle_key(ctx.var_name, ctx.handle)
        ident = ctx.cycles.identity(key)
        memo = ctx.cycles.struct_memo.get(ident)
        if memo is None:
            ctx.cycles.struct_memo[ident] = CompositeLit(type_name)
        count = ctx.cycles.visit_struct(ident)
        if count > self.options.max_recursion and memo is not None:
            logger.debug("struct %s reached depth %d, reusing skeleton", key, count)
            return SynthesisResult(CompositeLit(memo.typ))
        elts, result = self.struct_fields(typ, ctx)
        result.expr = CompositeLit(type_name, elts)
        return result

    def struct_fields(self, typ: StructType, ctx: SynthesisContext) -> tuple[list[KeyValue], SynthesisResult]:
        """Key/value entries for every settable field, in source order."""
        root = self.resolver.is_root_package(ctx.handle)
        result = SynthesisResult()
        elts: list[KeyValue] = []
        for f in typ.fields:
            names = f.names if f.names else (embedded_name(f.typ),)
            for name in names:
                if name == "" or name == "_":
                    continue
                if not root and not is_exported(name):
                    continue
                if self.stubs.func_ungeneratable(f.typ, ctx.handle):
                    logger.debug("skipping field %s of %s: function cannot be generated", name, ctx.var_name)
                    continue
                inner = self.synthesize(ctx.derive(f.typ, var_name=name))
                result.merge(inner)
                elts.append(KeyValue(Name(name), inner.expr))
        return elts, result

    # ============================================================
    # COMPOSITE SHAPES
    # ============================================================

    def _synth_StarExpr(self, typ: StarExpr, ctx: SynthesisContext) -> SynthesisResult:
        temp = lower_first(ctx.var_name) + self.names.generate()
        inner = self.synthesize(ctx.derive(typ.elem, var_name=temp))
        result = SynthesisResult(UnaryExpr("&", Name(temp)))
        result.merge(inner)
        result.stmts.append(Assign(temp, inner.expr, decl_type=self.correct_type(typ.elem, ctx.handle)))
        return result

    def _synth_ArrayType(self, typ: ArrayType, ctx: SynthesisContext) -> SynthesisResult:
        bound = array_bound(typ.length)
        count = self.values.array_len(bound)
        if bound is not None:
            count = min(count, bound)
        result = SynthesisResult()
        elts = []
        for _ in range(count):
            inner = self.synthesize(ctx.derive(typ.elem))
            result.merge(inner)
            elts.append(inner.expr)
        result.expr = CompositeLit(self.correct_type(typ, ctx.handle), elts)
        return result

    def _synth_MapType(self, typ: MapType, ctx: SynthesisContext) -> SynthesisResult:
        count = self.values.map_len()
        result = SynthesisResult()
        elts = []
        seen: set[str] = set()
        for _ in range(count):
            key = self.synthesize(ctx.derive(typ.key))
            text = self.printer.expr(key.expr)
            if text in seen:
                continue
            seen.add(text)
            result.merge(key)
            value = self.synthesize(ctx.derive(typ.value))
            result.merge(value)
            elts.append(KeyValue(key.expr, value.expr))
        result.expr = CompositeLit(self.correct_type(typ, ctx.handle), elts)
        return result

    def _synth_ChanType(self, typ: ChanType, ctx: SynthesisContext) -> SynthesisResult:
        ident = lower_first(self.names.generate())
        make = CallExpr(Name("make"), [self.correct_type(typ, ctx.handle)])
        result = SynthesisResult(Name(ident), [Assign(ident, make)])
        if typ.direction != "recv":
            result.chan_idents.append(ident)
        return result

    def _synth_FuncType(self, typ: FuncType, ctx: SynthesisContext) -> SynthesisResult:
        body = self.return_list(typ, ctx)
        result = SynthesisResult(FuncLit(self.correct_signature(typ, ctx.handle), body.stmts))
        result.decls.extend(body.decls)
        result.chan_idents.extend(body.chan_idents)
        return result

    def return_list(self, typ: FuncType, ctx: SynthesisContext) -> SynthesisResult:
        """Function body: one assignment per result, then `return` of them in order."""
        result = SynthesisResult()
        values = []
        for f in typ.results:
            for _ in range(max(1, len(f.names))):
                name = lower_first(self.names.generate())
                inner = self.synthesize(ctx.derive(f.typ, var_name=name))
                result.merge(inner)
                result.stmts.append(Assign(name, inner.expr, decl_type=self.correct_type(f.typ, ctx.handle)))
                values.append(Name(name))
        result.stmts.append(Return(values))
        return result

    # ============================================================
    # TYPE CORRECTION
    # ============================================================

    def correct_type(self, typ: TypeExpr, handle: Handle) -> TypeExpr:
        """Qualify names declared in a non-root package so they print in the root package."""
        if self.resolver.is_root_package(handle):
            return typ
        return self._qualify(typ, self.resolver.package_name_for(handle))

    def correct_signature(self, typ: FuncType, handle: Handle) -> FuncType:
        if self.resolver.is_root_package(handle):
            return typ
        pkg = self.resolver.package_name_for(handle)
        return FuncType(self._qualify_fields(typ.params, pkg), self._qualify_fields(typ.results, pkg))

    def _qualify(self, typ: TypeExpr, pkg: str) -> TypeExpr:
        if isinstance(typ, Ident):
            if self.values.is_basic(typ.name) or typ.name in (ERROR_TYPE, ANY_TYPE):
                return typ
            return Selector(pkg, typ.name)
        if isinstance(typ, StarExpr):
            return StarExpr(self._qualify(typ.elem, pkg))
        if isinstance(typ, ArrayType):
            length = typ.length
            if length is not None and length.isidentifier():
                length = pkg + "." + length
            return ArrayType(self._qualify(typ.elem, pkg), length)
        if isinstance(typ, MapType):
            return MapType(self._qualify(typ.key, pkg), self._qualify(typ.value, pkg))
        if isinstance(typ, ChanType):
            return ChanType(self._qualify(typ.elem, pkg), typ.direction)
        if isinstance(typ, FuncType):
            return FuncType(self._qualify_fields(typ.params, pkg), self._qualify_fields(typ.results, pkg))
        if isinstance(typ, InterfaceType):
            return InterfaceType(self._qualify_fields(typ.methods, pkg))
        if isinstance(typ, StructType):
            return StructType(self._qualify_fields(typ.fields, pkg))
        if isinstance(typ, Ellipsis):
            return Ellipsis(self._qualify(typ.elem, pkg))
        return typ

    def _qualify_fields(self, fields: tuple[Field, ...], pkg: str) -> tuple[Field, ...]:
        return tuple(Field(f.names, self._qualify(f.typ, pkg)) for f in fields)


def embedded_name(typ: TypeExpr) -> str:
    """Field name Go gives an embedded field: `T`, `*T` and `pkg.T` are all `T`."""
    if isinstance(typ, Ident):
        return typ.name
    if isinstance(typ, StarExpr):
        return embedded_name(typ.elem)
    if isinstance(typ, Selector):
        return typ.name
    logger.warning("unexpected embedded field type %r", typ)
    return ""


def array_bound(length: str | None) -> int | None:
    """Element bound of a slice (None) or array; non-literal lengths bound to zero."""
    if length is None:
        return None
    try:
        return int(length, 0)
    except ValueError:
        return 0
