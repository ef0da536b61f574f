"""Cycle guard: recursion counters and memoized skeletons for self-referential types.

A CycleInfo is shared along one synthesis path (fields, elements, entries,
results, methods) so that deeper references to a struct or interface see the
occurrences of their ancestors. Counters and memos are keyed by integer
identities handed out by the CycleInfo's own arena:

    struct     -> qualified type name ("Node", "pkg.Node")
    named      -> qualified type name, for self-referential func, slice and map types
    interface  -> package path plus printed type text
"""

from __future__ import annotations

from dataclasses import dataclass, field

from gotestsynth.frontend.packages import Handle
from gotestsynth.ir import EMPTY, BasicLit, CompositeLit, Decl, Expr, Stmt, StructDecl, TypeExpr


@dataclass
class CycleInfo:
    """Per-session counters and memos."""

    identities: dict[str, int] = field(default_factory=dict)
    struct_counts: dict[int, int] = field(default_factory=dict)
    interface_counts: dict[int, int] = field(default_factory=dict)
    named_counts: dict[int, int] = field(default_factory=dict)
    struct_memo: dict[int, CompositeLit] = field(default_factory=dict)
    interface_memo: dict[int, StructDecl] = field(default_factory=dict)

    def identity(self, key: str) -> int:
        """Stable index for `key` within this CycleInfo."""
        ident = self.identities.get(key)
        if ident is None:
            ident = len(self.identities)
            self.identities[key] = ident
        return ident

    def visit_struct(self, ident: int) -> int:
        """Count one more construction of a struct; return the new count."""
        self.struct_counts[ident] = self.struct_counts.get(ident, 0) + 1
        return self.struct_counts[ident]

    def visit_interface(self, ident: int) -> int:
        self.interface_counts[ident] = self.interface_counts.get(ident, 0) + 1
        return self.interface_counts[ident]

    def visit_named(self, ident: int) -> int:
        """Count one more expansion of a named non-struct type (func, slice, map, ...)."""
        self.named_counts[ident] = self.named_counts.get(ident, 0) + 1
        return self.named_counts[ident]


@dataclass
class SynthesisContext:
    """Type being synthesized, target name, resolution handle and cycle state."""

    typ: TypeExpr
    var_name: str
    handle: Handle
    cycles: CycleInfo = field(default_factory=CycleInfo)

    def derive(self, typ: TypeExpr, var_name: str | None = None, handle: Handle | None = None) -> SynthesisContext:
        """Context for a step along the same structural path (shares CycleInfo)."""
        return SynthesisContext(
            typ,
            self.var_name if var_name is None else var_name,
            self.handle if handle is None else handle,
            self.cycles,
        )

    def fresh(self) -> SynthesisContext:
        """Same position with an empty CycleInfo."""
        return SynthesisContext(self.typ, self.var_name, self.handle, CycleInfo())


@dataclass
class SynthesisResult:
    """Value expression plus what must precede or accompany it.

    Statement order is significant and preserved verbatim.
    """

    expr: Expr = field(default_factory=lambda: BasicLit(EMPTY))
    stmts: list[Stmt] = field(default_factory=list)
    decls: list[Decl] = field(default_factory=list)
    chan_idents: list[str] = field(default_factory=list)

    def merge(self, other: SynthesisResult) -> None:
        """Append everything of `other` except its expression."""
        self.stmts.extend(other.stmts)
        self.decls.extend(other.decls)
        self.chan_idents.extend(other.chan_idents)

    def is_empty(self) -> bool:
        return isinstance(self.expr, BasicLit) and self.expr.value == EMPTY


def empty_result() -> SynthesisResult:
    return SynthesisResult()
