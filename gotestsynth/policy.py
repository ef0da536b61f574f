"""Literal value policy, identifier generation and generator options."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from gotestsynth.backend.util import quote
from gotestsynth.ir import BASIC_TYPES, COMPLEX_TYPES, FLOAT_TYPES, BasicLit, Expr

DEFAULT_POPULATION_SIZE = 30
DEFAULT_TEST_CASES_PER_FUNC = 18
# Cycles are detected by counting how often a struct or interface is built
DEFAULT_MAX_RECURSION = 3
DEFAULT_MAX_LEN = 3

_INT_RANGES: dict[str, tuple[int, int]] = {
    "int": (-1000, 1000),
    "int8": (-128, 127),
    "int16": (-1000, 1000),
    "int32": (-1000, 1000),
    "int64": (-1000, 1000),
    "uint": (0, 1000),
    "uint8": (0, 255),
    "byte": (0, 255),
    "uint16": (0, 1000),
    "uint32": (0, 1000),
    "uint64": (0, 1000),
    "uintptr": (0, 1000),
    "rune": (32, 126),
}

_ANY_TYPES: tuple[str, ...] = ("int", "string", "bool", "float64")

_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 "


class ValuePolicy:
    """Decides literal values and collection sizes.

    Subclasses override the hooks; the synthesizer never picks values itself.
    """

    def any_type(self) -> str:
        """Basic type used for values of the empty interface."""
        return "int"

    def array_len(self, bound: int | None) -> int:
        """Element count for a slice (bound None) or a fixed-length array."""
        return 0

    def map_len(self) -> int:
        return 0

    def is_basic(self, name: str) -> bool:
        return name in BASIC_TYPES

    def basic_value(self, name: str) -> Expr:
        """Literal for a basic type; untyped only where Go's default type matches."""
        if name == "string":
            return BasicLit('""')
        if name == "bool":
            return BasicLit("false")
        if name == "int":
            return BasicLit("0")
        return BasicLit(f"{name}(0)")

    def use_override(self) -> bool:
        """Whether a manual override, when one exists, replaces synthesis."""
        return True

    def override_index(self, count: int) -> int:
        return 0


class DefaultValues(ValuePolicy):
    """Seeded random policy."""

    def __init__(self, seed: int | None = None, max_len: int = DEFAULT_MAX_LEN, override_rate: float = 0.5) -> None:
        self.rng = random.Random(seed)
        self.max_len = max_len
        self.override_rate = override_rate

    def any_type(self) -> str:
        return self.rng.choice(_ANY_TYPES)

    def array_len(self, bound: int | None) -> int:
        n = self.rng.randint(0, self.max_len)
        if bound is not None:
            return min(n, bound)
        return n

    def map_len(self) -> int:
        return self.rng.randint(0, self.max_len)

    def basic_value(self, name: str) -> Expr:
        if name == "string":
            n = self.rng.randint(0, 8)
            return BasicLit(quote("".join(self.rng.choice(_ALPHABET) for _ in range(n))))
        if name == "bool":
            return BasicLit("true" if self.rng.random() < 0.5 else "false")
        if name in FLOAT_TYPES:
            return BasicLit(f"{name}({round(self.rng.uniform(-1000, 1000), 3)})")
        if name in COMPLEX_TYPES:
            re_part = round(self.rng.uniform(-100, 100), 2)
            im_part = round(self.rng.uniform(-100, 100), 2)
            return BasicLit(f"{name}(complex({re_part}, {im_part}))")
        low, high = _INT_RANGES.get(name, (0, 100))
        value = self.rng.randint(low, high)
        if name == "int":
            return BasicLit(str(value))
        return BasicLit(f"{name}({value})")

    def use_override(self) -> bool:
        return self.rng.random() < self.override_rate

    def override_index(self, count: int) -> int:
        return self.rng.randrange(count)


class NameGenerator:
    """Fresh identifiers: prefix plus a counter that never repeats."""

    def __init__(self, prefix: str = "v") -> None:
        self.prefix = prefix
        self.count = 0

    def generate(self) -> str:
        self.count += 1
        return self.prefix + str(self.count)


@dataclass
class Options:
    """Generator options."""

    max_recursion: int = DEFAULT_MAX_RECURSION
    test_cases_per_func: int = DEFAULT_TEST_CASES_PER_FUNC
    population_size: int = DEFAULT_POPULATION_SIZE
    values: ValuePolicy = field(default_factory=DefaultValues)
    names: NameGenerator = field(default_factory=NameGenerator)
