"""Pytest configuration for the gotestsynth test suite."""

import sys
from pathlib import Path

import pytest

# Add repository root to path for package imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gotestsynth.backend.go import GoPrinter  # noqa: E402
from gotestsynth.frontend.packages import PackageIndex  # noqa: E402
from gotestsynth.ir import BasicLit, Expr  # noqa: E402
from gotestsynth.policy import NameGenerator, Options, ValuePolicy  # noqa: E402

ROOT_PACKAGE = "example.com/app"


class FixedValues(ValuePolicy):
    """Zero values with fixed collection lengths."""

    def __init__(self, array_len: int = 0, map_len: int = 0) -> None:
        self.fixed_array_len = array_len
        self.fixed_map_len = map_len

    def array_len(self, bound: int | None) -> int:
        if bound is not None:
            return min(self.fixed_array_len, bound)
        return self.fixed_array_len

    def map_len(self) -> int:
        return self.fixed_map_len


class CountingValues(FixedValues):
    """Like FixedValues, but every int literal is one larger than the last."""

    def __init__(self, array_len: int = 0, map_len: int = 0) -> None:
        super().__init__(array_len, map_len)
        self.next_int = 0

    def basic_value(self, name: str) -> Expr:
        if name == "int":
            self.next_int += 1
            return BasicLit(str(self.next_int))
        return super().basic_value(name)


def build_index(files: dict[str, tuple[str, str]]) -> PackageIndex:
    """Index rooted at ROOT_PACKAGE from {file: (package_path, source)}."""
    index = PackageIndex(ROOT_PACKAGE)
    for file, (package_path, source) in files.items():
        index.add_file(package_path, file, source)
    return index


def make_options(values: ValuePolicy | None = None, max_recursion: int = 3) -> Options:
    return Options(
        max_recursion=max_recursion,
        values=values if values is not None else FixedValues(),
        names=NameGenerator(),
    )


@pytest.fixture
def printer() -> GoPrinter:
    return GoPrinter()
