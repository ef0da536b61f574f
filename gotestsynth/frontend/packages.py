"""Package index: groups parsed Go files and resolves names across them.

`PackageIndex` is the Symbol/Import Resolver the synthesizer talks to. It is
deterministic for a fixed set of registered files: same-package lookups try
the handle's own file first and then the package's other files in path order.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from gotestsynth.ir import TypeSpec

from .parse import GoFile, parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Handle:
    """Opaque resolution position: an import path plus a file inside it."""

    package_path: str
    file: str


class Resolver(Protocol):
    """Symbol/Import Resolver consumed by the synthesizers."""

    def find_in_same_package(self, handle: Handle, name: str) -> tuple[bool, TypeSpec | None, Handle]: ...

    def find_in_import(self, handle: Handle, alias: str, name: str) -> tuple[bool, TypeSpec | None, Handle]: ...

    def is_root_package(self, handle: Handle) -> bool: ...

    def package_name_for(self, handle: Handle) -> str: ...


class PackageIndex:
    """In-memory index of Go packages keyed by import path."""

    def __init__(self, root_package: str) -> None:
        self.root_package = root_package
        self.files: dict[str, GoFile] = {}
        self.file_package: dict[str, str] = {}
        self.packages: dict[str, list[str]] = {}

    def add_file(self, package_path: str, file: str, source: str) -> Handle:
        """Parse `source` and register it as `file` of `package_path`."""
        gofile = parse(source)
        return self.add_parsed(package_path, file, gofile)

    def add_parsed(self, package_path: str, file: str, gofile: GoFile) -> Handle:
        self.files[file] = gofile
        self.file_package[file] = package_path
        files = self.packages.setdefault(package_path, [])
        if file not in files:
            files.append(file)
            files.sort()
        logger.debug("indexed %s (%d types, %d funcs) into %s", file, len(gofile.types), len(gofile.funcs), package_path)
        return Handle(package_path, file)

    def handle_for(self, file: str) -> Handle:
        return Handle(self.file_package[file], file)

    def root_files(self) -> list[str]:
        return list(self.packages.get(self.root_package, []))

    # ── Resolver protocol ────────────────────────────────────

    def find_in_same_package(self, handle: Handle, name: str) -> tuple[bool, TypeSpec | None, Handle]:
        own = self.files.get(handle.file)
        if own is not None:
            spec = own.find_type(name)
            if spec is not None:
                return True, spec, handle
        for file in self.packages.get(handle.package_path, []):
            if file == handle.file:
                continue
            spec = self.files[file].find_type(name)
            if spec is not None:
                return True, spec, Handle(handle.package_path, file)
        return False, None, handle

    def find_in_import(self, handle: Handle, alias: str, name: str) -> tuple[bool, TypeSpec | None, Handle]:
        gofile = self.files.get(handle.file)
        if gofile is None:
            return False, None, handle
        for imp in gofile.imports:
            if self._import_alias(imp.path, imp.alias) != alias:
                continue
            for file in self.packages.get(imp.path, []):
                spec = self.files[file].find_type(name)
                if spec is not None:
                    return True, spec, Handle(imp.path, file)
            logger.debug("import %s (%s) has no type %s", alias, imp.path, name)
            return False, None, handle
        return False, None, handle

    def is_root_package(self, handle: Handle) -> bool:
        return handle.package_path == self.root_package

    def package_name_for(self, handle: Handle) -> str:
        gofile = self.files.get(handle.file)
        if gofile is not None:
            return gofile.package
        return posixpath.basename(handle.package_path)

    def _import_alias(self, path: str, alias: str | None) -> str:
        if alias is not None:
            return alias
        files = self.packages.get(path)
        if files:
            return self.files[files[0]].package
        return posixpath.basename(path)


_SKIP_DIRS: set[str] = {"vendor", "testdata", ".git"}


def module_path(root: Path) -> str:
    """Module path from `go.mod`, or the directory name when there is none."""
    gomod = root / "go.mod"
    if gomod.exists():
        for line in gomod.read_text().split("\n"):
            stripped = line.strip()
            if stripped.startswith("module "):
                return stripped[len("module ") :].strip().strip('"')
    return root.name


def load_module(root: Path) -> PackageIndex:
    """Parse every non-test Go file below `root` into a PackageIndex rooted at `root`."""
    mod = module_path(root)
    index = PackageIndex(mod)
    for path in sorted(root.rglob("*.go")):
        rel = path.relative_to(root)
        if any(part in _SKIP_DIRS for part in rel.parts[:-1]):
            continue
        if path.name.endswith("_test.go"):
            continue
        rel_dir = rel.parent.as_posix()
        package_path = mod if rel_dir == "." else mod + "/" + rel_dir
        index.add_file(package_path, rel.as_posix(), path.read_text())
    return index
