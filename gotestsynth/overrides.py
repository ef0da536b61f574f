"""Manual override store: fixed input expressions per file/function/parameter.

Overrides are Go expression text used verbatim instead of synthesized values.
They load from a JSON document shaped like:

    {
      "ignore_files": ["generated.go"],
      "files": {
        "server.go": {
          "ignore_funcs": ["debugDump"],
          "funcs": {
            "Listen": {
              "receiver": ["&Server{Port: 80}"],
              "params": {"addr": ["\\"localhost\\"", "\\"0.0.0.0\\""]}
            }
          }
        }
      }
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


class OverrideError(Exception):
    """Malformed override document."""


@dataclass
class FuncOverrides:
    receiver: list[str] = field(default_factory=list)
    params: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class OverrideStore:
    """Override values keyed by file name, then function name."""

    ignore_files: set[str] = field(default_factory=set)
    ignore_funcs: dict[str, set[str]] = field(default_factory=dict)
    funcs: dict[tuple[str, str], FuncOverrides] = field(default_factory=dict)

    def add_value(self, file: str, func: str, param: str, values: list[str]) -> None:
        self._entry(file, func).params[param] = list(values)

    def add_receiver(self, file: str, func: str, values: list[str]) -> None:
        self._entry(file, func).receiver = list(values)

    def _entry(self, file: str, func: str) -> FuncOverrides:
        key = (file, func)
        if key not in self.funcs:
            self.funcs[key] = FuncOverrides()
        return self.funcs[key]

    def has_value(self, file: str, func: str, param: str) -> bool:
        entry = self.funcs.get((file, func))
        return entry is not None and len(entry.params.get(param, [])) > 0

    def get_values(self, file: str, func: str, param: str) -> list[str]:
        entry = self.funcs.get((file, func))
        if entry is None:
            return []
        return entry.params.get(param, [])

    def has_receiver(self, file: str, func: str) -> bool:
        entry = self.funcs.get((file, func))
        return entry is not None and len(entry.receiver) > 0

    def get_receiver(self, file: str, func: str) -> list[str]:
        entry = self.funcs.get((file, func))
        if entry is None:
            return []
        return entry.receiver

    def should_ignore_file(self, file: str) -> bool:
        return file in self.ignore_files

    def should_ignore_func(self, file: str, func: str) -> bool:
        return func in self.ignore_funcs.get(file, set())


def _string_list(value: object, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise OverrideError(f"{where}: expected a list of strings")
    return list(value)


def from_dict(doc: dict) -> OverrideStore:
    """Build a store from a decoded override document."""
    store = OverrideStore()
    store.ignore_files = set(_string_list(doc.get("ignore_files", []), "ignore_files"))
    files = doc.get("files", {})
    if not isinstance(files, dict):
        raise OverrideError("files: expected an object")
    for file, file_doc in files.items():
        if not isinstance(file_doc, dict):
            raise OverrideError(f"files.{file}: expected an object")
        ignored = _string_list(file_doc.get("ignore_funcs", []), f"files.{file}.ignore_funcs")
        if ignored:
            store.ignore_funcs[file] = set(ignored)
        funcs = file_doc.get("funcs", {})
        if not isinstance(funcs, dict):
            raise OverrideError(f"files.{file}.funcs: expected an object")
        for func, func_doc in funcs.items():
            where = f"files.{file}.funcs.{func}"
            if not isinstance(func_doc, dict):
                raise OverrideError(f"{where}: expected an object")
            if "receiver" in func_doc:
                store.add_receiver(file, func, _string_list(func_doc["receiver"], where + ".receiver"))
            params = func_doc.get("params", {})
            if not isinstance(params, dict):
                raise OverrideError(f"{where}.params: expected an object")
            for param, values in params.items():
                store.add_value(file, func, param, _string_list(values, f"{where}.params.{param}"))
    logger.debug("loaded overrides for %d functions", len(store.funcs))
    return store


def load(path: Path) -> OverrideStore:
    """Read an override document from disk."""
    try:
        doc = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise OverrideError(f"{path}: {e}") from e
    if not isinstance(doc, dict):
        raise OverrideError(f"{path}: expected a JSON object")
    return from_dict(doc)
