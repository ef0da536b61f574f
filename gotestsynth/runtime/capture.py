"""Runtime capture records produced by instrumented test runs.

One capture is one JSON object per instrumentation line:

    {"type": "pointer", "var_name": "p", "val": "0xc000012345",
     "child": {"type": "int", "var_name": "y", "val": "7"}}

`type` is a kind tag for wrapper nodes ("arr", "map", "pointer", "custom")
and the primitive type name for leaves.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

ARRAY_LOOP = "arr"
MAP_LOOP = "map"
POINTER = "pointer"
CUSTOM = "custom"

NIL_VALUE = "nil"
TRUE_VALUE = "true"


class CaptureError(Exception):
    """Capture line that is not a well-formed capture object."""


@dataclass
class Capture:
    """One node of a capture tree."""

    type: str
    var_name: str = ""
    map_key_type: str = ""
    val: str = ""
    arr_ident: str = ""
    child: Capture | None = None

    @property
    def is_leaf(self) -> bool:
        return self.child is None

    @classmethod
    def from_dict(cls, data: object) -> Capture:
        if not isinstance(data, dict):
            raise CaptureError(f"expected an object, got {type(data).__name__}")
        child_data = data.get("child")
        child = cls.from_dict(child_data) if child_data is not None else None
        fields = {}
        for key in ("type", "var_name", "map_key_type", "val", "arr_ident"):
            value = data.get(key, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise CaptureError(f"field {key!r} must be a string")
            fields[key] = value
        return cls(child=child, **fields)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "var_name": self.var_name,
            "map_key_type": self.map_key_type,
            "val": self.val,
            "arr_ident": self.arr_ident,
            "child": self.child.to_dict() if self.child is not None else None,
        }


def parse_capture(line: str) -> Capture:
    """Decode one JSON capture line; raises CaptureError on malformed input."""
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise CaptureError(str(e)) from e
    return Capture.from_dict(data)


@dataclass(frozen=True)
class Replacement:
    """Placeholder identifier of the instrumented source and its runtime text."""

    key: str
    val: str


@dataclass(frozen=True)
class TypeCorrection:
    """Text wrapped around a leaf literal, e.g. `MyInt(` + ... + `)`."""

    prefix: str = ""
    suffix: str = ""
