"""Determinism gate: accept assertions only when two runs decode identically."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gotestsynth.backend.go import GoPrinter

from .decode import Decoder

logger = logging.getLogger(__name__)


@dataclass
class RunTimeInfo:
    """Printed assertion statements of two runs of one test case."""

    is_valid: bool = False
    panics: bool = False
    assert_stmts: list[str] = field(default_factory=list)
    second_run: list[str] = field(default_factory=list)

    def set_is_valid(self) -> bool:
        """Compare both runs element-wise and record the outcome."""
        if len(self.assert_stmts) != len(self.second_run):
            self.is_valid = False
            return False
        for first, second in zip(self.assert_stmts, self.second_run):
            if first != second:
                self.is_valid = False
                return False
        self.is_valid = True
        return True


def decode_run(lines: list[str], printer: GoPrinter | None = None) -> list[str]:
    """Decode all capture lines of one run with a single Decoder."""
    printer = printer if printer is not None else GoPrinter()
    decoder = Decoder()
    result: list[str] = []
    for line in lines:
        if line.strip() == "":
            continue
        result.extend(printer.stmts(decoder.decode_line(line)))
    return result


def validate(first_lines: list[str], second_lines: list[str], printer: GoPrinter | None = None) -> RunTimeInfo:
    """Decode both runs independently and check they agree."""
    info = RunTimeInfo(
        assert_stmts=decode_run(first_lines, printer),
        second_run=decode_run(second_lines, printer),
    )
    if not info.set_is_valid():
        logger.info(
            "runs disagree (%d vs %d statements); dropping assertions",
            len(info.assert_stmts),
            len(info.second_run),
        )
    return info
