"""Input synthesis: Go types to value expressions, stubs and test cases."""

from .cycles import CycleInfo, SynthesisContext, SynthesisResult, empty_result
from .stubs import StubSynthesizer
from .testcase import Header, TestCase, TestCaseBuilder
from .values import Synthesizer

__all__ = [
    "CycleInfo",
    "Header",
    "StubSynthesizer",
    "SynthesisContext",
    "SynthesisResult",
    "Synthesizer",
    "TestCase",
    "TestCaseBuilder",
    "empty_result",
]
