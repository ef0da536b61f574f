"""Frontend package - Go source to declarations and type expressions."""

from .packages import Handle, PackageIndex, Resolver, load_module
from .parse import GoFile, Import, ParseError, parse, parse_type
from .tokens import TokenizeError, tokenize

__all__ = [
    "GoFile",
    "Handle",
    "Import",
    "PackageIndex",
    "ParseError",
    "Resolver",
    "TokenizeError",
    "load_module",
    "parse",
    "parse_type",
    "tokenize",
]
