"""Backend package - IR to Go source text."""

from .go import GoPrinter

__all__ = ["GoPrinter"]
