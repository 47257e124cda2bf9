"""Сериализаторы графа зависимостей."""

from .dot import DotFormatter
from .tikz import TikzFormatter
from .utils import escape_quotes

__all__ = [
    "DotFormatter",
    "TikzFormatter",
    "escape_quotes",
]
