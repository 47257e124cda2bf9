"""conllview: просмотр деревьев зависимостей CoNLL и экспорт в DOT/TikZ/SVG."""

from .core.data_structures import Token
from .graph import DependencyEdge, DependencyGraph, DependencyNode, Layer, build_graph
from .model import ModelUpdate, StatefulTreebankModel, TreebankModel

__version__ = "0.1.0"

__all__ = [
    "Token",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyNode",
    "Layer",
    "build_graph",
    "ModelUpdate",
    "StatefulTreebankModel",
    "TreebankModel",
]
