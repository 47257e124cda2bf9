# conllview/graph.py
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

import networkx as nx

from conllview.core.data_structures import Token
from conllview.errors import HeadOutOfRange, MissingHead, MissingRelation


class Layer(Enum):
    """Слой разметки, из которого берутся HEAD и отношение."""
    SURFACE = "surface"
    PROJECTIVE = "projective"


@dataclass(frozen=True)
class DependencyNode:
    token: Token
    offset: int  # 0-based позиция в исходном предложении


class DependencyEdge(NamedTuple):
    source: int
    target: int
    label: str


class DependencyGraph:
    """
    Ориентированный граф зависимостей: governor -> dependent.

    Узлы адресуются целыми индексами 0..n-1 в порядке токенов,
    ребра хранятся в порядке создания. Экземпляры строятся через
    build_graph() и после построения не меняются.
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._nodes: List[DependencyNode] = []
        self._edges: List[Tuple[int, int]] = []

    @classmethod
    def from_sentence(cls, sentence: Sequence[Token], layer: Layer = Layer.SURFACE) -> "DependencyGraph":
        return build_graph(sentence, layer)

    def _add_node(self, node: DependencyNode) -> int:
        idx = len(self._nodes)
        self._nodes.append(node)
        self._graph.add_node(idx)
        return idx

    def _add_edge(self, source: int, target: int, label: str) -> None:
        self._graph.add_edge(source, target, label=label)
        self._edges.append((source, target))

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self):
        return f"DependencyGraph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    @property
    def digraph(self) -> nx.DiGraph:
        """Read-only view на внутренний networkx граф."""
        return self._graph.copy(as_view=True)

    def nodes(self) -> Iterator[DependencyNode]:
        return iter(self._nodes)

    def node(self, idx: int) -> DependencyNode:
        return self._nodes[idx]

    def edges(self) -> Iterator[DependencyEdge]:
        for source, target in self._edges:
            yield DependencyEdge(source, target, self._graph.edges[source, target]["label"])

    def edge_count(self) -> int:
        return len(self._edges)

    def form(self, idx: int) -> str:
        return self._nodes[idx].token.form

    def is_marked(self, idx: int) -> bool:
        return self._nodes[idx].token.highlight

    def tokens(self) -> List[str]:
        return [node.token.form for node in self._nodes]

    def sentence(self) -> str:
        return " ".join(self.tokens())

    def head(self, idx: int) -> Optional[DependencyEdge]:
        """Входящее ребро узла или None для корня."""
        for source in self._graph.predecessors(idx):
            return DependencyEdge(source, idx, self._graph.edges[source, idx]["label"])
        return None

    def roots(self) -> List[int]:
        return [idx for idx in range(len(self._nodes)) if self._graph.in_degree(idx) == 0]

    def dependents(self, idx: int) -> List[int]:
        return sorted(self._graph.successors(idx))

    def depth(self) -> int:
        """
        Максимальная глубина дерева (число ребер от корня до самого глубокого листа).
        -1 для циклической (битой) разметки, 0 если корней нет.
        """
        if not nx.is_directed_acyclic_graph(self._graph):
            return -1

        roots = self.roots()
        if not roots:
            return 0

        max_depth = 0
        for root in roots:
            # shortest_path_length в невзвешенном графе дает BFS уровни
            lengths = nx.shortest_path_length(self._graph, source=root)
            max_depth = max(max_depth, max(lengths.values()))
        return max_depth

    def is_projective(self) -> bool:
        """
        Проверка на пересечение дуг (start < end < start < end).
        """
        # Дуга всегда от min к max для проверки пересечений
        arcs = [tuple(sorted((source, target))) for source, target in self._edges]

        for i in range(len(arcs)):
            for j in range(i + 1, len(arcs)):
                s1, e1 = arcs[i]
                s2, e2 = arcs[j]
                if s1 < s2 < e1 < e2 or s2 < s1 < e2 < e1:
                    return False
        return True


def _select_layer(token: Token, layer: Layer) -> Tuple[Optional[int], Optional[str]]:
    if layer is Layer.PROJECTIVE:
        return token.phead_id, token.prel
    return token.head_id, token.rel


def build_graph(sentence: Sequence[Token], layer: Layer = Layer.SURFACE) -> DependencyGraph:
    """
    Строит граф зависимостей из предложения.

    Args:
        sentence: Токены в порядке следования.
        layer: Слой разметки (поверхностный или проективный).

    Returns:
        DependencyGraph с одним узлом на токен и одним ребром на некорневой токен.

    Raises:
        MissingHead: у токена нет HEAD в выбранном слое.
        MissingRelation: у некорневого токена нет отношения.
        HeadOutOfRange: HEAD указывает за пределы предложения.
    """
    graph = DependencyGraph()

    nodes = [graph._add_node(DependencyNode(token=token, offset=offset))
             for offset, token in enumerate(sentence)]

    for offset, node_idx in enumerate(nodes):
        token = sentence[offset]
        head, rel = _select_layer(token, layer)

        if head is None:
            raise MissingHead(
                f"Token {offset + 1} ('{token.form}') does not have a head in the {layer.value} layer",
                offset=offset,
            )

        if head == 0:
            continue

        if rel is None:
            raise MissingRelation(
                f"Token {offset + 1} ('{token.form}') is missing its dependency relation",
                offset=offset,
            )

        if head > len(nodes):
            raise HeadOutOfRange(
                f"Token {offset + 1} ('{token.form}'): HEAD {head} ссылается на несуществующий токен",
                offset=offset,
            )

        graph._add_edge(nodes[head - 1], node_idx, rel)

    return graph
