# conllview/model.py
import logging
import threading
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from conllview.graph import DependencyGraph

logger = logging.getLogger(__name__)


class ModelUpdate(Enum):
    """Категории событий модели."""
    ANY = "any"  # любое обновление
    TREE_SELECTION = "tree_selection"  # сменилось (или впервые стало валидным) выбранное дерево
    TREEBANK_LEN = "treebank_len"  # в трибанк добавлено дерево


Callback = Callable[["StatefulTreebankModel"], None]


class TreebankModel:
    """Упорядоченная коллекция графов, только добавление."""

    def __init__(self):
        self._treebank: List[DependencyGraph] = []

    @classmethod
    def from_iter(cls, graphs: Iterable[DependencyGraph]) -> "TreebankModel":
        model = cls()
        for graph in graphs:
            model.push(graph)
        return model

    def push(self, graph: DependencyGraph) -> None:
        self._treebank.append(graph)

    def get(self, idx: int) -> Optional[DependencyGraph]:
        if 0 <= idx < len(self._treebank):
            return self._treebank[idx]
        return None

    def __len__(self) -> int:
        return len(self._treebank)

    def __iter__(self) -> Iterator[DependencyGraph]:
        return iter(self._treebank)


class StatefulTreebankModel:
    """
    Трибанк с курсором и реестром подписчиков.

    Все операции сериализуются одним RLock. Колбэки вызываются синхронно
    под этим локом и получают саму модель: читать ее можно, вызывать
    push/first/next/previous из колбэка нельзя (RuntimeError).
    """

    def __init__(self):
        self._inner = TreebankModel()
        self._idx = 0
        self._lock = threading.RLock()
        self._notifying = 0
        # Единый список в порядке регистрации: (категория, callback)
        self._callbacks: List[Tuple[ModelUpdate, Callback]] = []

    @classmethod
    def from_iter(cls, graphs: Iterable[DependencyGraph]) -> "StatefulTreebankModel":
        model = cls()
        for graph in graphs:
            model.push(graph)
        return model

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def idx(self) -> int:
        with self._lock:
            return self._idx

    def __len__(self) -> int:
        with self._lock:
            return len(self._inner)

    def connect(self, update: ModelUpdate, callback: Callback) -> None:
        if not isinstance(update, ModelUpdate):
            raise TypeError(f"Unknown update category: {update!r}")
        with self._lock:
            self._callbacks.append((update, callback))

    def _emit(self, update: ModelUpdate) -> None:
        callbacks = [cb for category, cb in self._callbacks if category in (update, ModelUpdate.ANY)]

        self._notifying += 1
        try:
            for callback in callbacks:
                callback(self)
        finally:
            self._notifying -= 1

    def _check_reentry(self, operation: str) -> None:
        if self._notifying:
            raise RuntimeError(f"{operation}() cannot be called from a model callback")

    def push(self, graph: DependencyGraph) -> None:
        with self._lock:
            self._check_reentry("push")
            was_empty = len(self._inner) == 0
            self._inner.push(graph)
            logger.debug(f"Pushed graph #{len(self._inner)} ({len(graph)} tokens)")

            self._emit(ModelUpdate.TREEBANK_LEN)
            if was_empty:
                # Выбор стал валидным впервые, idx уже 0
                self._emit(ModelUpdate.TREE_SELECTION)

    def first(self) -> None:
        with self._lock:
            self._check_reentry("first")
            if len(self._inner) == 0:
                return
            self._idx = 0
            self._emit(ModelUpdate.TREE_SELECTION)

    def next(self) -> None:
        with self._lock:
            self._check_reentry("next")
            if self._idx + 1 >= len(self._inner):
                return
            self._idx += 1
            self._emit(ModelUpdate.TREE_SELECTION)

    def previous(self) -> None:
        with self._lock:
            self._check_reentry("previous")
            if self._idx == 0 or len(self._inner) == 0:
                return
            self._idx -= 1
            self._emit(ModelUpdate.TREE_SELECTION)

    def graph(self) -> Optional[DependencyGraph]:
        with self._lock:
            return self._inner.get(self._idx)

    def selection(self) -> Tuple[int, Optional[DependencyGraph]]:
        """Атомарная пара (idx, graph)."""
        with self._lock:
            return self._idx, self._inner.get(self._idx)

    def describe(self) -> str:
        """Текст для заголовка: '<i> of <n>'."""
        with self._lock:
            if len(self._inner) == 0:
                return "0 of 0"
            return f"{self._idx + 1} of {len(self._inner)}"
