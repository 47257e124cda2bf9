# conllview/ingestion/worker.py
import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from conllview.graph import DependencyGraph
from conllview.ingestion.loader import TreebankLoader, open_input
from conllview.model import StatefulTreebankModel

logger = logging.getLogger(__name__)


@dataclass
class GraphLoaded:
    graph: DependencyGraph


@dataclass
class LoadFinished:
    loaded: int
    skipped: int
    error: Optional[BaseException] = None


class LoaderThread(threading.Thread):
    """
    Фоновый продюсер: читает трибанк и отправляет графы в очередь.
    С моделью напрямую не работает - ее обновляет потребитель через drain().
    """

    def __init__(self, loader: TreebankLoader, path: Optional[Union[str, Path]], messages: queue.Queue):
        super().__init__(name="treebank-loader", daemon=True)
        self.loader = loader
        self.path = path
        self.messages = messages

    def run(self):
        error = None
        try:
            with open_input(self.path) as stream:
                for graph in self.loader.load_graphs(stream):
                    self.messages.put(GraphLoaded(graph))
        except Exception as e:
            # Ошибка передается потребителю вместе с финальным сообщением
            logger.error(f"Loading {self.path or 'stdin'} failed: {e}")
            error = e

        self.messages.put(LoadFinished(self.loader.loaded, self.loader.skipped, error))


def drain(
        model: StatefulTreebankModel,
        messages: queue.Queue,
        block: bool = False,
        timeout: Optional[float] = None,
) -> Optional[LoadFinished]:
    """
    Применяет накопленные сообщения к модели.

    Args:
        block: Ждать сообщений до LoadFinished (с таймаутом timeout на каждое).

    Returns:
        LoadFinished, если загрузка завершилась в этом вызове, иначе None.
    """
    while True:
        try:
            message = messages.get(block=block, timeout=timeout if block else None)
        except queue.Empty:
            return None

        if isinstance(message, LoadFinished):
            return message

        model.push(message.graph)


def wait_first(
        model: StatefulTreebankModel,
        messages: queue.Queue,
        timeout: Optional[float] = None,
) -> Optional[LoadFinished]:
    """
    Блокируется до первого сообщения продюсера.
    Первый граф попадает в модель (и вызывает TREE_SELECTION), а пустой
    или упавший трибанк сразу возвращает LoadFinished.
    """
    try:
        message = messages.get(timeout=timeout)
    except queue.Empty:
        return None

    if isinstance(message, LoadFinished):
        return message

    model.push(message.graph)
    return None
