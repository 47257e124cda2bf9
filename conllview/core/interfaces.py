# conllview/core/interfaces.py
import io
from abc import ABC, abstractmethod
from typing import TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    from conllview.graph import DependencyGraph


class BaseFormatter(ABC):
    # Расширение файла при экспорте (s<n>.<extension>)
    extension: str = ""

    @abstractmethod
    def write(self, graph: "DependencyGraph", out: TextIO) -> None:
        """
        Сериализует граф в текстовый поток.
        Ошибки записи в поток оборачиваются в FormatWriteFailure.
        """
        pass

    def format(self, graph: "DependencyGraph") -> str:
        buf = io.StringIO()
        self.write(graph, buf)
        return buf.getvalue()
