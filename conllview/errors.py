# conllview/errors.py
from typing import Optional


class ViewerError(Exception):
    """Базовое исключение conllview."""


class GraphBuildError(ViewerError, ValueError):
    """
    Ошибка построения графа для одного предложения.
    Ошибка локальна: вызывающий код решает, пропустить предложение или прервать загрузку.
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


class MissingHead(GraphBuildError):
    """У токена нет значения HEAD в выбранном слое (не путать с HEAD=0)."""


class MissingRelation(GraphBuildError):
    """У некорневого токена отсутствует отношение (DEPREL)."""


class HeadOutOfRange(GraphBuildError):
    """HEAD ссылается на несуществующий токен."""


class FormatWriteFailure(ViewerError):
    """Запись сериализованного графа в выходной поток не удалась."""


class RendererError(ViewerError):
    """Ошибка на границе с внешним рендерером (Graphviz)."""


class ExternalRendererSpawnFailure(RendererError):
    """Не удалось запустить процесс рендерера."""


class ExternalRendererIOFailure(RendererError):
    """Рендерер запущен, но обмен данными или сам рендеринг завершился ошибкой."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class NoGraphSelected(ViewerError):
    """Экспорт или рендеринг запрошен, когда трибанк пуст."""

    def __init__(self, message: str = "no graph is selected"):
        super().__init__(message)


class TreebankReadError(ViewerError):
    """Входной поток трибанка не удалось прочитать (например, не UTF-8)."""
