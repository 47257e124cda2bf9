# conllview/ingestion/loader.py
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Iterator, List, Optional, TextIO, Tuple, Union

from conllu import parse_incr
from conllu.models import TokenList
from conllu.parser import parse_int_value
from pydantic import ValidationError

from conllview.core.data_structures import Token
from conllview.errors import GraphBuildError, TreebankReadError
from conllview.graph import DependencyGraph, Layer, build_graph

logger = logging.getLogger(__name__)

# CoNLL-X: колонки 9-10 - проективный слой (PHEAD, PDEPREL) вместо DEPS/MISC
CONLLX_FIELDS = ("id", "form", "lemma", "upos", "xpos", "feats", "head", "deprel", "phead", "pdeprel")
CONLLX_FIELD_PARSERS = {
    "phead": lambda line, i: parse_int_value(line[i]),
}


@contextmanager
def open_input(path: Optional[Union[str, Path]]) -> Iterator[TextIO]:
    """Файл трибанка или stdin (path is None или '-')."""
    if path is None or str(path) == "-":
        yield sys.stdin
        return

    with open(path, "r", encoding="utf-8") as f:
        yield f


def sentence_tokens(token_list: TokenList) -> List[Token]:
    # Пропуск мульти-словных токенов (1-2) и пустых узлов (8.1): их ID - кортежи
    return [Token.from_conllu(t) for t in token_list if isinstance(t["id"], int)]


class TreebankLoader:
    """
    Потоковый загрузчик трибанка: CoNLL-U/CoNLL-X -> DependencyGraph.

    Ошибки построения графа локальны для предложения. По умолчанию
    битое предложение логируется и пропускается; strict=True прерывает
    загрузку на первой ошибке.
    """

    def __init__(self, fmt: str = "conllu", layer: Layer = Layer.SURFACE, strict: bool = False):
        if fmt not in ("conllu", "conllx"):
            raise ValueError(f"Unknown treebank format: {fmt}")
        self.fmt = fmt
        self.layer = layer
        self.strict = strict

        self.loaded = 0
        self.skipped = 0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "TreebankLoader":
        return cls(
            fmt=cfg["format"],
            layer=Layer(cfg["layer"]),
            strict=cfg["on_error"] == "abort",
        )

    def _parse_kwargs(self) -> Dict[str, Any]:
        if self.fmt == "conllx":
            return {"fields": CONLLX_FIELDS, "field_parsers": CONLLX_FIELD_PARSERS}
        return {}

    def read_sentences(self, stream: TextIO) -> Generator[Tuple[str, List[Token]], None, None]:
        """
        Лениво читает поток, отдает пары (sent_id, токены).
        Если sent_id в метаданных нет, используется порядковый номер.
        """
        sentences = enumerate(parse_incr(stream, **self._parse_kwargs()), 1)
        while True:
            try:
                i, token_list = next(sentences)
            except StopIteration:
                return
            except UnicodeDecodeError as e:
                # Битая кодировка ломает весь поток, а не одно предложение
                raise TreebankReadError(f"Cannot decode treebank input: {e}") from e

            sid = token_list.metadata.get("sent_id", str(i))
            try:
                tokens = sentence_tokens(token_list)
            except ValidationError as e:
                # Невалидный токен (например, отрицательный HEAD) - та же политика, что и для графа
                self._handle_error(sid, e)
                continue
            yield sid, tokens

    def load_graphs(self, stream: TextIO) -> Generator[DependencyGraph, None, None]:
        for sid, tokens in self.read_sentences(stream):
            try:
                graph = build_graph(tokens, self.layer)
            except GraphBuildError as e:
                self._handle_error(sid, e)
                continue

            self.loaded += 1
            yield graph

        logger.info(f"Loaded {self.loaded} sentences, skipped {self.skipped}")

    def _handle_error(self, sid: str, error: Exception) -> None:
        if self.strict:
            # Логирует тот, кто поймает исключение
            raise error

        # Логируем, но не падаем
        self.skipped += 1
        logger.warning(f"Skipped invalid sentence {sid}: {error}")

    def load_path(self, path: Optional[Union[str, Path]]) -> List[DependencyGraph]:
        """Загружает весь трибанк в память (для пакетного режима)."""
        with open_input(path) as stream:
            return list(self.load_graphs(stream))
