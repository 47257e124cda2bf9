# conllview/export.py
import logging
from pathlib import Path
from typing import Union

from conllview.core.interfaces import BaseFormatter
from conllview.errors import NoGraphSelected
from conllview.formatters import DotFormatter, TikzFormatter
from conllview.model import StatefulTreebankModel
from conllview.render import DEFAULT_DOT_COMMAND, dot_to_svg

logger = logging.getLogger(__name__)


def export_filename(idx: int, extension: str) -> str:
    """s<n>.<ext>, где n - позиция предложения с 1."""
    return f"s{idx + 1}.{extension}"


def _save(model: StatefulTreebankModel, formatter: BaseFormatter, output_dir: Union[str, Path]) -> Path:
    idx, graph = model.selection()
    if graph is None:
        raise NoGraphSelected()

    path = Path(output_dir) / export_filename(idx, formatter.extension)
    with open(path, "w", encoding="utf-8") as f:
        formatter.write(graph, f)

    logger.info(f"Saved tree to: {path}")
    return path


def save_dot(model: StatefulTreebankModel, output_dir: Union[str, Path] = ".") -> Path:
    return _save(model, DotFormatter(), output_dir)


def save_tikz(model: StatefulTreebankModel, output_dir: Union[str, Path] = ".") -> Path:
    return _save(model, TikzFormatter(), output_dir)


def save_svg(
        model: StatefulTreebankModel,
        output_dir: Union[str, Path] = ".",
        command: str = DEFAULT_DOT_COMMAND,
) -> Path:
    """
    Рендерит текущее дерево через Graphviz и сохраняет s<n>.svg.
    Файл пишется только после успешного рендеринга.
    """
    idx, graph = model.selection()
    if graph is None:
        raise NoGraphSelected()

    svg = dot_to_svg(DotFormatter().format(graph), command=command)

    path = Path(output_dir) / export_filename(idx, "svg")
    with open(path, "w", encoding="utf-8") as f:
        f.write(svg)

    logger.info(f"Saved tree to: {path}")
    return path
