# conllview/formatters/tikz.py
from typing import TextIO

from conllview.core.interfaces import BaseFormatter
from conllview.errors import FormatWriteFailure
from conllview.formatters.utils import escape_quotes

# Фрагмент для пакета tikz-dependency (\usepackage{tikz-dependency})
PREAMBLE = (
    "\\begin{dependency}\n"
    "\\begin{deptext}\n"
)
DEPTEXT_END = "\\end{deptext}\n"
POSTAMBLE = "\\end{dependency}\n"

COLUMN_SEP = " & "


class TikzFormatter(BaseFormatter):
    extension = "tikz"

    def _entry(self, graph, idx: int) -> str:
        form = escape_quotes(graph.form(idx))
        if graph.is_marked(idx):
            return f"\\underline{{{form}}}"
        return form

    def write(self, graph, out: TextIO) -> None:
        entries = [self._entry(graph, node.offset) for node in graph.nodes()]

        try:
            out.write(PREAMBLE)
            out.write(COLUMN_SEP.join(entries) + " \\\\\n")
            out.write(DEPTEXT_END)

            # tikz-dependency нумерует слова с 1
            for edge in graph.edges():
                out.write(f"\\depedge{{{edge.source + 1}}}{{{edge.target + 1}}}{{{escape_quotes(edge.label)}}}\n")

            out.write(POSTAMBLE)
        except (OSError, ValueError) as e:
            raise FormatWriteFailure(f"Cannot write TikZ output: {e}") from e
