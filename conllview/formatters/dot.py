# conllview/formatters/dot.py
from typing import TextIO

from conllview.core.interfaces import BaseFormatter
from conllview.errors import FormatWriteFailure
from conllview.formatters.utils import escape_quotes

HEADER = (
    "digraph deptree {\n"
    'graph [charset = "UTF-8"]\n'
    'node [shape=plaintext, height=0, width=0, fontsize=12, fontname="Helvetica"]\n'
    'edge [color="#4b0082", fontsize="8", fontname="Courier New"]\n'
)
FOOTER = "}\n"

# Атрибут для подсвеченных (marked) узлов
MARKED_STYLE = 'fontcolor="#b22222"'


class DotFormatter(BaseFormatter):
    """Graphviz DOT: узлы n<i> в порядке токенов, ребра в порядке создания."""
    extension = "dot"

    def write(self, graph, out: TextIO) -> None:
        try:
            out.write(HEADER)

            for node in graph.nodes():
                attrs = f'label="{escape_quotes(node.token.form)}"'
                if graph.is_marked(node.offset):
                    attrs += f", {MARKED_STYLE}"
                out.write(f"n{node.offset}[{attrs}];\n")

            for edge in graph.edges():
                out.write(f'n{edge.source} -> n{edge.target}[label="{escape_quotes(edge.label)}"];\n')

            out.write(FOOTER)
        except (OSError, ValueError) as e:
            raise FormatWriteFailure(f"Cannot write DOT output: {e}") from e
