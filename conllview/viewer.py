# conllview/viewer.py
import logging
import queue
from typing import Any, Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from conllview.errors import ViewerError
from conllview.export import save_dot, save_svg, save_tikz
from conllview.graph import DependencyGraph
from conllview.ingestion.worker import LoadFinished, drain, wait_first
from conllview.model import ModelUpdate, StatefulTreebankModel

logger = logging.getLogger(__name__)

HELP_TEXT = "n - next, p - previous, f - first, d - save DOT, t - save TikZ, s - save SVG, q - quit"


def dependency_tree(graph: DependencyGraph) -> Tree:
    """Дерево зависимостей для rich: корень -> зависимые (с отношениями)."""
    tree = Tree(escape(graph.sentence()), guide_style="dim")
    visited = set()

    def label(idx: int) -> str:
        form = escape(graph.form(idx))
        if graph.is_marked(idx):
            form = f"[bold red]{form}[/bold red]"
        edge = graph.head(idx)
        if edge is None:
            return f"{form} [dim](root)[/dim]"
        return f"[magenta]{escape(edge.label)}[/magenta] {form}"

    def add(branch: Tree, idx: int) -> None:
        # Защита от циклов в битой разметке
        if idx in visited:
            return
        visited.add(idx)
        child = branch.add(label(idx))
        for dep in graph.dependents(idx):
            add(child, dep)

    for root in graph.roots():
        add(tree, root)

    return tree


class TreebankViewer:
    """
    Терминальный просмотрщик трибанка.
    Подписывается на события модели и перерисовывает выбранное дерево.
    """

    def __init__(
            self,
            model: StatefulTreebankModel,
            messages: queue.Queue,
            cfg: Dict[str, Any],
            console: Optional[Console] = None,
    ):
        self.model = model
        self.messages = messages
        self.cfg = cfg
        self.console = console or Console()
        self.status = model.describe()
        self.finished: Optional[LoadFinished] = None

        self.model.connect(ModelUpdate.ANY, self._on_update)
        self.model.connect(ModelUpdate.TREE_SELECTION, self._on_tree_selection)

        self.commands: Dict[str, Callable[[], None]] = {
            "n": self.model.next,
            "p": self.model.previous,
            "f": self.model.first,
            "d": lambda: self._export(save_dot),
            "t": lambda: self._export(save_tikz),
            "s": lambda: self._export(save_svg, command=self.cfg["dot_command"]),
        }

    def _on_update(self, model: StatefulTreebankModel) -> None:
        self.status = model.describe()

    def _on_tree_selection(self, model: StatefulTreebankModel) -> None:
        graph = model.graph()
        if graph is None:
            return
        self.console.print(Panel(
            dependency_tree(graph),
            title=f"Sentence {model.describe()}",
            subtitle=f"depth {graph.depth()}" + ("" if graph.is_projective() else ", non-projective"),
            border_style="blue",
        ))

    def _export(self, save: Callable, **kwargs) -> None:
        try:
            path = save(self.model, self.cfg["output_dir"], **kwargs)
        except (ViewerError, OSError) as e:
            # Ошибка экспорта не должна ронять просмотрщик
            logger.warning(f"Export failed: {e}")
            self.console.print(f"[red]Error writing output: {escape(str(e))}[/red]")
            return
        self.console.print(f"Saved tree to: [green]{escape(str(path))}[/green]")

    def poll(self) -> None:
        """Забирает из очереди готовые графы."""
        if self.finished is not None:
            return
        self._finish(drain(self.model, self.messages))

    def _finish(self, finished: Optional[LoadFinished]) -> None:
        if finished is None:
            return

        self.finished = finished
        if finished.error is not None:
            self.console.print(f"[red]Loading stopped: {escape(str(finished.error))}[/red]")
        else:
            self.console.print(
                f"[dim]Loaded {finished.loaded} sentences"
                + (f", skipped {finished.skipped}" if finished.skipped else "")
                + "[/dim]"
            )

    def handle(self, command: str) -> bool:
        """Выполняет команду. Возвращает False для выхода."""
        command = command.strip().lower()
        if command == "q":
            return False

        action = self.commands.get(command)
        if action is None:
            self.console.print(HELP_TEXT)
        else:
            action()
        return True

    def run(self) -> None:
        self.console.print(HELP_TEXT)
        # Первое дерево показывается до первого приглашения; push в пустую
        # модель сам вызывает TREE_SELECTION
        if self.finished is None and not len(self.model):
            self._finish(wait_first(self.model, self.messages))

        while True:
            self.poll()
            try:
                command = self.console.input(f"[bold]\\[{self.status}][/bold] > ")
            except EOFError:
                break
            if not self.handle(command):
                break
