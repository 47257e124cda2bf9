#!/usr/bin/env python3
"""
Точка входа conllview: интерактивный просмотр трибанка или пакетный экспорт.
"""
import argparse
import logging
import queue
import sys
from typing import Any, Dict, List, Optional

from conllu.exceptions import ParseException
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from tqdm import tqdm

from conllview.config import INPUT_FORMATS, LAYERS, load_config
from conllview.errors import ViewerError
from conllview.export import save_dot, save_svg, save_tikz
from conllview.ingestion.loader import TreebankLoader
from conllview.ingestion.worker import LoaderThread
from conllview.model import StatefulTreebankModel
from conllview.viewer import TreebankViewer

logger = logging.getLogger(__name__)
console = Console(stderr=True)

EXPORTERS = {
    "dot": save_dot,
    "tikz": save_tikz,
    "svg": save_svg,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conllview",
        description="Dependency tree viewer for CoNLL treebanks with DOT/TikZ/SVG export.",
    )
    parser.add_argument("input", nargs="?", default=None,
                        help="Treebank file (CoNLL-U or CoNLL-X); '-' or nothing reads stdin")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--format", choices=INPUT_FORMATS, default=None, help="Input format")
    parser.add_argument("--layer", choices=LAYERS, default=None, help="Annotation layer to draw")
    parser.add_argument("--strict", action="store_true",
                        help="Abort on the first invalid sentence instead of skipping it")
    parser.add_argument("--output-dir", default=None, help="Directory for s<n>.dot/.tikz/.svg")
    parser.add_argument("--dot-command", default=None, help="Graphviz executable for SVG rendering")
    parser.add_argument("--export", choices=sorted(EXPORTERS), default=None,
                        help="Export without starting the viewer")

    selection = parser.add_mutually_exclusive_group()
    selection.add_argument("--index", type=int, default=1, help="1-based sentence to export (default: 1)")
    selection.add_argument("--all", action="store_true", help="Export every sentence")

    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def resolve_config(args: argparse.Namespace) -> Dict[str, Any]:
    cfg = load_config(args.config)

    overrides = {
        "format": args.format,
        "layer": args.layer,
        "output_dir": args.output_dir,
        "dot_command": args.dot_command,
    }
    for key, value in overrides.items():
        if value is not None:
            cfg[key] = value

    if args.strict:
        cfg["on_error"] = "abort"
    if args.verbose:
        cfg["log_level"] = "INFO"

    return cfg


def run_export(args: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    """Пакетный экспорт. Возвращает код выхода."""
    loader = TreebankLoader.from_config(cfg)

    try:
        model = StatefulTreebankModel.from_iter(loader.load_path(args.input))
    except (ViewerError, ValidationError, ParseException, OSError) as e:
        console.print(f"[red]Cannot read treebank: {escape(str(e))}[/red]")
        return 1

    save = EXPORTERS[args.export]
    kwargs = {"command": cfg["dot_command"]} if args.export == "svg" else {}

    if not len(model):
        # Пустой трибанк: единственная попытка завершится NoGraphSelected
        indices = [0]
    elif args.all:
        indices = range(len(model))
    elif not 1 <= args.index <= len(model):
        console.print(f"[red]Sentence {args.index} out of range (treebank has {len(model)})[/red]")
        return 1
    else:
        indices = [args.index - 1]

    failures = 0
    model.first()
    for idx in tqdm(indices, desc=f"export {args.export}", disable=not args.all):
        while model.idx < idx:
            model.next()
        try:
            path = save(model, cfg["output_dir"], **kwargs)
        except (ViewerError, OSError) as e:
            console.print(f"[red]Error writing {args.export} output for sentence {idx + 1}: {escape(str(e))}[/red]")
            failures += 1
            continue
        if not args.all:
            console.print(f"Saved tree to: {path}")

    logger.info(f"Exported {len(indices) - failures} of {len(indices)} sentences")
    return 1 if failures else 0


def run_viewer(args: argparse.Namespace, cfg: Dict[str, Any]) -> int:
    if args.input in (None, "-"):
        # Команды читаются со stdin, поэтому трибанк должен быть файлом
        console.print("[red]The interactive viewer needs a treebank file; use --export for stdin input[/red]")
        return 1

    model = StatefulTreebankModel()
    messages: queue.Queue = queue.Queue()

    LoaderThread(TreebankLoader.from_config(cfg), args.input, messages).start()

    viewer = TreebankViewer(model, messages, cfg, console=Console())
    viewer.run()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = resolve_config(args)
    except (ValueError, OSError) as e:
        console.print(f"[red]Invalid configuration: {escape(str(e))}[/red]")
        return 1

    # Настройка логирования
    logging.basicConfig(
        level=str(cfg["log_level"]).upper(),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.export:
        return run_export(args, cfg)
    return run_viewer(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
