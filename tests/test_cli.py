import io
import os
import queue
import tempfile
import threading
import time
import unittest
from unittest import mock

from rich.console import Console

from conllview.cli import main
from conllview.config import DEFAULT_CONFIG, load_config
from conllview.ingestion.worker import GraphLoaded, LoadFinished
from conllview.ingestion.loader import TreebankLoader
from conllview.model import StatefulTreebankModel
from conllview.viewer import TreebankViewer, dependency_tree

TREEBANK = """# sent_id = 1
1\tCats\tcat\tNOUN\t_\t_\t2\tnsubj\t_\t_
2\tchase\tchase\tVERB\t_\t_\t0\troot\t_\t_
3\tmice\tmouse\tNOUN\t_\t_\t2\tobj\t_\t_

# sent_id = 2
1\tbroken\tbroken\tADJ\t_\t_\t2\t_\t_\t_
2\tsentence\tsentence\tNOUN\t_\t_\t0\troot\t_\t_

# sent_id = 3
1\tDogs\tdog\tNOUN\t_\t_\t2\tnsubj\t_\t_
2\tbark\tbark\tVERB\t_\t_\t0\troot\t_\t_

"""


class TestConfig(unittest.TestCase):
    def test_yaml_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "viewer.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("format: conllx\non_error: abort\nunknown_key: 1\n")

            cfg = load_config(path)

        self.assertEqual(cfg["format"], "conllx")
        self.assertEqual(cfg["on_error"], "abort")
        self.assertEqual(cfg["layer"], DEFAULT_CONFIG["layer"])
        self.assertNotIn("unknown_key", cfg)

    def test_invalid_value(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "viewer.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("layer: deep\n")

            with self.assertRaises(ValueError):
                load_config(path)


class TestCli(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.input = os.path.join(self.tmp.name, "treebank.conllu")
        with open(self.input, "w", encoding="utf-8") as f:
            f.write(TREEBANK)
        self.out = os.path.join(self.tmp.name, "out")
        os.mkdir(self.out)

    def run_cli(self, *args):
        return main([self.input, "--output-dir", self.out, *args])

    def test_export_single(self):
        # Битое предложение пропускается, поэтому 2-е - это "Dogs bark"
        self.assertEqual(self.run_cli("--export", "dot", "--index", "2"), 0)
        with open(os.path.join(self.out, "s2.dot"), encoding="utf-8") as f:
            self.assertIn('n1 -> n0[label="nsubj"];', f.read())

    def test_export_all(self):
        self.assertEqual(self.run_cli("--export", "tikz", "--all"), 0)
        self.assertEqual(sorted(os.listdir(self.out)), ["s1.tikz", "s2.tikz"])

    def test_index_out_of_range(self):
        self.assertEqual(self.run_cli("--export", "dot", "--index", "5"), 1)
        self.assertEqual(os.listdir(self.out), [])

    def test_strict_mode_fails(self):
        self.assertEqual(self.run_cli("--export", "dot", "--strict"), 1)

    def test_empty_treebank(self):
        with open(self.input, "w", encoding="utf-8") as f:
            f.write("")
        self.assertEqual(self.run_cli("--export", "dot"), 1)

    def test_invalid_utf8_input(self):
        with open(self.input, "wb") as f:
            f.write(b"# sent_id = 1\n1\tCats\xff\xfe\tcat\tNOUN\t_\t_\t0\troot\t_\t_\n\n")

        self.assertEqual(self.run_cli("--export", "dot"), 1)
        self.assertEqual(os.listdir(self.out), [])

    @mock.patch("conllview.render.subprocess.run", side_effect=FileNotFoundError("dot"))
    def test_renderer_failure_exit_status(self, run):
        self.assertEqual(self.run_cli("--export", "svg", "--dot-command", "no-such-dot"), 1)
        self.assertEqual(run.call_args.args[0], ["no-such-dot", "-Tsvg"])

    def test_viewer_requires_file(self):
        self.assertEqual(main(["-"]), 1)


class TestViewer(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

        self.output = io.StringIO()
        self.console = Console(file=self.output, width=100)
        self.model = StatefulTreebankModel()
        self.messages = queue.Queue()

        cfg = dict(DEFAULT_CONFIG, output_dir=self.tmp.name)
        self.viewer = TreebankViewer(self.model, self.messages, cfg, console=self.console)

        for graph in TreebankLoader().load_graphs(io.StringIO(TREEBANK)):
            self.messages.put(GraphLoaded(graph))
        self.messages.put(LoadFinished(2, 1))

    def test_poll_and_navigate(self):
        self.viewer.poll()
        self.assertEqual(len(self.model), 2)
        self.assertEqual(self.viewer.status, "1 of 2")
        self.assertIn("skipped 1", self.output.getvalue())

        self.assertTrue(self.viewer.handle("n"))
        self.assertEqual(self.viewer.status, "2 of 2")
        self.assertIn("bark", self.output.getvalue())
        self.assertFalse(self.viewer.handle("q"))

    def test_export_commands(self):
        self.viewer.poll()
        self.viewer.handle("d")
        self.viewer.handle("t")
        self.assertEqual(sorted(os.listdir(self.tmp.name)), ["s1.dot", "s1.tikz"])

    def test_export_error_keeps_running(self):
        # Трибанк еще пуст
        self.assertTrue(self.viewer.handle("d"))
        self.assertIn("no graph is selected", self.output.getvalue())

    def test_run_shows_first_tree(self):
        # Продюсер еще не успел ничего прислать к моменту запуска
        model = StatefulTreebankModel()
        messages = queue.Queue()
        viewer = TreebankViewer(model, messages, dict(DEFAULT_CONFIG), console=self.console)
        graphs = list(TreebankLoader().load_graphs(io.StringIO(TREEBANK)))

        def produce():
            time.sleep(0.05)
            for graph in graphs:
                messages.put(GraphLoaded(graph))
            messages.put(LoadFinished(2, 1))

        producer = threading.Thread(target=produce)
        producer.start()
        self.addCleanup(producer.join)

        with mock.patch.object(self.console, "input", return_value="q") as prompt:
            viewer.run()

        output = self.output.getvalue()
        self.assertIn("Cats", output)
        self.assertEqual(prompt.call_count, 1)
        self.assertNotIn("0 of 0", prompt.call_args.args[0])

    def test_run_empty_treebank(self):
        messages = queue.Queue()
        messages.put(LoadFinished(0, 0))
        viewer = TreebankViewer(StatefulTreebankModel(), messages, dict(DEFAULT_CONFIG), console=self.console)

        with mock.patch.object(self.console, "input", side_effect=EOFError):
            viewer.run()

        self.assertIn("Loaded 0 sentences", self.output.getvalue())

    def test_dependency_tree(self):
        graph = next(TreebankLoader().load_graphs(io.StringIO(TREEBANK)))
        console = Console(file=io.StringIO(), width=80)
        console.print(dependency_tree(graph))
        text = console.file.getvalue()
        self.assertIn("chase", text)
        self.assertIn("nsubj", text)


if __name__ == '__main__':
    unittest.main()
