import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import MagicMock, patch

import numpy as np
from PIL import Image

from meme_ascii.cli import handle_command, interactive_mode, main
from meme_ascii.config import ConversionOptions
from meme_ascii.pipeline import MemeAsciiSession, convert_file

CLEAN_ENV = {"MEME_ASCII_HISTORY_FILE": "", "MEME_ASCII_LOG_FILE": ""}


def write_png(path):
    arr = np.zeros((20, 40, 3), dtype=np.uint8)
    arr[:, 20:] = 255
    Image.fromarray(arr, "RGB").save(path, format="PNG")


class CliTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.image = os.path.join(self.tmpdir.name, "input.png")
        write_png(self.image)
        env = patch.dict(os.environ, CLEAN_ENV)
        env.start()
        self.addCleanup(env.stop)

    def tearDown(self):
        self.tmpdir.cleanup()

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()


class TestMain(CliTestCase):

    def test_prints_art(self):
        code, out, _ = self.run_main([self.image, "-w", "20", "--charset", "simple", "--no-invert"])
        self.assertEqual(code, 0)
        expected = convert_file(self.image, ConversionOptions(output_width=20, charset_key="simple", invert=False))
        self.assertEqual(out, expected + "\n")
        self.assertTrue(out.startswith(" " * 10 + "@" * 10))

    def test_writes_output_file(self):
        target = os.path.join(self.tmpdir.name, "art.txt")
        code, out, err = self.run_main([self.image, "-w", "16", "-o", target])
        self.assertEqual(code, 0)
        self.assertIn("Saved to", err)
        with open(target, encoding="utf-8") as f:
            self.assertEqual(f.read() + "\n", out)

    def test_html_and_png_outputs(self):
        page = os.path.join(self.tmpdir.name, "art.html")
        png = os.path.join(self.tmpdir.name, "art.png")
        code, _, _ = self.run_main([self.image, "-w", "12", "--html", page, "--png", png])
        self.assertEqual(code, 0)
        with open(page, encoding="utf-8") as f:
            self.assertIn("<pre>", f.read())
        with Image.open(png) as img:
            self.assertEqual(img.format, "PNG")

    def test_missing_image_file(self):
        code, _, err = self.run_main([os.path.join(self.tmpdir.name, "nope.png")])
        self.assertEqual(code, 1)
        self.assertIn("❌", err)

    def test_no_image_argument(self):
        code, _, _ = self.run_main([])
        self.assertEqual(code, 2)

    def test_invalid_width(self):
        code, _, _ = self.run_main([self.image, "-w", "0"])
        self.assertEqual(code, 1)

    def test_list_charsets(self):
        code, out, _ = self.run_main(["--list-charsets"])
        self.assertEqual(code, 0)
        for key in ("standard", "simple", "block", "detailed_alt", "symbols"):
            self.assertIn(key, out)

    def test_enhance_flag(self):
        enhancer = MagicMock()
        enhancer.enhance.return_value = "MEME"
        with patch("meme_ascii.pipeline.get_enhancer", return_value=enhancer):
            code, out, _ = self.run_main([self.image, "-w", "10", "--enhance"])
        self.assertEqual(code, 0)
        self.assertEqual(out, "MEME\n")
        enhancer.enhance.assert_called_once()


class TestReplCommands(CliTestCase):

    def setUp(self):
        super().setUp()
        self.session = MemeAsciiSession(options=ConversionOptions(output_width=12), enhancer=MagicMock())
        self.session.load_image_file(self.image)

    def run_command(self, line):
        out = io.StringIO()
        with redirect_stdout(out):
            keep_going = handle_command(self.session, line)
        return keep_going, out.getvalue()

    def test_option_commands(self):
        self.run_command("width 24")
        self.run_command("charset block")
        self.run_command("invert")
        self.run_command("contrast 1.5")
        self.assertEqual(
            self.session.options,
            ConversionOptions(output_width=24, charset_key="block", invert=False, contrast=1.5),
        )
        self.assertEqual(len(self.session.current_art.split("\n")[0]), 24)

    def test_unknown_charset_warns(self):
        _, out = self.run_command("charset fancy")
        self.assertIn("Unknown charset", out)
        self.assertEqual(self.session.options.charset_key, "fancy")

    def test_bad_arguments(self):
        _, out = self.run_command("width lots")
        self.assertIn("Invalid width", out)
        self.assertEqual(self.session.options.output_width, 12)

    def test_history_load_delete(self):
        self.run_command("width 20")
        first = self.session.history.entries[-1]
        _, out = self.run_command("history")
        self.assertIn(first.id[:8], out)

        self.run_command(f"load {first.id[:8]}")
        self.assertEqual(self.session.options.output_width, 12)

        _, out = self.run_command(f"delete {first.id}")
        self.assertIn("deleted", out)
        self.assertNotIn(first.id, self.session.history)

    def test_save(self):
        target = os.path.join(self.tmpdir.name, "saved.html")
        _, out = self.run_command(f"save {target}")
        self.assertIn("Saved to", out)
        with open(target, encoding="utf-8") as f:
            self.assertIn("<pre>", f.read())

    def test_quit(self):
        keep_going, _ = self.run_command("quit")
        self.assertFalse(keep_going)

    def test_interactive_reports_errors(self):
        self.session.enhancer.enhance.side_effect = ConnectionError("offline")
        before = self.session.current_art
        inputs = iter(["enhance", "exit"])
        out = io.StringIO()
        with redirect_stdout(out):
            interactive_mode(self.session, input_fn=lambda _prompt: next(inputs))
        self.assertIn("❌ Error: offline", out.getvalue())
        self.assertEqual(self.session.current_art, before)


if __name__ == "__main__":
    unittest.main()
