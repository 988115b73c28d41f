"""
Session Workflow Suite
======================
Upload, option changes, enhancement, history and export through
MemeAsciiSession, with the AI enhancer mocked out.
"""

import io
import os
import tempfile
import unittest
from unittest.mock import MagicMock

import numpy as np
from PIL import Image

from meme_ascii.config import ConversionOptions
from meme_ascii.errors import DecodeError, EmptyResponseError, HistoryEntryNotFoundError, NoArtError
from meme_ascii.history import AsciiHistory
from meme_ascii.pipeline import MemeAsciiSession, convert


def sample_png():
    arr = np.tile(np.linspace(0, 255, 32, dtype=np.uint8), (24, 1))
    img = Image.fromarray(np.stack([arr, arr, arr], axis=-1), "RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def mock_enhancer(result="ENHANCED"):
    enhancer = MagicMock()
    enhancer.enhance.return_value = result
    return enhancer


class TestSessionConversion(unittest.TestCase):

    def setUp(self):
        self.data = sample_png()
        self.enhancer = mock_enhancer()
        self.session = MemeAsciiSession(options=ConversionOptions(output_width=20), enhancer=self.enhancer)

    def test_load_image(self):
        art = self.session.load_image(self.data)
        self.assertTrue(self.session.has_image)
        self.assertEqual(art, self.session.current_art)
        self.assertTrue(self.session.image_ref.startswith("data:image/png;base64,"))
        self.assertEqual(len(self.session.history), 1)
        self.assertEqual(art, convert(self.session.image, ConversionOptions(output_width=20)))

    def test_update_options_regenerates(self):
        self.session.load_image(self.data)
        art = self.session.update_options(output_width=30, charset_key="block")
        self.assertEqual(len(art.split("\n")[0]), 30)
        self.assertLessEqual(set(art), set(" ░▒▓█\n"))
        self.assertEqual(len(self.session.history), 2)
        self.assertEqual(self.session.history.entries[0].options.output_width, 30)

    def test_update_options_without_image(self):
        self.assertIsNone(self.session.update_options(invert=False))
        self.assertFalse(self.session.options.invert)
        self.assertEqual(len(self.session.history), 0)

    def test_regenerate_without_image(self):
        with self.assertRaises(NoArtError):
            self.session.regenerate()

    def test_bad_upload_keeps_state(self):
        self.session.load_image(self.data)
        before = self.session.current_art
        with self.assertRaises(DecodeError):
            self.session.load_image(b"\x00\x01 not an image")
        self.assertEqual(self.session.current_art, before)
        self.assertEqual(len(self.session.history), 1)

    def test_load_image_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "in.png")
            with open(path, "wb") as f:
                f.write(self.data)
            art = self.session.load_image_file(path)
        self.assertEqual(len(art.split("\n")[0]), 20)


class TestSessionEnhance(unittest.TestCase):

    def setUp(self):
        self.enhancer = mock_enhancer(" LOL\n@@@")
        self.session = MemeAsciiSession(options=ConversionOptions(output_width=16), enhancer=self.enhancer)

    def test_enhance_replaces_art(self):
        base = self.session.load_image(sample_png())
        result = self.session.enhance()
        self.enhancer.enhance.assert_called_once_with(base)
        self.assertEqual(result, " LOL\n@@@")
        self.assertEqual(self.session.current_art, " LOL\n@@@")
        self.assertTrue(self.session.current_enhanced)
        self.assertEqual(len(self.session.history), 2)
        self.assertEqual(self.session.history.entries[0].ascii_art, " LOL\n@@@")

    def test_enhance_without_art(self):
        with self.assertRaises(NoArtError):
            self.session.enhance()
        self.enhancer.enhance.assert_not_called()

    def test_failed_enhance_keeps_art(self):
        base = self.session.load_image(sample_png())
        for error in (EmptyResponseError("empty"), ConnectionError("offline")):
            self.enhancer.enhance.side_effect = error
            with self.assertRaises(type(error)):
                self.session.enhance()
            self.assertEqual(self.session.current_art, base)
            self.assertFalse(self.session.current_enhanced)
            self.assertEqual(len(self.session.history), 1)

    def test_regenerate_clears_enhanced_flag(self):
        self.session.load_image(sample_png())
        self.session.enhance()
        self.session.update_options(contrast=1.5)
        self.assertFalse(self.session.current_enhanced)


class TestSessionHistory(unittest.TestCase):

    def setUp(self):
        self.session = MemeAsciiSession(
            options=ConversionOptions(output_width=12),
            enhancer=mock_enhancer(),
            max_history=3,
        )
        self.session.load_image(sample_png())

    def test_load_from_history_restores(self):
        original = self.session.history.entries[0]
        self.session.update_options(output_width=24, charset_key="symbols", invert=False)

        entry = self.session.load_from_history(original.id)
        self.assertEqual(entry, original)
        self.assertEqual(self.session.current_art, original.ascii_art)
        self.assertEqual(self.session.options, original.options)
        self.assertTrue(self.session.has_image)
        self.assertEqual(self.session.regenerate(), original.ascii_art)

    def test_load_missing(self):
        with self.assertRaises(HistoryEntryNotFoundError):
            self.session.load_from_history("nope")

    def test_delete_from_history(self):
        entry_id = self.session.history.entries[0].id
        self.assertTrue(self.session.delete_from_history(entry_id))
        self.assertFalse(self.session.delete_from_history(entry_id))
        self.assertEqual(len(self.session.history), 0)

    def test_capacity(self):
        for width in (14, 16, 18, 20):
            self.session.update_options(output_width=width)
        self.assertEqual(len(self.session.history), 3)
        self.assertEqual(
            [e.options.output_width for e in self.session.history],
            [20, 18, 16],
        )


class TestSessionPersistence(unittest.TestCase):

    def test_history_file_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "history.json")
            session = MemeAsciiSession(
                options=ConversionOptions(output_width=10),
                enhancer=mock_enhancer(),
                history_file=path,
            )
            session.load_image(sample_png())
            self.assertTrue(os.path.exists(path))

            restored = MemeAsciiSession(enhancer=mock_enhancer(), history_file=path)
            self.assertEqual(restored.history.entries, session.history.entries)

    def test_explicit_history_wins(self):
        history = AsciiHistory(max_items=2)
        session = MemeAsciiSession(history=history, enhancer=mock_enhancer())
        self.assertIs(session.history, history)


class TestSessionExport(unittest.TestCase):

    def setUp(self):
        self.session = MemeAsciiSession(options=ConversionOptions(output_width=10), enhancer=mock_enhancer())
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_export_requires_art(self):
        with self.assertRaises(NoArtError):
            self.session.export_text(os.path.join(self.tmpdir.name, "a.txt"))
        with self.assertRaises(NoArtError):
            self.session.share_payload()

    def test_export_text(self):
        art = self.session.load_image(sample_png())
        path = self.session.export_text(os.path.join(self.tmpdir.name, "out", "a.txt"))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), art.encode("utf-8"))

    def test_export_png(self):
        self.session.load_image(sample_png())
        path = self.session.export_png(os.path.join(self.tmpdir.name, "a.png"))
        with Image.open(path) as img:
            self.assertEqual(img.format, "PNG")

    def test_share_payload(self):
        art = self.session.load_image(sample_png())
        payload = self.session.share_payload()
        self.assertEqual(payload["title"], "My ASCII Meme")
        self.assertIn(art[:200], payload["text"])

    def test_result(self):
        self.session.update_options(charset_key="block")
        art = self.session.load_image(sample_png())
        result = self.session.result()
        self.assertEqual(result.text, art)
        self.assertEqual(result.width, 10)
        self.assertEqual(result.metadata["charset"], "Block")
        self.assertEqual(result.options.charset_key, "block")


if __name__ == "__main__":
    unittest.main()
