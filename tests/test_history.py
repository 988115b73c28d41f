import json
import os
import tempfile
import unittest

from meme_ascii.config import ConversionOptions
from meme_ascii.errors import HistoryEntryNotFoundError
from meme_ascii.history import AsciiHistory, HistoryEntry

IMAGE_REF = "data:image/png;base64,iVBORw0KGgo="


class TestAsciiHistory(unittest.TestCase):

    def test_newest_first(self):
        history = AsciiHistory(max_items=5)
        first = history.add("one", ConversionOptions(), IMAGE_REF)
        second = history.add("two", ConversionOptions(output_width=50), IMAGE_REF)
        self.assertEqual([e.id for e in history], [second.id, first.id])
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(history.get(second.id).options.output_width, 50)

    def test_capacity_evicts_oldest(self):
        history = AsciiHistory(max_items=3)
        added = [history.add(f"art {i}", ConversionOptions(), IMAGE_REF) for i in range(4)]
        self.assertEqual(len(history), 3)
        self.assertNotIn(added[0].id, history)
        self.assertEqual([e.ascii_art for e in history], ["art 3", "art 2", "art 1"])

    def test_get_missing(self):
        history = AsciiHistory()
        with self.assertRaises(HistoryEntryNotFoundError):
            history.get("missing")
        with self.assertRaises(KeyError):
            history.get("missing")

    def test_delete(self):
        history = AsciiHistory()
        entry = history.add("x", ConversionOptions(), IMAGE_REF)
        self.assertTrue(history.delete(entry.id))
        self.assertFalse(history.delete(entry.id))
        self.assertEqual(len(history), 0)

    def test_invalid_capacity(self):
        with self.assertRaises(ValueError):
            AsciiHistory(max_items=0)

    def test_preview_is_first_line(self):
        entry = HistoryEntry("id", 0, IMAGE_REF, "top\nbottom", ConversionOptions())
        self.assertEqual(entry.preview, "top")


class TestHistoryPersistence(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "history.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_save_and_load(self):
        history = AsciiHistory(max_items=4)
        history.add("@@\n..", ConversionOptions(output_width=2, charset_key="simple", invert=False), IMAGE_REF)
        history.add("░▒▓█", ConversionOptions(charset_key="block", contrast=1.8), IMAGE_REF)
        history.save(self.path)

        loaded = AsciiHistory.load(self.path, max_items=4)
        self.assertEqual(loaded.entries, history.entries)
        self.assertFalse(any(name.startswith(".tmp_history_") for name in os.listdir(self.tmpdir.name)))

    def test_missing_file_is_empty(self):
        self.assertEqual(len(AsciiHistory.load(self.path)), 0)

    def test_corrupt_file_backed_up(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs("meme_ascii.history", level="WARNING"):
            loaded = AsciiHistory.load(self.path)
        self.assertEqual(len(loaded), 0)
        with open(self.path + ".corrupt.bak", encoding="utf-8") as f:
            self.assertEqual(f.read(), "{not json")

    def test_load_truncates_to_capacity(self):
        history = AsciiHistory(max_items=5)
        for i in range(5):
            history.add(str(i), ConversionOptions(), IMAGE_REF)
        history.save(self.path)
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(len(json.load(f)["entries"]), 5)

        loaded = AsciiHistory.load(self.path, max_items=2)
        self.assertEqual([e.ascii_art for e in loaded], ["4", "3"])


if __name__ == "__main__":
    unittest.main()
