import json
import pathlib
import sys
import tempfile
import unittest
from concurrent.futures import Future

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from PySide6.QtCore import QSettings  # noqa: E402

from minerchart.core.visibility import VISIBILITY_KEY, ChannelVisibility, VisibilityStore  # noqa: E402
from minerchart.dataio.kv_store import MemoryStore  # noqa: E402
from minerchart.gui.settings_store import QSettingsStore  # noqa: E402


class VisibilityStoreTest(unittest.TestCase):
    def test_save_then_load_returns_same_flags(self):
        store = VisibilityStore(MemoryStore(), channel_count=4)
        flags = [True, False, False, True]

        store.save(flags)
        store.save(flags)

        self.assertEqual(store.load(), flags)

    def test_missing_key_loads_as_none(self):
        self.assertIsNone(VisibilityStore(MemoryStore(), channel_count=4).load())

    def test_corrupt_values_are_ignored(self):
        for raw in ("not json", "{}", "[true, false]", '[true, 1, false, true]', "null"):
            with self.subTest(raw=raw):
                store = VisibilityStore(MemoryStore({VISIBILITY_KEY: raw}), channel_count=4)
                self.assertIsNone(store.load())

    def test_save_rejects_wrong_length(self):
        store = VisibilityStore(MemoryStore(), channel_count=4)
        with self.assertRaises(ValueError):
            store.save([True, False])

    def _ini_store(self, path):
        return QSettingsStore(QSettings(str(path), QSettings.Format.IniFormat))

    def test_qsettings_store_persists_between_instances(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "dashboard.ini"
            VisibilityStore(self._ini_store(path), channel_count=3).save([False, True, True])

            reloaded = VisibilityStore(self._ini_store(path), channel_count=3)

            self.assertEqual(reloaded.load(), [False, True, True])
            self.assertTrue(path.exists())

    def test_qsettings_store_missing_key_reads_as_none(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = self._ini_store(pathlib.Path(tmpdir) / "dashboard.ini")

            self.assertIsNone(store.get(VISIBILITY_KEY))
            self.assertIsNone(VisibilityStore(store, channel_count=3).load())

    def test_qsettings_store_keeps_other_keys_on_update(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "dashboard.ini"
            store = self._ini_store(path)
            store.set("theme", "dark")
            VisibilityStore(store, channel_count=2).save([True, False])
            VisibilityStore(store, channel_count=2).save([False, False])

            reopened = self._ini_store(path)

            self.assertEqual(reopened.get("theme"), "dark")
            self.assertEqual(json.loads(reopened.get(VISIBILITY_KEY)), [False, False])


class ChannelVisibilityTest(unittest.TestCase):
    def test_defaults_to_all_visible(self):
        visibility = ChannelVisibility.restore(VisibilityStore(MemoryStore()))

        self.assertEqual(len(visibility), 12)
        self.assertTrue(all(visibility.flags))

    def test_toggle_persists_immediately(self):
        backing = MemoryStore()
        visibility = ChannelVisibility.restore(VisibilityStore(backing, channel_count=3))

        self.assertFalse(visibility.toggle(1))

        restored = ChannelVisibility.restore(VisibilityStore(backing, channel_count=3))
        self.assertEqual(restored.flags, [True, False, True])
        self.assertFalse(restored.is_visible(1))

    def test_toggle_out_of_range(self):
        visibility = ChannelVisibility(VisibilityStore(MemoryStore(), channel_count=3))
        with self.assertRaises(IndexError):
            visibility.toggle(3)

    def test_set_visible_only_writes_on_change(self):
        backing = MemoryStore()
        visibility = ChannelVisibility(VisibilityStore(backing, channel_count=2))

        visibility.set_visible(0, True)
        self.assertIsNone(backing.get(VISIBILITY_KEY))

        visibility.set_visible(0, False)
        self.assertEqual(json.loads(backing.get(VISIBILITY_KEY)), [False, True])

    def test_restore_waits_for_renderer(self):
        backing = MemoryStore({VISIBILITY_KEY: json.dumps([False, True])})
        visibility = ChannelVisibility(VisibilityStore(backing, channel_count=2))
        applied = []
        ready = Future()

        visibility.restore_after_ready(ready, applied.append)
        self.assertEqual(applied, [])
        self.assertEqual(visibility.flags, [False, True])

        ready.set_result(True)
        self.assertEqual(applied, [[False, True]])

    def test_restore_applies_immediately_when_already_ready(self):
        visibility = ChannelVisibility(VisibilityStore(MemoryStore(), channel_count=2))
        applied = []
        ready = Future()
        ready.set_result(True)

        visibility.restore_after_ready(ready, applied.append)

        self.assertEqual(applied, [[True, True]])

    def test_restore_skips_cancelled_or_failed_renderer(self):
        visibility = ChannelVisibility(VisibilityStore(MemoryStore(), channel_count=2))
        applied = []

        cancelled = Future()
        visibility.restore_after_ready(cancelled, applied.append)
        cancelled.cancel()

        failed = Future()
        visibility.restore_after_ready(failed, applied.append)
        with self.assertLogs("minerchart.core.visibility", level="WARNING"):
            failed.set_exception(RuntimeError("no display"))

        self.assertEqual(applied, [])


if __name__ == "__main__":
    unittest.main()
