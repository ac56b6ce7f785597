"""
Tests for conflict exemptions and for recording hashes after a batch.
"""
import tempfile
import unittest
from pathlib import Path

from scriptsync.config import ConfigUnavailable
from scriptsync.core.script import Script
from scriptsync.operations.hash_update import update_hash_values
from scriptsync.state.exemptions import ExemptionRegistry
from scriptsync.state.hash_cache import HashCacheStore


class TestExemptionRegistry(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cache = Path(self.tmpdir.name) / ".vscode-janus-debug"
        self.store = HashCacheStore(self.cache)

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_from_setting_accepts_list_of_names(self):
        registry = ExemptionRegistry.from_setting(["crmExport", "nightlyJob"])
        self.assertTrue(registry.is_exempt("crmExport"))
        self.assertFalse(registry.is_exempt("crmImport"))
        self.assertEqual(registry.names, ["crmExport", "nightlyJob"])

    def test_from_setting_none_is_empty(self):
        self.assertEqual(ExemptionRegistry.from_setting(None).names, [])

    def test_from_setting_rejects_wrong_shape(self):
        for value in ("crmExport", {"crmExport": True}, ["ok", 3], 42):
            with self.subTest(value=value):
                with self.assertRaises(ConfigUnavailable):
                    ExemptionRegistry.from_setting(value)

    def test_names_are_not_server_scoped(self):
        """Exemption matches by bare name, whatever the server."""
        self.cache.write_text("a@one:h1\na@two:h2", encoding="utf-8")
        registry = ExemptionRegistry(["a"])
        for server in ("one", "two"):
            script = Script("a")
            registry.annotate([script], self.store, server)
            self.assertFalse(script.conflict_mode)
            self.assertIsNone(script.last_sync_hash)

    def test_annotate_reads_hashes_for_server(self):
        self.cache.write_text("a@srv:h1\nb@other:h2\nc@srv:h3", encoding="utf-8")
        registry = ExemptionRegistry(["c"])
        a, b, c = Script("a"), Script("b"), Script("c")

        registry.annotate([a, b, c], self.store, "srv")

        self.assertEqual(a.last_sync_hash, "h1")
        self.assertTrue(a.conflict_mode)
        self.assertIsNone(b.last_sync_hash)
        self.assertTrue(b.unresolved)
        self.assertFalse(c.conflict_mode)
        self.assertIsNone(c.last_sync_hash)

    def test_annotate_with_unreadable_cache(self):
        self.cache.write_bytes(b"\xff\xff")
        script = Script("a")
        ExemptionRegistry().annotate([script], self.store, "srv")
        self.assertIsNone(script.last_sync_hash)
        self.assertTrue(script.unresolved)


class TestUpdateHashValues(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.store = HashCacheStore(Path(self.tmpdir.name) / ".vscode-janus-debug")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_records_resolved_scripts(self):
        scripts = [Script("a", last_sync_hash="h1"), Script("b", last_sync_hash="h2")]
        update_hash_values(scripts, "srv", self.store, ExemptionRegistry())
        self.assertEqual(self.store.read("srv"), {"a": "h1", "b": "h2"})

    def test_skips_conflicted_even_with_hash(self):
        scripts = [Script("a", last_sync_hash="h1", conflict=True),
                   Script("b", last_sync_hash="h2")]
        update_hash_values(scripts, "srv", self.store, ExemptionRegistry())
        self.assertEqual(self.store.read("srv"), {"b": "h2"})

    def test_skips_exempt(self):
        scripts = [Script("a", last_sync_hash="h1"), Script("b", last_sync_hash="h2")]
        update_hash_values(scripts, "srv", self.store, ExemptionRegistry(["a"]))
        self.assertEqual(self.store.read("srv"), {"b": "h2"})

    def test_merges_with_existing_entries(self):
        self.store.update_all("srv", {"a": "old", "z": "hz"})
        update_hash_values([Script("a", last_sync_hash="new")], "srv",
                           self.store, ExemptionRegistry())
        self.assertEqual(self.store.read("srv"), {"a": "new", "z": "hz"})

    def test_forced_upload_is_recorded(self):
        """A forced script has conflict cleared and its uploaded hash recorded."""
        script = Script("a", last_sync_hash="uploaded", conflict=False, force_upload=True)
        update_hash_values([script], "srv", self.store, ExemptionRegistry())
        self.assertEqual(self.store.read("srv"), {"a": "uploaded"})

    def test_nothing_to_record_leaves_cache_alone(self):
        update_hash_values([Script("a")], "srv", self.store, ExemptionRegistry())
        self.assertFalse(self.store.path.exists())


if __name__ == "__main__":
    unittest.main()
