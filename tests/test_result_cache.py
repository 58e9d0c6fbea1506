import json
import unittest

from promptlens.exceptions import ConfigurationError
from promptlens.models import Finding, Severity
from promptlens.services import ResultCache


class FakeClock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def finding(code="empty-variable"):
    return Finding(
        code=code,
        message="Empty variable placeholder detected.",
        severity=Severity.ERROR,
        analyzer="variable-validation",
    )


class TestResultCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResultCache(ttl_seconds=60, max_entries=3, clock=self.clock)

    def test_hash_is_deterministic_and_distinguishes_content(self):
        digest = ResultCache.compute_hash("Be brief.")
        self.assertEqual(digest, ResultCache.compute_hash("Be brief."))
        self.assertNotEqual(digest, ResultCache.compute_hash("Be brief!"))
        self.assertNotEqual(digest, ResultCache.compute_hash("Be brief. "))
        self.assertEqual(len(digest), 64)

    def test_round_trip_before_ttl(self):
        self.cache.set("k", [finding()])
        self.clock.advance(60)
        self.assertEqual(self.cache.get("k"), [finding()])

    def test_absent_after_ttl(self):
        self.cache.set("k", [finding()])
        self.clock.advance(60.5)
        self.assertIsNone(self.cache.get("k"))
        # Expired entries are evicted on read
        self.assertEqual(len(self.cache), 0)

    def test_never_set_is_absent(self):
        self.assertIsNone(self.cache.get("missing"))

    def test_per_entry_ttl(self):
        self.cache.set("short", [], ttl=5)
        self.cache.set("long", [])
        self.clock.advance(10)
        self.assertIsNone(self.cache.get("short"))
        self.assertEqual(self.cache.get("long"), [])

    def test_zero_ttl_uses_the_default(self):
        self.cache.set("k", [finding()], ttl=0)
        self.clock.advance(30)
        self.assertEqual(self.cache.get("k"), [finding()])
        self.assertEqual(json.loads(self.cache.export())[0]["ttl"], 60)

    def test_negative_ttl_is_rejected(self):
        with self.assertRaises(ConfigurationError):
            self.cache.set("k", [], ttl=-1)
        self.assertIsNone(self.cache.get("k"))

    def test_eviction_by_insertion_order(self):
        for key in ("a", "b", "c"):
            self.cache.set(key, [])
        # Reading "a" does not protect it: eviction ignores access order
        self.cache.get("a")
        self.cache.set("d", [])

        self.assertIsNone(self.cache.get("a"))
        self.assertEqual([key for key in "bcd" if key in self.cache], ["b", "c", "d"])

    def test_expired_entries_pruned_before_eviction(self):
        self.cache.set("old", [], ttl=1)
        self.cache.set("b", [])
        self.cache.set("c", [])
        self.clock.advance(2)
        self.cache.set("d", [])
        self.assertEqual([key for key in "bcd" if key in self.cache], ["b", "c", "d"])

    def test_delete_clear_prune_stats(self):
        self.cache.set("a", [finding()])
        self.cache.set("b", [], ttl=1)
        self.assertTrue(self.cache.delete("a"))
        self.assertFalse(self.cache.delete("a"))

        self.clock.advance(2)
        self.assertEqual(self.cache.prune(), 1)

        self.cache.set("c", [finding()])
        stats = self.cache.stats()
        self.assertEqual(stats["entries"], 1)
        self.assertGreater(stats["size"], 0)

        self.cache.clear()
        self.assertEqual(self.cache.stats(), {"entries": 0, "size": 0})

    def test_invalid_configuration(self):
        with self.assertRaises(ConfigurationError):
            ResultCache(ttl_seconds=0)
        with self.assertRaises(ConfigurationError):
            ResultCache(max_entries=0)


class TestSnapshot(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = ResultCache(ttl_seconds=60, clock=self.clock)

    def test_export_import_across_instances(self):
        self.cache.set("k", [finding()])
        self.cache.set("stale", [], ttl=1)
        self.clock.advance(2)

        snapshot = self.cache.export()
        records = json.loads(snapshot)
        self.assertEqual([record["hash"] for record in records], ["k"])
        self.assertEqual(set(records[0]), {"hash", "findings", "timestamp", "ttl"})

        restored = ResultCache(clock=FakeClock(self.clock.now))
        self.assertEqual(restored.import_(snapshot), 1)
        self.assertEqual(restored.get("k"), [finding()])

    def test_import_skips_entries_expired_for_importer(self):
        self.cache.set("k", [finding()])
        snapshot = self.cache.export()

        later = ResultCache(clock=FakeClock(self.clock.now + 120))
        self.assertEqual(later.import_(snapshot), 0)
        self.assertIsNone(later.get("k"))

    def test_import_never_raises_on_malformed_data(self):
        for data in ("not json", "{}", "null", b"\xff\xfe", "[" * 100_000):
            with self.subTest(data=data[:10]):
                self.assertEqual(self.cache.import_(data), 0)

    def test_import_skips_malformed_entries_individually(self):
        good = {
            "hash": "good",
            "findings": [finding().model_dump(mode="json")],
            "timestamp": self.clock.now,
            "ttl": 60,
        }
        data = json.dumps(
            [
                good,
                {"hash": "no-ttl", "findings": [], "timestamp": self.clock.now},
                {"hash": "bad-finding", "findings": [{"code": 1}], "timestamp": 0, "ttl": 5},
                "garbage",
                42,
            ]
        )
        self.assertEqual(self.cache.import_(data), 1)
        self.assertEqual(self.cache.get("good"), [finding()])


if __name__ == "__main__":
    unittest.main()
