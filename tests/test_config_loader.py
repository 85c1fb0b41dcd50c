import tempfile
import textwrap
import unittest
from datetime import timedelta
from pathlib import Path

from nagger.config import NaggerConfig, SchedulerConfig
from nagger.config_loader import load_config, parse_duration


class ParseDurationTests(unittest.TestCase):
    def test_units(self):
        self.assertEqual(parse_duration("30s"), timedelta(seconds=30))
        self.assertEqual(parse_duration("5m"), timedelta(minutes=5))
        self.assertEqual(parse_duration("1.5h"), timedelta(minutes=90))
        self.assertEqual(parse_duration("2d"), timedelta(days=2))

    def test_bare_numbers_are_seconds(self):
        self.assertEqual(parse_duration("12"), timedelta(seconds=12))
        self.assertEqual(parse_duration(0.25), timedelta(milliseconds=250))
        self.assertEqual(parse_duration(timedelta(hours=1)), timedelta(hours=1))

    def test_rejects_garbage(self):
        for value in ("", "10x", "abcs", None, True):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_duration(value)

    def test_rejects_out_of_range_durations(self):
        for value in ("infs", "9999999999d", 1e300):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_duration(value)


class LoadConfigTests(unittest.TestCase):
    def _write(self, content: str) -> Path:
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        with handle:
            handle.write(textwrap.dedent(content))
        path = Path(handle.name)
        self.addCleanup(path.unlink)
        return path

    def test_none_path_gives_defaults(self):
        config = load_config(None)
        self.assertIsInstance(config, NaggerConfig)
        self.assertEqual(config.scheduler, SchedulerConfig())
        self.assertIsNone(config.telegram)

    def test_empty_file_gives_defaults(self):
        config = load_config(self._write(""))
        self.assertEqual(config.scheduler.poll_interval, timedelta(seconds=1))
        self.assertTrue(config.scheduler.strict_ordering)

    def test_bad_duration_rejected(self):
        with self.assertRaises(ValueError):
            load_config(self._write("scheduler:\n  poll_interval: 250ms\n"))

    def test_full_file(self):
        path = self._write(
            """
            scheduler:
              poll_interval: 0.5
              strict_ordering: false
              delivery_capacity: 10
            logging:
              level: debug
            telegram:
              bot_token: "123:abc"
              chat_ids: [42, "43"]
              dry_run: true
            """
        )
        config = load_config(path)

        self.assertEqual(config.scheduler.poll_interval, timedelta(milliseconds=500))
        self.assertFalse(config.scheduler.strict_ordering)
        self.assertEqual(config.scheduler.delivery_capacity, 10)
        self.assertEqual(config.logging.level, "DEBUG")
        assert config.telegram is not None
        self.assertEqual(config.telegram.bot_token, "123:abc")
        self.assertEqual(tuple(config.telegram.chat_ids), (42, 43))
        self.assertTrue(config.telegram.dry_run)

    def test_non_positive_poll_interval_rejected(self):
        with self.assertRaises(ValueError):
            load_config(self._write("scheduler:\n  poll_interval: 0\n"))

    def test_non_mapping_root_rejected(self):
        with self.assertRaises(ValueError):
            load_config(self._write("- just\n- a list\n"))


if __name__ == "__main__":
    unittest.main()
