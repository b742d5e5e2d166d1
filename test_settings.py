import unittest
from datetime import timedelta

from board_maintainer.config.settings import ConfigError, load_settings, split_list_ids


BASE_ENV = {"TRELLO_KEY": "key", "TRELLO_TOKEN": "token", "TRELLO_ARCHIVE_LIST": "L1"}


def _env(**overrides):
    env = dict(BASE_ENV)
    env.update(overrides)
    return env


class TestSplitListIds(unittest.TestCase):
    def test_splits_and_trims(self):
        self.assertEqual(split_list_ids(" a, b ,,c "), ["a", "b", "c"])

    def test_empty(self):
        self.assertEqual(split_list_ids(""), [])
        self.assertEqual(split_list_ids(None), [])


class TestLoadSettings(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings(BASE_ENV)
        self.assertEqual(settings.archive_list_ids, ["L1"])
        self.assertEqual(settings.delete_list_ids, [])
        self.assertEqual(settings.reorder_list_ids, [])
        self.assertEqual(settings.inactivity_threshold, timedelta(hours=336))
        self.assertFalse(settings.mutation_errors_fatal)
        self.assertFalse(settings.dry_run)
        self.assertEqual(settings.max_concurrency, 0)
        self.assertEqual(settings.log_level, "INFO")

    def test_missing_credentials(self):
        for key in ("TRELLO_KEY", "TRELLO_TOKEN"):
            env = dict(BASE_ENV)
            del env[key]
            with self.assertRaises(ConfigError) as ctx:
                load_settings(env)
            self.assertIn(key, str(ctx.exception))

    def test_no_lists_configured(self):
        with self.assertRaises(ConfigError):
            load_settings({"TRELLO_KEY": "k", "TRELLO_TOKEN": "t"})

    def test_legacy_list_variable(self):
        settings = load_settings({"TRELLO_KEY": "k", "TRELLO_TOKEN": "t", "TRELLO_LIST": "x,y"})
        self.assertEqual(settings.archive_list_ids, ["x", "y"])

    def test_archive_list_wins_over_legacy(self):
        settings = load_settings(_env(TRELLO_LIST="legacy"))
        self.assertEqual(settings.archive_list_ids, ["L1"])

    def test_all_groups(self):
        settings = load_settings(_env(TRELLO_DELETE_LIST="D1,D2", TRELLO_REORDER_LIST="R1"))
        self.assertEqual(settings.delete_list_ids, ["D1", "D2"])
        self.assertEqual(settings.reorder_list_ids, ["R1"])

    def test_fractional_threshold(self):
        settings = load_settings(_env(CARD_INACTIVITY_ARCHIVAL_THRESHOLD_HOURS="1.5"))
        self.assertEqual(settings.inactivity_threshold, timedelta(minutes=90))

    def test_bad_threshold(self):
        for raw in ("two weeks", "-1", "nan"):
            with self.assertRaises(ConfigError):
                load_settings(_env(CARD_INACTIVITY_ARCHIVAL_THRESHOLD_HOURS=raw))

    def test_flags(self):
        settings = load_settings(_env(MUTATION_ERRORS_FATAL="yes", DRY_RUN="TRUE", MAX_CONCURRENCY="8", LOG_LEVEL="debug"))
        self.assertTrue(settings.mutation_errors_fatal)
        self.assertTrue(settings.dry_run)
        self.assertEqual(settings.max_concurrency, 8)
        self.assertEqual(settings.log_level, "DEBUG")

    def test_bad_flag_values(self):
        with self.assertRaises(ConfigError):
            load_settings(_env(DRY_RUN="maybe"))
        with self.assertRaises(ConfigError):
            load_settings(_env(MAX_CONCURRENCY="lots"))
        with self.assertRaises(ConfigError):
            load_settings(_env(LOG_LEVEL="LOUD"))
        with self.assertRaises(ConfigError):
            load_settings(_env(HTTP_TIMEOUT_SECONDS="0"))


if __name__ == "__main__":
    unittest.main()
