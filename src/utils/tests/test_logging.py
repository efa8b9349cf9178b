"""Tests for the structured JSON log formatter."""

import json
import logging
import unittest

from utils.logging import JSONFormatter


class TestJSONFormatter(unittest.TestCase):

    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord('adapter.mongodb.user_repository', logging.INFO, __file__, 1,
                                   "User created", None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_standard_fields(self):
        data = json.loads(JSONFormatter().format(self._record()))

        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["message"], "User created")
        self.assertEqual(data["logger"], "adapter.mongodb.user_repository")
        self.assertEqual(data["service"], "userservice")
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_includes_extra_fields(self):
        data = json.loads(JSONFormatter().format(self._record(userId="abc", fields=["name"])))

        self.assertEqual(data["userId"], "abc")
        self.assertEqual(data["fields"], ["name"])
        self.assertNotIn("msg", data)


if __name__ == '__main__':
    unittest.main()
