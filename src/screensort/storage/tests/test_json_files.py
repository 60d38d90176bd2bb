import json
import tempfile
import unittest
from pathlib import Path

from screensort.core.exceptions import SchemaValidationError
from screensort.storage.json_files import atomic_write_json, read_json

SCHEMA = {
    "type": "object",
    "required": ["ids"],
    "properties": {"ids": {"type": "array", "items": {"type": "string"}}},
}


class TestJsonFiles(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.path = Path(self.temp_dir.name) / "nested" / "index.json"

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_missing_file_returns_default(self):
        self.assertEqual(read_json(self.path, default={"ids": []}), {"ids": []})

    def test_write_creates_parent_and_leaves_no_temp_files(self):
        atomic_write_json(self.path, {"ids": ["a"]}, SCHEMA)
        self.assertEqual(read_json(self.path, schema=SCHEMA), {"ids": ["a"]})
        self.assertEqual(sorted(p.name for p in self.path.parent.iterdir()), ["index.json"])

    def test_schema_violation_keeps_previous_content(self):
        atomic_write_json(self.path, {"ids": ["a"]}, SCHEMA)
        with self.assertRaises(SchemaValidationError):
            atomic_write_json(self.path, {"ids": [1]}, SCHEMA)
        self.assertEqual(json.loads(self.path.read_text(encoding="utf-8")), {"ids": ["a"]})

    def test_corrupt_file(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(SchemaValidationError):
            read_json(self.path)


if __name__ == '__main__':
    unittest.main()
