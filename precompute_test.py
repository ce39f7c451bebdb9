import tempfile
import unittest
from pathlib import Path

from dictionary_index import DictionaryIndex
from precompute import main, read_words


class TestPrecompute(unittest.TestCase):
    def test_builds_index_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = Path(tmp) / "words.txt"
            output = Path(tmp) / "words.json"
            source.write_text("apple\nice  cream, pear\n\nx-ray\n")

            self.assertEqual(list(read_words(source)), ["apple", "ice cream", "pear", "x-ray"])

            main([str(source), str(output)])
            index = DictionaryIndex.from_file(output)
            self.assertEqual([e.word for e in index.bucket(1, 5)], ["apple"])
            self.assertEqual([e.word for e in index.bucket(2, 8)], ["ice cream"])
            self.assertEqual(len(index), 4)


if __name__ == "__main__":
    unittest.main()
