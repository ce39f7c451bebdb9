#!/usr/bin/env python3
"""
Build the dictionary index from a plain word list.

Run once:
    $ python precompute.py words.txt words.json
"""

import argparse
import logging
from pathlib import Path

from dictionary_index import DictionaryIndex

logger = logging.getLogger(__name__)


def read_words(path: Path):
    """One word or phrase per line; commas also separate words."""
    text = path.read_text(encoding="utf-8", errors="ignore")
    for line in text.splitlines():
        for word in line.split(","):
            word = " ".join(word.split())
            if word:
                yield word


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("source", type=Path, help="plain text word list")
    parser.add_argument("output", type=Path, nargs="?", default=Path("words.json"))
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    index = DictionaryIndex.build(read_words(args.source))
    index.to_file(args.output)
    logger.info("Indexed %d words in %d buckets into %s", len(index), len(index.shapes()), args.output)


if __name__ == "__main__":
    main()
