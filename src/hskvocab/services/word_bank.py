"""Read-only word bank with lookups by id and by level."""
import json
import logging
from collections import defaultdict
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from hskvocab.config import settings
from hskvocab.models.vocab_models import Word

logger = logging.getLogger(__name__)


class WordBank:
    """Immutable in-memory collection of words."""

    def __init__(self, words: Iterable[Word]):
        """Index the given words by id and by level."""
        self._words: List[Word] = []
        self._by_id: Dict[str, Word] = {}
        self._by_level: Dict[int, List[Word]] = defaultdict(list)

        for word in words:
            if word.id in self._by_id:
                raise ValueError(f"Duplicate word id in word bank: {word.id}")
            self._words.append(word)
            self._by_id[word.id] = word
            self._by_level[word.level].append(word)

    def get_by_id(self, word_id: str) -> Optional[Word]:
        """Get a word by its ID."""
        return self._by_id.get(word_id)

    def get_by_level(self, level: int) -> List[Word]:
        """Get all words of a level in catalog order."""
        return list(self._by_level.get(level, []))

    def count(self, level: int) -> int:
        """Get the number of words at a level."""
        return len(self._by_level.get(level, []))

    def total_count(self) -> int:
        """Get the number of words in the bank."""
        return len(self._words)

    def levels(self) -> List[int]:
        """Levels that contain at least one word."""
        return sorted(level for level, words in self._by_level.items() if words)

    def __contains__(self, word_id: object) -> bool:
        return word_id in self._by_id

    def __iter__(self) -> Iterator[Word]:
        return iter(self._words)

    def __len__(self) -> int:
        return len(self._words)


def load_word_bank(path: Optional[Union[str, Path]] = None) -> WordBank:
    """Load a word bank from a JSON catalog grouped by level.

    The catalog has the shape ``{"levels": {"1": [{...}, ...], ...}}`` where each
    record carries ``id``, ``hanzi``, ``pinyin``, ``meaning`` and the optional
    example fields.
    """
    path = Path(path) if path else settings.learning.word_bank_path
    with open(path, encoding="utf-8") as f:
        catalog = json.load(f)

    words = []
    for level, records in sorted(catalog["levels"].items(), key=lambda item: int(item[0])):
        for record in records:
            words.append(Word.from_data(record, level=int(level)))

    word_bank = WordBank(words)
    logger.info(f"Loaded {word_bank.total_count()} words from {path} (levels: {word_bank.levels()})")
    return word_bank


@lru_cache(maxsize=1)
def get_word_bank() -> WordBank:
    """Get the process-wide word bank, loading it on first use."""
    return load_word_bank()
