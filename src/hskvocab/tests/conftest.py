"""Test configuration."""
import os
import random
import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Generator

import pytest

# Set test environment before any imports
os.environ["ENV"] = "test"
_test_dir = Path(tempfile.mkdtemp(prefix="hskvocab-test-"))
os.environ.setdefault("DATA_DIR", str(_test_dir))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_dir / 'test.db'}")
os.environ["METRICS_PORT"] = "0"

# Import after environment setup
from hskvocab.config import ensure_directories
from hskvocab.models.vocab_models import Word
from hskvocab.services.progress_store import ProgressStore
from hskvocab.services.storage import MemoryStorage
from hskvocab.services.word_bank import WordBank


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_word(word_id: str, level: int, hanzi: str, pinyin: str, meaning: str) -> Word:
    return Word(id=word_id, level=level, hanzi=hanzi, pinyin=pinyin, meaning=meaning)


TEST_WORDS = [
    make_word("l1-ai", 1, "爱", "ài", "to love"),
    make_word("l1-ba", 1, "八", "bā", "eight"),
    make_word("l1-baba", 1, "爸爸", "bàba", "father"),
    make_word("l1-pengyou", 1, "朋友", "péngyou", "friend"),
    make_word("l1-shui", 1, "水", "shuǐ", "water"),
    make_word("l2-bai", 2, "白", "bái", "white"),
    make_word("l2-bangzhu", 2, "帮助", "bāngzhù", "to help"),
    make_word("l2-baozhi", 2, "报纸", "bàozhǐ", "newspaper"),
    make_word("l3-ayi", 3, "阿姨", "āyí", "aunt"),
    make_word("l3-bangongshi", 3, "办公室", "bàngōngshì", "office"),
    make_word("l3-bangmang", 3, "帮忙", "bāngmáng", "to help"),
]


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def word_bank() -> WordBank:
    """Small word bank with mixed levels and word lengths."""
    return WordBank(TEST_WORDS)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2024-03-10 09:30 UTC."""
    return FakeClock(datetime(2024, 3, 10, 9, 30, tzinfo=UTC))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def store(
    word_bank: WordBank, storage: MemoryStorage, clock: FakeClock, rng: random.Random
) -> Generator[ProgressStore, None, None]:
    """Create an empty progress store with a fake clock."""
    store = ProgressStore(word_bank, storage, clock=clock, rng=rng)
    yield store
    store.close()
