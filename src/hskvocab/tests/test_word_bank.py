"""Tests for the word bank."""
import json
from pathlib import Path

import pytest

from hskvocab.models.vocab_models import Word
from hskvocab.services.word_bank import WordBank, get_word_bank, load_word_bank


def test_get_by_id(word_bank: WordBank) -> None:
    """Test looking up words by id."""
    word = word_bank.get_by_id("l1-ai")
    assert word is not None
    assert word.hanzi == "爱"
    assert word.level == 1

    assert word_bank.get_by_id("missing") is None
    assert "l1-ai" in word_bank
    assert "missing" not in word_bank


def test_get_by_level_keeps_catalog_order(word_bank: WordBank) -> None:
    """Test that level lookups return words in insertion order."""
    assert [w.id for w in word_bank.get_by_level(2)] == ["l2-bai", "l2-bangzhu", "l2-baozhi"]
    assert word_bank.get_by_level(6) == []


def test_counts(word_bank: WordBank) -> None:
    """Test word counts."""
    assert word_bank.count(1) == 5
    assert word_bank.count(2) == 3
    assert word_bank.count(3) == 3
    assert word_bank.count(4) == 0
    assert word_bank.total_count() == 11
    assert len(word_bank) == 11
    assert word_bank.levels() == [1, 2, 3]


def test_get_by_level_returns_copy(word_bank: WordBank) -> None:
    """Test that callers cannot modify the bank through a returned list."""
    words = word_bank.get_by_level(1)
    words.clear()
    assert word_bank.count(1) == 5


def test_duplicate_ids_rejected() -> None:
    """Test that duplicate ids are rejected when building a bank."""
    word = Word(id="dup", level=1, hanzi="爱", pinyin="ài", meaning="to love")
    with pytest.raises(ValueError):
        WordBank([word, word])


def test_load_bundled_word_bank() -> None:
    """Test loading the bundled catalog."""
    word_bank = load_word_bank()
    assert word_bank.total_count() > 0
    assert word_bank.levels() == [1, 2, 3]

    word = word_bank.get_by_id("hsk1-001")
    assert word.hanzi == "爱"
    assert word.pinyin == "ài"
    assert word.example == "我爱我的家。"
    assert all(w.level == 1 for w in word_bank.get_by_level(1))


def test_load_word_bank_from_file(tmp_path: Path) -> None:
    """Test loading a custom catalog."""
    catalog = {
        "levels": {
            "2": [{"id": "b", "hanzi": "白", "pinyin": "bái", "meaning": "white"}],
            "1": [{"id": "a", "hanzi": "八", "pinyin": "bā", "meaning": "eight"}],
        }
    }
    path = tmp_path / "words.json"
    path.write_text(json.dumps(catalog, ensure_ascii=False), encoding="utf-8")

    word_bank = load_word_bank(path)
    assert [w.id for w in word_bank] == ["a", "b"]
    assert word_bank.get_by_id("b").level == 2
    assert word_bank.get_by_id("a").example is None


def test_get_word_bank_is_cached() -> None:
    """Test that the process-wide word bank is loaded once."""
    assert get_word_bank() is get_word_bank()


if __name__ == "__main__":
    pytest.main([__file__])
