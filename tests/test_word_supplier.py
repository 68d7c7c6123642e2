"""Tests for word generation and word list loading."""

import json
import random

import pytest

from conftest import ScriptedRandom
from typing_sprint import (
    LOOKAHEAD_WORDS,
    ConfigurationError,
    Duration,
    WordCount,
    WordSupplier,
    load_word_list,
)


class TestGenerate:
    def test_word_count_is_exact(self):
        supplier = WordSupplier(["cat", "dog"], rng=random.Random(1))
        target = supplier.generate(WordCount(7))
        assert target.word_count == 7
        assert set(target.words) <= {"cat", "dog"}

    def test_repeats_permitted(self):
        supplier = WordSupplier(["only"], rng=random.Random(0))
        assert supplier.generate(WordCount(3)).words == ["only", "only", "only"]

    def test_same_seed_same_words(self):
        words = ["alpha", "beta", "gamma", "delta", "epsilon"]
        a = WordSupplier(words, rng=random.Random(42)).generate(WordCount(20))
        b = WordSupplier(words, rng=random.Random(42)).generate(WordCount(20))
        assert a.words == b.words

    def test_duration_initial_batch_covers_fast_typist(self):
        supplier = WordSupplier(["cat"], rng=random.Random(0))
        assert supplier.generate(Duration(1)).word_count == LOOKAHEAD_WORDS
        assert supplier.generate(Duration(60)).word_count >= 250

    def test_extend_appends(self):
        supplier = WordSupplier(["cat", "dog"], rng=ScriptedRandom(["cat", "dog"]))
        target = supplier.generate(WordCount(2))
        supplier.extend(target, 2)
        assert target.words == ["cat", "dog", "cat", "dog"]


class TestDictionary:
    def test_empty_dictionary(self):
        with pytest.raises(ConfigurationError):
            WordSupplier([])

    def test_blank_entries_only(self):
        with pytest.raises(ConfigurationError):
            WordSupplier(["", "  "])

    def test_words_with_spaces_rejected(self):
        with pytest.raises(ConfigurationError):
            WordSupplier(["two words"])

    def test_zero_word_mode_rejected(self):
        with pytest.raises(ConfigurationError):
            WordCount(0)
        with pytest.raises(ConfigurationError):
            Duration(0)


class TestPunctuation:
    def test_first_word_capitalized(self):
        supplier = WordSupplier(["cat"], rng=ScriptedRandom(["cat"]), punctuate=True)
        assert supplier.generate(WordCount(1)).words == ["Cat"]

    def test_period_every_jump(self):
        """ScriptedRandom always jumps 2 and picks the first mark, a period."""
        supplier = WordSupplier(["cat"], rng=ScriptedRandom(["cat"]), punctuate=True)
        words = supplier.generate(WordCount(6)).words
        assert words == ["Cat", "cat", "cat.", "Cat", "cat.", "Cat"]

    def test_word_count_exact_with_hyphens(self):
        supplier = WordSupplier(["cat", "dog", "bird"], rng=random.Random(3), punctuate=True)
        for n in (1, 5, 40):
            assert supplier.generate(WordCount(n)).word_count == n


class TestLoadWordList:
    def test_reads_json(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"name": "tiny", "words": ["a", "b"]}), encoding="utf-8")
        word_list = load_word_list(str(path))
        assert word_list.name == "tiny"
        assert word_list.words == ["a", "b"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_word_list(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_word_list(str(path))

    def test_missing_words_key(self, tmp_path):
        path = tmp_path / "words.json"
        path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_word_list(str(path))
