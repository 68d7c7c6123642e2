"""Shared test fixtures for typing_sprint tests."""

import itertools

import pytest

from typing_sprint import Char, SessionConfig, SessionController, WordCount, WordSupplier


class ScriptedRandom:
    """Random source that returns scripted words from choice()."""

    def __init__(self, picks):
        self._picks = itertools.cycle(picks)

    def choice(self, seq):
        return next(self._picks)

    def randint(self, a, b):
        return a

    def choices(self, population, weights=None, k=1):
        return list(population[:k])


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def keys(text):
    return [Char(c) for c in text]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cat_dog_supplier():
    """Supplier over ["cat", "dog"] that always yields cat, dog, cat, ..."""
    return WordSupplier(["cat", "dog"], rng=ScriptedRandom(["cat", "dog"]))


@pytest.fixture
def cat_dog_session(cat_dog_supplier, clock):
    config = SessionConfig(mode=WordCount(2))
    return SessionController(config, cat_dog_supplier, clock=clock)
