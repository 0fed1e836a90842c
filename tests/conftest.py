"""Shared fixtures for random_art tests."""

import random

import pytest


class ScriptedRandom:
    """Random source that returns pre-scripted choices in order."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    def choice(self, seq):
        assert self.script, "random source exhausted"
        item = self.script.pop(0)
        assert item in seq, f"{item!r} not among {seq!r}"
        self.calls += 1
        return item


class CountingRandom(random.Random):
    """random.Random that counts choice() draws."""

    def __init__(self, seed=None):
        super().__init__(seed)
        self.draws = 0

    def choice(self, seq):
        self.draws += 1
        return super().choice(seq)


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def counting_rng():
    return CountingRandom(1234)
