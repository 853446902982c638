import math

import pytest

from ngramlm.base import LanguageModel


class FixedScoreModel(LanguageModel):
    """Language model returning preset sentence log probabilities."""

    name = "fixed"

    def __init__(self, log_probs, default=-10.0):
        super().__init__()
        self.log_probs = {tuple(sentence): score for sentence, score in log_probs.items()}
        self.default = default

    def word_probability(self, word, context):
        raise NotImplementedError

    def _build_sampler(self, context):
        raise NotImplementedError

    def sentence_log_probability(self, sentence):
        return self.log_probs.get(tuple(sentence), self.default)

    def sentence_probability(self, sentence):
        return math.exp(self.sentence_log_probability(sentence))


@pytest.fixture
def toy_sentences():
    return [["the", "cat", "sat"], ["the", "dog", "ran"]]


@pytest.fixture
def small_corpus():
    return [
        "the cat sat on the mat".split(),
        "the dog sat on the log".split(),
        "a cat saw the dog".split(),
        "the dog ran".split(),
        "a dog ran to the cat".split(),
        "the cat ran on the mat".split(),
    ]


@pytest.fixture
def fixed_model():
    return FixedScoreModel
