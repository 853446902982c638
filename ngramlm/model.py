"""
Interpolated N-gram Language Models

Unigram, bigram and trigram models estimated by relative frequency and
smoothed by fixed linear interpolation with the lower orders.
"""

import logging
from typing import Dict, Tuple

from .base import CountingLanguageModel
from .corpus import UNK_TOKEN
from .counter import ConditionalFrequencyDistribution, CumulativeSampler, FrequencyDistribution
from .errors import ConfigurationError


logger = logging.getLogger(__name__)


def check_weight(name: str, value: float) -> float:
    """Validate an interpolation weight."""
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be between 0 and 1, got {value}")
    return value


class UnigramLanguageModel(CountingLanguageModel):
    """
    Unigram Language Model

    Every token, including the stop marker, is scored by its relative
    frequency. A single pseudo-count for the unknown token keeps
    out-of-vocabulary words from scoring zero.

    Attributes:
        word_counts: Unigram distribution (normalized after training)
    """

    name = "baseline"
    order = 1

    def __init__(self, sentences, **kwargs):
        self.word_counts = FrequencyDistribution()
        super().__init__(sentences, **kwargs)

    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        self.word_counts.increment(word)

    def _freeze(self) -> None:
        self.word_counts.increment(UNK_TOKEN, 1.0)
        self.word_counts.normalize()

    def _stats(self) -> Dict:
        return {'vocab_size': len(self.word_counts)}

    def unigram_probability(self, word: str) -> float:
        """P(word), falling back to the unknown token's weight."""
        if word not in self.word_counts:
            logger.debug("Unknown word: %s", word)
            return self.word_counts.weight_of(UNK_TOKEN)
        return self.word_counts.weight_of(word)

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.unigram_probability(word)

    def sampler_for(self, context: Tuple[str, ...]) -> CumulativeSampler:
        # Generation draws from the unigram distribution for every order
        return super().sampler_for(())

    def _build_sampler(self, context: Tuple[str, ...]) -> CumulativeSampler:
        return self.word_counts.sampler()


class BigramLanguageModel(UnigramLanguageModel):
    """
    Bigram Language Model

    P(w|u) = lambda * P_bigram(w|u) + (1 - lambda) * P_unigram(w)

    Attributes:
        lambda_: Weight of the bigram estimate
        bigram_counts: Next-token distributions keyed by 1-tuple contexts
    """

    name = "bigram"
    order = 2

    def __init__(self, sentences, lambda_: float = 0.6, **kwargs):
        self.lambda_ = check_weight("lambda", lambda_)
        self.bigram_counts = ConditionalFrequencyDistribution()
        super().__init__(sentences, **kwargs)

    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        super()._observe(context, word)
        self.bigram_counts.increment(context[-1:], word)

    def _freeze(self) -> None:
        super()._freeze()
        self.bigram_counts.normalize()

    def _stats(self) -> Dict:
        stats = super()._stats()
        stats['bigram_contexts'] = len(self.bigram_counts)
        return stats

    def bigram_probability(self, previous_word: str, word: str) -> float:
        bigram = self.bigram_counts.weight_of((previous_word,), word)
        return self.lambda_ * bigram + (1.0 - self.lambda_) * self.unigram_probability(word)

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.bigram_probability(context[-1], word)


class TrigramLanguageModel(BigramLanguageModel):
    """
    Trigram Language Model

    P(w|u,v) = lambda1 * P_trigram(w|u,v) + lambda2 * P_bigram(w|v)
               + (1 - lambda1 - lambda2) * P_unigram(w)

    The bigram component is the raw relative frequency, not the
    interpolated bigram model.
    """

    name = "trigram"
    order = 3

    def __init__(self, sentences, lambda1: float = 0.5, lambda2: float = 0.3,
                 **kwargs):
        self.lambda1 = check_weight("lambda1", lambda1)
        self.lambda2 = check_weight("lambda2", lambda2)
        if lambda1 + lambda2 > 1.0:
            raise ConfigurationError(
                f"lambda1 + lambda2 must not exceed 1, got {lambda1 + lambda2}")
        self.trigram_counts = ConditionalFrequencyDistribution()
        super().__init__(sentences, **kwargs)

    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        super()._observe(context, word)
        self.trigram_counts.increment(context, word)

    def _freeze(self) -> None:
        super()._freeze()
        self.trigram_counts.normalize()

    def _stats(self) -> Dict:
        stats = super()._stats()
        stats['trigram_contexts'] = len(self.trigram_counts)
        return stats

    def trigram_probability(self, pre_previous_word: str, previous_word: str,
                            word: str) -> float:
        trigram = self.trigram_counts.weight_of((pre_previous_word, previous_word), word)
        bigram = self.bigram_counts.weight_of((previous_word,), word)
        unigram = self.unigram_probability(word)
        return (self.lambda1 * trigram + self.lambda2 * bigram
                + (1.0 - self.lambda1 - self.lambda2) * unigram)

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.trigram_probability(context[0], context[1], word)
