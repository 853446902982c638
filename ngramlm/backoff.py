"""
Katz Backoff Language Models

Bigram models that discount observed counts and hand the freed probability
mass to unseen successors in proportion to their unigram probability.

Two variants are provided:
    KatzBigramLanguageModel: subtracts a fixed discount from every count
    KatzGoodTuringBigramLanguageModel: Good-Turing discounting of counts up
        to a cutoff, with per-context backoff weights
"""

import logging
import math
from typing import Dict, Iterable, List, Tuple

from .base import CountingLanguageModel
from .corpus import UNK_TOKEN
from .counter import ConditionalFrequencyDistribution, CumulativeSampler, FrequencyDistribution
from .errors import ConfigurationError, ProbabilityError


logger = logging.getLogger(__name__)


class KatzBigramLanguageModel(CountingLanguageModel):
    """
    Katz bigram model with a fixed discount.

    If c(u,v) > 0:
        P(v|u) = (c(u,v) - beta) / c(u)
    else:
        P(v|u) = alpha(u) * c(v) / Z(u)

    where alpha(u) is the mass freed by discounting the successors of u and
    Z(u) is the unigram mass of the tokens never seen after u. Unigram
    counts are add-one smoothed, with one extra count for the unknown token.

    Attributes:
        beta: Discount subtracted from every observed bigram count
        word_counts: Smoothed unigram counts of every predictable token
        bigram_counts: Raw bigram counts keyed by 1-tuple contexts
        alpha: Freed mass per context
        z: Unseen unigram mass per context
    """

    name = "katz-bigram"
    order = 2

    def __init__(self, sentences, beta: float = 0.1, **kwargs):
        if not 0.0 <= beta < 1.0:
            raise ConfigurationError(f"beta must be in [0, 1), got {beta}")
        self.beta = beta
        self.word_counts = FrequencyDistribution()
        self.bigram_counts = ConditionalFrequencyDistribution()
        self.alpha: Dict[Tuple[str], float] = {}
        self.z: Dict[Tuple[str], float] = {}
        super().__init__(sentences, **kwargs)

    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        self.word_counts.increment(word)
        self.bigram_counts.increment(context, word)

    def _freeze(self) -> None:
        # Add-one smoothing, the unknown token ends up with a count of 2
        self.word_counts.increment(UNK_TOKEN, 1.0)
        for word in list(self.word_counts):
            self.word_counts.increment(word, 1.0)

        total = self.word_counts.total_weight()

        for context, successors in self.bigram_counts.items():
            context_count = successors.total_weight()
            discounted = sum(count - self.beta for _, count in successors.items() if count > 0)
            self.alpha[context] = 1.0 - discounted / context_count
            seen_mass = sum(self.word_counts.weight_of(word) for word in successors)
            self.z[context] = total - seen_mass

        # Unknown contexts back off to the plain unigram distribution
        self.alpha[(UNK_TOKEN,)] = 1.0
        self.z[(UNK_TOKEN,)] = total

    def _stats(self) -> Dict:
        return {
            'vocab_size': len(self.word_counts),
            'bigram_contexts': len(self.bigram_counts),
            'beta': self.beta
        }

    def vocabulary(self) -> List[str]:
        """Tokens the model can predict, unknown token included."""
        return list(self.word_counts)

    def _resolve_context(self, previous_word: str) -> Tuple[str]:
        context = (previous_word,)
        if context in self.bigram_counts:
            return context
        return (UNK_TOKEN,)

    def bigram_probability(self, previous_word: str, word: str) -> float:
        """
        Calculate P(word | previous_word).

        Out-of-range results are recorded in ``diagnostics`` and returned
        unchanged.
        """
        if word not in self.word_counts:
            logger.debug("Unknown word: %s", word)
            word = UNK_TOKEN
        context = self._resolve_context(previous_word)

        successors = self.bigram_counts.distribution(context)
        count = successors.weight_of(word)
        if count > 0:
            probability = (count - self.beta) / successors.total_weight()
        else:
            z = self.z[context]
            if z == 0:
                self._report("Zero unseen mass, returning 0", 0.0, context + (word,))
                return 0.0
            probability = self.alpha[context] * self.word_counts.weight_of(word) / z

        if probability > 1 or probability <= 0 or math.isnan(probability):
            self._report("Wrong probability", probability, context + (word,))

        return probability

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.bigram_probability(context[-1], word)

    def _build_sampler(self, context: Tuple[str, ...]) -> CumulativeSampler:
        previous_word = context[-1]
        return CumulativeSampler(
            (word, self.bigram_probability(previous_word, word)) for word in self.word_counts
        )


def frequency_of_frequencies(counts: Iterable[float], cutoff: int) -> List[float]:
    """
    Count how many types occur exactly r times, for r up to cutoff + 1.

    Args:
        counts: Raw counts of each type
        cutoff: Largest count that gets discounted

    Returns:
        Bucket list where index r holds the number of types seen r times
    """
    buckets = [0.0] * (cutoff + 2)
    for count in counts:
        if count <= cutoff + 1:
            buckets[int(count)] += 1
    return buckets


def correction_factor(buckets: List[float], cutoff: int) -> float:
    """A = (cutoff+1) * N_{cutoff+1} / N_1, or 0 when undefined or >= 1."""
    if buckets[1] == 0:
        return 0.0
    factor = (cutoff + 1) * buckets[cutoff + 1] / buckets[1]
    # Dropped unlike the plain Katz formula, whose 1 - A denominator breaks at A >= 1
    return factor if factor < 1.0 else 0.0


def discount_ratio(count: float, buckets: List[float]) -> float:
    """
    Good-Turing ratio r*/r with r* = (r+1) * N_{r+1} / N_r.

    Falls back to 1 (no discount) when N_r or N_{r+1} is empty and never
    exceeds 1.
    """
    r = int(count)
    nr = buckets[r]
    nr1 = buckets[r + 1]
    if nr == 0 or nr1 == 0:
        return 1.0
    # Capped unlike plain Good-Turing, where r* can exceed r
    return min((r + 1) * nr1 / nr / r, 1.0)


def good_turing_probability(count: float, total: float, buckets: List[float],
                            cutoff: int, correction: float) -> float:
    """Katz-corrected Good-Turing estimate of count / total."""
    if count > cutoff:
        return count / total
    ratio = discount_ratio(count, buckets)
    return count / total * (ratio - correction) / (1.0 - correction)


def verify_probability(value: float, context: Tuple = ()) -> float:
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise ProbabilityError(value, context)
    return value


class KatzGoodTuringBigramLanguageModel(CountingLanguageModel):
    """
    Katz bigram model with Good-Turing discounting.

    Counts above ``cutoff`` keep their relative frequency; smaller counts
    are discounted by the Good-Turing ratio corrected for the cutoff. The
    unknown token gets N_1 / total, the usual estimate of unseen mass.

    When (u,v) was never observed, P(v|u) = backoff(u) * P(v) with

        backoff(u) = (1 - sum_seen P(v|u)) / (M - sum_seen P(v))

    where M is the total unigram mass, so every context sums to one over
    the vocabulary. Invalid values raise ProbabilityError immediately.

    Attributes:
        cutoff: Largest discounted count
        unigram_probs: P(v) for every predictable token and the unknown token
        bigram_probs: P(v|u) keyed by (u, v) for observed pairs
        backoffs: Backoff weight per 1-tuple context
    """

    name = "katz-bigram-pp"
    order = 2

    def __init__(self, sentences, cutoff: int = 5, **kwargs):
        if cutoff < 1:
            raise ConfigurationError(f"cutoff must be at least 1, got {cutoff}")
        self.cutoff = cutoff
        self.word_counts = FrequencyDistribution()
        self.bigram_counts = ConditionalFrequencyDistribution()
        self.unigram_probs: Dict[str, float] = {}
        self.bigram_probs: Dict[Tuple[str, str], float] = {}
        self.backoffs: Dict[Tuple[str], float] = {}
        self.unigram_mass = 0.0
        self.unseen_context_backoff = 1.0
        super().__init__(sentences, **kwargs)

    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        self.word_counts.increment(word)
        self.bigram_counts.increment(context, word)

    def _freeze(self) -> None:
        total = self.word_counts.total_weight()
        if total == 0:
            raise ValueError("Cannot estimate Good-Turing counts from an empty corpus")

        # Unigrams
        buckets = frequency_of_frequencies(
            (count for _, count in self.word_counts.items()), self.cutoff)
        correction = correction_factor(buckets, self.cutoff)
        for word, count in self.word_counts.items():
            probability = good_turing_probability(count, total, buckets, self.cutoff, correction)
            self.unigram_probs[word] = verify_probability(probability, (word,))
        self.unigram_probs[UNK_TOKEN] = verify_probability(buckets[1] / total, (UNK_TOKEN,))
        self.unigram_mass = sum(self.unigram_probs.values())

        # Bigrams
        buckets = frequency_of_frequencies(
            (count for _, successors in self.bigram_counts.items()
             for _, count in successors.items()), self.cutoff)
        correction = correction_factor(buckets, self.cutoff)
        for context, successors in self.bigram_counts.items():
            context_count = successors.total_weight()
            seen = 0.0
            seen_unigram = 0.0
            for word, count in successors.items():
                probability = good_turing_probability(
                    count, context_count, buckets, self.cutoff, correction)
                self.bigram_probs[context + (word,)] = verify_probability(
                    probability, context + (word,))
                seen += probability
                seen_unigram += self.unigram_probs[word]
            self.backoffs[context] = self._backoff_weight(seen, seen_unigram, context)

        self.unseen_context_backoff = self._backoff_weight(0.0, 0.0)

    def _backoff_weight(self, seen: float, seen_unigram: float, context: Tuple = ()) -> float:
        denominator = self.unigram_mass - seen_unigram
        if denominator <= 0:
            return 1.0
        # Clamp rounding error when the successors already hold all the mass
        leftover = max(0.0, 1.0 - seen)
        return verify_probability(leftover / denominator, context)

    def _stats(self) -> Dict:
        return {
            'vocab_size': len(self.unigram_probs),
            'bigram_contexts': len(self.bigram_counts),
            'cutoff': self.cutoff
        }

    def vocabulary(self) -> List[str]:
        """Tokens the model can predict, unknown token included."""
        return list(self.unigram_probs)

    def bigram_probability(self, previous_word: str, word: str) -> float:
        probability = self.bigram_probs.get((previous_word, word))
        if probability is not None:
            return probability

        unigram = self.unigram_probs.get(word)
        if unigram is None:
            logger.debug("Unknown word: %s", word)
            unigram = self.unigram_probs[UNK_TOKEN]

        backoff = self.backoffs.get((previous_word,), self.unseen_context_backoff)
        return unigram * backoff

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.bigram_probability(context[-1], word)

    def _build_sampler(self, context: Tuple[str, ...]) -> CumulativeSampler:
        previous_word = context[-1]
        return CumulativeSampler(
            (word, self.bigram_probability(previous_word, word)) for word in self.unigram_probs
        )
