"""
SRI Language Model Adapter

Read-only trigram model loaded from an ARPA-style file produced by SRILM.
Each significant line holds a log10 probability, the n-gram and an optional
log10 backoff weight, separated by tabs. Header and section lines are
skipped.
"""

import logging
import math
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from .base import LanguageModel
from .counter import CumulativeSampler
from .errors import MissingModelFileError


logger = logging.getLogger(__name__)

# log10(x) * LOG10_TO_LN == ln(x)
LOG10_TO_LN = math.log(10.0)


class SriLanguageModel(LanguageModel):
    """
    Trigram lookup over pre-computed log probabilities.

    Falls back trigram -> bigram (plus the backoff of the trigram's
    bigram context) -> unigram (plus the backoff of the previous word).

    Attributes:
        probabilities: Natural-log probability keyed by n-gram tuple
        backoffs: Natural-log backoff weight keyed by n-gram tuple
    """

    name = "sri"
    order = 3
    start_token = "<s>"
    end_token = "</s>"
    unknown_token = "<unk>"

    def __init__(self, path: Optional[str], seed: Optional[int] = None):
        if path is None:
            raise MissingModelFileError("SRI data file required for the sri model")
        super().__init__(seed)

        self.path = Path(path)
        self.probabilities: Dict[Tuple[str, ...], float] = {}
        self.backoffs: Dict[Tuple[str, ...], float] = {}

        with open(self.path, encoding='utf-8') as f:
            self._load(f)

        self.training_stats = {
            'model': self.name,
            'n': self.order,
            'source': str(self.path),
            'ngrams': len(self.probabilities),
            'backoff_weights': len(self.backoffs),
            'vocab_size': sum(1 for ngram in self.probabilities if len(ngram) == 1)
        }
        logger.info("Loaded %d n-grams from %s", len(self.probabilities), self.path)

    def _load(self, lines: Iterable[str]) -> None:
        for line_number, line in enumerate(lines, start=1):
            line = line.rstrip('\r\n')
            if not line or line[0] not in '+-':
                continue

            parts = line.split('\t')
            if len(parts) not in (2, 3):
                self._report("Malformed n-gram line", context=(line_number, line))
                continue

            try:
                values = [float(parts[0])] + [float(part) for part in parts[2:]]
            except ValueError:
                self._report("Malformed n-gram line", context=(line_number, line))
                continue

            ngram = tuple(parts[1].split())
            self.probabilities[ngram] = values[0] * LOG10_TO_LN
            if len(values) == 2:
                self.backoffs[ngram] = values[1] * LOG10_TO_LN

    def trigram_probability(self, pre_previous_word: str, previous_word: str,
                            word: str) -> float:
        log_prob = self.probabilities.get((pre_previous_word, previous_word, word))
        if log_prob is not None:
            return math.exp(log_prob)

        log_prob = self.probabilities.get((previous_word, word))
        if log_prob is not None:
            backoff = self.backoffs.get((pre_previous_word, previous_word), 0.0)
            return math.exp(log_prob + backoff)

        log_prob = self.probabilities.get((word,))
        if log_prob is None:
            log_prob = self.probabilities.get((self.unknown_token,))
            if log_prob is None:
                self._report("No unigram entry and no unknown-word entry", 0.0, (word,))
                return 0.0
        return math.exp(log_prob + self.backoffs.get((previous_word,), 0.0))

    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        return self.trigram_probability(context[0], context[1], word)

    def sentence_probability(self, sentence) -> float:
        probability = super().sentence_probability(sentence)
        if probability == 0:
            self._report("Underflow", 0.0, tuple(sentence))
        return probability

    def sampler_for(self, context: Tuple[str, ...]) -> CumulativeSampler:
        return super().sampler_for(())

    def _build_sampler(self, context: Tuple[str, ...]) -> CumulativeSampler:
        unigrams = ((ngram[0], math.exp(log_prob))
                    for ngram, log_prob in self.probabilities.items()
                    if len(ngram) == 1 and ngram[0] != self.start_token)
        return CumulativeSampler(unigrams, fallback=self.unknown_token)
