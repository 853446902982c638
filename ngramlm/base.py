"""
Language Model Contract

Every model, native or loaded from disk, assigns probabilities to sentences
and can generate sentences. Count-based estimators share a single streaming
training pass defined here.
"""

import logging
import math
import random
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .corpus import START_TOKEN, END_TOKEN, UNK_TOKEN, add_sentence_markers
from .counter import CumulativeSampler
from .errors import Diagnostic


logger = logging.getLogger(__name__)


class LanguageModel(ABC):
    """
    Base class for language models.

    Subclasses define ``order`` (the n in n-gram), ``word_probability`` and
    ``_build_sampler``. Everything else is derived from those.

    Attributes:
        diagnostics: Non-fatal numerical defects found while scoring
        training_stats: Summary of the data the model was built from
    """

    name = "language-model"
    order = 1
    start_token = START_TOKEN
    end_token = END_TOKEN
    unknown_token = UNK_TOKEN

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)
        self.diagnostics: List[Diagnostic] = []
        self.training_stats: Dict = {}
        self._samplers: Dict[Tuple, CumulativeSampler] = {}

    def bracket(self, sentence: Sequence[str]) -> List[str]:
        """Return a copy of ``sentence`` with start and stop markers added."""
        return add_sentence_markers(sentence, self.order,
                                    start=self.start_token, end=self.end_token)

    @abstractmethod
    def word_probability(self, word: str, context: Tuple[str, ...]) -> float:
        """Return P(word | context) where context holds order-1 tokens."""

    @abstractmethod
    def _build_sampler(self, context: Tuple[str, ...]) -> CumulativeSampler:
        """Materialize the next-token sampler for ``context``."""

    def token_probabilities(self, sentence: Sequence[str]) -> Iterator[float]:
        """Yield the probability of each token of the bracketed sentence."""
        marked = self.bracket(sentence)
        for i in range(self.order - 1, len(marked)):
            context = tuple(marked[i - self.order + 1:i])
            yield self.word_probability(marked[i], context)

    def sentence_probability(self, sentence: Sequence[str]) -> float:
        """
        Probability of a whole sentence, stop marker included.

        Long sentences may underflow to 0.0.
        """
        probability = 1.0
        for p in self.token_probabilities(sentence):
            probability *= p
        return probability

    def sentence_log_probability(self, sentence: Sequence[str]) -> float:
        """Natural log of the sentence probability, summed per token."""
        total = 0.0
        for p in self.token_probabilities(sentence):
            if p <= 0:
                return float('-inf')
            total += math.log(p)
        return total

    def sampler_for(self, context: Tuple[str, ...]) -> CumulativeSampler:
        sampler = self._samplers.get(context)
        if sampler is None:
            sampler = self._build_sampler(context)
            self._samplers[context] = sampler
        return sampler

    def generate_word(self, context: Tuple[str, ...],
                      rng: Optional[random.Random] = None) -> str:
        return self.sampler_for(context).sample(rng or self.rng)

    def generate_sentence(self, rng: Optional[random.Random] = None,
                          max_length: Optional[int] = None) -> List[str]:
        """
        Sample tokens until the stop marker is drawn.

        Args:
            rng: Random source (defaults to the model's seeded source)
            max_length: Optional cap on the number of generated tokens

        Returns:
            Generated tokens, without markers
        """
        context = (self.start_token,) * (self.order - 1)
        sentence = []

        while max_length is None or len(sentence) < max_length:
            word = self.generate_word(context, rng)
            if word == self.end_token:
                break
            sentence.append(word)
            if self.order > 1:
                context = context[1:] + (word,)

        return sentence

    def _report(self, message: str, value: Optional[float] = None,
                context: Tuple = ()) -> None:
        """Record a non-fatal numerical defect and keep going."""
        self.diagnostics.append(Diagnostic(self.name, message, value, tuple(context)))
        logger.warning("%s: %s (value=%s, context=%s)", self.name, message, value, context)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(order={self.order})"


class CountingLanguageModel(LanguageModel):
    """
    A language model estimated from counts in one pass over the corpus.

    Subclasses accumulate counts in ``_observe`` and freeze them into
    distributions or discount tables in ``_freeze``. A model is never
    trained twice.
    """

    def __init__(self, sentences: Iterable[Sequence[str]],
                 seed: Optional[int] = None,
                 progress_callback: Optional[Callable[[int], None]] = None):
        super().__init__(seed)
        self._train(sentences, progress_callback)

    @abstractmethod
    def _observe(self, context: Tuple[str, ...], word: str) -> None:
        """Count one occurrence of ``word`` after ``context``."""

    @abstractmethod
    def _freeze(self) -> None:
        """Turn the accumulated counts into read-only tables."""

    def _stats(self) -> Dict:
        return {}

    def _train(self, sentences: Iterable[Sequence[str]],
               progress_callback: Optional[Callable[[int], None]] = None) -> None:
        num_sentences = 0
        num_tokens = 0

        for sent in sentences:
            marked = self.bracket(sent)
            for i in range(self.order - 1, len(marked)):
                self._observe(tuple(marked[i - self.order + 1:i]), marked[i])
                num_tokens += 1
            num_sentences += 1

            if progress_callback and num_sentences % 1000 == 0:
                progress_callback(num_sentences)

        self._freeze()

        self.training_stats = {
            'model': self.name,
            'n': self.order,
            'num_sentences': num_sentences,
            'total_tokens': num_tokens,
            **self._stats()
        }
        logger.info("Trained %s model on %d sentences (%d tokens)",
                    self.name, num_sentences, num_tokens)

        if progress_callback:
            progress_callback(num_sentences)
