"""
Evaluation Harness

Perplexity of a language model, N-best rescoring with acoustic scores, and
word error rates measured by edit distance against the gold sentences.
"""

import logging
import math
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple

from .base import LanguageModel
from .nbest import Sentence, SpeechNBestList


logger = logging.getLogger(__name__)

# Acoustic scores are divided by this before being added to the LM score
ACOUSTIC_SCALE = 16.0

INSERT_COST = 1
DELETE_COST = 1
SUBSTITUTE_COST = 1

# Frames reserved for callers of edit_distance
RECURSION_HEADROOM = 1000


def edit_distance(first: Sequence, second: Sequence) -> int:
    """
    Levenshtein distance between two token sequences.

    Memoized recursion over the (position in first, position in second)
    table; matching tokens move diagonally for free.
    """
    first = list(first)
    second = list(second)
    n, m = len(first), len(second)
    best_distances = [[None] * (m + 1) for _ in range(n + 1)]

    def distance(i: int, j: int) -> int:
        if i == n and j == m:
            return 0
        cached = best_distances[i][j]
        if cached is not None:
            return cached

        options = []
        if i < n:
            options.append(INSERT_COST + distance(i + 1, j))
        if j < m:
            options.append(DELETE_COST + distance(i, j + 1))
        if i < n and j < m:
            cost = 0 if first[i] == second[j] else SUBSTITUTE_COST
            options.append(cost + distance(i + 1, j + 1))

        best_distances[i][j] = min(options)
        return best_distances[i][j]

    # Each call advances at least one position
    previous_limit = sys.getrecursionlimit()
    depth = n + m + RECURSION_HEADROOM
    if depth > previous_limit:
        sys.setrecursionlimit(depth)
    try:
        return distance(0, 0)
    finally:
        sys.setrecursionlimit(previous_limit)


def perplexity(model: LanguageModel, sentences: Iterable[Sequence[str]]) -> float:
    """
    Calculate perplexity on a collection of sentences.

    Perplexity = 2^(-1/N * sum(log2 P(sentence))) where N counts every
    token plus one stop marker per sentence. A sentence with probability
    zero makes the result infinite.
    """
    log_probability = 0.0
    num_symbols = 0

    for sentence in sentences:
        log_probability += model.sentence_log_probability(sentence) / math.log(2.0)
        num_symbols += len(sentence) + 1

    if num_symbols == 0:
        raise ValueError("Perplexity needs at least one sentence")

    avg_log_probability = log_probability / num_symbols
    try:
        return 2.0 ** (-avg_log_probability)
    except OverflowError:
        return float('inf')


def hypothesis_scores(model: LanguageModel, nbest_list: SpeechNBestList,
                      sentence: Sequence[str],
                      acoustic_scale: float = ACOUSTIC_SCALE) -> Tuple[float, float]:
    """
    Return (scaled acoustic score, language score) of a sentence.

    Sentences outside the list (such as an unlisted gold sentence) get an
    acoustic score of 0.
    """
    acoustic = nbest_list.get_acoustic_score(sentence)
    acoustic = 0.0 if acoustic is None else acoustic / acoustic_scale
    return acoustic, model.sentence_log_probability(sentence)


@dataclass
class RescoringResult:
    """Outcome of rescoring one N-best list."""
    nbest_list: SpeechNBestList
    best_guess: Sentence
    best_score: float
    distance: float
    num_tied: int

    @property
    def num_words(self) -> int:
        return len(self.nbest_list.correct_sentence)


def rescore(model: LanguageModel, nbest_list: SpeechNBestList,
            acoustic_scale: float = ACOUSTIC_SCALE) -> RescoringResult:
    """
    Pick the candidate with the highest combined score.

    score = log P_lm(candidate) + acoustic(candidate) / acoustic_scale

    Candidates tied on the best score share the result: the reported
    distance is the mean of their edit distances to the gold sentence.
    """
    correct = nbest_list.correct_sentence
    scored = []
    for guess in nbest_list.nbest_sentences:
        acoustic, language = hypothesis_scores(model, nbest_list, guess, acoustic_scale)
        scored.append((acoustic + language, guess))

    best_score = max(score for score, _ in scored)
    tied = [guess for score, guess in scored if score == best_score]
    distance = sum(edit_distance(correct, guess) for guess in tied) / len(tied)

    return RescoringResult(
        nbest_list=nbest_list,
        best_guess=tied[0],
        best_score=best_score,
        distance=distance,
        num_tied=len(tied)
    )


def rescore_all(model: LanguageModel, nbest_lists: Iterable[SpeechNBestList],
                acoustic_scale: float = ACOUSTIC_SCALE) -> List[RescoringResult]:
    return [rescore(model, nbest_list, acoustic_scale) for nbest_list in nbest_lists]


def aggregate_error_rate(distances: Iterable[float], nbest_lists: Iterable[SpeechNBestList]) -> float:
    """Total edit distance over total gold tokens."""
    total_distance = sum(distances)
    total_words = sum(len(nbest_list.correct_sentence) for nbest_list in nbest_lists)
    if total_words == 0:
        raise ValueError("Word error rate needs at least one gold token")
    return total_distance / total_words


def word_error_rate(model: LanguageModel, nbest_lists: Sequence[SpeechNBestList],
                    acoustic_scale: float = ACOUSTIC_SCALE) -> float:
    """WER of the hypotheses selected by rescoring with ``model``."""
    results = rescore_all(model, nbest_lists, acoustic_scale)
    return aggregate_error_rate((r.distance for r in results), nbest_lists)


def _baseline(nbest_lists: Sequence[SpeechNBestList],
              choose: Callable[[List[int]], float]) -> float:
    distances = []
    for nbest_list in nbest_lists:
        candidate_distances = [edit_distance(nbest_list.correct_sentence, guess)
                               for guess in nbest_list.nbest_sentences]
        distances.append(choose(candidate_distances))
    return aggregate_error_rate(distances, nbest_lists)


def word_error_rate_lower_bound(nbest_lists: Sequence[SpeechNBestList]) -> float:
    """Best-path WER: always pick the closest candidate."""
    return _baseline(nbest_lists, min)


def word_error_rate_upper_bound(nbest_lists: Sequence[SpeechNBestList]) -> float:
    """Worst-path WER: always pick the farthest candidate."""
    return _baseline(nbest_lists, max)


def word_error_rate_random_choice(nbest_lists: Sequence[SpeechNBestList]) -> float:
    """Expected WER of picking a candidate uniformly at random."""
    return _baseline(nbest_lists, lambda distances: sum(distances) / len(distances))


def extract_correct_sentences(nbest_lists: Iterable[SpeechNBestList]) -> List[Sentence]:
    return [nbest_list.correct_sentence for nbest_list in nbest_lists]
