"""
Speech N-best Lists

An N-best list pairs the gold transcription of one utterance with the
distinct hypotheses of a recognizer and their acoustic scores.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .corpus import preprocess_text


logger = logging.getLogger(__name__)

Sentence = Tuple[str, ...]


@dataclass(frozen=True)
class SpeechNBestList:
    """
    Gold sentence plus scored candidate sentences for one utterance.

    Attributes:
        correct_sentence: Gold reference tokens
        nbest_sentences: Distinct candidates in input order
        acoustic_scores: Log-domain acoustic score of each candidate
        utterance_id: Name of the utterance (file stem when read from disk)
    """
    correct_sentence: Sentence
    nbest_sentences: Tuple[Sentence, ...]
    acoustic_scores: Mapping[Sentence, float] = field(repr=False)
    utterance_id: str = ""

    def __post_init__(self):
        if not self.nbest_sentences:
            raise ValueError(f"N-best list {self.utterance_id!r} has no hypotheses")

    @classmethod
    def from_hypotheses(cls, correct_sentence: Sequence[str],
                        hypotheses: Iterable[Tuple[Sequence[str], float]],
                        utterance_id: str = "") -> 'SpeechNBestList':
        """
        Build a list from (sentence, acoustic score) pairs.

        Repeated sentences keep the score of their first occurrence.
        """
        scores = {}
        for sentence, score in hypotheses:
            key = tuple(sentence)
            if key not in scores:
                scores[key] = float(score)

        return cls(
            correct_sentence=tuple(correct_sentence),
            nbest_sentences=tuple(scores),
            acoustic_scores=MappingProxyType(scores),
            utterance_id=utterance_id
        )

    def get_acoustic_score(self, sentence: Sequence[str]) -> Optional[float]:
        """Acoustic score of a candidate, or None for other sentences."""
        return self.acoustic_scores.get(tuple(sentence))

    def __len__(self) -> int:
        return len(self.nbest_sentences)


def read_nbest_file(path: str) -> Optional[SpeechNBestList]:
    """
    Read one utterance file.

    The first significant line is the gold sentence; the others are
    ``<acoustic score>\\t<tokens>``. Blank lines and ``#`` comments are
    skipped. Returns None for a file without hypotheses.
    """
    path = Path(path)
    correct = None
    hypotheses = []

    with open(path, encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            if correct is None:
                correct = preprocess_text(line)
                continue

            score, sep, text = line.partition('\t')
            if not sep:
                raise ValueError(f"{path}:{line_number}: expected '<score>\\t<sentence>'")
            hypotheses.append((preprocess_text(text), float(score)))

    if not hypotheses:
        logger.warning("Skipping %s: no hypotheses", path)
        return None

    return SpeechNBestList.from_hypotheses(correct, hypotheses, utterance_id=path.stem)


def read_nbest_lists(directory: str) -> List[SpeechNBestList]:
    """Read every utterance file of ``directory`` in file-name order."""
    nbest_lists = []
    for path in sorted(p for p in Path(directory).iterdir() if p.is_file()):
        nbest_list = read_nbest_file(path)
        if nbest_list is not None:
            nbest_lists.append(nbest_list)

    logger.info("Read %d N-best lists from %s", len(nbest_lists), directory)
    return nbest_lists
