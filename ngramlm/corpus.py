"""
Corpus Loading and Preprocessing

This module handles reading whitespace-tokenized sentence files, the
optional Brown corpus source, and the sentence markers shared by all
language models.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

import nltk
from nltk.corpus import brown


logger = logging.getLogger(__name__)

# Special tokens
START_TOKEN = "<S>"
END_TOKEN = "</S>"
UNK_TOKEN = "*UNKNOWN*"


def ensure_nltk_data():
    """Download the Brown corpus if it is not present."""
    try:
        nltk.data.find('corpora/brown')
    except LookupError:
        logger.info("Downloading Brown corpus...")
        nltk.download('brown', quiet=True)


def preprocess_text(text: str, lowercase: bool = True) -> List[str]:
    """Split a raw line on whitespace, lower-casing it first by default."""
    return (text.lower() if lowercase else text).split()


def add_sentence_markers(tokens: Iterable[str], n: int,
                         start: str = START_TOKEN, end: str = END_TOKEN) -> List[str]:
    """
    Add start and end markers to a sentence.

    The input is never modified; a new list is returned.

    Args:
        tokens: Tokens of the sentence
        n: The n in n-gram (determines number of start markers)
        start: Start marker
        end: End marker

    Returns:
        Tokens with (n-1) start markers and one end marker
    """
    return [start] * (n - 1) + list(tokens) + [end]


class SentenceCollection:
    """
    Re-iterable view of a sentence file, one sentence per line.

    Lines are read lazily on every iteration and lower-cased. Blank lines
    are skipped.
    """

    def __init__(self, path: str, lowercase: bool = True):
        self.path = Path(path)
        self.lowercase = lowercase

    def __iter__(self) -> Iterator[List[str]]:
        with open(self.path, encoding='utf-8') as f:
            for line in f:
                tokens = preprocess_text(line, lowercase=self.lowercase)
                if tokens:
                    yield tokens

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"SentenceCollection({str(self.path)!r})"


def load_brown_corpus(categories: Optional[List[str]] = None,
                      lowercase: bool = True,
                      min_sentence_length: int = 1) -> Tuple[List[List[str]], dict]:
    """
    Training sentences from the NLTK Brown corpus.

    Args:
        categories: Brown categories to read, all of them when empty
        lowercase: Whether to lowercase the tokens
        min_sentence_length: Shorter sentences are dropped

    Returns:
        (sentences, stats) where stats counts sentences and tokens and
        names the categories read
    """
    ensure_nltk_data()

    categories = categories or None
    sentences = [
        [w.lower() for w in sent] if lowercase else list(sent)
        for sent in brown.sents(categories=categories)
        if len(sent) >= min_sentence_length
    ]
    logger.info("Loaded %d sentences from the Brown corpus", len(sentences))

    return sentences, {
        'num_sentences': len(sentences),
        'total_tokens': sum(len(sent) for sent in sentences),
        'categories': categories or brown.categories()
    }
