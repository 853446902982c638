"""
N-gram Language Model Package

Count-based n-gram language models (interpolated and Katz backoff), an
adapter for pre-trained ARPA models, and an evaluation harness that
rescores speech N-best lists and measures word error rates.
"""

from .backoff import KatzBigramLanguageModel, KatzGoodTuringBigramLanguageModel
from .base import LanguageModel
from .corpus import SentenceCollection, load_brown_corpus, preprocess_text
from .errors import ConfigurationError, Diagnostic, ProbabilityError
from .evaluation import edit_distance, perplexity, rescore, word_error_rate
from .factory import ModelKind, get_model
from .model import BigramLanguageModel, TrigramLanguageModel, UnigramLanguageModel
from .nbest import SpeechNBestList, read_nbest_lists
from .sri import SriLanguageModel

__version__ = "0.1.0"
__all__ = [
    "LanguageModel", "UnigramLanguageModel", "BigramLanguageModel", "TrigramLanguageModel",
    "KatzBigramLanguageModel", "KatzGoodTuringBigramLanguageModel", "SriLanguageModel",
    "ModelKind", "get_model", "SentenceCollection", "load_brown_corpus", "preprocess_text",
    "SpeechNBestList", "read_nbest_lists", "edit_distance", "perplexity", "rescore",
    "word_error_rate", "ConfigurationError", "ProbabilityError", "Diagnostic",
]
